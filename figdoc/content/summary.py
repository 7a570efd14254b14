"""Bounded textual summary of an extracted component for LLM prompts.

The extractor keeps the full tree; this module decides how much of it the
model sees. The element walk is capped by count and depth, and the element
names are bucketed by keyword so the model gets explicit hints about texts,
images, links and repeatable groups.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..design.models import ExtractedComponent, ExtractedElement
from ..settings import PROMPT_MAX_DEPTH, PROMPT_MAX_ELEMENTS

# Bucket keyword table: substring match on the lowercase layer name
IMAGE_KEYWORDS = ("image", "img", "photo", "banner")
IMAGE_TYPES = ("RECTANGLE", "IMAGE")
LOGO_KEYWORDS = ("logo",)
ICON_KEYWORDS = ("icon", "ico")
LINK_KEYWORDS = ("link", "button", "cta", "nav")
GROUP_KEYWORDS = ("item", "card", "column", "row", "list")

# Per-bucket caps (None = uncapped)
MAX_TEXTS = 20
MAX_TEXT_LENGTH = 100
MAX_IMAGES = 15
MAX_LINKS = 15
MAX_GROUPS = 10
MAX_SAMPLE_CHILDREN = 5

# Structural hierarchy rendering bounds
HIERARCHY_TOP_LEVEL = 15
HIERARCHY_MAX_DEPTH = 3
HIERARCHY_MAX_CHILDREN = 10
HIERARCHY_TEXT_LENGTH = 30


@dataclass
class TextEntry:
    name: str
    text: str
    parent: str


@dataclass
class ImageEntry:
    name: str
    dimensions: Optional[str]
    parent: str


@dataclass
class NamedEntry:
    name: str
    parent: str


@dataclass
class LinkEntry:
    name: str
    children: List[str]
    parent: str


@dataclass
class GroupEntry:
    name: str
    child_count: int
    children: List[str]


@dataclass
class ComponentSummary:
    elements_analyzed: int = 0
    max_depth_reached: int = 0
    element_types: Dict[str, int] = field(default_factory=Counter)
    texts: List[TextEntry] = field(default_factory=list)
    images: List[ImageEntry] = field(default_factory=list)
    logos: List[NamedEntry] = field(default_factory=list)
    icons: List[NamedEntry] = field(default_factory=list)
    links: List[LinkEntry] = field(default_factory=list)
    groups: List[GroupEntry] = field(default_factory=list)


def _contains_any(name: str, keywords: Tuple[str, ...]) -> bool:
    return any(k in name for k in keywords)


def _child_names(el: ExtractedElement) -> List[str]:
    return [c.name for c in (el.children or ())[:MAX_SAMPLE_CHILDREN]]


def _classify(el: ExtractedElement, parent: str, summary: ComponentSummary) -> None:
    name = el.name.lower()

    if el.text and len(summary.texts) < MAX_TEXTS:
        summary.texts.append(TextEntry(el.name, el.text[:MAX_TEXT_LENGTH], parent))

    if el.type in IMAGE_TYPES or _contains_any(name, IMAGE_KEYWORDS):
        if len(summary.images) < MAX_IMAGES:
            dims = None
            if el.dimensions is not None:
                dims = f"{el.dimensions.width}x{el.dimensions.height}"
            summary.images.append(ImageEntry(el.name, dims, parent))

    if _contains_any(name, LOGO_KEYWORDS):
        summary.logos.append(NamedEntry(el.name, parent))

    if _contains_any(name, ICON_KEYWORDS):
        summary.icons.append(NamedEntry(el.name, parent))

    if _contains_any(name, LINK_KEYWORDS) and len(summary.links) < MAX_LINKS:
        summary.links.append(LinkEntry(el.name, _child_names(el), parent))

    if _contains_any(name, GROUP_KEYWORDS) and el.children:
        if len(summary.groups) < MAX_GROUPS:
            summary.groups.append(GroupEntry(el.name, len(el.children), _child_names(el)))


def summarize_component(
    component: ExtractedComponent,
    max_elements: int = PROMPT_MAX_ELEMENTS,
    max_depth: int = PROMPT_MAX_DEPTH,
) -> ComponentSummary:
    """Walk the component depth-first and bucket its elements.

    Top-level children sit at depth 0. Subtrees below ``max_depth`` are not
    entered. Once ``max_elements`` elements have been counted the walk ends,
    including any siblings not yet visited.
    """
    summary = ComponentSummary()
    # (element, depth, parent name); reversed so pop() keeps document order
    stack = [(child, 0, "root") for child in reversed(component.children)]
    while stack and summary.elements_analyzed < max_elements:
        el, depth, parent = stack.pop()
        summary.elements_analyzed += 1
        summary.max_depth_reached = max(summary.max_depth_reached, depth)
        summary.element_types[el.type] += 1
        _classify(el, parent, summary)
        if el.children and depth < max_depth:
            stack.extend((c, depth + 1, el.name) for c in reversed(el.children))
    return summary


def render_summary(summary: ComponentSummary) -> List[str]:
    lines = ["=== ELEMENT ANALYSIS ==="]
    lines.append(f"Total elements analyzed: {summary.elements_analyzed}")
    types = ", ".join(f"{t}({c})" for t, c in summary.element_types.items())
    lines.append(f"Element types: {types}")

    if summary.texts:
        lines += ["", "=== TEXT CONTENT (with context) ==="]
        lines += [f'- "{t.text}" [{t.name}] in {t.parent}' for t in summary.texts]

    if summary.logos:
        lines += ["", "=== LOGO ELEMENTS ==="]
        lines += [f"- {l.name} in {l.parent}" for l in summary.logos]

    if summary.images:
        lines += ["", "=== IMAGE ELEMENTS ==="]
        for i in summary.images:
            dims = f" ({i.dimensions})" if i.dimensions else ""
            lines.append(f"- {i.name}{dims} in {i.parent}")

    if summary.icons:
        lines += ["", "=== ICON ELEMENTS ==="]
        lines += [f"- {i.name} in {i.parent}" for i in summary.icons]

    if summary.links:
        lines += ["", "=== LINK/NAVIGATION ELEMENTS (with children) ==="]
        for link in summary.links:
            lines.append(f"- {link.name} in {link.parent}")
            if link.children:
                lines.append(f"  Children: {', '.join(link.children)}")

    if summary.groups:
        lines += ["", "=== REPEATABLE GROUPS/LISTS ==="]
        for g in summary.groups:
            lines.append(f"- {g.name} ({g.child_count} items)")
            lines.append(f"  Sample children: {', '.join(g.children)}")

    return lines


def _render_node(el: ExtractedElement, depth: int, lines: List[str]) -> None:
    prefix = "  " * depth
    line = f"{prefix}- {el.name} ({el.type})"
    if el.dimensions is not None:
        line += f" [{el.dimensions.width}x{el.dimensions.height}]"
    if el.text:
        line += f' text: "{el.text[:HIERARCHY_TEXT_LENGTH]}..."'
    lines.append(line)

    if el.children and depth < HIERARCHY_MAX_DEPTH:
        for child in el.children[:HIERARCHY_MAX_CHILDREN]:
            _render_node(child, depth + 1, lines)
        if len(el.children) > HIERARCHY_MAX_CHILDREN:
            lines.append(f"{prefix}  ... and {len(el.children) - HIERARCHY_MAX_CHILDREN} more")


def render_hierarchy(component: ExtractedComponent) -> List[str]:
    """Indented outline of the component's top levels."""
    lines = ["=== FULL COMPONENT HIERARCHY ==="]
    for child in component.children[:HIERARCHY_TOP_LEVEL]:
        _render_node(child, 0, lines)
    extra = len(component.children) - HIERARCHY_TOP_LEVEL
    if extra > 0:
        lines.append(f"... and {extra} more top-level elements")
    return lines


def format_component(component: ExtractedComponent) -> str:
    """Full component description embedded in the analysis prompt."""
    lines = [
        f"Component: {component.name}",
        f"Type: {component.type}",
        f"Dimensions: {component.dimensions.width}x{component.dimensions.height}px",
        "",
    ]
    lines += render_summary(summarize_component(component))
    lines.append("")
    lines += render_hierarchy(component)
    return "\n".join(lines)
