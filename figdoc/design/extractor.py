"""Component extraction from a Figma node tree.

Locates the node for a named component and projects it (and every
descendant, at full depth) into immutable ``ExtractedElement`` records.
Bounding the data handed to the LLM is the prompt builder's job.
"""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional, Tuple

from .models import (
    RENDERABLE_TYPES,
    DesignNode,
    Dimensions,
    ExtractedComponent,
    ExtractedElement,
    FontInfo,
    Paint,
)

logger = logging.getLogger("figdoc.design.extractor")


# ---------------------------------------------------------------------------
# Colors
# ---------------------------------------------------------------------------


def figma_color_to_hex(color: Dict) -> str:
    """Convert Figma RGBA float dict {r,g,b,a} to hex string."""
    r = _channel(color.get("r", 0))
    g = _channel(color.get("g", 0))
    b = _channel(color.get("b", 0))
    a = color.get("a", 1.0)
    hex_rgb = f"#{r:02X}{g:02X}{b:02X}"
    if isinstance(a, (int, float)) and a < 1.0:
        hex_rgb += f"{_channel(a):02X}"
    return hex_rgb


def _channel(value) -> int:
    if not isinstance(value, (int, float)):
        return 0
    return max(0, min(255, round(value * 255)))


def extract_colors(node: DesignNode) -> List[str]:
    """Hex colors of SOLID fills then SOLID strokes, deduplicated in order."""
    colors: List[str] = []
    paints: Iterable[Paint] = [*node.fills, *node.strokes]
    for paint in paints:
        if paint.type != "SOLID" or paint.color is None:
            continue
        hex_color = figma_color_to_hex(paint.color)
        if hex_color not in colors:
            colors.append(hex_color)
    return colors


# ---------------------------------------------------------------------------
# Node lookup
# ---------------------------------------------------------------------------


def _name_matches(node_name: str, target: str) -> bool:
    return (
        node_name == target
        or node_name.startswith(target + " ")
        or node_name.startswith(target + "/")
    )


def find_component_by_name(node: DesignNode, component_name: str) -> Optional[DesignNode]:
    """Depth-first search for the first renderable node named like the component.

    "Footer" matches "footer", "Footer Desktop" and "Footer/Dark", but not
    "Footers".
    """
    target = component_name.lower().strip()
    stack = [node]
    while stack:
        current = stack.pop()
        if (
            current.type in RENDERABLE_TYPES
            and _name_matches(current.name.lower().strip(), target)
        ):
            return current
        # Reverse so children are visited in document order
        stack.extend(reversed(current.children))
    return None


def find_best_node_for_screenshot(
    document: DesignNode,
    component_name: str,
    original_node_id: Optional[str] = None,
) -> Optional[str]:
    """Pick the node id to render as the desktop screenshot."""
    exact = find_component_by_name(document, component_name)
    if exact is not None and exact.id:
        return exact.id

    target = component_name.lower()
    if target in document.name.lower():
        if document.type == "COMPONENT_SET" and document.children:
            for child in document.children:
                child_name = child.name.lower()
                if child_name == target or "default" in child_name or "desktop" in child_name:
                    return child.id
            return document.children[0].id
        return document.id

    return original_node_id or document.id or None


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------


def extract_element(node: DesignNode) -> ExtractedElement:
    """Project ``node`` and its whole subtree, without recursing."""
    order: List[DesignNode] = []
    stack = [node]
    while stack:
        current = stack.pop()
        order.append(current)
        stack.extend(current.children)

    # Pre-order reversed: every child is built before its parent
    built: Dict[int, ExtractedElement] = {}
    for current in reversed(order):
        children: Optional[Tuple[ExtractedElement, ...]] = None
        if current.children:
            children = tuple(built[id(c)] for c in current.children)
        built[id(current)] = _project(current, children)
    return built[id(node)]


def _project(
    node: DesignNode, children: Optional[Tuple[ExtractedElement, ...]]
) -> ExtractedElement:
    dimensions = None
    if node.bounding_box is not None:
        dimensions = Dimensions(
            width=round(node.bounding_box.width),
            height=round(node.bounding_box.height),
        )

    font_info = None
    if node.style is not None:
        font_info = FontInfo(
            family=node.style.family or "Unknown",
            size=node.style.size or 0,
            weight=node.style.weight or 400,
        )

    colors = extract_colors(node)
    return ExtractedElement(
        name=node.name,
        type=node.type,
        dimensions=dimensions,
        text=node.characters or None,
        font_info=font_info,
        colors=tuple(colors) if colors else None,
        children=children,
    )


def extract_component(root: DesignNode, component_name: str) -> ExtractedComponent:
    """Project the named component (or ``root`` when not found)."""
    match = find_component_by_name(root, component_name) if component_name else None
    target = match or root
    if match is None:
        logger.info(
            "extract_component: no node named %r, using root %r (%s)",
            component_name, root.name, root.type,
        )

    bbox = target.bounding_box
    return ExtractedComponent(
        name=component_name or target.name,
        type=target.type,
        dimensions=Dimensions(
            width=round(bbox.width) if bbox else 0,
            height=round(bbox.height) if bbox else 0,
        ),
        children=tuple(extract_element(c) for c in target.children),
        node_id=target.id or None,
    )


def flatten_elements(elements: Iterable[ExtractedElement]) -> List[ExtractedElement]:
    """Pre-order flat list of the given elements and all their descendants."""
    flat: List[ExtractedElement] = []
    stack = list(reversed(list(elements)))
    while stack:
        element = stack.pop()
        flat.append(element)
        if element.children:
            stack.extend(reversed(element.children))
    return flat
