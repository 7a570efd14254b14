"""Typed views over Figma node trees and their extracted projections.

Figma API payloads are loosely shaped. ``DesignNode.from_dict`` is the single
place where missing or malformed keys are defaulted; everything downstream
works against fully-defined dataclasses.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple


# Node types that can be rendered as a stand-alone component
RENDERABLE_TYPES = frozenset({"FRAME", "COMPONENT", "INSTANCE", "GROUP", "COMPONENT_SET"})


@dataclass(frozen=True)
class BoundingBox:
    x: float = 0.0
    y: float = 0.0
    width: float = 0.0
    height: float = 0.0


@dataclass(frozen=True)
class Paint:
    """A fill or stroke entry. ``color`` is an RGBA float dict when present."""

    type: str
    color: Optional[Dict[str, float]] = None


@dataclass(frozen=True)
class FontStyle:
    family: Optional[str] = None
    size: Optional[float] = None
    weight: Optional[float] = None


@dataclass
class DesignNode:
    id: str
    name: str
    type: str
    bounding_box: Optional[BoundingBox] = None
    fills: List[Paint] = field(default_factory=list)
    strokes: List[Paint] = field(default_factory=list)
    characters: Optional[str] = None
    style: Optional[FontStyle] = None
    children: List["DesignNode"] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DesignNode":
        """Build a node tree from a Figma API ``document`` dict.

        Walks with an explicit stack; source trees can nest far deeper than
        the interpreter's recursion limit.
        """
        root = cls._from_fields(data)
        stack = [(data, root)]
        while stack:
            raw, node = stack.pop()
            children = raw.get("children")
            if not isinstance(children, list):
                continue
            for child in children:
                if isinstance(child, dict):
                    child_node = cls._from_fields(child)
                    node.children.append(child_node)
                    stack.append((child, child_node))
        return root

    @classmethod
    def _from_fields(cls, data: Dict[str, Any]) -> "DesignNode":
        """One node without its children."""
        bbox = data.get("absoluteBoundingBox")
        bounding_box = None
        if isinstance(bbox, dict):
            bounding_box = BoundingBox(
                x=_num(bbox.get("x")),
                y=_num(bbox.get("y")),
                width=_num(bbox.get("width")),
                height=_num(bbox.get("height")),
            )

        style = data.get("style")
        font_style = None
        if isinstance(style, dict):
            font_style = FontStyle(
                family=style.get("fontFamily"),
                size=style.get("fontSize"),
                weight=style.get("fontWeight"),
            )

        characters = data.get("characters")

        return cls(
            id=str(data.get("id", "")),
            name=str(data.get("name", "")),
            type=str(data.get("type", "")),
            bounding_box=bounding_box,
            fills=_paints(data.get("fills")),
            strokes=_paints(data.get("strokes")),
            characters=characters if isinstance(characters, str) else None,
            style=font_style,
        )


def _num(value: Any) -> float:
    return float(value) if isinstance(value, (int, float)) else 0.0


def _paints(raw: Any) -> List[Paint]:
    if not isinstance(raw, list):
        return []
    paints = []
    for entry in raw:
        if not isinstance(entry, dict):
            continue
        color = entry.get("color")
        paints.append(Paint(
            type=str(entry.get("type", "")),
            color=color if isinstance(color, dict) else None,
        ))
    return paints


# ---------------------------------------------------------------------------
# Extracted projections
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Dimensions:
    width: int
    height: int


@dataclass(frozen=True)
class FontInfo:
    family: str
    size: float
    weight: float


@dataclass(frozen=True)
class ExtractedElement:
    """Projection of a design node.

    Optional fields are ``None`` when the source node lacks the data. A node
    without children has ``children is None``, never an empty tuple.
    """

    name: str
    type: str
    dimensions: Optional[Dimensions] = None
    text: Optional[str] = None
    font_info: Optional[FontInfo] = None
    colors: Optional[Tuple[str, ...]] = None
    children: Optional[Tuple["ExtractedElement", ...]] = None

    def to_dict(self) -> Dict[str, Any]:
        root = self._fields_dict()
        stack = [(self, root)]
        while stack:
            element, result = stack.pop()
            if element.children is None:
                continue
            result["children"] = []
            for child in element.children:
                child_dict = child._fields_dict()
                result["children"].append(child_dict)
                stack.append((child, child_dict))
        return root

    def _fields_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"name": self.name, "type": self.type}
        if self.dimensions is not None:
            result["dimensions"] = {
                "width": self.dimensions.width,
                "height": self.dimensions.height,
            }
        if self.text is not None:
            result["text"] = self.text
        if self.font_info is not None:
            result["fontInfo"] = {
                "family": self.font_info.family,
                "size": self.font_info.size,
                "weight": self.font_info.weight,
            }
        if self.colors is not None:
            result["colors"] = list(self.colors)
        return result


@dataclass(frozen=True)
class ExtractedComponent:
    name: str
    type: str
    dimensions: Dimensions
    children: Tuple[ExtractedElement, ...] = ()
    node_id: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {
            "name": self.name,
            "type": self.type,
            "dimensions": {
                "width": self.dimensions.width,
                "height": self.dimensions.height,
            },
            "children": [c.to_dict() for c in self.children],
        }
        if self.node_id:
            result["nodeId"] = self.node_id
        return result


@dataclass
class ResponsiveVariants:
    """Node ids per breakpoint. Empty slots mean no variant was found."""

    desktop: Optional[str] = None
    tablet: Optional[str] = None
    mobile: Optional[str] = None

    def filled(self) -> Dict[str, str]:
        return {
            name: node_id
            for name, node_id in (
                ("desktop", self.desktop),
                ("tablet", self.tablet),
                ("mobile", self.mobile),
            )
            if node_id
        }
