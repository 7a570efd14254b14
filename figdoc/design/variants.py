"""Responsive variant lookup (desktop / tablet / mobile) by layer name.

Breakpoints are matched with an ordered rule table; for every candidate node
the rules are evaluated desktop -> tablet -> mobile and each slot keeps the
first node that matched it.
"""

from __future__ import annotations

from typing import Tuple

from .models import DesignNode, ResponsiveVariants

DESKTOP_KEYWORDS = ("desktop", "lg", "large", "web", "default")
TABLET_KEYWORDS = ("tablet", "ipad", "md", "medium")
MOBILE_KEYWORDS = ("mobile", "phone", "sm", "small", "ios", "android")

BREAKPOINT_RULES: Tuple[Tuple[str, Tuple[str, ...]], ...] = (
    ("desktop", DESKTOP_KEYWORDS),
    ("tablet", TABLET_KEYWORDS),
    ("mobile", MOBILE_KEYWORDS),
)


def _matches(name: str, keywords: Tuple[str, ...]) -> bool:
    return any(k in name for k in keywords)


def match_breakpoints(name: str) -> Tuple[str, ...]:
    """Slots whose keywords occur in ``name``, in rule order."""
    lowered = name.lower()
    return tuple(slot for slot, keywords in BREAKPOINT_RULES if _matches(lowered, keywords))


def _fill(variants: ResponsiveVariants, slot: str, node_id: str) -> None:
    if getattr(variants, slot) is None:
        setattr(variants, slot, node_id)


def _resolve_component_set(root: DesignNode, variants: ResponsiveVariants) -> None:
    for child in root.children:
        slots = match_breakpoints(child.name)
        # A variant that names neither tablet nor mobile is taken as desktop
        if "desktop" in slots or not ("tablet" in slots or "mobile" in slots):
            _fill(variants, "desktop", child.id)
        for slot in ("tablet", "mobile"):
            if slot in slots:
                _fill(variants, slot, child.id)


def _is_related(node_name: str, component_name: str) -> bool:
    words = node_name.split(" ")
    return component_name in node_name or words[0] in component_name


def _resolve_tree(root: DesignNode, component_name: str, variants: ResponsiveVariants) -> None:
    target = component_name.lower()
    stack = [root]
    while stack:
        node = stack.pop()
        node_name = node.name.lower()
        if _is_related(node_name, target):
            for slot in match_breakpoints(node_name):
                _fill(variants, slot, node.id)
        stack.extend(reversed(node.children))


def resolve_variants(root: DesignNode, component_name: str) -> ResponsiveVariants:
    """Find the node ids for each breakpoint of ``component_name``.

    Never raises; a missing breakpoint is left as ``None``. When no desktop
    variant is found, the root itself is used.
    """
    variants = ResponsiveVariants()
    if root.type == "COMPONENT_SET":
        _resolve_component_set(root, variants)
    else:
        _resolve_tree(root, component_name, variants)

    if variants.desktop is None and root.id:
        variants.desktop = root.id
    return variants
