"""Figma design tree parsing, component extraction and variant lookup."""

from .extractor import (
    extract_component,
    find_best_node_for_screenshot,
    find_component_by_name,
    flatten_elements,
)
from .models import DesignNode, ExtractedComponent, ExtractedElement, ResponsiveVariants
from .variants import resolve_variants

__all__ = [
    "DesignNode",
    "ExtractedComponent",
    "ExtractedElement",
    "ResponsiveVariants",
    "extract_component",
    "find_best_node_for_screenshot",
    "find_component_by_name",
    "flatten_elements",
    "resolve_variants",
]
