"""Tests for figdoc.design.variants."""

from __future__ import annotations

import pytest

from figdoc.design.models import DesignNode
from figdoc.design.variants import match_breakpoints, resolve_variants


def component_set(*child_names: str) -> DesignNode:
    return DesignNode.from_dict({
        "id": "set",
        "name": "Card",
        "type": "COMPONENT_SET",
        "children": [
            {"id": f"v{i}", "name": name, "type": "COMPONENT"}
            for i, name in enumerate(child_names)
        ],
    })


class TestMatchBreakpoints:

    @pytest.mark.parametrize("name, expected", [
        ("Size=Desktop", ("desktop",)),
        ("iPad Landscape", ("tablet",)),
        ("Phone", ("mobile",)),
        ("Variant=Dark", ()),
    ])
    def test_rule_order(self, name, expected):
        assert match_breakpoints(name) == expected


class TestComponentSetVariants:

    def test_each_breakpoint_child(self):
        variants = resolve_variants(
            component_set("Size=Desktop", "Size=Tablet", "Size=Mobile"), "Card",
        )
        assert variants.filled() == {"desktop": "v0", "tablet": "v1", "mobile": "v2"}

    def test_unlabelled_variant_is_desktop(self):
        variants = resolve_variants(component_set("Variant=Dark", "Size=Tablet"), "Card")
        assert variants.desktop == "v0"
        assert variants.tablet == "v1"
        assert variants.mobile is None

    def test_first_match_keeps_slot(self):
        variants = resolve_variants(component_set("Size=Mobile", "Phone Alt"), "Card")
        assert variants.mobile == "v0"

    def test_named_footer_variants(self):
        root = DesignNode.from_dict({
            "id": "set",
            "name": "Footer",
            "type": "COMPONENT_SET",
            "children": [
                {"id": "10:1", "name": "Footer Desktop", "type": "COMPONENT"},
                {"id": "10:2", "name": "Footer Tablet", "type": "COMPONENT"},
                {"id": "10:3", "name": "Footer Mobile", "type": "COMPONENT"},
            ],
        })
        variants = resolve_variants(root, "Footer")
        assert variants.filled() == {"desktop": "10:1", "tablet": "10:2", "mobile": "10:3"}

    def test_bare_breakpoint_names(self):
        variants = resolve_variants(component_set("Desktop", "Tablet Variant", "Mobile Small"), "Card")
        assert variants.filled() == {"desktop": "v0", "tablet": "v1", "mobile": "v2"}

    def test_mobile_only_variant_does_not_fill_desktop(self):
        variants = resolve_variants(component_set("Size=Mobile"), "Card")
        assert variants.mobile == "v0"
        # Root id fills the empty desktop slot
        assert variants.desktop == "set"


class TestTreeVariants:

    def test_related_siblings(self, footer_document):
        variants = resolve_variants(DesignNode.from_dict(footer_document), "Footer")
        assert variants.desktop == "300:1"
        assert variants.tablet is None
        assert variants.mobile == "400:1"

    def test_unrelated_nodes_are_ignored(self):
        root = DesignNode.from_dict({
            "id": "0", "name": "Page", "type": "FRAME",
            "children": [{"id": "1", "name": "Header Mobile", "type": "FRAME"}],
        })
        variants = resolve_variants(root, "Footer")
        assert variants.mobile is None
        assert variants.desktop == "0"

    def test_filled_keeps_breakpoint_order(self, footer_document):
        variants = resolve_variants(DesignNode.from_dict(footer_document), "Footer")
        assert list(variants.filled()) == ["desktop", "mobile"]
