"""
Tests for the values/locations rendering.
"""

from __future__ import annotations

import json

from hcidissect.core.location import FieldLocation
from hcidissect.core.parsed import DecodeField, DecodeNode, DecodeStatus
from hcidissect.core.render import render, render_location, to_json, to_record


def _field(key: str, value: str, start: int, length: int, **kw) -> DecodeField:
    return DecodeField(key=key, rendered_value=value, location=FieldLocation(start, length), **kw)


def _node() -> DecodeNode:
    node = DecodeNode("sample")
    node.append(_field("Code", "0x2", 0, 1, symbolic_name="Connection Request"))
    node.append(_field("Inner", "", 1, 0, status=DecodeStatus.SUBTREE_START))
    node.append(_field("PSM", "0x1", 1, 2, symbolic_name="SDP"))
    node.append(_field("Inner", "", 3, 0, status=DecodeStatus.SUBTREE_END))
    node.append(_field("Tail", "aa", 3, 1, status=DecodeStatus.ERROR))
    return node


class TestRender:
    def test_nested_values_and_locations(self):
        values, locations = render(_node())
        assert values == {
            "Code": "0x2(Connection Request)",
            "Inner": {"PSM": "0x1(SDP)"},
            "Tail": "aa",
        }
        assert locations == {
            "Code": "(0,1)",
            "Inner": {"PSM": "(1,2)"},
            "Tail": "(3,1),status=1",
        }

    def test_keys_keep_wire_order(self):
        values, _ = render(_node())
        assert list(values) == ["Code", "Inner", "Tail"]

    def test_duplicate_keys_are_suffixed(self):
        node = DecodeNode("dup")
        node.append(_field("Option", "0x1", 0, 1))
        node.append(_field("Option", "0x2", 1, 1))
        node.append(_field("Option", "0x3", 2, 1))
        values, locations = render(node)
        assert values == {"Option": "0x1", "Option #2": "0x2", "Option #3": "0x3"}
        assert locations["Option #3"] == "(2,1)"

    def test_unclosed_subtree_is_tolerated(self):
        node = DecodeNode("open")
        node.append(_field("Inner", "", 0, 0, status=DecodeStatus.SUBTREE_START))
        node.append(_field("X", "0x1", 0, 1))
        values, _ = render(node)
        assert values == {"Inner": {"X": "0x1"}}

    def test_render_location_of_bits(self):
        f = DecodeField(key="OGF", rendered_value="0x3", location=FieldLocation(1, 1, 2, 6))
        assert render_location(f) == "(1,1),bit(2,6)"

    def test_to_json(self):
        values, locations = to_json(_node())
        assert json.loads(values)["Inner"] == {"PSM": "0x1(SDP)"}
        assert json.loads(locations)["Code"] == "(0,1)"

    def test_to_record(self):
        rec = to_record(_node())
        assert rec["type"] == "sample"
        assert rec["ok"] is False
        assert "locations" in rec
        assert "locations" not in to_record(_node(), locations=False)
