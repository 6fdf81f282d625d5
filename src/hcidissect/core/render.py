"""
Rendering of a DecodeNode into its two parallel views.

- values: {key: "0x3(Controller & Baseband)", subtree: {...}, ...}
- locations: {key: "(1,1),bit(2,6)", subtree: {...}, ...}

Both maps keep wire order. A repeated key at the same level gets a
" #2", " #3", ... suffix so nothing is lost.
"""

from __future__ import annotations

import json
from typing import Any

from hcidissect.core.parsed import DecodeField, DecodeNode, DecodeStatus


def _unique_key(target: dict[str, Any], key: str) -> str:
    if key not in target:
        return key
    n = 2
    while f"{key} #{n}" in target:
        n += 1
    return f"{key} #{n}"


def render_location(item: DecodeField) -> str:
    text = item.location.render()
    if item.status != DecodeStatus.OK:
        text += f",status={int(item.status)}"
    return text


def render(node: DecodeNode) -> tuple[dict[str, Any], dict[str, Any]]:
    values: dict[str, Any] = {}
    locations: dict[str, Any] = {}
    stack: list[tuple[dict[str, Any], dict[str, Any]]] = []

    for item in node.fields:
        if item.status == DecodeStatus.SUBTREE_START:
            key = _unique_key(values, item.key)
            sub_values: dict[str, Any] = {}
            sub_locations: dict[str, Any] = {}
            values[key] = sub_values
            locations[key] = sub_locations
            stack.append((values, locations))
            values, locations = sub_values, sub_locations
            continue
        if item.status == DecodeStatus.SUBTREE_END:
            if stack:
                values, locations = stack.pop()
            continue
        key = _unique_key(values, item.key)
        values[key] = item.display()
        locations[key] = render_location(item)

    while stack:
        values, locations = stack.pop()
    return values, locations


def render_values(node: DecodeNode) -> dict[str, Any]:
    return render(node)[0]


def render_locations(node: DecodeNode) -> dict[str, Any]:
    return render(node)[1]


def to_json(node: DecodeNode, *, indent: int | None = None) -> tuple[str, str]:
    values, locations = render(node)
    return (
        json.dumps(values, ensure_ascii=False, indent=indent),
        json.dumps(locations, ensure_ascii=False, indent=indent),
    )


def to_record(node: DecodeNode, *, locations: bool = True) -> dict[str, Any]:
    values, locs = render(node)
    out: dict[str, Any] = {"type": node.type_name, "ok": node.ok, "values": values}
    if locations:
        out["locations"] = locs
    return out
