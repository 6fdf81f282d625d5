from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Iterator

from hcidissect.core.location import FieldLocation


class DecodeStatus(IntEnum):
    OK = 0
    ERROR = 1
    SUBTREE_START = 2
    SUBTREE_END = 3


@dataclass(frozen=True)
class DecodeField:
    key: str
    rendered_value: str
    location: FieldLocation
    symbolic_name: str | None = None
    status: DecodeStatus = DecodeStatus.OK
    value: int | bytes | None = None

    @property
    def ok(self) -> bool:
        return self.status != DecodeStatus.ERROR

    @property
    def is_bracket(self) -> bool:
        return self.status in (DecodeStatus.SUBTREE_START, DecodeStatus.SUBTREE_END)

    def display(self) -> str:
        if self.symbolic_name:
            return f"{self.rendered_value}({self.symbolic_name})"
        return self.rendered_value

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "value": self.rendered_value,
            "name": self.symbolic_name,
            "location": self.location.to_dict(),
            "status": self.status.name,
        }


@dataclass
class DecodeNode:
    """
    Result of decoding one packet.

    Fields are kept flat, in wire order; nested groups are bracketed by
    SUBTREE_START/SUBTREE_END fields carrying the group name as key.
    """

    type_name: str
    fields: list[DecodeField] = field(default_factory=list)

    def append(self, item: DecodeField) -> None:
        self.fields.append(item)

    def iter_leaves(self) -> Iterator[DecodeField]:
        for f in self.fields:
            if not f.is_bracket:
                yield f

    def find(self, key: str) -> DecodeField | None:
        for f in self.iter_leaves():
            if f.key == key:
                return f
        return None

    def find_all(self, key: str) -> list[DecodeField]:
        return [f for f in self.iter_leaves() if f.key == key]

    def errors(self) -> list[DecodeField]:
        return [f for f in self.fields if f.status == DecodeStatus.ERROR]

    @property
    def ok(self) -> bool:
        return not self.errors()
