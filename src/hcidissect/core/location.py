from __future__ import annotations

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class FieldLocation:
    """
    Byte/bit range of a decoded field inside the top-level buffer.

    - start_byte/byte_len: containing bytes
    - bit_offset/bit_len: sub-range inside those bytes, counted from the
      least significant bit of the first byte (little-endian word order)

    A zero byte_len is only used by subtree brackets and by truncation
    markers sitting at the end of the available data.
    """

    start_byte: int
    byte_len: int
    bit_offset: int | None = None
    bit_len: int | None = None

    def __post_init__(self) -> None:
        if self.start_byte < 0 or self.byte_len < 0:
            raise ValueError(f"Invalid location: start={self.start_byte} len={self.byte_len}")
        if (self.bit_offset is None) != (self.bit_len is None):
            raise ValueError("bit_offset and bit_len must be given together")
        if self.bit_offset is not None and self.bit_len is not None:
            if self.bit_offset < 0 or self.bit_len <= 0:
                raise ValueError(f"Invalid bit range: {self.bit_offset},{self.bit_len}")
            if self.bit_offset + self.bit_len > self.byte_len * 8:
                raise ValueError(
                    f"Bit range {self.bit_offset}+{self.bit_len} exceeds {self.byte_len} containing byte(s)"
                )

    @classmethod
    def of_bits(cls, start_byte: int, byte_len: int, bit_offset: int, bit_len: int) -> FieldLocation:
        # Narrow to the bytes that actually contain the bit range.
        first = bit_offset // 8
        last = (bit_offset + bit_len - 1) // 8
        return cls(start_byte + first, last - first + 1, bit_offset - first * 8, bit_len)

    @property
    def end_byte(self) -> int:
        return self.start_byte + self.byte_len

    def render(self) -> str:
        out = f"({self.start_byte},{self.byte_len})"
        if self.bit_offset is not None:
            out += f",bit({self.bit_offset},{self.bit_len})"
        return out

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"start_byte": int(self.start_byte), "byte_len": int(self.byte_len)}
        if self.bit_offset is not None:
            out["bit_offset"] = int(self.bit_offset)
            out["bit_len"] = int(self.bit_len or 0)
        return out
