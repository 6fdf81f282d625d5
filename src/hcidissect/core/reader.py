from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Any, Callable, Iterator, Literal, Mapping, Union

from hcidissect.core.location import FieldLocation
from hcidissect.core.parsed import DecodeField, DecodeNode, DecodeStatus


logger = logging.getLogger(__name__)

ByteOrder = Literal["little", "big"]
Validator = Union[range, Callable[[int], bool]]


def _check(value: int, valid: Validator | None) -> bool:
    if valid is None:
        return True
    if isinstance(valid, range):
        return value in valid
    return bool(valid(value))


class FieldReader:
    """
    Cursor over one layer's slice of the packet.

    `base` is the absolute offset of data[0] inside the top-level buffer, so
    every location emitted here is already in top-level coordinates. Nested
    layers get their own reader from sub(), which shifts the base by the
    current position.
    """

    def __init__(self, data: bytes, node: DecodeNode, *, base: int = 0) -> None:
        self._data = bytes(data)
        self.node = node
        self.base = base
        self.pos = 0
        self.meta: dict[str, Any] = {}

    @property
    def data(self) -> bytes:
        return self._data

    @property
    def remaining(self) -> int:
        return max(0, len(self._data) - self.pos)

    @property
    def offset(self) -> int:
        return self.base + self.pos

    def rest(self) -> bytes:
        return self._data[self.pos :]

    def peek_uint(self, width: int, *, byteorder: ByteOrder = "little") -> int | None:
        if self.remaining < width:
            return None
        return int.from_bytes(self._data[self.pos : self.pos + width], byteorder)

    # ---- emitters -------------------------------------------------------

    def _emit_int(
        self,
        key: str,
        value: int,
        loc: FieldLocation,
        *,
        names: Mapping[int, str] | None = None,
        valid: Validator | None = None,
        name: str | None = None,
        error: bool = False,
    ) -> None:
        symbolic = name
        status = DecodeStatus.OK
        if names is not None and symbolic is None:
            symbolic = names.get(value)
            if symbolic is None:
                status = DecodeStatus.ERROR
                logger.debug("%s: unknown value %#x at %s", key, value, loc.render())
        if error or not _check(value, valid):
            status = DecodeStatus.ERROR
        self.node.append(
            DecodeField(
                key=key,
                rendered_value=f"{value:#x}",
                location=loc,
                symbolic_name=symbolic or None,
                status=status,
                value=value,
            )
        )

    def uint(
        self,
        key: str,
        width: int,
        *,
        names: Mapping[int, str] | None = None,
        valid: Validator | None = None,
        byteorder: ByteOrder = "little",
    ) -> int | None:
        value = self.peek_uint(width, byteorder=byteorder)
        if value is None:
            self.truncated(key, width)
            return None
        self._emit_int(key, value, FieldLocation(self.offset, width), names=names, valid=valid)
        self.pos += width
        return value

    def bits(
        self,
        key: str,
        word: int,
        *,
        start: int,
        width: int,
        bit_offset: int,
        bit_len: int,
        names: Mapping[int, str] | None = None,
        valid: Validator | None = None,
    ) -> int:
        """Emit a bit field of a word already read at relative position `start`."""
        value = (word >> bit_offset) & ((1 << bit_len) - 1)
        loc = FieldLocation.of_bits(self.base + start, width, bit_offset, bit_len)
        self._emit_int(key, value, loc, names=names, valid=valid)
        return value

    def derived(
        self,
        key: str,
        value: int,
        *,
        start: int,
        length: int,
        names: Mapping[int, str] | None = None,
        valid: Validator | None = None,
        name: str | None = None,
        error: bool = False,
    ) -> None:
        """Emit a value that is not read here but explained by bytes at `start`."""
        loc = FieldLocation(self.base + start, length)
        self._emit_int(key, value, loc, names=names, valid=valid, name=name, error=error)

    def text(self, key: str, text: str, *, start: int, length: int, ok: bool = True) -> None:
        self.node.append(
            DecodeField(
                key=key,
                rendered_value=text,
                location=FieldLocation(self.base + start, length),
                status=DecodeStatus.OK if ok else DecodeStatus.ERROR,
            )
        )

    def raw(self, key: str, length: int | None = None, *, ok: bool = True) -> bytes:
        if length is None:
            length = self.remaining
        if length > self.remaining:
            self.truncated(key, length)
            return b""
        chunk = self._data[self.pos : self.pos + length]
        if chunk:
            self.node.append(
                DecodeField(
                    key=key,
                    rendered_value=chunk.hex(" "),
                    location=FieldLocation(self.offset, length),
                    status=DecodeStatus.OK if ok else DecodeStatus.ERROR,
                    value=chunk,
                )
            )
        self.pos += length
        return chunk

    def truncated(self, key: str, needed: int) -> None:
        have = self.remaining
        logger.debug("%s: truncated, need %d byte(s), have %d", key, needed, have)
        self.node.append(
            DecodeField(
                key=key,
                rendered_value=f"truncated ({have} of {needed} bytes)",
                location=FieldLocation(self.offset, have),
                status=DecodeStatus.ERROR,
                value=self.rest(),
            )
        )
        self.pos = len(self._data)

    @contextmanager
    def subtree(self, name: str) -> Iterator[FieldReader]:
        self.node.append(
            DecodeField(
                key=name,
                rendered_value="",
                location=FieldLocation(self.offset, 0),
                status=DecodeStatus.SUBTREE_START,
            )
        )
        try:
            yield self
        finally:
            self.node.append(
                DecodeField(
                    key=name,
                    rendered_value="",
                    location=FieldLocation(self.offset, 0),
                    status=DecodeStatus.SUBTREE_END,
                )
            )

    def sub(self, length: int | None = None) -> FieldReader:
        """Consume `length` bytes (or the rest) and return a reader over them."""
        if length is None or length > self.remaining:
            length = self.remaining
        child = FieldReader(self._data[self.pos : self.pos + length], self.node, base=self.offset)
        child.meta = dict(self.meta)
        self.pos += length
        return child
