"""
Generic discriminant dispatch.

Every protocol layer has the same shape: a fixed-width discriminant at the
front of a slice selects how the rest is decoded. Layers describe that
mapping as a DispatchTable (pure data) and call dispatch(); this module is
the only place that walks it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Mapping

from hcidissect.core.reader import ByteOrder, FieldReader
from hcidissect.core.session import Session


logger = logging.getLogger(__name__)

UNDEFINED_NAME = "Undefined"


@dataclass
class DecodeContext:
    session: Session
    # Scratch values shared by the decoders of one packet.
    values: dict[str, int] = field(default_factory=dict)


Decoder = Callable[[FieldReader, DecodeContext], None]
SubfieldHook = Callable[[FieldReader, int, int, "Variant"], None]
HeaderHook = Callable[[FieldReader, DecodeContext], FieldReader]


@dataclass(frozen=True)
class Variant:
    name: str
    decode: Decoder | None = None
    # Refinement resolved on the same raw discriminant (e.g. OGF -> OCF).
    table: DispatchTable | None = None
    # Known but illegal on the wire (reserved / null values).
    error: bool = False

    @property
    def defined(self) -> bool:
        return bool(self.name)


UNDEFINED = Variant("")


@dataclass(frozen=True)
class DispatchTable:
    key: str
    width: int
    variants: Mapping[int, Variant]
    ranges: tuple[tuple[range, Variant], ...] = ()
    fallback: Variant = UNDEFINED
    select: Callable[[int], int] | None = None
    # Attach the resolved variant name to the discriminant field itself.
    named: bool = True
    subfields: SubfieldHook | None = None
    header: HeaderHook | None = None
    # Wrap the whole dispatch in a sub-object named after the variant.
    subtree: bool = False
    # Field used to dump the payload of named variants without a decoder.
    rest_key: str | None = None
    byteorder: ByteOrder = "little"

    def resolve(self, raw: int) -> Variant:
        key = self.select(raw) if self.select is not None else raw
        variant = self.variants.get(key)
        if variant is not None:
            return variant
        for span, candidate in self.ranges:
            if key in span:
                return candidate
        return self.fallback

    def names(self) -> dict[int, str]:
        return {k: v.name for k, v in self.variants.items() if v.name}


def dispatch(table: DispatchTable, reader: FieldReader, ctx: DecodeContext) -> Variant:
    raw = reader.peek_uint(table.width, byteorder=table.byteorder)
    if raw is None:
        if table.subtree:
            with reader.subtree(UNDEFINED_NAME):
                reader.truncated(table.key, table.width)
        else:
            reader.truncated(table.key, table.width)
        return table.fallback

    variant = table.resolve(raw)
    if not variant.defined:
        logger.debug("%s %#x is not defined", table.key, raw)
    if table.subtree:
        with reader.subtree(variant.name or UNDEFINED_NAME):
            return _run(table, variant, raw, reader, ctx)
    return _run(table, variant, raw, reader, ctx)


def _run(table: DispatchTable, variant: Variant, raw: int, reader: FieldReader, ctx: DecodeContext) -> Variant:
    start = reader.pos
    if table.named:
        reader.derived(
            table.key,
            raw,
            start=start,
            length=table.width,
            name=variant.name or None,
            error=variant.error or not variant.defined,
        )
    else:
        reader.derived(table.key, raw, start=start, length=table.width)
    reader.pos += table.width

    if table.subfields is not None:
        table.subfields(reader, start, raw, variant)

    while variant.table is not None:
        refine = variant.table
        variant = refine.resolve(raw)
        reader.text(
            refine.key,
            variant.name or UNDEFINED_NAME,
            start=start,
            length=table.width,
            ok=variant.defined and not variant.error,
        )

    payload = table.header(reader, ctx) if table.header is not None else reader
    if variant.decode is not None:
        variant.decode(payload, ctx)
    elif variant.defined and table.rest_key is not None and payload.remaining:
        payload.raw(table.rest_key)
    return variant
