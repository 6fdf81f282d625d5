from __future__ import annotations

from hcidissect.core.dispatch import DecodeContext
from hcidissect.core.parsers.l2cap_tables import PSM_RFCOMM
from hcidissect.core.plugins import register_psm
from hcidissect.core.reader import FieldReader


RFCOMM_SABM = 0x2F
RFCOMM_UA = 0x63
RFCOMM_DM = 0x0F
RFCOMM_DISC = 0x43
RFCOMM_UIH = 0xEF

RFCOMM_FRAME_NAMES: dict[int, str] = {
    RFCOMM_SABM: "SABM",
    RFCOMM_UA: "UA",
    RFCOMM_DM: "DM",
    RFCOMM_DISC: "DISC",
    RFCOMM_UIH: "UIH",
}


def _crc8_lsb(data: bytes, *, poly: int = 0xE0, init: int = 0xFF) -> int:
    # Reflected CRC-8 (x^8 + x^2 + x + 1), TS 07.10.
    crc = init & 0xFF
    for b in data:
        crc ^= b
        for _ in range(8):
            if crc & 0x01:
                crc = (crc >> 1) ^ poly
            else:
                crc >>= 1
    return crc & 0xFF


def rfcomm_fcs(data: bytes) -> int:
    return 0xFF - _crc8_lsb(data)


def _decode_rfcomm_len(buf: bytes, off: int) -> tuple[int, int] | None:
    if off >= len(buf):
        return None
    b0 = buf[off]
    if b0 & 0x01:
        return (b0 >> 1) & 0x7F, 1
    if off + 1 >= len(buf):
        return None
    b1 = buf[off + 1]
    length = ((b0 >> 1) & 0x7F) | (b1 << 7)
    return int(length), 2


@register_psm(PSM_RFCOMM, "RFCOMM")
def decode_rfcomm(reader: FieldReader, ctx: DecodeContext) -> None:
    with reader.subtree("RFCOMM"):
        start = reader.pos
        addr = reader.uint("Address", 1)
        if addr is None:
            return
        reader.bits("EA", addr, start=start, width=1, bit_offset=0, bit_len=1, valid=range(1, 2))
        reader.bits("C/R", addr, start=start, width=1, bit_offset=1, bit_len=1)
        dlci = reader.bits("DLCI", addr, start=start, width=1, bit_offset=2, bit_len=6)

        ctrl_start = reader.pos
        ctrl = reader.uint("Control", 1)
        if ctrl is None:
            return
        frame_type = ctrl & 0xEF  # clear P/F bit
        reader.derived("Frame_Type", frame_type, start=ctrl_start, length=1, names=RFCOMM_FRAME_NAMES)
        pf = reader.bits("P/F", ctrl, start=ctrl_start, width=1, bit_offset=4, bit_len=1)

        len_start = reader.pos
        dec = _decode_rfcomm_len(reader.data, len_start)
        if dec is None:
            reader.truncated("Length", 1)
            return
        length, len_len = dec
        reader.derived("Length", length, start=len_start, length=len_len)
        reader.pos += len_len

        is_uih = frame_type == RFCOMM_UIH
        # Credit-based flow control adds one credit byte to UIH frames with P/F set.
        if is_uih and pf and dlci != 0 and reader.remaining == length + 2:
            reader.uint("Credits", 1)
        if reader.remaining < length + 1:
            reader.truncated("Information", length + 1)
            return
        if length:
            reader.raw("Information", length)

        header = reader.data[start : ctrl_start + 1] if is_uih else reader.data[start : len_start + len_len]
        expected = rfcomm_fcs(header)
        reader.uint("FCS", 1, valid=lambda v: v == expected)
