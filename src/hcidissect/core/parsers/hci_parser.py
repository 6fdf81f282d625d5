"""
HCI packet decoders.

Commands dispatch on the opcode (OGF, then OCF within the group), events on
the event code; ACL data hands its payload to the L2CAP decoder. All tables
below are plain data consumed by core.dispatch.
"""

from __future__ import annotations

import logging

from hcidissect.core.dispatch import DecodeContext, DispatchTable, Variant, dispatch
from hcidissect.core.location import FieldLocation
from hcidissect.core.parsed import DecodeField, DecodeNode, DecodeStatus
from hcidissect.core.parsers.hci_tables import (
    ACL_BC_NAMES,
    ACL_PB_CONTINUING,
    ACL_PB_NAMES,
    EVENT_NAMES,
    EVT_COMMAND_COMPLETE,
    EVT_COMMAND_STATUS,
    HCI_STATUS_NAMES,
    ISO_PB_NAMES,
    OCF_INQUIRY,
    OCF_NAMES,
    OCF_RESET,
    OGF_CONTROLLER_BASEBAND,
    OGF_LINK_CONTROL,
    OGF_NAMES,
    PACKET_TYPE_NAMES,
    SCO_STATUS_NAMES,
    HciPacketType,
    opcode_names,
)
from hcidissect.core.parsers.l2cap_parser import decode_l2cap_frame
from hcidissect.core.reader import FieldReader
from hcidissect.core.session import Session


logger = logging.getLogger(__name__)

# General/Limited Inquiry Access Code band.
INQUIRY_LAP_RANGE = range(0x9E8B00, 0x9E8B3F + 1)
INQUIRY_LENGTH_RANGE = range(0x01, 0x30 + 1)

RESET_OPCODE = (OGF_CONTROLLER_BASEBAND << 10) | OCF_RESET
NOP_OPCODE = 0x0000


# ---- shared pieces ----------------------------------------------------------


def _parameter_header(reader: FieldReader, ctx: DecodeContext) -> FieldReader:
    available = reader.remaining - 1
    length = reader.uint("Parameter_Total_Length", 1, valid=lambda v: v == available)
    if length is None:
        return reader.sub(0)
    return reader.sub(length)


def _opcode_bits(reader: FieldReader, start: int, opcode: int, _variant: Variant | None = None) -> None:
    reader.bits("OCF", opcode, start=start, width=2, bit_offset=0, bit_len=10)
    if opcode == NOP_OPCODE:
        reader.bits("OGF", opcode, start=start, width=2, bit_offset=10, bit_len=6)
    else:
        reader.bits("OGF", opcode, start=start, width=2, bit_offset=10, bit_len=6, names=OGF_NAMES)


def _opcode_display(reader: FieldReader, start: int, opcode: int) -> None:
    """OCF/OGF/Command of an opcode echoed inside an event."""
    _opcode_bits(reader, start, opcode)
    if opcode == NOP_OPCODE:
        reader.text("Command", "No_Operation", start=start, length=2)
        return
    _group, command = opcode_names(opcode)
    reader.text("Command", command or "Undefined", start=start, length=2, ok=command is not None)


def _trailing(reader: FieldReader, key: str = "Parameters") -> None:
    if reader.remaining:
        reader.raw(key, ok=False)


# ---- commands ---------------------------------------------------------------


def _decode_inquiry(reader: FieldReader, ctx: DecodeContext) -> None:
    reader.uint("LAP", 3, valid=INQUIRY_LAP_RANGE)
    reader.uint("Inquiry_Length", 1, valid=INQUIRY_LENGTH_RANGE)
    reader.uint("Num_Responses", 1)
    _trailing(reader)


def _decode_no_parameters(reader: FieldReader, ctx: DecodeContext) -> None:
    _trailing(reader)


_COMMAND_DECODERS = {
    (OGF_LINK_CONTROL, OCF_INQUIRY): _decode_inquiry,
    (OGF_CONTROLLER_BASEBAND, OCF_RESET): _decode_no_parameters,
}


def _ocf_table(ogf: int) -> DispatchTable:
    return DispatchTable(
        key="Command",
        width=0,
        select=lambda opcode: opcode & 0x3FF,
        variants={
            ocf: Variant(name, decode=_COMMAND_DECODERS.get((ogf, ocf)))
            for ocf, name in OCF_NAMES.get(ogf, {}).items()
        },
    )


OPCODE_TABLE = DispatchTable(
    key="Opcode",
    width=2,
    select=lambda opcode: opcode >> 10,
    variants={ogf: Variant(name, table=_ocf_table(ogf)) for ogf, name in OGF_NAMES.items()},
    fallback=Variant("", table=_ocf_table(-1)),
    named=False,
    subfields=_opcode_bits,
    header=_parameter_header,
    rest_key="Parameters",
)


def _decode_command(reader: FieldReader, ctx: DecodeContext) -> None:
    dispatch(OPCODE_TABLE, reader, ctx)
    _trailing(reader, "Trailing_Bytes")


# ---- events -----------------------------------------------------------------


def _decode_command_complete(reader: FieldReader, ctx: DecodeContext) -> None:
    reader.uint("Num_HCI_Command_Packets", 1)
    start = reader.pos
    opcode = reader.uint("Command_Opcode", 2)
    if opcode is None:
        return
    _opcode_display(reader, start, opcode)
    if opcode == RESET_OPCODE:
        reader.uint("Status", 1, names=HCI_STATUS_NAMES)
        _trailing(reader, "Return_Parameters")
    elif reader.remaining:
        reader.raw("Return_Parameters")


def _decode_command_status(reader: FieldReader, ctx: DecodeContext) -> None:
    reader.uint("Status", 1, names=HCI_STATUS_NAMES)
    reader.uint("Num_HCI_Command_Packets", 1)
    start = reader.pos
    opcode = reader.uint("Command_Opcode", 2)
    if opcode is None:
        return
    _opcode_display(reader, start, opcode)
    _trailing(reader)


_EVENT_DECODERS = {
    EVT_COMMAND_COMPLETE: _decode_command_complete,
    EVT_COMMAND_STATUS: _decode_command_status,
}

EVENT_TABLE = DispatchTable(
    key="Event_Code",
    width=1,
    variants={code: Variant(name, decode=_EVENT_DECODERS.get(code)) for code, name in EVENT_NAMES.items()},
    header=_parameter_header,
    rest_key="Parameters",
)


def _decode_event(reader: FieldReader, ctx: DecodeContext) -> None:
    dispatch(EVENT_TABLE, reader, ctx)
    _trailing(reader, "Trailing_Bytes")


# ---- data packets -----------------------------------------------------------


def _read_word(reader: FieldReader, key: str) -> tuple[int, int] | None:
    start = reader.pos
    word = reader.peek_uint(2)
    if word is None:
        reader.truncated(key, 2)
        return None
    reader.pos += 2
    return start, word


def _decode_acl(reader: FieldReader, ctx: DecodeContext) -> None:
    head = _read_word(reader, "Handle")
    if head is None:
        return
    start, word = head
    reader.bits("Handle", word, start=start, width=2, bit_offset=0, bit_len=12)
    pb = reader.bits("PB_Flag", word, start=start, width=2, bit_offset=12, bit_len=2, names=ACL_PB_NAMES)
    reader.bits("BC_Flag", word, start=start, width=2, bit_offset=14, bit_len=2, names=ACL_BC_NAMES)
    available = reader.remaining - 2
    length = reader.uint("Data_Total_Length", 2, valid=lambda v: v <= available)
    if length is None:
        return
    payload = reader.sub(length)
    if payload.remaining < length:
        # Fragmented or cut short by the capture; decode what is there.
        logger.debug("ACL payload short: %d of %d bytes", payload.remaining, length)
    if pb == ACL_PB_CONTINUING:
        if payload.remaining:
            payload.raw("Continuing_Fragment")
        return
    with payload.subtree("L2CAP"):
        decode_l2cap_frame(payload, ctx)
    _trailing(reader, "Trailing_Bytes")


def _decode_sco(reader: FieldReader, ctx: DecodeContext) -> None:
    head = _read_word(reader, "Handle")
    if head is None:
        return
    start, word = head
    reader.bits("Handle", word, start=start, width=2, bit_offset=0, bit_len=12)
    reader.bits("Packet_Status_Flag", word, start=start, width=2, bit_offset=12, bit_len=2, names=SCO_STATUS_NAMES)
    length = reader.uint("Data_Total_Length", 1)
    if length is None:
        return
    payload = reader.sub(length)
    if payload.remaining:
        payload.raw("Data")


def _decode_iso(reader: FieldReader, ctx: DecodeContext) -> None:
    head = _read_word(reader, "Handle")
    if head is None:
        return
    start, word = head
    reader.bits("Handle", word, start=start, width=2, bit_offset=0, bit_len=12)
    reader.bits("PB_Flag", word, start=start, width=2, bit_offset=12, bit_len=2, names=ISO_PB_NAMES)
    reader.bits("TS_Flag", word, start=start, width=2, bit_offset=14, bit_len=1)
    head = _read_word(reader, "ISO_Data_Load_Length")
    if head is None:
        return
    start, word = head
    length = reader.bits("ISO_Data_Load_Length", word, start=start, width=2, bit_offset=0, bit_len=14)
    payload = reader.sub(length)
    if payload.remaining:
        payload.raw("Data")


PACKET_TYPE_TABLE = DispatchTable(
    key="Packet_Type",
    width=0,
    variants={
        HciPacketType.CMD: Variant(PACKET_TYPE_NAMES[HciPacketType.CMD], decode=_decode_command),
        HciPacketType.ACL: Variant(PACKET_TYPE_NAMES[HciPacketType.ACL], decode=_decode_acl),
        HciPacketType.SCO: Variant(PACKET_TYPE_NAMES[HciPacketType.SCO], decode=_decode_sco),
        HciPacketType.EVT: Variant(PACKET_TYPE_NAMES[HciPacketType.EVT], decode=_decode_event),
        HciPacketType.ISO: Variant(PACKET_TYPE_NAMES[HciPacketType.ISO], decode=_decode_iso),
    },
)


def decode_hci(packet_type: HciPacketType | int, data: bytes, session: Session) -> DecodeNode:
    """
    Decode one HCI packet.

    The packet type travels out-of-band (H4 indicator value); `data` starts
    at the first byte after the indicator.
    """
    ptype = int(packet_type)
    # The type is not in `data`, so the table is resolved here instead of
    # being run through dispatch(); only an undefined type gets a field.
    variant = PACKET_TYPE_TABLE.resolve(ptype)
    node = DecodeNode(variant.name or "HCI Undefined")
    if variant.decode is None:
        logger.debug("undefined HCI packet type %#x", ptype)
        node.append(
            DecodeField(
                key="Packet_Type",
                rendered_value=f"{ptype:#x}",
                location=FieldLocation(0, 0),
                status=DecodeStatus.ERROR,
                value=ptype,
            )
        )
        return node
    variant.decode(FieldReader(data, node), DecodeContext(session=session))
    return node
