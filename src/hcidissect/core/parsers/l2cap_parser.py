"""
L2CAP decoders.

The channel id selects the decoder. Signaling commands update the session
channel table while they are decoded, and dynamic channels look that table
up to find which PSM (and so which payload decoder) owns them.
"""

from __future__ import annotations

import logging

from hcidissect.core.dispatch import DecodeContext, DispatchTable, Variant, dispatch
from hcidissect.core.parsed import DecodeNode
from hcidissect.core.parsers.l2cap_tables import (
    CID_ATT,
    CID_BREDR_SMP,
    CID_CONNECTIONLESS,
    CID_LE_SIGNALING,
    CID_LE_SMP,
    CID_NULL,
    CID_SIGNALING,
    CONFIG_OPTION_NAMES,
    CONFIGURATION_RESULT_NAMES,
    CONNECTION_RESULT_NAMES,
    CONNECTION_STATUS_NAMES,
    DYNAMIC_CID_RANGE,
    INFO_RESULT_NAMES,
    INFO_TYPE_NAMES,
    MIN_MTU,
    OPT_FLUSH_TIMEOUT,
    OPT_MTU,
    PSM_NAMES,
    SIG_CONFIGURATION_REQ,
    SIG_CONFIGURATION_RSP,
    SIG_CONNECTION_REQ,
    SIG_CONNECTION_RSP,
    SIG_DISCONNECTION_REQ,
    SIG_DISCONNECTION_RSP,
    SIG_ECHO_REQ,
    SIG_ECHO_RSP,
    SIG_INFORMATION_REQ,
    SIG_INFORMATION_RSP,
    SIGNAL_NAMES,
)
from hcidissect.core.plugins import get_psm_decoder, psm_name
from hcidissect.core.reader import FieldReader
from hcidissect.core.session import Session


logger = logging.getLogger(__name__)


# ---- configuration options --------------------------------------------------


def _decode_options(reader: FieldReader) -> dict[int, int]:
    """Decode a configuration option list; returns modeled option values by type."""
    values: dict[int, int] = {}
    while reader.remaining:
        start = reader.pos
        opt_type = reader.data[start]
        kind = opt_type & 0x7F
        hint = bool(opt_type & 0x80)
        name = CONFIG_OPTION_NAMES.get(kind)
        with reader.subtree(f"{name} Option" if name else "Undefined Option"):
            reader.derived("Type", kind, start=start, length=1, name=name, error=name is None and not hint)
            reader.pos += 1
            reader.bits("Hint", opt_type, start=start, width=1, bit_offset=7, bit_len=1)
            length = reader.uint("Length", 1)
            if length is None:
                break
            body = reader.sub(length)
            if body.remaining < length:
                body.truncated("Value", length)
                break
            if kind == OPT_MTU and length == 2:
                mtu = body.uint("MTU", 2, valid=lambda v: v >= MIN_MTU)
                if mtu is not None:
                    values[kind] = mtu
            elif kind == OPT_FLUSH_TIMEOUT and length == 2:
                timeout = body.uint("Flush_Timeout", 2, valid=lambda v: v != 0)
                if timeout is not None:
                    values[kind] = timeout
            elif length:
                body.raw("Value", ok=kind not in (OPT_MTU, OPT_FLUSH_TIMEOUT))
    return values


def _flags(reader: FieldReader) -> None:
    start = reader.pos
    flags = reader.uint("Flags", 2)
    if flags is not None:
        reader.bits("Continuation", flags, start=start, width=2, bit_offset=0, bit_len=1)


# ---- signaling commands -----------------------------------------------------


def _signal_header(reader: FieldReader, ctx: DecodeContext) -> FieldReader:
    identifier = reader.uint("Identifier", 1, valid=range(0x01, 0x100))
    if identifier is None:
        return reader.sub(0)
    available = reader.remaining - 2
    length = reader.uint("Length", 2, valid=lambda v: v <= available)
    if length is None:
        return reader.sub(0)
    payload = reader.sub(length)
    payload.meta["identifier"] = identifier
    return payload


def _connection_request(reader: FieldReader, ctx: DecodeContext) -> None:
    psm = reader.uint("PSM", 2, names=PSM_NAMES)
    source_cid = reader.uint("Source_CID", 2, valid=DYNAMIC_CID_RANGE)
    if psm is None or source_cid is None:
        return
    ctx.session.on_connection_request(
        identifier=int(reader.meta.get("identifier", 0)),
        psm=psm,
        source_cid=source_cid,
    )


def _connection_response(reader: FieldReader, ctx: DecodeContext) -> None:
    dest_cid = reader.uint("Destination_CID", 2)
    source_cid = reader.uint("Source_CID", 2)
    reader.uint("Result", 2, names=CONNECTION_RESULT_NAMES)
    reader.uint("Status", 2, names=CONNECTION_STATUS_NAMES)
    if dest_cid is None or source_cid is None:
        return
    ctx.session.on_connection_response(dest_cid=dest_cid, source_cid=source_cid)


def _configuration_request(reader: FieldReader, ctx: DecodeContext) -> None:
    dest_cid = reader.uint("Destination_CID", 2)
    _flags(reader)
    options = _decode_options(reader)
    if dest_cid is None or not options:
        return
    ctx.session.on_configuration_request(
        dest_cid=dest_cid,
        mtu=options.get(OPT_MTU),
        flush_timeout=options.get(OPT_FLUSH_TIMEOUT),
    )


def _configuration_response(reader: FieldReader, ctx: DecodeContext) -> None:
    source_cid = reader.uint("Source_CID", 2)
    _flags(reader)
    reader.uint("Result", 2, names=CONFIGURATION_RESULT_NAMES)
    options = _decode_options(reader)
    if source_cid is None or not options:
        return
    ctx.session.on_configuration_response(
        source_cid=source_cid,
        mtu=options.get(OPT_MTU),
        flush_timeout=options.get(OPT_FLUSH_TIMEOUT),
    )


def _disconnection(reader: FieldReader, ctx: DecodeContext) -> None:
    # Informational only: channel records outlive disconnection.
    reader.uint("Destination_CID", 2)
    reader.uint("Source_CID", 2)


def _echo(reader: FieldReader, ctx: DecodeContext) -> None:
    if reader.remaining:
        reader.raw("Data")


def _information_request(reader: FieldReader, ctx: DecodeContext) -> None:
    reader.uint("InfoType", 2, names=INFO_TYPE_NAMES)


def _information_response(reader: FieldReader, ctx: DecodeContext) -> None:
    reader.uint("InfoType", 2, names=INFO_TYPE_NAMES)
    reader.uint("Result", 2, names=INFO_RESULT_NAMES)
    if reader.remaining:
        reader.raw("Data")


_SIGNAL_DECODERS = {
    SIG_CONNECTION_REQ: _connection_request,
    SIG_CONNECTION_RSP: _connection_response,
    SIG_CONFIGURATION_REQ: _configuration_request,
    SIG_CONFIGURATION_RSP: _configuration_response,
    SIG_DISCONNECTION_REQ: _disconnection,
    SIG_DISCONNECTION_RSP: _disconnection,
    SIG_ECHO_REQ: _echo,
    SIG_ECHO_RSP: _echo,
    SIG_INFORMATION_REQ: _information_request,
    SIG_INFORMATION_RSP: _information_response,
}

SIGNAL_TABLE = DispatchTable(
    key="Code",
    width=1,
    variants={code: Variant(name, decode=_SIGNAL_DECODERS.get(code)) for code, name in SIGNAL_NAMES.items()},
    header=_signal_header,
    subtree=True,
)


def _decode_signaling(reader: FieldReader, ctx: DecodeContext) -> None:
    # A C-frame may carry several commands back to back.
    while reader.remaining:
        dispatch(SIGNAL_TABLE, reader, ctx)


# ---- data channels ----------------------------------------------------------


def _decode_psm_payload(reader: FieldReader, ctx: DecodeContext, psm: int) -> None:
    decoder = get_psm_decoder(psm)
    if decoder is None:
        if reader.remaining:
            reader.raw("Payload")
        return
    decoder(reader, ctx)


def _decode_connectionless(reader: FieldReader, ctx: DecodeContext) -> None:
    psm = reader.uint("PSM", 2, names=PSM_NAMES)
    if psm is None:
        return
    _decode_psm_payload(reader, ctx, psm)


def _decode_dynamic(reader: FieldReader, ctx: DecodeContext) -> None:
    cid = ctx.values["cid"]
    cid_start = reader.pos - 2
    rec = ctx.session.channel_for_cid(cid)
    if rec is None:
        logger.debug("no channel record for cid %#06x", cid)
        reader.derived("PSM", 0, start=cid_start, length=2, error=True)
        if reader.remaining:
            reader.raw("Payload")
        return

    name = psm_name(rec.psm) or PSM_NAMES.get(rec.psm)
    reader.derived("PSM", rec.psm, start=cid_start, length=2, name=name, error=name is None)
    if rec.remote_mtu is not None:
        pdu_length = ctx.values.get("pdu_length", reader.remaining)
        reader.derived("MTU", rec.remote_mtu, start=cid_start, length=2, error=pdu_length > rec.remote_mtu)
    _decode_psm_payload(reader, ctx, rec.psm)


_PREVIOUSLY_USED = Variant("Previously used", error=True)

CID_TABLE = DispatchTable(
    key="Channel_ID",
    width=2,
    variants={
        CID_NULL: Variant("Null identifier", error=True),
        CID_SIGNALING: Variant("L2CAP Signaling channel", decode=_decode_signaling),
        CID_CONNECTIONLESS: Variant("Connectionless channel", decode=_decode_connectionless),
        0x0003: _PREVIOUSLY_USED,
        CID_ATT: Variant("Attribute Protocol"),
        CID_LE_SIGNALING: Variant("LE L2CAP Signaling channel"),
        CID_LE_SMP: Variant("LE Security Manager Protocol"),
        CID_BREDR_SMP: Variant("BR/EDR Security Manager"),
        0x003F: _PREVIOUSLY_USED,
    },
    ranges=((DYNAMIC_CID_RANGE, Variant("Dynamically allocated", decode=_decode_dynamic)),),
    rest_key="Payload",
)


def decode_l2cap_frame(reader: FieldReader, ctx: DecodeContext) -> None:
    length = reader.uint("PDU_Length", 2)
    if length is None:
        return
    cid = reader.peek_uint(2)
    if cid is not None:
        ctx.values["cid"] = cid
    ctx.values["pdu_length"] = length
    frame = reader.sub(2 + length)
    dispatch(CID_TABLE, frame, ctx)
    if reader.remaining:
        reader.raw("Trailing_Bytes", ok=False)


def decode_l2cap(data: bytes, session: Session) -> DecodeNode:
    """Decode an L2CAP PDU (basic header first) that was already stripped of HCI framing."""
    node = DecodeNode("L2CAP")
    decode_l2cap_frame(FieldReader(data, node), DecodeContext(session=session))
    return node
