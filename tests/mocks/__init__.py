"""
Packet builders for tests.

These assemble HCI/L2CAP byte sequences field by field so tests can state
intent ("connection request for PSM 1 from CID 0x40") instead of raw hex.

Usage:
    frame = acl(l2cap(0x0001, connection_request(1, psm=0x0001, scid=0x0040)))
    node = decode_hci(HciPacketType.ACL, frame, session)
"""

from __future__ import annotations


def u16(value: int) -> bytes:
    return (value & 0xFFFF).to_bytes(2, "little")


def acl(payload: bytes, *, handle: int = 0x000B, pb: int = 0b10, bc: int = 0b00) -> bytes:
    word = (handle & 0x0FFF) | ((pb & 0x3) << 12) | ((bc & 0x3) << 14)
    return u16(word) + u16(len(payload)) + payload


def l2cap(cid: int, payload: bytes) -> bytes:
    return u16(len(payload)) + u16(cid) + payload


def signal(code: int, identifier: int, body: bytes) -> bytes:
    return bytes([code, identifier]) + u16(len(body)) + body


def connection_request(identifier: int, *, psm: int, scid: int) -> bytes:
    return signal(0x02, identifier, u16(psm) + u16(scid))


def connection_response(identifier: int, *, dcid: int, scid: int, result: int = 0, status: int = 0) -> bytes:
    return signal(0x03, identifier, u16(dcid) + u16(scid) + u16(result) + u16(status))


def configuration_request(identifier: int, *, dcid: int, options: bytes = b"", flags: int = 0) -> bytes:
    return signal(0x04, identifier, u16(dcid) + u16(flags) + options)


def configuration_response(
    identifier: int, *, scid: int, result: int = 0, options: bytes = b"", flags: int = 0
) -> bytes:
    return signal(0x05, identifier, u16(scid) + u16(flags) + u16(result) + options)


def disconnection_request(identifier: int, *, dcid: int, scid: int) -> bytes:
    return signal(0x06, identifier, u16(dcid) + u16(scid))


def echo_request(identifier: int, data: bytes = b"") -> bytes:
    return signal(0x08, identifier, data)


def mtu_option(mtu: int) -> bytes:
    return bytes([0x01, 0x02]) + u16(mtu)


def flush_timeout_option(timeout: int) -> bytes:
    return bytes([0x02, 0x02]) + u16(timeout)


def sdp_pdu(pdu_id: int, transaction_id: int, params: bytes = b"") -> bytes:
    return bytes([pdu_id]) + transaction_id.to_bytes(2, "big") + len(params).to_bytes(2, "big") + params


def open_channel(session, *, psm: int = 0x0001, scid: int = 0x0040, dcid: int = 0x0041) -> None:
    """Run a Connection Request/Response exchange through the ACL decoder."""
    from hcidissect import HciPacketType, decode_hci

    decode_hci(HciPacketType.ACL, acl(l2cap(0x0001, connection_request(1, psm=psm, scid=scid))), session)
    decode_hci(HciPacketType.ACL, acl(l2cap(0x0001, connection_response(1, dcid=dcid, scid=scid))), session)
