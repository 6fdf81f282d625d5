"""
Public decoding entry points.

    session = new_session()
    node = decode_hci(HciPacketType.ACL, data, session)
    values, locations = render(node)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Iterator

from hcidissect.core.parsed import DecodeNode
from hcidissect.core.parsers import hci_parser, l2cap_parser
from hcidissect.core.parsers.hci_tables import HciPacketType, parse_packet_type
from hcidissect.core.plugins import load_builtin_plugins
from hcidissect.core.session import Session, new_session


logger = logging.getLogger(__name__)

__all__ = [
    "DecodeStats",
    "decode_hci",
    "decode_l2cap",
    "decode_stream",
    "new_session",
]


def decode_hci(packet_type: HciPacketType | int | str, data: bytes, session: Session) -> DecodeNode:
    load_builtin_plugins()
    if isinstance(packet_type, str):
        packet_type = parse_packet_type(packet_type)
    return hci_parser.decode_hci(packet_type, bytes(data), session)


def decode_l2cap(data: bytes, session: Session) -> DecodeNode:
    load_builtin_plugins()
    return l2cap_parser.decode_l2cap(bytes(data), session)


@dataclass
class DecodeStats:
    packets: int = 0
    with_errors: int = 0


def decode_stream(
    packets: Iterable[tuple[HciPacketType | int, bytes]],
    session: Session | None = None,
    stats: DecodeStats | None = None,
) -> Iterator[DecodeNode]:
    """Decode packets in capture order against one session."""
    session = session if session is not None else new_session()
    for packet_type, data in packets:
        node = decode_hci(packet_type, data, session)
        if stats is not None:
            stats.packets += 1
            if not node.ok:
                stats.with_errors += 1
        yield node
    logger.debug("decoded stream, %d channel record(s) in session", len(session.channels))
