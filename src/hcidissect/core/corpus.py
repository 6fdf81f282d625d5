from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from hcidissect.core.parsers.hci_tables import PACKET_TYPE_ALIASES, HciPacketType, parse_packet_type


@dataclass(frozen=True)
class RawPacket:
    packet_type: HciPacketType
    data: bytes
    index: int = 0
    source: str | None = None


def _iter_non_empty_lines(path: Path) -> Iterator[str]:
    with path.open("r", encoding="utf-8", errors="replace") as f:
        for line in f:
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            yield line


def parse_hex(text: str) -> bytes:
    # Allow "aa bb cc" or "aabbcc" or "0x.." tokens.
    cleaned = (
        text.replace("0x", "")
        .replace("0X", "")
        .replace(" ", "")
        .replace("\t", "")
        .replace(":", "")
        .replace("-", "")
    )
    if len(cleaned) % 2 != 0:
        raise ValueError(f"Invalid hex line length: {text!r}")
    return bytes.fromhex(cleaned)


def parse_packet_line(line: str, *, default_type: HciPacketType = HciPacketType.CMD) -> tuple[HciPacketType, bytes]:
    """Parse "acl: 02 20 ..." or a bare hex line using `default_type`."""
    head, sep, rest = line.partition(":")
    if sep and head.strip().lower() in PACKET_TYPE_ALIASES:
        return parse_packet_type(head.strip()), parse_hex(rest)
    return default_type, parse_hex(line)


def load_packets(path: Path, *, default_type: HciPacketType = HciPacketType.CMD) -> list[RawPacket]:
    packets: list[RawPacket] = []
    for idx, line in enumerate(_iter_non_empty_lines(path)):
        packet_type, data = parse_packet_line(line, default_type=default_type)
        packets.append(RawPacket(packet_type=packet_type, data=data, index=idx, source=str(path)))
    if not packets:
        raise ValueError(f"No packets found in hex file: {path}")
    return packets
