"""
Protocol layer decoders.

Each layer decodes into a shared DecodeNode through a FieldReader, so the
locations it emits are always in top-level buffer coordinates.

Design principle:
- Layer tables are plain data walked by core.dispatch
- The only mutable input is the Session passed in by the caller
- Upper-layer payloads (per PSM) live in plugins, looked up by registry
"""

from hcidissect.core.parsers.hci_parser import decode_hci
from hcidissect.core.parsers.hci_tables import HciPacketType, opcode_names
from hcidissect.core.parsers.l2cap_parser import decode_l2cap

__all__ = [
    "HciPacketType",
    "decode_hci",
    "decode_l2cap",
    "opcode_names",
]
