from __future__ import annotations

from hcidissect.core.dispatch import DecodeContext
from hcidissect.core.parsers.l2cap_tables import PSM_SDP
from hcidissect.core.plugins import register_psm
from hcidissect.core.reader import FieldReader


SDP_PDU_NAMES: dict[int, str] = {
    0x01: "SDP_ErrorResponse",
    0x02: "SDP_ServiceSearchRequest",
    0x03: "SDP_ServiceSearchResponse",
    0x04: "SDP_ServiceAttributeRequest",
    0x05: "SDP_ServiceAttributeResponse",
    0x06: "SDP_ServiceSearchAttributeRequest",
    0x07: "SDP_ServiceSearchAttributeResponse",
}


@register_psm(PSM_SDP, "SDP")
def decode_sdp(reader: FieldReader, ctx: DecodeContext) -> None:
    # Header only. SDP fields use Bluetooth network byte order (big-endian),
    # unlike the little-endian HCI and L2CAP headers.
    with reader.subtree("SDP"):
        reader.uint("PDU_ID", 1, names=SDP_PDU_NAMES)
        reader.uint("Transaction_ID", 2, byteorder="big")
        available = reader.remaining - 2
        length = reader.uint("Parameter_Length", 2, valid=lambda v: v == available, byteorder="big")
        if length is not None and reader.remaining:
            reader.raw("Parameters")
