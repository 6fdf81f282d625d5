__version__ = "0.1.0"

from hcidissect.core.engine import decode_hci, decode_l2cap, new_session  # noqa: E402
from hcidissect.core.parsers.hci_tables import HciPacketType  # noqa: E402
from hcidissect.core.render import render  # noqa: E402
from hcidissect.core.session import ChannelRecord, Session  # noqa: E402

__all__ = [
    "ChannelRecord",
    "HciPacketType",
    "Session",
    "__version__",
    "decode_hci",
    "decode_l2cap",
    "new_session",
    "render",
]
