from __future__ import annotations

# Import built-in payload decoders to register them.
from hcidissect.plugins.protocols.rfcomm import decode_rfcomm  # noqa: F401
from hcidissect.plugins.protocols.sdp import decode_sdp  # noqa: F401
