"""
L2CAP (BR/EDR) symbol tables.
"""

from __future__ import annotations


# Fixed channel identifiers; 0x0040-0xFFFF are dynamically allocated.
CID_NULL = 0x0000
CID_SIGNALING = 0x0001
CID_CONNECTIONLESS = 0x0002
CID_ATT = 0x0004
CID_LE_SIGNALING = 0x0005
CID_LE_SMP = 0x0006
CID_BREDR_SMP = 0x0007
CID_DYNAMIC_FIRST = 0x0040
CID_DYNAMIC_LAST = 0xFFFF

DYNAMIC_CID_RANGE = range(CID_DYNAMIC_FIRST, CID_DYNAMIC_LAST + 1)

# Signaling command codes
SIG_COMMAND_REJECT = 0x01
SIG_CONNECTION_REQ = 0x02
SIG_CONNECTION_RSP = 0x03
SIG_CONFIGURATION_REQ = 0x04
SIG_CONFIGURATION_RSP = 0x05
SIG_DISCONNECTION_REQ = 0x06
SIG_DISCONNECTION_RSP = 0x07
SIG_ECHO_REQ = 0x08
SIG_ECHO_RSP = 0x09
SIG_INFORMATION_REQ = 0x0A
SIG_INFORMATION_RSP = 0x0B

SIGNAL_NAMES: dict[int, str] = {
    SIG_COMMAND_REJECT: "Command Reject",
    SIG_CONNECTION_REQ: "Connection Request",
    SIG_CONNECTION_RSP: "Connection Response",
    SIG_CONFIGURATION_REQ: "Configuration Request",
    SIG_CONFIGURATION_RSP: "Configuration Response",
    SIG_DISCONNECTION_REQ: "Disconnection Request",
    SIG_DISCONNECTION_RSP: "Disconnection Response",
    SIG_ECHO_REQ: "Echo Request",
    SIG_ECHO_RSP: "Echo Response",
    SIG_INFORMATION_REQ: "Information Request",
    SIG_INFORMATION_RSP: "Information Response",
}

CONNECTION_RESULT_NAMES: dict[int, str] = {
    0x0000: "Connection Accepted",
    0x0001: "Connection Pending",
    0x0002: "Connection Refused - PSM Not Supported",
    0x0003: "Connection Refused - Security Block",
    0x0004: "Connection Refused - No Resources Available",
    0x0006: "Connection Refused - Invalid Source CID",
    0x0007: "Connection Refused - Source CID Already Allocated",
    0x000B: "Connection Refused - Unacceptable Parameters",
}

CONNECTION_STATUS_NAMES: dict[int, str] = {
    0x0000: "No Further Information Available",
    0x0001: "Authentication Pending",
    0x0002: "Authorization Pending",
}

CONFIGURATION_RESULT_NAMES: dict[int, str] = {
    0x0000: "Success",
    0x0001: "Failure - Unacceptable Parameters",
    0x0002: "Failure - Rejected",
    0x0003: "Failure - Unknown Options",
    0x0004: "Pending",
    0x0005: "Failure - Flow Spec Rejected",
}

INFO_TYPE_NAMES: dict[int, str] = {
    0x0001: "Connectionless MTU",
    0x0002: "Extended Features Supported",
    0x0003: "Fixed Channels Supported",
}

INFO_RESULT_NAMES: dict[int, str] = {
    0x0000: "Success",
    0x0001: "Not Supported",
}

# Configuration option types (bit 7 is the hint flag).
OPT_MTU = 0x01
OPT_FLUSH_TIMEOUT = 0x02
OPT_QOS = 0x03
OPT_RETRANSMISSION = 0x04
OPT_FCS = 0x05
OPT_EXTENDED_FLOW_SPEC = 0x06
OPT_EXTENDED_WINDOW_SIZE = 0x07

CONFIG_OPTION_NAMES: dict[int, str] = {
    OPT_MTU: "MTU",
    OPT_FLUSH_TIMEOUT: "Flush Timeout",
    OPT_QOS: "QoS",
    OPT_RETRANSMISSION: "Retransmission and Flow Control",
    OPT_FCS: "FCS",
    OPT_EXTENDED_FLOW_SPEC: "Extended Flow Specification",
    OPT_EXTENDED_WINDOW_SIZE: "Extended Window Size",
}

MIN_MTU = 48
DEFAULT_MTU = 672

PSM_SDP = 0x0001
PSM_RFCOMM = 0x0003

PSM_NAMES: dict[int, str] = {
    PSM_SDP: "SDP",
    PSM_RFCOMM: "RFCOMM",
    0x0005: "TCS-BIN",
    0x000F: "BNEP",
    0x0011: "HID Control",
    0x0013: "HID Interrupt",
    0x0017: "AVCTP",
    0x0019: "AVDTP",
    0x001B: "AVCTP-Browsing",
    0x001F: "ATT",
}
