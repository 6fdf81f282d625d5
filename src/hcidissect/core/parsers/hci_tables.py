"""
HCI symbol tables.

Pure data plus name lookups; no decoding happens here so the tables can be
shared by command, event and display code without building fake packets.
"""

from __future__ import annotations

from enum import IntEnum


class HciPacketType(IntEnum):
    # H4 packet indicator values.
    CMD = 0x01
    ACL = 0x02
    SCO = 0x03
    EVT = 0x04
    ISO = 0x05


PACKET_TYPE_NAMES: dict[int, str] = {
    HciPacketType.CMD: "HCI Command",
    HciPacketType.ACL: "HCI ACL Data",
    HciPacketType.SCO: "HCI Synchronous Data",
    HciPacketType.EVT: "HCI Event",
    HciPacketType.ISO: "HCI ISO Data",
}

PACKET_TYPE_ALIASES: dict[str, HciPacketType] = {
    "cmd": HciPacketType.CMD,
    "command": HciPacketType.CMD,
    "acl": HciPacketType.ACL,
    "sco": HciPacketType.SCO,
    "evt": HciPacketType.EVT,
    "event": HciPacketType.EVT,
    "iso": HciPacketType.ISO,
}


def parse_packet_type(value: str | int) -> HciPacketType:
    if isinstance(value, int):
        return HciPacketType(value)
    text = str(value).strip().lower()
    if text in PACKET_TYPE_ALIASES:
        return PACKET_TYPE_ALIASES[text]
    try:
        return HciPacketType(int(text, 0))
    except ValueError as e:
        raise ValueError(f"Unknown HCI packet type: {value!r}") from e


# Opcode Group Field
OGF_LINK_CONTROL = 0x01
OGF_LINK_POLICY = 0x02
OGF_CONTROLLER_BASEBAND = 0x03
OGF_INFORMATIONAL = 0x04
OGF_STATUS = 0x05
OGF_TESTING = 0x06
OGF_LE_CONTROLLER = 0x08

OGF_NAMES: dict[int, str] = {
    OGF_LINK_CONTROL: "Link Control",
    OGF_LINK_POLICY: "Link Policy",
    OGF_CONTROLLER_BASEBAND: "Controller & Baseband",
    OGF_INFORMATIONAL: "Informational Parameters",
    OGF_STATUS: "Status Parameters",
    OGF_TESTING: "Testing",
    OGF_LE_CONTROLLER: "LE Controller",
}

OCF_INQUIRY = 0x0001
OCF_RESET = 0x0003

# Opcode Command Field names, per group.
OCF_NAMES: dict[int, dict[int, str]] = {
    OGF_LINK_CONTROL: {
        0x0001: "Inquiry",
        0x0002: "Inquiry_Cancel",
        0x0005: "Create_Connection",
        0x0006: "Disconnect",
        0x0009: "Accept_Connection_Request",
        0x000A: "Reject_Connection_Request",
        0x0019: "Remote_Name_Request",
    },
    OGF_LINK_POLICY: {
        0x0001: "Hold_Mode",
        0x0003: "Sniff_Mode",
        0x0004: "Exit_Sniff_Mode",
    },
    OGF_CONTROLLER_BASEBAND: {
        0x0001: "Set_Event_Mask",
        0x0003: "Reset",
        0x0005: "Set_Event_Filter",
        0x0013: "Write_Local_Name",
        0x0014: "Read_Local_Name",
        0x001A: "Write_Scan_Enable",
    },
    OGF_INFORMATIONAL: {
        0x0001: "Read_Local_Version_Information",
        0x0002: "Read_Local_Supported_Commands",
        0x0003: "Read_Local_Supported_Features",
        0x0005: "Read_Buffer_Size",
        0x0009: "Read_BD_ADDR",
    },
    OGF_STATUS: {
        0x0001: "Read_Failed_Contact_Counter",
        0x0005: "Read_RSSI",
    },
    OGF_TESTING: {
        0x0001: "Read_Loopback_Mode",
        0x0002: "Write_Loopback_Mode",
    },
    OGF_LE_CONTROLLER: {
        0x0001: "LE_Set_Event_Mask",
        0x0002: "LE_Read_Buffer_Size",
        0x000B: "LE_Set_Scan_Parameters",
        0x000C: "LE_Set_Scan_Enable",
    },
}


EVT_INQUIRY_COMPLETE = 0x01
EVT_COMMAND_COMPLETE = 0x0E
EVT_COMMAND_STATUS = 0x0F

EVENT_NAMES: dict[int, str] = {
    0x01: "Inquiry_Complete",
    0x02: "Inquiry_Result",
    0x03: "Connection_Complete",
    0x04: "Connection_Request",
    0x05: "Disconnection_Complete",
    0x07: "Remote_Name_Request_Complete",
    0x08: "Encryption_Change",
    0x0E: "Command_Complete",
    0x0F: "Command_Status",
    0x10: "Hardware_Error",
    0x13: "Number_Of_Completed_Packets",
    0x3E: "LE_Meta",
}


HCI_STATUS_NAMES: dict[int, str] = {
    0x00: "Success",
    0x01: "Unknown HCI Command",
    0x02: "Unknown Connection Identifier",
    0x03: "Hardware Failure",
    0x04: "Page Timeout",
    0x05: "Authentication Failure",
    0x06: "PIN or Key Missing",
    0x07: "Memory Capacity Exceeded",
    0x08: "Connection Timeout",
    0x09: "Connection Limit Exceeded",
    0x0A: "Synchronous Connection Limit To A Device Exceeded",
    0x0B: "Connection Already Exists",
    0x0C: "Command Disallowed",
    0x0D: "Connection Rejected due to Limited Resources",
    0x0E: "Connection Rejected due to Security Reasons",
    0x0F: "Connection Rejected due to Unacceptable BD_ADDR",
    0x10: "Connection Accept Timeout Exceeded",
    0x11: "Unsupported Feature or Parameter Value",
    0x12: "Invalid HCI Command Parameters",
    0x13: "Remote User Terminated Connection",
    0x14: "Remote Device Terminated Connection due to Low Resources",
    0x15: "Remote Device Terminated Connection due to Power Off",
    0x16: "Connection Terminated by Local Host",
    0x17: "Repeated Attempts",
    0x18: "Pairing Not Allowed",
    0x19: "Unknown LMP PDU",
    0x1A: "Unsupported Remote Feature",
    0x1B: "SCO Offset Rejected",
    0x1C: "SCO Interval Rejected",
    0x1D: "SCO Air Mode Rejected",
    0x1E: "Invalid LMP Parameters / Invalid LL Parameters",
    0x1F: "Unspecified Error",
    0x20: "Unsupported LMP Parameter Value / Unsupported LL Parameter Value",
    0x21: "Role Change Not Allowed",
    0x22: "LMP Response Timeout / LL Response Timeout",
    0x23: "LMP Error Transaction Collision / LL Procedure Collision",
    0x24: "LMP PDU Not Allowed",
    0x25: "Encryption Mode Not Acceptable",
    0x26: "Link Key cannot be Changed",
    0x27: "Requested QoS Not Supported",
    0x28: "Instant Passed",
    0x29: "Pairing With Unit Key Not Supported",
    0x2A: "Different Transaction Collision",
    0x2C: "QoS Unacceptable Parameter",
    0x2D: "QoS Rejected",
    0x2E: "Channel Classification Not Supported",
    0x2F: "Insufficient Security",
    0x30: "Parameter Out Of Mandatory Range",
    0x32: "Role Switch Pending",
    0x34: "Reserved Slot Violation",
    0x35: "Role Switch Failed",
    0x36: "Extended Inquiry Response Too Large",
    0x37: "Secure Simple Pairing Not Supported By Host",
    0x38: "Host Busy - Pairing",
    0x39: "Connection Rejected due to No Suitable Channel Found",
    0x3A: "Controller Busy",
    0x3B: "Unacceptable Connection Parameters",
    0x3C: "Advertising Timeout",
    0x3D: "Connection Terminated due to MIC Failure",
    0x3E: "Connection Failed to be Established / Synchronization Timeout",
    0x40: "Coarse Clock Adjustment Rejected but Will Try to Adjust Using Clock Dragging",
    0x41: "Type0 Submap Not Defined",
    0x42: "Unknown Advertising Identifier",
    0x43: "Limit Reached",
    0x44: "Operation Cancelled by Host",
    0x45: "Packet Too Long",
}


# ACL Packet_Boundary_Flag / Broadcast_Flag
ACL_PB_FIRST_NON_FLUSHABLE = 0b00
ACL_PB_CONTINUING = 0b01
ACL_PB_FIRST_FLUSHABLE = 0b10
ACL_PB_COMPLETE = 0b11

ACL_PB_NAMES: dict[int, str] = {
    ACL_PB_FIRST_NON_FLUSHABLE: "First Non-Automatically-Flushable",
    ACL_PB_CONTINUING: "Continuing Fragment",
    ACL_PB_FIRST_FLUSHABLE: "First Automatically Flushable",
    ACL_PB_COMPLETE: "Complete L2CAP PDU",
}

ACL_BC_NAMES: dict[int, str] = {
    0b00: "Point-to-point",
    0b01: "BR/EDR Broadcast",
}

SCO_STATUS_NAMES: dict[int, str] = {
    0b00: "Correctly Received",
    0b01: "Possibly Invalid",
    0b10: "No Data Received",
    0b11: "Partially Lost",
}

ISO_PB_NAMES: dict[int, str] = {
    0b00: "First Fragment",
    0b01: "Continuation Fragment",
    0b10: "Complete SDU",
    0b11: "Last Fragment",
}


def split_opcode(opcode: int) -> tuple[int, int]:
    """Return (ogf, ocf) of a 16-bit HCI opcode."""
    opcode &= 0xFFFF
    return opcode >> 10, opcode & 0x3FF


def opcode_names(opcode: int) -> tuple[str | None, str | None]:
    """Return (group_name, command_name) for an opcode; None where unknown."""
    ogf, ocf = split_opcode(opcode)
    group = OGF_NAMES.get(ogf)
    command = OCF_NAMES.get(ogf, {}).get(ocf)
    return group, command
