"""
Tests for HCI command, event and data packet decoding.
"""

from __future__ import annotations

import pytest

from hcidissect import HciPacketType, decode_hci, render
from hcidissect.core.parsed import DecodeStatus
from hcidissect.core.parsers.hci_tables import HCI_STATUS_NAMES, opcode_names, parse_packet_type, split_opcode


def _decode(packet_type, hex_text: str, session):
    return decode_hci(packet_type, bytes.fromhex(hex_text.replace(" ", "")), session)


class TestCommands:
    def test_reset(self, session):
        node = _decode(HciPacketType.CMD, "03 0c 00", session)
        values, locations = render(node)
        assert node.type_name == "HCI Command"
        assert values == {
            "Opcode": "0xc03",
            "OCF": "0x3",
            "OGF": "0x3(Controller & Baseband)",
            "Command": "Reset",
            "Parameter_Total_Length": "0x0",
        }
        assert locations == {
            "Opcode": "(0,2)",
            "OCF": "(0,2),bit(0,10)",
            "OGF": "(1,1),bit(2,6)",
            "Command": "(0,2)",
            "Parameter_Total_Length": "(2,1)",
        }
        assert node.ok

    def test_inquiry(self, session):
        node = _decode("cmd", "01 04 05 33 8b 9e 08 00", session)
        values, locations = render(node)
        assert values["Command"] == "Inquiry"
        assert values["OGF"] == "0x1(Link Control)"
        assert values["LAP"] == "0x9e8b33"
        assert values["Inquiry_Length"] == "0x8"
        assert locations["LAP"] == "(3,3)"
        assert locations["Inquiry_Length"] == "(6,1)"
        assert locations["Num_Responses"] == "(7,1)"
        assert node.ok

    @pytest.mark.parametrize(
        "params,bad",
        [
            ("00 00 00 08 00", "LAP"),
            ("40 8b 9e 08 00", "LAP"),
            ("33 8b 9e 00 00", "Inquiry_Length"),
            ("33 8b 9e 31 00", "Inquiry_Length"),
        ],
    )
    def test_inquiry_out_of_range(self, session, params, bad):
        node = _decode(HciPacketType.CMD, "01 04 05 " + params, session)
        assert [f.key for f in node.errors()] == [bad]
        _values, locations = render(node)
        assert locations[bad].endswith(",status=1")

    def test_inquiry_range_edges_accepted(self, session):
        assert _decode(HciPacketType.CMD, "01 04 05 00 8b 9e 01 00", session).ok
        assert _decode(HciPacketType.CMD, "01 04 05 3f 8b 9e 30 ff", session).ok

    def test_parameter_length_mismatch(self, session):
        node = _decode(HciPacketType.CMD, "03 0c 01", session)
        assert not node.find("Parameter_Total_Length").ok

    def test_trailing_bytes_after_parameters(self, session):
        node = _decode(HciPacketType.CMD, "03 0c 00 aa", session)
        assert not node.find("Parameter_Total_Length").ok
        trailing = node.find("Trailing_Bytes")
        assert trailing.location.render() == "(3,1)"

    def test_named_command_without_decoder(self, session):
        node = _decode(HciPacketType.CMD, "09 10 01 aa", session)
        values, locations = render(node)
        assert values["Command"] == "Read_BD_ADDR"
        assert values["Parameters"] == "aa"
        assert locations["Parameters"] == "(3,1)"
        assert node.ok

    def test_unknown_ocf(self, session):
        node = _decode(HciPacketType.CMD, "ff 0f 00", session)
        values, _ = render(node)
        assert values["OGF"] == "0x3(Controller & Baseband)"
        assert values["Command"] == "Undefined"
        assert [f.key for f in node.errors()] == ["Command"]

    def test_unknown_ogf(self, session):
        node = _decode(HciPacketType.CMD, "01 fc 00", session)
        values, _ = render(node)
        assert values["OGF"] == "0x3f"
        assert {f.key for f in node.errors()} == {"OGF", "Command"}

    def test_truncated_opcode(self, session):
        node = _decode(HciPacketType.CMD, "03", session)
        values, locations = render(node)
        assert list(values) == ["Opcode"]
        assert locations["Opcode"] == "(0,1),status=1"

    def test_empty_command(self, session):
        node = _decode(HciPacketType.CMD, "", session)
        assert render(node)[1] == {"Opcode": "(0,0),status=1"}


class TestEvents:
    def test_command_complete_reset(self, session):
        node = _decode(HciPacketType.EVT, "0e 04 01 03 0c 00", session)
        values, locations = render(node)
        assert node.type_name == "HCI Event"
        assert values == {
            "Event_Code": "0xe(Command_Complete)",
            "Parameter_Total_Length": "0x4",
            "Num_HCI_Command_Packets": "0x1",
            "Command_Opcode": "0xc03",
            "OCF": "0x3",
            "OGF": "0x3(Controller & Baseband)",
            "Command": "Reset",
            "Status": "0x0(Success)",
        }
        assert locations["Command_Opcode"] == "(3,2)"
        assert locations["OGF"] == "(4,1),bit(2,6)"
        assert locations["Status"] == "(5,1)"
        assert node.ok

    def test_command_complete_zero_filled(self, session):
        node = _decode(HciPacketType.EVT, "0e 04 00 00 00 00", session)
        values, _ = render(node)
        assert values["Command"] == "No_Operation"
        assert values["OGF"] == "0x0"
        assert values["Return_Parameters"] == "00"
        assert node.ok

    def test_command_status(self, session):
        node = _decode(HciPacketType.EVT, "0f 04 00 01 01 04", session)
        values, _ = render(node)
        assert values["Status"] == "0x0(Success)"
        assert values["Command"] == "Inquiry"
        assert node.ok

    def test_command_status_failure_code(self, session):
        node = _decode(HciPacketType.EVT, "0f 04 0d 01 05 04", session)
        values, locations = render(node)
        assert values["Status"] == "0xd(Connection Rejected due to Limited Resources)"
        assert values["Command"] == "Create_Connection"
        assert locations["Status"] == "(2,1)"
        assert node.ok

    @pytest.mark.parametrize("status", [0x0B, 0x0D, 0x22, 0x3E, 0x45])
    def test_command_complete_failure_status(self, session, status):
        node = _decode(HciPacketType.EVT, f"0e 04 01 03 0c {status:02x}", session)
        assert render(node)[0]["Status"] == f"{status:#x}({HCI_STATUS_NAMES[status]})"
        assert node.ok

    def test_reserved_status_is_error(self, session):
        node = _decode(HciPacketType.EVT, "0f 04 2b 01 05 04", session)
        assert [f.key for f in node.errors()] == ["Status"]

    def test_named_event_without_decoder(self, session):
        node = _decode(HciPacketType.EVT, "13 01 aa", session)
        values, locations = render(node)
        assert values["Event_Code"] == "0x13(Number_Of_Completed_Packets)"
        assert locations["Parameters"] == "(2,1)"

    def test_unknown_event(self, session):
        node = _decode(HciPacketType.EVT, "ff 00", session)
        assert render(node)[0]["Event_Code"] == "0xff"
        assert [f.key for f in node.errors()] == ["Event_Code"]


class TestDataPackets:
    def test_acl_header_bits(self, session):
        node = _decode(HciPacketType.ACL, "0b 20 00 00", session)
        values, locations = render(node)
        assert values["Handle"] == "0xb"
        assert values["PB_Flag"] == "0x2(First Automatically Flushable)"
        assert values["BC_Flag"] == "0x0(Point-to-point)"
        assert locations["Handle"] == "(0,2),bit(0,12)"
        assert locations["PB_Flag"] == "(1,1),bit(4,2)"
        assert locations["BC_Flag"] == "(1,1),bit(6,2)"
        assert locations["Data_Total_Length"] == "(2,2)"

    def test_acl_continuing_fragment(self, session):
        node = _decode(HciPacketType.ACL, "0b 10 02 00 aa bb", session)
        values, locations = render(node)
        assert values["PB_Flag"] == "0x1(Continuing Fragment)"
        assert values["Continuing_Fragment"] == "aa bb"
        assert locations["Continuing_Fragment"] == "(4,2)"
        assert "L2CAP" not in values

    def test_acl_short_payload(self, session):
        node = _decode(HciPacketType.ACL, "0b 20 08 00 04 00", session)
        assert not node.find("Data_Total_Length").ok
        assert [f.key for f in node.fields if f.status == DecodeStatus.SUBTREE_START] == ["L2CAP"]

    def test_acl_trailing_bytes(self, session):
        node = _decode(HciPacketType.ACL, "0b 20 04 00 00 00 01 00 ee", session)
        trailing = node.find("Trailing_Bytes")
        assert trailing is not None
        assert trailing.location.render() == "(8,1)"
        assert not trailing.ok

    def test_sco(self, session):
        node = _decode(HciPacketType.SCO, "01 00 03 aa bb cc", session)
        values, locations = render(node)
        assert node.type_name == "HCI Synchronous Data"
        assert values["Packet_Status_Flag"] == "0x0(Correctly Received)"
        assert locations["Packet_Status_Flag"] == "(1,1),bit(4,2)"
        assert locations["Data"] == "(3,3)"
        assert node.ok

    def test_iso(self, session):
        node = _decode(HciPacketType.ISO, "01 20 03 00 aa bb cc", session)
        values, locations = render(node)
        assert values["PB_Flag"] == "0x2(Complete SDU)"
        assert values["ISO_Data_Load_Length"] == "0x3"
        assert locations["TS_Flag"] == "(1,1),bit(6,1)"
        assert locations["ISO_Data_Load_Length"] == "(2,2),bit(0,14)"
        assert locations["Data"] == "(4,3)"

    def test_undefined_packet_type(self, session):
        node = decode_hci(0x09, b"\x01\x02", session)
        assert node.type_name == "HCI Undefined"
        assert render(node)[1] == {"Packet_Type": "(0,0),status=1"}
        assert not node.ok


class TestTables:
    def test_split_opcode(self):
        assert split_opcode(0x0C03) == (0x03, 0x003)

    def test_opcode_names(self):
        assert opcode_names(0x0C03) == ("Controller & Baseband", "Reset")
        assert opcode_names(0xFC01) == (None, None)

    @pytest.mark.parametrize("text,expected", [("cmd", 1), ("ACL", 2), ("event", 4), ("0x05", 5), (3, 3)])
    def test_parse_packet_type(self, text, expected):
        assert parse_packet_type(text) == expected

    def test_parse_packet_type_unknown(self):
        with pytest.raises(ValueError):
            parse_packet_type("uart")
