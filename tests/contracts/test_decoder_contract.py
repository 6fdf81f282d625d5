"""
Decoder Contract Tests.

Every decoder entry point MUST pass these tests: whatever bytes it is fed,
it returns a DecodeNode whose fields point inside the buffer and whose
subtree brackets are balanced.

Usage:
    class TestMyDecoder(DecoderContractMixin):
        @pytest.fixture
        def decoder(self):
            return lambda data, session: decode_hci(HciPacketType.CMD, data, session)

        @pytest.fixture
        def sample_packet(self):
            return bytes.fromhex("030c00")
"""

from __future__ import annotations

from abc import abstractmethod
from typing import Callable

import pytest


class DecoderContractMixin:
    """
    Mixin class containing contract tests for decoder entry points.

    Subclasses must provide:
    - decoder: fixture returning a callable (data, session) -> DecodeNode
    - sample_packet: fixture returning a well-formed packet for that decoder
    """

    @pytest.fixture
    @abstractmethod
    def decoder(self) -> Callable:
        """Return a callable (data, session) -> DecodeNode."""
        raise NotImplementedError

    @pytest.fixture
    @abstractmethod
    def sample_packet(self) -> bytes:
        """Return a well-formed packet."""
        raise NotImplementedError

    @pytest.fixture
    def decode(self, decoder, session):
        def _decode(data: bytes):
            return decoder(data, session)

        return _decode

    # ==================== Helpers ====================

    @staticmethod
    def _assert_locations_in_buffer(node, data: bytes) -> None:
        for item in node.fields:
            loc = item.location
            assert 0 <= loc.start_byte <= len(data), item
            assert loc.end_byte <= len(data), item
            if loc.byte_len == 0:
                # Only brackets and truncation markers may be empty.
                assert item.is_bracket or not item.ok, item

    @staticmethod
    def _assert_brackets_balanced(node) -> None:
        from hcidissect.core.parsed import DecodeStatus

        stack: list[str] = []
        for item in node.fields:
            if item.status == DecodeStatus.SUBTREE_START:
                stack.append(item.key)
            elif item.status == DecodeStatus.SUBTREE_END:
                assert stack, f"unmatched end of {item.key}"
                assert stack.pop() == item.key
        assert not stack

    # ==================== Behavioral Contract Tests ====================

    def test_returns_decode_node(self, decode, sample_packet):
        """Decoding returns a DecodeNode."""
        from hcidissect.core.parsed import DecodeNode

        node = decode(sample_packet)
        assert isinstance(node, DecodeNode)
        assert isinstance(node.type_name, str)

    def test_sample_packet_decodes_cleanly(self, decode, sample_packet):
        """A well-formed sample must decode without ERROR fields."""
        node = decode(sample_packet)
        assert node.ok, [f.to_dict() for f in node.errors()]

    def test_sample_locations_inside_buffer(self, decode, sample_packet):
        node = decode(sample_packet)
        self._assert_locations_in_buffer(node, sample_packet)
        self._assert_brackets_balanced(node)

    def test_empty_data(self, decode):
        """Empty input must not raise and must report the missing bytes."""
        from hcidissect.core.parsed import DecodeNode

        node = decode(b"")
        assert isinstance(node, DecodeNode)
        assert not node.ok
        self._assert_locations_in_buffer(node, b"")

    def test_every_truncation_is_handled(self, decode, sample_packet):
        """Every prefix of the sample decodes; no field points past the prefix."""
        for cut in range(len(sample_packet)):
            data = sample_packet[:cut]
            node = decode(data)
            self._assert_locations_in_buffer(node, data)
            self._assert_brackets_balanced(node)

    def test_zero_filled_buffer(self, decode, sample_packet):
        data = bytes(len(sample_packet))
        node = decode(data)
        self._assert_locations_in_buffer(node, data)
        self._assert_brackets_balanced(node)

    def test_trailing_garbage_is_located(self, decode, sample_packet):
        data = sample_packet + b"\xaa\xbb"
        node = decode(data)
        self._assert_locations_in_buffer(node, data)
        self._assert_brackets_balanced(node)

    def test_decode_is_repeatable(self, decoder, sample_packet):
        """Two fresh sessions give the same rendering."""
        from hcidissect.core.render import render
        from hcidissect.core.session import new_session

        first = render(decoder(sample_packet, new_session()))
        second = render(decoder(sample_packet, new_session()))
        assert first == second
