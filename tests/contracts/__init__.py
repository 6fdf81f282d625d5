"""
Contract tests package.

This package contains contract test mixins that every decoder entry point
must pass to ensure interface compliance.
"""

from tests.contracts.test_decoder_contract import DecoderContractMixin

__all__ = [
    "DecoderContractMixin",
]
