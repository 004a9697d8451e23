"""
Exception hierarchy for the codec.

Everything derives from HammingFECError. Configuration and decode errors
also derive from ValueError so callers that only catch ValueError keep
working.
"""
from __future__ import annotations

from typing import Optional


class HammingFECError(Exception):
    """Base exception for all codec errors."""


class ConfigurationError(HammingFECError, ValueError):
    """Raised when a stage or pipeline configuration is invalid."""


class InterleaveConfigError(ConfigurationError):
    """Raised when the interleaving group count does not divide the bit length."""


class DecodeError(HammingFECError, ValueError):
    """
    Raised when a code block cannot be turned back into data.

    error_addr is the syndrome (XOR of the set-bit addresses) of the bad block.
    block_index is filled in by the stream decoder, None for a single block.
    """

    def __init__(self, message: str, *, error_addr: int, block_index: Optional[int] = None):
        super().__init__(message)
        self.error_addr = error_addr
        self.block_index = block_index


class UncorrectableBlockError(DecodeError):
    """Two bit flips were detected inside one code block."""


class MalformedBlockError(DecodeError):
    """The syndrome points outside the block: input is probably not a code block."""
