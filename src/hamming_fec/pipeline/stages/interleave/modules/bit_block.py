from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from hamming_fec.errors import InterleaveConfigError
from hamming_fec.utils.bitops import bits_to_bytes, bytes_to_bits


def block_interleave(source: bytes, groups: int) -> bytes:
    """
    Bit-level block interleaver.

    The buffer is read as `groups` rows of `block_size` bits
    (block_size = len(source) * 8 / groups) and read out column by column,
    so bit i*block_size + j lands on j*groups + i. That is a transpose of
    the bit matrix; transposing again with groups = block_size undoes it.
    """
    if not isinstance(source, (bytes, bytearray)):
        raise TypeError("block_interleave: source must be bytes-like")
    if not isinstance(groups, int) or isinstance(groups, bool):
        raise TypeError("groups must be int")

    nbits = len(source) * 8
    if groups <= 0 or nbits % groups != 0:
        raise InterleaveConfigError(
            f"groups={groups} does not evenly divide the bit length {nbits}"
        )
    if nbits == 0:
        return b""

    block_size = nbits // groups
    matrix = bytes_to_bits(source).reshape(groups, block_size)
    return bits_to_bytes(np.ascontiguousarray(matrix.T).reshape(-1))


def deinterleave_groups(nbytes: int, groups: int) -> int:
    """Group count that reverses block_interleave(groups) on an nbytes buffer."""
    nbits = nbytes * 8
    if groups <= 0 or nbits % groups != 0:
        raise InterleaveConfigError(
            f"groups={groups} does not evenly divide the bit length {nbits}"
        )
    return nbits // groups


# ----------------------------
# Normalized module surface
# ----------------------------

@dataclass(frozen=True)
class Config:
    """
    Bit-matrix transpose interleaver. Length-preserving, no padding.

    groups: rows of the matrix, usually the number of code blocks per frame.
    The input bit length must be a multiple of groups.
    """
    groups: int = 8


def tx(data: bytes, *, cfg: Any) -> bytes:
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("tx: data must be bytes-like")
    return block_interleave(bytes(data), _get_groups(cfg))


def rx(data: bytes, *, cfg: Any) -> bytes:
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("rx: data must be bytes-like")
    b = bytes(data)
    if len(b) == 0:
        return b
    return block_interleave(b, deinterleave_groups(len(b), _get_groups(cfg)))


def _get_groups(cfg: Any) -> int:
    groups = getattr(cfg, "groups", None)
    if groups is None:
        raise AttributeError("cfg missing required int attribute: groups")
    if not isinstance(groups, int) or isinstance(groups, bool):
        raise TypeError("cfg.groups must be int")
    if groups <= 0:
        raise InterleaveConfigError("cfg.groups must be > 0")
    return groups
