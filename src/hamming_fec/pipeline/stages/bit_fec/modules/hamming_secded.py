from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Any, Optional
import math

import numpy as np

from hamming_fec.errors import (
    ConfigurationError,
    DecodeError,
    MalformedBlockError,
    UncorrectableBlockError,
)
from hamming_fec.utils.bitops import (
    bit_of_value,
    bits_to_bytes,
    byte_and_bit,
    bytes_to_bits,
    copy_bit,
    flip_buffer_bit,
    is_power_of_two,
)


# ----------------------------
# Code geometry
# ----------------------------

def parity_bit_count(data_per_block: int) -> int:
    """Hamming parity bits for a block of `data_per_block` bytes (extended parity excluded)."""
    _check_data_per_block(data_per_block)
    return data_per_block.bit_length() + 3


def total_bit_count(data_per_block: int) -> int:
    """Data bits + parity bits + the extended parity bit at address 0."""
    return data_per_block * 8 + parity_bit_count(data_per_block) + 1


def code_size(data_per_block: int) -> int:
    """
    Code block length in bytes.
    1 -> 2 bytes (13,8); 8 -> 9 bytes (72,64).
    """
    return math.ceil(total_bit_count(data_per_block) / 8)


@lru_cache(maxsize=64)
def _data_addresses(total_bits: int) -> np.ndarray:
    # 0, 1 and 2 are always parity, the shortest code is (4,1)
    addrs = [a for a in range(3, total_bits) if not is_power_of_two(a)]
    out = np.asarray(addrs, dtype=np.int64)
    out.setflags(write=False)
    return out


# ----------------------------
# Encoder
# ----------------------------

def encode_block(data: bytes) -> bytes:
    """
    SEC-DED encode one data block. The code length follows len(data).

    Layout (global bit addresses, MSB-first):
      - 0: extended parity (XOR of addresses 1..total_bits-1)
      - 1, 2, 4, 8, ...: Hamming parity
      - everything else from 3 upward: data bits in order
      - trailing pad bits up to the byte boundary are 0
    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("encode_block: data must be bytes-like")

    n = len(data)
    parity_bits = parity_bit_count(n)
    total_bits = total_bit_count(n)

    bits = np.zeros(code_size(n) * 8, dtype=np.uint8)
    addrs = _data_addresses(total_bits)
    src = bytes_to_bits(data)
    k = min(addrs.size, src.size)
    bits[addrs[:k]] = src[:k]

    for bitwise in range(parity_bits):
        covered = addrs[[bit_of_value(int(a), bitwise) == 1 for a in addrs]]
        if int(bits[covered].sum()) & 1:
            bits[1 << bitwise] = 1

    bits[0] = int(bits[1:total_bits].sum()) & 1
    return bits_to_bytes(bits)


# ----------------------------
# Decoder / corrector
# ----------------------------

class Syndrome(Enum):
    CLEAN = "clean"
    EXTENDED_PARITY = "extended_parity"  # only bit 0 flipped, data untouched
    SINGLE = "single"
    DOUBLE = "double"


def classify_block(block: bytes) -> tuple[Syndrome, int]:
    """
    Classify a code block.

    error_addr is the XOR of the addresses of every set bit (address 0
    contributes nothing), parity is the XOR of every bit including the
    extended parity bit:

      error_addr  parity  ->
      0           0          CLEAN
      0           1          EXTENDED_PARITY
      != 0        1          SINGLE (bit error_addr is wrong)
      != 0        0          DOUBLE

    Three or more flips are not distinguishable from the above and may be
    miscorrected. A single-error syndrome pointing outside the block can only
    come from such noise or from input that is not a code block at all; it is
    reported as MalformedBlockError.
    """
    if not isinstance(block, (bytes, bytearray)):
        raise TypeError("classify_block: block must be bytes-like")

    set_addrs = np.flatnonzero(bytes_to_bits(block))
    error_addr = int(np.bitwise_xor.reduce(set_addrs)) if set_addrs.size else 0
    parity = int(set_addrs.size) & 1

    if error_addr == 0:
        return (Syndrome.EXTENDED_PARITY if parity else Syndrome.CLEAN), 0
    if parity:
        if error_addr >= len(block) * 8:
            raise MalformedBlockError(
                f"error address {error_addr} outside a {len(block)}-byte block; input may not be a Hamming code block",
                error_addr=error_addr,
            )
        return Syndrome.SINGLE, error_addr
    return Syndrome.DOUBLE, error_addr


def correct_block(block: bytes) -> bytes:
    """
    0 flips: returned as is
    1 flip: returned corrected (a flipped extended parity bit is left alone)
    2 flips: UncorrectableBlockError
    """
    syndrome, error_addr = classify_block(block)
    if syndrome is Syndrome.DOUBLE:
        raise UncorrectableBlockError("two bit errors in one code block, cannot correct", error_addr=error_addr)
    return _apply_correction(block, syndrome, error_addr)


def _apply_correction(block: bytes, syndrome: Syndrome, error_addr: int) -> bytes:
    if syndrome is Syndrome.SINGLE:
        out = bytearray(block)
        flip_buffer_bit(out, error_addr)
        return bytes(out)
    return bytes(block)


def decode_block(block: bytes, data_size: int) -> bytes:
    """
    Strip parity from a (corrected) code block and return `data_size` bytes.
    Stops early if the block runs out of bits; missing bits stay 0.
    """
    if not isinstance(block, (bytes, bytearray)):
        raise TypeError("decode_block: block must be bytes-like")

    out = bytearray(data_size)
    n_src = len(block) * 8
    n_dst = data_size * 8

    dst = 0
    src = 3
    while src < n_src and dst < n_dst:
        if not is_power_of_two(src):
            sbyte, sbit = byte_and_bit(src)
            tbyte, tbit = byte_and_bit(dst)
            out[tbyte] = copy_bit(block[sbyte], sbit, out[tbyte], tbit)
            dst += 1
        src += 1
    return bytes(out)


# ----------------------------
# Normalized module surface
# ----------------------------

@dataclass(frozen=True)
class Config:
    """
    Extended Hamming (SEC-DED) block code over whole bytes.

    data_per_block: data bytes per code block.
      1 -> (13,8) in 2 bytes, 8 -> (72,64) in 9 bytes.

    tx pads a short final block with zeros; rx returns whole data blocks,
    so trimming belongs to the caller.
    """
    data_per_block: int = 8


def tx(data: bytes, *, cfg: Any) -> bytes:
    """Encode `data` block by block and concatenate the code blocks."""
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("tx: data must be bytes-like")

    dpb = _get_data_per_block(cfg)
    b = bytes(data)

    out = bytearray()
    for off in range(0, len(b), dpb):
        chunk = b[off : off + dpb]
        if len(chunk) < dpb:
            chunk = chunk + bytes(dpb - len(chunk))
        out += encode_block(chunk)
    return bytes(out)


def rx(data: bytes, *, cfg: Any) -> bytes:
    """Correct and decode concatenated code blocks. Raises the first DecodeError met."""
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("rx: data must be bytes-like")

    dpb = _get_data_per_block(cfg)
    cs = code_size(dpb)
    b = bytes(data)

    if len(b) % cs != 0:
        raise ValueError(f"rx: length {len(b)} not a multiple of code size {cs}")

    out = bytearray()
    for off in range(0, len(b), cs):
        rec = recover_block(b[off : off + cs], cfg=cfg)
        if rec.error is not None:
            raise rec.error
        out += rec.data
    return bytes(out)


def block_size(cfg: Any) -> int:
    """Code block length in bytes for this cfg."""
    return code_size(_get_data_per_block(cfg))


@dataclass(frozen=True)
class Recovery:
    """
    Result of correcting and decoding one code block.

    syndrome is None when the block is malformed. On a decode error `data`
    holds the block's data bits as received, uncorrected.
    """
    syndrome: Optional[Syndrome]
    error_addr: int
    data: bytes
    error: Optional[DecodeError] = None


def recover_block(block: bytes, *, cfg: Any) -> Recovery:
    """
    Correct and decode one code block without raising on channel damage.
    The caller decides what to do with `Recovery.error`.
    """
    if not isinstance(block, (bytes, bytearray)):
        raise TypeError("recover_block: block must be bytes-like")

    dpb = _get_data_per_block(cfg)
    cs = code_size(dpb)
    if len(block) != cs:
        raise ValueError(f"recover_block: expected {cs} bytes, got {len(block)}")

    try:
        syndrome, error_addr = classify_block(block)
    except MalformedBlockError as e:
        return Recovery(None, e.error_addr, decode_block(block, dpb), error=e)

    if syndrome is Syndrome.DOUBLE:
        err = UncorrectableBlockError("two bit errors in one code block, cannot correct", error_addr=error_addr)
        return Recovery(syndrome, error_addr, decode_block(block, dpb), error=err)

    return Recovery(syndrome, error_addr, decode_block(_apply_correction(block, syndrome, error_addr), dpb))


def _check_data_per_block(n: int) -> None:
    if not isinstance(n, int) or isinstance(n, bool):
        raise TypeError("data_per_block must be int")
    if n < 1:
        raise ConfigurationError("data_per_block must be >= 1")


def _get_data_per_block(cfg: Any) -> int:
    dpb = getattr(cfg, "data_per_block", None)
    if dpb is None:
        raise AttributeError("cfg missing required int attribute: data_per_block")
    _check_data_per_block(dpb)
    return dpb
