from __future__ import annotations

import numpy as np

# Two conventions live here and must stay apart:
#   - buffer addressing: global bit address, MSB-first inside each byte
#     (address 0 is the leftmost bit of byte 0)
#   - value probing: bit `pos` of an integer, LSB = 0


def bit_of_value(value: int, pos: int) -> int:
    """
    Bit `pos` of an integer, counted from the LSB.
    Example: bit_of_value(0b10, 0) == 0
    """
    return (value >> pos) & 1


def is_power_of_two(n: int) -> bool:
    """True for exactly one set bit. 0 is not a power of two."""
    return n > 0 and (n & (n - 1)) == 0


def byte_and_bit(addr: int) -> tuple[int, int]:
    """Map a global bit address to (byte index, bit index counted from the LSB)."""
    return addr // 8, 7 - (addr % 8)


def get_buffer_bit(buf: bytes, addr: int) -> int:
    byte_i, bit_i = byte_and_bit(addr)
    return (buf[byte_i] >> bit_i) & 1


def flip_bit(b: int, pos: int) -> int:
    """Flip bit `pos` (LSB = 0) of a byte and return the new byte."""
    return (b ^ (1 << pos)) & 0xFF


def flip_buffer_bit(buf: bytearray, addr: int) -> None:
    """Flip one bit of `buf` in place, using the global MSB-first address."""
    byte_i, bit_i = byte_and_bit(addr)
    buf[byte_i] = flip_bit(buf[byte_i], bit_i)


def copy_bit(source: int, source_index: int, target: int, target_index: int) -> int:
    """
    Copy bit `source_index` of `source` into bit `target_index` of `target`.
    Indices count from the LSB. Returns the resulting target byte.
    """
    if ((source >> source_index) & 1) != ((target >> target_index) & 1):
        return (target ^ (1 << target_index)) & 0xFF
    return target


def bytes_to_bits(data: bytes) -> np.ndarray:
    """Expand bytes MSB-first into a uint8 array of 0/1, index == buffer bit address."""
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("bytes_to_bits: data must be bytes-like")
    return np.unpackbits(np.frombuffer(bytes(data), dtype=np.uint8))


def bits_to_bytes(bits: np.ndarray) -> bytes:
    """Pack 0/1 bits MSB-first. A trailing partial byte is zero-filled."""
    bits = np.asarray(bits, dtype=np.uint8).reshape(-1)
    if bits.size == 0:
        return b""
    return np.packbits(bits & 1).tobytes()
