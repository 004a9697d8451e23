from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from hamming_fec.errors import ConfigurationError


@dataclass(frozen=True)
class Config:
    """
    Memoryless bit-flip channel: every bit is flipped with probability p.

    probability: per-bit flip probability in [0, 1] (0 -> passthrough)
    buffer_size: bytes read from the stream per buffer
    """
    probability: float = 0.01
    buffer_size: int = 512


def buffer_size(cfg: Any) -> int:
    bs = getattr(cfg, "buffer_size", None)
    if bs is None:
        raise AttributeError("cfg missing required int attribute: buffer_size")
    if not isinstance(bs, int) or isinstance(bs, bool):
        raise TypeError("cfg.buffer_size must be int")
    if bs <= 0:
        raise ConfigurationError("cfg.buffer_size must be > 0")
    return bs


def distort(buf: bytearray, *, cfg: Any, rng: np.random.Generator) -> int:
    """Flip bits of `buf` in place. Returns the number of flipped bits."""
    p = _get_probability(cfg)
    if p == 0.0 or len(buf) == 0:
        return 0

    bits = np.unpackbits(np.frombuffer(bytes(buf), dtype=np.uint8))
    mask = rng.random(bits.size) < p
    bits ^= mask.astype(np.uint8)
    buf[:] = np.packbits(bits).tobytes()
    return int(mask.sum())


def _get_probability(cfg: Any) -> float:
    p = getattr(cfg, "probability", None)
    if p is None:
        raise AttributeError("cfg missing required attribute: probability")
    if not isinstance(p, (int, float)) or isinstance(p, bool):
        raise TypeError("cfg.probability must be a number")
    if not (0.0 <= p <= 1.0):
        raise ConfigurationError("cfg.probability must be in [0, 1]")
    return float(p)
