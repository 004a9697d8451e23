from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from hamming_fec.errors import ConfigurationError
from hamming_fec.utils.bitops import flip_buffer_bit


@dataclass(frozen=True)
class Config:
    """
    Burst channel: runs of consecutive bit flips.

    probability: overall expected fraction of flipped bits, in [0, 1]
    max_burst: longest run of flips; keep it <= groups per interleaving
      so a burst never puts two flips into the same code block.

    A run starts with probability rate = p / ((1 + max_burst) / 2) and is
    1..max_burst bits long (uniform), so on average p of all bits flip.
    Scanning resumes after the run.
    """
    probability: float = 0.01
    max_burst: int = 8


def start_rate(cfg: Any) -> float:
    """Per-bit probability of starting a run."""
    p = _get_probability(cfg)
    max_burst = _get_max_burst(cfg)
    if max_burst < 2:
        return p
    return p / ((1 + max_burst) / 2.0)


def buffer_size(cfg: Any) -> int:
    """Bytes per buffer, sized so a buffer expects about max_burst run starts."""
    rate = start_rate(cfg)
    if rate == 0.0:
        return 4096
    return max(1, round(_get_max_burst(cfg) / rate / 8.0))


def distort(buf: bytearray, *, cfg: Any, rng: np.random.Generator) -> int:
    """Flip runs of bits in `buf` in place. Returns the number of flipped bits."""
    rate = start_rate(cfg)
    max_burst = _get_max_burst(cfg)
    nbits = len(buf) * 8
    if rate == 0.0 or nbits == 0:
        return 0

    flipped = 0
    addr = 0
    while addr < nbits:
        if rng.random() < rate:
            end = min(addr + 1 + int(rng.integers(max_burst)), nbits)
            while addr < end:
                flip_buffer_bit(buf, addr)
                flipped += 1
                addr += 1
        else:
            addr += 1
    return flipped


def _get_probability(cfg: Any) -> float:
    p = getattr(cfg, "probability", None)
    if p is None:
        raise AttributeError("cfg missing required attribute: probability")
    if not isinstance(p, (int, float)) or isinstance(p, bool):
        raise TypeError("cfg.probability must be a number")
    if not (0.0 <= p <= 1.0):
        raise ConfigurationError("cfg.probability must be in [0, 1]")
    return float(p)


def _get_max_burst(cfg: Any) -> int:
    mb = getattr(cfg, "max_burst", None)
    if mb is None:
        raise AttributeError("cfg missing required int attribute: max_burst")
    if not isinstance(mb, int) or isinstance(mb, bool):
        raise TypeError("cfg.max_burst must be int")
    if mb < 1:
        raise ConfigurationError("cfg.max_burst must be >= 1")
    return mb
