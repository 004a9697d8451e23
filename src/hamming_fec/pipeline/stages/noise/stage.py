from __future__ import annotations

from dataclasses import dataclass
from typing import Any, BinaryIO, Optional
import importlib
import logging
import pkgutil

import numpy as np

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Config:
    """
    Noise injection stage config. Test tooling, not part of TX/RX.

    module: noise policy under modules/ ("independent" or "burst")
    module_cfg: instance of that module's Config (or None -> defaults)
    """
    module: str = "independent"
    module_cfg: Any = None


@dataclass(frozen=True)
class NoiseResult:
    data: bytes
    flipped: int


def available_modules() -> list[str]:
    pkg = importlib.import_module(f"{__package__}.modules")
    names = [m.name for m in pkgutil.iter_modules(pkg.__path__)]
    return sorted([n for n in names if not n.startswith("_")])


def _import_noise_module(name: str):
    if not isinstance(name, str) or not name:
        raise ValueError("cfg.module must be a non-empty string")
    return importlib.import_module(f"{__package__}.modules.{name}")


def _resolve_module_and_cfg(cfg: Config):
    mod = _import_noise_module(cfg.module)

    for attr in ("Config", "buffer_size", "distort"):
        if not hasattr(mod, attr):
            raise AttributeError(f"noise module '{cfg.module}' missing {attr}")

    module_cfg = cfg.module_cfg if cfg.module_cfg is not None else mod.Config()
    return mod, module_cfg


def distort(data: bytes, *, cfg: Config, rng: Optional[np.random.Generator] = None) -> NoiseResult:
    """
    Corrupt an in-memory buffer in one pass. The output has the input's length.
    """
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("distort: data must be bytes-like")
    mod, module_cfg = _resolve_module_and_cfg(cfg)
    rng = rng if rng is not None else np.random.default_rng()

    buf = bytearray(data)
    flipped = mod.distort(buf, cfg=module_cfg, rng=rng)
    return NoiseResult(data=bytes(buf), flipped=flipped)


def distort_stream(
    src: BinaryIO,
    dst: BinaryIO,
    *,
    cfg: Config,
    rng: Optional[np.random.Generator] = None,
) -> int:
    """
    Copy `src` to `dst` one buffer at a time, flipping bits on the way.
    A short final read is written with its own length. Returns total flips.
    """
    mod, module_cfg = _resolve_module_and_cfg(cfg)
    rng = rng if rng is not None else np.random.default_rng()
    size = mod.buffer_size(module_cfg)

    total = 0
    nbytes = 0
    while True:
        chunk = src.read(size)
        if not chunk:
            break
        buf = bytearray(chunk)
        total += mod.distort(buf, cfg=module_cfg, rng=rng)
        dst.write(buf)
        nbytes += len(buf)

    logger.debug("noise[%s]: %d bits flipped in %d bytes", cfg.module, total, nbytes)
    return total
