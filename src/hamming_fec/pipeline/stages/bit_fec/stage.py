from __future__ import annotations

from dataclasses import dataclass
from typing import Any
import importlib
import pkgutil


# Every bit_fec module provides Config, tx, rx, block_size and recover_block.
_MODULE_SURFACE = ("Config", "tx", "rx", "block_size", "recover_block")


@dataclass(frozen=True)
class Config:
    """
    Block FEC stage config.

    module: module name under modules/ (e.g. "hamming_secded")
    module_cfg: instance of that module's Config (or None -> defaults)
    """
    module: str = "hamming_secded"
    module_cfg: Any = None


def available_modules() -> list[str]:
    pkg = importlib.import_module(f"{__package__}.modules")
    return sorted(m.name for m in pkgutil.iter_modules(pkg.__path__) if not m.name.startswith("_"))


def _import_bit_fec_module(name: str):
    if not isinstance(name, str) or not name:
        raise ValueError("cfg.module must be a non-empty string")
    return importlib.import_module(f"{__package__}.modules.{name}")


def _resolve_module_and_cfg(cfg: Config):
    mod = _import_bit_fec_module(cfg.module)

    missing = [attr for attr in _MODULE_SURFACE if not hasattr(mod, attr)]
    if missing:
        raise AttributeError(f"FEC module '{cfg.module}' missing {', '.join(missing)}")

    module_cfg = cfg.module_cfg if cfg.module_cfg is not None else mod.Config()
    return mod, module_cfg


def block_size(*, cfg: Config) -> int:
    """Length in bytes of one code block produced by the configured module."""
    mod, module_cfg = _resolve_module_and_cfg(cfg)
    return mod.block_size(module_cfg)


def recover(block: bytes, *, cfg: Config):
    """
    Correct and decode a single code block.

    Returns the module's recovery record (syndrome, error_addr, data, error).
    Channel damage is reported through `.error`, never raised, so a stream
    decoder can apply its own policy.
    """
    if not isinstance(block, (bytes, bytearray)):
        raise TypeError("recover: block must be bytes-like")
    mod, module_cfg = _resolve_module_and_cfg(cfg)
    return mod.recover_block(bytes(block), cfg=module_cfg)


def tx(data: bytes, *, cfg: Config) -> bytes:
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("tx: data must be bytes-like")
    mod, module_cfg = _resolve_module_and_cfg(cfg)
    return mod.tx(bytes(data), cfg=module_cfg)


def rx(data: bytes, *, cfg: Config) -> bytes:
    """Decode whole code blocks; the first damaged block raises its DecodeError."""
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("rx: data must be bytes-like")
    mod, module_cfg = _resolve_module_and_cfg(cfg)
    return mod.rx(bytes(data), cfg=module_cfg)
