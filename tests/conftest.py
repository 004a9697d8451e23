from __future__ import annotations

from pathlib import Path


def repo_root() -> Path:
    """
    Find the repository root by walking upward until we find pyproject.toml.
    """
    start = Path(__file__).resolve()
    for p in [start] + list(start.parents):
        if (p / "pyproject.toml").exists():
            return p
    raise RuntimeError("repo_root(): could not find pyproject.toml walking upward")


def signed_bytes(values: list[int]) -> bytes:
    """Reference vectors are written as signed bytes (-128..127)."""
    return bytes(v & 0xFF for v in values)


SAMPLE_64 = b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789he"
SAMPLE_73 = b"abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789hello_world!"

# (72,64) code, 8 blocks per frame
FRAME_64 = signed_bytes([
    -114, 12, 68, 0, -119, -2, -15, 51,
    42, 84, 15, 14, -2, 0, -2, -15,
    -14, 55, 90, 1, -16, 1, 0, -2,
    -31, 39, 74, 1, -31, -2, 0, -2,
    -1, -31, 39, 74, -31, 31, 1, 0,
    -4, -29, 39, 73, -32, 28, -4, 0,
    -4, -29, 39, 73, -4, -32, 3, 0,
    -3, -29, 38, 73, -4, -30, -4, 0,
    -48, -3, -29, 102, -88, 29, 30, 3,
])

# second frame produced by SAMPLE_73 (9 data bytes, zero-filled)
FRAME_73_TAIL = signed_bytes([
    0, -64, -64, 0, 0, -64, -64, 0,
    0, -128, -64, 0, 0, 0, -128, -64,
    -64, 0, -128, -128, 0, 64, 0, -128,
    -128, 0, -128, -128, -128, -128, 0, -128,
    -128, 0, -128, -128, -128, -128, -128, 0,
    -128, -128, -128, 0, -128, -128, -128, 0,
    -128, -128, 0, -128, -128, -128, -128, 0,
    -128, -128, -128, 0, 0, -128, 0, 0,
    0, -128, -128, 0, -128, -128, 0, 0,
])
