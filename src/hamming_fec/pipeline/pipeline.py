from __future__ import annotations

from dataclasses import dataclass
from typing import BinaryIO, Iterator, Optional
import io
import logging

from hamming_fec.pipeline.config import PipelineConfig

from hamming_fec.pipeline.stages.bit_fec import stage as bit_fec_stage
from hamming_fec.pipeline.stages.interleave import stage as interleave_stage
from hamming_fec.pipeline.stages.bit_fec.modules import hamming_secded
from hamming_fec.pipeline.stages.bit_fec.modules.hamming_secded import Syndrome
from hamming_fec.pipeline.stages.interleave.modules.bit_block import Config as BitBlockCfg

logger = logging.getLogger(__name__)


@dataclass
class DecodeStats:
    blocks: int = 0
    corrected: int = 0
    extended_parity: int = 0
    uncorrectable: int = 0


def _read_up_to(src: BinaryIO, n: int) -> bytes:
    """
    Read until n bytes or EOF. A raw stream may return short reads before EOF,
    so one read() call is not enough.
    """
    parts: list[bytes] = []
    got = 0
    while got < n:
        chunk = src.read(n - got)
        if not chunk:
            break
        parts.append(chunk)
        got += len(chunk)
    return b"".join(parts)


def _stage_cfgs(cfg: PipelineConfig):
    fec_cfg = bit_fec_stage.Config(
        module="hamming_secded",
        module_cfg=hamming_secded.Config(data_per_block=cfg.data_per_block),
    )
    il_cfg = interleave_stage.Config(
        module="bit_block",
        module_cfg=BitBlockCfg(groups=cfg.groups_per_interleaving),
    )
    return fec_cfg, il_cfg


# -------------------------
# TX: data -> frames
# -------------------------

def iter_encode(src: BinaryIO, *, cfg: PipelineConfig) -> Iterator[bytes]:
    """
    Yield one interleaved frame per `groups_per_interleaving` data blocks.
    The last frame is zero-filled; an all-zero data block encodes to all-zero bits.
    """
    fec_cfg, il_cfg = _stage_cfgs(cfg)
    read_size = cfg.data_per_block * cfg.groups_per_interleaving

    n = 0
    while True:
        chunk = _read_up_to(src, read_size)
        if not chunk:
            break
        if len(chunk) < read_size:
            chunk = chunk + bytes(read_size - len(chunk))

        x = bit_fec_stage.tx(chunk, cfg=fec_cfg)
        x = interleave_stage.tx(x, cfg=il_cfg)
        logger.debug("encode: frame %d, %d bytes", n, len(x))
        n += 1
        yield x


def encode_stream(src: BinaryIO, dst: BinaryIO, *, cfg: PipelineConfig) -> int:
    """Encode `src` into `dst`. Returns the number of bytes written."""
    written = 0
    for frame in iter_encode(src, cfg=cfg):
        dst.write(frame)
        written += len(frame)
    return written


# -------------------------
# RX: frames -> data
# -------------------------

def _recover_block(
    block: bytes,
    index: int,
    *,
    cfg: PipelineConfig,
    fec_cfg: bit_fec_stage.Config,
    stats: DecodeStats,
) -> Optional[bytes]:
    rec = bit_fec_stage.recover(block, cfg=fec_cfg)
    stats.blocks += 1

    if rec.error is not None:
        # double errors and malformed blocks share the uncorrectable policy
        stats.uncorrectable += 1
        err = rec.error
        if cfg.on_uncorrectable == "raise":
            raise type(err)(f"block {index}: {err}", error_addr=err.error_addr, block_index=index)
        logger.warning("decode: block %d uncorrectable (%s): %s", index, cfg.on_uncorrectable, err)
        if cfg.on_uncorrectable == "skip":
            return None
        return rec.data

    if rec.syndrome is Syndrome.SINGLE:
        stats.corrected += 1
        logger.debug("decode: block %d corrected bit %d", index, rec.error_addr)
    elif rec.syndrome is Syndrome.EXTENDED_PARITY:
        stats.extended_parity += 1
    return rec.data


def iter_decode(
    src: BinaryIO,
    *,
    cfg: PipelineConfig,
    stats: Optional[DecodeStats] = None,
) -> Iterator[bytes]:
    """
    Yield recovered data blocks in order.

    Each frame is de-interleaved by transposing again with
    groups = code_size * 8, then corrected and decoded block by block.
    A short final frame is zero-filled first.
    """
    fec_cfg, il_cfg = _stage_cfgs(cfg)
    stats = stats if stats is not None else DecodeStats()
    cs = bit_fec_stage.block_size(cfg=fec_cfg)
    frame_size = cfg.frame_size

    index = 0
    while True:
        chunk = _read_up_to(src, frame_size)
        if not chunk:
            break
        if len(chunk) < frame_size:
            logger.warning("decode: short frame (%d of %d bytes), zero-filled", len(chunk), frame_size)
            chunk = chunk + bytes(frame_size - len(chunk))

        frame = interleave_stage.rx(chunk, cfg=il_cfg)
        for off in range(0, frame_size, cs):
            data = _recover_block(frame[off : off + cs], index, cfg=cfg, fec_cfg=fec_cfg, stats=stats)
            index += 1
            if data is not None:
                yield data


def decode_stream(src: BinaryIO, dst: BinaryIO, *, cfg: PipelineConfig) -> DecodeStats:
    """
    Decode `src` into `dst`. Blocks are written as they are recovered, so
    on an abort everything before the bad block is already on `dst`.
    """
    stats = DecodeStats()
    for data in iter_decode(src, cfg=cfg, stats=stats):
        dst.write(data)
    logger.debug(
        "decode: %d blocks, %d corrected, %d uncorrectable",
        stats.blocks, stats.corrected, stats.uncorrectable,
    )
    return stats


# -------------------------
# In-memory helpers
# -------------------------

def tx(payload: bytes, *, cfg: PipelineConfig) -> bytes:
    if not isinstance(payload, (bytes, bytearray)):
        raise TypeError("tx: payload must be bytes-like")
    out = io.BytesIO()
    encode_stream(io.BytesIO(bytes(payload)), out, cfg=cfg)
    return out.getvalue()


def rx(data: bytes, *, cfg: PipelineConfig) -> bytes:
    """Decoded output is a whole number of data blocks; trim to the payload length yourself."""
    if not isinstance(data, (bytes, bytearray)):
        raise TypeError("rx: data must be bytes-like")
    out = io.BytesIO()
    decode_stream(io.BytesIO(bytes(data)), out, cfg=cfg)
    return out.getvalue()
