"""
Command-line front end for the Hamming codec.

Usage:
    hamming-fec encode <input> <output>
    hamming-fec decode <input> <output>
    hamming-fec distort <input> <output> [--probability P] [--max-burst N]

The defaults give (72,64) code blocks interleaved 8 per frame and a 1%
memoryless noise channel.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional, Sequence
import argparse
import logging
import sys

import numpy as np

from hamming_fec.errors import ConfigurationError, DecodeError
from hamming_fec.pipeline.config import ON_UNCORRECTABLE, PipelineConfig
from hamming_fec.pipeline.pipeline import decode_stream, encode_stream
from hamming_fec.pipeline.stages.noise import stage as noise_stage
from hamming_fec.pipeline.stages.noise.modules import burst, independent

logger = logging.getLogger(__name__)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


def format_binary(data: bytes) -> str:
    """
    Bytes as 8-digit binary, 4 per line, blank line every 16 bytes.
    """
    lines: list[str] = []
    row: list[str] = []
    for i, b in enumerate(data):
        row.append(f"{b:08b}")
        if (i + 1) % 4 == 0:
            lines.append(" ".join(row))
            row = []
            if (i + 1) % 16 == 0 and i + 1 < len(data):
                lines.append("")
    if row:
        lines.append(" ".join(row))
    return "\n".join(lines)


def _preview(path: Path, n: int) -> None:
    with path.open("rb") as f:
        head = f.read(n)
    print(f"\n{path.name} :\n\n{format_binary(head)}\n")


def _pipeline_cfg(args: argparse.Namespace) -> PipelineConfig:
    return PipelineConfig(
        data_per_block=args.data_per_block,
        groups_per_interleaving=args.groups,
        on_uncorrectable=args.on_uncorrectable,
    )


def _noise_cfg(args: argparse.Namespace) -> noise_stage.Config:
    if args.max_burst is not None:
        return noise_stage.Config(
            module="burst",
            module_cfg=burst.Config(probability=args.probability, max_burst=args.max_burst),
        )
    return noise_stage.Config(
        module="independent",
        module_cfg=independent.Config(probability=args.probability, buffer_size=args.buffer_size),
    )


def encode(input_path: Path, output_path: Path, *, cfg: PipelineConfig) -> int:
    with input_path.open("rb") as src, output_path.open("wb") as dst:
        written = encode_stream(src, dst, cfg=cfg)
    logger.info("encoded %s -> %s (%d bytes)", input_path, output_path, written)
    return written


def decode(input_path: Path, output_path: Path, *, cfg: PipelineConfig):
    with input_path.open("rb") as src, output_path.open("wb") as dst:
        stats = decode_stream(src, dst, cfg=cfg)
    logger.info(
        "decoded %s -> %s (%d blocks, %d corrected, %d uncorrectable)",
        input_path, output_path, stats.blocks, stats.corrected, stats.uncorrectable,
    )
    return stats


def distort(
    input_path: Path,
    output_path: Path,
    *,
    cfg: noise_stage.Config,
    rng: Optional[np.random.Generator] = None,
) -> int:
    with input_path.open("rb") as src, output_path.open("wb") as dst:
        flipped = noise_stage.distort_stream(src, dst, cfg=cfg, rng=rng)
    logger.info("distorted %s -> %s (%d bits flipped)", input_path, output_path, flipped)
    return flipped


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hamming-fec",
        description="SEC-DED Hamming codec with bit interleaving",
    )
    parser.add_argument(
        "--log-level", type=str.upper, choices=LOG_LEVELS, default="WARNING",
        help="Logging level (default: WARNING)",
    )
    parser.add_argument(
        "--preview", type=int, default=0, metavar="N",
        help="Print the first N bytes of input and output in binary",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    for name, help_text in (("encode", "Encode a file"), ("decode", "Decode a file")):
        p = subparsers.add_parser(name, help=help_text)
        p.add_argument("input", type=Path)
        p.add_argument("output", type=Path)
        p.add_argument("--data-per-block", type=int, default=8, help="Data bytes per code block")
        p.add_argument("--groups", type=int, default=8, help="Code blocks per interleaved frame")
        p.add_argument(
            "--on-uncorrectable", choices=ON_UNCORRECTABLE, default="raise",
            help="Decoder policy for blocks with two bit errors",
        )

    p = subparsers.add_parser("distort", help="Flip random bits in a file")
    p.add_argument("input", type=Path)
    p.add_argument("output", type=Path)
    p.add_argument("--probability", type=float, default=0.01, help="Bit flip probability")
    p.add_argument("--max-burst", type=int, default=None, help="Flip bursts of up to N bits")
    p.add_argument("--buffer-size", type=int, default=512, help="Bytes per buffer (independent mode)")
    p.add_argument("--seed", type=int, default=None, help="Seed for a reproducible run")

    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=args.log_level, format="%(levelname)s %(name)s: %(message)s")

    try:
        if args.command == "encode":
            print("Mode: Encode")
            encode(args.input, args.output, cfg=_pipeline_cfg(args))
        elif args.command == "decode":
            print("Mode: Decode")
            decode(args.input, args.output, cfg=_pipeline_cfg(args))
        else:
            print("Mode: Distort")
            flipped = distort(
                args.input, args.output,
                cfg=_noise_cfg(args),
                rng=np.random.default_rng(args.seed),
            )
            print(f"Flipped {flipped} bits")
    except DecodeError as e:
        print(e, file=sys.stderr)
        return 1
    except ConfigurationError as e:
        parser.error(str(e))
    except OSError as e:
        print(f"I/O error: {e}", file=sys.stderr)
        return 1

    if args.preview > 0:
        _preview(args.input, args.preview)
        _preview(args.output, args.preview)
    return 0


if __name__ == "__main__":
    sys.exit(main())
