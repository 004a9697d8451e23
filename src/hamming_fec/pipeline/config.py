from __future__ import annotations

from dataclasses import dataclass

from hamming_fec.errors import ConfigurationError
from hamming_fec.pipeline.stages.bit_fec.modules.hamming_secded import code_size

ON_UNCORRECTABLE = ("raise", "skip", "keep")


@dataclass(frozen=True)
class PipelineConfig:
    """
    Stream codec configuration.

    TX: data blocks -> SEC-DED code blocks -> frame of `groups_per_interleaving`
        code blocks -> bit interleave
    RX: frame -> de-interleave -> correct -> strip parity

    data_per_block: data bytes per code block (8 -> (72,64), 9-byte code blocks)
    groups_per_interleaving: code blocks per frame
    on_uncorrectable: what RX does with a code block holding two bit errors
      "raise" - stop decoding (output already written stays written)
      "skip"  - drop the block and continue
      "keep"  - emit the block's data bits uncorrected and continue
    """
    data_per_block: int = 8
    groups_per_interleaving: int = 8
    on_uncorrectable: str = "raise"

    def __post_init__(self) -> None:
        for name in ("data_per_block", "groups_per_interleaving"):
            v = getattr(self, name)
            if not isinstance(v, int) or isinstance(v, bool):
                raise TypeError(f"{name} must be int")
            if v < 1:
                raise ConfigurationError(f"{name} must be >= 1")
        if self.on_uncorrectable not in ON_UNCORRECTABLE:
            raise ConfigurationError(
                f"on_uncorrectable must be one of {ON_UNCORRECTABLE}, got {self.on_uncorrectable!r}"
            )

    @property
    def code_size(self) -> int:
        return code_size(self.data_per_block)

    @property
    def frame_size(self) -> int:
        return self.code_size * self.groups_per_interleaving
