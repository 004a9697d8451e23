import numpy as np

from hamming_fec.errors import DecodeError
from hamming_fec.pipeline.config import PipelineConfig
from hamming_fec.pipeline.pipeline import rx, tx
from hamming_fec.pipeline.stages.noise import stage as noise_stage
from hamming_fec.pipeline.stages.noise.modules import burst


if __name__ == "__main__":
    cfg = PipelineConfig(data_per_block=8, groups_per_interleaving=8)
    payload = b"The quick brown fox jumps over the lazy dog. " * 40

    sent = tx(payload, cfg=cfg)

    # bursts no longer than the interleaving depth
    noise_cfg = noise_stage.Config(
        module="burst",
        module_cfg=burst.Config(probability=0.002, max_burst=cfg.groups_per_interleaving),
    )
    received = noise_stage.distort(sent, cfg=noise_cfg, rng=np.random.default_rng(2024))
    print(f"{len(sent)} bytes sent, {received.flipped} bits flipped")

    try:
        out = rx(received.data, cfg=cfg)[: len(payload)]
    except DecodeError as e:
        print(f"Decode stopped at block {e.block_index}: {e}")
    else:
        print("Loopback OK." if out == payload else "Loopback mismatch (3+ errors in a block).")
