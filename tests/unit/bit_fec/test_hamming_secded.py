import itertools
import random

import pytest

from hamming_fec.errors import ConfigurationError, MalformedBlockError, UncorrectableBlockError
from hamming_fec.pipeline.stages.bit_fec.modules.hamming_secded import (
    Config,
    Syndrome,
    classify_block,
    code_size,
    correct_block,
    decode_block,
    encode_block,
    parity_bit_count,
    Recovery,
    block_size,
    recover_block,
    rx,
    tx,
)
from tests.conftest import signed_bytes

ONE = bytes([0b1111_1111])
ONE_CODE = bytes([0b0111_0111, 0b0111_1000])

EIGHT = signed_bytes([-1, 0, -128, 127, 1, 64, 99, 57])
EIGHT_CODE = signed_bytes([-9, 120, -126, 1, 126, 2, -128, -58, 57])


def _flip(buf: bytes, *addrs: int) -> bytes:
    out = bytearray(buf)
    for a in addrs:
        out[a // 8] ^= 1 << (7 - a % 8)
    return bytes(out)


@pytest.mark.parametrize(
    "n, parity, size",
    [(1, 4, 2), (2, 5, 3), (3, 5, 4), (4, 6, 5), (8, 7, 9), (16, 8, 18), (64, 10, 66)],
)
def test_code_geometry(n, parity, size):
    assert parity_bit_count(n) == parity
    assert code_size(n) == size


def test_code_size_rejects_empty_block():
    with pytest.raises(ConfigurationError):
        code_size(0)


def test_encode_one_byte_vector():
    assert encode_block(ONE) == ONE_CODE


def test_encode_eight_byte_vector():
    assert encode_block(EIGHT) == EIGHT_CODE


def test_encode_zero_block_is_all_zero():
    assert encode_block(bytes(8)) == bytes(9)


def test_correct_single_error_vectors():
    assert correct_block(bytes([0b0111_0111, 0b0111_1001])) == ONE_CODE
    assert correct_block(signed_bytes([-9, 120, -126, 0, 126, 2, -128, -58, 57])) == EIGHT_CODE


def test_correct_double_error_vectors():
    with pytest.raises(UncorrectableBlockError, match="two bit errors"):
        correct_block(bytes([0b0111_0100, 0b0111_1000]))
    with pytest.raises(UncorrectableBlockError):
        correct_block(signed_bytes([-9, 120, -126, 0, 126, 3, -128, -58, 57]))


def test_decode_vectors():
    assert decode_block(ONE_CODE, 1) == ONE
    assert decode_block(EIGHT_CODE, 8) == EIGHT


def test_decode_stops_at_short_block():
    # only the first data bits are present; the rest stay zero
    out = decode_block(EIGHT_CODE[:2], 8)
    assert len(out) == 8
    assert out[2:] == bytes(6)


@pytest.mark.parametrize("n", [1, 2, 3, 5, 8])
def test_every_single_flip_is_corrected(n):
    rng = random.Random(0x5EC + n)
    code = encode_block(bytes(rng.randrange(256) for _ in range(n)))
    for i in range(1, len(code) * 8):
        assert correct_block(_flip(code, i)) == code


@pytest.mark.parametrize("n", [1, 2, 3, 5, 8])
def test_extended_parity_flip_leaves_data_intact(n):
    rng = random.Random(0x5EC + n)
    data = bytes(rng.randrange(256) for _ in range(n))
    flipped = _flip(encode_block(data), 0)
    assert classify_block(flipped) == (Syndrome.EXTENDED_PARITY, 0)
    assert decode_block(correct_block(flipped), n) == data


@pytest.mark.parametrize("n", [1, 2, 8])
def test_every_double_flip_is_detected(n):
    rng = random.Random(0xDED + n)
    code = encode_block(bytes(rng.randrange(256) for _ in range(n)))
    for i, j in itertools.combinations(range(len(code) * 8), 2):
        with pytest.raises(UncorrectableBlockError):
            correct_block(_flip(code, i, j))


def test_classify_outcomes():
    assert classify_block(ONE_CODE) == (Syndrome.CLEAN, 0)
    assert classify_block(_flip(ONE_CODE, 0)) == (Syndrome.EXTENDED_PARITY, 0)
    assert classify_block(_flip(ONE_CODE, 9)) == (Syndrome.SINGLE, 9)
    syndrome, addr = classify_block(_flip(ONE_CODE, 6, 7))
    assert syndrome is Syndrome.DOUBLE
    assert addr == 6 ^ 7


def test_extended_parity_flip_returns_block_unchanged():
    flipped = _flip(EIGHT_CODE, 0)
    assert correct_block(flipped) == flipped
    assert decode_block(correct_block(flipped), 8) == EIGHT


def test_double_error_carries_syndrome():
    with pytest.raises(UncorrectableBlockError) as ei:
        correct_block(_flip(EIGHT_CODE, 10, 20))
    assert ei.value.error_addr == 10 ^ 20
    assert ei.value.block_index is None


def test_malformed_when_syndrome_points_outside_block():
    # bits 0, 63 and 64 set: odd parity, syndrome 63 ^ 64 = 127 > 71
    block = bytes([0x80, 0, 0, 0, 0, 0, 0, 0x01, 0x80])
    with pytest.raises(MalformedBlockError) as ei:
        classify_block(block)
    assert ei.value.error_addr == 127
    with pytest.raises(MalformedBlockError):
        correct_block(block)


def test_three_flips_may_miscorrect():
    # documented limitation: odd error counts >= 3 look like a single error
    bad = _flip(EIGHT_CODE, 3, 5, 9)
    syndrome, addr = classify_block(bad)
    assert syndrome is Syndrome.SINGLE
    assert correct_block(bad) != EIGHT_CODE


@pytest.mark.parametrize("n", [1, 3, 8])
def test_module_roundtrip(n):
    cfg = Config(data_per_block=n)
    rng = random.Random(42 + n)
    payload = bytes(rng.randrange(256) for _ in range(n * 5))
    enc = tx(payload, cfg=cfg)
    assert len(enc) == 5 * code_size(n)
    assert rx(enc, cfg=cfg) == payload


def test_module_tx_pads_short_block():
    cfg = Config(data_per_block=8)
    enc = tx(b"abc", cfg=cfg)
    assert len(enc) == 9
    assert rx(enc, cfg=cfg) == b"abc" + bytes(5)


def test_module_rx_rejects_partial_code_block():
    with pytest.raises(ValueError):
        rx(bytes(10), cfg=Config(data_per_block=8))


def test_module_rejects_non_bytes():
    with pytest.raises(TypeError):
        tx("text", cfg=Config())  # type: ignore[arg-type]


def test_recover_block_clean_and_corrected():
    cfg = Config(data_per_block=8)
    assert block_size(cfg) == 9
    assert recover_block(EIGHT_CODE, cfg=cfg) == Recovery(Syndrome.CLEAN, 0, EIGHT)
    assert recover_block(_flip(EIGHT_CODE, 20), cfg=cfg) == Recovery(Syndrome.SINGLE, 20, EIGHT)
    assert recover_block(_flip(EIGHT_CODE, 0), cfg=cfg) == Recovery(Syndrome.EXTENDED_PARITY, 0, EIGHT)


def test_recover_block_reports_double_error_without_raising():
    damaged = _flip(EIGHT_CODE, 10, 20)
    rec = recover_block(damaged, cfg=Config(data_per_block=8))
    assert rec.syndrome is Syndrome.DOUBLE
    assert isinstance(rec.error, UncorrectableBlockError)
    assert rec.error.error_addr == 10 ^ 20
    assert rec.data == decode_block(damaged, 8)


def test_recover_block_reports_malformed_block_without_raising():
    block = bytes([0x80, 0, 0, 0, 0, 0, 0, 0x01, 0x80])
    rec = recover_block(block, cfg=Config(data_per_block=8))
    assert rec.syndrome is None
    assert isinstance(rec.error, MalformedBlockError)
    assert rec.error_addr == 127
    assert rec.data == decode_block(block, 8)


def test_recover_block_rejects_wrong_length():
    with pytest.raises(ValueError):
        recover_block(bytes(8), cfg=Config(data_per_block=8))


def test_module_rx_raises_on_malformed_block():
    with pytest.raises(MalformedBlockError):
        rx(bytes([0x80, 0, 0, 0, 0, 0, 0, 0x01, 0x80]), cfg=Config(data_per_block=8))
