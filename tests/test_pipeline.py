"""
Tests for the encrypt/decrypt compositions.

Tests verify that:
1. Both directions undo each other on 8-byte aligned input
2. The stage order matches a plain-Python reference byte for byte
3. Unaligned input keeps its padding
4. Caller buffers are never mutated
5. Progress bars are opened per stage and closed again
"""

import logging

import pytest

from yagami.errors import KeyTableError
from yagami.keys import KEY_SIZE
from yagami.pipeline import Direction, TransformPipeline, decrypt, encrypt, transform

from .conftest import random_bytes, reference_decrypt, reference_encrypt

ALL_FF_KEY = b"\xff" * KEY_SIZE


# ──────────────────────────────────────────────────────────────────────
# Tests: known values
# ──────────────────────────────────────────────────────────────────────


class TestKnownValues:
    def test_zero_words_with_ff_key(self):
        """16 zero bytes encrypt to 16 x 0xFF and decrypt back."""
        encrypted = encrypt(bytes(16), ALL_FF_KEY)
        assert encrypted == bytearray(b"\xff" * 16)
        assert decrypt(encrypted, ALL_FF_KEY) == bytearray(16)

    def test_single_bit_in_second_word(self, chara_key):
        clear = bytes(8) + b"\x01" + bytes(7)
        encrypted = encrypt(clear, chara_key)
        # Word 1 rotated right by 1: bit 0 lands on bit 63
        expected_word1 = bytes(7) + b"\x80"
        expected = bytes(
            b ^ chara_key[i] for i, b in enumerate(bytes(8) + expected_word1)
        )
        assert bytes(encrypted) == expected


# ──────────────────────────────────────────────────────────────────────
# Tests: round trip and reference agreement
# ──────────────────────────────────────────────────────────────────────


class TestRoundTrip:
    @pytest.mark.parametrize("length", [8, 64, 512, 520, 8 * 1000])
    def test_decrypt_then_encrypt(self, chara_key, length):
        data = random_bytes(length, seed=length)
        assert encrypt(decrypt(data, chara_key), chara_key) == bytearray(data)

    @pytest.mark.parametrize("length", [8, 64, 512, 520, 8 * 1000])
    def test_encrypt_then_decrypt(self, chara2_key, length):
        data = random_bytes(length, seed=length + 1)
        assert decrypt(encrypt(data, chara2_key), chara2_key) == bytearray(data)

    @pytest.mark.parametrize("length", [0, 3, 8, 13, 1000, 1003])
    def test_decrypt_matches_reference(self, chara_key, length):
        data = random_bytes(length, seed=10)
        assert bytes(decrypt(data, chara_key)) == reference_decrypt(data, chara_key)

    @pytest.mark.parametrize("length", [0, 3, 8, 13, 1000, 1003])
    def test_encrypt_matches_reference(self, chara_key, length):
        data = random_bytes(length, seed=11)
        assert bytes(encrypt(data, chara_key)) == reference_encrypt(data, chara_key)

    def test_directions_differ(self, chara_key):
        data = random_bytes(256, seed=12)
        assert decrypt(data, chara_key) != encrypt(data, chara_key)

    def test_chunk_size_does_not_change_result(self, chara_key):
        data = random_bytes(4096 + 40, seed=13)
        assert decrypt(data, chara_key, chunk_size=24) == decrypt(data, chara_key)
        assert encrypt(data, chara_key, chunk_size=24) == encrypt(data, chara_key)


# ──────────────────────────────────────────────────────────────────────
# Tests: lengths and ownership
# ──────────────────────────────────────────────────────────────────────


class TestBuffers:
    @pytest.mark.parametrize("direction", list(Direction))
    def test_empty_in_empty_out(self, chara_key, direction):
        assert transform(b"", direction, chara_key) == bytearray()

    @pytest.mark.parametrize("length,expected", [(1, 8), (8, 8), (9, 16), (15, 16)])
    @pytest.mark.parametrize("direction", list(Direction))
    def test_output_rounded_up(self, chara_key, direction, length, expected):
        assert len(transform(bytes(length), direction, chara_key)) == expected

    def test_decrypt_keeps_padding(self, chara_key):
        """Unaligned input gains zero padding after the XOR stage."""
        data = random_bytes(13, seed=14)
        clear = decrypt(data, chara_key)
        back = encrypt(clear, chara_key)
        assert len(back) == 16
        xored_tail = bytes(chara_key[13:16])
        assert bytes(back) == bytes(data) + xored_tail

    def test_input_not_mutated(self, chara_key):
        data = bytearray(random_bytes(64, seed=15))
        snapshot = bytes(data)
        decrypt(data, chara_key)
        encrypt(data, chara_key)
        assert bytes(data) == snapshot

    def test_returns_new_buffer(self, chara_key):
        data = bytearray(16)
        assert decrypt(data, chara_key) is not data

    def test_transform_accepts_mode_name(self, chara_key):
        data = random_bytes(32, seed=16)
        assert transform(data, "decrypt", chara_key) == decrypt(data, chara_key)
        assert transform(data, "encrypt", chara_key) == encrypt(data, chara_key)

    @pytest.mark.parametrize("size", [0, 511, 513, 1024])
    def test_wrong_key_size(self, size):
        with pytest.raises(KeyTableError):
            decrypt(bytes(8), bytes(size))


# ──────────────────────────────────────────────────────────────────────
# Tests: TransformPipeline
# ──────────────────────────────────────────────────────────────────────


class TestTransformPipeline:
    def test_stats(self, chara_key):
        pipeline = TransformPipeline(chara_key)
        pipeline.decrypt(bytes(13))
        pipeline.encrypt(bytes(16))
        stats = pipeline.get_stats()
        assert stats["calls"] == 2
        assert stats["bytes_in"] == 29
        assert stats["bytes_out"] == 32

    def test_call_matches_functions(self, chara_key):
        data = random_bytes(80, seed=17)
        pipeline = TransformPipeline(chara_key)
        assert pipeline(data, Direction.TO_CLEAR) == decrypt(data, chara_key)
        assert pipeline(data, Direction.TO_OBFUSCATED) == encrypt(data, chara_key)

    def test_key_validated_up_front(self):
        with pytest.raises(KeyTableError):
            TransformPipeline(b"short")

    def test_decrypt_progress_stages(self, chara_key, recording_factory):
        pipeline = TransformPipeline(chara_key, chunk_size=8, progress_factory=recording_factory)
        pipeline.decrypt(bytes(13))
        bars = recording_factory.bars
        assert [b.description for b in bars] == ["Performing XOR", "Rotating bits"]
        assert [b.total for b in bars] == [13, 16]
        assert sum(bars[0].updates) == 13
        assert sum(bars[1].updates) == 16
        assert all(b.closed for b in bars)

    def test_encrypt_progress_stages(self, chara_key, recording_factory):
        pipeline = TransformPipeline(chara_key, progress_factory=recording_factory)
        pipeline.encrypt(bytes(13))
        bars = recording_factory.bars
        assert [b.description for b in bars] == ["Rotating bits", "Performing XOR"]
        assert [b.total for b in bars] == [16, 16]


# ──────────────────────────────────────────────────────────────────────
# Tests: logging
# ──────────────────────────────────────────────────────────────────────


class TestLogging:
    def test_stages_at_info_sizes_at_debug(self, chara_key, caplog):
        caplog.set_level(logging.DEBUG, logger="yagami.pipeline")
        decrypt(bytes(13), chara_key)
        info = [r.getMessage() for r in caplog.records if r.levelno == logging.INFO]
        debug = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
        assert info == ["Performing XOR...", "Rotating bits..."]
        assert debug == ["Decrypting 13 bytes"]

    def test_encrypt_size_logged_at_debug(self, chara_key, caplog):
        caplog.set_level(logging.DEBUG, logger="yagami.pipeline")
        encrypt(bytes(16), chara_key)
        debug = [r.getMessage() for r in caplog.records if r.levelno == logging.DEBUG]
        assert debug == ["Encrypting 16 bytes"]
