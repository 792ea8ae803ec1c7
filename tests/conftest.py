"""
Shared fixtures and helpers for the PAR crypt tests.

Provides:
  - Synthetic 512-byte key tables (the real ones are not redistributed)
  - A key directory on disk holding both tables
  - A plain-Python reference of both directions, used to check the
    vectorised implementation
"""

import random
import struct

import pytest

from yagami.keys import KEY_SIZE, KeyStore
from yagami.variants import Variant

# ---------------------------------------------------------------------------
# Data helpers
# ---------------------------------------------------------------------------


def random_bytes(n: int, seed: int = 0) -> bytes:
    rng = random.Random(seed)
    return bytes(rng.randrange(256) for _ in range(n))


def make_key(seed: int) -> bytes:
    return random_bytes(KEY_SIZE, seed=seed)


# ---------------------------------------------------------------------------
# Reference implementation (one word / one byte at a time)
# ---------------------------------------------------------------------------

_MASK = (1 << 64) - 1


def _ref_xor(data: bytes, key: bytes) -> bytes:
    return bytes(b ^ key[i % len(key)] for i, b in enumerate(data))


def _ref_pad(data: bytes) -> bytes:
    if len(data) % 8:
        data += b"\x00" * (8 - len(data) % 8)
    return data


def rotl64(value: int, n: int) -> int:
    """Rotate a 64-bit unsigned integer left by ``n`` bits."""
    n %= 64
    value &= _MASK
    return ((value << n) | (value >> (64 - n))) & _MASK


def rotr64(value: int, n: int) -> int:
    """Rotate a 64-bit unsigned integer right by ``n`` bits."""
    n %= 64
    value &= _MASK
    return ((value >> n) | (value << (64 - n))) & _MASK


def _ref_rotate(data: bytes, left: bool) -> bytes:
    out = bytearray()
    for w in range(len(data) // 8):
        (v,) = struct.unpack_from("<Q", data, w * 8)
        v = rotl64(v, w) if left else rotr64(v, w)
        out += struct.pack("<Q", v)
    return bytes(out)


def reference_decrypt(data: bytes, key: bytes) -> bytes:
    return _ref_rotate(_ref_pad(_ref_xor(data, key)), left=True)


def reference_encrypt(data: bytes, key: bytes) -> bytes:
    return _ref_xor(_ref_rotate(_ref_pad(data), left=False), key)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def chara_key():
    return make_key(1)


@pytest.fixture
def chara2_key():
    return make_key(2)


@pytest.fixture
def key_dir(tmp_path, chara_key, chara2_key):
    """A directory holding both key tables under their expected names."""
    d = tmp_path / "keys"
    d.mkdir()
    (d / Variant.CHARA.key_file).write_bytes(chara_key)
    (d / Variant.CHARA2.key_file).write_bytes(chara2_key)
    return d


@pytest.fixture
def key_store(key_dir):
    return KeyStore(key_dir)


class RecordingBar:
    """Stands in for a tqdm bar and records what the pipeline reports."""

    def __init__(self, description, total):
        self.description = description
        self.total = total
        self.updates = []
        self.closed = False

    def update(self, n):
        self.updates.append(n)

    def close(self):
        self.closed = True


@pytest.fixture
def recording_factory():
    bars = []

    def factory(description, total):
        bar = RecordingBar(description, total)
        bars.append(bar)
        return bar

    factory.bars = bars
    return factory
