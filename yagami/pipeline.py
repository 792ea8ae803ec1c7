"""
Encryption and decryption of PAR archives.

The two directions apply the same three primitives in a fixed,
direction-specific order.  The order is not interchangeable: the
shipped files were produced by padding, rotating right and XORing last,
so decryption has to strip the XOR before the words line up again.

* decrypt: XOR → pad → rotate left
* encrypt: pad → rotate right → XOR

Usage::

    from yagami.pipeline import Direction, TransformPipeline

    pipeline = TransformPipeline(key)
    clear = pipeline(par_bytes, Direction.TO_CLEAR)
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Iterator, Optional

from yagami.keys import validate_key
from yagami.transforms import (
    DEFAULT_CHUNK_SIZE,
    Progress,
    cyclic_xor,
    pad_to_8,
    rotate_words,
)

logger = logging.getLogger(__name__)


class Direction(str, Enum):
    """Which way to run the transform."""

    TO_CLEAR = "decrypt"
    TO_OBFUSCATED = "encrypt"


# Called as factory(description, total_bytes); must return an object with
# update(n) and close().  ``tqdm`` itself fits.
ProgressFactory = Callable[[str, int], Progress]


@contextmanager
def _stage(factory: Optional[ProgressFactory], description: str, total: int) -> Iterator[Optional[Progress]]:
    logger.info("%s...", description)
    if factory is None:
        yield None
        return
    bar = factory(description, total)
    try:
        yield bar
    finally:
        bar.close()


def decrypt(
    data: bytes,
    key: bytes,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_factory: Optional[ProgressFactory] = None,
) -> bytearray:
    """Turn an encrypted PAR into its clear form."""
    key = validate_key(key)
    buf = bytearray(data)
    logger.debug("Decrypting %d bytes", len(buf))

    with _stage(progress_factory, "Performing XOR", len(buf)) as bar:
        cyclic_xor(buf, key, bar, chunk_size)
    pad_to_8(buf)
    with _stage(progress_factory, "Rotating bits", len(buf)) as bar:
        rotate_words(buf, True, bar, chunk_size)
    return buf


def encrypt(
    data: bytes,
    key: bytes,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_factory: Optional[ProgressFactory] = None,
) -> bytearray:
    """Turn a clear PAR back into the form the game ships."""
    key = validate_key(key)
    buf = bytearray(data)
    logger.debug("Encrypting %d bytes", len(buf))

    pad_to_8(buf)
    with _stage(progress_factory, "Rotating bits", len(buf)) as bar:
        rotate_words(buf, False, bar, chunk_size)
    with _stage(progress_factory, "Performing XOR", len(buf)) as bar:
        cyclic_xor(buf, key, bar, chunk_size)
    return buf


def transform(
    data: bytes,
    direction: Direction,
    key: bytes,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
    progress_factory: Optional[ProgressFactory] = None,
) -> bytearray:
    if Direction(direction) is Direction.TO_CLEAR:
        return decrypt(data, key, chunk_size, progress_factory)
    return encrypt(data, key, chunk_size, progress_factory)


class TransformPipeline:
    """
    Holds a key table and options and runs either direction on demand.

    Parameters
    ----------
    key : bytes
        A 512-byte key table.
    chunk_size : int
        Bytes processed between progress updates.
    progress_factory : callable or None
        Builds one progress bar per stage; ``None`` disables progress.
    """

    def __init__(
        self,
        key: bytes,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        progress_factory: Optional[ProgressFactory] = None,
    ):
        self.key = validate_key(key)
        self.chunk_size = chunk_size
        self.progress_factory = progress_factory
        self._call_count = 0
        self._bytes_in = 0
        self._bytes_out = 0

    def __call__(self, data: bytes, direction: Direction) -> bytearray:
        result = transform(
            data, direction, self.key, self.chunk_size, self.progress_factory
        )
        self._call_count += 1
        self._bytes_in += len(data)
        self._bytes_out += len(result)
        return result

    def decrypt(self, data: bytes) -> bytearray:
        return self(data, Direction.TO_CLEAR)

    def encrypt(self, data: bytes) -> bytearray:
        return self(data, Direction.TO_OBFUSCATED)

    def get_stats(self) -> dict:
        """Return pipeline usage statistics."""
        return {
            "calls": self._call_count,
            "bytes_in": self._bytes_in,
            "bytes_out": self._bytes_out,
            "chunk_size": self.chunk_size,
        }
