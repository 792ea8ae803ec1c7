"""
Byte-level primitives of the PAR obfuscation scheme.

Three primitives make up both directions of the scheme:

* **cyclic_xor** – XOR every byte with ``key[i % len(key)]``.
* **pad_to_8** – grow the buffer with zero bytes to a multiple of 8.
* **rotate_words** – treat the buffer as little-endian 64-bit words and
  rotate word ``w`` by ``w % 64`` bits, left or right.

All of them work in place on a ``bytearray``.  XOR and rotation walk the
buffer in chunks so that a progress bar can be advanced; the result does
not depend on the chunk size.

Usage::

    from yagami.transforms import cyclic_xor, pad_to_8, rotate_words
    buf = bytearray(data)
    cyclic_xor(buf, key)
    pad_to_8(buf)
    rotate_words(buf, left=True)
"""

from __future__ import annotations

from typing import Optional, Protocol

import numpy as np

WORD_SIZE = 8
ROTATION_PERIOD = 64

# The progress bar advances once per chunk
DEFAULT_CHUNK_SIZE = 1024 * 1024


class Progress(Protocol):
    """Anything with ``update(n)``; a ``tqdm`` bar qualifies."""

    def update(self, n: int) -> object:
        ...


def _check_chunk_size(chunk_size: int) -> None:
    if chunk_size <= 0 or chunk_size % WORD_SIZE:
        raise ValueError(
            f"chunk_size must be a positive multiple of {WORD_SIZE}, got {chunk_size}"
        )


# ──────────────────────────────────────────────────────────────────────
# Primitives
# ──────────────────────────────────────────────────────────────────────


def cyclic_xor(
    buf: bytearray,
    key: bytes,
    progress: Optional[Progress] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> bytearray:
    """
    XOR ``buf`` in place with ``key`` repeated over its whole length.

    Applying it twice with the same key restores the original bytes as
    long as the length did not change in between.
    """
    if not key:
        raise ValueError("key must not be empty")
    _check_chunk_size(chunk_size)
    if not buf:
        return buf

    data = np.frombuffer(buf, dtype=np.uint8)
    key_arr = np.frombuffer(bytes(key), dtype=np.uint8)

    for start in range(0, data.size, chunk_size):
        chunk = data[start:start + chunk_size]
        # Keep the key phase aligned with the absolute offset
        stream = np.resize(np.roll(key_arr, -(start % key_arr.size)), chunk.size)
        np.bitwise_xor(chunk, stream, out=chunk)
        if progress is not None:
            progress.update(chunk.size)

    return buf


def pad_to_8(buf: bytearray) -> bytearray:
    """Append zero bytes until ``len(buf)`` is a multiple of 8."""
    rem = len(buf) % WORD_SIZE
    if rem:
        buf.extend(bytes(WORD_SIZE - rem))
    return buf


def rotate_words(
    buf: bytearray,
    left: bool,
    progress: Optional[Progress] = None,
    chunk_size: int = DEFAULT_CHUNK_SIZE,
) -> bytearray:
    """
    Rotate every little-endian 64-bit word of ``buf`` in place.

    Word ``w`` (counting from 0) is rotated by ``w % 64`` bits, to the
    left when ``left`` is true and to the right otherwise.  The buffer
    length must be a multiple of 8.
    """
    if len(buf) % WORD_SIZE:
        raise ValueError(
            f"buffer length {len(buf)} is not a multiple of {WORD_SIZE}; pad it first"
        )
    _check_chunk_size(chunk_size)
    if not buf:
        return buf

    words = np.frombuffer(buf, dtype="<u8")
    per_chunk = chunk_size // WORD_SIZE
    period = np.uint64(ROTATION_PERIOD)

    for start in range(0, words.size, per_chunk):
        chunk = words[start:start + per_chunk]
        shifts = np.arange(start, start + chunk.size, dtype=np.uint64) % period
        # A shift of 0 maps to 0 here, never to 64
        back = (period - shifts) % period
        if left:
            rotated = (chunk << shifts) | (chunk >> back)
        else:
            rotated = (chunk >> shifts) | (chunk << back)
        chunk[:] = rotated
        if progress is not None:
            progress.update(chunk.size * WORD_SIZE)

    return buf
