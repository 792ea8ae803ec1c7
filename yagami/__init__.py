"""
Decrypts and encrypts the chara.par archives of Judgment and Lost
Judgment (PC).

The archives ship XORed with a fixed 512-byte key and bit-rotated per
64-bit word.  This package reverses that, and can redo it so modified
archives load in the game.
"""

from yagami.errors import (
    AmbiguousDirectionError,
    AmbiguousVariantError,
    KeyTableError,
    MalformedInputError,
    ParCryptError,
)
from yagami.keys import KEY_SIZE, KeyStore
from yagami.pipeline import Direction, TransformPipeline, decrypt, encrypt, transform
from yagami.variants import Detection, Variant, detect_variant, resolve_variant, select_key

__version__ = "0.1.0"

__all__ = [
    "AmbiguousDirectionError",
    "AmbiguousVariantError",
    "KeyTableError",
    "MalformedInputError",
    "ParCryptError",
    "KEY_SIZE",
    "KeyStore",
    "Direction",
    "TransformPipeline",
    "decrypt",
    "encrypt",
    "transform",
    "Detection",
    "Variant",
    "detect_variant",
    "resolve_variant",
    "select_key",
]
