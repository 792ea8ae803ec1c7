"""
Key tables for the two PAR types.

Each table is 512 bytes taken from the game executable.  The bytes are
not redistributed with this package: place ``chara_key.bin`` and
``chara2_key.bin`` in the package's ``keys/`` directory, or point
``YAGAMI_KEY_DIR`` (or ``--key-dir``) at a directory holding them.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from yagami.errors import KeyTableError
from yagami.variants import Variant

logger = logging.getLogger(__name__)

KEY_SIZE = 512
KEY_DIR_ENV = "YAGAMI_KEY_DIR"
DEFAULT_KEY_DIR = Path(__file__).parent / "keys"


def validate_key(key: bytes) -> bytes:
    """Return ``key`` as immutable bytes, checking it is exactly 512 bytes."""
    if len(key) != KEY_SIZE:
        raise KeyTableError(f"Key table must be {KEY_SIZE} bytes, got {len(key)}")
    return bytes(key)


class KeyStore:
    """
    Loads key tables on first use and keeps them for the life of the store.

    Parameters
    ----------
    key_dir : str, Path or None
        Directory holding the ``*_key.bin`` files.  Falls back to
        ``$YAGAMI_KEY_DIR`` and then to the bundled ``keys/`` directory.
    """

    def __init__(self, key_dir: Optional[Union[str, Path]] = None):
        self.key_dir = Path(key_dir) if key_dir else self._detect_key_dir()
        self._tables: Dict[Variant, bytes] = {}

    @classmethod
    def from_tables(cls, tables: Mapping[Variant, bytes]) -> "KeyStore":
        """Build a store around tables already in memory; others load from disk."""
        store = cls(key_dir=DEFAULT_KEY_DIR)
        for variant, key in tables.items():
            store._tables[Variant(variant)] = validate_key(key)
        return store

    @staticmethod
    def _detect_key_dir() -> Path:
        if os.environ.get(KEY_DIR_ENV):
            return Path(os.environ[KEY_DIR_ENV])
        return DEFAULT_KEY_DIR

    def path_for(self, variant: Variant) -> Path:
        return self.key_dir / variant.key_file

    def get(self, variant: Variant) -> bytes:
        """Return the key table for ``variant``."""
        if variant not in self._tables:
            path = self.path_for(variant)
            try:
                key = path.read_bytes()
            except FileNotFoundError:
                raise KeyTableError(
                    f"Key table for {variant.label} not found at {path}. "
                    f"Copy {variant.key_file} there or set {KEY_DIR_ENV}."
                ) from None
            except OSError as e:
                raise KeyTableError(f"Cannot read key table {path}: {e}") from e
            self._tables[variant] = validate_key(key)
            logger.debug("Loaded key table %s", path)
        return self._tables[variant]

    def available(self) -> List[Variant]:
        """Variants whose key table is loaded or present on disk."""
        return [
            v for v in Variant
            if v in self._tables or self.path_for(v).is_file()
        ]
