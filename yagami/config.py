"""
Run configuration for the PAR crypt tool.

Everything the command-line driver needs for one run lives here so the
same settings can be built from argparse or directly from code.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from yagami.pipeline import Direction
from yagami.transforms import DEFAULT_CHUNK_SIZE, WORD_SIZE
from yagami.variants import Variant

AUTO = "auto"

MODES = {
    AUTO: None,
    "decrypt": Direction.TO_CLEAR,
    "encrypt": Direction.TO_OBFUSCATED,
}

PAR_TYPES = {
    AUTO: None,
    "chara": Variant.CHARA,
    "chara2": Variant.CHARA2,
}


@dataclass
class RunConfig:
    """Settings for a single encrypt/decrypt run."""

    # ── Files ────────────────────────────────────────────────────────
    input_path: Path = Path()
    output_path: Optional[Path] = None  # None = derive from input name
    overwrite: bool = False

    # ── Operation ────────────────────────────────────────────────────
    mode: str = AUTO       # auto | decrypt | encrypt
    par_type: str = AUTO   # auto | chara | chara2
    key_dir: Optional[str] = None  # None = $YAGAMI_KEY_DIR or bundled keys/

    # ── Interaction ──────────────────────────────────────────────────
    interactive: bool = True   # ask on stdin when auto-detection fails
    show_progress: bool = True
    chunk_size: int = DEFAULT_CHUNK_SIZE

    def __post_init__(self):
        self.input_path = Path(self.input_path)
        if self.output_path is not None:
            self.output_path = Path(self.output_path)

        if self.mode not in MODES:
            raise ValueError(
                f"Unknown mode '{self.mode}'. Available: {list(MODES.keys())}"
            )
        if self.par_type not in PAR_TYPES:
            raise ValueError(
                f"Unknown PAR type '{self.par_type}'. "
                f"Available: {list(PAR_TYPES.keys())}"
            )
        if self.chunk_size <= 0 or self.chunk_size % WORD_SIZE:
            raise ValueError(
                f"chunk_size must be a positive multiple of {WORD_SIZE}"
            )

    @property
    def explicit_direction(self) -> Optional[Direction]:
        return MODES[self.mode]

    @property
    def explicit_variant(self) -> Optional[Variant]:
        return PAR_TYPES[self.par_type]
