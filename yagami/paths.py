"""
File-name conventions for encrypted and decrypted PAR archives.

An encrypted archive is ``<name>.par``; its decrypted form is written as
``<name>.decrypted.par``.  The same convention tells which way to go when
the mode is left on auto.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Optional, Sequence, Union

from yagami.errors import AmbiguousDirectionError
from yagami.pipeline import Direction
from yagami.variants import Detection, resolve

logger = logging.getLogger(__name__)

PAR_SUFFIX = ".par"
DECRYPTED_SUFFIX = ".decrypted.par"

# Menu order used when asking
DIRECTION_CHOICES = [Direction.TO_OBFUSCATED, Direction.TO_CLEAR]


def detect_direction(path: Union[str, Path]) -> Detection:
    """Guess the mode from the file name alone."""
    name = Path(path).name
    if name.endswith(DECRYPTED_SUFFIX):
        return Detection(Direction.TO_OBFUSCATED)
    if name.endswith(PAR_SUFFIX):
        return Detection(Direction.TO_CLEAR)
    return Detection(reason=f"file name {name!r} does not end in {PAR_SUFFIX}")


def resolve_direction(
    path: Union[str, Path],
    explicit: Optional[Direction] = None,
    chooser: Optional[Callable[[Sequence[Direction]], Direction]] = None,
) -> Direction:
    if explicit is not None:
        explicit = Direction(explicit)
    detection = None if explicit is not None else detect_direction(path)
    direction = resolve(
        detection, explicit, chooser, DIRECTION_CHOICES, AmbiguousDirectionError
    )
    logger.debug("Operation mode: %s", direction.value)
    return direction


def default_output_path(input_path: Union[str, Path], direction: Direction) -> Path:
    """
    Derive the output path when none was given.

    ``chara.par`` decrypts to ``chara.decrypted.par`` and
    ``chara.decrypted.par`` encrypts back to ``chara.par``: the last
    suffix is dropped and the one before it replaced with ``.par``.
    """
    path = Path(input_path)
    if direction is Direction.TO_CLEAR:
        return path.with_name(path.stem + DECRYPTED_SUFFIX)

    if path.suffix:
        path = path.with_name(path.stem)
    return path.with_suffix(PAR_SUFFIX)
