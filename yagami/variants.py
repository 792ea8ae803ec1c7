"""
PAR type detection and key selection.

Two kinds of encrypted PAR archive are known, each with its own key
table and its own 4-byte magic at the start of the file:

* ``chara.par`` (Judgment and Lost Judgment)
* ``chara2.par`` (Lost Judgment only)

Detection never guesses.  When the magic is not recognised the result
is marked ambiguous, and the caller either supplies the answer through
a chooser callback or gets an :class:`AmbiguousVariantError`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Callable, Optional, Sequence, Type, TypeVar

from yagami.errors import AmbiguousVariantError, MalformedInputError, ParCryptError

if TYPE_CHECKING:
    from yagami.keys import KeyStore

logger = logging.getLogger(__name__)

MAGIC_SIZE = 4

T = TypeVar("T")


class Variant(str, Enum):
    """Known PAR archive types."""

    CHARA = "chara"     # chara.par
    CHARA2 = "chara2"   # chara2.par, Lost Judgment only

    @property
    def magic(self) -> bytes:
        return _MAGIC[self]

    @property
    def label(self) -> str:
        return f"{self.value}.par"

    @property
    def key_file(self) -> str:
        return f"{self.value}_key.bin"


_MAGIC = {
    Variant.CHARA: b"\xAC\xC5\x8B\x99",
    Variant.CHARA2: b"\x01\x6E\x58\xE4",
}


@dataclass(frozen=True)
class Detection:
    """Outcome of an automatic lookup: a definite value, or a request for input."""

    value: Optional[Any] = None
    reason: Optional[str] = None

    @property
    def ambiguous(self) -> bool:
        return self.value is None


def detect_variant(data: bytes) -> Detection:
    """
    Match the first 4 bytes of ``data`` against the known magics.

    Raises
    ------
    MalformedInputError
        If ``data`` holds fewer than 4 bytes.
    """
    if len(data) < MAGIC_SIZE:
        raise MalformedInputError(
            f"Input is {len(data)} bytes long; at least {MAGIC_SIZE} are "
            "needed to read the magic"
        )

    head = bytes(data[:MAGIC_SIZE])
    for variant in Variant:
        if head == variant.magic:
            logger.debug("Magic %s matches %s", head.hex(), variant.label)
            return Detection(variant)

    return Detection(reason=f"unrecognised magic {head.hex(' ')}")


def resolve(
    detection: Optional[Detection],
    explicit: Optional[T],
    chooser: Optional[Callable[[Sequence[T]], T]],
    choices: Sequence[T],
    error_cls: Type[ParCryptError],
) -> T:
    """
    Settle a value from, in order: the explicit setting, a definite
    detection, the chooser.

    ``detection`` is only consulted when ``explicit`` is ``None``, so
    callers may pass ``None`` for it in that case.  The chooser's answer
    is converted to the type of ``choices`` and must be one of them.
    """
    if explicit is not None:
        return explicit
    if detection is not None and not detection.ambiguous:
        return detection.value

    reason = detection.reason if detection is not None else "no detection"
    if chooser is None:
        raise error_cls(f"Unable to determine automatically ({reason})")

    logger.info("Unable to determine automatically (%s), asking", reason)
    answer = chooser(list(choices))
    try:
        choice = type(choices[0])(answer)
    except (ValueError, TypeError):
        choice = None
    if choice is None or choice not in choices:
        raise ValueError(f"Chooser returned {answer!r}, expected one of {list(choices)}")
    return choice


def resolve_variant(
    data: bytes,
    explicit: Optional[Variant] = None,
    chooser: Optional[Callable[[Sequence[Variant]], Variant]] = None,
) -> Variant:
    """Return the PAR type of ``data``; an explicit type skips the magic check."""
    if explicit is not None:
        explicit = Variant(explicit)
    detection = None if explicit is not None else detect_variant(data)
    return resolve(detection, explicit, chooser, list(Variant), AmbiguousVariantError)


def select_key(
    data: bytes,
    store: "KeyStore",
    explicit: Optional[Variant] = None,
    chooser: Optional[Callable[[Sequence[Variant]], Variant]] = None,
) -> bytes:
    """Return the key table that applies to ``data``."""
    variant = resolve_variant(data, explicit, chooser)
    logger.info("PAR type: %s", variant.label)
    return store.get(variant)
