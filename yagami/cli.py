#!/usr/bin/env python3
"""
Decrypt or encrypt a Judgment / Lost Judgment PC chara.par archive.

Examples
--------
    # Decrypt; mode and PAR type are detected automatically
    yagami-decryption-agency chara.par

    # Encrypt a modified archive back over the shipped one
    yagami-decryption-agency chara.decrypted.par chara.par --overwrite

    # Explicit PAR type, keys kept outside the package
    yagami-decryption-agency chara2.par --par-type chara2 --key-dir ~/par-keys

    # Scripted use: fail instead of asking
    yagami-decryption-agency archive.bin --mode decrypt --non-interactive
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional, Sequence, Type, TypeVar

from tqdm import tqdm

from yagami import __version__
from yagami.config import MODES, PAR_TYPES, RunConfig
from yagami.errors import (
    AmbiguousDirectionError,
    AmbiguousVariantError,
    ParCryptError,
)
from yagami.keys import KEY_DIR_ENV, KeyStore
from yagami.paths import default_output_path, resolve_direction
from yagami.pipeline import Direction, TransformPipeline
from yagami.variants import Variant, select_key

logger = logging.getLogger(__name__)

PROG = "yagami-decryption-agency"

T = TypeVar("T")
InputFn = Callable[[str], str]


# ──────────────────────────────────────────────────────────────────────
# Prompts
# ──────────────────────────────────────────────────────────────────────


def ask_choice(
    title: str,
    choices: Sequence[T],
    describe: Callable[[T], str],
    error_cls: Type[ParCryptError],
    input_fn: InputFn = input,
) -> T:
    """Show a numbered menu and return the picked entry."""
    print(title)
    for i, choice in enumerate(choices, 1):
        print(f"  {i}) {describe(choice)}")

    while True:
        try:
            answer = input_fn(f"Select [1-{len(choices)}]: ").strip()
        except EOFError:
            raise error_cls("No selection was made") from None
        if answer.isdigit() and 1 <= int(answer) <= len(choices):
            return choices[int(answer) - 1]
        print("Invalid selection.")


def confirm(prompt: str, input_fn: InputFn = input) -> bool:
    try:
        answer = input_fn(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return answer.strip().lower() in ("y", "yes")


def _tqdm_factory(description: str, total: int) -> tqdm:
    return tqdm(
        total=total,
        desc=description,
        unit="B",
        unit_scale=True,
        unit_divisor=1024,
    )


# ──────────────────────────────────────────────────────────────────────
# Run
# ──────────────────────────────────────────────────────────────────────


def run(config: RunConfig, input_fn: InputFn = input) -> Optional[Path]:
    """
    Execute one run described by ``config``.

    Returns the path written, or ``None`` when the user declined to
    overwrite an existing file.
    """
    direction_chooser = None
    variant_chooser = None
    if config.interactive:
        def direction_chooser(choices: List[Direction]) -> Direction:
            return ask_choice(
                "Unable to determine operation mode. Select a mode:",
                choices,
                lambda d: d.value.capitalize(),
                AmbiguousDirectionError,
                input_fn,
            )

        def variant_chooser(choices: List[Variant]) -> Variant:
            return ask_choice(
                "Unable to determine PAR type. Select a type:",
                choices,
                lambda v: v.label,
                AmbiguousVariantError,
                input_fn,
            )

    direction = resolve_direction(
        config.input_path, config.explicit_direction, direction_chooser
    )

    logger.info("Reading %s", config.input_path)
    data = config.input_path.read_bytes()

    store = KeyStore(config.key_dir)
    key = select_key(data, store, config.explicit_variant, variant_chooser)

    pipeline = TransformPipeline(
        key,
        chunk_size=config.chunk_size,
        progress_factory=_tqdm_factory if config.show_progress else None,
    )
    result = pipeline(data, direction)

    output = config.output_path or default_output_path(config.input_path, direction)
    if output.is_file() and not config.overwrite:
        if not (config.interactive and confirm("File already exists. Overwrite?", input_fn)):
            logger.warning("%s already exists, aborting", output)
            return None

    logger.info("Writing file to %s", output)
    output.write_bytes(result)
    logger.info("Finished")
    return output


# ──────────────────────────────────────────────────────────────────────
# Entry point
# ──────────────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Decrypts/encrypts Judgment and Lost Judgment PC chara.par archives",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    # Files
    parser.add_argument("input", type=Path, help="Path to input file")
    parser.add_argument(
        "output",
        type=Path,
        nargs="?",
        default=None,
        help="Path to output file (default: input with .decrypted.par, "
             "or .par when encrypting)",
    )
    parser.add_argument(
        "--overwrite",
        action="store_true",
        help="Overwrite files without asking",
    )

    # Operation
    parser.add_argument(
        "--mode", "-m",
        choices=list(MODES),
        default="auto",
        help="Operation mode; auto picks it from the input file name (default: auto)",
    )
    parser.add_argument(
        "--par-type", "-t",
        choices=list(PAR_TYPES),
        default="auto",
        help="Type of the encrypted PAR; auto reads the file magic (default: auto)",
    )
    parser.add_argument(
        "--key-dir",
        default=None,
        help=f"Directory holding chara_key.bin / chara2_key.bin "
             f"(default: ${KEY_DIR_ENV} or the bundled keys/ directory)",
    )

    # Interaction
    parser.add_argument(
        "--non-interactive",
        action="store_true",
        help="Fail instead of asking when mode or PAR type cannot be detected",
    )
    parser.add_argument(
        "--no-progress",
        action="store_true",
        help="Disable progress bars",
    )

    # Logging
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    parser.add_argument(
        "--log-file",
        default=None,
        help="Write logs to file in addition to stderr",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    log_level = logging.DEBUG if args.verbose else logging.INFO
    handlers = [logging.StreamHandler(sys.stderr)]
    if args.log_file:
        handlers.append(logging.FileHandler(args.log_file))

    logging.basicConfig(
        level=log_level,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
        handlers=handlers,
    )

    config = RunConfig(
        input_path=args.input,
        output_path=args.output,
        overwrite=args.overwrite,
        mode=args.mode,
        par_type=args.par_type,
        key_dir=args.key_dir,
        interactive=not args.non_interactive,
        show_progress=not args.no_progress,
    )

    logger.info("%s %s", PROG, __version__)
    try:
        run(config)
    except ParCryptError as e:
        logger.error("%s", e)
        return e.exit_code
    except OSError as e:
        logger.error("I/O error: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
