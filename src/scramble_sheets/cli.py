"""
Command line entry point.

Example:
    scramble-sheets --title "Spring Open" \\
        --request "3x3x3 Round 1=333*5*1*" \\
        --request "FMC Round 1=333fm*fmc*1*" \\
        -o spring-open.zip
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from scramble_sheets import __version__
from scramble_sheets.config import ArchiveConfig
from scramble_sheets.controller import build_archive
from scramble_sheets.errors import InvalidScrambleRequestError, ScrambleSheetsError

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_BUILD_FAILED = 1
EXIT_BAD_REQUEST = 2


def parse_request_option(value: str) -> tuple[str, str]:
    """
    Split ``TITLE=SPEC``; the title may itself contain ``=``.

    Raises:
        argparse.ArgumentTypeError: If there is no ``=`` or either side is empty
    """
    title, sep, spec = value.rpartition("=")
    if not sep or not title or not spec:
        raise argparse.ArgumentTypeError(f"expected TITLE=SPEC, got {value!r}")
    return title, spec


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="scramble-sheets",
        description="Generate printable scramble sheets and a distributable archive.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("--title", help="Competition name")
    parser.add_argument(
        "--request",
        dest="requests",
        action="append",
        type=parse_request_option,
        required=True,
        metavar="TITLE=SPEC",
        help="Scramble request, e.g. 'Round 1=333*5*1*' (repeatable)",
    )
    parser.add_argument("--seed", help="Seed for reproducible scrambles")
    parser.add_argument("--password", help="Encrypt the archive with this password")
    parser.add_argument("--url", help="Generation URL recorded in the interchange JSON")
    parser.add_argument("--schedule", type=Path, help="JSON file copied into the interchange JSON")
    parser.add_argument("--no-all-scrambles", action="store_true", help="Skip the all-scrambles PDF")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output .zip path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def _specs(pairs: List[tuple[str, str]]) -> Dict[str, str]:
    specs: Dict[str, str] = {}
    for title, spec in pairs:
        if title in specs:
            logger.warning(f"Request {title!r} given twice, keeping the last one")
        specs[title] = spec
    return specs


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s | %(levelname)s | %(message)s",
    )

    try:
        schedule = json.loads(args.schedule.read_text(encoding="utf-8")) if args.schedule else None
        config = ArchiveConfig(
            global_title=args.title,
            generation_url=args.url,
            password=args.password,
            schedule=schedule,
            seed=args.seed,
            output_path=args.output,
            include_all_scrambles=not args.no_all_scrambles,
        )
    except (OSError, ValueError) as exc:
        logger.error(f"Invalid options: {exc}")
        return EXIT_BAD_REQUEST

    try:
        result = build_archive(_specs(args.requests), config)
    except InvalidScrambleRequestError as exc:
        logger.error(f"Invalid request: {exc}")
        return EXIT_BAD_REQUEST
    except ScrambleSheetsError as exc:
        logger.error(f"Build failed: {exc}")
        return EXIT_BUILD_FAILED

    print(f"Wrote {result.output_path} ({result.scramble_count} scrambles, {len(result.requests)} sets)")
    return EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
