"""CLI entrypoint for the crossword placement engine."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List

from crossfill.core.constants import Difficulty
from crossfill.core.exceptions import CrosswordError
from crossfill.data.catalog import CatalogEntry, InMemoryWordCatalog
from crossfill.engine.generator import CrosswordGenerator, GeneratorConfig
from crossfill.utils.logger import configure_logging
from crossfill.utils.pretty import print_puzzle_stats


PRESETS = {
    "small": GeneratorConfig.small,
    "easy": GeneratorConfig.easy,
    "medium": GeneratorConfig.medium,
    "hard": GeneratorConfig.hard,
}


def parse_word_line(line: str) -> CatalogEntry:
    """Parse ``WORD:Clue[:category[:difficulty]]``."""
    parts = [part.strip() for part in line.split(":")]
    text = parts[0]
    clue = parts[1] if len(parts) > 1 else ""
    category = parts[2] if len(parts) > 2 else ""
    difficulty = Difficulty.MEDIUM
    if len(parts) > 3 and parts[3]:
        difficulty = Difficulty(parts[3].upper())
    return CatalogEntry(text=text, clue=clue, category=category, difficulty=difficulty)


def parse_words_file(path: Path) -> List[CatalogEntry]:
    """Read entries from a file, one per line. Blank lines and # comments are skipped."""
    entries: List[CatalogEntry] = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        entries.append(parse_word_line(line))
    return entries


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate free-form crosswords from a word catalog",
    )
    parser.add_argument(
        "--words-file",
        type=Path,
        required=True,
        metavar="FILE",
        help="File with one WORD:Clue[:category[:difficulty]] entry per line (# comments ignored)",
    )
    parser.add_argument("--preset", choices=sorted(PRESETS), help="Start from a preset option set")
    parser.add_argument("--width", type=int, help="Grid width in cells")
    parser.add_argument("--height", type=int, help="Grid height in cells")
    parser.add_argument("--fill-target", type=float, help="Minimum fill percentage (0-100)")
    parser.add_argument("--max-attempts", type=int, help="Maximum number of generation attempts")
    parser.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    parser.add_argument(
        "--parallel",
        type=int,
        default=1,
        help="Number of attempts to run concurrently (default 1)",
    )
    parser.add_argument(
        "--allow-invalid",
        action="store_true",
        help="Keep grids containing accidental words missing from the catalog",
    )
    parser.add_argument("--output", type=Path, help="Optional path to JSON output")
    parser.add_argument(
        "--log-level",
        type=str,
        default="INFO",
        help="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    return parser


def build_config(args: argparse.Namespace) -> GeneratorConfig:
    overrides: Dict[str, Any] = {"seed": args.seed, "reject_invalid_words": not args.allow_invalid}
    if args.width is not None:
        overrides["width"] = args.width
    if args.height is not None:
        overrides["height"] = args.height
    if args.fill_target is not None:
        overrides["target_fill_percentage"] = args.fill_target
    if args.max_attempts is not None:
        overrides["max_attempts"] = args.max_attempts

    if args.preset:
        return PRESETS[args.preset](**overrides)
    if "width" in overrides and "max_word_length" not in overrides:
        overrides["max_word_length"] = min(12, overrides["width"])
    return GeneratorConfig(**overrides)


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    level = getattr(logging, args.log_level.upper(), logging.INFO)
    configure_logging(level)

    if args.parallel < 1:
        parser.error("--parallel must be at least 1")

    try:
        catalog = InMemoryWordCatalog(parse_words_file(args.words_file))
    except OSError as exc:
        parser.error(f"cannot read words file: {exc}")
    except ValueError as exc:
        parser.error(f"invalid words file: {exc}")
    if not catalog.word_count:
        parser.error("the words file contains no usable entries")

    try:
        config = build_config(args)
        generator = CrosswordGenerator(catalog, config)
        if args.parallel > 1:
            puzzle = generator.generate_parallel(workers=args.parallel)
        else:
            puzzle = generator.generate()
    except CrosswordError as exc:
        print(f"Generation failed: {exc}", file=sys.stderr)
        return 1

    print_puzzle_stats(puzzle)

    if args.output:
        output_text = json.dumps(puzzle.to_jsonable(), ensure_ascii=False, indent=2)
        args.output.write_text(output_text, encoding="utf-8")
    return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
