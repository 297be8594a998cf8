"""Pretty-print helpers for crossword grids."""

from __future__ import annotations

import sys
from collections import Counter
from typing import TYPE_CHECKING

from ..core.constants import FILLER

if TYPE_CHECKING:
    from ..core.models import Cell
    from ..engine.grid import CrosswordGrid
    from ..engine.puzzle import CrosswordPuzzle


def cell_symbol(cell: Cell) -> str:
    if cell.is_blocked:
        return "#"
    if cell.has_letter:
        return cell.letter or "?"
    if cell.has_filler:
        return FILLER
    return "."


def format_grid(grid: CrosswordGrid) -> str:
    width = grid.width
    header_cells = [f"{c:>2}" for c in range(width)]
    lines = ["    " + " ".join(header_cells)]
    lines.append("    " + "-" * (3 * width - 1))
    for r in range(grid.height):
        row_cells = [cell_symbol(grid.cell(r, c)) for c in range(width)]
        row_render = " ".join(f"{symbol:>2}" for symbol in row_cells)
        lines.append(f"{r:>2} | {row_render}")
    return "\n".join(lines)


def print_puzzle_stats(puzzle: CrosswordPuzzle, *, stream=None) -> None:
    """Print grid, clue listing and statistics for an accepted puzzle."""

    stream = stream or sys.stdout
    grid = puzzle.grid
    print(format_grid(grid), file=stream)

    # --- Grid geometry ---
    stats = puzzle.statistics
    print(file=stream)
    print("--- Grid ---", file=stream)
    print(f"  Size:          {grid.height} x {grid.width} ({stats.total_cells} cells)", file=stream)
    print(f"  Letters:       {stats.filled_cells} ({stats.fill_percentage:.1f}%)", file=stream)
    if stats.blocked_cells:
        print(f"  Blocked:       {stats.blocked_cells}", file=stream)
    print(f"  Attempts:      {puzzle.generation_attempts}", file=stream)

    # --- Word stats ---
    across, down = puzzle.clues()
    lengths = [word.length for word in puzzle.words]
    print(file=stream)
    print("--- Words ---", file=stream)
    print(f"  Total words:   {len(lengths)} ({len(across)} across, {len(down)} down)", file=stream)
    if lengths:
        distribution = Counter(lengths)
        print(f"  Length range:  {min(lengths)}-{max(lengths)} (avg {sum(lengths) / len(lengths):.1f})", file=stream)
        parts = [f"{length}:{count}" for length, count in sorted(distribution.items())]
        print(f"  Distribution:  {' '.join(parts)}", file=stream)

    # --- Accidental words ---
    result = puzzle.validation_result
    if result is not None and result.accidental_words:
        print(file=stream)
        print("--- Accidental words ---", file=stream)
        print(f"  {result.summary()}", file=stream)
        report = result.detailed_report()
        if report:
            print(report, file=stream)

    print(file=stream)
    print(puzzle.clues_text(), file=stream)
