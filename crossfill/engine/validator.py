"""Deterministic rule validation for generated crosswords."""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Set

from ..core.constants import Direction
from ..core.models import Word
from .grid import CrosswordGrid
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

MIN_GRID_SIZE = 5
MAX_PRINTABLE_SIZE = 25
LOW_FILL_PERCENTAGE = 25.0
HIGH_FILL_PERCENTAGE = 85.0


@dataclass
class ValidationResult:
    """Errors block acceptance; warnings and info are advisory."""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    info: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    def add_error(self, message: str) -> None:
        self.errors.append(message)

    def add_warning(self, message: str) -> None:
        self.warnings.append(message)

    def add_info(self, message: str) -> None:
        self.info.append(message)

    def __str__(self) -> str:
        lines: List[str] = []
        if self.errors:
            lines.append("ERRORS:")
            lines.extend(f"  ERROR: {message}" for message in self.errors)
        if self.warnings:
            lines.append("WARNINGS:")
            lines.extend(f"  WARNING: {message}" for message in self.warnings)
        if self.info:
            lines.append("INFO:")
            lines.extend(f"  INFO: {message}" for message in self.info)
        return "\n".join(lines) if lines else "Grid is valid"


class GridValidator:
    """Runs deterministic validation over the final grid.

    The validator holds no state; a single instance can check any number of
    grids, including concurrently.
    """

    def is_valid_crossword(self, grid: CrosswordGrid) -> bool:
        if not grid.words:
            return False
        return self.validate_grid(grid).is_valid

    def validate_grid(self, grid: CrosswordGrid) -> ValidationResult:
        result = ValidationResult()
        self._check_structure(grid, result)
        self._check_word_placements(grid, result)
        self._check_intersections(grid, result)
        self._check_connectivity(grid, result)
        self._check_quality(grid, result)
        if result.errors:
            LOGGER.debug("Validation found %d errors: %s", len(result.errors), result.errors[0])
        return result

    # ------------------------------------------------------------------
    # Structure and placement
    # ------------------------------------------------------------------
    def _check_structure(self, grid: CrosswordGrid, result: ValidationResult) -> None:
        if grid.width < MIN_GRID_SIZE or grid.height < MIN_GRID_SIZE:
            result.add_error(
                f"Grid too small ({grid.width}x{grid.height}). Minimum size is {MIN_GRID_SIZE}x{MIN_GRID_SIZE}"
            )
        if grid.width > MAX_PRINTABLE_SIZE or grid.height > MAX_PRINTABLE_SIZE:
            result.add_warning(f"Grid very large ({grid.width}x{grid.height}). May be difficult to print")

        count = len(grid.words)
        if count == 0:
            result.add_error("No words placed on grid")
        elif count < 3:
            result.add_warning(f"Few words placed ({count}). Ideally should have at least 3 words")

    def _check_word_placements(self, grid: CrosswordGrid, result: ValidationResult) -> None:
        for word in grid.words:
            if not word.is_placed:
                result.add_error(f"Word '{word.text}' is not placed on grid")
                continue
            if not (grid.is_valid_position(word.start_row, word.start_col)
                    and grid.is_valid_position(word.end_row, word.end_col)):
                result.add_error(f"Word '{word.text}' extends outside grid bounds")
                continue
            if not self._letters_match(grid, word):
                result.add_error(f"Word '{word.text}' has incorrect letters on grid")
            if not self._is_isolated(grid, word):
                result.add_error(f"Word '{word.text}' touches letters that are not part of a crossing word")

    @staticmethod
    def _letters_match(grid: CrosswordGrid, word: Word) -> bool:
        for index, (row, col) in enumerate(word.positions()):
            cell = grid.cell(row, col)
            if cell.letter != word.text[index] or word.id not in cell.word_ids:
                return False
        return True

    def _is_isolated(self, grid: CrosswordGrid, word: Word) -> bool:
        positions = set(word.positions())
        side_steps = [(-1, 0), (1, 0)] if word.direction == Direction.ACROSS else [(0, -1), (0, 1)]
        for row, col in positions:
            for dr, dc in side_steps:
                nr, nc = row + dr, col + dc
                if (nr, nc) in positions or not grid.has_letter(nr, nc):
                    continue
                crossing = [
                    other for other in grid.words
                    if other is not word and other.direction != word.direction and (nr, nc) in other.positions()
                ]
                if len(crossing) != 1:
                    return False
        return True

    # ------------------------------------------------------------------
    # Intersections and connectivity
    # ------------------------------------------------------------------
    def _check_intersections(self, grid: CrosswordGrid, result: ValidationResult) -> None:
        words = grid.words
        count = 0
        for i, first in enumerate(words):
            for second in words[i + 1:]:
                for row, col, my_index, other_index in first.intersections(second):
                    count += 1
                    if first.text[my_index] != second.text[other_index]:
                        result.add_error(
                            f"Letter mismatch at intersection ({row},{col}) between '{first.text}' and '{second.text}'"
                        )
        if count < max(0, len(words) - 2):
            result.add_info(f"Could benefit from more intersections ({count} found)")

    @staticmethod
    def _build_graph(words: List[Word]) -> Dict[int, Set[int]]:
        graph: Dict[int, Set[int]] = {index: set() for index in range(len(words))}
        for i, first in enumerate(words):
            for j in range(i + 1, len(words)):
                if first.intersects_with(words[j]):
                    graph[i].add(j)
                    graph[j].add(i)
        return graph

    @staticmethod
    def _connected_components(graph: Dict[int, Set[int]]) -> List[List[int]]:
        visited: Set[int] = set()
        components: List[List[int]] = []
        for start in graph:
            if start in visited:
                continue
            component: List[int] = []
            stack = [start]
            visited.add(start)
            while stack:
                node = stack.pop()
                component.append(node)
                for neighbor in graph[node]:
                    if neighbor not in visited:
                        visited.add(neighbor)
                        stack.append(neighbor)
            components.append(sorted(component))
        return components

    def _check_connectivity(self, grid: CrosswordGrid, result: ValidationResult) -> None:
        words = list(grid.words)
        if len(words) <= 1:
            return

        graph = self._build_graph(words)
        components = self._connected_components(graph)
        if len(components) > 1:
            result.add_error(
                f"Grid has {len(components)} disconnected components. All words must be connected through intersections"
            )
            for number, component in enumerate(components, start=1):
                texts = ", ".join(words[index].text for index in component)
                result.add_error(f"Disconnected component {number}: {texts}")

        for index, neighbors in graph.items():
            if not neighbors:
                result.add_error(
                    f"Word '{words[index].text}' is isolated - it must intersect with at least one other word"
                )

    # ------------------------------------------------------------------
    # Quality metrics
    # ------------------------------------------------------------------
    def _check_quality(self, grid: CrosswordGrid, result: ValidationResult) -> None:
        stats = grid.get_stats()
        if stats.fill_percentage < LOW_FILL_PERCENTAGE:
            result.add_warning(
                f"Very low fill percentage ({stats.fill_percentage:.1f}%). Consider adding more words"
            )
        elif stats.fill_percentage > HIGH_FILL_PERCENTAGE:
            result.add_info(f"High fill percentage ({stats.fill_percentage:.1f}%). Grid is well filled")

        words = grid.words
        if not words:
            return

        average = sum(word.length for word in words) / len(words)
        if average < 2.5:
            result.add_info(f"Average word length is short ({average:.1f}). Using many short words")

        duplicates = Counter(word.text.upper() for word in words)
        for text, times in sorted(duplicates.items()):
            if times > 1:
                result.add_error(f"Duplicate word found: '{text}' appears {times} times")

        if {word.number for word in words} != set(range(1, len(words) + 1)):
            result.add_info("Word numbering may need adjustment")


def is_valid_crossword(grid: CrosswordGrid) -> bool:
    return GridValidator().is_valid_crossword(grid)
