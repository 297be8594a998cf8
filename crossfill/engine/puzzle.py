"""Accepted puzzle wrapper handed to renderers and exporters."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING, List, Optional, Tuple

from ..core.constants import Direction
from ..core.models import AccidentalWord, CrosswordValidationResult, Word
from .grid import CrosswordGrid

if TYPE_CHECKING:
    from ..data.catalog import WordCatalog


class CrosswordPuzzle:
    """A finished grid plus how it was produced."""

    def __init__(self, grid: CrosswordGrid, attempts: int, catalog: Optional["WordCatalog"] = None) -> None:
        self.grid = grid
        self.generation_attempts = attempts
        self.created_at = datetime.now()
        self.statistics = grid.get_stats()
        self.validation_result: Optional[CrosswordValidationResult] = None
        if catalog is not None:
            self.update_validation(catalog)

    def update_validation(self, catalog: "WordCatalog") -> CrosswordValidationResult:
        self.grid.include_valid_accidental_words(catalog)
        self.validation_result = self.grid.validate_crossword(catalog)
        return self.validation_result

    @property
    def words(self) -> Tuple[Word, ...]:
        return self.grid.words

    def clues(self) -> Tuple[List[Word], List[Word]]:
        across, down = self.grid.words_by_direction()
        return sorted(across, key=lambda w: w.number), sorted(down, key=lambda w: w.number)

    def bonus_words(self) -> List[AccidentalWord]:
        if self.validation_result is None:
            return []
        return sorted(self.validation_result.included_words, key=lambda acc: acc.puzzle_number)

    def clues_text(self) -> str:
        across, down = self.clues()
        lines: List[str] = ["ACROSS"]
        lines.extend(f"  {word.number}. {word.clue or word.text}" for word in across)
        lines.append("DOWN")
        lines.extend(f"  {word.number}. {word.clue or word.text}" for word in down)

        bonus = self.bonus_words()
        if bonus:
            lines.append("BONUS")
            for acc in bonus:
                direction = "across" if acc.direction == Direction.ACROSS else "down"
                lines.append(f"  {acc.puzzle_number}. ({direction}) {acc.clue or acc.text}")
        return "\n".join(lines)

    def to_jsonable(self) -> dict:
        payload = self.grid.to_jsonable()
        payload["created_at"] = self.created_at.isoformat(timespec="seconds")
        payload["generation_attempts"] = self.generation_attempts
        payload["fill_percentage"] = round(self.statistics.fill_percentage, 2)
        return payload
