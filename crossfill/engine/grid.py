"""Grid representation, placement primitives and accidental-word scanning."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, FrozenSet, Iterable, List, NamedTuple, Optional, Set, Tuple

from ..core.constants import FILLER, Bounds, Direction
from ..core.exceptions import GridDimensionError, GridPositionError
from ..core.models import AccidentalWord, Cell, CrosswordValidationResult, GridStats, Intersection, Word
from ..utils.logger import get_logger

if TYPE_CHECKING:
    from ..data.catalog import WordCatalog


LOGGER = get_logger(__name__)


@dataclass
class GridConfig:
    """Configuration values driving the grid layout."""

    height: int
    width: int

    def bounds(self) -> Bounds:
        return Bounds(rows=self.height, cols=self.width)


class CellState(NamedTuple):
    letter: Optional[str]
    number: int
    word_ids: FrozenSet[int]
    is_part_of_word: bool


class WordState(NamedTuple):
    id: Optional[int]
    start_row: int
    start_col: int
    direction: Direction
    number: int
    is_placed: bool

    @classmethod
    def of(cls, word: Word) -> "WordState":
        return cls(word.id, word.start_row, word.start_col, word.direction, word.number, word.is_placed)

    def apply(self, word: Word) -> None:
        word.id = self.id
        word.start_row = self.start_row
        word.start_col = self.start_col
        word.direction = self.direction
        word.number = self.number
        word.is_placed = self.is_placed


@dataclass(frozen=True)
class GridSnapshot:
    """Immutable copy of every cell plus the word list and word placements."""

    cells: Tuple[Tuple[CellState, ...], ...]
    words: Tuple[Word, ...]
    word_states: Tuple[WordState, ...]
    next_word_id: int


class CrosswordGrid:
    """Encapsulates the crossword grid with placement helpers.

    Two placement paths exist. :meth:`try_place_word` only checks geometry.
    :meth:`try_place_word_with_validation` is the transactional variant used
    during generation: it snapshots the grid, places speculatively, scans the
    touched neighbourhood for accidental words and either commits or restores
    the snapshot exactly.
    """

    def __init__(self, config: GridConfig) -> None:
        if config.width <= 0 or config.height <= 0:
            raise GridDimensionError(
                f"Grid dimensions must be positive, got {config.width}x{config.height}"
            )
        self.config = config
        self.bounds = config.bounds()
        self.cells: List[List[Cell]] = [
            [Cell() for _ in range(self.bounds.cols)] for _ in range(self.bounds.rows)
        ]
        self._words: List[Word] = []
        self._bonus_words: List[AccidentalWord] = []
        self._next_word_id = 1

    @classmethod
    def of_size(cls, width: int, height: int) -> "CrosswordGrid":
        return cls(GridConfig(height=height, width=width))

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------
    @property
    def width(self) -> int:
        return self.bounds.cols

    @property
    def height(self) -> int:
        return self.bounds.rows

    @property
    def words(self) -> Tuple[Word, ...]:
        return tuple(self._words)

    @property
    def bonus_words(self) -> Tuple[AccidentalWord, ...]:
        return tuple(self._bonus_words)

    def is_valid_position(self, row: int, col: int) -> bool:
        return self.bounds.contains(row, col)

    def cell(self, row: int, col: int) -> Cell:
        if not self.bounds.contains(row, col):
            raise GridPositionError(f"Position ({row}, {col}) is outside grid bounds")
        return self.cells[row][col]

    def has_letter(self, row: int, col: int) -> bool:
        return self.bounds.contains(row, col) and self.cells[row][col].has_letter

    def words_by_direction(self) -> Tuple[List[Word], List[Word]]:
        across = [w for w in self._words if w.direction == Direction.ACROSS]
        down = [w for w in self._words if w.direction == Direction.DOWN]
        return across, down

    def get_stats(self) -> GridStats:
        filled = 0
        blocked = 0
        for row in self.cells:
            for cell in row:
                if cell.has_letter:
                    filled += 1
                elif cell.is_blocked:
                    blocked += 1
        total = self.bounds.rows * self.bounds.cols
        return GridStats(
            total_cells=total,
            filled_cells=filled,
            blocked_cells=blocked,
            empty_cells=total - filled - blocked,
            word_count=len(self._words),
            fill_percentage=filled / total * 100,
        )

    # ------------------------------------------------------------------
    # Placement primitives
    # ------------------------------------------------------------------
    def can_place_word(self, word: Word, row: int, col: int, direction: Direction) -> bool:
        if not word.text:
            return False
        dr, dc = direction.step
        end_row = row + dr * (word.length - 1)
        end_col = col + dc * (word.length - 1)
        if not self.bounds.contains(row, col) or not self.bounds.contains(end_row, end_col):
            return False

        for index, letter in enumerate(word.text):
            cell = self.cells[row + dr * index][col + dc * index]
            if cell.is_blocked:
                return False
            if cell.has_letter and (cell.letter != letter or self._owned_in_direction(cell, direction)):
                return False

        return self._check_word_isolation(word, row, col, direction)

    def _owned_in_direction(self, cell: Cell, direction: Direction) -> bool:
        # Two words running the same way may never share a cell.
        return any(w.id in cell.word_ids and w.direction == direction for w in self._words)

    def _check_word_isolation(self, word: Word, row: int, col: int, direction: Direction) -> bool:
        # Letters directly before or after the span would silently extend the word.
        dr, dc = direction.step
        if self.has_letter(row - dr, col - dc):
            return False
        if self.has_letter(row + dr * word.length, col + dc * word.length):
            return False
        return True

    def try_place_word(self, word: Word, row: int, col: int, direction: Direction) -> bool:
        if word in self._words or not self.can_place_word(word, row, col, direction):
            return False
        self._write_word(word, row, col, direction)
        self._renumber_after_change()
        return True

    def _write_word(self, word: Word, row: int, col: int, direction: Direction) -> None:
        if word.id is None:
            word.id = self._next_word_id
            self._next_word_id += 1
        word.start_row = row
        word.start_col = col
        word.direction = direction
        word.is_placed = True

        dr, dc = direction.step
        for index, letter in enumerate(word.text):
            self.cells[row + dr * index][col + dc * index].set_letter(letter, word.id)
        self._words.append(word)

    def remove_word(self, word: Word) -> bool:
        if not word.is_placed or word not in self._words:
            return False

        for row, col in word.positions():
            cell = self.cells[row][col]
            cell.word_ids.discard(word.id)
            if not cell.word_ids:
                cell.clear()

        self._words.remove(word)
        word.is_placed = False
        word.number = 0
        word.start_row = -1
        word.start_col = -1
        self._renumber_after_change()
        return True

    def _would_connect_to_existing_words(self, word: Word, row: int, col: int, direction: Direction) -> bool:
        dr, dc = direction.step
        for index, letter in enumerate(word.text):
            cell = self.cells[row + dr * index][col + dc * index]
            if cell.has_letter and cell.letter == letter:
                return True
        return False

    def try_place_word_with_validation(
        self,
        word: Word,
        row: int,
        col: int,
        direction: Direction,
        catalog: Optional["WordCatalog"] = None,
        reject_invalid: bool = True,
    ) -> bool:
        """Place ``word`` atomically, rejecting placements that spell bad words.

        Returns ``False`` and leaves the grid untouched when the placement is
        geometrically impossible, would start an island, creates an accidental
        word the catalog rejects, or creates a valid accidental word whose
        text duplicates a placed word. Unexpected errors restore the snapshot
        before they propagate.
        """

        if word in self._words or not self.can_place_word(word, row, col, direction):
            return False
        if self._words and not self._would_connect_to_existing_words(word, row, col, direction):
            return False

        snapshot = self.snapshot()
        word_state = WordState.of(word)
        try:
            self._write_word(word, row, col, direction)
            accepted = True
            if catalog is not None and reject_invalid:
                accepted = self._placement_is_clean(word, catalog)
        except Exception:
            LOGGER.warning(
                "Placement of '%s' at (%s,%s) %s failed unexpectedly; restoring grid",
                word.text,
                row,
                col,
                direction.value,
                exc_info=True,
            )
            self.restore(snapshot)
            word_state.apply(word)
            raise

        if not accepted:
            self.restore(snapshot)
            word_state.apply(word)
            return False

        self._renumber_after_change()
        return True

    def _placement_is_clean(self, word: Word, catalog: "WordCatalog") -> bool:
        accidental = self.detect_accidental_words_near(
            word.start_row, word.start_col, word.direction, word.length, catalog
        )
        if any(acc.is_valid is False for acc in accidental):
            return False

        existing = {w.text.upper() for w in self._words if w is not word}
        for acc in accidental:
            if acc.is_valid and acc.text.upper() in existing:
                LOGGER.debug("Rejecting '%s': accidental '%s' duplicates a placed word", word.text, acc.text)
                return False
        return True

    # ------------------------------------------------------------------
    # Snapshot / restore
    # ------------------------------------------------------------------
    def snapshot(self) -> GridSnapshot:
        return GridSnapshot(
            cells=tuple(
                tuple(
                    CellState(cell.letter, cell.number, frozenset(cell.word_ids), cell.is_part_of_word)
                    for cell in row
                )
                for row in self.cells
            ),
            words=tuple(self._words),
            word_states=tuple(WordState.of(word) for word in self._words),
            next_word_id=self._next_word_id,
        )

    def restore(self, snapshot: GridSnapshot) -> None:
        for row_cells, row_states in zip(self.cells, snapshot.cells):
            for cell, state in zip(row_cells, row_states):
                cell.letter = state.letter
                cell.number = state.number
                cell.word_ids = set(state.word_ids)
                cell.is_part_of_word = state.is_part_of_word
        self._words = list(snapshot.words)
        for word, state in zip(snapshot.words, snapshot.word_states):
            state.apply(word)
        self._next_word_id = snapshot.next_word_id

    # ------------------------------------------------------------------
    # Intersections
    # ------------------------------------------------------------------
    def get_possible_intersections(self, word: Word) -> List[Intersection]:
        """Every start position that crosses a placed word on a shared letter."""

        found: List[Intersection] = []
        for existing in self._words:
            direction = existing.direction.perpendicular
            for my_index, letter in enumerate(word.text):
                for their_index, their_letter in enumerate(existing.text):
                    if letter != their_letter:
                        continue
                    if existing.direction == Direction.ACROSS:
                        row = existing.start_row - my_index
                        col = existing.start_col + their_index
                    else:
                        row = existing.start_row + their_index
                        col = existing.start_col - my_index
                    if self.bounds.contains(row, col):
                        found.append(Intersection(row, col, direction, existing, my_index, their_index))
        return found

    # ------------------------------------------------------------------
    # Clue numbering
    # ------------------------------------------------------------------
    def renumber_clues(self) -> None:
        self.renumber_clues_including_accidental(None)

    def renumber_clues_including_accidental(
        self, accidental_words: Optional[Iterable[AccidentalWord]] = None
    ) -> None:
        for row in self.cells:
            for cell in row:
                cell.number = 0
        for word in self._words:
            word.number = 0

        starts: Dict[Tuple[int, int], List[object]] = {}
        for word in self._words:
            if word.is_placed:
                starts.setdefault((word.start_row, word.start_col), []).append(word)

        for acc in accidental_words or ():
            if not acc.should_include:
                continue
            covered = any(
                w.start_row == acc.start_row and w.start_col == acc.start_col and w.direction == acc.direction
                for w in self._words
            )
            if not covered:
                starts.setdefault((acc.start_row, acc.start_col), []).append(acc)

        for number, (row, col) in enumerate(sorted(starts), start=1):
            for item in starts[(row, col)]:
                if isinstance(item, Word):
                    item.number = number
                else:
                    item.puzzle_number = number
            self.cells[row][col].number = number

    def _renumber_after_change(self) -> None:
        # Bonus words only keep their number while their run is still intact.
        self._bonus_words = [acc for acc in self._bonus_words if self._run_matches(acc)]
        self.renumber_clues_including_accidental(self._bonus_words)

    def _run_matches(self, acc: AccidentalWord) -> bool:
        run = self._extract_run(acc.start_row, acc.start_col, acc.direction)
        return run is not None and run.text == acc.text

    # ------------------------------------------------------------------
    # Accidental words
    # ------------------------------------------------------------------
    def _extract_run(self, row: int, col: int, direction: Direction) -> Optional[AccidentalWord]:
        """Return the letter run starting exactly at ``(row, col)``, if any."""

        if not self.has_letter(row, col):
            return None
        dr, dc = direction.step
        if self.has_letter(row - dr, col - dc):
            return None

        letters: List[str] = []
        r, c = row, col
        while self.has_letter(r, c):
            letters.append(self.cells[r][c].letter or "")
            r += dr
            c += dc
        if len(letters) < 2:
            return None
        text = "".join(letters)
        return AccidentalWord(text=text, start_row=row, start_col=col, direction=direction, length=len(text))

    def _run_start(self, row: int, col: int, direction: Direction) -> Tuple[int, int]:
        dr, dc = direction.step
        while self.has_letter(row - dr, col - dc):
            row -= dr
            col -= dc
        return row, col

    def _is_intentional(self, acc: AccidentalWord) -> bool:
        text = acc.text.upper()
        return any(
            w.start_row == acc.start_row
            and w.start_col == acc.start_col
            and w.direction == acc.direction
            and w.text.upper() == text
            for w in self._words
        )

    def _classify(self, acc: AccidentalWord, catalog: "WordCatalog") -> None:
        acc.is_valid = catalog.is_valid_word(acc.text)
        if not acc.is_valid:
            return
        acc.clue = catalog.get_clue(acc.text) or ""
        # An intentional word with the same start, direction and text keeps the slot.
        acc.should_include = not self._is_intentional(acc)

    def detect_accidental_words(self, catalog: Optional["WordCatalog"] = None) -> List[AccidentalWord]:
        """Scan the whole grid for letter runs that are not placed words."""

        found: List[AccidentalWord] = []
        seen: Set[Tuple[str, int, int, Direction]] = set()
        for row in range(self.bounds.rows):
            for col in range(self.bounds.cols):
                for direction in (Direction.ACROSS, Direction.DOWN):
                    run = self._extract_run(row, col, direction)
                    if run is None or run.key in seen or self._is_intentional(run):
                        continue
                    seen.add(run.key)
                    found.append(run)

        if catalog is not None:
            for acc in found:
                self._classify(acc, catalog)
        return found

    def detect_accidental_words_near(
        self,
        start_row: int,
        start_col: int,
        direction: Direction,
        length: int,
        catalog: "WordCatalog",
    ) -> List[AccidentalWord]:
        """Scan only the runs that a word at the given span can have changed."""

        found: List[AccidentalWord] = []
        seen: Set[Tuple[str, int, int, Direction]] = set()

        def visit(row: int, col: int, run_direction: Direction) -> None:
            run_row, run_col = self._run_start(row, col, run_direction)
            run = self._extract_run(run_row, run_col, run_direction)
            if run is None or run.key in seen:
                return
            seen.add(run.key)
            if not self._is_intentional(run):
                self._classify(run, catalog)
                found.append(run)

        dr, dc = direction.step
        for index in range(length):
            row = start_row + dr * index
            col = start_col + dc * index
            visit(row, col, Direction.ACROSS)
            visit(row, col, Direction.DOWN)

        # Neighbours just outside the span may have merged with it.
        before = (start_row - dr, start_col - dc)
        after = (start_row + dr * length, start_col + dc * length)
        if self.has_letter(*before):
            visit(before[0], before[1], direction)
        if self.has_letter(*after):
            visit(start_row, start_col, direction)
        return found

    def validate_crossword(self, catalog: Optional["WordCatalog"] = None) -> CrosswordValidationResult:
        accidental = self.detect_accidental_words(catalog)
        result = CrosswordValidationResult(
            accidental_words=accidental,
            valid_accidental_words=[acc for acc in accidental if acc.is_valid is True],
            invalid_accidental_words=[acc for acc in accidental if acc.is_valid is False],
        )

        included = result.included_words
        if catalog is not None and included:
            self._bonus_words = list(included)
            self.renumber_clues_including_accidental(result.valid_accidental_words)

        if result.invalid_accidental_words:
            result.is_valid = False
            result.errors.append(f"Found {len(result.invalid_accidental_words)} invalid accidental words")
        if included:
            result.warnings.append(f"Included {len(included)} valid accidental words as clues")
        return result

    def include_valid_accidental_words(self, catalog: "WordCatalog") -> List[AccidentalWord]:
        """Promote catalog-valid accidental words to numbered bonus clues."""

        valid = [acc for acc in self.detect_accidental_words(catalog) if acc.is_valid]
        self._bonus_words = [acc for acc in valid if acc.should_include]
        self.renumber_clues_including_accidental(valid)
        return valid

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------
    def fill_empty_cells_with_asterisks(self) -> None:
        for row in self.cells:
            for cell in row:
                if cell.is_empty:
                    cell.letter = FILLER
                    cell.is_part_of_word = False

    def to_jsonable(self) -> Dict[str, object]:
        return {
            "width": self.width,
            "height": self.height,
            "cells": [
                [
                    {
                        "letter": cell.letter,
                        "blocked": cell.is_blocked,
                        "number": cell.number,
                        "word_ids": sorted(cell.word_ids),
                    }
                    for cell in row
                ]
                for row in self.cells
            ],
            "words": [
                {
                    "id": word.id,
                    "text": word.text,
                    "clue": word.clue,
                    "number": word.number,
                    "start": [word.start_row, word.start_col],
                    "direction": word.direction.value,
                }
                for word in self._words
            ],
            "bonus_words": [
                {
                    "text": acc.text,
                    "clue": acc.clue,
                    "number": acc.puzzle_number,
                    "start": [acc.start_row, acc.start_col],
                    "direction": acc.direction.value,
                }
                for acc in self._bonus_words
            ],
        }
