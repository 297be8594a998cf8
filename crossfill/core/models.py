"""Data models supporting the crossword generator."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, NamedTuple, Optional, Set, Tuple

from .constants import FILLER, Difficulty, Direction
from ..data.normalization import normalize_word


@dataclass
class Cell:
    """Represents a grid cell with metadata."""

    letter: Optional[str] = None
    is_blocked: bool = False
    is_part_of_word: bool = False
    number: int = 0
    word_ids: Set[int] = field(default_factory=set)

    @property
    def has_letter(self) -> bool:
        return self.letter is not None and self.letter != FILLER

    @property
    def has_filler(self) -> bool:
        return self.letter == FILLER

    @property
    def is_empty(self) -> bool:
        return self.letter is None and not self.is_blocked

    @property
    def is_numbered(self) -> bool:
        return self.number > 0

    def set_letter(self, letter: str, word_id: int) -> None:
        self.letter = letter.upper()
        self.is_part_of_word = True
        self.word_ids.add(word_id)

    def block(self) -> None:
        self.is_blocked = True
        self.letter = None
        self.is_part_of_word = False
        self.number = 0
        self.word_ids.clear()

    def clear(self) -> None:
        self.letter = None
        self.is_blocked = False
        self.is_part_of_word = False
        self.number = 0
        self.word_ids.clear()

    def __str__(self) -> str:
        if self.is_blocked:
            return "#"
        if self.has_letter or self.has_filler:
            return self.letter or " "
        return " "


@dataclass(eq=False)
class Word:
    """A catalog word plus its placement on a grid.

    ``text`` is normalized to upper case on creation. The placement fields are
    owned by :class:`~crossfill.engine.grid.CrosswordGrid`, which also hands
    out the integer ``id`` the first time the word is placed.
    """

    text: str
    clue: str = ""
    category: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM
    id: Optional[int] = None
    start_row: int = -1
    start_col: int = -1
    direction: Direction = Direction.ACROSS
    number: int = 0
    is_placed: bool = False

    def __post_init__(self) -> None:
        self.text = normalize_word(self.text)
        self.clue = (self.clue or "").strip()

    @property
    def length(self) -> int:
        return len(self.text)

    @property
    def end_row(self) -> int:
        if self.direction == Direction.ACROSS:
            return self.start_row
        return self.start_row + self.length - 1

    @property
    def end_col(self) -> int:
        if self.direction == Direction.ACROSS:
            return self.start_col + self.length - 1
        return self.start_col

    def char_at(self, index: int) -> str:
        if index < 0 or index >= len(self.text):
            raise IndexError(f"Position {index} outside word '{self.text}'")
        return self.text[index]

    def positions(self) -> List[Tuple[int, int]]:
        if not self.is_placed:
            return []
        dr, dc = self.direction.step
        return [(self.start_row + dr * i, self.start_col + dc * i) for i in range(self.length)]

    def intersects_with(self, other: "Word") -> bool:
        if not self.is_placed or not other.is_placed:
            return False
        return not set(self.positions()).isdisjoint(other.positions())

    def intersections(self, other: "Word") -> List[Tuple[int, int, int, int]]:
        """Return ``(row, col, my_index, other_index)`` for crossing cells."""

        if not self.is_placed or not other.is_placed or self.direction == other.direction:
            return []
        other_index = {pos: idx for idx, pos in enumerate(other.positions())}
        crossings: List[Tuple[int, int, int, int]] = []
        for my_index, (row, col) in enumerate(self.positions()):
            if (row, col) in other_index:
                crossings.append((row, col, my_index, other_index[(row, col)]))
        return crossings

    def __str__(self) -> str:
        return f"{self.number}. {self.text} ({self.direction.value}) - {self.clue}"


class Intersection(NamedTuple):
    """A candidate start position crossing an already placed word."""

    row: int
    col: int
    direction: Direction
    crossing_word: Word
    my_index: int
    their_index: int


@dataclass
class AccidentalWord:
    """A letter run of length >= 2 that is not an intentionally placed word."""

    text: str
    start_row: int
    start_col: int
    direction: Direction
    length: int
    is_valid: Optional[bool] = None
    should_include: bool = False
    puzzle_number: int = 0
    clue: str = ""

    @property
    def key(self) -> Tuple[str, int, int, Direction]:
        return (self.text, self.start_row, self.start_col, self.direction)

    @property
    def validation_status(self) -> str:
        if self.is_valid is None:
            return "not checked"
        if self.is_valid and self.should_include:
            return "valid word (included in puzzle)"
        if self.is_valid:
            return "valid word"
        return "invalid word"

    def __str__(self) -> str:
        direction = "across" if self.direction == Direction.ACROSS else "down"
        number = f" #{self.puzzle_number}" if self.should_include else ""
        position = f"({self.start_row + 1}, {self.start_col + 1})"
        return f"{self.text}{number} - {direction} from {position} - {self.validation_status}"


@dataclass
class GridStats:
    total_cells: int
    filled_cells: int
    blocked_cells: int
    empty_cells: int
    word_count: int
    fill_percentage: float


@dataclass
class CrosswordValidationResult:
    """Accidental-word report produced by a full grid scan."""

    is_valid: bool = True
    accidental_words: List[AccidentalWord] = field(default_factory=list)
    valid_accidental_words: List[AccidentalWord] = field(default_factory=list)
    invalid_accidental_words: List[AccidentalWord] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def has_invalid_words(self) -> bool:
        return bool(self.invalid_accidental_words)

    @property
    def included_words(self) -> List[AccidentalWord]:
        return [word for word in self.valid_accidental_words if word.should_include]

    def summary(self) -> str:
        if not self.accidental_words:
            return "No accidental words found"
        return (
            f"Total: {len(self.accidental_words)}, "
            f"valid words: {len(self.valid_accidental_words)}, "
            f"invalid words: {len(self.invalid_accidental_words)}"
        )

    def detailed_report(self) -> str:
        lines: List[str] = []
        if self.valid_accidental_words:
            lines.append("Valid accidental words:")
            lines.extend(f"  {_describe(word)}" for word in self.valid_accidental_words)
        if self.invalid_accidental_words:
            lines.append("Invalid words to fix:")
            lines.extend(f"  {_describe(word)}" for word in self.invalid_accidental_words)
        return "\n".join(lines)


def _describe(word: AccidentalWord) -> str:
    direction = "across" if word.direction == Direction.ACROSS else "down"
    return f"{word.text} - {direction} from ({word.start_row + 1}, {word.start_col + 1})"
