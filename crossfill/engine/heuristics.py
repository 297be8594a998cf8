"""Scoring heuristics used by the placement pipeline.

All functions are pure apart from the random source passed in, so a seeded
``random.Random`` makes every ranking reproducible.
"""

from __future__ import annotations

import math
import random
from collections import Counter
from dataclasses import dataclass
from typing import Dict, Iterable, List, Sequence

from ..core.constants import COMMON_CONSONANTS, DEFAULT_LOCALE_LETTERS, VOWELS, Direction
from ..core.models import Intersection, Word
from .grid import CrosswordGrid


CROWDING_RADIUS = 3


def count_letters(text: str, alphabet: str) -> int:
    return sum(1 for letter in text if letter in alphabet)


def letter_presence(words: Iterable[Word]) -> Dict[str, int]:
    """Map each letter to the number of words containing it at least once."""

    presence: Counter = Counter()
    for word in words:
        presence.update(set(word.text))
    return dict(presence)


# ------------------------------------------------------------------
# Candidate ordering
# ------------------------------------------------------------------
def connectivity_score(
    word: Word,
    presence: Dict[str, int],
    locale_letters: str = DEFAULT_LOCALE_LETTERS,
) -> float:
    """How well ``word`` can cross the rest of the candidate pool.

    Each letter occurrence earns ``1/sqrt(freq)`` per other candidate sharing
    that letter, so repeated letters are not counted at full weight.
    """

    frequencies = Counter(word.text)
    score = 0.0
    for letter in word.text:
        # presence counts the word itself once
        others = presence.get(letter, 0) - 1
        score += others / math.sqrt(frequencies[letter])

    score += count_letters(word.text, COMMON_CONSONANTS) * 0.5
    score += count_letters(word.text, VOWELS) * 0.3
    score += count_letters(word.text, locale_letters) * 0.2
    if word.length > 8:
        score *= 0.8
    return score


def sort_by_connectivity(
    words: Sequence[Word],
    rng: random.Random,
    locale_letters: str = DEFAULT_LOCALE_LETTERS,
) -> List[Word]:
    presence = letter_presence(words)
    keyed = [
        (
            -(connectivity_score(word, presence, locale_letters) + rng.random() * 5),
            word.length + rng.randint(-1, 1),
            index,
            word,
        )
        for index, word in enumerate(words)
    ]
    keyed.sort(key=lambda item: item[:3])
    return [item[3] for item in keyed]


# ------------------------------------------------------------------
# Anchors
# ------------------------------------------------------------------
def intersection_potential(word: Word, pool: Sequence[Word]) -> int:
    total = 0
    for letter in set(word.text):
        total += sum(1 for other in pool if other.text != word.text and letter in other.text)
    return total


def anchor_score(word: Word, pool: Sequence[Word], locale_letters: str = DEFAULT_LOCALE_LETTERS) -> float:
    score = count_letters(word.text, VOWELS) * 1.5
    score += count_letters(word.text, COMMON_CONSONANTS) * 1.0
    score += count_letters(word.text, locale_letters) * 0.5

    if 6 <= word.length <= 9:
        score += 3
    elif 5 <= word.length <= 8:
        score += 2

    score += len(set(word.text)) * 0.5
    score += intersection_potential(word, pool) / 500.0
    return score


def second_anchor_score(
    word: Word,
    first_anchor: Word,
    pool: Sequence[Word],
    locale_letters: str = DEFAULT_LOCALE_LETTERS,
) -> float:
    score = anchor_score(word, pool, locale_letters)
    anchor_letters = set(first_anchor.text)
    score += len(set(word.text) & anchor_letters) * 3
    score += len(set(word.text) - anchor_letters) * 1.5
    return score


def anchor_intersection_score(intersection: Intersection, grid: CrosswordGrid) -> float:
    score = 1.0
    distance_from_middle = abs(intersection.my_index - intersection.crossing_word.length / 2.0)
    score += (5 - distance_from_middle) * 0.5
    center_distance = abs(intersection.row - grid.height / 2.0) + abs(intersection.col - grid.width / 2.0)
    score -= center_distance * 0.1
    return score


# ------------------------------------------------------------------
# Adaptive placement
# ------------------------------------------------------------------
def preferred_direction(grid: CrosswordGrid) -> Direction:
    across, down = grid.words_by_direction()
    return Direction.ACROSS if len(across) <= len(down) else Direction.DOWN


def count_nearby_letters(grid: CrosswordGrid, row: int, col: int, radius: int = CROWDING_RADIUS) -> int:
    count = 0
    for r in range(max(0, row - radius), min(grid.height - 1, row + radius) + 1):
        for c in range(max(0, col - radius), min(grid.width - 1, col + radius) + 1):
            if (r, c) != (row, col) and grid.cells[r][c].has_letter:
                count += 1
    return count


def adaptive_word_score(
    word: Word,
    intersections: Sequence[Intersection],
    rng: random.Random,
    locale_letters: str = DEFAULT_LOCALE_LETTERS,
) -> float:
    score = word.length * 1.5
    score += len(intersections) * 3
    score += count_letters(word.text, VOWELS + locale_letters) * 0.5
    score += count_letters(word.text, COMMON_CONSONANTS) * 0.3
    if word.length > 10:
        score -= 2
    score += rng.random() * 0.5
    return score


def intersection_score(
    intersection: Intersection,
    grid: CrosswordGrid,
    word_length: int,
    preferred: Direction,
) -> float:
    """Rank a crossing point: interior, uncrowded, balancing direction."""

    score = 1.0
    shared = intersection.crossing_word.char_at(intersection.their_index)
    if shared in VOWELS:
        score += 0.5
    if shared in COMMON_CONSONANTS:
        score += 0.3

    score += min(intersection.my_index, word_length - intersection.my_index - 1) * 0.2
    score -= count_nearby_letters(grid, intersection.row, intersection.col) * 0.15
    if intersection.crossing_word.length >= 6:
        score += 0.4
    if intersection.direction == preferred:
        score += 3
    return score


# ------------------------------------------------------------------
# Gaps
# ------------------------------------------------------------------
@dataclass
class Gap:
    """A run of empty cells that could host a word."""

    row: int
    col: int
    length: int
    direction: Direction
    touches: int

    def cells(self) -> List[tuple]:
        dr, dc = self.direction.step
        return [(self.row + dr * i, self.col + dc * i) for i in range(self.length)]


def touches_perpendicular_letter(grid: CrosswordGrid, row: int, col: int, direction: Direction) -> bool:
    dr, dc = direction.perpendicular.step
    return grid.has_letter(row - dr, col - dc) or grid.has_letter(row + dr, col + dc)


def _is_open(grid: CrosswordGrid, row: int, col: int) -> bool:
    cell = grid.cells[row][col]
    return not cell.has_letter and not cell.is_blocked


def _is_bounded(grid: CrosswordGrid, row: int, col: int) -> bool:
    if not grid.is_valid_position(row, col):
        return True
    cell = grid.cells[row][col]
    return cell.has_letter or cell.is_blocked


def find_gaps(grid: CrosswordGrid, min_length: int = 2, max_length: int = 8) -> List[Gap]:
    """Maximal open runs bounded on at least one side, best-connected first."""

    gaps: List[Gap] = []
    for direction in (Direction.ACROSS, Direction.DOWN):
        dr, dc = direction.step
        lines = grid.height if direction == Direction.ACROSS else grid.width
        span = grid.width if direction == Direction.ACROSS else grid.height
        for line in range(lines):
            offset = 0
            while offset < span:
                row, col = (line, offset) if direction == Direction.ACROSS else (offset, line)
                if not _is_open(grid, row, col):
                    offset += 1
                    continue
                length = 0
                while offset + length < span and _is_open(grid, row + dr * length, col + dc * length):
                    length += 1
                if min_length <= length <= max_length and (
                    _is_bounded(grid, row - dr, col - dc)
                    or _is_bounded(grid, row + dr * length, col + dc * length)
                ):
                    touches = sum(
                        1 for i in range(length)
                        if touches_perpendicular_letter(grid, row + dr * i, col + dc * i, direction)
                    )
                    gaps.append(Gap(row, col, length, direction, touches))
                offset += length

    gaps.sort(key=lambda gap: (-gap.touches, -gap.length))
    return gaps


def gap_word_score(word: Word, grid: CrosswordGrid, gap: Gap, locale_letters: str = DEFAULT_LOCALE_LETTERS) -> float:
    score = 0.0
    for row, col in gap.cells()[: word.length]:
        if touches_perpendicular_letter(grid, row, col, gap.direction):
            score += 2
    score += count_letters(word.text, VOWELS + locale_letters + COMMON_CONSONANTS) * 0.3
    return score
