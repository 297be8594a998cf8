"""Main crossword generator orchestration.

Each attempt builds a fresh grid and runs the placement pipeline:
  1. Rank catalog candidates by connectivity.
  2. Place two anchor words near the centre.
  3. Adaptive main loop with a shrinking target length.
  4. Gap-filling passes, then a short-word finishing pass.
  5. Acceptance gate; accepted grids get filler in every unused cell.
"""

from __future__ import annotations

import random
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Set, Tuple

from ..core.constants import DEFAULT_LOCALE_LETTERS, VOWELS, Difficulty, Direction
from ..core.exceptions import (ConfigurationError, CrosswordError, GenerationCancelledError,
                               GenerationFailedError, NoCandidateWordsError)
from ..core.models import Word
from ..data.catalog import WordCatalog
from .grid import CrosswordGrid, GridConfig
from .heuristics import (adaptive_word_score, anchor_intersection_score, anchor_score, count_letters,
                         find_gaps, gap_word_score, intersection_score, preferred_direction,
                         second_anchor_score, sort_by_connectivity)
from .puzzle import CrosswordPuzzle
from .validator import GridValidator
from ..utils.logger import get_logger


LOGGER = get_logger(__name__)

SEED_SPACE = 2 ** 32
DIAGNOSTIC_INTERVAL = 50


@dataclass
class GeneratorConfig:
    width: int = 15
    height: int = 15
    min_word_length: int = 2
    max_word_length: int = 12
    target_fill_percentage: float = 45.0
    difficulty: Optional[Difficulty] = None
    categories: Optional[List[str]] = None
    max_attempts: int = 100
    reject_invalid_words: bool = True
    seed: Optional[int] = None
    max_consecutive_failures: int = 50
    max_placement_attempts: int = 2000
    gap_filling_passes: int = 3
    gap_min_length: int = 2
    gap_max_length: int = 8
    anchor_top_k: int = 5
    locale_letters: str = DEFAULT_LOCALE_LETTERS

    # ------------------------------------------------------------------
    # Presets
    # ------------------------------------------------------------------
    @classmethod
    def small(cls, **overrides) -> "GeneratorConfig":
        return cls._preset(9, 30, overrides)

    @classmethod
    def easy(cls, **overrides) -> "GeneratorConfig":
        return cls._preset(11, 50, overrides)

    @classmethod
    def medium(cls, **overrides) -> "GeneratorConfig":
        return cls._preset(15, 80, overrides)

    @classmethod
    def hard(cls, **overrides) -> "GeneratorConfig":
        return cls._preset(19, 120, overrides)

    @classmethod
    def _preset(cls, size: int, attempts: int, overrides: Dict[str, object]) -> "GeneratorConfig":
        values: Dict[str, object] = dict(
            width=size,
            height=size,
            max_word_length=size,
            target_fill_percentage=45.0,
            max_attempts=attempts,
            reject_invalid_words=True,
        )
        values.update(overrides)
        return cls(**values)  # type: ignore[arg-type]

    def validate(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ConfigurationError(f"Grid dimensions must be positive, got {self.width}x{self.height}")
        if self.min_word_length < 1 or self.max_word_length < self.min_word_length:
            raise ConfigurationError(
                f"Invalid word length range {self.min_word_length}..{self.max_word_length}"
            )
        if not 0 <= self.target_fill_percentage <= 100:
            raise ConfigurationError(f"Fill target must be within 0..100, got {self.target_fill_percentage}")
        if self.max_attempts <= 0:
            raise ConfigurationError("max_attempts must be positive")
        if self.max_consecutive_failures <= 0 or self.max_placement_attempts <= 0:
            raise ConfigurationError("Placement limits must be positive")
        if self.gap_min_length < 2 or self.gap_max_length < self.gap_min_length:
            raise ConfigurationError(f"Invalid gap length range {self.gap_min_length}..{self.gap_max_length}")
        if self.anchor_top_k <= 0:
            raise ConfigurationError("anchor_top_k must be positive")

    def to_grid_config(self) -> GridConfig:
        return GridConfig(height=self.height, width=self.width)


@dataclass
class PlacementState:
    """Mutable bookkeeping for one generation attempt."""

    grid: CrosswordGrid
    pool: List[Word]
    ordered: List[Word]
    rng: random.Random
    placed: Set[Word] = field(default_factory=set)
    used_texts: Set[str] = field(default_factory=set)

    def is_available(self, word: Word) -> bool:
        return word not in self.placed and word.text.upper() not in self.used_texts


@dataclass
class AttemptOutcome:
    attempt_no: int
    seed: int
    grid: CrosswordGrid
    accepted: bool
    errored: bool = False

    @property
    def rejected(self) -> bool:
        """Words were placed but the grid never cleared the acceptance gate."""

        return not self.accepted and not self.errored and bool(self.grid.words)


class _AnyEvent:
    """Reports set when any of the wrapped events is set."""

    def __init__(self, *events) -> None:
        self._events = [event for event in events if event is not None]

    def is_set(self) -> bool:
        return any(event.is_set() for event in self._events)


def _check_cancelled(cancel_event) -> None:
    if cancel_event is not None and cancel_event.is_set():
        raise GenerationCancelledError("Crossword generation was cancelled")


class CrosswordGenerator:
    """High-level orchestrator: retries the placement pipeline until a grid is accepted."""

    def __init__(
        self,
        catalog: WordCatalog,
        config: Optional[GeneratorConfig] = None,
        validator: Optional[GridValidator] = None,
    ) -> None:
        self.catalog = catalog
        self.config = config or GeneratorConfig()
        self.config.validate()
        self.validator = validator or GridValidator()
        self.rng = random.Random(self.config.seed)

    # ------------------------------------------------------------------
    # Public entrypoints
    # ------------------------------------------------------------------
    def generate(self, cancel_event=None) -> CrosswordPuzzle:
        attempts = 0
        rejections = 0
        max_attempts = self.config.max_attempts

        while attempts < max_attempts:
            _check_cancelled(cancel_event)
            attempts += 1
            LOGGER.info("Generation attempt %s/%s", attempts, max_attempts)
            outcome = self._run_attempt(attempts, self.rng.randrange(SEED_SPACE), cancel_event)
            if outcome.accepted:
                return self._finish(outcome, attempts, rejections)
            if outcome.rejected:
                rejections += 1
            self._log_diagnostics(attempts, rejections)

        raise self._failure(attempts, rejections)

    def generate_parallel(self, workers: int = 4, cancel_event=None) -> CrosswordPuzzle:
        """Run independent attempts concurrently and keep the first accepted one."""

        if workers < 1:
            raise ConfigurationError("workers must be at least 1")

        attempts = 0
        rejections = 0
        max_attempts = self.config.max_attempts

        while attempts < max_attempts:
            _check_cancelled(cancel_event)
            batch_size = min(workers, max_attempts - attempts)
            batch = [(attempts + i + 1, self.rng.randrange(SEED_SPACE)) for i in range(batch_size)]
            attempts += batch_size

            stop = threading.Event()
            attempt_cancel = _AnyEvent(stop, cancel_event)
            winner: Optional[AttemptOutcome] = None
            with ThreadPoolExecutor(max_workers=batch_size) as executor:
                futures = {
                    executor.submit(self._run_attempt, attempt_no, seed, attempt_cancel): attempt_no
                    for attempt_no, seed in batch
                }
                try:
                    for future in as_completed(futures):
                        try:
                            outcome = future.result()
                        except GenerationCancelledError:
                            _check_cancelled(cancel_event)
                            continue
                        if outcome.accepted:
                            LOGGER.info(
                                "Generation succeeded on attempt %s/%s (seed %s)",
                                outcome.attempt_no,
                                max_attempts,
                                outcome.seed,
                            )
                            winner = outcome
                            break
                        if outcome.rejected:
                            rejections += 1
                finally:
                    stop.set()

            if winner is not None:
                return self._finish(winner, attempts, rejections)
            self._log_diagnostics(attempts, rejections)

        raise self._failure(attempts, rejections)

    # ------------------------------------------------------------------
    # Attempt bookkeeping
    # ------------------------------------------------------------------
    def _run_attempt(self, attempt_no: int, seed: int, cancel_event=None) -> AttemptOutcome:
        rng = random.Random(seed)
        grid = CrosswordGrid(self.config.to_grid_config())
        try:
            accepted = self._try_generate(grid, rng, cancel_event)
        except (NoCandidateWordsError, GenerationCancelledError):
            raise
        except CrosswordError as exc:
            LOGGER.warning("Attempt %s failed: %s", attempt_no, exc)
            return AttemptOutcome(attempt_no, seed, grid, accepted=False, errored=True)
        if not accepted:
            LOGGER.debug("Attempt %s discarded with %d words placed", attempt_no, len(grid.words))
        return AttemptOutcome(attempt_no, seed, grid, accepted=accepted)

    def _finish(self, outcome: AttemptOutcome, attempts: int, rejections: int) -> CrosswordPuzzle:
        puzzle = CrosswordPuzzle(outcome.grid, attempts, self.catalog)
        LOGGER.info(
            "Crossword generated after %s attempts (%.1f%% fill, %s words)",
            attempts,
            puzzle.statistics.fill_percentage,
            puzzle.statistics.word_count,
        )
        if rejections:
            LOGGER.info("%s grids were discarded before acceptance", rejections)
        return puzzle

    @staticmethod
    def _log_diagnostics(attempts: int, rejections: int) -> None:
        if attempts % DIAGNOSTIC_INTERVAL == 0 or (
            attempts > 20 and attempts % 25 == 0 and rejections > attempts * 0.8
        ):
            LOGGER.info(
                "Attempt %s: %s rejected for invalid words (%.0f%% rejection rate)",
                attempts,
                rejections,
                rejections / attempts * 100,
            )

    def _failure(self, attempts: int, rejections: int) -> GenerationFailedError:
        max_attempts = self.config.max_attempts
        if rejections:
            rate = rejections / attempts * 100
            message = (
                f"Could not generate a valid crossword after {max_attempts} attempts. "
                f"{rejections} of {attempts} attempts were rejected for invalid words "
                f"({rate:.1f}% rejection rate). A high rejection rate points at overly strict "
                f"validation or a word catalog that is too small"
            )
        else:
            message = (
                f"Could not generate a crossword after {max_attempts} attempts. "
                f"No words could be placed; check the word catalog and generation options"
            )
        LOGGER.error(message)
        return GenerationFailedError(message, attempts=attempts, validation_rejections=rejections)

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------
    def _candidate_words(self) -> List[Word]:
        words = self.catalog.get_words(
            min_length=self.config.min_word_length,
            max_length=self.config.max_word_length,
            difficulty=self.config.difficulty,
            categories=self.config.categories,
        )
        if not words:
            raise NoCandidateWordsError("No suitable words found for the specified criteria")
        return list(words)

    def _try_generate(self, grid: CrosswordGrid, rng: random.Random, cancel_event=None) -> bool:
        pool = self._candidate_words()
        ordered = sort_by_connectivity(pool, rng, self.config.locale_letters)
        state = PlacementState(grid=grid, pool=pool, ordered=ordered, rng=rng)

        if not self._place_anchor_words(state):
            return False

        self._place_words_adaptively(state, cancel_event)

        for pass_no in range(1, self.config.gap_filling_passes + 1):
            _check_cancelled(cancel_event)
            before = grid.get_stats().filled_cells
            self._fill_gaps(state, cancel_event)
            after = grid.get_stats().filled_cells
            LOGGER.debug("Gap pass %s: %s -> %s filled cells", pass_no, before, after)
            if after == before:
                break

        self._fill_with_short_words(state, cancel_event)
        return self._accept(state)

    def _try_place(self, state: PlacementState, word: Word, row: int, col: int, direction: Direction) -> bool:
        placed = state.grid.try_place_word_with_validation(
            word, row, col, direction, self.catalog, self.config.reject_invalid_words
        )
        if placed:
            state.placed.add(word)
            state.used_texts.add(word.text.upper())
        return placed

    # ------------------------------------------------------------------
    # Anchors
    # ------------------------------------------------------------------
    def _place_anchor_words(self, state: PlacementState) -> bool:
        rng = state.rng
        locale = self.config.locale_letters
        longest = min(10, self.config.width - 2)

        scored = [
            (anchor_score(word, state.pool, locale) + rng.random() * 8, word)
            for word in state.pool
            if 5 <= word.length <= longest and state.is_available(word)
        ]
        scored.sort(key=lambda item: item[0], reverse=True)
        top = scored[: self.config.anchor_top_k]

        if top:
            anchor = top[rng.randrange(min(3, len(top)))][1]
        else:
            anchor = next((word for word in state.ordered if state.is_available(word)), None)
        if anchor is None:
            return False

        row = self.config.height // 2
        col = max(0, (self.config.width - anchor.length) // 2)
        if not self._try_place(state, anchor, row, col, Direction.ACROSS):
            LOGGER.debug("Anchor '%s' could not be placed", anchor.text)
            return False

        if len(state.ordered) > 1:
            self._place_second_anchor(state, anchor)
        return True

    def _place_second_anchor(self, state: PlacementState, anchor: Word) -> None:
        grid, rng = state.grid, state.rng
        anchor_letters = set(anchor.text)
        scored = [
            (second_anchor_score(word, anchor, state.pool, self.config.locale_letters) + rng.random() * 5, word)
            for word in state.pool
            if word is not anchor and state.is_available(word) and anchor_letters & set(word.text)
        ]
        scored.sort(key=lambda item: item[0], reverse=True)
        candidates = [word for _, word in scored[:15]]
        if len(candidates) > 3:
            head = candidates[:5]
            rng.shuffle(head)
            candidates = head + candidates[5:]

        for word in candidates:
            ranked = sorted(
                ((anchor_intersection_score(i, grid) + rng.random() * 0.5, i)
                 for i in grid.get_possible_intersections(word)),
                key=lambda item: item[0],
                reverse=True,
            )
            for _, intersection in ranked[:5]:
                if self._try_place(state, word, intersection.row, intersection.col, intersection.direction):
                    LOGGER.debug("Anchors placed: '%s' and '%s'", anchor.text, word.text)
                    return

    # ------------------------------------------------------------------
    # Adaptive main loop
    # ------------------------------------------------------------------
    def _available_words(self, state: PlacementState, target: int, tried: Set[str]) -> List[Word]:
        vowels = VOWELS + self.config.locale_letters
        available = [
            word for word in state.ordered
            if state.is_available(word)
            and word.text not in tried
            and (word.length == target or (target >= 5 and abs(word.length - target) <= 1))
        ]
        available.sort(key=lambda word: (abs(word.length - target), -count_letters(word.text, vowels)))
        return available

    def _select_word(self, state: PlacementState, available: Sequence[Word]) -> Optional[Word]:
        grid, rng = state.grid, state.rng
        preferred = preferred_direction(grid)

        scored: List[Tuple[float, Word]] = []
        for word in available[:25]:
            intersections = grid.get_possible_intersections(word)
            preferred_count = sum(1 for i in intersections if i.direction == preferred)
            score = (
                adaptive_word_score(word, intersections, rng, self.config.locale_letters)
                + preferred_count * 2
                + rng.random() * 3
            )
            if intersections:
                scored.append((score, word))

        if not scored:
            return None
        scored.sort(key=lambda item: item[0], reverse=True)
        if len(scored) > 3:
            index = 0 if rng.random() < 0.7 else rng.randint(1, min(3, len(scored) - 1))
            return scored[index][1]
        return scored[0][1]

    def _place_words_adaptively(self, state: PlacementState, cancel_event=None) -> None:
        grid = state.grid
        target = self.config.max_word_length
        failures = 0
        placement_attempts = 0
        tried: Set[str] = set()

        while placement_attempts < self.config.max_placement_attempts and target >= self.config.min_word_length:
            _check_cancelled(cancel_event)
            available = self._available_words(state, target, tried)
            if not available:
                target -= 1
                failures = 0
                tried.clear()
                continue

            placement_attempts += 1
            word = self._select_word(state, available)
            if word is None:
                target -= 1
                failures = 0
                tried.clear()
                continue

            preferred = preferred_direction(grid)
            ranked = sorted(
                grid.get_possible_intersections(word),
                key=lambda i: intersection_score(i, grid, word.length, preferred),
                reverse=True,
            )
            placed = False
            for intersection in ranked[:15]:
                if self._try_place(state, word, intersection.row, intersection.col, intersection.direction):
                    placed = True
                    break

            if placed:
                failures = 0
                continue

            failures += 1
            tried.add(word.text)
            if failures >= self.config.max_consecutive_failures:
                target -= 1
                failures = 0
                tried.clear()

        if state.placed:
            average = sum(word.length for word in state.placed) / len(state.placed)
            LOGGER.debug(
                "Adaptive placement: %.1f%% fill, %s words (avg length %.1f)",
                grid.get_stats().fill_percentage,
                len(state.placed),
                average,
            )

    # ------------------------------------------------------------------
    # Gap filling
    # ------------------------------------------------------------------
    def _fill_gaps(self, state: PlacementState, cancel_event=None) -> None:
        grid, rng = state.grid, state.rng
        gaps = find_gaps(grid, self.config.gap_min_length, self.config.gap_max_length)
        keyed = [(gap.touches * 10 + rng.randint(0, 4), -gap.length, gap) for gap in gaps]
        keyed.sort(key=lambda item: item[:2])
        keyed.reverse()

        for _, _, gap in keyed:
            _check_cancelled(cancel_event)
            scored = [
                (gap_word_score(word, grid, gap, self.config.locale_letters) + rng.random() * 2, word)
                for word in state.pool
                if word.length == gap.length and state.is_available(word)
            ]
            scored.sort(key=lambda item: item[0], reverse=True)
            fitting = [word for _, word in scored[:15]]
            head = fitting[:5]
            rng.shuffle(head)
            for word in (head + fitting[5:])[:10]:
                if self._try_place(state, word, gap.row, gap.col, gap.direction):
                    break

    def _fill_with_short_words(self, state: PlacementState, cancel_event=None) -> None:
        grid, rng = state.grid, state.rng
        vowels = VOWELS + self.config.locale_letters
        scored = [
            (count_letters(word.text, vowels) + rng.random() * 2, word)
            for word in state.pool
            if 2 <= word.length <= 4 and state.is_available(word)
        ]
        scored.sort(key=lambda item: item[0], reverse=True)
        short_words = [word for _, word in scored]
        head = short_words[:20]
        rng.shuffle(head)

        for word in (head + short_words[20:])[:60]:
            _check_cancelled(cancel_event)
            if not state.is_available(word):
                continue
            intersections = grid.get_possible_intersections(word)
            rng.shuffle(intersections)
            for intersection in intersections[:5]:
                if self._try_place(state, word, intersection.row, intersection.col, intersection.direction):
                    break

    # ------------------------------------------------------------------
    # Acceptance
    # ------------------------------------------------------------------
    def _accept(self, state: PlacementState) -> bool:
        grid = state.grid
        stats = grid.get_stats()
        min_words = max(3, grid.width // 4)

        if len(state.placed) < min_words:
            LOGGER.debug("Rejected: %s words placed, need %s", len(state.placed), min_words)
            return False
        if stats.fill_percentage < self.config.target_fill_percentage:
            LOGGER.debug(
                "Rejected: fill %.1f%% below target %.1f%%",
                stats.fill_percentage,
                self.config.target_fill_percentage,
            )
            return False
        if not self.validator.is_valid_crossword(grid):
            LOGGER.debug("Rejected: grid failed structural validation")
            return False

        validation = grid.validate_crossword(self.catalog)
        if self.config.reject_invalid_words and validation.invalid_accidental_words:
            LOGGER.debug("Rejected: %s", validation.summary())
            return False

        if validation.valid_accidental_words:
            LOGGER.info("Bonus: %s valid accidental words found", len(validation.valid_accidental_words))
        if validation.invalid_accidental_words:
            LOGGER.warning("%s invalid accidental words kept", len(validation.invalid_accidental_words))
        LOGGER.info("Words used: %s", len(state.used_texts))

        grid.fill_empty_cells_with_asterisks()
        return True
