"""Read-only word catalog consumed by the generator."""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass
from typing import Dict, Iterable, Iterator, List, Optional, Protocol, Sequence

from ..core.constants import Difficulty
from ..core.models import Word
from ..utils.logger import get_logger
from .normalization import is_word_text, normalize_word


LOGGER = get_logger(__name__)


class WordCatalog(Protocol):
    """Query interface the engine needs from a word catalog."""

    def get_words(
        self,
        min_length: int = 1,
        max_length: int = 50,
        difficulty: Optional[Difficulty] = None,
        categories: Optional[Sequence[str]] = None,
    ) -> List[Word]:
        ...

    def is_valid_word(self, text: str) -> bool:
        ...

    def get_clue(self, text: str) -> Optional[str]:
        ...

    @property
    def word_count(self) -> int:
        ...


@dataclass(frozen=True)
class CatalogEntry:
    """Represents a sanitized catalog entry."""

    text: str
    clue: str
    category: str = ""
    difficulty: Difficulty = Difficulty.MEDIUM

    @property
    def length(self) -> int:
        return len(self.text)

    def to_word(self) -> Word:
        return Word(
            text=self.text,
            clue=self.clue,
            category=self.category,
            difficulty=self.difficulty,
        )


@dataclass
class CatalogStats:
    total_words: int
    categories: Dict[str, int]
    length_distribution: Dict[int, int]
    difficulty_distribution: Dict[Difficulty, int]
    average_length: float
    min_length: int
    max_length: int


class InMemoryWordCatalog:
    """Catalog held in memory and indexed by word length.

    Texts are normalized on insertion; the first entry wins when the same
    text appears twice. Every :meth:`get_words` call returns fresh, unplaced
    :class:`Word` objects so concurrent generation attempts never share
    placement state.
    """

    def __init__(self, entries: Iterable[CatalogEntry] = ()) -> None:
        self._entries: Dict[str, CatalogEntry] = {}
        self._by_length: Dict[int, List[CatalogEntry]] = defaultdict(list)
        for entry in entries:
            self.add(entry)

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------
    def add(self, entry: CatalogEntry) -> bool:
        text = normalize_word(entry.text)
        if not is_word_text(text):
            LOGGER.debug("Skipping non-alphabetic catalog entry %r", entry.text)
            return False
        if text in self._entries:
            return False
        normalized = CatalogEntry(
            text=text,
            clue=entry.clue.strip(),
            category=entry.category.strip(),
            difficulty=entry.difficulty,
        )
        self._entries[text] = normalized
        self._by_length[len(text)].append(normalized)
        return True

    def add_word(
        self,
        text: str,
        clue: str,
        category: str = "",
        difficulty: Difficulty = Difficulty.MEDIUM,
    ) -> bool:
        return self.add(CatalogEntry(text=text, clue=clue, category=category, difficulty=difficulty))

    @classmethod
    def from_pairs(cls, pairs: Iterable[tuple]) -> "InMemoryWordCatalog":
        """Build a catalog from ``(text, clue[, category[, difficulty]])`` tuples."""

        catalog = cls()
        for pair in pairs:
            catalog.add_word(*pair)
        return catalog

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    @property
    def word_count(self) -> int:
        return len(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, text: object) -> bool:
        return isinstance(text, str) and self.is_valid_word(text)

    def is_valid_word(self, text: str) -> bool:
        return normalize_word(text) in self._entries

    def get(self, text: str) -> Optional[CatalogEntry]:
        return self._entries.get(normalize_word(text))

    def get_clue(self, text: str) -> Optional[str]:
        entry = self.get(text)
        return entry.clue if entry else None

    def iter_entries(self) -> Iterator[CatalogEntry]:
        return iter(self._entries.values())

    def get_words(
        self,
        min_length: int = 1,
        max_length: int = 50,
        difficulty: Optional[Difficulty] = None,
        categories: Optional[Sequence[str]] = None,
    ) -> List[Word]:
        wanted = {c.strip().lower() for c in categories} if categories else None
        words: List[Word] = []
        for length in sorted(self._by_length):
            if length < min_length or length > max_length:
                continue
            for entry in self._by_length[length]:
                if difficulty is not None and entry.difficulty != difficulty:
                    continue
                if wanted is not None and entry.category.lower() not in wanted:
                    continue
                words.append(entry.to_word())
        return words

    def statistics(self) -> CatalogStats:
        entries = list(self._entries.values())
        lengths = [entry.length for entry in entries]
        return CatalogStats(
            total_words=len(entries),
            categories=dict(Counter(entry.category or "uncategorized" for entry in entries)),
            length_distribution=dict(sorted(Counter(lengths).items())),
            difficulty_distribution=dict(Counter(entry.difficulty for entry in entries)),
            average_length=sum(lengths) / len(lengths) if lengths else 0.0,
            min_length=min(lengths) if lengths else 0,
            max_length=max(lengths) if lengths else 0,
        )
