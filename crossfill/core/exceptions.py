"""Custom exception hierarchy for crossword generation."""

from __future__ import annotations


class CrosswordError(Exception):
    """Base exception for generator failures."""


class GridDimensionError(CrosswordError, ValueError):
    """Raised when a grid is created with non-positive dimensions."""


class GridPositionError(CrosswordError, IndexError):
    """Raised when a cell outside the grid bounds is requested."""


class ConfigurationError(CrosswordError, ValueError):
    """Raised when generator options are inconsistent."""


class NoCandidateWordsError(CrosswordError):
    """Raised when the catalog offers no words for the requested filters."""


class GenerationCancelledError(CrosswordError):
    """Raised when a cancellation request is observed between phases."""


class GenerationFailedError(CrosswordError):
    """Raised when every generation attempt was discarded."""

    def __init__(self, message: str, attempts: int = 0, validation_rejections: int = 0) -> None:
        super().__init__(message)
        self.attempts = attempts
        self.validation_rejections = validation_rejections

    @property
    def rejection_rate(self) -> float:
        if not self.attempts:
            return 0.0
        return self.validation_rejections / self.attempts * 100
