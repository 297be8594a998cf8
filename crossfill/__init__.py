"""Crossword placement and validation engine.

This package exposes the public API surface via:

- ``crossfill.engine.generator.CrosswordGenerator``: retries the placement pipeline.
- ``crossfill.engine.grid.CrosswordGrid``: transactional word placement on a grid.
- ``crossfill.engine.validator.GridValidator``: structural checks on finished grids.
- ``crossfill.data.catalog.InMemoryWordCatalog``: reference word catalog.
"""

from .data.catalog import CatalogEntry, InMemoryWordCatalog, WordCatalog
from .engine.generator import CrosswordGenerator, GeneratorConfig
from .engine.grid import CrosswordGrid, GridConfig
from .engine.puzzle import CrosswordPuzzle
from .engine.validator import GridValidator, ValidationResult, is_valid_crossword

__all__ = [
    "CatalogEntry",
    "CrosswordGenerator",
    "CrosswordGrid",
    "CrosswordPuzzle",
    "GeneratorConfig",
    "GridConfig",
    "GridValidator",
    "InMemoryWordCatalog",
    "ValidationResult",
    "WordCatalog",
    "is_valid_crossword",
]

__version__ = "0.1.0"
