import unittest

from crossfill.core.constants import Direction
from crossfill.core.models import Word
from crossfill.engine.grid import CrosswordGrid, GridConfig
from crossfill.engine.validator import GridValidator, ValidationResult, is_valid_crossword


def connected_grid() -> CrosswordGrid:
    """CAT across, TEN down from its T, ANT across through TEN's N."""

    grid = CrosswordGrid(GridConfig(height=7, width=7))
    grid.try_place_word(Word("CAT"), 1, 1, Direction.ACROSS)
    grid.try_place_word(Word("TEN"), 1, 3, Direction.DOWN)
    grid.try_place_word(Word("ANT"), 3, 2, Direction.ACROSS)
    return grid


class GridValidatorTests(unittest.TestCase):
    def setUp(self) -> None:
        self.validator = GridValidator()

    def test_connected_grid_is_valid(self) -> None:
        grid = connected_grid()
        result = self.validator.validate_grid(grid)

        self.assertEqual(result.errors, [])
        self.assertTrue(result.is_valid)
        self.assertTrue(self.validator.is_valid_crossword(grid))
        self.assertTrue(is_valid_crossword(grid))
        self.assertTrue(any("low fill" in w for w in result.warnings))

    def test_empty_grid_is_invalid(self) -> None:
        grid = CrosswordGrid(GridConfig(height=7, width=7))
        result = self.validator.validate_grid(grid)
        self.assertIn("No words placed on grid", result.errors)
        self.assertFalse(self.validator.is_valid_crossword(grid))

    def test_small_and_large_grids(self) -> None:
        small = CrosswordGrid(GridConfig(height=4, width=4))
        small.try_place_word(Word("CAT"), 0, 0, Direction.ACROSS)
        self.assertTrue(any("too small" in e for e in self.validator.validate_grid(small).errors))

        large = CrosswordGrid(GridConfig(height=26, width=10))
        large.try_place_word(Word("CAT"), 0, 0, Direction.ACROSS)
        result = self.validator.validate_grid(large)
        self.assertTrue(any("very large" in w for w in result.warnings))
        self.assertTrue(any("Few words placed" in w for w in result.warnings))

    def test_disconnected_words_are_errors(self) -> None:
        grid = connected_grid()
        grid.try_place_word(Word("DOG"), 5, 4, Direction.ACROSS)

        result = self.validator.validate_grid(grid)
        self.assertFalse(result.is_valid)
        self.assertTrue(any("2 disconnected components" in e for e in result.errors))
        self.assertTrue(any(e.startswith("Disconnected component 2: DOG") for e in result.errors))
        self.assertTrue(any("'DOG' is isolated" in e for e in result.errors))

    def test_duplicate_texts_are_errors(self) -> None:
        grid = CrosswordGrid(GridConfig(height=7, width=7))
        grid.try_place_word(Word("CAT"), 1, 1, Direction.ACROSS)
        grid.try_place_word(Word("cat"), 1, 1, Direction.DOWN)

        result = self.validator.validate_grid(grid)
        self.assertIn("Duplicate word found: 'CAT' appears 2 times", result.errors)

    def test_parallel_neighbours_break_isolation(self) -> None:
        grid = CrosswordGrid(GridConfig(height=7, width=7))
        grid.try_place_word(Word("CAT"), 1, 1, Direction.ACROSS)
        grid.try_place_word(Word("DOG"), 2, 1, Direction.ACROSS)

        result = self.validator.validate_grid(grid)
        self.assertTrue(any("'CAT' touches letters" in e for e in result.errors))
        self.assertTrue(any("'DOG' touches letters" in e for e in result.errors))

    def test_tampered_letters_are_errors(self) -> None:
        grid = connected_grid()
        grid.cell(1, 1).letter = "X"

        result = self.validator.validate_grid(grid)
        self.assertIn("Word 'CAT' has incorrect letters on grid", result.errors)

    def test_long_chain_is_one_component(self) -> None:
        grid = CrosswordGrid(GridConfig(height=25, width=25))
        # Staircase of crossing words, deeper than a few levels.
        row, col = 0, 0
        for index in range(11):
            direction = Direction.ACROSS if index % 2 == 0 else Direction.DOWN
            word = Word(f"A{chr(ord('B') + index)}A")
            self.assertTrue(grid.try_place_word(word, row, col, direction))
            if direction == Direction.ACROSS:
                col += 2
            else:
                row += 2

        result = self.validator.validate_grid(grid)
        self.assertFalse(any("disconnected" in e for e in result.errors))
        self.assertFalse(any("isolated" in e for e in result.errors))


class ValidationResultTests(unittest.TestCase):
    def test_string_groups_messages_with_prefixes(self) -> None:
        result = ValidationResult()
        self.assertEqual(str(result), "Grid is valid")

        result.add_error("broken")
        result.add_warning("sparse")
        result.add_info("fine")
        text = str(result)
        self.assertFalse(result.is_valid)
        self.assertIn("ERROR: broken", text)
        self.assertIn("WARNING: sparse", text)
        self.assertIn("INFO: fine", text)


if __name__ == "__main__":
    unittest.main()
