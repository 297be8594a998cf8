import unittest

from crossfill.core.constants import Direction
from crossfill.core.models import AccidentalWord, Word
from crossfill.data.catalog import InMemoryWordCatalog
from crossfill.engine.grid import CrosswordGrid, GridConfig


def catalog_of(*texts: str) -> InMemoryWordCatalog:
    return InMemoryWordCatalog.from_pairs((text, f"Clue for {text}") for text in texts)


def stacked_grid() -> CrosswordGrid:
    """CAT across, TEN down through its T and ONE across below CAT.

    The stacking leaves two accidental runs down: CO at (2,2) and AN at (2,3).
    """

    grid = CrosswordGrid(GridConfig(height=10, width=10))
    grid.try_place_word(Word("CAT"), 2, 2, Direction.ACROSS)
    grid.try_place_word(Word("TEN"), 2, 4, Direction.DOWN)
    grid.try_place_word(Word("ONE"), 3, 2, Direction.ACROSS)
    return grid


class AccidentalDetectionTests(unittest.TestCase):
    def test_crossing_words_are_not_accidental(self) -> None:
        grid = CrosswordGrid(GridConfig(height=10, width=10))
        self.assertTrue(grid.try_place_word(Word("KATT"), 2, 1, Direction.ACROSS))
        self.assertTrue(grid.try_place_word(Word("ARM"), 2, 2, Direction.DOWN))

        found = grid.detect_accidental_words(catalog_of("KATT", "ARM"))
        self.assertEqual(found, [])

    def test_full_scan_reports_every_unplanned_run(self) -> None:
        grid = stacked_grid()
        found = grid.detect_accidental_words()
        spans = {(acc.text, acc.start_row, acc.start_col, acc.direction) for acc in found}
        self.assertEqual(
            spans,
            {("CO", 2, 2, Direction.DOWN), ("AN", 2, 3, Direction.DOWN)},
        )
        for acc in found:
            self.assertIsNone(acc.is_valid)
            self.assertEqual(acc.validation_status, "not checked")

    def test_run_scan_matches_intentional_plus_accidental(self) -> None:
        grid = stacked_grid()
        accidental = grid.detect_accidental_words()
        expected = {(w.text, w.start_row, w.start_col, w.direction) for w in grid.words}
        expected |= {acc.key for acc in accidental}

        runs = set()
        for row in range(grid.height):
            for col in range(grid.width):
                for direction in (Direction.ACROSS, Direction.DOWN):
                    dr, dc = direction.step
                    if not grid.has_letter(row, col) or grid.has_letter(row - dr, col - dc):
                        continue
                    letters = []
                    r, c = row, col
                    while grid.has_letter(r, c):
                        letters.append(grid.cell(r, c).letter)
                        r, c = r + dr, c + dc
                    if len(letters) >= 2:
                        runs.add(("".join(letters), row, col, direction))
        self.assertEqual(runs, expected)

    def test_catalog_classifies_and_collects_clues(self) -> None:
        grid = stacked_grid()
        found = {acc.text: acc for acc in grid.detect_accidental_words(catalog_of("AN"))}

        self.assertTrue(found["AN"].is_valid)
        self.assertTrue(found["AN"].should_include)
        self.assertEqual(found["AN"].clue, "Clue for AN")
        self.assertFalse(found["CO"].is_valid)
        self.assertFalse(found["CO"].should_include)
        self.assertEqual(found["CO"].validation_status, "invalid word")

    def test_near_scan_only_reports_runs_through_the_span(self) -> None:
        grid = stacked_grid()
        grid.try_place_word(Word("SEA"), 7, 0, Direction.ACROSS)
        grid.try_place_word(Word("SO"), 7, 0, Direction.DOWN)

        near = grid.detect_accidental_words_near(3, 2, Direction.ACROSS, 3, catalog_of("CO", "AN"))
        self.assertEqual(sorted(acc.text for acc in near), ["AN", "CO"])
        self.assertTrue(all(acc.is_valid for acc in near))

    def test_near_scan_sees_merge_at_word_end(self) -> None:
        grid = CrosswordGrid(GridConfig(height=6, width=6))
        grid.try_place_word(Word("CAT"), 0, 0, Direction.ACROSS)
        grid.try_place_word(Word("SO"), 0, 3, Direction.DOWN)

        near = grid.detect_accidental_words_near(0, 0, Direction.ACROSS, 3, catalog_of("CATS"))
        self.assertEqual([acc.text for acc in near], ["CATS"])


class BonusWordTests(unittest.TestCase):
    def test_included_words_are_numbered_with_intentional_ones(self) -> None:
        grid = stacked_grid()
        valid = grid.include_valid_accidental_words(catalog_of("CAT", "TEN", "ONE", "CO", "AN"))

        numbers = {acc.text: acc.puzzle_number for acc in valid}
        words = {w.text: w.number for w in grid.words}
        self.assertEqual(words, {"CAT": 1, "TEN": 3, "ONE": 4})
        self.assertEqual(numbers, {"CO": 1, "AN": 2})
        self.assertEqual(len(grid.bonus_words), 2)

    def test_accidental_run_sharing_start_and_direction_is_not_numbered(self) -> None:
        grid = CrosswordGrid(GridConfig(height=6, width=6))
        cat, so = Word("CAT"), Word("SO")
        grid.try_place_word(cat, 0, 0, Direction.ACROSS)
        grid.try_place_word(so, 0, 3, Direction.DOWN)

        valid = grid.include_valid_accidental_words(catalog_of("CAT", "SO", "CATS"))

        self.assertEqual(len(valid), 1)
        cats = valid[0]
        self.assertEqual(cats.text, "CATS")
        self.assertTrue(cats.should_include)
        self.assertEqual(cats.puzzle_number, 0)
        self.assertEqual((cat.number, so.number), (1, 2))

    def test_validate_crossword_reports_invalid_and_included(self) -> None:
        grid = stacked_grid()
        result = grid.validate_crossword(catalog_of("AN"))

        self.assertFalse(result.is_valid)
        self.assertTrue(result.has_invalid_words)
        self.assertEqual([acc.text for acc in result.invalid_accidental_words], ["CO"])
        self.assertEqual([acc.text for acc in result.included_words], ["AN"])
        self.assertEqual(len(result.errors), 1)
        self.assertEqual(len(result.warnings), 1)
        self.assertIn("valid words: 1", result.summary())
        self.assertIn("Invalid words to fix:", result.detailed_report())

    def test_validate_without_catalog_leaves_words_unchecked(self) -> None:
        grid = stacked_grid()
        result = grid.validate_crossword()
        self.assertTrue(result.is_valid)
        self.assertEqual(len(result.accidental_words), 2)
        self.assertEqual(result.valid_accidental_words, [])


class AccidentalWordModelTests(unittest.TestCase):
    def test_string_uses_one_based_positions(self) -> None:
        acc = AccidentalWord("AN", 2, 3, Direction.DOWN, 2, is_valid=True, should_include=True, puzzle_number=5)
        self.assertEqual(str(acc), "AN #5 - down from (3, 4) - valid word (included in puzzle)")

    def test_valid_but_excluded_status(self) -> None:
        acc = AccidentalWord("AN", 0, 0, Direction.ACROSS, 2, is_valid=True)
        self.assertEqual(acc.validation_status, "valid word")


if __name__ == "__main__":
    unittest.main()
