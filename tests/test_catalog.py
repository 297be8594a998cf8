import unittest

from crossfill.core.constants import Difficulty
from crossfill.data.catalog import CatalogEntry, InMemoryWordCatalog
from crossfill.data.normalization import is_word_text, normalize_word


class NormalizationTests(unittest.TestCase):
    def test_normalize_keeps_locale_letters(self) -> None:
        self.assertEqual(normalize_word("  gräs "), "GRÄS")
        self.assertEqual(normalize_word("ö l"), "ÖL")
        self.assertEqual(normalize_word(""), "")

    def test_word_text_must_be_alphabetic(self) -> None:
        self.assertTrue(is_word_text("KATT"))
        self.assertFalse(is_word_text("K4TT"))
        self.assertFalse(is_word_text(""))


class InMemoryWordCatalogTests(unittest.TestCase):
    def setUp(self) -> None:
        self.catalog = InMemoryWordCatalog(
            [
                CatalogEntry("katt", "Jamar", "djur", Difficulty.EASY),
                CatalogEntry("hund", "Skäller", "djur", Difficulty.EASY),
                CatalogEntry("äpple", "Frukt", "mat", Difficulty.MEDIUM),
                CatalogEntry("KATT", "Duplicate clue", "djur", Difficulty.HARD),
                CatalogEntry("r2d2", "Robot"),
                CatalogEntry("ö", "Land i vatten", "natur", Difficulty.HARD),
            ]
        )

    def test_first_entry_wins_and_invalid_text_is_skipped(self) -> None:
        self.assertEqual(self.catalog.word_count, 4)
        self.assertEqual(len(self.catalog), 4)
        self.assertEqual(self.catalog.get_clue("Katt"), "Jamar")
        self.assertNotIn("R2D2", self.catalog)

    def test_lookup_is_case_insensitive(self) -> None:
        self.assertTrue(self.catalog.is_valid_word("äPPLE"))
        self.assertIn("hund", self.catalog)
        self.assertFalse(self.catalog.is_valid_word("KAT"))
        self.assertIsNone(self.catalog.get_clue("KAT"))

    def test_get_words_filters_by_length_difficulty_and_category(self) -> None:
        texts = [w.text for w in self.catalog.get_words(min_length=4, max_length=5)]
        self.assertEqual(texts, ["KATT", "HUND", "ÄPPLE"])

        easy = [w.text for w in self.catalog.get_words(difficulty=Difficulty.EASY)]
        self.assertEqual(easy, ["KATT", "HUND"])

        food = [w.text for w in self.catalog.get_words(categories=["MAT"])]
        self.assertEqual(food, ["ÄPPLE"])

    def test_get_words_returns_fresh_unplaced_words(self) -> None:
        first = self.catalog.get_words(min_length=4, max_length=4)
        second = self.catalog.get_words(min_length=4, max_length=4)
        self.assertIsNot(first[0], second[0])
        self.assertFalse(first[0].is_placed)
        self.assertIsNone(first[0].id)
        self.assertEqual(first[0].clue, "Jamar")

    def test_statistics(self) -> None:
        stats = self.catalog.statistics()
        self.assertEqual(stats.total_words, 4)
        self.assertEqual(stats.categories, {"djur": 2, "mat": 1, "natur": 1})
        self.assertEqual(stats.length_distribution, {1: 1, 4: 2, 5: 1})
        self.assertEqual(stats.min_length, 1)
        self.assertEqual(stats.max_length, 5)
        self.assertAlmostEqual(stats.average_length, 3.5)

    def test_iter_entries_yields_normalized_entries(self) -> None:
        texts = [entry.text for entry in self.catalog.iter_entries()]
        self.assertEqual(texts, ["KATT", "HUND", "ÄPPLE", "Ö"])

    def test_from_pairs(self) -> None:
        catalog = InMemoryWordCatalog.from_pairs([("sol", "Lyser"), ("måne", "Natt", "himmel")])
        self.assertEqual(catalog.word_count, 2)
        self.assertEqual(catalog.get("MÅNE").category, "himmel")


if __name__ == "__main__":
    unittest.main()
