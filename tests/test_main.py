import contextlib
import io
import tempfile
import unittest
from pathlib import Path

from main import main, parse_word_line


class ParseWordLineTests(unittest.TestCase):
    def test_optional_fields(self) -> None:
        entry = parse_word_line("katt: Jamar : djur")
        self.assertEqual((entry.text, entry.clue, entry.category), ("katt", "Jamar", "djur"))


class MainTests(unittest.TestCase):
    def run_main(self, *argv: str) -> SystemExit:
        stderr = io.StringIO()
        with contextlib.redirect_stderr(stderr), self.assertRaises(SystemExit) as ctx:
            main(list(argv))
        self.stderr = stderr.getvalue()
        return ctx.exception

    def test_missing_words_file_is_a_usage_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            missing = Path(tmpdir) / "words.txt"
            exit_info = self.run_main("--words-file", str(missing))

        self.assertEqual(exit_info.code, 2)
        self.assertIn("cannot read words file", self.stderr)

    def test_words_file_without_entries_is_a_usage_error(self) -> None:
        with tempfile.TemporaryDirectory() as tmpdir:
            path = Path(tmpdir) / "words.txt"
            path.write_text("# nothing here\n\n", encoding="utf-8")
            exit_info = self.run_main("--words-file", str(path))

        self.assertEqual(exit_info.code, 2)
        self.assertIn("no usable entries", self.stderr)


if __name__ == "__main__":
    unittest.main()
