# test_text_normalizer.py
import unittest

from veridoc.services.text_normalizer import normalize


class TestNormalize(unittest.TestCase):

    def test_trims_and_drops_blank_lines(self):
        result = normalize("  GOVERNMENT OF INDIA  \n\n   \nJOHN DOE\r\n 1234 5678 9123 ")
        self.assertEqual(result.lines, ("GOVERNMENT OF INDIA", "JOHN DOE", "1234 5678 9123"))

    def test_keeps_raw_text_untouched(self):
        raw = " a \n b "
        self.assertEqual(normalize(raw).raw, raw)

    def test_empty_and_missing_input(self):
        for raw in ("", "   \n\t\n", None):
            with self.subTest(raw=raw):
                self.assertEqual(normalize(raw).lines, ())

    def test_idempotent_on_lines(self):
        raw = "\n  Name: Rahul  \n\nRoll No 123456\n"
        once = normalize(raw)
        self.assertEqual(normalize(normalize(once.raw).raw).lines, once.lines)
        self.assertEqual(normalize("\n".join(once.lines)).lines, once.lines)


if __name__ == "__main__":
    unittest.main(verbosity=2)
