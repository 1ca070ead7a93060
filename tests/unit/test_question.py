"""
Unit tests for the Question model.

Tests option/tier normalization, validation, grading and masking.
"""

import unittest
from dataclasses import replace

from adaptive_exam.models.question import (
    MaskedQuestion,
    Question,
    normalize_difficulty,
    normalize_option,
)
from tests.factories import make_question


class TestNormalization(unittest.TestCase):

    def test_normalize_difficulty_any_case(self):
        self.assertEqual(normalize_difficulty("easy"), "Easy")
        self.assertEqual(normalize_difficulty("MEDIUM"), "Medium")
        self.assertEqual(normalize_difficulty(" Hard "), "Hard")

    def test_normalize_difficulty_rejects_unknown(self):
        with self.assertRaises(ValueError):
            normalize_difficulty("Expert")
        with self.assertRaises(ValueError):
            normalize_difficulty(None)

    def test_normalize_option(self):
        self.assertEqual(normalize_option("a"), "A")
        self.assertEqual(normalize_option(" d "), "D")

    def test_normalize_option_rejects_empty_and_unknown(self):
        for bad in ("", "   ", None, "E", "AB", "1"):
            with self.subTest(option=bad):
                with self.assertRaises(ValueError):
                    normalize_option(bad)


class TestQuestion(unittest.TestCase):
    """Test Question dataclass."""

    def setUp(self):
        self.question = make_question(7, subject="Science", difficulty="Easy", correct="B")

    def test_is_correct_case_insensitive(self):
        self.assertTrue(self.question.is_correct("B"))
        self.assertTrue(self.question.is_correct("b"))
        self.assertFalse(self.question.is_correct("A"))

    def test_validate_accepts_valid_question(self):
        self.question.validate()

    def test_validate_rejects_bad_fields(self):
        cases = {
            "subject": {"subject": "  "},
            "content": {"content": ""},
            "difficulty": {"difficulty": "easy"},
            "option": {"option_c": ""},
            "answer": {"correct_option": "E"},
        }
        for name, changes in cases.items():
            with self.subTest(field=name):
                with self.assertRaises(ValueError):
                    replace(self.question, **changes).validate()

    def test_masked_has_no_answer_key(self):
        masked = self.question.masked()

        self.assertIsInstance(masked, MaskedQuestion)
        self.assertFalse(hasattr(masked, "correct_option"))
        self.assertEqual(masked.question_id, 7)
        self.assertEqual(masked.options["B"], "bravo 7")

        data = masked.to_dict()
        self.assertNotIn("correct_option", data)
        self.assertEqual(
            set(data), {"question_id", "content", "options", "subject", "difficulty", "topic"}
        )

    def test_from_dict_normalizes(self):
        data = self.question.to_dict()
        data["difficulty"] = "hard"
        data["correct_option"] = "c"

        question = Question.from_dict(data)

        self.assertEqual(question.difficulty, "Hard")
        self.assertEqual(question.correct_option, "C")
        self.assertEqual(question.option_a, "alpha 7")

    def test_from_dict_rejects_invalid(self):
        data = self.question.to_dict()
        data["content"] = ""
        with self.assertRaises(ValueError):
            Question.from_dict(data)

    def test_to_dict_keeps_answer_key(self):
        self.assertEqual(self.question.to_dict()["correct_option"], "B")


if __name__ == "__main__":
    unittest.main()
