"""
Unit tests for adaptive difficulty and question selection.
"""

import random
import unittest

import pytest

from adaptive_exam.models.exam_session import ExamSession
from adaptive_exam.models.selector import AdaptiveSelector, adjust_difficulty
from adaptive_exam.utils.persistence import InMemoryQuestionPool
from tests.factories import make_question, science_bank


class RecordingRandom:
    """Deterministic rng: always picks the first candidate and remembers what it saw."""

    def __init__(self):
        self.seen = []

    def choice(self, seq):
        self.seen.append(list(seq))
        return seq[0]


@pytest.mark.parametrize(
    "current, correct, expected",
    [
        ("Easy", True, "Medium"),
        ("Easy", False, "Easy"),
        ("Medium", True, "Hard"),
        ("Medium", False, "Easy"),
        ("Hard", True, "Hard"),
        ("Hard", False, "Medium"),
    ],
)
def test_adjust_difficulty_table(current, correct, expected):
    assert adjust_difficulty(current, correct) == expected


def test_adjust_difficulty_accepts_any_case():
    assert adjust_difficulty("medium", True) == "Hard"


def test_adjust_difficulty_rejects_unknown_tier():
    with pytest.raises(ValueError):
        adjust_difficulty("Impossible", True)


class TestAdaptiveSelector(unittest.TestCase):

    def setUp(self):
        self.pool = InMemoryQuestionPool(science_bank(per_tier=3))  # 1-3 Easy, 4-6 Medium, 7-9 Hard
        self.rng = RecordingRandom()
        self.selector = AdaptiveSelector(self.pool, rng=self.rng)
        self.session = ExamSession(user_id=1, subject="Science", current_difficulty="Medium")

    def test_draws_from_current_tier(self):
        question = self.selector.next_question(self.session, [])

        self.assertEqual(question.difficulty, "Medium")
        self.assertEqual([q.question_id for q in self.rng.seen[0]], [4, 5, 6])

    def test_excludes_answered_questions(self):
        candidates = self.selector.candidate_set(self.session, [4, 6])
        self.assertEqual([q.question_id for q in candidates], [5])

    def test_falls_back_to_any_tier_when_tier_used_up(self):
        candidates = self.selector.candidate_set(self.session, [4, 5, 6, 1])

        ids = [q.question_id for q in candidates]
        self.assertEqual(ids, [2, 3, 7, 8, 9])
        self.assertTrue(all(q.subject == "Science" for q in candidates))

    def test_returns_none_when_subject_exhausted(self):
        answered = [q.question_id for q in self.pool.find_by_subject("Science")]

        self.assertEqual(self.selector.candidate_set(self.session, answered), [])
        self.assertIsNone(self.selector.next_question(self.session, answered))
        self.assertEqual(self.rng.seen, [])

    def test_ignores_other_subjects(self):
        self.pool.add(make_question(50, subject="Mathematics", difficulty="Medium"))

        candidates = self.selector.candidate_set(self.session, [])

        self.assertNotIn(50, [q.question_id for q in candidates])

    def test_unknown_subject_is_exhausted(self):
        session = ExamSession(user_id=1, subject="History")
        self.assertIsNone(self.selector.next_question(session, []))

    def test_seeded_rng_is_reproducible(self):
        first = AdaptiveSelector(self.pool, rng=random.Random(42))
        second = AdaptiveSelector(self.pool, rng=random.Random(42))

        picks_a = [first.next_question(self.session, []).question_id for _ in range(5)]
        picks_b = [second.next_question(self.session, []).question_id for _ in range(5)]

        self.assertEqual(picks_a, picks_b)

    def test_mixed_id_types_do_not_break_ordering(self):
        self.pool.add(make_question("m-extra", difficulty="Medium"))

        candidates = self.selector.candidate_set(self.session, [])

        self.assertEqual(len(candidates), 4)
        self.assertIn("m-extra", [q.question_id for q in candidates])


if __name__ == "__main__":
    unittest.main()
