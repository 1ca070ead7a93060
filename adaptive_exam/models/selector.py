"""
Adaptive question selection.

Difficulty moves one tier per answer (up on correct, down on wrong) with
Easy as the floor and Hard as the ceiling. The next question is drawn
uniformly at random from the unanswered questions of the session's subject
at its current tier, widening to any tier of the subject when that tier is
used up. An empty result means the pool is exhausted.
"""

from __future__ import annotations

import logging
import random
from typing import Any, Iterable, List, Optional, Protocol

from ..config import config
from .exam_session import ExamSession
from .question import DIFFICULTY_TIERS, DifficultyTier, Question, QuestionId, normalize_difficulty

logger = logging.getLogger(__name__)


class RandomSource(Protocol):
    """Anything with random.Random's choice()."""

    def choice(self, seq: List[Any]) -> Any:
        ...


def adjust_difficulty(current: DifficultyTier, last_answer_correct: bool) -> DifficultyTier:
    """
    Retune the tier after an answer.

    | current | correct | wrong  |
    |---------|---------|--------|
    | Easy    | Medium  | Easy   |
    | Medium  | Hard    | Easy   |
    | Hard    | Hard    | Medium |

    Raises:
        ValueError: If current is not a known tier
    """
    idx = DIFFICULTY_TIERS.index(normalize_difficulty(current))
    if last_answer_correct:
        idx = min(idx + 1, len(DIFFICULTY_TIERS) - 1)
    else:
        idx = max(idx - 1, 0)
    return DIFFICULTY_TIERS[idx]


def _sort_key(question: Question):
    return (str(type(question.question_id)), question.question_id)


class AdaptiveSelector:
    """
    Picks the next unseen question for a session.

    Usage:
        selector = AdaptiveSelector(pool, rng=random.Random(7))
        question = selector.next_question(session, answered_ids)
        if question is None:
            ...  # pool exhausted
    """

    def __init__(self, pool, rng: Optional[RandomSource] = None):
        """
        Initialize selector.

        Args:
            pool: Question pool with find_by_subject / find_by_subject_and_difficulty
            rng: Source of randomness (default: random.Random seeded from config)
        """
        self.pool = pool
        self.rng = rng if rng is not None else random.Random(config.exam.random_seed)

    def candidate_set(
        self,
        session: ExamSession,
        answered_ids: Iterable[QuestionId],
    ) -> List[Question]:
        """
        Unanswered questions eligible for the session's next draw.

        Returns the current tier's unanswered questions, or all of the
        subject's unanswered questions when that tier has none left.
        """
        return self._candidates(session, answered_ids)[0]

    def _candidates(self, session: ExamSession, answered_ids: Iterable[QuestionId]):
        answered = set(answered_ids)

        candidates = [
            q
            for q in self.pool.find_by_subject_and_difficulty(
                session.subject, session.current_difficulty
            )
            if q.question_id not in answered
        ]
        used_fallback = False

        if not candidates:
            candidates = [
                q
                for q in self.pool.find_by_subject(session.subject)
                if q.question_id not in answered
            ]
            used_fallback = bool(candidates)

        # Stable order so a seeded rng gives reproducible draws
        candidates.sort(key=_sort_key)
        return candidates, used_fallback

    def next_question(
        self,
        session: ExamSession,
        answered_ids: Iterable[QuestionId],
    ) -> Optional[Question]:
        """
        Draw the next question, or None when the subject has nothing left.

        Args:
            session: Session being served
            answered_ids: Questions already answered in this session

        Returns:
            A Question from the candidate set, or None
        """
        candidates, used_fallback = self._candidates(session, answered_ids)

        if not candidates:
            logger.debug(
                "No unanswered questions left for subject %r in %s",
                session.subject,
                session.session_id,
            )
            return None

        question = self.rng.choice(candidates)
        logger.debug(
            "Selected question %s for %s from %d candidate(s) (tier=%s, fallback=%s)",
            question.question_id,
            session.session_id,
            len(candidates),
            session.current_difficulty,
            used_fallback,
        )
        return question
