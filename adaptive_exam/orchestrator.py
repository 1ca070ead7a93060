"""
Exam Session Orchestrator

Runs the adaptive exam state machine:
1. Start: create an IN_PROGRESS session at the initial tier and serve question #1
2. Submit: record the response, update score, retune difficulty
3. Complete: after the session length limit or when the subject's pool is exhausted
4. Mask: only answer-key-free questions leave the orchestrator

Sessions are single-writer. Mutations of one session are serialized by a
per-session lock and the store's versioned update; different sessions run
independently.
"""

from __future__ import annotations

import logging
import threading
import weakref
from dataclasses import dataclass
from typing import Any, Dict, Hashable, List, Optional

from .config import config
from .errors import QuestionAlreadyAnswered, SessionAlreadyActive, SessionCompleted
from .models.exam_session import ExamSession, Response
from .models.question import MaskedQuestion, QuestionId, normalize_difficulty, normalize_option
from .models.selector import AdaptiveSelector, adjust_difficulty
from .utils.progress import ExamResult, build_result

logger = logging.getLogger(__name__)


# ==================== Session State Projection ====================

@dataclass(frozen=True)
class SessionState:
    """
    What callers see after every operation.

    next_question is masked, and None once the exam is completed.
    """
    session_id: str
    next_question: Optional[MaskedQuestion]
    completed: bool
    score: int
    total_answered: int
    current_difficulty: str
    status: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "session_id": self.session_id,
            "next_question": self.next_question.to_dict() if self.next_question else None,
            "completed": self.completed,
            "score": self.score,
            "total_answered": self.total_answered,
            "current_difficulty": self.current_difficulty,
            "status": self.status,
        }


# ==================== Per-key Locking ====================

class _KeyLock:
    __slots__ = ("_lock", "__weakref__")

    def __init__(self):
        self._lock = threading.Lock()

    def __enter__(self):
        self._lock.acquire()
        return self

    def __exit__(self, *exc):
        self._lock.release()


class _LockRegistry:
    """Hands out one lock per key; unused locks are garbage collected."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: "weakref.WeakValueDictionary[Hashable, _KeyLock]" = weakref.WeakValueDictionary()

    def __call__(self, key: Hashable) -> _KeyLock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = _KeyLock()
                self._locks[key] = lock
            return lock


# ==================== Orchestrator ====================

class ExamOrchestrator:
    """
    Adaptive exam session lifecycle.

    Usage:
        orchestrator = ExamOrchestrator(pool, ledger, sessions, users)
        state = orchestrator.start_exam(user_id=1, subject="Science")
        while not state.completed:
            state = orchestrator.submit_answer(
                state.session_id, state.next_question.question_id, "B"
            )
        result = orchestrator.get_result(state.session_id)
    """

    def __init__(
        self,
        pool,
        ledger,
        sessions,
        users,
        selector: Optional[AdaptiveSelector] = None,
        max_questions: Optional[int] = None,
        initial_difficulty: Optional[str] = None,
    ):
        """
        Initialize the orchestrator with its collaborators.

        Args:
            pool: QuestionPool
            ledger: ResponseLedger
            sessions: ExamSessionStore
            users: UserDirectory
            selector: Adaptive selector (default: AdaptiveSelector over pool)
            max_questions: Session length limit (default: config.exam.max_questions)
            initial_difficulty: Starting tier (default: config.exam.initial_difficulty)
        """
        self.pool = pool
        self.ledger = ledger
        self.sessions = sessions
        self.users = users
        self.selector = selector or AdaptiveSelector(pool)
        self.max_questions = max_questions if max_questions is not None else config.exam.max_questions
        self.initial_difficulty = normalize_difficulty(
            initial_difficulty or config.exam.initial_difficulty
        )

        if self.max_questions < 1:
            raise ValueError(f"max_questions must be >= 1, got {self.max_questions}")

        self._locks = _LockRegistry()

    # ==================== Lifecycle ====================

    def start_exam(self, user_id: Any, subject: str) -> SessionState:
        """
        Start an exam and serve its first question.

        Args:
            user_id: Student taking the exam
            subject: Subject tag to draw questions from

        Returns:
            SessionState (completed immediately if the subject has no questions)

        Raises:
            UserNotFound: If the user is unknown
            SessionAlreadyActive: If the user already has this subject in progress
            ValueError: If subject is blank
        """
        if not subject or not subject.strip():
            raise ValueError("Subject cannot be empty")

        self.users.find_user_by_id(user_id)

        with self._locks(("start", user_id, subject)):
            for existing in self.sessions.find_by_user(user_id):
                if existing.subject == subject and not existing.is_completed:
                    raise SessionAlreadyActive(user_id, subject, existing.session_id)

            session = ExamSession(
                user_id=user_id,
                subject=subject,
                current_difficulty=self.initial_difficulty,
            )
            question = self._advance(session, [])
            session = self.sessions.create(session)

        logger.info(
            "Exam %s started for user %r in %r at %s",
            session.session_id,
            user_id,
            subject,
            self.initial_difficulty,
        )
        return self._state(session, 0, question)

    def submit_answer(
        self,
        session_id: str,
        question_id: QuestionId,
        selected_option: str,
        time_taken_seconds: int = 0,
    ) -> SessionState:
        """
        Grade one answer and serve the next question (or complete).

        Args:
            session_id: Exam session
            question_id: Question being answered
            selected_option: Option tag, any case ("a" == "A")
            time_taken_seconds: Time spent on the question (0 if not reported)

        Returns:
            Updated SessionState

        Raises:
            SessionNotFound / QuestionNotFound: If either is unknown
            SessionCompleted: If the session is no longer in progress
            QuestionAlreadyAnswered: If this question was already answered in the session
            ValueError: If the option is not A-D or the time is negative
        """
        with self._locks(session_id):
            session = self.sessions.find_by_id(session_id)
            question = self.pool.find_by_id(question_id)

            if session.is_completed:
                raise SessionCompleted(session_id)

            selected = normalize_option(selected_option)
            time_taken = int(time_taken_seconds or 0)
            if time_taken < 0:
                raise ValueError(f"Time taken cannot be negative: {time_taken_seconds}")

            responses = self.ledger.find_by_session(session_id)
            if any(r.question_id == question.question_id for r in responses):
                raise QuestionAlreadyAnswered(session_id, question.question_id)

            is_correct = question.is_correct(selected)
            response = Response(
                session_id=session_id,
                question_id=question.question_id,
                selected_option=selected,
                is_correct=is_correct,
                time_taken_seconds=time_taken,
                difficulty=question.difficulty,
                topic=question.topic,
            )

            previous_tier = session.current_difficulty
            session.record_answer(is_correct, adjust_difficulty(previous_tier, is_correct))
            responses.append(response)
            logger.debug(
                "Exam %s: question %s answered %s (%s), tier %s -> %s",
                session_id,
                question.question_id,
                selected,
                "correct" if is_correct else "wrong",
                previous_tier,
                session.current_difficulty,
            )

            next_question = self._advance(session, responses)

            self.ledger.append(response)
            try:
                session = self.sessions.update(session)
            except Exception:
                self.ledger.discard(response)
                raise

        return self._state(session, len(responses), next_question)

    def get_state(self, session_id: str) -> SessionState:
        """
        Read-only view of a session, re-serving the current question.

        Raises:
            SessionNotFound: If the session is unknown
        """
        session = self.sessions.find_by_id(session_id)
        answered = len(self.ledger.find_by_session(session_id))

        question = None
        if not session.is_completed and session.current_question_id is not None:
            question = self.pool.find_by_id(session.current_question_id).masked()
        return self._state(session, answered, question)

    def get_result(self, session_id: str) -> ExamResult:
        """Score report with accuracy and timing breakdowns."""
        session = self.sessions.find_by_id(session_id)
        return build_result(session, self.ledger.find_by_session(session_id))

    def list_sessions(self, user_id: Any) -> List[ExamSession]:
        """Exam history for a user, newest first."""
        self.users.find_user_by_id(user_id)
        return self.sessions.find_by_user(user_id)

    # ==================== Internals ====================

    def _advance(self, session: ExamSession, responses: List[Response]) -> Optional[MaskedQuestion]:
        """
        Serve the next question or complete the session (in memory only).

        Returns:
            The masked question served, or None if the session completed
        """
        if len(responses) >= self.max_questions:
            session.complete("question_limit")
            self._log_completed(session, len(responses))
            return None

        answered_ids = [r.question_id for r in responses]
        question = self.selector.next_question(session, answered_ids)
        if question is None:
            session.complete("pool_exhausted")
            self._log_completed(session, len(responses))
            return None

        session.serve(question.question_id)
        return question.masked()

    def _log_completed(self, session: ExamSession, answered: int) -> None:
        logger.info(
            "Exam %s completed (%s): score %d/%d",
            session.session_id,
            session.completion_reason,
            session.score,
            answered,
        )

    @staticmethod
    def _state(
        session: ExamSession,
        answered: int,
        question: Optional[MaskedQuestion],
    ) -> SessionState:
        return SessionState(
            session_id=session.session_id,
            next_question=question,
            completed=session.is_completed,
            score=session.score,
            total_answered=answered,
            current_difficulty=session.current_difficulty,
            status=session.status,
        )
