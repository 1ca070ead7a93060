"""
Exam session and response records.

An ExamSession is one student's attempt at an adaptive exam for a subject.
It starts IN_PROGRESS at the initial tier with a zero score and ends
COMPLETED, after which it no longer changes. Responses are append-only and
hold one answer per (session, question).
"""

from __future__ import annotations

import uuid
from copy import deepcopy
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from ..errors import SessionCompleted
from .question import DifficultyTier, QuestionId, normalize_difficulty


ExamStatus = Literal["IN_PROGRESS", "COMPLETED"]
CompletionReason = Literal["question_limit", "pool_exhausted"]

STATUS_IN_PROGRESS = "IN_PROGRESS"
STATUS_COMPLETED = "COMPLETED"


def utc_now() -> str:
    """Get current UTC timestamp in ISO 8601 format."""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Response:
    """
    A student's answer to one question in one session.

    Attributes:
        session_id: Session the answer belongs to
        question_id: Question answered
        selected_option: Chosen option tag (upper-cased)
        is_correct: Whether the option matched the answer key
        time_taken_seconds: Time spent, 0 when the client did not report it
        difficulty: Tier of the answered question
        topic: Topic of the answered question
        response_id: Unique identifier
        answered_at: ISO 8601 timestamp
    """
    session_id: str
    question_id: QuestionId
    selected_option: str
    is_correct: bool
    time_taken_seconds: int = 0
    difficulty: Optional[DifficultyTier] = None
    topic: Optional[str] = None
    response_id: str = field(default_factory=lambda: f"resp-{uuid.uuid4()}")
    answered_at: str = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "response_id": self.response_id,
            "session_id": self.session_id,
            "question_id": self.question_id,
            "selected_option": self.selected_option,
            "is_correct": self.is_correct,
            "time_taken_seconds": self.time_taken_seconds,
            "difficulty": self.difficulty,
            "topic": self.topic,
            "answered_at": self.answered_at,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Response:
        return cls(
            response_id=data["response_id"],
            session_id=data["session_id"],
            question_id=data["question_id"],
            selected_option=data["selected_option"],
            is_correct=bool(data["is_correct"]),
            time_taken_seconds=int(data.get("time_taken_seconds") or 0),
            difficulty=data.get("difficulty"),
            topic=data.get("topic"),
            answered_at=data.get("answered_at") or utc_now(),
        )


@dataclass
class ExamSession:
    """
    Durable state of one exam attempt.

    Attributes:
        user_id: Owning user
        subject: Subject tag the exam draws questions from
        current_difficulty: Tier used for the next selection
        status: IN_PROGRESS or COMPLETED
        score: Count of correct answers so far
        session_id: Unique identifier ("ex-<uuid4>")
        started_at: ISO 8601 start timestamp
        ended_at: ISO 8601 end timestamp, set on completion
        current_question_id: Question most recently served, None once completed
        difficulty_progression: Tier after each answer, starting with the initial tier
        completion_reason: Why the session completed
        version: Optimistic concurrency counter, bumped by the store on update
    """
    user_id: Any
    subject: str
    current_difficulty: DifficultyTier = "Medium"
    status: ExamStatus = STATUS_IN_PROGRESS
    score: int = 0
    session_id: str = field(default_factory=lambda: f"ex-{uuid.uuid4()}")
    started_at: str = field(default_factory=utc_now)
    ended_at: Optional[str] = None
    current_question_id: Optional[QuestionId] = None
    difficulty_progression: List[DifficultyTier] = field(default_factory=list)
    completion_reason: Optional[CompletionReason] = None
    version: int = 0

    def __post_init__(self):
        self.current_difficulty = normalize_difficulty(self.current_difficulty)
        if not self.difficulty_progression:
            self.difficulty_progression = [self.current_difficulty]

    @property
    def is_completed(self) -> bool:
        return self.status == STATUS_COMPLETED

    def _ensure_in_progress(self) -> None:
        if self.is_completed:
            raise SessionCompleted(self.session_id)

    def serve(self, question_id: QuestionId) -> None:
        """Remember the question handed to the student."""
        self._ensure_in_progress()
        self.current_question_id = question_id

    def record_answer(self, is_correct: bool, new_difficulty: DifficultyTier) -> None:
        """Apply one graded answer: bump the score and move to the retuned tier."""
        self._ensure_in_progress()
        if is_correct:
            self.score += 1
        self.current_difficulty = normalize_difficulty(new_difficulty)
        self.difficulty_progression.append(self.current_difficulty)
        self.current_question_id = None

    def complete(self, reason: CompletionReason) -> None:
        """Transition to COMPLETED. The session is immutable afterwards."""
        self._ensure_in_progress()
        self.status = STATUS_COMPLETED
        self.ended_at = utc_now()
        self.completion_reason = reason
        self.current_question_id = None

    def duration_seconds(self) -> Optional[float]:
        """Elapsed time between start and end, None while in progress."""
        if not self.ended_at:
            return None
        started = datetime.fromisoformat(self.started_at)
        ended = datetime.fromisoformat(self.ended_at)
        return max(0.0, (ended - started).total_seconds())

    def copy(self) -> ExamSession:
        """Detached deep copy."""
        return deepcopy(self)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exam session to dictionary for persistence."""
        return {
            "session_id": self.session_id,
            "user_id": self.user_id,
            "subject": self.subject,
            "status": self.status,
            "current_difficulty": self.current_difficulty,
            "score": self.score,
            "started_at": self.started_at,
            "ended_at": self.ended_at,
            "current_question_id": self.current_question_id,
            "difficulty_progression": list(self.difficulty_progression),
            "completion_reason": self.completion_reason,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ExamSession:
        return cls(
            session_id=data["session_id"],
            user_id=data["user_id"],
            subject=data["subject"],
            status=data["status"],
            current_difficulty=data["current_difficulty"],
            score=int(data["score"]),
            started_at=data["started_at"],
            ended_at=data.get("ended_at"),
            current_question_id=data.get("current_question_id"),
            difficulty_progression=list(data.get("difficulty_progression") or []),
            completion_reason=data.get("completion_reason"),
            version=int(data.get("version", 0)),
        )
