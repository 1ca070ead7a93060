"""
Adaptive exam engine.

Runs timed sequences of multiple-choice questions whose difficulty adapts
to the student's answers, tracks score, and completes after a fixed number
of questions or when the subject's question pool is exhausted.
"""

from .errors import (
    ExamError,
    InvalidState,
    NotFound,
    QuestionAlreadyAnswered,
    SessionAlreadyActive,
    SessionCompleted,
)
from .orchestrator import ExamOrchestrator, SessionState

__version__ = "0.1"

__all__ = [
    "ExamOrchestrator",
    "SessionState",
    "ExamError",
    "NotFound",
    "InvalidState",
    "SessionCompleted",
    "SessionAlreadyActive",
    "QuestionAlreadyAnswered",
]
