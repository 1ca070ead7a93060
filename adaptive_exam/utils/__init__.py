"""
Utility modules for the adaptive exam engine.

This module contains utility functions:
- persistence: Collaborator interfaces with in-memory and JSON file stores
- validation: JSON Schema validation for questions and sessions
- question_bank: Question bank loading and demo seed data
- progress: Exam result analytics
"""

from .persistence import (
    FileExamSessionStore,
    FileResponseLedger,
    InMemoryExamSessionStore,
    InMemoryQuestionPool,
    InMemoryResponseLedger,
    InMemoryUserDirectory,
    User,
)
from .validation import (
    ExamSessionValidator,
    QuestionValidator,
    validate_exam_session,
    validate_question,
)
from .question_bank import demo_pool, demo_questions, load_question_bank, save_question_bank
from .progress import ExamResult, build_result

__all__ = [
    # Persistence
    "User",
    "InMemoryQuestionPool",
    "InMemoryResponseLedger",
    "InMemoryExamSessionStore",
    "InMemoryUserDirectory",
    "FileExamSessionStore",
    "FileResponseLedger",
    # Validation
    "QuestionValidator",
    "ExamSessionValidator",
    "validate_question",
    "validate_exam_session",
    # Question bank
    "load_question_bank",
    "save_question_bank",
    "demo_questions",
    "demo_pool",
    # Results
    "ExamResult",
    "build_result",
]
