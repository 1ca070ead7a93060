"""
Data models for the adaptive exam engine.

This module contains core data models:
- Question / MaskedQuestion: Pool questions and their answer-key-free projection
- ExamSession / Response: Session state and per-question answers
- AdaptiveSelector: Tier retuning and next-question selection
"""

from .question import DIFFICULTY_TIERS, MaskedQuestion, Question
from .exam_session import ExamSession, Response
from .selector import AdaptiveSelector, adjust_difficulty

__all__ = [
    "DIFFICULTY_TIERS",
    "Question",
    "MaskedQuestion",
    "ExamSession",
    "Response",
    "AdaptiveSelector",
    "adjust_difficulty",
]
