"""
Question model for the adaptive exam question pool.

Questions are multiple choice with exactly four options tagged A-D and a
single correct option. Before a question leaves the engine it is projected
to a MaskedQuestion, which has no answer key at all.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional, Union

# Type aliases
QuestionId = Union[int, str]
DifficultyTier = str  # "Easy", "Medium", "Hard"
OptionTag = str  # "A", "B", "C", "D"

DIFFICULTY_TIERS = ("Easy", "Medium", "Hard")
OPTION_TAGS = ("A", "B", "C", "D")


def normalize_difficulty(value: str) -> DifficultyTier:
    """
    Return the canonical tier name for any casing of a tier.

    Raises:
        ValueError: If value is not a known tier
    """
    if isinstance(value, str):
        for tier in DIFFICULTY_TIERS:
            if value.strip().lower() == tier.lower():
                return tier
    raise ValueError(f"Unknown difficulty {value!r}, expected one of {DIFFICULTY_TIERS}")


def normalize_option(value: str) -> OptionTag:
    """
    Return the upper-cased option tag.

    Raises:
        ValueError: If value is empty or not one of A-D
    """
    if not isinstance(value, str) or not value.strip():
        raise ValueError("Selected option cannot be empty")
    tag = value.strip().upper()
    if tag not in OPTION_TAGS:
        raise ValueError(f"Invalid option {value!r}, expected one of {OPTION_TAGS}")
    return tag


@dataclass(frozen=True)
class MaskedQuestion:
    """
    Caller-facing projection of a Question.

    Carries content, the four option texts and metadata. It has no
    correct_option field.
    """
    question_id: QuestionId
    content: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    subject: str
    difficulty: DifficultyTier
    topic: Optional[str] = None

    @property
    def options(self) -> Dict[OptionTag, str]:
        return {
            "A": self.option_a,
            "B": self.option_b,
            "C": self.option_c,
            "D": self.option_d,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for the transport layer."""
        return {
            "question_id": self.question_id,
            "content": self.content,
            "options": self.options,
            "subject": self.subject,
            "difficulty": self.difficulty,
            "topic": self.topic,
        }


@dataclass(frozen=True)
class Question:
    """
    A single multiple-choice question in the pool.

    Attributes:
        question_id: Unique identifier
        subject: Subject tag used for filtering (e.g. "Science")
        difficulty: Difficulty tier
        content: The question text
        option_a..option_d: The four option texts
        correct_option: Tag of the correct option (A-D)
        topic: Optional topic within the subject
    """
    question_id: QuestionId
    subject: str
    difficulty: DifficultyTier
    content: str
    option_a: str
    option_b: str
    option_c: str
    option_d: str
    correct_option: OptionTag
    topic: Optional[str] = None

    @property
    def options(self) -> Dict[OptionTag, str]:
        return {
            "A": self.option_a,
            "B": self.option_b,
            "C": self.option_c,
            "D": self.option_d,
        }

    def validate(self) -> None:
        """
        Validate question integrity.

        Raises:
            ValueError: If validation fails
        """
        if not self.subject or not self.subject.strip():
            raise ValueError(f"Question {self.question_id} must have a subject")

        if not self.content or not self.content.strip():
            raise ValueError(f"Question {self.question_id} must have content")

        if self.difficulty not in DIFFICULTY_TIERS:
            raise ValueError(
                f"Question {self.question_id} has invalid difficulty {self.difficulty!r}, "
                f"expected one of {DIFFICULTY_TIERS}"
            )

        for tag, text in self.options.items():
            if not text or not str(text).strip():
                raise ValueError(f"Question {self.question_id} option {tag} cannot be empty")

        if self.correct_option not in OPTION_TAGS:
            raise ValueError(
                f"Question {self.question_id} has invalid correct_option "
                f"{self.correct_option!r}, expected one of {OPTION_TAGS}"
            )

    def is_correct(self, selected_option: str) -> bool:
        """Case-insensitive comparison against the answer key."""
        return self.correct_option.upper() == selected_option.strip().upper()

    def masked(self) -> MaskedQuestion:
        """Project to the caller-facing form without the answer key."""
        return MaskedQuestion(
            question_id=self.question_id,
            content=self.content,
            option_a=self.option_a,
            option_b=self.option_b,
            option_c=self.option_c,
            option_d=self.option_d,
            subject=self.subject,
            difficulty=self.difficulty,
            topic=self.topic,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for persistence (includes the answer key)."""
        return {
            "question_id": self.question_id,
            "subject": self.subject,
            "difficulty": self.difficulty,
            "topic": self.topic,
            "content": self.content,
            "option_a": self.option_a,
            "option_b": self.option_b,
            "option_c": self.option_c,
            "option_d": self.option_d,
            "correct_option": self.correct_option,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Question:
        """
        Build a validated Question from a persisted record.

        Difficulty and correct option are normalized, so "easy"/"b" are
        accepted for "Easy"/"B".
        """
        question = cls(
            question_id=data["question_id"],
            subject=data["subject"],
            difficulty=normalize_difficulty(data["difficulty"]),
            content=data["content"],
            option_a=data["option_a"],
            option_b=data["option_b"],
            option_c=data["option_c"],
            option_d=data["option_d"],
            correct_option=str(data["correct_option"]).strip().upper(),
            topic=data.get("topic"),
        )
        question.validate()
        return question
