"""
Question bank loading.

A question bank file is a JSON list of question records (see
schemas/question.schema.json). Every record is validated before the pool
is built; a bank with any invalid record is rejected as a whole.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from ..config import config
from ..errors import QuestionBankError
from ..models.question import Question
from .persistence import InMemoryQuestionPool
from .validation import QuestionValidator

logger = logging.getLogger(__name__)


def parse_questions(records: List[Dict[str, Any]]) -> List[Question]:
    """
    Validate and convert question records.

    Args:
        records: Question dictionaries

    Returns:
        List of Question objects

    Raises:
        QuestionBankError: If any record is invalid or an id repeats
    """
    if not isinstance(records, list):
        raise QuestionBankError(["Question bank must be a JSON list of question records"])

    validator = QuestionValidator()
    errors = []
    seen_ids = set()
    questions = []

    for i, record in enumerate(records):
        result = validator.validate(record)
        if not result.valid:
            errors.extend(f"Record {i}: {error}" for error in result.errors)
            continue

        if record["question_id"] in seen_ids:
            errors.append(f"Record {i}: duplicate question_id {record['question_id']!r}")
            continue
        seen_ids.add(record["question_id"])

        try:
            questions.append(Question.from_dict(record))
        except ValueError as e:
            errors.append(f"Record {i}: {e}")

    if errors:
        raise QuestionBankError(errors)
    return questions


def load_question_bank(path: Optional[Path | str] = None) -> InMemoryQuestionPool:
    """
    Load a question bank file into a pool.

    Args:
        path: JSON file path (default: config.paths.question_bank_path)

    Returns:
        InMemoryQuestionPool with every question from the file
    """
    path = Path(path) if path else config.paths.question_bank_path
    with open(path, "r", encoding="utf-8") as f:
        records = json.load(f)

    questions = parse_questions(records)
    pool = InMemoryQuestionPool(questions)
    logger.info(
        "Loaded %d question(s) across %d subject(s) from %s",
        len(pool),
        len(pool.subjects()),
        path,
    )
    return pool


def save_question_bank(questions: Iterable[Question], path: Path | str) -> Path:
    """Write questions (answer keys included) to a bank file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump([q.to_dict() for q in questions], f, indent=2, ensure_ascii=False)
    return path


def demo_questions() -> List[Question]:
    """Seed questions for local development and demos."""
    rows = [
        (1, "What is the value of pi (approx)?", "3.14", "2.14", "4.14", "3.41", "A", "Mathematics", "Easy"),
        (2, "Solve for x: 2x + 5 = 15", "2", "5", "10", "7.5", "B", "Mathematics", "Medium"),
        (3, "Square root of 144 is?", "10", "11", "12", "13", "C", "Mathematics", "Easy"),
        (4, "Powerhouse of the cell is?", "Nucleus", "Mitochondria", "Ribosome", "Golgi Body", "B", "Science", "Easy"),
        (5, "Chemical formula for Water?", "H2O", "CO2", "O2", "NaCl", "A", "Science", "Easy"),
        (6, "Which planet is known as the Red Planet?", "Venus", "Mars", "Jupiter", "Saturn", "B", "Science", "Easy"),
    ]
    return [
        Question(
            question_id=qid,
            content=content,
            option_a=a,
            option_b=b,
            option_c=c,
            option_d=d,
            correct_option=correct,
            subject=subject,
            difficulty=difficulty,
        )
        for qid, content, a, b, c, d, correct, subject, difficulty in rows
    ]


def demo_pool() -> InMemoryQuestionPool:
    return InMemoryQuestionPool(demo_questions())
