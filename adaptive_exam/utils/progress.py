"""
Exam result analytics for reports and dashboards.

Provides:
- Accuracy by topic and by difficulty tier
- Time analysis (average time, quick/medium/slow buckets)
- ExamResult summary for a finished (or in-progress) session
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

import numpy as np

from ..config import config
from ..models.exam_session import ExamSession, Response
from ..models.question import DIFFICULTY_TIERS

DEFAULT_TOPIC = "General"


def _accuracy(correct: int, attempted: int) -> float:
    return round(100.0 * correct / attempted, 2) if attempted else 0.0


def accuracy_by_topic(responses: List[Response]) -> Dict[str, Dict[str, float]]:
    """
    Group responses by topic.

    Responses without a topic are reported under "General".

    Example:
        >>> accuracy_by_topic(responses)
        {'Algebra': {'attempted': 2, 'correct': 1, 'accuracy': 50.0}}
    """
    stats: Dict[str, Dict[str, float]] = {}
    for response in responses:
        topic = response.topic or DEFAULT_TOPIC
        entry = stats.setdefault(topic, {"attempted": 0, "correct": 0, "accuracy": 0.0})
        entry["attempted"] += 1
        if response.is_correct:
            entry["correct"] += 1

    for entry in stats.values():
        entry["accuracy"] = _accuracy(entry["correct"], entry["attempted"])
    return stats


def accuracy_by_difficulty(responses: List[Response]) -> Dict[str, Dict[str, float]]:
    """Accuracy per tier; every tier is present, with zero counts when unused."""
    stats = {tier: {"count": 0, "correct": 0, "accuracy": 0.0} for tier in DIFFICULTY_TIERS}
    for response in responses:
        if response.difficulty not in stats:
            continue
        stats[response.difficulty]["count"] += 1
        if response.is_correct:
            stats[response.difficulty]["correct"] += 1

    for entry in stats.values():
        entry["accuracy"] = _accuracy(entry["correct"], entry["count"])
    return stats


def time_analysis(
    responses: List[Response],
    quick_seconds: Optional[int] = None,
    slow_seconds: Optional[int] = None,
) -> Dict[str, float]:
    """
    Summarize answer times.

    Args:
        responses: Session responses
        quick_seconds: Answers faster than this are "quick" (default from config)
        slow_seconds: Answers slower than this are "slow" (default from config)

    Returns:
        Dict with total_seconds, average_seconds and quick/medium/slow counts
    """
    quick_seconds = config.exam.quick_answer_seconds if quick_seconds is None else quick_seconds
    slow_seconds = config.exam.slow_answer_seconds if slow_seconds is None else slow_seconds

    times = np.array([r.time_taken_seconds or 0 for r in responses], dtype=float)
    if times.size == 0:
        return {"total_seconds": 0, "average_seconds": 0.0, "quick": 0, "medium": 0, "slow": 0}

    quick = int(np.count_nonzero(times < quick_seconds))
    slow = int(np.count_nonzero(times > slow_seconds))
    return {
        "total_seconds": int(times.sum()),
        "average_seconds": round(float(times.mean()), 2),
        "quick": quick,
        "medium": int(times.size) - quick - slow,
        "slow": slow,
    }


@dataclass
class ExamResult:
    """Final (or interim) report for one exam session."""
    session_id: str
    user_id: Any
    subject: str
    status: str
    score: int
    total_answered: int
    percentage: float
    passed: bool
    completion_reason: Optional[str]
    duration_seconds: Optional[float]
    difficulty_progression: List[str] = field(default_factory=list)
    accuracy_by_topic: Dict[str, Dict[str, float]] = field(default_factory=dict)
    accuracy_by_difficulty: Dict[str, Dict[str, float]] = field(default_factory=dict)
    time_analysis: Dict[str, float] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_result(
    session: ExamSession,
    responses: List[Response],
    passing_score: Optional[float] = None,
) -> ExamResult:
    """
    Summarize a session and its responses.

    Args:
        session: Exam session
        responses: All responses recorded for the session
        passing_score: Percentage needed to pass (default from config)

    Returns:
        ExamResult
    """
    passing_score = config.exam.passing_score if passing_score is None else passing_score
    answered = len(responses)
    percentage = _accuracy(session.score, answered)

    return ExamResult(
        session_id=session.session_id,
        user_id=session.user_id,
        subject=session.subject,
        status=session.status,
        score=session.score,
        total_answered=answered,
        percentage=percentage,
        passed=answered > 0 and percentage >= passing_score,
        completion_reason=session.completion_reason,
        duration_seconds=session.duration_seconds(),
        difficulty_progression=list(session.difficulty_progression),
        accuracy_by_topic=accuracy_by_topic(responses),
        accuracy_by_difficulty=accuracy_by_difficulty(responses),
        time_analysis=time_analysis(responses),
    )
