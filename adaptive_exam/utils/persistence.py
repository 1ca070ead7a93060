"""
Collaborator interfaces and stores for the exam engine.

The orchestrator consumes four collaborators:
- QuestionPool: read-only questions filterable by subject / difficulty
- ResponseLedger: append-only answers, queryable by session
- ExamSessionStore: session records with versioned (conditional) updates
- UserDirectory: user identity lookup

In-memory implementations are thread-safe and suit tests and single-process
use. The JSON file implementations keep one file per session under the
configured data directory, validate session records before writing and
replace files atomically.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Protocol

from ..config import config
from ..errors import (
    ConcurrentModification,
    QuestionAlreadyAnswered,
    QuestionNotFound,
    SessionNotFound,
    UserNotFound,
)
from ..models.exam_session import ExamSession, Response
from ..models.question import DifficultyTier, Question, QuestionId, normalize_difficulty
from .validation import ExamSessionValidator

logger = logging.getLogger(__name__)


# ==================== Collaborator Interfaces ====================

class QuestionPool(Protocol):
    def find_by_id(self, question_id: QuestionId) -> Question: ...

    def find_by_subject(self, subject: str) -> List[Question]: ...

    def find_by_subject_and_difficulty(
        self, subject: str, difficulty: DifficultyTier
    ) -> List[Question]: ...


class ResponseLedger(Protocol):
    def append(self, response: Response) -> None: ...

    def find_by_session(self, session_id: str) -> List[Response]: ...

    def discard(self, response: Response) -> None: ...


class ExamSessionStore(Protocol):
    def create(self, session: ExamSession) -> ExamSession: ...

    def find_by_id(self, session_id: str) -> ExamSession: ...

    def update(self, session: ExamSession) -> ExamSession: ...

    def find_by_user(self, user_id: Any) -> List[ExamSession]: ...


@dataclass(frozen=True)
class User:
    """Identity record consumed from the user-management layer."""
    user_id: Any
    name: str = ""
    role: str = "STUDENT"


class UserDirectory(Protocol):
    def find_user_by_id(self, user_id: Any) -> User: ...


# ==================== In-memory Implementations ====================

class InMemoryQuestionPool:
    """
    Question pool held in memory.

    Questions are validated on add. Lookups return questions in insertion
    order.
    """

    def __init__(self, questions: Optional[Iterable[Question]] = None):
        self._lock = threading.Lock()
        self._questions: Dict[QuestionId, Question] = {}
        for question in questions or []:
            self.add(question)

    def add(self, question: Question) -> None:
        question.validate()
        with self._lock:
            self._questions[question.question_id] = question

    def find_by_id(self, question_id: QuestionId) -> Question:
        with self._lock:
            question = self._questions.get(question_id)
        if question is None:
            raise QuestionNotFound(question_id)
        return question

    def find_by_subject(self, subject: str) -> List[Question]:
        with self._lock:
            return [q for q in self._questions.values() if q.subject == subject]

    def find_by_subject_and_difficulty(
        self, subject: str, difficulty: DifficultyTier
    ) -> List[Question]:
        tier = normalize_difficulty(difficulty)
        with self._lock:
            return [
                q
                for q in self._questions.values()
                if q.subject == subject and q.difficulty == tier
            ]

    def subjects(self) -> List[str]:
        with self._lock:
            return sorted({q.subject for q in self._questions.values()})

    def __len__(self) -> int:
        with self._lock:
            return len(self._questions)


class InMemoryResponseLedger:
    """Append-only response store keyed by session."""

    def __init__(self):
        self._lock = threading.Lock()
        self._by_session: Dict[str, List[Response]] = {}

    def append(self, response: Response) -> None:
        with self._lock:
            responses = self._by_session.setdefault(response.session_id, [])
            if any(r.question_id == response.question_id for r in responses):
                raise QuestionAlreadyAnswered(response.session_id, response.question_id)
            responses.append(response)

    def find_by_session(self, session_id: str) -> List[Response]:
        with self._lock:
            return list(self._by_session.get(session_id, []))

    def discard(self, response: Response) -> None:
        """Remove a response appended by a submission that failed to persist."""
        with self._lock:
            responses = self._by_session.get(response.session_id, [])
            self._by_session[response.session_id] = [
                r for r in responses if r.response_id != response.response_id
            ]


class InMemoryExamSessionStore:
    """
    Session records held in memory.

    update() is a conditional write: it only succeeds when the caller's
    version matches the stored one.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._sessions: Dict[str, ExamSession] = {}

    def create(self, session: ExamSession) -> ExamSession:
        with self._lock:
            if session.session_id in self._sessions:
                raise ValueError(f"Exam {session.session_id} already exists")
            self._sessions[session.session_id] = session.copy()
            return session.copy()

    def find_by_id(self, session_id: str) -> ExamSession:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                raise SessionNotFound(session_id)
            return session.copy()

    def update(self, session: ExamSession) -> ExamSession:
        with self._lock:
            stored = self._sessions.get(session.session_id)
            if stored is None:
                raise SessionNotFound(session.session_id)
            if stored.version != session.version:
                raise ConcurrentModification(session.session_id, session.version, stored.version)
            saved = session.copy()
            saved.version += 1
            self._sessions[session.session_id] = saved
            return saved.copy()

    def find_by_user(self, user_id: Any) -> List[ExamSession]:
        with self._lock:
            sessions = [s.copy() for s in self._sessions.values() if s.user_id == user_id]
        sessions.sort(key=lambda s: s.started_at, reverse=True)
        return sessions


class InMemoryUserDirectory:
    def __init__(self, users: Optional[Iterable[User]] = None):
        self._users: Dict[Any, User] = {u.user_id: u for u in users or []}

    def add(self, user: User) -> None:
        self._users[user.user_id] = user

    def find_user_by_id(self, user_id: Any) -> User:
        user = self._users.get(user_id)
        if user is None:
            raise UserNotFound(user_id)
        return user


# ==================== JSON File Implementations ====================

def _write_json_atomic(filepath: Path, payload: Any) -> None:
    """Write JSON to a temp file in the same directory, then rename over the target."""
    fd, tmp_path = tempfile.mkstemp(dir=filepath.parent, suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(payload, f, indent=2, ensure_ascii=False)
        os.replace(tmp_path, filepath)
    except BaseException:
        if os.path.exists(tmp_path):
            os.unlink(tmp_path)
        raise


class FileExamSessionStore:
    """
    Session records persisted as data/sessions/{session_id}.json.

    Features:
    - Validate records against exam_session.schema.json before saving
    - Versioned updates (ConcurrentModification on a stale write)
    - Atomic file replacement
    """

    def __init__(self, sessions_dir: Path | str = None, validate: bool = True):
        """
        Initialize session store.

        Args:
            sessions_dir: Directory to store sessions (default: config.paths.sessions_dir)
            validate: Whether to validate records before saving
        """
        self.sessions_dir = Path(sessions_dir) if sessions_dir else config.paths.sessions_dir
        self.sessions_dir.mkdir(parents=True, exist_ok=True)
        self.validator = ExamSessionValidator() if validate else None
        self._lock = threading.Lock()

    def _path(self, session_id: str) -> Path:
        return self.sessions_dir / f"{session_id}.json"

    def _save(self, session: ExamSession) -> None:
        data = session.to_dict()
        if self.validator is not None:
            result = self.validator.validate(data)
            if not result.valid:
                raise ValueError(
                    f"Refusing to save invalid exam {session.session_id}:\n"
                    + "\n".join(result.errors)
                )
        _write_json_atomic(self._path(session.session_id), data)

    def _load(self, session_id: str) -> ExamSession:
        filepath = self._path(session_id)
        if not filepath.exists():
            raise SessionNotFound(session_id)
        with open(filepath, "r", encoding="utf-8") as f:
            return ExamSession.from_dict(json.load(f))

    def create(self, session: ExamSession) -> ExamSession:
        with self._lock:
            if self._path(session.session_id).exists():
                raise ValueError(f"Exam {session.session_id} already exists")
            self._save(session)
            return session.copy()

    def find_by_id(self, session_id: str) -> ExamSession:
        with self._lock:
            return self._load(session_id)

    def update(self, session: ExamSession) -> ExamSession:
        with self._lock:
            stored = self._load(session.session_id)
            if stored.version != session.version:
                raise ConcurrentModification(session.session_id, session.version, stored.version)
            saved = session.copy()
            saved.version += 1
            self._save(saved)
            return saved

    def find_by_user(self, user_id: Any) -> List[ExamSession]:
        sessions = []
        with self._lock:
            for filepath in self.sessions_dir.glob("ex-*.json"):
                try:
                    with open(filepath, "r", encoding="utf-8") as f:
                        data = json.load(f)
                except (OSError, json.JSONDecodeError) as e:
                    logger.warning("Skipping unreadable exam file %s: %s", filepath, e)
                    continue
                if data.get("user_id") == user_id:
                    sessions.append(ExamSession.from_dict(data))

        # Newest first
        sessions.sort(key=lambda s: s.started_at, reverse=True)
        return sessions


class FileResponseLedger:
    """Responses persisted as one JSON list per session: data/responses/{session_id}.json."""

    def __init__(self, responses_dir: Path | str = None):
        self.responses_dir = Path(responses_dir) if responses_dir else config.paths.responses_dir
        self.responses_dir.mkdir(parents=True, exist_ok=True)
        self._lock = threading.Lock()

    def _path(self, session_id: str) -> Path:
        return self.responses_dir / f"{session_id}.json"

    def _read(self, session_id: str) -> List[Dict[str, Any]]:
        filepath = self._path(session_id)
        if not filepath.exists():
            return []
        with open(filepath, "r", encoding="utf-8") as f:
            return json.load(f)

    def append(self, response: Response) -> None:
        with self._lock:
            records = self._read(response.session_id)
            if any(r["question_id"] == response.question_id for r in records):
                raise QuestionAlreadyAnswered(response.session_id, response.question_id)
            records.append(response.to_dict())
            _write_json_atomic(self._path(response.session_id), records)

    def find_by_session(self, session_id: str) -> List[Response]:
        with self._lock:
            return [Response.from_dict(r) for r in self._read(session_id)]

    def discard(self, response: Response) -> None:
        with self._lock:
            records = [
                r for r in self._read(response.session_id)
                if r["response_id"] != response.response_id
            ]
            _write_json_atomic(self._path(response.session_id), records)
