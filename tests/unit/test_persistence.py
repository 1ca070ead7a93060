"""
Unit tests for the collaborator stores.

Tests:
- In-memory question pool, response ledger, session store and user directory
- Versioned session updates
- JSON file stores (validation, atomic writes, history lookup)
"""

import json

import pytest

from adaptive_exam.errors import (
    ConcurrentModification,
    NotFound,
    QuestionAlreadyAnswered,
    QuestionNotFound,
    SessionNotFound,
    UserNotFound,
)
from adaptive_exam.models.exam_session import ExamSession, Response
from adaptive_exam.utils.persistence import (
    FileExamSessionStore,
    FileResponseLedger,
    InMemoryExamSessionStore,
    InMemoryQuestionPool,
    InMemoryResponseLedger,
    InMemoryUserDirectory,
    User,
)
from tests.factories import make_question, science_bank


def _response(session_id, question_id, correct=True):
    return Response(
        session_id=session_id,
        question_id=question_id,
        selected_option="A",
        is_correct=correct,
        time_taken_seconds=12,
        difficulty="Medium",
    )


# ==================== Question Pool ====================

class TestInMemoryQuestionPool:

    def test_lookups(self, question_pool):
        assert question_pool.find_by_id(3).difficulty == "Easy"
        assert len(question_pool.find_by_subject("Science")) == 15
        assert [q.question_id for q in question_pool.find_by_subject("Mathematics")] == [101, 102]
        assert len(question_pool.find_by_subject_and_difficulty("Science", "hard")) == 5
        assert question_pool.subjects() == ["Mathematics", "Science"]
        assert len(question_pool) == 17

    def test_missing_question(self, question_pool):
        with pytest.raises(QuestionNotFound) as exc_info:
            question_pool.find_by_id(999)
        assert isinstance(exc_info.value, NotFound)
        assert exc_info.value.entity_id == 999

    def test_unknown_subject_is_empty(self, question_pool):
        assert question_pool.find_by_subject("History") == []

    def test_add_validates(self):
        pool = InMemoryQuestionPool()
        bad = make_question(1, correct="Z")
        with pytest.raises(ValueError):
            pool.add(bad)
        assert len(pool) == 0


# ==================== Response Ledger ====================

class TestInMemoryResponseLedger:

    def test_append_and_find(self):
        ledger = InMemoryResponseLedger()
        ledger.append(_response("ex-a", 1))
        ledger.append(_response("ex-a", 2, correct=False))
        ledger.append(_response("ex-b", 1))

        responses = ledger.find_by_session("ex-a")

        assert [r.question_id for r in responses] == [1, 2]
        assert ledger.find_by_session("ex-missing") == []

    def test_duplicate_question_rejected(self):
        ledger = InMemoryResponseLedger()
        ledger.append(_response("ex-a", 1))

        with pytest.raises(QuestionAlreadyAnswered):
            ledger.append(_response("ex-a", 1))
        assert len(ledger.find_by_session("ex-a")) == 1

    def test_discard(self):
        ledger = InMemoryResponseLedger()
        keep = _response("ex-a", 1)
        drop = _response("ex-a", 2)
        ledger.append(keep)
        ledger.append(drop)

        ledger.discard(drop)

        assert [r.response_id for r in ledger.find_by_session("ex-a")] == [keep.response_id]

    def test_find_returns_copy_of_list(self):
        ledger = InMemoryResponseLedger()
        ledger.append(_response("ex-a", 1))

        ledger.find_by_session("ex-a").clear()

        assert len(ledger.find_by_session("ex-a")) == 1


# ==================== Session Store ====================

class TestInMemoryExamSessionStore:

    def test_create_and_find(self):
        store = InMemoryExamSessionStore()
        session = store.create(ExamSession(user_id=1, subject="Science"))

        found = store.find_by_id(session.session_id)

        assert found == session
        assert found is not session

    def test_create_twice_rejected(self):
        store = InMemoryExamSessionStore()
        session = ExamSession(user_id=1, subject="Science")
        store.create(session)
        with pytest.raises(ValueError):
            store.create(session)

    def test_missing_session(self):
        with pytest.raises(SessionNotFound):
            InMemoryExamSessionStore().find_by_id("ex-missing")

    def test_update_bumps_version(self):
        store = InMemoryExamSessionStore()
        session = store.create(ExamSession(user_id=1, subject="Science"))
        session.record_answer(True, "Hard")

        saved = store.update(session)

        assert saved.version == 1
        assert store.find_by_id(session.session_id).score == 1

    def test_stale_update_rejected(self):
        store = InMemoryExamSessionStore()
        created = store.create(ExamSession(user_id=1, subject="Science"))
        first = store.find_by_id(created.session_id)
        second = store.find_by_id(created.session_id)

        first.record_answer(True, "Hard")
        store.update(first)
        second.record_answer(False, "Easy")

        with pytest.raises(ConcurrentModification) as exc_info:
            store.update(second)
        assert exc_info.value.expected == 0
        assert exc_info.value.actual == 1
        assert store.find_by_id(created.session_id).current_difficulty == "Hard"

    def test_caller_mutation_does_not_leak(self):
        store = InMemoryExamSessionStore()
        session = store.create(ExamSession(user_id=1, subject="Science"))

        session.record_answer(True, "Hard")

        assert store.find_by_id(session.session_id).score == 0

    def test_find_by_user(self):
        store = InMemoryExamSessionStore()
        older = store.create(ExamSession(user_id=1, subject="Science", started_at="2024-01-01T00:00:00+00:00"))
        newer = store.create(ExamSession(user_id=1, subject="Mathematics", started_at="2024-02-01T00:00:00+00:00"))
        store.create(ExamSession(user_id=2, subject="Science"))

        history = store.find_by_user(1)

        assert [s.session_id for s in history] == [newer.session_id, older.session_id]


class TestInMemoryUserDirectory:

    def test_lookup(self, users):
        assert users.find_user_by_id(1).name == "Asha"
        users.add(User(user_id="u-3"))
        assert users.find_user_by_id("u-3").role == "STUDENT"

    def test_missing_user(self, users):
        with pytest.raises(UserNotFound):
            users.find_user_by_id(404)


# ==================== File Stores ====================

class TestFileExamSessionStore:

    def test_create_writes_json(self, tmp_path):
        store = FileExamSessionStore(sessions_dir=tmp_path)
        session = store.create(ExamSession(user_id=1, subject="Science"))

        filepath = tmp_path / f"{session.session_id}.json"
        assert filepath.exists()
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
        assert data["status"] == "IN_PROGRESS"
        assert data["difficulty_progression"] == ["Medium"]

    def test_round_trip_and_update(self, tmp_path):
        store = FileExamSessionStore(sessions_dir=tmp_path)
        session = store.create(ExamSession(user_id=1, subject="Science"))
        session.serve(4)
        session.record_answer(True, "Hard")
        session.complete("question_limit")

        saved = store.update(session)
        loaded = store.find_by_id(session.session_id)

        assert saved.version == 1
        assert loaded == saved
        assert loaded.is_completed
        assert list(tmp_path.glob("*.tmp")) == []

    def test_stale_update_rejected(self, tmp_path):
        store = FileExamSessionStore(sessions_dir=tmp_path)
        session = store.create(ExamSession(user_id=1, subject="Science"))
        store.update(session.copy())

        with pytest.raises(ConcurrentModification):
            store.update(session)

    def test_invalid_record_not_saved(self, tmp_path):
        store = FileExamSessionStore(sessions_dir=tmp_path)
        session = ExamSession(user_id=1, subject="Science")
        session.score = 3  # more correct answers than answers

        with pytest.raises(ValueError, match="Refusing to save"):
            store.create(session)
        assert list(tmp_path.iterdir()) == []

    def test_missing_session(self, tmp_path):
        with pytest.raises(SessionNotFound):
            FileExamSessionStore(sessions_dir=tmp_path).find_by_id("ex-missing")

    def test_find_by_user_skips_unreadable_files(self, tmp_path):
        store = FileExamSessionStore(sessions_dir=tmp_path)
        mine = store.create(ExamSession(user_id=1, subject="Science"))
        store.create(ExamSession(user_id=2, subject="Science"))
        (tmp_path / "ex-broken.json").write_text("{not json", encoding="utf-8")

        history = store.find_by_user(1)

        assert [s.session_id for s in history] == [mine.session_id]


class TestFileResponseLedger:

    def test_append_find_discard(self, tmp_path):
        ledger = FileResponseLedger(responses_dir=tmp_path)
        first = _response("ex-a", 1)
        second = _response("ex-a", "q-2", correct=False)
        ledger.append(first)
        ledger.append(second)

        assert [r.question_id for r in ledger.find_by_session("ex-a")] == [1, "q-2"]

        ledger.discard(second)

        responses = ledger.find_by_session("ex-a")
        assert len(responses) == 1
        assert responses[0].response_id == first.response_id
        assert responses[0].time_taken_seconds == 12

    def test_duplicate_rejected(self, tmp_path):
        ledger = FileResponseLedger(responses_dir=tmp_path)
        ledger.append(_response("ex-a", 1))
        with pytest.raises(QuestionAlreadyAnswered):
            ledger.append(_response("ex-a", 1))

    def test_unknown_session_is_empty(self, tmp_path):
        assert FileResponseLedger(responses_dir=tmp_path).find_by_session("ex-none") == []


def test_science_bank_shape():
    bank = science_bank(per_tier=2)
    assert [q.difficulty for q in bank] == ["Easy", "Easy", "Medium", "Medium", "Hard", "Hard"]
