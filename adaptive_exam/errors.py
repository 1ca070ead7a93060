"""
Error taxonomy for the exam engine.

NotFound and InvalidState are surfaced to callers unchanged; neither is
retryable. Pool exhaustion is not an error and never appears here.
"""

from typing import Any


class ExamError(Exception):
    """Base class for all exam engine errors."""


class NotFound(ExamError, LookupError):
    """A referenced user, session or question does not exist."""

    kind = "entity"

    def __init__(self, entity_id: Any, message: str = None):
        self.entity_id = entity_id
        super().__init__(message or f"{self.kind.capitalize()} {entity_id!r} not found")


class UserNotFound(NotFound):
    kind = "user"


class SessionNotFound(NotFound):
    kind = "session"


class QuestionNotFound(NotFound):
    kind = "question"


class InvalidState(ExamError):
    """The operation is not allowed in the session's current state."""


class SessionCompleted(InvalidState):
    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Exam {session_id} is already completed")


class SessionAlreadyActive(InvalidState):
    def __init__(self, user_id: Any, subject: str, session_id: str):
        self.user_id = user_id
        self.subject = subject
        self.session_id = session_id
        super().__init__(
            f"User {user_id!r} already has exam {session_id} in progress for {subject!r}"
        )


class QuestionAlreadyAnswered(InvalidState):
    def __init__(self, session_id: str, question_id: Any):
        self.session_id = session_id
        self.question_id = question_id
        super().__init__(f"Question {question_id!r} already answered in exam {session_id}")


class ConcurrentModification(InvalidState):
    """A versioned session update lost the race against another writer."""

    def __init__(self, session_id: str, expected: int, actual: int):
        self.session_id = session_id
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Exam {session_id} was modified concurrently "
            f"(expected version {expected}, found {actual})"
        )


class QuestionBankError(ValueError):
    """A question bank file or record failed validation."""

    def __init__(self, errors: list[str]):
        self.errors = errors
        super().__init__(
            f"Question bank rejected with {len(errors)} error(s):\n"
            + "\n".join(f"  - {error}" for error in errors)
        )
