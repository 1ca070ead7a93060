"""
Shared pytest fixtures and configuration for the exam engine tests.

This file is automatically discovered by pytest and provides
fixtures available to all tests.
"""

import random

import pytest

from adaptive_exam.models.selector import AdaptiveSelector
from adaptive_exam.orchestrator import ExamOrchestrator
from adaptive_exam.utils.persistence import (
    InMemoryExamSessionStore,
    InMemoryQuestionPool,
    InMemoryResponseLedger,
    InMemoryUserDirectory,
    User,
)

from tests.factories import make_question, science_bank


@pytest.fixture
def question_pool():
    """
    Fixture providing a pool with 15 Science questions (5 per tier)
    and 2 Mathematics questions.
    """
    questions = science_bank()
    questions.append(make_question(101, subject="Mathematics", difficulty="Easy"))
    questions.append(make_question(102, subject="Mathematics", difficulty="Hard"))
    return InMemoryQuestionPool(questions)


@pytest.fixture
def users():
    return InMemoryUserDirectory([User(user_id=1, name="Asha"), User(user_id=2, name="Ravi")])


@pytest.fixture
def orchestrator(question_pool, users):
    """Fixture providing an orchestrator over in-memory stores with a seeded rng."""
    return ExamOrchestrator(
        pool=question_pool,
        ledger=InMemoryResponseLedger(),
        sessions=InMemoryExamSessionStore(),
        users=users,
        selector=AdaptiveSelector(question_pool, rng=random.Random(1234)),
        max_questions=10,
        initial_difficulty="Medium",
    )


# Pytest hooks for better test output


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        # Mark tests in unit/ directory as unit tests
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        # Mark tests in integration/ directory as integration tests
        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
