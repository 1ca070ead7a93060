"""
Configuration management for the adaptive exam engine.

This module centralizes all configuration settings:
- Values loaded from environment variables (and a local .env file)
- Sensible defaults for development
- Single source of truth for exam length, tiers and storage paths
- Explicit filesystem preparation (no side effects on import)
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return int(raw)


@dataclass
class ExamConfig:
    """Exam session and adaptive selection configuration."""

    # Difficulty tiers, easiest first
    difficulty_tiers: tuple = ("Easy", "Medium", "Hard")
    initial_difficulty: str = "Medium"

    # Session length limit
    max_questions: int = field(
        default_factory=lambda: int(os.getenv("EXAM_MAX_QUESTIONS", "10"))
    )

    # Result reporting
    passing_score: float = 70.0  # percent correct
    quick_answer_seconds: int = 30
    slow_answer_seconds: int = 90

    # Reproducibility
    random_seed: Optional[int] = field(
        default_factory=lambda: _optional_int("EXAM_RANDOM_SEED")
    )


@dataclass
class PathConfig:
    """File system paths - single source of truth for all directories."""

    # Base paths
    project_root: Path = field(default_factory=lambda: Path(__file__).parent.parent)
    data_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv("EXAM_DATA_DIR", str(Path(__file__).parent.parent / "data"))
        )
    )

    # Data subdirectories (computed from data_dir)
    sessions_dir: Path = field(init=False)
    responses_dir: Path = field(init=False)
    question_bank_path: Path = field(init=False)

    # Schemas ship inside the package
    schemas_dir: Path = field(init=False)
    question_schema: Path = field(init=False)
    session_schema: Path = field(init=False)

    def __post_init__(self):
        """Initialize computed paths."""
        self.data_dir = Path(self.data_dir)
        self.sessions_dir = self.data_dir / "sessions"
        self.responses_dir = self.data_dir / "responses"
        self.question_bank_path = self.data_dir / "question_bank.json"
        self.schemas_dir = Path(__file__).parent / "schemas"
        self.question_schema = self.schemas_dir / "question.schema.json"
        self.session_schema = self.schemas_dir / "exam_session.schema.json"

    def prepare_filesystem(self):
        """
        Create directories if they don't exist.

        Separated from __post_init__ to avoid side-effects on import.
        Call this explicitly from your app entrypoint.
        """
        for directory in [self.data_dir, self.sessions_dir, self.responses_dir]:
            directory.mkdir(parents=True, exist_ok=True)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = "%(asctime)s %(levelname)s %(name)s %(message)s"


class Config:
    """
    Main configuration class. Singleton pattern.

    Usage:
        from adaptive_exam.config import config

        # Access settings
        limit = config.exam.max_questions
        sessions = config.paths.sessions_dir

        # Prepare filesystem (call once at startup)
        config.prepare_fs()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.paths = PathConfig()
            cls._instance.exam = ExamConfig()
            cls._instance.logging = LoggingConfig()

        return cls._instance

    def prepare_fs(self):
        """Prepare filesystem (create directories). Call once at startup."""
        self.paths.prepare_filesystem()

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        # Exam validation
        if self.exam.max_questions < 1:
            errors.append(f"max_questions must be >= 1, got {self.exam.max_questions}")

        if self.exam.initial_difficulty not in self.exam.difficulty_tiers:
            errors.append(
                f"initial_difficulty must be one of {self.exam.difficulty_tiers}, "
                f"got {self.exam.initial_difficulty!r}"
            )

        if not (0 <= self.exam.passing_score <= 100):
            errors.append(
                f"passing_score must be in [0, 100], got {self.exam.passing_score}"
            )

        if self.exam.quick_answer_seconds >= self.exam.slow_answer_seconds:
            errors.append(
                f"quick_answer_seconds ({self.exam.quick_answer_seconds}) must be < "
                f"slow_answer_seconds ({self.exam.slow_answer_seconds})"
            )

        # Logging validation
        if not isinstance(logging.getLevelName(self.logging.log_level.upper()), int):
            errors.append(f"Unknown log_level {self.logging.log_level!r}")

        # Path validation
        for schema in (self.paths.question_schema, self.paths.session_schema):
            if not schema.exists():
                errors.append(f"Schema not found: {schema}")

        return errors


# Global config instance
config = Config()


def configure_logging(level: Optional[str] = None) -> None:
    """Apply LoggingConfig to the root logger. Call once from your app entrypoint."""
    logging.basicConfig(
        level=(level or config.logging.log_level).upper(),
        format=config.logging.log_format,
    )
