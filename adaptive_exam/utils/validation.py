"""
Schema validation utilities for the exam engine.

Provides JSON Schema validation with clear error messages for question bank
records and persisted exam sessions, plus record-level consistency checks
that a schema cannot express.
"""

import json
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft7Validator, FormatChecker, ValidationError

from ..config import config


class ValidationResult:
    """
    Result of a validation attempt.

    Attributes:
        valid: Whether data passed validation
        errors: List of error messages
        data: The validated data
    """

    def __init__(self, valid: bool, errors: list[str], data: Any = None):
        self.valid = valid
        self.errors = errors
        self.data = data

    def __bool__(self) -> bool:
        """Allow using result in boolean context."""
        return self.valid

    def __str__(self) -> str:
        """Human-readable representation."""
        if self.valid:
            return "✓ Validation passed"
        return f"✗ Validation failed with {len(self.errors)} error(s):\n" + "\n".join(
            f"  - {error}" for error in self.errors
        )


class SchemaValidator:
    """
    JSON Schema validator.

    Usage:
        validator = SchemaValidator("path/to/schema.json")
        result = validator.validate(data)
        if not result:
            print(result.errors)
    """

    def __init__(self, schema_path: Path | str):
        """
        Initialize validator with a schema file.

        Args:
            schema_path: Path to JSON Schema file
        """
        self.schema_path = Path(schema_path)
        with open(self.schema_path, "r", encoding="utf-8") as f:
            self.schema = json.load(f)
        # Use FormatChecker to validate datetime, etc.
        self.validator = Draft7Validator(self.schema, format_checker=FormatChecker())

    def validate(self, data: dict) -> ValidationResult:
        """
        Validate data against schema.

        Args:
            data: Data to validate

        Returns:
            ValidationResult with validation status and any errors
        """
        errors = [self._format_error(error) for error in self.validator.iter_errors(data)]
        return ValidationResult(valid=not errors, errors=errors, data=data)

    def _format_error(self, error: ValidationError) -> str:
        """
        Convert ValidationError to human-readable message with details.

        Args:
            error: jsonschema ValidationError

        Returns:
            Formatted error message with validator and schema path
        """
        path = " -> ".join(str(p) for p in error.path) if error.path else "root"
        validator_name = getattr(error, "validator", "unknown")
        schema_path = "/".join(str(p) for p in error.schema_path)
        return (
            f"At '{path}': {error.message} "
            f"[validator={validator_name}, schema_path=/{schema_path}]"
        )


class QuestionValidator(SchemaValidator):
    """Validator for question bank records."""

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.question_schema)

    def validate(self, data: dict) -> ValidationResult:
        result = super().validate(data)
        if not result.valid:
            return result

        # Options must be distinguishable by the student
        options = [data[f"option_{tag}"].strip().lower() for tag in "abcd"]
        if len(set(options)) != len(options):
            return ValidationResult(
                valid=False,
                errors=[f"Question {data['question_id']!r} has duplicate option texts"],
                data=data,
            )
        return result


class ExamSessionValidator(SchemaValidator):
    """
    Validator for persisted exam sessions with state consistency checks.

    Features:
    - JSON Schema validation
    - COMPLETED sessions carry an end time and a completion reason
    - IN_PROGRESS sessions carry neither
    - Current tier matches the last entry of the difficulty progression
    - Score never exceeds the number of answers
    """

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.session_schema)

    def validate(self, data: dict) -> ValidationResult:
        result = super().validate(data)
        if not result.valid:
            return result

        errors = []
        completed = data["status"] == "COMPLETED"

        if completed and not data.get("ended_at"):
            errors.append("COMPLETED exam must have ended_at")
        if completed and not data.get("completion_reason"):
            errors.append("COMPLETED exam must have completion_reason")
        if completed and data.get("current_question_id") is not None:
            errors.append("COMPLETED exam cannot have a current question")
        if not completed and (data.get("ended_at") or data.get("completion_reason")):
            errors.append("IN_PROGRESS exam cannot have ended_at or completion_reason")

        progression = data["difficulty_progression"]
        if progression[-1] != data["current_difficulty"]:
            errors.append(
                f"current_difficulty {data['current_difficulty']!r} does not match "
                f"last progression entry {progression[-1]!r}"
            )

        # One progression entry per answer after the initial tier
        answered = len(progression) - 1
        if data["score"] > answered:
            errors.append(f"score {data['score']} exceeds answered count {answered}")

        return ValidationResult(valid=not errors, errors=errors, data=data)


# Convenience functions for quick validation
def validate_question(data: dict) -> ValidationResult:
    """
    Quick validation of one question record.

    Example:
        result = validate_question(record)
        if not result:
            print("Errors:", result.errors)
    """
    return QuestionValidator().validate(data)


def validate_exam_session(data: dict) -> ValidationResult:
    """Quick validation of one persisted exam session."""
    return ExamSessionValidator().validate(data)
