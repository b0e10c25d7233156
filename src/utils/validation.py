"""
Schema validation utilities for the adaptive learning core.

Provides JSON Schema validation with clear error messages for persisted
profiles and sessions, plus semantic checks the schemas cannot express:
- Difficulty within the grade band's range
- Mutually exclusive streak counters
- Style scores summing to 1
- Per-question-type correct counts not exceeding totals
"""

import json
from pathlib import Path
from typing import Any, Optional

from jsonschema import Draft7Validator, FormatChecker, ValidationError

from ..config import config
from ..exceptions import InvalidGradeLevel
from ..models.grade_policy import get_grade_policy


SCORE_SUM_TOLERANCE = 1e-6


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

    def validate_or_raise(self, data: dict) -> None:
        """
        Raises:
            ValidationError: If data is invalid (all messages joined)
        """
        result = self.validate(data)
        if not result.valid:
            raise ValidationError("\n".join(result.errors))

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


class BehaviorProfileValidator(SchemaValidator):
    """Validator for StudentBehaviorProfile.to_dict() output."""

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.schemas_dir / "behavior_profile.schema.json")

    def validate(self, data: dict) -> ValidationResult:
        result = super().validate(data)
        if not result.valid:
            return result

        profile_errors = []

        # Check 1: Style scores form a distribution
        scores = data["learning_style"]["scores"]
        total = sum(scores.values())
        if abs(total - 1.0) > SCORE_SUM_TOLERANCE:
            profile_errors.append(f"Style scores must sum to 1, got {total:.6f}")

        # Check 2: Correct answers never exceed attempts
        for question_type, perf in data["behavior"]["performance_by_question_type"].items():
            if perf["correct"] > perf["total"]:
                profile_errors.append(
                    f"Question type '{question_type}': correct ({perf['correct']}) "
                    f"exceeds total ({perf['total']})"
                )

        # Check 3: Pending events cannot exceed recorded events
        behavior = data["behavior"]
        if behavior.get("events_since_recompute", 0) > behavior["total_events_recorded"]:
            profile_errors.append("events_since_recompute exceeds total_events_recorded")

        return ValidationResult(valid=not profile_errors, errors=profile_errors, data=data)


class DifficultySessionValidator(SchemaValidator):
    """Validator for DifficultySession.to_dict() output."""

    def __init__(self, schema_path: Optional[Path] = None):
        super().__init__(schema_path or config.paths.schemas_dir / "difficulty_session.schema.json")

    def validate(self, data: dict) -> ValidationResult:
        result = super().validate(data)
        if not result.valid:
            return result

        session_errors = []

        # Check 1: Difficulty within the band
        try:
            policy = get_grade_policy(data["grade_level"])
        except InvalidGradeLevel as e:
            session_errors.append(str(e))
        else:
            difficulty = data["current_difficulty"]
            if not (policy.min_difficulty <= difficulty <= policy.max_difficulty):
                session_errors.append(
                    f"current_difficulty {difficulty} outside band {policy.name} "
                    f"[{policy.min_difficulty}, {policy.max_difficulty}]"
                )

        # Check 2: Streaks are mutually exclusive
        if data["consecutive_correct"] > 0 and data["consecutive_incorrect"] > 0:
            session_errors.append(
                "consecutive_correct and consecutive_incorrect cannot both be non-zero"
            )

        # Check 3: History respects its cap
        limit = data.get("history_limit")
        if limit is not None and len(data["response_history"]) > limit:
            session_errors.append(
                f"response_history has {len(data['response_history'])} entries, limit {limit}"
            )

        return ValidationResult(valid=not session_errors, errors=session_errors, data=data)


# Convenience functions for quick validation
def validate_behavior_profile(data: dict) -> ValidationResult:
    """
    Quick validation of behavior profile data.

    Example:
        result = validate_behavior_profile(profile.to_dict())
        if not result:
            print("Errors:", result.errors)
    """
    return BehaviorProfileValidator().validate(data)


def validate_difficulty_session(data: dict) -> ValidationResult:
    """Quick validation of difficulty session data."""
    return DifficultySessionValidator().validate(data)
