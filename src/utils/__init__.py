"""
Utility modules for the adaptive learning core.

This module contains utility functions:
- validation: JSON Schema validation for stored profiles and sessions
- persistence: Profile/session stores used by the orchestrator
"""

from .validation import (
    BehaviorProfileValidator,
    DifficultySessionValidator,
    SchemaValidator,
    ValidationResult,
    validate_behavior_profile,
    validate_difficulty_session,
)
from .persistence import (
    InMemoryStore,
    JsonFileStore,
    ProfileStore,
)

__all__ = [
    # Validation
    "BehaviorProfileValidator",
    "DifficultySessionValidator",
    "SchemaValidator",
    "ValidationResult",
    "validate_behavior_profile",
    "validate_difficulty_session",
    # Persistence
    "InMemoryStore",
    "JsonFileStore",
    "ProfileStore",
]
