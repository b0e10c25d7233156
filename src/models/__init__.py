"""
Data models for the adaptive learning core.

This module contains core data models:
- GradeBandPolicy: Static difficulty policy per grade band
- DifficultySession: Per-session adaptive difficulty state
- StudentBehaviorProfile: Long-lived behavioral counters and cached style
"""

from .grade_policy import (
    GRADE_BANDS,
    GradeBandPolicy,
    get_grade_policy,
    hint_level,
    max_hints_for,
    supported_grade_levels,
)
from .difficulty_session import DifficultySession, ResponseRecord
from .behavior_profile import MODALITIES, StudentBehaviorProfile

__all__ = [
    "GRADE_BANDS",
    "GradeBandPolicy",
    "get_grade_policy",
    "hint_level",
    "max_hints_for",
    "supported_grade_levels",
    "DifficultySession",
    "ResponseRecord",
    "MODALITIES",
    "StudentBehaviorProfile",
]
