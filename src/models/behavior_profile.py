"""
Student behavior profile: long-lived behavioral counters and the cached
learning-style estimate derived from them.

The counters are the source of truth. The cached style block is recomputable
at any time from the counters (or replaced by a questionnaire result).
"""

from __future__ import annotations

from copy import deepcopy
from datetime import datetime, timezone
from typing import Any, Dict, Literal, Optional


LearningStyle = Literal["visual", "auditory", "reading_writing", "kinesthetic"]
StyleSource = Literal["default", "behavior", "assessment"]

MODALITIES: tuple[LearningStyle, ...] = (
    "visual",
    "auditory",
    "reading_writing",
    "kinesthetic",
)

PROCESSING_STYLES = (
    "sequential",
    "global",
    "active",
    "reflective",
    "sensing",
    "intuitive",
)


def uniform_scores() -> dict[str, float]:
    """Equal weight across all modalities (no preference asserted)."""
    return {style: 0.25 for style in MODALITIES}


class StudentBehaviorProfile:
    """
    Behavioral telemetry for one student.

    Not thread-safe on its own; the orchestrator serializes access per student.
    """

    def __init__(self, student_id: str):
        self._data = self._create_default_profile(student_id)

    @staticmethod
    def _utc_now() -> str:
        """Get current UTC timestamp in ISO 8601 format."""
        return datetime.now(timezone.utc).isoformat()

    def _create_default_profile(self, student_id: str) -> dict:
        now = self._utc_now()
        return {
            "meta": {
                "schema_version": 1,
                "created_at": now,
                "last_updated": now,
            },
            "student_id": student_id,
            "behavior": {
                "content_interaction_counts": {},
                "time_spent_by_activity": {},
                "performance_by_question_type": {},
                "total_events_recorded": 0,
                "events_since_recompute": 0,
            },
            "learning_style": {
                "scores": uniform_scores(),
                "confidence": 0.0,
                "primary_style": "multimodal",
                "source": "default",
                "computed_at": None,
            },
            "processing_styles": {style: 0.5 for style in PROCESSING_STYLES},
        }

    def touch(self) -> None:
        """Update last_updated timestamp."""
        self._data["meta"]["last_updated"] = self._utc_now()

    # ==================== Counters ====================

    @property
    def student_id(self) -> str:
        return self._data["student_id"]

    @property
    def content_interaction_counts(self) -> dict[str, int]:
        return self._data["behavior"]["content_interaction_counts"]

    @property
    def time_spent_by_activity(self) -> dict[str, float]:
        """Accumulated seconds per activity type."""
        return self._data["behavior"]["time_spent_by_activity"]

    @property
    def performance_by_question_type(self) -> dict[str, dict[str, int]]:
        return self._data["behavior"]["performance_by_question_type"]

    @property
    def total_events_recorded(self) -> int:
        return self._data["behavior"]["total_events_recorded"]

    @total_events_recorded.setter
    def total_events_recorded(self, value: int) -> None:
        self._data["behavior"]["total_events_recorded"] = value

    @property
    def events_since_recompute(self) -> int:
        return self._data["behavior"]["events_since_recompute"]

    @events_since_recompute.setter
    def events_since_recompute(self, value: int) -> None:
        self._data["behavior"]["events_since_recompute"] = value

    def accuracy_for(self, question_type: str) -> Optional[float]:
        """Accuracy for a question type, or None when never attempted."""
        perf = self.performance_by_question_type.get(question_type)
        if not perf or perf["total"] == 0:
            return None
        return perf["correct"] / perf["total"]

    # ==================== Cached learning style ====================

    @property
    def style_scores(self) -> dict[str, float]:
        return self._data["learning_style"]["scores"]

    @property
    def confidence(self) -> float:
        return self._data["learning_style"]["confidence"]

    @property
    def primary_style(self) -> str:
        return self._data["learning_style"]["primary_style"]

    @property
    def style_source(self) -> StyleSource:
        return self._data["learning_style"]["source"]

    @property
    def processing_styles(self) -> dict[str, float]:
        return self._data["processing_styles"]

    def set_learning_style(
        self,
        scores: Dict[str, float],
        confidence: float,
        primary_style: str,
        source: StyleSource,
    ) -> None:
        """Replace the cached style estimate."""
        self._data["learning_style"] = {
            "scores": dict(scores),
            "confidence": float(confidence),
            "primary_style": primary_style,
            "source": source,
            "computed_at": self._utc_now(),
        }
        self.touch()

    def set_processing_styles(self, styles: Dict[str, float]) -> None:
        self._data["processing_styles"].update(styles)
        self.touch()

    # ==================== Persistence ====================

    def to_dict(self) -> dict:
        """Export profile as dictionary (deep copy to prevent mutations)."""
        return deepcopy(self._data)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> StudentBehaviorProfile:
        """Rebuild a profile from `to_dict` output, filling missing blocks."""
        instance = cls(data["student_id"])
        for key in ("meta", "behavior", "learning_style", "processing_styles"):
            if key in data:
                instance._data[key].update(deepcopy(data[key]))
        return instance

    def __repr__(self) -> str:
        return (
            f"StudentBehaviorProfile(id={self.student_id}, "
            f"events={self.total_events_recorded}, "
            f"primary={self.primary_style}, "
            f"confidence={self.confidence:.1f})"
        )
