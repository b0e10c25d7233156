"""
Behavioral Signal Aggregator - accumulates raw telemetry counters per student.

Counters are cheap and always updated; the style scorer reads them later.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from ..models.behavior_profile import StudentBehaviorProfile

logger = logging.getLogger(__name__)


# camelCase keys accepted from web clients
_KEY_ALIASES = {
    "contentType": "content_type",
    "activityType": "activity_type",
    "timeSpent": "time_spent_seconds",
    "timeSpentSeconds": "time_spent_seconds",
    "time_spent": "time_spent_seconds",
    "questionType": "question_type",
}


@dataclass
class BehaviorEvent:
    """
    One behavioral observation. Every field is optional.

    Attributes:
        content_type: Content interacted with (e.g. image_views, audio_plays)
        activity_type: Activity time was spent on (e.g. visual_content)
        time_spent_seconds: Seconds spent on the activity
        question_type: Question category answered (e.g. visual_questions)
        correct: Whether that question was answered correctly
    """
    content_type: Optional[str] = None
    activity_type: Optional[str] = None
    time_spent_seconds: Optional[float] = None
    question_type: Optional[str] = None
    correct: Optional[bool] = None

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> BehaviorEvent:
        """Build an event from a dict; unknown keys are dropped."""
        normalized = {_KEY_ALIASES.get(k, k): v for k, v in data.items()}
        return cls(
            content_type=normalized.get("content_type") or None,
            activity_type=normalized.get("activity_type") or None,
            time_spent_seconds=normalized.get("time_spent_seconds"),
            question_type=normalized.get("question_type") or None,
            correct=normalized.get("correct"),
        )

    def is_empty(self) -> bool:
        return all(
            value is None
            for value in (
                self.content_type,
                self.activity_type,
                self.time_spent_seconds,
                self.question_type,
                self.correct,
            )
        )


class BehaviorAggregator:
    """Applies behavior events to a StudentBehaviorProfile's counters."""

    def record(
        self,
        profile: StudentBehaviorProfile,
        event: Union[BehaviorEvent, Mapping[str, Any], None],
    ) -> bool:
        """
        Update counters from one event.

        Args:
            profile: Profile to update
            event: BehaviorEvent or mapping

        Returns:
            True if the event was recorded, False if it was ignored
        """
        if event is None:
            logger.warning("Ignoring missing behavior event for %s", profile.student_id)
            return False
        if not isinstance(event, BehaviorEvent):
            event = BehaviorEvent.from_mapping(event)
        if event.is_empty():
            logger.warning("Ignoring empty behavior event for %s", profile.student_id)
            return False

        if event.content_type:
            counts = profile.content_interaction_counts
            counts[event.content_type] = counts.get(event.content_type, 0) + 1

        if event.activity_type and event.time_spent_seconds:
            if event.time_spent_seconds < 0:
                logger.warning(
                    "Ignoring negative time %.1fs for %s/%s",
                    event.time_spent_seconds, profile.student_id, event.activity_type,
                )
            else:
                times = profile.time_spent_by_activity
                times[event.activity_type] = (
                    times.get(event.activity_type, 0.0) + float(event.time_spent_seconds)
                )

        if event.question_type and event.correct is not None:
            perf = profile.performance_by_question_type.setdefault(
                event.question_type, {"correct": 0, "total": 0}
            )
            perf["total"] += 1
            if event.correct:
                perf["correct"] += 1

        profile.total_events_recorded += 1
        profile.events_since_recompute += 1
        profile.touch()
        return True
