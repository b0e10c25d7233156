"""
Difficulty Session - per-student, per-subject adaptive difficulty state.

Holds the current difficulty, the streak counters and a bounded response
history. Mutated only by the difficulty adapter.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import numpy as np

from ..config import config
from .grade_policy import GradeBandPolicy, get_grade_policy


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class ResponseRecord:
    """
    A single answered question.

    Attributes:
        correct: Whether the answer was correct
        time_spent: Seconds spent on the question
        difficulty: Difficulty of the question answered
        timestamp: ISO 8601 UTC time the response was recorded
    """
    correct: bool
    time_spent: float
    difficulty: int
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "correct": self.correct,
            "time_spent": self.time_spent,
            "difficulty": self.difficulty,
            "timestamp": self.timestamp,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> ResponseRecord:
        return cls(
            correct=bool(data["correct"]),
            time_spent=float(data["time_spent"]),
            difficulty=int(data["difficulty"]),
            timestamp=data["timestamp"],
        )


class DifficultySession:
    """
    Adaptive difficulty state for one student in one subject session.

    Invariants:
    - min_difficulty <= current_difficulty <= max_difficulty of the band
    - at most one of consecutive_correct / consecutive_incorrect is non-zero
    - response_history holds at most history_limit records
    """

    def __init__(
        self,
        student_id: str,
        grade_level: int,
        subject: str,
        session_id: Optional[str] = None,
        history_limit: Optional[int] = None,
    ):
        """
        Initialize a session at the band's starting difficulty.

        Args:
            student_id: Student the session belongs to
            grade_level: Grade level used to pick the band policy
            subject: Subject being practiced
            session_id: Session ID (auto-generated if None)
            history_limit: Max response records kept (defaults to config)

        Raises:
            InvalidGradeLevel: If the grade level maps to no band
        """
        self.policy: GradeBandPolicy = get_grade_policy(grade_level)
        self.session_id = session_id or f"ds-{uuid.uuid4()}"
        self.student_id = student_id
        self.grade_level = grade_level
        self.subject = subject
        self.history_limit = history_limit or config.difficulty.history_limit

        self.started_at = _utc_now().isoformat()
        self.current_difficulty = self.policy.starting_difficulty
        self.consecutive_correct = 0
        self.consecutive_incorrect = 0
        self.response_history: List[ResponseRecord] = []
        self.difficulty_progression: List[int] = [self.current_difficulty]

        # Lifetime counters, unaffected by the history cap
        self.total_responses = 0
        self.total_correct = 0
        self.total_time_spent = 0.0

    # ==================== Derived values ====================

    def recent_accuracy(self, count: Optional[int] = None) -> float:
        """Accuracy over the most recent `count` responses (0.0 if none)."""
        count = count or config.difficulty.trend_window
        recent = self.response_history[-count:]
        if not recent:
            return 0.0
        return sum(1 for r in recent if r.correct) / len(recent)

    def overall_accuracy(self) -> float:
        """Lifetime accuracy as a fraction (0.0 if no responses)."""
        if self.total_responses == 0:
            return 0.0
        return self.total_correct / self.total_responses

    def elapsed_minutes(self, now: Optional[datetime] = None) -> float:
        """Minutes since the session started."""
        now = now or _utc_now()
        started = datetime.fromisoformat(self.started_at)
        return max(0.0, (now - started).total_seconds() / 60)

    def should_take_break(self, now: Optional[datetime] = None) -> bool:
        """True once the band's attention span has elapsed."""
        return self.elapsed_minutes(now) >= self.policy.attention_span_minutes

    def statistics(self, now: Optional[datetime] = None) -> Dict[str, Any]:
        """
        Summarize the session.

        Returns:
            Dict with attempts, accuracy percent, average time per question,
            session duration, current difficulty and current streak
        """
        avg_time = (
            float(np.mean([r.time_spent for r in self.response_history]))
            if self.response_history
            else 0.0
        )
        return {
            "total_attempts": self.total_responses,
            "correct_attempts": self.total_correct,
            "accuracy": round(self.overall_accuracy() * 100),
            "avg_time_per_question": round(avg_time),
            "session_duration": round(self.elapsed_minutes(now)),
            "current_difficulty": self.current_difficulty,
            "current_streak": self.consecutive_correct,
        }

    # ==================== Persistence ====================

    def to_dict(self) -> Dict[str, Any]:
        """Convert session to dictionary for persistence."""
        return {
            "session_id": self.session_id,
            "student_id": self.student_id,
            "grade_level": self.grade_level,
            "subject": self.subject,
            "band": self.policy.name,
            "started_at": self.started_at,
            "history_limit": self.history_limit,
            "current_difficulty": self.current_difficulty,
            "consecutive_correct": self.consecutive_correct,
            "consecutive_incorrect": self.consecutive_incorrect,
            "response_history": [r.to_dict() for r in self.response_history],
            "difficulty_progression": list(self.difficulty_progression),
            "total_responses": self.total_responses,
            "total_correct": self.total_correct,
            "total_time_spent": self.total_time_spent,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> DifficultySession:
        """
        Rebuild a session from `to_dict` output.

        Raises:
            InvalidGradeLevel: If the stored grade level maps to no band
        """
        session = cls(
            student_id=data["student_id"],
            grade_level=data["grade_level"],
            subject=data["subject"],
            session_id=data["session_id"],
            history_limit=data.get("history_limit"),
        )
        session.started_at = data["started_at"]
        session.current_difficulty = session.policy.clamp(int(data["current_difficulty"]))
        session.consecutive_correct = int(data.get("consecutive_correct", 0))
        session.consecutive_incorrect = int(data.get("consecutive_incorrect", 0))
        session.response_history = [
            ResponseRecord.from_dict(r) for r in data.get("response_history", [])
        ][-session.history_limit:]
        session.difficulty_progression = list(
            data.get("difficulty_progression", [session.current_difficulty])
        )
        session.total_responses = int(data.get("total_responses", len(session.response_history)))
        session.total_correct = int(
            data.get("total_correct", sum(1 for r in session.response_history if r.correct))
        )
        session.total_time_spent = float(data.get("total_time_spent", 0.0))
        return session

    def __repr__(self) -> str:
        return (
            f"DifficultySession(id={self.session_id}, student={self.student_id}, "
            f"band={self.policy.name}, difficulty={self.current_difficulty}, "
            f"responses={self.total_responses})"
        )
