"""
Difficulty Adapter - Adjusts problem difficulty from a student's responses.

Two rules run as an ordered pipeline with at most one adjustment per response:
1. Streak rule: promote/demote one step when a correct/incorrect streak
   reaches the band's threshold.
2. Trend rule: once enough history exists and no streak fired, promote or
   demote from recent accuracy so alternating answers still move difficulty.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Literal, Optional

from ..config import config
from ..models.difficulty_session import DifficultySession, ResponseRecord

logger = logging.getLogger(__name__)


FeedbackTier = Literal["excellent", "good", "needs_practice", "struggling"]
Encouragement = Literal["streak", "accuracy", "persistence"]
Adjustment = Literal["increase", "decrease", "none"]
AdjustmentReason = Literal["streak", "trend"]


@dataclass
class DifficultyUpdate:
    """
    Outcome of recording one response.

    Attributes:
        new_difficulty: Difficulty after the response
        previous_difficulty: Difficulty before the response
        adjustment: Direction moved (increase/decrease/none)
        reason: Rule that moved it (streak/trend), None if unchanged
        feedback_tier: Qualitative tier from recent accuracy
        encouragement: Encouragement category, if any
    """
    new_difficulty: int
    previous_difficulty: int
    adjustment: Adjustment
    reason: Optional[AdjustmentReason]
    feedback_tier: FeedbackTier
    encouragement: Optional[Encouragement] = None

    def to_dict(self) -> dict:
        return {
            "new_difficulty": self.new_difficulty,
            "previous_difficulty": self.previous_difficulty,
            "adjustment": self.adjustment,
            "reason": self.reason,
            "feedback_tier": self.feedback_tier,
            "encouragement": self.encouragement,
        }


def feedback_tier(accuracy: float) -> FeedbackTier:
    """
    Map recent accuracy to a feedback tier.

    Ranges:
    - >= 0.9: excellent
    - >= 0.7: good
    - >= 0.5: needs_practice
    - < 0.5: struggling
    """
    if accuracy >= 0.9:
        return "excellent"
    elif accuracy >= 0.7:
        return "good"
    elif accuracy >= 0.5:
        return "needs_practice"
    else:
        return "struggling"


class DifficultyAdapter:
    """Stateless rules applied to a DifficultySession."""

    def record_response(
        self,
        session: DifficultySession,
        correct: bool,
        time_spent: float,
        question_difficulty: int,
    ) -> DifficultyUpdate:
        """
        Record a response and adjust the session's difficulty.

        Args:
            session: Session to mutate
            correct: Whether the answer was correct
            time_spent: Seconds spent on the question
            question_difficulty: Difficulty of the question answered

        Returns:
            DifficultyUpdate with the new difficulty and feedback

        Raises:
            ValueError: If time_spent is negative
        """
        if time_spent is not None and time_spent < 0:
            raise ValueError(f"Time spent cannot be negative: {time_spent}")
        time_spent = float(time_spent or 0.0)

        previous = session.current_difficulty

        self._append_history(session, correct, time_spent, question_difficulty)
        self._update_streaks(session, correct)

        adjustment, reason = self._apply_streak_rule(session)
        if reason is None:
            adjustment, reason = self._apply_trend_rule(session)

        if adjustment != "none":
            session.difficulty_progression.append(session.current_difficulty)
            logger.debug(
                "Session %s difficulty %d -> %d (%s)",
                session.session_id, previous, session.current_difficulty, reason,
            )

        return DifficultyUpdate(
            new_difficulty=session.current_difficulty,
            previous_difficulty=previous,
            adjustment=adjustment,
            reason=reason if adjustment != "none" else None,
            feedback_tier=feedback_tier(session.recent_accuracy()),
            encouragement=self.encouragement(session),
        )

    def current_feedback(self, session: DifficultySession) -> Optional[FeedbackTier]:
        """Feedback tier for the session so far, None before any response."""
        if not session.response_history:
            return None
        return feedback_tier(session.recent_accuracy())

    def encouragement(self, session: DifficultySession) -> Optional[Encouragement]:
        """
        Pick an encouragement category.

        Priority: correct streak, then overall accuracy (the rounded percent
        reported by statistics), then persistence.
        """
        settings = config.difficulty
        if session.consecutive_correct >= settings.encouragement_streak:
            return "streak"
        if (
            session.total_responses > 0
            and round(session.overall_accuracy() * 100) >= settings.encouragement_accuracy
        ):
            return "accuracy"
        if session.total_responses >= settings.encouragement_min_attempts:
            return "persistence"
        return None

    # ==================== Pipeline steps ====================

    def _append_history(
        self,
        session: DifficultySession,
        correct: bool,
        time_spent: float,
        question_difficulty: int,
    ) -> None:
        session.response_history.append(
            ResponseRecord(
                correct=bool(correct),
                time_spent=time_spent,
                difficulty=int(question_difficulty),
                timestamp=datetime.now(timezone.utc).isoformat(),
            )
        )
        if len(session.response_history) > session.history_limit:
            session.response_history = session.response_history[-session.history_limit:]

        session.total_responses += 1
        session.total_time_spent += time_spent
        if correct:
            session.total_correct += 1

    def _update_streaks(self, session: DifficultySession, correct: bool) -> None:
        if correct:
            session.consecutive_correct += 1
            session.consecutive_incorrect = 0
        else:
            session.consecutive_incorrect += 1
            session.consecutive_correct = 0

    def _apply_streak_rule(
        self, session: DifficultySession
    ) -> tuple[Adjustment, Optional[AdjustmentReason]]:
        """
        Promote/demote on a completed streak.

        A completed streak consumes the turn even at a band boundary. The
        counter resets only when difficulty actually moved, so a student
        holding the top of the band keeps building the streak.
        """
        policy = session.policy

        if session.consecutive_correct >= policy.increase_threshold:
            adjustment = self._step(session, +1)
            if adjustment != "none":
                session.consecutive_correct = 0
            return adjustment, "streak"

        if session.consecutive_incorrect >= policy.decrease_threshold:
            adjustment = self._step(session, -1)
            if adjustment != "none":
                session.consecutive_incorrect = 0
            return adjustment, "streak"

        return "none", None

    def _apply_trend_rule(
        self, session: DifficultySession
    ) -> tuple[Adjustment, Optional[AdjustmentReason]]:
        settings = config.difficulty
        if len(session.response_history) < settings.trend_min_history:
            return "none", None

        accuracy = session.recent_accuracy(settings.trend_window)
        policy = session.policy

        if accuracy >= settings.trend_promote_accuracy and session.current_difficulty < policy.max_difficulty:
            return self._step(session, +1), "trend"
        if accuracy < settings.trend_demote_accuracy and session.current_difficulty > policy.min_difficulty:
            return self._step(session, -1), "trend"

        return "none", None

    def _step(self, session: DifficultySession, delta: int) -> Adjustment:
        """Move one step, clamped to the band. Returns the effective direction."""
        before = session.current_difficulty
        session.current_difficulty = session.policy.clamp(before + delta)
        if session.current_difficulty > before:
            return "increase"
        if session.current_difficulty < before:
            return "decrease"
        return "none"
