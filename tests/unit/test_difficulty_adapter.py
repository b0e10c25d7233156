"""
Unit tests for the difficulty adapter and difficulty session.

Tests streak promotion/demotion, the trend override, clamping,
feedback tiers, encouragement and session statistics.
"""

import random
import unittest
from datetime import datetime, timedelta

from src.config import config
from src.engines.difficulty_adapter import DifficultyAdapter, feedback_tier
from src.exceptions import InvalidGradeLevel
from src.models.difficulty_session import DifficultySession
from src.models.grade_policy import GradeBandPolicy


def answer_all(adapter, session, outcomes, difficulty=None):
    """Record a sequence of outcomes, returning the last update."""
    update = None
    for correct in outcomes:
        update = adapter.record_response(
            session, correct, 20, difficulty or session.current_difficulty
        )
    return update


class TestDifficultySession(unittest.TestCase):
    """Test DifficultySession initial state and helpers."""

    def test_initial_state(self):
        """Test a new session starts at the band's starting difficulty."""
        session = DifficultySession("student-1", grade_level=7, subject="math")
        self.assertTrue(session.session_id.startswith("ds-"))
        self.assertEqual(session.current_difficulty, 4)
        self.assertEqual(session.consecutive_correct, 0)
        self.assertEqual(session.consecutive_incorrect, 0)
        self.assertEqual(session.response_history, [])
        self.assertEqual(session.difficulty_progression, [4])

    def test_invalid_grade(self):
        with self.assertRaises(InvalidGradeLevel):
            DifficultySession("student-1", grade_level=14, subject="math")

    def test_empty_session_reports_no_feedback(self):
        """Test zero responses report starting difficulty and no feedback."""
        session = DifficultySession("student-1", grade_level=10, subject="math")
        adapter = DifficultyAdapter()
        self.assertEqual(session.current_difficulty, 6)
        self.assertIsNone(adapter.current_feedback(session))
        self.assertEqual(session.statistics()["total_attempts"], 0)

    def test_round_trip_preserves_state(self):
        session = DifficultySession("student-1", grade_level=4, subject="math")
        adapter = DifficultyAdapter()
        answer_all(adapter, session, [True, False, False])

        restored = DifficultySession.from_dict(session.to_dict())
        self.assertEqual(restored.session_id, session.session_id)
        self.assertEqual(restored.current_difficulty, session.current_difficulty)
        self.assertEqual(restored.consecutive_incorrect, 2)
        self.assertEqual(len(restored.response_history), 3)
        self.assertEqual(restored.total_correct, 1)

    def test_should_take_break(self):
        """Test break recommendation after the band's attention span."""
        session = DifficultySession("student-1", grade_level=1, subject="math")
        started = datetime.fromisoformat(session.started_at)
        self.assertFalse(session.should_take_break(started + timedelta(minutes=14)))
        self.assertTrue(session.should_take_break(started + timedelta(minutes=15)))

    def test_statistics(self):
        session = DifficultySession("student-1", grade_level=4, subject="math")
        adapter = DifficultyAdapter()
        adapter.record_response(session, True, 10, 3)
        adapter.record_response(session, False, 30, 3)

        stats = session.statistics(
            now=datetime.fromisoformat(session.started_at) + timedelta(minutes=3)
        )
        self.assertEqual(stats["total_attempts"], 2)
        self.assertEqual(stats["correct_attempts"], 1)
        self.assertEqual(stats["accuracy"], 50)
        self.assertEqual(stats["avg_time_per_question"], 20)
        self.assertEqual(stats["session_duration"], 3)
        self.assertEqual(stats["current_streak"], 0)


class TestStreakRule(unittest.TestCase):
    """Test streak-based promotion and demotion."""

    def setUp(self):
        self.adapter = DifficultyAdapter()

    def test_slow_band_promotes_after_five_correct(self):
        """Test slow band: 5 correct at difficulty 3 → 4 and streaks reset."""
        session = DifficultySession("student-1", grade_level=1, subject="math")
        session.policy = GradeBandPolicy(
            name="slow_wide",
            grades=(),
            starting_difficulty=3,
            min_difficulty=1,
            max_difficulty=6,
            progression_rate="slow",
            support_level="high",
            attention_span_minutes=15,
            success_threshold=0.7,
            max_hints=3,
        )
        session.current_difficulty = 3

        update = answer_all(self.adapter, session, [True] * 4)
        self.assertEqual(update.new_difficulty, 3)
        self.assertEqual(session.consecutive_correct, 4)

        update = self.adapter.record_response(session, True, 15, 3)
        self.assertEqual(update.new_difficulty, 4)
        self.assertEqual(update.adjustment, "increase")
        self.assertEqual(update.reason, "streak")
        self.assertEqual(session.consecutive_correct, 0)
        self.assertEqual(session.consecutive_incorrect, 0)

    def test_moderate_band_thresholds(self):
        """Test moderate band promotes after 4 correct, demotes after 3 incorrect."""
        session = DifficultySession("student-1", grade_level=4, subject="math")  # start 3
        update = answer_all(self.adapter, session, [True] * 4)
        self.assertEqual(update.new_difficulty, 4)

        update = answer_all(self.adapter, session, [False] * 2)
        self.assertEqual(update.new_difficulty, 4)
        update = self.adapter.record_response(session, False, 20, 4)
        self.assertEqual(update.new_difficulty, 3)
        self.assertEqual(update.adjustment, "decrease")
        self.assertEqual(session.consecutive_incorrect, 0)

    def test_fast_band_thresholds(self):
        """Test fast band promotes after 3 correct, demotes after 2 incorrect."""
        session = DifficultySession("student-1", grade_level=10, subject="math")  # start 6
        self.assertEqual(answer_all(self.adapter, session, [True] * 3).new_difficulty, 7)
        self.assertEqual(answer_all(self.adapter, session, [False] * 2).new_difficulty, 6)

    def test_streak_at_max_keeps_counting(self):
        """Test a streak at the band ceiling leaves difficulty and the streak intact."""
        session = DifficultySession("student-1", grade_level=1, subject="math")  # 1-3
        session.current_difficulty = 3

        update = answer_all(self.adapter, session, [True] * 5)
        self.assertEqual(update.new_difficulty, 3)
        self.assertEqual(update.adjustment, "none")
        self.assertIsNone(update.reason)
        self.assertEqual(session.consecutive_correct, 5)
        self.assertEqual(update.encouragement, "streak")

    def test_streak_at_min_does_not_go_lower(self):
        session = DifficultySession("student-1", grade_level=1, subject="math")  # start 1
        update = answer_all(self.adapter, session, [False] * 6)
        self.assertEqual(update.new_difficulty, 1)

    def test_incrementing_one_streak_resets_the_other(self):
        session = DifficultySession("student-1", grade_level=4, subject="math")
        answer_all(self.adapter, session, [True, True])
        self.assertEqual(session.consecutive_correct, 2)
        self.adapter.record_response(session, False, 20, 3)
        self.assertEqual(session.consecutive_correct, 0)
        self.assertEqual(session.consecutive_incorrect, 1)

    def test_negative_time_rejected(self):
        session = DifficultySession("student-1", grade_level=4, subject="math")
        with self.assertRaises(ValueError):
            self.adapter.record_response(session, True, -5, 3)


class TestTrendRule(unittest.TestCase):
    """Test the trend override for alternating answers."""

    def setUp(self):
        self.adapter = DifficultyAdapter()

    def test_trend_demotes_when_streaks_never_trigger(self):
        """Test a mostly-wrong pattern with no 3-wrong streak still demotes."""
        session = DifficultySession("student-1", grade_level=4, subject="math")  # start 3
        pattern = [False, False, True] * 3  # 9 responses, no streak trigger

        answer_all(self.adapter, session, pattern)
        self.assertEqual(session.current_difficulty, 3)

        update = self.adapter.record_response(session, False, 20, 3)  # 10th response
        self.assertEqual(update.new_difficulty, 2)
        self.assertEqual(update.adjustment, "decrease")
        self.assertEqual(update.reason, "trend")

        # Already at the band minimum: trend has nowhere to go
        update = self.adapter.record_response(session, False, 20, 2)
        self.assertEqual(update.new_difficulty, 2)
        self.assertEqual(update.adjustment, "none")

    def test_trend_inactive_before_ten_responses(self):
        session = DifficultySession("student-1", grade_level=4, subject="math")
        update = answer_all(self.adapter, session, [False, False, True] * 3)
        self.assertEqual(update.new_difficulty, 3)

    def test_only_one_adjustment_when_both_rules_apply(self):
        """Test streak and trend qualifying together still move one step."""
        session = DifficultySession("student-1", grade_level=1, subject="math")  # slow, 1-3
        answer_all(self.adapter, session, [True, False] * 5)
        self.assertEqual(session.current_difficulty, 1)

        answer_all(self.adapter, session, [True] * 4)
        update = self.adapter.record_response(session, True, 20, 1)

        # Streak of 5 fired and recent accuracy is 1.0; only one step taken
        self.assertEqual(update.previous_difficulty, 1)
        self.assertEqual(update.new_difficulty, 2)
        self.assertEqual(update.reason, "streak")


class TestInvariants(unittest.TestCase):
    """Property checks over random response sequences."""

    def test_bounds_and_streak_exclusivity_hold(self):
        adapter = DifficultyAdapter()
        rng = random.Random(7)
        for grade in range(13):
            session = DifficultySession(f"student-{grade}", grade_level=grade, subject="math")
            policy = session.policy
            for _ in range(200):
                previous = session.current_difficulty
                update = adapter.record_response(
                    session, rng.random() < 0.6, rng.uniform(1, 90), previous
                )
                self.assertTrue(policy.min_difficulty <= session.current_difficulty <= policy.max_difficulty)
                self.assertLessEqual(abs(update.new_difficulty - previous), 1)
                self.assertFalse(
                    session.consecutive_correct > 0 and session.consecutive_incorrect > 0
                )
            self.assertLessEqual(len(session.response_history), config.difficulty.history_limit)
            self.assertEqual(session.total_responses, 200)

    def test_history_is_capped(self):
        adapter = DifficultyAdapter()
        session = DifficultySession("student-1", grade_level=4, subject="math", history_limit=20)
        answer_all(adapter, session, [True, False] * 30)
        self.assertEqual(len(session.response_history), 20)
        self.assertEqual(session.total_responses, 60)
        self.assertEqual(session.statistics()["accuracy"], 50)

    def test_replayed_response_is_a_new_transition(self):
        """Test identical calls are not deduplicated at the adapter level."""
        adapter = DifficultyAdapter()
        session = DifficultySession("student-1", grade_level=4, subject="math")
        adapter.record_response(session, True, 20, 3)
        adapter.record_response(session, True, 20, 3)
        self.assertEqual(session.total_responses, 2)
        self.assertEqual(session.consecutive_correct, 2)


class TestFeedback(unittest.TestCase):
    """Test feedback tiers and encouragement."""

    def test_feedback_tiers(self):
        self.assertEqual(feedback_tier(1.0), "excellent")
        self.assertEqual(feedback_tier(0.9), "excellent")
        self.assertEqual(feedback_tier(0.8), "good")
        self.assertEqual(feedback_tier(0.7), "good")
        self.assertEqual(feedback_tier(0.6), "needs_practice")
        self.assertEqual(feedback_tier(0.5), "needs_practice")
        self.assertEqual(feedback_tier(0.4), "struggling")
        self.assertEqual(feedback_tier(0.0), "struggling")

    def test_feedback_uses_recent_window(self):
        adapter = DifficultyAdapter()
        session = DifficultySession("student-1", grade_level=10, subject="math")
        update = answer_all(adapter, session, [False, True, False, True, True])
        self.assertEqual(update.feedback_tier, "needs_practice")  # 3/5

    def test_accuracy_encouragement(self):
        adapter = DifficultyAdapter()
        session = DifficultySession("student-1", grade_level=4, subject="math")
        update = adapter.record_response(session, True, 20, 3)
        self.assertEqual(update.encouragement, "accuracy")

    def test_accuracy_encouragement_uses_rounded_percent(self):
        """Test 79.6% accuracy counts as the 80% shown in statistics."""
        adapter = DifficultyAdapter()
        session = DifficultySession("student-1", grade_level=4, subject="math")
        session.total_responses = 250
        session.total_correct = 199
        self.assertEqual(session.statistics()["accuracy"], 80)
        self.assertEqual(adapter.encouragement(session), "accuracy")

        session.total_correct = 196  # 78.4%
        self.assertEqual(adapter.encouragement(session), "persistence")

    def test_persistence_encouragement(self):
        adapter = DifficultyAdapter()
        session = DifficultySession("student-1", grade_level=4, subject="math")
        update = answer_all(adapter, session, [False, False, True] * 3)
        self.assertIsNone(update.encouragement)  # 9 attempts, 33% accuracy
        update = adapter.record_response(session, False, 20, 3)
        self.assertEqual(update.encouragement, "persistence")

    def test_update_to_dict(self):
        adapter = DifficultyAdapter()
        session = DifficultySession("student-1", grade_level=4, subject="math")
        data = adapter.record_response(session, True, 20, 3).to_dict()
        self.assertEqual(data["new_difficulty"], 3)
        self.assertEqual(data["feedback_tier"], "excellent")
        self.assertIn("encouragement", data)


if __name__ == "__main__":
    unittest.main()
