"""
Unit tests for question selection.

Tests:
- Exact difficulty preferred over neighbors
- No repeats until the pool is exhausted
- Topic filtering
- Empty pools return None
- Reproducible selection with a seeded random source
"""

import random

import pytest

from src.engines.question_selector import Question, QuestionSelector, StaticQuestionPool


class TestQuestionModel:
    """Test Question parsing from pool rows."""

    def test_from_dict_accepts_id_and_keeps_extras(self):
        question = Question.from_dict(
            {"id": 17, "difficulty": "4", "topic": "algebra", "grade": 6, "hints": ["a"]}
        )
        assert question.question_id == "17"
        assert question.difficulty == 4
        assert question.metadata == {"grade": 6}

    def test_hint_falls_back_to_last(self):
        question = Question("q1", 2, hints=["first", "second"])
        assert question.hint(1) == "first"
        assert question.hint(2) == "second"
        assert question.hint(5) == "second"
        assert Question("q2", 2).hint(1) is None


class TestSelection:
    """Test QuestionSelector.select_next."""

    def test_exact_difficulty_first(self, question_pool, seeded_rng):
        selector = QuestionSelector(question_pool.get_questions("math"), rng=seeded_rng)
        first = selector.select_next(3)
        second = selector.select_next(3)
        assert first.difficulty == 3
        assert second.difficulty == 3
        assert first.question_id != second.question_id

    def test_relaxes_to_neighbors_when_exact_exhausted(self, question_pool, seeded_rng):
        selector = QuestionSelector(question_pool.get_questions("math"), rng=seeded_rng)
        selector.select_next(3)
        selector.select_next(3)
        third = selector.select_next(3)
        assert third.difficulty in (2, 4)

    def test_no_repeats_until_exhausted(self, question_pool, seeded_rng):
        selector = QuestionSelector(question_pool.get_questions("math"), rng=seeded_rng)
        # difficulties 2-4 hold six questions
        picked = [selector.select_next(3).question_id for _ in range(6)]
        assert len(set(picked)) == 6

    def test_asked_set_resets_when_exhausted(self):
        selector = QuestionSelector([Question("only", 5)], rng=random.Random(0))
        assert selector.select_next(5).question_id == "only"
        assert selector.select_next(5).question_id == "only"
        assert selector.asked == {"only"}

    def test_topic_filter(self, question_pool, seeded_rng):
        selector = QuestionSelector(question_pool.get_questions("math"), rng=seeded_rng)
        for _ in range(4):
            assert selector.select_next(2, topic_filter="geometry").topic == "geometry"

    def test_no_match_returns_none(self, question_pool, seeded_rng):
        selector = QuestionSelector(question_pool.get_questions("math"), rng=seeded_rng)
        assert selector.select_next(10) is None
        assert selector.select_next(3, topic_filter="poetry") is None

    def test_empty_pool_returns_none(self, question_pool):
        selector = QuestionSelector(question_pool.get_questions("history"))
        assert selector.select_next(1) is None

    def test_seeded_selection_is_reproducible(self, question_pool):
        questions = question_pool.get_questions("math")
        first = QuestionSelector(questions, rng=random.Random(99))
        second = QuestionSelector(questions, rng=random.Random(99))
        picks_a = [first.select_next(4).question_id for _ in range(5)]
        picks_b = [second.select_next(4).question_id for _ in range(5)]
        assert picks_a == picks_b

    def test_reset_forgets_asked(self, question_pool, seeded_rng):
        selector = QuestionSelector(question_pool.get_questions("math"), rng=seeded_rng)
        selector.select_next(1)
        selector.reset()
        assert selector.asked == set()


class TestStaticQuestionPool:
    """Test the in-memory pool provider."""

    def test_accepts_dict_rows(self):
        pool = StaticQuestionPool({"science": [{"id": "s1", "difficulty": 2}]})
        questions = pool.get_questions("science")
        assert len(questions) == 1
        assert isinstance(questions[0], Question)

    def test_returns_copy(self, question_pool):
        questions = question_pool.get_questions("math")
        questions.clear()
        assert question_pool.get_questions("math")

    @pytest.mark.parametrize("subject", ["art", ""])
    def test_unknown_subject_is_empty(self, question_pool, subject):
        assert question_pool.get_questions(subject) == []
