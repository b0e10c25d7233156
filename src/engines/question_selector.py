"""
Question Selector - Picks the next unseen question near a target difficulty.

Selection order:
1. Exact difficulty, matching topic, not yet asked
2. Relaxed to within one difficulty step
3. Asked-set cleared once the pool is exhausted, then retried
4. None when nothing fits (an empty pool is a valid state)
"""

from __future__ import annotations

import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Set

logger = logging.getLogger(__name__)


@dataclass
class Question:
    """
    A candidate question from the content pool.

    Attributes:
        question_id: Unique identifier
        difficulty: Difficulty level (1-10)
        topic: Topic the question belongs to
        question_type: Type used for behavior tracking (e.g. visual_questions)
        content_type: Content format (e.g. image_views, text_reading)
        text: Question text
        hints: Progressive hints, easiest first
        metadata: Anything else the pool provider attached
    """
    question_id: str
    difficulty: int
    topic: Optional[str] = None
    question_type: Optional[str] = None
    content_type: Optional[str] = None
    text: str = ""
    hints: List[str] = field(default_factory=list)
    metadata: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Question:
        """Build a question from a pool row ('id' accepted for 'question_id')."""
        known = {"question_id", "id", "difficulty", "topic", "question_type",
                 "content_type", "text", "hints", "metadata"}
        return cls(
            question_id=str(data.get("question_id", data.get("id"))),
            difficulty=int(data["difficulty"]),
            topic=data.get("topic"),
            question_type=data.get("question_type"),
            content_type=data.get("content_type"),
            text=data.get("text", ""),
            hints=list(data.get("hints", [])),
            metadata={
                **data.get("metadata", {}),
                **{k: v for k, v in data.items() if k not in known},
            },
        )

    def hint(self, level: int) -> Optional[str]:
        """Hint for a 1-based level, falling back to the last hint."""
        if not self.hints:
            return None
        return self.hints[min(level, len(self.hints)) - 1]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "question_id": self.question_id,
            "difficulty": self.difficulty,
            "topic": self.topic,
            "question_type": self.question_type,
            "content_type": self.content_type,
            "text": self.text,
            "hints": list(self.hints),
            "metadata": dict(self.metadata),
        }


class QuestionPoolProvider(ABC):
    """Supplies the candidate questions for a subject."""

    @abstractmethod
    def get_questions(self, subject: str) -> List[Question]:
        """Return the question pool for a subject (may be empty)."""


class StaticQuestionPool(QuestionPoolProvider):
    """In-memory pool keyed by subject."""

    def __init__(self, pools: Optional[Dict[str, Iterable[Any]]] = None):
        self._pools: Dict[str, List[Question]] = {}
        for subject, questions in (pools or {}).items():
            self.add_questions(subject, questions)

    def add_questions(self, subject: str, questions: Iterable[Any]) -> None:
        """Add Question objects or pool-row dicts to a subject."""
        pool = self._pools.setdefault(subject, [])
        for q in questions:
            pool.append(q if isinstance(q, Question) else Question.from_dict(q))

    def get_questions(self, subject: str) -> List[Question]:
        return list(self._pools.get(subject, []))


class QuestionSelector:
    """
    Selects questions from a pool while avoiding repeats.

    The random source is injected so selections are reproducible in tests;
    each selector owns its own generator.
    """

    def __init__(
        self,
        questions: Iterable[Question],
        rng: Optional[random.Random] = None,
        asked: Optional[Set[str]] = None,
    ):
        self.questions: List[Question] = list(questions)
        self.rng = rng or random.Random()
        self.asked: Set[str] = set(asked or ())

    def select_next(
        self,
        target_difficulty: int,
        topic_filter: Optional[str] = None,
    ) -> Optional[Question]:
        """
        Pick the next question near the target difficulty.

        Args:
            target_difficulty: Desired difficulty
            topic_filter: Only consider questions with this topic

        Returns:
            The selected question, or None if nothing fits
        """
        candidates = self._candidates(target_difficulty, topic_filter)

        if not candidates and self.asked:
            logger.debug(
                "Question pool exhausted at difficulty %s (topic=%s); resetting asked set",
                target_difficulty, topic_filter,
            )
            self.asked.clear()
            candidates = self._candidates(target_difficulty, topic_filter)

        if not candidates:
            return None

        question = self.rng.choice(candidates)
        self.asked.add(question.question_id)
        return question

    def reset(self) -> None:
        """Forget asked questions (for a new session)."""
        self.asked.clear()

    def _candidates(
        self, target_difficulty: int, topic_filter: Optional[str]
    ) -> List[Question]:
        exact = self._filter(lambda q: q.difficulty == target_difficulty, topic_filter)
        if exact:
            return exact
        return self._filter(
            lambda q: abs(q.difficulty - target_difficulty) <= 1, topic_filter
        )

    def _filter(self, difficulty_match, topic_filter: Optional[str]) -> List[Question]:
        return [
            q for q in self.questions
            if difficulty_match(q)
            and (topic_filter is None or q.topic == topic_filter)
            and q.question_id not in self.asked
        ]
