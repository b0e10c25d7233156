"""
Adaptive engines.

- DifficultyAdapter: Streak and trend rules over a DifficultySession
- QuestionSelector: Next-question selection with relaxation and reset
- BehaviorAggregator: Behavioral counter accumulation
- LearningStyleScorer: VARK scoring with throttled recompute
"""

from .difficulty_adapter import DifficultyAdapter, DifficultyUpdate, feedback_tier
from .question_selector import (
    Question,
    QuestionPoolProvider,
    QuestionSelector,
    StaticQuestionPool,
)
from .behavior_aggregator import BehaviorAggregator, BehaviorEvent
from .style_scorer import (
    LearningStyleScorer,
    StyleProfile,
    adapt_content,
    compute_style_profile,
    recommend_presentation,
    score_questionnaire,
    study_recommendations,
)

__all__ = [
    "DifficultyAdapter",
    "DifficultyUpdate",
    "feedback_tier",
    "Question",
    "QuestionPoolProvider",
    "QuestionSelector",
    "StaticQuestionPool",
    "BehaviorAggregator",
    "BehaviorEvent",
    "LearningStyleScorer",
    "StyleProfile",
    "adapt_content",
    "compute_style_profile",
    "recommend_presentation",
    "score_questionnaire",
    "study_recommendations",
]
