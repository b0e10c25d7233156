"""
Learning-Style Scorer - infers VARK modality preference from behavior counters.

Scoring:
1. Each modality sums weighted interaction counts, minutes spent and
   question-type accuracy (x10); negative weights count against a modality
   and each raw score is clamped at 0.
2. Raw scores are normalized to sum to 1 (uniform when all are 0).
3. Confidence mixes data volume and how distinct the distribution is:
   min(100, 50 * min(1, events / 20) + 50 * variance / 0.1875)
4. A primary score under 0.4 means the student is multimodal.

The normalization pass is throttled: it runs only after enough new events.
"""

from __future__ import annotations

import logging
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping, Optional, Union

import numpy as np

from ..config import config
from ..models.behavior_profile import (
    MODALITIES,
    StudentBehaviorProfile,
    uniform_scores,
)

logger = logging.getLogger(__name__)


MULTIMODAL = "multimodal"

# Maximum population variance of four values summing to 1: (1, 0, 0, 0)
MAX_SCORE_VARIANCE = 0.1875

# Per-modality behavioral indicator weights
INDICATOR_WEIGHTS: Dict[str, Dict[str, Dict[str, float]]] = {
    "visual": {
        "content_interaction": {
            "image_views": 0.4,
            "video_watches": 0.3,
            "diagram_interactions": 0.3,
            "text_reading": -0.2,
        },
        "time_spent": {
            "visual_content": 0.5,
            "text_content": -0.3,
        },
        "performance": {
            "visual_questions": 0.3,
            "text_questions": -0.2,
        },
    },
    "auditory": {
        "content_interaction": {
            "audio_plays": 0.5,
            "video_watches": 0.2,
            "read_aloud_usage": 0.3,
            "text_reading": -0.2,
        },
        "time_spent": {
            "audio_content": 0.5,
            "silent_reading": -0.3,
        },
        "performance": {
            "verbal_explanations": 0.3,
        },
    },
    "reading_writing": {
        "content_interaction": {
            "text_reading": 0.5,
            "note_taking": 0.3,
            "written_responses": 0.2,
            "video_skips": 0.1,
        },
        "time_spent": {
            "text_content": 0.5,
            "writing_activities": 0.3,
        },
        "performance": {
            "written_questions": 0.3,
            "essay_tasks": 0.2,
        },
    },
    "kinesthetic": {
        "content_interaction": {
            "interactive_simulations": 0.5,
            "experiments": 0.3,
            "practice_problems": 0.2,
            "passive_reading": -0.3,
        },
        "time_spent": {
            "interactive_content": 0.5,
            "static_content": -0.3,
        },
        "performance": {
            "practical_tasks": 0.4,
            "theoretical_questions": -0.2,
        },
    },
}

# Content presentation strategies per modality
PRESENTATION_STRATEGIES: Dict[str, Dict[str, Any]] = {
    "visual": {
        "preferences": ["diagrams", "charts", "graphs", "videos", "color_coding",
                        "mind_maps", "infographics", "animations"],
        "avoid": ["long_text_blocks", "audio_only"],
        "presentation_order": ["image", "video", "diagram", "text", "audio"],
        "formatting": {"use_color_coding": True, "use_bullet_points": True,
                       "use_highlighting": True},
        "enhancements": {
            "suggest_diagrams": True,
            "suggest_mind_maps": True,
            "suggest_infographics": True,
            "color_code": {"key_terms": "#3B82F6", "examples": "#10B981",
                           "warnings": "#EF4444", "tips": "#F59E0B"},
            "tips": ["Add diagrams to illustrate concepts",
                     "Use charts for data presentation",
                     "Include visual timelines for sequences",
                     "Provide color-coded notes"],
        },
    },
    "auditory": {
        "preferences": ["audio_explanations", "discussions", "verbal_instructions",
                        "podcasts", "music_mnemonics", "read_aloud", "group_discussions"],
        "avoid": ["text_heavy", "silent_reading"],
        "presentation_order": ["audio", "video", "text", "image"],
        "formatting": {"enable_read_aloud": True, "include_verbal_summary": True},
        "enhancements": {
            "enable_text_to_speech": True,
            "suggest_discussions": True,
            "suggest_verbalization": True,
            "tips": ["Read content aloud", "Discuss with others",
                     "Listen to audio explanations", "Create verbal mnemonics"],
        },
    },
    "reading_writing": {
        "preferences": ["written_notes", "articles", "essays", "lists", "definitions",
                        "textbooks", "written_summaries", "note_taking"],
        "avoid": ["video_only", "audio_only"],
        "presentation_order": ["text", "article", "notes", "image", "video"],
        "formatting": {"detailed_explanations": True, "include_writing_prompts": True,
                       "provide_summary_templates": True},
        "enhancements": {
            "provide_detailed_notes": True,
            "include_glossary": True,
            "add_writing_prompts": True,
            "tips": ["Take detailed written notes", "Create outlines and summaries",
                     "Write explanations in your own words", "Make lists and bullet points"],
        },
    },
    "kinesthetic": {
        "preferences": ["hands_on_activities", "experiments", "simulations",
                        "physical_models", "role_playing", "movement",
                        "real_world_examples", "interactive_demos"],
        "avoid": ["passive_reading", "long_lectures"],
        "presentation_order": ["interactive", "simulation", "practice", "video", "text"],
        "formatting": {"include_hands_on_activities": True, "add_real_world_examples": True,
                       "break_into_steps": True},
        "enhancements": {
            "suggest_hands_on": True,
            "include_simulations": True,
            "add_practice_problems": True,
            "tips": ["Try hands-on experiments", "Work through practice problems",
                     "Use interactive simulations", "Apply concepts to real situations"],
        },
    },
}

# Self-report assessment: question id -> option styles
STYLE_ASSESSMENT: Dict[str, List[str]] = {
    "q1": list(MODALITIES),  # When learning something new, I prefer to...
    "q2": list(MODALITIES),  # I remember things best when I...
    "q3": list(MODALITIES),  # When studying, I like to...
    "q4": list(MODALITIES),  # I learn math best through...
    "q5": list(MODALITIES),  # When given directions, I prefer...
    "q6": list(MODALITIES),  # In class, I learn best from...
    "q7": ["sequential", "global"],  # When solving a problem, I...
    "q8": ["sensing", "intuitive"],  # I understand concepts better when they are...
}

_PROCESSING_PAIRS = (("sequential", "global"), ("sensing", "intuitive"))


@dataclass
class StyleProfile:
    """
    Modality estimate for one student.

    Attributes:
        scores: Normalized score per modality (sums to 1)
        confidence: Trust in the estimate, 0-100
        primary_style: Dominant modality, or "multimodal"
        source: Where the estimate came from (default/behavior/assessment)
    """
    scores: Dict[str, float]
    confidence: float
    primary_style: str
    source: str = "behavior"

    @property
    def is_multimodal(self) -> bool:
        return self.primary_style == MULTIMODAL

    @property
    def dominant_style(self) -> str:
        """Highest-scoring modality, even for multimodal students."""
        return _arg_max(self.scores)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "scores": dict(self.scores),
            "confidence": self.confidence,
            "primary_style": self.primary_style,
            "source": self.source,
        }


@dataclass
class QuestionnaireResult:
    """Scored self-report assessment."""
    style_profile: StyleProfile
    processing_styles: Dict[str, float] = field(default_factory=dict)


def _arg_max(scores: Mapping[str, float]) -> str:
    # First modality wins ties
    best = MODALITIES[0]
    for style in MODALITIES:
        if scores.get(style, 0.0) > scores.get(best, 0.0):
            best = style
    return best


# ==================== Pure scoring functions ====================

def raw_scores(profile: StudentBehaviorProfile) -> Dict[str, float]:
    """Weighted, non-negative raw score per modality."""
    scores = {}
    for style, indicators in INDICATOR_WEIGHTS.items():
        score = 0.0

        for content_type, weight in indicators["content_interaction"].items():
            score += profile.content_interaction_counts.get(content_type, 0) * weight

        for activity_type, weight in indicators["time_spent"].items():
            seconds = profile.time_spent_by_activity.get(activity_type, 0.0)
            score += (seconds / 60) * weight

        for question_type, weight in indicators["performance"].items():
            accuracy = profile.accuracy_for(question_type)
            if accuracy is not None:
                score += accuracy * weight * 10

        scores[style] = max(0.0, score)
    return scores


def normalize_scores(raw: Mapping[str, float]) -> Dict[str, float]:
    """Scale scores to sum to 1; uniform when there is no signal."""
    values = np.array([max(0.0, raw.get(style, 0.0)) for style in MODALITIES], dtype=float)
    total = values.sum()
    if total <= 0:
        return uniform_scores()
    return {style: float(v) for style, v in zip(MODALITIES, values / total)}


def normalized_variance(scores: Mapping[str, float]) -> float:
    """Population variance of the scores over its maximum, clamped to [0, 1]."""
    variance = float(np.var([scores[style] for style in MODALITIES]))
    return min(1.0, max(0.0, variance / MAX_SCORE_VARIANCE))


def compute_confidence(scores: Mapping[str, float], total_events: int) -> float:
    """Confidence in [0, 100] from event volume and score distinctness."""
    saturation = config.style.confidence_event_saturation
    volume = min(1.0, total_events / saturation)
    return min(100.0, 50 * volume + 50 * normalized_variance(scores))


def primary_style(scores: Mapping[str, float]) -> str:
    """Dominant modality, or multimodal when no score reaches the threshold."""
    best = _arg_max(scores)
    if scores[best] < config.style.multimodal_threshold:
        return MULTIMODAL
    return best


def compute_style_profile(profile: StudentBehaviorProfile) -> StyleProfile:
    """Full scoring pass over a profile's counters (does not mutate it)."""
    scores = normalize_scores(raw_scores(profile))
    return StyleProfile(
        scores=scores,
        confidence=compute_confidence(scores, profile.total_events_recorded),
        primary_style=primary_style(scores),
        source="behavior",
    )


def score_questionnaire(
    responses: Iterable[Union[str, Mapping[str, Any]]],
) -> QuestionnaireResult:
    """
    Score a self-report learning-style assessment.

    Args:
        responses: Selected styles, either as strings or as dicts with a
            'selected_style' (or 'selectedStyle') key

    Returns:
        QuestionnaireResult with a fixed-confidence StyleProfile and the
        processing-style splits that were answered
    """
    vark = {style: 0 for style in MODALITIES}
    processing: Dict[str, int] = {style: 0 for pair in _PROCESSING_PAIRS for style in pair}

    for response in responses:
        if isinstance(response, Mapping):
            style = response.get("selected_style", response.get("selectedStyle"))
        else:
            style = response
        if style in vark:
            vark[style] += 1
        elif style in processing:
            processing[style] += 1
        else:
            logger.warning("Ignoring unknown assessment style %r", style)

    scores = normalize_scores(vark)

    processing_styles: Dict[str, float] = {}
    for first, second in _PROCESSING_PAIRS:
        total = processing[first] + processing[second]
        if total > 0:
            processing_styles[first] = processing[first] / total
            processing_styles[second] = processing[second] / total

    return QuestionnaireResult(
        style_profile=StyleProfile(
            scores=scores,
            confidence=config.style.assessment_confidence,
            primary_style=primary_style(scores),
            source="assessment",
        ),
        processing_styles=processing_styles,
    )


# ==================== Presentation ====================

def recommend_presentation(style_profile: StyleProfile) -> Dict[str, Any]:
    """
    Presentation strategy for a style estimate.

    Multimodal or low-confidence estimates get a mixed-format strategy
    instead of a modality-specific one.
    """
    if (
        style_profile.is_multimodal
        or style_profile.confidence < config.style.min_adapt_confidence
    ):
        return {
            "style": MULTIMODAL,
            "preferences": ["variety_of_content_types", "multi_format_materials"],
            "avoid": [],
            "presentation_order": ["text", "image", "video", "interactive", "audio"],
            "confidence": style_profile.confidence,
        }

    strategy = PRESENTATION_STRATEGIES[style_profile.primary_style]
    return {
        "style": style_profile.primary_style,
        "preferences": list(strategy["preferences"]),
        "avoid": list(strategy["avoid"]),
        "presentation_order": list(strategy["presentation_order"]),
        "confidence": style_profile.confidence,
    }


def adapt_content(
    content: Mapping[str, Any],
    style_profile: StyleProfile,
    processing_styles: Optional[Mapping[str, float]] = None,
) -> Dict[str, Any]:
    """
    Annotate a content item with presentation hints for the student.

    Returns an unchanged copy when the estimate is too uncertain or the
    student is multimodal.
    """
    adapted = deepcopy(dict(content))
    if (
        style_profile.is_multimodal
        or style_profile.confidence < config.style.min_adapt_confidence
    ):
        return adapted

    strategy = PRESENTATION_STRATEGIES[style_profile.primary_style]
    adapted["adapted_for"] = style_profile.primary_style
    adapted["confidence"] = style_profile.confidence
    adapted["presentation_order"] = list(strategy["presentation_order"])
    adapted["formatting"] = dict(strategy["formatting"])
    adapted["enhancements"] = deepcopy(strategy["enhancements"])

    processing_styles = processing_styles or {}
    if processing_styles.get("sequential", 0.5) > 0.6:
        adapted["structure"] = "linear"
        adapted["show_progress_steps"] = True
    elif processing_styles.get("global", 0.5) > 0.6:
        adapted["structure"] = "overview_first"
        adapted["show_big_picture"] = True

    return adapted


# Study recommendation templates; "{topic}" is filled per call
STUDY_RECOMMENDATIONS: Dict[str, Dict[str, List[str]]] = {
    "visual": {
        "activities": [
            "Create a mind map of {topic}",
            "Draw diagrams to explain {topic}",
            "Watch video tutorials on {topic}",
            "Use flashcards with images for {topic}",
        ],
        "resources": ["Infographics", "Video lectures", "Diagrams and charts", "Color-coded notes"],
        "strategies": [
            "Highlight key concepts in different colors",
            "Visualize processes as flowcharts",
            "Use spatial memory techniques",
        ],
    },
    "auditory": {
        "activities": [
            "Listen to podcasts about {topic}",
            "Explain {topic} out loud to someone",
            "Join study groups to discuss {topic}",
            "Record yourself summarizing {topic}",
        ],
        "resources": ["Audio lectures", "Podcasts", "Discussion forums", "Text-to-speech tools"],
        "strategies": [
            "Read notes aloud",
            "Use rhymes and songs for memorization",
            "Teach concepts to others verbally",
        ],
    },
    "reading_writing": {
        "activities": [
            "Write detailed notes on {topic}",
            "Create summaries of {topic}",
            "Make lists of key points about {topic}",
            "Write practice essays on {topic}",
        ],
        "resources": ["Textbooks", "Articles", "Written guides", "Study notes"],
        "strategies": [
            "Rewrite notes in your own words",
            "Create outlines and summaries",
            "Use written self-quizzes",
        ],
    },
    "kinesthetic": {
        "activities": [
            "Do hands-on experiments with {topic}",
            "Build models related to {topic}",
            "Practice problems for {topic}",
            "Use interactive simulations for {topic}",
        ],
        "resources": ["Interactive simulations", "Lab activities", "Practice problems", "Real-world projects"],
        "strategies": [
            "Take breaks to move around",
            "Use physical objects to represent concepts",
            "Apply learning to real situations",
        ],
    },
    MULTIMODAL: {
        "activities": [
            "Try different study methods for {topic}",
            "Mix visual, auditory, and hands-on approaches",
            "See which methods work best for you",
        ],
        "resources": ["Variety of content types", "Multi-format materials"],
        "strategies": [
            "Experiment with different techniques",
            "Use multiple senses",
            "Find what works for you",
        ],
    },
}


def study_recommendations(style_profile: StyleProfile, topic: str) -> Dict[str, Any]:
    """
    Study activities, resources and strategies for a topic.

    Uses the same confidence gate as recommend_presentation, so uncertain
    or multimodal students get the mixed-method list.
    """
    style = style_profile.primary_style
    if (
        style_profile.is_multimodal
        or style_profile.confidence < config.style.min_adapt_confidence
    ):
        style = MULTIMODAL

    template = STUDY_RECOMMENDATIONS[style]
    return {
        "topic": topic,
        "style": style,
        "activities": [line.format(topic=topic) for line in template["activities"]],
        "resources": list(template["resources"]),
        "strategies": list(template["strategies"]),
    }


# ==================== Throttled scorer ====================

class LearningStyleScorer:
    """Keeps a profile's cached style estimate fresh without rescoring every event."""

    def should_recompute(self, profile: StudentBehaviorProfile) -> bool:
        return profile.events_since_recompute >= config.style.recompute_every

    def refresh(self, profile: StudentBehaviorProfile, force: bool = False) -> bool:
        """
        Recompute the cached estimate when due.

        Args:
            profile: Profile to update
            force: Recompute regardless of the throttle, as long as the
                profile holds at least `recompute_every` events in total

        Returns:
            True if the estimate was recomputed
        """
        due = self.should_recompute(profile)
        if force and profile.total_events_recorded >= config.style.recompute_every:
            due = True
        if not due:
            return False

        result = compute_style_profile(profile)
        profile.set_learning_style(
            scores=result.scores,
            confidence=result.confidence,
            primary_style=result.primary_style,
            source=result.source,
        )
        profile.events_since_recompute = 0
        logger.info(
            "Learning style for %s: %s (confidence %.1f, %d events)",
            profile.student_id, result.primary_style, result.confidence,
            profile.total_events_recorded,
        )
        return True

    def current(self, profile: StudentBehaviorProfile) -> StyleProfile:
        """Cached estimate as a StyleProfile."""
        return StyleProfile(
            scores=dict(profile.style_scores),
            confidence=profile.confidence,
            primary_style=profile.primary_style,
            source=profile.style_source,
        )
