"""
Adaptive Learning Orchestrator

Per-student façade over the adaptive engines:
1. Session start with grade-band policy lookup
2. Response recording with streak/trend difficulty adaptation
3. Next-question selection from the subject's pool
4. Behavioral telemetry aggregation
5. Throttled learning-style scoring and presentation hints
6. Profile/session persistence through an injected store

This is the only entry point external callers use.
"""

from __future__ import annotations

import logging
import random
import threading
import weakref
from collections import OrderedDict
from copy import deepcopy
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, Mapping, Optional, Union

from .config import config
from .engines.behavior_aggregator import BehaviorAggregator, BehaviorEvent
from .engines.difficulty_adapter import DifficultyAdapter, DifficultyUpdate
from .engines.question_selector import (
    Question,
    QuestionPoolProvider,
    QuestionSelector,
    StaticQuestionPool,
)
from .engines.style_scorer import (
    LearningStyleScorer,
    StyleProfile,
    adapt_content,
    recommend_presentation,
    score_questionnaire,
    study_recommendations,
)
from .exceptions import SessionNotFound
from .models.behavior_profile import StudentBehaviorProfile, uniform_scores
from .models.difficulty_session import DifficultySession
from .models.grade_policy import hint_level
from .utils.persistence import InMemoryStore, ProfileStore

logger = logging.getLogger(__name__)


def _copy_profile(profile: StudentBehaviorProfile) -> StudentBehaviorProfile:
    return StudentBehaviorProfile.from_dict(profile.to_dict())


def default_rng_factory() -> random.Random:
    """One generator per session, seeded from config when set."""
    return random.Random(config.difficulty.random_seed)


@dataclass
class ActiveSession:
    """In-memory state for one student's running session."""
    session: DifficultySession
    selector: QuestionSelector
    seen_events: "OrderedDict[str, DifficultyUpdate]" = field(default_factory=OrderedDict)

    def to_dict(self, session: Optional[DifficultySession] = None) -> Dict[str, Any]:
        """Persisted form, optionally with a candidate session in place of the current one."""
        data = (session or self.session).to_dict()
        data["asked_question_ids"] = sorted(self.selector.asked)
        return data


class AdaptiveLearningOrchestrator:
    """
    Main façade for the adaptive learning core.

    Calls for the same student are serialized with a per-student lock;
    calls for different students share no mutable state.
    """

    def __init__(
        self,
        store: Optional[ProfileStore] = None,
        question_pool: Optional[QuestionPoolProvider] = None,
        rng_factory: Optional[Callable[[], random.Random]] = None,
        adapter: Optional[DifficultyAdapter] = None,
        aggregator: Optional[BehaviorAggregator] = None,
        scorer: Optional[LearningStyleScorer] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            store: Persistence collaborator (default: InMemoryStore)
            question_pool: Content pool provider (default: empty StaticQuestionPool)
            rng_factory: Creates the random source for each new session
            adapter: Difficulty adapter
            aggregator: Behavioral signal aggregator
            scorer: Learning-style scorer
        """
        self.store = store or InMemoryStore()
        self.question_pool = question_pool or StaticQuestionPool()
        self.rng_factory = rng_factory or default_rng_factory
        self.adapter = adapter or DifficultyAdapter()
        self.aggregator = aggregator or BehaviorAggregator()
        self.scorer = scorer or LearningStyleScorer()

        self._sessions: Dict[str, ActiveSession] = {}
        # LRU; every profile change is saved before it can be evicted
        self._profiles: "OrderedDict[str, StudentBehaviorProfile]" = OrderedDict()
        # Entries live only while some call holds the lock
        self._locks: "weakref.WeakValueDictionary[str, Any]" = weakref.WeakValueDictionary()
        self._locks_guard = threading.Lock()

    def _lock_for(self, student_id: str) -> threading.RLock:
        with self._locks_guard:
            lock = self._locks.get(student_id)
            if lock is None:
                lock = self._locks[student_id] = threading.RLock()
            return lock

    # ==================== Sessions ====================

    def start_session(
        self, student_id: str, grade_level: int, subject: str
    ) -> DifficultySession:
        """
        Start (or restart) a difficulty session for a student.

        Args:
            student_id: Student identifier
            grade_level: Grade level, 0-12
            subject: Subject whose question pool is used

        Returns:
            The new DifficultySession. Recorded responses replace the live
            session object, so read current state through get_session.

        Raises:
            InvalidGradeLevel: If the grade level maps to no band
        """
        with self._lock_for(student_id):
            session = DifficultySession(student_id, grade_level, subject)
            active = ActiveSession(
                session=session,
                selector=QuestionSelector(
                    self.question_pool.get_questions(subject),
                    rng=self.rng_factory(),
                ),
            )
            if student_id in self._sessions:
                logger.info("Replacing active session for %s", student_id)
            self._sessions[student_id] = active
            self._get_or_create_profile(student_id)
            self.store.save_session(student_id, active.to_dict())

            logger.info(
                "Started session %s for %s (grade %s, %s, band %s, difficulty %d)",
                session.session_id, student_id, grade_level, subject,
                session.policy.name, session.current_difficulty,
            )
            return session

    def get_session(self, student_id: str) -> DifficultySession:
        """
        Raises:
            SessionNotFound: If no session was started
        """
        with self._lock_for(student_id):
            return self._require_session(student_id).session

    def end_session(self, student_id: str) -> Dict[str, Any]:
        """
        End the student's session and discard its state.

        Returns:
            Final session statistics

        Raises:
            SessionNotFound: If no session was started
        """
        with self._lock_for(student_id):
            active = self._require_session(student_id)
            stats = active.session.statistics()
            del self._sessions[student_id]
            self._profiles.pop(student_id, None)
            self.store.delete_session(student_id)
            logger.info(
                "Ended session %s for %s: %d attempts, %d%% accuracy",
                active.session.session_id, student_id,
                stats["total_attempts"], stats["accuracy"],
            )
            return stats

    def _require_session(self, student_id: str) -> ActiveSession:
        active = self._sessions.get(student_id)
        if active is not None:
            return active

        data = self.store.load_session(student_id)
        if data is None:
            raise SessionNotFound(student_id)

        session = DifficultySession.from_dict(data)
        active = ActiveSession(
            session=session,
            selector=QuestionSelector(
                self.question_pool.get_questions(session.subject),
                rng=self.rng_factory(),
                asked=data.get("asked_question_ids", ()),
            ),
        )
        self._sessions[student_id] = active
        logger.debug("Resumed session %s for %s from store", session.session_id, student_id)
        return active

    # ==================== Difficulty ====================

    def record_response(
        self,
        student_id: str,
        correct: bool,
        time_spent_seconds: float,
        question_difficulty: int,
        event_id: Optional[str] = None,
    ) -> DifficultyUpdate:
        """
        Record a response and adapt difficulty.

        If the store raises, the session is left as it was and the call
        can be retried.

        Args:
            student_id: Student identifier
            correct: Whether the answer was correct
            time_spent_seconds: Seconds spent on the question
            question_difficulty: Difficulty of the answered question
            event_id: Optional client id; a repeated id replays the earlier
                result without changing state

        Returns:
            DifficultyUpdate with new difficulty, feedback tier and encouragement

        Raises:
            SessionNotFound: If no session was started
        """
        with self._lock_for(student_id):
            active = self._require_session(student_id)

            if event_id is not None and event_id in active.seen_events:
                logger.warning(
                    "Duplicate response event %s for %s ignored", event_id, student_id
                )
                return active.seen_events[event_id]

            # The live session only advances once the store has the new state
            candidate = deepcopy(active.session)
            update = self.adapter.record_response(
                candidate, correct, time_spent_seconds, question_difficulty
            )
            self.store.save_session(student_id, active.to_dict(candidate))
            active.session = candidate

            if event_id is not None and config.difficulty.dedup_window > 0:
                active.seen_events[event_id] = update
                while len(active.seen_events) > config.difficulty.dedup_window:
                    active.seen_events.popitem(last=False)

            return update

    def get_next_question(
        self, student_id: str, topic_filter: Optional[str] = None
    ) -> Optional[Question]:
        """
        Select the next question at the student's current difficulty.

        Returns:
            A Question, or None when the pool has nothing suitable

        Raises:
            SessionNotFound: If no session was started
        """
        with self._lock_for(student_id):
            active = self._require_session(student_id)
            question = active.selector.select_next(
                active.session.current_difficulty, topic_filter
            )
            if question is None:
                logger.info(
                    "No question available for %s at difficulty %d (topic=%s)",
                    student_id, active.session.current_difficulty, topic_filter,
                )
            self.store.save_session(student_id, active.to_dict())
            return question

    def get_session_statistics(self, student_id: str) -> Dict[str, Any]:
        """
        Raises:
            SessionNotFound: If no session was started
        """
        with self._lock_for(student_id):
            return self._require_session(student_id).session.statistics()

    def should_take_break(self, student_id: str) -> bool:
        """
        Raises:
            SessionNotFound: If no session was started
        """
        with self._lock_for(student_id):
            return self._require_session(student_id).session.should_take_break()

    def get_hint(
        self, student_id: str, question: Question, attempt_number: int
    ) -> Optional[str]:
        """
        Hint for a question on a given attempt, within the band's hint budget.

        Raises:
            SessionNotFound: If no session was started
        """
        with self._lock_for(student_id):
            session = self._require_session(student_id).session
            return question.hint(hint_level(session.grade_level, attempt_number))

    # ==================== Learning style ====================

    def _get_or_create_profile(self, student_id: str) -> StudentBehaviorProfile:
        profile = self._profiles.get(student_id)
        if profile is not None:
            self._profiles.move_to_end(student_id)
            return profile

        data = self.store.load_profile(student_id)
        if data is not None:
            profile = StudentBehaviorProfile.from_dict(data)
        else:
            profile = StudentBehaviorProfile(student_id)
            logger.debug("Created behavior profile for %s", student_id)
        self._cache_profile(profile)
        return profile

    def _find_profile(self, student_id: str) -> Optional[StudentBehaviorProfile]:
        """Existing profile (memory or store) without creating one."""
        profile = self._profiles.get(student_id)
        if profile is not None:
            self._profiles.move_to_end(student_id)
            return profile
        data = self.store.load_profile(student_id)
        if data is None:
            return None
        profile = StudentBehaviorProfile.from_dict(data)
        self._cache_profile(profile)
        return profile

    def _cache_profile(self, profile: StudentBehaviorProfile) -> None:
        self._profiles[profile.student_id] = profile
        self._profiles.move_to_end(profile.student_id)
        while len(self._profiles) > config.style.profile_cache_size:
            evicted, _ = self._profiles.popitem(last=False)
            logger.debug("Evicted cached behavior profile for %s", evicted)

    def record_behavior(
        self,
        student_id: str,
        event: Union[BehaviorEvent, Mapping[str, Any], None],
    ) -> None:
        """
        Record a behavioral event. Empty events are logged and ignored.

        Args:
            student_id: Student identifier
            event: BehaviorEvent or mapping with any of content_type,
                activity_type, time_spent_seconds, question_type, correct
        """
        with self._lock_for(student_id):
            if event is not None and not isinstance(event, BehaviorEvent):
                event = BehaviorEvent.from_mapping(event)
            if event is None or event.is_empty():
                # Not worth creating a profile for
                logger.warning("Ignoring empty behavior event for %s", student_id)
                return

            # Work on a copy so a failed save leaves the cached profile untouched
            profile = _copy_profile(self._get_or_create_profile(student_id))
            if not self.aggregator.record(profile, event):
                return
            self.scorer.refresh(profile)
            self.store.save_profile(student_id, profile.to_dict())
            self._cache_profile(profile)

    def get_style_profile(self, student_id: str, refresh: bool = False) -> StyleProfile:
        """
        Current learning-style estimate.

        Args:
            student_id: Student identifier
            refresh: Recompute now instead of waiting for the throttle

        Returns:
            StyleProfile; uniform with zero confidence for unknown students
        """
        with self._lock_for(student_id):
            profile = self._find_profile(student_id)
            if profile is None:
                return StyleProfile(
                    scores=uniform_scores(),
                    confidence=0.0,
                    primary_style="multimodal",
                    source="default",
                )
            if refresh:
                candidate = _copy_profile(profile)
                if self.scorer.refresh(candidate, force=True):
                    self.store.save_profile(student_id, candidate.to_dict())
                    self._cache_profile(candidate)
                    profile = candidate
            return self.scorer.current(profile)

    def submit_style_assessment(
        self, student_id: str, responses: Iterable[Union[str, Mapping[str, Any]]]
    ) -> StyleProfile:
        """
        Seed the style estimate from a self-report questionnaire.

        Behavioral recomputes later replace the questionnaire estimate.
        """
        with self._lock_for(student_id):
            result = score_questionnaire(responses)
            profile = _copy_profile(self._get_or_create_profile(student_id))
            style = result.style_profile
            profile.set_learning_style(
                scores=style.scores,
                confidence=style.confidence,
                primary_style=style.primary_style,
                source=style.source,
            )
            if result.processing_styles:
                profile.set_processing_styles(result.processing_styles)
            self.store.save_profile(student_id, profile.to_dict())
            self._cache_profile(profile)
            return self.scorer.current(profile)

    def get_presentation_strategy(self, student_id: str) -> Dict[str, Any]:
        """Presentation strategy for the student's current style estimate."""
        return recommend_presentation(self.get_style_profile(student_id))

    def get_study_recommendations(self, student_id: str, topic: str) -> Dict[str, Any]:
        """Study activities, resources and strategies for a topic, by learning style."""
        return study_recommendations(self.get_style_profile(student_id), topic)

    def adapt_content(self, student_id: str, content: Mapping[str, Any]) -> Dict[str, Any]:
        """Annotate a content item with presentation hints for the student."""
        with self._lock_for(student_id):
            profile = self._find_profile(student_id)
            if profile is None:
                return dict(content)
            return adapt_content(
                content, self.scorer.current(profile), profile.processing_styles
            )
