"""
Grade-band policy table.

Maps a grade level (0 = kindergarten .. 12) to the difficulty range,
progression rate and support defaults shared by that band.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Literal, Tuple

from ..exceptions import InvalidGradeLevel


ProgressionRate = Literal["slow", "moderate", "fast"]
SupportLevel = Literal["high", "medium", "low", "minimal"]

# (increase, decrease) streak thresholds per progression rate
STREAK_THRESHOLDS: Dict[str, Tuple[int, int]] = {
    "slow": (5, 3),
    "moderate": (4, 3),
    "fast": (3, 2),
}


@dataclass(frozen=True)
class GradeBandPolicy:
    """
    Static difficulty policy for one grade band.

    Attributes:
        name: Band identifier
        grades: Grade levels covered by the band
        starting_difficulty: Difficulty a new session starts at
        min_difficulty: Lowest difficulty the band allows
        max_difficulty: Highest difficulty the band allows
        progression_rate: How quickly difficulty moves (slow/moderate/fast)
        support_level: Amount of guidance provided
        attention_span_minutes: Session length before a break is recommended
        success_threshold: Accuracy considered ready to advance
        max_hints: Hints available per question
    """
    name: str
    grades: Tuple[int, ...]
    starting_difficulty: int
    min_difficulty: int
    max_difficulty: int
    progression_rate: ProgressionRate
    support_level: SupportLevel
    attention_span_minutes: int
    success_threshold: float
    max_hints: int

    def __post_init__(self):
        if not (self.min_difficulty <= self.starting_difficulty <= self.max_difficulty):
            raise ValueError(
                f"Band {self.name}: starting difficulty {self.starting_difficulty} "
                f"outside [{self.min_difficulty}, {self.max_difficulty}]"
            )

    @property
    def increase_threshold(self) -> int:
        """Consecutive correct answers needed to promote."""
        return STREAK_THRESHOLDS[self.progression_rate][0]

    @property
    def decrease_threshold(self) -> int:
        """Consecutive incorrect answers needed to demote."""
        return STREAK_THRESHOLDS[self.progression_rate][1]

    def clamp(self, difficulty: int) -> int:
        """Clamp a difficulty into the band's range."""
        return max(self.min_difficulty, min(self.max_difficulty, difficulty))


EARLY_ELEMENTARY = GradeBandPolicy(
    name="early_elementary",
    grades=(0, 1, 2),
    starting_difficulty=1,
    min_difficulty=1,
    max_difficulty=3,
    progression_rate="slow",
    support_level="high",
    attention_span_minutes=15,
    success_threshold=0.7,
    max_hints=3,
)

UPPER_ELEMENTARY = GradeBandPolicy(
    name="upper_elementary",
    grades=(3, 4, 5),
    starting_difficulty=3,
    min_difficulty=2,
    max_difficulty=5,
    progression_rate="moderate",
    support_level="medium",
    attention_span_minutes=25,
    success_threshold=0.75,
    max_hints=2,
)

MIDDLE_SCHOOL = GradeBandPolicy(
    name="middle_school",
    grades=(6, 7, 8),
    starting_difficulty=4,
    min_difficulty=3,
    max_difficulty=7,
    progression_rate="moderate",
    support_level="low",
    attention_span_minutes=35,
    success_threshold=0.8,
    max_hints=1,
)

HIGH_SCHOOL = GradeBandPolicy(
    name="high_school",
    grades=(9, 10, 11, 12),
    starting_difficulty=6,
    min_difficulty=5,
    max_difficulty=10,
    progression_rate="fast",
    support_level="minimal",
    attention_span_minutes=45,
    success_threshold=0.85,
    max_hints=1,
)

GRADE_BANDS: Tuple[GradeBandPolicy, ...] = (
    EARLY_ELEMENTARY,
    UPPER_ELEMENTARY,
    MIDDLE_SCHOOL,
    HIGH_SCHOOL,
)

_BAND_BY_GRADE: Dict[int, GradeBandPolicy] = {
    grade: band for band in GRADE_BANDS for grade in band.grades
}


def get_grade_policy(grade_level: int) -> GradeBandPolicy:
    """
    Look up the policy for a grade level.

    Args:
        grade_level: Grade level, 0 (kindergarten) through 12

    Returns:
        Matching GradeBandPolicy

    Raises:
        InvalidGradeLevel: If no band covers the grade level
    """
    # bool is an int subclass; True is not grade 1
    if isinstance(grade_level, bool) or not isinstance(grade_level, int):
        raise InvalidGradeLevel(grade_level)
    try:
        return _BAND_BY_GRADE[grade_level]
    except KeyError:
        raise InvalidGradeLevel(grade_level) from None


def supported_grade_levels() -> list[int]:
    """All grade levels that map to a band, ascending."""
    return sorted(_BAND_BY_GRADE)


def max_hints_for(grade_level: int) -> int:
    """Hints available per question for the grade's band."""
    return get_grade_policy(grade_level).max_hints


def hint_level(grade_level: int, attempt_number: int) -> int:
    """
    Hint index (1-based) to reveal on a given attempt.

    Younger bands unlock more hints; the level never exceeds the band budget.
    """
    if attempt_number < 1:
        raise ValueError(f"attempt_number must be >= 1, got {attempt_number}")
    return min(attempt_number, max_hints_for(grade_level))
