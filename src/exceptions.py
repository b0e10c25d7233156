"""Errors raised by the adaptive learning core."""


class AdaptiveLearningError(Exception):
    """Base class for adaptive learning core errors."""


class InvalidGradeLevel(AdaptiveLearningError, ValueError):
    """Grade level does not map to any grade band."""

    def __init__(self, grade_level):
        self.grade_level = grade_level
        super().__init__(f"No grade band covers grade level {grade_level!r}")


class SessionNotFound(AdaptiveLearningError, LookupError):
    """Operation needs an active session that was never started."""

    def __init__(self, student_id: str):
        self.student_id = student_id
        super().__init__(
            f"No active session for student {student_id!r}; call start_session first"
        )
