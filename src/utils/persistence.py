"""
Profile and session persistence.

The core treats stored state as opaque dicts; these stores are the
collaborators the orchestrator loads from and saves to.
- InMemoryStore: process-local, used by default and in tests
- JsonFileStore: one JSON file per student, validated before save
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from abc import ABC, abstractmethod
from copy import deepcopy
from pathlib import Path
from typing import Any, Dict, Optional
from urllib.parse import quote

from ..config import config
from .validation import BehaviorProfileValidator, DifficultySessionValidator

logger = logging.getLogger(__name__)


class ProfileStore(ABC):
    """Persistence boundary for behavior profiles and difficulty sessions."""

    @abstractmethod
    def load_profile(self, student_id: str) -> Optional[Dict[str, Any]]:
        """Return the stored profile dict, or None if absent."""

    @abstractmethod
    def save_profile(self, student_id: str, profile: Dict[str, Any]) -> None:
        """Store a profile dict."""

    @abstractmethod
    def load_session(self, student_id: str) -> Optional[Dict[str, Any]]:
        """Return the student's stored active session dict, or None."""

    @abstractmethod
    def save_session(self, student_id: str, session: Dict[str, Any]) -> None:
        """Store the student's active session dict."""

    @abstractmethod
    def delete_session(self, student_id: str) -> None:
        """Forget the student's active session (no-op if absent)."""


class InMemoryStore(ProfileStore):
    """Dict-backed store. Copies on the way in and out."""

    def __init__(self):
        self._profiles: Dict[str, Dict[str, Any]] = {}
        self._sessions: Dict[str, Dict[str, Any]] = {}

    def load_profile(self, student_id: str) -> Optional[Dict[str, Any]]:
        data = self._profiles.get(student_id)
        return deepcopy(data) if data is not None else None

    def save_profile(self, student_id: str, profile: Dict[str, Any]) -> None:
        self._profiles[student_id] = deepcopy(profile)

    def load_session(self, student_id: str) -> Optional[Dict[str, Any]]:
        data = self._sessions.get(student_id)
        return deepcopy(data) if data is not None else None

    def save_session(self, student_id: str, session: Dict[str, Any]) -> None:
        self._sessions[student_id] = deepcopy(session)

    def delete_session(self, student_id: str) -> None:
        self._sessions.pop(student_id, None)


class JsonFileStore(ProfileStore):
    """
    Stores each profile and session as a JSON file.

    Features:
    - Validate against behavior_profile / difficulty_session schemas before save
    - Atomic writes (temp file + replace)
    - Student ids percent-encoded into file names (one file per id)
    - Loaded data must belong to the requested student
    """

    def __init__(
        self,
        profiles_dir: Path | str | None = None,
        sessions_dir: Path | str | None = None,
        validate: bool = True,
    ):
        """
        Initialize the store.

        Args:
            profiles_dir: Directory for profiles (default: config.paths.profiles_dir)
            sessions_dir: Directory for sessions (default: config.paths.sessions_dir)
            validate: Whether to validate before saving
        """
        self.profiles_dir = Path(profiles_dir) if profiles_dir else config.paths.profiles_dir
        self.sessions_dir = Path(sessions_dir) if sessions_dir else config.paths.sessions_dir
        self.profiles_dir.mkdir(parents=True, exist_ok=True)
        self.sessions_dir.mkdir(parents=True, exist_ok=True)

        self.validate = validate
        self.profile_validator = BehaviorProfileValidator() if validate else None
        self.session_validator = DifficultySessionValidator() if validate else None

    @staticmethod
    def _filename(student_id: str) -> str:
        # Injective: distinct ids never share a file
        return f"{quote(student_id, safe='')}.json"

    def _read(self, filepath: Path, student_id: str) -> Optional[Dict[str, Any]]:
        """
        Raises:
            ValueError: If the file holds another student's data
        """
        if not filepath.exists():
            return None
        with open(filepath, "r", encoding="utf-8") as f:
            data = json.load(f)
        self._check_owner(data, student_id, filepath)
        return data

    @staticmethod
    def _check_owner(data: Dict[str, Any], student_id: str, filepath: Path) -> None:
        if data.get("student_id") != student_id:
            raise ValueError(
                f"{filepath} belongs to student {data.get('student_id')!r}, not {student_id!r}"
            )

    def _write(self, filepath: Path, data: Dict[str, Any]) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=filepath.parent, suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
            os.replace(tmp_path, filepath)
        except BaseException:
            Path(tmp_path).unlink(missing_ok=True)
            raise

    def load_profile(self, student_id: str) -> Optional[Dict[str, Any]]:
        return self._read(self.profiles_dir / self._filename(student_id), student_id)

    def save_profile(self, student_id: str, profile: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: If validation is enabled and the profile is invalid
            ValueError: If the profile belongs to another student
        """
        filepath = self.profiles_dir / self._filename(student_id)
        self._check_owner(profile, student_id, filepath)
        if self.profile_validator is not None:
            self.profile_validator.validate_or_raise(profile)
        self._write(filepath, profile)
        logger.debug("Saved profile for %s", student_id)

    def load_session(self, student_id: str) -> Optional[Dict[str, Any]]:
        return self._read(self.sessions_dir / self._filename(student_id), student_id)

    def save_session(self, student_id: str, session: Dict[str, Any]) -> None:
        """
        Raises:
            ValidationError: If validation is enabled and the session is invalid
            ValueError: If the session belongs to another student
        """
        filepath = self.sessions_dir / self._filename(student_id)
        self._check_owner(session, student_id, filepath)
        if self.session_validator is not None:
            self.session_validator.validate_or_raise(session)
        self._write(filepath, session)
        logger.debug("Saved session for %s", student_id)

    def delete_session(self, student_id: str) -> None:
        (self.sessions_dir / self._filename(student_id)).unlink(missing_ok=True)
