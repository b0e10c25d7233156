"""
Configuration management for the Adaptive Learning Core.

This module centralizes all configuration settings following 12-factor app principles:
- Tunables loaded from environment variables
- Sensible defaults for development
- Type hints for IDE support
- Single source of truth for all settings
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _optional_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    return int(value) if value not in (None, "") else None


@dataclass
class DifficultyConfig:
    """Difficulty adapter tunables."""

    # Response history kept per session (only the recent window is read)
    history_limit: int = field(
        default_factory=lambda: int(os.getenv("ADAPTIVE_HISTORY_LIMIT", "100"))
    )

    # Trend-based override
    trend_window: int = 5
    trend_min_history: int = 10
    trend_promote_accuracy: float = 0.9
    trend_demote_accuracy: float = 0.5

    # Encouragement categories
    encouragement_streak: int = 5
    encouragement_accuracy: float = 80.0  # percent
    encouragement_min_attempts: int = 10

    # Client-supplied event id deduplication (per session)
    dedup_window: int = 256

    # Reproducibility
    random_seed: Optional[int] = field(
        default_factory=lambda: _optional_int("ADAPTIVE_RANDOM_SEED")
    )


@dataclass
class StyleConfig:
    """Learning-style scorer tunables."""

    recompute_every: int = field(
        default_factory=lambda: int(os.getenv("STYLE_RECOMPUTE_EVERY", "5"))
    )
    confidence_event_saturation: int = 20  # events for full volume credit
    multimodal_threshold: float = 0.4  # primary score below this → multimodal
    min_adapt_confidence: float = 30.0  # below this, content is not adapted
    assessment_confidence: float = 60.0  # questionnaire-only confidence

    # Behavior profiles kept in memory per orchestrator (least recently used evicted)
    profile_cache_size: int = field(
        default_factory=lambda: int(os.getenv("STYLE_PROFILE_CACHE_SIZE", "1024"))
    )


@dataclass
class PathConfig:
    """File system paths - single source of truth for all directories."""

    project_root: Path = field(default_factory=lambda: Path(__file__).parent.parent)
    data_dir: Path = field(
        default_factory=lambda: Path(
            os.getenv("ADAPTIVE_DATA_DIR", str(Path(__file__).parent.parent / "data"))
        )
    )

    profiles_dir: Path = field(init=False)
    sessions_dir: Path = field(init=False)
    schemas_dir: Path = field(init=False)

    def __post_init__(self):
        """Initialize computed paths."""
        self.profiles_dir = self.data_dir / "profiles"
        self.sessions_dir = self.data_dir / "sessions"
        self.schemas_dir = self.project_root / "schemas"

    def prepare_filesystem(self):
        """
        Create directories if they don't exist.

        Separated from __post_init__ to avoid side-effects on import.
        Call this explicitly from your app entrypoint.
        """
        for directory in [self.data_dir, self.profiles_dir, self.sessions_dir]:
            directory.mkdir(parents=True, exist_ok=True)


@dataclass
class LoggingConfig:
    """Logging configuration."""

    log_level: str = field(default_factory=lambda: os.getenv("LOG_LEVEL", "INFO"))
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Config:
    """
    Main configuration class. Singleton pattern.

    Usage:
        from src.config import config

        limit = config.difficulty.history_limit
        config.style.recompute_every = 10

        # Prepare filesystem (call once at startup)
        config.prepare_fs()
    """

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance.paths = PathConfig()
            cls._instance.difficulty = DifficultyConfig()
            cls._instance.style = StyleConfig()
            cls._instance.logging = LoggingConfig()
        return cls._instance

    def prepare_fs(self):
        """Prepare filesystem (create directories). Call once at startup."""
        self.paths.prepare_filesystem()

    def validate(self) -> list[str]:
        """
        Validate configuration and return list of errors.

        Returns:
            List of error messages (empty if valid)
        """
        errors = []

        if self.difficulty.history_limit < self.difficulty.trend_min_history:
            errors.append(
                f"history_limit ({self.difficulty.history_limit}) must be >= "
                f"trend_min_history ({self.difficulty.trend_min_history})"
            )

        if self.difficulty.trend_window < 1:
            errors.append(f"trend_window must be >= 1, got {self.difficulty.trend_window}")

        if not (0 <= self.difficulty.trend_demote_accuracy < self.difficulty.trend_promote_accuracy <= 1):
            errors.append(
                "trend accuracies must satisfy 0 <= demote < promote <= 1, got "
                f"{self.difficulty.trend_demote_accuracy} / {self.difficulty.trend_promote_accuracy}"
            )

        if self.style.recompute_every < 1:
            errors.append(f"recompute_every must be >= 1, got {self.style.recompute_every}")

        if self.style.confidence_event_saturation < 1:
            errors.append(
                f"confidence_event_saturation must be >= 1, got {self.style.confidence_event_saturation}"
            )

        if not (0 < self.style.multimodal_threshold <= 1):
            errors.append(
                f"multimodal_threshold must be in (0, 1], got {self.style.multimodal_threshold}"
            )

        if not (0 <= self.style.min_adapt_confidence <= 100):
            errors.append(
                f"min_adapt_confidence must be in [0, 100], got {self.style.min_adapt_confidence}"
            )

        if self.style.profile_cache_size < 1:
            errors.append(f"profile_cache_size must be >= 1, got {self.style.profile_cache_size}")

        if self.difficulty.dedup_window < 0:
            errors.append(f"dedup_window must be >= 0, got {self.difficulty.dedup_window}")

        if logging.getLevelName(self.logging.log_level.upper()) not in (
            logging.DEBUG, logging.INFO, logging.WARNING, logging.ERROR, logging.CRITICAL
        ):
            errors.append(f"Unknown log_level: {self.logging.log_level}")

        return errors


# Global config instance
config = Config()

_logging_configured = False


def configure_logging(level: Optional[str] = None) -> None:
    """Apply basicConfig once for application entrypoints."""
    global _logging_configured
    if _logging_configured:
        return
    logging.basicConfig(
        level=(level or config.logging.log_level).upper(),
        format=config.logging.log_format,
    )
    _logging_configured = True
