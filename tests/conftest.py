"""
Shared pytest fixtures and configuration for adaptive learning core tests.

This file is automatically discovered by pytest and provides
fixtures available to all tests.
"""

import random
import sys
from pathlib import Path

import pytest

# Add project root to path for all tests
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import config as app_config
from src.engines.question_selector import Question, StaticQuestionPool


@pytest.fixture
def question_pool():
    """
    Fixture providing a small math pool across difficulties 1-7.

    Returns:
        StaticQuestionPool: 'math' pool with fractions and geometry topics
    """
    questions = []
    for difficulty in range(1, 8):
        for n, topic in enumerate(["fractions", "geometry"]):
            questions.append(
                Question(
                    question_id=f"math-{difficulty}-{topic}",
                    difficulty=difficulty,
                    topic=topic,
                    question_type="visual_questions" if n == 1 else "text_questions",
                    text=f"{topic} question at level {difficulty}",
                    hints=["Read carefully.", "Break it into steps.", "Draw a picture."],
                )
            )
    return StaticQuestionPool({"math": questions})


@pytest.fixture
def seeded_rng():
    """Deterministic random source for selection tests."""
    return random.Random(1234)


@pytest.fixture(autouse=True)
def restore_config():
    """
    Auto-fixture restoring tunables tests may change.

    Config is a singleton, so a test that edits it would leak into others.
    """
    difficulty = dict(vars(app_config.difficulty))
    style = dict(vars(app_config.style))
    yield
    vars(app_config.difficulty).update(difficulty)
    vars(app_config.style).update(style)


# Pytest hooks for better test output


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "integration: mark test as an integration test")
    config.addinivalue_line("markers", "slow: mark test as slow running")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)

        if "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
