"""
Adaptive session example: Start → Answer → Adapt → Style → Persist

Demonstrates the orchestrator end to end:
1. Start a session for a grade 4 student
2. Answer questions and watch difficulty adapt
3. Record behavior telemetry and read the learning-style estimate
4. Adapt a content item for the student
5. Persist to JSON files and resume in a fresh orchestrator
"""

import random
import sys
import tempfile
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.config import configure_logging
from src.engines.question_selector import StaticQuestionPool
from src.orchestrator import AdaptiveLearningOrchestrator
from src.utils.persistence import JsonFileStore


def build_pool() -> StaticQuestionPool:
    rows = []
    for difficulty in range(1, 11):
        for topic in ("fractions", "geometry", "measurement"):
            rows.append({
                "id": f"math-{difficulty}-{topic}",
                "difficulty": difficulty,
                "topic": topic,
                "question_type": "visual_questions" if topic == "geometry" else "text_questions",
                "text": f"A level {difficulty} {topic} problem",
                "hints": ["Re-read the question.", "Try a smaller example."],
            })
    return StaticQuestionPool({"math": rows})


def main():
    configure_logging("INFO")
    rng = random.Random(7)
    data_dir = Path(tempfile.mkdtemp(prefix="adaptive-demo-"))
    store = JsonFileStore(data_dir / "profiles", data_dir / "sessions")

    # ==================== Step 1: Start Session ====================
    print("=" * 60)
    print("STEP 1: Starting Session")
    print("=" * 60)

    orchestrator = AdaptiveLearningOrchestrator(
        store=store,
        question_pool=build_pool(),
        rng_factory=lambda: random.Random(42),
    )
    session = orchestrator.start_session("alice", grade_level=4, subject="math")
    print(f"✓ Session {session.session_id}")
    print(f"  Band: {session.policy.name}, starting difficulty {session.current_difficulty}")
    print()

    # ==================== Step 2: Answer Questions ====================
    print("=" * 60)
    print("STEP 2: Answering Questions")
    print("=" * 60)

    for n in range(12):
        question = orchestrator.get_next_question("alice")
        if question is None:
            print("⚠ No question available")
            break
        correct = rng.random() < 0.75
        update = orchestrator.record_response(
            "alice", correct, rng.uniform(10, 60), question.difficulty, event_id=f"resp-{n}"
        )
        marker = "✓" if correct else "✗"
        print(
            f"  {marker} {question.question_id:<24} difficulty {update.previous_difficulty}"
            f" → {update.new_difficulty} ({update.feedback_tier})"
        )

    stats = orchestrator.get_session_statistics("alice")
    print(f"\n  Accuracy: {stats['accuracy']}% over {stats['total_attempts']} attempts")
    print()

    # ==================== Step 3: Behavior Telemetry ====================
    print("=" * 60)
    print("STEP 3: Learning Style Detection")
    print("=" * 60)

    events = (
        [{"contentType": "image_views"}] * 6
        + [{"activityType": "visual_content", "timeSpentSeconds": 240}] * 3
        + [{"contentType": "text_reading"}] * 2
        + [{"questionType": "visual_questions", "correct": True}] * 4
    )
    for event in events:
        orchestrator.record_behavior("alice", event)

    style = orchestrator.get_style_profile("alice")
    print(f"✓ Primary style: {style.primary_style} (confidence {style.confidence:.0f})")
    for modality, score in style.scores.items():
        print(f"  {modality:<16} {score:.2f}")
    print()

    # ==================== Step 4: Adapt Content ====================
    print("=" * 60)
    print("STEP 4: Adapting Content")
    print("=" * 60)

    adapted = orchestrator.adapt_content("alice", {"title": "Equivalent fractions"})
    print(f"✓ Adapted for: {adapted.get('adapted_for', 'nobody in particular')}")
    print(f"  Presentation order: {adapted.get('presentation_order')}")
    print()

    # ==================== Step 5: Resume ====================
    print("=" * 60)
    print("STEP 5: Resuming From Disk")
    print("=" * 60)

    resumed = AdaptiveLearningOrchestrator(store=store, question_pool=build_pool())
    session = resumed.get_session("alice")
    print(f"✓ Resumed {session.session_id} at difficulty {session.current_difficulty}")
    print(f"  Files under {data_dir}")

    final = resumed.end_session("alice")
    print(f"✓ Session ended: {final}")


if __name__ == "__main__":
    main()
