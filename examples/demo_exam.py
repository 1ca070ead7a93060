"""
Demo exam: Start → Answer → Retune → Complete → Report

Runs a simulated student through one adaptive exam per demo subject:
1. Build the demo question pool and a user directory
2. Start an exam (first question at Medium)
3. Answer until the question limit or the subject's pool runs out
4. Print the result report

Pass --persist to store sessions and responses under config.paths.data_dir
instead of in memory.
"""

import random
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from adaptive_exam.config import config, configure_logging
from adaptive_exam.models.selector import AdaptiveSelector
from adaptive_exam.orchestrator import ExamOrchestrator
from adaptive_exam.utils.persistence import (
    FileExamSessionStore,
    FileResponseLedger,
    InMemoryExamSessionStore,
    InMemoryResponseLedger,
    InMemoryUserDirectory,
    User,
)
from adaptive_exam.utils.question_bank import demo_pool


def simulated_answer(question, correct_option, rng):
    """A student who knows Easy questions well and guesses more as questions get harder."""
    skill = {"Easy": 0.9, "Medium": 0.6, "Hard": 0.3}[question.difficulty]
    if rng.random() < skill:
        return correct_option
    return rng.choice(list(question.options))


def main():
    configure_logging()
    persist = "--persist" in sys.argv[1:]
    rng = random.Random(config.exam.random_seed)

    # ==================== Step 1: Collaborators ====================
    pool = demo_pool()
    users = InMemoryUserDirectory([User(user_id=1, name="Demo Student")])
    if persist:
        config.prepare_fs()
        ledger, sessions = FileResponseLedger(), FileExamSessionStore()
    else:
        ledger, sessions = InMemoryResponseLedger(), InMemoryExamSessionStore()

    orchestrator = ExamOrchestrator(
        pool, ledger, sessions, users, selector=AdaptiveSelector(pool, rng=rng)
    )
    print(f"✓ Loaded {len(pool)} questions across {pool.subjects()}")

    for subject in pool.subjects():
        # ==================== Step 2: Start ====================
        print("=" * 60)
        print(f"EXAM: {subject}")
        print("=" * 60)
        state = orchestrator.start_exam(user_id=1, subject=subject)

        # ==================== Step 3: Answer ====================
        while not state.completed:
            question = state.next_question
            answer_key = pool.find_by_id(question.question_id).correct_option
            choice = simulated_answer(question, answer_key, rng)

            state = orchestrator.submit_answer(
                state.session_id, question.question_id, choice, rng.randint(5, 120)
            )
            print(
                f"  [{question.difficulty:<6}] {question.content:<45} → {choice}  "
                f"score={state.score}  next tier={state.current_difficulty}"
            )

        # ==================== Step 4: Report ====================
        result = orchestrator.get_result(state.session_id)
        print(f"\n📊 {result.score}/{result.total_answered} correct ({result.percentage}%)")
        print(f"  Passed: {result.passed}  ({result.completion_reason})")
        print(f"  Difficulty path: {' → '.join(result.difficulty_progression)}")
        print(f"  Time: {result.time_analysis}")
        print()


if __name__ == "__main__":
    main()
