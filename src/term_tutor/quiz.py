"""Quiz engine: question generation, grading and score history."""
import random
from typing import Optional, Sequence

from term_tutor.db import get_connection
from term_tutor.errors import EmptyPoolError
from term_tutor.models import Question, QuestionKind, Term
from term_tutor.session import utc_now
from term_tutor.verifier import verify_answer

DEFAULT_QUIZ_SIZE = 10
DISTRACTOR_COUNT = 3
# Below this a multiple-choice question can't get a full set of distractors.
MIN_MULTIPLE_CHOICE_POOL = DISTRACTOR_COUNT + 1


def build_quiz(
    pool: Sequence[Term],
    size: int = DEFAULT_QUIZ_SIZE,
    rng: Optional[random.Random] = None,
) -> list[Question]:
    """Pick up to ``size`` terms at random and turn each into a question.

    Each question is multiple choice or free text with equal odds. Pools
    smaller than four terms only produce free-text questions.
    """
    pool = list(pool)
    if not pool:
        raise EmptyPoolError("quiz")
    if size < 1:
        raise ValueError(f"Quiz size must be at least 1, got {size}")
    rng = rng or random.Random()

    shuffled = list(pool)
    rng.shuffle(shuffled)
    selected = shuffled[:min(size, len(shuffled))]
    allow_choice = len(pool) >= MIN_MULTIPLE_CHOICE_POOL

    questions = []
    for term in selected:
        if allow_choice and rng.random() < 0.5:
            # Distinct display strings, in pool order, other than the answer
            others = list(dict.fromkeys(t.term for t in pool if t.term != term.term))
            if len(others) >= DISTRACTOR_COUNT:
                options = rng.sample(others, DISTRACTOR_COUNT)
                options.append(term.term)
                rng.shuffle(options)
                questions.append(Question(term=term, kind=QuestionKind.MULTIPLE_CHOICE, options=options))
                continue
        questions.append(Question(term=term, kind=QuestionKind.FREE_TEXT))
    return questions


def check_answer(question: Question, answer: str) -> bool:
    if question.kind is QuestionKind.MULTIPLE_CHOICE:
        return answer == question.term.term
    return verify_answer(answer, question.term.term)


def record_quiz_answer(db_path: str, question: Question, answer: str) -> bool:
    is_correct = check_answer(question, answer)
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO quiz_results (term_id, kind, user_answer, is_correct, answered_at) VALUES (?, ?, ?, ?, ?)",
        (question.term.id, question.kind.value, answer, int(is_correct), utc_now().isoformat()),
    )
    conn.commit()
    conn.close()
    return is_correct


def get_quiz_score(db_path: str) -> float:
    """Overall quiz score as percentage."""
    conn = get_connection(db_path)
    row = conn.execute(
        "SELECT COUNT(*) as total, SUM(is_correct) as correct FROM quiz_results"
    ).fetchone()
    conn.close()
    if row["total"] == 0:
        return 0.0
    return round((row["correct"] / row["total"]) * 100, 1)


def get_chapter_quiz_scores(db_path: str) -> dict:
    """Quiz scores broken down by chapter."""
    conn = get_connection(db_path)
    rows = conn.execute(
        """SELECT t.chapter_id, COUNT(*) as total, SUM(r.is_correct) as correct
        FROM quiz_results r
        JOIN terms t ON r.term_id = t.id
        GROUP BY t.chapter_id"""
    ).fetchall()
    conn.close()
    return {
        row["chapter_id"]: round((row["correct"] / row["total"]) * 100, 1)
        for row in rows
    }


def score_summary(correct: int, total: int) -> tuple[int, str]:
    """Percentage (rounded) and an encouragement line for a finished quiz."""
    percentage = round(correct / total * 100) if total else 0
    if percentage >= 80:
        message = "Excellent work!"
    elif percentage >= 60:
        message = "Good job!"
    else:
        message = "Keep practicing!"
    return percentage, message
