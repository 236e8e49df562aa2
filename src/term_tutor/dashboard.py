"""Memory strength labels, chapter summaries and study statistics."""
from datetime import datetime
from typing import Optional

from term_tutor.catalog import get_terms
from term_tutor.db import get_connection
from term_tutor.models import Chapter, ProgressRecord, Term
from term_tutor.progress import get_total_study_time
from term_tutor.quiz import get_quiz_score
from term_tutor.sm2 import is_due

STRONG_INTERVAL = 4
MASTERED_INTERVAL = 21


def strength_label(progress: Optional[ProgressRecord]) -> str:
    if progress is None:
        return "New"
    if progress.repetition == 0:
        return "Weak"
    if progress.interval < STRONG_INTERVAL:
        return "Moderate"
    if progress.interval < MASTERED_INTERVAL:
        return "Good"
    return "Strong"


def strength_color(progress: Optional[ProgressRecord]) -> str:
    return {
        "New": "dim",
        "Weak": "red",
        "Moderate": "dark_orange",
        "Good": "green",
        "Strong": "green",
    }[strength_label(progress)]


def _term_retention(progress: Optional[ProgressRecord]) -> float:
    if progress is None or progress.repetition == 0:
        return 0.0
    if progress.interval >= STRONG_INTERVAL:
        return 1.0
    return 0.7


def retention_score(terms: list[Term], progress: dict[str, ProgressRecord]) -> float:
    """Mean retention over terms: 0 for new or failed, 0.7 short-term, 1 long-term."""
    if not terms:
        return 0.0
    return sum(_term_retention(progress.get(t.id)) for t in terms) / len(terms)


def chapter_status(terms: list[Term], progress: dict[str, ProgressRecord]) -> str:
    if not any(t.id in progress for t in terms):
        return "Not Started"
    score = retention_score(terms, progress)
    if score < 0.4:
        return "Very Difficult"
    elif score < 0.7:
        return "Warning"
    return "Good"


def get_status_color(status: str) -> str:
    return {
        "Not Started": "dim",
        "Very Difficult": "red",
        "Warning": "dark_orange",
        "Good": "green",
    }.get(status, "white")


def summarize_chapter(
    chapter: Chapter,
    terms: list[Term],
    progress: dict[str, ProgressRecord],
    now: datetime,
) -> dict:
    return {
        "chapter_id": chapter.id,
        "title": chapter.title,
        "total": len(terms),
        "due": sum(1 for t in terms if is_due(progress.get(t.id), now)),
        "retention": round(retention_score(terms, progress), 2),
        "status": chapter_status(terms, progress),
    }


def mastery_list(terms: list[Term], progress: dict[str, ProgressRecord]) -> list[Term]:
    """Terms ordered weakest first (shortest interval, never-studied counts as 0)."""
    def interval_of(term: Term) -> int:
        p = progress.get(term.id)
        return p.interval if p else 0

    return sorted(terms, key=interval_of)


def learned_count(progress: dict[str, ProgressRecord]) -> int:
    return sum(1 for p in progress.values() if p.repetition > 0)


def get_study_stats(db_path: str, progress: dict[str, ProgressRecord]) -> dict:
    conn = get_connection(db_path)
    answers = conn.execute("SELECT COUNT(*) FROM quiz_results").fetchone()[0]
    sessions = conn.execute("SELECT COUNT(*) FROM study_sessions").fetchone()[0]
    conn.close()
    return {
        "terms_total": len(get_terms(db_path)),
        "terms_learned": learned_count(progress),
        "study_seconds": get_total_study_time(db_path),
        "sessions": sessions,
        "quiz_answers": answers,
        "avg_quiz_score": get_quiz_score(db_path),
    }
