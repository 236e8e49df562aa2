"""SQLite-backed progress store and study-time accumulator."""
import logging
from datetime import datetime

from term_tutor.db import get_connection
from term_tutor.models import ProgressRecord
from term_tutor.session import utc_now

logger = logging.getLogger(__name__)


def _row_to_record(row) -> ProgressRecord:
    return ProgressRecord(
        term_id=row["term_id"],
        interval=row["interval"],
        repetition=row["repetition"],
        ease_factor=row["ease_factor"],
        next_review_at=datetime.fromisoformat(row["next_review_at"]),
    )


class SqliteProgressStore:
    """Loads and saves every term's ProgressRecord in the progress table."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def load(self) -> dict[str, ProgressRecord]:
        conn = get_connection(self.db_path)
        rows = conn.execute("SELECT * FROM progress").fetchall()
        conn.close()
        return {row["term_id"]: _row_to_record(row) for row in rows}

    def save(self, progress: dict[str, ProgressRecord]) -> None:
        conn = get_connection(self.db_path)
        conn.executemany(
            """INSERT INTO progress (term_id, interval, repetition, ease_factor, next_review_at)
            VALUES (?, ?, ?, ?, ?)
            ON CONFLICT(term_id) DO UPDATE SET interval=excluded.interval,
                repetition=excluded.repetition, ease_factor=excluded.ease_factor,
                next_review_at=excluded.next_review_at""",
            [
                (r.term_id, r.interval, r.repetition, r.ease_factor, r.next_review_at.isoformat())
                for r in progress.values()
            ],
        )
        conn.commit()
        conn.close()
        logger.debug("Saved progress for %d terms", len(progress))


class SqliteStudyTimer:
    """Appends one study_sessions row per finished session."""

    def __init__(self, db_path: str):
        self.db_path = db_path

    def add_elapsed(self, seconds: float) -> None:
        conn = get_connection(self.db_path)
        conn.execute(
            "INSERT INTO study_sessions (elapsed_seconds, ended_at) VALUES (?, ?)",
            (seconds, utc_now().isoformat()),
        )
        conn.commit()
        conn.close()


def get_total_study_time(db_path: str) -> float:
    """Cumulative study time in seconds."""
    conn = get_connection(db_path)
    total = conn.execute("SELECT COALESCE(SUM(elapsed_seconds), 0) FROM study_sessions").fetchone()[0]
    conn.close()
    return float(total)


def format_duration(seconds: float) -> str:
    minutes, secs = divmod(int(seconds), 60)
    hours, minutes = divmod(minutes, 60)
    if hours:
        return f"{hours}h {minutes:02d}m"
    return f"{minutes}m {secs:02d}s"


def reset_all_progress(db_path: str) -> None:
    """Forget every rating, quiz answer and study session. The catalog is kept."""
    conn = get_connection(db_path)
    conn.execute("DELETE FROM progress")
    conn.execute("DELETE FROM quiz_results")
    conn.execute("DELETE FROM study_sessions")
    conn.commit()
    conn.close()
    logger.info("Reset all progress in %s", db_path)
