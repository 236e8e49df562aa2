"""User settings stored in the database."""
from typing import Optional

from term_tutor.db import get_connection

DEFAULT_QUIZ_SIZE = 10
DEFAULT_MIXED_SAMPLE_SIZE = 20


def get_setting(db_path: str, key: str, default: str = None) -> str | None:
    conn = get_connection(db_path)
    row = conn.execute("SELECT value FROM user_settings WHERE key = ?", (key,)).fetchone()
    conn.close()
    return row["value"] if row else default


def set_setting(db_path: str, key: str, value: str) -> None:
    conn = get_connection(db_path)
    conn.execute(
        "INSERT INTO user_settings (key, value) VALUES (?, ?) ON CONFLICT(key) DO UPDATE SET value=?",
        (key, value, value),
    )
    conn.commit()
    conn.close()


def delete_setting(db_path: str, key: str) -> None:
    conn = get_connection(db_path)
    conn.execute("DELETE FROM user_settings WHERE key = ?", (key,))
    conn.commit()
    conn.close()


def _get_int(db_path: str, key: str, default: Optional[int], minimum: int = 1) -> Optional[int]:
    raw = get_setting(db_path, key)
    if raw is None:
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    return value if value >= minimum else default


def _set_int(db_path: str, key: str, value: int, minimum: int = 1) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < minimum:
        raise ValueError(f"{key} must be an integer >= {minimum}, got {value!r}")
    set_setting(db_path, key, str(value))


def get_quiz_size(db_path: str) -> int:
    return _get_int(db_path, "quiz_size", DEFAULT_QUIZ_SIZE)


def set_quiz_size(db_path: str, size: int) -> None:
    _set_int(db_path, "quiz_size", size)


def get_mixed_sample_size(db_path: str) -> int:
    return _get_int(db_path, "mixed_sample_size", DEFAULT_MIXED_SAMPLE_SIZE)


def set_mixed_sample_size(db_path: str, size: int) -> None:
    _set_int(db_path, "mixed_sample_size", size)


def get_max_recycles(db_path: str) -> int | None:
    """Per-term requeue cap within one session. None means unbounded, 0 disables requeueing."""
    return _get_int(db_path, "max_recycles", None, minimum=0)


def set_max_recycles(db_path: str, cap: int | None) -> None:
    if cap is None:
        delete_setting(db_path, "max_recycles")
        return
    _set_int(db_path, "max_recycles", cap, minimum=0)
