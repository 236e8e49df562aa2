from datetime import datetime, timedelta

from conftest import T0
from term_tutor.db import get_connection, init_db
from term_tutor.models import ProgressRecord, Question, QuestionKind
from term_tutor.catalog import get_terms
from term_tutor.progress import (
    SqliteProgressStore, SqliteStudyTimer, format_duration, get_total_study_time,
    reset_all_progress,
)
from term_tutor.quiz import record_quiz_answer
from term_tutor.seed import seed_all


def test_load_empty(tmp_db):
    init_db(tmp_db)
    assert SqliteProgressStore(tmp_db).load() == {}


def test_save_and_load_roundtrip(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    store = SqliteProgressStore(tmp_db)
    record = ProgressRecord("ch1-01", 6, 2, 2.36, T0 + timedelta(days=6))
    store.save({"ch1-01": record})
    assert store.load() == {"ch1-01": record}


def test_save_overwrites_per_term(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    store = SqliteProgressStore(tmp_db)
    store.save({"ch1-01": ProgressRecord("ch1-01", 1, 1, 2.5, T0)})
    newer = ProgressRecord("ch1-01", 6, 2, 2.5, T0 + timedelta(days=6))
    store.save({"ch1-01": newer, "ch1-02": ProgressRecord("ch1-02", 1, 0, 1.7, T0)})
    loaded = store.load()
    assert loaded["ch1-01"] == newer
    assert len(loaded) == 2


def test_study_timer_accumulates(tmp_db):
    init_db(tmp_db)
    timer = SqliteStudyTimer(tmp_db)
    assert get_total_study_time(tmp_db) == 0.0
    timer.add_elapsed(90.5)
    timer.add_elapsed(30)
    assert get_total_study_time(tmp_db) == 120.5
    conn = get_connection(tmp_db)
    ended = conn.execute("SELECT ended_at FROM study_sessions").fetchone()[0]
    conn.close()
    assert datetime.fromisoformat(ended).utcoffset() == timedelta(0)


def test_format_duration():
    assert format_duration(0) == "0m 00s"
    assert format_duration(125) == "2m 05s"
    assert format_duration(3725) == "1h 02m"


def test_reset_all_progress(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    SqliteProgressStore(tmp_db).save({"ch1-01": ProgressRecord("ch1-01", 1, 1, 2.5, T0)})
    SqliteStudyTimer(tmp_db).add_elapsed(60)
    term = get_terms(tmp_db, "ch1")[0]
    record_quiz_answer(tmp_db, Question(term=term, kind=QuestionKind.FREE_TEXT), "ide")

    reset_all_progress(tmp_db)

    assert SqliteProgressStore(tmp_db).load() == {}
    assert get_total_study_time(tmp_db) == 0.0
    conn = get_connection(tmp_db)
    assert conn.execute("SELECT COUNT(*) FROM quiz_results").fetchone()[0] == 0
    # Catalog is untouched
    assert conn.execute("SELECT COUNT(*) FROM terms").fetchone()[0] == 24
    conn.close()
