# tests/test_quiz.py
import random
from datetime import datetime

import pytest

from conftest import make_terms
from term_tutor.catalog import get_terms
from term_tutor.db import init_db, get_connection
from term_tutor.errors import EmptyPoolError
from term_tutor.models import Question, QuestionKind, Term
from term_tutor.quiz import (
    build_quiz, check_answer, get_chapter_quiz_scores, get_quiz_score, record_quiz_answer,
    score_summary,
)
from term_tutor.seed import seed_all


def test_build_quiz_default_size():
    questions = build_quiz(make_terms(25), rng=random.Random(1))
    assert len(questions) == 10
    assert len({q.term.id for q in questions}) == 10


def test_build_quiz_size_capped_by_pool():
    questions = build_quiz(make_terms(6), size=10, rng=random.Random(1))
    assert len(questions) == 6


def test_build_quiz_is_deterministic_with_seed():
    pool = make_terms(20)
    a = build_quiz(pool, rng=random.Random(42))
    b = build_quiz(pool, rng=random.Random(42))
    assert [(q.term.id, q.kind, q.options) for q in a] == [(q.term.id, q.kind, q.options) for q in b]


def test_multiple_choice_options():
    pool = make_terms(12)
    questions = build_quiz(pool, size=12, rng=random.Random(5))
    mc = [q for q in questions if q.kind is QuestionKind.MULTIPLE_CHOICE]
    assert mc, "expected at least one multiple-choice question"
    for q in mc:
        assert len(q.options) == 4
        assert q.options.count(q.term.term) == 1
        assert len(set(q.options)) == 4
        assert set(q.options) <= {t.term for t in pool}


def test_distractors_skip_repeated_display_strings():
    # An imported deck can repeat a catalog term under another id
    pool = make_terms(6) + [
        Term(id="deck-001", chapter_id="deck", term="Term 1", definition="Another definition"),
        Term(id="deck-002", chapter_id="deck", term="Term 2", definition="Yet another"),
    ]
    for seed in range(30):
        for q in build_quiz(pool, size=8, rng=random.Random(seed)):
            if q.kind is QuestionKind.MULTIPLE_CHOICE:
                assert q.options.count(q.term.term) == 1
                assert len(set(q.options)) == 4


def test_too_few_distinct_strings_falls_back_to_free_text():
    pool = [
        Term(id=f"t{i}", chapter_id="ch1", term="Stack" if i < 3 else f"Term {i}", definition=f"Def {i}")
        for i in range(5)
    ]
    for seed in range(30):
        questions = build_quiz(pool, size=5, rng=random.Random(seed))
        assert all(q.kind is QuestionKind.FREE_TEXT for q in questions)


def test_free_text_has_no_options():
    questions = build_quiz(make_terms(12), size=12, rng=random.Random(5))
    for q in questions:
        if q.kind is QuestionKind.FREE_TEXT:
            assert q.options == []


def test_both_kinds_appear():
    questions = build_quiz(make_terms(40), size=40, rng=random.Random(9))
    kinds = {q.kind for q in questions}
    assert kinds == {QuestionKind.MULTIPLE_CHOICE, QuestionKind.FREE_TEXT}


@pytest.mark.parametrize("n", [1, 2, 3])
def test_small_pool_forces_free_text(n):
    questions = build_quiz(make_terms(n), rng=random.Random(0))
    assert len(questions) == n
    assert all(q.kind is QuestionKind.FREE_TEXT for q in questions)


def test_empty_pool_rejected():
    with pytest.raises(EmptyPoolError):
        build_quiz([])


def test_zero_size_rejected():
    with pytest.raises(ValueError):
        build_quiz(make_terms(5), size=0)


def test_check_answer_multiple_choice_exact():
    term = make_terms(1)[0]
    q = Question(term=term, kind=QuestionKind.MULTIPLE_CHOICE, options=["Term 1", "x", "y", "z"])
    assert check_answer(q, "Term 1")
    assert not check_answer(q, "term 1")


def test_check_answer_free_text_is_tolerant():
    term = make_terms(1)[0]
    q = Question(term=term, kind=QuestionKind.FREE_TEXT)
    assert check_answer(q, "term 1")
    assert not check_answer(q, "")


def test_score_summary_messages():
    assert score_summary(9, 10) == (90, "Excellent work!")
    assert score_summary(8, 10) == (80, "Excellent work!")
    assert score_summary(6, 10) == (60, "Good job!")
    assert score_summary(1, 10) == (10, "Keep practicing!")
    assert score_summary(0, 0) == (0, "Keep practicing!")


def test_record_quiz_answer(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    term = get_terms(tmp_db, "ch1")[0]
    q = Question(term=term, kind=QuestionKind.FREE_TEXT)
    assert record_quiz_answer(tmp_db, q, "IDE")
    assert not record_quiz_answer(tmp_db, q, "compiler")
    conn = get_connection(tmp_db)
    rows = conn.execute("SELECT * FROM quiz_results ORDER BY id").fetchall()
    conn.close()
    assert [r["is_correct"] for r in rows] == [1, 0]
    assert rows[0]["kind"] == "free-text"
    assert rows[0]["term_id"] == term.id
    assert datetime.fromisoformat(rows[0]["answered_at"]).tzinfo is not None


def test_get_quiz_score(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    terms = get_terms(tmp_db, "ch2")[:4]
    for t in terms[:3]:
        record_quiz_answer(tmp_db, Question(term=t, kind=QuestionKind.FREE_TEXT), t.term)
    record_quiz_answer(tmp_db, Question(term=terms[3], kind=QuestionKind.FREE_TEXT), "nope")
    assert get_quiz_score(tmp_db) == 75.0  # 3/4
    assert get_chapter_quiz_scores(tmp_db) == {"ch2": 75.0}


def test_get_quiz_score_empty(tmp_db):
    init_db(tmp_db)
    assert get_quiz_score(tmp_db) == 0.0
