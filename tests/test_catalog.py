from term_tutor.catalog import get_chapter, get_chapters, get_term, get_terms
from term_tutor.db import init_db
from term_tutor.seed import seed_all


def test_get_chapters_in_catalog_order(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    assert [c.id for c in get_chapters(tmp_db)] == ["ch1", "ch2", "ch3"]


def test_get_chapter(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    assert get_chapter(tmp_db, "ch2").title == "Data Structures"
    assert get_chapter(tmp_db, "nope") is None


def test_get_terms_for_chapter(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    terms = get_terms(tmp_db, "ch3")
    assert len(terms) == 8
    assert all(t.chapter_id == "ch3" for t in terms)
    assert terms[0].term == "Transmission Control Protocol (TCP)"


def test_get_all_terms(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    terms = get_terms(tmp_db)
    assert len(terms) == 24
    assert terms[0].id == "ch1-01"
    assert terms[-1].id == "ch3-08"


def test_get_term_with_explanation(tmp_db):
    init_db(tmp_db)
    seed_all(tmp_db)
    term = get_term(tmp_db, "ch1-07")
    assert term.term == "Application Programming Interface (API)"
    assert term.ai_explanation
    assert get_term(tmp_db, "missing") is None


def test_empty_catalog(tmp_db):
    init_db(tmp_db)
    assert get_chapters(tmp_db) == []
    assert get_terms(tmp_db) == []
