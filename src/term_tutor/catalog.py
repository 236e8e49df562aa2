"""Read-only queries over the chapter and term catalog."""
from typing import Optional

from term_tutor.db import get_connection
from term_tutor.models import Chapter, Term


def _row_to_term(row) -> Term:
    return Term(
        id=row["id"],
        chapter_id=row["chapter_id"],
        term=row["term"],
        definition=row["definition"],
        ai_explanation=row["ai_explanation"],
    )


def get_chapters(db_path: str) -> list[Chapter]:
    conn = get_connection(db_path)
    rows = conn.execute("SELECT id, title FROM chapters ORDER BY rowid").fetchall()
    conn.close()
    return [Chapter(id=r["id"], title=r["title"]) for r in rows]


def get_chapter(db_path: str, chapter_id: str) -> Optional[Chapter]:
    conn = get_connection(db_path)
    row = conn.execute("SELECT id, title FROM chapters WHERE id = ?", (chapter_id,)).fetchone()
    conn.close()
    return Chapter(id=row["id"], title=row["title"]) if row else None


def get_terms(db_path: str, chapter_id: Optional[str] = None) -> list[Term]:
    """All terms in catalog order, optionally limited to one chapter."""
    conn = get_connection(db_path)
    if chapter_id is None:
        rows = conn.execute(
            """SELECT t.* FROM terms t JOIN chapters c ON t.chapter_id = c.id
            ORDER BY c.rowid, t.position, t.id"""
        ).fetchall()
    else:
        rows = conn.execute(
            "SELECT * FROM terms WHERE chapter_id = ? ORDER BY position, id", (chapter_id,)
        ).fetchall()
    conn.close()
    return [_row_to_term(r) for r in rows]


def get_term(db_path: str, term_id: str) -> Optional[Term]:
    conn = get_connection(db_path)
    row = conn.execute("SELECT * FROM terms WHERE id = ?", (term_id,)).fetchone()
    conn.close()
    return _row_to_term(row) if row else None
