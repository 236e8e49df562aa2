"""Seed the database with the bundled chapters and terms."""
import json
import logging
from pathlib import Path

from term_tutor.db import get_connection

logger = logging.getLogger(__name__)

CONTENT_DIR = Path(__file__).parent / "content"


def is_seeded(db_path: str) -> bool:
    """Check whether the database has already been seeded with chapters."""
    conn = get_connection(db_path)
    count = conn.execute("SELECT COUNT(*) FROM chapters WHERE source = 'seeded'").fetchone()[0]
    conn.close()
    return count > 0


def insert_chapter(conn, chapter_id: str, title: str, source: str = "seeded") -> None:
    conn.execute(
        "INSERT OR IGNORE INTO chapters (id, title, source) VALUES (?, ?, ?)",
        (chapter_id, title, source),
    )


def insert_terms(conn, terms: list[dict], start: int = 0) -> int:
    """Insert term dicts keyed like catalog.json. Existing ids are left alone."""
    inserted = 0
    for position, t in enumerate(terms, start):
        cursor = conn.execute(
            """INSERT OR IGNORE INTO terms (id, chapter_id, term, definition, ai_explanation, position)
            VALUES (?, ?, ?, ?, ?, ?)""",
            (t["id"], t["chapter_id"], t["term"], t["definition"], t.get("ai_explanation"), position),
        )
        inserted += cursor.rowcount
    return inserted


def seed_catalog(db_path: str, catalog_file: Path = CONTENT_DIR / "catalog.json") -> None:
    """Insert all chapters and terms from catalog.json."""
    data = json.loads(Path(catalog_file).read_text())
    conn = get_connection(db_path)
    for chapter in data["chapters"]:
        insert_chapter(conn, chapter["id"], chapter["title"])
    inserted = insert_terms(conn, data["terms"])
    conn.commit()
    conn.close()
    logger.info("Seeded %d chapters and %d terms", len(data["chapters"]), inserted)


def seed_all(db_path: str) -> None:
    """Run all seed functions in order."""
    if is_seeded(db_path):
        return
    seed_catalog(db_path)
