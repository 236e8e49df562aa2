"""Import term decks from various file formats."""
import csv
import io
import json
import logging
import re
from pathlib import Path
from typing import Optional

from term_tutor.db import get_connection
from term_tutor.errors import ImportFormatError
from term_tutor.seed import insert_chapter, insert_terms

logger = logging.getLogger(__name__)

_BULLET = re.compile(r"^\s*(?:[-*+]|\d+[.)])\s+")
# "Term: definition", "Term - definition", "Term — definition"
_TERM_LINE = re.compile(r"^(?P<term>[^:]+?)\s*(?::|\s[-–—]\s)\s*(?P<definition>\S.*)$")


def _clean(text) -> str:
    return " ".join(str(text).split())


def _entry(term, definition, explanation=None) -> Optional[dict]:
    term, definition = _clean(term or ""), _clean(definition or "")
    if not term or not definition:
        return None
    entry = {"term": term, "definition": definition}
    if explanation:
        entry["ai_explanation"] = _clean(explanation)
    return entry


def parse_lines(text: str) -> list[dict]:
    """Parse ``Term: definition`` style lines, ignoring headings and prose."""
    entries = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        line = _BULLET.sub("", line)
        match = _TERM_LINE.match(line)
        if not match:
            continue
        entry = _entry(match.group("term").strip("*_` "), match.group("definition"))
        if entry:
            entries.append(entry)
    return entries


def parse_structured(data) -> list[dict]:
    """Accept a list of term dicts, a {"terms": [...]} document, or a term -> definition mapping."""
    if isinstance(data, dict) and isinstance(data.get("terms"), list):
        data = data["terms"]
    if isinstance(data, dict):
        items = [_entry(k, v) for k, v in data.items() if isinstance(v, str)]
    elif isinstance(data, list):
        items = [
            _entry(d.get("term"), d.get("definition"), d.get("ai_explanation") or d.get("explanation"))
            for d in data
            if isinstance(d, dict)
        ]
    else:
        items = []
    return [i for i in items if i]


def parse_csv(text: str) -> list[dict]:
    rows = list(csv.reader(io.StringIO(text)))
    if not rows:
        return []
    header = [h.strip().lower() for h in rows[0]]
    if "term" in header and "definition" in header:
        t_idx, d_idx = header.index("term"), header.index("definition")
        e_idx = header.index("explanation") if "explanation" in header else None
        rows = rows[1:]
    else:
        t_idx, d_idx, e_idx = 0, 1, None
    entries = []
    for row in rows:
        if len(row) <= max(t_idx, d_idx):
            continue
        explanation = row[e_idx] if e_idx is not None and e_idx < len(row) else None
        entry = _entry(row[t_idx], row[d_idx], explanation)
        if entry:
            entries.append(entry)
    return entries


def parse_html(html: str) -> list[dict]:
    from bs4 import BeautifulSoup
    soup = BeautifulSoup(html, "html.parser")
    entries = []
    for dt in soup.find_all("dt"):
        dd = dt.find_next_sibling("dd")
        if dd is not None:
            entries.append(_entry(dt.get_text(), dd.get_text()))
    if not entries:
        for tr in soup.find_all("tr"):
            cells = tr.find_all("td")
            if len(cells) >= 2:
                entries.append(_entry(cells[0].get_text(), cells[1].get_text()))
    if not entries:
        return parse_lines(soup.get_text("\n"))
    return [e for e in entries if e]


def read_deck(file_path: str) -> list[dict]:
    path = Path(file_path)
    suffix = path.suffix.lower()

    if suffix == ".json":
        try:
            data = json.loads(path.read_text())
        except json.JSONDecodeError as e:
            raise ImportFormatError(f"{path.name} is not valid JSON: {e}") from e
        return parse_structured(data)
    elif suffix in (".yaml", ".yml"):
        import yaml
        try:
            data = yaml.safe_load(path.read_text())
        except yaml.YAMLError as e:
            raise ImportFormatError(f"{path.name} is not valid YAML: {e}") from e
        return parse_structured(data)
    elif suffix == ".csv":
        return parse_csv(path.read_text())
    elif suffix in (".html", ".htm"):
        return parse_html(path.read_text())
    elif suffix == ".pdf":
        from PyPDF2 import PdfReader
        reader = PdfReader(file_path)
        return parse_lines("\n".join(page.extract_text() or "" for page in reader.pages))
    elif suffix == ".docx":
        from docx import Document
        doc = Document(file_path)
        return parse_lines("\n".join(p.text for p in doc.paragraphs))
    else:
        # .txt, .md and anything else is read as plain text
        return parse_lines(path.read_text())


def slugify(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "deck"


def import_deck(
    db_path: str,
    file_path: str,
    chapter_id: Optional[str] = None,
    title: Optional[str] = None,
) -> dict:
    """Import a deck file as a chapter. Terms are appended if the chapter already exists."""
    entries = read_deck(file_path)
    if not entries:
        raise ImportFormatError(f"No terms found in {Path(file_path).name}")
    stem = Path(file_path).stem
    chapter_id = chapter_id or slugify(stem)
    title = title or stem.replace("_", " ").replace("-", " ").title()

    conn = get_connection(db_path)
    insert_chapter(conn, chapter_id, title, source="imported")
    existing = conn.execute(
        "SELECT COUNT(*) FROM terms WHERE chapter_id = ?", (chapter_id,)
    ).fetchone()[0]
    terms = [
        dict(entry, id=f"{chapter_id}-{existing + n:03d}", chapter_id=chapter_id)
        for n, entry in enumerate(entries, 1)
    ]
    inserted = insert_terms(conn, terms, start=existing)
    conn.commit()
    conn.close()
    logger.info("Imported %d terms from %s into %s", inserted, file_path, chapter_id)
    return {"filename": Path(file_path).name, "chapter_id": chapter_id, "title": title, "count": inserted}
