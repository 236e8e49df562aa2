"""Free-text answer grading with tolerance for naming variants and typos."""
import re

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_PARENTHESIZED = re.compile(r"\(([^)]+)\)")

FUZZY_TOLERANCE = 0.25
# Candidates this short (acronyms mostly) must match exactly.
MIN_FUZZY_LENGTH = 3


def normalize(text: str) -> str:
    return _NON_ALNUM.sub("", text.lower())


def levenshtein_distance(s1: str, s2: str) -> int:
    """Edit distance with unit cost for insert, delete and substitute."""
    if len(s1) < len(s2):
        return levenshtein_distance(s2, s1)

    if len(s2) == 0:
        return len(s1)

    previous_row = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        current_row = [i + 1]
        for j, c2 in enumerate(s2):
            insertions = previous_row[j + 1] + 1
            deletions = current_row[j] + 1
            substitutions = previous_row[j] + (c1 != c2)
            current_row.append(min(insertions, deletions, substitutions))
        previous_row = current_row

    return previous_row[-1]


def answer_candidates(canonical_term: str) -> list[str]:
    """Normalized spellings accepted for a term.

    "Integrated Development Environment (IDE)" yields the full form, "ide"
    and "integrateddevelopmentenvironment". "Stack / LIFO" also yields each
    side of the slash.
    """
    candidates = [normalize(canonical_term)]
    candidates.extend(normalize(p) for p in _PARENTHESIZED.findall(canonical_term))
    candidates.append(normalize(_PARENTHESIZED.sub("", canonical_term)))
    if "/" in canonical_term:
        candidates.extend(normalize(p) for p in canonical_term.split("/"))

    unique = []
    for cand in candidates:
        if cand and cand not in unique:
            unique.append(cand)
    return unique


def verify_answer(raw_input: str, canonical_term: str) -> bool:
    user = normalize(raw_input)
    if not user:
        return False
    if user == normalize(canonical_term):
        return True

    candidates = answer_candidates(canonical_term)
    if user in candidates:
        return True

    for cand in candidates:
        if len(cand) > MIN_FUZZY_LENGTH:
            allowed = int(len(cand) * FUZZY_TOLERANCE)
            if levenshtein_distance(user, cand) <= allowed:
                return True
    return False
