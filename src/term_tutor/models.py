"""Data classes for the tutor domain model."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, IntEnum
from typing import Optional


@dataclass(frozen=True)
class Chapter:
    id: str
    title: str


@dataclass(frozen=True)
class Term:
    id: str
    chapter_id: str
    term: str
    definition: str
    ai_explanation: Optional[str] = None


class Rating(IntEnum):
    AGAIN = 0
    INCORRECT = 1
    HARD = 2
    PASS = 3
    GOOD = 4
    PERFECT = 5


PASSING_RATING = Rating.PASS


@dataclass(frozen=True)
class ProgressRecord:
    term_id: str
    interval: int
    repetition: int
    ease_factor: float
    next_review_at: datetime


class QuestionKind(str, Enum):
    MULTIPLE_CHOICE = "multiple-choice"
    FREE_TEXT = "free-text"


@dataclass
class Question:
    term: Term
    kind: QuestionKind
    options: list[str] = field(default_factory=list)
