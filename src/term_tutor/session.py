"""Review session queue: sequencing, recycling of missed terms, and time accounting."""
import logging
import random
from collections import Counter
from datetime import datetime, timezone
from enum import Enum
from typing import Callable, Optional, Protocol, Sequence

from term_tutor.errors import EmptyPoolError, NothingDueError, SessionStateError
from term_tutor.models import PASSING_RATING, ProgressRecord, Term
from term_tutor.sm2 import advance, is_due, validate_rating

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ProgressStore(Protocol):
    def load(self) -> dict[str, ProgressRecord]: ...

    def save(self, progress: dict[str, ProgressRecord]) -> None: ...


class StudyTimer(Protocol):
    def add_elapsed(self, seconds: float) -> None: ...


class SessionState(Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETE = "complete"


class StartMode(Enum):
    DUE_ONLY = "due"
    FORCE_ALL = "all"
    RANDOM_SAMPLE = "sample"


class ReviewSession:
    """Runs one interactive review over a queue of terms.

    Terms rated below 3 go back on the end of the queue, so the queue can
    grow while the session runs. ``max_recycles`` caps how many times a
    single term may be requeued; None leaves it unbounded.

    The session is Idle until ``start``, Active while terms remain, and
    Complete once the cursor runs past the last queued term. Elapsed time is
    reported to the timer exactly once, on completion or on ``exit``.
    """

    def __init__(
        self,
        store: ProgressStore,
        timer: StudyTimer,
        clock: Callable[[], datetime] = utc_now,
        rng: Optional[random.Random] = None,
        max_recycles: Optional[int] = None,
    ):
        self.store = store
        self.timer = timer
        self.clock = clock
        self.rng = rng or random.Random()
        self.max_recycles = max_recycles
        self.state = SessionState.IDLE
        self.last_elapsed: Optional[float] = None
        self._queue: list[Term] = []
        self._cursor = 0
        self._progress: dict[str, ProgressRecord] = {}
        self._recycled: Counter = Counter()
        self._started_at: Optional[datetime] = None

    @property
    def current(self) -> Optional[Term]:
        if self.state is not SessionState.ACTIVE:
            return None
        return self._queue[self._cursor]

    @property
    def position(self) -> int:
        return self._cursor + 1

    @property
    def queue_length(self) -> int:
        return len(self._queue)

    @property
    def remaining(self) -> int:
        if self.state is not SessionState.ACTIVE:
            return 0
        return len(self._queue) - self._cursor

    @property
    def queue(self) -> list[Term]:
        return list(self._queue)

    def progress_for(self, term_id: str) -> Optional[ProgressRecord]:
        return self._progress.get(term_id)

    def _select(self, pool: list[Term], mode: StartMode, sample_size: Optional[int], now: datetime) -> list[Term]:
        if mode is StartMode.DUE_ONLY:
            due = [t for t in pool if is_due(self._progress.get(t.id), now)]
            if not due:
                raise NothingDueError(len(pool))
            return due
        if mode is StartMode.FORCE_ALL:
            return list(pool)
        if mode is StartMode.RANDOM_SAMPLE:
            if isinstance(sample_size, bool) or not isinstance(sample_size, int) or sample_size < 1:
                raise ValueError(f"sample_size must be a positive integer, got {sample_size!r}")
            shuffled = list(pool)
            self.rng.shuffle(shuffled)
            return shuffled[:min(sample_size, len(shuffled))]
        raise ValueError(f"Unknown start mode: {mode!r}")

    def start(
        self,
        pool: Sequence[Term],
        mode: StartMode = StartMode.DUE_ONLY,
        sample_size: Optional[int] = None,
    ) -> list[Term]:
        """Load progress, build the queue and enter the Active state.

        Raises:
            SessionStateError: a session is already active.
            EmptyPoolError: pool has no terms.
            NothingDueError: DUE_ONLY and no term in the pool is due.
        """
        if self.state is SessionState.ACTIVE:
            raise SessionStateError("A session is already active; exit it first")
        pool = list(pool)
        if not pool:
            raise EmptyPoolError("session")

        now = self.clock()
        self._progress = dict(self.store.load())
        queue = self._select(pool, mode, sample_size, now)

        self._queue = queue
        self._cursor = 0
        self._recycled = Counter()
        self._started_at = now
        self.last_elapsed = None
        self.state = SessionState.ACTIVE
        logger.info("Started %s session with %d of %d terms", mode.value, len(queue), len(pool))
        return list(queue)

    def _may_recycle(self, term: Term) -> bool:
        if self.max_recycles is None:
            return True
        return self._recycled[term.id] < self.max_recycles

    def rate(self, rating: int) -> ProgressRecord:
        """Record a rating for the current term and move to the next one."""
        if self.state is not SessionState.ACTIVE:
            raise SessionStateError(f"Cannot rate while session is {self.state.value}")
        quality = validate_rating(rating)

        term = self._queue[self._cursor]
        now = self.clock()
        record = advance(self._progress.get(term.id), quality, now, term_id=term.id)
        self._progress[term.id] = record
        self.store.save(dict(self._progress))

        if quality < PASSING_RATING and self._may_recycle(term):
            self._queue.append(term)
            self._recycled[term.id] += 1
            logger.debug("Requeued %s (rating %d)", term.id, quality)

        self._cursor += 1
        if self._cursor >= len(self._queue):
            self.state = SessionState.COMPLETE
            self._finalize(now)
        return record

    def exit(self) -> Optional[float]:
        """Abandon the session, accounting its time if it was still running."""
        if self.state is SessionState.IDLE:
            raise SessionStateError("No session to exit")
        elapsed = None
        if self.state is SessionState.ACTIVE:
            elapsed = self._finalize(self.clock())
        self.state = SessionState.IDLE
        self._queue = []
        self._cursor = 0
        return elapsed

    def _finalize(self, now: datetime) -> float:
        elapsed = max(0.0, (now - self._started_at).total_seconds())
        self.timer.add_elapsed(elapsed)
        self.last_elapsed = elapsed
        logger.info("Session ended after %.0f seconds", elapsed)
        return elapsed
