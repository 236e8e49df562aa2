"""Exceptions raised by the tutor core."""


class TutorError(Exception):
    """Base class for every error the tutor reports to its caller."""


class InvalidRatingError(TutorError, ValueError):
    def __init__(self, rating):
        super().__init__(f"Rating must be an integer from 0 to 5, got {rating!r}")
        self.rating = rating


class EmptyPoolError(TutorError, ValueError):
    def __init__(self, what: str = "session"):
        super().__init__(f"Cannot start a {what} with no terms")


class NothingDueError(TutorError):
    """A due-only session found no eligible terms."""

    def __init__(self, pool_size: int):
        super().__init__(f"Nothing is due among {pool_size} terms")
        self.pool_size = pool_size


class SessionStateError(TutorError, RuntimeError):
    pass


class ImportFormatError(TutorError, ValueError):
    pass
