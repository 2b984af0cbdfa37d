from __future__ import annotations


class QuizError(Exception):
    """Base class for every error raised by the quiz core."""


class UnknownGenerator(QuizError, LookupError):
    def __init__(self, key: str):
        super().__init__(f"Generator '{key}' not found")
        self.key = key


class ValidationError(QuizError, ValueError):
    """Quiz, question or generator input is missing required fields or is malformed."""


class NotFound(QuizError, LookupError):
    def __init__(self, what: str, ident: object):
        super().__init__(f"{what} {ident!r} not found")
        self.what = what
        self.ident = ident


class NetworkError(QuizError):
    """Transport/driver failure talking to the persistence layer."""


class SessionStateError(QuizError):
    """A session operation was called in a state or mode that does not allow it."""
