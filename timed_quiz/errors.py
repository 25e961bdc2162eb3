"""
errors.py

Exception types raised by the quiz core.
The controller recovers from storage and snapshot problems locally;
only caller mistakes (no session, finished session, bad answer) propagate.
"""


class QuizError(Exception):
    """Base class for every error raised by the quiz core."""


class SourceUnavailableError(QuizError):
    """The question document could not be obtained or parsed."""


class StorageUnavailableError(QuizError):
    """A key-value slot could not be read or written."""


class NoActiveSessionError(QuizError):
    """An operation needs a loaded session but none exists."""


class SessionFinishedError(QuizError):
    """The session was already scored; only read-only operations remain."""


class InvalidAnswerError(QuizError, ValueError):
    """The chosen presentation index does not exist for the current question."""
