"""Custom exceptions for tasktab operations.

This module defines a hierarchy of exceptions for the different failure
scenarios of the state engine, enabling graceful error handling and
specific user-facing messages.
"""


class TaskTabError(Exception):
    """Base exception for all tasktab errors."""


class ValidationRejection(TaskTabError):
    """Raised when user input is rejected (empty text, duplicate list, bad URL).

    The operation that raised it did not mutate state or request a save.
    """


class PersistenceFailure(TaskTabError):
    """Raised when a store cannot be read or written."""


class StoreUnavailable(PersistenceFailure):
    """Raised when a store cannot be used at all (missing backend, bad path)."""


class ClassificationFailure(TaskTabError):
    """Raised when an image cannot be fetched or sampled for classification."""


class ConfigError(TaskTabError):
    """Raised when configuration is invalid or cannot be loaded."""
