"""Error taxonomy for the identity store.

Every failure the store reports is an ``AuthStoreError`` carrying one of the
``ErrorKind`` values below. Callers can either catch the concrete exception
classes or switch on ``err.kind``.
"""
from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds."""

    EMPTY_KEY = "empty_key"
    KEY_TOO_LONG = "key_too_long"
    INVALID_FORMAT = "invalid_format"
    INVALID_FIELD = "invalid_field"
    NIL_INPUT = "nil_input"
    NOT_FOUND = "not_found"
    STORAGE = "storage"
    CANCELLED = "cancelled"
    DEADLINE_EXCEEDED = "deadline_exceeded"
    DESTROYED = "destroyed"


class AuthStoreError(Exception):
    """Base class for all identity store errors."""

    kind: ErrorKind
    default_message: str = "identity store error"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class InvalidIdentifierError(AuthStoreError, ValueError):
    """An identifier failed validation. Raised before any I/O."""

    default_message = "identity key is invalid"


class EmptyKeyError(InvalidIdentifierError):
    kind = ErrorKind.EMPTY_KEY
    default_message = "identity key cannot be empty"


class KeyTooLongError(InvalidIdentifierError):
    kind = ErrorKind.KEY_TOO_LONG
    default_message = "identity key exceeds maximum length of 256 characters"


class InvalidFormatError(InvalidIdentifierError):
    kind = ErrorKind.INVALID_FORMAT
    default_message = "identity key contains invalid characters"


class InvalidFieldError(AuthStoreError, ValueError):
    """A required identity field is empty or a value is out of range."""

    kind = ErrorKind.INVALID_FIELD
    default_message = "identity field is invalid"


class NilInputError(AuthStoreError):
    kind = ErrorKind.NIL_INPUT
    default_message = "identity cannot be None"


class NotFoundError(AuthStoreError):
    kind = ErrorKind.NOT_FOUND
    default_message = "identity not found"


class StorageError(AuthStoreError):
    """
    Wraps any failure below the store API.

    The message names the operation and the class of the underlying error,
    never the values involved. The original exception is available as
    ``cause`` (and as ``__cause__`` when raised with ``from``).
    """

    kind = ErrorKind.STORAGE

    def __init__(self, operation: str, cause: BaseException | None = None) -> None:
        self.operation = operation
        self.cause = cause
        detail = f": {type(cause).__name__}" if cause is not None else ""
        super().__init__(f"storage operation '{operation}' failed{detail}")


class OperationCancelledError(AuthStoreError):
    kind = ErrorKind.CANCELLED
    default_message = "operation cancelled"


class DeadlineExceededError(AuthStoreError):
    kind = ErrorKind.DEADLINE_EXCEEDED
    default_message = "operation deadline exceeded"


class DestroyedError(AuthStoreError):
    kind = ErrorKind.DESTROYED
    default_message = "secure identity wrapper has been destroyed"
