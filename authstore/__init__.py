"""Persistence for SQRL authentication identities."""
import logging

from authstore.context import OperationContext
from authstore.errors import (
    AuthStoreError,
    DeadlineExceededError,
    DestroyedError,
    EmptyKeyError,
    ErrorKind,
    InvalidFieldError,
    InvalidFormatError,
    InvalidIdentifierError,
    KeyTooLongError,
    NilInputError,
    NotFoundError,
    OperationCancelledError,
    StorageError,
)
from authstore.identity import Identity
from authstore.interfaces import IdentityStore
from authstore.secure_identity import SecureIdentityWrapper
from authstore.secure_memory import SecretString, scramble, wipe, wipe_identity
from authstore.store import AuthStore
from authstore.validation import (
    MAX_IDENTIFIER_LENGTH,
    is_valid_identifier,
    validate_identifier,
    validate_identity,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "MAX_IDENTIFIER_LENGTH",
    "AuthStore",
    "AuthStoreError",
    "DeadlineExceededError",
    "DestroyedError",
    "EmptyKeyError",
    "ErrorKind",
    "Identity",
    "IdentityStore",
    "InvalidFieldError",
    "InvalidFormatError",
    "InvalidIdentifierError",
    "KeyTooLongError",
    "NilInputError",
    "NotFoundError",
    "OperationCancelledError",
    "OperationContext",
    "SecretString",
    "SecureIdentityWrapper",
    "StorageError",
    "is_valid_identifier",
    "scramble",
    "validate_identifier",
    "validate_identity",
    "wipe",
    "wipe_identity",
]
