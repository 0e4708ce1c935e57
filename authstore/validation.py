"""Identifier and identity validation."""
import re
from typing import TYPE_CHECKING

from authstore.errors import EmptyKeyError, InvalidFieldError, InvalidFormatError, KeyTooLongError

if TYPE_CHECKING:
    from authstore.identity import Identity

MAX_IDENTIFIER_LENGTH = 256
MIN_BUTTON_RESPONSE = 0
MAX_BUTTON_RESPONSE = 3

# URL-safe and standard base64 alphabets plus '.'; ASCII only.
_IDENTIFIER_PATTERN = re.compile(r"[A-Za-z0-9+/=\-_.]+")


def validate_identifier(value: str) -> None:
    """
    Check an identity key before it is used in a storage operation.

    Rules are checked in order and the first failure wins:
    empty, longer than MAX_IDENTIFIER_LENGTH code points, then any character
    outside ``[A-Za-z0-9+/=-_.]``.

    Args:
        value: The identifier to check

    Raises:
        EmptyKeyError: If the value is empty
        KeyTooLongError: If the value is longer than 256 characters
        InvalidFormatError: If the value is not a str or contains a
            character outside the allowed alphabet
    """
    if not isinstance(value, str):
        raise InvalidFormatError()

    if value == "":
        raise EmptyKeyError()

    if len(value) > MAX_IDENTIFIER_LENGTH:
        raise KeyTooLongError()

    if _IDENTIFIER_PATTERN.fullmatch(value) is None:
        raise InvalidFormatError()


def is_valid_identifier(value: str) -> bool:
    """Return True if ``value`` passes validate_identifier."""
    try:
        validate_identifier(value)
    except (EmptyKeyError, KeyTooLongError, InvalidFormatError):
        return False
    return True


def validate_identity(identity: "Identity") -> None:
    """
    Check an identity before it is written.

    The primary key goes through validate_identifier. UnlockKey and
    VerifyKey must be non-empty and ButtonResponse must lie in 0-3.
    Error messages never include the offending values.

    Raises:
        InvalidIdentifierError: If primary_id fails validation
        InvalidFieldError: If a key is empty or button_response is out of range
    """
    validate_identifier(identity.primary_id)

    if not identity.unlock_key:
        raise InvalidFieldError("unlock key cannot be empty")
    if not identity.verify_key:
        raise InvalidFieldError("verify key cannot be empty")

    button_response = identity.button_response
    if isinstance(button_response, bool) or not isinstance(button_response, int):
        raise InvalidFieldError("button response must be an integer")
    if not MIN_BUTTON_RESPONSE <= button_response <= MAX_BUTTON_RESPONSE:
        raise InvalidFieldError("button response must be between 0 and 3")
