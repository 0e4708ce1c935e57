"""Tests for identity key validation."""
import pytest

from authstore.errors import (
    EmptyKeyError,
    ErrorKind,
    InvalidFieldError,
    InvalidFormatError,
    InvalidIdentifierError,
    KeyTooLongError,
)
from authstore.identity import Identity
from authstore.validation import (
    MAX_IDENTIFIER_LENGTH,
    is_valid_identifier,
    validate_identifier,
    validate_identity,
)
from tests.conftest import generate_primary_id, make_identity


def test_valid_generated_key():
    """Test that a real base64url identity key is accepted."""
    primary_id = generate_primary_id()

    assert len(primary_id) == 43
    validate_identifier(primary_id)
    assert is_valid_identifier(primary_id)


def test_valid_padded_standard_base64():
    """Test a 44-character standard base64 key with padding."""
    validate_identifier("A" * 42 + "+/")
    validate_identifier("q83vEjRWeJASNFZ4kBI0VniQEjRWeJASNFZ4kBI0Vng=")


def test_all_allowed_characters():
    """Test every character of the allowed alphabet."""
    validate_identifier(
        "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789+/=-_."
    )


def test_empty_key():
    with pytest.raises(EmptyKeyError) as exc_info:
        validate_identifier("")

    assert exc_info.value.kind is ErrorKind.EMPTY_KEY


def test_max_length_boundary():
    """Test that exactly 256 characters pass and 257 fail."""
    validate_identifier("a" * MAX_IDENTIFIER_LENGTH)

    with pytest.raises(KeyTooLongError) as exc_info:
        validate_identifier("a" * (MAX_IDENTIFIER_LENGTH + 1))

    assert exc_info.value.kind is ErrorKind.KEY_TOO_LONG


def test_length_counts_code_points():
    """Test that a long non-ASCII key reports length before format."""
    with pytest.raises(KeyTooLongError):
        validate_identifier("\u00e9" * (MAX_IDENTIFIER_LENGTH + 1))

    with pytest.raises(InvalidFormatError):
        validate_identifier("\u00e9" * MAX_IDENTIFIER_LENGTH)


def test_long_key_with_invalid_characters_reports_length():
    """Test that rule order is empty, length, then format."""
    with pytest.raises(KeyTooLongError):
        validate_identifier(" " * (MAX_IDENTIFIER_LENGTH + 1))


@pytest.mark.parametrize("bad_char", [
    " ",          # space
    "\t",         # tab
    "\x00",       # NUL
    "\r",         # carriage return
    "\n",         # linefeed
    "\x0b",       # vertical tab
    "\x7f",       # DEL
    "\u200b",     # zero-width space
    "\u202e",     # right-to-left override
    "\ufeff",     # byte-order mark
    "é",
    "<",
    "'",
    ";",
    "%",
])
def test_invalid_character_in_ten_char_key(bad_char: str):
    """Test that a single disallowed character anywhere is rejected."""
    value = "abcd" + bad_char + "efghi"
    assert len(value) == 10

    with pytest.raises(InvalidFormatError) as exc_info:
        validate_identifier(value)

    assert exc_info.value.kind is ErrorKind.INVALID_FORMAT
    assert not is_valid_identifier(value)


def test_trailing_newline_rejected():
    """Test that a key followed by a newline is not treated as valid."""
    with pytest.raises(InvalidFormatError):
        validate_identifier(generate_primary_id() + "\n")


def test_fullwidth_digits_rejected():
    """Test that Unicode digits and letters outside ASCII are rejected."""
    with pytest.raises(InvalidFormatError):
        validate_identifier("abc\uff11\uff12")
    with pytest.raises(InvalidFormatError):
        validate_identifier("\u0430bc")  # Cyrillic a


def test_non_string_rejected():
    with pytest.raises(InvalidFormatError):
        validate_identifier(None)  # type: ignore[arg-type]
    with pytest.raises(InvalidFormatError):
        validate_identifier(b"abc")  # type: ignore[arg-type]


def test_validation_errors_share_base_class():
    """Test that all validation errors can be caught as one type."""
    for value in ["", "a" * 300, "bad key"]:
        with pytest.raises(InvalidIdentifierError):
            validate_identifier(value)
        with pytest.raises(ValueError):
            validate_identifier(value)


def test_is_valid_identifier():
    assert is_valid_identifier("abc-DEF_123.456")
    assert not is_valid_identifier("")
    assert not is_valid_identifier("a" * 257)
    assert not is_valid_identifier("abc def")


@pytest.mark.parametrize("button_response", [0, 1, 2, 3])
def test_validate_identity_accepts_button_range(button_response: int):
    validate_identity(make_identity(button_response=button_response))


@pytest.mark.parametrize("overrides", [
    {"unlock_key": ""},
    {"verify_key": ""},
    {"button_response": -1},
    {"button_response": 4},
    {"button_response": True},
])
def test_validate_identity_rejects_bad_fields(overrides: dict[str, object]):
    identity = make_identity(**overrides)

    with pytest.raises(InvalidFieldError) as exc_info:
        validate_identity(identity)

    assert exc_info.value.kind is ErrorKind.INVALID_FIELD


def test_validate_identity_checks_primary_id_first():
    """Test that a bad identity key is reported before field problems."""
    with pytest.raises(EmptyKeyError):
        validate_identity(Identity("", "", "V1", button_response=9))
