"""The SQRL identity record handled by the store."""
from authstore.secure_memory import SecretString


def _optional(value: str | None) -> SecretString | None:
    if value is None or value == "":
        return None
    return SecretString(value)


class Identity:
    """
    A user's per-site SQRL credential.

    The primary_id is the user's identity key (a base64url-encoded public
    key) and acts as the record key. Sensitive values are held in
    SecretString buffers so they can be wiped; the properties return plain
    str views of them.

    Optional fields use None as their empty value. Assigning "" to an
    optional field stores None.
    """

    __slots__ = (
        "_primary_id",
        "_unlock_key",
        "_verify_key",
        "_previous_id",
        "_rotated_to_id",
        "sole_auth_flag",
        "hard_lock_flag",
        "disabled_flag",
        "button_response",
    )

    def __init__(
        self,
        primary_id: str,
        unlock_key: str,
        verify_key: str,
        previous_id: str | None = None,
        sole_auth_flag: bool = False,
        hard_lock_flag: bool = False,
        disabled_flag: bool = False,
        rotated_to_id: str | None = None,
        button_response: int = 0,
    ) -> None:
        self._primary_id = SecretString(primary_id)
        self._unlock_key = SecretString(unlock_key)
        self._verify_key = SecretString(verify_key)
        self._previous_id = _optional(previous_id)
        self._rotated_to_id = _optional(rotated_to_id)
        self.sole_auth_flag = sole_auth_flag
        self.hard_lock_flag = hard_lock_flag
        self.disabled_flag = disabled_flag
        self.button_response = button_response

    @property
    def primary_id(self) -> str:
        return self._primary_id.reveal()

    @property
    def unlock_key(self) -> str:
        return self._unlock_key.reveal()

    @unlock_key.setter
    def unlock_key(self, value: str) -> None:
        self._unlock_key.wipe()
        self._unlock_key = SecretString(value)

    @property
    def verify_key(self) -> str:
        return self._verify_key.reveal()

    @verify_key.setter
    def verify_key(self, value: str) -> None:
        self._verify_key.wipe()
        self._verify_key = SecretString(value)

    @property
    def previous_id(self) -> str | None:
        if not self._previous_id:
            return None
        return self._previous_id.reveal()

    @previous_id.setter
    def previous_id(self, value: str | None) -> None:
        if self._previous_id is not None:
            self._previous_id.wipe()
        self._previous_id = _optional(value)

    @property
    def rotated_to_id(self) -> str | None:
        if not self._rotated_to_id:
            return None
        return self._rotated_to_id.reveal()

    @rotated_to_id.setter
    def rotated_to_id(self, value: str | None) -> None:
        if self._rotated_to_id is not None:
            self._rotated_to_id.wipe()
        self._rotated_to_id = _optional(value)

    def secrets(self) -> tuple[SecretString, ...]:
        """Return the buffers holding sensitive and critical fields."""
        buffers = [self._primary_id, self._unlock_key, self._verify_key]
        if self._previous_id is not None:
            buffers.append(self._previous_id)
        if self._rotated_to_id is not None:
            buffers.append(self._rotated_to_id)
        return tuple(buffers)

    def copy(self) -> "Identity":
        """Return an independent copy with its own buffers."""
        return Identity(
            primary_id=self.primary_id,
            unlock_key=self.unlock_key,
            verify_key=self.verify_key,
            previous_id=self.previous_id,
            sole_auth_flag=self.sole_auth_flag,
            hard_lock_flag=self.hard_lock_flag,
            disabled_flag=self.disabled_flag,
            rotated_to_id=self.rotated_to_id,
            button_response=self.button_response,
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Identity):
            return NotImplemented
        return (
            self._primary_id == other._primary_id
            and self._unlock_key == other._unlock_key
            and self._verify_key == other._verify_key
            and self.previous_id == other.previous_id
            and self.rotated_to_id == other.rotated_to_id
            and self.sole_auth_flag == other.sole_auth_flag
            and self.hard_lock_flag == other.hard_lock_flag
            and self.disabled_flag == other.disabled_flag
            and self.button_response == other.button_response
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return (
            "Identity(primary_id=***, unlock_key=***, verify_key=***, "
            f"sole_auth_flag={self.sole_auth_flag}, "
            f"hard_lock_flag={self.hard_lock_flag}, "
            f"disabled_flag={self.disabled_flag}, "
            f"button_response={self.button_response})"
        )
