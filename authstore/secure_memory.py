"""
Best-effort clearing of sensitive material held in memory.

Sensitive identity fields are kept in ``SecretString`` objects, which own a
mutable ``bytearray``. ``wipe`` zeroes such a buffer in place through
``ctypes.memset``, writing to the buffer's own address rather than rebinding
a name, so the bytes themselves are overwritten.

Known limitation: this only clears the buffer instance it is given. Python
``str`` objects are immutable, and any string produced earlier from a secret
(by ``SecretString.reveal()``, by the ORM row, by the database driver, by
logging or serialization) is a separate copy that ``wipe`` cannot reach. Those
copies are released whenever the interpreter frees them. Nothing here
guarantees that every historical copy of a key has been erased.
"""
import ctypes
import hmac
import secrets
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from authstore.identity import Identity


def _writable_view(buffer: bytearray | memoryview) -> memoryview:
    if isinstance(buffer, bytearray):
        return memoryview(buffer)
    if isinstance(buffer, memoryview) and not buffer.readonly:
        return buffer.cast("B")
    raise TypeError(f"cannot wipe immutable buffer of type {type(buffer).__name__}")


def wipe(buffer: bytearray | memoryview) -> None:
    """
    Overwrite every byte of a mutable buffer with zeros.

    Args:
        buffer: A bytearray or a writable, C-contiguous memoryview

    Raises:
        TypeError: If the buffer is immutable (bytes, str, read-only view)
    """
    view = _writable_view(buffer)
    size = view.nbytes
    if size == 0:
        view.release()
        return

    target = (ctypes.c_char * size).from_buffer(view)
    try:
        ctypes.memset(ctypes.addressof(target), 0, size)
    finally:
        # The ctypes array holds an export of the buffer; drop it so the
        # bytearray can be resized again by the caller.
        del target
        view.release()


def scramble(buffer: bytearray | memoryview) -> None:
    """Overwrite a buffer with random bytes, then zero it."""
    view = _writable_view(buffer)
    try:
        view[:] = secrets.token_bytes(view.nbytes)
    finally:
        view.release()
    wipe(buffer)


class SecretString:
    """
    A string value held in an owned, mutable buffer.

    Use ``reveal()`` to read the value as ``str`` at the API boundary and
    ``wipe()`` to zero the buffer once the value is no longer needed.
    """

    __slots__ = ("_buffer",)

    def __init__(self, value: str | bytes | bytearray = "") -> None:
        if isinstance(value, str):
            self._buffer = bytearray(value.encode("utf-8"))
        else:
            self._buffer = bytearray(value)

    def reveal(self) -> str:
        """Return the value as a new str."""
        return self._buffer.decode("utf-8")

    def wipe(self) -> None:
        """Zero the buffer and reset it to empty."""
        wipe(self._buffer)
        self._buffer.clear()

    def copy(self) -> "SecretString":
        return SecretString(self._buffer)

    def __len__(self) -> int:
        return len(self._buffer)

    def __bool__(self) -> bool:
        return len(self._buffer) > 0

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SecretString):
            return hmac.compare_digest(bytes(self._buffer), bytes(other._buffer))
        if isinstance(other, str):
            return hmac.compare_digest(bytes(self._buffer), other.encode("utf-8"))
        return NotImplemented

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return "SecretString('***')" if self._buffer else "SecretString('')"


def wipe_identity(identity: "Identity | None") -> None:
    """
    Wipe every sensitive field of an identity and reset it to defaults.

    Fields cleared:
    - primary_id, unlock_key, verify_key become ""
    - previous_id, rotated_to_id become None
    - flags become False and button_response 0

    Usage:
        identity = await store.find(primary_id)
        try:
            ...
        finally:
            wipe_identity(identity)
    """
    if identity is None:
        return

    for secret in identity.secrets():
        secret.wipe()

    identity.sole_auth_flag = False
    identity.hard_lock_flag = False
    identity.disabled_flag = False
    identity.button_response = 0
