"""Scoped ownership of a fetched identity."""
from types import TracebackType

from authstore.errors import DestroyedError
from authstore.identity import Identity
from authstore.secure_memory import wipe_identity


class SecureIdentityWrapper:
    """
    Owns an Identity and wipes it when destroyed.

    The caller must make sure destroy() runs on every exit path. Using the
    wrapper as a context manager does that:

        with await store.find_secure(primary_id) as wrapper:
            identity = wrapper.get_identity()
            ...
    """

    __slots__ = ("_identity", "_destroyed")

    def __init__(self, identity: Identity) -> None:
        self._identity: Identity | None = identity
        self._destroyed = False

    @property
    def is_valid(self) -> bool:
        """True until destroy() has run."""
        return not self._destroyed and self._identity is not None

    def get_identity(self) -> Identity:
        """
        Return the wrapped identity.

        Raises:
            DestroyedError: If destroy() has already been called
        """
        identity = self._identity
        if self._destroyed or identity is None:
            raise DestroyedError()
        return identity

    def destroy(self) -> None:
        """Wipe the identity and invalidate the wrapper. Safe to call twice."""
        if self._destroyed:
            return

        wipe_identity(self._identity)
        self._identity = None
        self._destroyed = True

    def __enter__(self) -> "SecureIdentityWrapper":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.destroy()

    def __repr__(self) -> str:
        state = "valid" if self.is_valid else "destroyed"
        return f"<SecureIdentityWrapper {state}>"
