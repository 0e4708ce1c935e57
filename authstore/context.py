"""Cancellation and deadline signals for store operations."""
import asyncio
import logging
import time
from collections.abc import Awaitable
from typing import TypeVar

from authstore.errors import (
    AuthStoreError,
    DeadlineExceededError,
    OperationCancelledError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class OperationContext:
    """
    A cancellation signal with an optional deadline.

    Deadlines are absolute values on the ``time.monotonic()`` clock.
    ``cancel()`` must be called from the event loop that runs the operation.

    Example:
        ctx = OperationContext.with_timeout(2.0)
        identity = await store.find_with_context(ctx, primary_id)
    """

    def __init__(self, deadline: float | None = None) -> None:
        self._deadline = deadline
        self._cancel_event = asyncio.Event()

    @classmethod
    def background(cls) -> "OperationContext":
        """A context with no deadline. Nothing cancels it unless cancel() is called."""
        return cls()

    @classmethod
    def with_timeout(cls, seconds: float) -> "OperationContext":
        return cls(deadline=time.monotonic() + seconds)

    @classmethod
    def with_deadline(cls, deadline: float) -> "OperationContext":
        return cls(deadline=deadline)

    @property
    def deadline(self) -> float | None:
        return self._deadline

    @property
    def cancelled(self) -> bool:
        return self._cancel_event.is_set()

    @property
    def expired(self) -> bool:
        return self._deadline is not None and time.monotonic() >= self._deadline

    @property
    def done(self) -> bool:
        return self.cancelled or self.expired

    def cancel(self) -> None:
        self._cancel_event.set()

    def remaining(self) -> float | None:
        """Seconds left before the deadline, or None if there is none."""
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - time.monotonic())

    def error(self) -> AuthStoreError | None:
        """The error a finished context reports, or None while it is live."""
        if self.cancelled:
            return OperationCancelledError()
        if self.expired:
            return DeadlineExceededError()
        return None

    def check(self) -> None:
        """
        Raise if the context is already finished.

        Raises:
            OperationCancelledError: If cancel() has been called
            DeadlineExceededError: If the deadline has passed
        """
        err = self.error()
        if err is not None:
            raise err

    async def run(self, awaitable: Awaitable[T]) -> T:
        """
        Await ``awaitable`` unless the context finishes first.

        If the context is cancelled or its deadline passes while the
        awaitable is pending, the underlying task is cancelled and awaited
        so it can roll back, then the context's error is raised.

        Raises:
            OperationCancelledError: If the context was cancelled
            DeadlineExceededError: If the deadline passed
        """
        task = asyncio.ensure_future(awaitable)
        if self.done:
            task.cancel()
            await _drain(task)
            self.check()

        waiter = asyncio.ensure_future(self._cancel_event.wait())
        try:
            done, _ = await asyncio.wait(
                {task, waiter},
                timeout=self.remaining(),
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            waiter.cancel()
            if not task.done():
                task.cancel()
                await _drain(task)

        if task in done:
            return task.result()

        err = self.error() or DeadlineExceededError()
        raise err


async def _drain(task: "asyncio.Future[T]") -> None:
    # Let a cancelled task finish its cleanup. Its outcome is discarded
    # because the caller reports the cancellation instead.
    try:
        await task
    except asyncio.CancelledError:
        pass
    except AuthStoreError as err:
        logger.debug("Discarded %s from cancelled operation", type(err).__name__)
