"""Per-attempt cancellation tokens.

Each transport invocation receives a fresh ``CancelToken``. Cancelling the
token is the only way an in-flight attempt is suspended; a superseded token
is never reused.
"""

import asyncio
import logging
from collections.abc import Awaitable
from typing import TypeVar

from multipart_uploader.exceptions import (
    CancelReason,
    TransportError,
    UploadCancelled,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _consume_outcome(task: asyncio.Future) -> None:
    """Retrieve the outcome of an abandoned operation so it is not reported."""
    if task.cancelled():
        return
    exc = task.exception()
    if exc is not None and not isinstance(exc, UploadCancelled):
        logger.debug("Cancelled operation finished with %r", exc)


class CancelToken:
    """Cancellation context for one upload attempt."""

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._reason: CancelReason | None = None

    @property
    def cancelled(self) -> bool:
        """Whether ``cancel`` has been called."""
        return self._reason is not None

    @property
    def reason(self) -> CancelReason | None:
        """The reason passed to the first ``cancel`` call."""
        return self._reason

    def cancel(self, reason: CancelReason = CancelReason.PAUSING) -> None:
        """Signal the attempt to stop. Only the first reason is kept.

        Args:
            reason: Why the attempt is being cancelled.
        """
        if self._reason is not None:
            return
        self._reason = reason
        self._event.set()
        logger.debug("Cancel token %x cancelled: %s", id(self), reason.name)

    def raise_if_cancelled(self) -> None:
        """Raise ``UploadCancelled`` if the token has been cancelled."""
        if self._reason is not None:
            raise UploadCancelled(self._reason)

    async def wait(self) -> CancelReason:
        """Block until the token is cancelled and return the reason."""
        await self._event.wait()
        assert self._reason is not None
        return self._reason

    async def guard(self, awaitable: Awaitable[T]) -> T:
        """Await an operation unless the token is cancelled first.

        If the token wins, the operation task is cancelled and the failure is
        raised as ``UploadCancelled`` carrying the token's reason, the same
        way a cooperative transport would report it.

        Args:
            awaitable: The transport operation.

        Returns:
            The operation's result.

        Raises:
            UploadCancelled: If the token is cancelled before the operation
                settles.
            TransportError: If the operation ends cancelled although the token
                was never cancelled.
        """
        if self._reason is not None:
            if asyncio.iscoroutine(awaitable):
                awaitable.close()
            raise UploadCancelled(self._reason)

        operation = asyncio.ensure_future(awaitable)
        waiter = asyncio.ensure_future(self._event.wait())
        try:
            done, _ = await asyncio.wait(
                {operation, waiter}, return_when=asyncio.FIRST_COMPLETED
            )
        except asyncio.CancelledError:
            operation.cancel()
            waiter.cancel()
            raise

        if operation in done:
            waiter.cancel()
            if operation.cancelled():
                if self._reason is not None:
                    raise UploadCancelled(self._reason)
                raise TransportError(
                    "Transport operation was cancelled without a cancel request"
                )
            return operation.result()

        operation.cancel()
        operation.add_done_callback(_consume_outcome)
        assert self._reason is not None
        raise UploadCancelled(self._reason)
