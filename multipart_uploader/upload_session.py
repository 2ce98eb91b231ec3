"""Upload session lifecycle for one file.

This module provides the UploadSession class, which plans a file into chunks,
hands them to a transport, and tracks per-chunk progress and completion
across pause, resume and abort.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Mapping
from contextvars import ContextVar
from dataclasses import replace
from typing import Any

from multipart_uploader.cancellation import CancelToken
from multipart_uploader.chunk_planner import (
    initial_states,
    plan_chunks,
    resolve_use_multipart,
)
from multipart_uploader.config import UploaderOptions
from multipart_uploader.exceptions import (
    CancelReason,
    SessionClosedError,
    UploadCancelled,
)
from multipart_uploader.models import (
    ChunkDescriptor,
    ChunkState,
    ProgressEvent,
    UploadPart,
    UploadState,
)
from multipart_uploader.progress import ProgressTracker
from multipart_uploader.sampled_logger import make_sampled_logger

logger = logging.getLogger(__name__)

Operation = Callable[..., Awaitable[Any]]

# Token of the attempt whose transport call is running in the current context.
_attempt_token: ContextVar[CancelToken | None] = ContextVar(
    "attempt_token", default=None
)


class UploadSession:
    """Coordinates the upload of one file through a transport.

    At most one attempt is current at a time. Each attempt is bound to its
    own cancel token; pausing, resuming and aborting cancel the current token
    and install a fresh one, so a superseded attempt can never report success
    or failure.

    Cancellations surface through the transport's failure path as
    ``UploadCancelled`` and are never passed to ``on_error``.
    """

    def __init__(self, options: UploaderOptions | None = None, **kwargs: Any):
        """Initialize the session and plan the file's chunks.

        Args:
            options: Validated options. Mutually exclusive with kwargs.
            **kwargs: Fields of ``UploaderOptions``.

        Raises:
            InvalidConfigurationError: If options are missing or invalid, or
                the multipart decision or chunk size cannot be evaluated.
        """
        if options is None:
            options = UploaderOptions.create(**kwargs)
        elif kwargs:
            raise TypeError("Pass either an UploaderOptions or keyword options")

        self._options = options
        self._file = options.file
        self._transport = options.transport

        self._state = UploadState.IDLE
        self._cancel_token = CancelToken()
        self._aborting = False
        self._tasks: set[asyncio.Task] = set()
        self._unhandled_error: BaseException | None = None

        self._uses_multipart = resolve_use_multipart(
            options.should_use_multipart, self._file
        )
        self._chunks = plan_chunks(
            self._file,
            use_multipart=self._uses_multipart,
            get_chunk_size=options.get_chunk_size,
            progress_hook=self._make_progress_hook,
            complete_hook=self._make_complete_hook,
        )
        self._chunk_state = initial_states(self._chunks)
        self._progress = ProgressTracker(self._chunk_state, self._file.size)
        self._log_part = make_sampled_logger(
            "Completed part %d/%d of %r",
            log_interval=options.part_log_interval,
            target_logger=logger,
        )

        logger.info(
            f"UploadSession created for {self._file!r}: "
            f"{len(self._chunks)} chunk(s), multipart={self._uses_multipart}"
        )

    @property
    def state(self) -> UploadState:
        """Current lifecycle state."""
        return self._state

    @property
    def uses_multipart(self) -> bool:
        """Whether the file was split into multiple parts."""
        return self._uses_multipart

    @property
    def chunks(self) -> list[ChunkDescriptor]:
        """The descriptor list handed to the transport."""
        return self._chunks

    @property
    def chunk_state(self) -> tuple[ChunkState, ...]:
        """Snapshot copy of per-chunk state."""
        return tuple(replace(state) for state in self._chunk_state)

    @property
    def total_bytes(self) -> int:
        """Size of the file being uploaded."""
        return self._progress.total_bytes

    @property
    def uploaded_bytes(self) -> int:
        """Bytes uploaded so far, summed across chunks."""
        return self._progress.total_uploaded

    def start(self) -> None:
        """Start the upload, or resume it if it was started before.

        Must be called from a running event loop. The attempt runs as a
        background task; with the default ``on_error`` a transport failure is
        only re-raised to a caller that awaits ``wait()``. Callers that never
        await ``wait()`` should pass their own ``on_error``.

        Raises:
            SessionClosedError: If the session has finished or is aborting.
            RuntimeError: If there is no running event loop. The session is
                left unchanged.
        """
        if self._state.is_terminal or self._aborting:
            raise SessionClosedError(
                f"Cannot start upload of {self._file!r} in state {self._state.value}"
            )
        loop = asyncio.get_running_loop()

        if self._state is UploadState.IDLE:
            logger.info(f"Starting upload of {self._file!r}")
            self._launch(loop, self._transport.upload_file)
        else:
            if not self._cancel_token.cancelled:
                self._cancel_token.cancel(CancelReason.PAUSING)
            self._cancel_token = CancelToken()
            logger.info(
                f"Resuming upload of {self._file!r} at "
                f"{self.uploaded_bytes}/{self.total_bytes} bytes"
            )
            self._launch(loop, self._transport.resume_upload_file)

        self._state = UploadState.ACTIVE

    def pause(self) -> None:
        """Suspend the in-flight attempt. No-op unless the upload is active."""
        if self._state is not UploadState.ACTIVE:
            return
        self._cancel_token.cancel(CancelReason.PAUSING)
        # This session may be resumed later, so it needs a live token.
        self._cancel_token = CancelToken()
        self._state = UploadState.PAUSED
        logger.info(f"Paused upload of {self._file!r}")

    def abort(self, really: bool = False) -> None:
        """Stop the upload.

        Args:
            really: Also ask the transport to terminate the remote upload.
                Without it, this is the same as ``pause``.

        Raises:
            RuntimeError: If ``really`` is set and there is no running event
                loop. The session is left unchanged.
        """
        if not really:
            self.pause()
            return
        if self._state.is_terminal or self._aborting:
            return
        loop = asyncio.get_running_loop()

        self._cancel_token.cancel(CancelReason.ABORTED)
        self._cancel_token = CancelToken()
        if self._state is UploadState.ACTIVE:
            self._state = UploadState.PAUSED
        self._aborting = True
        logger.info(f"Aborting upload of {self._file!r}")
        self._track(loop.create_task(self._abort_remote()))

    async def wait(self) -> None:
        """Wait until no upload attempt or remote abort is in flight.

        Raises:
            Exception: Whatever ``on_error`` or ``on_success`` raised, the
                default ``on_error`` re-raising the transport failure.
        """
        while self._tasks:
            await asyncio.wait(list(self._tasks))
        if self._unhandled_error is not None:
            error, self._unhandled_error = self._unhandled_error, None
            raise error

    def _track(self, task: asyncio.Task) -> None:
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    def _on_task_done(self, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None and self._unhandled_error is None:
            self._unhandled_error = error

    def _launch(self, loop: asyncio.AbstractEventLoop, operation: Operation) -> None:
        task = loop.create_task(self._run_attempt(operation, self._cancel_token))
        self._track(task)

    async def _run_attempt(self, operation: Operation, token: CancelToken) -> None:
        """Run one transport operation and settle the session with its outcome."""
        _attempt_token.set(token)
        try:
            result = await token.guard(operation(self._file, self._chunks, token))
        except UploadCancelled as exc:
            logger.debug(
                f"Upload attempt for {self._file!r} cancelled: {exc.reason.name}"
            )
            return
        except Exception as exc:
            if token is not self._cancel_token:
                logger.debug(f"Dropping failure from superseded attempt: {exc!r}")
                return
            self._fail(exc)
            return

        if token is not self._cancel_token:
            logger.debug(f"Dropping result from superseded attempt for {self._file!r}")
            return
        self._succeed(result)

    def _succeed(self, result: Any) -> None:
        if self._state.is_terminal:
            return
        self._state = UploadState.SUCCESS
        logger.info(f"Upload complete for {self._file!r}: {self.total_bytes} bytes")
        self._options.on_success(result)

    def _fail(self, error: Exception) -> None:
        if self._state.is_terminal:
            return
        self._state = UploadState.FAILED
        logger.warning(
            f"Upload failed for {self._file!r} at "
            f"{self.uploaded_bytes}/{self.total_bytes} bytes: {error}"
        )
        self._options.on_error(error)

    async def _abort_remote(self) -> None:
        try:
            await self._transport.abort_file_upload(self._file)
        except Exception as exc:
            self._options.log(exc)
        finally:
            self._aborting = False
            self._state = UploadState.ABORTED
            logger.info(f"Upload of {self._file!r} aborted")

    @staticmethod
    def _from_cancelled_attempt() -> bool:
        token = _attempt_token.get()
        return token is not None and token.cancelled

    def _make_progress_hook(
        self, index: int
    ) -> Callable[[ProgressEvent | Mapping[str, Any]], None]:
        def on_progress(event: ProgressEvent | Mapping[str, Any]) -> None:
            if self._from_cancelled_attempt():
                logger.debug(f"Dropping progress for chunk {index} after cancel")
                return
            total_uploaded = self._progress.record(index, event)
            if total_uploaded is None:
                return
            self._options.on_progress(total_uploaded, self._progress.total_bytes)

        return on_progress

    def _make_complete_hook(self, index: int) -> Callable[[str], None]:
        def on_complete(etag: str) -> None:
            if self._from_cancelled_attempt():
                logger.debug(f"Dropping completion of chunk {index} after cancel")
                return
            chunk = self._chunks[index]
            if not self._progress.complete(index, etag, chunk.size):
                return
            chunk.release()
            self._log_part(
                self._progress.completed_parts, len(self._chunks), self._file
            )

            part: UploadPart = {"PartNumber": index + 1, "ETag": etag}
            self._options.on_part_complete(part)
            self._options.on_progress(
                self._progress.total_uploaded, self._progress.total_bytes
            )

        return on_complete

    def __repr__(self) -> str:
        return (
            f"UploadSession(file={self._file!r}, state={self._state.value}, "
            f"chunks={len(self._chunks)})"
        )
