"""Abstract boundary for the transport that performs the actual upload.

This module defines what an upload session expects from the component that
talks to the remote store. Concrete transports own networking, retries,
timeouts and the creation and completion of remote multipart sessions.
"""

from abc import ABC, abstractmethod
from typing import Any

from multipart_uploader.cancellation import CancelToken
from multipart_uploader.file_handle import FileHandle
from multipart_uploader.models import ChunkDescriptor


class Transport(ABC):
    """Abstract base class for upload transports.

    Implementations must, while an operation runs:

    - call ``chunk.on_progress`` with absolute byte counts for the chunk;
    - call ``chunk.on_complete(etag)`` once a chunk is stored remotely;
    - skip chunks whose descriptor has been released;
    - observe ``cancel_token`` and stop emitting events once it is cancelled,
      ideally by raising ``cancel_token.raise_if_cancelled()``.

    Any exception other than ``UploadCancelled`` is treated by the session
    as a genuine, terminal failure.
    """

    @abstractmethod
    async def upload_file(
        self,
        file: FileHandle,
        chunks: list[ChunkDescriptor],
        cancel_token: CancelToken,
    ) -> Any:
        """Begin a fresh upload of every chunk.

        Args:
            file: The file being uploaded.
            chunks: Ordered chunk descriptors, shared with the session.
            cancel_token: Token for this attempt.

        Returns:
            Transport-specific result passed to ``on_success``.
        """

    @abstractmethod
    async def resume_upload_file(
        self,
        file: FileHandle,
        chunks: list[ChunkDescriptor],
        cancel_token: CancelToken,
    ) -> Any:
        """Resume a previously started upload with the same chunk list.

        Args:
            file: The file being uploaded.
            chunks: The same descriptor list passed to ``upload_file``.
            cancel_token: Fresh token for this attempt.

        Returns:
            Transport-specific result passed to ``on_success``.
        """

    @abstractmethod
    async def abort_file_upload(self, file: FileHandle) -> None:
        """Release server-side resources for an in-progress upload.

        Best effort; failures are logged by the session, never surfaced.

        Args:
            file: The file whose remote upload should be terminated.
        """
