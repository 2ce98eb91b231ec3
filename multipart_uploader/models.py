"""Models used by the multipart uploader."""

from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, TypedDict

from pydantic import BaseModel, ConfigDict, Field

from multipart_uploader.exceptions import ChunkReleasedError


class UploadState(str, Enum):
    """Lifecycle states for an upload session.

    State transitions:
    - IDLE + start() -> ACTIVE
    - ACTIVE + pause() -> PAUSED
    - ACTIVE/PAUSED + start() -> ACTIVE (resume)
    - ACTIVE + transport success -> SUCCESS
    - ACTIVE + transport failure -> FAILED
    - Any non-terminal + abort(really=True) -> ABORTED
    """

    IDLE = "idle"
    ACTIVE = "active"
    PAUSED = "paused"
    SUCCESS = "success"
    ABORTED = "aborted"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Whether the session can no longer be started."""
        return self in (UploadState.SUCCESS, UploadState.ABORTED, UploadState.FAILED)


class UploadPart(TypedDict):
    """Completed part as reported to ``on_part_complete``."""

    PartNumber: int
    ETag: str


class ProgressEvent(BaseModel):
    """Absolute progress of one chunk, as reported by a transport.

    ``loaded`` is the number of bytes of the chunk sent so far in the current
    attempt, not a delta since the previous event.
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    length_computable: bool = Field(alias="lengthComputable")
    loaded: int = Field(ge=0)


@dataclass(eq=False)
class ChunkDescriptor:
    """One planned unit of upload.

    The data accessor is only invoked when a transport is ready to send the
    chunk. Once the chunk is confirmed done the session releases it so the
    descriptor no longer references any file data.
    """

    index: int
    start: int
    end: int
    uses_multipart: bool
    on_progress: Callable[[Any], None]
    on_complete: Callable[[str], None]
    data_accessor: Callable[[], Any] | None = field(default=None, repr=False)

    @property
    def size(self) -> int:
        """Length of the chunk's byte range."""
        return self.end - self.start

    @property
    def released(self) -> bool:
        """Whether the data accessor has been dropped."""
        return self.data_accessor is None

    def get_data(self) -> Any:
        """Return the chunk's byte-range accessor.

        Raises:
            ChunkReleasedError: If the chunk was already uploaded and released.
        """
        if self.data_accessor is None:
            raise ChunkReleasedError(f"Chunk {self.index} has been released")
        return self.data_accessor()

    def release(self) -> None:
        """Drop the reference to the chunk's data."""
        self.data_accessor = None


@dataclass
class ChunkState:
    """Mutable bookkeeping for one chunk."""

    uploaded_bytes: int = 0
    etag: str | None = None
    done: bool = False
