from .cancellation import CancelToken
from .chunk_planner import plan_chunks
from .config import UploaderOptions
from .exceptions import (
    CancelReason,
    ChunkReleasedError,
    InvalidConfigurationError,
    SessionClosedError,
    TransportError,
    UploadCancelled,
    UploaderError,
)
from .file_handle import BytesFileHandle, FileHandle, LocalFileHandle
from .models import ChunkDescriptor, ChunkState, ProgressEvent, UploadPart, UploadState
from .transport import Transport
from .upload_session import UploadSession

__version__ = "0.1.0"

__all__ = [
    "BytesFileHandle",
    "CancelReason",
    "CancelToken",
    "ChunkDescriptor",
    "ChunkReleasedError",
    "ChunkState",
    "FileHandle",
    "InvalidConfigurationError",
    "LocalFileHandle",
    "ProgressEvent",
    "SessionClosedError",
    "Transport",
    "TransportError",
    "UploadCancelled",
    "UploadPart",
    "UploadSession",
    "UploadState",
    "UploaderError",
    "UploaderOptions",
    "plan_chunks",
]
