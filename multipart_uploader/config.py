"""Pydantic model for multipart upload session options."""

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from multipart_uploader.const import PART_LOG_INTERVAL
from multipart_uploader.exceptions import InvalidConfigurationError
from multipart_uploader.file_handle import FileHandle
from multipart_uploader.transport import Transport

logger = logging.getLogger(__name__)


def _ignore(*args: Any) -> None:
    pass


def _reraise(error: BaseException) -> None:
    raise error


def _log_abort_failure(error: BaseException) -> None:
    logger.warning("Failed to abort remote upload: %s", error, exc_info=error)


class UploaderOptions(BaseModel):
    """Configuration options for an upload session.

    Attributes:
        file: the byte source to upload.
        transport: collaborator that performs the actual upload.
        get_chunk_size: desired chunk size for a file, in bytes. None uses
            the smallest size that fits the part count limit.
        should_use_multipart: boolean, or predicate over the file evaluated
            once when the session is created.
        on_progress: called with (bytes_uploaded, total_bytes).
        on_part_complete: called with {"PartNumber", "ETag"} per completed part.
        on_success: called once with the transport's result.
        on_error: called once with a genuine transport failure. Re-raises by
            default.
        log: sink for remote-abort failures.
        part_log_interval: log every Nth completed part.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, extra="forbid")

    file: Any
    transport: Any
    get_chunk_size: Callable[..., Any] | None = None
    should_use_multipart: bool | Callable[..., Any] = False
    on_progress: Callable[..., Any] = _ignore
    on_part_complete: Callable[..., Any] = _ignore
    on_success: Callable[..., Any] = _ignore
    on_error: Callable[..., Any] = _reraise
    log: Callable[..., Any] = _log_abort_failure
    part_log_interval: int = Field(default=PART_LOG_INTERVAL, gt=0)

    @field_validator("file")
    @classmethod
    def _check_file(cls, value: Any) -> Any:
        if not isinstance(value, FileHandle):
            raise ValueError(
                f"file must provide size and slice(start, end), got {type(value)}"
            )
        if not isinstance(value.size, int) or value.size < 0:
            raise ValueError(f"file size must be a non-negative int, got {value.size}")
        return value

    @field_validator("transport")
    @classmethod
    def _check_transport(cls, value: Any) -> Any:
        if not isinstance(value, Transport):
            raise ValueError(f"transport must be a Transport, got {type(value)}")
        return value

    @classmethod
    def create(cls, **kwargs: Any) -> "UploaderOptions":
        """Build options, converting validation errors.

        Raises:
            InvalidConfigurationError: If any option is missing or invalid.
        """
        try:
            return cls(**kwargs)
        except ValidationError as exc:
            raise InvalidConfigurationError([
                f"{'.'.join(str(loc) for loc in error['loc'])}: {error['msg']}"
                for error in exc.errors()
            ]) from exc
