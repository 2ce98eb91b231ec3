"""Partitioning of a file into upload chunks.

Planning is a pure function of the file size and the caller's options. The
resulting descriptors carry lazy data accessors: no file data is sliced until
a transport asks for a chunk's data.
"""

import logging
import math
from collections.abc import Callable
from typing import Any

from multipart_uploader.const import MAX_NUMBER_OF_PARTS, MIN_PART_SIZE
from multipart_uploader.exceptions import InvalidConfigurationError
from multipart_uploader.file_handle import FileHandle
from multipart_uploader.models import ChunkDescriptor, ChunkState

logger = logging.getLogger(__name__)

HookFactory = Callable[[int], Callable[..., None]]


def _noop_hook(index: int) -> Callable[..., None]:
    return lambda *args, **kwargs: None


def ensure_int(value: Any) -> int:
    """Coerce an integer or a base-10 numeric string to ``int``.

    Raises:
        InvalidConfigurationError: If the value is not numeric.
    """
    if isinstance(value, bool):
        raise InvalidConfigurationError([f"Expected a number, got {value!r}"])
    if isinstance(value, int):
        return value
    if isinstance(value, str):
        try:
            return int(value, 10)
        except ValueError as exc:
            raise InvalidConfigurationError([
                f"Expected a number, got {value!r}"
            ]) from exc
    raise InvalidConfigurationError([f"Expected a number, got {value!r}"])


def default_chunk_size(file: FileHandle) -> int:
    """Smallest chunk size that keeps the file within the part count limit."""
    return math.ceil(file.size / MAX_NUMBER_OF_PARTS)


def resolve_use_multipart(should_use_multipart: Any, file: FileHandle) -> bool:
    """Evaluate the multipart decision once.

    Args:
        should_use_multipart: A boolean, or a predicate taking the file.
        file: The file being planned.

    Raises:
        InvalidConfigurationError: If the predicate raises.
    """
    if not callable(should_use_multipart):
        return bool(should_use_multipart)
    try:
        return bool(should_use_multipart(file))
    except Exception as exc:
        raise InvalidConfigurationError([
            f"should_use_multipart predicate failed for {file!r}: {exc}"
        ]) from exc


def compute_chunk_size(file_size: int, desired_chunk_size: Any) -> int:
    """Clamp the desired chunk size to the multipart API limits.

    Every part except the last must be at least ``MIN_PART_SIZE`` and there
    may be no more than ``MAX_NUMBER_OF_PARTS`` parts.

    Args:
        file_size: Total size of the file in bytes.
        desired_chunk_size: Caller's preferred chunk size.

    Returns:
        The chunk size to plan with.
    """
    min_chunk_size = max(MIN_PART_SIZE, math.ceil(file_size / MAX_NUMBER_OF_PARTS))
    return max(ensure_int(desired_chunk_size), min_chunk_size)


def _make_accessor(file: FileHandle, start: int, end: int) -> Callable[[], Any]:
    return lambda: file.slice(start, end)


def plan_chunks(
    file: FileHandle,
    *,
    use_multipart: bool,
    get_chunk_size: Callable[[FileHandle], Any] | None = None,
    progress_hook: HookFactory | None = None,
    complete_hook: HookFactory | None = None,
) -> list[ChunkDescriptor]:
    """Plan the chunks for a file.

    Args:
        file: The file to upload.
        use_multipart: Whether to split the file into parts.
        get_chunk_size: Desired chunk size for the file; only consulted for
            multipart uploads.
        progress_hook: Builds the progress callback bound to a chunk index.
        complete_hook: Builds the completion callback bound to a chunk index.

    Returns:
        Descriptors ordered by index. A single-part plan (or an empty file)
        always has exactly one descriptor.
    """
    file_size = file.size
    progress_hook = progress_hook or _noop_hook
    complete_hook = complete_hook or _noop_hook

    if not use_multipart:
        return [
            ChunkDescriptor(
                index=0,
                start=0,
                end=file_size,
                uses_multipart=False,
                on_progress=progress_hook(0),
                on_complete=complete_hook(0),
                data_accessor=lambda: file,
            )
        ]

    chunk_size = compute_chunk_size(
        file_size, (get_chunk_size or default_chunk_size)(file)
    )
    chunk_count = max(1, math.ceil(file_size / chunk_size))

    chunks = []
    for index in range(chunk_count):
        start = index * chunk_size
        end = min(file_size, start + chunk_size)
        chunks.append(
            ChunkDescriptor(
                index=index,
                start=start,
                end=end,
                uses_multipart=True,
                on_progress=progress_hook(index),
                on_complete=complete_hook(index),
                data_accessor=_make_accessor(file, start, end),
            )
        )

    logger.debug(
        "Planned %d chunk(s) of %d bytes for %d byte file",
        chunk_count,
        chunk_size,
        file_size,
    )
    return chunks


def initial_states(chunks: list[ChunkDescriptor]) -> list[ChunkState]:
    """Create zero-valued state for each planned chunk."""
    return [ChunkState() for _ in chunks]
