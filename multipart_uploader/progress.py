"""Per-chunk progress bookkeeping and aggregation."""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from multipart_uploader.models import ChunkState, ProgressEvent

logger = logging.getLogger(__name__)


def parse_progress_event(event: ProgressEvent | Mapping[str, Any]) -> ProgressEvent:
    """Validate a transport progress event.

    Raises:
        pydantic.ValidationError: If the event is malformed.
    """
    if isinstance(event, ProgressEvent):
        return event
    return ProgressEvent.model_validate(event)


class ProgressTracker:
    """Track uploaded bytes per chunk and recompute the aggregate.

    Progress events carry absolute byte counts for a chunk, so a retried part
    simply overwrites its previous value. The aggregate is always summed from
    state, never accumulated, and cannot double-count retries.
    """

    def __init__(self, states: Sequence[ChunkState], total_bytes: int) -> None:
        """Initialize the tracker.

        Args:
            states: Per-chunk state, owned by the caller and mutated in place.
            total_bytes: Total size of the file.
        """
        self._states = states
        self.total_bytes = total_bytes
        self._completed = sum(1 for state in states if state.done)

    @property
    def total_uploaded(self) -> int:
        """Sum of uploaded bytes across all chunks."""
        return sum(state.uploaded_bytes for state in self._states)

    @property
    def completed_parts(self) -> int:
        """Number of chunks confirmed done."""
        return self._completed

    def record(
        self, index: int, event: ProgressEvent | Mapping[str, Any]
    ) -> int | None:
        """Apply a progress event to a chunk.

        Args:
            index: Chunk index.
            event: Progress event from the transport.

        Returns:
            The new aggregate, or None if the event was ignored.
        """
        progress = parse_progress_event(event)
        if not progress.length_computable:
            return None

        state = self._states[index]
        if state.done:
            logger.debug("Ignoring progress for completed chunk %d", index)
            return None

        state.uploaded_bytes = progress.loaded
        return self.total_uploaded

    def complete(self, index: int, etag: str, size: int) -> bool:
        """Mark a chunk as done.

        Args:
            index: Chunk index.
            etag: Completion token reported by the transport.
            size: Length of the chunk's byte range.

        Returns:
            True the first time a chunk completes, False for duplicates.
        """
        state = self._states[index]
        if state.done:
            logger.debug("Ignoring duplicate completion for chunk %d", index)
            return False
        state.etag = etag
        state.uploaded_bytes = size
        state.done = True
        self._completed += 1
        return True
