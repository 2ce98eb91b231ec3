"""Test doubles for multipart_uploader tests."""

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

from multipart_uploader.cancellation import CancelToken
from multipart_uploader.models import ChunkDescriptor
from multipart_uploader.transport import Transport


@dataclass
class TransportCall:
    kind: str
    file: Any
    chunks: list[ChunkDescriptor]
    cancel_token: CancelToken


Behaviour = Callable[[TransportCall], Awaitable[Any]]


class FakeTransport(Transport):
    """In-memory transport that records calls.

    By default every attempt blocks until ``proceed`` is set, then reports
    full progress and completion for each chunk that has not been released
    and returns ``result``. Pass ``behaviour`` to script attempts instead.
    """

    def __init__(self, behaviour: Behaviour | None = None) -> None:
        self.calls: list[TransportCall] = []
        self.abort_calls: list[Any] = []
        self.proceed = asyncio.Event()
        self.result: Any = {"location": "https://bucket/key"}
        self.error: Exception | None = None
        self.abort_error: Exception | None = None
        self._behaviour = behaviour

    @property
    def upload_calls(self) -> list[TransportCall]:
        return [call for call in self.calls if call.kind == "upload"]

    @property
    def resume_calls(self) -> list[TransportCall]:
        return [call for call in self.calls if call.kind == "resume"]

    async def upload_file(self, file, chunks, cancel_token):
        return await self._run(TransportCall("upload", file, chunks, cancel_token))

    async def resume_upload_file(self, file, chunks, cancel_token):
        return await self._run(TransportCall("resume", file, chunks, cancel_token))

    async def abort_file_upload(self, file):
        self.abort_calls.append(file)
        await asyncio.sleep(0)
        if self.abort_error is not None:
            raise self.abort_error

    async def _run(self, call: TransportCall) -> Any:
        self.calls.append(call)
        if self._behaviour is not None:
            return await self._behaviour(call)

        await self.proceed.wait()
        call.cancel_token.raise_if_cancelled()
        for chunk in call.chunks:
            if chunk.released:
                continue
            chunk.on_progress({"lengthComputable": True, "loaded": chunk.size})
            chunk.on_complete(f"etag-{chunk.index}")
        if self.error is not None:
            raise self.error
        return self.result


class SizedHandle:
    """File handle that only knows its size; records slice calls."""

    def __init__(self, size: int) -> None:
        self._size = size
        self.slices: list[tuple[int, int]] = []

    @property
    def size(self) -> int:
        return self._size

    def slice(self, start: int, end: int) -> tuple[int, int]:
        self.slices.append((start, end))
        return (start, end)

    def __repr__(self) -> str:
        return f"SizedHandle({self._size})"


class Recorder:
    """Collects the outward callbacks of an upload session."""

    def __init__(self) -> None:
        self.progress: list[tuple[int, int]] = []
        self.parts: list[dict] = []
        self.successes: list[Any] = []
        self.errors: list[BaseException] = []
        self.logged: list[BaseException] = []

    def options(self) -> dict[str, Any]:
        return {
            "on_progress": lambda done, total: self.progress.append((done, total)),
            "on_part_complete": self.parts.append,
            "on_success": self.successes.append,
            "on_error": self.errors.append,
            "log": self.logged.append,
        }


async def settle(rounds: int = 5) -> None:
    """Let pending tasks run until they block."""
    for _ in range(rounds):
        await asyncio.sleep(0)
