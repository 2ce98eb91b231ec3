"""Tests for chunk planning."""

import math

import pytest
from helpers import SizedHandle

from multipart_uploader.chunk_planner import (
    compute_chunk_size,
    default_chunk_size,
    ensure_int,
    initial_states,
    plan_chunks,
    resolve_use_multipart,
)
from multipart_uploader.const import MAX_NUMBER_OF_PARTS, MB, MIN_PART_SIZE
from multipart_uploader.exceptions import ChunkReleasedError, InvalidConfigurationError
from multipart_uploader.file_handle import BytesFileHandle
from multipart_uploader.models import ChunkState

GB = 1024 * MB
FILE_SIZES = [0, 1, MIN_PART_SIZE - 1, MIN_PART_SIZE, 12 * MB, 3 * GB, 100 * GB]


@pytest.mark.parametrize("file_size", FILE_SIZES)
def test_single_part_plan_covers_whole_file(file_size: int) -> None:
    """Without multipart there is exactly one chunk spanning the file."""
    file = SizedHandle(file_size)

    chunks = plan_chunks(file, use_multipart=False)

    assert len(chunks) == 1
    assert (chunks[0].start, chunks[0].end) == (0, file_size)
    assert chunks[0].uses_multipart is False
    assert chunks[0].get_data() is file


def test_single_part_plan_ignores_chunk_size() -> None:
    calls = []

    plan_chunks(
        SizedHandle(50 * MB),
        use_multipart=False,
        get_chunk_size=lambda file: calls.append(file) or MB,
    )

    assert calls == []


@pytest.mark.parametrize("file_size", FILE_SIZES)
def test_multipart_plan_partitions_file(file_size: int) -> None:
    """Ranges are contiguous, respect the minimum size and the part limit."""
    chunks = plan_chunks(SizedHandle(file_size), use_multipart=True)

    assert 1 <= len(chunks) <= MAX_NUMBER_OF_PARTS
    assert chunks[0].start == 0
    assert chunks[-1].end == file_size
    for previous, current in zip(chunks, chunks[1:]):
        assert previous.end == current.start
    for chunk in chunks[:-1]:
        assert chunk.size >= min(MIN_PART_SIZE, file_size)
    assert all(chunk.uses_multipart for chunk in chunks)
    assert [chunk.index for chunk in chunks] == list(range(len(chunks)))


def test_twelve_mb_file_with_small_desired_chunk_size() -> None:
    chunks = plan_chunks(
        SizedHandle(12 * MB), use_multipart=True, get_chunk_size=lambda file: MB
    )

    assert [(c.start, c.end) for c in chunks] == [
        (0, 5 * MB),
        (5 * MB, 10 * MB),
        (10 * MB, 12 * MB),
    ]


def test_desired_chunk_size_above_minimum_is_used() -> None:
    chunks = plan_chunks(
        SizedHandle(20 * MB), use_multipart=True, get_chunk_size=lambda file: 8 * MB
    )

    assert [c.size for c in chunks] == [8 * MB, 8 * MB, 4 * MB]


def test_empty_file_multipart_yields_one_empty_chunk() -> None:
    chunks = plan_chunks(SizedHandle(0), use_multipart=True)

    assert len(chunks) == 1
    assert (chunks[0].start, chunks[0].end) == (0, 0)


def test_huge_file_chunk_size_grows_to_fit_part_limit() -> None:
    file_size = 100 * GB

    chunks = plan_chunks(SizedHandle(file_size), use_multipart=True)

    expected_size = math.ceil(file_size / MAX_NUMBER_OF_PARTS)
    assert chunks[0].size == expected_size
    assert len(chunks) == MAX_NUMBER_OF_PARTS


def test_data_is_sliced_lazily() -> None:
    file = SizedHandle(12 * MB)

    chunks = plan_chunks(file, use_multipart=True)

    assert file.slices == []
    assert chunks[1].get_data() == (5 * MB, 10 * MB)
    assert chunks[1].get_data() == (5 * MB, 10 * MB)
    assert file.slices == [(5 * MB, 10 * MB), (5 * MB, 10 * MB)]


def test_data_accessor_returns_byte_ranges() -> None:
    data = bytes(range(256)) * (MIN_PART_SIZE // 256 + 1)
    file = BytesFileHandle(data)

    chunks = plan_chunks(file, use_multipart=True)

    assert len(chunks) == 2
    assert bytes(chunks[0].get_data()) == data[:MIN_PART_SIZE]
    assert bytes(chunks[1].get_data()) == data[MIN_PART_SIZE:]


def test_released_chunk_has_no_data() -> None:
    chunks = plan_chunks(SizedHandle(12 * MB), use_multipart=True)

    chunks[0].release()

    assert chunks[0].released
    assert not chunks[1].released
    with pytest.raises(ChunkReleasedError):
        chunks[0].get_data()


def test_hooks_are_bound_to_chunk_index() -> None:
    seen = []

    chunks = plan_chunks(
        SizedHandle(12 * MB),
        use_multipart=True,
        progress_hook=lambda index: lambda event: seen.append(("progress", index)),
        complete_hook=lambda index: lambda etag: seen.append(("complete", index)),
    )
    chunks[2].on_progress({})
    chunks[0].on_complete("etag")

    assert seen == [("progress", 2), ("complete", 0)]


def test_numeric_string_chunk_size_is_accepted() -> None:
    chunks = plan_chunks(
        SizedHandle(20 * MB),
        use_multipart=True,
        get_chunk_size=lambda file: str(10 * MB),
    )

    assert len(chunks) == 2


@pytest.mark.parametrize("bad_value", [None, "five", 2.5, True, [MB]])
def test_non_numeric_chunk_size_fails_fast(bad_value) -> None:
    with pytest.raises(InvalidConfigurationError, match="Expected a number"):
        plan_chunks(
            SizedHandle(20 * MB),
            use_multipart=True,
            get_chunk_size=lambda file: bad_value,
        )


def test_ensure_int() -> None:
    assert ensure_int(7) == 7
    assert ensure_int("42") == 42
    with pytest.raises(InvalidConfigurationError):
        ensure_int(object())


def test_compute_chunk_size_enforces_minimum() -> None:
    assert compute_chunk_size(12 * MB, 1) == MIN_PART_SIZE
    assert compute_chunk_size(12 * MB, 6 * MB) == 6 * MB


def test_default_chunk_size() -> None:
    assert default_chunk_size(SizedHandle(0)) == 0
    assert default_chunk_size(SizedHandle(10001)) == 2


def test_resolve_use_multipart_with_boolean_like_values() -> None:
    file = SizedHandle(1)

    assert resolve_use_multipart(True, file) is True
    assert resolve_use_multipart(0, file) is False
    assert resolve_use_multipart(None, file) is False


def test_resolve_use_multipart_predicate_is_called_once_with_file() -> None:
    file = SizedHandle(1)
    calls = []

    result = resolve_use_multipart(lambda f: calls.append(f) or True, file)

    assert result is True
    assert calls == [file]


def test_raising_predicate_is_a_configuration_error() -> None:
    def predicate(file):
        raise KeyError("size")

    with pytest.raises(InvalidConfigurationError) as exc_info:
        resolve_use_multipart(predicate, SizedHandle(1))

    assert isinstance(exc_info.value.__cause__, KeyError)


def test_initial_states_are_zeroed() -> None:
    chunks = plan_chunks(SizedHandle(12 * MB), use_multipart=True)

    states = initial_states(chunks)

    assert states == [ChunkState(), ChunkState(), ChunkState()]
    assert states[0] is not states[1]
