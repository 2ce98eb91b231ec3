"""Shared fixtures for multipart_uploader tests."""

import pytest
from helpers import FakeTransport, Recorder, SizedHandle

from multipart_uploader.const import MB


@pytest.fixture
def transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def recorder() -> Recorder:
    return Recorder()


@pytest.fixture
def twelve_mb_file() -> SizedHandle:
    return SizedHandle(12 * MB)
