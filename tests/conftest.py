"""Shared fixtures for worker tests."""

from pathlib import Path

import pytest

from jobworker import Worker


@pytest.fixture
def state_path(tmp_path: Path) -> Path:
    """State file inside a directory that does not exist yet."""
    return tmp_path / "state" / "my-state.json"


@pytest.fixture
def worker(state_path: Path) -> Worker:
    wrk = Worker(state_path)
    wrk.start()
    return wrk

