"""Tests for state blob persistence across worker start/stop."""

import json
from pathlib import Path

import pytest

from jobworker import FilesystemError, ParseError, Worker
from jobworker.worker.state import StateFile


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _write_state(path: Path, data) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data), encoding="utf-8")


def _read_state(path: Path):
    return json.loads(path.read_text(encoding="utf-8"))


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestStart:
    """start() loads whatever was last saved, or creates an empty state."""

    def test_no_directory_creates_empty_state(self, state_path: Path) -> None:
        assert not state_path.parent.exists()

        wrk = Worker(state_path)
        wrk.start()

        assert wrk.state == {}
        assert state_path.read_text(encoding="utf-8") == "{}"

    def test_existing_directory_without_file(self, state_path: Path) -> None:
        state_path.parent.mkdir(parents=True)

        wrk = Worker(state_path)
        wrk.start()

        assert wrk.state == {}
        assert state_path.read_text(encoding="utf-8") == "{}"

    def test_existing_file_is_loaded(self, state_path: Path) -> None:
        _write_state(state_path, {"foo": "bar", "nested": {"n": [1, 2, 3]}})

        wrk = Worker(state_path)
        wrk.start()

        assert wrk.state == {"foo": "bar", "nested": {"n": [1, 2, 3]}}

    def test_non_object_state_is_loaded_as_is(self, state_path: Path) -> None:
        _write_state(state_path, [1, "two", None])

        wrk = Worker(state_path)
        wrk.start()

        assert wrk.state == [1, "two", None]

    def test_corrupt_file_raises_and_is_preserved(self, state_path: Path) -> None:
        corrupt_content = "{invalid json!!"
        state_path.parent.mkdir(parents=True)
        state_path.write_text(corrupt_content, encoding="utf-8")

        wrk = Worker(state_path)
        with pytest.raises(ParseError):
            wrk.start()

        assert not wrk.running
        assert state_path.read_text(encoding="utf-8") == corrupt_content

    def test_non_utf8_file_raises_parse_error(self, state_path: Path) -> None:
        state_path.parent.mkdir(parents=True)
        state_path.write_bytes(b"\xff\xfe{}")

        with pytest.raises(ParseError):
            Worker(state_path).start()

    def test_unusable_directory_raises_filesystem_error(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("not a directory")

        wrk = Worker(blocker / "state.json")
        with pytest.raises(FilesystemError) as exc_info:
            wrk.start()

        assert isinstance(exc_info.value.__cause__, OSError)

    def test_state_path_is_read_only(self, state_path: Path) -> None:
        wrk = Worker(state_path)

        assert wrk.state_path == state_path
        with pytest.raises(AttributeError):
            wrk.state_path = state_path.parent / "other.json"


class TestStop:
    """stop() overwrites the file with the current in-memory state."""

    def test_stop_stores_state(self, worker: Worker, state_path: Path) -> None:
        worker.state = {"foo": "bar"}
        worker.stop()

        assert _read_state(state_path) == worker.state

    def test_caller_mutations_are_persisted(self, worker: Worker, state_path: Path) -> None:
        worker.state["counter"] = 3
        worker.state["seen"] = ["a", "b"]
        worker.stop()

        assert _read_state(state_path) == {"counter": 3, "seen": ["a", "b"]}

    def test_stop_truncates_previous_content(self, state_path: Path) -> None:
        _write_state(state_path, {"long": "x" * 500})

        wrk = Worker(state_path)
        wrk.start()
        wrk.state = {"s": 1}
        wrk.stop()

        assert state_path.read_text(encoding="utf-8") == '{"s":1}'

    def test_round_trip_across_restarts(self, state_path: Path) -> None:
        wrk = Worker(state_path)
        wrk.start()
        wrk.state = {"cursor": 42, "name": "Grüße", "flags": [True, False]}
        wrk.stop()

        wrk2 = Worker(state_path)
        wrk2.start()
        assert wrk2.state == {"cursor": 42, "name": "Grüße", "flags": [True, False]}
        wrk2.stop()

        assert _read_state(state_path) == wrk2.state

    def test_same_worker_restarts(self, worker: Worker, state_path: Path) -> None:
        worker.state["runs"] = 1
        worker.stop()

        worker.start()
        assert worker.state == {"runs": 1}
        worker.state["runs"] += 1
        worker.stop()

        assert _read_state(state_path) == {"runs": 2}

    def test_unserializable_state_keeps_previous_file(self, worker: Worker, state_path: Path) -> None:
        worker.state = {"ok": True}
        worker.stop()

        worker.start()
        worker.state = {"bad": object()}
        with pytest.raises(ParseError):
            worker.stop()

        assert _read_state(state_path) == {"ok": True}

    def test_unencodable_string_keeps_previous_file(self, worker: Worker, state_path: Path) -> None:
        worker.state = {"ok": True}
        worker.stop()

        worker.start()
        worker.state = {"name": "\udcff"}  # lone surrogate, as os.fsdecode can produce
        with pytest.raises(ParseError):
            worker.stop()

        assert _read_state(state_path) == {"ok": True}

        worker.state = {"ok": True}
        worker.stop()

    def test_stop_can_be_retried_after_failed_save(self, worker: Worker, state_path: Path) -> None:
        worker.state = {"bad": object()}
        with pytest.raises(ParseError):
            worker.stop()

        assert worker.running

        worker.state = {"fixed": 1}
        worker.stop()

        assert not worker.running
        assert _read_state(state_path) == {"fixed": 1}

    def test_stop_can_be_retried_after_write_failure(self, worker: Worker, state_path: Path) -> None:
        state_path.unlink()
        state_path.mkdir()  # a directory where the file should be
        worker.state = {"kept": True}

        with pytest.raises(FilesystemError):
            worker.stop()
        assert worker.running

        state_path.rmdir()
        worker.stop()

        assert _read_state(state_path) == {"kept": True}

    def test_stop_without_start_leaves_file_alone(self, state_path: Path) -> None:
        _write_state(state_path, {"keep": "me"})

        wrk = Worker(state_path)
        wrk.stop()

        assert _read_state(state_path) == {"keep": "me"}


class TestStateFile:
    """StateFile on its own."""

    def test_save_then_load(self, tmp_path: Path) -> None:
        store = StateFile(tmp_path / "s.json")
        store.save({"a": 1})

        assert store.load() == {"a": 1}

    def test_expands_home(self, monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
        monkeypatch.setenv("HOME", str(tmp_path))

        store = StateFile("~/worker/state.json")

        assert store.path == tmp_path / "worker" / "state.json"
