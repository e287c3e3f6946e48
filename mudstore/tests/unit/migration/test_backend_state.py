"""Tests for the backend state file."""

from __future__ import annotations

import json

import pytest

from mudstore.exceptions import StorageIOError
from mudstore.migration.backend_state import BackendState, BackendStateTracker
from mudstore.persistence.backend_kind import BackendKind


@pytest.fixture
def state_file(data_dir):
    return data_dir / ".backend-state"


def test_absent_file_yields_default(state_file):
    tracker = BackendStateTracker(state_file, default_backend=BackendKind.EMBEDDED)
    assert not tracker.exists()
    assert tracker.read() == BackendState(current=BackendKind.EMBEDDED)


def test_write_then_read(state_file):
    """A recorded switch reads back with its previous backend and timestamp."""
    tracker = BackendStateTracker(state_file)
    written = tracker.write(BackendKind.NETWORKED, BackendKind.EMBEDDED)

    assert tracker.exists()
    assert tracker.read() == written
    assert written.migrated_at.endswith("Z")
    assert json.loads(state_file.read_text(encoding="utf-8")) == {
        "current": "postgres",
        "previous": "sqlite",
        "migratedAt": written.migrated_at,
    }


def test_write_leaves_no_temp_files(state_file):
    BackendStateTracker(state_file).write(BackendKind.EMBEDDED, None)
    assert [path.name for path in state_file.parent.iterdir()] == [".backend-state"]


@pytest.mark.parametrize(
    "content",
    ["{not json", "[]", '{"previous": "json"}', '{"current": "mongodb"}'],
)
def test_unreadable_file_falls_back_to_default(state_file, content):
    """A corrupt state file never stops the tool; the default backend is used."""
    state_file.write_text(content, encoding="utf-8")
    assert BackendStateTracker(state_file).read() == BackendState(current=BackendKind.DOCUMENTS)


def test_write_failure_raises_storage_io_error(state_file):
    state_file.mkdir()
    with pytest.raises(StorageIOError):
        BackendStateTracker(state_file).write(BackendKind.EMBEDDED, BackendKind.DOCUMENTS)


def test_to_dict_without_previous():
    assert BackendState(current=BackendKind.DOCUMENTS).to_dict() == {
        "current": "json",
        "previous": None,
        "migratedAt": None,
    }
