"""
Integration test: a full json -> sqlite -> networked -> json cycle.

Each hop is a real switch (backup, export, import, state write). The
networked backend is a second SQLite database reached through its URL, which
exercises the same relational store PostgreSQL uses.
"""

from __future__ import annotations

from mudstore.codecs import REGISTRY
from mudstore.migration.backend_state import BackendStateTracker
from mudstore.migration.orchestrator import MigrationOrchestrator
from mudstore.persistence.backend_kind import BackendKind
from mudstore.persistence.document_store import DocumentStore
from mudstore.tests.fixtures.sample_documents import SAMPLE_COUNTS, sample_files


def _canonical_collections(files):
    """Expected documents per entity, keyed by record key."""
    expected = {}
    for codec in REGISTRY:
        payload = files[codec.document_file]
        if codec.is_singleton:
            documents = [payload]
        elif codec.collection_key:
            documents = payload[codec.collection_key]
        else:
            documents = payload
        canonical = [codec.apply_defaults(document) for document in documents]
        expected[codec.name] = {codec.key_of(codec.to_row(document)): document for document in canonical}
    return expected


def _stored_collections(data_dir):
    store = DocumentStore(data_dir)
    stored = {}
    for codec in REGISTRY:
        documents = store.read_collection(codec)
        stored[codec.name] = {codec.key_of(codec.to_row(document)): document for document in documents}
    return stored


def test_full_switch_cycle_preserves_every_record(populated_data_dir, networked_settings):
    """Data survives three backend switches unchanged apart from canonical defaults."""
    expected = _canonical_collections(sample_files())
    tracker = BackendStateTracker(networked_settings.state_file)

    to_sqlite = MigrationOrchestrator(networked_settings, BackendKind.DOCUMENTS).switch(BackendKind.EMBEDDED)
    assert to_sqlite.import_report.total == sum(SAMPLE_COUNTS.values())
    assert tracker.read().current is BackendKind.EMBEDDED

    for path in populated_data_dir.glob("*.json"):
        path.unlink()

    to_networked = MigrationOrchestrator(networked_settings, tracker.read().current).switch(BackendKind.NETWORKED)
    assert to_networked.export.total == sum(SAMPLE_COUNTS.values())
    assert to_networked.import_report.total == sum(SAMPLE_COUNTS.values())
    state = tracker.read()
    assert (state.current, state.previous) == (BackendKind.NETWORKED, BackendKind.EMBEDDED)

    for path in populated_data_dir.glob("*.json"):
        path.unlink()

    to_documents = MigrationOrchestrator(networked_settings, tracker.read().current).switch(BackendKind.DOCUMENTS)
    assert to_documents.completed
    assert to_documents.import_report is None
    assert tracker.read().current is BackendKind.DOCUMENTS

    assert _stored_collections(populated_data_dir) == expected


def test_status_after_cycle_sees_all_backends(populated_data_dir, networked_settings):
    MigrationOrchestrator(networked_settings, BackendKind.DOCUMENTS).switch(BackendKind.EMBEDDED)
    MigrationOrchestrator(networked_settings, BackendKind.EMBEDDED).switch(BackendKind.NETWORKED)

    report = MigrationOrchestrator(networked_settings, BackendKind.NETWORKED).status()

    assert [status.kind for status in report.backends] == [
        BackendKind.DOCUMENTS,
        BackendKind.EMBEDDED,
        BackendKind.NETWORKED,
    ]
    for status in report.backends:
        assert status.available
        assert status.counts == SAMPLE_COUNTS
    assert report.state.previous is BackendKind.EMBEDDED
