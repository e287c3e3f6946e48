"""
Result objects returned by the migration orchestrator.

Dry runs return the same shapes as live runs; counts then mean "would be
written".
"""

from dataclasses import dataclass, field
from pathlib import Path

from mudstore.migration.backend_state import BackendState
from mudstore.persistence.backend_kind import BackendKind


@dataclass
class EntityOutcome:
    """What happened to one entity during an export, import or split."""

    entity: str
    label: str
    count: int = 0
    skipped: int = 0
    missing: bool = False
    seeded: bool = False
    path: str | None = None
    errors: list[str] = field(default_factory=list)


@dataclass
class MigrationReport:
    """Per-entity outcomes of one data movement."""

    operation: str
    source: BackendKind
    target: BackendKind
    dry_run: bool = False
    nothing_to_do: bool = False
    created_tables: list[str] = field(default_factory=list)
    outcomes: list[EntityOutcome] = field(default_factory=list)

    @property
    def total(self) -> int:
        return sum(outcome.count for outcome in self.outcomes)

    @property
    def total_skipped(self) -> int:
        return sum(outcome.skipped for outcome in self.outcomes)

    def outcome(self, entity: str) -> EntityOutcome:
        for outcome in self.outcomes:
            if outcome.entity == entity:
                return outcome
        raise KeyError(entity)


@dataclass
class BackendStatus:
    """Record counts for one backend; None means the file or table is absent."""

    kind: BackendKind
    location: str
    counts: dict[str, int | None] = field(default_factory=dict)
    error: str | None = None
    entity_errors: dict[str, str] = field(default_factory=dict)

    @property
    def available(self) -> bool:
        return self.error is None


@dataclass
class StatusReport:
    current: BackendKind
    state: BackendState | None
    backends: list[BackendStatus] = field(default_factory=list)
    sqlite_path: str | None = None
    database_url: str | None = None

    def backend(self, kind: BackendKind) -> BackendStatus | None:
        for status in self.backends:
            if status.kind is kind:
                return status
        return None


@dataclass
class BackupReport:
    path: Path
    files: list[str] = field(default_factory=list)
    dry_run: bool = False


@dataclass
class SwitchReport:
    source: BackendKind
    target: BackendKind
    dry_run: bool = False
    no_op: bool = False
    completed: bool = False
    backup: BackupReport | None = None
    export: MigrationReport | None = None
    import_report: MigrationReport | None = None
    state: BackendState | None = None
    instructions: list[str] = field(default_factory=list)
