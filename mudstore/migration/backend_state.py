"""
Backend state file.

A small JSON file in the data directory records which backend the game
server should read from, which one it used before, and when the last
successful switch happened. The game server only reads it.
"""

from dataclasses import dataclass
from datetime import UTC, datetime
from pathlib import Path

from mudstore.codecs.base import format_timestamp
from mudstore.exceptions import ConfigurationError, create_error_context
from mudstore.persistence.backend_kind import BackendKind
from mudstore.structured_logging.enhanced_logging_config import get_logger
from mudstore.utils.error_logging import wrap_third_party_exception
from mudstore.utils.files import read_json, write_json_atomic

logger = get_logger(__name__)


@dataclass(frozen=True)
class BackendState:
    """Persisted record of the active backend."""

    current: BackendKind
    previous: BackendKind | None = None
    migrated_at: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return {
            "current": self.current.value,
            "previous": self.previous.value if self.previous else None,
            "migratedAt": self.migrated_at,
        }


class BackendStateTracker:
    """Reads and writes the backend state file."""

    def __init__(self, state_file: Path | str, default_backend: BackendKind = BackendKind.DOCUMENTS):
        self.state_file = Path(state_file)
        self.default_backend = default_backend

    def exists(self) -> bool:
        return self.state_file.is_file()

    def read(self) -> BackendState:
        """
        Load the recorded state.

        An absent file yields the default backend. A file that cannot be
        parsed is logged and also yields the default.
        """
        if not self.state_file.is_file():
            return BackendState(current=self.default_backend)

        try:
            payload = read_json(self.state_file)
            if not isinstance(payload, dict):
                raise ValueError("backend state must be a JSON object")
            previous = payload.get("previous")
            return BackendState(
                current=BackendKind.parse(payload["current"]),
                previous=BackendKind.parse(previous) if previous else None,
                migrated_at=payload.get("migratedAt"),
            )
        except (OSError, KeyError, ValueError, ConfigurationError) as error:
            logger.error(
                "Failed to load backend state, falling back to default backend",
                error=str(error),
                state_file=str(self.state_file),
                default_backend=self.default_backend.value,
            )
            return BackendState(current=self.default_backend)

    def write(self, current: BackendKind, previous: BackendKind | None) -> BackendState:
        """
        Record a completed switch.

        Raises:
            StorageIOError: If the file cannot be written
        """
        state = BackendState(current=current, previous=previous, migrated_at=format_timestamp(datetime.now(UTC)))
        try:
            write_json_atomic(self.state_file, state.to_dict())
        except OSError as exc:
            raise wrap_third_party_exception(
                exc,
                create_error_context(operation="write_backend_state"),
                operation="write",
                path=str(self.state_file),
            ) from exc
        logger.info(
            "Backend state recorded",
            current=current.value,
            previous=previous.value if previous else None,
            state_file=str(self.state_file),
        )
        return state
