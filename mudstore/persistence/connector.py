"""
Backend connector.

Turns a backend kind plus connection parameters into a store handle. No
connection is opened here; SQLAlchemy engines connect on first use.
"""

from dataclasses import dataclass
from pathlib import Path

from mudstore.exceptions import ConfigurationError, NotFoundError, create_error_context
from mudstore.persistence.backend_kind import BackendKind
from mudstore.persistence.document_store import DocumentStore
from mudstore.persistence.relational_store import RelationalStore
from mudstore.structured_logging.enhanced_logging_config import get_logger
from mudstore.utils.error_logging import log_and_raise

logger = get_logger(__name__)

_POSTGRES_SCHEMES = ("postgres://", "postgresql://")
_PSYCOPG2_SCHEME = "postgresql+psycopg2://"


@dataclass(frozen=True)
class ConnectionParams:
    """Where each backend lives."""

    data_dir: Path
    db_path: Path | None = None
    database_url: str | None = None

    @property
    def sqlite_path(self) -> Path:
        return self.db_path if self.db_path is not None else self.data_dir / "game.db"


def normalize_database_url(url: str) -> str:
    """Point bare PostgreSQL URLs at the psycopg2 driver; leave other URLs alone."""
    for scheme in _POSTGRES_SCHEMES:
        if url.startswith(scheme):
            return _PSYCOPG2_SCHEME + url[len(scheme) :]
    return url


def open_backend(
    kind: BackendKind,
    params: ConnectionParams,
    *,
    must_exist: bool = False,
    dry_run: bool = False,
) -> DocumentStore | RelationalStore:
    """
    Open a handle on a storage backend.

    Args:
        kind: Which backend to open
        params: Locations of the backends
        must_exist: Fail instead of letting a new SQLite file be created
        dry_run: Do not create directories

    Returns:
        DocumentStore or RelationalStore

    Raises:
        ConfigurationError: If the networked backend has no URL
        NotFoundError: If must_exist is set and the SQLite file is absent
    """
    kind = BackendKind.parse(kind)

    if kind is BackendKind.DOCUMENTS:
        return DocumentStore(params.data_dir)

    if kind is BackendKind.EMBEDDED:
        db_path = params.sqlite_path
        if not db_path.exists():
            if must_exist:
                raise NotFoundError(
                    f"SQLite database not found: {db_path}",
                    context=create_error_context(operation="open_backend", backend=kind.value),
                    resource_type="database",
                    resource_id=str(db_path),
                )
            if not dry_run:
                db_path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Opening embedded backend", db_path=str(db_path))
        return RelationalStore(kind, f"sqlite:///{db_path}")

    if not params.database_url:
        log_and_raise(
            ConfigurationError,
            "The postgres backend needs a database URL (set DATABASE_URL or pass --db-url)",
            context=create_error_context(operation="open_backend", backend=kind.value),
            logger_name=__name__,
            config_key="database_url",
        )
    url = normalize_database_url(params.database_url)
    store = RelationalStore(kind, url)
    logger.debug("Opening networked backend", url=store.describe())
    return store
