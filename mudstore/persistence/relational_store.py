"""
Relational backend over a synchronous SQLAlchemy engine.

The same store serves the embedded SQLite file and the networked PostgreSQL
database; only the engine URL differs. Writes are upserts keyed on the
entity's primary key, and each upsert batch runs in its own transaction.
"""

from collections.abc import Iterable, Mapping
from typing import Any

from sqlalchemy import Engine, create_engine, func, inspect, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError

from mudstore.codecs.base import EntityCodec
from mudstore.exceptions import NotFoundError, create_error_context
from mudstore.persistence.backend_kind import BackendKind
from mudstore.structured_logging.enhanced_logging_config import get_logger
from mudstore.utils.error_logging import wrap_third_party_exception

logger = get_logger(__name__)

_DIALECT_INSERTS = {
    "sqlite": sqlite.insert,
    "postgresql": postgresql.insert,
}


class RelationalStore:
    """Read and upsert entity rows through one SQLAlchemy engine."""

    def __init__(self, kind: BackendKind, url: str, engine: Engine | None = None):
        self.kind = kind
        self.url = url
        self.engine = engine if engine is not None else create_engine(url)

    def __repr__(self) -> str:
        return f"RelationalStore({self.kind.value}, {self.describe()!r})"

    def describe(self) -> str:
        """Connection URL with the password masked."""
        return self.engine.url.render_as_string(hide_password=True)

    def _wrap(self, exc: Exception, operation: str, codec: EntityCodec | None = None):
        context = create_error_context(
            operation=operation,
            backend=self.kind.value,
            entity=codec.name if codec else None,
        )
        return wrap_third_party_exception(exc, context, operation=operation, path=codec.table if codec else None)

    def has_table(self, codec: EntityCodec) -> bool:
        try:
            return inspect(self.engine).has_table(codec.table)
        except SQLAlchemyError as exc:
            raise self._wrap(exc, "inspect", codec) from exc

    def existing_tables(self) -> set[str]:
        try:
            return set(inspect(self.engine).get_table_names())
        except SQLAlchemyError as exc:
            raise self._wrap(exc, "inspect") from exc

    def has_data(self, codecs: Iterable[EntityCodec]) -> bool:
        """True if any codec's table exists and holds at least one row."""
        tables = self.existing_tables()
        return any(codec.table in tables and self.count(codec) for codec in codecs)

    def _require_table(self, codec: EntityCodec) -> None:
        if not self.has_table(codec):
            raise NotFoundError(
                f"Table {codec.table} does not exist in {self.describe()}",
                context=create_error_context(operation="fetch_rows", entity=codec.name, backend=self.kind.value),
                resource_type="table",
                resource_id=codec.table,
            )

    def fetch_rows(self, codec: EntityCodec) -> list[dict[str, Any]]:
        """
        Read every row of an entity's table, ordered by primary key.

        Columns the table lacks (an older schema) read as NULL.

        Raises:
            NotFoundError: If the table does not exist
            StorageIOError: If the query fails
        """
        self._require_table(codec)
        table = codec.sql_table
        try:
            present = {column["name"] for column in inspect(self.engine).get_columns(codec.table)}
            selected = [column for column in table.columns if column.name in present]
            order = [table.c[name] for name in codec.primary_key if name in present]
            with self.engine.connect() as connection:
                result = connection.execute(select(*selected).order_by(*order))
                rows = [dict(row) for row in result.mappings()]
        except SQLAlchemyError as exc:
            raise self._wrap(exc, "fetch_rows", codec) from exc

        missing = [column.name for column in table.columns if column.name not in present]
        if missing:
            logger.warning("Table lacks columns; reading them as NULL", entity=codec.name, columns=missing)
            for row in rows:
                row.update(dict.fromkeys(missing))

        logger.debug("Rows fetched", entity=codec.name, backend=self.kind.value, count=len(rows))
        return rows

    def count(self, codec: EntityCodec) -> int | None:
        """Number of rows, or None when the table is absent."""
        if not self.has_table(codec):
            return None
        try:
            with self.engine.connect() as connection:
                return connection.execute(select(func.count()).select_from(codec.sql_table)).scalar_one()
        except SQLAlchemyError as exc:
            raise self._wrap(exc, "count", codec) from exc

    def upsert_rows(self, codec: EntityCodec, rows: list[Mapping[str, Any]]) -> int:
        """
        Insert rows, updating the codec's update columns on key conflicts.

        All rows are written in a single transaction; on failure nothing from
        this batch is committed.

        Raises:
            StorageIOError: If the database rejects the batch
        """
        if not rows:
            return 0
        try:
            with self.engine.begin() as connection:
                insert_factory = _DIALECT_INSERTS.get(connection.dialect.name)
                if insert_factory is None:
                    self._upsert_generic(connection, codec, rows)
                else:
                    statement = insert_factory(codec.sql_table)
                    if codec.update_columns:
                        statement = statement.on_conflict_do_update(
                            index_elements=list(codec.primary_key),
                            set_={name: statement.excluded[name] for name in codec.update_columns},
                        )
                    else:
                        statement = statement.on_conflict_do_nothing(index_elements=list(codec.primary_key))
                    connection.execute(statement, [dict(row) for row in rows])
        except SQLAlchemyError as exc:
            raise self._wrap(exc, "upsert", codec) from exc

        logger.info("Rows upserted", entity=codec.name, backend=self.kind.value, count=len(rows))
        return len(rows)

    @staticmethod
    def _upsert_generic(connection, codec: EntityCodec, rows: list[Mapping[str, Any]]) -> None:
        """Update-then-insert for dialects without ON CONFLICT support."""
        table = codec.sql_table
        for row in rows:
            key_clause = [table.c[name] == row[name] for name in codec.primary_key]
            exists = connection.execute(select(func.count()).select_from(table).where(*key_clause)).scalar_one()
            if not exists:
                connection.execute(table.insert().values(**row))
            elif codec.update_columns:
                connection.execute(
                    table.update().where(*key_clause).values(**{name: row[name] for name in codec.update_columns})
                )

    def dispose(self) -> None:
        self.engine.dispose()
