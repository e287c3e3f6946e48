"""
Schema manager.

Creates the table of every registered entity if it does not already exist.
Existing tables are never altered.
"""

from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError

from mudstore.codecs import REGISTRY
from mudstore.codecs.base import EntityCodec
from mudstore.exceptions import create_error_context
from mudstore.persistence.document_store import DocumentStore
from mudstore.persistence.relational_store import RelationalStore
from mudstore.structured_logging.enhanced_logging_config import get_logger
from mudstore.utils.error_logging import wrap_third_party_exception

logger = get_logger(__name__)


def ensure_schema(handle: DocumentStore | RelationalStore, codecs: Sequence[EntityCodec] = REGISTRY) -> list[str]:
    """
    Create any missing entity tables.

    Args:
        handle: Backend handle; document stores need no schema
        codecs: Entities whose tables must exist

    Returns:
        Names of the tables created by this call (empty when all existed)

    Raises:
        StorageIOError: If the database rejects the DDL
    """
    if not isinstance(handle, RelationalStore):
        return []

    existing = handle.existing_tables()
    created: list[str] = []
    try:
        with handle.engine.begin() as connection:
            for codec in codecs:
                if codec.table in existing:
                    continue
                codec.sql_table.create(connection, checkfirst=True)
                created.append(codec.table)
    except SQLAlchemyError as exc:
        raise wrap_third_party_exception(
            exc,
            create_error_context(operation="ensure_schema", backend=handle.kind.value),
            operation="create_table",
        ) from exc

    if created:
        logger.info("Tables created", backend=handle.kind.value, tables=created, count=len(created))
    else:
        logger.debug("Schema already present", backend=handle.kind.value)
    return created
