"""
JSON document backend.

Each entity lives in one file inside the data directory. Most files hold a
bare list of documents; a few hold the list under a wrapper key
({"admins": [...]}) and the configuration singletons hold a single object.
"""

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from mudstore.codecs.base import EntityCodec
from mudstore.exceptions import NotFoundError, StorageIOError, create_error_context
from mudstore.persistence.backend_kind import BackendKind
from mudstore.structured_logging.enhanced_logging_config import get_logger
from mudstore.utils.error_logging import wrap_third_party_exception
from mudstore.utils.files import read_json, write_json_atomic

logger = get_logger(__name__)


class DocumentStore:
    """Read and write entity collections as JSON files in one directory."""

    kind = BackendKind.DOCUMENTS

    def __init__(self, data_dir: Path | str):
        self.data_dir = Path(data_dir)

    def __repr__(self) -> str:
        return f"DocumentStore({str(self.data_dir)!r})"

    def describe(self) -> str:
        return str(self.data_dir)

    def path_for(self, codec: EntityCodec) -> Path:
        return self.data_dir / codec.document_file

    def exists(self, codec: EntityCodec) -> bool:
        return self.path_for(codec).is_file()

    def has_data(self, codecs: Iterable[EntityCodec]) -> bool:
        """True if any of the codecs' files is present."""
        return any(self.exists(codec) for codec in codecs)

    def read_collection(self, codec: EntityCodec) -> list[Any]:
        """
        Load every document of an entity.

        Singletons come back as a one-element list. Wrapped collections are
        unwrapped; a bare list is accepted for them as well.

        Raises:
            NotFoundError: If the file does not exist
            StorageIOError: If the file cannot be read or has the wrong shape
        """
        path = self.path_for(codec)
        if not path.is_file():
            raise NotFoundError(
                f"{codec.document_file} not found in {self.data_dir}",
                context=create_error_context(operation="read_collection", entity=codec.name, backend=self.kind.value),
                resource_type="document_file",
                resource_id=str(path),
            )

        try:
            payload = read_json(path)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise wrap_third_party_exception(
                exc,
                create_error_context(operation="read_collection", entity=codec.name, backend=self.kind.value),
                operation="read",
                path=str(path),
            ) from exc

        documents = self._unwrap(codec, payload, path)
        logger.debug("Collection read", entity=codec.name, path=str(path), count=len(documents))
        return documents

    def _unwrap(self, codec: EntityCodec, payload: Any, path: Path) -> list[Any]:
        if codec.is_singleton:
            if isinstance(payload, dict):
                return [payload]
        elif isinstance(payload, list):
            return payload
        elif codec.collection_key and isinstance(payload, dict):
            wrapped = payload.get(codec.collection_key, [])
            if isinstance(wrapped, list):
                return wrapped

        expected = "an object" if codec.is_singleton else "a list"
        if codec.collection_key:
            expected = f'a list or {{"{codec.collection_key}": [...]}}'
        raise StorageIOError(
            f"{path.name} has an unexpected shape: expected {expected}, got {type(payload).__name__}",
            context=create_error_context(operation="read_collection", entity=codec.name, backend=self.kind.value),
            operation="read",
            path=str(path),
        )

    def write_collection(self, codec: EntityCodec, documents: list[dict[str, Any]]) -> Path:
        """
        Replace an entity's file atomically.

        Raises:
            StorageIOError: If the file cannot be written
        """
        path = self.path_for(codec)
        if codec.is_singleton:
            payload: Any = documents[0] if documents else codec.defaults_document()
        elif codec.collection_key:
            payload = {codec.collection_key: documents}
        else:
            payload = documents

        try:
            write_json_atomic(path, payload)
        except OSError as exc:
            raise wrap_third_party_exception(
                exc,
                create_error_context(operation="write_collection", entity=codec.name, backend=self.kind.value),
                operation="write",
                path=str(path),
            ) from exc

        logger.info("Collection written", entity=codec.name, path=str(path), count=len(documents))
        return path

    def count(self, codec: EntityCodec) -> int | None:
        """Number of documents, or None when the file is absent."""
        if not self.exists(codec):
            return None
        return len(self.read_collection(codec))

    def dispose(self) -> None:
        """Nothing to release; present so every handle can be closed the same way."""
