"""
File helpers shared by the document store, the backend state tracker and
the backup step.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from mudstore.structured_logging.enhanced_logging_config import get_logger

logger = get_logger(__name__)


def write_json_atomic(path: Path, payload: Any, *, indent: int | None = 2) -> None:
    """
    Write a JSON document atomically.

    The payload is written to a temporary file in the destination directory,
    flushed to disk and then moved over the destination, so readers see
    either the old file or the new one.

    Raises:
        OSError: If the file cannot be written
    """
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_fd, tmp_path = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=str(path.parent))
    try:
        with os.fdopen(tmp_fd, "w", encoding="utf-8") as handle:
            json.dump(payload, handle, indent=indent, ensure_ascii=False)
            handle.write("\n")
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except OSError as error:
        logger.error("Failed to write file atomically", error=str(error), path=str(path))
        raise
    finally:
        if os.path.exists(tmp_path):
            os.remove(tmp_path)


def read_json(path: Path) -> Any:
    """
    Read a JSON document.

    Raises:
        OSError: If the file cannot be read
        json.JSONDecodeError: If the file is not valid JSON
    """
    with path.open("r", encoding="utf-8") as handle:
        return json.load(handle)
