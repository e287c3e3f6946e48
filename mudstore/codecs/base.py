"""
Declarative document/row conversion for persisted entities.

An EntityCodec describes one entity type: its table, its document file and
an ordered list of fields. Each field maps a (possibly dotted) document path
onto one or more flat columns and knows how to normalise, encode and decode
its value. Defaults are declared once on the field and applied in both
directions.

Documents are plain dicts as stored in the JSON files; rows are plain dicts
keyed by column name. Document keys that no field maps are kept in the
`extra_fields` column so a relational round trip loses nothing.
"""

import copy
import json
from collections.abc import Callable, Mapping, Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import REAL, Column, Integer, MetaData, Table, Text
from sqlalchemy.dialects.postgresql import DOUBLE_PRECISION

from mudstore.exceptions import SerializationError
from mudstore.metadata import metadata as shared_metadata

EXTRA_FIELDS_COLUMN = "extra_fields"
SINGLETON_COLUMN = "key"


class _Missing:
    """Marker for an absent document value or a NULL column."""

    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING: Any = _Missing()


def now_timestamp() -> str:
    """Current UTC time in the canonical stored form."""
    return format_timestamp(datetime.now(UTC))


def format_timestamp(moment: datetime) -> str:
    """Render a datetime as ISO-8601 UTC with millisecond precision and a Z suffix."""
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def parse_timestamp(value: Any) -> datetime:
    """
    Parse a stored timestamp.

    Accepts ISO-8601 strings (with or without offset, 'Z' allowed), datetime
    objects and epoch milliseconds. Naive values are taken as UTC.
    """
    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, bool):
        raise TypeError("boolean is not a timestamp")
    elif isinstance(value, int | float):
        moment = datetime.fromtimestamp(value / 1000, tz=UTC)
    elif isinstance(value, str):
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = text[:-1] + "+00:00"
        moment = datetime.fromisoformat(text)
    else:
        raise TypeError(f"cannot interpret {type(value).__name__} as a timestamp")
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=UTC)
    return moment


def get_path(document: Mapping[str, Any], parts: Sequence[str]) -> Any:
    """Read a nested value, returning MISSING when any step is absent."""
    current: Any = document
    for part in parts:
        if not isinstance(current, Mapping) or part not in current:
            return MISSING
        current = current[part]
    return current


def set_path(document: dict[str, Any], parts: Sequence[str], value: Any) -> None:
    """Write a nested value, creating intermediate objects as needed."""
    current = document
    for part in parts[:-1]:
        child = current.get(part)
        if not isinstance(child, dict):
            child = {}
            current[part] = child
        current = child
    current[parts[-1]] = value


def delete_path(document: dict[str, Any], parts: Sequence[str]) -> None:
    """Remove a nested value if present."""
    current: Any = document
    for part in parts[:-1]:
        current = current.get(part) if isinstance(current, dict) else None
        if current is None:
            return
    if isinstance(current, dict):
        current.pop(parts[-1], None)


def prune_empty_parents(document: dict[str, Any], parts: Sequence[str]) -> None:
    """Drop intermediate objects along a path that ended up empty."""
    for depth in range(len(parts) - 1, 0, -1):
        parent = get_path(document, parts[: depth - 1]) if depth > 1 else document
        if not isinstance(parent, dict):
            continue
        child = parent.get(parts[depth - 1])
        if isinstance(child, dict) and not child:
            del parent[parts[depth - 1]]


def _snake_case(path: str) -> str:
    out = []
    for char in path.replace(".", "_"):
        if char.isupper():
            out.append("_" + char.lower())
        else:
            out.append(char)
    return "".join(out).lstrip("_")


class Field:
    """
    One document value stored in one or more columns.

    Args:
        path: Dotted document path, e.g. 'inventory.currency.gold'
        column: Column name (defaults to the snake_case form of the path)
        default: Value used when the document omits the field or a row holds NULL
        default_factory: Callable receiving the partially built document, for
            defaults that depend on the clock or on other fields
        required: Absence is an error rather than an omission
    """

    column_type: Any = Text

    def __init__(
        self,
        path: str,
        column: str | None = None,
        *,
        default: Any = MISSING,
        default_factory: Callable[[dict[str, Any]], Any] | None = None,
        required: bool = False,
    ):
        self.path = path
        self.parts = tuple(path.split("."))
        self.column = column or _snake_case(path)
        self.default = default
        self.default_factory = default_factory
        self.required = required

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.path!r} -> {self.column!r})"

    @property
    def has_default(self) -> bool:
        return self.default is not MISSING or self.default_factory is not None

    @property
    def column_names(self) -> tuple[str, ...]:
        return (self.column,)

    def build_columns(self, primary_key: bool = False) -> list[Column]:
        nullable = not (primary_key or self.required or self.has_default)
        return [Column(name, self.column_type, primary_key=primary_key, nullable=nullable) for name in self.column_names]

    def resolve_default(self, document: dict[str, Any]) -> Any:
        if self.default_factory is not None:
            return self.normalize(self.default_factory(document))
        if self.default is MISSING:
            return MISSING
        return self.normalize(copy.deepcopy(self.default))

    def normalize(self, value: Any) -> Any:
        """Canonical document form of a non-null value."""
        return value

    def encode(self, value: Any) -> dict[str, Any]:
        """Column values for a normalized, non-null document value."""
        return {self.column: value}

    def decode(self, row: Mapping[str, Any]) -> Any:
        """Document value for a row, or MISSING when the column is NULL."""
        raw = row.get(self.column)
        if raw is None:
            return MISSING
        return self.normalize(raw)


class TextField(Field):
    column_type = Text

    def normalize(self, value: Any) -> str:
        if isinstance(value, dict | list):
            raise TypeError(f"expected text, got {type(value).__name__}")
        return str(value)


def to_integer(value: Any) -> int:
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if not value.is_integer():
            raise ValueError(f"expected an integer, got {value!r}")
        return int(value)
    if isinstance(value, str):
        return int(value.strip())
    raise TypeError(f"expected an integer, got {type(value).__name__}")


class IntegerField(Field):
    column_type = Integer

    def normalize(self, value: Any) -> int:
        return to_integer(value)


class RealField(Field):
    column_type = REAL().with_variant(DOUBLE_PRECISION(), "postgresql")

    def normalize(self, value: Any) -> float:
        if isinstance(value, bool) or not isinstance(value, int | float | str):
            raise TypeError(f"expected a number, got {type(value).__name__}")
        return float(value)


class BoolField(Field):
    """Boolean stored as 0/1."""

    column_type = Integer

    def normalize(self, value: Any) -> bool:
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in ("1", "true", "yes"):
                return True
            if lowered in ("0", "false", "no", ""):
                return False
            raise ValueError(f"expected a boolean, got {value!r}")
        return bool(value)

    def encode(self, value: Any) -> dict[str, Any]:
        return {self.column: 1 if value else 0}


class JsonField(Field):
    """Object or array stored as JSON text."""

    column_type = Text

    def normalize(self, value: Any) -> Any:
        # Round-trip through JSON so tuples and other JSON-able values take
        # the exact shape they will have after decoding.
        return json.loads(json.dumps(value, ensure_ascii=False))

    def encode(self, value: Any) -> dict[str, Any]:
        return {self.column: json.dumps(value, ensure_ascii=False)}

    def decode(self, row: Mapping[str, Any]) -> Any:
        raw = row.get(self.column)
        if raw is None:
            return MISSING
        if isinstance(raw, bytes | bytearray):
            raw = raw.decode("utf-8")
        if isinstance(raw, str):
            return json.loads(raw)
        return self.normalize(raw)


class TimestampField(Field):
    """Instant stored as canonical ISO-8601 UTC text."""

    column_type = Text

    def normalize(self, value: Any) -> str:
        return format_timestamp(parse_timestamp(value))

    def decode(self, row: Mapping[str, Any]) -> Any:
        raw = row.get(self.column)
        if raw is None:
            return MISSING
        if isinstance(raw, str):
            return raw
        return self.normalize(raw)


class HistoryField(JsonField):
    """JSON list of event entries whose 'timestamp' members are normalised."""

    def normalize(self, value: Any) -> Any:
        entries = super().normalize(value)
        if not isinstance(entries, list):
            raise TypeError(f"expected a list of history entries, got {type(entries).__name__}")
        for entry in entries:
            if isinstance(entry, dict) and entry.get("timestamp") is not None:
                entry["timestamp"] = format_timestamp(parse_timestamp(entry["timestamp"]))
        return entries


class RangeField(Field):
    """Two-element [min, max] list stored in two integer columns."""

    column_type = Integer

    def __init__(self, path: str, min_column: str, max_column: str, **kwargs: Any):
        super().__init__(path, min_column, **kwargs)
        self.min_column = min_column
        self.max_column = max_column

    @property
    def column_names(self) -> tuple[str, ...]:
        return (self.min_column, self.max_column)

    def normalize(self, value: Any) -> list[int]:
        if not isinstance(value, list | tuple) or len(value) != 2:
            raise ValueError(f"expected a [min, max] pair, got {value!r}")
        return [to_integer(value[0]), to_integer(value[1])]

    def encode(self, value: Any) -> dict[str, Any]:
        return {self.min_column: value[0], self.max_column: value[1]}

    def decode(self, row: Mapping[str, Any]) -> Any:
        low, high = row.get(self.min_column), row.get(self.max_column)
        if low is None or high is None:
            return MISSING
        return self.normalize([low, high])


class EntityCodec:
    """
    Conversion rules and storage layout for one entity type.

    Args:
        name: Registry name, also the table name unless `table` is given
        label: Human readable plural used in reports
        document_file: File name inside the data directory
        fields: Ordered field list; defaults may depend on earlier fields
        primary_key: Key column names (ignored for singletons)
        update_columns: Columns refreshed when an import hits an existing key;
            None means every non-key column
        singleton_key: Literal key of the only row, for single-object documents
        collection_key: Wrapper key when the file holds {"<key>": [...]}
        metadata: SQLAlchemy metadata the table is registered on
    """

    def __init__(
        self,
        name: str,
        label: str,
        document_file: str,
        fields: Sequence[Field],
        *,
        table: str | None = None,
        primary_key: Sequence[str] = (),
        update_columns: Sequence[str] | None = None,
        singleton_key: str | None = None,
        collection_key: str | None = None,
        metadata: MetaData | None = None,
    ):
        self.name = name
        self.label = label
        self.table = table or name
        self.document_file = document_file
        self.fields = tuple(fields)
        self.singleton_key = singleton_key
        self.collection_key = collection_key
        self.primary_key = (SINGLETON_COLUMN,) if singleton_key else tuple(primary_key)
        if not self.primary_key:
            raise ValueError(f"codec {name} declares no primary key")

        self._fields_by_column = {column: f for f in self.fields for column in f.column_names}
        for key_column in self.primary_key:
            if key_column == SINGLETON_COLUMN:
                continue
            if key_column not in self._fields_by_column:
                raise ValueError(f"codec {name}: primary key column {key_column} has no field")
            if self._fields_by_column[key_column].default_factory is not None:
                raise ValueError(f"codec {name}: primary key column {key_column} cannot take a computed default")
            self._fields_by_column[key_column].required = True

        all_columns = self.column_names
        non_key = [c for c in all_columns if c not in self.primary_key]
        if update_columns is None:
            self.update_columns = tuple(non_key)
        else:
            unknown = set(update_columns) - set(non_key)
            if unknown:
                raise ValueError(f"codec {name}: unknown update columns {sorted(unknown)}")
            self.update_columns = tuple(update_columns)

        self.sql_table = self._build_table(metadata if metadata is not None else shared_metadata)

    def __repr__(self) -> str:
        return f"EntityCodec({self.name!r})"

    @property
    def is_singleton(self) -> bool:
        return self.singleton_key is not None

    @property
    def column_names(self) -> tuple[str, ...]:
        columns: list[str] = [SINGLETON_COLUMN] if self.singleton_key else []
        for f in self.fields:
            columns.extend(f.column_names)
        columns.append(EXTRA_FIELDS_COLUMN)
        return tuple(columns)

    def _build_table(self, metadata: MetaData) -> Table:
        columns: list[Column] = []
        if self.singleton_key:
            columns.append(Column(SINGLETON_COLUMN, Text, primary_key=True, nullable=False))
        for f in self.fields:
            columns.extend(f.build_columns(primary_key=f.column in self.primary_key))
        columns.append(Column(EXTRA_FIELDS_COLUMN, Text, nullable=True))
        return Table(self.table, metadata, *columns)

    def _error(self, exc: Exception, field: Field | None, record_key: str | None) -> SerializationError:
        field_name = field.path if field else None
        return SerializationError(
            f"{self.name}: cannot convert field '{field_name}' of record '{record_key}': {exc}",
            entity=self.name,
            field=field_name,
            record_key=record_key,
            user_friendly=f"Invalid {self.name} record '{record_key}'",
        )

    def document_key(self, document: Any) -> str | None:
        """Best-effort primary key of a raw document, for error reports."""
        if self.singleton_key:
            return self.singleton_key
        if not isinstance(document, Mapping):
            return None
        values = []
        for column in self.primary_key:
            value = get_path(document, self._fields_by_column[column].parts)
            values.append("" if value is MISSING or value is None else str(value))
        return "|".join(values) if any(values) else None

    def key_of(self, row: Mapping[str, Any]) -> str:
        """Primary key of a row as a display string (composite keys joined by '|')."""
        return "|".join(str(row.get(column)) for column in self.primary_key)

    def apply_defaults(self, document: Any) -> dict[str, Any]:
        """
        Return the canonical form of a document.

        Missing or null fields take their declared default; optional fields
        without a default are dropped rather than kept as null. Values are
        normalised to the exact form from_row() produces.

        Raises:
            SerializationError: If the document is not an object or a field is invalid
        """
        record_key = self.document_key(document)
        if not isinstance(document, Mapping):
            raise self._error(TypeError(f"expected an object, got {type(document).__name__}"), None, record_key)

        result = copy.deepcopy(dict(document))
        for f in self.fields:
            try:
                value = get_path(result, f.parts)
                if value is MISSING or value is None:
                    value = f.resolve_default(result)
                    if value is MISSING:
                        if f.required:
                            raise ValueError("required value is missing")
                        delete_path(result, f.parts)
                        prune_empty_parents(result, f.parts)
                        continue
                else:
                    value = f.normalize(value)
                set_path(result, f.parts, value)
            except (ValueError, TypeError) as exc:
                raise self._error(exc, f, record_key) from exc
        return result

    def to_row(self, document: Any) -> dict[str, Any]:
        """
        Convert a document to a row dict covering every column.

        Raises:
            SerializationError: If the document cannot be converted
        """
        canonical = self.apply_defaults(document)
        record_key = self.document_key(canonical)
        row: dict[str, Any] = {}
        if self.singleton_key:
            row[SINGLETON_COLUMN] = self.singleton_key

        remainder = copy.deepcopy(canonical)
        for f in self.fields:
            value = get_path(canonical, f.parts)
            try:
                if value is MISSING:
                    row.update(dict.fromkeys(f.column_names))
                else:
                    row.update(f.encode(value))
            except (ValueError, TypeError) as exc:
                raise self._error(exc, f, record_key) from exc
            delete_path(remainder, f.parts)
            prune_empty_parents(remainder, f.parts)

        row[EXTRA_FIELDS_COLUMN] = json.dumps(remainder, ensure_ascii=False) if remainder else None
        return row

    def from_row(self, row: Mapping[str, Any]) -> dict[str, Any]:
        """
        Convert a row (any mapping of column name to value) to a document.

        NULL columns take the field default or are omitted.

        Raises:
            SerializationError: If a column holds a value the field cannot decode
        """
        record_key = self.key_of(row)
        document: dict[str, Any] = {}
        extra = row.get(EXTRA_FIELDS_COLUMN)
        if extra:
            try:
                loaded = json.loads(extra)
                if not isinstance(loaded, dict):
                    raise ValueError("extra fields must hold a JSON object")
            except ValueError as exc:
                raise self._error(exc, None, record_key) from exc
            document.update(loaded)

        for f in self.fields:
            try:
                value = f.decode(row)
                if value is MISSING:
                    value = f.resolve_default(document)
                    if value is MISSING:
                        if f.required:
                            raise ValueError("required column is NULL")
                        continue
                set_path(document, f.parts, value)
            except (ValueError, TypeError) as exc:
                raise self._error(exc, f, record_key) from exc
        return document

    def defaults_document(self) -> dict[str, Any]:
        """The document a singleton takes when none has been saved."""
        return self.apply_defaults({})
