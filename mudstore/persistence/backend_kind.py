"""
Storage backend kinds and the names they answer to.
"""

from enum import StrEnum

from mudstore.exceptions import ConfigurationError


class BackendKind(StrEnum):
    """The three storage representations the tool moves data between."""

    DOCUMENTS = "json"
    EMBEDDED = "sqlite"
    NETWORKED = "postgres"

    @property
    def is_relational(self) -> bool:
        return self is not BackendKind.DOCUMENTS

    @property
    def label(self) -> str:
        return _LABELS[self]

    @classmethod
    def parse(cls, name: "str | BackendKind") -> "BackendKind":
        """
        Resolve a CLI name or descriptive alias to a backend kind.

        Args:
            name: 'json', 'sqlite', 'postgres' or their descriptive aliases

        Returns:
            The matching BackendKind

        Raises:
            ConfigurationError: If the name is not recognised
        """
        if isinstance(name, BackendKind):
            return name
        key = str(name).strip().lower()
        kind = _ALIASES.get(key)
        if kind is None:
            raise ConfigurationError(
                f"Unknown storage backend '{name}'. Expected one of: {', '.join(sorted(_ALIASES))}",
                config_key="backend",
                user_friendly=f"Unknown storage backend '{name}'",
            )
        return kind


_ALIASES = {
    "json": BackendKind.DOCUMENTS,
    "documents": BackendKind.DOCUMENTS,
    "sqlite": BackendKind.EMBEDDED,
    "embedded-relational": BackendKind.EMBEDDED,
    "postgres": BackendKind.NETWORKED,
    "networked-relational": BackendKind.NETWORKED,
}

_LABELS = {
    BackendKind.DOCUMENTS: "JSON files",
    BackendKind.EMBEDDED: "SQLite",
    BackendKind.NETWORKED: "PostgreSQL",
}
