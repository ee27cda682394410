"""Registration of versionable record types.

Each type is registered once with the ``versioned`` decorator, which
resolves its table names and non-versioned column set into a frozen
``VersioningConfig``. Nothing is patched onto the class itself.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import TypeVar, overload

from versioned_records.models.record import VersionedRecord

logger = logging.getLogger(__name__)

VERSION_FOREIGN_KEY = "original_record_id"

MANDATORY_NON_VERSIONED_COLUMNS: tuple[str, ...] = ("id", VERSION_FOREIGN_KEY)

DEFAULT_NON_VERSIONED_COLUMNS: tuple[str, ...] = (
    "version",
    "lock_version",
    "created_at",
    "updated_at",
    "created_by_id",
    "updated_by_id",
    "version_comment",
)

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")

R = TypeVar("R", bound=type[VersionedRecord])

_registry: dict[type[VersionedRecord], VersioningConfig] = {}


@dataclass(frozen=True)
class VersioningConfig:
    """Resolved versioning settings for one record type."""

    record_type: str
    table: str
    version_table: str
    non_versioned_columns: tuple[str, ...]

    @property
    def version_foreign_key(self) -> str:
        """Column every version row uses to point at its record."""
        return VERSION_FOREIGN_KEY


def _snake(name: str) -> str:
    """CamelCase -> snake_case."""
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


def _column_name(column: object) -> str:
    if isinstance(column, Enum):
        column = column.value
    if not isinstance(column, str):
        raise TypeError(f"Column names must be strings, got {type(column).__name__}")
    return column


def _check_identifier(name: str) -> str:
    if not _IDENTIFIER_RE.match(name):
        raise ValueError(f"Invalid table name: {name!r}")
    return name


def _check_unique(config: VersioningConfig) -> None:
    if config.table == config.version_table:
        raise ValueError(f"{config.record_type} cannot share one table for records and versions")
    for existing in _registry.values():
        if existing.record_type == config.record_type:
            raise ValueError(f"{config.record_type} is already registered for versioning")
        taken = {existing.table, existing.version_table} & {config.table, config.version_table}
        if taken:
            raise ValueError(f"Table {min(taken)!r} is already used by {existing.record_type}")


def resolve_non_versioned_columns(extra: Iterable[object] = ()) -> tuple[str, ...]:
    """Merge the mandatory, default and per-type exclusions, keeping first-seen order."""
    columns: list[str] = []
    for column in (
        *MANDATORY_NON_VERSIONED_COLUMNS,
        *DEFAULT_NON_VERSIONED_COLUMNS,
        *(_column_name(c) for c in extra),
    ):
        if column not in columns:
            columns.append(column)
    return tuple(columns)


def register(
    record_cls: type[VersionedRecord],
    *,
    table: str | None = None,
    version_table: str | None = None,
    non_versioned_columns: Iterable[object] = (),
) -> VersioningConfig:
    """Register a record type for versioning and return its resolved config."""
    if not (isinstance(record_cls, type) and issubclass(record_cls, VersionedRecord)):
        raise TypeError(f"{record_cls!r} is not a VersionedRecord subclass")

    base = _snake(record_cls.__name__)
    config = VersioningConfig(
        record_type=record_cls.__name__,
        table=_check_identifier(table or f"{base}s"),
        version_table=_check_identifier(version_table or f"{base}_versions"),
        non_versioned_columns=resolve_non_versioned_columns(non_versioned_columns),
    )
    _check_unique(config)
    _registry[record_cls] = config
    logger.debug("Registered %s for versioning (%s)", config.record_type, config.table)
    return config


@overload
def versioned(record_cls: R) -> R: ...


@overload
def versioned(
    record_cls: None = None,
    *,
    table: str | None = None,
    version_table: str | None = None,
    non_versioned_columns: Iterable[object] = (),
) -> Callable[[R], R]: ...


def versioned(
    record_cls=None,
    *,
    table=None,
    version_table=None,
    non_versioned_columns=(),
):
    """Class decorator form of ``register``; usable bare or with arguments."""

    def decorate(cls):
        register(
            cls,
            table=table,
            version_table=version_table,
            non_versioned_columns=non_versioned_columns,
        )
        return cls

    if record_cls is not None:
        return decorate(record_cls)
    return decorate


def get_config(record_cls: type[VersionedRecord]) -> VersioningConfig:
    """Return the config a record type was registered with."""
    try:
        return _registry[record_cls]
    except KeyError:
        raise ValueError(f"{record_cls.__name__} is not registered for versioning") from None


def registered_types() -> list[type[VersionedRecord]]:
    """Return every registered record type, in registration order."""
    return list(_registry)
