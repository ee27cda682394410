"""DDL for per-type record and version tables."""

from versioned_records.registry import VersioningConfig

# Identity column DDL per dialect.
_ID_COLUMN = {
    "sqlite": "INTEGER PRIMARY KEY AUTOINCREMENT",
    "postgres": "BIGSERIAL PRIMARY KEY",
}
_FK_TYPE = {
    "sqlite": "INTEGER",
    "postgres": "BIGINT",
}


def record_tables_sql(config: VersioningConfig, dialect: str = "sqlite") -> list[str]:
    """Return the CREATE statements for a type's record and version tables."""
    if dialect not in _ID_COLUMN:
        raise ValueError(f"Unsupported dialect: {dialect}")
    id_col = _ID_COLUMN[dialect]
    fk = config.version_foreign_key
    return [
        f"""CREATE TABLE IF NOT EXISTS {config.table} (
    id {id_col},
    version INTEGER NOT NULL DEFAULT 0,
    data TEXT NOT NULL DEFAULT '{{}}',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)""",
        f"""CREATE TABLE IF NOT EXISTS {config.version_table} (
    id {id_col},
    {fk} {_FK_TYPE[dialect]} NOT NULL REFERENCES {config.table}(id),
    version INTEGER NOT NULL,
    data TEXT NOT NULL DEFAULT '{{}}',
    version_comment TEXT,
    created_at TEXT NOT NULL,
    UNIQUE({fk}, version)
)""",
        f"CREATE INDEX IF NOT EXISTS idx_{config.version_table}_record"
        f" ON {config.version_table}({fk})",
    ]

