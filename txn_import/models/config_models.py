from __future__ import annotations

from dataclasses import dataclass

"""Config dataclasses for the CSV transaction importer.

Built by txn_import.config.loader from config/import.yml. Environment
variables take precedence over the file values (resolved in the loader).
"""

__all__ = [
    "DatabaseConfig",
    "EndpointConfig",
    "ImportConfig",
]


@dataclass(frozen=True)
class DatabaseConfig:
    """Database connection settings for the ``postgres`` backend."""
    host: str | None
    port: int | None
    user: str | None
    password: str | None
    database: str | None
    dsn: str | None

    def resolve_dsn(self) -> str:
        if self.dsn:
            return self.dsn
        dsn = (
            f"host={self.host or 'localhost'} port={self.port or 5432} "
            f"user={self.user or 'postgres'} dbname={self.database or 'postgres'}"
        )
        if self.password:
            dsn += f" password={self.password}"
        return dsn


@dataclass(frozen=True)
class EndpointConfig:
    """HTTP endpoints for the ``http`` backend."""
    import_url: str | None
    delete_url: str | None
    insert_url: str | None = None  # single-transaction add


@dataclass(frozen=True)
class ImportConfig:
    """Root configuration object."""
    backend: str  # "http" | "postgres"
    endpoints: EndpointConfig
    database: DatabaseConfig
    store_path: str  # local JSON transaction collection
    timeout_seconds: float | None = None  # None = wait indefinitely
    warning_display_limit: int = 5
    table: str = "transactions"
