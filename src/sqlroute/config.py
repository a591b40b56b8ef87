"""Application configuration.

AppConfig is a frozen dataclass: immutable after creation, passed into
compilation and execution as opaque input.
"""

from dataclasses import dataclass
from pathlib import Path

from sqlroute.errors import ConfigurationError


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have defaults matching the scaffolded directory layout::

        config = AppConfig(sql_root="db", database_path="db/app.db", port=3000)
    """

    # SQL tree
    sql_root: str | Path = "sqlroute_dir/db"
    schema_path: str | Path | None = None  # None -> <sql_root>/schema.sql
    tables_marker: str = "Tables"
    database_marker: str = "Database"

    # Database
    database_path: str | Path = "sqlroute_dir/app.db"
    echo_sql: bool = False

    # HTTP surface
    base_url: str = "/api/v1"
    host: str = "127.0.0.1"
    port: int = 8080
    cors: bool = True
    debug: bool = False

    # Fail requests whose SQL still holds {{placeholders}} after processing
    strict_templates: bool = False

    # Server timeouts (seconds)
    request_timeout: float = 30.0
    keep_alive_timeout: float = 5.0

    log_level: str = "info"

    @property
    def resolved_schema_path(self) -> Path:
        """The schema file, defaulting to ``schema.sql`` under the SQL root."""
        if self.schema_path is not None:
            return Path(self.schema_path)
        return Path(self.sql_root) / "schema.sql"

    def validate(self) -> None:
        """Raise ``ConfigurationError`` for values the server cannot use."""
        if not 1 <= self.port <= 65535:
            msg = f"Invalid port: {self.port} (must be 1-65535)"
            raise ConfigurationError(msg)
        if not str(self.sql_root).strip():
            msg = "SQL root directory cannot be empty"
            raise ConfigurationError(msg)
        if self.base_url and not self.base_url.startswith("/"):
            msg = f"Base URL must start with '/': {self.base_url!r}"
            raise ConfigurationError(msg)
