"""Directory scaffolding for a SQL tree.

Creates the layout the compiler expects and seeds one CRUD file set per
table found in the schema::

    <root>/
        schema.sql
        Database/{GET,POST,PUT,DELETE}/
        Tables/<table>/GET/select.sql
        Tables/<table>/POST/insert.sql
        Tables/<table>/PUT/update.sql
        Tables/<table>/DELETE/delete.sql

Existing files are never overwritten, so ``setup()`` is safe to re-run
after editing the schema or customizing a generated query.
"""

import logging
import re
from collections.abc import Iterable
from pathlib import Path

from sqlroute.routing.route import HTTP_METHODS

logger = logging.getLogger("sqlroute.layout")

SCHEMA_PLACEHOLDER = "-- define your schema here\n"

_TABLE_NAME_RE = re.compile(
    r"""CREATE\s+(?:TEMP(?:ORARY)?\s+)?TABLE\s+(?:IF\s+NOT\s+EXISTS\s+)?["'`\[]?(\w+)["'`\]]?""",
    re.IGNORECASE,
)

# (method directory, filename, template)
DEFAULT_QUERIES: tuple[tuple[str, str, str], ...] = (
    ("GET", "select.sql", "SELECT * FROM {{table}};\n"),
    ("POST", "insert.sql", "INSERT INTO {{table}} ({{columns}}) VALUES ({{values}});\n"),
    ("PUT", "update.sql", "UPDATE {{table}} SET {{updates}} WHERE id = ?;\n"),
    ("DELETE", "delete.sql", "DELETE FROM {{table}} WHERE id = ?;\n"),
)


def discover_tables(schema_text: str) -> list[str]:
    """Table names declared in a schema, in order, without duplicates."""
    seen: dict[str, None] = {}
    for match in _TABLE_NAME_RE.finditer(schema_text):
        seen.setdefault(match.group(1), None)
    return list(seen)


class SQLLayout:
    """The on-disk layout of one SQL root.

    Usage::

        layout = SQLLayout("sqlroute_dir/db")
        tables = layout.setup()
    """

    __slots__ = ("database_marker", "root", "schema_path", "tables_marker")

    def __init__(
        self,
        root: str | Path,
        *,
        schema_path: str | Path | None = None,
        tables_marker: str = "Tables",
        database_marker: str = "Database",
    ) -> None:
        self.root = Path(root)
        self.schema_path = Path(schema_path) if schema_path else self.root / "schema.sql"
        self.tables_marker = tables_marker
        self.database_marker = database_marker

    @property
    def tables_dir(self) -> Path:
        return self.root / self.tables_marker

    @property
    def database_dir(self) -> Path:
        return self.root / self.database_marker

    def make_dirs(self) -> None:
        """Create the root, universal method dirs, ``Tables/`` and a schema stub."""
        for method in HTTP_METHODS:
            (self.database_dir / method).mkdir(parents=True, exist_ok=True)
        self.tables_dir.mkdir(parents=True, exist_ok=True)
        if not self.schema_path.exists():
            self.schema_path.parent.mkdir(parents=True, exist_ok=True)
            self.schema_path.write_text(SCHEMA_PLACEHOLDER, encoding="utf-8")
            logger.info("Created schema file %s", self.schema_path)

    def discover_tables(self) -> list[str]:
        """Tables declared in the schema file; empty if there is none."""
        if not self.schema_path.is_file():
            return []
        return discover_tables(self.schema_path.read_text(encoding="utf-8"))

    def create_table_dirs(self, tables: Iterable[str]) -> None:
        for table in tables:
            for method in HTTP_METHODS:
                (self.tables_dir / table / method).mkdir(parents=True, exist_ok=True)

    def provision_table_defaults(self, tables: Iterable[str]) -> list[Path]:
        """Write the default CRUD files for each table. Returns the files written."""
        written: list[Path] = []
        for table in tables:
            for method, filename, template in DEFAULT_QUERIES:
                target = self.tables_dir / table / method / filename
                if target.exists():
                    continue
                target.parent.mkdir(parents=True, exist_ok=True)
                target.write_text(template, encoding="utf-8")
                written.append(target)
        if written:
            logger.info("Provisioned %d default query files", len(written))
        return written

    def setup(self) -> list[str]:
        """Scaffold everything and return the tables found in the schema."""
        self.make_dirs()
        tables = self.discover_tables()
        self.create_table_dirs(tables)
        self.provision_table_defaults(tables)
        return tables
