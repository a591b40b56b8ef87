"""Shared fixtures: a small SQL tree with one table and a few universal routes."""

from pathlib import Path

import pytest

from sqlroute.app import App
from sqlroute.config import AppConfig

SCHEMA = """\
-- one table is enough to exercise every method
CREATE TABLE users (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    email TEXT
);
"""

TREE = {
    "schema.sql": SCHEMA,
    "Tables/users/GET/select.sql": "SELECT id, name FROM {{table}} ORDER BY id;\n",
    "Tables/users/GET/find_by_name.sql": "SELECT id, name FROM {{table}} WHERE name = :name;\n",
    "Tables/users/POST/insert.sql": "INSERT INTO {{table}} (name, email) VALUES (:name, :email);\n",
    "Tables/users/PUT/update.sql": "UPDATE {{table}} SET name = :name WHERE id = :id;\n",
    "Tables/users/DELETE/delete.sql": "DELETE FROM {{table}} WHERE id = :id;\n",
    "Database/GET/health_check.sql": "SELECT 1 AS ok;\n",
    "Database/GET/broken.sql": "SELECT * FROM missing_table;\n",
    "Database/GET/empty.sql": "   \n",
}


def write_tree(root: Path, files: dict[str, str]) -> Path:
    """Write ``files`` (relative path -> content) under ``root``."""
    for relative, content in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def sql_root(tmp_path: Path) -> Path:
    return write_tree(tmp_path / "db", TREE)


@pytest.fixture
def config(sql_root: Path, tmp_path: Path) -> AppConfig:
    return AppConfig(sql_root=sql_root, database_path=tmp_path / "app.db")


@pytest.fixture
def app(config: AppConfig) -> App:
    return App(config)


@pytest.fixture
def make_tree(tmp_path: Path):
    """Build an arbitrary SQL tree: ``make_tree({"GET/x.sql": "..."})``."""

    def _make(files: dict[str, str], name: str = "tree") -> Path:
        return write_tree(tmp_path / name, files)

    return _make
