"""SQL file loading.

A ``SQLFile`` is the raw text of one ``.sql`` file, read once and cached
by path. Routes hold the path; the executor asks the store for content
at request time, so a cached read costs a dict lookup.
"""

import threading
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True, slots=True)
class SQLFile:
    """A loaded ``.sql`` file. Immutable once read."""

    path: str
    content: str

    @property
    def length(self) -> int:
        return len(self.content)

    def is_empty(self) -> bool:
        """True if the file holds nothing but whitespace."""
        return not self.content.strip()


def load_sql(path: str | Path) -> SQLFile:
    """Read a file from disk. Raises ``OSError`` if it cannot be read."""
    text = Path(path).read_text(encoding="utf-8")
    return SQLFile(path=str(path), content=text)


class SQLFileStore:
    """Read-once cache of ``SQLFile`` objects keyed by path.

    Thread safety:
        The cache dict is guarded by a lock; two concurrent misses for the
        same path may both read the file, and the first stored wins.
    """

    __slots__ = ("_files", "_lock")

    def __init__(self) -> None:
        self._files: dict[str, SQLFile] = {}
        self._lock = threading.Lock()

    def get(self, path: str | Path) -> SQLFile:
        """Return the cached file, loading it on first access."""
        key = str(path)
        cached = self._files.get(key)
        if cached is not None:
            return cached
        loaded = load_sql(key)
        with self._lock:
            return self._files.setdefault(key, loaded)

    def reload(self, path: str | Path) -> SQLFile:
        """Re-read a file from disk, replacing any cached copy."""
        loaded = load_sql(path)
        with self._lock:
            self._files[str(path)] = loaded
        return loaded

    def clear(self) -> None:
        with self._lock:
            self._files.clear()

    def __contains__(self, path: object) -> bool:
        return str(path) in self._files

    def __len__(self) -> int:
        return len(self._files)
