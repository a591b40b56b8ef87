"""Query string parameters."""

from collections.abc import Iterator, Mapping
from urllib.parse import parse_qs


class QueryParams(Mapping[str, str]):
    """Parsed query string. Indexing returns the first value for a key.

    Blank values are kept, so ``?name=`` maps ``name`` to ``""``.
    """

    __slots__ = ("_data", "_raw")

    def __init__(self, query_string: bytes = b"") -> None:
        self._raw = query_string
        self._data: dict[str, list[str]] = parse_qs(
            query_string.decode("latin-1"), keep_blank_values=True
        )

    def __getitem__(self, key: str) -> str:
        return self._data[key][0]

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"QueryParams({self.first_values()!r})"

    def get_list(self, key: str) -> list[str]:
        """Every value for ``key``, in order of appearance."""
        return list(self._data.get(key, []))

    def first_values(self) -> dict[str, str]:
        """One value per key: the first occurrence."""
        return {key: values[0] for key, values in self._data.items() if values}

    @property
    def raw(self) -> bytes:
        return self._raw
