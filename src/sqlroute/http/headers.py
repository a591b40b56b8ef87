"""Case-insensitive, read-only request headers."""

from collections.abc import Iterator, Mapping


class Headers(Mapping[str, str]):
    """Request headers keyed by lowercase name.

    Built from the raw ASGI byte pairs. A repeated header keeps its first
    value, which is all the execution handlers ever read.
    """

    __slots__ = ("_items", "_raw")

    def __init__(self, raw: tuple[tuple[bytes, bytes], ...] = ()) -> None:
        self._raw = raw
        items: dict[str, str] = {}
        for name, value in raw:
            items.setdefault(name.decode("latin-1").lower(), value.decode("latin-1"))
        self._items = items

    def __getitem__(self, key: str) -> str:
        return self._items[key.lower()]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and key.lower() in self._items

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __repr__(self) -> str:
        return f"Headers({self._items!r})"

    @property
    def raw(self) -> tuple[tuple[bytes, bytes], ...]:
        return self._raw
