"""Read-only, case-insensitive multi-value mappings.

``Headers`` wraps the raw ASGI header pairs; ``QueryParams`` and
``FormData`` wrap parsed ``name=value`` pairs. All three expose
``Mapping[str, str]`` (first value wins) plus ``get_list``.
"""

from collections.abc import Iterable, Iterator, Mapping


class MultiValues(Mapping[str, str]):
    """Immutable ordered ``(name, value)`` pairs with first-value lookup."""

    __slots__ = ("_pairs",)

    _pairs: tuple[tuple[str, str], ...]

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        object.__setattr__(self, "_pairs", tuple(pairs))

    def _normalize(self, key: str) -> str:
        return key

    def __getitem__(self, key: str) -> str:
        wanted = self._normalize(key)
        for name, value in self._pairs:
            if name == wanted:
                return value
        raise KeyError(key)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        wanted = self._normalize(key)
        return any(name == wanted for name, _ in self._pairs)

    def __iter__(self) -> Iterator[str]:
        seen: set[str] = set()
        for name, _ in self._pairs:
            if name not in seen:
                seen.add(name)
                yield name

    def __len__(self) -> int:
        return len({name for name, _ in self._pairs})

    def __repr__(self) -> str:
        items = ", ".join(f"{k!r}: {self[k]!r}" for k in self)
        return f"{type(self).__name__}({{{items}}})"

    def get(self, key: str, default: str | None = None) -> str | None:  # type: ignore[override]
        """Return the first value for *key*, or *default* if missing."""
        try:
            return self[key]
        except KeyError:
            return default

    def get_list(self, key: str) -> list[str]:
        """Return every value for *key*, in arrival order."""
        wanted = self._normalize(key)
        return [value for name, value in self._pairs if name == wanted]


class Headers(MultiValues):
    """HTTP request headers. Names are compared case-insensitively."""

    __slots__ = ()

    @classmethod
    def from_raw(cls, raw: Iterable[tuple[bytes, bytes]]) -> "Headers":
        """Decode ASGI ``(name, value)`` byte pairs."""
        return cls(
            (name.decode("latin-1").lower(), value.decode("latin-1")) for name, value in raw
        )

    def __init__(self, pairs: Iterable[tuple[str, str]] = ()) -> None:
        super().__init__((name.lower(), value) for name, value in pairs)

    def _normalize(self, key: str) -> str:
        return key.lower()


class QueryParams(MultiValues):
    """Parsed query string parameters."""

    __slots__ = ()

    def get_int(self, key: str, default: int | None = None) -> int | None:
        """Return value as int, or *default* if missing or not numeric."""
        value = self.get(key)
        if value is None:
            return default
        try:
            return int(value)
        except ValueError:
            return default
