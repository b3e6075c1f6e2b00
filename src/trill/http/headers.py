"""Request headers, looked up case-insensitively.

Built once from the ASGI ``headers`` list. Names are stored lowercased
and a repeated header keeps every value in arrival order; plain lookups
return the first one. The format resolver swaps ``Accept`` through
``replace``, which hands back a new object.
"""

from collections.abc import Iterable, Iterator, Mapping


class Headers(Mapping[str, str]):
    """Immutable, case-insensitive view of the request headers."""

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, tuple[str, ...]] | None = None) -> None:
        self._values: dict[str, tuple[str, ...]] = {
            name.lower(): tuple(found) for name, found in (values or {}).items()
        }

    @classmethod
    def from_asgi(cls, raw: Iterable[tuple[bytes, bytes]]) -> "Headers":
        """Decode the ``(name, value)`` byte pairs of an ASGI scope."""
        values: dict[str, list[str]] = {}
        for name, value in raw:
            values.setdefault(name.decode("latin-1").lower(), []).append(value.decode("latin-1"))
        return cls({name: tuple(found) for name, found in values.items()})

    def __getitem__(self, name: str) -> str:
        return self._values[name.lower()][0]

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Headers({self._values!r})"

    def get_all(self, name: str) -> tuple[str, ...]:
        """Every value sent for *name*, oldest first."""
        return self._values.get(name.lower(), ())

    def replace(self, name: str, value: str) -> "Headers":
        """Return headers where *name* has exactly one value."""
        return Headers({**self._values, name.lower(): (value,)})
