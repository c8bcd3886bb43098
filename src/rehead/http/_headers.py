"""Headers — ordered, multi-valued, case-insensitive header collection.

Names are looked up case-insensitively. The spelling of a name is the one
used when it was first added, so output keeps the casing configuration or
the wire used.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator, Mapping


class Headers:
    """In-memory implementation of the Headers protocol.

    >>> h = Headers({"Accept": "text/html"})
    >>> h.add("accept", "application/json")
    >>> h.get_all("ACCEPT")
    ['text/html', 'application/json']
    """

    __slots__ = ("_entries",)

    def __init__(
        self, initial: Mapping[str, str] | Iterable[tuple[str, str]] | None = None
    ) -> None:
        # lowercased name -> (display name, values)
        self._entries: dict[str, tuple[str, list[str]]] = {}
        if initial is None:
            return
        pairs = initial.items() if hasattr(initial, "items") else initial
        for name, value in pairs:
            self.add(name, value)

    def get(self, name: str, /) -> str | None:
        entry = self._entries.get(name.lower())
        if entry is None:
            return None
        return entry[1][0]

    def get_all(self, name: str, /) -> list[str]:
        entry = self._entries.get(name.lower())
        if entry is None:
            return []
        return list(entry[1])

    def set(self, name: str, value: str, /) -> None:
        key = name.lower()
        display = self._entries[key][0] if key in self._entries else name
        self._entries[key] = (display, [value])

    def add(self, name: str, value: str, /) -> None:
        key = name.lower()
        if key in self._entries:
            self._entries[key][1].append(value)
        else:
            self._entries[key] = (name, [value])

    def remove(self, name: str, /) -> None:
        self._entries.pop(name.lower(), None)

    def names(self) -> list[str]:
        """Header names in first-insertion order, original spelling."""
        return [display for display, _ in self._entries.values()]

    def items(self) -> Iterator[tuple[str, str]]:
        """Yield one (name, value) pair per value, in order."""
        for display, values in self._entries.values():
            for value in values:
                yield display, value

    def copy(self) -> Headers:
        return Headers(self.items())

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and name.lower() in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Headers):
            return NotImplemented
        return {k: v[1] for k, v in self._entries.items()} == {
            k: v[1] for k, v in other._entries.items()
        }

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"Headers({list(self.items())!r})"
