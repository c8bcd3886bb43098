"""Host-facing protocols.

The plugin never owns the request or response. The host hands them to
Plugin.process for the duration of one call, and these protocols are the
whole contract between the two sides:

- MutableHeaders is the mutable, multi-valued header view of a message
- Request exposes the URI the path matcher sees, plus its headers
- Response only exposes its headers
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MutableHeaders(Protocol):
    """Multi-valued header collection with case-insensitive names."""

    def get(self, name: str, /) -> str | None:
        """Return the first value of a header, or None if absent."""
        ...

    def get_all(self, name: str, /) -> list[str]:
        """Return every value of a header in order (empty if absent)."""
        ...

    def set(self, name: str, value: str, /) -> None:
        """Replace all values of a header with a single value."""
        ...

    def add(self, name: str, value: str, /) -> None:
        """Append a value after the existing values of a header."""
        ...


@runtime_checkable
class Request(Protocol):
    """The in-flight request as exposed by the host."""

    @property
    def headers(self) -> MutableHeaders: ...

    def get_uri(self) -> str:
        """Path and query string, exactly as the host exposes them."""
        ...


@runtime_checkable
class Response(Protocol):
    """The in-flight response as exposed by the host."""

    @property
    def headers(self) -> MutableHeaders: ...
