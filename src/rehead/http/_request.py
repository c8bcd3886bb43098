"""HttpRequest / HttpResponse — in-memory message contexts.

Used by tests and by the command-line host. Any host object satisfying
the Request and Response protocols works with Plugin.process just as well.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from rehead.http._headers import Headers


@dataclass(frozen=True, slots=True)
class HttpRequest:
    """HTTP request context.

    The URI is kept exactly as given (path plus query string), since that is
    what path matchers see. Headers may be passed as a dict or as a Headers
    instance; the message itself is frozen but its headers are mutable.
    """

    uri: str = "/"
    headers: Headers = field(default_factory=Headers)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, Headers):
            object.__setattr__(self, "headers", Headers(self.headers))

    def get_uri(self) -> str:
        return self.uri


@dataclass(frozen=True, slots=True)
class HttpResponse:
    """HTTP response context. Only headers are relevant to manipulations."""

    headers: Headers = field(default_factory=Headers)

    def __post_init__(self) -> None:
        if not isinstance(self.headers, Headers):
            object.__setattr__(self, "headers", Headers(self.headers))
