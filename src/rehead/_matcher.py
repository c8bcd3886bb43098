"""Request matchers.

Two variants share one interface:

- PathMatcher searches the request URI (path and query string)
- HeaderMatcher searches the first value of one named request header

Both return a Capture on success. Patterns are compiled at construction time
via ``google-re2``, which gives the same syntax as Go's regexp package
(including ``(?P<name>...)`` groups) and guaranteed linear-time matching.
RE2 does not support backreferences or lookaround; patterns using them are
rejected at compile time.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import re2

from rehead._errors import InvalidPatternError, MissingFieldError, PatternTooLongError
from rehead._template import Capture

if TYPE_CHECKING:
    from rehead._types import Request

MAX_PATTERN_LENGTH = 4096


def compile_pattern(pattern: str) -> re2.Pattern[str]:
    """Compile a regex pattern, enforcing the length limit.

    Raises:
        PatternTooLongError: If the pattern exceeds MAX_PATTERN_LENGTH.
        InvalidPatternError: If the pattern is not valid RE2 syntax.
    """
    if len(pattern) > MAX_PATTERN_LENGTH:
        raise PatternTooLongError(pattern, MAX_PATTERN_LENGTH)
    try:
        return re2.compile(pattern)
    except re2.error as e:
        raise InvalidPatternError(pattern, str(e)) from e


@dataclass(frozen=True, slots=True)
class PathMatcher:
    """Match the request URI against a regex (search, not fullmatch).

    An empty pattern matches every request.

    >>> from rehead.http import HttpRequest
    >>> m = PathMatcher(r"^/api/(?P<id>[0-9]+)$")
    >>> m.capture(HttpRequest(uri="/api/42")).named["id"]
    '42'
    """

    pattern: str
    _compiled: re2.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_compiled", compile_pattern(self.pattern))

    def test(self, request: Request) -> bool:
        return self._compiled.search(request.get_uri()) is not None

    def capture(self, request: Request) -> Capture | None:
        m = self._compiled.search(request.get_uri())
        if m is None:
            return None
        return Capture.from_match(m)

    def describe(self) -> str:
        return f"path ~ {self.pattern!r}"


@dataclass(frozen=True, slots=True)
class HeaderMatcher:
    """Match the first value of a named request header against a regex.

    An absent header never matches, regardless of the pattern.

    Raises:
        MissingFieldError: If name or pattern is empty.
        InvalidPatternError: If the pattern does not compile.
    """

    name: str
    pattern: str
    _compiled: re2.Pattern[str] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.name:
            raise MissingFieldError("matchRequestHeader.name")
        if not self.pattern:
            raise MissingFieldError("matchRequestHeader.value")
        object.__setattr__(self, "_compiled", compile_pattern(self.pattern))

    def test(self, request: Request) -> bool:
        return self.capture(request) is not None

    def capture(self, request: Request) -> Capture | None:
        value = request.headers.get(self.name)
        if value is None:
            return None
        m = self._compiled.search(value)
        if m is None:
            return None
        return Capture.from_match(m)

    def describe(self) -> str:
        return f"header {self.name} ~ {self.pattern!r}"


# Polymorphic matcher; the variant is chosen once at compile time.
type Matcher = PathMatcher | HeaderMatcher
