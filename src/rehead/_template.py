"""Header value templates and the capture context they expand against.

Every matcher produces the same Capture, and every header value is a
Template compiled once at load time. One substitution model serves both
path and header matching:

| Syntax          | Meaning                           | Unknown reference  |
|-----------------|-----------------------------------|--------------------|
| ``$1``, ``${1}``  | positional group (``$0`` = match)  | expands to ""      |
| ``$id``, ``${id}``| named group                       | expands to ""      |
| ``{{ .id }}``     | named group, strict               | TemplateExecutionError |
| ``$$``            | literal ``$``                       |                    |

``$name`` takes the longest run of letters, digits and underscores, so
``$1x`` is the group named ``1x``, not group 1 followed by ``x``. A ``$``
that does not start a valid reference is kept as literal text.

Actions accept ``-`` trim markers (``{{- .id -}}`` drops the whitespace
before and after the action) and ``{{/* ... */}}`` comments, which expand to
nothing.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from rehead._errors import InvalidTemplateError, TemplateExecutionError

if TYPE_CHECKING:
    from collections.abc import Mapping

_NAME = re.compile(r"[A-Za-z0-9_]+")
_FIELD_ACTION = re.compile(r"^\.([A-Za-z_][A-Za-z0-9_]*)$")
_SPACE = " \t\r\n"


@dataclass(frozen=True, slots=True)
class Capture:
    """Substrings extracted from one successful match.

    ``groups[0]`` is the whole match. Groups that did not participate in the
    match are None and expand to the empty string.
    """

    groups: tuple[str | None, ...]
    named: Mapping[str, str | None] = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def from_match(cls, match: Any) -> Capture:
        """Build a Capture from a regex match object."""
        return cls(
            groups=(match.group(0), *match.groups()),
            named=MappingProxyType(dict(match.groupdict())),
        )


# ═══════════════════════════════════════════════════════════════════════════════
# Segments
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class Text:
    text: str


@dataclass(frozen=True, slots=True)
class GroupRef:
    """Positional reference, ``$N`` or ``${N}``."""

    index: int


@dataclass(frozen=True, slots=True)
class NameRef:
    """Named reference. Strict references fail when the name is unknown."""

    name: str
    strict: bool = False


type Segment = Text | GroupRef | NameRef


@dataclass(frozen=True, slots=True)
class Template:
    """A compiled header value template.

    Parsing happens at construction time; a template that constructs
    successfully can only fail at expansion through a strict reference.

    Raises:
        InvalidTemplateError: If the source contains a malformed action.
    """

    source: str
    _segments: tuple[Segment, ...] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_segments", _parse(self.source))

    @property
    def segments(self) -> tuple[Segment, ...]:
        return self._segments

    @property
    def is_literal(self) -> bool:
        """True when the template contains no references at all."""
        return all(isinstance(s, Text) for s in self._segments)

    def expand(self, capture: Capture) -> str:
        """Substitute references with values from the capture.

        Raises:
            TemplateExecutionError: If a strict reference names a group the
                capture does not have.
        """
        out: list[str] = []
        for segment in self._segments:
            match segment:
                case Text(text=text):
                    out.append(text)
                case GroupRef(index=index):
                    if index < len(capture.groups):
                        out.append(capture.groups[index] or "")
                case NameRef(name=name, strict=strict):
                    if name not in capture.named:
                        if strict:
                            raise TemplateExecutionError(
                                self.source, name, list(capture.named)
                            )
                        continue
                    out.append(capture.named[name] or "")
        return "".join(out)


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing
# ═══════════════════════════════════════════════════════════════════════════════


def _parse(source: str) -> tuple[Segment, ...]:
    segments: list[Segment] = []
    text: list[str] = []
    i = 0
    n = len(source)

    def flush() -> None:
        if text:
            segments.append(Text("".join(text)))
            text.clear()

    while i < n:
        if source.startswith("{{", i):
            end = source.find("}}", i + 2)
            if end < 0:
                raise InvalidTemplateError(source, f"unclosed action at offset {i}")
            body = source[i + 2 : end]
            i = end + 2
            if len(body) >= 2 and body[0] == "-" and body[1] in _SPACE:
                body = body[1:]
                trimmed = "".join(text).rstrip(_SPACE)
                text.clear()
                if trimmed:
                    text.append(trimmed)
            if len(body) >= 2 and body[-1] == "-" and body[-2] in _SPACE:
                body = body[:-1]
                while i < n and source[i] in _SPACE:
                    i += 1
            if _is_comment(body):
                continue
            flush()
            segments.append(_parse_action(source, body))
            continue

        if source[i] == "$":
            ref, consumed = _parse_dollar(source, i)
            if ref is None:
                text.append(source[i : i + consumed])
            else:
                flush()
                segments.append(ref)
            i += consumed
            continue

        text.append(source[i])
        i += 1

    flush()
    return tuple(_merge_literals(segments))


def _is_comment(body: str) -> bool:
    inner = body.strip()
    return len(inner) >= 4 and inner.startswith("/*") and inner.endswith("*/")


def _parse_action(source: str, body: str) -> NameRef:
    """Parse the body of a ``{{ ... }}`` action. Only ``.name`` is supported."""
    inner = body.strip()
    m = _FIELD_ACTION.match(inner)
    if m is None:
        msg = f"unsupported action {{{{{body}}}}}, expected {{{{.name}}}}"
        raise InvalidTemplateError(source, msg)
    return NameRef(m.group(1), strict=True)


def _parse_dollar(source: str, i: int) -> tuple[Segment | None, int]:
    """Parse a ``$`` reference starting at ``source[i]``.

    Returns the reference (or a literal for ``$$``) and the number of
    characters consumed. A malformed reference yields ``(None, 1)`` so the
    ``$`` is kept as text.
    """
    if source.startswith("$$", i):
        return Text("$"), 2

    if source.startswith("${", i):
        end = source.find("}", i + 2)
        if end < 0:
            return None, 1
        name = source[i + 2 : end]
        if not _NAME.fullmatch(name):
            return None, 1
        return _ref(name), end - i + 1

    m = _NAME.match(source, i + 1)
    if m is None:
        return None, 1
    return _ref(m.group(0)), m.end() - i


def _ref(name: str) -> GroupRef | NameRef:
    if name.isdigit():
        return GroupRef(int(name))
    return NameRef(name)


def _merge_literals(segments: list[Segment]) -> list[Segment]:
    merged: list[Segment] = []
    for segment in segments:
        if merged and isinstance(segment, Text) and isinstance(merged[-1], Text):
            merged[-1] = Text(merged[-1].text + segment.text)
        else:
            merged.append(segment)
    return merged
