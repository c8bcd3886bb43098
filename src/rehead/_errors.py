"""Error taxonomy.

Two families that never overlap:

- ConfigError: raised while parsing or compiling configuration, before any
  request is processed. Always fatal for the plugin.
- ProcessingError: raised while applying a manipulation to one request.
  Stops that request's header mutations and nothing else.
"""

from __future__ import annotations


class ConfigError(Exception):
    """Base class for startup-time configuration errors."""


class ConfigParseError(ConfigError):
    """The configuration document is malformed."""


class MissingFieldError(ConfigError):
    """A required field is absent, empty, or conflicts with another field."""

    def __init__(self, field: str, detail: str = "is required") -> None:
        self.field = field
        super().__init__(f"{field} {detail}")


class InvalidPatternError(ConfigError):
    """A regular expression failed to compile."""

    def __init__(self, pattern: str, reason: str) -> None:
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"invalid regex pattern {pattern!r}: {reason}")


class PatternTooLongError(InvalidPatternError):
    """A regular expression exceeds the length limit."""

    def __init__(self, pattern: str, max_: int) -> None:
        self.max = max_
        super().__init__(pattern, f"length {len(pattern)} exceeds maximum {max_}")


class InvalidTemplateError(ConfigError):
    """A header value template failed to parse."""

    def __init__(self, template: str, reason: str) -> None:
        self.template = template
        self.reason = reason
        super().__init__(f"invalid template {template!r}: {reason}")


class ProcessingError(Exception):
    """Base class for request-time errors."""


class TemplateExecutionError(ProcessingError):
    """A template referenced data the capture context does not provide."""

    def __init__(self, template: str, name: str, available: list[str]) -> None:
        self.template = template
        self.name = name
        self.available = sorted(available)
        if self.available:
            names = ", ".join(self.available)
            msg = f"template {template!r} references unknown group {name!r} (available: {names})"
        else:
            msg = f"template {template!r} references unknown group {name!r} (no named groups)"
        super().__init__(msg)


def located(error: ConfigError, where: str) -> ConfigError:
    """Prefix a config error's message with its location in the document.

    The returned error has the same type and attributes as the original.
    """
    error.args = (f"{where}: {error}",)
    return error
