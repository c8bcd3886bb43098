"""Plugin — compiled manipulations applied to each HTTP transaction.

Compilation turns a PluginConfig into an immutable tree:

| Config type          | Runtime type               |
|----------------------|----------------------------|
| PluginConfig         | Plugin                     |
| ManipulationConfig   | Manipulation               |
| matchPath            | PathMatcher                |
| HeaderMatchConfig    | HeaderMatcher              |
| CustomHeaderConfig   | HeaderRule                 |

Evaluation semantics:
- Manipulations are evaluated in configured order, every one of them; a match
  does not stop evaluation of the rest
- Within a manipulation, request rules apply before response rules, each in
  configured order
- A template execution error aborts the whole call; mutations already
  applied stay in place
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

import structlog

from rehead._config import load_plugin_config, loads_plugin_config
from rehead._errors import ConfigError, MissingFieldError, TemplateExecutionError, located
from rehead._matcher import HeaderMatcher, PathMatcher
from rehead._template import Template

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

    from rehead._config import CustomHeaderConfig, ManipulationConfig, PluginConfig
    from rehead._matcher import Matcher
    from rehead._template import Capture
    from rehead._types import MutableHeaders, Request, Response

MAX_MANIPULATIONS = 256


class Outcome(Enum):
    """Result of one Plugin.process call."""

    CONTINUE = "continue"
    ABORT = "abort"

    @property
    def next(self) -> bool:
        """Whether the host should pass the request on to the next handler."""
        return self is Outcome.CONTINUE


@dataclass(frozen=True, slots=True)
class HeaderRule:
    """Set or append one header, with a value computed from a Capture."""

    name: str
    template: Template
    replace: bool = False

    def __post_init__(self) -> None:
        if not self.name:
            raise MissingFieldError("header name")

    def apply(self, headers: MutableHeaders, capture: Capture) -> str:
        """Expand the template and write it to ``headers``.

        Returns the written value.

        Raises:
            TemplateExecutionError: If the template cannot be expanded.
        """
        value = self.template.expand(capture)
        if self.replace:
            headers.set(self.name, value)
        else:
            headers.add(self.name, value)
        return value


@dataclass(frozen=True, slots=True)
class Manipulation:
    """A matcher paired with the header rules it triggers."""

    matcher: Matcher
    request_headers: tuple[HeaderRule, ...] = ()
    response_headers: tuple[HeaderRule, ...] = ()

    def apply(self, request: Request, response: Response) -> bool:
        """Apply this manipulation if the request matches.

        Returns whether the request matched.

        Raises:
            TemplateExecutionError: If any rule's template cannot be expanded.
        """
        capture = self.matcher.capture(request)
        if capture is None:
            return False
        for rule in self.request_headers:
            rule.apply(request.headers, capture)
        for rule in self.response_headers:
            rule.apply(response.headers, capture)
        return True


@dataclass(frozen=True, slots=True)
class Plugin:
    """Ordered, immutable list of manipulations.

    Build once with from_config() (or bootstrap() for raw config text), then
    call process() once per transaction. process() only mutates the request
    and response it is given, so one Plugin may serve concurrent calls.
    """

    manipulations: tuple[Manipulation, ...] = ()
    logger: Any = field(default_factory=structlog.get_logger, repr=False, compare=False)

    @classmethod
    def from_config(cls, config: PluginConfig, logger: Any = None) -> Plugin:
        """Compile a PluginConfig.

        Raises:
            ConfigError: If any manipulation fails to compile. The message
                is prefixed with the manipulation's position.
        """
        if len(config.manipulations) > MAX_MANIPULATIONS:
            msg = (
                f"too many manipulations: {len(config.manipulations)} "
                f"exceeds maximum {MAX_MANIPULATIONS}"
            )
            raise ConfigError(msg)

        manipulations = []
        for i, m in enumerate(config.manipulations):
            try:
                manipulations.append(compile_manipulation(m))
            except ConfigError as e:
                raise located(e, f"manipulations[{i}]") from None

        if logger is None:
            return cls(manipulations=tuple(manipulations))
        return cls(manipulations=tuple(manipulations), logger=logger)

    def process(self, request: Request, response: Response) -> Outcome:
        """Apply every matching manipulation to one transaction.

        Never raises for request-time failures: a template execution error
        is logged and reported as Outcome.ABORT.
        """
        for index, m in enumerate(self.manipulations):
            try:
                matched = m.apply(request, response)
            except TemplateExecutionError as e:
                self.logger.error(
                    "template execution failed",
                    manipulation=index,
                    error=str(e),
                )
                return Outcome.ABORT
            if matched:
                self.logger.debug(
                    "manipulation matched",
                    manipulation=index,
                    matcher=m.matcher.describe(),
                )
        return Outcome.CONTINUE


def compile_manipulation(config: ManipulationConfig) -> Manipulation:
    """Compile one ManipulationConfig.

    Raises:
        MissingFieldError: Both or neither matchers set, or an empty name.
        InvalidPatternError: A pattern does not compile.
        InvalidTemplateError: A header value template does not parse.
    """
    return Manipulation(
        matcher=_compile_matcher(config),
        request_headers=_compile_rules(
            config.custom_request_headers, "customRequestHeaders"
        ),
        response_headers=_compile_rules(
            config.custom_response_headers, "customResponseHeaders"
        ),
    )


def _compile_matcher(config: ManipulationConfig) -> Matcher:
    has_path = bool(config.match_path)
    has_header = config.match_request_header is not None

    if has_path and has_header:
        raise MissingFieldError(
            "matchPath/matchRequestHeader",
            "are mutually exclusive, got both",
        )
    if has_header:
        hm = config.match_request_header
        return HeaderMatcher(name=hm.name, pattern=hm.value)
    if has_path:
        return PathMatcher(config.match_path)
    raise MissingFieldError(
        "matchPath/matchRequestHeader",
        "exactly one is required, got neither",
    )


def _compile_rules(
    configs: tuple[CustomHeaderConfig, ...], where: str
) -> tuple[HeaderRule, ...]:
    rules = []
    for i, h in enumerate(configs):
        try:
            rules.append(HeaderRule(h.name, Template(h.value), h.replace))
        except ConfigError as e:
            raise located(e, f"{where}[{i}]") from None
    return tuple(rules)


def bootstrap(raw: str | bytes, fmt: str = "json", logger: Any = None) -> Plugin:
    """Parse and compile raw configuration the way a host loads the plugin.

    Logs the failure before re-raising, so hosts only need to exit.

    Raises:
        ConfigError: If the configuration cannot be parsed or compiled.
    """
    return _start(lambda: loads_plugin_config(raw, fmt), logger)


def load_plugin(path: str | Path, logger: Any = None) -> Plugin:
    """Like bootstrap(), reading the configuration from a JSON or YAML file."""
    return _start(lambda: load_plugin_config(path), logger)


def _start(load: Callable[[], PluginConfig], logger: Any) -> Plugin:
    log = logger if logger is not None else structlog.get_logger()
    try:
        plugin = Plugin.from_config(load(), logger=log)
    except ConfigError as e:
        log.error("could not load config", error=str(e))
        raise
    log.debug("plugin loaded", manipulations=len(plugin.manipulations))
    return plugin
