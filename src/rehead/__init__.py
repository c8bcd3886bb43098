"""rehead — request/response header manipulation by regex match.

All public types are exported from this module for flat imports:

    from rehead import Plugin, bootstrap, Outcome
"""

__version__ = "0.3.0"

# Config types (see rehead._config)
from rehead._config import (
    CustomHeaderConfig,
    HeaderMatchConfig,
    ManipulationConfig,
    PluginConfig,
    load_plugin_config,
    loads_plugin_config,
    parse_plugin_config,
)

# Errors
from rehead._errors import (
    ConfigError,
    ConfigParseError,
    InvalidPatternError,
    InvalidTemplateError,
    MissingFieldError,
    PatternTooLongError,
    ProcessingError,
    TemplateExecutionError,
)

# Matchers
from rehead._matcher import (
    MAX_PATTERN_LENGTH,
    HeaderMatcher,
    Matcher,
    PathMatcher,
    compile_pattern,
)

# Engine
from rehead._plugin import (
    MAX_MANIPULATIONS,
    HeaderRule,
    Manipulation,
    Outcome,
    Plugin,
    bootstrap,
    compile_manipulation,
    load_plugin,
)

# Templates
from rehead._template import Capture, Template

# Protocols
from rehead._types import MutableHeaders, Request, Response

__all__ = [
    # Protocols
    "MutableHeaders",
    "Request",
    "Response",
    # Templates
    "Capture",
    "Template",
    # Matchers
    "Matcher",
    "PathMatcher",
    "HeaderMatcher",
    "compile_pattern",
    "MAX_PATTERN_LENGTH",
    # Engine
    "HeaderRule",
    "Manipulation",
    "Outcome",
    "Plugin",
    "bootstrap",
    "compile_manipulation",
    "load_plugin",
    "MAX_MANIPULATIONS",
    # Config types
    "CustomHeaderConfig",
    "HeaderMatchConfig",
    "ManipulationConfig",
    "PluginConfig",
    "parse_plugin_config",
    "loads_plugin_config",
    "load_plugin_config",
    # Errors
    "ConfigError",
    "ConfigParseError",
    "MissingFieldError",
    "InvalidPatternError",
    "PatternTooLongError",
    "InvalidTemplateError",
    "ProcessingError",
    "TemplateExecutionError",
]
