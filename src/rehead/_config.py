"""Config types for plugin construction.

The JSON shape is the one the plugin has always accepted:

    {"manipulations": [
        {"matchPath": "^/api/(?P<id>[0-9]+)$",
         "customRequestHeaders": [{"name": "X-Id", "value": "{{.id}}", "replace": true}],
         "customResponseHeaders": []},
        {"matchRequestHeader": {"name": "Cookie", "value": "session=(\\w+)"},
         "customRequestHeaders": [{"name": "X-Session", "value": "$1"}]}
    ]}

Config-driven construction path:
  text/file → load(s)_plugin_config() → dict → parse_plugin_config()
  → PluginConfig → Plugin.from_config() → Plugin

Parsing only checks shape and types. Semantic checks (exactly one matcher,
non-empty names, regex and template syntax) happen at compile time in
Plugin.from_config(). Unknown keys are ignored.
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from rehead._errors import ConfigParseError

# ═══════════════════════════════════════════════════════════════════════════════
# Config types (frozen dataclasses, one per JSON object)
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CustomHeaderConfig:
    """One header mutation: name, value template, replace-vs-append."""

    name: str
    value: str = ""
    replace: bool = False


@dataclass(frozen=True, slots=True)
class HeaderMatchConfig:
    """Match on a request header's value."""

    name: str
    value: str


@dataclass(frozen=True, slots=True)
class ManipulationConfig:
    """One manipulation: a matcher plus request and response header lists.

    Exactly one of match_path or match_request_header must be set; this is
    enforced when compiling, not when parsing.
    """

    match_path: str | None = None
    match_request_header: HeaderMatchConfig | None = None
    custom_request_headers: tuple[CustomHeaderConfig, ...] = ()
    custom_response_headers: tuple[CustomHeaderConfig, ...] = ()


@dataclass(frozen=True, slots=True)
class PluginConfig:
    """Top-level plugin configuration. Order of manipulations is significant."""

    manipulations: tuple[ManipulationConfig, ...] = ()


# ═══════════════════════════════════════════════════════════════════════════════
# Loading (text/file → dict)
# ═══════════════════════════════════════════════════════════════════════════════

_YAML_SUFFIXES = frozenset({".yaml", ".yml"})


def loads_plugin_config(text: str | bytes, fmt: str = "json") -> PluginConfig:
    """Parse a JSON or YAML document into a PluginConfig.

    Raises:
        ConfigParseError: If the document is not valid JSON/YAML or has the
            wrong shape.
    """
    if fmt == "json":
        try:
            data = json.loads(text)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            msg = f"invalid JSON: {e}"
            raise ConfigParseError(msg) from e
    elif fmt == "yaml":
        try:
            data = yaml.safe_load(text)
        except yaml.YAMLError as e:
            msg = f"invalid YAML: {e}"
            raise ConfigParseError(msg) from e
    else:
        msg = f"unknown config format: {fmt!r} (expected 'json' or 'yaml')"
        raise ConfigParseError(msg)
    return parse_plugin_config(data)


def load_plugin_config(path: str | Path) -> PluginConfig:
    """Read a config file. ``.yaml``/``.yml`` files are YAML, anything else JSON.

    Raises:
        ConfigParseError: If the file cannot be read or parsed.
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as e:
        msg = f"cannot read config file {str(path)!r}: {e.strerror or e}"
        raise ConfigParseError(msg) from e
    except UnicodeDecodeError as e:
        msg = f"config file {str(path)!r} is not valid UTF-8: {e}"
        raise ConfigParseError(msg) from e
    fmt = "yaml" if path.suffix.lower() in _YAML_SUFFIXES else "json"
    return loads_plugin_config(text, fmt)


# ═══════════════════════════════════════════════════════════════════════════════
# Parsing (dict → config types)
# ═══════════════════════════════════════════════════════════════════════════════


def parse_plugin_config(data: Any) -> PluginConfig:
    """Parse a dict into a PluginConfig.

    A missing or null ``manipulations`` field yields an empty config.

    Raises:
        ConfigParseError: If the dict is malformed.
    """
    if data is None:
        return PluginConfig()
    if not isinstance(data, dict):
        msg = f"config must be an object, got {_type_name(data)}"
        raise ConfigParseError(msg)

    raw = data.get("manipulations")
    if raw is None:
        return PluginConfig()
    if not isinstance(raw, list):
        msg = f"'manipulations' must be a list, got {_type_name(raw)}"
        raise ConfigParseError(msg)

    return PluginConfig(
        manipulations=tuple(
            _parse_manipulation(m, f"manipulations[{i}]") for i, m in enumerate(raw)
        )
    )


def _parse_manipulation(data: Any, where: str) -> ManipulationConfig:
    if not isinstance(data, dict):
        msg = f"{where}: manipulation must be an object, got {_type_name(data)}"
        raise ConfigParseError(msg)

    match_path = data.get("matchPath")
    if match_path is not None and not isinstance(match_path, str):
        msg = f"{where}: 'matchPath' must be a string, got {_type_name(match_path)}"
        raise ConfigParseError(msg)

    header_match = None
    if data.get("matchRequestHeader") is not None:
        header_match = _parse_header_match(
            data["matchRequestHeader"], f"{where}.matchRequestHeader"
        )

    return ManipulationConfig(
        match_path=match_path,
        match_request_header=header_match,
        custom_request_headers=_parse_header_list(
            data.get("customRequestHeaders"), f"{where}.customRequestHeaders"
        ),
        custom_response_headers=_parse_header_list(
            data.get("customResponseHeaders"), f"{where}.customResponseHeaders"
        ),
    )


def _parse_header_match(data: Any, where: str) -> HeaderMatchConfig:
    if not isinstance(data, dict):
        msg = f"{where}: must be an object, got {_type_name(data)}"
        raise ConfigParseError(msg)
    return HeaderMatchConfig(
        name=_optional_str(data, "name", where),
        value=_optional_str(data, "value", where),
    )


def _parse_header_list(data: Any, where: str) -> tuple[CustomHeaderConfig, ...]:
    if data is None:
        return ()
    if not isinstance(data, list):
        msg = f"{where}: must be a list, got {_type_name(data)}"
        raise ConfigParseError(msg)
    return tuple(_parse_custom_header(h, f"{where}[{i}]") for i, h in enumerate(data))


def _parse_custom_header(data: Any, where: str) -> CustomHeaderConfig:
    if not isinstance(data, dict):
        msg = f"{where}: header must be an object, got {_type_name(data)}"
        raise ConfigParseError(msg)

    replace = data.get("replace", False)
    if replace is None:
        replace = False
    if not isinstance(replace, bool):
        msg = f"{where}: 'replace' must be a boolean, got {_type_name(replace)}"
        raise ConfigParseError(msg)

    return CustomHeaderConfig(
        name=_optional_str(data, "name", where),
        value=_optional_str(data, "value", where),
        replace=replace,
    )


def _optional_str(data: dict[str, Any], key: str, where: str) -> str:
    """Return a string field; absent or null reads as empty."""
    value = data.get(key)
    if value is None:
        return ""
    if not isinstance(value, str):
        msg = f"{where}: {key!r} must be a string, got {_type_name(value)}"
        raise ConfigParseError(msg)
    return value


def _type_name(value: Any) -> str:
    return type(value).__name__
