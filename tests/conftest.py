"""Shared fixtures and the scenario fixture loader.

Scenario fixtures live in tests/fixtures/scenarios.yaml (multi-document).
Each document is turned into either a ScenarioCase per case, or a single
ErrorScenario when the config is expected to fail to load.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pytest
import structlog
import yaml

from rehead import Plugin, parse_plugin_config
from rehead.http import Headers, HttpRequest, HttpResponse

FIXTURES_DIR = Path(__file__).resolve().parent / "fixtures"


@pytest.fixture(autouse=True)
def _reset_structlog():
    """Undo structlog configuration done by CLI invocations."""
    yield
    structlog.reset_defaults()


@pytest.fixture
def make_plugin():
    """Build a Plugin from a config dict."""

    def _make(config: dict[str, Any]) -> Plugin:
        return Plugin.from_config(parse_plugin_config(config))

    return _make


# ─── Scenario fixtures ──────────────────────────────────────────────────────


@dataclass
class ScenarioCase:
    """One request run through one config."""

    fixture_name: str
    case_name: str
    config: dict[str, Any]
    request: HttpRequest
    response: HttpResponse
    outcome: str
    request_headers: dict[str, list[str]] = field(default_factory=dict)
    response_headers: dict[str, list[str]] = field(default_factory=dict)
    absent_request: list[str] = field(default_factory=list)
    absent_response: list[str] = field(default_factory=list)

    @property
    def id(self) -> str:
        return f"{self.fixture_name}::{self.case_name}"


@dataclass
class ErrorScenario:
    """A config that must be rejected at load time."""

    fixture_name: str
    config: dict[str, Any]
    error: str


def _headers(data: dict[str, Any] | None) -> Headers:
    headers = Headers()
    for name, value in (data or {}).items():
        values = value if isinstance(value, list) else [value]
        for v in values:
            headers.add(str(name), str(v))
    return headers


def _load_documents() -> list[dict[str, Any]]:
    docs: list[dict[str, Any]] = []
    for yaml_file in sorted(FIXTURES_DIR.glob("*.yaml")):
        with yaml_file.open() as f:
            docs.extend(doc for doc in yaml.safe_load_all(f) if doc is not None)
    return docs


def load_scenarios() -> list[ScenarioCase]:
    cases: list[ScenarioCase] = []
    for doc in _load_documents():
        if "expect_error" in doc:
            continue
        for case in doc["cases"]:
            req = case["request"]
            expect = case.get("expect", {})
            absent = case.get("absent", {})
            cases.append(
                ScenarioCase(
                    fixture_name=doc["name"],
                    case_name=case["name"],
                    config=doc["config"],
                    request=HttpRequest(uri=req.get("uri", "/"), headers=_headers(req.get("headers"))),
                    response=HttpResponse(headers=_headers(case.get("response", {}).get("headers"))),
                    outcome=expect.get("outcome", "continue"),
                    request_headers=expect.get("request_headers", {}),
                    response_headers=expect.get("response_headers", {}),
                    absent_request=absent.get("request", []),
                    absent_response=absent.get("response", []),
                )
            )
    return cases


def load_error_scenarios() -> list[ErrorScenario]:
    return [
        ErrorScenario(fixture_name=doc["name"], config=doc["config"], error=doc["expect_error"])
        for doc in _load_documents()
        if "expect_error" in doc
    ]
