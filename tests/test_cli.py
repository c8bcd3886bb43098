"""Tests for the command-line host."""

from __future__ import annotations

import json

import pytest
from click.testing import CliRunner

from rehead.cli import EXIT_ABORTED, EXIT_CONFIG_ERROR, main

RULES = {
    "manipulations": [
        {
            "matchPath": "^/api/(?P<id>[0-9]+)$",
            "customRequestHeaders": [{"name": "X-Id", "value": "{{.id}}", "replace": True}],
            "customResponseHeaders": [{"name": "X-Api", "value": "yes"}],
        },
        {
            "matchRequestHeader": {"name": "Cookie", "value": "session=(\\w+)"},
            "customRequestHeaders": [{"name": "X-Session", "value": "$1", "replace": True}],
        },
    ]
}


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def rules_file(tmp_path):
    path = tmp_path / "rules.json"
    path.write_text(json.dumps(RULES))
    return path


class TestCheck:
    def test_valid_config(self, runner: CliRunner, rules_file) -> None:
        result = runner.invoke(main, ["check", str(rules_file)])
        assert result.exit_code == 0
        assert "OK: 2 manipulations" in result.output

    def test_singular(self, runner: CliRunner, tmp_path) -> None:
        path = tmp_path / "one.yaml"
        path.write_text("manipulations:\n  - matchPath: '^/'\n")
        result = runner.invoke(main, ["check", str(path)])
        assert result.exit_code == 0
        assert "OK: 1 manipulation\n" in result.output

    def test_invalid_config_exits_nonzero(self, runner: CliRunner, tmp_path) -> None:
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"manipulations": [{"matchPath": "(("}]}))
        result = runner.invoke(main, ["check", str(path)])
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "manipulations[0]: invalid regex pattern" in result.output

    def test_malformed_document(self, runner: CliRunner, tmp_path) -> None:
        path = tmp_path / "bad.json"
        path.write_text("{")
        result = runner.invoke(main, ["check", str(path)])
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "invalid JSON" in result.output

    def test_invalid_utf8_file(self, runner: CliRunner, tmp_path) -> None:
        path = tmp_path / "bad.json"
        path.write_bytes(b'{"manipulations": [{"matchPath": "\xff"}]}')
        result = runner.invoke(main, ["check", str(path)])
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "Error:" in result.output
        assert "not valid UTF-8" in result.output

    def test_missing_file(self, runner: CliRunner, tmp_path) -> None:
        result = runner.invoke(main, ["check", str(tmp_path / "nope.json")])
        assert result.exit_code == EXIT_CONFIG_ERROR
        assert "cannot read config file" in result.output

    def test_config_from_env(self, runner: CliRunner, rules_file) -> None:
        result = runner.invoke(main, ["check"], env={"REHEAD_CONFIG": str(rules_file)})
        assert result.exit_code == 0
        assert "OK: 2 manipulations" in result.output


class TestApply:
    def test_path_match(self, runner: CliRunner, rules_file) -> None:
        result = runner.invoke(main, ["apply", str(rules_file), "--uri", "/api/42"])
        assert result.exit_code == 0
        assert "  X-Id: 42" in result.output
        assert "  X-Api: yes" in result.output

    def test_header_match(self, runner: CliRunner, rules_file) -> None:
        result = runner.invoke(
            main,
            ["apply", str(rules_file), "-H", "Cookie: session=abc123", "--json"],
        )
        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["outcome"] == "continue"
        assert data["request_headers"] == [
            ["Cookie", "session=abc123"],
            ["X-Session", "abc123"],
        ]
        assert data["response_headers"] == []

    def test_response_headers_appended(self, runner: CliRunner, rules_file) -> None:
        result = runner.invoke(
            main,
            ["apply", str(rules_file), "--uri", "/api/1", "-R", "X-Api: upstream", "--json"],
        )
        data = json.loads(result.output)
        assert data["response_headers"] == [["X-Api", "upstream"], ["X-Api", "yes"]]

    def test_bad_header_option(self, runner: CliRunner, rules_file) -> None:
        result = runner.invoke(main, ["apply", str(rules_file), "-H", "no-colon"])
        assert result.exit_code == 2
        assert "expected 'Name: value'" in result.output

    def test_abort_exit_code(self, runner: CliRunner, tmp_path) -> None:
        path = tmp_path / "abort.json"
        path.write_text(
            json.dumps(
                {
                    "manipulations": [
                        {
                            "matchPath": "^/",
                            "customRequestHeaders": [{"name": "X", "value": "{{.missing}}"}],
                        }
                    ]
                }
            )
        )
        result = runner.invoke(main, ["apply", str(path)])
        assert result.exit_code == EXIT_ABORTED
        assert "Aborted" in result.output


class TestLogging:
    def test_debug_log_level(self, runner: CliRunner, rules_file) -> None:
        result = runner.invoke(
            main, ["--log-level", "debug", "apply", str(rules_file), "--uri", "/api/9"]
        )
        assert result.exit_code == 0
        assert "plugin loaded" in result.output
        assert "manipulation matched" in result.output

    def test_default_level_is_quiet(self, runner: CliRunner, rules_file) -> None:
        result = runner.invoke(main, ["apply", str(rules_file), "--uri", "/api/9"])
        assert "plugin loaded" not in result.output
