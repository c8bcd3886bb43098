"""Command-line host for rehead.

Loads a configuration exactly as a proxy host would (refusing to start on
any config error) and runs single requests through the plugin.

Usage:
    rehead check rules.json
    rehead apply rules.yaml --uri /api/42 -H "Cookie: session=abc123"
"""

from __future__ import annotations

import json
import logging
import sys

import click
import structlog

from rehead._errors import ConfigError
from rehead._plugin import Outcome, Plugin, load_plugin
from rehead.http import Headers, HttpRequest, HttpResponse

EXIT_CONFIG_ERROR = 1
EXIT_ABORTED = 2


def configure_logging(level: str) -> None:
    """Route structlog output to stderr, filtered at ``level``."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level.upper())
        ),
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
    )


def _parse_header(ctx: click.Context, param: click.Parameter, values: tuple[str, ...]) -> Headers:
    headers = Headers()
    for raw in values:
        name, sep, value = raw.partition(":")
        if not sep or not name.strip():
            msg = f"expected 'Name: value', got {raw!r}"
            raise click.BadParameter(msg, ctx=ctx, param=param)
        headers.add(name.strip(), value.strip())
    return headers


def _load(config: str) -> Plugin:
    try:
        return load_plugin(config)
    except ConfigError as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(EXIT_CONFIG_ERROR)


@click.group()
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default="warning",
    show_default=True,
    help="Log level",
)
@click.version_option(package_name="rehead")
def main(log_level: str) -> None:
    """Header manipulation by request path or header match."""
    configure_logging(log_level)


@main.command()
@click.argument("config", envvar="REHEAD_CONFIG", type=click.Path(dir_okay=False))
def check(config: str) -> None:
    """Validate CONFIG and report how many manipulations it defines."""
    plugin = _load(config)
    count = len(plugin.manipulations)
    click.echo(f"OK: {count} manipulation{'' if count == 1 else 's'}")


@main.command()
@click.argument("config", envvar="REHEAD_CONFIG", type=click.Path(dir_okay=False))
@click.option("--uri", default="/", show_default=True, help="Request path and query string")
@click.option(
    "--header",
    "-H",
    "request_headers",
    multiple=True,
    callback=_parse_header,
    help="Request header, 'Name: value' (repeatable)",
)
@click.option(
    "--response-header",
    "-R",
    "response_headers",
    multiple=True,
    callback=_parse_header,
    help="Upstream response header, 'Name: value' (repeatable)",
)
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def apply(
    config: str,
    uri: str,
    request_headers: Headers,
    response_headers: Headers,
    json_output: bool,
) -> None:
    """Run one request through CONFIG and print the resulting headers."""
    plugin = _load(config)
    request = HttpRequest(uri=uri, headers=request_headers)
    response = HttpResponse(headers=response_headers)

    outcome = plugin.process(request, response)

    if json_output:
        click.echo(
            json.dumps(
                {
                    "outcome": outcome.value,
                    "request_headers": [list(p) for p in request.headers.items()],
                    "response_headers": [list(p) for p in response.headers.items()],
                },
                indent=2,
            )
        )
    else:
        click.echo("Request headers:")
        for name, value in request.headers.items():
            click.echo(f"  {name}: {value}")
        click.echo("Response headers:")
        for name, value in response.headers.items():
            click.echo(f"  {name}: {value}")

    if outcome is Outcome.ABORT:
        click.echo("Aborted: template execution failed", err=True)
        sys.exit(EXIT_ABORTED)


if __name__ == "__main__":
    main()
