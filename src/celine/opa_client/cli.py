"""OPA client CLI.

Usage:
    celine-opa query my.resource.allow --input '{"subject": {"id": "u1"}}'
    celine-opa evaluate my.resource.allow --url http://localhost:8181
    celine-opa assert my.resource.allow --expected false
"""

from __future__ import annotations

import asyncio
import json
from typing import Annotated, Any, Optional

import typer

from celine.opa_client.client import PolicyClient
from celine.opa_client.config import PolicyClientConfig, Settings
from celine.opa_client.errors import ErrorKind, OpaClientError
from celine.opa_client.logs import configure_logging
from celine.opa_client.transport import HttpxTransport

app = typer.Typer(
    name="celine-opa",
    help="Query policy decisions from an OPA server",
    add_completion=False,
)

InputOption = Annotated[
    Optional[str],
    typer.Option("--input", "-i", help="Input document as JSON"),
]
UrlOption = Annotated[
    Optional[str],
    typer.Option("--url", "-u", help="OPA base URL"),
]
VersionOption = Annotated[
    Optional[str],
    typer.Option("--opa-version", help="OPA API version"),
]
MethodOption = Annotated[
    Optional[str],
    typer.Option("--method", "-m", help="HTTP method (GET or POST)"),
]
VerboseOption = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Enable verbose output"),
]


def _parse_input(raw: str | None, option: str = "--input") -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except ValueError as e:
        typer.secho(f"Invalid {option} JSON: {e}", fg=typer.colors.RED, err=True)
        raise typer.Exit(2)


def _build_client(
    url: str | None, opa_version: str | None, method: str | None
) -> PolicyClient:
    """Build a client from environment settings and CLI overrides."""
    settings = Settings()
    config = PolicyClientConfig(
        url=url or settings.url,
        opa_version=opa_version or settings.version,
        method=method or settings.method,
    )
    return PolicyClient(config, HttpxTransport(timeout=settings.timeout))


def _run(verbose: bool, client: PolicyClient, call) -> Any:
    # Without --verbose the level comes from CELINE_OPA_LOG_LEVEL.
    configure_logging(log_level="DEBUG" if verbose else Settings().log_level)

    async def _call() -> Any:
        async with client:
            return await call(client)

    try:
        return asyncio.run(_call())
    except OpaClientError as e:
        typer.secho(f"{e} [{e.kind.value}]", fg=typer.colors.RED, err=True)
        if e.kind == ErrorKind.BAD_REQUEST and e.response and e.response.warning:
            typer.secho(
                f"{e.response.warning.code}: {e.response.warning.message}",
                fg=typer.colors.RED,
                err=True,
            )
        if e.status_code is not None:
            typer.secho(f"status: {e.status_code}", fg=typer.colors.RED, err=True)
        raise typer.Exit(1)


@app.command("query")
def query(
    resource: str = typer.Argument(help="Resource in dot or slash notation"),
    input: InputOption = None,
    url: UrlOption = None,
    opa_version: VersionOption = None,
    method: MethodOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print the raw query response as JSON."""
    input_data = _parse_input(input)
    client = _build_client(url, opa_version, method)
    result = _run(verbose, client, lambda c: c.query(resource, input_data))
    typer.echo(json.dumps(result, indent=2, sort_keys=True))


@app.command("evaluate")
def evaluate(
    resource: str = typer.Argument(help="Resource in dot or slash notation"),
    input: InputOption = None,
    url: UrlOption = None,
    opa_version: VersionOption = None,
    method: MethodOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Print the boolean decision of a policy."""
    input_data = _parse_input(input)
    client = _build_client(url, opa_version, method)
    allowed = _run(verbose, client, lambda c: c.evaluate(resource, input_data))
    typer.echo("true" if allowed else "false")


@app.command("assert")
def assert_(
    resource: str = typer.Argument(help="Resource in dot or slash notation"),
    input: InputOption = None,
    expected: Annotated[
        str,
        typer.Option("--expected", "-e", help="Expected result as JSON"),
    ] = "true",
    url: UrlOption = None,
    opa_version: VersionOption = None,
    method: MethodOption = None,
    verbose: VerboseOption = False,
) -> None:
    """Exit with status 1 unless the result equals --expected."""
    input_data = _parse_input(input)
    expected_value = _parse_input(expected, "--expected")
    client = _build_client(url, opa_version, method)
    _run(verbose, client, lambda c: c.assert_(resource, input_data, expected_value))
    typer.echo("ok")


def create_app() -> None:
    """CLI entrypoint."""
    app()


if __name__ == "__main__":
    create_app()
