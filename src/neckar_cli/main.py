"""CLI entrypoint using typer."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import Any, NoReturn, TypeVar

import typer
from rich.console import Console

from neckar_client.client import NeckarClient
from neckar_client.observability import bind_identity_context, configure_logging
from neckar_core.config.settings import Settings
from neckar_core.exceptions import NeckarError

T = TypeVar("T")

app = typer.Typer(
    name="neckar",
    help="Command line access to the Neckar platform API",
)
console = Console()

CONFIG_OPTION = typer.Option(None, "--config", "-c", help="JSON settings file", exists=True)
VERBOSE_OPTION = typer.Option(False, "-v", "--verbose", help="Enable debug logging")


def _fail(exc: NeckarError) -> NoReturn:
    """Report a client error in red and exit with code 1."""
    console.print(f"[red]Error:[/red] {exc}")
    raise typer.Exit(code=1) from exc


def _load_settings(config: Path | None, verbose: bool) -> Settings:
    """Read settings from a file or the environment and set up logging."""
    try:
        settings = Settings.load(config)
    except NeckarError as exc:
        _fail(exc)
    if verbose:
        settings.log_level = "DEBUG"
    configure_logging(settings)
    return settings


def _parse_vars(pairs: list[str]) -> dict[str, Any]:
    """Turn ``key=value`` pairs into GraphQL variables; values may be JSON."""
    variables: dict[str, Any] = {}
    for pair in pairs:
        key, sep, raw = pair.partition("=")
        if not sep or not key:
            raise typer.BadParameter(f"expected key=value, got {pair!r}", param_hint="--var")
        try:
            variables[key] = json.loads(raw)
        except json.JSONDecodeError:
            variables[key] = raw
    return variables


def _run(settings: Settings, action: Callable[[NeckarClient], Awaitable[T]]) -> T:
    """Run ``action`` against a fresh client, reporting client errors."""

    async def _main() -> T:
        async with NeckarClient(settings) as client:
            return await action(client)

    try:
        return asyncio.run(_main())
    except NeckarError as exc:
        _fail(exc)


@app.command()
def token(
    config: Path | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Print the current access token."""
    settings = _load_settings(config, verbose)
    access_token = _run(settings, lambda client: client.token())
    if access_token is None:
        console.print("[yellow]No credentials configured[/yellow]")
        raise typer.Exit(code=1)
    typer.echo(access_token)


@app.command()
def userinfo(
    config: Path | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Print the OIDC userinfo of the configured principal."""
    settings = _load_settings(config, verbose)
    info = _run(settings, lambda client: client.fetch_userinfo())
    console.print_json(data=info)


@app.command()
def query(
    document: str = typer.Argument(..., help="GraphQL document, or @path to read it from a file"),
    var: list[str] = typer.Option([], "--var", help="Variable as key=value (repeatable)"),
    cluster: str | None = typer.Option(None, "--cluster", help="Cluster slug to act in"),
    subject: str | None = typer.Option(None, "--subject", help="Subject to act for"),
    config: Path | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Execute a GraphQL query or mutation and print its data."""
    if subject and not cluster:
        raise typer.BadParameter("--subject requires --cluster", param_hint="--subject")
    if document.startswith("@"):
        document = Path(document[1:]).read_text()
    variables = _parse_vars(var)
    settings = _load_settings(config, verbose)
    bind_identity_context(cluster, subject)

    async def _query(client: NeckarClient) -> dict[str, Any]:
        if cluster:
            client = client.login_into(cluster, subject)
        return await client.graphql(document, variables or None)

    data = _run(settings, _query)
    console.print_json(data=data)


@app.command()
def upload(
    path: Path = typer.Argument(..., help="File to upload", exists=True, dir_okay=False),
    content_type: str | None = typer.Option(None, "--content-type", help="MIME type override"),
    cluster: str | None = typer.Option(None, "--cluster", help="Cluster slug to act in"),
    config: Path | None = CONFIG_OPTION,
    verbose: bool = VERBOSE_OPTION,
) -> None:
    """Upload a file and print the confirmed record."""
    settings = _load_settings(config, verbose)
    bind_identity_context(cluster)

    async def _upload(client: NeckarClient) -> Any:
        if cluster:
            client = client.login_into(cluster)
        return await client.upload_file(path, content_type=content_type)

    uploaded = _run(settings, _upload)
    console.print(f"[bold green]Uploaded:[/bold green] {uploaded.id}")
    console.print_json(data=uploaded.model_dump(exclude_none=True))


@app.command()
def version() -> None:
    """Show version."""
    console.print("neckar-client v0.3.0")


if __name__ == "__main__":
    app()
