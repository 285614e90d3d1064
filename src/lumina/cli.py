"""Typer CLI for Lumina — launcher, one-shot search, open and config commands."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Annotated

import typer
from result import Err

from lumina.config import Config

app = typer.Typer(
    name="lumina",
    help="Lumina — search anything, or ask AI.",
    invoke_without_command=True,
)

ConfigDirOption = Annotated[
    Path | None,
    typer.Option("--config-dir", help="Directory holding config.json"),
]


def _make_config(config_dir: Path | None) -> Config:
    if config_dir is None:
        return Config()
    return Config(config_dir=config_dir)


@app.callback(invoke_without_command=True)
def serve(
    ctx: typer.Context,
    config_dir: ConfigDirOption = None,
    toggle: Annotated[
        bool,
        typer.Option("--toggle", help="Show or hide the window of a running instance"),
    ] = False,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Start the Lumina launcher."""
    if ctx.invoked_subcommand is not None:
        return
    from lumina.ui.app import run_app

    run_app(_make_config(config_dir), toggle=toggle, verbose=verbose)


@app.command()
def search(
    query: Annotated[str, typer.Argument(help="Text to search for")],
    config_dir: ConfigDirOption = None,
) -> None:
    """Run one search and print the ranked results."""
    asyncio.run(_do_search(_make_config(config_dir), query))


async def _do_search(config: Config, query: str) -> None:
    """Search with the saved settings and echo each result."""
    from lumina.services.search_service import SearchService
    from lumina.services.settings_store import SettingsStore

    store = SettingsStore(config.settings_path)
    await store.load()
    service = SearchService(store.current, config.max_results)
    reply = await service.search(query)
    if isinstance(reply, Err):
        typer.echo(reply.err_value, err=True)
        raise typer.Exit(code=1)

    results = reply.ok_value
    if not results:
        typer.echo(f'No results for "{query}"')
        return
    for result in results:
        icon = f"{result.icon} " if result.icon else ""
        typer.echo(f"{icon}{result.title}  [{result.action_label}]")
        if result.description:
            typer.echo(f"    {result.description}")


@app.command("open")
def open_first(
    query: Annotated[str, typer.Argument(help="Text to search for")],
    config_dir: ConfigDirOption = None,
) -> None:
    """Run the action of the best local result without opening the window."""
    asyncio.run(_do_open(_make_config(config_dir), query))


async def _do_open(config: Config, query: str) -> None:
    """Search, then hand the top non-AI result to the backend's action entry point."""
    from lumina.models.search import ActionType
    from lumina.services.container import ServiceContainer

    services = await ServiceContainer.create(config)
    try:
        reply = await services.search(query)
        if isinstance(reply, Err):
            typer.echo(reply.err_value, err=True)
            raise typer.Exit(code=1)
        target = next(
            (r for r in reply.ok_value if r.action_type is not ActionType.AI_RESPONSE), None
        )
        if target is None:
            typer.echo(f'No results for "{query}"', err=True)
            raise typer.Exit(code=1)
        outcome = await services.execute_action(target)
        if isinstance(outcome, Err):
            typer.echo(outcome.err_value, err=True)
            raise typer.Exit(code=1)
        typer.echo(f"{outcome.ok_value}: {target.title}")
    finally:
        await services.close()


def mask_secret(value: str | None) -> str:
    """Show only the last four characters of an API key."""
    if not value:
        return "(not set)"
    if len(value) <= 4:
        return "****"
    return f"****{value[-4:]}"


@app.command("config")
def show_config(config_dir: ConfigDirOption = None) -> None:
    """Print the settings file location and its current values."""
    asyncio.run(_do_show_config(_make_config(config_dir)))


async def _do_show_config(config: Config) -> None:
    from lumina.services.settings_store import SettingsStore

    store = SettingsStore(config.settings_path)
    loaded = await store.load()
    if isinstance(loaded, Err):
        typer.echo(f"Could not read settings: {loaded.err_value}", err=True)

    settings = store.current()
    typer.echo(f"Settings file: {config.settings_path}")
    typer.echo(f"  ai_service:         {settings.ai_service}")
    typer.echo(f"  default_model:      {settings.default_model}")
    typer.echo(f"  openrouter_api_key: {mask_secret(settings.openrouter_api_key)}")
    typer.echo(f"  openai_api_key:     {mask_secret(settings.openai_api_key)}")
    typer.echo("  search_directories:")
    for directory in settings.search_directories:
        typer.echo(f"    - {directory}")
