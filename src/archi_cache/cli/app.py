import json
from typing import Annotated

import typer

from archi_cache.cli._logging import configure_logging
from archi_cache.cli._output import (
    console,
    print_error,
    print_route,
    print_stats,
    print_sweep_report,
    print_value,
)
from archi_cache.cli.factory import build_cache_context

app = typer.Typer(name="archi-cache", help="Inspect and maintain the archi two-tier cache.")


class _CliState:
    def __init__(self, config_path: str, db_path: str | None) -> None:
        self.config_path = config_path
        self.db_path = db_path


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Enable DEBUG logging")] = False,
    config_path: Annotated[str, typer.Option("--config", help="YAML configuration file")] = "archi-cache.yaml",
    db_path: Annotated[str | None, typer.Option("--db-path", help="Override the durable cache database")] = None,
) -> None:
    """Inspect and maintain the archi two-tier cache."""
    configure_logging(verbose=verbose)
    ctx.obj = _CliState(config_path, db_path)
    if ctx.invoked_subcommand is None:
        raise typer.Exit()


_KeyArg = Annotated[str, typer.Argument(help="Cache key, e.g. buildings:moscow")]


@app.command()
def stats(ctx: typer.Context) -> None:
    """Show usage of both cache tiers."""
    state: _CliState = ctx.obj
    with build_cache_context(state.config_path, state.db_path) as manager:
        print_stats(manager.stats(), str(manager.durable_path))


@app.command()
def resolve(ctx: typer.Context, key: _KeyArg) -> None:
    """Show which tier and default TTL a key maps to."""
    state: _CliState = ctx.obj
    with build_cache_context(state.config_path, state.db_path) as manager:
        print_route(key, manager.resolve(key))


@app.command()
def get(ctx: typer.Context, key: _KeyArg) -> None:
    """Print the cached value for a key."""
    state: _CliState = ctx.obj
    with build_cache_context(state.config_path, state.db_path) as manager:
        value = manager.get(key)
    if value is None:
        console.print("miss")
        raise typer.Exit(code=1)
    print_value(value)


@app.command(name="set")
def set_value(
    ctx: typer.Context,
    key: _KeyArg,
    value: Annotated[str, typer.Argument(help="JSON-encoded value")],
    ttl: Annotated[int | None, typer.Option("--ttl", help="Time-to-live in milliseconds")] = None,
) -> None:
    """Store a JSON value under a key."""
    try:
        data = json.loads(value)
    except json.JSONDecodeError as e:
        print_error(f"Value is not valid JSON: {e}")
        raise typer.Exit(code=1) from None
    state: _CliState = ctx.obj
    with build_cache_context(state.config_path, state.db_path) as manager:
        manager.set(key, data, ttl)
        route = manager.resolve(key)
    console.print(f"[bold green]Stored[/bold green] {key} in {route.tier.value} tier")


@app.command()
def delete(ctx: typer.Context, key: _KeyArg) -> None:
    """Remove a key."""
    state: _CliState = ctx.obj
    with build_cache_context(state.config_path, state.db_path) as manager:
        removed = manager.delete(key)
    console.print(f"Deleted {key}" if removed else f"{key} was not cached")


@app.command()
def sweep(ctx: typer.Context) -> None:
    """Remove expired entries from both tiers now."""
    state: _CliState = ctx.obj
    with build_cache_context(state.config_path, state.db_path) as manager:
        print_sweep_report(manager.sweep())


@app.command()
def clear(
    ctx: typer.Context,
    yes: Annotated[bool, typer.Option("--yes", "-y", help="Do not ask for confirmation")] = False,
) -> None:
    """Empty both cache tiers."""
    if not yes:
        typer.confirm("Clear every cached entry?", abort=True)
    state: _CliState = ctx.obj
    with build_cache_context(state.config_path, state.db_path) as manager:
        manager.clear_all()
    console.print("[bold green]Cleared[/bold green] cache")
