import json

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from archi_cache.cache.manager import CacheStats, SweepReport
from archi_cache.cache.router import Route

console = Console(highlight=False)
err_console = Console(stderr=True, highlight=False)


def _format_bytes(size: int) -> str:
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KiB"
    return f"{size / (1024 * 1024):.1f} MiB"


def _format_ms(ms: int) -> str:
    seconds = ms / 1000
    for unit, length in (("d", 86400), ("h", 3600), ("m", 60)):
        if seconds >= length and seconds % length == 0:
            return f"{int(seconds // length)}{unit}"
    return f"{seconds:g}s"


def print_error(message: str) -> None:
    err_console.print(f"[red bold]Error:[/red bold] {message}")


def print_stats(stats: CacheStats, db_path: str) -> None:
    table = Table(title="Cache tiers")
    table.add_column("Tier")
    table.add_column("Used", justify="right")
    table.add_column("Limit", justify="right")
    table.add_row("volatile", str(stats.volatile_count), str(stats.volatile_max))
    table.add_row("durable", _format_bytes(stats.durable_bytes), _format_bytes(stats.durable_max_bytes))
    console.print(table)
    console.print(f"  Database: {db_path}")


def print_route(key: str, route: Route) -> None:
    console.print(f"[bold]{escape(key)}[/bold] -> {route.tier.value} (default TTL {_format_ms(route.default_ttl)})")


def print_value(value: object) -> None:
    console.print(json.dumps(value, indent=2, ensure_ascii=False), markup=False)


def print_sweep_report(report: SweepReport | None) -> None:
    if report is None:
        console.print("Sweep already in progress, skipped")
        return
    console.print(
        f"[bold green]Swept[/bold green] {report.volatile_removed} volatile and {report.durable_removed} durable entries"
    )
