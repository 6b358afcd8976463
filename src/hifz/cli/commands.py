"""CLI commands for the Hifz tracker.

Commands:
- serve: Run the Web API with uvicorn
- juz: Look up the juz a Surah (and ayah) falls in
- stats: Print aggregate statistics over the sample data
- students: List sample students with their session statistics
"""

import os
from dataclasses import replace

import typer
import uvicorn
from rich.console import Console
from rich.table import Table

from hifz.config.app_config import load_app_config
from hifz.config.logging import setup_logging
from hifz.core.juz import SURAH_JUZ_MAPPING, get_surah_juz
from hifz.core.seed import seed_sample_data
from hifz.core.stats import StatsEngine
from hifz.core.store import HifzStore

app = typer.Typer(
    name="hifz",
    help="Quran memorization tracker: sessions, mistakes, lessons and progress.",
    no_args_is_help=True,
)

console = Console()


def _sample_engine() -> StatsEngine:
    """Statistics over a freshly seeded in-memory store."""
    config = load_app_config()
    setup_logging(replace(config.logging, level="WARNING"))
    return StatsEngine(seed_sample_data(HifzStore()))


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port"),
    seed: bool | None = typer.Option(
        None, "--seed/--no-seed", help="Load sample data (default from config)"
    ),
    reload: bool = typer.Option(False, "--reload", help="Auto-reload on code changes"),
) -> None:
    """Run the Web API."""
    config = load_app_config()
    if seed is not None:
        config.seed_sample_data = seed
        # Read again by create_app in reloader subprocesses
        os.environ["HIFZ_SEED_SAMPLE_DATA"] = "true" if seed else "false"

    effective_host = host or config.server.host
    effective_port = port or config.server.port
    console.print(f"[blue]Serving Hifz API on http://{effective_host}:{effective_port}[/blue]")
    console.print(f"  [dim]sample data:[/dim] {'yes' if config.seed_sample_data else 'no'}")

    uvicorn.run(
        "hifz.web.api:create_app",
        factory=True,
        host=effective_host,
        port=effective_port,
        reload=reload,
        log_level=config.logging.level.lower(),
    )


@app.command()
def juz(
    surah: str = typer.Argument(..., help="Surah name, e.g. Al-Baqarah"),
    ayah: int | None = typer.Option(None, "--ayah", "-a", help="Ayah number"),
) -> None:
    """Show the juz a Surah falls in."""
    result = get_surah_juz(surah, ayah)
    if result is None:
        console.print(f"[red]✗ Unknown Surah: {surah}[/red]")
        raise typer.Exit(code=1)

    mapping = SURAH_JUZ_MAPPING[surah]
    console.print(f"[green]✓ {surah}: juz {result}[/green]")
    if isinstance(mapping, tuple):
        console.print(f"  [dim]spans juz:[/dim] {', '.join(str(j) for j in mapping)}")


@app.command()
def stats(
    days: int = typer.Option(7, "--days", "-d", min=1, help="Trend window in days"),
) -> None:
    """Print aggregate statistics over the sample data."""
    engine = _sample_engine()

    console.print("[bold]Mistake types[/bold]")
    for mistake_type, percent in engine.get_mistake_type_distribution().items():
        console.print(f"  {mistake_type:<8} {percent:>3}%")

    console.print("[bold]Sessions per weekday[/bold]")
    console.print(
        "  " + "  ".join(f"{day} {count}" for day, count in engine.get_session_count_by_day().items())
    )

    console.print(
        f"[bold]Average mistakes per session:[/bold] {engine.get_average_mistakes_per_session()}"
    )

    table = Table(show_header=True, header_style="bold")
    table.add_column("Date", style="cyan")
    table.add_column("Mistakes", justify="right")
    for point in engine.get_mistake_trend(days):
        table.add_row(point["date"], str(point["count"]))
    console.print(table)


@app.command()
def students() -> None:
    """List sample students with their session statistics."""
    engine = _sample_engine()

    table = Table(show_header=True, header_style="bold")
    table.add_column("ID", justify="right")
    table.add_column("Name", style="cyan")
    table.add_column("Juz", justify="right")
    table.add_column("Sessions", justify="right")
    table.add_column("Avg mistakes", justify="right")
    table.add_column("Top mistake")
    table.add_column("Progress", justify="right")

    for entry in engine.get_all_students_with_stats():
        top = entry.most_common_mistake_type
        table.add_row(
            str(entry.student.id),
            entry.student.name,
            str(entry.student.current_juz),
            str(entry.session_count),
            f"{entry.average_mistakes:.1f}",
            top.value if top else "-",
            f"{entry.juz_progress}%",
        )

    console.print(table)


if __name__ == "__main__":
    app()
