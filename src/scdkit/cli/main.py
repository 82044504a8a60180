"""scdkit CLI — render and build SCD projects."""

import asyncio
import json
import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.syntax import Syntax
from rich.table import Table

from scdkit import __version__
from scdkit.connectors.local_duckdb import duckdb_local
from scdkit.core.config import ProjectFileError, get_settings
from scdkit.dag.resolver import CycleError
from scdkit.dialects import UnsupportedDialectError
from scdkit.project.loader import load_project
from scdkit.project.registry import Project, UnknownArtifactError
from scdkit.runner.engine import ProjectRunner
from scdkit.scd.errors import SCDConfigError

app = typer.Typer(
    name="scdkit",
    help="Type-2 slowly changing dimension builder",
    no_args_is_help=True,
)
console = Console()

_USER_ERRORS = (
    ProjectFileError,
    SCDConfigError,
    UnsupportedDialectError,
    UnknownArtifactError,
    CycleError,
)


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Logging level (default from settings)"),
):
    settings = get_settings()
    logging.basicConfig(
        level=getattr(logging, (log_level or settings.log_level).upper()),
        format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
        datefmt="%H:%M:%S",
    )


def _load(file: Optional[Path], dialect: Optional[str] = None) -> Project:
    path = file or Path(get_settings().project_file)
    try:
        return load_project(path, dialect=dialect)
    except _USER_ERRORS as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)


@app.command(name="compile")
def compile_sql(
    file: Optional[Path] = typer.Argument(None, help="Project file (default: scdkit.toml)"),
    name: Optional[str] = typer.Option(None, "--name", "-n", help="Only this artifact"),
    incremental: bool = typer.Option(False, "--incremental", help="Render incremental-run SQL"),
    dialect: Optional[str] = typer.Option(None, "--dialect", "-d", help="SQL dialect override"),
):
    """Print the SQL each artifact renders to."""
    project = _load(file, dialect)
    names = [name] if name else list(project.artifacts)
    for artifact_name in names:
        try:
            sql = project.render(artifact_name, incremental=incremental)
        except UnknownArtifactError as e:
            console.print(f"[red]Error:[/red] {e}")
            raise typer.Exit(1)
        artifact = project.get(artifact_name)
        console.print(f"\n[bold]-- {artifact.qualified_name}[/bold] [dim]({artifact.kind.value})[/dim]")
        console.print(Syntax(sql, "sql", theme="monokai"))


@app.command()
def graph(
    file: Optional[Path] = typer.Argument(None, help="Project file (default: scdkit.toml)"),
    as_json: bool = typer.Option(False, "--json", help="Print the graph as JSON"),
):
    """Show artifacts grouped in build order."""
    project = _load(file)
    try:
        dag = project.dag()
        if as_json:
            console.print_json(json.dumps(dag.to_dict()))
            return
        groups = dag.parallel_groups()
    except CycleError as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    table = Table(title="Build order")
    table.add_column("Group", style="dim")
    table.add_column("Artifact", style="bold")
    table.add_column("Kind")
    table.add_column("Depends on")
    for i, group in enumerate(groups, start=1):
        for n in group:
            if n in project.artifacts:
                kind = project.artifacts[n].kind.value
            else:
                kind = "[dim]external[/dim]"
            upstream = ", ".join(sorted(dag.nodes[n].upstream)) or "—"
            table.add_row(str(i), n, kind, upstream)
    console.print(table)


@app.command()
def run(
    file: Optional[Path] = typer.Argument(None, help="Project file (default: scdkit.toml)"),
    database: Optional[str] = typer.Option(None, "--database", "--db", help="DuckDB database path"),
    select: Optional[list[str]] = typer.Option(None, "--select", "-s", help="Build only these artifacts and their upstream"),
    full_refresh: bool = typer.Option(False, "--full-refresh", help="Rebuild historical tables from scratch"),
):
    """Build the project on a local DuckDB database."""
    project = _load(file, dialect="duckdb")
    database = database or get_settings().database

    async def _run():
        async with duckdb_local(database) as conn:
            runner = ProjectRunner(project, conn)
            return await runner.run(select=select or None, full_refresh=full_refresh)

    try:
        result = asyncio.run(_run())
    except _USER_ERRORS as e:
        console.print(f"[red]Error:[/red] {e}")
        raise typer.Exit(1)

    for n, stats in result.results.items():
        if stats.get("status") == "failed":
            console.print(f"[red]✗[/red] {n}: {stats.get('error', '')[:200]}")
            continue
        detail = f"{stats['rows']} rows" if "rows" in stats else stats["kind"]
        if stats.get("appended") is not None:
            detail += f", +{stats['appended']} appended"
        console.print(f"[green]✓[/green] {stats['table']} ({detail})")
    for n in result.skipped:
        console.print(f"[yellow]–[/yellow] {n} skipped")

    color = "green" if result.status == "success" else "red"
    console.print(f"\n[{color}]●[/{color}] {result.status} in {result.duration_ms}ms")
    if result.status != "success":
        raise typer.Exit(1)


@app.command()
def version():
    """Show scdkit version."""
    console.print(f"scdkit v{__version__}")


if __name__ == "__main__":
    app()
