"""
CLI Main - Typer-based command-line interface.

Usage:
    cluegraph solve "Capital of France [5]"
    cluegraph solve "The ___ of the Rings [5]" --fill-in-blank
    cluegraph lookup "Capital of France [5]"
    cluegraph stats
"""

from __future__ import annotations

import asyncio
import logging

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn
from rich.table import Table

from cluegraph.domains.orchestration import PipelineState, SolveReport

app = typer.Typer(
    name="cluegraph",
    help="ClueGraph - Knowledge graph crossword clue solver",
    add_completion=False,
)
console = Console()

PHASE_DESCRIPTIONS = {
    PipelineState.RECOGNIZING_ENTITIES: "Recognising entities...",
    PipelineState.EXTRACTING_CANDIDATES: "Searching for solutions...",
    PipelineState.FILTERING: "Checking solution structure...",
    PipelineState.SCORING: "Calculating confidence levels...",
    PipelineState.RANKING: "Ranking solutions...",
}


def _configure_logging(level: str, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else level.upper(),
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
    )


class RichProgressListener:
    """Renders pipeline progress as a Rich progress bar."""

    def __init__(self, progress: Progress) -> None:
        self._progress = progress
        self._task = progress.add_task("Starting...", total=100)
        self.report: SolveReport | None = None

    def on_progress(self, phase: PipelineState, percent: int) -> None:
        description = PHASE_DESCRIPTIONS.get(phase)
        if description:
            self._progress.update(self._task, description=description, completed=percent)

    def on_result(self, report: SolveReport) -> None:
        self.report = report

    def on_ready(self) -> None:
        self._progress.update(self._task, description="Done", completed=100)


@app.command()
def solve(
    clue: str = typer.Argument(..., help='Clue with its answer structure, e.g. "Capital of France [5]"'),
    fill_in_blank: bool = typer.Option(
        False, "--fill-in-blank", "-b", help="Match labels containing the clue words"
    ),
    persist: bool = typer.Option(
        False, "--persist", "-p", help="Save learned solutions to the knowledge base file"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging"),
) -> None:
    """Solve a crossword clue."""
    from cluegraph.config import get_settings

    _configure_logging(get_settings().log_level, verbose)
    report = asyncio.run(_solve_async(clue, fill_in_blank or None, persist))

    console.print()
    console.print(report.message, highlight=False, markup=False)
    if report.state is PipelineState.NO_SOLUTIONS and report.best_effort:
        console.print(f"[dim]Best guess ignoring structure: {report.best_effort}[/dim]")
    if report.state in (PipelineState.INVALID_CLUE, PipelineState.FAILED):
        raise typer.Exit(1)


async def _solve_async(clue: str, fill_in_blank: bool | None, persist: bool) -> SolveReport:
    """Async solve implementation."""
    from cluegraph.config import ClueGraphError, get_settings
    from cluegraph.domains.knowledge import KnowledgeBase
    from cluegraph.domains.orchestration import SolvePipeline

    settings = get_settings()
    knowledge_base = KnowledgeBase.from_settings(settings)

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        BarColumn(),
        console=console,
        transient=True,
    ) as progress:
        listener = RichProgressListener(progress)
        try:
            pipeline = SolvePipeline.from_settings(
                settings,
                knowledge_base=knowledge_base,
                listener=listener,
            )
        except ClueGraphError as e:
            console.print(f"[red]Error:[/red] {e.message}")
            raise typer.Exit(1)

        outcome = await pipeline.solve(clue, fill_in_blank=fill_in_blank)

    saved = await knowledge_base.close(persist=persist)
    if persist and outcome.persisted is not None:
        recorded = outcome.persisted.result()
        status = "[green]saved[/green]" if saved else "[yellow]not saved[/yellow]"
        console.print(f"[dim]{recorded} new solutions learned, knowledge base {status}[/dim]")
    return outcome.report


@app.command()
def lookup(
    clue: str = typer.Argument(..., help='Clue with its answer structure, e.g. "Capital of France [5]"'),
) -> None:
    """List solutions recorded in the knowledge base for a clue."""
    from cluegraph.config import InvalidClueError
    from cluegraph.domains.clues import Clue

    try:
        parsed = Clue.parse(clue)
    except InvalidClueError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    solutions = asyncio.run(_lookup_async(parsed))
    if not solutions:
        console.print(f'[yellow]No recorded solutions for "{parsed.source_text}" {parsed.structure_text}[/yellow]')
        return

    table = Table(title=f"{parsed.source_text} {parsed.structure_text}")
    table.add_column("#", style="dim")
    table.add_column("Solution", style="green")
    for i, text in enumerate(solutions, 1):
        table.add_row(str(i), text)
    console.print(table)


async def _lookup_async(clue) -> list[str]:
    """Async lookup implementation."""
    from cluegraph.config import get_settings
    from cluegraph.domains.knowledge import KnowledgeBase

    knowledge_base = KnowledgeBase.from_settings(get_settings())
    try:
        return await knowledge_base.lookup(clue)
    finally:
        await knowledge_base.close()


@app.command()
def stats() -> None:
    """Show knowledge base statistics."""
    asyncio.run(_stats_async())


async def _stats_async() -> None:
    """Async statistics implementation."""
    from cluegraph.config import get_settings
    from cluegraph.domains.knowledge import KnowledgeBase

    settings = get_settings()
    knowledge_base = KnowledgeBase.from_settings(settings)
    try:
        summary = await knowledge_base.stats()
    finally:
        await knowledge_base.close()

    table = Table(title="Knowledge Base")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="green")

    table.add_row("File", str(settings.knowledge_base_path))
    table.add_row("Enabled", "yes" if summary.enabled else "no")
    table.add_row("Clues", str(summary.clue_count))
    table.add_row("Solutions", str(summary.solution_count))
    table.add_row("Triples", str(summary.triple_count))

    console.print(table)


@app.command()
def version() -> None:
    """Show version information."""
    from cluegraph import __version__

    console.print(f"ClueGraph v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
