"""OptiHub CLI - Asset optimization analysis over project snapshots.

Usage:
    optihub queries
    optihub analyze ./project.json
    optihub analyze ./project.json --query UncompressedTextures
    optihub ownership ./project.json --apply --output ./project.fixed.json
    optihub duplicates ./project.json --apply
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any, Optional

import typer
from dotenv import load_dotenv

# Load .env early so OPTIHUB_CONFIG can come from it
load_dotenv()
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from optihub.app.config import OptiHubConfig
from optihub.core.models.entity import Entity
from optihub.core.models.results import (
    ApplyReport,
    AtlasPlacement,
    DuplicateScanResult,
    OwnershipClassification,
)
from optihub.domain.analysis.facade import (
    DUPLICATE_AUDIO,
    OWNERSHIP_CLASSIFICATION,
    AnalysisFacade,
)
from optihub.infrastructure.content.memory import InMemoryContentDatabase
from optihub.utils.logging import get_logger, log_operation, setup_logging

app = typer.Typer(
    name="optihub",
    help="OptiHub - asset optimization analysis",
    add_completion=False,
)
console = Console()
logger = get_logger("cli")

SnapshotArg = Annotated[Path, typer.Argument(help="Path to a JSON project snapshot")]
ConfigOpt = Annotated[Optional[Path], typer.Option("--config", "-c", help="JSON config file (default: $OPTIHUB_CONFIG)")]
OutputOpt = Annotated[Optional[Path], typer.Option("--output", "-o", help="Write the updated snapshot here after --apply")]


def _open(snapshot: Path, config_path: Optional[Path]) -> AnalysisFacade:
    if not snapshot.exists():
        console.print(f"[red]Error:[/red] Snapshot not found: {snapshot}")
        raise typer.Exit(1)

    config = OptiHubConfig.load(config_path)
    setup_logging(level=config.log_level, console_output=True, file_output=False)
    log_operation(logger, "Opening snapshot", {"path": snapshot, "ttl_seconds": config.cache.ttl_seconds})
    return AnalysisFacade(InMemoryContentDatabase.load_snapshot(snapshot), config)


def _describe(value: Any) -> str:
    """One-line summary of an analysis result."""
    if isinstance(value, OwnershipClassification):
        return f"{value.total_misowned} mis-owned, {len(value.orphans)} orphaned"
    if isinstance(value, AtlasPlacement):
        return f"{value.total_misplaced} textures outside their atlas folder"
    if isinstance(value, DuplicateScanResult):
        return f"{len(value.groups)} groups, {value.redundant_count} redundant"
    if hasattr(value, "items"):
        return ", ".join(f"{key}: {len(ids)}" for key, ids in value.items())
    return f"{len(value)} items"


def _print_report(report: ApplyReport) -> None:
    style = "green" if report.ok else "yellow"
    console.print(f"[{style}]{report.summary()}[/{style}]")
    for item in report.failed:
        console.print(f"  [red]✗[/red] {item.entity_id} -> {item.target}: {item.error}")


def _finish(facade: AnalysisFacade, report: ApplyReport, output: Optional[Path]) -> None:
    _print_report(report)
    if output is not None:
        path = facade.database.save_snapshot(output)
        console.print(f"Updated snapshot written to [bold]{path}[/bold]")
    if report.failed:
        raise typer.Exit(1)


@app.command("queries")
def list_queries() -> None:
    """List the available analysis names."""
    facade = AnalysisFacade(InMemoryContentDatabase())
    for name in facade.queries:
        console.print(f"  • {name}")


@app.command("analyze")
def analyze(
    snapshot: SnapshotArg,
    query: Annotated[Optional[str], typer.Option("--query", "-q", help="Show one analysis in detail")] = None,
    config: ConfigOpt = None,
) -> None:
    """Run every analysis (or one) and print the results."""
    facade = _open(snapshot, config)

    if query is not None:
        try:
            value = facade.get(query)
        except KeyError as e:
            console.print(f"[red]Error:[/red] {e.args[0]}")
            raise typer.Exit(1)
        console.print(Panel(_describe(value), title=query, border_style="blue"))
        if isinstance(value, tuple):
            for entity in value:
                if isinstance(entity, Entity):
                    console.print(f"  • {entity.id}  {entity.path}")
        elif hasattr(value, "items"):
            for key, ids in value.items():
                console.print(f"  [bold]{key}[/bold]: {', '.join(ids) or '-'}")
        return

    table = Table(title=f"Analysis of {snapshot.name}")
    table.add_column("Analysis", style="cyan")
    table.add_column("Result")
    for name in facade.queries:
        table.add_row(name, _describe(facade.get(name)))
    console.print(table)


@app.command("ownership")
def ownership(
    snapshot: SnapshotArg,
    apply: Annotated[bool, typer.Option("--apply", help="Move mis-owned and orphaned entities")] = False,
    output: OutputOpt = None,
    config: ConfigOpt = None,
) -> None:
    """Show anchor ownership; optionally regroup."""
    facade = _open(snapshot, config)
    classification: OwnershipClassification = facade.get(OWNERSHIP_CLASSIFICATION)

    table = Table(title="Anchor ownership")
    table.add_column("Anchor", style="cyan")
    table.add_column("Group")
    table.add_column("Claimed", justify="right")
    table.add_column("Mis-owned", justify="right")
    for record in classification.anchors:
        table.add_row(record.anchor_id, record.group, str(len(record.claimed)), str(len(record.misowned)))
    console.print(table)
    console.print(f"Orphans ({classification.catch_all_group}): {', '.join(classification.orphans) or '-'}")
    for cycle in classification.cycles:
        console.print(f"[yellow]Cycle:[/yellow] {' -> '.join(cycle.path)}")

    if apply:
        _finish(facade, facade.regroup(classification), output)


@app.command("duplicates")
def duplicates(
    snapshot: SnapshotArg,
    apply: Annotated[bool, typer.Option("--apply", help="Delete redundant duplicates")] = False,
    output: OutputOpt = None,
    config: ConfigOpt = None,
) -> None:
    """Find content-identical audio clips; optionally delete the redundant ones."""
    facade = _open(snapshot, config)
    scan: DuplicateScanResult = facade.get(DUPLICATE_AUDIO)

    if not scan.groups:
        console.print("[green]No duplicate audio found[/green]")
    for group in scan.groups:
        console.print(f"[bold]{group.keeper}[/bold] (kept) <- {', '.join(group.removable)}")
    for failure in scan.read_failures:
        console.print(f"[yellow]Unreadable:[/yellow] {failure.entity_id}: {failure.reason}")

    if apply:
        _finish(facade, facade.delete_duplicates(scan), output)


# Module entry point
def main() -> None:
    """Entry point for python -m optihub"""
    app()


if __name__ == "__main__":
    main()
