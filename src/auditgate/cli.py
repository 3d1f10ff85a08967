"""auditgate CLI - aggregate audit outputs and enforce release gates."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from auditgate import __version__
from auditgate.config import AuditConfigError, AuditSettings, resolve_paths
from auditgate.engine import run_audit
from auditgate.pipeline.history import list_snapshots, load_recent_snapshots, metric_series
from auditgate.report.html import sparkline

EXIT_PASSED = 0
EXIT_ENGINE_ERROR = 1
EXIT_GATES_FAILED = 2

cli = typer.Typer(
    name="auditgate",
    help="Audit aggregation and quality-gate engine",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


def _version_option_callback(value: bool) -> None:
    """Handle eager --version option."""
    if value:
        typer.echo(__version__)
        raise typer.Exit()


@cli.callback()
def _cli_callback(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable debug logging."),
    version: bool = typer.Option(
        False,
        "--version",
        help="Show auditgate version and exit.",
        is_eager=True,
        callback=_version_option_callback,
    ),
) -> None:
    """Audit aggregation and quality-gate engine."""
    _configure_logging(verbose)


@cli.command("run")
def run_cmd(
    root: Path | None = typer.Option(
        None, "--root", help="Project root (default $AUDITGATE_ROOT, else the current directory)"
    ),
    out: Path | None = typer.Option(None, "--out", "-o", help="Producer output directory (default audit/out)"),
    history: Path | None = typer.Option(None, "--history", help="Snapshot directory (default audit/history)"),
    config_dir: Path | None = typer.Option(None, "--config-dir", help="Config directory (default config/audit)"),
    source_dir: Path | None = typer.Option(None, "--source-dir", help="Sources scanned for unsafe any (default src)"),
) -> None:
    """Aggregate producer outputs, evaluate gates, and write all reports."""
    try:
        paths = resolve_paths(
            root,
            out_dir=out,
            history_dir=history,
            config_dir=config_dir,
            source_dir=source_dir,
        )
        settings = AuditSettings.load(paths)
        result = run_audit(settings)
    except AuditConfigError as e:
        err_console.print(f"[red]❌ Invalid configuration: {e}[/red]")
        raise typer.Exit(code=EXIT_ENGINE_ERROR) from e
    except Exception as e:
        err_console.print(f"[red]❌ Audit run failed: {e}[/red]")
        raise typer.Exit(code=EXIT_ENGINE_ERROR) from e

    report = result.report
    summary = report.summary

    table = Table(title="Audit Summary")
    table.add_column("Metric")
    table.add_column("Value", justify="right")
    table.add_row("Findings", str(len(report.findings)))
    table.add_row("Accepted", str(summary.accepted_count))
    table.add_row("Security critical / high", f"{summary.security_critical} / {summary.security_high}")
    table.add_row("New ESLint errors", str(summary.eslint_new_errors))
    table.add_row("License denies", str(summary.license_denies))
    table.add_row("Secrets", str(summary.secret_findings))
    table.add_row("Skipped inputs", str(len(report.skipped)))
    console.print(table)

    console.print("\nReports written to:")
    for path in result.artifacts.written.values():
        console.print(f"  {path}")
    for name, error in result.artifacts.failed.items():
        console.print(f"  [yellow]⚠️  {name} not written: {error}[/yellow]")

    if not report.passed:
        console.print("\n[red]Gate failures:[/red]")
        for gate in report.gates:
            console.print(f"  [red]- ({gate.domain}) {gate.message}[/red]")
        console.print("\n❌ Audit gates failed.")
        raise typer.Exit(code=EXIT_GATES_FAILED)

    console.print("\n✅ All audit gates passed.")
    raise typer.Exit(code=EXIT_PASSED)


@cli.command("history")
def history_cmd(
    root: Path | None = typer.Option(None, "--root", help="Project root"),
    history: Path | None = typer.Option(None, "--history", help="Snapshot directory (default audit/history)"),
    limit: int = typer.Option(15, "--limit", min=1, help="Number of recent snapshots to show"),
) -> None:
    """Show retained snapshots and recent metric trends."""
    try:
        paths = resolve_paths(root, history_dir=history)
    except AuditConfigError as e:
        err_console.print(f"[red]❌ Invalid configuration: {e}[/red]")
        raise typer.Exit(code=EXIT_ENGINE_ERROR) from e

    snapshots = list_snapshots(paths.history_dir)
    if not snapshots:
        console.print(f"No snapshots in {paths.history_dir}")
        raise typer.Exit(code=EXIT_PASSED)

    series = metric_series(load_recent_snapshots(paths.history_dir, limit))

    table = Table(title=f"{len(snapshots)} snapshot(s) in {paths.history_dir}")
    table.add_column("Metric")
    table.add_column("Latest", justify="right")
    table.add_column(f"Trend (last {limit})")
    for name, values in sorted(series.items()):
        latest = str(values[-1]) if values else "n/a"
        scale = 100 if name.endswith("Pct") else max([*values, 10])
        table.add_row(name, latest, sparkline(values, scale))
    console.print(table)
    console.print(f"Latest: {snapshots[-1].name}")


app = cli


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
