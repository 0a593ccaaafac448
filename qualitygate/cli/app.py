"""quality-gate CLI.

Runs the registered checks, prints the report, and exits 0 when the gate
passed or 1 when it did not (threshold missed, ratchet regression,
configuration error or unexpected crash).

Examples:
    quality-gate
    quality-gate --threshold 80 --json
    quality-gate --fix
    quality-gate --root ./web --ratchet-file ci/ratchet-main.json
    quality-gate checks
    quality-gate baseline
"""

import json
import logging
from pathlib import Path
from typing import NoReturn, Optional

import typer
from dotenv import load_dotenv
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from qualitygate.checks import build_default_registry
from qualitygate.config.settings import GateSettings, get_settings
from qualitygate.core.checks import RegistryError
from qualitygate.core.gate import run_gate
from qualitygate.core.ratchet import FileRatchetStore
from qualitygate.core.reporter import exit_code, render_console, to_json

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="quality-gate",
    help="Run weighted quality checks and enforce a score ratchet",
    add_completion=False,
    invoke_without_command=True,
)

console = Console()


def _load_env() -> None:
    """Load .env files; the working directory's .env wins over ~/.env."""
    home_env = Path.home() / ".env"
    cwd_env = Path.cwd() / ".env"
    if home_env.exists():
        load_dotenv(home_env)
    if cwd_env.exists():
        load_dotenv(cwd_env, override=True)


def _configure_logging(level: str) -> None:
    # stderr only, stdout carries the report
    logging.basicConfig(
        level=getattr(logging, level),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _fail(message: str, as_json: bool) -> NoReturn:
    """Report a failure that happened before a gate report existed."""
    if as_json:
        typer.echo(json.dumps({"passed": False, "error": message}, indent=2))
    else:
        console.print(f"[red]Error:[/red] {message}")
    raise typer.Exit(1)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    threshold: Optional[float] = typer.Option(
        None, "--threshold", "-t", help="Minimum composite score to pass (default: 70)"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print a machine-readable JSON report"),
    fix: bool = typer.Option(
        False, "--fix", help="Apply fixes from fixable checks, then verify in a clean pass"
    ),
    root: Optional[Path] = typer.Option(
        None,
        "--root",
        "-r",
        help="Source tree to analyze (default: current directory)",
        exists=True,
        file_okay=False,
        dir_okay=True,
        resolve_path=True,
    ),
    ratchet_file: Optional[Path] = typer.Option(
        None, "--ratchet-file", help="Baseline file, relative to root (default: .quality-ratchet.json)"
    ),
    jobs: Optional[int] = typer.Option(
        None, "--jobs", "-j", help="Threads for the read-only verify pass"
    ),
    no_save: bool = typer.Option(
        False, "--no-save", help="Compare against the baseline without updating it"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="DEBUG, INFO, WARNING, ERROR or CRITICAL"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Shorthand for --log-level DEBUG"),
) -> None:
    """Run the quality gate over a source tree."""
    _load_env()

    try:
        settings = get_settings(
            threshold=threshold,
            root=root,
            ratchet_file=ratchet_file,
            jobs=jobs,
            log_level="DEBUG" if verbose else log_level,
        )
    except ValidationError as e:
        _fail(f"Invalid configuration: {e}", as_json)

    _configure_logging(settings.log_level)
    ctx.obj = settings

    if ctx.invoked_subcommand is not None:
        return

    try:
        registry = build_default_registry(settings)
        store = FileRatchetStore(settings.ratchet_path())
        outcome = run_gate(
            registry,
            store,
            threshold=settings.threshold,
            fix=fix,
            jobs=settings.jobs,
            save_baseline=not no_save,
        )
        if as_json:
            typer.echo(json.dumps(to_json(outcome), indent=2))
        else:
            render_console(outcome, console)
    except RegistryError as e:
        _fail(f"Invalid check registry: {e}", as_json)
    except Exception as e:
        logger.exception("Quality gate crashed")
        _fail(f"Quality gate crashed: {e}", as_json)

    # typer.Exit is a RuntimeError; keep it out of the guarded block
    raise typer.Exit(exit_code(outcome))


@app.command()
def checks(ctx: typer.Context) -> None:
    """List the registered checks and their weights."""
    settings: GateSettings = ctx.obj

    try:
        registry = build_default_registry(settings)
    except RegistryError as e:
        _fail(f"Invalid check registry: {e}", as_json=False)

    table = Table(title="Registered Checks", show_header=True)
    table.add_column("Check", style="cyan")
    table.add_column("Weight", justify="right")
    table.add_column("Fixable")

    for check in registry:
        table.add_row(check.id, str(check.weight), "yes" if check.fixable else "no")

    console.print(table)


@app.command()
def baseline(ctx: typer.Context) -> None:
    """Show the stored ratchet baseline."""
    settings: GateSettings = ctx.obj
    path = settings.ratchet_path()
    stored = FileRatchetStore(path).load()

    if stored is None:
        console.print(f"[yellow]No ratchet baseline at {path}.[/yellow]")
        console.print("The next gate run will create it.")
        return

    table = Table(title="Ratchet Baseline", show_header=True)
    table.add_column("Check", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Errors", justify="right")
    table.add_column("Warnings", justify="right")

    for name, entry in stored.checks.items():
        table.add_row(name, f"{entry.score:g}", str(entry.errors), str(entry.warnings))

    console.print(table)
    console.print(f"\nTotal score: [bold]{stored.total_score:g}[/bold]")
    console.print(f"Updated: {stored.updated_at}")


if __name__ == "__main__":
    app()
