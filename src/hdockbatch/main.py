from enum import Enum
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from hdockbatch.configs.logger import (
    CONFIG_PATH,
    LoggerSingleton,
    load_config,
    logger,
    plain_output_enabled,
)
from hdockbatch.configs.validators import ConfigError, validate_config
from hdockbatch.pipeline import BatchSummary, pending_ligands, run_batch
from hdockbatch.preflight import (
    PreflightError,
    check_dependencies,
    check_inputs,
    run_preflight,
)
from hdockbatch.tools import ToolInvocationError
from hdockbatch.utils.ligands import discover_ligands
from hdockbatch.utils.workspace import Workspace

__version__ = "1.0.0"

DEFAULT_CONFIG_PATH = str(CONFIG_PATH)
EXIT_RUN_FAILED = 1


class OnToolError(str, Enum):
    """Policy applied when hdock or createpl exits non-zero."""

    abort = "abort"
    proceed = "continue"


class ResumeMarker(str, Enum):
    """How an already processed ligand is recognised."""

    output = "output"
    sentinel = "sentinel"


app = typer.Typer(
    name="hdockbatch",
    help="Batch protein-ligand docking with HDOCKlite (hdock + createpl).",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console(no_color=plain_output_enabled())


def _display_banner() -> None:
    """Display the batch banner."""
    if plain_output_enabled():
        return
    banner_content = (
        "[bold]HDOCK Batch Processing[/bold]\n"
        "[dim]hdock docking + createpl model extraction for every ligand[/dim]"
    )
    banner = Panel(banner_content, border_style="dim", padding=(0, 1), expand=False)
    console.print("")
    console.print(banner)
    console.print("")


def _apply_cli_overrides(config_dict: dict, overrides: dict) -> None:
    """Apply CLI argument overrides to config dictionary."""
    for key, value in overrides.items():
        if value is None:
            continue
        if isinstance(value, Enum):
            value = value.value
        config_dict[key] = value
        logger.debug("[bold]Override:[/bold] %s = %s", key, escape(str(value)))


def _load_settings(config_path: str, overrides: dict) -> tuple[dict, Workspace]:
    """Load, override and validate the configuration; resolve the workspace."""
    try:
        config_dict = load_config(config_path)
    except FileNotFoundError as e:
        logger.error(
            "[red]Error:[/red] Configuration file not found: %s",
            escape(str(config_path)),
        )
        raise typer.Exit(code=EXIT_RUN_FAILED) from e

    _apply_cli_overrides(config_dict, overrides)
    try:
        for warning in validate_config(config_dict):
            logger.warning(escape(warning))
    except ConfigError as e:
        for message in e.errors:
            logger.error("[red]Invalid configuration:[/red] %s", escape(message))
        raise typer.Exit(code=EXIT_RUN_FAILED) from e

    return config_dict, Workspace.from_config(config_dict)


def _log_workspace_header(workspace: Workspace) -> None:
    separator = "-" * 49
    logger.info(separator)
    logger.info("Receptor: %s", escape(str(workspace.receptor)))
    logger.info("Site:     %s", escape(str(workspace.site)))
    logger.info("Ligands:  %s", escape(str(workspace.ligands_dir)))
    logger.info("Results:  %s", escape(str(workspace.results_dir)))
    logger.info(separator)


def _preflight_exit(error: PreflightError) -> typer.Exit:
    logger.error("[red]ERROR:[/red] %s", escape(str(error)))
    return typer.Exit(code=error.exit_code)


def _report_outcome(summary: BatchSummary) -> None:
    """Print the summary table and the completion message."""
    LoggerSingleton().console.print(summary.as_table())
    logger.info(
        "Done: %d, skipped: %d, failed: %d",
        len(summary.done),
        len(summary.skipped),
        len(summary.failed),
    )
    if summary.failed:
        logger.warning(
            "%d ligand(s) failed: %s",
            len(summary.failed),
            escape(", ".join(summary.failed)),
        )
        logger.info("[bold]Batch finished with failures.[/bold]")
        return
    logger.info("[bold]All ligands processed successfully![/bold]")


@app.command()
def run(
    config_path: str = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Path to YAML config file (default: src/hdockbatch/configs/config.yml)",
    ),
    workdir: str | None = typer.Option(
        None,
        "--workdir",
        "-w",
        help="Workspace root (default: current directory)",
    ),
    receptor: str | None = typer.Option(
        None, "--receptor", "-r", help="Receptor PDB file (overrides config)"
    ),
    site: str | None = typer.Option(
        None, "--site", "-s", help="Receptor binding-site file (overrides config)"
    ),
    ligands_dir: str | None = typer.Option(
        None, "--ligands", "-l", help="Directory of ligand files (overrides config)"
    ),
    results_dir: str | None = typer.Option(
        None, "--results", "-o", help="Results directory (overrides config)"
    ),
    n_models: int | None = typer.Option(
        None,
        "--nmax",
        min=1,
        help="Number of top models createpl extracts per ligand (default: 10)",
    ),
    on_tool_error: OnToolError | None = typer.Option(
        None,
        "--on-error",
        help="Stop the batch ('abort') or skip to the next ligand ('continue') "
        "when hdock/createpl fails.",
        case_sensitive=False,
    ),
    resume_marker: ResumeMarker | None = typer.Option(
        None,
        "--resume-marker",
        help="Treat a ligand as done when its hdock output exists ('output') "
        "or only after a completed run ('sentinel').",
        case_sensitive=False,
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log tool command lines and other debug output."
    ),
) -> None:
    """
    Dock every ligand in the ligand directory against the receptor.

    Already processed ligands are skipped, so an interrupted batch can simply
    be started again.

    Examples
    --------
    \b
    # Run from a workspace holding BCL-2.pdb, rsite.txt and Ligands/
    hdockbatch run

    \b
    # Custom layout
    hdockbatch run -w project -r receptor.pdb -s site.txt -l ligs -o out

    \b
    # Keep going when a ligand fails
    hdockbatch run --on-error continue
    """
    _display_banner()
    LoggerSingleton().set_verbose(verbose)

    config_dict, workspace = _load_settings(
        config_path,
        {
            "workdir": workdir,
            "receptor": receptor,
            "site": site,
            "ligands_dir": ligands_dir,
            "results_dir": results_dir,
            "n_models": n_models,
            "on_tool_error": on_tool_error,
            "resume_marker": resume_marker,
        },
    )

    try:
        executables = check_dependencies(config_dict)
        _log_workspace_header(workspace)
        check_inputs(workspace)
    except PreflightError as e:
        raise _preflight_exit(e) from e

    if pending_ligands(config_dict, workspace):
        log_file = LoggerSingleton().configure_log_directory(workspace.results_dir)
        logger.debug("Writing log to %s", escape(str(log_file)))

    try:
        summary = run_batch(config_dict, workspace, executables)
        _report_outcome(summary)
    except ToolInvocationError as e:
        logger.error(
            "[red]ERROR:[/red] %s (command: %s). Batch aborted.",
            e,
            escape(" ".join(e.cmd)),
        )
        raise typer.Exit(code=EXIT_RUN_FAILED) from e
    finally:
        LoggerSingleton().close_log_file()


@app.command()
def check(
    config_path: str = typer.Option(
        DEFAULT_CONFIG_PATH,
        "--config",
        "-c",
        help="Path to YAML config file (default: src/hdockbatch/configs/config.yml)",
    ),
    workdir: str | None = typer.Option(
        None,
        "--workdir",
        "-w",
        help="Workspace root (default: current directory)",
    ),
    receptor: str | None = typer.Option(
        None, "--receptor", "-r", help="Receptor PDB file (overrides config)"
    ),
    site: str | None = typer.Option(
        None, "--site", "-s", help="Receptor binding-site file (overrides config)"
    ),
    ligands_dir: str | None = typer.Option(
        None, "--ligands", "-l", help="Directory of ligand files (overrides config)"
    ),
    results_dir: str | None = typer.Option(
        None, "--results", "-o", help="Results directory (overrides config)"
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Log tool command lines and other debug output."
    ),
) -> None:
    """Run the pre-flight checks only; nothing is written."""
    LoggerSingleton().set_verbose(verbose)
    config_dict, workspace = _load_settings(
        config_path,
        {
            "workdir": workdir,
            "receptor": receptor,
            "site": site,
            "ligands_dir": ligands_dir,
            "results_dir": results_dir,
        },
    )

    try:
        executables = run_preflight(config_dict, workspace)
    except PreflightError as e:
        raise _preflight_exit(e) from e

    ligands = discover_ligands(
        workspace.ligands_dir, config_dict.get("ligand_extension", ".pdb")
    )

    table = Table(title="Pre-flight", show_header=True, header_style="bold")
    table.add_column("Item", style="bold", no_wrap=True)
    table.add_column("Location", style="white")
    for tool, path in executables.items():
        table.add_row(tool, path)
    table.add_row("receptor", str(workspace.receptor))
    table.add_row("site", str(workspace.site))
    table.add_row("ligands", f"{workspace.ligands_dir} ({len(ligands)} files)")
    table.add_row("results", str(workspace.results_dir))
    console.print(table)


@app.command()
def info() -> None:
    """Display the expected workspace layout and produced files."""
    table = Table(
        title="Workspace Layout",
        show_header=True,
        header_style="bold",
    )
    table.add_column("Path", style="bold", no_wrap=True)
    table.add_column("Description", style="white")

    rows = [
        ("<workspace>/BCL-2.pdb", "Receptor file (--receptor)"),
        ("<workspace>/rsite.txt", "Receptor binding-site file (--site)"),
        ("<workspace>/Ligands/*.pdb", "Ligand files, one level deep (--ligands)"),
        ("Results/<ligand>/<ligand>_hdock.out", "hdock output (resume marker)"),
        ("Results/<ligand>/<ligand>_hdock.log", "hdock log"),
        (
            "Results/<ligand>/<ligand>_top<N>.pdb",
            "Top N models as one complex file (--nmax)",
        ),
        ("Results/<ligand>/model_N.pdb", "Individual models from createpl"),
        ("Results/batch_summary.json", "Outcome of the last batch"),
    ]
    for path, description in rows:
        table.add_row(path, description)

    console.print(table)
    console.print("\n[dim]Example: hdockbatch run --on-error continue[/dim]")


@app.command()
def version() -> None:
    """Display version information."""
    if plain_output_enabled():
        console.print(f"hdockbatch version {__version__}")
    else:
        console.print(f"[bold]hdockbatch[/bold] version [bold]{__version__}[/bold]")


if __name__ == "__main__":
    app()
