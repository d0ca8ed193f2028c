import json
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from pathlib import Path

from rich.markup import escape
from rich.table import Table

from hdockbatch.configs.logger import logger
from hdockbatch.tools import (
    CREATEPL_TOOL,
    HDOCK_LOG_NAME,
    HDOCK_OUTPUT_NAME,
    HDOCK_TOOL,
    ToolInvocationError,
    file_signature,
    relocate,
    run_createpl,
    run_hdock,
    top_models_filename,
)
from hdockbatch.utils.ligands import Ligand, discover_ligands
from hdockbatch.utils.workspace import Workspace

FILE_BATCH_SUMMARY = "batch_summary.json"

# Config keys
CONFIG_N_MODELS = "n_models"
CONFIG_ON_TOOL_ERROR = "on_tool_error"
CONFIG_RESUME_MARKER = "resume_marker"
CONFIG_LIGAND_EXTENSION = "ligand_extension"
CONFIG_WRITE_SUMMARY = "write_summary"

ON_TOOL_ERROR_ABORT = "abort"
ON_TOOL_ERROR_CONTINUE = "continue"
RESUME_MARKER_OUTPUT = "output"
RESUME_MARKER_SENTINEL = "sentinel"

DEFAULT_N_MODELS = 10


class LigandOutcome(str, Enum):
    """Terminal state of one ligand in a batch."""

    skipped = "skipped"
    done = "done"
    failed = "failed"


@dataclass
class LigandReport:
    name: str
    outcome: LigandOutcome
    message: str | None = None


@dataclass
class BatchSummary:
    """Per-ligand outcomes of one batch run."""

    started_at: datetime = field(default_factory=datetime.now)
    finished_at: datetime | None = None
    reports: list[LigandReport] = field(default_factory=list)

    def add(self, report: LigandReport) -> None:
        self.reports.append(report)

    def _names(self, outcome: LigandOutcome) -> list[str]:
        return [r.name for r in self.reports if r.outcome == outcome]

    @property
    def done(self) -> list[str]:
        return self._names(LigandOutcome.done)

    @property
    def skipped(self) -> list[str]:
        return self._names(LigandOutcome.skipped)

    @property
    def failed(self) -> list[str]:
        return self._names(LigandOutcome.failed)

    @property
    def total(self) -> int:
        return len(self.reports)

    def to_dict(self) -> dict:
        return {
            "started_at": self.started_at.isoformat(timespec="seconds"),
            "finished_at": (
                self.finished_at.isoformat(timespec="seconds")
                if self.finished_at
                else None
            ),
            "total": self.total,
            "counts": {
                outcome.value: len(self._names(outcome)) for outcome in LigandOutcome
            },
            "done": self.done,
            "skipped": self.skipped,
            "failed": {
                r.name: r.message
                for r in self.reports
                if r.outcome == LigandOutcome.failed
            },
        }

    def save(self, results_dir: Path) -> Path:
        """Write the summary as JSON into ``results_dir``."""
        summary_path = Path(results_dir) / FILE_BATCH_SUMMARY
        with open(summary_path, "w") as f:
            json.dump(self.to_dict(), f, indent=2)
        return summary_path

    def as_table(self) -> Table:
        table = Table(title="Batch Summary", show_header=True, header_style="bold")
        table.add_column("Outcome", style="bold", no_wrap=True)
        table.add_column("Ligands", justify="right")
        table.add_row("[green]done[/green]", str(len(self.done)))
        table.add_row("[yellow]skipped[/yellow]", str(len(self.skipped)))
        table.add_row("[red]failed[/red]", str(len(self.failed)))
        table.add_row("total", str(self.total))
        return table


class StatusReporter:
    """Emit tagged, human-readable status lines for each ligand."""

    _TAGS = {
        "start": "[bold cyan]START[/bold cyan]",
        "skip": "[yellow]SKIP [/yellow]",
        "run": "[blue]RUN  [/blue]",
        "ok": "[bold green]OK   [/bold green]",
        "error": "[bold red]ERROR[/bold red]",
    }

    def __init__(self, total: int = 0) -> None:
        self.total = total
        self.position = 0

    def _emit(self, category: str, message: str, *args, error=False) -> None:
        log = logger.error if error else logger.info
        log(
            "%s %d/%d " + message,
            self._TAGS[category],
            self.position,
            self.total,
            *args,
        )

    def start(self, ligand: Ligand, position: int) -> None:
        self.position = position
        self._emit("start", "Processing ligand: [bold]%s[/bold]", escape(ligand.name))

    def skip(self, ligand: Ligand) -> None:
        self._emit(
            "skip", "%s: skipping (result file already exists)", escape(ligand.name)
        )

    def running(self, ligand: Ligand, step: str) -> None:
        self._emit("run", "%s: %s", escape(ligand.name), step)

    def success(self, ligand: Ligand) -> None:
        self._emit("ok", "Finished: %s", escape(ligand.name))

    def error(self, ligand: Ligand, message: str) -> None:
        self._emit("error", "%s: %s", escape(ligand.name), escape(message), error=True)


class LigandOrchestrator:
    """Dock ligands one at a time and file their outputs under the results tree."""

    def __init__(
        self,
        config: dict,
        workspace: Workspace,
        executables: dict[str, str],
        reporter: StatusReporter | None = None,
    ):
        self.config = config
        self.workspace = workspace
        self.executables = executables
        self.reporter = reporter or StatusReporter()
        self.n_models = int(config.get(CONFIG_N_MODELS, DEFAULT_N_MODELS))
        self.strict = (
            config.get(CONFIG_ON_TOOL_ERROR, ON_TOOL_ERROR_ABORT) == ON_TOOL_ERROR_ABORT
        )
        self.resume_marker = config.get(CONFIG_RESUME_MARKER, RESUME_MARKER_OUTPUT)
        self._log_signature = None

    @property
    def _workspace_log(self) -> Path:
        return self.workspace.root / HDOCK_LOG_NAME

    def is_processed(self, ligand: Ligand) -> bool:
        """Return True if the ligand's results mark it as already done."""
        if not self.workspace.hdock_output(ligand.name).is_file():
            return False
        if self.resume_marker == RESUME_MARKER_SENTINEL:
            return self.workspace.completion_sentinel(ligand.name).is_file()
        return True

    def process(self, ligand: Ligand, position: int = 0) -> LigandReport:
        """Run the full docking sequence for one ligand.

        Raises:
            ToolInvocationError: If a tool fails and ``on_tool_error`` is 'abort'.
        """
        self.reporter.start(ligand, position)

        if self.is_processed(ligand):
            self.reporter.skip(ligand)
            return LigandReport(ligand.name, LigandOutcome.skipped)

        result_dir = self.workspace.ligand_result_dir(ligand.name)
        result_dir.mkdir(parents=True, exist_ok=True)

        failure = self._dock(ligand)
        if failure:
            return self._fail(ligand, failure)

        try:
            failure = self._generate_models(ligand)
        finally:
            self._relocate_log(ligand)
        if failure:
            return self._fail(ligand, failure)

        self._write_sentinel(ligand)
        self.reporter.success(ligand)
        return LigandReport(ligand.name, LigandOutcome.done)

    def _dock(self, ligand: Ligand) -> str | None:
        """Run hdock and move Hdock.out into place; return a failure message or None."""
        self.reporter.running(ligand, "Running HDOCK...")
        self._log_signature = file_signature(self._workspace_log)
        try:
            result = run_hdock(
                self.executables[HDOCK_TOOL],
                self.workspace.receptor,
                ligand.path,
                self.workspace.site,
                workdir=self.workspace.root,
                check=self.strict,
            )
        except ToolInvocationError:
            self._discard_result_dir(ligand)
            raise

        if result.returncode != 0:
            self._discard_result_dir(ligand)
            self._discard_log(ligand)
            return f"{HDOCK_TOOL} exited with status {result.returncode}"

        if result.output is None:
            self._discard_result_dir(ligand)
            self._discard_log(ligand)
            return f"HDOCK failed to produce {HDOCK_OUTPUT_NAME} for {ligand.name}"

        relocate(result.output, self.workspace.hdock_output(ligand.name))
        return None

    def _generate_models(self, ligand: Ligand) -> str | None:
        """Run createpl inside the ligand's result directory."""
        self.reporter.running(ligand, f"Generating top {self.n_models} models...")
        output_name = top_models_filename(ligand.name, self.n_models)
        result = run_createpl(
            self.executables[CREATEPL_TOOL],
            self.workspace.hdock_output(ligand.name),
            output_name,
            self.workspace.site,
            result_dir=self.workspace.ligand_result_dir(ligand.name),
            n_models=self.n_models,
            check=self.strict,
        )
        if result.returncode != 0:
            return f"{CREATEPL_TOOL} exited with status {result.returncode}"
        if result.output is None:
            logger.warning(
                "%s did not write %s for %s",
                CREATEPL_TOOL,
                escape(output_name),
                escape(ligand.name),
            )
        return None

    def _log_written(self) -> bool:
        """Return True if hdock.log was (re)written by the current hdock run."""
        signature = file_signature(self._workspace_log)
        return signature is not None and signature != self._log_signature

    def _relocate_log(self, ligand: Ligand) -> None:
        if self._log_written():
            relocate(self._workspace_log, self.workspace.hdock_log(ligand.name))

    def _discard_log(self, ligand: Ligand) -> None:
        # A failed ligand has no result directory to hold its log
        if self._log_written():
            logger.debug(
                "Removing %s of failed ligand %s", HDOCK_LOG_NAME, escape(ligand.name)
            )
            self._workspace_log.unlink()

    def _write_sentinel(self, ligand: Ligand) -> None:
        self.workspace.completion_sentinel(ligand.name).write_text(
            f"Completed: {datetime.now().isoformat(timespec='seconds')}\n"
        )

    def _discard_result_dir(self, ligand: Ligand) -> None:
        """Remove the ligand's result directory if nothing was written into it."""
        result_dir = self.workspace.ligand_result_dir(ligand.name)
        try:
            result_dir.rmdir()
        except FileNotFoundError:
            pass
        except OSError:
            logger.warning(
                "Result directory %s is not empty; leaving it in place",
                escape(str(result_dir)),
            )

    def _fail(self, ligand: Ligand, message: str) -> LigandReport:
        self.reporter.error(ligand, message)
        return LigandReport(ligand.name, LigandOutcome.failed, message)


def pending_ligands(config: dict, workspace: Workspace) -> list[Ligand]:
    """Return the discovered ligands that a batch would dock."""
    orchestrator = LigandOrchestrator(config, workspace, executables={})
    ligands = discover_ligands(
        workspace.ligands_dir, config.get(CONFIG_LIGAND_EXTENSION, ".pdb")
    )
    return [ligand for ligand in ligands if not orchestrator.is_processed(ligand)]


def run_batch(
    config: dict,
    workspace: Workspace,
    executables: dict[str, str],
    reporter: StatusReporter | None = None,
) -> BatchSummary:
    """Dock every ligand found in the workspace's ligand directory.

    The summary file is only (re)written when at least one ligand was docked
    or failed, so a batch where everything is skipped leaves the results tree
    untouched.

    Args:
        config: Batch configuration dictionary
        workspace: Resolved workspace paths (pre-flight already passed)
        executables: Tool name -> resolved executable path

    Returns:
        BatchSummary with one report per discovered ligand

    Raises:
        ToolInvocationError: If a tool fails under the 'abort' policy
    """
    extension = config.get(CONFIG_LIGAND_EXTENSION, ".pdb")
    ligands = discover_ligands(workspace.ligands_dir, extension)
    reporter = reporter or StatusReporter()
    reporter.total = len(ligands)

    workspace.results_dir.mkdir(parents=True, exist_ok=True)
    summary = BatchSummary()

    if not ligands:
        logger.warning(
            "No '*%s' ligand files found in %s",
            escape(extension),
            escape(str(workspace.ligands_dir)),
        )

    orchestrator = LigandOrchestrator(config, workspace, executables, reporter)
    try:
        for position, ligand in enumerate(ligands, start=1):
            try:
                summary.add(orchestrator.process(ligand, position))
            except ToolInvocationError as e:
                summary.add(LigandReport(ligand.name, LigandOutcome.failed, str(e)))
                raise
    finally:
        summary.finished_at = datetime.now()
        if config.get(CONFIG_WRITE_SUMMARY, True) and (summary.done or summary.failed):
            summary_path = summary.save(workspace.results_dir)
            logger.debug("Batch summary written to %s", escape(str(summary_path)))

    return summary
