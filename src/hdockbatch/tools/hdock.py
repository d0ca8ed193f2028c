"""Adapters for the HDOCKlite executables ``hdock`` and ``createpl``.

Both programs take no output-path argument for their main artifacts: ``hdock``
drops ``Hdock.out`` and ``hdock.log`` into its working directory, and
``createpl`` writes the combined complex file plus ``model_N.pdb`` files next
to wherever it runs.
"""

from __future__ import annotations

from pathlib import Path

from hdockbatch.tools._runner import ToolResult, run_tool

HDOCK_TOOL = "hdock"
CREATEPL_TOOL = "createpl"

HDOCK_OUTPUT_NAME = "Hdock.out"
HDOCK_LOG_NAME = "hdock.log"
MODEL_FILE_TEMPLATE = "model_{index}.pdb"
DEFAULT_N_MODELS = 10


def top_models_filename(ligand_name: str, n_models: int = DEFAULT_N_MODELS) -> str:
    """Name of the combined top-N complex file for a ligand."""
    return f"{ligand_name}_top{n_models}.pdb"


def model_filenames(n_models: int = DEFAULT_N_MODELS) -> list[str]:
    return [MODEL_FILE_TEMPLATE.format(index=i) for i in range(1, n_models + 1)]


def build_hdock_command(hdock_bin, receptor, ligand, site) -> list[str]:
    return [str(hdock_bin), str(receptor), str(ligand), "-rsite", str(site)]


def build_createpl_command(
    createpl_bin, hdock_out, output_name, site, n_models=DEFAULT_N_MODELS
) -> list[str]:
    return [
        str(createpl_bin),
        str(hdock_out),
        str(output_name),
        "-nmax",
        str(n_models),
        "-complex",
        "-models",
        "-rsite",
        str(site),
    ]


def run_hdock(
    hdock_bin: str,
    receptor: Path,
    ligand: Path,
    site: Path,
    workdir: Path,
    check: bool = True,
) -> ToolResult:
    """Dock one ligand; ``result.output`` points at ``workdir/Hdock.out`` if produced."""
    workdir = Path(workdir)
    return run_tool(
        HDOCK_TOOL,
        build_hdock_command(hdock_bin, receptor, ligand, site),
        cwd=workdir,
        expected_output=workdir / HDOCK_OUTPUT_NAME,
        check=check,
    )


def run_createpl(
    createpl_bin: str,
    hdock_out: Path,
    output_name: str,
    site: Path,
    result_dir: Path,
    n_models: int = DEFAULT_N_MODELS,
    check: bool = True,
) -> ToolResult:
    """Extract the top models from ``hdock_out`` into ``result_dir``."""
    result_dir = Path(result_dir)
    return run_tool(
        CREATEPL_TOOL,
        build_createpl_command(createpl_bin, hdock_out, output_name, site, n_models),
        cwd=result_dir,
        expected_output=result_dir / output_name,
        check=check,
    )
