"""Pre-flight checks run before any ligand is touched."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from rich.markup import escape

from hdockbatch.configs.logger import logger
from hdockbatch.tools import CREATEPL_TOOL, HDOCK_TOOL
from hdockbatch.utils.workspace import Workspace

EXIT_MISSING_EXECUTABLE = 2
EXIT_MISSING_INPUT = 3


class PreflightError(Exception):
    """A required executable or input is missing."""

    exit_code = 1


class MissingExecutableError(PreflightError):
    exit_code = EXIT_MISSING_EXECUTABLE


class MissingInputError(PreflightError):
    exit_code = EXIT_MISSING_INPUT


def resolve_executable(tool_path: str, tool_label: str | None = None) -> str:
    """Resolve an executable from an explicit path or from PATH.

    Args:
        tool_path: Absolute/relative path or bare command name.
        tool_label: Name used in the error message (defaults to ``tool_path``).

    Returns:
        Absolute path to the executable.

    Raises:
        MissingExecutableError: If the executable cannot be found.
    """
    tool_label = tool_label or str(tool_path)
    path = Path(str(tool_path)).expanduser()

    if os.sep in str(tool_path):
        if path.is_file() and os.access(path, os.X_OK):
            return str(path.resolve())
        raise MissingExecutableError(
            f"'{tool_label}' not found or not executable at {path}."
        )

    found = shutil.which(str(tool_path))
    if found:
        return found

    raise MissingExecutableError(
        f"'{tool_label}' command not found. "
        f"Please install HDOCK and ensure '{tool_path}' is in your system's PATH."
    )


def check_dependencies(config: dict) -> dict[str, str]:
    """Resolve both HDOCK executables, returning tool name -> path."""
    logger.info("Checking for dependencies...")
    resolved = {
        HDOCK_TOOL: resolve_executable(config.get("hdock_bin", HDOCK_TOOL), HDOCK_TOOL),
        CREATEPL_TOOL: resolve_executable(
            config.get("createpl_bin", CREATEPL_TOOL), CREATEPL_TOOL
        ),
    }
    for tool, path in resolved.items():
        logger.debug("Found %s at %s", tool, escape(path))
    logger.info("[green]All dependencies found.[/green]")
    return resolved


def check_inputs(workspace: Workspace) -> None:
    """Confirm receptor, binding-site file and ligand directory exist."""
    if not workspace.receptor.is_file():
        raise MissingInputError(f"Receptor file not found at {workspace.receptor}")
    if not workspace.site.is_file():
        raise MissingInputError(f"Receptor site file not found at {workspace.site}")
    if not workspace.ligands_dir.is_dir():
        raise MissingInputError(
            f"Ligand directory not found at {workspace.ligands_dir}"
        )


def run_preflight(config: dict, workspace: Workspace) -> dict[str, str]:
    """Run all read-only checks; raise PreflightError on the first failure."""
    executables = check_dependencies(config)
    check_inputs(workspace)
    return executables
