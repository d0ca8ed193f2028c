"""Running external tools that report results through fixed-name files."""

from __future__ import annotations

import os
import shutil
import subprocess
from dataclasses import dataclass, field
from pathlib import Path

from rich.markup import escape

from hdockbatch.configs.logger import logger


class ToolInvocationError(subprocess.CalledProcessError):
    """An external tool exited with a non-zero status."""

    def __init__(self, tool: str, returncode: int, cmd, cwd: Path | None = None):
        super().__init__(returncode, cmd)
        self.tool = tool
        self.cwd = cwd

    def __str__(self) -> str:
        return f"{self.tool} exited with status {self.returncode}"


@dataclass
class ToolResult:
    """Outcome of one tool invocation.

    ``output`` is set only when the expected fixed-name file exists after the
    run and was written by this invocation.
    """

    tool: str
    command: list[str]
    returncode: int
    cwd: Path
    output: Path | None = None
    stale_output: bool = field(default=False, repr=False)

    @property
    def ok(self) -> bool:
        return self.returncode == 0 and self.output is not None


def file_signature(path: Path | None):
    """Return (mtime_ns, size, inode) of ``path`` or None if it is missing."""
    if path is None:
        return None
    try:
        stat = path.stat()
    except OSError:
        return None
    return stat.st_mtime_ns, stat.st_size, stat.st_ino


def run_tool(
    tool: str,
    command: list[str],
    cwd: Path,
    expected_output: Path | None = None,
    check: bool = True,
) -> ToolResult:
    """Run ``command`` in ``cwd`` and look for its fixed-name output file.

    The working directory is handed to the child process only; the current
    directory of this process is left untouched.

    Args:
        tool: Short tool name used in messages (e.g. 'hdock').
        command: Full argument vector.
        cwd: Working directory for the child process.
        expected_output: File the tool is expected to (re)write.
        check: Raise ToolInvocationError on a non-zero exit status.

    Returns:
        ToolResult describing the invocation.

    Raises:
        ToolInvocationError: If ``check`` is set and the tool fails.
    """
    cwd = Path(cwd)
    command = [str(part) for part in command]
    before = file_signature(expected_output)
    if before is not None:
        logger.warning(
            "%s: stale %s found in %s before running; it will not count as output",
            tool,
            escape(expected_output.name),
            escape(str(cwd)),
        )

    logger.debug(
        "Running %s in %s: %s", tool, escape(str(cwd)), escape(" ".join(command))
    )
    completed = subprocess.run(command, cwd=str(cwd), check=False)
    returncode = completed.returncode

    if returncode != 0:
        logger.debug("%s exited with status %d", tool, returncode)
        if check:
            raise ToolInvocationError(tool, returncode, command, cwd=cwd)

    output = None
    after = file_signature(expected_output)
    if after is not None and after != before:
        output = expected_output

    return ToolResult(
        tool=tool,
        command=command,
        returncode=returncode,
        cwd=cwd,
        output=output,
        stale_output=before is not None and after == before,
    )


def relocate(source: Path, destination: Path) -> Path:
    """Move ``source`` to ``destination``, replacing an existing file."""
    destination.parent.mkdir(parents=True, exist_ok=True)
    if destination.exists():
        os.remove(destination)
    shutil.move(str(source), str(destination))
    return destination
