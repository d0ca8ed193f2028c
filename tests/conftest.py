"""Shared fixtures for pytest tests."""

import os
import stat
from pathlib import Path

import pytest

FAKE_HDOCK = """#!/bin/sh
# hdock <receptor> <ligand> -rsite <site>
name=$(basename "$2" .pdb)
if [ "$name" = "${FAKE_HDOCK_FAIL:-}" ]; then
    exit 3
fi
if [ "$name" != "${FAKE_HDOCK_NO_OUTPUT:-}" ]; then
    printf 'receptor %s\\nligand %s\\nsite %s\\n' "$1" "$2" "$4" > Hdock.out
fi
if [ "$name" != "${FAKE_HDOCK_NO_LOG:-}" ]; then
    echo "hdock log for $name" > hdock.log
fi
"""

FAKE_CREATEPL = """#!/bin/sh
# createpl <hdock.out> <output> -nmax N -complex -models -rsite <site>
name=$(basename "$1" _hdock.out)
if [ "$name" = "${FAKE_CREATEPL_FAIL:-}" ]; then
    exit 4
fi
echo "complex from $1" > "$2"
i=1
while [ "$i" -le "$4" ]; do
    echo "model $i" > "model_$i.pdb"
    i=$((i + 1))
done
"""


def _write_executable(path: Path, content: str) -> Path:
    path.write_text(content)
    path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    return path


@pytest.fixture
def fake_bin_dir(tmp_path):
    """Directory holding fake hdock/createpl executables."""
    bin_dir = tmp_path / "bin"
    bin_dir.mkdir()
    _write_executable(bin_dir / "hdock", FAKE_HDOCK)
    _write_executable(bin_dir / "createpl", FAKE_CREATEPL)
    return bin_dir


@pytest.fixture
def fake_tools(fake_bin_dir, monkeypatch):
    """Put the fake executables first on PATH and return their paths."""
    monkeypatch.setenv("PATH", f"{fake_bin_dir}{os.pathsep}{os.environ.get('PATH', '')}")
    for var in (
        "FAKE_HDOCK_FAIL",
        "FAKE_HDOCK_NO_OUTPUT",
        "FAKE_HDOCK_NO_LOG",
        "FAKE_CREATEPL_FAIL",
    ):
        monkeypatch.delenv(var, raising=False)
    return {
        "hdock": str(fake_bin_dir / "hdock"),
        "createpl": str(fake_bin_dir / "createpl"),
    }


@pytest.fixture
def workspace_dir(tmp_path):
    """Workspace with receptor R.pdb, site S.txt and ligands A.pdb, B.pdb."""
    root = tmp_path / "workspace"
    (root / "Ligands").mkdir(parents=True)
    (root / "R.pdb").write_text("ATOM receptor\n")
    (root / "S.txt").write_text("A:10 A:11\n")
    (root / "Ligands" / "A.pdb").write_text("ATOM ligand A\n")
    (root / "Ligands" / "B.pdb").write_text("ATOM ligand B\n")
    return root


@pytest.fixture
def batch_config(workspace_dir):
    """Configuration dictionary pointing at ``workspace_dir``."""
    return {
        "workdir": str(workspace_dir),
        "receptor": "R.pdb",
        "site": "S.txt",
        "ligands_dir": "Ligands",
        "results_dir": "Results",
        "ligand_extension": ".pdb",
        "hdock_bin": "hdock",
        "createpl_bin": "createpl",
        "n_models": 10,
        "on_tool_error": "abort",
        "resume_marker": "output",
        "write_summary": True,
    }


@pytest.fixture
def tree_snapshot():
    """Return a function mapping every file below a root to its mtime (ns)."""

    def _snapshot(root: Path) -> dict[str, int]:
        return {
            str(path.relative_to(root)): path.stat().st_mtime_ns
            for path in sorted(root.rglob("*"))
            if path.is_file()
        }

    return _snapshot
