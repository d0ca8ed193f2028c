"""Tests for pre-flight validation."""

import os
from pathlib import Path

import pytest

from hdockbatch.preflight import (
    EXIT_MISSING_EXECUTABLE,
    EXIT_MISSING_INPUT,
    MissingExecutableError,
    MissingInputError,
    check_dependencies,
    check_inputs,
    resolve_executable,
    run_preflight,
)
from hdockbatch.utils.workspace import Workspace


class TestResolveExecutable:
    """Tests for resolve_executable."""

    def test_found_on_path(self, fake_tools):
        assert resolve_executable("hdock") == fake_tools["hdock"]

    def test_explicit_path(self, fake_tools):
        expected = str(Path(fake_tools["createpl"]).resolve())
        assert resolve_executable(fake_tools["createpl"]) == expected

    def test_missing_on_path(self, monkeypatch):
        monkeypatch.setattr("hdockbatch.preflight.shutil.which", lambda _: None)
        with pytest.raises(MissingExecutableError, match="'hdock' command not found"):
            resolve_executable("hdock")

    def test_explicit_path_not_executable(self, tmp_path):
        script = tmp_path / "hdock"
        script.write_text("#!/bin/sh\n")
        os.chmod(script, 0o644)
        with pytest.raises(MissingExecutableError, match="not executable"):
            resolve_executable(str(script))

    def test_exit_code(self):
        assert MissingExecutableError.exit_code == EXIT_MISSING_EXECUTABLE
        assert MissingInputError.exit_code == EXIT_MISSING_INPUT
        assert EXIT_MISSING_EXECUTABLE != EXIT_MISSING_INPUT


def test_check_dependencies_names_missing_tool(batch_config, fake_bin_dir, monkeypatch):
    (fake_bin_dir / "createpl").unlink()
    monkeypatch.setenv("PATH", str(fake_bin_dir))
    with pytest.raises(MissingExecutableError, match="createpl"):
        check_dependencies(batch_config)


def test_check_dependencies_returns_paths(batch_config, fake_tools):
    assert check_dependencies(batch_config) == fake_tools


@pytest.mark.parametrize(
    ("remove", "message"),
    [
        ("R.pdb", "Receptor file not found"),
        ("S.txt", "Receptor site file not found"),
        ("Ligands", "Ligand directory not found"),
    ],
)
def test_check_inputs_missing(batch_config, workspace_dir, remove, message):
    target = workspace_dir / remove
    if target.is_dir():
        for child in target.iterdir():
            child.unlink()
        target.rmdir()
    else:
        target.unlink()

    ws = Workspace.from_config(batch_config)
    with pytest.raises(MissingInputError, match=message):
        check_inputs(ws)
    assert not ws.results_dir.exists()


def test_run_preflight_has_no_side_effects(batch_config, workspace_dir, fake_tools):
    before = sorted(p.name for p in workspace_dir.rglob("*"))
    ws = Workspace.from_config(batch_config)
    assert run_preflight(batch_config, ws) == fake_tools
    assert sorted(p.name for p in workspace_dir.rglob("*")) == before
