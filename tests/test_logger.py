"""Tests for plain-text log formatting and logger configuration."""

from __future__ import annotations

import logging

import pytest
from rich.markup import escape

from hdockbatch.configs.logger import LoggerSingleton, _PlainTextFormatter, load_config


def _format_message(message: str, level=logging.INFO) -> str:
    formatter = _PlainTextFormatter()
    record = logging.LogRecord("test", level, "", 0, message, (), None)
    return formatter.format(record)


def test_plain_text_formatter_strips_rich_tags_only():
    formatted = _format_message("[yellow]SKIP [/yellow] 1/2 [bold]A[/bold]: skipping")
    assert "SKIP  1/2 A: skipping" in formatted


def test_plain_text_formatter_keeps_level_name():
    formatted = _format_message("[red]boom[/red]", level=logging.ERROR)
    assert "[ERROR] boom" in formatted


def test_plain_text_formatter_preserves_escaped_brackets():
    formatted = _format_message(f"Finished: {escape('lig[variant]')}")
    assert "Finished: lig[variant]" in formatted


def test_configure_log_directory_creates_log_file(tmp_path):
    singleton = LoggerSingleton()
    try:
        log_file = singleton.configure_log_directory(tmp_path / "Results")
        singleton.get_logger().info("[bold]hello[/bold]")
        for handler in singleton.get_logger().handlers:
            handler.flush()
        assert log_file.parent == (tmp_path / "Results").resolve()
        assert log_file.name.startswith("batch_")
        assert "hello" in log_file.read_text()
    finally:
        singleton.close_log_file()
    assert singleton.log_file is None


def test_load_config_defaults():
    config = load_config()
    assert config["ligands_dir"] == "Ligands"
    assert config["results_dir"] == "Results"
    assert config["n_models"] == 10
    assert config["on_tool_error"] == "abort"


def test_load_config_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(tmp_path / "missing.yml")


def test_load_config_empty_file(tmp_path):
    empty = tmp_path / "empty.yml"
    empty.write_text("")
    assert load_config(empty) == {}
