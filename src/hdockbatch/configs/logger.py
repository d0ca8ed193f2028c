from __future__ import annotations

import logging
import os
import re
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import yaml
from rich.console import Console
from rich.logging import RichHandler

# Pattern to strip Rich markup tags like [bold], [/bold], [yellow], etc.
# Excludes standard log levels: [INFO], [WARNING], [ERROR], [DEBUG], [CRITICAL]
# and brackets escaped with rich.markup.escape (``\[``).
_RICH_MARKUP_RE = re.compile(
    r"(?<!\\)\[/?(?!INFO\]|WARNING\]|ERROR\]|DEBUG\]|CRITICAL\])[^\]]+\]"
)

CONFIG_PATH = Path(__file__).resolve().parent / "config.yml"
PLAIN_OUTPUT_ENV = "HDOCKBATCH_PLAIN_OUTPUT"
LOG_FILE_PREFIX = "batch"


def plain_output_enabled() -> bool:
    return os.environ.get(PLAIN_OUTPUT_ENV, "").strip() == "1"


class LoggerSingleton:
    """Singleton responsible for configuring project logging."""

    _instance: LoggerSingleton | None = None
    _logger: logging.Logger | None = None
    _console: Console | None = None
    _console_handler: logging.Handler | None = None
    _log_directory: Path | None = None
    _file_handler: logging.Handler | None = None
    _lock = threading.Lock()

    def __new__(cls):
        """Create or reuse singleton instance (thread-safe)."""
        if cls._instance is None:
            with cls._lock:
                if cls._instance is None:
                    cls._instance = super().__new__(cls)
                    cls._console = Console(no_color=plain_output_enabled())
        return cls._instance

    def get_logger(self, name="hdockbatch"):
        """Return shared logger instance configured with Rich handlers."""
        if self._logger is None:
            self._logger = self._setup_logger(name)
        return self._logger

    @property
    def console(self) -> Console:
        """Return the shared Rich Console used by the logging handler."""
        return self._console

    @property
    def log_file(self) -> Path | None:
        """Return the path of the active plain-text log file, if any."""
        if self._file_handler is None:
            return None
        return Path(self._file_handler.baseFilename)

    def set_verbose(self, verbose: bool) -> None:
        """Switch the console handler between INFO and DEBUG."""
        logger = self.get_logger()
        level = logging.DEBUG if verbose else logging.INFO
        logger.setLevel(level)
        if self._console_handler is not None:
            self._console_handler.setLevel(level)

    def configure_log_directory(self, folder_to_save: Path) -> Path:
        """Attach a file handler writing into ``folder_to_save``.

        Called only once pre-flight checks pass, so a failed validation never
        creates the results directory.

        Args:
            folder_to_save: Directory where log files should be written.

        Returns:
            Path of the log file for this run.
        """
        new_dir = Path(folder_to_save).resolve()

        # A second batch in the same process gets its own log file.
        if self._log_directory is not None and new_dir != self._log_directory:
            self.close_log_file()

        self._log_directory = new_dir
        self._log_directory.mkdir(parents=True, exist_ok=True)
        self.get_logger()
        self._ensure_file_handler()
        return self.log_file

    def close_log_file(self) -> None:
        """Detach and close the plain-text file handler."""
        if self._logger is not None and self._file_handler is not None:
            self._logger.removeHandler(self._file_handler)
            self._file_handler.close()
        self._file_handler = None
        self._log_directory = None

    def _setup_logger(self, name="hdockbatch"):
        """Configure console handler for Rich logging output.

        File handler is added later via configure_log_directory() so that the
        log lands inside the results directory of the current batch.
        """
        logger = logging.getLogger(name)
        logger.setLevel(logging.INFO)
        logger.handlers = []
        logger.propagate = False

        console_handler = RichHandler(
            rich_tracebacks=True,
            markup=True,
            show_time=True,
            show_level=True,
            show_path=False,
            console=self._console,
        )
        console_handler.setLevel(logging.INFO)
        logger.addHandler(console_handler)
        self._console_handler = console_handler

        self._logger = logger
        return logger

    def _ensure_file_handler(self) -> None:
        """Attach a file handler if a log directory is configured."""
        if self._file_handler is not None:
            return
        if self._logger is None or self._log_directory is None:
            return

        current_time = datetime.now(tz=timezone.utc).strftime("%Y%m%d_%H%M%S")
        log_file = self._log_directory / f"{LOG_FILE_PREFIX}_{current_time}.log"
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setFormatter(_PlainTextFormatter())
        file_handler.setLevel(logging.DEBUG)
        self._logger.addHandler(file_handler)
        self._file_handler = file_handler


class _PlainTextFormatter(logging.Formatter):
    """Formatter that strips Rich markup tags for plain text log files."""

    def __init__(self):
        super().__init__(
            fmt="%(asctime)s [%(levelname)s] %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        # Format first, then strip Rich markup from the final result
        result = super().format(record)
        return _RICH_MARKUP_RE.sub("", result).replace("\\[", "[")


def setup_logger(name="hdockbatch"):
    """Initialise logger singleton and return configured logger."""
    return LoggerSingleton().get_logger(name)


def get_logger():
    """Return the shared logger instance."""
    return LoggerSingleton().get_logger()


class LazyLogger:
    """Proxy that lazily resolves attributes on first use."""

    def __getattr__(self, name):
        """Resolve attribute lookups against the underlying logger."""
        logger_instance = get_logger()
        return getattr(logger_instance, name)


logger = LazyLogger()


def load_config(config_path: str | Path = CONFIG_PATH) -> dict[str, Any]:
    """Load YAML configuration file.

    Parameters:
        config_path: Path to the YAML configuration file.

    Returns:
        dict[str, Any]: Parsed configuration dictionary (empty for an empty file).

    Raises:
        FileNotFoundError: If configuration file doesn't exist.
        yaml.YAMLError: If YAML parsing fails.
    """
    config_path = Path(config_path)
    root_logger = logging.getLogger(__name__)
    try:
        with config_path.open(encoding="utf-8") as file:
            return yaml.safe_load(file) or {}
    except FileNotFoundError:
        root_logger.exception("Configuration file not found: %s", config_path)
        raise
    except yaml.YAMLError:
        root_logger.exception("Error parsing YAML configuration for %s", config_path)
        raise
