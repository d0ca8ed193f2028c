"""Wrappers around the external docking executables."""

from hdockbatch.tools._runner import (
    ToolInvocationError,
    ToolResult,
    file_signature,
    relocate,
    run_tool,
)
from hdockbatch.tools.hdock import (
    CREATEPL_TOOL,
    HDOCK_LOG_NAME,
    HDOCK_OUTPUT_NAME,
    HDOCK_TOOL,
    run_createpl,
    run_hdock,
    top_models_filename,
)

__all__ = [
    "CREATEPL_TOOL",
    "HDOCK_LOG_NAME",
    "HDOCK_OUTPUT_NAME",
    "HDOCK_TOOL",
    "ToolInvocationError",
    "ToolResult",
    "file_signature",
    "relocate",
    "run_createpl",
    "run_hdock",
    "run_tool",
    "top_models_filename",
]
