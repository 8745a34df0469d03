"""Shared utilities package for the Crowdin client"""

from .debug_console import (
    DebugCapturingConsole,
    create_debug_console,
    setup_debug_logger,
)
from .logging_utils import log_request, log_response, redact_headers

__all__ = [
    "DebugCapturingConsole",
    "create_debug_console",
    "setup_debug_logger",
    "log_request",
    "log_response",
    "redact_headers",
]
