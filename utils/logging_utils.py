"""
Logging utilities for request debugging and tracing.
"""
import logging
from typing import Dict, Optional

logger = logging.getLogger(__name__)

SENSITIVE_HEADERS = {"authorization", "cookie", "set-cookie"}


def redact_headers(headers: Optional[Dict[str, str]]) -> Dict[str, str]:
    """Copy headers with credential values replaced"""
    return {
        name: "[REDACTED]" if name.lower() in SENSITIVE_HEADERS else value
        for name, value in (headers or {}).items()
    }


def log_request(operation: str, method: str, url: str, headers: Optional[Dict[str, str]] = None):
    """Log outgoing request details without exposing credentials"""
    if not logger.isEnabledFor(logging.DEBUG):
        return

    logger.debug(f"[{operation}] {method} {url}")
    for header_name, header_value in redact_headers(headers).items():
        logger.debug(f"[{operation}] {header_name}: {header_value}")


def log_response(operation: str, status_code: int, elapsed_ms: Optional[float] = None):
    """Log the outcome of a request"""
    if elapsed_ms is None:
        logger.debug(f"[{operation}] -> HTTP {status_code}")
    else:
        logger.debug(f"[{operation}] -> HTTP {status_code} ({elapsed_ms:.0f} ms)")
