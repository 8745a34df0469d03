"""Rich console that mirrors its output into the debug log.

Used by the CLI in debug mode so that a single log file shows both what the
user saw and what the client did.
"""

import io
import logging
import re
from typing import Optional
from rich.console import Console as RichConsole

ANSI_ESCAPE = re.compile(r'\x1B(?:[@-Z\\-_]|\[[0-?]*[ -/]*[@-~])')


class DebugCapturingConsole(RichConsole):
    """Rich Console that also logs a plain-text copy of everything printed"""

    def __init__(self, debug_logger: Optional[logging.Logger] = None, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.debug_logger = debug_logger
        self._log_prefix = "[CONSOLE] "

    def print(self, *objects, **kwargs):
        super().print(*objects, **kwargs)

        if self.debug_logger and self.debug_logger.isEnabledFor(logging.DEBUG):
            plain_text = self.render_plain(*objects, **kwargs)
            if plain_text.strip():
                self.debug_logger.debug(f"{self._log_prefix}{plain_text}")

    def render_plain(self, *objects, **kwargs) -> str:
        """Render objects as they would print, without markup or ANSI codes"""
        buffer = io.StringIO()
        plain_console = RichConsole(
            file=buffer,
            force_terminal=False,
            width=self.width,
            legacy_windows=False
        )
        plain_console.print(*objects, **kwargs)
        return ANSI_ESCAPE.sub('', buffer.getvalue()).rstrip()


def create_debug_console(debug_enabled: bool = False,
                         debug_logger: Optional[logging.Logger] = None) -> RichConsole:
    """
    Create appropriate console instance based on debug mode.

    Returns:
        DebugCapturingConsole if debug enabled, regular Console otherwise
    """
    if debug_enabled and debug_logger:
        return DebugCapturingConsole(debug_logger=debug_logger)
    return RichConsole()


def setup_debug_logger(log_file: str = "crowdin_debug.log") -> logging.Logger:
    """
    Set up a dedicated logger for console output capture.

    Args:
        log_file: Path to debug log file, appended to

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger("debug_console")
    logger.setLevel(logging.DEBUG)

    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter('%(asctime)s - %(message)s'))
    logger.addHandler(file_handler)

    # Already written to the file; keep it off the root handlers
    logger.propagate = False

    return logger
