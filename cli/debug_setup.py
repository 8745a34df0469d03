"""Logging and console setup for CLI"""

import logging
import os
from rich.console import Console
from utils.debug_console import create_debug_console, setup_debug_logger

DEBUG_LOG_FILE = "crowdin_debug.log"


def setup_logging(debug: bool, log_level: str) -> Console:
    """
    Configure logging and create the console used for output

    In debug mode everything is logged at DEBUG level to the console and
    appended to the debug log file, together with a copy of the console output.

    Args:
        debug: Whether debug mode is enabled
        log_level: Level name used when not in debug mode

    Returns:
        Console instance (either regular or debug-enabled)
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if not debug:
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
        return Console()

    root_logger.setLevel(logging.DEBUG)

    log_file = os.path.abspath(DEBUG_LOG_FILE)
    file_handler = logging.FileHandler(log_file, mode='a', encoding='utf-8')
    file_handler.setFormatter(formatter)
    root_logger.addHandler(file_handler)

    debug_logger = setup_debug_logger(log_file)
    console = create_debug_console(debug_enabled=True, debug_logger=debug_logger)
    debug_logger.debug("[CLI] ===== CLI SESSION STARTED =====")
    logging.getLogger(__name__).info(f"Debug logging enabled - appending to {log_file}")
    return console
