"""CLI package for the Crowdin client

This package provides the command-line interface for signing in to
Crowdin and transferring translation files.
"""

from cli.cli_app import CrowdinCLI
from cli.main import main

__all__ = [
    "CrowdinCLI",
    "main",
]
