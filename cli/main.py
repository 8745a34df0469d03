"""CLI entry point and argument parsing"""

import argparse
import sys
from rich.console import Console

import settings
from cli.cli_app import CrowdinCLI
from cli.debug_setup import setup_logging


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Crowdin client CLI")
    parser.add_argument("--debug", "-d", action="store_true", help="Enable debug logging")

    commands = parser.add_subparsers(dest="command", required=True)
    commands.add_parser("login", help="Sign in to Crowdin through the browser")
    commands.add_parser("logout", help="Sign out and forget the stored token")
    commands.add_parser("status", help="Show whether a token is stored")
    commands.add_parser("whoami", help="Show the signed-in user")
    commands.add_parser("projects", help="List projects accessible to the user")

    project = commands.add_parser("project", help="Show project languages and files")
    project.add_argument("project_id", type=int)

    download = commands.add_parser("download", help="Download translations of a file")
    download.add_argument("project_id", type=int)
    download.add_argument("file_id", type=int)
    download.add_argument("language", help="Language code, e.g. pt-BR or pt_BR")
    download.add_argument("output", help="Destination file")
    download.add_argument("--ext", default=None, help="File extension (default: from output name)")
    download.add_argument("--xliff", action="store_true", help="Force export as XLIFF")

    upload = commands.add_parser("upload", help="Upload translations of a file")
    upload.add_argument("project_id", type=int)
    upload.add_argument("file_id", type=int)
    upload.add_argument("language", help="Language code, e.g. pt-BR or pt_BR")
    upload.add_argument("input", help="File with the translations")
    upload.add_argument("--ext", default=None, help="File extension (default: from input name)")

    return parser


def main(argv=None):
    """Entry point for the CLI"""
    args = build_parser().parse_args(argv)
    console = setup_logging(args.debug, settings.LOG_LEVEL)

    try:
        exit_code = CrowdinCLI(console, debug=args.debug).run(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/yellow]")
        exit_code = 130
    except Exception as e:
        console.print(f"\n[red]Fatal error:[/red] {e}")
        if args.debug:
            import traceback
            traceback.print_exc()
        exit_code = 1

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
