"""Main CLI application class for the Crowdin client"""

import argparse
import asyncio
from pathlib import Path
from typing import Optional
from rich.console import Console
from rich.prompt import Confirm, Prompt

from crowdin_api import Language
from crowdin_client import CrowdinClient
from errors import AuthenticationRejected, CrowdinError, SignInRequired
from cli.status_display import show_project, show_projects, show_user


class CrowdinCLI:
    """Command-line front end driving a CrowdinClient

    The CLI cannot receive the custom-scheme redirect from the OS, so during
    login the user pastes the URI the browser was redirected to.
    """

    def __init__(self, console: Console, client: Optional[CrowdinClient] = None, debug: bool = False):
        self.console = console
        self.client = client
        self.debug = debug

    def run(self, args: argparse.Namespace) -> int:
        """Run a parsed command, returning the process exit code"""
        return asyncio.run(self._run(args))

    async def _run(self, args: argparse.Namespace) -> int:
        handler = getattr(self, f"cmd_{args.command}")
        if self.client is None:
            self.client = CrowdinClient()

        async with self.client:
            try:
                return await handler(args)
            except SignInRequired:
                self.console.print("[red]✗ Not signed in to Crowdin.[/red] Run [cyan]login[/cyan] first.")
                return 1
            except CrowdinError as e:
                self.console.print(f"[red]✗ {e}[/red]")
                return 1

    async def cmd_login(self, args: argparse.Namespace) -> int:
        """Run the OAuth authentication flow"""
        if self.client.is_signed_in():
            if not Confirm.ask("Already signed in. Sign out and sign in again?"):
                return 0
            self.client.sign_out()

        self.console.print("\n[bold cyan]Crowdin Authentication[/bold cyan]\n")
        authentication = asyncio.ensure_future(self.client.authenticate())
        # Let the handshake start so the authorization URL exists
        await asyncio.sleep(0)

        self.console.print("[bold]Step 1:[/bold] Authorize the application in your browser.")
        self.console.print("If it did not open, visit:")
        self.console.print(f"[dim]{self.client.authorize_url}[/dim]\n")
        self.console.print("[bold]Step 2:[/bold] Paste the address your browser was redirected to")

        loop = asyncio.get_running_loop()
        uri = await loop.run_in_executor(None, Prompt.ask, "Redirect URI")
        uri = uri.strip()

        if not self.client.is_oauth_callback(uri):
            self.console.print("[red]✗ That is not a Crowdin authorization redirect[/red]")
            self.client.sign_out()
        else:
            self.client.handle_oauth_callback(uri)

        try:
            await authentication
        except AuthenticationRejected as e:
            self.console.print(f"[red]✗ {e}[/red]")
            return 1

        user = await self.client.get_user_info()
        self.console.print(f"\n[bold green]✓ Signed in as {user.name}[/bold green] [dim]({user.login})[/dim]")
        return 0

    async def cmd_logout(self, args: argparse.Namespace) -> int:
        self.client.sign_out()
        self.console.print("[green]✓ Signed out of Crowdin[/green]")
        return 0

    async def cmd_status(self, args: argparse.Namespace) -> int:
        if self.client.is_signed_in():
            self.console.print("Auth Status: [green]✓ Signed in[/green]")
        else:
            self.console.print("Auth Status: [red]✗ Not signed in[/red]")
        return 0

    async def cmd_whoami(self, args: argparse.Namespace) -> int:
        show_user(await self.client.get_user_info(), self.console)
        return 0

    async def cmd_projects(self, args: argparse.Namespace) -> int:
        show_projects(await self.client.get_user_projects(), self.console)
        return 0

    async def cmd_project(self, args: argparse.Namespace) -> int:
        show_project(await self.client.get_project_info(args.project_id), self.console)
        return 0

    async def cmd_download(self, args: argparse.Namespace) -> int:
        output = Path(args.output)
        extension = args.ext or output.suffix.lstrip(".") or "po"
        await self.client.download_file(
            args.project_id,
            Language.from_code(args.language),
            args.file_id,
            extension,
            args.xliff,
            output,
        )
        self.console.print(f"[green]✓ Downloaded to {output}[/green]")
        return 0

    async def cmd_upload(self, args: argparse.Namespace) -> int:
        source = Path(args.input)
        extension = args.ext or source.suffix.lstrip(".") or "po"
        await self.client.upload_file(
            args.project_id,
            Language.from_code(args.language),
            args.file_id,
            extension,
            source.read_bytes(),
        )
        self.console.print(f"[green]✓ Uploaded {source}[/green]")
        return 0
