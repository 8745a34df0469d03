"""Status and listing display for CLI"""

from typing import List
from rich.table import Table

from crowdin_api import ProjectInfo, ProjectListing, UserInfo


def show_user(user: UserInfo, console):
    """Display the signed-in user"""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="cyan", width=12)
    table.add_column()

    table.add_row("Name:", user.name)
    table.add_row("Login:", user.login)
    if user.avatar:
        table.add_row("Avatar:", f"[dim]{user.avatar}[/dim]")

    console.print(table)


def show_projects(projects: List[ProjectListing], console):
    """Display project listing"""
    if not projects:
        console.print("[yellow]No projects available[/yellow]")
        return

    table = Table(title="Crowdin Projects")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Identifier")
    table.add_column("Name")

    for project in projects:
        table.add_row(str(project.id), project.identifier, project.name)

    console.print(table)


def show_project(info: ProjectInfo, console):
    """Display project details with its files"""
    console.print(f"[bold]{info.name}[/bold] [dim](#{info.id})[/dim]")
    languages = ", ".join(sorted(lang.crowdin_id for lang in info.languages))
    console.print(f"Languages: {languages or '[dim]none[/dim]'}\n")

    table = Table(title="Files")
    table.add_column("ID", style="cyan", justify="right")
    table.add_column("Path")
    table.add_column("Branch")
    table.add_column("Title")

    for f in info.files:
        table.add_row(str(f.id), f.full_path, f.branch_name or "-", f.title)

    console.print(table)
