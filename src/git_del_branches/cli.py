"""Command line interface for git-del-branches."""

import logging
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import print
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from git_del_branches import __version__
from git_del_branches.git import (
    DEFAULT_PROTECT,
    Branch,
    DeletionResult,
    GitError,
    GitRepo,
    UserCancelled,
)
from git_del_branches.log import setup_logging
from git_del_branches.selector import select_branches

app = typer.Typer(help="Interactively delete local git branches")
console = Console()
logger = logging.getLogger(__name__)


def get_repo(path: Path) -> GitRepo:
    """Get git repository instance."""
    try:
        return GitRepo(path)
    except GitError as err:
        print(f"[red]Error:[/red] {err}")
        raise typer.Exit(code=1) from err


def version_callback(value: bool) -> None:
    if value:
        print(f"git-del-branches {__version__}")
        raise typer.Exit()


def cancelled() -> None:
    console.print("\n[yellow]Operation cancelled[/yellow] 🛑")


def create_preview_table(branches: list[Branch], with_upstream: bool) -> Table:
    """Create a table listing the branches about to be deleted."""
    title = "Branches to Delete (with upstream)" if with_upstream else "Branches to Delete"
    table = Table(
        title=title,
        show_header=True,
        header_style="bold",
        title_style="bold blue",
        show_edge=True,
    )
    table.add_column("Branch", style="cyan", no_wrap=True)
    table.add_column("Upstream", style="magenta", no_wrap=True)
    for branch in branches:
        table.add_row(branch.name, branch.upstream or "")
    return table


def create_result_table(deleted: list[DeletionResult]) -> Table:
    """Create a table listing the branches that were deleted."""
    table = Table(
        title=f"Successfully deleted {len(deleted)} branch(es) 🧹",
        show_header=True,
        header_style="bold",
        title_style="bold green",
        show_edge=True,
    )
    table.add_column("Branch", style="cyan", no_wrap=True)
    table.add_column("Upstream", style="magenta", no_wrap=True)
    for result in deleted:
        if result.upstream_deleted:
            upstream = f"[green]{result.upstream} deleted[/green]"
        elif result.upstream and result.message:
            upstream = f"[red]{result.upstream} kept[/red]"
        else:
            upstream = ""
        table.add_row(result.branch, upstream)
    return table


def report(results: list[DeletionResult]) -> None:
    """Print the outcome of a deletion batch."""
    deleted = [result for result in results if result.succeeded]
    failed = [result for result in results if not result.succeeded]
    upstream_failed = [result for result in deleted if result.upstream and result.message]

    if deleted:
        console.print()
        console.print(create_result_table(deleted))

    if failed:
        msg = "\n".join(f"  [cyan]{result.branch}[/cyan]: {result.message}" for result in failed)
        console.print()
        console.print(
            Panel(
                msg,
                title=f"Failed to delete {len(failed)} branch(es)",
                title_align="left",
                style="red",
                padding=(0, 2),
                expand=False,
            )
        )

    if upstream_failed:
        msg = "\n".join(f"  [magenta]{result.upstream}[/magenta]: {result.message}" for result in upstream_failed)
        console.print()
        console.print(
            Panel(
                msg,
                title="Failed to delete upstream branch(es)",
                title_align="left",
                style="yellow",
                padding=(0, 2),
                expand=False,
            )
        )

    console.print(f"\n{len(deleted)} deleted, {len(failed)} failed")
    console.print("🎉 [bold bright_green]Done![/bold bright_green]")


@app.command()
def main(
    path: Annotated[Path, typer.Option(help="Path to git repository")] = Path("."),
    protect: str = typer.Option(
        ",".join(DEFAULT_PROTECT),
        "--protect",
        "-p",
        envvar="GIT_DEL_BRANCHES_PROTECT",
        help="Comma-separated list of branch patterns never offered for deletion",
    ),
    safe: bool = typer.Option(False, "--safe", help="Refuse to delete branches that are not fully merged"),
    upstream: Optional[bool] = typer.Option(
        None,
        "--upstream/--no-upstream",
        help="Also delete remote-tracking upstream branches (asked interactively if not given)",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show the git commands being run"),
    version: Optional[bool] = typer.Option(
        None, "--version", callback=version_callback, is_eager=True, help="Show version and exit"
    ),
) -> None:
    """Select local branches from a checklist and delete them."""
    setup_logging(verbose)
    repo = get_repo(path)
    protect_list = [p.strip() for p in protect.split(",") if p.strip()]

    try:
        branches = repo.get_deletable_branches(protect_list)
    except GitError as err:
        print(f"[red]Error:[/red] {err}")
        raise typer.Exit(code=1) from err

    if not branches:
        console.print("[yellow]No branches found[/yellow]")
        return

    try:
        names = select_branches([branch.name for branch in branches])
    except UserCancelled as err:
        logger.debug("Selection cancelled: %s", err)
        cancelled()
        return

    if not names:
        console.print("[yellow]No branches selected[/yellow] 🤔")
        return

    by_name = {branch.name: branch for branch in branches}
    selected = [by_name[name] for name in names if name in by_name]

    if upstream is None:
        upstream = False
        if any(branch.upstream for branch in selected):
            try:
                upstream = typer.confirm("Do you want to delete the upstream branches also?", default=False)
            except typer.Abort:
                cancelled()
                return

    console.print()
    console.print(create_preview_table(selected, upstream))

    try:
        results = repo.delete_branches(selected, force=not safe, delete_upstream=upstream)
    except GitError as err:
        print(f"[red]Error:[/red] {err}")
        raise typer.Exit(code=1) from err

    report(results)


if __name__ == "__main__":
    app()
