"""Folder and file commands for the graphfs CLI."""

from typing import List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table
from rich.tree import Tree

from graphfs.cli.app import app
from graphfs.cli.commands.command_utils import get_services, run_with_cleanup
from graphfs.config import ConfigManager
from graphfs.exceptions import FileSystemError, NodeNotFoundError
from graphfs.identity import ExpectedKind, validate_id
from graphfs.schemas import TreeNode
from graphfs.services.initialization import seed_demo_hierarchy

console = Console()


def fail(e: FileSystemError) -> None:
    """Report a typed error and exit with status 1."""
    logger.error(f"Command failed: {e}")
    console.print(f"[red]Error: {e}[/red]")
    raise typer.Exit(1)


def add_tree_nodes(tree: Tree, nodes: List[TreeNode]) -> None:
    pending = [(tree, nodes)]
    while pending:
        parent, children = pending.pop()
        for node in children:
            if node.type == "folder":
                branch = parent.add(f"[bold blue]{node.name}/[/bold blue] [dim]{node.id}[/dim]")
                pending.append((branch, node.children))
            else:
                parent.add(f"[green]{node.name}[/green] [dim]{node.id}[/dim]")


@app.command()
def roots() -> None:
    """List root folders."""

    async def _roots():
        service, _ = await get_services()
        return await service.list_root_folders()

    try:
        folders = run_with_cleanup(_roots())
    except FileSystemError as e:
        fail(e)

    if not folders:
        console.print("No folders yet. Create one with 'graphfs mkdir NAME'.")
        return

    table = Table(title="Root folders")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="cyan")
    for folder in folders:
        table.add_row(folder.id, folder.name)
    console.print(table)


@app.command("ls")
def list_contents(folder_id: str = typer.Argument(..., help="Folder id")) -> None:
    """List the direct children of a folder."""

    async def _ls():
        service, _ = await get_services()
        return await service.get_folder_contents(folder_id)

    try:
        contents = run_with_cleanup(_ls())
    except FileSystemError as e:
        fail(e)

    if contents.is_empty:
        console.print("[dim](empty)[/dim]")
        return

    table = Table()
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name")
    table.add_column("Type")
    for folder in contents.folders:
        table.add_row(folder.id, f"[bold blue]{folder.name}/[/bold blue]", "folder")
    for file in contents.files:
        table.add_row(file.id, file.title, "file")
    console.print(table)


@app.command()
def tree(
    folder_id: Optional[str] = typer.Argument(None, help="Folder id, defaults to all roots"),
    depth: Optional[int] = typer.Option(None, "--depth", "-d", min=1, help="Levels to show"),
) -> None:
    """Show a nested view of the hierarchy."""

    async def _tree():
        _, tree_service = await get_services()
        return await tree_service.get_tree(folder_id, depth=depth)

    try:
        nodes = run_with_cleanup(_tree())
    except FileSystemError as e:
        fail(e)

    if not nodes:
        console.print("No folders yet.")
        return

    root = Tree("[bold]graphfs[/bold]", guide_style="dim")
    add_tree_nodes(root, nodes)
    console.print(root)


@app.command()
def cat(file_id: str = typer.Argument(..., help="File id")) -> None:
    """Print a file's content."""

    async def _cat():
        service, _ = await get_services()
        return await service.get_file(file_id)

    try:
        file = run_with_cleanup(_cat())
    except FileSystemError as e:
        fail(e)

    if file is None:
        console.print(f"[red]Error: File {file_id} not found[/red]")
        raise typer.Exit(1)

    typer.echo(file.content)


@app.command()
def mkdir(
    name: str = typer.Argument(..., help="Folder name"),
    parent: Optional[str] = typer.Option(None, "--parent", "-p", help="Parent folder id"),
) -> None:
    """Create a folder, as a root unless --parent is given."""

    async def _mkdir():
        service, _ = await get_services()
        return await service.create_folder(name, parent)

    try:
        folder = run_with_cleanup(_mkdir())
    except FileSystemError as e:
        fail(e)

    console.print(f"[green]Created folder '{folder.name}'[/green]")
    typer.echo(folder.id)


@app.command()
def touch(
    title: str = typer.Argument(..., help="File title"),
    parent: str = typer.Option(..., "--parent", "-p", help="Parent folder id"),
    content: str = typer.Option("", "--content", "-c", help="Initial content"),
) -> None:
    """Create a file inside a folder."""

    async def _touch():
        service, _ = await get_services()
        return await service.create_file(title, parent, content)

    try:
        file = run_with_cleanup(_touch())
    except FileSystemError as e:
        fail(e)

    console.print(f"[green]Created file '{file.title}'[/green]")
    typer.echo(file.id)


@app.command()
def write(
    file_id: str = typer.Argument(..., help="File id"),
    content: str = typer.Argument(..., help="New content"),
) -> None:
    """Replace a file's content."""

    async def _write():
        service, _ = await get_services()
        return await service.update_file_content(file_id, content)

    try:
        file = run_with_cleanup(_write())
    except FileSystemError as e:
        fail(e)

    console.print(f"[green]Updated '{file.title}'[/green]")


@app.command()
def rename(
    id: str = typer.Argument(..., help="Folder or file id"),
    name: str = typer.Argument(..., help="New name or title"),
) -> None:
    """Rename a folder or a file."""

    async def _rename():
        service, _ = await get_services()
        await service.rename_item(id, name)

    try:
        run_with_cleanup(_rename())
    except FileSystemError as e:
        fail(e)

    console.print(f"[green]Renamed {id} to '{name}'[/green]")


@app.command("mv")
def move(
    id: str = typer.Argument(..., help="Folder or file id"),
    new_parent: str = typer.Argument(..., help="Destination folder id"),
) -> None:
    """Move a folder or a file under another folder."""

    async def _move():
        service, _ = await get_services()
        await service.move_item(id, new_parent)

    try:
        run_with_cleanup(_move())
    except FileSystemError as e:
        fail(e)

    console.print(f"[green]Moved {id} to {new_parent}[/green]")


@app.command("rm")
def remove(
    id: str = typer.Argument(..., help="Folder or file id"),
    recursive: bool = typer.Option(
        False, "--recursive", "-r", help="Delete a folder and everything inside it"
    ),
) -> None:
    """Delete a file, an empty folder, or with --recursive a whole folder subtree."""

    async def _remove() -> Optional[int]:
        node = validate_id(id, ExpectedKind.ANY)
        service, _ = await get_services()
        if node.is_file:
            await service.delete_file(id)
            return None
        if recursive:
            removed = await service.delete_folder_and_contents(id)
        else:
            removed = 1 if await service.delete_folder(id) else 0
        if not removed:
            raise NodeNotFoundError(f"Folder {id} not found")
        return removed

    try:
        removed = run_with_cleanup(_remove())
    except FileSystemError as e:
        fail(e)

    if removed is None:
        console.print(f"[green]Removed {id}[/green]")
    else:
        console.print(f"[green]Removed {id} ({removed} item(s))[/green]")


@app.command()
def seed() -> None:
    """Load a small demo hierarchy."""

    async def _seed():
        service, _ = await get_services()
        return await seed_demo_hierarchy(service)

    try:
        ids = run_with_cleanup(_seed())
    except FileSystemError as e:
        fail(e)

    console.print(f"[green]Seeded {len(ids)} folders and files[/green]")
    typer.echo(ids["Root"])


@app.command()
def serve(
    host: Optional[str] = typer.Option(None, help="Bind address"),
    port: Optional[int] = typer.Option(None, help="Port"),
) -> None:  # pragma: no cover
    """Run the HTTP API with uvicorn."""
    import uvicorn

    config = ConfigManager().config
    uvicorn.run(
        "graphfs.api.app:app",
        host=host or config.api_host,
        port=port or config.api_port,
        log_config=None,
    )
