"""
Command-Line Interface

CLI commands for vfiles stores.

Commands:
    vfiles tree    - Show the file tree
    vfiles touch   - Create a file
    vfiles mkdir   - Create a directory
    vfiles write   - Replace a file's contents
    vfiles mv      - Move a node into a directory (or to the root)
    vfiles rename  - Rename a node
    vfiles rm      - Delete a file, or a directory recursively
    vfiles search  - Fuzzy search names and contents
    vfiles export  - Write a JSON backup
    vfiles import  - Restore a JSON backup
    vfiles info    - Display store statistics

Nodes are referenced by id or by a unique id prefix.

Usage:
    vfiles mkdir docs --store ./my_store
    vfiles touch todo.md --parent 3f2a --contents "- ship it"
    vfiles search todo
    vfiles export backup.json
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path
from typing import TYPE_CHECKING, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

if TYPE_CHECKING:
    from vfiles.api.file_manager import FileManager
    from vfiles.config.settings import VFilesConfig
    from vfiles.types import FileNode

__all__ = ["main", "app"]

app = typer.Typer(
    name="vfiles",
    help="Embedded hierarchical file tree backed by DuckDB",
    no_args_is_help=True,
)
console = Console()

DEFAULT_STORE = Path("./vfiles_store")

_settings: dict[str, Path | None] = {"config": None}


@app.callback()
def _configure(
    verbose: bool = typer.Option(
        False,
        "--verbose", "-v",
        help="Log debug output",
    ),
    config: Optional[Path] = typer.Option(
        None,
        "--config", "-c",
        help="TOML configuration file",
        exists=True,
    ),
) -> None:
    """Embedded hierarchical file tree backed by DuckDB."""
    load_dotenv()
    _settings["config"] = config
    level = logging.DEBUG if verbose else _load_config().log_level
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _load_config() -> VFilesConfig:
    from vfiles.config import VFilesConfig

    path = _settings["config"]
    return VFilesConfig.from_file(path) if path else VFilesConfig()


def _store_option(exists: bool = False):
    return typer.Option(
        DEFAULT_STORE,
        "--store", "-s",
        help="Store directory",
        exists=exists,
    )


@asynccontextmanager
async def _session(store: Path, create: bool = True) -> AsyncIterator[FileManager]:
    """Open a store, load it, and flush/close it afterwards."""
    from vfiles.api.file_manager import FileManager

    manager = FileManager(store, config=_load_config(), create=create)
    try:
        await manager.load_files()
        yield manager
    finally:
        await manager.close()
        for failure in manager.failures:
            console.print(
                f"[yellow]Warning: {escape(failure.operation)} failed: {escape(failure.error)}[/]"
            )


def _resolve(manager: FileManager, ref: str | None) -> str | None:
    """Resolve an id or unique id prefix; exits on unknown or ambiguous refs."""
    if not ref:
        return None
    if ref in manager.files:
        return ref
    matches = [file_id for file_id in manager.files if file_id.startswith(ref)]
    if len(matches) == 1:
        return matches[0]
    if not matches:
        console.print(f"[red]No file matches '{escape(ref)}'[/]")
    else:
        console.print(f"[red]'{escape(ref)}' is ambiguous ({len(matches)} matches)[/]")
    raise typer.Exit(code=1)


def _label(node: FileNode) -> str:
    icon = "📁" if node.is_directory else "📄"
    return f"{icon} {escape(node.name)} [dim]{node.id[:8]}[/]"


def _render_tree(manager: FileManager) -> Tree:
    root = Tree(f"[bold]{escape(str(manager.path))}[/]")

    def _add(branch: Tree, parent_id: str | None) -> None:
        children = sorted(
            manager.registry.children(parent_id),
            key=lambda n: (not n.is_directory, n.name.lower()),
        )
        for child in children:
            sub = branch.add(_label(child))
            if child.is_directory:
                _add(sub, child.id)

    _add(root, None)
    # Nodes whose parent is missing would otherwise never be shown
    orphans = [
        node for node in manager.files.values()
        if node.parent is not None and node.parent not in manager.files
    ]
    if orphans:
        lost = root.add("[yellow]orphaned[/]")
        for node in orphans:
            sub = lost.add(_label(node))
            if node.is_directory:
                _add(sub, node.id)
    return root


@app.command()
def tree(store: Path = _store_option(exists=True)) -> None:
    """Show the file tree."""

    async def _run() -> None:
        async with _session(store, create=False) as manager:
            console.print(_render_tree(manager))

    asyncio.run(_run())


@app.command()
def touch(
    name: str = typer.Argument(..., help="File name"),
    parent: Optional[str] = typer.Option(None, "--parent", "-p", help="Parent directory id"),
    contents: str = typer.Option("", "--contents", help="Initial contents"),
    store: Path = _store_option(),
) -> None:
    """Create a file."""

    async def _run() -> None:
        async with _session(store) as manager:
            node = await manager.create_file(
                name=name, parent=_resolve(manager, parent), contents=contents
            )
            console.print(f"[green]Created file[/] {escape(node.name)} {node.id}")

    asyncio.run(_run())


@app.command()
def mkdir(
    name: str = typer.Argument(..., help="Directory name"),
    parent: Optional[str] = typer.Option(None, "--parent", "-p", help="Parent directory id"),
    store: Path = _store_option(),
) -> None:
    """Create a directory."""

    async def _run() -> None:
        async with _session(store) as manager:
            node = await manager.create_directory(name=name, parent=_resolve(manager, parent))
            console.print(f"[green]Created directory[/] {escape(node.name)} {node.id}")

    asyncio.run(_run())


@app.command()
def write(
    ref: str = typer.Argument(..., help="File id or prefix"),
    contents: str = typer.Argument(..., help="New contents"),
    store: Path = _store_option(exists=True),
) -> None:
    """Replace a file's contents."""

    async def _run() -> None:
        async with _session(store, create=False) as manager:
            node = await manager.update_file_contents(_resolve(manager, ref), contents)
            if node is not None:
                console.print(f"[green]Updated[/] {escape(node.name)}")

    asyncio.run(_run())


@app.command()
def mv(
    ref: str = typer.Argument(..., help="File or directory id or prefix"),
    directory: Optional[str] = typer.Argument(None, help="Target directory id (omit for root)"),
    store: Path = _store_option(exists=True),
) -> None:
    """Move a node into a directory, or to the root."""

    async def _run() -> None:
        async with _session(store, create=False) as manager:
            node = await manager.move_file(_resolve(manager, ref), _resolve(manager, directory))
            if node is not None:
                console.print(f"[green]Moved[/] {escape(node.name)}")

    asyncio.run(_run())


@app.command()
def rename(
    ref: str = typer.Argument(..., help="File or directory id or prefix"),
    name: str = typer.Argument(..., help="New name"),
    store: Path = _store_option(exists=True),
) -> None:
    """Rename a node."""

    async def _run() -> None:
        async with _session(store, create=False) as manager:
            node = await manager.rename_file(_resolve(manager, ref), name)
            if node is not None:
                console.print(f"[green]Renamed to[/] {escape(node.name)}")

    asyncio.run(_run())


@app.command()
def rm(
    ref: str = typer.Argument(..., help="File or directory id or prefix"),
    store: Path = _store_option(exists=True),
) -> None:
    """Delete a file, or a directory and everything below it."""

    async def _run() -> None:
        async with _session(store, create=False) as manager:
            file_id = _resolve(manager, ref)
            node = manager.files[file_id] if file_id else None
            if node is None:
                return
            before = len(manager.files)
            if node.is_directory:
                await manager.delete_directory(file_id)
            else:
                await manager.delete_file(file_id)
            console.print(
                f"[green]Deleted[/] {escape(node.name)} ({before - len(manager.files)} nodes)"
            )

    asyncio.run(_run())


@app.command()
def search(
    query: str = typer.Argument(..., help="Search text"),
    store: Path = _store_option(exists=True),
) -> None:
    """Fuzzy search file names and contents."""

    async def _run() -> None:
        async with _session(store, create=False) as manager:
            results = await manager.search_files(query)
            if not results:
                console.print(f"[yellow]No matches for '{escape(query)}'[/]")
                return

            table = Table(title=f"Matches for '{escape(query)}'")
            table.add_column("Name", style="cyan")
            table.add_column("Type", style="dim")
            table.add_column("Id", style="dim")
            for node in results:
                table.add_row(escape(node.name), str(node.type), node.id[:8])
            console.print(table)

    asyncio.run(_run())


@app.command("export")
def export_(
    output: Path = typer.Argument(..., help="Backup file to write"),
    store: Path = _store_option(exists=True),
) -> None:
    """Write the whole tree to a JSON backup."""

    async def _run() -> None:
        async with _session(store, create=False) as manager:
            path = await manager.export_to_file(output)
            console.print(f"[green]Exported {len(manager.files)} nodes to[/] {escape(str(path))}")

    asyncio.run(_run())


@app.command("import")
def import_(
    backup: Path = typer.Argument(..., help="Backup file to restore", exists=True),
    store: Path = _store_option(),
) -> None:
    """Merge a JSON backup into the tree."""

    async def _run() -> None:
        async with _session(store) as manager:
            ok = await manager.restore_from_file(backup)
            if ok:
                console.print(f"[green]Restored from[/] {escape(str(backup))}")
            else:
                console.print("[yellow]Restored with some invalid entries skipped[/]")

    asyncio.run(_run())


@app.command()
def info(store: Path = _store_option(exists=True)) -> None:
    """Display store statistics."""

    async def _run() -> None:
        async with _session(store, create=False) as manager:
            stats = await manager.stats()

            table = Table(title=f"Store: {escape(str(store))}")
            table.add_column("Metric", style="cyan")
            table.add_column("Count", justify="right", style="green")

            table.add_row("Files", str(stats["files"]))
            table.add_row("Directories", str(stats["directories"]))
            table.add_row("Stored rows", str(stats["stored"]))

            console.print(table)

    asyncio.run(_run())


def main() -> None:
    """Entry point for the CLI."""
    app()
