from pathlib import Path

from rich.tree import Tree
import typer

from appforge.cli.context import console, current_user, fail, load_owned_project, open_store
from appforge.contracts.files import FileNode
from appforge.contracts.project import ProjectStatus
from appforge.errors import AppForgeError, FileNotFoundInProjectError
from appforge.files import Workspace, format_file_size

app = typer.Typer(help="Browse and edit a project's generated files")


def render_tree(title: str, nodes: list[FileNode]) -> Tree:
    """Build a rich Tree mirroring ``nodes``."""
    root = Tree(f"[bold]{title}[/bold]")
    stack = [(root, node) for node in reversed(nodes)]
    while stack:
        parent, node = stack.pop()
        if node.is_folder:
            branch = parent.add(f"[bold blue]{node.name}/[/bold blue]")
            stack.extend((branch, child) for child in reversed(node.children or []))
        else:
            size = format_file_size(node.size or 0)
            parent.add(f"{node.name} [dim]{size}[/dim]")
    return root


def _load_workspace(store, project_id: str) -> Workspace:
    project = load_owned_project(store, current_user(), project_id)
    if project.status != ProjectStatus.COMPLETED:
        raise fail(f"Project {project_id} is {project.status.value}; no files to browse")
    return Workspace.from_project(project)


@app.command()
def tree(
    project_id: str = typer.Argument(...),
    search: str = typer.Option("", "--filter", "-f", help="Case-insensitive path filter"),
):
    """Show the project's file tree"""
    try:
        with open_store() as store:
            workspace = _load_workspace(store, project_id)
    except AppForgeError as e:
        raise fail(e) from None

    nodes = workspace.tree(search)
    if not nodes:
        console.print("No files found")
        return
    console.print(render_tree(project_id, nodes))
    console.print(f"[dim]{len(workspace.files)} files[/dim]")


@app.command()
def show(
    project_id: str = typer.Argument(...),
    path: str = typer.Argument(...),
):
    """Print a file's content"""
    try:
        with open_store() as store:
            file = _load_workspace(store, project_id).get(path)
    except AppForgeError as e:
        raise fail(e) from None
    typer.echo(file.content)


@app.command()
def put(
    project_id: str = typer.Argument(...),
    path: str = typer.Argument(...),
    source: Path = typer.Option(
        ..., "--from", exists=True, dir_okay=False, help="Local file holding the new content"
    ),
):
    """Create a file or replace its content"""
    content = source.read_text(encoding="utf-8")
    try:
        with open_store() as store:
            workspace = _load_workspace(store, project_id)
            try:
                workspace.edit(path, content)
                action = "Updated"
            except FileNotFoundInProjectError:
                workspace.create(path, content)
                action = "Created"
            workspace.save(store, project_id)
    except AppForgeError as e:
        raise fail(e) from None
    console.print(f"[bold green]✓ {action} {path}[/bold green]")


@app.command()
def rm(
    project_id: str = typer.Argument(...),
    path: str = typer.Argument(..., help="File or folder to remove"),
):
    """Remove a file or folder"""
    try:
        with open_store() as store:
            workspace = _load_workspace(store, project_id)
            removed = workspace.delete(path)
            workspace.save(store, project_id)
    except AppForgeError as e:
        raise fail(e) from None
    console.print(f"[bold green]✓ Removed {len(removed)} file(s)[/bold green]")


@app.command()
def mv(
    project_id: str = typer.Argument(...),
    old_path: str = typer.Argument(...),
    new_path: str = typer.Argument(...),
):
    """Rename a file or folder"""
    try:
        with open_store() as store:
            workspace = _load_workspace(store, project_id)
            workspace.rename(old_path, new_path)
            workspace.save(store, project_id)
    except AppForgeError as e:
        raise fail(e) from None
    console.print(f"[bold green]✓ Renamed {old_path} -> {new_path}[/bold green]")


@app.command()
def replace(
    project_id: str = typer.Argument(...),
    path: str = typer.Argument(...),
    query: str = typer.Argument(..., help="Text to find, matched case-insensitively"),
    replacement: str = typer.Argument(...),
):
    """Replace every occurrence of a text in a file"""
    try:
        with open_store() as store:
            workspace = _load_workspace(store, project_id)
            count = workspace.replace(path, query, replacement)
            if count:
                workspace.save(store, project_id)
    except AppForgeError as e:
        raise fail(e) from None

    if not count:
        console.print(f"No occurrences of {query!r} in {path}")
        return
    console.print(f"[bold green]✓ Replaced {count} occurrence(s) in {path}[/bold green]")


@app.command()
def export(
    project_id: str = typer.Argument(...),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write bundle to this file"),
):
    """Export all files as one text bundle"""
    try:
        with open_store() as store:
            project = load_owned_project(store, current_user(), project_id)
            workspace = _load_workspace(store, project_id)
    except AppForgeError as e:
        raise fail(e) from None

    bundle = workspace.export_bundle()
    if output is None:
        typer.echo(bundle)
        return
    output.write_text(bundle, encoding="utf-8")
    console.print(f"[bold green]✓ Exported {project.name} to {output}[/bold green]")
