import asyncio
import json

from rich.table import Table
import typer

from appforge.cli.context import (
    console,
    current_user,
    fail,
    load_owned_project,
    open_store,
)
from appforge.config import get_settings
from appforge.contracts.events import GenerationProgress
from appforge.contracts.project import Project, ProjectStatus, TechStack
from appforge.errors import AppForgeError
from appforge.generation import GenerationService
from appforge.store import ProjectStore

STATUS_STYLES = {
    ProjectStatus.GENERATING: "yellow",
    ProjectStatus.COMPLETED: "green",
    ProjectStatus.ERROR: "red",
}


def print_progress(progress: GenerationProgress) -> None:
    if progress.outcome == "running" and progress.step_index:
        console.print(
            f"[cyan][{progress.step_index}/{progress.total_steps}][/cyan] {progress.label}"
        )


async def run_generation(
    store: ProjectStore,
    project_id: str,
    retry: bool = False,
) -> GenerationProgress:
    """Run (or retry) a project's generation to its terminal state."""
    service = GenerationService(
        store,
        step_delay=get_settings().step_delay_seconds,
        on_progress=print_progress,
    )
    try:
        if retry:
            run = await service.retry(project_id)
        else:
            run = await service.start_generation(project_id)
        return await run.wait()
    finally:
        await service.shutdown()


def _report(progress: GenerationProgress) -> None:
    if progress.outcome == "completed":
        console.print("[bold green]✓ Generation completed![/bold green]")
    elif progress.outcome == "error":
        raise fail(f"Generation failed: {progress.error}. Retry with `appforge project retry`.")
    else:
        raise fail("Generation cancelled")


def _project_dict(project: Project) -> dict:
    return project.model_dump(mode="json", exclude={"generated_code"})


app = typer.Typer(help="Create and manage generated projects")


@app.command()
def create(
    name: str = typer.Option(..., "--name", "-n"),
    description: str = typer.Option(..., "--description", "-d"),
    stack: TechStack = typer.Option(..., "--stack", "-s", help="Target tech stack"),
    generate: bool = typer.Option(True, "--generate/--no-generate", help="Run generation now"),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Create a new project and generate its code"""
    if not name.strip() or not description.strip():
        raise fail("Name and description must not be empty")

    try:
        user = current_user()
        with open_store() as store:
            project = store.save_project(
                Project(
                    name=name.strip(),
                    description=description.strip(),
                    tech_stack=stack,
                    user_id=user.id,
                    status=ProjectStatus.GENERATING,
                )
            )
            if json_output and not generate:
                typer.echo(json.dumps(_project_dict(project), indent=2))
                return

            if not json_output:
                console.print("[bold green]✓ Project created successfully![/bold green]")
                console.print(f"ID: [cyan]{project.id}[/cyan]")
                console.print(f"Name: [magenta]{project.name}[/magenta]")

            if generate:
                progress = asyncio.run(run_generation(store, project.id))
                if json_output:
                    typer.echo(json.dumps(progress.model_dump(mode="json"), indent=2))
                    return
                _report(progress)
    except AppForgeError as e:
        raise fail(e) from None


@app.command("list")
def list_projects(
    search: str = typer.Option(
        "", "--search", "-q", help="Case-insensitive match on name or description"
    ),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """List your projects"""
    try:
        user = current_user()
        with open_store() as store:
            projects = store.search_projects(user.id, search)
    except AppForgeError as e:
        raise fail(e) from None

    if json_output:
        typer.echo(json.dumps([_project_dict(p) for p in projects], indent=2))
        return

    if not projects:
        if search:
            console.print(f"No projects match {search!r}")
        else:
            console.print("No projects yet. Create one with `appforge project create`.")
        return

    table = Table(title="Projects")
    table.add_column("ID", style="cyan", no_wrap=True)
    table.add_column("Name")
    table.add_column("Stack")
    table.add_column("Status")
    table.add_column("Updated")
    for project in projects:
        style = STATUS_STYLES[project.status]
        table.add_row(
            project.id,
            project.name,
            project.tech_stack.label,
            f"[{style}]{project.status.value}[/{style}]",
            project.updated_at.strftime("%Y-%m-%d %H:%M") if project.updated_at else "",
        )
    console.print(table)


@app.command()
def show(
    project_id: str = typer.Argument(...),
    json_output: bool = typer.Option(False, "--json", help="Output as JSON"),
):
    """Show a project"""
    try:
        user = current_user()
        with open_store() as store:
            project = load_owned_project(store, user, project_id)
    except AppForgeError as e:
        raise fail(e) from None

    if json_output:
        typer.echo(json.dumps(_project_dict(project), indent=2))
        return

    style = STATUS_STYLES[project.status]
    console.print(f"[bold]{project.name}[/bold] ([cyan]{project.id}[/cyan])")
    console.print(project.description)
    console.print(f"Stack: {project.tech_stack.label}")
    console.print(f"Status: [{style}]{project.status.value}[/{style}]")
    if project.preview_url:
        console.print(f"Preview: {project.preview_url}")


@app.command()
def delete(project_id: str = typer.Argument(...)):
    """Delete a project"""
    try:
        user = current_user()
        with open_store() as store:
            load_owned_project(store, user, project_id)
            deleted = store.delete_project(project_id)
    except AppForgeError as e:
        raise fail(e) from None

    if not deleted:
        raise fail(f"Could not delete project {project_id}")
    console.print(f"[bold green]✓ Deleted {project_id}[/bold green]")


@app.command()
def generate(project_id: str = typer.Argument(...)):
    """Regenerate a project's code from scratch"""
    try:
        user = current_user()
        with open_store() as store:
            load_owned_project(store, user, project_id)
            progress = asyncio.run(run_generation(store, project_id))
    except AppForgeError as e:
        raise fail(e) from None
    _report(progress)


@app.command()
def retry(project_id: str = typer.Argument(...)):
    """Retry a failed generation"""
    try:
        user = current_user()
        with open_store() as store:
            load_owned_project(store, user, project_id)
            progress = asyncio.run(run_generation(store, project_id, retry=True))
    except AppForgeError as e:
        raise fail(e) from None
    _report(progress)
