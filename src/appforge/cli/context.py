from collections.abc import Iterator
from contextlib import contextmanager

from rich.console import Console
import typer

from appforge.auth import StaticAuthProvider, User
from appforge.config import Settings, get_settings
from appforge.contracts.project import Project
from appforge.storage import open_storage
from appforge.store import ProjectStore

console = Console()
err_console = Console(stderr=True)


@contextmanager
def open_store(settings: Settings | None = None) -> Iterator[ProjectStore]:
    """Open the configured storage for the duration of one command."""
    settings = settings or get_settings()
    storage = open_storage(settings)
    try:
        yield ProjectStore(storage, key=settings.storage_key)
    finally:
        storage.close()


def get_auth() -> StaticAuthProvider:
    return StaticAuthProvider.from_settings(get_settings())


def current_user() -> User:
    return get_auth().current_user()


def fail(error: Exception | str) -> typer.Exit:
    """Print an error and build the exit to raise."""
    err_console.print(f"[bold red]Error:[/bold red] {error}")
    return typer.Exit(code=1)


def load_owned_project(store: ProjectStore, user: User, project_id: str) -> Project:
    """Fetch a project owned by ``user``; other users' projects look missing."""
    project = store.get_project(project_id)
    if project is None or project.user_id != user.id:
        raise fail(f"Project {project_id} not found")
    return project
