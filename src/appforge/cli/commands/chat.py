import asyncio

import typer

from appforge.chat import AssistantSimulator, ChatTurn
from appforge.cli.context import console, current_user, fail, load_owned_project, open_store
from appforge.config import get_settings
from appforge.contracts.project import ProjectStatus
from appforge.errors import AppForgeError
from appforge.files import Workspace

app = typer.Typer(help="Talk to the AI assistant about a project")


def _print_step(index: int, total: int, label: str) -> None:
    console.print(f"[cyan][{index}/{total}][/cyan] {label}")


async def ask_assistant(message: str) -> ChatTurn:
    settings = get_settings()
    assistant = AssistantSimulator(
        think_delay=settings.chat_step_delay_seconds,
        stream_delay=settings.chat_stream_delay_seconds,
        step_delay=settings.chat_step_delay_seconds,
    )
    return await assistant.respond(message, on_step=_print_step)


@app.command()
def send(
    project_id: str = typer.Argument(...),
    message: str = typer.Argument(..., help="What you want the assistant to do"),
):
    """Send a message; generated files are added to the project"""
    if not message.strip():
        raise fail("Message must not be empty")

    try:
        with open_store() as store:
            project = load_owned_project(store, current_user(), project_id)
            turn = asyncio.run(ask_assistant(message))
            console.print(turn.reply.content, markup=False, highlight=False)

            if turn.files and project.status == ProjectStatus.COMPLETED:
                workspace = Workspace.from_project(project)
                workspace.add_files(turn.files)
                workspace.save(store, project_id)
                paths = ", ".join(file.path for file in turn.files)
                console.print(f"[bold green]✓ Added {paths}[/bold green]")
    except AppForgeError as e:
        raise fail(e) from None
