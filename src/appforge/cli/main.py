import typer

from appforge.cli.commands import chat, files, project
from appforge.config import get_settings
from appforge.logging_config import setup_logging

app = typer.Typer()


@app.callback()
def callback():
    """
    appforge: describe an app, pick a stack, browse the generated code
    """
    setup_logging(get_settings())


app.add_typer(project.app, name="project")
app.add_typer(files.app, name="files")
app.add_typer(chat.app, name="chat")
