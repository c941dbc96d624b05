import json

import pytest
from typer.testing import CliRunner

from appforge.cli.main import app
from appforge.contracts.project import ProjectStatus

runner = CliRunner()


@pytest.fixture
def cli_store(patch_command_store):
    return patch_command_store("project")


def test_create_and_generate(cli_store):
    """Create runs the whole pipeline and leaves a completed project"""
    result = runner.invoke(
        app,
        ["project", "create", "-n", "Todo App", "-d", "Track tasks", "-s", "react-typescript"],
    )

    assert result.exit_code == 0, result.output
    assert "Project created successfully" in result.stdout
    assert "Generation completed" in result.stdout
    assert "[7/7]" in result.stdout

    (project,) = cli_store.list_projects("user-1")
    assert project.status == ProjectStatus.COMPLETED
    assert project.generated_code


def test_create_without_generation_as_json(cli_store):
    result = runner.invoke(
        app,
        [
            "project",
            "create",
            "-n",
            "Blog",
            "-d",
            "A blog",
            "-s",
            "nextjs",
            "--no-generate",
            "--json",
        ],
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.stdout)
    assert payload["name"] == "Blog"
    assert payload["tech_stack"] == "nextjs"
    assert payload["status"] == "generating"
    assert "generated_code" not in payload


def test_create_rejects_blank_name(cli_store):
    result = runner.invoke(
        app, ["project", "create", "-n", "  ", "-d", "x", "-s", "nextjs", "--no-generate"]
    )

    assert result.exit_code == 1
    assert cli_store.list_projects("user-1") == []


def test_create_rejects_unknown_stack(cli_store):
    result = runner.invoke(app, ["project", "create", "-n", "A", "-d", "x", "-s", "cobol"])

    assert result.exit_code != 0


def test_list_shows_only_own_projects(cli_store, make_project):
    cli_store.save_project(make_project(name="Mine"))
    cli_store.save_project(make_project(name="Theirs", user_id="user-2"))

    result = runner.invoke(app, ["project", "list", "--json"])

    assert result.exit_code == 0, result.output
    assert [p["name"] for p in json.loads(result.stdout)] == ["Mine"]


def test_list_search(cli_store, make_project):
    cli_store.save_project(make_project(name="Todo App"))
    cli_store.save_project(make_project(name="Blog", description="Markdown posts"))
    cli_store.save_project(make_project(name="Shop", description="Sells TODO boards"))

    result = runner.invoke(app, ["project", "list", "--search", "todo", "--json"])

    assert result.exit_code == 0, result.output
    assert [p["name"] for p in json.loads(result.stdout)] == ["Todo App", "Shop"]


def test_list_search_without_match(cli_store, make_project):
    cli_store.save_project(make_project())

    result = runner.invoke(app, ["project", "list", "-q", "weather"])

    assert result.exit_code == 0
    assert "No projects match" in result.stdout


def test_list_empty(cli_store):
    result = runner.invoke(app, ["project", "list"])

    assert result.exit_code == 0
    assert "No projects yet" in result.stdout


def test_show(cli_store, make_project):
    project = cli_store.save_project(make_project())

    result = runner.invoke(app, ["project", "show", project.id])

    assert result.exit_code == 0, result.output
    assert "Todo App" in result.stdout
    assert "React + TypeScript" in result.stdout


def test_show_other_users_project_is_not_found(cli_store, make_project):
    project = cli_store.save_project(make_project(user_id="user-2"))

    result = runner.invoke(app, ["project", "show", project.id])

    assert result.exit_code == 1


def test_delete(cli_store, make_project):
    project = cli_store.save_project(make_project())

    result = runner.invoke(app, ["project", "delete", project.id])

    assert result.exit_code == 0, result.output
    assert cli_store.get_project(project.id) is None


def test_generate_existing_project(cli_store, make_project):
    project = cli_store.save_project(make_project())

    result = runner.invoke(app, ["project", "generate", project.id])

    assert result.exit_code == 0, result.output
    assert cli_store.get_project(project.id).status == ProjectStatus.COMPLETED


def test_retry_requires_failed_project(cli_store, make_project):
    project = cli_store.save_project(make_project())

    result = runner.invoke(app, ["project", "retry", project.id])

    assert result.exit_code == 1
    assert cli_store.get_project(project.id).status == ProjectStatus.GENERATING


def test_retry_failed_project(cli_store, make_project):
    project = cli_store.save_project(make_project(status=ProjectStatus.ERROR))

    result = runner.invoke(app, ["project", "retry", project.id])

    assert result.exit_code == 0, result.output
    assert cli_store.get_project(project.id).status == ProjectStatus.COMPLETED
