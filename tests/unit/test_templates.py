import json

import pytest

from appforge.contracts.project import TechStack
from appforge.generation.templates import generate_project_files, slugify


def by_path(files):
    return {file.path: file for file in files}


class TestGenerateProjectFiles:
    def test_react_typescript_files(self):
        files = generate_project_files(TechStack.REACT_TYPESCRIPT, "Todo App", "Track tasks")

        assert [f.path for f in files] == [
            "src/App.tsx",
            "src/pages/HomePage.tsx",
            "src/pages/Dashboard.tsx",
            "package.json",
            "README.md",
        ]

    def test_name_and_description_substituted(self):
        files = by_path(
            generate_project_files(TechStack.REACT_TYPESCRIPT, "Todo App", "Track tasks")
        )

        home = files["src/pages/HomePage.tsx"].content
        assert "Welcome to Todo App" in home
        assert "Track tasks" in home
        assert json.loads(files["package.json"].content)["name"] == "todo-app"

        readme = files["README.md"]
        assert readme.language == "markdown"
        assert readme.content.startswith("# Todo App")
        assert "React + TypeScript" in readme.content

    def test_long_description_is_summarized(self):
        description = "x" * 150

        files = by_path(generate_project_files("react-typescript", "App", description))

        home = files["src/pages/HomePage.tsx"].content
        assert "x" * 100 + "..." in home
        assert "x" * 101 not in home
        assert description in files["README.md"].content

    def test_quotes_in_description_do_not_break_literals(self):
        files = by_path(
            generate_project_files(TechStack.NEXTJS, "Shop", "Bob's \"best\" store")
        )

        layout = files["app/layout.tsx"].content
        assert "Bob's" not in layout
        assert '"best"' not in layout

    @pytest.mark.parametrize("stack", list(TechStack))
    def test_every_stack_has_files_with_languages(self, stack):
        files = generate_project_files(stack, "My App", "Something useful")

        assert files[-1].path == "README.md"
        assert len({f.path for f in files}) == len(files)
        assert all(f.language for f in files)

    def test_fullstack_includes_server(self):
        paths = [f.path for f in generate_project_files("fullstack-react", "App", "d")]

        assert "src/App.tsx" in paths
        assert "server/index.js" in paths
        assert "server/routes/tasks.js" in paths

    def test_fastapi_main_uses_slug(self):
        files = by_path(generate_project_files(TechStack.PYTHON_FASTAPI, "Task API", "d"))

        assert '"app": "task-api"' in files["app/main.py"].content

    def test_unknown_stack(self):
        with pytest.raises(ValueError):
            generate_project_files("cobol", "App", "d")


@pytest.mark.parametrize(
    ("name", "slug"),
    [("Todo App", "todo-app"), ("  spaced   out  ", "spaced-out"), ("", "app")],
)
def test_slugify(name, slug):
    assert slugify(name) == slug
