from collections.abc import Iterable
import re

import structlog

from appforge.contracts.files import CodeFile, FileNode
from appforge.contracts.project import Project, ProjectStatus
from appforge.errors import (
    FileConflictError,
    FileNotFoundInProjectError,
    InvalidTransition,
    MalformedPersistedData,
)
from appforge.store import ProjectStore

from .codec import decode_files, encode_files, normalize_files
from .languages import detect_language
from .paths import normalize_folder, normalize_path
from .tree import build_tree

logger = structlog.get_logger(__name__)


class Workspace:
    """In-memory editing layer over a project's generated files.

    Content edits are kept as overrides on top of the loaded files until
    ``save`` writes the merged list back into the project's generated code.
    """

    def __init__(self, files: Iterable[CodeFile] = ()):
        self._files: dict[str, CodeFile] = {f.path: f for f in normalize_files(files)}
        self._overrides: dict[str, str] = {}
        self._structure_changed = False
        self._selected: str | None = next(iter(self._files), None)

    @classmethod
    def from_project(cls, project: Project) -> "Workspace":
        """Load the workspace from a project's stored generated code."""
        if not project.generated_code:
            return cls()
        try:
            return cls(decode_files(project.generated_code))
        except MalformedPersistedData as e:
            logger.error("generated_code_parse_failed", project_id=project.id, error=str(e))
            return cls()

    # === Reading ===

    @property
    def files(self) -> list[CodeFile]:
        """Current files with content overrides applied."""
        return [
            file.model_copy(update={"content": self._overrides[path]})
            if path in self._overrides
            else file
            for path, file in self._files.items()
        ]

    @property
    def dirty(self) -> bool:
        return self._structure_changed or bool(self._overrides)

    def get(self, path: str) -> CodeFile:
        path = normalize_path(path)
        file = self._files.get(path)
        if file is None:
            raise FileNotFoundInProjectError(f"No file at {path!r}")
        if path in self._overrides:
            return file.model_copy(update={"content": self._overrides[path]})
        return file

    def tree(self, search: str = "") -> list[FileNode]:
        return build_tree(self.files, search)

    @property
    def selected(self) -> CodeFile | None:
        if self._selected is None:
            return None
        return self.get(self._selected)

    def select(self, path: str) -> CodeFile:
        file = self.get(path)
        self._selected = file.path
        return file

    def _folder_members(self, folder: str) -> list[str]:
        prefix = folder + "/"
        return [path for path in self._files if path.startswith(prefix)]

    def _occupied(self, path: str, moving: Iterable[str] = ()) -> bool:
        """True when ``path`` or one of its ancestors is taken by another entry."""
        moving = set(moving)
        if path in self._files and path not in moving:
            return True
        if any(member not in moving for member in self._folder_members(path)):
            return True
        parts = path.split("/")
        ancestors = ("/".join(parts[:i]) for i in range(1, len(parts)))
        return any(a in self._files and a not in moving for a in ancestors)

    # === Mutations ===

    def edit(self, path: str, content: str) -> CodeFile:
        """Override the content of an existing file."""
        file = self.get(path)
        if content == self._files[file.path].content:
            self._overrides.pop(file.path, None)
        else:
            self._overrides[file.path] = content
        return self.get(file.path)

    def find(self, path: str, query: str) -> int | None:
        """Offset of the first case-insensitive match of ``query``, or None."""
        if not query:
            return None
        index = self.get(path).content.lower().find(query.lower())
        return index if index >= 0 else None

    def replace(self, path: str, query: str, replacement: str) -> int:
        """Replace every case-insensitive occurrence of ``query`` as literal text.

        Returns the number of replacements; the result is a regular edit.
        """
        if not query:
            return 0
        file = self.get(path)
        content, count = re.subn(
            re.escape(query), lambda _: replacement, file.content, flags=re.IGNORECASE
        )
        if count:
            self.edit(file.path, content)
        return count

    def create(self, path: str, content: str = "", language: str | None = None) -> CodeFile:
        path = normalize_path(path)
        if self._occupied(path):
            raise FileConflictError(f"{path!r} already exists")
        file = CodeFile(path=path, content=content, language=language or detect_language(path))
        self._files[path] = file
        self._structure_changed = True
        logger.debug("workspace_file_created", path=path)
        return file

    def add_files(self, files: Iterable[CodeFile]) -> list[CodeFile]:
        """Merge externally generated files; an existing path is replaced."""
        added = normalize_files(files)
        for file in added:
            self._files[file.path] = file
            self._overrides.pop(file.path, None)
        if added:
            self._structure_changed = True
        return added

    def delete(self, path: str) -> list[str]:
        """Remove a file, or every file under a folder. Returns removed paths."""
        folder = normalize_folder(path)
        if folder in self._files:
            removed = [folder]
        else:
            removed = self._folder_members(folder)
        if not removed:
            raise FileNotFoundInProjectError(f"No file or folder at {folder!r}")

        for member in removed:
            del self._files[member]
            self._overrides.pop(member, None)
        self._structure_changed = True

        if self._selected in removed:
            self._selected = next(iter(self._files), None)
        logger.debug("workspace_paths_deleted", path=folder, count=len(removed))
        return removed

    def rename(self, old_path: str, new_path: str) -> list[str]:
        """Move a file or a whole folder. Returns the new paths."""
        old = normalize_folder(old_path)
        new = normalize_folder(new_path)
        if old in self._files:
            moves = {old: new}
        else:
            moves = {member: new + member[len(old):] for member in self._folder_members(old)}
        if not moves:
            raise FileNotFoundInProjectError(f"No file or folder at {old!r}")

        for target in moves.values():
            if self._occupied(target, moving=moves):
                raise FileConflictError(f"{target!r} already exists")

        renamed: dict[str, CodeFile] = {}
        for path, file in self._files.items():
            target = moves.get(path)
            if target is None:
                renamed[path] = file
                continue
            language = file.language
            if language == detect_language(path):
                language = detect_language(target)
            renamed[target] = file.model_copy(update={"path": target, "language": language})
            if path in self._overrides:
                self._overrides[target] = self._overrides.pop(path)

        self._files = renamed
        self._structure_changed = True
        if self._selected in moves:
            self._selected = moves[self._selected]
        return list(moves.values())

    # === Output ===

    def export_bundle(self) -> str:
        """Concatenate every file under a ``// path`` header."""
        return "\n".join(f"// {file.path}\n{file.content}\n\n" for file in self.files)

    def save(self, store: ProjectStore, project_id: str) -> Project | None:
        """Write the merged file list back into the project's generated code.

        Returns None when the project does not exist. Storage faults propagate.
        """
        project = store.get_project(project_id)
        if project is None:
            return None
        if project.status != ProjectStatus.COMPLETED:
            raise InvalidTransition(
                f"Project {project_id} is {project.status.value}; only completed ones hold files"
            )

        files = self.files
        updated = store.update_project(project_id, {"generated_code": encode_files(files)})
        if updated is None:
            return None

        self._files = {file.path: file for file in files}
        self._overrides.clear()
        self._structure_changed = False
        logger.info("workspace_saved", project_id=project_id, files=len(files))
        return updated
