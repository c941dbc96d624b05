"""Flat generated-file list to sorted folder/file tree.

Folders are de-duplicated through an explicit ``path -> folder`` index while
walking each path, and the finished tree is frozen bottom-up without
recursion, so arbitrarily deep paths are fine.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field

from appforge.contracts.files import CodeFile, FileNode

from .paths import normalize_path


@dataclass
class _Folder:
    name: str
    path: str
    folders: dict[str, "_Folder"] = field(default_factory=dict)
    files: dict[str, FileNode] = field(default_factory=dict)


def collation_key(name: str) -> tuple[str, str]:
    """Locale-like ordering: case-insensitive first, lowercase before uppercase on ties."""
    return (name.casefold(), name.swapcase())


def _node_key(node: FileNode) -> tuple[int, tuple[str, str]]:
    return (0 if node.is_folder else 1, collation_key(node.name))


def build_tree(files: Iterable[CodeFile], search: str = "") -> list[FileNode]:
    """Build the sorted tree for ``files`` whose path contains ``search``.

    The match is a case-insensitive substring test on the normalized path;
    an empty ``search`` keeps every file. Ancestor folders of matched files
    are kept, everything else is pruned. Every level lists folders first,
    then files, each in collation order. A duplicate path keeps the last
    file given.

    Raises InvalidPathError for a path that cannot be normalized.
    """
    needle = search.lower()
    root = _Folder(name="", path="")
    index: dict[str, _Folder] = {"": root}

    for file in files:
        path = normalize_path(file.path)
        if needle and needle not in path.lower():
            continue

        *folder_names, file_name = path.split("/")
        parent = root
        current = ""
        for folder_name in folder_names:
            current = f"{current}/{folder_name}" if current else folder_name
            folder = index.get(current)
            if folder is None:
                folder = _Folder(name=folder_name, path=current)
                index[current] = folder
                parent.folders[folder_name] = folder
            parent = folder

        parent.files[file_name] = FileNode(
            name=file_name,
            path=path,
            type="file",
            size=len(file.content),
            language=file.language,
        )

    return _freeze(root)


def _freeze(root: _Folder) -> list[FileNode]:
    # Pre-order walk; reversed, every folder comes after all of its descendants
    order: list[_Folder] = []
    stack = [root]
    while stack:
        folder = stack.pop()
        order.append(folder)
        stack.extend(folder.folders.values())

    frozen: dict[str, list[FileNode]] = {}
    for folder in reversed(order):
        children = [
            FileNode(
                name=child.name,
                path=child.path,
                type="folder",
                children=frozen.pop(child.path),
            )
            for child in folder.folders.values()
        ]
        children.extend(folder.files.values())
        children.sort(key=_node_key)
        frozen[folder.path] = children

    return frozen[""]


def iter_nodes(nodes: list[FileNode]) -> Iterable[tuple[int, FileNode]]:
    """Yield ``(depth, node)`` pairs in display order."""
    stack = [(0, node) for node in reversed(nodes)]
    while stack:
        depth, node = stack.pop()
        yield depth, node
        if node.children:
            stack.extend((depth + 1, child) for child in reversed(node.children))
