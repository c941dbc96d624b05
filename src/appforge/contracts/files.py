from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel, ConfigDict


class CodeFile(BaseModel):
    """One generated source file."""

    model_config = ConfigDict(frozen=True)

    path: str
    content: str = ""
    language: str = ""


@dataclass
class FileNode:
    """A derived tree node (file or folder) used for navigation only."""

    name: str
    path: str
    type: Literal["file", "folder"]
    children: list["FileNode"] | None = None
    size: int | None = None
    language: str | None = None

    @property
    def is_folder(self) -> bool:
        return self.type == "folder"
