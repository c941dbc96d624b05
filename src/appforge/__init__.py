"""Project store, generated-file tree and generation pipeline for an app generator."""

from .contracts import CodeFile, FileNode, Project, ProjectStatus, TechStack
from .store import ProjectStore

__all__ = ["CodeFile", "FileNode", "Project", "ProjectStatus", "ProjectStore", "TechStack"]
