from .events import GenerationProgress
from .files import CodeFile, FileNode
from .project import Project, ProjectStatus, ProjectUpdate, TechStack

__all__ = [
    "CodeFile",
    "FileNode",
    "GenerationProgress",
    "Project",
    "ProjectStatus",
    "ProjectUpdate",
    "TechStack",
]
