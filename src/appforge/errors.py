"""Exception hierarchy for appforge.

Lookups of missing records are not errors: the store returns ``None`` or
``False`` for them.
"""


class AppForgeError(Exception):
    """Base class for all appforge errors."""


class StorageFault(AppForgeError):
    """Persistence medium unavailable, unwritable or over capacity."""


class MalformedPersistedData(StorageFault):
    """Stored project collection could not be parsed."""


class GenerationFault(AppForgeError):
    """A generation step or the file producer failed."""

    def __init__(self, message: str, step: str | None = None):
        super().__init__(message)
        self.step = step


class GenerationInProgress(AppForgeError):
    """A generation run is already live for the project."""


class InvalidTransition(AppForgeError):
    """Requested status change is not allowed from the current status."""


class InvalidPathError(AppForgeError):
    """File path cannot be normalized into a valid project path."""


class FileConflictError(AppForgeError):
    """Target path already exists in the workspace."""


class FileNotFoundInProjectError(AppForgeError):
    """Path does not name a file or folder in the workspace."""


class AuthenticationError(AppForgeError):
    """No authenticated user is available."""


class GenerationCancelled(AppForgeError):
    """The cancellation token of a generation run was triggered."""


class ProjectNotFoundError(AppForgeError):
    """Operation needs a project that does not exist."""
