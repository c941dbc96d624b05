from appforge.errors import InvalidPathError


def normalize_path(path: str) -> str:
    """Normalize a virtual file path into ``segment/segment/name`` form.

    Backslashes become ``/``, leading ``./`` and ``/`` are dropped and repeated
    slashes collapse. Empty paths, paths ending in ``/`` (folders, not files)
    and ``.``/``..`` segments are rejected.
    """
    candidate = path.strip().replace("\\", "/")
    if not candidate:
        raise InvalidPathError("File path must not be empty")
    if candidate.endswith("/"):
        raise InvalidPathError(f"File path {path!r} ends with '/' and names a folder")

    while candidate.startswith("./"):
        candidate = candidate[2:]

    segments = [segment for segment in candidate.split("/") if segment]
    if not segments:
        raise InvalidPathError(f"File path {path!r} has no name")
    for segment in segments:
        if segment in (".", ".."):
            raise InvalidPathError(f"File path {path!r} contains relative segment {segment!r}")
    return "/".join(segments)


def normalize_folder(path: str) -> str:
    """Normalize a folder path; a trailing ``/`` is allowed here."""
    return normalize_path(path.rstrip("/\\") or path)
