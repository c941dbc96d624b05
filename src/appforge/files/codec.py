"""Serialization of the generated file list stored in ``Project.generated_code``."""

from collections.abc import Iterable
import json

from pydantic import TypeAdapter, ValidationError

from appforge.contracts.files import CodeFile
from appforge.errors import MalformedPersistedData

from .languages import detect_language
from .paths import normalize_path

_FILE_LIST = TypeAdapter(list[CodeFile])


def normalize_files(files: Iterable[CodeFile]) -> list[CodeFile]:
    """Normalize paths, fill missing languages and collapse duplicate paths.

    A duplicate path overwrites the earlier file's content in place (last wins).
    Raises InvalidPathError for a path that cannot be normalized.
    """
    by_path: dict[str, CodeFile] = {}
    for file in files:
        path = normalize_path(file.path)
        language = file.language or detect_language(path)
        if path != file.path or language != file.language:
            file = file.model_copy(update={"path": path, "language": language})
        by_path[path] = file
    return list(by_path.values())


def encode_files(files: Iterable[CodeFile]) -> str:
    """Serialize a file list into the stored JSON payload."""
    return json.dumps([file.model_dump() for file in normalize_files(files)])


def decode_files(payload: str) -> list[CodeFile]:
    """Parse a stored payload back into a normalized file list."""
    try:
        files = _FILE_LIST.validate_json(payload)
    except ValidationError as e:
        raise MalformedPersistedData(
            f"Generated code payload is invalid: {e.error_count()} errors"
        ) from e
    return normalize_files(files)
