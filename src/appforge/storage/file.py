import json
import os
from pathlib import Path
import tempfile

import structlog

from appforge.errors import MalformedPersistedData, StorageFault

logger = structlog.get_logger(__name__)


class FileStorage:
    """Key-value storage backed by a single local JSON document.

    The whole document is rewritten on every ``set`` through a temporary
    file and ``os.replace``, so readers never observe a partial write.
    """

    def __init__(self, path: str | Path, max_bytes: int | None = None):
        self.path = Path(path)
        self.max_bytes = max_bytes
        self._opened = False

    def open(self) -> None:
        """Create the parent directory of the document."""
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise StorageFault(f"Cannot prepare storage at {self.path}: {e}") from e
        self._opened = True
        logger.debug("file_storage_opened", path=str(self.path))

    def close(self) -> None:
        self._opened = False
        logger.debug("file_storage_closed", path=str(self.path))

    def _ensure_open(self) -> None:
        if not self._opened:
            raise StorageFault("Storage not opened. Call open() first.")

    def _read_document(self) -> dict[str, str]:
        self._ensure_open()
        if not self.path.exists():
            return {}
        try:
            raw = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StorageFault(f"Cannot read {self.path}: {e}") from e
        if not raw.strip():
            return {}
        try:
            document = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedPersistedData(f"Storage document {self.path} is not JSON: {e}") from e
        if not isinstance(document, dict):
            raise MalformedPersistedData(f"Storage document {self.path} is not a JSON object")
        return document

    def _write_document(self, document: dict[str, str]) -> None:
        payload = json.dumps(document)
        size = len(payload.encode())
        if self.max_bytes is not None and size > self.max_bytes:
            raise StorageFault(
                f"Storage capacity exceeded: {size} bytes > {self.max_bytes} bytes"
            )

        try:
            fd, tmp_path = tempfile.mkstemp(dir=self.path.parent, prefix=".storage-", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as fh:
                    fh.write(payload)
                os.replace(tmp_path, self.path)
            except BaseException:
                Path(tmp_path).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise StorageFault(f"Cannot write {self.path}: {e}") from e

    def get(self, key: str) -> str | None:
        return self._read_document().get(key)

    def set(self, key: str, value: str) -> None:
        document = self._read_document()
        document[key] = value
        self._write_document(document)

    def delete(self, key: str) -> None:
        document = self._read_document()
        if document.pop(key, None) is not None:
            self._write_document(document)
