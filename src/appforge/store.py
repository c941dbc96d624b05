"""Per-user project records persisted in a single key of a key-value storage.

Every mutation is a full read-modify-write of the whole collection followed by
one ``set`` of the storage key, so interleaved calls in the same loop never
lose updates and readers never see a partially written collection.
"""

from collections.abc import Callable, Mapping
from datetime import UTC, datetime
import json
import secrets
import time
from typing import Any

from pydantic import ValidationError
import structlog

from appforge.config import DEFAULT_STORAGE_KEY
from appforge.contracts.project import Project, ProjectStatus, ProjectUpdate
from appforge.errors import MalformedPersistedData, StorageFault
from appforge.storage.base import KeyValueStorage

logger = structlog.get_logger(__name__)

ID_PREFIX = "proj_"
_BASE36 = "0123456789abcdefghijklmnopqrstuvwxyz"


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, rem = divmod(value, 36)
        digits.append(_BASE36[rem])
    return "".join(reversed(digits))


def generate_project_id() -> str:
    """Time-based id with a random suffix, e.g. ``proj_lx3k2m9a4f0q1z7c``."""
    millis = time.time_ns() // 1_000_000
    return ID_PREFIX + _to_base36(millis) + _to_base36(secrets.randbits(52))


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _as_utc(value: datetime) -> datetime:
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


class ProjectStore:
    """CRUD over Project records scoped by user id."""

    def __init__(
        self,
        storage: KeyValueStorage,
        key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.storage = storage
        self.key = key
        self._clock = clock

    # === Raw collection access ===

    def _load_records(self) -> list[dict[str, Any]]:
        """Read the raw collection. Raises StorageFault / MalformedPersistedData."""
        raw = self.storage.get(self.key)
        if not raw:
            return []
        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            raise MalformedPersistedData(f"Project collection is not valid JSON: {e}") from e
        if not isinstance(records, list) or not all(isinstance(r, dict) for r in records):
            raise MalformedPersistedData("Project collection must be a JSON array of objects")
        return records

    def _write_records(self, records: list[dict[str, Any]]) -> None:
        self.storage.set(self.key, json.dumps(records))

    @staticmethod
    def _parse(record: dict[str, Any]) -> Project | None:
        try:
            return Project.model_validate(record)
        except ValidationError as e:
            logger.warning(
                "project_record_invalid",
                project_id=record.get("id"),
                errors=e.error_count(),
            )
            return None

    @staticmethod
    def _index_of(records: list[dict[str, Any]], project_id: str) -> int:
        for index, record in enumerate(records):
            if record.get("id") == project_id:
                return index
        return -1

    def _stamp(self, project: Project) -> Project:
        """Refresh updated_at and enforce record invariants."""
        now = _as_utc(self._clock())
        created_at = _as_utc(project.created_at or now)
        updates: dict[str, Any] = {
            "created_at": created_at,
            "updated_at": max(now, created_at),
        }
        # Generated code only accompanies a completed project
        if project.status != ProjectStatus.COMPLETED:
            updates["generated_code"] = None
        return project.model_copy(update=updates)

    # === Operations ===

    def list_projects(self, user_id: str) -> list[Project]:
        """Return the user's projects in storage order. Never raises."""
        try:
            records = self._load_records()
        except StorageFault as e:
            logger.error("projects_load_failed", user_id=user_id, error=str(e))
            return []

        projects = []
        for record in records:
            if record.get("userId") != user_id:
                continue
            project = self._parse(record)
            if project is not None:
                projects.append(project)
        return projects

    def search_projects(self, user_id: str, query: str) -> list[Project]:
        """The user's projects whose name or description contains ``query``, ignoring case."""
        needle = query.strip().lower()
        projects = self.list_projects(user_id)
        if not needle:
            return projects
        return [
            p for p in projects if needle in p.name.lower() or needle in p.description.lower()
        ]

    def get_project(self, project_id: str) -> Project | None:
        """Look up a project by id. Missing or unreadable records give None."""
        try:
            records = self._load_records()
        except StorageFault as e:
            logger.error("project_load_failed", project_id=project_id, error=str(e))
            return None

        index = self._index_of(records, project_id)
        if index < 0:
            return None
        return self._parse(records[index])

    def save_project(self, project: Project) -> Project:
        """Insert or replace a project. Storage faults propagate."""
        records = self._load_records()

        if not project.id:
            existing_ids = {r.get("id") for r in records}
            project_id = generate_project_id()
            while project_id in existing_ids:
                project_id = generate_project_id()
            project = project.model_copy(update={"id": project_id})

        index = self._index_of(records, project.id)
        if index >= 0:
            stored = self._parse(records[index])
            if stored is not None and stored.created_at is not None:
                project = project.model_copy(update={"created_at": stored.created_at})

        project = self._stamp(project)
        record = project.to_record()
        if index >= 0:
            records[index] = record
        else:
            records.append(record)

        self._write_records(records)
        logger.info(
            "project_saved",
            project_id=project.id,
            user_id=project.user_id,
            status=project.status.value,
            created=index < 0,
        )
        return project

    def update_project(
        self,
        project_id: str,
        fields: ProjectUpdate | Mapping[str, Any],
    ) -> Project | None:
        """Merge fields into an existing project. Returns None if it does not exist.

        ``fields`` may use snake_case names or the persisted camelCase keys.
        Identity fields (id, userId, createdAt) are never changed.
        Raises ValidationError, before anything is written, when a field
        would be cleared or the merged record is otherwise invalid.
        """
        if isinstance(fields, ProjectUpdate):
            update = fields
        else:
            update = ProjectUpdate.model_validate(fields)
        changes = update.model_dump(exclude_unset=True)

        records = self._load_records()
        index = self._index_of(records, project_id)
        if index < 0:
            logger.debug("project_update_missing", project_id=project_id)
            return None

        existing = self._parse(records[index])
        if existing is None:
            raise MalformedPersistedData(f"Stored record for project {project_id} is invalid")

        project = self._stamp(Project.model_validate({**existing.model_dump(), **changes}))
        records[index] = project.to_record()
        self._write_records(records)
        logger.info(
            "project_updated",
            project_id=project_id,
            fields=sorted(changes),
            status=project.status.value,
        )
        return project

    def delete_project(self, project_id: str) -> bool:
        """Remove a project. Returns True when the collection was rewritten."""
        try:
            records = self._load_records()
            remaining = [r for r in records if r.get("id") != project_id]
            if len(remaining) == len(records):
                return False
            self._write_records(remaining)
        except StorageFault as e:
            logger.error("project_delete_failed", project_id=project_id, error=str(e))
            return False

        logger.info("project_deleted", project_id=project_id)
        return True
