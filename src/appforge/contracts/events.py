"""Generation progress snapshots published to UI consumers."""

from datetime import UTC, datetime
from typing import Literal

from pydantic import BaseModel, Field

from appforge.contracts.project import ProjectStatus

RunOutcome = Literal["running", "completed", "error", "cancelled"]


class GenerationProgress(BaseModel):
    """State of a generation run at one point in time."""

    project_id: str
    status: ProjectStatus
    outcome: RunOutcome = "running"
    step_index: int = 0
    total_steps: int
    label: str = ""
    error: str | None = None
    timestamp: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @property
    def progress_pct(self) -> int:
        if self.total_steps == 0:
            return 100
        return int(self.step_index / self.total_steps * 100)
