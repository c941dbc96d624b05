"""Named, independently awaitable generation steps.

A step's action receives the run context and may stash intermediate results
in ``context.artifacts``. The default actions only hold for a fixed delay;
a real backend replaces them with dispatched work while keeping the labels.
"""

from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from appforge.contracts.project import Project

from .cancellation import CancellationToken

PROJECT_STEP_LABELS = (
    "Analyzing your requirements...",
    "Designing the application architecture...",
    "Generating frontend components...",
    "Creating backend API endpoints...",
    "Setting up database schema...",
    "Configuring authentication...",
    "Optimizing and finalizing code...",
)

CHAT_STEP_LABELS = (
    "Analyzing requirements...",
    "Designing architecture...",
    "Generating components...",
    "Setting up routing...",
    "Adding styling...",
    "Optimizing code...",
    "Finalizing project...",
)


@dataclass
class GenerationContext:
    project: Project
    token: CancellationToken
    artifacts: dict[str, Any] = field(default_factory=dict)


StepAction = Callable[[GenerationContext], Awaitable[None]]


@dataclass(frozen=True)
class GenerationStep:
    label: str
    action: StepAction

    async def run(self, context: GenerationContext) -> None:
        await self.action(context)


def hold(seconds: float) -> StepAction:
    """Action that waits ``seconds`` unless the run is cancelled first."""

    async def _hold(context: GenerationContext) -> None:
        await context.token.sleep(seconds)

    return _hold


def delay_steps(labels: Sequence[str], seconds: float) -> list[GenerationStep]:
    return [GenerationStep(label=label, action=hold(seconds)) for label in labels]


def default_steps(seconds: float = 2.0) -> list[GenerationStep]:
    """The project generation pipeline."""
    return delay_steps(PROJECT_STEP_LABELS, seconds)
