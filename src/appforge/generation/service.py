"""Project generation state machine.

    generating --(all steps done, files produced)--> completed
    generating --(step or producer raised)---------> error
    error      --(retry)---------------------------> generating
    completed  --(start_generation)----------------> generating

Each run walks the full step sequence from the first step. A run whose
cancellation token fires stops without touching the store again.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
import functools
import inspect

import structlog

from appforge.contracts.events import GenerationProgress, RunOutcome
from appforge.contracts.files import CodeFile
from appforge.contracts.project import Project, ProjectStatus
from appforge.errors import (
    GenerationCancelled,
    GenerationFault,
    GenerationInProgress,
    InvalidTransition,
    ProjectNotFoundError,
    StorageFault,
)
from appforge.files.codec import encode_files
from appforge.store import ProjectStore

from .cancellation import CancellationToken
from .steps import GenerationContext, GenerationStep, default_steps
from .templates import generate_project_files

logger = structlog.get_logger(__name__)

FileProducer = Callable[[GenerationContext], list[CodeFile] | Awaitable[list[CodeFile]]]
ProgressListener = Callable[[GenerationProgress], None]


def template_producer(context: GenerationContext) -> list[CodeFile]:
    """Produce the stack-specific template files for the run's project."""
    project = context.project
    return generate_project_files(project.tech_stack, project.name, project.description)


@dataclass
class GenerationRun:
    """Handle on one live generation run."""

    project: Project
    token: CancellationToken
    total_steps: int
    progress: GenerationProgress
    task: asyncio.Task | None = None
    history: list[GenerationProgress] = field(default_factory=list)

    @property
    def project_id(self) -> str:
        return self.project.id

    def cancel(self) -> None:
        self.token.cancel()
        if self.task is not None and not self.task.done():
            self.task.cancel()

    async def wait(self) -> GenerationProgress:
        """Wait for the run to finish and return its terminal snapshot."""
        if self.task is not None:
            try:
                await asyncio.shield(self.task)
            except asyncio.CancelledError:
                if not self.task.cancelled():
                    raise
                # Let the done callback publish the cancelled snapshot
                await asyncio.sleep(0)
        return self.progress


class GenerationService:
    """Drives projects through the generation state machine."""

    def __init__(
        self,
        store: ProjectStore,
        steps: Sequence[GenerationStep] | None = None,
        producer: FileProducer = template_producer,
        step_delay: float = 2.0,
        on_progress: ProgressListener | None = None,
    ) -> None:
        self.store = store
        self.steps = list(steps) if steps is not None else default_steps(step_delay)
        self.producer = producer
        self.on_progress = on_progress
        self._runs: dict[str, GenerationRun] = {}

    @property
    def step_labels(self) -> list[str]:
        return [step.label for step in self.steps]

    def active_run(self, project_id: str) -> GenerationRun | None:
        return self._runs.get(project_id)

    def progress(self, project_id: str) -> GenerationProgress | None:
        run = self._runs.get(project_id)
        return run.progress if run else None

    # === Transitions ===

    async def start_generation(
        self,
        project: Project | str,
        token: CancellationToken | None = None,
    ) -> GenerationRun:
        """Enter ``generating`` and launch the step sequence in the background.

        Raises GenerationInProgress when the project already has a live run,
        ProjectNotFoundError when it does not exist. Storage faults propagate.
        """
        project_id = project if isinstance(project, str) else project.id
        if project_id in self._runs:
            raise GenerationInProgress(f"Project {project_id} is already generating")

        updated = self.store.update_project(
            project_id,
            {"status": ProjectStatus.GENERATING, "generated_code": None},
        )
        if updated is None:
            raise ProjectNotFoundError(f"Project {project_id} not found")

        total = len(self.steps)
        run = GenerationRun(
            project=updated,
            token=token or CancellationToken(),
            total_steps=total,
            progress=GenerationProgress(
                project_id=project_id,
                status=ProjectStatus.GENERATING,
                total_steps=total,
            ),
        )
        self._runs[project_id] = run
        self._publish(run, run.progress)
        run.task = asyncio.create_task(self._execute(run), name=f"generation_{project_id}")
        run.task.add_done_callback(functools.partial(self._on_task_done, run))
        logger.info("generation_started", project_id=project_id, steps=total)
        return run

    async def retry(self, project_id: str, token: CancellationToken | None = None) -> GenerationRun:
        """Restart a failed project's generation from the first step."""
        project = self.store.get_project(project_id)
        if project is None:
            raise ProjectNotFoundError(f"Project {project_id} not found")
        if project.status != ProjectStatus.ERROR:
            raise InvalidTransition(
                f"Only failed projects can be retried; {project_id} is {project.status.value}"
            )
        logger.info("generation_retry", project_id=project_id)
        return await self.start_generation(project_id, token=token)

    async def generate(
        self,
        project: Project | str,
        token: CancellationToken | None = None,
    ) -> GenerationProgress:
        """Run a full generation and wait for its terminal snapshot."""
        run = await self.start_generation(project, token=token)
        return await run.wait()

    def cancel(self, project_id: str) -> bool:
        run = self._runs.get(project_id)
        if run is None:
            return False
        run.cancel()
        return True

    async def shutdown(self) -> None:
        """Cancel every live run and wait for them to stop."""
        runs = list(self._runs.values())
        for run in runs:
            run.cancel()
        for run in runs:
            if run.task is not None:
                await asyncio.gather(run.task, return_exceptions=True)

    # === Execution ===

    def _publish(self, run: GenerationRun, progress: GenerationProgress) -> None:
        run.progress = progress
        run.history.append(progress)
        if self.on_progress is not None:
            self.on_progress(progress)

    def _snapshot(
        self,
        run: GenerationRun,
        status: ProjectStatus,
        outcome: RunOutcome,
        step_index: int,
        label: str = "",
        error: str | None = None,
    ) -> GenerationProgress:
        return GenerationProgress(
            project_id=run.project_id,
            status=status,
            outcome=outcome,
            step_index=step_index,
            total_steps=run.total_steps,
            label=label,
            error=error,
        )

    async def _produce(self, context: GenerationContext) -> list[CodeFile]:
        result = self.producer(context)
        if inspect.isawaitable(result):
            result = await result
        return list(result)

    async def _run_steps(self, run: GenerationRun, context: GenerationContext) -> list[CodeFile]:
        for index, step in enumerate(self.steps, start=1):
            run.token.raise_if_cancelled()
            self._publish(
                run,
                self._snapshot(run, ProjectStatus.GENERATING, "running", index, step.label),
            )
            logger.debug("generation_step", project_id=run.project_id, step=index, label=step.label)
            try:
                await step.run(context)
            except GenerationCancelled:
                raise
            except Exception as e:
                raise GenerationFault(str(e) or type(e).__name__, step=step.label) from e

        run.token.raise_if_cancelled()
        try:
            files = await self._produce(context)
        except GenerationCancelled:
            raise
        except Exception as e:
            raise GenerationFault(f"File production failed: {e}") from e
        if not files:
            raise GenerationFault("Generation produced no files")
        return files

    def _cancelled_snapshot(self, run: GenerationRun) -> GenerationProgress:
        return self._snapshot(
            run, ProjectStatus.GENERATING, "cancelled", run.progress.step_index, run.progress.label
        )

    def _on_task_done(self, run: GenerationRun, task: asyncio.Task) -> None:
        # Covers tasks cancelled before their first step ran
        if self._runs.get(run.project_id) is run:
            del self._runs[run.project_id]
        if task.cancelled() and run.progress.outcome == "running":
            self._publish(run, self._cancelled_snapshot(run))

    async def _execute(self, run: GenerationRun) -> GenerationProgress:
        project_id = run.project_id
        context = GenerationContext(project=run.project, token=run.token)
        try:
            files = await self._run_steps(run, context)

            run.token.raise_if_cancelled()
            updated = self.store.update_project(
                project_id,
                {"status": ProjectStatus.COMPLETED, "generated_code": encode_files(files)},
            )
            if updated is None:
                logger.warning("generation_project_vanished", project_id=project_id)
                self._publish(run, self._cancelled_snapshot(run))
                return run.progress

            logger.info("generation_completed", project_id=project_id, files=len(files))
            self._publish(
                run, self._snapshot(run, ProjectStatus.COMPLETED, "completed", run.total_steps)
            )

        except (GenerationCancelled, asyncio.CancelledError):
            logger.info("generation_cancelled", project_id=project_id, step=run.progress.step_index)
            self._publish(run, self._cancelled_snapshot(run))

        except Exception as e:
            fault = e if isinstance(e, GenerationFault) else GenerationFault(str(e))
            logger.error(
                "generation_failed",
                project_id=project_id,
                step=fault.step,
                error=str(fault),
            )
            if not run.token.cancelled:
                try:
                    self.store.update_project(project_id, {"status": ProjectStatus.ERROR})
                except StorageFault as storage_error:
                    logger.error(
                        "generation_error_state_write_failed",
                        project_id=project_id,
                        error=str(storage_error),
                    )
            self._publish(
                run,
                self._snapshot(
                    run,
                    ProjectStatus.ERROR,
                    "error",
                    run.progress.step_index,
                    run.progress.label,
                    error=str(fault),
                ),
            )

        finally:
            if self._runs.get(project_id) is run:
                del self._runs[project_id]

        return run.progress
