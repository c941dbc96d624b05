import asyncio
from datetime import timedelta

import pytest

from appforge.contracts.files import CodeFile
from appforge.contracts.project import ProjectStatus
from appforge.errors import (
    GenerationInProgress,
    InvalidTransition,
    ProjectNotFoundError,
)
from appforge.files import decode_files
from appforge.generation import (
    PROJECT_STEP_LABELS,
    GenerationService,
    GenerationStep,
    delay_steps,
    generate_project_files,
    hold,
)


def failing_step(label: str, message: str = "boom") -> GenerationStep:
    async def _fail(context):
        raise RuntimeError(message)

    return GenerationStep(label=label, action=_fail)


def gate_step(label: str, gate: asyncio.Event) -> GenerationStep:
    async def _wait(context):
        await gate.wait()

    return GenerationStep(label=label, action=_wait)


@pytest.fixture
def project(store, make_project):
    return store.save_project(make_project())


class TestCompletedRun:
    @pytest.mark.asyncio
    async def test_generation_completes_with_template_files(self, store, project):
        service = GenerationService(store, step_delay=0)

        progress = await service.generate(project)

        assert progress.outcome == "completed"
        assert progress.status == ProjectStatus.COMPLETED
        assert progress.step_index == len(PROJECT_STEP_LABELS)
        assert progress.progress_pct == 100

        stored = store.get_project(project.id)
        assert stored.status == ProjectStatus.COMPLETED
        files = decode_files(stored.generated_code)
        expected = generate_project_files(project.tech_stack, project.name, project.description)
        assert files == expected
        assert all(f.content and f.language for f in files)
        assert [f.path for f in files] == [
            "src/App.tsx",
            "src/pages/HomePage.tsx",
            "src/pages/Dashboard.tsx",
            "package.json",
            "README.md",
        ]
        assert service.active_run(project.id) is None

    @pytest.mark.asyncio
    async def test_progress_walks_every_step_in_order(self, store, project):
        published = []
        service = GenerationService(store, step_delay=0, on_progress=published.append)

        await service.generate(project.id)

        running = [p for p in published if p.outcome == "running" and p.step_index]
        assert [p.label for p in running] == list(PROJECT_STEP_LABELS)
        assert [p.step_index for p in running] == list(range(1, 8))
        assert published[0].step_index == 0
        assert published[-1].outcome == "completed"
        assert all(p.timestamp.utcoffset() == timedelta(0) for p in published)

    @pytest.mark.asyncio
    async def test_custom_async_producer(self, store, project):
        produced = [
            CodeFile(path="main.go", content="package main\n", language="go"),
            CodeFile(path="README.md", content="# Todo App"),
        ]

        async def producer(context):
            return produced

        service = GenerationService(store, steps=delay_steps(["Only step"], 0), producer=producer)

        progress = await service.generate(project)

        assert progress.outcome == "completed"
        assert decode_files(store.get_project(project.id).generated_code) == [
            produced[0],
            CodeFile(path="README.md", content="# Todo App", language="markdown"),
        ]

    @pytest.mark.asyncio
    async def test_completed_project_can_be_regenerated(self, store, project):
        service = GenerationService(store, step_delay=0)
        await service.generate(project)

        progress = await service.generate(project)

        assert progress.outcome == "completed"


class TestFailedRun:
    @pytest.mark.asyncio
    async def test_step_fault_marks_project_error(self, store, project):
        steps = delay_steps(["First"], 0) + [failing_step("Second", "model timed out")]
        service = GenerationService(store, steps=steps)

        progress = await service.generate(project)

        assert progress.outcome == "error"
        assert progress.status == ProjectStatus.ERROR
        assert progress.step_index == 2
        assert progress.label == "Second"
        assert progress.error == "model timed out"

        stored = store.get_project(project.id)
        assert stored.status == ProjectStatus.ERROR
        assert stored.generated_code is None

    @pytest.mark.asyncio
    async def test_producer_fault_marks_project_error(self, store, project):
        def producer(context):
            raise ValueError("template missing")

        service = GenerationService(store, steps=delay_steps(["Only"], 0), producer=producer)

        progress = await service.generate(project)

        assert progress.outcome == "error"
        assert "template missing" in progress.error
        assert store.get_project(project.id).status == ProjectStatus.ERROR

    @pytest.mark.asyncio
    async def test_empty_output_is_a_fault(self, store, project):
        service = GenerationService(
            store, steps=delay_steps(["Only"], 0), producer=lambda context: []
        )

        progress = await service.generate(project)

        assert progress.outcome == "error"
        assert store.get_project(project.id).status == ProjectStatus.ERROR

    @pytest.mark.asyncio
    async def test_retry_restarts_from_first_step(self, store, project):
        attempts = []

        async def flaky(context):
            attempts.append(context.project.id)
            if len(attempts) == 1:
                raise RuntimeError("transient")

        published = []
        steps = delay_steps(["Analyze"], 0) + [GenerationStep(label="Build", action=flaky)]
        service = GenerationService(store, steps=steps, on_progress=published.append)
        await service.generate(project)

        published.clear()
        run = await service.retry(project.id)
        progress = await run.wait()

        assert progress.outcome == "completed"
        assert [p.label for p in published if p.step_index][:2] == ["Analyze", "Build"]
        assert store.get_project(project.id).status == ProjectStatus.COMPLETED

    @pytest.mark.asyncio
    async def test_retry_requires_error_status(self, store, project):
        service = GenerationService(store, step_delay=0)

        with pytest.raises(InvalidTransition):
            await service.retry(project.id)

    @pytest.mark.asyncio
    async def test_retry_missing_project(self, store):
        service = GenerationService(store, step_delay=0)

        with pytest.raises(ProjectNotFoundError):
            await service.retry("proj_missing")


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancel_leaves_store_untouched(self, store, project):
        gate = asyncio.Event()
        service = GenerationService(store, steps=[gate_step("Waiting", gate)])
        run = await service.start_generation(project)
        await asyncio.sleep(0)
        before = store.get_project(project.id)

        assert service.cancel(project.id) is True
        progress = await run.wait()

        assert progress.outcome == "cancelled"
        assert store.get_project(project.id) == before
        assert service.active_run(project.id) is None

    @pytest.mark.asyncio
    async def test_token_cancel_stops_between_steps(self, store, project):
        service = GenerationService(store, steps=[GenerationStep("Hold", hold(30))] * 3)
        run = await service.start_generation(project)
        await asyncio.sleep(0)

        run.token.cancel()
        progress = await asyncio.wait_for(run.wait(), timeout=5)

        assert progress.outcome == "cancelled"
        assert progress.step_index == 1
        assert store.get_project(project.id).status == ProjectStatus.GENERATING

    @pytest.mark.asyncio
    async def test_cancel_before_first_step(self, store, project):
        service = GenerationService(store, step_delay=0)
        run = await service.start_generation(project)

        run.cancel()
        progress = await run.wait()

        assert progress.outcome == "cancelled"
        assert service.active_run(project.id) is None

    @pytest.mark.asyncio
    async def test_shutdown_cancels_live_runs(self, store, project):
        gate = asyncio.Event()
        service = GenerationService(store, steps=[gate_step("Waiting", gate)])
        run = await service.start_generation(project)

        await service.shutdown()

        assert run.progress.outcome == "cancelled"
        assert service.active_run(project.id) is None

    def test_cancel_unknown_project(self, store):
        assert GenerationService(store).cancel("proj_missing") is False


class TestStartGeneration:
    @pytest.mark.asyncio
    async def test_second_start_is_rejected(self, store, project):
        gate = asyncio.Event()
        service = GenerationService(store, steps=[gate_step("Waiting", gate)])
        run = await service.start_generation(project)

        with pytest.raises(GenerationInProgress):
            await service.start_generation(project.id)

        gate.set()
        assert (await run.wait()).outcome == "completed"

    @pytest.mark.asyncio
    async def test_missing_project(self, store):
        service = GenerationService(store, step_delay=0)

        with pytest.raises(ProjectNotFoundError):
            await service.start_generation("proj_missing")

    @pytest.mark.asyncio
    async def test_start_resets_generated_code(self, store, project):
        service = GenerationService(store, step_delay=0)
        await service.generate(project)
        gate = asyncio.Event()
        service.steps = [gate_step("Waiting", gate)]

        run = await service.start_generation(project)

        stored = store.get_project(project.id)
        assert stored.status == ProjectStatus.GENERATING
        assert stored.generated_code is None
        assert service.progress(project.id).step_index == 0

        gate.set()
        await run.wait()

    def test_step_labels(self, store):
        assert GenerationService(store).step_labels == list(PROJECT_STEP_LABELS)
