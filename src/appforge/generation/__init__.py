from .cancellation import CancellationToken
from .service import GenerationRun, GenerationService, template_producer
from .steps import (
    CHAT_STEP_LABELS,
    PROJECT_STEP_LABELS,
    GenerationContext,
    GenerationStep,
    default_steps,
    delay_steps,
    hold,
)
from .templates import generate_project_files

__all__ = [
    "CHAT_STEP_LABELS",
    "PROJECT_STEP_LABELS",
    "CancellationToken",
    "GenerationContext",
    "GenerationRun",
    "GenerationService",
    "GenerationStep",
    "default_steps",
    "delay_steps",
    "generate_project_files",
    "hold",
    "template_producer",
]
