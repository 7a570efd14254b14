"""Generation workflow: request schema, progress events and the orchestrator."""

from .events import EventType, ProgressEvent, Stage, StepStatus
from .orchestrator import STAGE_SEQUENCES, GenerationWorkflow
from .request import GenerateRequest, GenerationMode
from .services import WorkflowServices

__all__ = [
    "EventType",
    "GenerateRequest",
    "GenerationMode",
    "GenerationWorkflow",
    "ProgressEvent",
    "STAGE_SEQUENCES",
    "Stage",
    "StepStatus",
    "WorkflowServices",
]
