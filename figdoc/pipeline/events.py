"""Progress events streamed by the generation workflow."""

from __future__ import annotations

import json
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class Stage(str, Enum):
    FETCH_DESIGN = "fetch-design"
    EXPORT_SCREENSHOTS = "export-screenshots"
    AI_ANALYSIS = "ai-analysis"
    GENERATE_DESCRIPTION = "generate-description"
    CREATE_PARENT_TICKET = "create-parent-ticket"
    CREATE_SUBTASKS = "create-subtasks"
    CREATE_DOCUMENT = "create-document"


class EventType(str, Enum):
    WORKFLOW_START = "workflow_start"
    STEP = "step"
    SUBTASK_CREATED = "subtask_created"
    SUBTASK_ERROR = "subtask_error"
    COMPLETE = "complete"
    ERROR = "error"


class StepStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETE = "complete"
    ERROR = "error"


TERMINAL_EVENTS = (EventType.COMPLETE, EventType.ERROR)


class ProgressEvent(BaseModel):
    type: EventType
    step: Optional[int] = None
    stage: Optional[Stage] = None
    status: Optional[StepStatus] = None
    message: str = ""
    data: Optional[Dict[str, Any]] = None

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENTS

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)

    def to_sse(self) -> str:
        """One SSE frame: ``event: <type>`` followed by the JSON payload."""
        return f"event: {self.type.value}\ndata: {json.dumps(self.to_payload())}\n\n"


def workflow_start(stages: List[Stage], mode: str) -> ProgressEvent:
    return ProgressEvent(
        type=EventType.WORKFLOW_START,
        message=f"Starting generation ({mode})",
        data={
            "mode": mode,
            "stages": [
                {"step": i, "stage": s.value, "status": StepStatus.PENDING.value}
                for i, s in enumerate(stages, start=1)
            ],
        },
    )


def step_event(
    step: int,
    stage: Stage,
    status: StepStatus,
    message: str,
    data: Optional[Dict[str, Any]] = None,
) -> ProgressEvent:
    return ProgressEvent(
        type=EventType.STEP, step=step, stage=stage, status=status,
        message=message, data=data,
    )


def error_event(
    message: str,
    step: Optional[int] = None,
    stage: Optional[Stage] = None,
) -> ProgressEvent:
    return ProgressEvent(type=EventType.ERROR, step=step, stage=stage, message=message)
