"""Documentation generation endpoint (SSE progress stream)."""

from __future__ import annotations

import logging
from typing import AsyncIterator

from fastapi import APIRouter
from fastapi.responses import StreamingResponse

from figdoc.pipeline import GenerateRequest, GenerationWorkflow
from figdoc.pipeline.events import error_event

logger = logging.getLogger("figdoc.api.generate")

router = APIRouter(prefix="/api", tags=["generate"])


async def _generate_sse(workflow: GenerationWorkflow) -> AsyncIterator[str]:
    terminal_sent = False
    try:
        async for event in workflow.run():
            terminal_sent = terminal_sent or event.is_terminal
            yield event.to_sse()
    except Exception as e:
        logger.exception("generate stream failed")
        if not terminal_sent:
            yield error_event(str(e) or "An unknown error occurred").to_sse()


@router.post("/generate")
async def generate(payload: GenerateRequest):
    """Run the Figma → Jira/Confluence workflow and stream its progress.

    Events:
    - workflow_start: stage list, all pending
    - step: per-stage in_progress / complete / error
    - subtask_created / subtask_error: per FED/BED/QA sub-task
    - complete / error: terminal, exactly one per stream

    Usage:
        const res = await fetch('/api/generate', {method: 'POST', body});
        // read res.body as text/event-stream
    """
    logger.info(
        f"generate: component={payload.component_name!r}, "
        f"mode={payload.generation_mode or 'both'}"
    )
    return StreamingResponse(
        _generate_sse(GenerationWorkflow(payload)),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )
