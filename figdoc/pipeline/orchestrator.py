"""Staged generation workflow: Figma design → AI content → Jira / Confluence.

``GenerationWorkflow.run()`` is an async generator of ``ProgressEvent``.
Stages run strictly in sequence. Each stage has a failure policy:

- required: a failure emits a stage ``error`` step, then one terminal
  ``error`` event, and nothing further runs
- best-effort (export-screenshots): a failure completes the stage as skipped
- partial (create-subtasks): each sub-task succeeds or fails on its own and
  the stage always completes

Every stream ends with exactly one terminal ``complete`` or ``error`` event.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, AsyncIterator, Awaitable, Dict, List, Optional

from .. import settings
from ..content.generator import generate_content, generate_overview
from ..content.models import AIContentBundle
from ..design.extractor import extract_component, find_best_node_for_screenshot
from ..design.models import DesignNode, ExtractedComponent
from ..design.variants import resolve_variants
from ..documents.fsd import create_fsd_page, to_fsd_markup
from ..documents.tickets import (
    SubtaskOutcome,
    TicketPlan,
    TicketRef,
    create_subtasks,
    to_ticket_plan,
)
from ..errors import ConfigurationError, FigdocError, StageTimeoutError
from ..integrations.figma_client import parse_figma_url
from ..integrations.jira_client import issue_key
from ..integrations.llm_client import is_openai_configured
from .events import (
    EventType,
    ProgressEvent,
    Stage,
    StepStatus,
    error_event,
    step_event,
    workflow_start,
)
from .request import GenerateRequest, GenerationMode
from .services import WorkflowServices

logger = logging.getLogger("figdoc.pipeline.orchestrator")

BREAKPOINTS = ("desktop", "tablet", "mobile")
SCREENSHOTS_SKIPPED = "Screenshots skipped (optional)"

_ANALYSIS_STAGES = [
    Stage.FETCH_DESIGN,
    Stage.EXPORT_SCREENSHOTS,
    Stage.AI_ANALYSIS,
    Stage.GENERATE_DESCRIPTION,
]
_TICKET_STAGES = [Stage.CREATE_PARENT_TICKET, Stage.CREATE_SUBTASKS]

STAGE_SEQUENCES: Dict[GenerationMode, List[Stage]] = {
    GenerationMode.BOTH: _ANALYSIS_STAGES + _TICKET_STAGES + [Stage.CREATE_DOCUMENT],
    GenerationMode.JIRA_ONLY: _ANALYSIS_STAGES + _TICKET_STAGES,
    GenerationMode.FSD_ONLY: _ANALYSIS_STAGES + [Stage.CREATE_DOCUMENT],
}


class StagePolicy(str, Enum):
    REQUIRED = "required"
    BEST_EFFORT = "best_effort"
    PARTIAL = "partial"


STAGE_POLICIES: Dict[Stage, StagePolicy] = {
    Stage.EXPORT_SCREENSHOTS: StagePolicy.BEST_EFFORT,
    Stage.CREATE_SUBTASKS: StagePolicy.PARTIAL,
}


@dataclass
class StageOutcome:
    message: str
    data: Optional[Dict[str, Any]] = None
    # Emitted before the stage's ``complete`` step (sub-task results)
    events: List[ProgressEvent] = field(default_factory=list)


@dataclass
class WorkflowState:
    """Values produced by earlier stages and read by later ones."""

    file_key: str = ""
    url_node_id: Optional[str] = None
    root: Optional[DesignNode] = None
    component: Optional[ExtractedComponent] = None
    image_urls: Dict[str, str] = field(default_factory=dict)
    bundle: Optional[AIContentBundle] = None
    overview: str = ""
    plan: Optional[TicketPlan] = None
    parent: Optional[TicketRef] = None
    subtasks: List[TicketRef] = field(default_factory=list)
    document_url: str = ""


def _error_message(error: BaseException) -> str:
    return str(error) or type(error).__name__


class GenerationWorkflow:
    """Runs one generation request.

    Args:
        request: Parsed request body.
        services: Pre-built clients. Built from the request when omitted;
            clients are closed when the run finishes either way.
    """

    def __init__(
        self,
        request: GenerateRequest,
        services: Optional[WorkflowServices] = None,
    ):
        self.request = request
        self._services = services
        self.state = WorkflowState()

    @property
    def component_name(self) -> str:
        return (self.request.component_name or "").strip()

    @property
    def figma_url(self) -> str:
        return self.request.figma_url or ""

    def _prepare(self) -> GenerationMode:
        mode = self.request.validate_for_mode()
        if self._services is None:
            if not is_openai_configured():
                raise ConfigurationError("OpenAI API key not configured")
            self._services = WorkflowServices.from_request(self.request)
        return mode

    async def run(self) -> AsyncIterator[ProgressEvent]:
        try:
            mode = self._prepare()
        except FigdocError as e:
            logger.warning(f"run: request rejected: {e}")
            if self._services is not None:
                await self._services.close()
            yield error_event(str(e))
            return

        stages = STAGE_SEQUENCES[mode]
        logger.info(
            f"run: component={self.component_name!r}, mode={mode.value}, "
            f"stages={len(stages)}"
        )
        try:
            yield workflow_start(stages, mode.value)
            for step, stage in enumerate(stages, start=1):
                failed = False
                async for event in self._run_stage(step, stage):
                    yield event
                    if event.type == EventType.ERROR:
                        failed = True
                if failed:
                    return
            yield self._complete_event()
        finally:
            await self._services.close()

    # ------------------------------------------------------------------
    # Stage execution
    # ------------------------------------------------------------------

    async def _with_timeout(self, stage: Stage, awaitable: Awaitable[StageOutcome]) -> StageOutcome:
        timeout = settings.STAGE_TIMEOUT_SECONDS
        if timeout <= 0:
            return await awaitable
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout)
        except asyncio.TimeoutError:
            raise StageTimeoutError(f"{stage.value} timed out after {timeout}s") from None

    async def _run_stage(self, step: int, stage: Stage) -> AsyncIterator[ProgressEvent]:
        yield step_event(step, stage, StepStatus.IN_PROGRESS, self._start_message(stage))

        handler = getattr(self, "_stage_" + stage.value.replace("-", "_"))
        try:
            outcome = await self._with_timeout(stage, handler())
        except Exception as e:
            policy = STAGE_POLICIES.get(stage, StagePolicy.REQUIRED)
            message = _error_message(e)
            if policy is StagePolicy.BEST_EFFORT:
                logger.warning(f"{stage.value}: skipped: {message}")
                yield step_event(step, stage, StepStatus.COMPLETE, SCREENSHOTS_SKIPPED)
                return
            if policy is StagePolicy.PARTIAL:
                logger.warning(f"{stage.value}: no results: {message}")
                yield step_event(
                    step, stage, StepStatus.COMPLETE,
                    f"0 Sub-tasks created: {message}",
                    {"subtaskKeys": [], "subtaskUrls": []},
                )
                return
            logger.error(f"{stage.value}: failed: {message}")
            yield step_event(step, stage, StepStatus.ERROR, message)
            yield error_event(message, step=step, stage=stage)
            return

        for event in outcome.events:
            yield event
        yield step_event(step, stage, StepStatus.COMPLETE, outcome.message, outcome.data)

    def _start_message(self, stage: Stage) -> str:
        return {
            Stage.FETCH_DESIGN: "Fetching Figma data...",
            Stage.EXPORT_SCREENSHOTS: f"Exporting {self.component_name} screenshots...",
            Stage.AI_ANALYSIS: "Deep AI Analysis (Sitecore structure)...",
            Stage.GENERATE_DESCRIPTION: "Generating component description...",
            Stage.CREATE_PARENT_TICKET: "Creating Parent Ticket...",
            Stage.CREATE_SUBTASKS: "Creating FED/BED/QA Sub-tasks...",
            Stage.CREATE_DOCUMENT: "Creating Confluence FSD...",
        }[stage]

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _stage_fetch_design(self) -> StageOutcome:
        file_key, node_id = parse_figma_url(self.figma_url)
        file_name, document = await self._services.figma.get_document(file_key, node_id)
        root = DesignNode.from_dict(document)
        component = extract_component(root, self.component_name)

        self.state.file_key = file_key
        self.state.url_node_id = node_id
        self.state.root = root
        self.state.component = component
        return StageOutcome(
            message=f"Figma data fetched: {len(component.children)} elements found",
            data={
                "fileName": file_name,
                "nodeId": component.node_id,
                "elements": len(component.children),
            },
        )

    async def _export_main_file(self, node_ids: Dict[str, str]) -> Dict[str, str]:
        if not node_ids:
            return {}
        images = await self._services.figma.get_images(
            self.state.file_key, list(dict.fromkeys(node_ids.values())),
            scale=settings.FIGMA_IMAGE_SCALE,
        )
        return {bp: images[nid] for bp, nid in node_ids.items() if images.get(nid)}

    async def _export_explicit(self, breakpoint: str, url: str) -> Optional[str]:
        try:
            file_key, node_id = parse_figma_url(url)
            if not node_id:
                logger.info(f"export-screenshots: {breakpoint} URL has no node-id, skipped")
                return None
            images = await self._services.figma.get_images(
                file_key, [node_id], scale=settings.FIGMA_IMAGE_SCALE,
            )
        except Exception as e:
            logger.warning(f"export-screenshots: {breakpoint} image failed: {e}")
            return None
        return images.get(node_id) or None

    async def _stage_export_screenshots(self) -> StageOutcome:
        root, component = self.state.root, self.state.component
        desktop = component.node_id or find_best_node_for_screenshot(
            root, self.component_name, self.state.url_node_id,
        )
        variants = resolve_variants(root, self.component_name)
        explicit_urls = {
            "tablet": self.request.tablet_figma_url,
            "mobile": self.request.mobile_figma_url,
        }

        main_nodes: Dict[str, str] = {}
        if desktop:
            main_nodes["desktop"] = desktop
        explicit: Dict[str, str] = {}
        for bp, url in explicit_urls.items():
            if url:
                explicit[bp] = url
            elif getattr(variants, bp):
                main_nodes[bp] = getattr(variants, bp)

        results = await asyncio.gather(
            self._export_main_file(main_nodes),
            *(self._export_explicit(bp, url) for bp, url in explicit.items()),
            return_exceptions=True,
        )
        found = {bp: url for bp, url in zip(explicit, results[1:]) if isinstance(url, str) and url}
        main_images = results[0]
        if isinstance(main_images, BaseException):
            # Explicit breakpoint images still reach the FSD
            self.state.image_urls = {bp: found[bp] for bp in BREAKPOINTS if bp in found}
            raise main_images

        found.update((bp, url) for bp, url in main_images.items() if bp not in found)
        image_urls = {bp: found[bp] for bp in BREAKPOINTS if found.get(bp)}
        self.state.image_urls = image_urls

        return StageOutcome(
            message=f"{len(image_urls)} screenshot(s) exported ({', '.join(image_urls)})",
            data={"imageUrls": image_urls},
        )

    async def _stage_ai_analysis(self) -> StageOutcome:
        bundle = await generate_content(
            self._services.llm, self.state.component, self.figma_url,
        )
        self.state.bundle = bundle
        return StageOutcome(
            message=f"Deep analysis complete: {len(bundle.field_requirements)} fields identified",
            data={
                "storiesGenerated": len(bundle.stories),
                "requirementsGenerated": len(bundle.end_user_requirements),
                "fieldsIdentified": len(bundle.field_requirements),
            },
        )

    async def _stage_generate_description(self) -> StageOutcome:
        overview = await generate_overview(
            self._services.llm, self.component_name, self.state.component, self.figma_url,
        )
        self.state.overview = overview
        return StageOutcome(message="Description ready", data={"overview": overview})

    async def _stage_create_parent_ticket(self) -> StageOutcome:
        jira = self._services.jira
        plan = to_ticket_plan(self.state.bundle, self.component_name, self.figma_url)
        parent = await jira.create_parent_task(
            self.request.jira_project, plan.parent_summary, plan.parent_description,
        )
        key = issue_key(parent)
        self.state.plan = plan
        self.state.parent = TicketRef(key=key, url=jira.issue_url(key), summary=plan.parent_summary)
        return StageOutcome(
            message=f"Parent created: {key}",
            data={"parentKey": key, "parentUrl": self.state.parent.url},
        )

    def _subtask_event(self, number: int, outcome: SubtaskOutcome) -> ProgressEvent:
        data: Dict[str, Any] = {
            "role": outcome.label,
            "summary": outcome.summary,
            "number": number,
            "total": 3,
        }
        if outcome.ok:
            data.update(key=outcome.ticket.key, url=outcome.ticket.url)
            return ProgressEvent(
                type=EventType.SUBTASK_CREATED,
                stage=Stage.CREATE_SUBTASKS,
                message=f"{outcome.label} sub-task created: {outcome.ticket.key}",
                data=data,
            )
        data["error"] = outcome.error
        return ProgressEvent(
            type=EventType.SUBTASK_ERROR,
            stage=Stage.CREATE_SUBTASKS,
            message=f"{outcome.label} sub-task failed: {outcome.error}",
            data=data,
        )

    async def _stage_create_subtasks(self) -> StageOutcome:
        outcomes = await create_subtasks(
            self._services.jira,
            self.request.jira_project,
            self.state.parent.key,
            self.component_name,
            self.state.plan,
        )
        events = [self._subtask_event(i, o) for i, o in enumerate(outcomes, start=1)]
        self.state.subtasks = [o.ticket for o in outcomes if o.ok]
        keys = [t.key for t in self.state.subtasks]
        return StageOutcome(
            message=f"{len(keys)} Sub-tasks created: {', '.join(keys)}",
            data={"subtaskKeys": keys, "subtaskUrls": [t.url for t in self.state.subtasks]},
            events=events,
        )

    async def _stage_create_document(self) -> StageOutcome:
        markup = to_fsd_markup(
            self.state.bundle,
            self.component_name,
            self.figma_url,
            jira_epic_url=self.state.parent.url if self.state.parent else "",
            story_urls=[t.url for t in self.state.subtasks],
            image_urls=self.state.image_urls,
        )
        url = await create_fsd_page(
            self._services.confluence,
            self.request.confluence_space,
            markup,
            self.component_name,
            parent_page_id=self.request.confluence_parent_page or None,
        )
        self.state.document_url = url
        return StageOutcome(message="FSD created in Confluence", data={"documentUrl": url})

    # ------------------------------------------------------------------
    # Result
    # ------------------------------------------------------------------

    def _complete_event(self) -> ProgressEvent:
        state = self.state
        bundle = state.bundle or AIContentBundle()
        data: Dict[str, Any] = {"success": True, "overview": state.overview}
        if state.parent:
            data["parentKey"] = state.parent.key
            data["parentUrl"] = state.parent.url
        if state.subtasks:
            data["subtaskKeys"] = [t.key for t in state.subtasks]
            data["subtaskUrls"] = [t.url for t in state.subtasks]
        if state.document_url:
            data["documentUrl"] = state.document_url
        data["aiAnalysis"] = {
            "subtasksCreated": len(state.subtasks),
            "requirementsGenerated": len(bundle.end_user_requirements),
            "fieldsIdentified": len(bundle.field_requirements),
        }
        logger.info(
            f"run: complete component={self.component_name!r}, "
            f"subtasks={len(state.subtasks)}, document={bool(state.document_url)}"
        )
        return ProgressEvent(type=EventType.COMPLETE, message="Generation complete", data=data)
