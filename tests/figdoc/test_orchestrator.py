"""Tests for figdoc.pipeline (request validation, events, GenerationWorkflow)."""

from __future__ import annotations

import asyncio
import json
from typing import List
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from figdoc import config, settings
from figdoc.errors import FigmaClientError, JiraClientError, LLMClientError
from figdoc.pipeline import (
    STAGE_SEQUENCES,
    EventType,
    GenerateRequest,
    GenerationMode,
    GenerationWorkflow,
    ProgressEvent,
    Stage,
    StepStatus,
    WorkflowServices,
)

FIGMA_URL = "https://www.figma.com/design/AbC123xyz/Site-Kit?node-id=100-1"

AI_REPLY = json.dumps({
    "description": "Global footer",
    "endUserRequirements": ["I can navigate", "I can see the logo"],
    "contentAuthorRequirements": ["I can edit links"],
    "designNotes": ["Full width"],
    "fieldRequirements": [
        {"element": "Logo", "fieldType": "Browse Media", "required": True},
        {"element": "Links", "fieldType": "Multilist"},
        {"element": "Copyright", "fieldType": "Single-Line Text"},
    ],
})


def make_request(**overrides) -> GenerateRequest:
    body = {
        "figmaUrl": FIGMA_URL,
        "figmaToken": "figd_test",
        "atlassianEmail": "dev@example.com",
        "atlassianToken": "tok",
        "atlassianUrl": "https://site.test",
        "jiraProject": "DP",
        "confluenceSpace": "DOC",
        "componentName": "Footer",
    }
    body.update(overrides)
    return GenerateRequest.model_validate(body)


@pytest.fixture
def services(footer_document) -> WorkflowServices:
    figma = MagicMock()
    figma.get_document = AsyncMock(return_value=("Site Kit", footer_document))
    figma.get_images = AsyncMock(return_value={
        "300:1": "https://img.test/desktop.png",
        "400:1": "https://img.test/mobile.png",
    })
    figma.close = AsyncMock()

    llm = MagicMock()
    llm.complete_json = AsyncMock(return_value=AI_REPLY)
    llm.complete_text = AsyncMock(return_value="Footer overview.")
    llm.close = AsyncMock()

    keys = iter(f"DP-{n}" for n in range(1, 10))
    jira = MagicMock()
    jira.issue_url = lambda key: f"https://site.test/browse/{key}"
    jira.create_parent_task = AsyncMock(side_effect=lambda *a, **kw: {"key": next(keys)})
    jira.create_sub_task = AsyncMock(side_effect=lambda *a, **kw: {"key": next(keys)})
    jira.close = AsyncMock()

    confluence = MagicMock()
    confluence.create_page = AsyncMock(return_value={
        "id": "55", "web_url": "https://site.test/wiki/spaces/DOC/pages/55",
    })
    confluence.close = AsyncMock()

    return WorkflowServices(figma=figma, llm=llm, jira=jira, confluence=confluence)


async def collect(workflow: GenerationWorkflow) -> List[ProgressEvent]:
    return [event async for event in workflow.run()]


def steps(events: List[ProgressEvent]):
    return [(e.stage, e.status) for e in events if e.type == EventType.STEP]


def terminal(events: List[ProgressEvent]) -> ProgressEvent:
    terminals = [e for e in events if e.is_terminal]
    assert len(terminals) == 1
    assert events[-1] is terminals[0]
    return terminals[0]


# ---------------------------------------------------------------------------
# Request validation
# ---------------------------------------------------------------------------


class TestGenerateRequest:

    def test_camel_and_snake_case(self):
        camel = GenerateRequest.model_validate({"figmaUrl": "u", "componentName": "Footer"})
        snake = GenerateRequest.model_validate({"figma_url": "u", "component_name": "Footer"})
        assert camel.figma_url == snake.figma_url == "u"
        assert camel.component_name == snake.component_name == "Footer"

    def test_default_mode_is_both(self):
        assert make_request().validate_for_mode() is GenerationMode.BOTH

    def test_fsd_only_does_not_need_jira_project(self):
        request = make_request(jiraProject=None, generationMode="fsd_only")
        assert request.validate_for_mode() is GenerationMode.FSD_ONLY

    def test_jira_only_does_not_need_space(self):
        request = make_request(confluenceSpace="", generationMode="jira_only")
        assert request.validate_for_mode() is GenerationMode.JIRA_ONLY

    def test_atlassian_url_falls_back_to_env(self):
        with patch.object(config, "ATLASSIAN_BASE_URL", "https://env.test/"):
            request = make_request(atlassianUrl=None)
            assert request.resolved_atlassian_url == "https://env.test"

    def test_figma_token_falls_back_to_env(self):
        with patch.object(config, "FIGMA_TOKEN", "figd_env"):
            assert make_request(figmaToken=None).resolved_figma_token == "figd_env"


class TestStageSequences:

    def test_sequences(self):
        assert [s.value for s in STAGE_SEQUENCES[GenerationMode.BOTH]] == [
            "fetch-design", "export-screenshots", "ai-analysis", "generate-description",
            "create-parent-ticket", "create-subtasks", "create-document",
        ]
        assert Stage.CREATE_DOCUMENT not in STAGE_SEQUENCES[GenerationMode.JIRA_ONLY]
        assert Stage.CREATE_PARENT_TICKET not in STAGE_SEQUENCES[GenerationMode.FSD_ONLY]
        assert Stage.CREATE_SUBTASKS not in STAGE_SEQUENCES[GenerationMode.FSD_ONLY]


class TestProgressEvent:

    def test_sse_frame(self):
        event = ProgressEvent(
            type=EventType.STEP, step=2, stage=Stage.AI_ANALYSIS,
            status=StepStatus.COMPLETE, message="done",
        )
        frame = event.to_sse()
        assert frame.startswith("event: step\ndata: ")
        assert frame.endswith("\n\n")
        payload = json.loads(frame.split("data: ", 1)[1])
        assert payload == {
            "type": "step", "step": 2, "stage": "ai-analysis",
            "status": "complete", "message": "done",
        }


# ---------------------------------------------------------------------------
# Workflow
# ---------------------------------------------------------------------------


class TestWorkflowSuccess:

    @pytest.mark.asyncio
    async def test_both_mode_event_sequence(self, services):
        events = await collect(GenerationWorkflow(make_request(), services))

        assert events[0].type == EventType.WORKFLOW_START
        assert [s["stage"] for s in events[0].data["stages"]] == [
            s.value for s in STAGE_SEQUENCES[GenerationMode.BOTH]
        ]
        assert {s["status"] for s in events[0].data["stages"]} == {"pending"}

        expected = []
        for stage in STAGE_SEQUENCES[GenerationMode.BOTH]:
            expected += [(stage, StepStatus.IN_PROGRESS), (stage, StepStatus.COMPLETE)]
        assert steps(events) == expected

        step_numbers = [e.step for e in events if e.type == EventType.STEP]
        assert step_numbers == [1, 1, 2, 2, 3, 3, 4, 4, 5, 5, 6, 6, 7, 7]

    @pytest.mark.asyncio
    async def test_complete_payload(self, services):
        events = await collect(GenerationWorkflow(make_request(), services))
        data = terminal(events).data

        assert terminal(events).type == EventType.COMPLETE
        assert data["success"] is True
        assert data["parentKey"] == "DP-1"
        assert data["parentUrl"] == "https://site.test/browse/DP-1"
        assert data["subtaskKeys"] == ["DP-2", "DP-3", "DP-4"]
        assert data["documentUrl"] == "https://site.test/wiki/spaces/DOC/pages/55"
        assert data["overview"] == "Footer overview."
        assert data["aiAnalysis"] == {
            "subtasksCreated": 3, "requirementsGenerated": 2, "fieldsIdentified": 3,
        }

    @pytest.mark.asyncio
    async def test_subtask_events_in_order(self, services):
        events = await collect(GenerationWorkflow(make_request(), services))
        created = [e for e in events if e.type == EventType.SUBTASK_CREATED]
        assert [e.data["role"] for e in created] == ["FED", "BED", "QA"]
        assert [e.data["number"] for e in created] == [1, 2, 3]

        # Sub-task events come before the stage's complete step
        complete_index = next(
            i for i, e in enumerate(events)
            if e.stage == Stage.CREATE_SUBTASKS and e.status == StepStatus.COMPLETE
        )
        assert all(events.index(e) < complete_index for e in created)

    @pytest.mark.asyncio
    async def test_screenshots_and_document(self, services):
        events = await collect(GenerationWorkflow(make_request(), services))
        screenshot_step = next(
            e for e in events
            if e.stage == Stage.EXPORT_SCREENSHOTS and e.status == StepStatus.COMPLETE
        )
        assert screenshot_step.message == "2 screenshot(s) exported (desktop, mobile)"

        # One batched export for the main file
        services.figma.get_images.assert_awaited_once()
        assert services.figma.get_images.call_args.args == ("AbC123xyz", ["300:1", "400:1"])

        space, title, markup = services.confluence.create_page.call_args.args
        assert (space, title) == ("DOC", "FSD - Footer")
        assert "https://img.test/desktop.png" in markup
        assert "https://site.test/browse/DP-1" in markup
        assert "https://site.test/browse/DP-4" in markup
        assert markup.count("<em>Awaiting design</em>") == 1

    @pytest.mark.asyncio
    async def test_figma_fetch_uses_url_node(self, services):
        await collect(GenerationWorkflow(make_request(), services))
        services.figma.get_document.assert_awaited_once_with("AbC123xyz", "100:1")

    @pytest.mark.asyncio
    async def test_jira_only(self, services):
        events = await collect(
            GenerationWorkflow(make_request(generationMode="jira_only"), services)
        )
        assert terminal(events).type == EventType.COMPLETE
        assert Stage.CREATE_DOCUMENT not in {s for s, _ in steps(events)}
        services.confluence.create_page.assert_not_called()
        assert "documentUrl" not in terminal(events).data

    @pytest.mark.asyncio
    async def test_fsd_only(self, services):
        events = await collect(
            GenerationWorkflow(make_request(generationMode="fsd_only"), services)
        )
        assert terminal(events).type == EventType.COMPLETE
        services.jira.create_parent_task.assert_not_called()
        markup = services.confluence.create_page.call_args.args[2]
        assert "Jira Stories" not in markup
        assert "parentKey" not in terminal(events).data

    @pytest.mark.asyncio
    async def test_clients_closed(self, services):
        await collect(GenerationWorkflow(make_request(), services))
        for client in (services.figma, services.llm, services.jira, services.confluence):
            client.close.assert_awaited_once()


class TestScreenshotStage:

    @pytest.mark.asyncio
    async def test_failure_is_skipped(self, services):
        services.figma.get_images.side_effect = FigmaClientError(500, "render farm down")
        events = await collect(GenerationWorkflow(make_request(), services))

        step = next(
            e for e in events
            if e.stage == Stage.EXPORT_SCREENSHOTS and e.status != StepStatus.IN_PROGRESS
        )
        assert step.status == StepStatus.COMPLETE
        assert step.message == "Screenshots skipped (optional)"
        assert terminal(events).type == EventType.COMPLETE
        markup = services.confluence.create_page.call_args.args[2]
        assert markup.count("<em>Awaiting design</em>") == 3

    @pytest.mark.asyncio
    async def test_explicit_urls_fetched_separately(self, services):
        async def images(file_key, node_ids, fmt="png", scale=2):
            if file_key == "TabFile":
                return {"7:1": "https://img.test/tablet.png"}
            if file_key == "MobFile":
                raise FigmaClientError(403, "no access")
            return {"300:1": "https://img.test/desktop.png"}

        services.figma.get_images.side_effect = images
        request = make_request(
            tabletFigmaUrl="https://www.figma.com/design/TabFile/T?node-id=7-1",
            mobileFigmaUrl="https://www.figma.com/design/MobFile/M?node-id=8-1",
        )
        events = await collect(GenerationWorkflow(request, services))

        step = next(
            e for e in events
            if e.stage == Stage.EXPORT_SCREENSHOTS and e.status == StepStatus.COMPLETE
        )
        assert step.data["imageUrls"] == {
            "desktop": "https://img.test/desktop.png",
            "tablet": "https://img.test/tablet.png",
        }
        # Main-file batch only holds the desktop node when both URLs are explicit
        main_call = next(
            c for c in services.figma.get_images.call_args_list if c.args[0] == "AbC123xyz"
        )
        assert main_call.args[1] == ["300:1"]

    @pytest.mark.asyncio
    async def test_explicit_image_kept_when_main_batch_fails(self, services):
        async def images(file_key, node_ids, fmt="png", scale=2):
            if file_key == "TabFile":
                return {"7:1": "https://img.test/tablet.png"}
            raise FigmaClientError(500, "render farm down")

        services.figma.get_images.side_effect = images
        request = make_request(tabletFigmaUrl="https://www.figma.com/design/TabFile/T?node-id=7-1")
        events = await collect(GenerationWorkflow(request, services))

        step = next(
            e for e in events
            if e.stage == Stage.EXPORT_SCREENSHOTS and e.status == StepStatus.COMPLETE
        )
        assert step.message == "Screenshots skipped (optional)"
        markup = services.confluence.create_page.call_args.args[2]
        assert '<ri:url ri:value="https://img.test/tablet.png" />' in markup
        assert markup.count("<em>Awaiting design</em>") == 2


class TestPartialSubtasks:

    @pytest.mark.asyncio
    async def test_one_subtask_fails(self, services):
        async def sub_task(project, parent, summary, description):
            if summary.endswith("BED"):
                raise JiraClientError(400, "bad issue type")
            return {"key": f"DP-{summary[-2:]}"}

        services.jira.create_sub_task.side_effect = sub_task
        events = await collect(GenerationWorkflow(make_request(), services))

        errors = [e for e in events if e.type == EventType.SUBTASK_ERROR]
        assert len(errors) == 1
        assert errors[0].data["role"] == "BED"
        assert "bad issue type" in errors[0].data["error"]

        step = next(
            e for e in events
            if e.stage == Stage.CREATE_SUBTASKS and e.status == StepStatus.COMPLETE
        )
        assert step.data["subtaskKeys"] == ["DP-ED", "DP-QA"]
        assert terminal(events).type == EventType.COMPLETE
        assert terminal(events).data["aiAnalysis"]["subtasksCreated"] == 2


class TestRequiredStageFailures:

    @pytest.mark.asyncio
    async def test_ai_analysis_failure_stops_workflow(self, services):
        services.llm.complete_json.side_effect = LLMClientError(500, "upstream")
        events = await collect(GenerationWorkflow(make_request(), services))

        assert steps(events)[-1] == (Stage.AI_ANALYSIS, StepStatus.ERROR)
        final = terminal(events)
        assert final.type == EventType.ERROR
        assert final.stage == Stage.AI_ANALYSIS
        assert final.message == "OpenAI API error: 500 - upstream"
        services.jira.create_parent_task.assert_not_called()
        services.confluence.create_page.assert_not_called()
        services.figma.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_unparseable_reply(self, services):
        services.llm.complete_json.return_value = "not json"
        events = await collect(GenerationWorkflow(make_request(), services))
        assert terminal(events).message == "Failed to parse AI response. Please try again."

    @pytest.mark.asyncio
    async def test_parent_ticket_failure(self, services):
        services.jira.create_parent_task.side_effect = JiraClientError(401, "unauthorized")
        events = await collect(GenerationWorkflow(make_request(), services))

        assert terminal(events).type == EventType.ERROR
        assert terminal(events).stage == Stage.CREATE_PARENT_TICKET
        services.jira.create_sub_task.assert_not_called()
        services.confluence.create_page.assert_not_called()

    @pytest.mark.asyncio
    async def test_parent_reply_without_key(self, services):
        services.jira.create_parent_task.side_effect = None
        services.jira.create_parent_task.return_value = {"id": "10001"}
        events = await collect(GenerationWorkflow(make_request(), services))

        final = terminal(events)
        assert final.type == EventType.ERROR
        assert final.stage == Stage.CREATE_PARENT_TICKET
        assert "issue response has no key" in final.message
        services.jira.create_sub_task.assert_not_called()

    @pytest.mark.asyncio
    async def test_subtask_reply_without_key(self, services):
        async def sub_task(project, parent, summary, description):
            if summary.endswith("FED"):
                return {}
            return {"key": f"DP-{summary[-2:]}"}

        services.jira.create_sub_task.side_effect = sub_task
        events = await collect(GenerationWorkflow(make_request(), services))

        errors = [e for e in events if e.type == EventType.SUBTASK_ERROR]
        assert [e.data["role"] for e in errors] == ["FED"]
        assert terminal(events).type == EventType.COMPLETE
        assert terminal(events).data["aiAnalysis"]["subtasksCreated"] == 2

    @pytest.mark.asyncio
    async def test_document_failure(self, services):
        services.confluence.create_page.side_effect = RuntimeError("space archived")
        events = await collect(GenerationWorkflow(make_request(), services))
        assert terminal(events).type == EventType.ERROR
        assert terminal(events).message == "space archived"

    @pytest.mark.asyncio
    async def test_invalid_figma_url(self, services):
        events = await collect(
            GenerationWorkflow(make_request(figmaUrl="https://example.com/x"), services)
        )
        assert steps(events) == [
            (Stage.FETCH_DESIGN, StepStatus.IN_PROGRESS),
            (Stage.FETCH_DESIGN, StepStatus.ERROR),
        ]
        assert "could not extract file key" in terminal(events).message
        services.figma.get_document.assert_not_called()

    @pytest.mark.asyncio
    async def test_stage_timeout(self, services):
        async def slow(*args, **kwargs):
            await asyncio.sleep(5)

        services.figma.get_document.side_effect = slow
        with patch.object(settings, "STAGE_TIMEOUT_SECONDS", 0.05):
            events = await collect(GenerationWorkflow(make_request(), services))
        assert terminal(events).type == EventType.ERROR
        assert "fetch-design timed out" in terminal(events).message


class TestRequestRejection:

    @pytest.mark.asyncio
    async def test_missing_field_single_error(self, services):
        events = await collect(GenerationWorkflow(make_request(jiraProject=""), services))
        assert len(events) == 1
        assert events[0].type == EventType.ERROR
        assert events[0].message == "Missing required field: jiraProject"
        services.figma.get_document.assert_not_called()
        services.figma.close.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_invalid_mode(self, services):
        events = await collect(
            GenerationWorkflow(make_request(generationMode="everything"), services)
        )
        assert [e.type for e in events] == [EventType.ERROR]
        assert "Invalid generation mode" in events[0].message

    @pytest.mark.asyncio
    async def test_missing_openai_key(self):
        with patch.object(config, "OPENAI_API_KEY", ""):
            events = await collect(GenerationWorkflow(make_request()))
        assert [e.type for e in events] == [EventType.ERROR]
        assert events[0].message == "OpenAI API key not configured"

    @pytest.mark.asyncio
    async def test_missing_atlassian_url(self, services):
        with patch.object(config, "ATLASSIAN_BASE_URL", ""):
            events = await collect(
                GenerationWorkflow(make_request(atlassianUrl=None), services)
            )
        assert events[0].message == "Missing required field: atlassianUrl"
