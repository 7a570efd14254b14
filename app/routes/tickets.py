"""Ticket-only endpoint: parent + FED/BED/QA sub-tasks without AI analysis."""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel

from figdoc import config
from figdoc.documents.tickets import create_component_with_subtasks, default_ticket_plan
from figdoc.errors import InputValidationError
from figdoc.integrations.atlassian import AtlassianCredentials, IdentityCache, validate_site_url
from figdoc.integrations.jira_client import JiraClient

logger = logging.getLogger("figdoc.api.tickets")

router = APIRouter(prefix="/api", tags=["tickets"])

REQUIRED_FIELDS = ("atlassianEmail", "atlassianToken", "jiraProject", "componentName")


# --- Schemas ---


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class TicketDescriptions(_CamelModel):
    """Per-role description overrides; empty values keep the defaults."""

    parent: Optional[str] = None
    fed: Optional[str] = None
    bed: Optional[str] = None
    qa: Optional[str] = None


class CreateTicketsRequest(_CamelModel):
    """Request for POST /api/create-tickets."""

    atlassian_email: Optional[str] = None
    atlassian_token: Optional[str] = None
    atlassian_url: Optional[str] = None
    jira_project: Optional[str] = None
    component_name: Optional[str] = None
    descriptions: Optional[TicketDescriptions] = None


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


# --- Endpoints ---


@router.post("/create-tickets")
async def create_tickets(payload: CreateTicketsRequest):
    """Create a parent ticket with FED/BED/QA sub-tasks.

    Jira failures are reported per ticket in ``result.failedTasks``; only
    request problems and unexpected errors change the status code.
    """
    values = (
        payload.atlassian_email, payload.atlassian_token,
        payload.jira_project, payload.component_name,
    )
    if not all(v and v.strip() for v in values):
        return _error(400, f"Missing required fields: {', '.join(REQUIRED_FIELDS)}")

    base_url = (payload.atlassian_url or config.ATLASSIAN_BASE_URL).rstrip("/")
    if not base_url:
        return _error(400, "Missing required field: atlassianUrl")

    jira = None
    try:
        validate_site_url(base_url)
        jira = JiraClient(
            AtlassianCredentials(base_url, payload.atlassian_email, payload.atlassian_token),
            identity_cache=IdentityCache(),
        )
        plan = default_ticket_plan(payload.component_name)
        if payload.descriptions is not None:
            plan = plan.with_overrides(payload.descriptions.model_dump())
        result = await create_component_with_subtasks(
            jira, payload.jira_project, payload.component_name, plan,
        )
    except InputValidationError as e:
        return _error(400, str(e))
    except Exception as e:
        logger.exception("create-tickets failed")
        return _error(500, str(e) or "Unknown error occurred")
    finally:
        if jira is not None:
            await jira.close()

    logger.info(
        f"create-tickets: {payload.component_name!r} completed={len(result.completed_tasks)}, "
        f"failed={len(result.failed_tasks)}"
    )
    return {"success": True, "result": result.to_dict()}
