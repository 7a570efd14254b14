"""Jira ticket plan (parent + FED/BED/QA sub-tasks) and its creation.

``to_ticket_plan`` is a pure mapping from the AI content bundle to ticket
texts. ``create_subtasks`` and ``create_component_with_subtasks`` perform
the Jira calls with per-sub-task failure isolation.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from ..content.models import AIContentBundle
from ..errors import JiraClientError
from ..integrations.jira_client import JiraClient, issue_key

logger = logging.getLogger("figdoc.documents.tickets")

# (role key, label used in summaries and logs)
SUBTASK_ROLES = (("fed", "FED"), ("bed", "BED"), ("qa", "QA"))


@dataclass
class TicketPlan:
    parent_summary: str
    parent_description: str
    fed_description: str
    bed_description: str
    qa_description: str

    def description_for(self, role: str) -> str:
        return getattr(self, f"{role}_description")

    def with_overrides(self, overrides: Mapping[str, Optional[str]]) -> "TicketPlan":
        """Copy with non-empty ``parent``/``fed``/``bed``/``qa`` texts replaced."""
        values = asdict(self)
        for role in ("parent", "fed", "bed", "qa"):
            text = overrides.get(role)
            if text:
                values[f"{role}_description"] = text
        return TicketPlan(**values)


@dataclass
class TicketRef:
    key: str
    url: str
    summary: str


@dataclass
class SubtaskOutcome:
    role: str
    label: str
    summary: str
    ticket: Optional[TicketRef] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.ticket is not None

    def log_entry(self) -> str:
        if self.ticket is not None:
            return f"{self.label}: {self.ticket.key} - {self.summary}"
        return f"{self.label}: {self.summary} - {self.error}"


@dataclass
class TicketSet:
    parent: TicketRef = field(default_factory=lambda: TicketRef("", "", ""))
    fed: Optional[TicketRef] = None
    bed: Optional[TicketRef] = None
    qa: Optional[TicketRef] = None
    completed_tasks: List[str] = field(default_factory=list)
    failed_tasks: List[str] = field(default_factory=list)

    @property
    def subtasks(self) -> Dict[str, TicketRef]:
        return {
            role: ref
            for role, ref in (("fed", self.fed), ("bed", self.bed), ("qa", self.qa))
            if ref is not None
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "parent": asdict(self.parent),
            "subtasks": {role: asdict(ref) for role, ref in self.subtasks.items()},
            "completedTasks": list(self.completed_tasks),
            "failedTasks": list(self.failed_tasks),
        }


# ---------------------------------------------------------------------------
# Plans
# ---------------------------------------------------------------------------


def to_ticket_plan(bundle: AIContentBundle, component_name: str, figma_url: str) -> TicketPlan:
    """Four-line ticket descriptions derived from the AI description."""
    description = bundle.description
    return TicketPlan(
        parent_summary=component_name,
        parent_description=(
            f"{description}\n"
            f"Figma: {figma_url}\n"
            "Includes: FED, BED, QA sub-tasks\n"
            "Refer to FSD for detailed requirements."
        ),
        fed_description=(
            f"Frontend implementation of {component_name}.\n"
            f"{description}\n"
            f"Figma: {figma_url}\n"
            "Implement responsive UI, accessibility (WCAG 2.1), and component tests."
        ),
        bed_description=(
            f"Backend implementation for {component_name}.\n"
            f"{description}\n"
            "Create Sitecore templates, fields, and data sources.\n"
            "Implement content resolver and API integration."
        ),
        qa_description=(
            f"QA testing for {component_name}.\n"
            f"{description}\n"
            "Test functional requirements, cross-browser, responsive, and accessibility.\n"
            "Verify against FSD acceptance criteria."
        ),
    )


def default_ticket_plan(component_name: str) -> TicketPlan:
    """Generic descriptions for ticket creation without AI analysis."""
    return TicketPlan(
        parent_summary=component_name,
        parent_description=(
            f"Implementation of {component_name} component including frontend, "
            "backend, and QA tasks."
        ),
        fed_description=(
            f"Frontend Development Tasks for {component_name}:\n\n"
            "- Implement UI components based on design specifications\n"
            "- Ensure responsive design across all breakpoints\n"
            "- Implement accessibility standards (WCAG 2.1)\n"
            "- Write unit tests for components\n"
            "- Integrate with backend APIs\n"
            "- Handle loading states and error handling\n"
            "- Implement proper state management"
        ),
        bed_description=(
            f"Backend Development Tasks for {component_name}:\n\n"
            "- Design and implement API endpoints\n"
            "- Create database schema/models if needed\n"
            "- Implement business logic and validations\n"
            "- Write API documentation\n"
            "- Implement error handling and logging\n"
            "- Write unit and integration tests\n"
            "- Ensure security best practices"
        ),
        qa_description=(
            f"QA Tasks for {component_name}:\n\n"
            "- Create test cases based on acceptance criteria\n"
            "- Perform functional testing\n"
            "- Perform cross-browser testing\n"
            "- Perform responsive/mobile testing\n"
            "- Perform accessibility testing\n"
            "- Report and track bugs\n"
            "- Verify bug fixes\n"
            "- Sign off on feature completion"
        ),
    )


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


async def create_subtasks(
    jira: JiraClient,
    project_key: str,
    parent_key: str,
    component_name: str,
    plan: TicketPlan,
) -> List[SubtaskOutcome]:
    """Create the FED, BED and QA sub-tasks concurrently.

    Each call succeeds or fails on its own; outcomes are returned in
    FED, BED, QA order whatever order the calls finished in.
    """
    outcomes = [
        SubtaskOutcome(role=role, label=label, summary=f"{component_name} - {label}")
        for role, label in SUBTASK_ROLES
    ]
    results = await asyncio.gather(
        *(
            jira.create_sub_task(
                project_key, parent_key, o.summary, plan.description_for(o.role),
            )
            for o in outcomes
        ),
        return_exceptions=True,
    )
    for outcome, result in zip(outcomes, results):
        if isinstance(result, BaseException) and not isinstance(result, Exception):
            raise result
        if not isinstance(result, Exception):
            try:
                key = issue_key(result)
            except JiraClientError as e:
                result = e
        if isinstance(result, Exception):
            outcome.error = str(result) or type(result).__name__
            logger.warning(f"create_subtasks: {outcome.log_entry()}")
            continue
        outcome.ticket = TicketRef(key=key, url=jira.issue_url(key), summary=outcome.summary)
    return outcomes


async def create_component_with_subtasks(
    jira: JiraClient,
    project_key: str,
    component_name: str,
    plan: Optional[TicketPlan] = None,
) -> TicketSet:
    """Create the parent ticket, then its three sub-tasks.

    Sub-tasks are only attempted when the parent was created; a parent
    failure yields a set with a single failure entry.
    """
    plan = plan or default_ticket_plan(component_name)
    result = TicketSet()

    try:
        parent = await jira.create_parent_task(
            project_key, plan.parent_summary, plan.parent_description,
        )
        key = issue_key(parent)
    except Exception as e:
        result.failed_tasks.append(f"Parent: {plan.parent_summary} - {e}")
        logger.warning(f"create_component_with_subtasks: parent failed: {e}")
        return result

    result.parent = TicketRef(key=key, url=jira.issue_url(key), summary=plan.parent_summary)
    result.completed_tasks.append(f"Parent: {key} - {plan.parent_summary}")

    for outcome in await create_subtasks(jira, project_key, key, component_name, plan):
        if outcome.ok:
            setattr(result, outcome.role, outcome.ticket)
            result.completed_tasks.append(outcome.log_entry())
        else:
            result.failed_tasks.append(outcome.log_entry())
    return result
