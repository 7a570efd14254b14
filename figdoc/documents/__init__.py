"""Document mappers: Jira ticket plans and Confluence FSD markup."""

from .fsd import create_fsd_page, escape_markup, extract_jira_key, to_fsd_markup
from .tickets import (
    TicketPlan,
    TicketRef,
    TicketSet,
    create_component_with_subtasks,
    create_subtasks,
    default_ticket_plan,
    to_ticket_plan,
)

__all__ = [
    "TicketPlan",
    "TicketRef",
    "TicketSet",
    "create_component_with_subtasks",
    "create_fsd_page",
    "create_subtasks",
    "default_ticket_plan",
    "escape_markup",
    "extract_jira_key",
    "to_fsd_markup",
    "to_ticket_plan",
]
