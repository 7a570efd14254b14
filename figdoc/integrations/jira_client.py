"""Jira Cloud REST client (issue creation with auto-assignment)."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..errors import JiraClientError
from ..settings import ATLASSIAN_HTTP_TIMEOUT
from .atlassian import AtlassianClient, AtlassianCredentials, IdentityCache

logger = logging.getLogger("figdoc.integrations.jira")

PARENT_ISSUE_TYPE = "Story"
SUBTASK_ISSUE_TYPE = "Sub-task"


def adf_paragraph(text: str) -> Dict[str, Any]:
    """Wrap plain text in a single-paragraph Atlassian Document Format doc."""
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            },
        ],
    }


def issue_key(data: Any) -> str:
    """The ``key`` of a created issue; a reply without one is an error."""
    key = data.get("key") if isinstance(data, dict) else None
    if not key or not isinstance(key, str):
        raise JiraClientError(None, f"issue response has no key: {str(data)[:200]}")
    return key


class JiraClient(AtlassianClient):
    """Creates Jira issues assigned to the calling user.

    Args:
        credentials: Site URL plus email/API-token pair.
        identity_cache: Request-scoped cache for the current account id.
            A private cache is created when omitted.
    """

    error_class = JiraClientError

    def __init__(
        self,
        credentials: AtlassianCredentials,
        identity_cache: Optional[IdentityCache] = None,
        timeout: float = ATLASSIAN_HTTP_TIMEOUT,
    ):
        super().__init__(credentials, timeout=timeout)
        self.identity_cache = identity_cache or IdentityCache()

    def issue_url(self, key: str) -> str:
        return f"{self.base_url}/browse/{key}"

    async def _fetch_account_id(self) -> Optional[str]:
        try:
            data = await self._request("GET", "/rest/api/3/myself")
        except JiraClientError as e:
            logger.warning(f"Could not resolve current Jira user, issues stay unassigned: {e}")
            return None
        return data.get("accountId")

    async def get_current_account_id(self) -> Optional[str]:
        """Account id of the credential owner, looked up at most once per cache."""
        return await self.identity_cache.get_or_load(
            self.credentials.email, self._fetch_account_id,
        )

    async def create_issue(
        self,
        project_key: str,
        issue_type: str,
        summary: str,
        description: str,
        parent_key: Optional[str] = None,
    ) -> Dict[str, Any]:
        """POST /rest/api/3/issue and return ``{"id", "key", ...}``."""
        fields: Dict[str, Any] = {
            "project": {"key": project_key},
            "summary": summary,
            "description": adf_paragraph(description),
            "issuetype": {"name": issue_type},
        }
        if parent_key:
            fields["parent"] = {"key": parent_key}

        account_id = await self.get_current_account_id()
        if account_id:
            fields["assignee"] = {"accountId": account_id}

        data = await self._request("POST", "/rest/api/3/issue", json_body={"fields": fields})
        logger.info(f"create_issue: {issue_type} {issue_key(data)} in {project_key}")
        return data

    async def create_parent_task(
        self,
        project_key: str,
        summary: str,
        description: str,
        issue_type: str = PARENT_ISSUE_TYPE,
    ) -> Dict[str, Any]:
        return await self.create_issue(project_key, issue_type, summary, description)

    async def create_sub_task(
        self,
        project_key: str,
        parent_key: str,
        summary: str,
        description: str,
    ) -> Dict[str, Any]:
        return await self.create_issue(
            project_key, SUBTASK_ISSUE_TYPE, summary, description, parent_key=parent_key,
        )
