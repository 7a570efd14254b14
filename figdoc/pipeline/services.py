"""External collaborators used by one generation request."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional

from ..integrations.atlassian import AtlassianCredentials, IdentityCache, validate_site_url
from ..integrations.confluence_client import ConfluenceClient
from ..integrations.figma_client import FigmaClient
from ..integrations.jira_client import JiraClient
from ..integrations.llm_client import LLMClient
from .request import GenerateRequest

logger = logging.getLogger("figdoc.pipeline.services")


@dataclass
class WorkflowServices:
    figma: FigmaClient
    llm: LLMClient
    jira: Optional[JiraClient] = None
    confluence: Optional[ConfluenceClient] = None

    @classmethod
    def from_request(cls, request: GenerateRequest) -> "WorkflowServices":
        """Build the clients a validated request needs.

        Jira and Confluence clients are only created for the modes that use
        them. All Jira calls of the request share one identity cache.

        Raises:
            InputValidationError: the Atlassian site URL is not acceptable.
            ConfigurationError: the OpenAI key is not configured.
        """
        mode = request.mode
        base_url = request.resolved_atlassian_url
        validate_site_url(base_url)
        credentials = AtlassianCredentials(
            base_url=base_url,
            email=request.atlassian_email or "",
            token=request.atlassian_token or "",
        )

        llm = LLMClient()
        services = cls(figma=FigmaClient(request.resolved_figma_token), llm=llm)
        if mode.creates_tickets:
            services.jira = JiraClient(credentials, identity_cache=IdentityCache())
        if mode.creates_document:
            services.confluence = ConfluenceClient(credentials)
        return services

    async def close(self) -> None:
        for client in (self.figma, self.llm, self.jira, self.confluence):
            if client is None:
                continue
            try:
                await client.close()
            except Exception as e:
                logger.warning(f"close: {type(client).__name__} failed to close: {e}")
