"""Generation request schema and per-mode validation."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .. import config
from ..errors import InputValidationError


class GenerationMode(str, Enum):
    BOTH = "both"
    JIRA_ONLY = "jira_only"
    FSD_ONLY = "fsd_only"

    @property
    def creates_tickets(self) -> bool:
        return self in (GenerationMode.BOTH, GenerationMode.JIRA_ONLY)

    @property
    def creates_document(self) -> bool:
        return self in (GenerationMode.BOTH, GenerationMode.FSD_ONLY)


class GenerateRequest(BaseModel):
    """Body of POST /api/generate.

    Accepts camelCase keys (``figmaUrl``) as sent by the browser client as
    well as snake_case field names. Every field is optional at parse time;
    ``validate_for_mode`` enforces what the selected mode needs so that a
    missing field is reported on the event stream rather than as a 422.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    figma_url: Optional[str] = None
    figma_token: Optional[str] = None
    atlassian_email: Optional[str] = None
    atlassian_token: Optional[str] = None
    atlassian_url: Optional[str] = Field(
        None, description="Atlassian Cloud site, e.g. https://company.atlassian.net",
    )
    jira_project: Optional[str] = None
    confluence_space: Optional[str] = None
    confluence_parent_page: Optional[str] = None
    component_name: Optional[str] = None
    generation_mode: Optional[str] = Field(
        None, description="both | jira_only | fsd_only (default both)",
    )
    tablet_figma_url: Optional[str] = None
    mobile_figma_url: Optional[str] = None

    @property
    def mode(self) -> GenerationMode:
        try:
            return GenerationMode(self.generation_mode or GenerationMode.BOTH.value)
        except ValueError:
            raise InputValidationError(
                f"Invalid generation mode: {self.generation_mode}"
            ) from None

    @property
    def resolved_figma_token(self) -> str:
        return self.figma_token or config.FIGMA_TOKEN

    @property
    def resolved_atlassian_url(self) -> str:
        return (self.atlassian_url or config.ATLASSIAN_BASE_URL).rstrip("/")

    def required_fields(self) -> List[Tuple[str, Optional[str]]]:
        """(camelCase name, value) pairs the selected mode needs."""
        mode = self.mode
        fields = [
            ("figmaUrl", self.figma_url),
            ("figmaToken", self.resolved_figma_token),
            ("atlassianEmail", self.atlassian_email),
            ("atlassianToken", self.atlassian_token),
            ("componentName", self.component_name),
        ]
        if mode.creates_tickets:
            fields.append(("jiraProject", self.jira_project))
        if mode.creates_document:
            fields.append(("confluenceSpace", self.confluence_space))
        fields.append(("atlassianUrl", self.resolved_atlassian_url))
        return fields

    def validate_for_mode(self) -> GenerationMode:
        """Raise ``InputValidationError`` for the first missing field."""
        for name, value in self.required_fields():
            if not value or not str(value).strip():
                raise InputValidationError(f"Missing required field: {name}")
        return self.mode
