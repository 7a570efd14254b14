"""Error taxonomy shared by the integrations and the generation workflow."""

from __future__ import annotations

from typing import Optional


class FigdocError(Exception):
    """Base class for all errors raised by the documentation pipeline."""


class InputValidationError(FigdocError):
    """A required request field is absent or malformed."""


class ConfigurationError(FigdocError):
    """A server-side credential or setting needed by the pipeline is unset."""


class ResponseShapeError(FigdocError):
    """The language model reply could not be read as a JSON object."""


class ServiceError(FigdocError):
    """A call to an external service failed.

    ``status_code`` is ``None`` for transport failures (timeouts, refused
    connections) where no HTTP response was received.
    """

    service = "Service"

    def __init__(self, status_code: Optional[int], body: str = ""):
        self.status_code = status_code
        self.body = body
        if status_code is None:
            message = f"{self.service} API error: {body}"
        else:
            message = f"{self.service} API error: {status_code} - {body}"
        super().__init__(message)


class FigmaClientError(ServiceError):
    service = "Figma"


class JiraClientError(ServiceError):
    service = "Jira"


class ConfluenceClientError(ServiceError):
    service = "Confluence"


class LLMClientError(ServiceError):
    service = "OpenAI"


class StageTimeoutError(FigdocError):
    """A workflow stage did not finish within STAGE_TIMEOUT_SECONDS."""
