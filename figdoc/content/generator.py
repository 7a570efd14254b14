"""LLM calls for the ai-analysis and generate-description stages."""

from __future__ import annotations

import logging

from ..design.models import ExtractedComponent
from ..integrations.llm_client import LLMClient
from .models import AIContentBundle
from .parser import parse_response
from .prompts import build_overview_prompt, build_prompt

logger = logging.getLogger("figdoc.content.generator")


async def generate_content(
    llm: LLMClient,
    component: ExtractedComponent,
    figma_url: str,
) -> AIContentBundle:
    """Analyze ``component`` and return the parsed content bundle.

    Raises:
        LLMClientError: the chat completion failed or returned nothing.
        ResponseShapeError: the reply was not a JSON object.
    """
    prompt = build_prompt(component, figma_url)
    logger.info(
        "generate_content: component=%s, prompt_chars=%d", component.name, len(prompt),
    )
    raw = await llm.complete_json(prompt)
    bundle = parse_response(raw, component.name)
    logger.info(
        "generate_content: stories=%d, requirements=%d, fields=%d",
        len(bundle.stories),
        len(bundle.end_user_requirements),
        len(bundle.field_requirements),
    )
    return bundle


async def generate_overview(
    llm: LLMClient,
    component_name: str,
    component: ExtractedComponent,
    figma_url: str,
) -> str:
    """Short narrative for the parent ticket, with a fixed fallback."""
    prompt = build_overview_prompt(component_name, component, figma_url)
    text = await llm.complete_text(prompt)
    if not text:
        return f"Implementation of {component_name} component. Figma: {figma_url}"
    return text.strip()
