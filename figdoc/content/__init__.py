"""Prompt construction, LLM calls and reply parsing for AI content."""

from .generator import generate_content, generate_overview
from .models import AIContentBundle, FieldRequirement, StoryDefinition
from .parser import parse_response
from .prompts import build_overview_prompt, build_prompt
from .summary import ComponentSummary, summarize_component

__all__ = [
    "AIContentBundle",
    "ComponentSummary",
    "FieldRequirement",
    "StoryDefinition",
    "build_overview_prompt",
    "build_prompt",
    "generate_content",
    "generate_overview",
    "parse_response",
    "summarize_component",
]
