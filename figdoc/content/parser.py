"""Parse the model's JSON reply into an ``AIContentBundle``.

This is the only place the reply's shape is checked. Every top-level key is
defaulted when absent or of the wrong type, so callers always receive a
fully-populated bundle. Nested records are only shallowly defaulted.
"""

from __future__ import annotations

import json
import logging
from typing import Any, List

from ..errors import ResponseShapeError
from .models import AIContentBundle, FieldRequirement, StoryDefinition

logger = logging.getLogger("figdoc.content.parser")

_TRUE_STRINGS = {"true", "yes", "required", "y", "1"}


def _as_str(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, bool)):
        return str(value)
    return ""


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _str_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [s for s in (_as_str(v) for v in value) if s]


def _stories(value: Any) -> List[StoryDefinition]:
    if not isinstance(value, list):
        return []
    stories = []
    for entry in value:
        if isinstance(entry, str):
            stories.append(StoryDefinition(title=entry))
        elif isinstance(entry, dict):
            stories.append(StoryDefinition(
                title=_as_str(entry.get("title")),
                acceptance_criteria=_str_list(entry.get("acceptanceCriteria")),
            ))
        else:
            logger.warning("parse_response: dropping story entry of type %s", type(entry).__name__)
    return stories


def _field_requirements(value: Any) -> List[FieldRequirement]:
    if not isinstance(value, list):
        return []
    fields = []
    for entry in value:
        if not isinstance(entry, dict):
            logger.warning("parse_response: dropping field entry of type %s", type(entry).__name__)
            continue
        fields.append(FieldRequirement(
            element=_as_str(entry.get("element")),
            field_type=_as_str(entry.get("fieldType")),
            required=_as_bool(entry.get("required", False)),
            data_source=_as_str(entry.get("dataSource")),
            display=_as_str(entry.get("display")),
            notes=_as_str(entry.get("notes")),
        ))
    return fields


def parse_response(raw: str, component_name: str = "") -> AIContentBundle:
    """Parse the analysis reply.

    Raises:
        ResponseShapeError: if ``raw`` is not valid JSON or not a JSON object.
    """
    try:
        parsed = json.loads(raw)
    except (json.JSONDecodeError, TypeError) as e:
        logger.error("parse_response: invalid JSON, raw[:500]: %s", (raw or "")[:500])
        raise ResponseShapeError("Failed to parse AI response. Please try again.") from e

    if not isinstance(parsed, dict):
        raise ResponseShapeError(
            f"AI response must be a JSON object, got {type(parsed).__name__}"
        )

    description = parsed.get("description")
    if not isinstance(description, str) or not description.strip():
        description = f"{component_name} component" if component_name else ""

    return AIContentBundle(
        description=description,
        stories=_stories(parsed.get("stories")),
        end_user_requirements=_str_list(parsed.get("endUserRequirements")),
        content_author_requirements=_str_list(parsed.get("contentAuthorRequirements")),
        design_notes=_str_list(parsed.get("designNotes")),
        field_requirements=_field_requirements(parsed.get("fieldRequirements")),
    )
