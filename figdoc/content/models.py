"""AI content bundle returned by the analysis stage."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class StoryDefinition:
    title: str
    acceptance_criteria: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {"title": self.title, "acceptanceCriteria": list(self.acceptance_criteria)}


@dataclass
class FieldRequirement:
    """One editable content field of a component.

    ``field_type`` and ``data_source`` are free text as produced by the model
    (e.g. "Single-Line Text", "Content Managed").
    """

    element: str = ""
    field_type: str = ""
    required: bool = False
    data_source: str = ""
    display: str = ""
    notes: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "element": self.element,
            "fieldType": self.field_type,
            "required": self.required,
            "dataSource": self.data_source,
            "display": self.display,
            "notes": self.notes,
        }


@dataclass
class AIContentBundle:
    description: str = ""
    stories: List[StoryDefinition] = field(default_factory=list)
    end_user_requirements: List[str] = field(default_factory=list)
    content_author_requirements: List[str] = field(default_factory=list)
    design_notes: List[str] = field(default_factory=list)
    field_requirements: List[FieldRequirement] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "description": self.description,
            "stories": [s.to_dict() for s in self.stories],
            "endUserRequirements": list(self.end_user_requirements),
            "contentAuthorRequirements": list(self.content_author_requirements),
            "designNotes": list(self.design_notes),
            "fieldRequirements": [f.to_dict() for f in self.field_requirements],
        }
