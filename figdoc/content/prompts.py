"""Prompt templates for the AI analysis stages.

ANALYSIS_PROMPT asks the model for the six-key JSON document that feeds the
Jira ticket plan and the Confluence FSD. OVERVIEW_PROMPT asks for a short
plain-text overview used as the parent ticket narrative.
"""

from __future__ import annotations

from ..design.models import ExtractedComponent
from .summary import format_component

ANALYSIS_PROMPT = """\
You are a senior Sitecore architect writing FSD (functional specification) \
documentation. Analyze this Figma component in depth.

COMPONENT DATA:
{component_data}

FIGMA URL: {figma_url}

=== ANALYSIS RULES ===

1. FIELD TYPE SELECTION:
   - Title/Heading (short, one line) = "Single-Line Text"
   - Label/Button text (short) = "Single-Line Text"
   - Short description (1-2 sentences) = "Multi-Line Text"
   - Long description/paragraph/content = "Rich Text"
   - Link (text + URL together) = "General Link" (ONE field, NOT separate text + url)
   - Image/Photo/Banner = "Image"
   - Logo = "Image" (plus a separate "General Link" only if it is clickable)
   - List of items/links = "Multilist" pointing to a child template
   - Dropdown selection = "Droptree"

2. NESTED STRUCTURE:
   Example for a Footer:
   - Footer template: Logo (Image), Logo Link (General Link), \
Footer Columns (Multilist -> Footer Column)
   - Footer Column template: Column Title (Single-Line Text), \
Column Links (Multilist -> Footer Link)
   - Footer Link template: Link (General Link), one field holding both text and URL

3. REQUIREMENTS:
   - 6-10 end user requirements, each naming SPECIFIC elements from the design
   - 6-10 content author requirements, each about SPECIFIC editable fields
   - No generic statements such as "I can view the component"

=== RETURN THIS JSON ===
{{
  "description": "2-3 sentences describing this specific component",
  "stories": [
    {{"title": "As a user, I can [action on a specific element]", \
"acceptanceCriteria": ["AC 1", "AC 2", "AC 3"]}}
  ],
  "endUserRequirements": [
    "I can see the [element] displaying [content]",
    "I can click [link/button] to navigate to [destination]"
  ],
  "contentAuthorRequirements": [
    "I can update the [field] text",
    "I can add/remove/reorder [list items]"
  ],
  "designNotes": [
    "[Component] spans full width on desktop",
    "On mobile, [elements] stack vertically"
  ],
  "fieldRequirements": [
    {{
      "element": "Logo",
      "fieldType": "Image",
      "required": true,
      "dataSource": "Content Managed",
      "display": "Top left aligned",
      "notes": "Recommended size: 150x50px"
    }},
    {{
      "element": "Column Links",
      "fieldType": "Multilist",
      "required": true,
      "dataSource": "Child Link Items",
      "display": "Vertical list under title",
      "notes": "Each link item has a General Link field"
    }}
  ]
}}

=== IMPORTANT ===
- Return exactly these six top-level keys and nothing else
- Cover every element listed in the component data
- Use Multilist for repeating items, pointing to child templates
- General Link is ONE field for both link text and URL

Return ONLY valid JSON."""


OVERVIEW_PROMPT = """\
Write a brief Jira description (2-3 paragraphs) for implementing this UI component:

Component: {component_name}
Type: {component_type}
Dimensions: {width}x{height}px
Child elements: {child_count}

Figma: {figma_url}

Cover what it is, its key functionality and the main elements to implement. \
Keep it concise and professional."""


def build_prompt(component: ExtractedComponent, figma_url: str = "") -> str:
    """Analysis prompt for ``component``. Same input, same text."""
    return ANALYSIS_PROMPT.format(
        component_data=format_component(component),
        figma_url=figma_url,
    )


def build_overview_prompt(
    component_name: str,
    component: ExtractedComponent,
    figma_url: str = "",
) -> str:
    return OVERVIEW_PROMPT.format(
        component_name=component_name,
        component_type=component.type,
        width=component.dimensions.width,
        height=component.dimensions.height,
        child_count=len(component.children),
        figma_url=figma_url,
    )
