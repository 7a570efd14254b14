"""Confluence FSD page markup (storage format) and page creation."""

from __future__ import annotations

import logging
import re
from typing import Iterable, List, Mapping, Optional, Sequence

from ..content.models import AIContentBundle, FieldRequirement
from ..integrations.confluence_client import ConfluenceClient

logger = logging.getLogger("figdoc.documents.fsd")

AWAITING_DESIGN = "<p><em>Awaiting design</em></p>"
LANGUAGE_NOTE = "EN (and most of all language versions)"

# (breakpoint, column header, embed height)
IMAGE_COLUMNS = (
    ("desktop", "Desktop", 250),
    ("tablet", "Tablet", 350),
    ("mobile", "Mobile", 400),
)

_JIRA_KEY_RE = re.compile(r"browse/([A-Z]+-\d+)")


def escape_markup(text: Optional[str]) -> str:
    """Escape ``&``, ``<``, ``>`` and ``"`` for storage-format markup."""
    if not text:
        return ""
    return (
        text.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def extract_jira_key(url: Optional[str]) -> str:
    """Issue key from a ``.../browse/KEY-1`` URL, or the URL itself."""
    if not url:
        return ""
    match = _JIRA_KEY_RE.search(url)
    return match.group(1) if match else url


def _status_macro(title: str, colour: str) -> str:
    return (
        '<ac:structured-macro ac:name="status" ac:schema-version="1">'
        f'<ac:parameter ac:name="title">{title}</ac:parameter>'
        f'<ac:parameter ac:name="colour">{colour}</ac:parameter>'
        "</ac:structured-macro>"
    )


def _link(url: str, label: str) -> str:
    return f'<a href="{escape_markup(url)}">{escape_markup(label)}</a>'


def _list_items(items: Iterable[str]) -> str:
    return "\n".join(f"<li><p>{escape_markup(item)}</p></li>" for item in items)


# ---------------------------------------------------------------------------
# Sections
# ---------------------------------------------------------------------------


def _header_section(
    component_name: str,
    figma_url: str,
    jira_epic_url: str,
    story_urls: Sequence[str],
) -> str:
    jira_row = ""
    if jira_epic_url:
        links = [_link(jira_epic_url, f"{extract_jira_key(jira_epic_url)}: {component_name}")]
        links.extend(_link(url, extract_jira_key(url)) for url in story_urls if url)
        jira_row = (
            "<tr>\n"
            "<td><p><strong>Jira Stories</strong></p></td>\n"
            f"<td><p>{'<br />'.join(links)}</p></td>\n"
            "</tr>\n"
        )
    return (
        '<table data-layout="default">\n'
        "<tbody>\n"
        "<tr>\n"
        "<td><p><strong>Document Status</strong></p></td>\n"
        f"<td><p>{_status_macro('DRAFT', 'Blue')}</p></td>\n"
        "</tr>\n"
        "<tr>\n"
        "<td><p><strong>Tech Review</strong></p></td>\n"
        f"<td><p>{_status_macro('PENDING', 'Yellow')}</p></td>\n"
        "</tr>\n"
        f"{jira_row}"
        "<tr>\n"
        "<td><p><strong>Figma Reference</strong></p></td>\n"
        f"<td><p>{_link(figma_url, 'Figma')}</p></td>\n"
        "</tr>\n"
        "</tbody>\n"
        "</table>"
    )


def _description_section(bundle: AIContentBundle) -> str:
    description_items = _list_items([
        "Component is global and can be viewed on all site pages",
        bundle.description,
    ])
    return (
        '<table data-layout="default">\n'
        "<tbody>\n"
        "<tr>\n"
        "<td>\n"
        "<p><strong>Description:</strong></p>\n"
        f"<ul>\n{description_items}\n</ul>\n"
        "</td>\n"
        "<td>\n"
        "<p><strong><u>Design Notes:</u></strong></p>\n"
        f"<ul>\n{_list_items(bundle.design_notes)}\n</ul>\n"
        "</td>\n"
        "</tr>\n"
        "</tbody>\n"
        "</table>"
    )


def _requirements_section(bundle: AIContentBundle) -> str:
    return (
        "<h2>Functional requirements/ Acceptance criteria:</h2>\n"
        "<p><strong><u>As an end user,</u></strong></p>\n"
        f"<ul>\n{_list_items(bundle.end_user_requirements)}\n</ul>\n"
        "\n"
        "<p><strong><u>As a content author,</u></strong></p>\n"
        f"<ul>\n{_list_items(bundle.content_author_requirements)}\n</ul>"
    )


def _field_row(index: int, component_name: str, req: FieldRequirement) -> str:
    cells = [
        component_name if index == 0 else "",
        req.element,
        req.field_type,
    ]
    escaped = [escape_markup(c) for c in cells]
    escaped.append("Required" if req.required else "Optional")
    escaped.extend(escape_markup(c) for c in (req.data_source, req.display, req.notes))
    body = "\n".join(f"<td><p>{cell}</p></td>" for cell in escaped)
    return f"<tr>\n{body}\n</tr>"


def _fields_section(bundle: AIContentBundle, component_name: str) -> str:
    headers = (
        "Component Distribution", "Element", "Field Type", "Field Note",
        "Data Source", "Display", "Notes",
    )
    header_cells = "\n".join(f"<th><p>{h}</p></th>" for h in headers)
    rows = "\n".join(
        _field_row(i, component_name, req)
        for i, req in enumerate(bundle.field_requirements)
    )
    return (
        "<h2>Field Level Requirements:</h2>\n"
        '<table data-layout="full-width">\n'
        f"<thead>\n<tr>\n{header_cells}\n</tr>\n</thead>\n"
        f"<tbody>\n{rows}\n</tbody>\n"
        "</table>"
    )


def _image_cell(url: Optional[str], height: int) -> str:
    if not url:
        return f"<td>{AWAITING_DESIGN}</td>"
    return (
        f'<td><p><ac:image ac:height="{height}">'
        f'<ri:url ri:value="{escape_markup(url)}" />'
        "</ac:image></p></td>"
    )


def _design_references_section(image_urls: Mapping[str, Optional[str]]) -> str:
    header_cells = "\n".join(f"<th><p>{label}</p></th>" for _, label, _ in IMAGE_COLUMNS)
    language_cells = "\n".join(f"<td><p>{LANGUAGE_NOTE}</p></td>" for _ in IMAGE_COLUMNS)
    image_cells = "\n".join(
        _image_cell(image_urls.get(bp), height) for bp, _, height in IMAGE_COLUMNS
    )
    return (
        "<h2>Design references:</h2>\n"
        '<table data-layout="full-width">\n'
        f"<thead>\n<tr>\n{header_cells}\n</tr>\n</thead>\n"
        "<tbody>\n"
        f"<tr>\n{language_cells}\n</tr>\n"
        f"<tr>\n{image_cells}\n</tr>\n"
        "</tbody>\n"
        "</table>"
    )


def to_fsd_markup(
    bundle: AIContentBundle,
    component_name: str,
    figma_url: str,
    jira_epic_url: str = "",
    story_urls: Optional[Sequence[str]] = None,
    image_urls: Optional[Mapping[str, Optional[str]]] = None,
) -> str:
    """Build the five-section FSD page body.

    Sections: status header, description/design notes, functional
    requirements, field-level requirements, design references. Every piece
    of caller or model text passes through ``escape_markup`` exactly once.
    """
    sections: List[str] = [
        _header_section(component_name, figma_url, jira_epic_url, story_urls or []),
        _description_section(bundle),
        _requirements_section(bundle),
        _fields_section(bundle, component_name),
        _design_references_section(image_urls or {}),
    ]
    return "\n\n".join(sections)


async def create_fsd_page(
    confluence: ConfluenceClient,
    space_key: str,
    markup: str,
    component_name: str,
    parent_page_id: Optional[str] = None,
) -> str:
    """Create ``FSD - <component>`` in the space and return its browser URL."""
    page = await confluence.create_page(
        space_key, f"FSD - {component_name}", markup, parent_page_id=parent_page_id,
    )
    logger.info(f"create_fsd_page: {component_name} → {page['web_url']}")
    return page["web_url"]
