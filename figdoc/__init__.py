"""Figma-to-documentation pipeline package.

Subpackages:
- design: Figma node parsing, component extraction, responsive variants
- content: LLM prompt construction and response parsing
- documents: Jira ticket plans and Confluence FSD markup
- integrations: Figma, Jira, Confluence and OpenAI clients
- pipeline: Staged generation workflow and progress events
"""

__version__ = "1.0.0"
