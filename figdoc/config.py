"""Service configuration constants: single source of truth for env vars."""

import os

# Server binding: used by uvicorn entrypoint
API_HOST = os.getenv("API_HOST", "0.0.0.0")
API_PORT = int(os.getenv("API_PORT", "8000"))

# Comma-separated list of allowed browser origins
CORS_ORIGINS = os.getenv("CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000")

# OpenAI: required for the AI analysis stages
OPENAI_API_KEY = os.getenv("OPENAI_API_KEY", "")

# Figma Personal Access Token: used when a request does not carry one
FIGMA_TOKEN = os.getenv("FIGMA_TOKEN", "")

# Atlassian Cloud site shared by Jira and Confluence (e.g. https://company.atlassian.net)
ATLASSIAN_BASE_URL = os.getenv("ATLASSIAN_BASE_URL", "")
