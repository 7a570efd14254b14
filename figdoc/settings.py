"""Pipeline runtime settings: tunable parameters for document generation.

All values read from environment variables with defaults. Import from here
instead of hardcoding.

Infrastructure config (credentials, API host, base URLs) stays in
figdoc/config.py.
"""

from __future__ import annotations

import os


def _int(key: str, default: int) -> int:
    return int(os.getenv(key, str(default)))


def _float(key: str, default: float) -> float:
    return float(os.getenv(key, str(default)))


def _str(key: str, default: str) -> str:
    return os.getenv(key, default)


# =====================================================================
# LLM
# =====================================================================

LLM_MODEL = _str("LLM_MODEL", "gpt-4o-mini")

# Token ceilings for the analysis (JSON) call and the overview (text) call
LLM_ANALYSIS_MAX_TOKENS = _int("LLM_ANALYSIS_MAX_TOKENS", 6000)
LLM_OVERVIEW_MAX_TOKENS = _int("LLM_OVERVIEW_MAX_TOKENS", 500)


# =====================================================================
# Prompt bounds
# =====================================================================

# Max elements summarized per component, and max depth descended
PROMPT_MAX_ELEMENTS = _int("PROMPT_MAX_ELEMENTS", 100)
PROMPT_MAX_DEPTH = _int("PROMPT_MAX_DEPTH", 5)


# =====================================================================
# HTTP clients (Figma, Atlassian, OpenAI)
# =====================================================================

FIGMA_HTTP_TIMEOUT = _float("FIGMA_HTTP_TIMEOUT", 60.0)
ATLASSIAN_HTTP_TIMEOUT = _float("ATLASSIAN_HTTP_TIMEOUT", 30.0)
LLM_HTTP_TIMEOUT = _float("LLM_HTTP_TIMEOUT", 120.0)

# Figma image export scale for screenshots
FIGMA_IMAGE_SCALE = _int("FIGMA_IMAGE_SCALE", 2)


# =====================================================================
# Pipeline policies
# =====================================================================

# Upper bound for a single stage (seconds). 0 disables the stage timeout.
STAGE_TIMEOUT_SECONDS = _float("STAGE_TIMEOUT_SECONDS", 300.0)
