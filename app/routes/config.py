"""Client configuration endpoint."""

from __future__ import annotations

from fastapi import APIRouter

from figdoc.integrations.llm_client import is_openai_configured

router = APIRouter(prefix="/api", tags=["config"])


@router.get("/config")
async def get_config():
    """Report which server-side credentials are present."""
    return {"openaiConfigured": is_openai_configured()}
