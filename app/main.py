"""FastAPI Application Entry Point.

Configures the app, lifespan, CORS, and includes all route modules.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from figdoc import __version__, config
from figdoc.integrations.llm_client import is_openai_configured
from figdoc.logging_config import get_api_logger, get_core_logger, get_pipeline_logger

logger = get_api_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    get_core_logger()
    get_pipeline_logger()

    # Warn about optional integrations
    if not is_openai_configured():
        logger.warning(
            "OPENAI_API_KEY not set, /api/generate will reject requests. "
            "Set OPENAI_API_KEY in .env or environment to enable AI analysis."
        )
    if not config.ATLASSIAN_BASE_URL:
        logger.info("ATLASSIAN_BASE_URL not set, requests must carry atlassianUrl")

    yield


app = FastAPI(title="Figma Documentation Generator API", version=__version__, lifespan=lifespan)

# CORS configuration, comma-separated CORS_ORIGINS env var
CORS_ORIGINS = [o.strip() for o in config.CORS_ORIGINS.split(",") if o.strip()]

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
from .routes.config import router as config_router  # noqa: E402
from .routes.generate import router as generate_router  # noqa: E402
from .routes.tickets import router as tickets_router  # noqa: E402

app.include_router(config_router)
app.include_router(generate_router)
app.include_router(tickets_router)


@app.get("/health")
async def health_check():
    """Health check endpoint for container orchestration."""
    return {"status": "ok"}


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("app.main:app", host=config.API_HOST, port=config.API_PORT)
