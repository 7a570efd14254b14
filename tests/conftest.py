"""Root conftest for route and pipeline tests.

Provides:
- LOG_DIR redirected to a temp directory before any app import
- FastAPI AsyncClient over ASGITransport
- Figma document fixtures shared by the core tests
"""

from __future__ import annotations

import os
import tempfile
from typing import AsyncGenerator

os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="figdoc-logs-"))

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402


# ---------------------------------------------------------------------------
# FastAPI test client
# ---------------------------------------------------------------------------

@pytest_asyncio.fixture
async def client() -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI routes."""
    from app.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


# ---------------------------------------------------------------------------
# Figma documents
# ---------------------------------------------------------------------------

FIGMA_URL = "https://www.figma.com/design/AbC123xyz/Site-Kit?node-id=100-1"


def solid(r: float, g: float, b: float, a: float = 1.0) -> dict:
    return {"type": "SOLID", "color": {"r": r, "g": g, "b": b, "a": a}}


@pytest.fixture
def footer_document() -> dict:
    """A page frame holding a Footer component with desktop/mobile siblings."""
    return {
        "id": "100:1",
        "name": "Homepage",
        "type": "FRAME",
        "absoluteBoundingBox": {"x": 0, "y": 0, "width": 1440, "height": 3000},
        "children": [
            {
                "id": "200:1",
                "name": "Header",
                "type": "FRAME",
                "absoluteBoundingBox": {"x": 0, "y": 0, "width": 1440, "height": 96},
                "children": [],
            },
            {
                "id": "300:1",
                "name": "Footer Desktop",
                "type": "FRAME",
                "absoluteBoundingBox": {"x": 0, "y": 2600, "width": 1440.4, "height": 399.6},
                "fills": [solid(0.0, 0.0, 0.0)],
                "children": [
                    {
                        "id": "300:2",
                        "name": "Footer Logo",
                        "type": "RECTANGLE",
                        "absoluteBoundingBox": {"x": 40, "y": 2640, "width": 120, "height": 40},
                    },
                    {
                        "id": "300:3",
                        "name": "Nav Links",
                        "type": "FRAME",
                        "absoluteBoundingBox": {"x": 400, "y": 2640, "width": 600, "height": 200},
                        "children": [
                            {
                                "id": "300:4",
                                "name": "Link Item",
                                "type": "TEXT",
                                "characters": "About us",
                                "style": {"fontFamily": "Inter", "fontSize": 16, "fontWeight": 500},
                                "fills": [solid(1.0, 1.0, 1.0), solid(1.0, 1.0, 1.0)],
                                "absoluteBoundingBox": {"x": 400, "y": 2640, "width": 80, "height": 24},
                            },
                        ],
                    },
                    {
                        "id": "300:5",
                        "name": "Copyright",
                        "type": "TEXT",
                        "characters": "(c) 2024 Example & Co <all rights>",
                    },
                ],
            },
            {
                "id": "400:1",
                "name": "Footer Mobile",
                "type": "FRAME",
                "absoluteBoundingBox": {"x": 1600, "y": 0, "width": 375, "height": 900},
                "children": [],
            },
        ],
    }
