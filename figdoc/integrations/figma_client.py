"""Figma REST API client for the documentation pipeline.

Fetches design node trees and rendered node images from Figma files using
Personal Access Token (PAT) authentication.

Environment:
    FIGMA_TOKEN: Figma Personal Access Token (fallback when none is passed)

Usage:
    client = FigmaClient(token)
    name, document = await client.get_document("6kGd851qaAX4TiL44vpIrO", "16650:538")
    images = await client.get_images("6kGd851qaAX4TiL44vpIrO", ["16650:539"])
"""

from __future__ import annotations

import logging
import re
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import unquote

import httpx

from .. import config
from ..errors import FigmaClientError, InputValidationError
from ..settings import FIGMA_HTTP_TIMEOUT

logger = logging.getLogger("figdoc.integrations.figma")

FIGMA_API_BASE = "https://api.figma.com"


def parse_figma_url(url: str) -> Tuple[str, Optional[str]]:
    """Parse a Figma URL into (file_key, node_id).

    Supports:
        https://www.figma.com/design/{fileKey}/{name}?node-id={nodeId}
        https://www.figma.com/file/{fileKey}/{name}?node-id={nodeId}
        https://www.figma.com/design/{fileKey}

    Node ID format: URL uses '16650-538', API uses '16650:538'. The node id
    is ``None`` when the URL has no node-id parameter.

    Raises:
        InputValidationError if no file key can be found.
    """
    path_match = re.search(r"figma\.com/(?:design|file)/([a-zA-Z0-9]+)", url or "")
    if not path_match:
        raise InputValidationError("Invalid Figma URL - could not extract file key")
    file_key = path_match.group(1)

    node_match = re.search(r"[?&]node-id=([^&#]+)", url)
    if not node_match:
        return file_key, None

    # Decode percent-encoding (e.g. %3A → :) then convert dashes to colons
    node_id = unquote(node_match.group(1)).replace("-", ":")
    return file_key, node_id


class FigmaClient:
    """Async Figma REST API client.

    Args:
        token: Figma PAT. Falls back to FIGMA_TOKEN env var.
        timeout: HTTP request timeout in seconds.
    """

    def __init__(
        self,
        token: Optional[str] = None,
        timeout: float = FIGMA_HTTP_TIMEOUT,
    ):
        self._token = token or config.FIGMA_TOKEN
        if not self._token:
            raise FigmaClientError(
                None,
                "Figma token not configured. Pass a token or set the FIGMA_TOKEN "
                "environment variable.",
            )
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout = timeout

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=FIGMA_API_BASE,
                headers={"X-FIGMA-TOKEN": self._token},
                timeout=self._timeout,
                limits=httpx.Limits(max_connections=5, max_keepalive_connections=3),
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get(self, path: str, params: Optional[Dict] = None) -> Dict[str, Any]:
        """Make a GET request to the Figma API."""
        client = await self._get_client()
        try:
            resp = await client.get(path, params=params)
        except httpx.TimeoutException as e:
            raise FigmaClientError(None, f"timeout: {path}") from e
        except httpx.TransportError as e:
            raise FigmaClientError(None, f"connection error: {path}") from e

        if resp.status_code != 200:
            logger.warning("Figma GET %s failed: HTTP %s", path, resp.status_code)
            raise FigmaClientError(resp.status_code, resp.text[:500])

        return resp.json()

    # ------------------------------------------------------------------
    # Core API methods
    # ------------------------------------------------------------------

    async def get_document(
        self,
        file_key: str,
        node_id: Optional[str] = None,
    ) -> Tuple[str, Dict[str, Any]]:
        """Fetch a document tree as (file name, document dict).

        GET /v1/files/:key/nodes?ids=... when a node id is given, otherwise
        GET /v1/files/:key for the whole file.
        """
        if node_id:
            data = await self._get(f"/v1/files/{file_key}/nodes", params={"ids": node_id})
            node_data = (data.get("nodes") or {}).get(node_id)
            if node_data and isinstance(node_data.get("document"), dict):
                logger.info(f"get_document: file={file_key}, node={node_id}")
                return data.get("name", ""), node_data["document"]
            raise FigmaClientError(404, f"Node {node_id} not found in file {file_key}")

        data = await self._get(f"/v1/files/{file_key}")
        document = data.get("document")
        if not isinstance(document, dict):
            raise FigmaClientError(200, f"File {file_key} returned no document")
        logger.info(f"get_document: file={file_key} (full file)")
        return data.get("name", ""), document

    async def get_images(
        self,
        file_key: str,
        node_ids: List[str],
        fmt: str = "png",
        scale: int = 2,
    ) -> Dict[str, Optional[str]]:
        """Render node images via Figma's image export API.

        GET /v1/images/:key?ids=...&format=png&scale=2
        """
        params = {
            "ids": ",".join(node_ids),
            "format": fmt,
            "scale": str(scale),
        }
        data = await self._get(f"/v1/images/{file_key}", params=params)

        if data.get("err"):
            raise FigmaClientError(200, f"image render error: {data['err']}")

        images = data.get("images") or {}
        logger.info(
            f"get_images: file={file_key}, requested={len(node_ids)}, "
            f"rendered={sum(1 for v in images.values() if v)}"
        )
        return images
