"""Confluence Cloud REST client (page creation in storage format)."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from ..errors import ConfluenceClientError
from .atlassian import AtlassianClient

logger = logging.getLogger("figdoc.integrations.confluence")


class ConfluenceClient(AtlassianClient):
    error_class = ConfluenceClientError

    async def create_page(
        self,
        space_key: str,
        title: str,
        content: str,
        parent_page_id: Optional[str] = None,
    ) -> Dict[str, str]:
        """POST /wiki/rest/api/content.

        Returns ``{"id": ..., "web_url": ...}`` where ``web_url`` is the
        absolute browser URL of the new page.
        """
        body: Dict[str, Any] = {
            "type": "page",
            "title": title,
            "space": {"key": space_key},
            "body": {
                "storage": {
                    "value": content,
                    "representation": "storage",
                },
            },
        }
        if parent_page_id:
            body["ancestors"] = [{"id": parent_page_id}]

        data = await self._request("POST", "/wiki/rest/api/content", json_body=body)
        webui = (data.get("_links") or {}).get("webui", "")
        web_url = f"{self.base_url}/wiki{webui}"
        logger.info(f"create_page: '{title}' in space {space_key} → {web_url}")
        return {"id": str(data.get("id", "")), "web_url": web_url}
