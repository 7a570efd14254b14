"""Shared Atlassian Cloud plumbing for the Jira and Confluence clients.

Provides Basic-auth header construction, site URL validation, a request
scoped identity cache and the base HTTP client both services build on.
"""

from __future__ import annotations

import asyncio
import base64
import ipaddress
import logging
import socket
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Type
from urllib.parse import urlparse

import httpx

from ..errors import InputValidationError, ServiceError
from ..settings import ATLASSIAN_HTTP_TIMEOUT

logger = logging.getLogger("figdoc.integrations.atlassian")


@dataclass(frozen=True)
class AtlassianCredentials:
    base_url: str
    email: str
    token: str

    def __post_init__(self):
        object.__setattr__(self, "base_url", self.base_url.rstrip("/"))


def basic_auth_header(email: str, token: str) -> str:
    """``Basic base64(email:token)`` as used by Atlassian Cloud REST APIs."""
    raw = f"{email}:{token}".encode()
    return f"Basic {base64.b64encode(raw).decode()}"


# ---------------------------------------------------------------------------
# Identity cache
# ---------------------------------------------------------------------------


class IdentityCache:
    """Memoized account-id lookups for a single request.

    Concurrent callers asking for the same key share one lookup. Results,
    including ``None`` for a failed lookup, are kept until the cache is
    discarded with its request.
    """

    def __init__(self):
        self._values: Dict[str, Optional[str]] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    async def get_or_load(
        self,
        key: str,
        loader: Callable[[], Awaitable[Optional[str]]],
    ) -> Optional[str]:
        if key in self._values:
            return self._values[key]
        lock = self._locks.setdefault(key, asyncio.Lock())
        async with lock:
            if key not in self._values:
                self._values[key] = await loader()
        return self._values[key]


# ---------------------------------------------------------------------------
# Site URL validation
# ---------------------------------------------------------------------------

# Private/reserved IP ranges that must not be accessed
_PRIVATE_RANGES = [
    ipaddress.ip_network("127.0.0.0/8"),
    ipaddress.ip_network("10.0.0.0/8"),
    ipaddress.ip_network("172.16.0.0/12"),
    ipaddress.ip_network("192.168.0.0/16"),
    ipaddress.ip_network("169.254.0.0/16"),
    ipaddress.ip_network("::1/128"),
    ipaddress.ip_network("fc00::/7"),
    ipaddress.ip_network("fe80::/10"),
]


def validate_site_url(url: str) -> None:
    """Reject Atlassian site URLs that could reach internal hosts.

    Checks:
    - Scheme must be https (or http)
    - Hostname must be present and not an IP literal (localhost allowed)
    - Hostname must not resolve to private/reserved IP ranges

    Raises:
        InputValidationError if the URL is invalid or points to a private network.
    """
    parsed = urlparse(url)

    if parsed.scheme not in ("https", "http"):
        raise InputValidationError("Atlassian URL must use https")

    hostname = parsed.hostname
    if not hostname:
        raise InputValidationError("Invalid Atlassian URL: missing hostname")

    try:
        addr = ipaddress.ip_address(hostname)
    except ValueError:
        addr = None
    if addr is not None:
        if addr.is_loopback:
            logger.warning("Atlassian URL points to localhost, allowed for dev only")
            return
        raise InputValidationError("Atlassian URL must use a domain name, not an IP address")

    try:
        resolved = socket.getaddrinfo(hostname, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except socket.gaierror:
        # DNS failure surfaces later as a connection error on the first call
        return
    for _, _, _, _, sockaddr in resolved:
        ip = ipaddress.ip_address(sockaddr[0])
        if any(ip in private_range for private_range in _PRIVATE_RANGES):
            logger.warning("Atlassian URL %s resolves to private IP %s, blocked", hostname, ip)
            raise InputValidationError("Atlassian URL resolves to a private/reserved IP address")


# ---------------------------------------------------------------------------
# Base client
# ---------------------------------------------------------------------------


class AtlassianClient:
    """Async JSON client for one Atlassian Cloud site.

    Subclasses set ``error_class`` so failures carry the right service name.
    """

    error_class: Type[ServiceError] = ServiceError

    def __init__(
        self,
        credentials: AtlassianCredentials,
        timeout: float = ATLASSIAN_HTTP_TIMEOUT,
    ):
        self.credentials = credentials
        self._client: Optional[httpx.AsyncClient] = None
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self.credentials.base_url

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Authorization": basic_auth_header(
                        self.credentials.email, self.credentials.token,
                    ),
                    "Accept": "application/json",
                },
                timeout=self._timeout,
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        client = await self._get_client()
        try:
            resp = await client.request(method, path, json=json_body)
        except httpx.TimeoutException as e:
            raise self.error_class(None, f"timeout: {method} {path}") from e
        except httpx.TransportError as e:
            raise self.error_class(None, f"connection error: {method} {path}: {e}") from e

        if resp.status_code >= 400:
            logger.warning(
                "%s %s %s failed: HTTP %s",
                self.error_class.service, method, path, resp.status_code,
            )
            raise self.error_class(resp.status_code, resp.text[:500])

        return resp.json()
