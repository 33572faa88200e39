"""
Pool of zeep SOAP clients keyed by service description URL.

Loading a WSDL is slow, so one client per endpoint is reused across calls.
The pool is owned by the caller (one per process or per shop) instead of
being module state.
"""

import asyncio
import logging
from typing import Dict, Optional

import httpx
from zeep import AsyncClient
from zeep.exceptions import Error as ZeepError
from zeep.transports import AsyncTransport

from order_import.core.config import get_settings
from order_import.utils.error_handler import RemoteConnectionError

logger = logging.getLogger(__name__)

WSDL_SUFFIX = "?wsdl"

# Markers of an HTML page served in place of the service description.
# "svcutil.exe" appears on the WCF service help page.
HTML_MARKERS = ("<!doctype html", "<html")
WCF_HELP_PAGE_MARKER = "svcutil.exe"


def normalize_wsdl_url(url: str) -> str:
    """
    Ensures the URL points at the service description.

    Examples:
        >>> normalize_wsdl_url(" https://shop.example/Servis/SiparisServis.svc ")
        'https://shop.example/Servis/SiparisServis.svc?wsdl'
        >>> normalize_wsdl_url("https://shop.example/Servis/SiparisServis.svc?WSDL")
        'https://shop.example/Servis/SiparisServis.svc?WSDL'
    """
    url = (url or "").strip()
    if not url:
        raise ValueError("WSDL URL is required")
    if not url.lower().endswith(WSDL_SUFFIX):
        url += WSDL_SUFFIX
    return url


def looks_like_html(payload: str) -> bool:
    head = payload.lstrip()[:512].lower()
    return head.startswith(HTML_MARKERS) or WCF_HELP_PAGE_MARKER in payload


class _PooledClient:
    """A zeep client together with the HTTP clients it owns."""

    def __init__(self, client: AsyncClient, http_client: httpx.AsyncClient, wsdl_client: httpx.Client):
        self.client = client
        self.http_client = http_client
        self.wsdl_client = wsdl_client

    async def aclose(self) -> None:
        await self.http_client.aclose()
        self.wsdl_client.close()


class RemoteClientPool:
    """
    Cache of zeep `AsyncClient` instances per normalized WSDL URL.

    Args:
        wsdl_timeout: Timeout for downloading the service description
        operation_timeout: Timeout for SOAP operations
        transport: Optional httpx transport for the description pre-check
    """

    def __init__(
        self,
        wsdl_timeout: Optional[float] = None,
        operation_timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        settings = get_settings()
        self.wsdl_timeout = wsdl_timeout or settings.REMOTE_WSDL_TIMEOUT
        self.operation_timeout = operation_timeout or settings.REMOTE_OPERATION_TIMEOUT
        self._transport = transport
        self._clients: Dict[str, _PooledClient] = {}
        self._lock = asyncio.Lock()

    def __contains__(self, url: str) -> bool:
        return normalize_wsdl_url(url) in self._clients

    def __len__(self) -> int:
        return len(self._clients)

    async def get(self, url: str) -> AsyncClient:
        """
        Returns the cached client for an endpoint, creating it on first use.

        Raises:
            RemoteConnectionError: If the description cannot be loaded or is HTML
        """
        wsdl_url = normalize_wsdl_url(url)

        async with self._lock:
            pooled = self._clients.get(wsdl_url)
            if pooled is None:
                await self._check_service_description(wsdl_url)
                pooled = await self._create_client(wsdl_url)
                self._clients[wsdl_url] = pooled
                logger.info(f"SOAP client created for {wsdl_url}")
            return pooled.client

    async def _check_service_description(self, wsdl_url: str) -> None:
        """Downloads the description and rejects HTML error pages up front."""
        try:
            async with httpx.AsyncClient(timeout=self.wsdl_timeout, transport=self._transport) as http:
                response = await http.get(wsdl_url)
        except httpx.HTTPError as e:
            raise RemoteConnectionError(
                f"Could not download service description from {wsdl_url}: {e}", endpoint=wsdl_url
            ) from e

        if response.status_code >= 400:
            raise RemoteConnectionError(
                f"Service description request returned HTTP {response.status_code}", endpoint=wsdl_url
            )

        if looks_like_html(response.text):
            raise RemoteConnectionError(
                "Service description URL returned an HTML page instead of a WSDL document; "
                "check the URL and the server status",
                endpoint=wsdl_url,
            )

    async def _create_client(self, wsdl_url: str) -> _PooledClient:
        http_client = httpx.AsyncClient(timeout=self.operation_timeout)
        wsdl_client = httpx.Client(timeout=self.wsdl_timeout)
        transport = AsyncTransport(client=http_client, wsdl_client=wsdl_client)

        try:
            # WSDL parsing is synchronous in zeep
            client = await asyncio.to_thread(AsyncClient, wsdl_url, transport=transport)
        except (ZeepError, httpx.HTTPError, OSError, ValueError, SyntaxError) as e:
            await http_client.aclose()
            wsdl_client.close()
            raise RemoteConnectionError(f"Could not connect to Ticimax WSDL {wsdl_url}: {e}", endpoint=wsdl_url) from e

        return _PooledClient(client, http_client, wsdl_client)

    async def clear(self) -> None:
        """Drops every cached client, e.g. after connection settings change."""
        async with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()

        for pooled in clients:
            await pooled.aclose()
        if clients:
            logger.info(f"Dropped {len(clients)} cached SOAP client(s)")

    async def aclose(self) -> None:
        await self.clear()

    async def __aenter__(self) -> "RemoteClientPool":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
