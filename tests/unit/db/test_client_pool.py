"""Tests for the SOAP client pool."""

from unittest.mock import AsyncMock, MagicMock

import httpx
import pytest

from order_import.db.remote.client_pool import RemoteClientPool, looks_like_html, normalize_wsdl_url
from order_import.utils.error_handler import ErrorCode, RemoteConnectionError

SERVICE_URL = "https://www.example-shop.com/Servis/SiparisServis.svc"
WSDL = '<?xml version="1.0"?><wsdl:definitions xmlns:wsdl="http://schemas.xmlsoap.org/wsdl/"/>'


def _pool(status_code=200, text=WSDL):
    requests = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return httpx.Response(status_code, text=text)

    pool = RemoteClientPool(wsdl_timeout=5, operation_timeout=5, transport=httpx.MockTransport(handler))
    return pool, requests


def _pooled_client():
    pooled = MagicMock()
    pooled.client = MagicMock(name="zeep_client")
    pooled.aclose = AsyncMock()
    return pooled


class TestNormalizeWsdlUrl:
    def test_appends_suffix(self):
        assert normalize_wsdl_url(f"  {SERVICE_URL} ") == f"{SERVICE_URL}?wsdl"

    def test_keeps_existing_suffix_in_any_case(self):
        assert normalize_wsdl_url(f"{SERVICE_URL}?WSDL") == f"{SERVICE_URL}?WSDL"

    @pytest.mark.parametrize("url", ["", "   ", None])
    def test_empty_url(self, url):
        with pytest.raises(ValueError):
            normalize_wsdl_url(url)


class TestLooksLikeHtml:
    @pytest.mark.parametrize(
        "payload",
        [
            "<!DOCTYPE html><html></html>",
            "  <html><body>Error</body></html>",
            "You have created a service. svcutil.exe http://x/Servis.svc?wsdl",
        ],
    )
    def test_html(self, payload):
        assert looks_like_html(payload)

    def test_wsdl(self):
        assert not looks_like_html(WSDL)


class TestRemoteClientPool:
    @pytest.mark.asyncio
    async def test_html_page_is_rejected(self):
        pool, requests = _pool(text="<!DOCTYPE html><html><body>Bakım</body></html>")
        pool._create_client = AsyncMock()

        with pytest.raises(RemoteConnectionError) as exc_info:
            await pool.get(SERVICE_URL)

        assert exc_info.value.error_code == ErrorCode.REMOTE_CONNECTION_FAILED
        assert "HTML" in exc_info.value.message
        assert str(requests[0].url) == f"{SERVICE_URL}?wsdl"
        pool._create_client.assert_not_called()
        assert len(pool) == 0

    @pytest.mark.asyncio
    async def test_help_page_is_rejected(self):
        pool, _ = _pool(text="<?xml version='1.0'?><p>svcutil.exe</p>")

        with pytest.raises(RemoteConnectionError):
            await pool.get(SERVICE_URL)

    @pytest.mark.asyncio
    async def test_http_error_status(self):
        pool, _ = _pool(status_code=500, text="Internal Server Error")

        with pytest.raises(RemoteConnectionError) as exc_info:
            await pool.get(SERVICE_URL)

        assert "HTTP 500" in exc_info.value.message

    @pytest.mark.asyncio
    async def test_client_is_cached_per_url(self):
        pool, requests = _pool()
        pooled = _pooled_client()
        pool._create_client = AsyncMock(return_value=pooled)

        first = await pool.get(SERVICE_URL)
        second = await pool.get(f"{SERVICE_URL}?wsdl")

        assert first is second is pooled.client
        assert pool._create_client.await_count == 1
        assert len(requests) == 1
        assert SERVICE_URL in pool

    @pytest.mark.asyncio
    async def test_clear_closes_clients(self):
        pool, _ = _pool()
        pooled = _pooled_client()
        pool._create_client = AsyncMock(return_value=pooled)
        await pool.get(SERVICE_URL)

        await pool.clear()

        pooled.aclose.assert_awaited_once()
        assert len(pool) == 0

    @pytest.mark.asyncio
    async def test_failed_client_is_not_cached(self):
        pool, _ = _pool()
        pool._create_client = AsyncMock(side_effect=RemoteConnectionError("bad wsdl"))

        with pytest.raises(RemoteConnectionError):
            await pool.get(SERVICE_URL)

        assert SERVICE_URL not in pool
