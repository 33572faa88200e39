"""
Base Shopify GraphQL client with common functionality.

Connection management, request pacing, throttling retries and error
translation shared by the customer and draft order clients. One client
instance talks to one shop.
"""

import asyncio
import logging
import time
from typing import Any, Dict, List, Optional

import aiohttp
from aiohttp import ClientTimeout

from order_import.core.config import get_settings
from order_import.db.queries import SHOP_INFO_QUERY
from order_import.utils.error_handler import ShopifyAPIException

logger = logging.getLogger(__name__)

THROTTLED_CODE = "THROTTLED"


class BaseShopifyGraphQLClient:
    """
    Base client for Shopify Admin GraphQL operations.

    Args:
        shop_url: Shop domain (e.g. "my-shop.myshopify.com")
        access_token: Admin API access token of the shop
    """

    def __init__(self, shop_url: str, access_token: str):
        self.settings = get_settings()
        self.shop_url = shop_url
        self.access_token = access_token
        self.api_version = self.settings.SHOPIFY_API_VERSION
        self.graphql_url = self.settings.shopify_graphql_url(shop_url)

        self.session: Optional[aiohttp.ClientSession] = None
        self._owns_session = True
        self._last_request_time = 0.0
        self._min_request_interval = self.settings.SHOPIFY_MIN_REQUEST_INTERVAL

    async def initialize(self, verify: bool = False):
        """
        Opens the HTTP session.

        Args:
            verify: Also run a shop query to check the credentials

        Raises:
            ShopifyAPIException: If the connection check fails
        """
        if self.session is None:
            timeout = ClientTimeout(total=self.settings.SHOPIFY_REQUEST_TIMEOUT, connect=10)
            self.session = aiohttp.ClientSession(
                timeout=timeout,
                headers={
                    "Content-Type": "application/json",
                    "X-Shopify-Access-Token": self.access_token,
                    "User-Agent": f"{self.settings.APP_NAME}/{self.settings.APP_VERSION}",
                },
            )
            self._owns_session = True

        if verify:
            try:
                await self.test_connection()
            except ShopifyAPIException:
                await self.close()
                raise

    def share_session(self, other: "BaseShopifyGraphQLClient") -> None:
        """Reuses the session of another client of the same shop."""
        self.session = other.session
        self._owns_session = False

    async def close(self):
        if self.session and self._owns_session:
            await self.session.close()
            logger.debug(f"Shopify session closed for {self.shop_url}")
        self.session = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _execute_query(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
        retry_network_errors: bool = True,
    ) -> Dict[str, Any]:
        """
        Executes a GraphQL document with pacing and retries.

        Throttled requests are always retried since Shopify did not run them.
        Network errors are only retried when `retry_network_errors` is set;
        mutations pass False because the request may have been applied.

        Args:
            query: GraphQL document
            variables: Query variables
            retry_network_errors: Retry on connection errors and timeouts

        Returns:
            Dict: The `data` member of the response

        Raises:
            ShopifyAPIException: On HTTP, GraphQL or transport errors
        """
        if not self.session:
            raise ShopifyAPIException("Client not initialized. Call initialize() first.")

        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        max_retries = self.settings.SHOPIFY_MAX_RETRIES
        last_exception: Optional[ShopifyAPIException] = None

        for attempt in range(1, max_retries + 1):
            await self._check_rate_limit()
            try:
                async with self.session.post(self.graphql_url, json=payload) as response:
                    self._last_request_time = time.monotonic()

                    if response.status == 429:
                        retry_after = self._retry_after(response.headers.get("Retry-After"))
                        last_exception = ShopifyAPIException(
                            "Shopify rate limit exceeded",
                            api_response_code=429,
                            rate_limited=True,
                            retry_after=retry_after,
                        )
                        logger.warning(f"Rate limit exceeded, waiting {retry_after}s (attempt {attempt})")
                        await asyncio.sleep(retry_after)
                        continue

                    if response.status != 200:
                        body = await response.text()
                        raise ShopifyAPIException(
                            f"HTTP {response.status}: {body[:200]}", api_response_code=response.status
                        )

                    try:
                        response_data = await response.json()
                    except ValueError as e:
                        raise ShopifyAPIException(
                            f"Invalid JSON response: {e}", api_response_code=response.status
                        ) from e

            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                last_exception = ShopifyAPIException(f"Network error: {e}")
                if retry_network_errors and attempt < max_retries:
                    wait_time = min(2 ** (attempt - 1), 10)
                    logger.warning(f"Network error, retrying in {wait_time}s (attempt {attempt})")
                    await asyncio.sleep(wait_time)
                    continue
                raise last_exception from e

            if not isinstance(response_data, dict):
                raise ShopifyAPIException(
                    f"Unexpected response body: {type(response_data).__name__}", api_response_code=200
                )

            errors = response_data.get("errors") or []
            if errors:
                if any((err.get("extensions") or {}).get("code") == THROTTLED_CODE for err in errors):
                    last_exception = ShopifyAPIException(
                        "Shopify query cost throttled", api_response_code=200, rate_limited=True, retry_after=2
                    )
                    logger.warning(f"Query throttled, waiting 2s (attempt {attempt})")
                    await asyncio.sleep(2)
                    continue

                error_messages = [err.get("message", str(err)) for err in errors]
                raise ShopifyAPIException(f"GraphQL errors: {', '.join(error_messages)}")

            return response_data.get("data") or {}

        raise last_exception or ShopifyAPIException("Query execution failed after retries")

    @staticmethod
    def _retry_after(header_value: Optional[str], default: int = 2) -> int:
        """Seconds to wait from a Retry-After header, `default` when missing or malformed."""
        if header_value is None:
            return default
        try:
            return max(int(float(header_value)), 0)
        except (TypeError, ValueError, OverflowError):
            return default

    async def _check_rate_limit(self):
        """Keeps a minimum interval between requests."""
        elapsed = time.monotonic() - self._last_request_time
        if elapsed < self._min_request_interval:
            await asyncio.sleep(self._min_request_interval - elapsed)

    async def test_connection(self) -> bool:
        """
        Runs a shop query to check the credentials.

        Raises:
            ShopifyAPIException: If the shop cannot be queried
        """
        result = await self._execute_query(SHOP_INFO_QUERY)
        shop_info = result.get("shop") or {}
        logger.info(f"Connected to Shopify store: {shop_info.get('name', 'Unknown')} ({shop_info.get('currencyCode')})")
        return True

    @staticmethod
    def format_user_errors(user_errors: List[Dict[str, Any]]) -> str:
        """Joins `userErrors` into one readable line, e.g. "email: has already been taken"."""
        messages = []
        for error in user_errors:
            field = error.get("field") or []
            message = error.get("message", "Unknown error")
            messages.append(f"{'.'.join(field)}: {message}" if field else message)
        return ", ".join(messages)

    def _handle_user_errors(self, payload: Dict[str, Any], operation: str):
        """
        Raises when a mutation payload carries `userErrors`.

        Raises:
            ShopifyAPIException: With the joined messages and the raw errors
        """
        user_errors = payload.get("userErrors") or []
        if user_errors:
            raise ShopifyAPIException(
                f"{operation} failed: {self.format_user_errors(user_errors)}",
                user_errors=user_errors,
            )

    def __repr__(self):
        return (
            f"{self.__class__.__name__}("
            f"shop_url='{self.shop_url}', "
            f"api_version='{self.api_version}', "
            f"initialized={self.session is not None})"
        )
