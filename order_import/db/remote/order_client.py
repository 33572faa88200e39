"""
Ticimax order service client (`SelectSiparis`).
"""

import logging
from dataclasses import dataclass
from typing import Optional

import httpx
from zeep.exceptions import Error as ZeepError
from zeep.exceptions import Fault
from zeep.helpers import serialize_object

from order_import.core.config import get_settings
from order_import.db.remote.client_pool import RemoteClientPool, normalize_wsdl_url
from order_import.db.remote.parser import parse_order_page
from order_import.domain.models.connection_config import RemoteConnectionConfig
from order_import.domain.models.filter import OrderFilter, Pagination
from order_import.domain.models.remote_order import RemoteOrderPage
from order_import.utils.error_handler import RemoteConnectionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConnectionTestResult:
    success: bool
    message: str
    order_count: Optional[int] = None


class RemoteOrderClient:
    """
    Fetches orders from the Ticimax SOAP service.

    Args:
        pool: Client pool shared by every call of this client
        currency: Currency of the shop's amounts (defaults to DEFAULT_CURRENCY)
    """

    def __init__(self, pool: RemoteClientPool, currency: Optional[str] = None):
        settings = get_settings()
        self.pool = pool
        self.currency = currency or settings.DEFAULT_CURRENCY
        self.sort_field = settings.REMOTE_SORT_FIELD
        self.sort_direction = settings.REMOTE_SORT_DIRECTION

    async def fetch_page(
        self,
        config: RemoteConnectionConfig,
        order_filter: Optional[OrderFilter] = None,
        page_size: Optional[int] = None,
        page_number: int = 1,
    ) -> RemoteOrderPage:
        """
        Fetches one page of orders.

        Args:
            config: Shop connection settings
            order_filter: Selection criteria, unrestricted by default
            page_size: Records per page (defaults to REMOTE_PAGE_SIZE)
            page_number: 1-based page number

        Returns:
            RemoteOrderPage: Orders of the page, possibly empty, with the raw record count

        Raises:
            RemoteConnectionError: On transport errors, SOAP faults or malformed payloads
        """
        order_filter = order_filter or OrderFilter()
        pagination = Pagination(
            page_number=page_number,
            page_size=page_size or get_settings().REMOTE_PAGE_SIZE,
            sort_field=self.sort_field,
            sort_direction=self.sort_direction,
        )
        endpoint = normalize_wsdl_url(config.wsdl_url)
        client = await self.pool.get(config.wsdl_url)

        logger.debug(
            f"SelectSiparis page {page_number} (size {pagination.page_size}) for {config.shop}",
            extra={"shop": config.shop, "filter": order_filter.describe()},
        )

        try:
            result = await client.service.SelectSiparis(
                UyeKodu=config.member_code,
                f=order_filter.to_wire(),
                s=pagination.to_wire(),
            )
        except Fault as e:
            raise RemoteConnectionError(f"Ticimax returned a SOAP fault: {e.message}", endpoint=endpoint) from e
        except (ZeepError, httpx.HTTPError, OSError) as e:
            raise RemoteConnectionError(f"Could not fetch orders from Ticimax: {e}", endpoint=endpoint) from e

        page = parse_order_page(serialize_object(result, dict), currency=self.currency)
        if page.skipped_count:
            logger.warning(
                f"Skipped {page.skipped_count} unreadable record(s) on Ticimax page {page_number} for {config.shop}"
            )
        logger.info(f"Fetched {len(page.orders)} order(s) from Ticimax page {page_number} for {config.shop}")
        return page

    async def test_connection(self, config: RemoteConnectionConfig) -> ConnectionTestResult:
        """
        Fetches a single order to verify the settings. Never raises.
        """
        try:
            page = await self.fetch_page(config, page_size=1, page_number=1)
        except RemoteConnectionError as e:
            logger.warning(f"Ticimax connection test failed for {config.shop}: {e.message}")
            return ConnectionTestResult(success=False, message=f"Connection failed: {e.message}")
        except ValueError as e:
            return ConnectionTestResult(success=False, message=f"Invalid connection settings: {e}")

        return ConnectionTestResult(
            success=True, message="Ticimax connection successful", order_count=len(page.orders)
        )
