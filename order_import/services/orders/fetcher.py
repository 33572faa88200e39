"""
Sequential pagination over the remote order service.
"""

import logging
from typing import List, Optional

from order_import.core.config import get_settings
from order_import.domain.models import OrderFilter, RemoteConnectionConfig, RemoteOrder
from order_import.services.orders.interfaces import IRemoteOrderSource

logger = logging.getLogger(__name__)

# Safety bound against an upstream that never returns a short page
MAX_PAGES = 50


async def fetch_all_orders(
    client: IRemoteOrderSource,
    config: RemoteConnectionConfig,
    order_filter: Optional[OrderFilter] = None,
    page_size: Optional[int] = None,
) -> List[RemoteOrder]:
    """
    Fetches every page until a short or empty page, or `MAX_PAGES`.

    A page is short when the service returned fewer records than asked
    for; records the parser skipped still count.

    Args:
        client: Remote order source
        config: Shop connection settings
        order_filter: Selection criteria
        page_size: Records per page (defaults to REMOTE_PAGE_SIZE)

    Returns:
        List[RemoteOrder]: All fetched orders; partial when the ceiling is hit

    Raises:
        RemoteConnectionError: If any page fails
    """
    page_size = page_size or get_settings().REMOTE_PAGE_SIZE
    orders: List[RemoteOrder] = []

    for page_number in range(1, MAX_PAGES + 1):
        page = await client.fetch_page(config, order_filter, page_size, page_number)
        orders.extend(page.orders)

        if page.record_count < page_size:
            logger.debug(f"Last page reached at page {page_number} for {config.shop}")
            return orders

    logger.warning(
        f"Stopped fetching orders for {config.shop} after {MAX_PAGES} pages "
        f"({len(orders)} orders); remaining pages were not read"
    )
    return orders
