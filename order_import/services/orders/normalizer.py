"""OrderNormalizer service - prepares remote orders for transfer."""

import logging

from order_import.domain.models import NormalizedOrder, RemoteOrder
from order_import.utils.error_handler import InvalidPhoneError
from order_import.utils.phone import parse_phone

logger = logging.getLogger(__name__)


class OrderNormalizer:
    """Canonicalizes the phone and recomputes the order total."""

    def normalize(self, order: RemoteOrder) -> NormalizedOrder:
        phone = None
        if order.phone.strip():
            try:
                phone = parse_phone(order.phone)
            except InvalidPhoneError:
                logger.info(f"Order #{order.order_number}: phone {order.phone!r} is not usable, continuing without it")

        normalized = NormalizedOrder(remote=order, phone=phone)

        if order.declared_total is not None and normalized.total.amount != order.declared_total:
            logger.warning(
                f"Order #{order.order_number}: computed total {normalized.total} differs from "
                f"declared total {order.declared_total}, using computed value"
            )

        return normalized
