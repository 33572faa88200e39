"""
Per-shop Ticimax connection settings.
"""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class RemoteConnectionConfig:
    """
    Connection settings of one shop.

    Attributes:
        shop: Shopify shop domain
        wsdl_url: Ticimax order service URL, with or without `?wsdl`
        member_code: Integration credential (`UyeKodu`)
        is_active: Whether the operator enabled the integration
        last_sync_at: Last successful sync, maintained by the application
    """

    shop: str
    wsdl_url: str
    member_code: str
    is_active: bool = True
    last_sync_at: datetime | None = None

    def __post_init__(self) -> None:
        if not self.wsdl_url or not self.wsdl_url.strip():
            raise ValueError("WSDL URL is required")
        if not self.member_code:
            raise ValueError("Member code is required")

    def __repr__(self) -> str:
        # Keep the credential out of logs
        return f"RemoteConnectionConfig(shop={self.shop!r}, wsdl_url={self.wsdl_url!r}, is_active={self.is_active})"
