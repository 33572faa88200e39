"""
Ticimax SOAP order service access.
"""

from .client_pool import RemoteClientPool, normalize_wsdl_url
from .order_client import ConnectionTestResult, RemoteOrderClient
from .parser import parse_order_page, parse_order_response

__all__ = [
    "ConnectionTestResult",
    "RemoteClientPool",
    "RemoteOrderClient",
    "normalize_wsdl_url",
    "parse_order_page",
    "parse_order_response",
]
