"""
Ticimax → Shopify order import.

Pulls orders from the Ticimax SOAP service, resolves or creates Shopify
customers, creates draft orders and records every attempt in a sync ledger
that prevents importing the same source order twice.
"""

__version__ = "0.1.0"
