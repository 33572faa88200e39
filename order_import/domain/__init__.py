"""
Domain layer for the Ticimax → Shopify order import.

Business entities and value objects, independent of the SOAP transport,
the Shopify API and the ledger storage.
"""
