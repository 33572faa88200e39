"""
Data access layer: ledger storage, Ticimax SOAP client and Shopify GraphQL clients.
"""
