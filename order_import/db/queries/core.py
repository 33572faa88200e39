"""
Shop-level queries.
"""

SHOP_INFO_QUERY = """
query GetShopInfo {
  shop {
    id
    name
    currencyCode
  }
}
"""
