"""
Customer lookup and creation.

Lookups use the customer search syntax (`email:<value>` / `phone:<value>`)
and only need the first hit.
"""

CUSTOMER_SEARCH_QUERY = """
query FindCustomer($query: String!) {
  customers(first: 1, query: $query) {
    edges {
      node {
        id
        displayName
        email
        phone
      }
    }
  }
}
"""

CUSTOMER_CREATE_MUTATION = """
mutation CreateCustomer($input: CustomerInput!) {
  customerCreate(input: $input) {
    customer {
      id
      displayName
      email
      phone
    }
    userErrors {
      field
      message
    }
  }
}
"""
