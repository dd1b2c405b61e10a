"""
GraphQL query strings for Shopify Admin API.
"""


ORDER_QUERY = '''
query order($id: ID!) {
  order(id: $id) {
    id
    name
    createdAt
    cancelledAt
    displayFinancialStatus
    displayFulfillmentStatus
    note
    email
    phone
    currentTotalPriceSet {
      shopMoney {
        amount
        currencyCode
      }
    }
    customer {
      id
      firstName
      lastName
      email
      phone
    }
    customAttributes {
      key
      value
    }
    fulfillments(first: 10) {
      id
      status
    }
    lineItems(first: 100) {
      edges {
        node {
          id
          name
          sku
          quantity
          currentQuantity
          variant {
            id
          }
          originalUnitPriceSet {
            shopMoney {
              amount
              currencyCode
            }
          }
        }
      }
    }
  }
}
'''

ORDERS_QUERY = '''
query orders($first: Int!, $after: String, $query: String) {
  orders(first: $first, after: $after, query: $query, sortKey: CREATED_AT, reverse: true) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        id
        name
        createdAt
        cancelledAt
        displayFinancialStatus
        displayFulfillmentStatus
        currentTotalPriceSet {
          shopMoney {
            amount
            currencyCode
          }
        }
        customer {
          id
          firstName
          lastName
        }
      }
    }
  }
}
'''

PRODUCT_QUERY = '''
query product($id: ID!) {
  product(id: $id) {
    id
    title
    handle
    status
    vendor
    productType
    tags
    descriptionHtml
    createdAt
    updatedAt
    variants(first: 100) {
      edges {
        node {
          id
          title
          sku
          price
          compareAtPrice
          inventoryQuantity
        }
      }
    }
  }
}
'''

PRODUCTS_QUERY = '''
query products($first: Int!, $after: String, $query: String) {
  products(first: $first, after: $after, query: $query) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        id
        title
        handle
        status
        vendor
        productType
        createdAt
        totalInventory
      }
    }
  }
}
'''

CUSTOMER_QUERY = '''
query customer($id: ID!) {
  customer(id: $id) {
    id
    firstName
    lastName
    email
    phone
    tags
    note
    numberOfOrders
    createdAt
    defaultAddress {
      address1
      address2
      city
      province
      zip
      country
    }
  }
}
'''

CUSTOMERS_QUERY = '''
query customers($first: Int!, $after: String, $query: String) {
  customers(first: $first, after: $after, query: $query) {
    pageInfo {
      hasNextPage
      endCursor
    }
    edges {
      node {
        id
        firstName
        lastName
        email
        phone
        numberOfOrders
        createdAt
      }
    }
  }
}
'''

DELIVERY_PROFILES_QUERY = '''
query deliveryProfiles($first: Int!) {
  shop {
    name
  }
  deliveryProfiles(first: $first) {
    edges {
      node {
        id
        name
        originLocationCount
        locationsWithoutRatesCount
        profileLocationGroups {
          locationGroup {
            id
            locations(first: 50) {
              edges {
                node {
                  name
                  address {
                    formatted
                  }
                }
              }
            }
          }
          locationGroupZones(first: 50) {
            edges {
              node {
                zone {
                  id
                  name
                  countries {
                    id
                    name
                    provinces {
                      id
                      name
                    }
                  }
                }
                methodDefinitions(first: 10) {
                  edges {
                    node {
                      id
                      name
                      active
                      description
                      rateProvider {
                        ... on DeliveryRateDefinition {
                          id
                          price {
                            amount
                            currencyCode
                          }
                        }
                        ... on DeliveryParticipant {
                          id
                          fixedFee {
                            amount
                            currencyCode
                          }
                          percentageOfRateFee
                        }
                      }
                    }
                  }
                }
              }
            }
          }
        }
        profileItems(first: 50) {
          nodes {
            product {
              id
            }
          }
        }
      }
    }
  }
}
'''


def build_products_bulk_query() -> str:
    """
    Build bulk operation query for fetching the whole product catalog.

    Returns:
        Complete bulkOperationRunQuery mutation string
    """
    return '''
    mutation {
      bulkOperationRunQuery(
        query: """
        {
          products {
            edges {
              node {
                id
                title
                status
                createdAt
                variants {
                  edges {
                    node {
                      id
                      title
                      sku
                      price
                      compareAtPrice
                      inventoryQuantity
                    }
                  }
                }
              }
            }
          }
        }
        """
      ) {
        bulkOperation {
          id
          status
        }
        userErrors {
          field
          message
        }
      }
    }
    '''


# Query to poll the running bulk operation
CURRENT_BULK_OPERATION_QUERY = '''
query {
  currentBulkOperation {
    id
    status
    errorCode
    objectCount
    fileSize
    url
    partialDataUrl
  }
}
'''
