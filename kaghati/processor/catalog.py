"""
Products, variants and customers, read and written straight through to Shopify.
"""

import logging
from typing import Any, Dict, List, Optional

from ..shopify import (
    ShopifyClient,
    ShopifyClientError,
    ShopifyUserError,
    batch_update_variants,
    to_gid,
    from_gid,
)
from ..shopify.mutations import (
    CUSTOMER_CREATE,
    CUSTOMER_UPDATE,
    PRODUCT_CREATE,
    PRODUCT_UPDATE,
)
from ..shopify.queries import (
    CUSTOMER_QUERY,
    CUSTOMERS_QUERY,
    PRODUCT_QUERY,
    PRODUCTS_QUERY,
)

logger = logging.getLogger(__name__)


def _flatten(node: Dict[str, Any], connection: Optional[str] = None) -> Dict[str, Any]:
    """Replace a {edges: [{node}]} field with a plain list and add the numeric id."""
    flat = dict(node)
    if connection and connection in flat:
        flat[connection] = [edge["node"] for edge in (flat[connection] or {}).get("edges", [])]
    flat["legacy_id"] = from_gid(node["id"])
    return flat


async def _page(
    client: ShopifyClient,
    query: str,
    root: str,
    first: int,
    after: Optional[str],
    search: Optional[str],
) -> Dict[str, Any]:
    data = await client.execute(query, {"first": first, "after": after, "query": search})
    connection = data.get(root) or {}
    return {
        root: [_flatten(edge["node"]) for edge in connection.get("edges", [])],
        "page_info": connection.get("pageInfo") or {},
    }


# ===== Products =====

async def list_products(
    client: ShopifyClient,
    first: int = 25,
    after: Optional[str] = None,
    query: Optional[str] = None,
) -> Dict[str, Any]:
    return await _page(client, PRODUCTS_QUERY, "products", first, after, query)


async def get_product(client: ShopifyClient, product_id: str) -> Optional[Dict[str, Any]]:
    data = await client.execute(PRODUCT_QUERY, {"id": to_gid("Product", product_id)})
    node = data.get("product")
    return _flatten(node, "variants") if node else None


async def create_product(client: ShopifyClient, product_input: Dict[str, Any]) -> Dict[str, Any]:
    logger.info(f"Creating product: {product_input.get('title')}")
    payload = await client.mutate(PRODUCT_CREATE, {"input": product_input}, "productCreate")
    product = payload.get("product") or {}
    logger.info(f"Created product {product.get('id')}")
    return product


async def update_product(
    client: ShopifyClient, product_id: str, product_input: Dict[str, Any]
) -> Dict[str, Any]:
    product_input = {**product_input, "id": to_gid("Product", product_id)}
    payload = await client.mutate(PRODUCT_UPDATE, {"input": product_input}, "productUpdate")
    product = payload.get("product") or {}
    logger.info(f"Updated product {product.get('id')}")
    return product


async def update_variants(
    client: ShopifyClient,
    product_id: str,
    variants: List[Dict[str, Any]],
) -> Dict[str, Any]:
    """
    Update fields of several variants of one product.

    Each variant dict needs an "id" (numeric or GID) plus the
    ProductVariantsBulkInput fields to change.

    Raises:
        ShopifyUserError: If Shopify rejects the update
        ShopifyClientError: If the request itself fails
    """
    product_gid = to_gid("Product", product_id)
    inputs = [
        {**variant, "id": to_gid("ProductVariant", variant["id"])}
        for variant in variants
    ]
    result = await batch_update_variants(client, {product_gid: inputs}, delay_seconds=0)

    if product_gid in result["user_errors_by_product"]:
        raise ShopifyUserError(
            "productVariantsBulkUpdate", result["user_errors_by_product"][product_gid]
        )
    if product_gid in result["errors_by_product"]:
        raise ShopifyClientError(result["errors_by_product"][product_gid])

    logger.info(f"Updated {len(inputs)} variants of {product_gid}")
    return result


# ===== Customers =====

async def list_customers(
    client: ShopifyClient,
    first: int = 25,
    after: Optional[str] = None,
    query: Optional[str] = None,
) -> Dict[str, Any]:
    return await _page(client, CUSTOMERS_QUERY, "customers", first, after, query)


async def get_customer(client: ShopifyClient, customer_id: str) -> Optional[Dict[str, Any]]:
    data = await client.execute(CUSTOMER_QUERY, {"id": to_gid("Customer", customer_id)})
    node = data.get("customer")
    return _flatten(node) if node else None


async def create_customer(client: ShopifyClient, customer_input: Dict[str, Any]) -> Dict[str, Any]:
    payload = await client.mutate(CUSTOMER_CREATE, {"input": customer_input}, "customerCreate")
    customer = payload.get("customer") or {}
    logger.info(f"Created customer {customer.get('id')}")
    return customer


async def update_customer(
    client: ShopifyClient, customer_id: str, customer_input: Dict[str, Any]
) -> Dict[str, Any]:
    customer_input = {**customer_input, "id": to_gid("Customer", customer_id)}
    payload = await client.mutate(CUSTOMER_UPDATE, {"input": customer_input}, "customerUpdate")
    customer = payload.get("customer") or {}
    logger.info(f"Updated customer {customer.get('id')}")
    return customer
