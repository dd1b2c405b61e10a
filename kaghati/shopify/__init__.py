"""
Shopify API module.
"""

from kaghati.shopify.client import (
    ShopifyClient,
    ShopifyClientError,
    ShopifyAuthError,
    ShopifyRateLimitError,
    ShopifyUserError,
    normalize_shop_domain,
    to_gid,
    from_gid,
)
from kaghati.shopify.bulk_operations import (
    BulkOperationsManager,
    BulkOperationError,
    BulkOperationTimeout,
    ParsedProduct,
    parse_product_lines,
)
from kaghati.shopify.batch_update import batch_update_variants

__all__ = [
    "ShopifyClient",
    "ShopifyClientError",
    "ShopifyAuthError",
    "ShopifyRateLimitError",
    "ShopifyUserError",
    "normalize_shop_domain",
    "to_gid",
    "from_gid",
    "BulkOperationsManager",
    "BulkOperationError",
    "BulkOperationTimeout",
    "ParsedProduct",
    "parse_product_lines",
    "batch_update_variants",
]
