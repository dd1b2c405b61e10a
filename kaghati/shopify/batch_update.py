"""
Batch update operations for Shopify products.
"""

import asyncio
import logging
from typing import Any, Dict, List

from kaghati.shopify.client import ShopifyClient, ShopifyClientError
from kaghati.shopify.mutations import PRODUCT_VARIANTS_BULK_UPDATE

logger = logging.getLogger(__name__)


async def batch_update_variants(
    client: ShopifyClient,
    updates_by_product: Dict[str, List[dict]],
    delay_seconds: float = 0.5
) -> Dict[str, Any]:
    """
    Update product variants in batches with rate limiting.

    Args:
        client: ShopifyClient instance
        updates_by_product: Dict mapping product GID to list of variant inputs
                           Each input needs an "id" plus the fields to change,
                           e.g. {"id": variant_id, "price": "499.00"}
        delay_seconds: Delay between API calls to respect rate limits

    Returns:
        Dict with "success_count", "error_count", "errors_by_product",
        "user_errors_by_product" (the raw userErrors) and
        "variants_by_product" (the updated variants Shopify returned)
    """
    success_count = 0
    error_count = 0
    errors_by_product: Dict[str, str] = {}
    user_errors_by_product: Dict[str, List[dict]] = {}
    variants_by_product: Dict[str, List[dict]] = {}

    total = len(updates_by_product)
    processed = 0

    for product_id, variants in updates_by_product.items():
        try:
            data = await client.execute(
                PRODUCT_VARIANTS_BULK_UPDATE,
                variables={
                    "productId": product_id,
                    "variants": variants
                }
            )

            result = data.get("productVariantsBulkUpdate") or {}
            user_errors = result.get("userErrors", [])

            if user_errors:
                error_msgs = [e.get("message", str(e)) for e in user_errors]
                errors_by_product[product_id] = "; ".join(error_msgs)
                user_errors_by_product[product_id] = user_errors
                error_count += 1
                logger.warning(f"Failed to update {product_id}: {error_msgs}")
            else:
                success_count += 1
                variants_by_product[product_id] = result.get("productVariants") or []
                logger.debug(f"Updated {len(variants)} variants for {product_id}")

            processed += 1
            if processed % 100 == 0 or processed == total:
                logger.info(f"Progress: {processed}/{total} products ({int(processed/total*100)}%)")

            if delay_seconds > 0 and processed < total:
                await asyncio.sleep(delay_seconds)

        except ShopifyClientError as e:
            processed += 1
            errors_by_product[product_id] = str(e)
            error_count += 1
            logger.error(f"Error updating {product_id}: {e}")

    logger.info(f"Batch update complete: {success_count} succeeded, {error_count} failed")

    return {
        "success_count": success_count,
        "error_count": error_count,
        "errors_by_product": errors_by_product,
        "user_errors_by_product": user_errors_by_product,
        "variants_by_product": variants_by_product,
    }
