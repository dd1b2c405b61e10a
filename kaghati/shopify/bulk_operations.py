"""
Shopify Bulk Operations handler.

Manages submitting, polling, and downloading bulk operation results.
"""

import asyncio
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, AsyncIterator, Dict, List, Optional

import httpx

from kaghati.shopify.client import ShopifyClient, ShopifyClientError
from kaghati.shopify.queries import (
    CURRENT_BULK_OPERATION_QUERY,
    build_products_bulk_query,
)

logger = logging.getLogger(__name__)


class BulkOperationError(ShopifyClientError):
    """Error during bulk operation."""
    pass


class BulkOperationTimeout(BulkOperationError):
    """Bulk operation timed out."""
    pass


@dataclass
class BulkOperationResult:
    """Result of a completed bulk operation."""

    operation_id: str
    status: str
    object_count: int
    url: Optional[str]


@dataclass
class ParsedProduct:
    """Parsed product data from bulk operation."""

    product_id: str
    title: str
    status: str
    created_at: Optional[datetime]
    variants: List[Dict[str, Any]]


def _parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (ValueError, AttributeError):
        return None


class BulkOperationsManager:
    """
    Manages Shopify bulk operations for efficient large-scale data retrieval.
    """

    # Polling configuration
    INITIAL_POLL_INTERVAL = 5  # seconds
    MAX_POLL_INTERVAL = 60  # seconds
    POLL_INTERVAL_MULTIPLIER = 1.5
    MAX_POLL_TIME = 3600 * 2  # 2 hours max

    def __init__(self, client: ShopifyClient):
        self.client = client

    async def fetch_products(self) -> List[ParsedProduct]:
        """
        Fetch the full product catalog using bulk operations.

        Returns:
            List of parsed product data with variants
        """
        logger.info("Starting bulk fetch of products")

        result = await self._run_bulk_operation(build_products_bulk_query())

        if not result.url:
            logger.info("No products found")
            return []

        products = await self._download_and_parse_products(result.url)
        logger.info(f"Fetched {len(products)} products")

        return products

    async def _run_bulk_operation(self, mutation: str) -> BulkOperationResult:
        """
        Submit and wait for a bulk operation to complete.

        Args:
            mutation: The bulkOperationRunQuery mutation

        Returns:
            BulkOperationResult with status and download URL
        """
        data = await self.client.execute(mutation)

        bulk_op = data.get("bulkOperationRunQuery", {})
        user_errors = bulk_op.get("userErrors", [])

        if user_errors:
            error_msgs = [e.get("message", str(e)) for e in user_errors]
            raise BulkOperationError(f"Bulk operation failed: {error_msgs}")

        operation = bulk_op.get("bulkOperation") or {}
        operation_id = operation.get("id")

        if not operation_id:
            raise BulkOperationError("No operation ID returned")

        logger.info(f"Bulk operation started: {operation_id}")

        return await self._poll_operation(operation_id)

    async def _poll_operation(self, operation_id: str) -> BulkOperationResult:
        """
        Poll a bulk operation until it completes.

        Args:
            operation_id: The bulk operation GID

        Returns:
            BulkOperationResult when complete
        """
        poll_interval = self.INITIAL_POLL_INTERVAL
        total_time = 0

        while total_time < self.MAX_POLL_TIME:
            data = await self.client.execute(CURRENT_BULK_OPERATION_QUERY)

            operation = data.get("currentBulkOperation") or {}
            status = operation.get("status", "UNKNOWN")

            logger.debug(
                f"Bulk operation {operation_id}: {status}, "
                f"objects: {operation.get('objectCount', 0)}"
            )

            if status == "COMPLETED":
                return BulkOperationResult(
                    operation_id=operation_id,
                    status=status,
                    object_count=int(operation.get("objectCount") or 0),
                    url=operation.get("url"),
                )

            if status == "FAILED":
                raise BulkOperationError(
                    f"Bulk operation failed with error: "
                    f"{operation.get('errorCode', 'UNKNOWN')}"
                )

            if status == "CANCELED":
                raise BulkOperationError("Bulk operation was canceled")

            if status not in ("CREATED", "RUNNING"):
                raise BulkOperationError(f"Unexpected status: {status}")

            await asyncio.sleep(poll_interval)
            total_time += poll_interval
            poll_interval = min(
                poll_interval * self.POLL_INTERVAL_MULTIPLIER,
                self.MAX_POLL_INTERVAL,
            )

        raise BulkOperationTimeout(
            f"Bulk operation did not complete within {self.MAX_POLL_TIME}s"
        )

    async def _download_jsonl(self, url: str) -> AsyncIterator[Dict[str, Any]]:
        """
        Download and stream JSONL file line by line.

        Yields:
            Parsed JSON objects from each line
        """
        async with httpx.AsyncClient() as client:
            async with client.stream("GET", url) as response:
                response.raise_for_status()

                buffer = ""
                async for chunk in response.aiter_text():
                    buffer += chunk
                    while "\n" in buffer:
                        line, buffer = buffer.split("\n", 1)
                        line = line.strip()
                        if line:
                            try:
                                yield json.loads(line)
                            except json.JSONDecodeError as e:
                                logger.warning(f"Failed to parse line: {e}")

                # Handle last line without newline
                if buffer.strip():
                    try:
                        yield json.loads(buffer.strip())
                    except json.JSONDecodeError as e:
                        logger.warning(f"Failed to parse final line: {e}")

    async def _download_and_parse_products(self, url: str) -> List[ParsedProduct]:
        return parse_product_lines([obj async for obj in self._download_jsonl(url)])


def parse_product_lines(lines: List[Dict[str, Any]]) -> List[ParsedProduct]:
    """
    Rebuild products from bulk JSONL objects.

    Nested connections come back flattened, with each variant pointing at
    its product through __parentId.
    """
    products: Dict[str, ParsedProduct] = {}

    for obj in lines:
        obj_id = obj.get("id", "")
        parent_id = obj.get("__parentId")

        if obj_id.startswith("gid://shopify/Product/"):
            products[obj_id] = ParsedProduct(
                product_id=obj_id,
                title=obj.get("title", ""),
                status=obj.get("status", ""),
                created_at=_parse_timestamp(obj.get("createdAt")) or datetime.now(timezone.utc),
                variants=[],
            )

        elif obj_id.startswith("gid://shopify/ProductVariant/"):
            if parent_id and parent_id in products:
                products[parent_id].variants.append({
                    "id": obj_id,
                    "title": obj.get("title"),
                    "sku": obj.get("sku"),
                    "price": obj.get("price"),
                    "compare_at_price": obj.get("compareAtPrice"),
                    "inventory_quantity": obj.get("inventoryQuantity"),
                })

    return list(products.values())
