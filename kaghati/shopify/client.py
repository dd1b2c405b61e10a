"""
Shopify GraphQL Admin API client.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Union

import httpx

logger = logging.getLogger(__name__)


GID_PREFIX = "gid://shopify/"


class ShopifyClientError(Exception):
    """Base exception for Shopify client errors."""
    pass


class ShopifyAuthError(ShopifyClientError):
    """Authentication error."""
    pass


class ShopifyRateLimitError(ShopifyClientError):
    """Rate limit exceeded."""

    def __init__(self, message: str, retry_after: Optional[float] = None):
        super().__init__(message)
        self.retry_after = retry_after


class ShopifyUserError(ShopifyClientError):
    """A mutation was accepted but returned userErrors."""

    def __init__(self, operation: str, errors: List[Dict[str, Any]]):
        messages = [e.get("message", str(e)) for e in errors]
        super().__init__(f"{operation} failed: {'; '.join(messages)}")
        self.operation = operation
        self.errors = errors


def to_gid(kind: str, value: Union[str, int]) -> str:
    """
    Build a Shopify GID from a numeric id.

    Values that are already GIDs are returned unchanged.
    """
    value = str(value)
    if value.startswith(GID_PREFIX):
        return value
    return f"{GID_PREFIX}{kind}/{value}"


def from_gid(value: Union[str, int]) -> str:
    """Return the trailing numeric id of a GID (or the value itself)."""
    value = str(value)
    if value.startswith(GID_PREFIX):
        return value.rsplit("/", 1)[-1]
    return value


class ShopifyClient:
    """
    Async HTTP client for Shopify GraphQL Admin API.

    Handles authentication, rate limiting, and retries.
    """

    API_VERSION = "2025-01"
    MAX_RETRIES = 5
    BASE_RETRY_DELAY = 1.0  # seconds

    def __init__(
        self,
        shop_domain: str,
        access_token: str,
        api_version: Optional[str] = None
    ):
        """
        Initialize Shopify client.

        Args:
            shop_domain: Store domain (e.g., "kaghati.myshopify.com")
            access_token: Admin API access token
            api_version: Admin API version, defaults to API_VERSION
        """
        self.shop_domain = normalize_shop_domain(shop_domain)
        self.access_token = access_token
        self.api_version = api_version or self.API_VERSION
        self.graphql_url = (
            f"https://{self.shop_domain}/admin/api/{self.api_version}/graphql.json"
        )

        self._client: Optional[httpx.AsyncClient] = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=httpx.Timeout(60.0, connect=10.0),
                headers={
                    "Content-Type": "application/json",
                    "X-Shopify-Access-Token": self.access_token,
                },
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def execute(
        self,
        query: str,
        variables: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Execute a GraphQL query/mutation with retry logic.

        Args:
            query: GraphQL query or mutation string
            variables: Optional variables for the query

        Returns:
            The 'data' portion of the GraphQL response

        Raises:
            ShopifyAuthError: If authentication fails
            ShopifyRateLimitError: If rate limit exceeded after retries
            ShopifyClientError: For other errors
        """
        client = await self._get_client()
        payload = {"query": query}
        if variables:
            payload["variables"] = variables

        last_error: Optional[Exception] = None

        for attempt in range(self.MAX_RETRIES):
            try:
                response = await client.post(self.graphql_url, json=payload)

                if response.status_code == 401:
                    raise ShopifyAuthError(
                        f"Authentication failed for {self.shop_domain}"
                    )

                if response.status_code == 429:
                    retry_after = float(
                        response.headers.get("Retry-After", self.BASE_RETRY_DELAY)
                    )
                    raise ShopifyRateLimitError(
                        "Rate limit exceeded", retry_after=retry_after
                    )

                response.raise_for_status()

                result = response.json()

                if "errors" in result and result["errors"]:
                    errors = result["errors"]
                    error_messages = [e.get("message", str(e)) for e in errors]

                    if any("throttl" in msg.lower() for msg in error_messages):
                        raise ShopifyRateLimitError(
                            f"GraphQL throttled: {error_messages}"
                        )

                    raise ShopifyClientError(
                        f"GraphQL errors: {error_messages}"
                    )

                if "extensions" in result and "cost" in result["extensions"]:
                    cost = result["extensions"]["cost"]
                    throttle = cost.get("throttleStatus", {})
                    available = throttle.get("currentlyAvailable", 0)
                    if available < 100:
                        logger.warning(
                            f"Low rate limit points: {available} available"
                        )

                return result.get("data") or {}

            except ShopifyAuthError:
                # Don't retry auth errors
                raise

            except ShopifyRateLimitError as e:
                last_error = e
                delay = e.retry_after or (
                    self.BASE_RETRY_DELAY * (2 ** attempt)
                )
                logger.warning(
                    f"Rate limited, waiting {delay:.1f}s "
                    f"(attempt {attempt + 1}/{self.MAX_RETRIES})"
                )
                await asyncio.sleep(delay)

            except httpx.RequestError as e:
                last_error = ShopifyClientError(f"Request error: {e}")
                delay = self.BASE_RETRY_DELAY * (2 ** attempt)
                logger.warning(
                    f"Request error, retrying in {delay:.1f}s: {e}"
                )
                await asyncio.sleep(delay)

            except ShopifyClientError:
                raise

            except Exception as e:
                last_error = ShopifyClientError(f"Unexpected error: {e}")
                logger.error(f"Unexpected error: {e}")
                raise last_error

        # All retries exhausted
        raise last_error or ShopifyClientError("Max retries exceeded")

    async def mutate(
        self,
        mutation: str,
        variables: Optional[Dict[str, Any]],
        root: str,
    ) -> Dict[str, Any]:
        """
        Execute a mutation and return its root payload.

        Raises:
            ShopifyUserError: If the payload carries userErrors
        """
        data = await self.execute(mutation, variables)
        payload = data.get(root) or {}
        user_errors = payload.get("userErrors") or []
        if user_errors:
            raise ShopifyUserError(root, user_errors)
        return payload

    async def __aenter__(self):
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        await self.close()


def normalize_shop_domain(shop_domain: str) -> str:
    """Strip scheme and trailing slash, and append .myshopify.com to bare shop names."""
    domain = shop_domain.strip().lower()
    if domain.startswith("https://"):
        domain = domain[8:]
    elif domain.startswith("http://"):
        domain = domain[7:]
    domain = domain.rstrip("/")
    if domain and "." not in domain:
        domain = f"{domain}.myshopify.com"
    return domain
