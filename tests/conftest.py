"""
Shared test helpers: a fake Shopify client and a temporary database runner.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

import pytest

from kaghati.db import SQLiteDatabase
from kaghati.shopify import ShopifyClient


class FakeShopifyClient(ShopifyClient):
    """
    ShopifyClient that answers from canned responses instead of the network.

    Responses are keyed by the query/mutation string. A value can be a data
    dict, a list of them (consumed in order), an exception to raise, or a
    callable taking the variables.
    """

    def __init__(self, responses: Optional[Dict[str, Any]] = None):
        super().__init__("test-shop", "test-token")
        self.responses = dict(responses or {})
        self.calls: List[Tuple[str, Dict[str, Any]]] = []

    async def execute(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        self.calls.append((query, variables or {}))
        response = self.responses.get(query, {})

        if isinstance(response, list):
            response = response.pop(0) if response else {}
        if isinstance(response, Exception):
            raise response
        if callable(response):
            response = response(variables or {})
        return response

    def calls_to(self, query: str) -> List[Dict[str, Any]]:
        """Variables of every call made with the given query."""
        return [variables for q, variables in self.calls if q == query]


@pytest.fixture
def db_path(tmp_path) -> str:
    return str(tmp_path / "test.db")


@pytest.fixture
def run_with_db(db_path) -> Callable[[Callable[[SQLiteDatabase], Awaitable[Any]]], Any]:
    """Run an async scenario against a fresh database and return its result."""

    def runner(scenario: Callable[[SQLiteDatabase], Awaitable[Any]]) -> Any:
        async def main():
            db = SQLiteDatabase(db_path)
            await db.initialize()
            try:
                return await scenario(db)
            finally:
                await db.close()

        return asyncio.run(main())

    return runner
