"""Open Food Facts search client."""

from dataclasses import dataclass
from typing import Protocol

import httpx


class OpenFoodFactsClient(Protocol):
    """Interface for Open Food Facts product searches."""

    async def search_products(
        self, query: str, page_size: int = 10, australia_only: bool = False
    ) -> dict[str, object]:
        """Search products by query and return raw API data."""


@dataclass
class HttpxOpenFoodFactsClient(OpenFoodFactsClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(cls, base_url: str) -> "HttpxOpenFoodFactsClient":
        """Create a client with a managed httpx session."""
        return cls(base_url=base_url, http_client=httpx.AsyncClient())

    async def search_products(
        self, query: str, page_size: int = 10, australia_only: bool = False
    ) -> dict[str, object]:
        """Search products, optionally limited to those sold in Australia."""
        params: dict[str, str | int] = {
            "search_terms": query,
            "search_simple": 1,
            "action": "process",
            "json": 1,
            "page_size": page_size,
        }
        if australia_only:
            params.update(
                {
                    "tagtype_0": "countries",
                    "tag_contains_0": "contains",
                    "tag_0": "australia",
                }
            )
        response = await self.http_client.get(
            f"{self.base_url}/cgi/search.pl",
            params=params,
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
