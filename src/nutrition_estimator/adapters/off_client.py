"""Open Food Facts barcode lookup client."""

from dataclasses import dataclass
from typing import Protocol
from urllib.parse import quote

import httpx


class BarcodeClient(Protocol):
    """Interface for barcode-keyed product lookups."""

    async def get_product(self, barcode: str) -> dict[str, object] | None:
        """Return raw product data for a barcode, or None when unknown."""


@dataclass
class HttpxOpenFoodFactsClient(BarcodeClient):
    """HTTPX-backed Open Food Facts client."""

    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(
        cls, base_url: str, timeout_seconds: float = 15
    ) -> "HttpxOpenFoodFactsClient":
        """Create an Open Food Facts client with a managed httpx session."""
        return cls(
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def get_product(self, barcode: str) -> dict[str, object] | None:
        """Fetch a product by barcode; non-2xx responses yield None."""
        url = f"{self.base_url}/api/v0/product/{quote(barcode, safe='')}.json"
        response = await self.http_client.get(url, timeout=self.timeout_seconds)
        if not response.is_success:
            return None
        payload = response.json()
        product = payload.get("product") if isinstance(payload, dict) else None
        return product if isinstance(product, dict) else None

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
