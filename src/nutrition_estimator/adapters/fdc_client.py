"""USDA FoodData Central API client."""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Protocol

import httpx

from nutrition_estimator.errors import ConfigurationError

DEFAULT_DATA_TYPES: tuple[str, ...] = (
    "SR Legacy",
    "Survey (FNDDS)",
    "Foundation",
    "Branded",
)


class FdcClient(Protocol):
    """Interface for FoodData Central search."""

    async def search_foods(
        self,
        query: str,
        page_size: int = 5,
        data_types: Sequence[str] = DEFAULT_DATA_TYPES,
    ) -> dict[str, object]:
        """Search foods by free text and return raw API data."""


@dataclass
class HttpxFdcClient(FdcClient):
    """HTTPX-backed FDC client."""

    api_key: str | None
    base_url: str
    http_client: httpx.AsyncClient
    timeout_seconds: float = 15

    @classmethod
    def create(
        cls, api_key: str | None, base_url: str, timeout_seconds: float = 15
    ) -> "HttpxFdcClient":
        """Create an FDC client with a managed httpx session."""
        return cls(
            api_key=api_key,
            base_url=base_url,
            http_client=httpx.AsyncClient(),
            timeout_seconds=timeout_seconds,
        )

    async def search_foods(
        self,
        query: str,
        page_size: int = 5,
        data_types: Sequence[str] = DEFAULT_DATA_TYPES,
    ) -> dict[str, object]:
        """Search foods by query across the requested data types."""
        if not self.api_key:
            raise ConfigurationError("FDC API key is not configured")
        url = f"{self.base_url}/foods/search"
        response = await self.http_client.get(
            url,
            params={
                "api_key": self.api_key,
                "query": query,
                "pageSize": page_size,
                "dataType": ",".join(data_types),
            },
            timeout=self.timeout_seconds,
        )
        response.raise_for_status()
        return response.json()

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.http_client.aclose()
