"""Shared test fixtures."""

from collections.abc import Sequence
from dataclasses import dataclass, field

import pytest

from nutrition_estimator.adapters.fdc_client import DEFAULT_DATA_TYPES, FdcClient
from nutrition_estimator.adapters.off_client import BarcodeClient
from nutrition_estimator.config import Settings
from nutrition_estimator.containers import AppContainer
from nutrition_estimator.services.cache import InMemoryNutrientCache
from nutrition_estimator.services.estimator import MealEstimator
from nutrition_estimator.services.nutrition import NutrientResolver


def fdc_food(  # noqa: PLR0913
    description: str,
    data_type: str = "SR Legacy",
    kcal: float = 0.0,
    protein: float = 0.0,
    fat: float = 0.0,
    carbs: float = 0.0,
) -> dict[str, object]:
    """Build an FDC search hit with a standard nutrient list."""
    return {
        "fdcId": abs(hash(description)) % 1_000_000,
        "description": description,
        "dataType": data_type,
        "foodNutrients": [
            {"nutrientNumber": "208", "unitName": "KCAL", "value": kcal},
            {"nutrientNumber": "203", "unitName": "G", "value": protein},
            {"nutrientNumber": "204", "unitName": "G", "value": fat},
            {"nutrientNumber": "205", "unitName": "G", "value": carbs},
        ],
    }


@dataclass
class FakeFdcClient(FdcClient):
    """Fake FDC client returning canned foods per lower-cased query."""

    foods_by_query: dict[str, list[dict[str, object]]] = field(default_factory=dict)
    error: Exception | None = None
    queries: list[str] = field(default_factory=list)

    async def search_foods(
        self,
        query: str,
        page_size: int = 5,
        data_types: Sequence[str] = DEFAULT_DATA_TYPES,
    ) -> dict[str, object]:
        self.queries.append(query)
        if self.error is not None:
            raise self.error
        return {"foods": self.foods_by_query.get(query.lower(), [])}


@dataclass
class FakeBarcodeClient(BarcodeClient):
    """Fake barcode client with in-memory products."""

    products: dict[str, dict[str, object]] = field(default_factory=dict)
    calls: list[str] = field(default_factory=list)

    async def get_product(self, barcode: str) -> dict[str, object] | None:
        self.calls.append(barcode)
        return self.products.get(barcode)


@pytest.fixture
def settings() -> Settings:
    return Settings(fdc_api_key="fdc-key")


@pytest.fixture
def fdc_client() -> FakeFdcClient:
    return FakeFdcClient(
        foods_by_query={
            "fried rice": [fdc_food("Rice, fried, plain", kcal=200, protein=4)],
            "egg": [fdc_food("Egg, whole, raw, fresh", kcal=150, protein=12)],
        }
    )


@pytest.fixture
def barcode_client() -> FakeBarcodeClient:
    return FakeBarcodeClient()


@pytest.fixture
def resolver(
    fdc_client: FakeFdcClient, barcode_client: FakeBarcodeClient
) -> NutrientResolver:
    return NutrientResolver(
        fdc_client=fdc_client,
        barcode_client=barcode_client,
        cache=InMemoryNutrientCache(),
    )


@pytest.fixture
def container(settings: Settings, resolver: NutrientResolver) -> AppContainer:
    async def close_resources() -> None:
        return None

    return AppContainer(
        settings=settings,
        nutrient_resolver=resolver,
        meal_estimator=MealEstimator(resolver=resolver, scale_by_bbox=False),
        close_resources=close_resources,
    )
