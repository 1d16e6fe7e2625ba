"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from nutrition_estimator.adapters.fdc_client import HttpxFdcClient
from nutrition_estimator.adapters.off_client import HttpxOpenFoodFactsClient
from nutrition_estimator.config import Settings
from nutrition_estimator.services.cache import InMemoryNutrientCache
from nutrition_estimator.services.estimator import MealEstimator
from nutrition_estimator.services.nutrition import NutrientResolver


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    nutrient_resolver: NutrientResolver
    meal_estimator: MealEstimator
    close_resources: Callable[[], Awaitable[None]]


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    fdc_client = HttpxFdcClient.create(
        api_key=resolved_settings.fdc_api_key,
        base_url=resolved_settings.fdc_base_url,
        timeout_seconds=resolved_settings.http_timeout_seconds,
    )
    barcode_client = HttpxOpenFoodFactsClient.create(
        base_url=resolved_settings.off_base_url,
        timeout_seconds=resolved_settings.http_timeout_seconds,
    )
    nutrient_resolver = NutrientResolver(
        fdc_client=fdc_client,
        barcode_client=barcode_client,
        cache=InMemoryNutrientCache(),
        page_size=resolved_settings.fdc_page_size,
    )
    meal_estimator = MealEstimator(
        resolver=nutrient_resolver,
        scale_by_bbox=resolved_settings.scale_by_bbox,
    )

    async def close_resources() -> None:
        await fdc_client.close()
        await barcode_client.close()

    return AppContainer(
        settings=resolved_settings,
        nutrient_resolver=nutrient_resolver,
        meal_estimator=meal_estimator,
        close_resources=close_resources,
    )
