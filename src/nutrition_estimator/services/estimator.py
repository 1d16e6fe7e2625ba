"""Meal estimation over a batch of detected items."""

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from nutrition_estimator.domain.detection import DetectedItem, DetectionPayload
from nutrition_estimator.domain.nutrition import ItemEstimate, Macro, MealEstimate
from nutrition_estimator.domain.portions import ContainerReference
from nutrition_estimator.errors import ConfigurationError
from nutrition_estimator.services.nutrition import NutrientResolver
from nutrition_estimator.services.portions import (
    estimate_portion,
    find_reference_container,
    refine_lookup_label,
)

_logger = logging.getLogger(__name__)


@dataclass
class BarcodeFallback:
    """Barcode lookup shared by every item of one batch.

    The first caller starts the lookup; later callers await the same task.
    """

    resolver: NutrientResolver
    barcode: str | None
    _task: "asyncio.Task[Macro | None] | None" = field(default=None, init=False)

    async def get(self) -> Macro | None:
        """Return per-100g macros for the batch barcode, if there is one."""
        if not self.barcode:
            return None
        if self._task is None:
            self._task = asyncio.ensure_future(
                self.resolver.lookup_barcode(self.barcode)
            )
        return await self._task

    def cancel(self) -> None:
        """Stop the lookup if it is still in flight."""
        if self._task is not None and not self._task.done():
            self._task.cancel()


@dataclass
class MealEstimator:
    """Service that turns a detection payload into per-item and total macros."""

    resolver: NutrientResolver
    scale_by_bbox: bool = True

    async def estimate(self, payload: DetectionPayload) -> MealEstimate:
        """Estimate every item concurrently, then total the finished results."""
        container = find_reference_container(payload.items)
        notes = payload.notes.lower()
        barcode = payload.barcodes[0].value if payload.barcodes else None
        fallback = BarcodeFallback(resolver=self.resolver, barcode=barcode)

        tasks = [
            asyncio.ensure_future(
                self._estimate_item(item, notes, container, fallback)
            )
            for item in payload.items
        ]
        try:
            items = await asyncio.gather(*tasks)
        except BaseException:
            # a failed batch must not leave lookups writing to the cache
            for task in tasks:
                task.cancel()
            fallback.cancel()
            raise
        return MealEstimate(items=list(items), total=sum_totals(items))

    async def _estimate_item(
        self,
        item: DetectedItem,
        notes: str,
        container: ContainerReference | None,
        fallback: BarcodeFallback,
    ) -> ItemEstimate:
        try:
            portion = estimate_portion(
                item, notes, container, scale_enabled=self.scale_by_bbox
            )
            lookup_label = refine_lookup_label(item.label, notes)
            per100g = await self.resolver.resolve(lookup_label)
            if per100g is None:
                per100g = await fallback.get()
            return ItemEstimate(
                id=item.id,
                label=item.label,
                grams=portion.grams,
                grams_per_unit=portion.grams_per_unit,
                count=portion.count,
                per100g=per100g,
                estimated=per100g.scaled(portion.grams) if per100g else None,
            )
        except ConfigurationError:
            raise
        except Exception:
            _logger.exception(
                "Failed to estimate item: id=%s label=%s", item.id, item.label
            )
            return ItemEstimate(
                id=item.id,
                label=item.label,
                grams=0.0,
                grams_per_unit=0.0,
                count=max(1, item.count or 1),
                per100g=None,
                estimated=None,
            )


def recompute_item(
    item: ItemEstimate,
    count: int | None = None,
    grams_per_unit: float | None = None,
) -> ItemEstimate:
    """Apply a count or grams-per-unit override without another lookup."""
    new_count = max(1, count) if count is not None else item.count
    new_grams_per_unit = (
        max(0.0, float(grams_per_unit))
        if grams_per_unit is not None
        else item.grams_per_unit
    )
    grams = new_grams_per_unit * new_count
    return replace(
        item,
        grams=grams,
        grams_per_unit=new_grams_per_unit,
        count=new_count,
        estimated=item.per100g.scaled(grams) if item.per100g else None,
    )


def sum_totals(items: Iterable[ItemEstimate]) -> Macro:
    """Sum estimated macros, skipping items without an estimate."""
    total = Macro.zero()
    for item in items:
        if item.estimated is not None:
            total = total + item.estimated
    return total
