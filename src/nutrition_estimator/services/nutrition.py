"""Nutrient resolution against USDA FDC with a barcode fallback."""

import logging
import math
import re
from collections.abc import Sequence
from dataclasses import dataclass, field

from nutrition_estimator.adapters.fdc_client import DEFAULT_DATA_TYPES, FdcClient
from nutrition_estimator.adapters.off_client import BarcodeClient
from nutrition_estimator.domain.nutrition import Macro
from nutrition_estimator.errors import ConfigurationError
from nutrition_estimator.services.cache import NutrientCache

# Standard FDC nutrient numbers, reported per 100 g.
_NUTRIENT_NUMBERS = {
    "208": "kcal",
    "203": "protein",
    "204": "fat",
    "205": "carbs",
}
KJ_PER_KCAL = 4.184

_TIER_COSTS: list[tuple[str, int]] = [
    ("sr legacy", 0),
    ("survey", 1),
    ("foundation", 2),
    ("branded", 3),
]
_UNKNOWN_TIER_COST = 9
_MISSING_TIER_COST = 99

_EGG_QUERY = re.compile(r"\begg\b")
_EGG_PART_QUERY = re.compile(r"white|yolk")
_EGG_WHITE_NAME = re.compile(r"egg,?\s*whites?|\bwhites?\b")
_EGG_YOLK_NAME = re.compile(r"egg,?\s*yolks?|\byolks?\b")
_EGG_PART_PENALTY = 2.0
_RAW_NAME = re.compile(r"raw")
# First implied cooking method wins: (query pattern, preferred name pattern).
_COOKING_METHODS: list[tuple[re.Pattern[str], re.Pattern[str]]] = [
    (re.compile(r"fried|sunny\s*side\s*up"), re.compile(r"fried")),
    (re.compile(r"boiled|hard\s*boiled|soft\s*boiled"), re.compile(r"boiled")),
    (re.compile(r"scrambled"), re.compile(r"scrambled")),
]
_METHOD_BONUS = 0.6
_RAW_PENALTY = 0.5
_FULL_MATCH_BONUS = 1.0
_TOKEN_BONUS = 0.1

_logger = logging.getLogger(__name__)


def normalize_label(label: str) -> str:
    """Return the cache key for a label."""
    return label.strip().lower()


@dataclass
class NutrientResolver:
    """Service resolving food labels to per-100g macros with caching."""

    fdc_client: FdcClient
    barcode_client: BarcodeClient
    cache: NutrientCache
    page_size: int = 5
    data_types: Sequence[str] = field(default=DEFAULT_DATA_TYPES)

    async def resolve(self, label: str) -> Macro | None:
        """Return per-100g macros for a label, or None when nothing matches.

        Outcomes are cached by normalized label, including negative ones, so a
        failing lookup is attempted at most once per cache lifetime.
        """
        key = normalize_label(label)
        if self.cache.contains(key):
            _logger.debug("Nutrient cache hit: label=%s", key)
            return self.cache.get(key)

        try:
            per100g = await self._search_per100g(label.strip())
        except ConfigurationError:
            raise
        except Exception as exc:
            _logger.warning(
                "Nutrient search failed (label=%s, status=%s): %s",
                key,
                _status_code_from_exception(exc),
                exc,
            )
            per100g = None
        self.cache.set(key, per100g)
        return per100g

    async def lookup_barcode(self, barcode: str) -> Macro | None:
        """Return per-100g macros for a packaged product barcode."""
        try:
            product = await self.barcode_client.get_product(barcode)
        except Exception as exc:
            _logger.warning(
                "Barcode lookup failed (barcode=%s, status=%s): %s",
                barcode,
                _status_code_from_exception(exc),
                exc,
            )
            return None
        if not product:
            return None
        return extract_per100g_from_product(product)

    async def _search_per100g(self, label: str) -> Macro | None:
        payload = await self.fdc_client.search_foods(
            label, page_size=self.page_size, data_types=self.data_types
        )
        foods = payload.get("foods") or []
        _logger.debug("Nutrient search FDC: query=%s results=%s", label, len(foods))
        food = pick_best_food(foods, label)
        if food is None:
            return None

        per100g = extract_per100g_from_nutrients(food)
        is_branded = str(food.get("dataType", "")).lower() == "branded"
        if (per100g is None or is_branded) and food.get("labelNutrients"):
            from_label = extract_per100g_from_label(food)
            if from_label is not None:
                per100g = from_label
        return per100g


def pick_best_food(
    foods: list[dict[str, object]], query: str
) -> dict[str, object] | None:
    """Pick the lowest-cost candidate; ties keep search order."""
    if not foods:
        return None
    return min(foods, key=lambda food: _candidate_cost(food, query))


def _candidate_cost(food: dict[str, object], query: str) -> float:
    """Score a search candidate; lower is better."""
    q = query.lower()
    name = str(food.get("description") or food.get("lowercaseDescription") or "")
    name = name.lower()

    overlap = sum(1 for token in q.split() if token in name)
    cost = (-_FULL_MATCH_BONUS if q in name else 0.0) - overlap * _TOKEN_BONUS

    if _EGG_QUERY.search(q) and not _EGG_PART_QUERY.search(q):
        if _EGG_WHITE_NAME.search(name):
            cost += _EGG_PART_PENALTY
        if _EGG_YOLK_NAME.search(name):
            cost += _EGG_PART_PENALTY

    for query_pattern, name_pattern in _COOKING_METHODS:
        if query_pattern.search(q):
            if name_pattern.search(name):
                cost -= _METHOD_BONUS
            if _RAW_NAME.search(name):
                cost += _RAW_PENALTY
            break

    return _tier_cost(food.get("dataType")) + cost


def _tier_cost(data_type: object) -> int:
    if not data_type:
        return _MISSING_TIER_COST
    lowered = str(data_type).lower()
    for marker, cost in _TIER_COSTS:
        if marker in lowered:
            return cost
    return _UNKNOWN_TIER_COST


def extract_per100g_from_nutrients(food: dict[str, object]) -> Macro | None:
    """Extract per-100g macros from an FDC nutrient list.

    All-zero results are treated as missing data rather than a zero-calorie food.
    """
    values = {"kcal": 0.0, "protein": 0.0, "fat": 0.0, "carbs": 0.0}
    for nutrient in food.get("foodNutrients") or []:
        if not isinstance(nutrient, dict):
            continue
        info = nutrient.get("nutrient") or {}
        number = str(nutrient.get("nutrientNumber") or info.get("number") or "")
        key = _NUTRIENT_NUMBERS.get(number)
        if key is None:
            continue
        unit = str(nutrient.get("unitName") or info.get("unitName") or "").lower()
        raw = nutrient.get("value")
        if raw is None:
            raw = nutrient.get("amount")
        value = _to_float(raw if raw is not None else 0)
        if value is None:
            continue
        if key == "kcal" and unit == "kj":
            value = value / KJ_PER_KCAL
        values[key] = value

    if not any(values.values()):
        return None
    return Macro(**values)


def extract_per100g_from_label(food: dict[str, object]) -> Macro | None:
    """Convert label-declared per-serving nutrients to per-100g values.

    Requires a positive serving size declared in grams.
    """
    label_nutrients = food.get("labelNutrients")
    serving_size = _to_float(food.get("servingSize"))
    serving_unit = str(food.get("servingSizeUnit") or "").lower()
    if not isinstance(label_nutrients, dict) or serving_unit != "g":
        return None
    if serving_size is None or serving_size <= 0:
        return None
    factor = 100 / serving_size
    return Macro(
        kcal=_label_value(label_nutrients, "calories") * factor,
        protein=_label_value(label_nutrients, "protein") * factor,
        fat=_label_value(label_nutrients, "fat") * factor,
        carbs=_label_value(label_nutrients, "carbohydrates") * factor,
    )


def extract_per100g_from_product(product: dict[str, object]) -> Macro | None:
    """Extract per-100g macros from an Open Food Facts product."""
    nutriments = product.get("nutriments")
    if not isinstance(nutriments, dict):
        return None
    kcal = _first_number(nutriments, "energy-kcal_100g", "energy_kcal_100g")
    if not kcal:
        kj = _first_number(nutriments, "energy_100g", "energy-kj_100g")
        if kj:
            kcal = kj / KJ_PER_KCAL
    return Macro(
        kcal=kcal,
        protein=_first_number(nutriments, "proteins_100g"),
        fat=_first_number(nutriments, "fat_100g"),
        carbs=_first_number(nutriments, "carbohydrates_100g"),
    )


def _label_value(label_nutrients: dict[str, object], name: str) -> float:
    entry = label_nutrients.get(name)
    if isinstance(entry, dict):
        entry = entry.get("value")
    return _to_float(entry) or 0.0


def _first_number(data: dict[str, object], *keys: str) -> float:
    for key in keys:
        if data.get(key) is not None:
            return _to_float(data[key]) or 0.0
    return 0.0


def _to_float(value: object) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int | float | str):
        try:
            number = float(value)
        except ValueError:
            return None
        return number if math.isfinite(number) else None
    return None


def _status_code_from_exception(exc: Exception) -> str:
    """Extract HTTP status code from an exception, if available."""
    response = getattr(exc, "response", None)
    status_code = getattr(response, "status_code", None)
    if isinstance(status_code, int):
        return str(status_code)
    return "n/a"
