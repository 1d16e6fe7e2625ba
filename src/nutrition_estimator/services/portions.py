"""Portion estimation from detections, container geometry and notes."""

import re
from collections.abc import Iterable
from dataclasses import dataclass

from nutrition_estimator.domain.detection import DetectedItem
from nutrition_estimator.domain.portions import (
    ABSOLUTE_RATIO_CLAMP,
    AREA_EXPONENT,
    CONTAINER_PATTERNS,
    DEFAULT_BASE_AREA,
    DEFAULT_BASE_AREA_IN_CONTAINER,
    DEFAULT_BASE_GRAMS,
    DEFAULT_UNIT_RANGE,
    EGG_LABEL,
    EGG_STYLE_LABELS,
    FALLBACK_MAX_GRAMS,
    FALLBACK_MIN_GRAMS,
    IN_CONTAINER_RATIO_CLAMP,
    LABEL_AREA_OVERRIDES,
    LABEL_AREA_OVERRIDES_IN_CONTAINER,
    LABEL_PORTION_RULES,
    LABEL_SYNONYMS,
    MAX_COUNT,
    MAX_SLICE_COUNT,
    MIN_CONTAINER_AREA,
    NUMBER_WORDS,
    UNIT_BASE_AREA,
    UNIT_BASE_AREA_IN_CONTAINER,
    UNIT_BASE_GRAMS,
    UNIT_GRAM_RANGES,
    AreaOverride,
    ContainerReference,
    GramRange,
    PortionRule,
)

# Up to four filler words between a number and the noun ("two sunny side up eggs").
_FILLER = r"(?:\S+\s+){0,4}?"
_NUMBER_WORD_GROUP = "|".join(NUMBER_WORDS)
_GENERIC_UNIT_PATTERNS: dict[str, re.Pattern[str]] = {
    "slice": re.compile(r"(\d+)\s+slices?\b"),
    "piece": re.compile(r"(\d+)\s+pieces?\b"),
}


@dataclass(frozen=True)
class PortionBase:
    """Baseline grams for one unit of an item and the band it must stay in."""

    base_grams: float
    band: GramRange
    rule: PortionRule | None = None


@dataclass(frozen=True)
class Portion:
    """Resolved portion for one detected item."""

    grams_per_unit: float
    count: int

    @property
    def grams(self) -> float:
        """Total grams across all units."""
        return self.grams_per_unit * self.count


def find_rule(label: str) -> PortionRule | None:
    """Return the first label rule matching the label."""
    for rule in LABEL_PORTION_RULES:
        if rule.pattern.search(label):
            return rule
    return None


def estimate_base_grams(item: DetectedItem) -> PortionBase:
    """Return baseline grams per unit from label rules, else unit heuristics."""
    unit = item.suggested_portion_unit
    unit_range = UNIT_GRAM_RANGES.get(unit)
    rule = find_rule(item.label)
    if rule is not None:
        band = GramRange(
            min_grams=_first_defined(
                rule.min_grams,
                unit_range.min_grams if unit_range else None,
                FALLBACK_MIN_GRAMS,
            ),
            max_grams=_first_defined(
                rule.max_grams,
                unit_range.max_grams if unit_range else None,
                FALLBACK_MAX_GRAMS,
            ),
        )
        return PortionBase(base_grams=rule.base_grams, band=band, rule=rule)
    return PortionBase(
        base_grams=UNIT_BASE_GRAMS.get(unit, DEFAULT_BASE_GRAMS),
        band=unit_range or DEFAULT_UNIT_RANGE,
    )


def find_reference_container(
    items: Iterable[DetectedItem],
) -> ContainerReference | None:
    """Return the largest detected plate or bowl, if any.

    Equal areas keep the container seen first.
    """
    best: ContainerReference | None = None
    for item in items:
        container_type = _container_type(item.label)
        if container_type is None:
            continue
        area = item.area
        if best is None or area > best.area:
            best = ContainerReference(area=area, type=container_type)
    return best


def scale_grams_by_bbox(
    item: DetectedItem,
    base_grams: float,
    container: ContainerReference | None = None,
    *,
    scale_enabled: bool = True,
) -> float:
    """Scale baseline grams by bounding-box area relative to a baseline area.

    With a reference container the item's area is divided by the container's
    area, which cancels out camera distance. Without one the raw image fraction
    is compared against absolute baselines with a looser clamp.
    """
    if not scale_enabled:
        return base_grams

    unit = item.suggested_portion_unit
    in_container = container is not None and container.area > MIN_CONTAINER_AREA
    area = item.area / container.area if in_container else item.area

    if in_container:
        baseline_area = _override_area(
            item.label,
            LABEL_AREA_OVERRIDES_IN_CONTAINER,
            UNIT_BASE_AREA_IN_CONTAINER.get(unit, DEFAULT_BASE_AREA_IN_CONTAINER),
        )
    else:
        baseline_area = _override_area(
            item.label,
            LABEL_AREA_OVERRIDES,
            UNIT_BASE_AREA.get(unit, DEFAULT_BASE_AREA),
        )
    ratio = area / baseline_area if baseline_area > 0 else 1.0

    portion_base = estimate_base_grams(item)
    rule = portion_base.rule
    if in_container:
        low, high = (
            rule.in_container_clamp
            if rule is not None and rule.in_container_clamp
            else IN_CONTAINER_RATIO_CLAMP
        )
    else:
        low, high = ABSOLUTE_RATIO_CLAMP
    factor = _clamp(ratio, low, high) ** AREA_EXPONENT

    band = portion_base.band
    return _clamp(base_grams * factor, band.min_grams, band.max_grams)


def label_synonyms(label: str) -> list[str]:
    """Return nouns that may refer to the label in free-text notes."""
    lowered = label.lower()
    for pattern, synonyms in LABEL_SYNONYMS:
        if pattern.search(lowered):
            return synonyms
    return [lowered]


def infer_count_from_notes(item: DetectedItem, notes: str | None) -> int | None:
    """Infer an item count from notes like "2 eggs" or "tiga telur"."""
    if not notes:
        return None
    text = notes.lower()
    unit = item.suggested_portion_unit
    max_count = MAX_SLICE_COUNT if unit == "slice" else MAX_COUNT
    synonyms = [re.escape(synonym) for synonym in label_synonyms(item.label)]

    for synonym in synonyms:
        match = re.search(rf"(\d+)\s+{_FILLER}{synonym}s?\b", text)
        if match:
            return _clamp_count(int(match.group(1)), max_count)

    for synonym in synonyms:
        match = re.search(
            rf"\b({_NUMBER_WORD_GROUP})\s+{_FILLER}{synonym}s?\b", text
        )
        if match:
            return _clamp_count(NUMBER_WORDS[match.group(1)], max_count)

    generic = _GENERIC_UNIT_PATTERNS.get(unit)
    if generic is not None:
        match = generic.search(text)
        if match:
            return _clamp_count(int(match.group(1)), max_count)
    return None


def refine_lookup_label(label: str, notes: str | None) -> str:
    """Return a more specific nutrient lookup label when notes describe an egg."""
    if not notes or not EGG_LABEL.search(label):
        return label
    text = notes.lower()
    for pattern, refined in EGG_STYLE_LABELS:
        if pattern.search(text):
            return refined
    return label


def estimate_portion(
    item: DetectedItem,
    notes: str | None = None,
    container: ContainerReference | None = None,
    *,
    scale_enabled: bool = True,
) -> Portion:
    """Resolve grams per unit and count for one detected item.

    Bounding-box scaling only applies to single items; a union box around
    several items says little about each one.
    """
    portion_base = estimate_base_grams(item)
    count = item.count
    if count is None:
        count = infer_count_from_notes(item, notes)
    count = max(1, count or 1)

    grams_per_unit = portion_base.base_grams
    if count == 1:
        grams_per_unit = scale_grams_by_bbox(
            item, portion_base.base_grams, container, scale_enabled=scale_enabled
        )
    return Portion(grams_per_unit=float(grams_per_unit), count=count)


def _container_type(label: str) -> str | None:
    for pattern, container_type in CONTAINER_PATTERNS:
        if pattern.search(label):
            return container_type
    return None


def _override_area(
    label: str, overrides: list[AreaOverride], default: float
) -> float:
    for override in overrides:
        if override.pattern.search(label):
            return override.area
    return default


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


def _clamp_count(value: int, max_count: int) -> int:
    return max(1, min(max_count, value))


def _first_defined(*values: float | None) -> float:
    for value in values:
        if value is not None:
            return value
    raise ValueError("No value defined")
