"""Portion rule tables used to turn detections into grams.

Tables are ordered and evaluated top to bottom; the first matching pattern wins.
Patterns are matched case-insensitively against free-text labels.
"""

import re
from dataclasses import dataclass


@dataclass(frozen=True)
class PortionRule:
    """Label-specific baseline grams and realistic bounds."""

    pattern: re.Pattern[str]
    base_grams: float
    min_grams: float | None = None
    max_grams: float | None = None
    in_container_clamp: tuple[float, float] | None = None


@dataclass(frozen=True)
class AreaOverride:
    """Label-specific baseline area fraction."""

    pattern: re.Pattern[str]
    area: float


@dataclass(frozen=True)
class GramRange:
    """Inclusive gram band."""

    min_grams: float
    max_grams: float


@dataclass(frozen=True)
class ContainerReference:
    """Largest detected plate or bowl, used to normalize item areas."""

    area: float
    type: str


def _rx(pattern: str) -> re.Pattern[str]:
    return re.compile(pattern, re.IGNORECASE)


LABEL_PORTION_RULES: list[PortionRule] = [
    # staples
    PortionRule(_rx(r"fried\s*rice|nasi\s*goreng"), 300, 230, 360, (0.8, 1.2)),
    PortionRule(_rx(r"rice\b|nasi\b"), 200, 150, 300, (0.8, 1.2)),
    PortionRule(_rx(r"noodle|mie|mi goreng|ramen|pasta"), 250, 180, 350, (0.8, 1.2)),
    # proteins
    PortionRule(_rx(r"egg|telur"), 60, 50, 70, (0.8, 1.2)),
    PortionRule(_rx(r"chicken|ayam|drumstick|thigh|breast"), 70, 50, 120, (0.8, 1.3)),
    # veggies and sides
    PortionRule(_rx(r"cucumber|timun"), 30, 20, 50),
    PortionRule(_rx(r"tomato|tomat|tomatoes"), 55, 40, 80),
    PortionRule(_rx(r"fried\s*shallot|bawang\s*goreng"), 5, 3, 8),
]

UNIT_BASE_GRAMS: dict[str, float] = {
    "piece": 60,
    "slice": 10,
    "cup": 150,
    "bowl": 300,
    "plate": 300,
    "gram": 1,
}
DEFAULT_BASE_GRAMS = 100.0

UNIT_GRAM_RANGES: dict[str, GramRange] = {
    "piece": GramRange(40, 120),
    "slice": GramRange(5, 25),
    "cup": GramRange(100, 220),
    "bowl": GramRange(250, 450),
    "plate": GramRange(220, 420),
    "gram": GramRange(5, 1000),
}
DEFAULT_UNIT_RANGE = GramRange(20, 600)
FALLBACK_MIN_GRAMS = 5.0
FALLBACK_MAX_GRAMS = 1000.0

# Fractions of the full image frame.
UNIT_BASE_AREA: dict[str, float] = {
    "piece": 0.05,
    "slice": 0.02,
    "cup": 0.12,
    "bowl": 0.2,
    "plate": 0.3,
    "gram": 0.01,
}
DEFAULT_BASE_AREA = 0.08
LABEL_AREA_OVERRIDES: list[AreaOverride] = [
    AreaOverride(_rx(r"fried\s*rice|nasi\s*goreng"), 0.28),
]

# Fractions of the reference container's area.
UNIT_BASE_AREA_IN_CONTAINER: dict[str, float] = {
    "plate": 1.0,
    "bowl": 1.0,
    "cup": 0.4,
    "piece": 0.15,
    "slice": 0.05,
    "gram": 0.01,
}
DEFAULT_BASE_AREA_IN_CONTAINER = 0.15
LABEL_AREA_OVERRIDES_IN_CONTAINER: list[AreaOverride] = [
    AreaOverride(_rx(r"fried\s*rice|nasi\s*goreng"), 0.9),
]

IN_CONTAINER_RATIO_CLAMP = (0.7, 1.4)
ABSOLUTE_RATIO_CLAMP = (0.5, 2.0)
MIN_CONTAINER_AREA = 0.001
AREA_EXPONENT = 1.0

CONTAINER_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (_rx(r"plate|piring"), "plate"),
    (_rx(r"bowl|mangkuk"), "bowl"),
]

LABEL_SYNONYMS: list[tuple[re.Pattern[str], list[str]]] = [
    (_rx(r"egg|telur"), ["egg", "eggs", "telur"]),
    (_rx(r"cucumber|timun"), ["cucumber", "cucumbers", "timun"]),
    (_rx(r"tomato|tomat"), ["tomato", "tomatoes", "tomat"]),
    (_rx(r"chicken|ayam"), ["chicken", "ayam", "piece", "pieces"]),
]

NUMBER_WORDS: dict[str, int] = {
    "one": 1,
    "two": 2,
    "three": 3,
    "four": 4,
    "five": 5,
    "six": 6,
    "seven": 7,
    "eight": 8,
    "nine": 9,
    "ten": 10,
    "satu": 1,
    "dua": 2,
    "tiga": 3,
    "empat": 4,
    "lima": 5,
    "enam": 6,
    "tujuh": 7,
    "delapan": 8,
    "sembilan": 9,
    "sepuluh": 10,
}
MAX_COUNT = 10
MAX_SLICE_COUNT = 12

EGG_LABEL = _rx(r"\begg\b|\btelur\b")
EGG_STYLE_LABELS: list[tuple[re.Pattern[str], str]] = [
    (_rx(r"sunny\s*side\s*up|fried"), "fried egg"),
    (_rx(r"boiled|hard\s*boiled|soft\s*boiled"), "boiled egg"),
    (_rx(r"scrambled"), "scrambled egg"),
]
