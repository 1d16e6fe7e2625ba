"""Nutrient cache abstractions."""

from dataclasses import dataclass
from typing import Protocol

from nutrition_estimator.domain.nutrition import Macro


class NutrientCache(Protocol):
    """Cache interface for per-100g lookups keyed by normalized label.

    ``None`` is a valid cached value and records a lookup that found nothing.
    """

    def contains(self, key: str) -> bool:
        """Return whether an outcome is cached for the key."""

    def get(self, key: str) -> Macro | None:
        """Return the cached outcome for the key."""

    def set(self, key: str, value: Macro | None) -> None:
        """Store a lookup outcome."""


@dataclass
class InMemoryNutrientCache(NutrientCache):
    """Process-lifetime cache with no eviction."""

    _entries: dict[str, Macro | None]

    def __init__(self) -> None:
        self._entries = {}

    def contains(self, key: str) -> bool:
        """Return whether the key has been resolved before."""
        return key in self._entries

    def get(self, key: str) -> Macro | None:
        """Return the cached outcome, or None when absent or negative."""
        return self._entries.get(key)

    def set(self, key: str, value: Macro | None) -> None:
        """Store a positive or negative outcome."""
        self._entries[key] = value

    def __len__(self) -> int:
        return len(self._entries)
