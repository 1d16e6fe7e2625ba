"""Nutrition domain models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Macro:
    """Macronutrient amounts, per 100 g when stored or absolute for a portion."""

    kcal: float
    protein: float
    fat: float
    carbs: float

    @classmethod
    def zero(cls) -> "Macro":
        """Return an all-zero macro record."""
        return cls(kcal=0.0, protein=0.0, fat=0.0, carbs=0.0)

    def scaled(self, grams: float) -> "Macro":
        """Scale a per-100g record to the given portion weight."""
        factor = grams / 100
        return Macro(
            kcal=self.kcal * factor,
            protein=self.protein * factor,
            fat=self.fat * factor,
            carbs=self.carbs * factor,
        )

    def __add__(self, other: "Macro") -> "Macro":
        return Macro(
            kcal=self.kcal + other.kcal,
            protein=self.protein + other.protein,
            fat=self.fat + other.fat,
            carbs=self.carbs + other.carbs,
        )

    def to_dict(self) -> dict[str, float]:
        """Serialize macros for API responses."""
        return {
            "kcal": self.kcal,
            "protein": self.protein,
            "fat": self.fat,
            "carbs": self.carbs,
        }


@dataclass(frozen=True)
class ItemEstimate:
    """Estimated portion and macros for one detected item."""

    id: int | str
    label: str
    grams: float
    grams_per_unit: float
    count: int
    per100g: Macro | None
    estimated: Macro | None

    def to_dict(self) -> dict[str, object]:
        """Serialize with the field names the UI consumes."""
        return {
            "id": self.id,
            "label": self.label,
            "grams": self.grams,
            "gramsPerUnit": self.grams_per_unit,
            "count": self.count,
            "per100g": self.per100g.to_dict() if self.per100g else None,
            "estimated": self.estimated.to_dict() if self.estimated else None,
        }


@dataclass(frozen=True)
class MealEstimate:
    """Per-item estimates and the summed total for one detection payload."""

    items: list[ItemEstimate]
    total: Macro

    def to_dict(self) -> dict[str, object]:
        """Serialize the meal estimate for API responses."""
        return {
            "items": [item.to_dict() for item in self.items],
            "total": self.total.to_dict(),
        }
