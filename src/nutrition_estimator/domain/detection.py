"""Models for detection payloads produced by the vision step."""

import math

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class DetectedItem(BaseModel):
    """Single detected food item from vision."""

    model_config = ConfigDict(frozen=True)

    id: int | str
    label: str
    confidence: float = Field(default=0.0, ge=0.0, le=1.0)
    bbox: list[float] = Field(default_factory=lambda: [0.0, 0.0, 0.0, 0.0])
    suggested_portion_unit: str = Field(
        default="piece",
        validation_alias=AliasChoices("suggested_portion_unit", "suggestedPortionUnit"),
    )
    count: int | None = None

    @field_validator("suggested_portion_unit", mode="before")
    @classmethod
    def _normalize_unit(cls, value: object) -> object:
        if value is None:
            return "piece"
        if isinstance(value, str):
            return value.strip().lower() or "piece"
        return value

    @field_validator("confidence", mode="before")
    @classmethod
    def _clamp_confidence(cls, value: object) -> object:
        number = _finite_number(value)
        return 0.0 if number is None else max(0.0, min(1.0, number))

    @field_validator("bbox", mode="before")
    @classmethod
    def _coerce_bbox(cls, value: object) -> object:
        if not isinstance(value, list | tuple):
            return [0.0, 0.0, 0.0, 0.0]
        return [_finite_number(entry) or 0.0 for entry in value]

    @field_validator("count", mode="before")
    @classmethod
    def _coerce_count(cls, value: object) -> object:
        number = _finite_number(value)
        if number is None:
            return None
        return max(1, math.floor(number))

    @property
    def area(self) -> float:
        """Normalized bounding-box area clamped to [0, 1]."""
        width = self.bbox[2] if len(self.bbox) > 2 else 0.0  # noqa: PLR2004
        height = self.bbox[3] if len(self.bbox) > 3 else 0.0  # noqa: PLR2004
        return max(0.0, min(1.0, width * height))


class Barcode(BaseModel):
    """Barcode value read from the image."""

    value: str
    confidence: float | None = None


class DetectionPayload(BaseModel):
    """Structured output of the vision step for one image."""

    items: list[DetectedItem] = Field(default_factory=list)
    barcodes: list[Barcode] = Field(default_factory=list)
    notes: str = ""

    @field_validator("notes", mode="before")
    @classmethod
    def _default_notes(cls, value: object) -> object:
        return "" if value is None else value


def _finite_number(value: object) -> float | None:
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None
