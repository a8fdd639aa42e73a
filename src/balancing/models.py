from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, PositiveFloat, PositiveInt, confloat, field_validator, model_validator


class LoadGroupSpec(BaseModel):
    """A group of identical meters: one load specification repeated ``count`` times."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(..., description="Group identifier; unit ids are derived from it.")
    capacity: confloat(ge=0) = Field(..., description="Rated capacity class of each meter (A).")
    count: int = Field(..., ge=0, description="Number of identical meters in the group.")
    cdl_per_meter: confloat(ge=0) = Field(
        ..., alias="cdlPerMeter", description="Calculated demand load of one meter (A)."
    )
    total_cdl: Optional[confloat(ge=0)] = Field(
        None, alias="totalCDL", description="Group demand load. Defaults to count * cdl_per_meter."
    )
    category: str = Field("general", description="Load category tag (residential, commercial, ...).")
    time_pattern: str = Field("day", alias="timePattern", description="Usage time-pattern tag.")
    type_name: str = Field("", alias="typeName", description="Display name of the meter type.")

    @field_validator("id", mode="before")
    @classmethod
    def _id_as_str(cls, v):
        return str(v)

    @model_validator(mode="after")
    def _default_total(self) -> "LoadGroupSpec":
        if self.total_cdl is None:
            object.__setattr__(self, "total_cdl", float(self.count) * float(self.cdl_per_meter))
        return self


class TransformerType(BaseModel):
    model_config = ConfigDict(frozen=True)

    capacity: PositiveFloat = Field(..., description="Transformer rating (kVA).")
    safe_load: PositiveFloat = Field(..., description="Safe aggregate load ceiling (A).")
    breakers: PositiveInt = Field(..., description="Number of outgoing breakers.")


DEFAULT_TRANSFORMER_TYPES: List[TransformerType] = [
    TransformerType(capacity=300, safe_load=346, breakers=3),
    TransformerType(capacity=500, safe_load=577, breakers=4),
    TransformerType(capacity=1000, safe_load=1155, breakers=6),
    TransformerType(capacity=1500, safe_load=1732, breakers=8),
]


class AllocationConfig(BaseModel):
    max_breaker_capacity: PositiveFloat = Field(
        248.0, description="Hard ceiling on the load carried by one breaker (A)."
    )
    breaker_rating: PositiveFloat = Field(
        310.0, description="Breaker rating used as the utilization denominator (A)."
    )
    large_capacity_threshold: PositiveFloat = Field(
        1600.0, description="Meters at or above this capacity class get a dedicated transformer."
    )
    dual_breaker_min_capacity: PositiveFloat = Field(
        400.0, description="Meters from this class up to the large threshold are split over two breakers."
    )
    dedicated_transformer_map: Dict[int, float] = Field(
        default_factory=lambda: {1600: 1000.0, 2500: 1500.0},
        description="Meter capacity class -> transformer capacity (kVA) used for its dedicated transformer.",
    )
    voltage_kv: PositiveFloat = Field(0.4, description="Secondary voltage used for the kVA conversion.")
    sqrt3: PositiveFloat = Field(1.73, description="Three-phase factor used for the kVA conversion.")
    transformer_types: List[TransformerType] = Field(
        default_factory=lambda: list(DEFAULT_TRANSFORMER_TYPES),
        description="Available transformer types; kept sorted ascending by safe load.",
    )

    @model_validator(mode="after")
    def _check_catalog(self) -> "AllocationConfig":
        if not self.transformer_types:
            raise ValueError("transformer_types must contain at least one transformer type")
        if self.dual_breaker_min_capacity >= self.large_capacity_threshold:
            raise ValueError("dual_breaker_min_capacity must be below large_capacity_threshold")
        self.transformer_types = sorted(self.transformer_types, key=lambda t: t.safe_load)
        return self

    def is_large(self, capacity: float) -> bool:
        return capacity >= self.large_capacity_threshold

    def is_dual_breaker(self, capacity: float) -> bool:
        return self.dual_breaker_min_capacity <= capacity < self.large_capacity_threshold

    def is_regular(self, capacity: float) -> bool:
        return capacity < self.dual_breaker_min_capacity

    def to_kva(self, load: float) -> float:
        return load * self.voltage_kv * self.sqrt3
