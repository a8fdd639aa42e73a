"""
Breakers and Transformers
=========================

Mutable allocation state. A transformer owns its breakers; a breaker's
load and type/category/pattern sets are derived from its meters and are
recomputed wholesale whenever membership changes.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Set

from .models import AllocationConfig, TransformerType
from .units import LoadUnit


@dataclass
class Breaker:
    """
    Outgoing breaker on a transformer.

    Attributes:
        id: Breaker identifier (1-based, unique within its transformer)
        number: Display number
        rating: Utilization denominator for shared breakers (A)
        dedicated_classes: Meter classes measured against their own rating when dedicated
        meters: Units assigned to this breaker, in placement order
        dedicated: Reserved for a single large meter
        dedicated_for: Reason shown for a dedicated breaker
    """
    id: int
    number: int
    rating: float = 310.0
    dedicated_classes: FrozenSet[float] = frozenset()
    meters: List[LoadUnit] = field(default_factory=list)
    dedicated: bool = False
    dedicated_for: Optional[str] = None

    # Derived; see recompute_stats()
    load: float = field(default=0.0, init=False)
    utilization_percent: float = field(default=0.0, init=False)
    meter_types: Set[str] = field(default_factory=set, init=False)
    categories: Set[str] = field(default_factory=set, init=False)
    time_patterns: Set[str] = field(default_factory=set, init=False)

    def __post_init__(self):
        self.recompute_stats()

    @property
    def is_empty(self) -> bool:
        return not self.meters

    @property
    def max_capacity(self) -> float:
        """Denominator for utilization."""
        if self.dedicated and len(self.meters) == 1:
            capacity = self.meters[0].capacity
            if capacity in self.dedicated_classes:
                return capacity
        return self.rating

    def add_meter(self, unit: LoadUnit) -> None:
        self.meters.append(unit)
        self.recompute_stats()

    def mark_dedicated(self, reason: str) -> None:
        self.dedicated = True
        self.dedicated_for = reason
        self.recompute_stats()

    def recompute_stats(self) -> None:
        self.load = sum(m.cdl for m in self.meters)
        cap = self.max_capacity
        self.utilization_percent = (self.load / cap) * 100 if cap > 0 else 0.0
        self.meter_types = {m.type_name for m in self.meters}
        self.categories = {m.category for m in self.meters}
        self.time_patterns = {m.time_pattern for m in self.meters}

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "number": self.number,
            "load": self.load,
            "utilization_percent": self.utilization_percent,
            "meters": [m.to_dict() for m in self.meters],
            "meter_types": sorted(self.meter_types),
            "categories": sorted(self.categories),
            "time_patterns": sorted(self.time_patterns),
            "dedicated": self.dedicated,
            "dedicated_for": self.dedicated_for,
        }


@dataclass
class Transformer:
    """
    Distribution transformer with a fixed set of breakers.

    Attributes:
        id: Transformer identifier (renumbered 1..n in the final result)
        type: Catalog entry this transformer was built from
        breakers: Breakers owned by this transformer, ascending by number
        is_dedicated: Reserved for a single large meter
        dedicated_for: Reason shown for a dedicated transformer
    """
    id: int
    type: TransformerType
    breakers: List[Breaker] = field(default_factory=list)
    is_dedicated: bool = False
    dedicated_for: Optional[str] = None

    @classmethod
    def create(cls, transformer_id: int, ttype: TransformerType, config: AllocationConfig) -> "Transformer":
        """Build a transformer with ``ttype.breakers`` empty breakers."""
        classes = frozenset(float(c) for c in config.dedicated_transformer_map)
        breakers = [
            Breaker(id=i + 1, number=i + 1, rating=float(config.breaker_rating), dedicated_classes=classes)
            for i in range(ttype.breakers)
        ]
        return cls(id=transformer_id, type=ttype, breakers=breakers)

    @property
    def assigned_load(self) -> float:
        return sum(b.load for b in self.breakers)

    @property
    def load_percent(self) -> float:
        """Assigned load as a percentage of the type's safe load."""
        return (self.assigned_load / self.type.safe_load) * 100

    @property
    def is_overloaded(self) -> bool:
        return self.load_percent > 100

    @property
    def used_breakers(self) -> List[Breaker]:
        return [b for b in self.breakers if not b.is_empty]

    def placed_units(self) -> List[LoadUnit]:
        return [m for b in self.breakers for m in b.meters]

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type.model_dump(),
            "assigned_load": self.assigned_load,
            "load_percent": self.load_percent,
            "is_dedicated": self.is_dedicated,
            "dedicated_for": self.dedicated_for,
            "breakers": [b.to_dict() for b in self.breakers],
        }
