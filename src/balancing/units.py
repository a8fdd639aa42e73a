"""
Load Units
==========

Individual meter instances expanded from grouped load records.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Iterable, List, Optional

from .models import LoadGroupSpec


@dataclass(frozen=True)
class LoadUnit:
    """
    One physical meter.

    Attributes:
        id: Unit identifier (``<group>_<index>``, or ``<unit>_p1``/``_p2`` for split halves)
        group_id: Identifier of the group the unit was expanded from
        capacity: Rated capacity class (A)
        cdl: Demand load carried by this unit (A)
        category: Load category tag
        time_pattern: Usage time-pattern tag
        type_name: Display name of the meter type
        part: 1 or 2 when the unit is one half of a split meter
    """
    id: str
    group_id: str
    capacity: float
    cdl: float
    category: str
    time_pattern: str
    type_name: str
    part: Optional[int] = None

    @property
    def note(self) -> Optional[str]:
        return f"part {self.part}" if self.part else None

    def split(self) -> tuple["LoadUnit", "LoadUnit"]:
        """Return two new half-load units; the original is left untouched."""
        half = self.cdl / 2
        return (
            replace(self, id=f"{self.id}_p1", cdl=half, part=1),
            replace(self, id=f"{self.id}_p2", cdl=half, part=2),
        )

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "group_id": self.group_id,
            "capacity": self.capacity,
            "cdl": self.cdl,
            "category": self.category,
            "time_pattern": self.time_pattern,
            "type_name": self.type_name,
            "note": self.note,
        }


def expand_units(groups: Iterable[LoadGroupSpec]) -> List[LoadUnit]:
    """Flatten load groups into one LoadUnit per meter, keeping group order."""
    units: List[LoadUnit] = []
    for group in groups:
        for i in range(group.count):
            units.append(
                LoadUnit(
                    id=f"{group.id}_{i}",
                    group_id=group.id,
                    capacity=float(group.capacity),
                    cdl=float(group.cdl_per_meter),
                    category=group.category,
                    time_pattern=group.time_pattern,
                    type_name=group.type_name,
                )
            )
    return units


def sort_by_demand(units: Iterable[LoadUnit]) -> List[LoadUnit]:
    """Descending demand load; the sort is stable so equal loads keep their order."""
    return sorted(units, key=lambda u: u.cdl, reverse=True)
