"""
Distribution Summary
====================

Post-hoc statistics over a finished allocation: breaker utilization
spread, overload counts, efficiency and the transformer mix.
"""

from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import numpy as np

from .equipment import Transformer
from .models import AllocationConfig, LoadGroupSpec
from .units import LoadUnit


@dataclass(frozen=True)
class DistributionSummary:
    """Display-ready summary; load and percentage fields are one-decimal strings."""
    total_transformers: int
    total_breakers: int
    distribution_entries: int
    total_meters: int
    total_load: str
    total_load_kva: str
    overloaded_breakers: int
    overloaded_transformers: int
    max_utilization: str
    min_utilization: str
    avg_utilization: str
    balance_score: str
    efficiency: str
    transformer_details: str
    transformer_counts: Dict[float, int] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "total_transformers": self.total_transformers,
            "total_breakers": self.total_breakers,
            "distribution_entries": self.distribution_entries,
            "total_meters": self.total_meters,
            "total_load": self.total_load,
            "total_load_kva": self.total_load_kva,
            "overloaded_breakers": self.overloaded_breakers,
            "overloaded_transformers": self.overloaded_transformers,
            "max_utilization": self.max_utilization,
            "min_utilization": self.min_utilization,
            "avg_utilization": self.avg_utilization,
            "balance_score": self.balance_score,
            "efficiency": self.efficiency,
            "transformer_details": self.transformer_details,
            "transformer_counts": {f"{k:g}": v for k, v in self.transformer_counts.items()},
        }


@dataclass(frozen=True)
class DistributionResult:
    total_load: float
    transformers: List[Transformer]
    balance_score: float
    summary: DistributionSummary
    dropped_units: List[LoadUnit] = field(default_factory=list)

    @property
    def placed_load(self) -> float:
        return sum(t.assigned_load for t in self.transformers)

    @property
    def dropped_load(self) -> float:
        return sum(u.cdl for u in self.dropped_units)

    def to_dict(self) -> dict:
        return {
            "total_load": self.total_load,
            "balance_score": self.balance_score,
            "summary": self.summary.to_dict(),
            "transformers": [t.to_dict() for t in self.transformers],
            "dropped_units": [u.to_dict() for u in self.dropped_units],
        }


def overall_balance_score(transformers: Sequence[Transformer]) -> float:
    """
    0-100 score from the spread of breaker utilization.

    Only non-empty breakers of shared (non-dedicated) transformers count.
    The score is 100 - 2 * population standard deviation, clamped to [0, 100].
    """
    if not transformers:
        return 0.0
    utils = np.array(
        [b.utilization_percent for t in transformers if not t.is_dedicated for b in t.used_breakers],
        dtype=float,
    )
    if utils.size == 0:
        return 100.0
    std = float(np.std(utils))
    return float(np.clip(100.0 - std * 2, 0.0, 100.0))


def _fmt(x: float) -> str:
    return f"{x:.1f}"


def build_summary(
    transformers: Sequence[Transformer],
    total_load: float,
    balance_score: float,
    groups: Sequence[LoadGroupSpec],
    config: AllocationConfig,
) -> DistributionSummary:
    breakers = [b for t in transformers for b in t.used_breakers]
    utils = np.array([b.utilization_percent for b in breakers], dtype=float)

    # A split meter shows up on two breakers but is one entry in the table
    part1_count = sum(1 for b in breakers for m in b.meters if m.part == 1)

    total_used = sum(t.assigned_load for t in transformers)
    total_capacity = sum(t.type.safe_load for t in transformers)
    efficiency = _fmt(total_used / total_capacity * 100) if total_capacity > 0 else "0.0"

    counts = Counter(t.type.capacity for t in transformers)
    ordered = sorted(counts.items(), key=lambda kv: kv[0], reverse=True)
    details = ", ".join(f"{n}x {capacity:g} KVA" for capacity, n in ordered)

    return DistributionSummary(
        total_transformers=len(transformers),
        total_breakers=len(breakers),
        distribution_entries=len(breakers) - part1_count,
        total_meters=sum(g.count for g in groups),
        total_load=_fmt(total_load),
        total_load_kva=_fmt(config.to_kva(total_load)),
        overloaded_breakers=sum(1 for b in breakers if b.utilization_percent > 100),
        overloaded_transformers=sum(1 for t in transformers if t.is_overloaded),
        max_utilization=_fmt(float(utils.max()) if utils.size else 0.0),
        min_utilization=_fmt(float(utils.min()) if utils.size else 0.0),
        avg_utilization=_fmt(float(utils.mean()) if utils.size else 0.0),
        balance_score=_fmt(balance_score),
        efficiency=efficiency,
        transformer_details=details,
        transformer_counts=dict(ordered),
    )
