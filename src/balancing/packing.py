"""
Per-Transformer Packing
=======================

Places a working set of meters onto one transformer's breakers in two
phases:

1. Split loads: dual-breaker meters are halved and spread over the
   best-balanced pair of free breakers.
2. Regular loads: remaining small meters are bin-packed with a scoring
   function that pulls every breaker toward a common target load while
   mixing categories and time patterns.

Breakers are always scanned in ascending number and the first candidate
with the best score wins, so results are reproducible.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Set, Tuple

from .equipment import Breaker, Transformer
from .models import AllocationConfig
from .units import LoadUnit, sort_by_demand

log = logging.getLogger(__name__)

DISQUALIFIED = -1.0


@dataclass
class PackingOutcome:
    """Result of packing one transformer."""
    unplaced: List[LoadUnit] = field(default_factory=list)
    paired_breakers: Set[int] = field(default_factory=set)


# ---------------------------------------------------------------------------
# Split loads
# ---------------------------------------------------------------------------

def pair_score(b1: Breaker, b2: Breaker) -> float:
    """Favors pairs with similar and low loads."""
    return (100 - abs(b1.load - b2.load)) + (200 - b1.load - b2.load)


def find_best_pair(
    breakers: Sequence[Breaker],
    half_load: float,
    max_breaker_capacity: float,
) -> Optional[Tuple[Breaker, Breaker]]:
    available = [b for b in breakers if not b.dedicated and b.load + half_load <= max_breaker_capacity]
    if len(available) < 2:
        return None

    best: Optional[Tuple[Breaker, Breaker]] = None
    best_score = DISQUALIFIED
    for i in range(len(available)):
        for j in range(i + 1, len(available)):
            score = pair_score(available[i], available[j])
            if score > best_score:
                best_score = score
                best = (available[i], available[j])
    return best


def place_split_units(
    transformer: Transformer,
    units: Sequence[LoadUnit],
    config: AllocationConfig,
    outcome: PackingOutcome,
) -> None:
    """Halve each dual-breaker unit and place the halves on two distinct breakers."""
    for unit in units:
        half = unit.cdl / 2
        if half > config.max_breaker_capacity:
            log.debug("Split unit %s: half load %.1f exceeds breaker ceiling", unit.id, half)
            outcome.unplaced.append(unit)
            continue

        candidates = [b for b in transformer.breakers if b.id not in outcome.paired_breakers]
        pair = find_best_pair(candidates, half, config.max_breaker_capacity)
        if pair is None:
            log.debug("Split unit %s: no free breaker pair on transformer %s", unit.id, transformer.id)
            outcome.unplaced.append(unit)
            continue

        first, second = unit.split()
        pair[0].add_meter(first)
        pair[1].add_meter(second)
        outcome.paired_breakers.update((pair[0].id, pair[1].id))
        log.debug(
            "Split unit %s -> breakers %d/%d (%.1f each)", unit.id, pair[0].number, pair[1].number, half
        )


# ---------------------------------------------------------------------------
# Regular loads
# ---------------------------------------------------------------------------

def breaker_score(
    breaker: Breaker,
    unit: LoadUnit,
    group: Sequence[Breaker],
    target_load: float,
    max_breaker_capacity: float,
) -> float:
    """
    Score placing ``unit`` on ``breaker``; higher is better.

    Returns ``DISQUALIFIED`` if the breaker would exceed its hard ceiling.
    Otherwise the score starts at 1000 and is adjusted by:
    - target: +10 per unit of load moved closer to the target load
    - balance: -2 per unit of extra distance from the group's mean load
    - diversity: +0.5 for a new category, +0.25 for a new time pattern
    - fill: -load/100 while the breaker is still under target
    """
    new_load = breaker.load + unit.cdl
    if new_load > max_breaker_capacity:
        return DISQUALIFIED

    score = 1000.0

    score += (abs(breaker.load - target_load) - abs(new_load - target_load)) * 10

    avg_load = sum(b.load for b in group) / len(group)
    score -= (abs(new_load - avg_load) - abs(breaker.load - avg_load)) * 2

    if unit.category not in breaker.categories:
        score += 0.5
    if unit.time_pattern not in breaker.time_patterns:
        score += 0.25

    if breaker.load < target_load:
        score -= breaker.load / 100

    return score


def place_regular_units(
    transformer: Transformer,
    units: Sequence[LoadUnit],
    config: AllocationConfig,
    outcome: PackingOutcome,
) -> None:
    """Scored greedy packing of small units onto the breakers still free."""
    if not units:
        return

    total = sum(u.cdl for u in units)
    available = [b for b in transformer.breakers if not b.dedicated and b.id not in outcome.paired_breakers]

    # At least one breaker, so zero-demand units still get a home
    required = max(math.ceil(total / config.max_breaker_capacity), 1)
    n_used = min(required, len(available))
    if n_used <= 0:
        outcome.unplaced.extend(units)
        return

    group = available[:n_used]
    target = min(total / n_used, config.max_breaker_capacity)
    log.debug(
        "Transformer %s: %d regular units, %.1f A over %d breakers (target %.1f)",
        transformer.id, len(units), total, n_used, target,
    )

    for unit in units:
        best: Optional[Breaker] = None
        best_score = DISQUALIFIED
        for breaker in group:
            score = breaker_score(breaker, unit, group, target, config.max_breaker_capacity)
            if score > best_score:
                best_score = score
                best = breaker

        if best is None:
            outcome.unplaced.append(unit)
        else:
            best.add_meter(unit)


def pack_transformer(
    transformer: Transformer,
    units: Sequence[LoadUnit],
    config: AllocationConfig,
) -> PackingOutcome:
    """
    Place ``units`` on ``transformer``'s breakers.

    Large meters are not expected here; any that slip through are returned
    as unplaced since they only go on dedicated transformers.
    """
    ordered = sort_by_demand(units)
    outcome = PackingOutcome()

    outcome.unplaced.extend(u for u in ordered if config.is_large(u.capacity))
    place_split_units(transformer, [u for u in ordered if config.is_dual_breaker(u.capacity)], config, outcome)
    place_regular_units(transformer, [u for u in ordered if config.is_regular(u.capacity)], config, outcome)

    return outcome
