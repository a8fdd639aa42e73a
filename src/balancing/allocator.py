"""
Meter Allocation
================

Entry point of the engine. Large meters get a dedicated transformer each;
everything else is spread over as few transformers as the catalog allows,
each sized to the load still waiting to be placed.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Sequence

from .equipment import Transformer
from .models import AllocationConfig, LoadGroupSpec
from .packing import pack_transformer
from .selector import dedicated_transformer_type, select_transformer_type, widest_transformer_type
from .summary import DistributionResult, build_summary, overall_balance_score
from .units import LoadUnit, expand_units, sort_by_demand

log = logging.getLogger(__name__)


@dataclass
class OrchestrationResult:
    transformers: List[Transformer] = field(default_factory=list)
    dropped: List[LoadUnit] = field(default_factory=list)


def build_dedicated_transformers(
    units: Iterable[LoadUnit],
    config: AllocationConfig,
    start_id: int = 1,
) -> List[Transformer]:
    """One single-breaker-in-use transformer per large meter."""
    transformers: List[Transformer] = []
    transformer_id = start_id
    for unit in units:
        ttype = dedicated_transformer_type(unit, config)
        transformer = Transformer.create(transformer_id, ttype, config)
        transformer_id += 1

        reason = f"meter {unit.capacity:g}A"
        transformer.is_dedicated = True
        transformer.dedicated_for = reason

        breaker = transformer.breakers[0]
        breaker.mark_dedicated(reason)
        breaker.add_meter(unit)

        log.info("Dedicated transformer %d (%g kVA) for unit %s", transformer.id, ttype.capacity, unit.id)
        transformers.append(transformer)
    return transformers


def _take_working_set(pool: Sequence[LoadUnit], safe_load: float) -> tuple[List[LoadUnit], List[LoadUnit]]:
    """Greedy fill up to ``safe_load`` from the highest-demand units."""
    taken: List[LoadUnit] = []
    left: List[LoadUnit] = []
    running = 0.0
    for unit in sort_by_demand(pool):
        if running + unit.cdl <= safe_load:
            taken.append(unit)
            running += unit.cdl
        else:
            left.append(unit)

    if not taken and left:
        # A single unit larger than any safe load still gets a transformer;
        # the summary reports it as overloaded.
        taken.append(left.pop(0))
    return taken, left


def distribute_on_multiple_transformers(
    units: Sequence[LoadUnit],
    config: AllocationConfig,
    start_id: int = 1,
) -> OrchestrationResult:
    """
    Fill transformers one at a time until every unit is placed or dropped.

    A working set that places nothing is retried once on the catalog type
    with the most breakers. Units that still fail are dropped, so every
    iteration places or drops at least one unit and the loop terminates.
    """
    result = OrchestrationResult()
    pool: List[LoadUnit] = list(units)
    transformer_id = start_id

    while pool:
        remaining_load = sum(u.cdl for u in pool)
        ttype = select_transformer_type(remaining_load, config.transformer_types)
        transformer = Transformer.create(transformer_id, ttype, config)

        working, pool = _take_working_set(pool, ttype.safe_load)
        outcome = pack_transformer(transformer, working, config)

        wide = widest_transformer_type(config.transformer_types)
        if not transformer.used_breakers and wide.breakers > ttype.breakers:
            # Split meters need a breaker pair the selected type may not have
            ttype = wide
            transformer = Transformer.create(transformer_id, ttype, config)
            outcome = pack_transformer(transformer, working, config)

        if transformer.used_breakers:
            log.info(
                "Transformer %d (%g kVA): %.1f A on %d breakers, %d units returned to pool",
                transformer.id, ttype.capacity, transformer.assigned_load,
                len(transformer.used_breakers), len(outcome.unplaced),
            )
            result.transformers.append(transformer)
            transformer_id += 1
            pool.extend(outcome.unplaced)
        else:
            for unit in working:
                log.warning(
                    "Unit %s (%g A class, %.1f A) cannot be placed on any breaker; dropped",
                    unit.id, unit.capacity, unit.cdl,
                )
            result.dropped.extend(working)

    return result


def allocate(
    groups: Sequence[LoadGroupSpec],
    config: Optional[AllocationConfig] = None,
) -> DistributionResult:
    """
    Distribute meter groups over transformers and breakers.

    Args:
        groups: Load groups to distribute
        config: Capacity constants and transformer catalog (defaults if omitted)

    Returns:
        DistributionResult with dedicated transformers first, transformers
        numbered 1..n, and any unplaceable units in ``dropped_units``
    """
    config = config or AllocationConfig()
    total_load = sum(float(g.total_cdl) for g in groups)

    units = expand_units(groups)
    large = [u for u in units if config.is_large(u.capacity)]
    rest = [u for u in units if not config.is_large(u.capacity)]
    log.info(
        "Allocating %d units (%d dedicated) from %d groups, total load %.1f A",
        len(units), len(large), len(groups), total_load,
    )

    dedicated = build_dedicated_transformers(large, config, start_id=1)
    shared = distribute_on_multiple_transformers(rest, config, start_id=len(dedicated) + 1)

    transformers = dedicated + shared.transformers
    for i, transformer in enumerate(transformers):
        transformer.id = i + 1

    balance = overall_balance_score(transformers)
    summary = build_summary(transformers, total_load, balance, groups, config)
    log.info(
        "Allocation done: %d transformers, balance score %s, %d dropped units",
        summary.total_transformers, summary.balance_score, len(shared.dropped),
    )

    return DistributionResult(
        total_load=total_load,
        transformers=transformers,
        balance_score=balance,
        summary=summary,
        dropped_units=shared.dropped,
    )

