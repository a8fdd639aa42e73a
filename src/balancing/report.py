from __future__ import annotations

from typing import Any, Dict, List

import pandas as pd

from .summary import DistributionResult

TABLE_COLUMNS = [
    "transformer",
    "transformer_kva",
    "breakers",
    "meters",
    "meter_ids",
    "type_names",
    "categories",
    "time_patterns",
    "load",
    "utilization_percent",
    "dedicated",
]


def _base_id(unit_id: str) -> str:
    return unit_id.rsplit("_p", 1)[0]


def distribution_table(result: DistributionResult) -> pd.DataFrame:
    """
    One row per distribution entry.

    A split meter occupies two breakers that each hold only its half, so the
    pair is reported as a single row (``breakers`` like ``"1+2"``) carrying
    the full meter load. The row count equals ``summary.distribution_entries``.
    """
    rows: List[Dict[str, Any]] = []
    for t in result.transformers:
        part1_breaker = {
            _base_id(m.id): b.number for b in t.used_breakers for m in b.meters if m.part == 1
        }
        for b in t.used_breakers:
            if any(m.part == 1 for m in b.meters):
                continue

            numbers = str(b.number)
            load = b.load
            utilization = b.utilization_percent
            halves = [m for m in b.meters if m.part == 2]
            if halves:
                first = part1_breaker.get(_base_id(halves[0].id))
                if first is not None:
                    numbers = f"{first}+{b.number}"
                    load = sum(m.cdl for m in b.meters) * 2
                    partner = t.breakers[first - 1]
                    utilization = max(utilization, partner.utilization_percent)

            rows.append(
                {
                    "transformer": t.id,
                    "transformer_kva": t.type.capacity,
                    "breakers": numbers,
                    "meters": len(b.meters),
                    "meter_ids": ", ".join(_base_id(m.id) if m.part else m.id for m in b.meters),
                    "type_names": ", ".join(sorted(b.meter_types)),
                    "categories": ", ".join(sorted(b.categories)),
                    "time_patterns": ", ".join(sorted(b.time_patterns)),
                    "load": round(load, 1),
                    "utilization_percent": round(utilization, 1),
                    "dedicated": b.dedicated,
                }
            )
    return pd.DataFrame(rows, columns=TABLE_COLUMNS)
