from __future__ import annotations

from typing import Optional, Sequence

from .models import AllocationConfig, TransformerType
from .units import LoadUnit


def select_transformer_type(load: float, catalog: Sequence[TransformerType]) -> TransformerType:
    """
    Smallest catalog entry whose safe load covers ``load``.

    The catalog must be sorted ascending by safe load. When nothing is large
    enough the largest entry is returned; the resulting overload is reported
    by the summary rather than rejected here.
    """
    for ttype in catalog:
        if load <= ttype.safe_load:
            return ttype
    return catalog[-1]


def _find_by_capacity(capacity: float, catalog: Sequence[TransformerType]) -> Optional[TransformerType]:
    for ttype in catalog:
        if ttype.capacity == capacity:
            return ttype
    return None


def dedicated_transformer_type(unit: LoadUnit, config: AllocationConfig) -> TransformerType:
    """Transformer type for a large meter's dedicated transformer."""
    mapped = config.dedicated_transformer_map.get(unit.capacity)
    if mapped is not None:
        ttype = _find_by_capacity(float(mapped), config.transformer_types)
        if ttype is not None:
            return ttype
    return select_transformer_type(unit.cdl, config.transformer_types)


def widest_transformer_type(catalog: Sequence[TransformerType]) -> TransformerType:
    """First catalog entry with the most breakers."""
    best = catalog[0]
    for ttype in catalog[1:]:
        if ttype.breakers > best.breakers:
            best = ttype
    return best
