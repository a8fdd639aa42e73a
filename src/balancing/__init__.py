"""
Meter load balancing.

Assigns meters onto transformers and their breakers: large meters get a
dedicated transformer, dual-breaker meters are split over a breaker pair,
and the rest are bin-packed toward an even breaker loading.
"""

from .allocator import allocate
from .models import AllocationConfig, LoadGroupSpec, TransformerType, DEFAULT_TRANSFORMER_TYPES
from .summary import DistributionResult, DistributionSummary

__version__ = "1.0.0"

__all__ = [
    "allocate",
    "AllocationConfig",
    "LoadGroupSpec",
    "TransformerType",
    "DEFAULT_TRANSFORMER_TYPES",
    "DistributionResult",
    "DistributionSummary",
]
