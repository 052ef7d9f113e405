"""Quantity precision resolution.

Static step-size registry, pure quantity normalization, layered precision
resolution with a learned cache, and the order-precision retry ladder.
"""

from asterdex.precision.cache import (
    InMemoryPrecisionCache,
    JsonFilePrecisionCache,
    PrecisionCache,
)
from asterdex.precision.filters import SymbolFilters, extract_filters, find_symbol_info
from asterdex.precision.normalizer import (
    ensure_min_notional,
    floor_to_step,
    precision_from_step_size,
    qty_from_notional,
    step_for_precision,
)
from asterdex.precision.registry import (
    HeuristicRule,
    SymbolPrecisionEntry,
    heuristic_precision,
    lookup,
    match_heuristic,
)
from asterdex.precision.resolver import PrecisionResolver
from asterdex.precision.retry import LadderState, PrecisionRetryEngine

__all__ = [
    "HeuristicRule",
    "InMemoryPrecisionCache",
    "JsonFilePrecisionCache",
    "LadderState",
    "PrecisionCache",
    "PrecisionResolver",
    "PrecisionRetryEngine",
    "SymbolFilters",
    "SymbolPrecisionEntry",
    "ensure_min_notional",
    "extract_filters",
    "find_symbol_info",
    "floor_to_step",
    "heuristic_precision",
    "lookup",
    "match_heuristic",
    "precision_from_step_size",
    "qty_from_notional",
    "step_for_precision",
]
