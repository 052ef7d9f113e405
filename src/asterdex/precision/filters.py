"""Parsing of live exchangeInfo snapshots.

The venue returns Binance-style metadata: ``{"symbols": [{"symbol": ...,
"filters": [{"filterType": "LOT_SIZE", "stepSize": "0.001", ...}, ...]}]}``.
Helpers here are pure and never touch the network.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from asterdex.precision.normalizer import to_decimal
from asterdex.precision.registry import normalize_symbol

MARKET_LOT_SIZE = "MARKET_LOT_SIZE"
LOT_SIZE = "LOT_SIZE"
MIN_NOTIONAL = "MIN_NOTIONAL"
PRICE_FILTER = "PRICE_FILTER"

DEFAULT_STEP_SIZE = Decimal("0.00000001")
DEFAULT_TICK_SIZE = Decimal("0.01")


@dataclass
class SymbolFilters:
    """Order validation filters for one symbol."""

    step_size: Decimal
    min_notional: Decimal = Decimal("0")
    tick_size: Decimal = DEFAULT_TICK_SIZE


def find_symbol_info(metadata: dict[str, Any], symbol: str) -> dict[str, Any] | None:
    """Return the exchangeInfo entry for a symbol, or None if absent."""
    wanted = normalize_symbol(symbol)
    for info in metadata.get("symbols") or []:
        if normalize_symbol(str(info.get("symbol", ""))) == wanted:
            return info
    return None


def _find_filter(symbol_info: dict[str, Any], filter_type: str) -> dict[str, Any]:
    for entry in symbol_info.get("filters") or []:
        if entry.get("filterType") == filter_type:
            return entry
    return {}


def lot_step_size(symbol_info: dict[str, Any]) -> Decimal | None:
    """Return the quantity step, preferring MARKET_LOT_SIZE over LOT_SIZE."""
    step = (
        _find_filter(symbol_info, MARKET_LOT_SIZE).get("stepSize")
        or _find_filter(symbol_info, LOT_SIZE).get("stepSize")
    )
    if not step:
        return None
    return to_decimal(step, "stepSize")


def extract_filters(symbol_info: dict[str, Any] | None) -> SymbolFilters:
    """Extract step size, min notional and tick size with venue defaults."""
    info = symbol_info or {}
    min_notional_filter = _find_filter(info, MIN_NOTIONAL)
    tick = _find_filter(info, PRICE_FILTER).get("tickSize")
    min_notional = (
        min_notional_filter.get("notional")
        or min_notional_filter.get("minNotional")
        or "0"
    )

    return SymbolFilters(
        step_size=lot_step_size(info) or DEFAULT_STEP_SIZE,
        min_notional=to_decimal(min_notional, "minNotional"),
        tick_size=to_decimal(tick, "tickSize") if tick else DEFAULT_TICK_SIZE,
    )
