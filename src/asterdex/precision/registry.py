"""Static step-size registry for AsterDEX perpetual symbols.

Known symbols resolve to a fixed step size and precision without querying
exchangeInfo. Unknown symbols fall back to an ordered substring heuristic
(HeuristicRule), which is a best guess and can disagree with the live venue.
"""

from collections import Counter
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum


@dataclass(frozen=True)
class SymbolPrecisionEntry:
    """Quantity constraints for one symbol. Immutable."""

    symbol: str
    step_size: Decimal
    precision: int
    min_qty: Decimal
    max_qty: Decimal


# (symbol, step_size, precision, min_qty, max_qty)
_REGISTRY_ROWS: tuple[tuple[str, str, int, str, str], ...] = (
    ("BTCUSDT", "0.001", 3, "0.001", "1000"),
    ("ETHUSDT", "0.001", 3, "0.001", "10000"),
    ("LTCUSDT", "0.001", 3, "0.001", "10000"),
    ("BCHUSDT", "0.001", 3, "0.001", "10000"),
    ("ETCUSDT", "0.001", 3, "0.001", "10000"),
    ("TRXUSDT", "0.001", 3, "0.001", "10000"),
    ("LINKUSDT", "0.001", 3, "0.001", "10000"),
    ("UNIUSDT", "0.001", 3, "0.001", "10000"),
    ("ATOMUSDT", "0.001", 3, "0.001", "10000"),
    ("NEARUSDT", "0.001", 3, "0.001", "10000"),
    ("FTMUSDT", "0.001", 3, "0.001", "10000"),
    ("ALGOUSDT", "0.001", 3, "0.001", "10000"),
    ("VETUSDT", "0.001", 3, "0.001", "10000"),
    ("ICPUSDT", "0.001", 3, "0.001", "10000"),
    ("FILUSDT", "0.001", 3, "0.001", "10000"),
    ("APTUSDT", "0.001", 3, "0.001", "10000"),
    ("SUIUSDT", "0.001", 3, "0.001", "10000"),
    ("ARBUSDT", "0.001", 3, "0.001", "10000"),
    ("OPUSDT", "0.001", 3, "0.001", "10000"),
    ("INJUSDT", "0.001", 3, "0.001", "10000"),
    ("SEIUSDT", "0.001", 3, "0.001", "10000"),
    ("TIAUSDT", "0.001", 3, "0.001", "10000"),
    ("WLDUSDT", "0.001", 3, "0.001", "10000"),
    ("PENDLEUSDT", "0.001", 3, "0.001", "10000"),
    ("JUPUSDT", "0.001", 3, "0.001", "10000"),
    ("WUSDT", "0.001", 3, "0.001", "10000"),
    ("BOMEUSDT", "0.001", 3, "0.001", "10000"),
    ("BONKUSDT", "0.001", 3, "0.001", "10000"),
    ("WIFUSDT", "0.001", 3, "0.001", "10000"),
    ("POPCATUSDT", "0.001", 3, "0.001", "10000"),
    ("MYROUSDT", "0.001", 3, "0.001", "10000"),
    ("FLOKIUSDT", "0.001", 3, "0.001", "10000"),
    ("PEPEUSDT", "0.001", 3, "0.001", "10000"),
    ("SHIBUSDT", "0.001", 3, "0.001", "10000"),
    ("DOGEUSDT", "1", 0, "1", "10000000"),
    ("ADAUSDT", "1", 0, "1", "10000000"),
    ("AVAXUSDT", "1", 0, "1", "300000"),
    ("DOTUSDT", "1", 0, "1", "1000000"),
    ("MATICUSDT", "1", 0, "1", "1000000"),
    ("SOLUSDT", "0.01", 2, "0.01", "1000000"),
    ("BNBUSDT", "0.01", 2, "0.01", "100000"),
    ("XRPUSDT", "0.1", 1, "0.1", "1000000"),
    ("ASTERUSDT", "0.01", 2, "0.01", "2000000"),
    ("USDCUSDT", "0.01", 2, "0.01", "1000000"),
    ("USDTUSDT", "0.01", 2, "0.01", "1000000"),
    ("BUSDUSDT", "0.01", 2, "0.01", "1000000"),
    ("TUSDUSDT", "0.01", 2, "0.01", "1000000"),
    ("USDDUSDT", "0.01", 2, "0.01", "1000000"),
    ("FDUSDUSDT", "0.01", 2, "0.01", "1000000"),
    ("TUSDTUSDT", "0.01", 2, "0.01", "1000000"),
    ("USDFUSDT", "0.01", 2, "0.01", "1000000"),
    ("USDCEUSDT", "0.01", 2, "0.01", "1000000"),
    ("USDBCUSDT", "0.01", 2, "0.01", "1000000"),
    ("USD1USDT", "0.01", 2, "0.01", "1000000"),
    ("VUSDTUSDT", "0.01", 2, "0.01", "1000000"),
    ("CUSDTUSDT", "0.01", 2, "0.01", "1000000"),
    ("LISUSDUSDT", "0.01", 2, "0.01", "1000000"),
    ("BONUSUSDUSDT", "0.01", 2, "0.01", "1000000"),
    ("CDLUSDT", "0.01", 2, "0.01", "1000000"),
    ("TWTUSDT", "0.01", 2, "0.01", "1000000"),
    ("FORMUSDT", "0.01", 2, "0.01", "1000000"),
    ("LISTAUSDT", "0.01", 2, "0.01", "1000000"),
    ("JLPUSDT", "0.01", 2, "0.01", "1000000"),
    ("STONEUSDT", "0.01", 2, "0.01", "1000000"),
    ("RSETHUSDT", "0.01", 2, "0.01", "1000000"),
    ("WBETHUSDT", "0.01", 2, "0.01", "1000000"),
    ("ASBNBUSDT", "0.01", 2, "0.01", "1000000"),
    ("SLISBNBUSDT", "0.01", 2, "0.01", "1000000"),
    ("FBTCUSDT", "0.01", 2, "0.01", "1000000"),
    ("SOLVBTCUSDT", "0.01", 2, "0.01", "1000000"),
    ("PUMPBTCUSDT", "0.01", 2, "0.01", "1000000"),
    ("CAKEUSDT", "0.01", 2, "0.01", "1000000"),
)

STEP_SIZE_REGISTRY: dict[str, SymbolPrecisionEntry] = {
    symbol: SymbolPrecisionEntry(
        symbol=symbol,
        step_size=Decimal(step_size),
        precision=precision,
        min_qty=Decimal(min_qty),
        max_qty=Decimal(max_qty),
    )
    for symbol, step_size, precision, min_qty, max_qty in _REGISTRY_ROWS
}


def normalize_symbol(symbol: str) -> str:
    """Return the exchange form of a symbol (stripped, uppercase)."""
    return symbol.strip().upper()


def lookup(symbol: str) -> SymbolPrecisionEntry | None:
    """Return the registry entry for a symbol, or None. Case-insensitive."""
    return STEP_SIZE_REGISTRY.get(normalize_symbol(symbol))


def is_known(symbol: str) -> bool:
    return normalize_symbol(symbol) in STEP_SIZE_REGISTRY


def all_symbols() -> list[str]:
    return list(STEP_SIZE_REGISTRY)


def symbols_by_precision(precision: int) -> list[str]:
    """Return every registered symbol whose precision equals ``precision``."""
    return [
        symbol
        for symbol, entry in STEP_SIZE_REGISTRY.items()
        if entry.precision == precision
    ]


def precision_stats() -> dict[int, int]:
    """Return the number of registered symbols per precision value."""
    return dict(Counter(entry.precision for entry in STEP_SIZE_REGISTRY.values()))


class HeuristicRule(Enum):
    """Ordered substring rules for symbols missing from the registry.

    Members are evaluated in declaration order; the first rule with a
    matching needle wins. DEFAULT has no needles and always matches.
    """

    MAJOR = (("BTC", "ETH"), 3)
    MID_CAP = (("ASTER", "SOL", "BNB"), 2)
    XRP = (("XRP",), 1)
    WHOLE_UNIT = (("ADA", "DOGE", "AVAX"), 0)
    DEFAULT = ((), 2)

    def __init__(self, needles: tuple[str, ...], precision: int) -> None:
        self.needles = needles
        self.precision = precision

    def matches(self, symbol: str) -> bool:
        if not self.needles:
            return True
        upper = normalize_symbol(symbol)
        return any(needle in upper for needle in self.needles)


def match_heuristic(symbol: str) -> HeuristicRule:
    """Return the first HeuristicRule matching the symbol."""
    for rule in HeuristicRule:
        if rule.matches(symbol):
            return rule
    return HeuristicRule.DEFAULT


def heuristic_precision(symbol: str) -> int:
    return match_heuristic(symbol).precision
