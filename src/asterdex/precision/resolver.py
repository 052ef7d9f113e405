"""Layered quantity-precision resolution with learned write-back.

Resolution order for get_precision(), first hit wins:
1. learned cache (injected PrecisionCache, survives restarts when file-backed)
2. static step-size registry
3. ordered substring heuristic (HeuristicRule), whose DEFAULT rule yields 2

Precision values are always integers in [0, MAX_PRECISION].
"""

from collections.abc import Iterable
from decimal import Decimal
from typing import Any

from asterdex.exceptions import ConfigurationError, PrecisionCacheError
from asterdex.logging import get_logger
from asterdex.precision.cache import PrecisionCache
from asterdex.precision.filters import find_symbol_info, lot_step_size
from asterdex.precision.normalizer import (
    DecimalLike,
    floor_to_step,
    precision_from_step_size,
    step_for_precision,
    to_decimal,
)
from asterdex.precision.registry import lookup, match_heuristic, normalize_symbol

logger = get_logger(__name__)

MIN_PRECISION = 0
MAX_PRECISION = 4
DETECTION_FALLBACK_PRECISION = 3


def clamp_precision(precision: int) -> int:
    return max(MIN_PRECISION, min(MAX_PRECISION, precision))


class PrecisionResolver:
    """Resolves, learns and applies per-symbol quantity precision.

    Args:
        cache: Learned-precision store. The resolver is its only writer.
    """

    def __init__(self, cache: PrecisionCache) -> None:
        self._cache = cache

    @property
    def cache(self) -> PrecisionCache:
        return self._cache

    def has_learned(self, symbol: str) -> bool:
        """True if the cache holds a precision for this symbol."""
        return self._cache.get(normalize_symbol(symbol)) is not None

    def get_precision(self, symbol: str) -> int:
        """Return the precision to try first for a symbol.

        A cached 0 is a valid hit; only a missing entry falls through.
        """
        key = normalize_symbol(symbol)

        cached = self._cache.get(key)
        if cached is not None:
            # hand-edited or foreign cache files may hold out-of-range values
            cached = clamp_precision(cached)
            logger.debug("precision_resolved", symbol=key, precision=cached, source="cache")
            return cached

        entry = lookup(key)
        if entry is not None:
            logger.debug(
                "precision_resolved", symbol=key, precision=entry.precision, source="registry"
            )
            return entry.precision

        rule = match_heuristic(key)
        logger.debug(
            "precision_resolved",
            symbol=key,
            precision=rule.precision,
            source="heuristic",
            rule=rule.name,
        )
        return rule.precision

    def set_precision(self, symbol: str, precision: int) -> None:
        """Record a learned precision and persist it.

        Persistence failures are logged, never raised: the in-memory value
        stays authoritative for the rest of the process lifetime.

        Raises:
            ConfigurationError: If precision is outside [0, MAX_PRECISION].
        """
        if isinstance(precision, bool) or not isinstance(precision, int):
            raise ConfigurationError(f"precision must be an int, got {precision!r}")
        if not MIN_PRECISION <= precision <= MAX_PRECISION:
            raise ConfigurationError(
                f"precision must be in [{MIN_PRECISION}, {MAX_PRECISION}], got {precision}"
            )

        key = normalize_symbol(symbol)
        previous = self._cache.get(key)
        try:
            self._cache.set(key, precision)
        except PrecisionCacheError as exc:
            logger.error("precision_cache_save_failed", symbol=key, error=str(exc))

        if previous != precision:
            logger.info(
                "precision_learned", symbol=key, precision=precision, previous=previous
            )

    def try_detect_precision(
        self, metadata: dict[str, Any], symbol: str
    ) -> int | None:
        """Derive precision from a live exchangeInfo snapshot, or None.

        Prefers the MARKET_LOT_SIZE step over LOT_SIZE, and uses the same
        -log10(step) formula as the normalizer. Returns None when the symbol
        or its step is missing, so callers never mistake a guess for data.
        """
        symbol_info = find_symbol_info(metadata, symbol)
        if symbol_info is None:
            return None

        step = lot_step_size(symbol_info)
        if step is None:
            return None

        return clamp_precision(precision_from_step_size(step))

    def detect_precision_from_metadata(
        self, metadata: dict[str, Any], symbol: str
    ) -> int:
        """Like try_detect_precision, falling back to DETECTION_FALLBACK_PRECISION.

        Does not write to the cache.
        """
        detected = self.try_detect_precision(metadata, symbol)
        return DETECTION_FALLBACK_PRECISION if detected is None else detected

    def learn_from_metadata(
        self, metadata: dict[str, Any], symbols: Iterable[str] | None = None
    ) -> dict[str, int]:
        """Detect and persist precision for symbols present in a snapshot.

        Args:
            metadata: exchangeInfo payload.
            symbols: Symbols to learn. Defaults to every symbol in the snapshot.

        Returns:
            Mapping of symbol -> learned precision. Symbols absent from the
            snapshot, or listed without a lot step, are skipped so the
            registry keeps answering for them.
        """
        if symbols is None:
            symbols = [str(info.get("symbol", "")) for info in metadata.get("symbols") or []]

        learned: dict[str, int] = {}
        for symbol in symbols:
            if not symbol:
                continue
            precision = self.try_detect_precision(metadata, symbol)
            if precision is None:
                logger.debug("precision_not_detectable", symbol=normalize_symbol(symbol))
                continue
            self.set_precision(symbol, precision)
            learned[normalize_symbol(symbol)] = precision

        logger.info("precision_learned_from_metadata", count=len(learned))
        return learned

    def resolve_quantity(self, symbol: str, desired_quantity: DecimalLike) -> Decimal:
        """Floor a desired quantity to the symbol's current precision.

        Raises:
            ConfigurationError: If the quantity is negative or not a number.
        """
        quantity = to_decimal(desired_quantity, "desired_quantity")
        if quantity < 0:
            raise ConfigurationError(f"quantity must be >= 0, got {quantity}")

        precision = self.get_precision(symbol)
        return floor_to_step(quantity, step_for_precision(precision))
