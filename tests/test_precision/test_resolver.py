"""Tests for PrecisionResolver: fallback chain, learning, live detection."""

from decimal import Decimal
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from asterdex.exceptions import ConfigurationError, PrecisionCacheError
from asterdex.precision.cache import InMemoryPrecisionCache, JsonFilePrecisionCache
from asterdex.precision.resolver import PrecisionResolver


def _symbol_info(symbol: str, *filters: dict) -> dict:
    return {"symbol": symbol, "filters": list(filters)}


EXCHANGE_INFO = {
    "symbols": [
        _symbol_info(
            "BTCUSDT",
            {"filterType": "PRICE_FILTER", "tickSize": "0.1"},
            {"filterType": "LOT_SIZE", "stepSize": "0.001"},
            {"filterType": "MARKET_LOT_SIZE", "stepSize": "0.01"},
        ),
        _symbol_info("NEWCOINUSDT", {"filterType": "LOT_SIZE", "stepSize": "0.1"}),
        _symbol_info("TINYUSDT", {"filterType": "LOT_SIZE", "stepSize": "0.000001"}),
        _symbol_info("NOFILTERUSDT"),
    ]
}


class TestGetPrecision:
    """Tests for the cache -> registry -> heuristic chain."""

    def test_registry_hit(self, resolver: PrecisionResolver) -> None:
        assert resolver.get_precision("XRPUSDT") == 1

    def test_heuristic_for_unknown_symbol(self, resolver: PrecisionResolver) -> None:
        assert resolver.get_precision("NEWBTCUSDT") == 3
        assert resolver.get_precision("BABYDOGEUSDT") == 0

    def test_default_for_unmatched_symbol(self, resolver: PrecisionResolver) -> None:
        assert resolver.get_precision("ZZZUSDT") == 2

    def test_cache_beats_registry(self, precision_cache: InMemoryPrecisionCache) -> None:
        precision_cache.set("BTCUSDT", 1)
        assert PrecisionResolver(precision_cache).get_precision("BTCUSDT") == 1

    def test_cached_zero_is_a_hit(self, precision_cache: InMemoryPrecisionCache) -> None:
        precision_cache.set("BTCUSDT", 0)
        assert PrecisionResolver(precision_cache).get_precision("BTCUSDT") == 0

    def test_lookup_normalizes_symbol(self, precision_cache: InMemoryPrecisionCache) -> None:
        precision_cache.set("BTCUSDT", 2)
        assert PrecisionResolver(precision_cache).get_precision("btcusdt") == 2

    def test_out_of_range_cache_value_clamped(self) -> None:
        cache = InMemoryPrecisionCache({"BTCUSDT": 8})
        assert PrecisionResolver(cache).get_precision("BTCUSDT") == 4


class TestSetPrecision:
    """Tests for learned write-back."""

    def test_set_then_get(self, resolver: PrecisionResolver) -> None:
        resolver.set_precision("solusdt", 1)
        assert resolver.get_precision("SOLUSDT") == 1
        assert resolver.cache.get("SOLUSDT") == 1
        assert resolver.has_learned("SOLUSDT") is True

    @pytest.mark.parametrize("precision", [-1, 5, True, 2.0])
    def test_invalid_precision_rejected(self, resolver: PrecisionResolver, precision: object) -> None:
        with pytest.raises(ConfigurationError):
            resolver.set_precision("BTCUSDT", precision)  # type: ignore[arg-type]

    def test_persist_failure_is_swallowed(self) -> None:
        cache = MagicMock(spec=InMemoryPrecisionCache)
        cache.get.return_value = None
        cache.set.side_effect = PrecisionCacheError("disk full")

        PrecisionResolver(cache).set_precision("BTCUSDT", 2)
        cache.set.assert_called_once_with("BTCUSDT", 2)

    def test_unwritable_file_keeps_in_memory_value(self, tmp_path: Path) -> None:
        blocker = tmp_path / "blocker"
        blocker.write_text("")
        resolver = PrecisionResolver(JsonFilePrecisionCache(blocker / "cache.json"))

        resolver.set_precision("BTCUSDT", 1)
        assert resolver.get_precision("BTCUSDT") == 1

    def test_file_backed_learning_survives_restart(self, tmp_path: Path) -> None:
        path = tmp_path / "cache.json"
        PrecisionResolver(JsonFilePrecisionCache(path)).set_precision("ETHUSDT", 2)

        restarted = PrecisionResolver(JsonFilePrecisionCache(path))
        assert restarted.get_precision("ETHUSDT") == 2


class TestDetectPrecisionFromMetadata:
    """Tests for live exchangeInfo detection."""

    def test_market_lot_size_preferred(self, resolver: PrecisionResolver) -> None:
        assert resolver.detect_precision_from_metadata(EXCHANGE_INFO, "BTCUSDT") == 2

    def test_lot_size_fallback(self, resolver: PrecisionResolver) -> None:
        assert resolver.detect_precision_from_metadata(EXCHANGE_INFO, "NEWCOINUSDT") == 1

    def test_missing_symbol_defaults_to_three(self, resolver: PrecisionResolver) -> None:
        assert resolver.detect_precision_from_metadata(EXCHANGE_INFO, "GHOSTUSDT") == 3

    def test_missing_step_defaults_to_three(self, resolver: PrecisionResolver) -> None:
        assert resolver.detect_precision_from_metadata(EXCHANGE_INFO, "NOFILTERUSDT") == 3

    def test_empty_snapshot_defaults_to_three(self, resolver: PrecisionResolver) -> None:
        assert resolver.detect_precision_from_metadata({}, "BTCUSDT") == 3

    def test_fine_step_clamped_to_max_precision(self, resolver: PrecisionResolver) -> None:
        assert resolver.detect_precision_from_metadata(EXCHANGE_INFO, "TINYUSDT") == 4

    def test_try_detect_distinguishes_missing_data(self, resolver: PrecisionResolver) -> None:
        assert resolver.try_detect_precision(EXCHANGE_INFO, "NEWCOINUSDT") == 1
        assert resolver.try_detect_precision(EXCHANGE_INFO, "GHOSTUSDT") is None
        assert resolver.try_detect_precision(EXCHANGE_INFO, "NOFILTERUSDT") is None

    def test_detection_does_not_write_cache(self, resolver: PrecisionResolver) -> None:
        resolver.detect_precision_from_metadata(EXCHANGE_INFO, "BTCUSDT")
        assert resolver.has_learned("BTCUSDT") is False


class TestLearnFromMetadata:
    """Tests for bulk learning from a snapshot."""

    def test_learns_listed_symbols(self, resolver: PrecisionResolver) -> None:
        learned = resolver.learn_from_metadata(EXCHANGE_INFO, ["btcusdt", "GHOSTUSDT"])
        assert learned == {"BTCUSDT": 2}
        assert resolver.get_precision("BTCUSDT") == 2
        assert resolver.has_learned("GHOSTUSDT") is False

    def test_learns_whole_snapshot_by_default(self, resolver: PrecisionResolver) -> None:
        learned = resolver.learn_from_metadata(EXCHANGE_INFO)
        assert learned == {"BTCUSDT": 2, "NEWCOINUSDT": 1, "TINYUSDT": 4}
        assert resolver.has_learned("NOFILTERUSDT") is False

    def test_listed_symbol_without_step_keeps_registry_value(
        self, resolver: PrecisionResolver
    ) -> None:
        metadata = {"symbols": [_symbol_info("DOGEUSDT")]}

        assert resolver.learn_from_metadata(metadata) == {}
        assert resolver.has_learned("DOGEUSDT") is False
        assert resolver.get_precision("DOGEUSDT") == 0


class TestResolveQuantity:
    """Tests for resolve_quantity."""

    def test_floors_to_registry_precision(self, resolver: PrecisionResolver) -> None:
        assert resolver.resolve_quantity("BTCUSDT", Decimal("0.123456")) == Decimal("0.123")

    def test_whole_units(self, resolver: PrecisionResolver) -> None:
        assert resolver.resolve_quantity("DOGEUSDT", 7.8) == Decimal("7")

    def test_uses_learned_precision(self, resolver: PrecisionResolver) -> None:
        resolver.set_precision("BTCUSDT", 1)
        assert resolver.resolve_quantity("BTCUSDT", "0.987") == Decimal("0.9")

    def test_negative_quantity_rejected(self, resolver: PrecisionResolver) -> None:
        with pytest.raises(ConfigurationError):
            resolver.resolve_quantity("BTCUSDT", Decimal("-1"))
