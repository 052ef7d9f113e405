"""Tests for the static step-size registry and the heuristic fallback rules."""

from decimal import Decimal

import pytest

from asterdex.precision.registry import (
    STEP_SIZE_REGISTRY,
    HeuristicRule,
    SymbolPrecisionEntry,
    all_symbols,
    heuristic_precision,
    is_known,
    lookup,
    match_heuristic,
    precision_stats,
    symbols_by_precision,
)
from asterdex.precision.normalizer import floor_to_step, precision_from_step_size


class TestLookup:
    """Tests for registry lookup."""

    def test_dogeusdt_is_whole_unit(self) -> None:
        entry = lookup("DOGEUSDT")
        assert entry is not None
        assert entry.precision == 0
        assert entry.step_size == Decimal("1")

    def test_doge_quantity_normalizes_to_whole_units(self) -> None:
        entry = lookup("DOGEUSDT")
        assert entry is not None
        assert floor_to_step(Decimal("7.8"), entry.step_size) == Decimal("7")

    def test_lookup_is_case_insensitive(self) -> None:
        assert lookup("btcusdt") == lookup("BTCUSDT")
        assert lookup(" ethusdt ") is not None

    def test_unknown_symbol_returns_none(self) -> None:
        assert lookup("NOPEUSDT") is None
        assert is_known("NOPEUSDT") is False

    def test_btc_entry_bounds(self) -> None:
        entry = lookup("BTCUSDT")
        assert entry == SymbolPrecisionEntry(
            symbol="BTCUSDT",
            step_size=Decimal("0.001"),
            precision=3,
            min_qty=Decimal("0.001"),
            max_qty=Decimal("1000"),
        )

    def test_entries_are_immutable(self) -> None:
        entry = lookup("SOLUSDT")
        assert entry is not None
        with pytest.raises(AttributeError):
            entry.precision = 4  # type: ignore[misc]

    def test_precision_matches_step_size_for_every_entry(self) -> None:
        for entry in STEP_SIZE_REGISTRY.values():
            assert precision_from_step_size(entry.step_size) == entry.precision, entry.symbol
            assert 0 <= entry.precision <= 4
            assert entry.min_qty <= entry.max_qty


class TestRegistryQueries:
    """Tests for the registry listing helpers."""

    def test_all_symbols_are_uppercase(self) -> None:
        symbols = all_symbols()
        assert "ASTERUSDT" in symbols
        assert all(symbol == symbol.upper() for symbol in symbols)

    def test_symbols_by_precision(self) -> None:
        whole_units = symbols_by_precision(0)
        assert set(whole_units) == {
            "DOGEUSDT",
            "ADAUSDT",
            "AVAXUSDT",
            "DOTUSDT",
            "MATICUSDT",
        }
        assert symbols_by_precision(1) == ["XRPUSDT"]

    def test_precision_stats_sum_to_registry_size(self) -> None:
        stats = precision_stats()
        assert sum(stats.values()) == len(STEP_SIZE_REGISTRY)
        assert stats[1] == 1
        assert 4 not in stats


class TestHeuristicRules:
    """Tests for the ordered substring fallback."""

    @pytest.mark.parametrize(
        ("symbol", "rule", "precision"),
        [
            ("NEWBTCUSDT", HeuristicRule.MAJOR, 3),
            ("ETHFIUSDT", HeuristicRule.MAJOR, 3),
            ("ASTERBUSD", HeuristicRule.MID_CAP, 2),
            ("SOLXUSDT", HeuristicRule.MID_CAP, 2),
            ("XRPUP", HeuristicRule.XRP, 1),
            ("BABYDOGEUSDT", HeuristicRule.WHOLE_UNIT, 0),
            ("AVAXUP", HeuristicRule.WHOLE_UNIT, 0),
            ("ZZZUSDT", HeuristicRule.DEFAULT, 2),
        ],
    )
    def test_first_match(self, symbol: str, rule: HeuristicRule, precision: int) -> None:
        assert match_heuristic(symbol) is rule
        assert heuristic_precision(symbol) == precision

    def test_earlier_rule_wins(self) -> None:
        """A symbol matching both MAJOR and WHOLE_UNIT resolves to MAJOR."""
        assert match_heuristic("DOGEBTC") is HeuristicRule.MAJOR
        assert match_heuristic("SOLADA") is HeuristicRule.MID_CAP

    def test_heuristic_is_case_insensitive(self) -> None:
        assert match_heuristic("newbtcusdt") is HeuristicRule.MAJOR

    def test_rule_order(self) -> None:
        assert list(HeuristicRule) == [
            HeuristicRule.MAJOR,
            HeuristicRule.MID_CAP,
            HeuristicRule.XRP,
            HeuristicRule.WHOLE_UNIT,
            HeuristicRule.DEFAULT,
        ]

    def test_default_matches_anything(self) -> None:
        assert HeuristicRule.DEFAULT.matches("") is True
        assert HeuristicRule.DEFAULT.precision == 2
