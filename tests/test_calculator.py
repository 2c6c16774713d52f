"""Tests for the metric calculator."""

import math

import pytest

from polyarb.arb.calculator import (
    MISSING_PRICE,
    calculate_arbitrage,
    extract_outcome_prices,
    parse_price,
)
from polyarb.domain.models import Opportunity


class TestParsePrice:
    """Tests for parse_price."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (0.45, 0.45),
            ("0.52", 0.52),
            (" 0.3 ", 0.3),
            (1, 1.0),
            (0, 0.0),
        ],
    )
    def test_numeric_values(self, value, expected):
        assert parse_price(value) == pytest.approx(expected)

    @pytest.mark.parametrize(
        "value",
        [
            None, "", "abc", "n/a", True, False, [], {}, object(),
            float("nan"), "NaN", "inf", "-inf", "Infinity", "1e999", float("inf"), float("-inf"),
        ],
    )
    def test_unparseable_values_fall_back(self, value):
        assert parse_price(value) == MISSING_PRICE

    def test_missing_price_is_zero(self):
        assert MISSING_PRICE == 0.0


class TestExtractOutcomePrices:
    """Tests for outcomePrices decoding."""

    def test_list_passes_through(self):
        assert extract_outcome_prices({"outcomePrices": ["0.4", "0.5"]}) == ["0.4", "0.5"]

    def test_json_encoded_string_is_decoded(self):
        assert extract_outcome_prices({"outcomePrices": '["0.4", "0.5"]'}) == ["0.4", "0.5"]

    def test_garbage_string_counts_as_missing(self):
        assert extract_outcome_prices({"outcomePrices": "not json"}) == []

    def test_non_list_counts_as_missing(self):
        assert extract_outcome_prices({"outcomePrices": {"yes": 0.4}}) == []
        assert extract_outcome_prices({"outcomePrices": 0.4}) == []
        assert extract_outcome_prices({}) == []


class TestCalculateArbitrage:
    """Tests for calculate_arbitrage."""

    def test_qualifying_market(self):
        """YES 0.45 + NO 0.52 leaves a 3% spread."""
        opp = calculate_arbitrage({"id": "m1", "outcomePrices": [0.45, 0.52]})

        assert opp.id == "m1"
        assert opp.yes == 0.45
        assert opp.no == 0.52
        assert opp.sum == pytest.approx(0.97)
        assert opp.spread == pytest.approx(0.03)
        assert opp.is_qualifying

    def test_overpriced_market(self):
        opp = calculate_arbitrage({"id": "m2", "outcomePrices": [0.6, 0.5]})

        assert opp.sum == pytest.approx(1.1)
        assert opp.spread == pytest.approx(-0.1)
        assert not opp.is_qualifying

    def test_missing_outcome_prices(self):
        """A market without prices reads as a 100% spread."""
        opp = calculate_arbitrage({"id": "m5"})

        assert opp.yes == 0
        assert opp.no == 0
        assert opp.sum == 0
        assert opp.spread == 1
        assert opp.is_qualifying
        assert not opp.has_prices

    def test_short_price_list(self):
        opp = calculate_arbitrage({"id": "m6", "outcomePrices": ["0.4"]})

        assert opp.yes == 0.4
        assert opp.no == 0
        assert opp.spread == pytest.approx(0.6)

    def test_string_prices_from_gamma(self):
        opp = calculate_arbitrage({"id": "g1", "outcomePrices": '["0.3", "0.65"]'})

        assert opp.yes == 0.3
        assert opp.no == 0.65
        assert opp.spread == pytest.approx(0.05)

    def test_defaults_for_volume_and_liquidity(self):
        opp = calculate_arbitrage({"id": "m7", "outcomePrices": [0.4, 0.5]})

        assert opp.volume == 0
        assert opp.liquidity == {"YES": 0, "NO": 0}

    def test_volume_and_liquidity_pass_through(self):
        liquidity = {"YES": 1200, "NO": 800}
        opp = calculate_arbitrage({
            "id": "m8",
            "outcomePrices": [0.4, 0.5],
            "volume": "15234.5",
            "liquidity": liquidity,
        })

        assert opp.volume == "15234.5"
        assert opp.liquidity == liquidity

    def test_empty_liquidity_object_is_kept(self):
        assert calculate_arbitrage({"id": "m11", "liquidity": {}}).liquidity == {}

    @pytest.mark.parametrize("liquidity", [None, 0, ""])
    def test_falsy_liquidity_is_defaulted(self, liquidity):
        opp = calculate_arbitrage({"id": "m12", "liquidity": liquidity})
        assert opp.liquidity == {"YES": 0, "NO": 0}

    def test_infinite_price_does_not_qualify_as_huge_spread(self):
        opp = calculate_arbitrage({"id": "m13", "outcomePrices": ["-inf", "0.5"]})

        assert opp.yes == 0.0
        assert opp.spread == pytest.approx(0.5)

    def test_default_liquidity_is_not_shared(self):
        a = calculate_arbitrage({"id": "a"})
        b = calculate_arbitrage({"id": "b"})
        assert a.liquidity is not b.liquidity

    def test_identity_fields_pass_through_verbatim(self):
        opp = calculate_arbitrage({
            "id": "m9",
            "question": "",
            "updatedAt": "not-a-date",
        })

        assert opp.id == "m9"
        assert opp.question == ""
        assert opp.updated_at == "not-a-date"

    def test_absent_identity_fields_are_none(self):
        opp = calculate_arbitrage({})

        assert opp.id is None
        assert opp.question is None
        assert opp.updated_at is None

    @pytest.mark.parametrize(
        "market",
        [
            {},
            {"outcomePrices": None},
            {"outcomePrices": []},
            {"outcomePrices": [None, None]},
            {"outcomePrices": ["yes", "no"]},
            {"outcomePrices": "[broken"},
            {"outcomePrices": [True, {"a": 1}]},
            {"volume": None, "liquidity": None, "updatedAt": None},
            {"volume": "", "liquidity": [], "question": None},
        ],
    )
    def test_partial_records_never_raise(self, market):
        opp = calculate_arbitrage(market)
        assert isinstance(opp, Opportunity)

    def test_input_is_not_mutated(self):
        market = {"id": "m10", "outcomePrices": ["0.4", "0.5"]}
        calculate_arbitrage(market)
        assert market == {"id": "m10", "outcomePrices": ["0.4", "0.5"]}


class TestDerivedFields:
    """Invariants of the derived sum/spread fields."""

    @pytest.mark.parametrize(
        "prices",
        [
            [0.45, 0.52],
            [0.6, 0.5],
            ["0.1", "0.2"],
            [0.999, 0.0005],
            [1, 1],
            [],
            ["x", 0.3],
            [1e-12, 1 - 1e-12],
        ],
    )
    def test_spread_is_one_minus_sum(self, prices):
        opp = calculate_arbitrage({"outcomePrices": prices})
        assert opp.spread == 1 - opp.sum

    @pytest.mark.parametrize(
        "prices",
        [
            [0.45, 0.52],
            [0.5, 0.5],
            [0.6, 0.5],
            [0.1, 0.2],
            [0.3, 0.7],
            [0.0, 0.0],
            [0.7, 0.30000000000000004],
            [0.1, 0.9],
        ],
    )
    def test_qualifying_halves_agree(self, prices):
        """sum < 1 and spread > 0 never disagree."""
        opp = calculate_arbitrage({"outcomePrices": prices})
        assert (opp.sum < 1) == (opp.spread > 0)

    def test_opportunity_is_immutable(self):
        opp = calculate_arbitrage({"outcomePrices": [0.4, 0.5]})
        with pytest.raises(AttributeError):
            opp.yes = 0.1

    def test_no_rounding(self):
        opp = calculate_arbitrage({"outcomePrices": [0.1, 0.2]})
        assert opp.sum == 0.1 + 0.2
        assert not math.isclose(opp.sum, round(opp.sum, 2), rel_tol=0, abs_tol=0)
