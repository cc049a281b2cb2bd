"""
Unit tests for market module.

Tests clamping of collaborator-supplied parameters and estimation from
daily closes.
"""

import logging
import math

import numpy as np
import pytest

from fusionwealth.market import MarketParameters, estimate_market_parameters


class TestMarketParameters:
    """Test MarketParameters.clamped()."""

    def test_in_range_unchanged(self, market):
        assert market.clamped() == market

    @pytest.mark.parametrize("mu,sigma,expected", [
        (0.40, 0.05, (0.25, 0.10)),
        (-0.10, 0.90, (0.05, 0.40)),
        (0.12, 0.20, (0.12, 0.20)),
    ])
    def test_clamps_into_bounds(self, mu, sigma, expected):
        out = MarketParameters(mu, sigma).clamped()
        assert (out.mu, out.sigma) == pytest.approx(expected)

    def test_non_finite_falls_back_to_defaults(self):
        out = MarketParameters(float("nan"), float("inf")).clamped()
        assert out == MarketParameters(0.10, 0.18)

    def test_custom_bounds(self):
        out = MarketParameters(0.30, 0.50).clamped((0.0, 0.35), (0.05, 0.45))
        assert out == MarketParameters(0.30, 0.45)

    def test_clamping_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="fusionwealth.market"):
            MarketParameters(0.90, 0.18).clamped()
        assert "out of range" in caplog.text

    def test_variance(self):
        assert MarketParameters(0.1, 0.2).variance == pytest.approx(0.04)


class TestEstimateMarketParameters:
    """Test estimation from daily closes."""

    def test_short_series_defaults(self):
        assert estimate_market_parameters([]) == MarketParameters()
        assert estimate_market_parameters([100.0]) == MarketParameters()

    def test_invalid_prices_dropped(self):
        assert estimate_market_parameters([100.0, -5.0, float("nan")]) == MarketParameters()

    def test_estimates_are_clamped(self, seed):
        rng = np.random.default_rng(seed)
        closes = 100 * np.exp(np.cumsum(rng.normal(0.0004, 0.01, 500)))
        out = estimate_market_parameters(closes)
        assert 0.05 <= out.mu <= 0.25
        assert 0.10 <= out.sigma <= 0.40

    def test_volatility_annualized(self, seed):
        rng = np.random.default_rng(seed)
        daily = rng.normal(0.0, 0.015, 2000)
        closes = 100 * np.exp(np.cumsum(daily))
        out = estimate_market_parameters(closes)
        expected = float(np.std(np.diff(np.log(closes)), ddof=1) * math.sqrt(252))
        assert out.sigma == pytest.approx(expected)

    def test_cagr(self):
        # 253 prices spanning one trading year, +10%
        closes = np.linspace(100.0, 110.0, 253)
        out = estimate_market_parameters(closes)
        expected = 1.10 ** (252 / 253) - 1
        assert out.mu == pytest.approx(expected)
