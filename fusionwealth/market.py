"""
Market parameters consumed by the engine.

Purpose
-------
The market-data collaborator supplies an annual expected return μ and an
annual volatility σ. The engine accepts anything and clamps: μ into
[0.05, 0.25] and σ into [0.10, 0.40]. Non-finite values fall back to the
defaults (μ = 0.10, σ = 0.18).

``estimate_market_parameters`` turns a daily close series (already fetched
by the collaborator) into clamped parameters:
    σ = std(log returns) · sqrt(252)
    μ = (1 + total_return) ** (252 / n_days) - 1
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from .constants import (
    DEFAULT_MU,
    DEFAULT_SIGMA,
    MU_MAX,
    MU_MIN,
    SIGMA_MAX,
    SIGMA_MIN,
    TRADING_DAYS_PER_YEAR,
)
from .utils import clamp

__all__ = ["MarketParameters", "estimate_market_parameters"]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarketParameters:
    """
    Annual expected return and volatility of the risky asset.

    Parameters
    ----------
    mu : float
        Expected annual return (arithmetic), e.g. 0.10.
    sigma : float
        Annual volatility, e.g. 0.18.

    Examples
    --------
    >>> MarketParameters(mu=0.40, sigma=0.05).clamped()
    MarketParameters(mu=0.25, sigma=0.1)
    """
    mu: float = DEFAULT_MU
    sigma: float = DEFAULT_SIGMA

    def clamped(
        self,
        mu_bounds: tuple = (MU_MIN, MU_MAX),
        sigma_bounds: tuple = (SIGMA_MIN, SIGMA_MAX),
    ) -> MarketParameters:
        """Return a copy with μ and σ clamped into their admissible ranges."""
        mu = float(self.mu) if math.isfinite(self.mu) else DEFAULT_MU
        sigma = float(self.sigma) if math.isfinite(self.sigma) else DEFAULT_SIGMA
        out = MarketParameters(
            mu=clamp(mu, *mu_bounds),
            sigma=clamp(sigma, *sigma_bounds),
        )
        if out != self:
            logger.warning(
                "Market parameters out of range (mu=%s, sigma=%s); using mu=%.4f, sigma=%.4f",
                self.mu, self.sigma, out.mu, out.sigma,
            )
        return out

    @property
    def variance(self) -> float:
        return self.sigma ** 2


def estimate_market_parameters(
    closes: Sequence[float],
    trading_days: int = TRADING_DAYS_PER_YEAR,
) -> MarketParameters:
    """
    Estimate clamped (μ, σ) from a chronological daily close series.

    Parameters
    ----------
    closes : sequence of float
        Daily closing prices, oldest first. Non-positive or non-finite
        prices are dropped.
    trading_days : int, default 252
        Trading days per year used for annualization.

    Returns
    -------
    MarketParameters
        Clamped estimate, or the defaults when fewer than two usable
        prices remain.

    Examples
    --------
    >>> estimate_market_parameters([100.0]).mu
    0.1
    """
    prices = np.asarray(closes, dtype=float)
    prices = prices[np.isfinite(prices) & (prices > 0)]
    if prices.size < 2:
        logger.info("Fewer than two usable prices; falling back to default market parameters")
        return MarketParameters()

    log_returns = np.diff(np.log(prices))
    if log_returns.size > 1:
        sigma = float(np.std(log_returns, ddof=1) * np.sqrt(trading_days))
    else:
        sigma = DEFAULT_SIGMA

    total_return = prices[-1] / prices[0] - 1.0
    mu = float((1.0 + total_return) ** (trading_days / prices.size) - 1.0)

    logger.debug("Estimated market parameters: mu=%.4f, sigma=%.4f", mu, sigma)
    return MarketParameters(mu=mu, sigma=sigma).clamped()
