"""
Global constants for FusionWealth.

Purpose
-------
Centralizes default values and policy numbers used throughout the engine.
Every value here is an illustrative default: the pydantic models in
``config.py`` read their defaults from this module and any of them can be
overridden per evaluation.

Usage
-----
>>> from fusionwealth.constants import DEFAULT_N_PATHS, DEFAULT_SEED
>>> result = run_monte_carlo(1_000_000, 30, 0.10, 0.18, 20_000,
...                          n_paths=DEFAULT_N_PATHS, seed=DEFAULT_SEED)

Categories
----------
- Market: clamp bounds and fallback parameters
- Tax: flat effective rate
- Merton: risk-free / discount rate, risk-aversion bounds, lifecycle policy
- Simulation: path counts, chunking, seeds, percentiles
- Sentiment: tilt scale and return floor
- Goals: confidence threshold, solver limits
- Factors / fitness: neutral quality score and blend weights
"""

from typing import Tuple

__all__ = [
    # Market
    "MU_MIN",
    "MU_MAX",
    "SIGMA_MIN",
    "SIGMA_MAX",
    "DEFAULT_MU",
    "DEFAULT_SIGMA",
    "TRADING_DAYS_PER_YEAR",
    # Tax
    "DEFAULT_TAX_RATE",
    # Merton
    "DEFAULT_RISK_FREE_RATE",
    "DEFAULT_DISCOUNT_RATE",
    "GAMMA_MIN",
    "GAMMA_MAX",
    "DEFAULT_REPLACEMENT_RATIO",
    "DEFAULT_RETIREMENT_YEARS",
    "DEFAULT_INVEST_CAP",
    # Simulation
    "DEFAULT_N_PATHS",
    "DEFAULT_CHUNK_SIZE",
    "DEFAULT_SEED",
    "DEFAULT_PERCENTILES",
    "MONTHS_PER_YEAR",
    # Sentiment
    "DEFAULT_TILT_SCALE",
    "DEFAULT_MU_FLOOR",
    # Goals
    "DEFAULT_GOAL_CONFIDENCE",
    "DEFAULT_SOLVER_MAX_ITERS",
    "DEFAULT_SOLVER_TOLERANCE",
    "DEFAULT_MAX_TIMELINE_EXTENSION",
    "NEUTRAL_GOAL_SUCCESS",
    # Factors / fitness
    "DEFAULT_NEUTRAL_QUALITY_SCORE",
    "DEFAULT_FITNESS_WEIGHTS",
    # Cache
    "DEFAULT_CACHE_SIZE",
]


# =============================================================================
# Market
# =============================================================================

MU_MIN: float = 0.05
"""Lower clamp bound for the annual expected return."""

MU_MAX: float = 0.25
"""Upper clamp bound for the annual expected return."""

SIGMA_MIN: float = 0.10
"""Lower clamp bound for annual volatility (also keeps σ² away from zero)."""

SIGMA_MAX: float = 0.40
"""Upper clamp bound for annual volatility."""

DEFAULT_MU: float = 0.10
"""Fallback expected return when no usable market data is supplied."""

DEFAULT_SIGMA: float = 0.18
"""Fallback volatility when no usable market data is supplied."""

TRADING_DAYS_PER_YEAR: int = 252
"""Trading days used to annualize daily close series."""


# =============================================================================
# Tax
# =============================================================================

DEFAULT_TAX_RATE: float = 0.30
"""Flat effective tax rate applied to gross monthly income (30%)."""


# =============================================================================
# Merton
# =============================================================================

DEFAULT_RISK_FREE_RATE: float = 0.04
"""Annual risk-free rate r used in the Merton fraction."""

DEFAULT_DISCOUNT_RATE: float = 0.04
"""Annual discount rate for human capital and lifecycle annuities."""

GAMMA_MIN: float = 1.0
"""Smallest admissible relative risk aversion."""

GAMMA_MAX: float = 10.0
"""Largest admissible relative risk aversion."""

DEFAULT_REPLACEMENT_RATIO: float = 0.70
"""Retirement consumption as a fraction of working-life consumption."""

DEFAULT_RETIREMENT_YEARS: int = 25
"""Years of retirement funded by the lifecycle consumption plan."""

DEFAULT_INVEST_CAP: float = 0.95
"""Maximum share of monthly surplus routed to the risky bucket.

Keeps at least 5% of the surplus in the savings bucket even when φ = 1.
"""


# =============================================================================
# Simulation
# =============================================================================

DEFAULT_N_PATHS: int = 500
"""Default number of Monte Carlo wealth paths."""

DEFAULT_CHUNK_SIZE: int = 250
"""Paths per independently seeded chunk.

Fixed chunking makes results independent of the worker count.
"""

DEFAULT_SEED: int = 42
"""Default random seed for reproducibility."""

DEFAULT_PERCENTILES: Tuple[float, ...] = (10.0, 50.0, 90.0)
"""Percentiles reported per month (p10 / median / p90)."""

MONTHS_PER_YEAR: int = 12
"""Number of months in a year."""


# =============================================================================
# Sentiment
# =============================================================================

DEFAULT_TILT_SCALE: float = 0.02
"""Expected-return shift produced by a full ±1 sentiment tilt."""

DEFAULT_MU_FLOOR: float = 0.05
"""Adjusted expected return never drops below this value."""


# =============================================================================
# Goals
# =============================================================================

DEFAULT_GOAL_CONFIDENCE: float = 0.90
"""Target probability of on-time funding (90%)."""

DEFAULT_SOLVER_MAX_ITERS: int = 100
"""Iteration cap for the contribution-gap bisection."""

DEFAULT_SOLVER_TOLERANCE: float = 1.0
"""Bracket width (currency units) at which the bisection stops."""

DEFAULT_MAX_TIMELINE_EXTENSION: int = 120
"""Largest deadline extension (months) searched by the timeline solver."""

NEUTRAL_GOAL_SUCCESS: float = 100.0
"""Average success rate reported for a household without goals."""


# =============================================================================
# Factors / fitness
# =============================================================================

DEFAULT_NEUTRAL_QUALITY_SCORE: float = 50.0
"""Quality score when no holdings are supplied."""

DEFAULT_FITNESS_WEIGHTS: Tuple[float, float, float] = (40.0, 0.4, 0.2)
"""Weights for (merton_fraction, avg_goal_success, quality_score)."""


# =============================================================================
# Cache
# =============================================================================

DEFAULT_CACHE_SIZE: int = 128
"""Maximum number of memoized evaluations kept by the orchestrator."""
