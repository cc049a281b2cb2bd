"""
Monte Carlo wealth-path simulator for FusionWealth.

Mathematical Model
------------------
Wealth follows a discretized geometric Brownian motion with end-of-month
contributions:

    r_t ~ Normal(μ/12 − σ²/24, σ/√12)        (monthly log-return)
    W_t = W_{t−1} · exp(r_t) + c             (t = 1..T, W_0 = initial wealth)

where μ and σ are the annual expected return and volatility and c the
monthly contribution. The drift correction −σ²/24 makes E[exp(r_t)] equal
exp(μ/12), so the mean monthly growth matches the annual μ.

Determinism
-----------
Paths are generated in fixed-size chunks. Each chunk draws from its own
generator seeded by a child of ``numpy.random.SeedSequence(seed)``, so a
given seed reproduces the same paths bit for bit whatever the worker
count. Chunks may run on a thread pool; percentiles are computed only
after every chunk has been collected.

Example
-------
>>> result = run_monte_carlo(1_000_000, years=30, mu=0.10, sigma=0.18,
...                          monthly_contribution=20_000, seed=42)
>>> result.median.shape
(361,)
>>> result.to_frame().tail(1)
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import numpy as np
import pandas as pd

from .config import SimulationConfig
from .constants import DEFAULT_N_PATHS, MONTHS_PER_YEAR
from .exceptions import ConfigurationError

__all__ = [
    "MonteCarloResult",
    "WealthSimulator",
    "GBMSimulator",
    "run_monte_carlo",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class MonteCarloResult:
    """
    Per-month wealth percentiles over the planning horizon.

    Attributes
    ----------
    percentiles : tuple of float
        Reported percentile levels, ascending (default 10, 50, 90).
    table : np.ndarray, shape (T+1, len(percentiles))
        Wealth percentile per month; row 0 is today.
    terminal_wealth : np.ndarray, shape (n_paths,)
        Wealth of every path at month T.
    n_paths : int
        Number of simulated paths.
    seed : int, optional
        Seed used, if any.

    Notes
    -----
    Arrays are read-only: results are shared between callers through the
    orchestrator cache.
    """
    percentiles: Tuple[float, ...]
    table: np.ndarray
    terminal_wealth: np.ndarray
    n_paths: int
    seed: Optional[int] = None

    def __post_init__(self):
        self.table.setflags(write=False)
        self.terminal_wealth.setflags(write=False)

    @property
    def months(self) -> int:
        """Horizon T in months."""
        return int(self.table.shape[0] - 1)

    def percentile(self, level: float) -> np.ndarray:
        """Wealth path of a reported percentile level, shape (T+1,)."""
        try:
            col = self.percentiles.index(float(level))
        except ValueError:
            raise KeyError(
                f"percentile {level} not reported; available: {self.percentiles}"
            ) from None
        return self.table[:, col]

    @property
    def median(self) -> np.ndarray:
        return self.percentile(50.0)

    def median_at(self, month: int) -> float:
        """Median wealth at *month*, clipped to the simulated horizon."""
        idx = int(min(max(month, 0), self.months))
        return float(self.median[idx])

    def probability_at_least(self, threshold: float) -> float:
        """Share of paths whose terminal wealth reaches *threshold*, in [0, 1]."""
        return float(np.mean(self.terminal_wealth >= threshold))

    def rows(self) -> List[Dict[str, float]]:
        """
        Percentile table as ``{month_index, p<level>...}`` rows.

        Keys follow the reported levels, e.g. ``p10``, ``p50``, ``p90``.
        """
        columns = [f"p{p:g}" for p in self.percentiles]
        return [
            {"month_index": t, **dict(zip(columns, map(float, self.table[t])))}
            for t in range(self.months + 1)
        ]

    def to_frame(self) -> pd.DataFrame:
        """Percentile table as a DataFrame indexed by ``month_index``."""
        columns = [f"p{p:g}" for p in self.percentiles]
        df = pd.DataFrame(self.table, columns=columns)
        df.index.name = "month_index"
        return df

    def __repr__(self) -> str:
        return (
            f"MonteCarloResult(months={self.months}, n_paths={self.n_paths}, "
            f"seed={self.seed}, median_T={self.median[-1]:,.0f})"
        )


# ---------------------------------------------------------------------------
# Simulators
# ---------------------------------------------------------------------------

class WealthSimulator(ABC):
    """Base class for wealth-path simulators."""

    @abstractmethod
    def run(
        self,
        initial_wealth: float,
        years: float,
        mu: float,
        sigma: float,
        monthly_contribution: float,
        seed: Optional[int] = None,
    ) -> MonteCarloResult:
        raise NotImplementedError


class GBMSimulator(WealthSimulator):
    """
    Chunked, seed-reproducible geometric Brownian motion simulator.

    Parameters
    ----------
    config : SimulationConfig, optional
        Path count, chunk size, worker threads and reported percentiles.

    Examples
    --------
    >>> sim = GBMSimulator(SimulationConfig(n_paths=1000, n_workers=4))
    >>> res = sim.run(500_000, years=10, mu=0.11, sigma=0.2,
    ...               monthly_contribution=10_000, seed=7)
    >>> res.n_paths
    1000
    """

    def __init__(self, config: Optional[SimulationConfig] = None):
        self.config = config or SimulationConfig()

    def simulate_paths(
        self,
        initial_wealth: float,
        months: int,
        mu: float,
        sigma: float,
        monthly_contribution: float,
        seed: Optional[int] = None,
    ) -> np.ndarray:
        """
        Generate raw wealth paths.

        Returns
        -------
        np.ndarray, shape (n_paths, months+1)
            Column 0 is the initial wealth.
        """
        if months < 0:
            raise ConfigurationError(f"months must be >= 0, got {months}")
        if sigma < 0:
            raise ConfigurationError(f"sigma must be >= 0, got {sigma}")

        n_paths = self.config.n_paths
        chunk = self.config.chunk_size
        sizes = [chunk] * (n_paths // chunk)
        if n_paths % chunk:
            sizes.append(n_paths % chunk)

        children = np.random.SeedSequence(seed).spawn(len(sizes))
        drift = mu / MONTHS_PER_YEAR - sigma ** 2 / (2 * MONTHS_PER_YEAR)
        vol = sigma / np.sqrt(MONTHS_PER_YEAR)
        contribution = max(0.0, float(monthly_contribution))

        def work(args) -> np.ndarray:
            child, size = args
            return _simulate_chunk(child, size, months, float(initial_wealth),
                                   drift, vol, contribution)

        jobs = list(zip(children, sizes))
        workers = min(self.config.n_workers, len(jobs))
        logger.debug(
            "Simulating %d paths x %d months in %d chunks (%d workers)",
            n_paths, months, len(jobs), workers,
        )
        if workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                chunks = list(pool.map(work, jobs))
        else:
            chunks = [work(job) for job in jobs]
        return np.vstack(chunks)

    def run(
        self,
        initial_wealth: float,
        years: float,
        mu: float,
        sigma: float,
        monthly_contribution: float,
        seed: Optional[int] = None,
    ) -> MonteCarloResult:
        """
        Simulate and summarize wealth percentiles month by month.

        Parameters
        ----------
        initial_wealth : float
            Wealth today (month 0).
        years : float
            Horizon in years; converted to round(12 · years) months.
        mu, sigma : float
            Annual expected return and volatility.
        monthly_contribution : float
            End-of-month contribution (negative values are treated as 0).
        seed : int, optional
            Seed for bit-reproducible output. Without it each call varies.
        """
        months = max(0, int(round(years * MONTHS_PER_YEAR)))
        paths = self.simulate_paths(initial_wealth, months, mu, sigma,
                                    monthly_contribution, seed)
        levels = self.config.percentiles
        table = np.percentile(paths, levels, axis=0).T
        return MonteCarloResult(
            percentiles=tuple(levels),
            table=np.ascontiguousarray(table),
            terminal_wealth=paths[:, -1].copy(),
            n_paths=paths.shape[0],
            seed=seed,
        )


def _simulate_chunk(
    seed_seq: np.random.SeedSequence,
    n: int,
    months: int,
    initial_wealth: float,
    drift: float,
    vol: float,
    contribution: float,
) -> np.ndarray:
    """Wealth recursion for one independently seeded chunk of paths."""
    rng = np.random.default_rng(seed_seq)
    growth = np.exp(rng.normal(drift, vol, size=(n, months)))
    wealth = np.empty((n, months + 1), dtype=float)
    wealth[:, 0] = initial_wealth
    for t in range(1, months + 1):
        wealth[:, t] = wealth[:, t - 1] * growth[:, t - 1] + contribution
    return wealth


def run_monte_carlo(
    initial_wealth: float,
    years: float,
    mu: float,
    sigma: float,
    monthly_contribution: float,
    *,
    n_paths: int = DEFAULT_N_PATHS,
    seed: Optional[int] = None,
    n_workers: int = 1,
) -> MonteCarloResult:
    """Convenience wrapper around ``GBMSimulator(...).run``."""
    config = SimulationConfig(n_paths=n_paths, n_workers=n_workers)
    return GBMSimulator(config).run(
        initial_wealth, years, mu, sigma, monthly_contribution, seed=seed
    )
