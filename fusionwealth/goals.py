# fusionwealth/goals.py
"""
Goal success probability and contribution-gap solver.

Purpose
-------
For each financial goal, estimate the probability that a monthly
contribution stream reaches the inflation-adjusted target on time and,
when that probability is below the confidence threshold, solve for the
smallest additional monthly contribution (and, separately, the smallest
deadline extension) that closes the gap.

Mathematical Framework
----------------------
Terminal wealth after T months with end-of-month contribution c and
monthly gross returns G_t (E[G] = g = e^{μ/12}, E[G²] = h = e^{μ/6 + σ²/12}):

    W_T = W_0 · Π_{t=1..T} G_t + c · Σ_{a=0..T−1} X_a

where X_a is the product of the last a growth factors. Its first two
moments have closed forms:

    E[W_T]  = W_0 g^T + c Σ_a g^a
    E[W_T²] = W_0² h^T + 2 W_0 c Σ_a h^a g^{T−a}
              + c² (Σ_a h^a + 2 Σ_a h^a S(T−1−a)),   S(k) = Σ_{j=1..k} g^j

``LognormalGoalEngine`` matches these moments to a lognormal and reports
P(W_T ≥ F) in closed form; ``MonteCarloGoalEngine`` simulates the same
stream with the GBM simulator instead.

Solver
------
Success probability is non-decreasing in the contribution, so the gap is
found by bracketing (doubling an upper bound) and then bisection, in the
same spirit as a feasibility binary search over horizons:

1. P(c) ≥ target → gap 0
2. Double hi until P(c + hi) ≥ target
3. Bisect [lo, hi] until hi − lo ≤ tolerance or the iteration cap
4. Return hi (a feasible upper estimate), flagging non-convergence

Example
-------
>>> engine = LognormalGoalEngine()
>>> goal = FinancialGoal(id="1", label="Car", category="Legacy",
...                      target_amount=1_000_000, years_away=5)
>>> p = engine.calculate_goal_gap(goal, allocated_monthly_sip=10_000,
...                               expected_return=0.10, volatility=0.18)
>>> p.increase_monthly_contribution > 0
True
"""

from __future__ import annotations

import logging
import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np
from scipy import stats

from .config import GoalEngineConfig, SimulationConfig
from .constants import DEFAULT_SEED, DEFAULT_SIGMA, MONTHS_PER_YEAR
from .exceptions import GoalError
from .household import FinancialGoal
from .simulation import GBMSimulator

__all__ = [
    "Prescription",
    "GoalEngine",
    "LognormalGoalEngine",
    "MonteCarloGoalEngine",
    "make_goal_engine",
    "allocate_contributions",
    "terminal_wealth_moments",
]

logger = logging.getLogger(__name__)

# Upper-bound doublings before the bracket search gives up.
_MAX_BRACKET_DOUBLINGS = 64


# ---------------------------------------------------------------------------
# Output
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Prescription:
    """
    Funding diagnosis for one goal.

    Attributes
    ----------
    goal_id : str
        Goal identifier.
    success_rate : float
        Probability (in percent, 0-100) of reaching the future target on
        time with the allocated contribution.
    increase_monthly_contribution : float
        Additional monthly contribution needed to reach the confidence
        threshold; 0 when already met.
    adjust_timeline_months : int, optional
        Smallest deadline extension reaching the threshold at the current
        contribution (0 when already met). None if no extension within
        the search cap does.
    future_target : float
        Inflation-adjusted target at the original deadline.
    allocated_contribution : float
        Monthly contribution assigned to this goal.
    converged : bool
        False when the contribution solver hit its iteration cap and
        ``increase_monthly_contribution`` is a best upper estimate.
    """
    goal_id: str
    success_rate: float
    increase_monthly_contribution: float
    adjust_timeline_months: Optional[int]
    future_target: float
    allocated_contribution: float
    converged: bool = True

    @property
    def on_track(self) -> bool:
        return self.increase_monthly_contribution == 0.0


# ---------------------------------------------------------------------------
# Allocation policy
# ---------------------------------------------------------------------------

def allocate_contributions(
    total: float,
    goals: Sequence[FinancialGoal],
    policy: str = "equal",
) -> Tuple[float, ...]:
    """
    Split one household contribution across goals.

    Parameters
    ----------
    total : float
        Monthly amount to distribute (negative values count as 0).
    goals : sequence of FinancialGoal
        Goals in priority order.
    policy : {"equal", "priority"}
        "equal" gives each goal total / n. "priority" weights goals
        n, n−1, ..., 1 by position.

    Returns
    -------
    tuple of float
        One amount per goal, summing to ``total``.

    Examples
    --------
    >>> allocate_contributions(30_000, goals[:3], policy="priority")
    (15000.0, 10000.0, 5000.0)
    """
    n = len(goals)
    if n == 0:
        return ()
    total = max(0.0, float(total))
    if policy == "equal":
        return tuple(total / n for _ in goals)
    if policy == "priority":
        weights = np.arange(n, 0, -1, dtype=float)
        return tuple(float(x) for x in total * weights / weights.sum())
    raise GoalError(f"unknown allocation policy {policy!r}; use 'equal' or 'priority'")


# ---------------------------------------------------------------------------
# Closed-form moments
# ---------------------------------------------------------------------------

def terminal_wealth_moments(
    initial_wealth: float,
    months: int,
    monthly_contribution: float,
    mu: float,
    sigma: float,
) -> Tuple[float, float]:
    """
    Mean and variance of terminal wealth under monthly GBM growth.

    Returns
    -------
    (mean, variance) : tuple of float
        Variance is floored at 0 against round-off.
    """
    T = int(months)
    w0 = float(initial_wealth)
    c = float(monthly_contribution)
    if T <= 0:
        return w0, 0.0

    g = math.exp(mu / MONTHS_PER_YEAR)
    h = math.exp(mu / 6.0 + sigma ** 2 / MONTHS_PER_YEAR)

    a = np.arange(T, dtype=float)
    g_a = g ** a
    h_a = h ** a
    k = T - 1 - a
    if abs(g - 1.0) < 1e-15:
        tail = k
    else:
        tail = g * (g ** k - 1.0) / (g - 1.0)

    mean = w0 * g ** T + c * g_a.sum()
    second = (
        w0 ** 2 * h ** T
        + 2.0 * w0 * c * float(np.sum(h_a * g ** (T - a)))
        + c ** 2 * (h_a.sum() + 2.0 * float(np.sum(h_a * tail)))
    )
    return float(mean), max(0.0, float(second - mean ** 2))


# ---------------------------------------------------------------------------
# Engines
# ---------------------------------------------------------------------------

class GoalEngine(ABC):
    """
    Base class for goal success estimators.

    Subclasses implement ``success_probability``; the contribution solver
    and timeline search are shared.

    Parameters
    ----------
    config : GoalEngineConfig, optional
        Confidence, solver limits and timeline cap.
    """

    def __init__(self, config: Optional[GoalEngineConfig] = None):
        self.config = config or GoalEngineConfig()

    @property
    def target_rate(self) -> float:
        """Confidence threshold in percent."""
        return 100.0 * self.config.confidence

    @abstractmethod
    def success_probability(
        self,
        future_target: float,
        months: int,
        monthly_contribution: float,
        expected_return: float,
        volatility: float,
        initial_wealth: float = 0.0,
    ) -> float:
        """P(W_T ≥ future_target) in percent, clamped to [0, 100]."""
        raise NotImplementedError

    # -------------------- Contribution gap --------------------
    def required_increase(
        self,
        future_target: float,
        months: int,
        monthly_contribution: float,
        expected_return: float,
        volatility: float,
        initial_wealth: float = 0.0,
    ) -> Tuple[float, bool]:
        """
        Smallest extra monthly contribution reaching the confidence threshold.

        Returns
        -------
        (increase, converged) : tuple
            ``increase`` is always feasible when ``converged`` is True and a
            best upper estimate otherwise.
        """
        # A contribution needs at least one month to land.
        horizon = max(int(months), 1)
        target = self.target_rate

        def prob(extra: float) -> float:
            return self.success_probability(
                future_target, horizon, monthly_contribution + extra,
                expected_return, volatility, initial_wealth,
            )

        if prob(0.0) >= target:
            return 0.0, True

        lo = 0.0
        hi = max(self.config.tolerance, future_target / horizon)
        doublings = 0
        while prob(hi) < target:
            lo = hi
            hi *= 2.0
            doublings += 1
            if doublings >= _MAX_BRACKET_DOUBLINGS:
                logger.info(
                    "Contribution bracket not found for target %.0f over %d months",
                    future_target, horizon,
                )
                return hi, False

        iterations = 0
        while hi - lo > self.config.tolerance and iterations < self.config.max_iterations:
            mid = 0.5 * (lo + hi)
            if prob(mid) >= target:
                hi = mid
            else:
                lo = mid
            iterations += 1

        converged = hi - lo <= self.config.tolerance
        if not converged:
            logger.info(
                "Contribution solver stopped after %d iterations (bracket width %.2f)",
                iterations, hi - lo,
            )
        return hi, converged

    # -------------------- Timeline adjustment --------------------
    def timeline_extension(
        self,
        goal: FinancialGoal,
        monthly_contribution: float,
        expected_return: float,
        volatility: float,
        initial_wealth: float = 0.0,
    ) -> Optional[int]:
        """
        Smallest deadline extension (months) reaching the threshold.

        The target keeps inflating over the extra months. Returns 0 when
        the threshold is already met and None when no extension up to
        ``max_timeline_extension`` suffices.
        """
        base = goal.months_away
        for extra in range(self.config.max_timeline_extension + 1):
            months = base + extra
            target = goal.future_target(months / MONTHS_PER_YEAR)
            rate = self.success_probability(
                target, months, monthly_contribution,
                expected_return, volatility, initial_wealth,
            )
            if rate >= self.target_rate:
                return extra
        return None

    # -------------------- Main entry point --------------------
    def calculate_goal_gap(
        self,
        goal: FinancialGoal,
        allocated_monthly_sip: float,
        expected_return: float,
        volatility: float = DEFAULT_SIGMA,
        initial_wealth: float = 0.0,
    ) -> Prescription:
        """
        Success probability and funding gap of *goal*.

        Parameters
        ----------
        goal : FinancialGoal
            Goal to diagnose.
        allocated_monthly_sip : float
            Monthly contribution assigned to the goal.
        expected_return : float
            Annual expected return (sentiment-adjusted).
        volatility : float, default 0.18
            Annual volatility.
        initial_wealth : float, default 0.0
            Wealth already earmarked for the goal.
        """
        sip = max(0.0, float(allocated_monthly_sip))
        future_target = goal.future_target()
        months = goal.months_away

        rate = self.success_probability(
            future_target, months, sip, expected_return, volatility, initial_wealth
        )
        increase, converged = self.required_increase(
            future_target, months, sip, expected_return, volatility, initial_wealth
        )
        if rate >= self.target_rate:
            extension: Optional[int] = 0
        else:
            extension = self.timeline_extension(
                goal, sip, expected_return, volatility, initial_wealth
            )

        return Prescription(
            goal_id=goal.id,
            success_rate=rate,
            increase_monthly_contribution=increase,
            adjust_timeline_months=extension,
            future_target=future_target,
            allocated_contribution=sip,
            converged=converged,
        )


class LognormalGoalEngine(GoalEngine):
    """
    Closed-form estimator: terminal wealth moment-matched to a lognormal.

    The moment match is only monotone in the contribution for a pure
    contribution stream. With ``initial_wealth > 0`` a small contribution
    can shrink the matched log-variance and thin the right tail, so those
    calls are answered by a seeded Monte Carlo estimator instead.

    Parameters
    ----------
    config : GoalEngineConfig, optional
    simulation : SimulationConfig, optional
        Settings of the simulator used when initial wealth is present.

    Examples
    --------
    >>> engine = LognormalGoalEngine()
    >>> engine.success_probability(1_000_000, 60, 0.0, 0.10, 0.18)
    0.0
    """

    def __init__(
        self,
        config: Optional[GoalEngineConfig] = None,
        simulation: Optional[SimulationConfig] = None,
    ):
        super().__init__(config)
        self.simulation = simulation or SimulationConfig()
        self._with_wealth: Optional[MonteCarloGoalEngine] = None

    def success_probability(
        self,
        future_target: float,
        months: int,
        monthly_contribution: float,
        expected_return: float,
        volatility: float,
        initial_wealth: float = 0.0,
    ) -> float:
        mean, var = terminal_wealth_moments(
            initial_wealth, months, max(0.0, monthly_contribution),
            expected_return, volatility,
        )
        if future_target <= 0:
            return 100.0
        if mean <= 0:
            return 0.0
        if var <= 0:
            return 100.0 if mean >= future_target else 0.0
        if initial_wealth > 0:
            if self._with_wealth is None:
                self._with_wealth = MonteCarloGoalEngine(self.config, self.simulation)
            return self._with_wealth.success_probability(
                future_target, months, monthly_contribution,
                expected_return, volatility, initial_wealth,
            )

        sigma_ln = math.sqrt(math.log1p(var / mean ** 2))
        mu_ln = math.log(mean) - 0.5 * sigma_ln ** 2
        z = (math.log(future_target) - mu_ln) / sigma_ln
        return float(np.clip(100.0 * stats.norm.sf(z), 0.0, 100.0))


class MonteCarloGoalEngine(GoalEngine):
    """
    Simulation estimator reusing the GBM wealth simulator.

    Every probability in one engine uses the same seed (common random
    numbers), which keeps the estimate monotone in the contribution.

    Parameters
    ----------
    config : GoalEngineConfig, optional
    simulation : SimulationConfig, optional
        Path count, chunking and seed of the goal-scoped simulations.
    """

    def __init__(
        self,
        config: Optional[GoalEngineConfig] = None,
        simulation: Optional[SimulationConfig] = None,
    ):
        super().__init__(config)
        simulation = simulation or SimulationConfig()
        self.simulator = GBMSimulator(simulation)
        self.seed = simulation.seed if simulation.seed is not None else DEFAULT_SEED

    def success_probability(
        self,
        future_target: float,
        months: int,
        monthly_contribution: float,
        expected_return: float,
        volatility: float,
        initial_wealth: float = 0.0,
    ) -> float:
        result = self.simulator.run(
            initial_wealth,
            months / MONTHS_PER_YEAR,
            expected_return,
            volatility,
            monthly_contribution,
            seed=self.seed,
        )
        return float(np.clip(100.0 * result.probability_at_least(future_target), 0.0, 100.0))


def make_goal_engine(
    config: Optional[GoalEngineConfig] = None,
    simulation: Optional[SimulationConfig] = None,
) -> GoalEngine:
    """Build the goal engine selected by ``config.method``."""
    config = config or GoalEngineConfig()
    if config.method == "monte_carlo":
        return MonteCarloGoalEngine(config, simulation)
    return LognormalGoalEngine(config, simulation)
