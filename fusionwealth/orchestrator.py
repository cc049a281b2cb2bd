# fusionwealth/orchestrator.py
"""
Evaluation pipeline and memoization.

Purpose
-------
Combines every engine into one pure evaluation of an immutable input
snapshot (household, market, news, holdings, seed):

    1. Clamp market parameters
    2. Sentiment tilt → adjusted μ
    3. Merton allocation / consumption / human capital / persona
    4. Monte Carlo wealth paths over max(1, target_age − age) years
    5. Split the behavioral contribution across goals
    6. Goal prescriptions
    7. Transition map: human capital vs. median financial assets per year
    8. Portfolio-quality score
    9. Average goal success (100 with no goals)
    10. Fitness = round(φ·40 + avg_success·0.4 + quality·0.2)

``Orchestrator.evaluate`` memoizes by value: the cache key is the tuple of
frozen input objects, so two equal snapshots share one result and the
simulation runs once. Concurrent identical requests wait on the same
in-flight ``Future``.

Example
-------
>>> orch = Orchestrator()
>>> result = orch.evaluate(state, MarketParameters(0.10, 0.18))
>>> 0 <= result.fitness_score <= 100
True
>>> orch.evaluate(state, MarketParameters(0.10, 0.18)) is result
True
"""

from __future__ import annotations

import logging
import threading
from collections import OrderedDict
from concurrent.futures import Future
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence, Tuple, Union

from .config import EngineConfig, FitnessConfig
from .constants import MONTHS_PER_YEAR, NEUTRAL_GOAL_SUCCESS
from .factors import FactorEngine, MixDeviationFactorEngine, PortfolioAsset, PortfolioBreakdown
from .goals import GoalEngine, Prescription, allocate_contributions, make_goal_engine
from .household import HouseholdState
from .market import MarketParameters
from .merton import CashFlowSplit, MertonEngine, MertonOutput
from .sentiment import ImpactWeightedSentiment, NewsItem, SentimentEngine, adjust_expected_return
from .simulation import GBMSimulator, MonteCarloResult, WealthSimulator
from .tax import FlatTaxEngine
from .types import CacheInfoDict
from .utils import round_half_up

__all__ = [
    "TransitionPoint",
    "EvaluationResult",
    "Orchestrator",
    "build_transition_map",
    "fitness_score",
]

logger = logging.getLogger(__name__)

HeldAssets = Union[PortfolioBreakdown, Sequence[PortfolioAsset], None]


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TransitionPoint:
    """Human capital and median financial assets at one age."""
    age: int
    human_capital: float
    financial_assets: float


@dataclass(frozen=True, eq=False)
class EvaluationResult:
    """
    Output snapshot of one evaluation.

    Attributes
    ----------
    merton : MertonOutput
    transition_map : tuple of TransitionPoint
        One point per year from current age to target age.
    prescriptions : tuple of Prescription
        One per goal, in goal order.
    fitness_score : int
        Composite score, nominally 0-100.
    adjusted_mu : float
        Sentiment-adjusted expected return used throughout.
    sentiment_tilt : float
        Aggregate news tilt in [-1, 1].
    market : MarketParameters
        Clamped market parameters (before the tilt).
    monte_carlo : MonteCarloResult
        Wealth percentiles driving the transition map.
    quality_score : float
        Portfolio alignment score in [0, 100].
    average_goal_success : float
        Mean goal success rate (100 when there are no goals).
    cash_flow : CashFlowSplit
        Consume / save / invest split of net income.
    """
    merton: MertonOutput
    transition_map: Tuple[TransitionPoint, ...]
    prescriptions: Tuple[Prescription, ...]
    fitness_score: int
    adjusted_mu: float
    sentiment_tilt: float
    market: MarketParameters
    monte_carlo: MonteCarloResult
    quality_score: float
    average_goal_success: float
    cash_flow: CashFlowSplit


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------

def fitness_score(
    merton_fraction: float,
    average_goal_success: float,
    quality_score: float,
    weights: Optional[FitnessConfig] = None,
) -> int:
    """
    Composite financial-fitness score.

    Examples
    --------
    >>> fitness_score(0.6, 75.0, 85.0)
    71
    """
    w = weights or FitnessConfig()
    raw = (
        merton_fraction * w.merton_weight
        + average_goal_success * w.goal_weight
        + quality_score * w.quality_weight
    )
    return round_half_up(raw)


def build_transition_map(
    age: int,
    target_age: int,
    years: int,
    merton: MertonEngine,
    net_monthly_income: float,
    monte_carlo: MonteCarloResult,
) -> Tuple[TransitionPoint, ...]:
    """
    Pair shrinking-horizon human capital with median wealth, one point per year.

    Human capital at year i is recomputed with horizon target_age − (age + i)
    and is 0 from the target age on.
    """
    annual_net = net_monthly_income * MONTHS_PER_YEAR
    points = []
    for i in range(years + 1):
        current = age + i
        hc = merton.human_capital(annual_net, target_age - current)
        points.append(TransitionPoint(
            age=current,
            human_capital=max(0.0, hc),
            financial_assets=monte_carlo.median_at(i * MONTHS_PER_YEAR),
        ))
    return tuple(points)


# ---------------------------------------------------------------------------
# Orchestrator
# ---------------------------------------------------------------------------

class Orchestrator:
    """
    Memoized evaluation pipeline.

    Parameters
    ----------
    config : EngineConfig, optional
        Policy for every engine and the cache.
    simulator : WealthSimulator, optional
        Monte Carlo backend (default: ``GBMSimulator`` from config).
    sentiment : SentimentEngine, optional
    factors : FactorEngine, optional
    goals : GoalEngine, optional
        Engine overrides; defaults are built from ``config``.

    Notes
    -----
    The cache is the only shared state. A map-level lock guards it, and the
    evaluation itself runs outside the lock. Failed evaluations are evicted
    so a later identical call retries.

    Examples
    --------
    >>> orch = Orchestrator(EngineConfig(cache=CacheConfig(max_entries=16)))
    >>> orch.cache_info()
    {'hits': 0, 'misses': 0, 'size': 0, 'max_size': 16}
    """

    def __init__(
        self,
        config: Optional[EngineConfig] = None,
        simulator: Optional[WealthSimulator] = None,
        sentiment: Optional[SentimentEngine] = None,
        factors: Optional[FactorEngine] = None,
        goals: Optional[GoalEngine] = None,
    ):
        self.config = config or EngineConfig()
        cfg = self.config
        self.merton = MertonEngine(
            config=cfg.merton,
            tax_engine=FlatTaxEngine(cfg.tax.rate),
            simulator=simulator or GBMSimulator(cfg.simulation),
            market_bounds=cfg.market,
        )
        self.sentiment = sentiment or ImpactWeightedSentiment(cfg.sentiment)
        self.factors = factors or MixDeviationFactorEngine(cfg.factors)
        self.goals = goals or make_goal_engine(cfg.goals, cfg.simulation)

        self._lock = threading.Lock()
        self._cache: "OrderedDict[tuple, Future]" = OrderedDict()
        self._hits = 0
        self._misses = 0

    # -------------------- Public API --------------------
    def evaluate(
        self,
        state: HouseholdState,
        market: MarketParameters,
        news: Iterable[NewsItem] = (),
        held_assets: HeldAssets = None,
        seed: Optional[int] = None,
    ) -> EvaluationResult:
        """
        Evaluate one input snapshot, reusing a cached result when possible.

        Parameters
        ----------
        state : HouseholdState
        market : MarketParameters
            Raw collaborator values; clamped here.
        news : iterable of NewsItem
        held_assets : PortfolioBreakdown or sequence of PortfolioAsset, optional
            None when no statement has been synced.
        seed : int, optional
            Monte Carlo seed; defaults to ``config.simulation.seed``.
        """
        market = market.clamped(self.config.market.mu_bounds, self.config.market.sigma_bounds)
        news = tuple(news or ())
        if held_assets is not None and not isinstance(held_assets, PortfolioBreakdown):
            held_assets = tuple(held_assets)
        if seed is None:
            seed = self.config.simulation.seed

        if not self.config.cache.enabled:
            return self._compute(state, market, news, held_assets, seed)

        key = (state, market, news, held_assets, seed)
        with self._lock:
            future = self._cache.get(key)
            if future is not None:
                self._cache.move_to_end(key)
                self._hits += 1
                owner = False
            else:
                future = Future()
                self._cache[key] = future
                self._misses += 1
                owner = True
                while len(self._cache) > self.config.cache.max_entries:
                    self._cache.popitem(last=False)

        if not owner:
            logger.debug("Evaluation cache hit")
            return future.result()

        logger.debug("Evaluation cache miss; computing")
        try:
            result = self._compute(state, market, news, held_assets, seed)
        except BaseException as exc:
            with self._lock:
                if self._cache.get(key) is future:
                    del self._cache[key]
            future.set_exception(exc)
            raise
        future.set_result(result)
        return result

    def cache_info(self) -> CacheInfoDict:
        with self._lock:
            return {
                "hits": self._hits,
                "misses": self._misses,
                "size": len(self._cache),
                "max_size": self.config.cache.max_entries,
            }

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    # -------------------- Pipeline --------------------
    def _compute(
        self,
        state: HouseholdState,
        market: MarketParameters,
        news: Tuple[NewsItem, ...],
        held_assets: HeldAssets,
        seed: Optional[int],
    ) -> EvaluationResult:
        cfg = self.config

        tilt = self.sentiment.tilt(news)
        mu = adjust_expected_return(
            market.mu, tilt, cfg.sentiment.tilt_scale, cfg.sentiment.mu_floor
        )
        sigma = market.sigma

        merton = self.merton.calculate(state, mu, sigma, clamp_market=False)

        years = max(1, state.years_to_target)
        monte_carlo = self.merton.run_monte_carlo(
            state.savings, years, mu, sigma, state.monthly_contribution, seed=seed
        )

        allocations = allocate_contributions(
            state.monthly_contribution, state.goals, cfg.goals.allocation_policy
        )
        prescriptions = tuple(
            self.goals.calculate_goal_gap(goal, sip, mu, sigma)
            for goal, sip in zip(state.goals, allocations)
        )

        transition_map = build_transition_map(
            state.age, state.target_age, years, self.merton,
            merton.net_monthly_income, monte_carlo,
        )

        quality = self.factors.score(merton.persona, held_assets)
        if prescriptions:
            avg_success = sum(p.success_rate for p in prescriptions) / len(prescriptions)
        else:
            avg_success = NEUTRAL_GOAL_SUCCESS

        score = fitness_score(merton.merton_fraction, avg_success, quality, cfg.fitness)
        logger.debug(
            "Evaluated household (age %d, %d goals): phi=%.3f, fitness=%d",
            state.age, len(state.goals), merton.merton_fraction, score,
        )

        return EvaluationResult(
            merton=merton,
            transition_map=transition_map,
            prescriptions=prescriptions,
            fitness_score=score,
            adjusted_mu=mu,
            sentiment_tilt=tilt,
            market=market,
            monte_carlo=monte_carlo,
            quality_score=quality,
            average_goal_success=avg_success,
            cash_flow=self.merton.cash_flow_split(merton, state.monthly_expenses),
        )
