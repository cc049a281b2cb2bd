"""
Configuration management module for FusionWealth.

Purpose
-------
Centralized configuration using Pydantic models for type-safe parameter
management, validation, and serialization. Two families live here:

- Engine policy (``EngineConfig`` and its sections): tax rate, Merton
  constants, clamp bounds, simulation sizing, sentiment scale, goal solver
  limits, factor neutral score, fitness weights, cache size. Every default
  comes from ``constants.py`` and every value is overridable.
- Scenario input files (``ScenarioConfig`` and its parts): the JSON shape
  of a household, market snapshot, news feed and holdings, converted to
  domain objects by ``serialization.py``.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Serializable: Easy conversion to/from JSON for config files
- Environment-aware: ``AppSettings`` reads ``FUSION_*`` variables / .env

Example
-------
>>> from fusionwealth.config import EngineConfig, SimulationConfig
>>> config = EngineConfig(simulation=SimulationConfig(n_paths=1000, seed=7))
>>> config.simulation.n_paths
1000
>>> restored = EngineConfig.model_validate_json(config.model_dump_json())
"""

from __future__ import annotations
from typing import Optional, Literal, List, Tuple

from pydantic import BaseModel, Field, field_validator, model_validator, ConfigDict
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_CACHE_SIZE,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_DISCOUNT_RATE,
    DEFAULT_FITNESS_WEIGHTS,
    DEFAULT_GOAL_CONFIDENCE,
    DEFAULT_INVEST_CAP,
    DEFAULT_MAX_TIMELINE_EXTENSION,
    DEFAULT_MU,
    DEFAULT_MU_FLOOR,
    DEFAULT_N_PATHS,
    DEFAULT_NEUTRAL_QUALITY_SCORE,
    DEFAULT_PERCENTILES,
    DEFAULT_REPLACEMENT_RATIO,
    DEFAULT_RETIREMENT_YEARS,
    DEFAULT_RISK_FREE_RATE,
    DEFAULT_SEED,
    DEFAULT_SIGMA,
    DEFAULT_SOLVER_MAX_ITERS,
    DEFAULT_SOLVER_TOLERANCE,
    DEFAULT_TAX_RATE,
    DEFAULT_TILT_SCALE,
    GAMMA_MAX,
    GAMMA_MIN,
    MU_MAX,
    MU_MIN,
    SIGMA_MAX,
    SIGMA_MIN,
)

__all__ = [
    # Engine policy
    "TaxConfig",
    "MertonConfig",
    "MarketBoundsConfig",
    "SimulationConfig",
    "SentimentConfig",
    "GoalEngineConfig",
    "FactorConfig",
    "FitnessConfig",
    "CacheConfig",
    "EngineConfig",
    # Scenario input
    "RiskAnswersConfig",
    "BehavioralConfig",
    "FinancialGoalConfig",
    "HouseholdConfig",
    "MarketConfig",
    "NewsItemConfig",
    "PortfolioAssetConfig",
    "ScenarioConfig",
    # Process settings
    "AppSettings",
]


# ---------------------------------------------------------------------------
# Tax Configuration
# ---------------------------------------------------------------------------

class TaxConfig(BaseModel):
    """Flat effective tax rate applied to gross monthly income."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    rate: float = Field(
        default=DEFAULT_TAX_RATE,
        ge=0,
        lt=1,
        description="Flat effective tax rate"
    )


# ---------------------------------------------------------------------------
# Merton Configuration
# ---------------------------------------------------------------------------

class MertonConfig(BaseModel):
    """
    Policy constants of the Merton allocation and lifecycle consumption.

    Attributes
    ----------
    risk_free_rate : float
        Annual risk-free rate r in φ = (μ − r) / (γσ²).
    discount_rate : float
        Annual rate used to discount labour income (human capital) and the
        lifecycle consumption annuities.
    gamma_min, gamma_max : float
        Clamp range for the risk-aversion coefficient γ (gamma_min > 0).
    replacement_ratio : float
        Retirement consumption as a fraction of working consumption.
    retirement_years : int
        Years of retirement funded by the consumption plan.
    invest_cap : float
        Largest share of the monthly surplus routed to the risky bucket.

    Examples
    --------
    >>> MertonConfig(risk_free_rate=0.05).risk_free_rate
    0.05
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    risk_free_rate: float = Field(
        default=DEFAULT_RISK_FREE_RATE,
        ge=0,
        le=0.2,
        description="Annual risk-free rate"
    )
    discount_rate: float = Field(
        default=DEFAULT_DISCOUNT_RATE,
        ge=0,
        le=0.2,
        description="Annual discount rate for human capital"
    )
    gamma_min: float = Field(
        default=GAMMA_MIN,
        gt=0,
        description="Lower clamp for risk aversion"
    )
    gamma_max: float = Field(
        default=GAMMA_MAX,
        gt=0,
        le=100,
        description="Upper clamp for risk aversion"
    )
    replacement_ratio: float = Field(
        default=DEFAULT_REPLACEMENT_RATIO,
        ge=0,
        le=2,
        description="Retirement / working consumption ratio"
    )
    retirement_years: int = Field(
        default=DEFAULT_RETIREMENT_YEARS,
        ge=1,
        le=60,
        description="Years of retirement to fund"
    )
    invest_cap: float = Field(
        default=DEFAULT_INVEST_CAP,
        ge=0,
        le=1,
        description="Max share of surplus sent to the risky bucket"
    )

    @field_validator("gamma_max")
    @classmethod
    def validate_gamma_range(cls, v, info):
        """Ensure gamma_min <= gamma_max."""
        gamma_min = info.data.get("gamma_min", GAMMA_MIN)
        if v < gamma_min:
            raise ValueError(f"gamma_max ({v}) must be >= gamma_min ({gamma_min})")
        return v


# ---------------------------------------------------------------------------
# Market bounds
# ---------------------------------------------------------------------------

class MarketBoundsConfig(BaseModel):
    """Clamp ranges applied to collaborator-supplied market parameters."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    mu_min: float = Field(default=MU_MIN, description="Lower bound for mu")
    mu_max: float = Field(default=MU_MAX, description="Upper bound for mu")
    sigma_min: float = Field(default=SIGMA_MIN, gt=0, description="Lower bound for sigma")
    sigma_max: float = Field(default=SIGMA_MAX, gt=0, description="Upper bound for sigma")

    @model_validator(mode="after")
    def validate_bounds(self):
        if self.mu_min > self.mu_max:
            raise ValueError(f"mu_min ({self.mu_min}) must be <= mu_max ({self.mu_max})")
        if self.sigma_min > self.sigma_max:
            raise ValueError(
                f"sigma_min ({self.sigma_min}) must be <= sigma_max ({self.sigma_max})"
            )
        return self

    @property
    def mu_bounds(self) -> Tuple[float, float]:
        return (self.mu_min, self.mu_max)

    @property
    def sigma_bounds(self) -> Tuple[float, float]:
        return (self.sigma_min, self.sigma_max)


# ---------------------------------------------------------------------------
# Simulation Configuration
# ---------------------------------------------------------------------------

class SimulationConfig(BaseModel):
    """
    Configuration for the Monte Carlo wealth-path simulator.

    Attributes
    ----------
    n_paths : int
        Number of independent wealth paths (100-10,000).
    seed : int, optional
        Default seed used by the orchestrator. If None, every evaluation
        draws fresh entropy and memoization only helps within identical
        explicit seeds.
    chunk_size : int
        Paths per independently seeded chunk.
    n_workers : int
        Thread-pool size for chunk generation (1 = run inline).
    percentiles : tuple of float
        Percentiles reported per month; must include 50.

    Examples
    --------
    >>> config = SimulationConfig(n_paths=1000, seed=42, n_workers=4)
    >>> config.n_paths
    1000
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    n_paths: int = Field(
        default=DEFAULT_N_PATHS,
        ge=100,
        le=10_000,
        description="Number of Monte Carlo paths"
    )
    seed: Optional[int] = Field(
        default=DEFAULT_SEED,
        description="Random seed for reproducibility"
    )
    chunk_size: int = Field(
        default=DEFAULT_CHUNK_SIZE,
        ge=1,
        le=10_000,
        description="Paths per seeded chunk"
    )
    n_workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Worker threads for path generation"
    )
    percentiles: Tuple[float, ...] = Field(
        default=DEFAULT_PERCENTILES,
        description="Percentiles reported per month"
    )

    @field_validator("percentiles")
    @classmethod
    def validate_percentiles(cls, v):
        """Ensure percentiles lie in [0, 100], are sorted and contain the median."""
        if any(p < 0 or p > 100 for p in v):
            raise ValueError("percentiles must lie in [0, 100]")
        if list(v) != sorted(v):
            raise ValueError("percentiles must be sorted ascending")
        if 50.0 not in v:
            raise ValueError("percentiles must include the median (50)")
        return tuple(float(p) for p in v)


# ---------------------------------------------------------------------------
# Sentiment Configuration
# ---------------------------------------------------------------------------

class SentimentConfig(BaseModel):
    """Scale and floor of the sentiment-driven expected-return tilt."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    tilt_scale: float = Field(
        default=DEFAULT_TILT_SCALE,
        ge=0,
        le=0.1,
        description="Return shift for a full +/-1 tilt"
    )
    mu_floor: float = Field(
        default=DEFAULT_MU_FLOOR,
        ge=0,
        description="Adjusted return never drops below this"
    )


# ---------------------------------------------------------------------------
# Goal Configuration
# ---------------------------------------------------------------------------

class GoalEngineConfig(BaseModel):
    """
    Goal success estimation and contribution-gap solver settings.

    Attributes
    ----------
    confidence : float
        Target probability of funding the goal on time (e.g., 0.90).
    method : {"lognormal", "monte_carlo"}
        Success probability estimator.
    max_iterations : int
        Bisection iteration cap.
    tolerance : float
        Bracket width (currency units) at which bisection stops.
    max_timeline_extension : int
        Largest deadline extension searched (months).
    allocation_policy : {"equal", "priority"}
        How the household contribution is split across goals.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    confidence: float = Field(
        default=DEFAULT_GOAL_CONFIDENCE,
        gt=0,
        lt=1,
        description="Target funding probability"
    )
    method: Literal["lognormal", "monte_carlo"] = Field(
        default="lognormal",
        description="Success probability estimator"
    )
    max_iterations: int = Field(
        default=DEFAULT_SOLVER_MAX_ITERS,
        ge=1,
        le=1_000,
        description="Bisection iteration cap"
    )
    tolerance: float = Field(
        default=DEFAULT_SOLVER_TOLERANCE,
        gt=0,
        description="Bisection tolerance (currency units)"
    )
    max_timeline_extension: int = Field(
        default=DEFAULT_MAX_TIMELINE_EXTENSION,
        ge=0,
        le=600,
        description="Largest deadline extension searched (months)"
    )
    allocation_policy: Literal["equal", "priority"] = Field(
        default="equal",
        description="Contribution split across goals"
    )


# ---------------------------------------------------------------------------
# Factor / Fitness / Cache
# ---------------------------------------------------------------------------

class FactorConfig(BaseModel):
    """Portfolio-quality scoring settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    neutral_score: float = Field(
        default=DEFAULT_NEUTRAL_QUALITY_SCORE,
        ge=0,
        le=100,
        description="Score reported when no holdings are supplied"
    )


class FitnessConfig(BaseModel):
    """
    Weights of the composite fitness score.

    fitness = round(φ·merton_weight + avg_success·goal_weight + quality·quality_weight)
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    merton_weight: float = Field(default=DEFAULT_FITNESS_WEIGHTS[0], ge=0)
    goal_weight: float = Field(default=DEFAULT_FITNESS_WEIGHTS[1], ge=0)
    quality_weight: float = Field(default=DEFAULT_FITNESS_WEIGHTS[2], ge=0)


class CacheConfig(BaseModel):
    """Orchestrator memoization settings."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    enabled: bool = Field(default=True, description="Memoize evaluations")
    max_entries: int = Field(
        default=DEFAULT_CACHE_SIZE,
        ge=1,
        le=100_000,
        description="LRU capacity"
    )


class EngineConfig(BaseModel):
    """
    Complete engine policy, one section per component.

    Examples
    --------
    >>> config = EngineConfig(tax=TaxConfig(rate=0.25))
    >>> config.fitness.merton_weight
    40.0
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    tax: TaxConfig = Field(default_factory=TaxConfig)
    merton: MertonConfig = Field(default_factory=MertonConfig)
    market: MarketBoundsConfig = Field(default_factory=MarketBoundsConfig)
    simulation: SimulationConfig = Field(default_factory=SimulationConfig)
    sentiment: SentimentConfig = Field(default_factory=SentimentConfig)
    goals: GoalEngineConfig = Field(default_factory=GoalEngineConfig)
    factors: FactorConfig = Field(default_factory=FactorConfig)
    fitness: FitnessConfig = Field(default_factory=FitnessConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)


# ---------------------------------------------------------------------------
# Scenario input models
# ---------------------------------------------------------------------------

class RiskAnswersConfig(BaseModel):
    """Questionnaire answers as stored in scenario files."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    midnight_test: Optional[Literal["A", "B", "C", "D"]] = None
    choice_of_paths: Optional[Literal["A", "B", "C"]] = None
    safety_net: Optional[Literal["A", "B", "C", "D"]] = None
    goal_horizon: Optional[Literal["A", "B", "C"]] = None


class BehavioralConfig(BaseModel):
    """Contribution behaviour as stored in scenario files."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    monthly_contribution: float = Field(default=0.0, ge=0, description="Recurring SIP")
    consistency: float = Field(default=0.0, ge=0, le=1)
    streak: int = Field(default=0, ge=0)


class FinancialGoalConfig(BaseModel):
    """
    A financial goal as stored in scenario files.

    Examples
    --------
    >>> goal = FinancialGoalConfig(
    ...     id="1", label="Dream Home", category="Housing",
    ...     target_amount=25_000_000, years_away=12, inflation_rate=0.06
    ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    id: str = Field(min_length=1, max_length=64)
    label: str = Field(default="", max_length=100)
    category: Literal["Housing", "Education", "Legacy", "Retirement"] = "Legacy"
    target_amount: float = Field(gt=0)
    years_away: int = Field(ge=0, le=100)
    inflation_rate: float = Field(default=0.0, gt=-1, le=1)


class HouseholdConfig(BaseModel):
    """Household snapshot as stored in scenario files."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    age: int = Field(ge=0, le=120)
    target_age: int = Field(ge=0, le=120)
    monthly_salary: float = Field(default=0.0, ge=0)
    monthly_expenses: float = Field(default=0.0, ge=0)
    savings: float = Field(default=0.0, ge=0)
    risk_answers: RiskAnswersConfig = Field(default_factory=RiskAnswersConfig)
    behavioral: BehavioralConfig = Field(default_factory=BehavioralConfig)
    goals: List[FinancialGoalConfig] = Field(default_factory=list)

    @field_validator("target_age")
    @classmethod
    def validate_target_age(cls, v, info):
        """Ensure target_age >= age."""
        age = info.data.get("age", 0)
        if v < age:
            raise ValueError(f"target_age ({v}) must be >= age ({age})")
        return v

    @field_validator("goals")
    @classmethod
    def validate_unique_ids(cls, v):
        """Ensure goal ids are unique."""
        ids = [g.id for g in v]
        if len(ids) != len(set(ids)):
            raise ValueError("goal ids must be unique")
        return v


class MarketConfig(BaseModel):
    """Last-known-good market snapshot (clamped by the engine, not here)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    mu: float = Field(default=DEFAULT_MU, description="Annual expected return")
    sigma: float = Field(default=DEFAULT_SIGMA, description="Annual volatility")


class NewsItemConfig(BaseModel):
    """A pre-labelled news item from the news collaborator."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    sentiment: str = Field(default="neutral")
    impact: str = Field(default="Low")
    headline: str = ""
    source: str = ""
    url: str = ""
    category: str = ""
    summary: str = ""
    timestamp: str = ""


class PortfolioAssetConfig(BaseModel):
    """A held asset from the statement-ingestion collaborator."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(min_length=1, max_length=200)
    value: float = Field(ge=0)
    category: Literal["Equity", "Debt", "Cash"]


class ScenarioConfig(BaseModel):
    """
    A complete evaluation input: household, market, news and holdings.

    ``assets`` is ``None`` when no statement has been synced, which the
    factor engine scores neutrally.

    Examples
    --------
    >>> scenario = ScenarioConfig(
    ...     household=HouseholdConfig(age=30, target_age=60, monthly_salary=200_000),
    ...     market=MarketConfig(mu=0.10, sigma=0.18),
    ... )
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    schema_version: str = Field(default="0.1.0")
    name: str = Field(default="", max_length=100)
    household: HouseholdConfig
    market: MarketConfig = Field(default_factory=MarketConfig)
    news: List[NewsItemConfig] = Field(default_factory=list)
    assets: Optional[List[PortfolioAssetConfig]] = None
    engine: EngineConfig = Field(default_factory=EngineConfig)


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Process-level settings loaded from environment variables.

    Environment variables are prefixed with FUSION_ (e.g., FUSION_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    debug : bool
        Enable debug mode (forces DEBUG logging).
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR".
    n_workers : int
        Default Monte Carlo worker threads for CLI runs.

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.log_level
    'WARNING'
    """

    model_config = SettingsConfigDict(
        env_prefix="FUSION_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    n_workers: int = Field(
        default=1,
        ge=1,
        le=64,
        description="Monte Carlo worker threads"
    )

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.debug else self.log_level
