"""
Serialization module for FusionWealth scenarios and evaluations.

Purpose
-------
JSON persistence for evaluation inputs ("scenarios") and outputs, so a
household snapshot can be versioned, shared and replayed from the CLI.
The engine itself never persists anything; this module is only used at
the process boundary.

Supports:
- Scenario files: household, market snapshot, news feed, holdings and
  engine policy, validated through ``config.ScenarioConfig``
- Evaluation results: Merton output, prescriptions, transition map,
  fitness and the Monte Carlo percentile table

Design Principles
-----------------
- Type-safe: Pydantic configs validate every file before conversion
- Human-readable: indented JSON
- Reproducible: the seed and engine policy travel with the scenario
- Backward compatible: schema versions are checked and warned about

Example
-------
>>> from pathlib import Path
>>> scenario = load_scenario(Path("household.json"))
>>> result = Orchestrator(scenario.engine).evaluate(*scenario.inputs())
>>> save_evaluation(result, Path("evaluation.json"))
"""

from __future__ import annotations

import json
import warnings
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional, Tuple, Union

import pydantic

from .config import (
    EngineConfig,
    HouseholdConfig,
    MarketConfig,
    NewsItemConfig,
    PortfolioAssetConfig,
    ScenarioConfig,
)
from .exceptions import SerializationError
from .factors import PortfolioAsset
from .household import BehavioralStats, FinancialGoal, HouseholdState, RiskAnswers
from .market import MarketParameters
from .orchestrator import EvaluationResult
from .sentiment import NewsItem

__all__ = [
    "SCHEMA_VERSION",
    "Scenario",
    "household_from_config",
    "household_to_dict",
    "scenario_from_dict",
    "scenario_to_dict",
    "load_scenario",
    "save_scenario",
    "evaluation_to_dict",
    "save_evaluation",
]


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "0.1.0"


# ---------------------------------------------------------------------------
# Scenario
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Scenario:
    """
    Domain objects of one evaluation input, plus the engine policy.

    ``assets`` is None when no holdings were supplied.
    """
    state: HouseholdState
    market: MarketParameters = field(default_factory=MarketParameters)
    news: Tuple[NewsItem, ...] = ()
    assets: Optional[Tuple[PortfolioAsset, ...]] = None
    engine: EngineConfig = field(default_factory=EngineConfig)
    name: str = ""

    def inputs(self) -> tuple:
        """Positional arguments for ``Orchestrator.evaluate``."""
        return (self.state, self.market, self.news, self.assets)


def household_from_config(config: HouseholdConfig) -> HouseholdState:
    """Convert a validated ``HouseholdConfig`` into a ``HouseholdState``."""
    return HouseholdState(
        age=config.age,
        target_age=config.target_age,
        monthly_salary=config.monthly_salary,
        monthly_expenses=config.monthly_expenses,
        savings=config.savings,
        risk_answers=RiskAnswers(**config.risk_answers.model_dump()),
        behavioral=BehavioralStats(**config.behavioral.model_dump()),
        goals=tuple(FinancialGoal(**g.model_dump()) for g in config.goals),
    )


def household_to_dict(state: HouseholdState) -> Dict[str, Any]:
    """
    Serialize a ``HouseholdState`` to the scenario-file shape.

    Examples
    --------
    >>> data = household_to_dict(state)
    >>> HouseholdConfig.model_validate(data).age == state.age
    True
    """
    return {
        "age": state.age,
        "target_age": state.target_age,
        "monthly_salary": state.monthly_salary,
        "monthly_expenses": state.monthly_expenses,
        "savings": state.savings,
        "risk_answers": {k: v for k, v in state.risk_answers.as_dict().items() if v is not None},
        "behavioral": asdict(state.behavioral),
        "goals": [asdict(g) for g in state.goals],
    }


def scenario_from_dict(data: Dict[str, Any]) -> Scenario:
    """
    Validate a raw scenario mapping and build domain objects.

    Raises
    ------
    SerializationError
        If the mapping does not match the scenario schema.
    """
    schema_version = data.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"Scenario schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )

    try:
        config = ScenarioConfig.model_validate(data)
    except pydantic.ValidationError as e:
        raise SerializationError(f"Invalid scenario: {e}") from e

    assets = None
    if config.assets is not None:
        assets = tuple(PortfolioAsset(**a.model_dump()) for a in config.assets)

    return Scenario(
        state=household_from_config(config.household),
        market=MarketParameters(mu=config.market.mu, sigma=config.market.sigma),
        news=tuple(NewsItem(**n.model_dump()) for n in config.news),
        assets=assets,
        engine=config.engine,
        name=config.name,
    )


def scenario_to_dict(scenario: Scenario) -> Dict[str, Any]:
    """Serialize a ``Scenario`` (validated before returning)."""
    config = ScenarioConfig(
        schema_version=SCHEMA_VERSION,
        name=scenario.name,
        household=HouseholdConfig.model_validate(household_to_dict(scenario.state)),
        market=MarketConfig(mu=scenario.market.mu, sigma=scenario.market.sigma),
        news=[NewsItemConfig(**asdict(n)) for n in scenario.news],
        assets=(
            None if scenario.assets is None
            else [PortfolioAssetConfig(**asdict(a)) for a in scenario.assets]
        ),
        engine=scenario.engine,
    )
    return config.model_dump(mode="json")


def save_scenario(scenario: Scenario, path: Union[str, Path]) -> None:
    """
    Save a scenario to a JSON file.

    Examples
    --------
    >>> save_scenario(scenario, Path("household.json"))
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(scenario_to_dict(scenario), f, indent=2)


def load_scenario(path: Union[str, Path]) -> Scenario:
    """
    Load a scenario from a JSON file.

    Raises
    ------
    SerializationError
        If the file is missing, is not JSON, or fails validation.
    """
    path = Path(path)
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except FileNotFoundError as e:
        raise SerializationError(f"Scenario file not found: {path}") from e
    except json.JSONDecodeError as e:
        raise SerializationError(f"Scenario file {path} is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise SerializationError(f"Scenario file {path} must contain a JSON object")
    return scenario_from_dict(data)


# ---------------------------------------------------------------------------
# Evaluation Serialization
# ---------------------------------------------------------------------------

def evaluation_to_dict(result: EvaluationResult, include_paths: bool = True) -> Dict[str, Any]:
    """
    Serialize an ``EvaluationResult`` to plain JSON types.

    Parameters
    ----------
    result : EvaluationResult
    include_paths : bool, default True
        Include the per-month Monte Carlo percentile table.
    """
    mc = result.monte_carlo
    data: Dict[str, Any] = {
        "schema_version": SCHEMA_VERSION,
        "fitness_score": result.fitness_score,
        "merton": asdict(result.merton),
        "market": asdict(result.market),
        "adjusted_mu": result.adjusted_mu,
        "sentiment_tilt": result.sentiment_tilt,
        "quality_score": result.quality_score,
        "average_goal_success": result.average_goal_success,
        "cash_flow": asdict(result.cash_flow),
        "prescriptions": [asdict(p) for p in result.prescriptions],
        "transition_map": [asdict(t) for t in result.transition_map],
        "monte_carlo": {
            "n_paths": mc.n_paths,
            "seed": mc.seed,
            "months": mc.months,
            "percentiles": list(mc.percentiles),
        },
    }
    if include_paths:
        data["monte_carlo"]["rows"] = mc.rows()
    return data


def save_evaluation(
    result: EvaluationResult,
    path: Union[str, Path],
    include_paths: bool = True,
) -> None:
    """Write an evaluation result to a JSON file."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w") as f:
        json.dump(evaluation_to_dict(result, include_paths), f, indent=2)
