"""
Pytest configuration and fixtures for the FusionWealth test suite.

Fixtures build small, valid domain objects and configs. Anything random
takes the shared ``seed`` fixture.
"""

import json
from typing import List

import pytest

from fusionwealth.config import EngineConfig, SimulationConfig
from fusionwealth.factors import PortfolioAsset
from fusionwealth.household import (
    BehavioralStats,
    FinancialGoal,
    HouseholdState,
    RiskAnswers,
)
from fusionwealth.market import MarketParameters
from fusionwealth.sentiment import NewsItem


# ---------------------------------------------------------------------------
# Seeds / sizes
# ---------------------------------------------------------------------------

@pytest.fixture
def seed() -> int:
    """Standard random seed for reproducibility."""
    return 42


@pytest.fixture
def small_simulation() -> SimulationConfig:
    """Fast simulation settings: minimum path count, two chunks."""
    return SimulationConfig(n_paths=200, chunk_size=100, seed=42)


@pytest.fixture
def engine_config(small_simulation) -> EngineConfig:
    """Engine policy with the fast simulation settings."""
    return EngineConfig(simulation=small_simulation)


# ---------------------------------------------------------------------------
# Household Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def goal() -> FinancialGoal:
    """
    Single medium-term goal.

    Target: 5,000,000 in 15 years at 7% inflation.
    """
    return FinancialGoal(
        id="1", label="Legacy Fund", category="Legacy",
        target_amount=5_000_000, years_away=15, inflation_rate=0.07,
    )


@pytest.fixture
def default_goals() -> List[FinancialGoal]:
    """The two starter goals: a home and an education fund."""
    return [
        FinancialGoal(id="1", label="Dream Home", category="Housing",
                      target_amount=25_000_000, years_away=12, inflation_rate=0.06),
        FinancialGoal(id="2", label="Kid's Education", category="Education",
                      target_amount=12_000_000, years_away=15, inflation_rate=0.10),
    ]


@pytest.fixture
def household(goal) -> HouseholdState:
    """
    Reference household.

    Age 30 → 60, salary 200,000/month, savings 1,000,000, one goal,
    no recurring contribution, unanswered questionnaire.
    """
    return HouseholdState(
        age=30,
        target_age=60,
        monthly_salary=200_000,
        monthly_expenses=80_000,
        savings=1_000_000,
        goals=(goal,),
    )


@pytest.fixture
def contributing_household(household) -> HouseholdState:
    """Reference household with a 20,000/month contribution."""
    return household.with_contribution(20_000)


@pytest.fixture
def aggressive_answers() -> RiskAnswers:
    """Most risk-tolerant questionnaire (γ = 1)."""
    return RiskAnswers("D", "C", "D", "C")


@pytest.fixture
def cautious_answers() -> RiskAnswers:
    """Most cautious questionnaire (γ = 10)."""
    return RiskAnswers("A", "A", "A", "A")


@pytest.fixture
def behavioral() -> BehavioralStats:
    return BehavioralStats(monthly_contribution=20_000, consistency=0.8, streak=6)


# ---------------------------------------------------------------------------
# Market / News / Holdings
# ---------------------------------------------------------------------------

@pytest.fixture
def market() -> MarketParameters:
    """Default market snapshot (μ = 10%, σ = 18%)."""
    return MarketParameters(mu=0.10, sigma=0.18)


@pytest.fixture
def news() -> List[NewsItem]:
    return [
        NewsItem(sentiment="positive", impact="High", headline="Rate cut"),
        NewsItem(sentiment="negative", impact="Low", headline="Oil spike"),
        NewsItem(sentiment="neutral", impact="Medium", headline="Flat week"),
    ]


@pytest.fixture
def assets() -> List[PortfolioAsset]:
    """60 / 30 / 10 Equity / Debt / Cash holdings."""
    return [
        PortfolioAsset(name="Index Fund", value=600_000, category="Equity"),
        PortfolioAsset(name="PPF", value=300_000, category="Debt"),
        PortfolioAsset(name="Savings", value=100_000, category="Cash"),
    ]


# ---------------------------------------------------------------------------
# Scenario files
# ---------------------------------------------------------------------------

@pytest.fixture
def scenario_dict() -> dict:
    """Minimal valid scenario mapping with fast simulation settings."""
    return {
        "schema_version": "0.1.0",
        "name": "Test household",
        "household": {
            "age": 30,
            "target_age": 60,
            "monthly_salary": 200_000,
            "monthly_expenses": 80_000,
            "savings": 1_000_000,
            "risk_answers": {"midnight_test": "B"},
            "behavioral": {"monthly_contribution": 20_000},
            "goals": [
                {"id": "1", "label": "Legacy Fund", "category": "Legacy",
                 "target_amount": 5_000_000, "years_away": 15, "inflation_rate": 0.07},
            ],
        },
        "market": {"mu": 0.10, "sigma": 0.18},
        "news": [{"sentiment": "positive", "impact": "High", "headline": "Rally"}],
        "assets": [{"name": "Index Fund", "value": 100_000, "category": "Equity"}],
        "engine": {"simulation": {"n_paths": 200, "seed": 42}},
    }


@pytest.fixture
def scenario_file(tmp_path, scenario_dict):
    """Scenario mapping written to a temporary JSON file."""
    path = tmp_path / "scenario.json"
    with open(path, "w") as f:
        json.dump(scenario_dict, f)
    return path
