"""
Integration test for the full FusionWealth workflow.

Exercises the complete pipeline from a scenario file through market
estimation, sentiment, Merton planning, simulation, goal prescriptions and
persistence to verify all components work together correctly.
"""

import json
from dataclasses import replace

import numpy as np
import pytest

from fusionwealth.config import EngineConfig, GoalEngineConfig, SimulationConfig
from fusionwealth.household import FinancialGoal, HouseholdState, RiskAnswers
from fusionwealth.market import estimate_market_parameters
from fusionwealth.orchestrator import Orchestrator
from fusionwealth.sentiment import NewsItem
from fusionwealth.serialization import load_scenario, save_evaluation, save_scenario


@pytest.mark.integration
class TestFullWorkflow:
    """Integration tests for the complete evaluation workflow."""

    def test_default_household(self, engine_config, default_goals):
        """
        Starter household with the two default goals.

        Smoke test of every engine on realistic inputs.
        """
        state = HouseholdState(
            age=30, target_age=60,
            monthly_salary=200_000, monthly_expenses=80_000, savings=1_000_000,
            goals=default_goals,
        ).with_contribution(20_000)

        # Roughly 10% drift over one year of daily closes
        closes = 100.0 * np.exp(np.linspace(0.0, 0.0953, 252))
        market = estimate_market_parameters(closes)

        news = [
            NewsItem("positive", "High", headline="Rate cut"),
            NewsItem("negative", "Medium", headline="Oil spike"),
        ]

        result = Orchestrator(engine_config).evaluate(state, market, news)

        assert 0 <= result.fitness_score <= 100
        assert result.adjusted_mu >= 0.05
        assert len(result.transition_map) == 31
        assert len(result.prescriptions) == 2
        for p in result.prescriptions:
            assert 0.0 <= p.success_rate <= 100.0
            assert p.allocated_contribution == pytest.approx(10_000)
            assert p.increase_monthly_contribution > 0

        # Wealth overtakes human capital somewhere before the target age
        crossover = [p for p in result.transition_map if p.financial_assets > p.human_capital]
        assert crossover
        assert result.transition_map[-1].human_capital == 0.0

    def test_prescription_closes_the_gap(self, engine_config, goal):
        """Adding the prescribed contribution reaches the confidence target."""
        state = HouseholdState(
            age=35, target_age=60, monthly_salary=150_000, goals=(goal,),
        ).with_contribution(15_000)
        orch = Orchestrator(engine_config)
        market_args = dict(market=estimate_market_parameters([100.0]))

        before = orch.evaluate(state, **market_args).prescriptions[0]
        assert before.success_rate < 90.0

        topped_up = state.with_contribution(15_000 + before.increase_monthly_contribution)
        after = orch.evaluate(topped_up, **market_args).prescriptions[0]
        assert after.success_rate >= 90.0
        assert after.increase_monthly_contribution == 0.0

    def test_scenario_file_roundtrip(self, tmp_path, scenario_file):
        """Load, evaluate, save, reload and re-evaluate a scenario."""
        scenario = load_scenario(scenario_file)
        first = Orchestrator(scenario.engine).evaluate(*scenario.inputs())

        copy_path = tmp_path / "copy.json"
        save_scenario(scenario, copy_path)
        reloaded = load_scenario(copy_path)
        second = Orchestrator(reloaded.engine).evaluate(*reloaded.inputs())

        assert first.fitness_score == second.fitness_score
        assert first.transition_map == second.transition_map

        out = tmp_path / "evaluation.json"
        save_evaluation(first, out)
        with open(out) as f:
            data = json.load(f)
        assert data["fitness_score"] == first.fitness_score

    def test_goal_engines_agree(self, household, market):
        """Closed-form and simulated goal estimators tell the same story."""
        state = household.with_contribution(30_000)
        sim = SimulationConfig(n_paths=2_000, seed=11)
        lognormal = Orchestrator(EngineConfig(simulation=sim))
        simulated = Orchestrator(EngineConfig(
            simulation=sim, goals=GoalEngineConfig(method="monte_carlo"),
        ))

        a = lognormal.evaluate(state, market).prescriptions[0]
        b = simulated.evaluate(state, market).prescriptions[0]
        assert a.success_rate == pytest.approx(b.success_rate, abs=6.0)

    def test_risk_profile_shapes_plan(self, engine_config, household, market):
        """A more tolerant questionnaire raises φ and never lowers fitness."""
        orch = Orchestrator(engine_config)
        cautious = replace(household, risk_answers=RiskAnswers("A", "A", "A", "A"))
        bold = replace(household, risk_answers=RiskAnswers("D", "C", "D", "C"))

        low = orch.evaluate(cautious, market)
        high = orch.evaluate(bold, market)
        assert high.merton.merton_fraction > low.merton.merton_fraction
        assert high.fitness_score >= low.fitness_score
        assert low.merton.persona == "Capital Preserver"
        assert high.merton.persona == "Aggressive Maverick"

    def test_editing_goals_invalidates_cache(self, engine_config, household, market):
        orch = Orchestrator(engine_config)
        base = orch.evaluate(household, market)
        extra = FinancialGoal("9", "Car", "Legacy", 800_000, 3)
        edited = orch.evaluate(household.with_goal(extra), market)
        assert edited is not base
        assert len(edited.prescriptions) == 2
        assert orch.evaluate(household.without_goal("9"), market) is base
