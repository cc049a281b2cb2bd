"""
Unit tests for config.py Pydantic models.

Tests validation, defaults, and serialization of configuration classes.
"""

import pytest

from fusionwealth.config import (
    AppSettings,
    CacheConfig,
    EngineConfig,
    FinancialGoalConfig,
    FitnessConfig,
    GoalEngineConfig,
    HouseholdConfig,
    MarketBoundsConfig,
    MertonConfig,
    NewsItemConfig,
    PortfolioAssetConfig,
    ScenarioConfig,
    SimulationConfig,
    TaxConfig,
)


class TestEngineSections:
    """Defaults and ranges of the engine policy sections."""

    def test_defaults(self):
        config = EngineConfig()

        assert config.tax.rate == 0.30
        assert config.merton.risk_free_rate == 0.04
        assert config.merton.gamma_min == 1.0
        assert config.merton.gamma_max == 10.0
        assert config.simulation.n_paths == 500
        assert config.simulation.seed == 42
        assert config.goals.confidence == 0.90
        assert config.goals.method == "lognormal"
        assert config.factors.neutral_score == 50.0
        assert (config.fitness.merton_weight, config.fitness.goal_weight,
                config.fitness.quality_weight) == (40.0, 0.4, 0.2)
        assert config.cache.enabled is True

    def test_tax_rate_range(self):
        with pytest.raises(ValueError):
            TaxConfig(rate=1.5)
        with pytest.raises(ValueError):
            TaxConfig(rate=-0.1)

    def test_gamma_bounds_ordered(self):
        with pytest.raises(ValueError):
            MertonConfig(gamma_min=5.0, gamma_max=2.0)

    def test_market_bounds_ordered(self):
        with pytest.raises(ValueError):
            MarketBoundsConfig(mu_min=0.3, mu_max=0.1)

    def test_market_bounds_tuples(self):
        bounds = MarketBoundsConfig()
        assert bounds.mu_bounds == (0.05, 0.25)
        assert bounds.sigma_bounds == (0.10, 0.40)

    def test_n_paths_range(self):
        with pytest.raises(ValueError):
            SimulationConfig(n_paths=50)
        with pytest.raises(ValueError):
            SimulationConfig(n_paths=20_000)

    def test_percentiles_must_include_median(self):
        with pytest.raises(ValueError, match="median"):
            SimulationConfig(percentiles=(10.0, 90.0))
        with pytest.raises(ValueError, match="sorted"):
            SimulationConfig(percentiles=(90.0, 50.0, 10.0))

    def test_unseeded_simulation_allowed(self):
        assert SimulationConfig(seed=None).seed is None

    def test_confidence_open_interval(self):
        with pytest.raises(ValueError):
            GoalEngineConfig(confidence=1.0)
        with pytest.raises(ValueError):
            GoalEngineConfig(confidence=0.0)

    def test_unknown_method(self):
        with pytest.raises(ValueError):
            GoalEngineConfig(method="exact")

    def test_negative_fitness_weight(self):
        with pytest.raises(ValueError):
            FitnessConfig(merton_weight=-1.0)

    def test_cache_size_positive(self):
        with pytest.raises(ValueError):
            CacheConfig(max_entries=0)

    def test_frozen(self):
        config = EngineConfig()
        with pytest.raises(ValueError):
            config.tax = TaxConfig(rate=0.1)

    def test_extra_fields_forbidden(self):
        with pytest.raises(ValueError):
            SimulationConfig(n_sims=500)

    def test_hashable(self):
        assert hash(EngineConfig()) == hash(EngineConfig())

    def test_json_roundtrip(self):
        config = EngineConfig(
            tax=TaxConfig(rate=0.25),
            simulation=SimulationConfig(n_paths=1000, seed=7),
            goals=GoalEngineConfig(allocation_policy="priority"),
        )
        restored = EngineConfig.model_validate_json(config.model_dump_json())
        assert restored == config


class TestScenarioModels:
    """Validation of scenario-file models."""

    def test_goal_requires_positive_target(self):
        with pytest.raises(ValueError):
            FinancialGoalConfig(id="1", target_amount=0, years_away=5)

    def test_goal_category(self):
        with pytest.raises(ValueError):
            FinancialGoalConfig(id="1", category="Travel", target_amount=1, years_away=5)

    def test_target_age_before_age(self):
        with pytest.raises(ValueError, match="target_age"):
            HouseholdConfig(age=40, target_age=30)

    def test_target_age_equal_age(self):
        assert HouseholdConfig(age=60, target_age=60).target_age == 60

    def test_duplicate_goal_ids(self):
        goal = {"id": "1", "target_amount": 1_000, "years_away": 1}
        with pytest.raises(ValueError, match="unique"):
            HouseholdConfig(age=30, target_age=60, goals=[goal, goal])

    def test_invalid_answer_letter(self):
        with pytest.raises(ValueError):
            HouseholdConfig(age=30, target_age=60, risk_answers={"choice_of_paths": "D"})

    def test_news_ignores_unknown_keys(self):
        item = NewsItemConfig(sentiment="positive", impact="High", id=7, sourceUrl="x")
        assert item.sentiment == "positive"

    def test_asset_category(self):
        with pytest.raises(ValueError):
            PortfolioAssetConfig(name="Gold", value=1.0, category="Commodity")

    def test_scenario_defaults(self):
        scenario = ScenarioConfig(household={"age": 30, "target_age": 60})
        assert scenario.assets is None
        assert scenario.news == []
        assert scenario.market.mu == 0.10
        assert scenario.engine == EngineConfig()

    def test_scenario_from_dict(self, scenario_dict):
        scenario = ScenarioConfig.model_validate(scenario_dict)
        assert scenario.household.goals[0].label == "Legacy Fund"
        assert scenario.engine.simulation.n_paths == 200


class TestAppSettings:
    """Environment-backed process settings."""

    def test_defaults(self, monkeypatch):
        for var in ("FUSION_DEBUG", "FUSION_LOG_LEVEL", "FUSION_N_WORKERS"):
            monkeypatch.delenv(var, raising=False)
        settings = AppSettings(_env_file=None)

        assert settings.debug is False
        assert settings.log_level == "WARNING"
        assert settings.n_workers == 1
        assert settings.effective_log_level == "WARNING"

    def test_from_environment(self, monkeypatch):
        monkeypatch.setenv("FUSION_LOG_LEVEL", "INFO")
        monkeypatch.setenv("FUSION_N_WORKERS", "4")
        settings = AppSettings(_env_file=None)

        assert settings.log_level == "INFO"
        assert settings.n_workers == 4

    def test_debug_forces_debug_level(self, monkeypatch):
        monkeypatch.setenv("FUSION_DEBUG", "true")
        monkeypatch.setenv("FUSION_LOG_LEVEL", "ERROR")
        assert AppSettings(_env_file=None).effective_log_level == "DEBUG"

    def test_invalid_level(self, monkeypatch):
        monkeypatch.setenv("FUSION_LOG_LEVEL", "LOUD")
        with pytest.raises(ValueError):
            AppSettings(_env_file=None)
