"""
Unit tests for merton module.

Tests risk aversion, persona bins, the Merton fraction, human capital,
lifecycle consumption and the cash-flow split.
"""

import pytest

from fusionwealth.config import MertonConfig
from fusionwealth.household import HouseholdState, RiskAnswers
from fusionwealth.merton import (
    PERSONAS,
    CashFlowSplit,
    MertonEngine,
    MertonOutput,
    cash_flow_split,
    human_capital,
    merton_fraction,
    persona,
    risk_aversion,
)
from fusionwealth.tax import FlatTaxEngine
from fusionwealth.utils import annuity_factor


# ============================================================================
# RISK AVERSION / PERSONA
# ============================================================================

class TestRiskAversion:
    """Test questionnaire → γ mapping."""

    def test_unanswered_is_midpoint(self):
        assert risk_aversion(RiskAnswers()) == pytest.approx(5.5)
        assert risk_aversion(None) == pytest.approx(5.5)

    def test_extremes(self, aggressive_answers, cautious_answers):
        assert risk_aversion(aggressive_answers) == pytest.approx(1.0)
        assert risk_aversion(cautious_answers) == pytest.approx(10.0)

    def test_partial_answers(self):
        # midnight A → 0, others neutral 0.5: tolerance 0.325
        assert risk_aversion(RiskAnswers(midnight_test="A")) == pytest.approx(10 - 0.325 * 9)

    def test_more_tolerant_answer_lowers_gamma(self):
        low = risk_aversion(RiskAnswers(midnight_test="D"))
        high = risk_aversion(RiskAnswers(midnight_test="B"))
        assert low < high

    def test_custom_range(self):
        gamma = risk_aversion(RiskAnswers(), gamma_min=2.0, gamma_max=4.0)
        assert gamma == pytest.approx(3.0)

    def test_always_positive(self, aggressive_answers):
        assert risk_aversion(aggressive_answers) > 0


class TestPersona:
    """Test persona bins."""

    @pytest.mark.parametrize("gamma,label", [
        (0.5, "Aggressive Maverick"),
        (1.99, "Aggressive Maverick"),
        (2.0, "Growth Seeker"),
        (3.99, "Growth Seeker"),
        (4.0, "Balanced Guardian"),
        (6.49, "Balanced Guardian"),
        (6.5, "Conservative Steward"),
        (8.5, "Capital Preserver"),
        (100.0, "Capital Preserver"),
    ])
    def test_bins(self, gamma, label):
        assert persona(gamma) == label

    def test_bins_ordered(self):
        uppers = [upper for upper, _ in PERSONAS]
        assert uppers == sorted(uppers)


# ============================================================================
# FORMULAS
# ============================================================================

class TestMertonFraction:
    """Test φ = (μ − r) / (γσ²) clamped to [0, 1]."""

    def test_reference_case(self):
        assert merton_fraction(0.10, 0.18, 0.04, 5.0) == pytest.approx(0.06 / 0.162)

    def test_leverage_clamped(self):
        # raw φ = 0.06 / 0.0324 ≈ 1.85
        assert merton_fraction(0.10, 0.18, 0.04, 1.0) == 1.0

    def test_interior(self):
        assert merton_fraction(0.10, 0.18, 0.04, 10.0) == pytest.approx(0.06 / (10 * 0.0324))

    def test_negative_premium_floored(self):
        assert merton_fraction(0.03, 0.18, 0.04, 3.0) == 0.0

    def test_decreasing_in_gamma(self):
        values = [merton_fraction(0.10, 0.20, 0.04, g) for g in (2, 4, 6, 8, 10)]
        assert values == sorted(values, reverse=True)

    def test_zero_gamma_rejected(self):
        with pytest.raises(ValueError):
            merton_fraction(0.10, 0.18, 0.04, 0.0)


class TestHumanCapital:
    """Test present value of remaining labour income."""

    def test_formula(self):
        expected = 840_000 * (1 - 1.04 ** -30) / 0.04
        assert human_capital(840_000, 30, 0.04) == pytest.approx(expected)

    def test_zero_at_target(self):
        assert human_capital(840_000, 0, 0.04) == 0.0

    def test_zero_rate(self):
        assert human_capital(100_000, 10, 0.0) == pytest.approx(1_000_000)

    def test_monotonic_as_age_approaches_target(self):
        values = [human_capital(840_000, 60 - age, 0.04) for age in range(30, 61)]
        assert all(a > b for a, b in zip(values, values[1:]))
        assert values[-1] == 0.0


# ============================================================================
# ENGINE
# ============================================================================

class TestMertonEngine:
    """Test MertonEngine.calculate."""

    def test_reference_household(self, household):
        out = MertonEngine().calculate(household, mu=0.10, sigma=0.18)
        assert isinstance(out, MertonOutput)
        assert out.net_monthly_income == pytest.approx(140_000)
        assert out.tax_leakage == pytest.approx(60_000)
        assert out.gamma == pytest.approx(5.5)
        assert out.persona == "Balanced Guardian"
        assert out.merton_fraction == pytest.approx(0.06 / (5.5 * 0.0324))
        assert out.human_capital == pytest.approx(140_000 * 12 * annuity_factor(0.04, 30))

    def test_consumption_capped_and_savings_requirement(self, household):
        out = MertonEngine().calculate(household, mu=0.10, sigma=0.18)
        assert 0 <= out.safe_monthly_consumption <= out.net_monthly_income
        assert out.savings_requirement == pytest.approx(
            out.net_monthly_income - out.safe_monthly_consumption
        )
        assert out.savings_requirement >= 0

    def test_consumption_formula(self, household):
        engine = MertonEngine()
        out = engine.calculate(household, mu=0.10, sigma=0.18)
        hc = out.human_capital
        denom = annuity_factor(0.04, 30) + 0.70 * annuity_factor(0.04, 25) * 1.04 ** -30
        expected = (1_000_000 + hc) / denom / 12
        assert out.safe_monthly_consumption == pytest.approx(min(expected, 140_000))

    def test_aggressive_household_full_equity(self, household, aggressive_answers):
        state = HouseholdState(
            age=30, target_age=60, monthly_salary=200_000,
            risk_answers=aggressive_answers,
        )
        out = MertonEngine().calculate(state, mu=0.10, sigma=0.18)
        assert out.merton_fraction == 1.0
        assert out.persona == "Aggressive Maverick"

    def test_market_clamped(self, household):
        engine = MertonEngine()
        wild = engine.calculate(household, mu=0.90, sigma=0.01)
        capped = engine.calculate(household, mu=0.25, sigma=0.10)
        assert wild == capped

    def test_unclamped_market_passthrough(self, household):
        engine = MertonEngine()
        out = engine.calculate(household, mu=0.27, sigma=0.18, clamp_market=False)
        clamped = engine.calculate(household, mu=0.27, sigma=0.18)
        assert out.merton_fraction >= clamped.merton_fraction

    def test_at_target_age(self):
        state = HouseholdState(age=60, target_age=60, monthly_salary=100_000, savings=500_000)
        out = MertonEngine().calculate(state, mu=0.10, sigma=0.18)
        assert out.human_capital == 0.0
        assert out.safe_monthly_consumption >= 0

    def test_zero_income(self):
        state = HouseholdState(age=30, target_age=60, savings=1_000_000)
        out = MertonEngine().calculate(state, mu=0.10, sigma=0.18)
        assert out.net_monthly_income == 0.0
        assert out.safe_monthly_consumption == 0.0
        assert out.savings_requirement == 0.0

    def test_injected_tax_engine(self, household):
        out = MertonEngine(tax_engine=FlatTaxEngine(rate=0.10)).calculate(household, 0.10, 0.18)
        assert out.net_monthly_income == pytest.approx(180_000)

    def test_custom_config(self, household):
        engine = MertonEngine(MertonConfig(risk_free_rate=0.06))
        base = MertonEngine().calculate(household, 0.10, 0.18)
        out = engine.calculate(household, 0.10, 0.18)
        assert out.merton_fraction < base.merton_fraction


class TestCashFlowSplit:
    """Test consume / save / invest split."""

    def _output(self, phi=0.5, net=100_000.0, consumption=60_000.0):
        return MertonOutput(
            merton_fraction=phi, human_capital=0.0,
            safe_monthly_consumption=consumption,
            savings_requirement=net - consumption,
            persona="Balanced Guardian", net_monthly_income=net,
            tax_leakage=0.0, gamma=5.5,
        )

    def test_split_sums_to_net(self):
        split = cash_flow_split(self._output(), monthly_expenses=50_000, invest_cap=0.95)
        assert isinstance(split, CashFlowSplit)
        assert split.consume + split.save + split.invest == pytest.approx(100_000)
        assert split.invest == pytest.approx(20_000)
        assert split.consume_pct + split.save_pct + split.invest_pct == pytest.approx(100)

    def test_invest_capped(self):
        split = cash_flow_split(self._output(phi=1.0), monthly_expenses=0, invest_cap=0.95)
        assert split.invest == pytest.approx(40_000 * 0.95)
        assert split.save == pytest.approx(40_000 * 0.05)

    def test_overspending_flag(self):
        assert cash_flow_split(self._output(), monthly_expenses=70_000).is_overspending
        assert not cash_flow_split(self._output(), monthly_expenses=60_000).is_overspending

    def test_zero_income_percentages(self):
        split = cash_flow_split(self._output(net=0.0, consumption=0.0), monthly_expenses=0)
        assert split.consume_pct == 0.0 and split.invest_pct == 0.0

    def test_engine_uses_configured_cap(self, household):
        engine = MertonEngine(MertonConfig(invest_cap=0.5))
        out = engine.calculate(household, 0.25, 0.10)
        split = engine.cash_flow_split(out, household.monthly_expenses)
        assert split.invest == pytest.approx((out.net_monthly_income - out.safe_monthly_consumption) * 0.5)
