# fusionwealth/merton.py
"""
Merton allocation, human capital and lifecycle consumption.

Mathematical Framework
----------------------
Risk aversion from the questionnaire:
    tolerance = Σ_q w_q · s_q          (s_q ∈ [0, 1], missing answer → 0.5)
    γ = clamp(γ_max − tolerance · (γ_max − γ_min), γ_min, γ_max)

Optimal risky share (CRRA, two assets):
    φ = clamp((μ − r) / (γ σ²), 0, 1)

Human capital (present value of net labour income until target age):
    HC = Y · (1 − (1 + r)^−n) / r      n = target_age − age, HC = 0 for n ≤ 0

Lifecycle consumption (total wealth smoothed over working and retired years):
    c = (savings + HC) / (a(n) + ρ · a(m) · (1 + r)^−n)
    safe consumption = min(c / 12, net monthly income)

where a(k) is the annuity factor, ρ the replacement ratio and m the number
of retirement years.

Design Principles
-----------------
- Clamp before dividing: γ ≥ γ_min > 0, σ ≥ σ_min > 0, n ≤ 0 short-circuits
- Pure functions for each formula, ``MertonEngine`` wires them to config
- Outputs are rebuilt on every call, never mutated

Example
-------
>>> engine = MertonEngine()
>>> out = engine.calculate(state, mu=0.10, sigma=0.18)
>>> out.persona, round(out.merton_fraction, 3)
('Balanced Guardian', 0.337)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .config import MarketBoundsConfig, MertonConfig, SimulationConfig
from .constants import GAMMA_MAX, GAMMA_MIN, MONTHS_PER_YEAR
from .household import HouseholdState, RiskAnswers
from .market import MarketParameters
from .simulation import GBMSimulator, MonteCarloResult, WealthSimulator
from .tax import FlatTaxEngine, TaxEngine
from .utils import annuity_factor, clamp

__all__ = [
    "MertonOutput",
    "CashFlowSplit",
    "MertonEngine",
    "risk_aversion",
    "persona",
    "merton_fraction",
    "human_capital",
    "cash_flow_split",
    "PERSONAS",
    "NEUTRAL_ANSWER_SCORE",
]


# ---------------------------------------------------------------------------
# Questionnaire → γ
# ---------------------------------------------------------------------------

NEUTRAL_ANSWER_SCORE = 0.5

# Risk-tolerance score per answer (A = most cautious) and question weight.
ANSWER_SCORES = {
    "midnight_test": {"A": 0.0, "B": 1 / 3, "C": 2 / 3, "D": 1.0},
    "choice_of_paths": {"A": 0.0, "B": 0.5, "C": 1.0},
    "safety_net": {"A": 0.0, "B": 1 / 3, "C": 2 / 3, "D": 1.0},
    "goal_horizon": {"A": 0.0, "B": 0.5, "C": 1.0},
}
QUESTION_WEIGHTS = {
    "midnight_test": 0.35,
    "choice_of_paths": 0.30,
    "safety_net": 0.15,
    "goal_horizon": 0.20,
}

# (upper bound of γ, label), ascending; the last bin is open-ended.
PERSONAS: Tuple[Tuple[float, str], ...] = (
    (2.0, "Aggressive Maverick"),
    (4.0, "Growth Seeker"),
    (6.5, "Balanced Guardian"),
    (8.5, "Conservative Steward"),
    (float("inf"), "Capital Preserver"),
)


def risk_aversion(
    answers: Optional[RiskAnswers],
    gamma_min: float = GAMMA_MIN,
    gamma_max: float = GAMMA_MAX,
) -> float:
    """
    Map questionnaire answers to a relative risk-aversion coefficient γ.

    Unanswered questions (or ``answers=None``) contribute the neutral score
    0.5, so a blank questionnaire yields the midpoint of [γ_min, γ_max].

    Examples
    --------
    >>> risk_aversion(RiskAnswers())
    5.5
    >>> risk_aversion(RiskAnswers("D", "C", "D", "C"))
    1.0
    """
    answers = answers or RiskAnswers()
    given = answers.as_dict()
    tolerance = 0.0
    for question, weight in QUESTION_WEIGHTS.items():
        letter = given.get(question)
        score = ANSWER_SCORES[question].get(letter, NEUTRAL_ANSWER_SCORE)
        tolerance += weight * score
    gamma = gamma_max - tolerance * (gamma_max - gamma_min)
    return clamp(gamma, gamma_min, gamma_max)


def persona(gamma: float) -> str:
    """
    Descriptive investor label for a risk-aversion coefficient.

    Bins are half-open ``[lower, upper)`` and cover the whole real line.

    Examples
    --------
    >>> persona(1.0), persona(5.5), persona(42.0)
    ('Aggressive Maverick', 'Balanced Guardian', 'Capital Preserver')
    """
    for upper, label in PERSONAS:
        if gamma < upper:
            return label
    return PERSONAS[-1][1]


def merton_fraction(mu: float, sigma: float, risk_free_rate: float, gamma: float) -> float:
    """
    Optimal risky-asset share φ = (μ − r) / (γσ²), clamped to [0, 1].

    Leverage (φ > 1) and short positions (φ < 0) are not allowed.

    Examples
    --------
    >>> round(merton_fraction(0.10, 0.18, 0.04, 5.0), 3)
    0.37
    >>> merton_fraction(0.10, 0.18, 0.04, 1.0)
    1.0
    """
    if gamma <= 0:
        raise ValueError(f"gamma must be > 0, got {gamma}")
    if sigma <= 0:
        return 1.0 if mu > risk_free_rate else 0.0
    return clamp((mu - risk_free_rate) / (gamma * sigma ** 2), 0.0, 1.0)


def human_capital(annual_net_income: float, years: float, rate: float) -> float:
    """
    Present value of the remaining net labour income.

    HC = Y · (1 − (1 + r)^−n) / r, with HC = 0 for n ≤ 0 and HC = Y · n
    when r = 0.
    """
    return max(0.0, float(annual_net_income)) * annuity_factor(rate, years)


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MertonOutput:
    """
    Allocation and cash-flow plan for one household snapshot.

    Attributes
    ----------
    merton_fraction : float
        Risky-asset share φ ∈ [0, 1].
    human_capital : float
        Present value of remaining net labour income.
    safe_monthly_consumption : float
        Sustainable monthly spending, <= net monthly income.
    savings_requirement : float
        Net income minus safe consumption (>= 0).
    persona : str
        Investor label derived from γ.
    net_monthly_income : float
        Income after tax.
    tax_leakage : float
        Monthly tax.
    gamma : float
        Risk-aversion coefficient used.
    """
    merton_fraction: float
    human_capital: float
    safe_monthly_consumption: float
    savings_requirement: float
    persona: str
    net_monthly_income: float
    tax_leakage: float
    gamma: float


@dataclass(frozen=True)
class CashFlowSplit:
    """Consume / save / invest split of net monthly income."""
    consume: float
    save: float
    invest: float
    consume_pct: float
    save_pct: float
    invest_pct: float
    is_overspending: bool


def cash_flow_split(
    output: MertonOutput,
    monthly_expenses: float,
    invest_cap: float = 1.0,
) -> CashFlowSplit:
    """
    Split net income into consumption, a safe bucket and a risky bucket.

    The surplus above safe consumption is invested in proportion
    min(φ, invest_cap); the remainder is saved.

    Examples
    --------
    >>> split = cash_flow_split(out, monthly_expenses=60_000, invest_cap=0.95)
    >>> split.consume + split.save + split.invest == out.net_monthly_income
    True
    """
    net = output.net_monthly_income
    consume = output.safe_monthly_consumption
    surplus = max(0.0, net - consume)
    share = min(invest_cap, output.merton_fraction)
    invest = surplus * share
    save = surplus - invest

    def pct(amount: float) -> float:
        return 100.0 * amount / net if net > 0 else 0.0

    return CashFlowSplit(
        consume=consume,
        save=save,
        invest=invest,
        consume_pct=pct(consume),
        save_pct=pct(save),
        invest_pct=pct(invest),
        is_overspending=monthly_expenses > consume,
    )


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

class MertonEngine:
    """
    Continuous-time allocation engine for a single household.

    Parameters
    ----------
    config : MertonConfig, optional
        Risk-free / discount rates, γ range and lifecycle policy.
    tax_engine : TaxEngine, optional
        Gross → net conversion (default: flat 30%).
    simulator : WealthSimulator, optional
        Monte Carlo backend used by ``run_monte_carlo``.
    market_bounds : MarketBoundsConfig, optional
        Clamp ranges for (μ, σ).

    Examples
    --------
    >>> engine = MertonEngine(tax_engine=FlatTaxEngine(rate=0.25))
    >>> engine.calculate_gamma(RiskAnswers(midnight_test="A"))
    7.075
    """

    def __init__(
        self,
        config: Optional[MertonConfig] = None,
        tax_engine: Optional[TaxEngine] = None,
        simulator: Optional[WealthSimulator] = None,
        market_bounds: Optional[MarketBoundsConfig] = None,
    ):
        self.config = config or MertonConfig()
        self.tax_engine = tax_engine or FlatTaxEngine()
        self.simulator = simulator or GBMSimulator(SimulationConfig())
        self.market_bounds = market_bounds or MarketBoundsConfig()

    # -------------------- Risk profile --------------------
    def calculate_gamma(self, answers: Optional[RiskAnswers]) -> float:
        return risk_aversion(answers, self.config.gamma_min, self.config.gamma_max)

    def get_persona(self, gamma: float) -> str:
        return persona(gamma)

    # -------------------- Cash flows --------------------
    def human_capital(self, annual_net_income: float, years: float) -> float:
        return human_capital(annual_net_income, years, self.config.discount_rate)

    def safe_consumption(self, net_monthly: float, savings: float, hc: float, years: float) -> float:
        """Lifecycle-smoothed monthly consumption, capped at net income."""
        r = self.config.discount_rate
        horizon_discount = (1.0 + r) ** (-max(years, 0))
        denominator = (
            annuity_factor(r, years)
            + self.config.replacement_ratio
            * annuity_factor(r, self.config.retirement_years)
            * horizon_discount
        )
        if denominator <= 0:
            return max(0.0, net_monthly)
        annual = (savings + hc) / denominator
        return clamp(annual / MONTHS_PER_YEAR, 0.0, max(0.0, net_monthly))

    # -------------------- Main entry point --------------------
    def calculate(
        self,
        state: HouseholdState,
        mu: float,
        sigma: float,
        clamp_market: bool = True,
    ) -> MertonOutput:
        """
        Allocation, human capital and consumption plan for *state*.

        μ and σ are clamped into the configured market bounds first unless
        ``clamp_market`` is False (the orchestrator passes an already
        clamped, sentiment-adjusted μ which may sit above the upper bound).
        """
        market = MarketParameters(mu, sigma)
        if clamp_market:
            market = market.clamped(
                self.market_bounds.mu_bounds, self.market_bounds.sigma_bounds
            )
        tax = self.tax_engine.compute(state.monthly_salary)
        net = tax["net_monthly"]
        years = state.years_to_target

        gamma = self.calculate_gamma(state.risk_answers)
        phi = merton_fraction(market.mu, market.sigma, self.config.risk_free_rate, gamma)
        hc = self.human_capital(net * MONTHS_PER_YEAR, years)
        consumption = self.safe_consumption(net, state.savings, hc, years)

        return MertonOutput(
            merton_fraction=phi,
            human_capital=hc,
            safe_monthly_consumption=consumption,
            savings_requirement=max(0.0, net - consumption),
            persona=self.get_persona(gamma),
            net_monthly_income=net,
            tax_leakage=tax["tax_monthly"],
            gamma=gamma,
        )

    def cash_flow_split(self, output: MertonOutput, monthly_expenses: float) -> CashFlowSplit:
        return cash_flow_split(output, monthly_expenses, self.config.invest_cap)

    # -------------------- Simulation --------------------
    def run_monte_carlo(
        self,
        initial_wealth: float,
        years: float,
        mu: float,
        sigma: float,
        monthly_contribution: float,
        seed: Optional[int] = None,
    ) -> MonteCarloResult:
        """Forward wealth simulation; see ``simulation.GBMSimulator``."""
        return self.simulator.run(
            initial_wealth, years, mu, sigma, monthly_contribution, seed=seed
        )
