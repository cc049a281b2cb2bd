# fusionwealth/household.py
"""
Household state: the immutable input snapshot of one engine evaluation.

Purpose
-------
Domain-level abstractions for everything the user edits in the planner:
cash flows, age horizon, questionnaire answers, contribution behaviour and
the ordered list of financial goals. Objects are frozen and hashable so an
evaluation can be memoized by value.

Design Principles
-----------------
- Immutable specifications: all classes are frozen dataclasses
- Validate on construction: impossible values raise ``ValueError``
- Sequences are stored as tuples (hashable, order-preserving)
- Edits produce new snapshots via ``dataclasses.replace`` / ``with_*``

Example
-------
>>> goals = [
...     FinancialGoal(id="1", label="Dream Home", category="Housing",
...                   target_amount=25_000_000, years_away=12, inflation_rate=0.06),
... ]
>>> state = HouseholdState(age=30, target_age=60, monthly_salary=200_000,
...                        monthly_expenses=80_000, savings=1_000_000,
...                        goals=goals)
>>> state.years_to_target
30
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple

from .exceptions import GoalError, ValidationError
from .utils import check_non_negative

__all__ = [
    "RiskAnswers",
    "BehavioralStats",
    "FinancialGoal",
    "HouseholdState",
    "GOAL_CATEGORIES",
    "QUESTION_OPTIONS",
]


GOAL_CATEGORIES: Tuple[str, ...] = ("Housing", "Education", "Legacy", "Retirement")

# Allowed answer letters per questionnaire item, most cautious first.
QUESTION_OPTIONS = {
    "midnight_test": ("A", "B", "C", "D"),
    "choice_of_paths": ("A", "B", "C"),
    "safety_net": ("A", "B", "C", "D"),
    "goal_horizon": ("A", "B", "C"),
}


# ---------------------------------------------------------------------------
# Questionnaire
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RiskAnswers:
    """
    Answers to the four-question risk questionnaire.

    Parameters
    ----------
    midnight_test : {"A", "B", "C", "D"}, optional
        Reaction to a 20% overnight drawdown (A = withdraw, D = buy more).
    choice_of_paths : {"A", "B", "C"}, optional
        Preferred growth path (A = steady 5-6%, C = 15%+ with high risk).
    safety_net : {"A", "B", "C", "D"}, optional
        Months of expenses covered by the emergency fund (A < 1, D > 6).
    goal_horizon : {"A", "B", "C"}, optional
        When primary savings will be needed (A < 3 years, C > 10 years).

    Notes
    -----
    ``None`` marks an unanswered question; the risk-aversion mapping gives
    it a neutral weight. Letters are accepted case-insensitively.
    """
    midnight_test: Optional[str] = None
    choice_of_paths: Optional[str] = None
    safety_net: Optional[str] = None
    goal_horizon: Optional[str] = None

    def __post_init__(self):
        for name, options in QUESTION_OPTIONS.items():
            value = getattr(self, name)
            if value is None:
                continue
            normalized = str(value).strip().upper()
            if normalized not in options:
                raise ValidationError(
                    f"{name} must be one of {options} or None, got {value!r}"
                )
            object.__setattr__(self, name, normalized)

    def as_dict(self) -> dict:
        return {name: getattr(self, name) for name in QUESTION_OPTIONS}

    @property
    def answered(self) -> int:
        """Number of questions with an answer."""
        return sum(v is not None for v in self.as_dict().values())


# ---------------------------------------------------------------------------
# Behaviour
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BehavioralStats:
    """
    Contribution behaviour of the household.

    Parameters
    ----------
    monthly_contribution : float
        Current recurring monthly investment (SIP).
    consistency : float
        Share of months with a contribution, in [0, 1].
    streak : int
        Consecutive months with a contribution.
    """
    monthly_contribution: float = 0.0
    consistency: float = 0.0
    streak: int = 0

    def __post_init__(self):
        check_non_negative("monthly_contribution", self.monthly_contribution)
        check_non_negative("streak", self.streak)
        if not (0.0 <= self.consistency <= 1.0):
            raise ValidationError(
                f"consistency must be in [0, 1], got {self.consistency}"
            )


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class FinancialGoal:
    """
    A single dated funding target.

    Parameters
    ----------
    id : str
        Unique identifier within the household.
    label : str
        Display name (e.g., "Dream Home").
    category : {"Housing", "Education", "Legacy", "Retirement"}
        Goal type.
    target_amount : float
        Amount required in today's money, must be > 0.
    years_away : int
        Years until the money is needed, must be >= 0.
    inflation_rate : float
        Goal-specific annual inflation, must be > -1.

    Examples
    --------
    >>> g = FinancialGoal(id="2", label="Kid's Education", category="Education",
    ...                   target_amount=12_000_000, years_away=15, inflation_rate=0.10)
    >>> round(g.future_target())
    50126978
    """
    id: str
    label: str
    category: str
    target_amount: float
    years_away: int
    inflation_rate: float = 0.0

    def __post_init__(self):
        if self.category not in GOAL_CATEGORIES:
            raise ValidationError(
                f"category must be one of {GOAL_CATEGORIES}, got {self.category!r}"
            )
        if not self.target_amount > 0:
            raise ValidationError(f"target_amount must be > 0, got {self.target_amount}")
        if not self.years_away >= 0:
            raise ValidationError(f"years_away must be >= 0, got {self.years_away}")
        if not self.inflation_rate > -1:
            raise ValidationError(
                f"inflation_rate must be > -1, got {self.inflation_rate}"
            )

    @property
    def months_away(self) -> int:
        return int(round(self.years_away * 12))

    def future_target(self, years: Optional[float] = None) -> float:
        """Inflation-adjusted target: target * (1 + inflation) ** years."""
        y = self.years_away if years is None else years
        return float(self.target_amount * (1.0 + self.inflation_rate) ** y)


# ---------------------------------------------------------------------------
# Household snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class HouseholdState:
    """
    Immutable household snapshot consumed by one engine evaluation.

    Parameters
    ----------
    age : int
        Current age, >= 0.
    target_age : int
        Planned retirement age, >= age.
    monthly_salary : float
        Gross monthly income.
    monthly_expenses : float
        Current monthly spending.
    savings : float
        Total financial savings today.
    risk_answers : RiskAnswers
        Questionnaire answers (unanswered by default).
    behavioral : BehavioralStats
        Contribution behaviour.
    goals : tuple of FinancialGoal
        Ordered goals; ids must be unique. Lists are converted to tuples.
    """
    age: int
    target_age: int
    monthly_salary: float = 0.0
    monthly_expenses: float = 0.0
    savings: float = 0.0
    risk_answers: RiskAnswers = field(default_factory=RiskAnswers)
    behavioral: BehavioralStats = field(default_factory=BehavioralStats)
    goals: Tuple[FinancialGoal, ...] = ()

    def __post_init__(self):
        check_non_negative("age", self.age)
        if not self.target_age >= self.age:
            raise ValidationError(
                f"target_age ({self.target_age}) must be >= age ({self.age})"
            )
        check_non_negative("monthly_salary", self.monthly_salary)
        check_non_negative("monthly_expenses", self.monthly_expenses)
        check_non_negative("savings", self.savings)

        goals = tuple(self.goals)
        seen = set()
        for goal in goals:
            if not isinstance(goal, FinancialGoal):
                raise ValidationError(f"goals must contain FinancialGoal, got {type(goal)}")
            if goal.id in seen:
                raise GoalError(f"duplicate goal id {goal.id!r}")
            seen.add(goal.id)
        object.__setattr__(self, "goals", goals)

    @property
    def years_to_target(self) -> int:
        return int(self.target_age - self.age)

    @property
    def monthly_contribution(self) -> float:
        return self.behavioral.monthly_contribution

    # -------------------- Edits (return new snapshots) --------------------
    def with_goal(self, goal: FinancialGoal) -> HouseholdState:
        """Return a copy with *goal* added, or replaced in place if its id exists."""
        if any(g.id == goal.id for g in self.goals):
            goals = tuple(goal if g.id == goal.id else g for g in self.goals)
        else:
            goals = self.goals + (goal,)
        return replace(self, goals=goals)

    def without_goal(self, goal_id: str) -> HouseholdState:
        """Return a copy without the goal *goal_id* (no-op if absent)."""
        return replace(self, goals=tuple(g for g in self.goals if g.id != goal_id))

    def with_contribution(self, amount: float) -> HouseholdState:
        """Return a copy with a new recurring monthly contribution."""
        return replace(self, behavioral=replace(self.behavioral, monthly_contribution=amount))

    def goal(self, goal_id: str) -> FinancialGoal:
        for g in self.goals:
            if g.id == goal_id:
                return g
        raise KeyError(goal_id)
