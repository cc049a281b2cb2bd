"""
FusionWealth: Household Wealth-Planning Decision Engine

Computes an optimal consumption/investment split, seeded Monte Carlo
wealth projections, per-goal funding gaps and a composite financial
fitness score from an immutable household snapshot.

Modules
-------
- household     : Household snapshot, questionnaire answers, goals
- market        : Market parameters (clamping, estimation from closes)
- tax           : Flat effective-rate tax engine
- merton        : Risk aversion, persona, Merton fraction, human capital
- simulation    : Chunked, seed-reproducible GBM wealth simulator
- sentiment     : News tilt and expected-return adjustment
- factors       : Portfolio-quality score vs. persona target mix
- goals         : Goal success probability and contribution-gap solver
- orchestrator  : Memoized evaluation pipeline
- serialization : JSON scenario and evaluation files
- config        : Pydantic engine policy, scenario schema, app settings
- utils         : Shared utilities (validation, annuities, logging)

"""

from .household import RiskAnswers, BehavioralStats, FinancialGoal, HouseholdState
from .market import MarketParameters, estimate_market_parameters
from .tax import TaxEngine, FlatTaxEngine
from .merton import MertonEngine, MertonOutput, CashFlowSplit
from .simulation import GBMSimulator, MonteCarloResult, run_monte_carlo
from .sentiment import NewsItem, ImpactWeightedSentiment, adjust_expected_return
from .factors import PortfolioAsset, PortfolioBreakdown, MixDeviationFactorEngine
from .goals import Prescription, LognormalGoalEngine, MonteCarloGoalEngine, allocate_contributions
from .orchestrator import Orchestrator, EvaluationResult, TransitionPoint, fitness_score
from .config import EngineConfig
from . import utils

__version__ = "0.1.0"
