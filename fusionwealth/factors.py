"""
Portfolio-quality (factor alignment) score.

Compares the Equity / Debt / Cash mix of the held assets with the target
mix implied by the investor persona:

    score = 100 · (1 − ½ · Σ_k |actual_k − target_k|),  floored at 0

Half the L1 distance between two mixes lies in [0, 1], so a perfectly
aligned portfolio scores 100 and a fully opposite one 0. Missing holdings
score a neutral value (default 50) rather than zero.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Sequence, Union

from .config import FactorConfig
from .exceptions import ValidationError
from .utils import check_non_negative

__all__ = [
    "ASSET_CATEGORIES",
    "TARGET_MIX_BY_PERSONA",
    "PortfolioAsset",
    "PortfolioBreakdown",
    "FactorEngine",
    "MixDeviationFactorEngine",
]


ASSET_CATEGORIES = ("Equity", "Debt", "Cash")

TARGET_MIX_BY_PERSONA: Dict[str, Dict[str, float]] = {
    "Aggressive Maverick": {"Equity": 0.85, "Debt": 0.10, "Cash": 0.05},
    "Growth Seeker": {"Equity": 0.70, "Debt": 0.20, "Cash": 0.10},
    "Balanced Guardian": {"Equity": 0.55, "Debt": 0.35, "Cash": 0.10},
    "Conservative Steward": {"Equity": 0.35, "Debt": 0.50, "Cash": 0.15},
    "Capital Preserver": {"Equity": 0.20, "Debt": 0.60, "Cash": 0.20},
}
DEFAULT_PERSONA = "Balanced Guardian"


@dataclass(frozen=True)
class PortfolioAsset:
    """A single held asset as reported by statement ingestion."""
    name: str
    value: float
    category: str

    def __post_init__(self):
        check_non_negative("value", self.value)
        if self.category not in ASSET_CATEGORIES:
            raise ValidationError(
                f"category must be one of {ASSET_CATEGORIES}, got {self.category!r}"
            )


@dataclass(frozen=True)
class PortfolioBreakdown:
    """
    Aggregated holdings by category.

    Examples
    --------
    >>> b = PortfolioBreakdown.from_assets([
    ...     PortfolioAsset("Index Fund", 600_000, "Equity"),
    ...     PortfolioAsset("PPF", 300_000, "Debt"),
    ...     PortfolioAsset("Savings A/c", 100_000, "Cash"),
    ... ])
    >>> b.mix()
    {'Equity': 0.6, 'Debt': 0.3, 'Cash': 0.1}
    """
    equity: float = 0.0
    debt: float = 0.0
    cash: float = 0.0
    last_updated: str = ""
    source: str = "Manual"

    def __post_init__(self):
        for name in ("equity", "debt", "cash"):
            check_non_negative(name, getattr(self, name))
        if self.source not in ("Manual", "Sentinel Sync"):
            raise ValidationError(
                f"source must be 'Manual' or 'Sentinel Sync', got {self.source!r}"
            )

    @classmethod
    def from_assets(
        cls,
        assets: Iterable[PortfolioAsset],
        last_updated: str = "",
        source: str = "Sentinel Sync",
    ) -> PortfolioBreakdown:
        totals = dict.fromkeys(ASSET_CATEGORIES, 0.0)
        for asset in assets:
            totals[asset.category] += float(asset.value)
        return cls(
            equity=totals["Equity"],
            debt=totals["Debt"],
            cash=totals["Cash"],
            last_updated=last_updated,
            source=source,
        )

    @property
    def total(self) -> float:
        return self.equity + self.debt + self.cash

    def mix(self) -> Optional[Dict[str, float]]:
        """Category weights summing to 1, or None for an empty portfolio."""
        total = self.total
        if total <= 0:
            return None
        return {
            "Equity": self.equity / total,
            "Debt": self.debt / total,
            "Cash": self.cash / total,
        }


Holdings = Union[PortfolioBreakdown, Sequence[PortfolioAsset], None]


class FactorEngine(ABC):
    """Base class for portfolio-quality scorers."""

    @abstractmethod
    def score(self, persona: str, held_assets: Holdings) -> float:
        """Quality score in [0, 100]."""
        raise NotImplementedError


class MixDeviationFactorEngine(FactorEngine):
    """
    Score holdings by their distance from the persona's target mix.

    Parameters
    ----------
    config : FactorConfig, optional
        Provides the neutral score for missing holdings.
    target_mix : dict, optional
        Persona → category weights. Defaults to ``TARGET_MIX_BY_PERSONA``.

    Examples
    --------
    >>> engine = MixDeviationFactorEngine()
    >>> engine.score("Balanced Guardian", None)
    50.0
    >>> engine.score("Aggressive Maverick", [PortfolioAsset("Nifty 50", 1.0, "Equity")])
    85.0
    """

    def __init__(
        self,
        config: Optional[FactorConfig] = None,
        target_mix: Optional[Dict[str, Dict[str, float]]] = None,
    ):
        self.config = config or FactorConfig()
        self.target_mix = target_mix or TARGET_MIX_BY_PERSONA

    def target_for(self, persona: str) -> Dict[str, float]:
        return self.target_mix.get(persona, self.target_mix[DEFAULT_PERSONA])

    def score(self, persona: str, held_assets: Holdings) -> float:
        if held_assets is None:
            return float(self.config.neutral_score)
        if isinstance(held_assets, PortfolioBreakdown):
            breakdown = held_assets
        else:
            breakdown = PortfolioBreakdown.from_assets(held_assets)

        actual = breakdown.mix()
        if actual is None:
            return float(self.config.neutral_score)

        target = self.target_for(persona)
        distance = 0.5 * sum(abs(actual[k] - target[k]) for k in ASSET_CATEGORIES)
        return max(0.0, 100.0 * (1.0 - distance))
