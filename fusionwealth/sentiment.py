"""
News sentiment aggregation and expected-return tilt.

Purpose
-------
Pre-labelled news items (from an external summarization collaborator) are
reduced to a single tilt in [-1, 1]:

    tilt = (1/N) Σ_i score(sentiment_i) · weight(impact_i)

    score:  positive → +1, neutral → 0, negative → −1
    weight: Low → 1/3, Medium → 2/3, High → 1

The tilt shifts the expected return additively, never below a floor:

    μ_adjusted = max(floor, μ + tilt · scale)

Example
-------
>>> news = [NewsItem("positive", "High"), NewsItem("negative", "Low")]
>>> round(ImpactWeightedSentiment().tilt(news), 4)
0.3333
>>> adjust_expected_return(0.10, 0.3333)
0.106666
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional

from .config import SentimentConfig
from .constants import DEFAULT_MU_FLOOR, DEFAULT_TILT_SCALE
from .utils import clamp

__all__ = [
    "NewsItem",
    "SentimentEngine",
    "ImpactWeightedSentiment",
    "adjust_expected_return",
    "SENTIMENT_SCORES",
    "IMPACT_WEIGHTS",
]

logger = logging.getLogger(__name__)


SENTIMENT_SCORES = {"positive": 1.0, "neutral": 0.0, "negative": -1.0}
IMPACT_WEIGHTS = {"low": 1 / 3, "medium": 2 / 3, "high": 1.0}


@dataclass(frozen=True)
class NewsItem:
    """
    A scored, tagged news item.

    Parameters
    ----------
    sentiment : str
        "positive", "neutral" or "negative" (case-insensitive).
    impact : str
        "Low", "Medium" or "High" (case-insensitive).
    headline, source, url, category, summary, timestamp : str
        Descriptive metadata; ignored by the tilt.

    Notes
    -----
    Labels are normalized on construction (sentiment lower case, impact
    title case). Unknown labels are kept and scored as neutral, so one bad
    feed entry cannot fail an evaluation.
    """
    sentiment: str = "neutral"
    impact: str = "Low"
    headline: str = ""
    source: str = ""
    url: str = ""
    category: str = ""
    summary: str = ""
    timestamp: str = ""

    def __post_init__(self):
        object.__setattr__(self, "sentiment", str(self.sentiment).strip().lower())
        object.__setattr__(self, "impact", str(self.impact).strip().title())

    @property
    def score(self) -> float:
        """Signed, impact-weighted contribution of this item to the tilt."""
        direction = SENTIMENT_SCORES.get(self.sentiment, 0.0)
        weight = IMPACT_WEIGHTS.get(self.impact.lower(), 0.0)
        return direction * weight


class SentimentEngine(ABC):
    """Base class for news → tilt aggregators."""

    @abstractmethod
    def tilt(self, news: Iterable[NewsItem]) -> float:
        """Aggregate tilt in [-1, 1]; 0 for no news."""
        raise NotImplementedError


class ImpactWeightedSentiment(SentimentEngine):
    """
    Mean impact-weighted sentiment score.

    Parameters
    ----------
    config : SentimentConfig, optional
        Tilt scale and return floor used by ``adjust``.
    """

    def __init__(self, config: Optional[SentimentConfig] = None):
        self.config = config or SentimentConfig()

    def tilt(self, news: Iterable[NewsItem]) -> float:
        items = tuple(news or ())
        if not items:
            return 0.0
        unknown = sum(
            item.sentiment not in SENTIMENT_SCORES
            or item.impact.lower() not in IMPACT_WEIGHTS
            for item in items
        )
        if unknown:
            logger.debug("%d news item(s) with unknown labels scored as neutral", unknown)
        total = sum(item.score for item in items)
        return clamp(total / len(items), -1.0, 1.0)

    def adjust(self, mu: float, news: Iterable[NewsItem]) -> float:
        """Sentiment-adjusted expected return for *news*."""
        return adjust_expected_return(
            mu, self.tilt(news), self.config.tilt_scale, self.config.mu_floor
        )


def adjust_expected_return(
    mu: float,
    tilt: float,
    scale: float = DEFAULT_TILT_SCALE,
    floor: float = DEFAULT_MU_FLOOR,
) -> float:
    """
    Additive sentiment shift of μ, floored.

    Parameters
    ----------
    mu : float
        Clamped market expected return.
    tilt : float
        Aggregate sentiment in [-1, 1].
    scale : float, default 0.02
        Return shift for a full ±1 tilt.
    floor : float, default 0.05
        Lowest admissible adjusted return.
    """
    return max(floor, mu + tilt * scale)
