"""
Flat effective-rate tax model.

Net income feeds every downstream quantity (human capital, consumption,
Monte Carlo contributions). The rate comes from ``TaxConfig.rate``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from .constants import DEFAULT_TAX_RATE
from .exceptions import ConfigurationError
from .types import TaxBreakdownDict

__all__ = ["TaxEngine", "FlatTaxEngine"]


class TaxEngine(ABC):
    """Base class for gross → net income conversions."""

    @abstractmethod
    def compute(self, gross_monthly: float) -> TaxBreakdownDict:
        """Return ``{"net_monthly", "tax_monthly"}`` for a gross monthly income."""
        raise NotImplementedError


class FlatTaxEngine(TaxEngine):
    """
    Single flat effective rate applied to gross income.

    Parameters
    ----------
    rate : float, default 0.30
        Effective tax rate in [0, 1).

    Examples
    --------
    >>> FlatTaxEngine(rate=0.30).compute(100_000)
    {'net_monthly': 70000.0, 'tax_monthly': 30000.0}
    """

    def __init__(self, rate: float = DEFAULT_TAX_RATE):
        if not (0.0 <= rate < 1.0):
            raise ConfigurationError(f"tax rate must be in [0, 1), got {rate}")
        self.rate = float(rate)

    def compute(self, gross_monthly: float) -> TaxBreakdownDict:
        gross = max(0.0, float(gross_monthly))
        tax = gross * self.rate
        return {"net_monthly": gross - tax, "tax_monthly": tax}

    def __repr__(self) -> str:
        return f"FlatTaxEngine(rate={self.rate:.2%})"
