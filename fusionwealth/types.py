"""
Type definitions for FusionWealth.

Purpose
-------
TypedDict definitions for the plain-dictionary shapes that cross module
boundaries: tax breakdowns and cache statistics.

Type Definitions
----------------
TaxBreakdownDict
    Output of TaxEngine.compute: {"net_monthly", "tax_monthly"}

CacheInfoDict
    Orchestrator memoization statistics: {"hits", "misses", "size", "max_size"}
"""

from typing_extensions import TypedDict

__all__ = [
    "TaxBreakdownDict",
    "CacheInfoDict",
]


class TaxBreakdownDict(TypedDict):
    """
    Monthly tax split of a gross income.

    Attributes
    ----------
    net_monthly : float
        Income after tax.
    tax_monthly : float
        Tax withheld (tax leakage).

    Examples
    --------
    >>> breakdown: TaxBreakdownDict = {"net_monthly": 70_000.0, "tax_monthly": 30_000.0}
    """

    net_monthly: float
    tax_monthly: float


class CacheInfoDict(TypedDict):
    """Memoization statistics reported by ``Orchestrator.cache_info()``."""

    hits: int
    misses: int
    size: int
    max_size: int
