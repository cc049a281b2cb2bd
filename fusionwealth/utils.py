"""General utilities for FusionWealth

Contents
--------
- Validation helpers
- Numeric helpers (clamp, half-up rounding)
- Annuity helpers (present-value factor)
- Reporting helpers (format_currency)
- Logging setup (configure_logging)
"""

from __future__ import annotations

import logging
import math
from typing import Optional, Union

from .exceptions import ValidationError

__all__ = [
    # Validation
    "check_non_negative",
    # Numeric
    "clamp",
    "round_half_up",
    # Annuities
    "annuity_factor",
    # Reporting
    "format_currency",
    # Logging
    "configure_logging",
    "LOG_FORMAT",
]

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_non_negative(name: str, value: float) -> None:
    """Raise if *value* is negative, NaN or infinite."""
    if not (value >= 0 and math.isfinite(value)):
        raise ValidationError(f"{name} must be non-negative (got {value}).")


# ---------------------------------------------------------------------------
# Numeric helpers
# ---------------------------------------------------------------------------

def clamp(value: float, lower: float, upper: float) -> float:
    """Clamp *value* into [lower, upper]. NaN maps to *lower*."""
    if math.isnan(value):
        return float(lower)
    return float(min(max(value, lower), upper))


def round_half_up(value: float) -> int:
    """Round to the nearest integer, ties away from zero for positives.

    Python's ``round`` uses banker's rounding (``round(70.5) == 70``);
    fitness scores are reported with the conventional half-up rule.
    """
    return int(math.floor(value + 0.5))


# ---------------------------------------------------------------------------
# Annuity helpers
# ---------------------------------------------------------------------------

def annuity_factor(rate: float, periods: Union[int, float]) -> float:
    """Present value of 1 per period for *periods* periods at *rate*.

    a(n) = (1 - (1 + r) ** -n) / r

    Degenerate inputs are resolved before dividing: ``periods <= 0`` gives 0
    and ``rate == 0`` gives the undiscounted sum ``periods``.
    """
    if periods <= 0:
        return 0.0
    if abs(rate) < 1e-12:
        return float(periods)
    return float((1.0 - (1.0 + rate) ** (-periods)) / rate)


# ---------------------------------------------------------------------------
# Reporting helpers
# ---------------------------------------------------------------------------

def format_currency(value, decimals=1, symbol='₹', unit='L'):
    """
    Format currency values for text summaries and tables.

    Parameters
    ----------
    value : float
        Monetary value in raw units.
    decimals : int, default 1
        Number of decimal places to display.
    symbol : str, default '₹'
        Currency symbol prefix.
    unit : str, default 'L'
        Scale suffix: 'L' (lakh, 1e5), 'Cr' (crore, 1e7), 'M' (1e6) or ''
        for raw units with thousands separators.

    Returns
    -------
    str
        Formatted currency string.

    Examples
    --------
    >>> format_currency(2_500_000)
    '₹25.0L'
    >>> format_currency(25_000_000, unit='Cr', decimals=2)
    '₹2.50Cr'
    >>> format_currency(1234.5, unit='', decimals=0)
    '₹1,234'
    """
    scale = {"L": 1e5, "Cr": 1e7, "M": 1e6, "": 1.0}.get(unit)
    if scale is None:
        raise ValueError(f"unit must be one of 'L', 'Cr', 'M', '' (got {unit!r}).")
    val = float(value) / scale
    if unit == "":
        return f'{symbol}{val:,.{decimals}f}'
    return f'{symbol}{val:.{decimals}f}{unit}'


# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

LOG_FORMAT = "%(asctime)s - %(name)s - [%(levelname)s] - %(message)s"


def configure_logging(level: Union[int, str] = "INFO", logger_name: Optional[str] = None) -> logging.Logger:
    """Attach a single console handler to the package logger.

    Safe to call repeatedly: the level is updated but no duplicate handler
    is added.
    """
    logger = logging.getLogger(logger_name or "fusionwealth")
    logger.setLevel(level)
    if not logger.handlers:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(handler)
    return logger
