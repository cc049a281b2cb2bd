"""
Unit tests for utils.py module.

Tests validation, numeric helpers, annuities, formatting and logging setup.
"""

import logging
import math

import pytest

from fusionwealth.exceptions import ValidationError
from fusionwealth.utils import (
    LOG_FORMAT,
    annuity_factor,
    check_non_negative,
    clamp,
    configure_logging,
    format_currency,
    round_half_up,
)


class TestValidation:
    """Test input validation functions."""

    def test_check_non_negative_valid(self):
        """Zero and positive values should pass."""
        check_non_negative("test", 0)
        check_non_negative("test", 1.5)

    def test_check_non_negative_invalid(self):
        """Negative values raise ValidationError (a ValueError)."""
        with pytest.raises(ValidationError, match="test must be non-negative"):
            check_non_negative("test", -0.1)
        with pytest.raises(ValueError):
            check_non_negative("test", -100)

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
    def test_check_non_negative_non_finite(self, value):
        """NaN and infinities are rejected."""
        with pytest.raises(ValidationError):
            check_non_negative("test", value)


class TestNumeric:
    """Test clamp and rounding helpers."""

    @pytest.mark.parametrize("value,expected", [(-1.0, 0.0), (0.5, 0.5), (2.0, 1.0)])
    def test_clamp(self, value, expected):
        assert clamp(value, 0.0, 1.0) == expected

    def test_clamp_nan_maps_to_lower(self):
        assert clamp(float("nan"), 1.0, 10.0) == 1.0

    @pytest.mark.parametrize("value,expected", [
        (70.5, 71),
        (71.49, 71),
        (0.5, 1),
        (0.0, 0),
        (99.999, 100),
    ])
    def test_round_half_up(self, value, expected):
        assert round_half_up(value) == expected


class TestAnnuity:
    """Test the present-value annuity factor."""

    def test_known_value(self):
        expected = (1 - 1.04 ** -30) / 0.04
        assert annuity_factor(0.04, 30) == pytest.approx(expected)

    def test_zero_periods(self):
        assert annuity_factor(0.04, 0) == 0.0
        assert annuity_factor(0.04, -5) == 0.0

    def test_zero_rate(self):
        assert annuity_factor(0.0, 12) == 12.0

    def test_decreasing_in_rate(self):
        assert annuity_factor(0.08, 20) < annuity_factor(0.02, 20)

    def test_finite_for_large_horizon(self):
        assert math.isfinite(annuity_factor(0.04, 1000))


class TestFormatting:
    """Test currency formatting."""

    def test_lakhs(self):
        assert format_currency(2_500_000) == "₹25.0L"

    def test_crores(self):
        assert format_currency(25_000_000, unit="Cr", decimals=2) == "₹2.50Cr"

    def test_plain(self):
        assert format_currency(70_000, unit="") == "₹70,000.0"

    def test_invalid_unit(self):
        with pytest.raises(ValueError, match="unit"):
            format_currency(1, unit="K")


class TestLogging:
    """Test configure_logging."""

    def test_idempotent(self):
        logger = configure_logging("DEBUG", logger_name="fusionwealth.test_utils")
        configure_logging("INFO", logger_name="fusionwealth.test_utils")
        assert len(logger.handlers) == 1
        assert logger.level == logging.INFO

    def test_format(self):
        logger = configure_logging("WARNING", logger_name="fusionwealth.test_fmt")
        assert logger.handlers[0].formatter._fmt == LOG_FORMAT
