"""
Custom exceptions for FusionWealth.

Purpose
-------
Provides a unified exception hierarchy for the data boundary of the engine.
The quantitative core degrades gracefully (clamping, neutral defaults,
best-effort solver estimates) and does not raise for in-range inputs;
these exceptions surface only when inputs cannot be interpreted at all.

Exception Hierarchy
-------------------
FusionWealthError (base)
├── ConfigurationError - Invalid engine configuration
├── ValidationError - Domain object validation failures
│   └── GoalError - Inconsistent goal collections
└── SerializationError - Unreadable or malformed scenario files

Usage
-----
>>> from fusionwealth.exceptions import SerializationError
>>> try:
...     scenario = load_scenario(path)
... except FusionWealthError as e:
...     print(f"FusionWealth error: {e}")
"""


class FusionWealthError(Exception):
    """
    Base exception for all FusionWealth errors.

    Examples
    --------
    >>> try:
    ...     load_scenario("household.json")
    ... except FusionWealthError as e:
    ...     logger.error("Scenario rejected: %s", e)
    """
    pass


class ConfigurationError(FusionWealthError):
    """
    Invalid engine configuration.

    Raised when an engine is wired with parameters it cannot use, such as
    a non-positive path count or a confidence outside (0, 1).

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "n_paths must be positive, got 0. "
    ...     "Use at least 100 paths for stable percentiles."
    ... )
    """
    pass


class ValidationError(FusionWealthError, ValueError):
    """
    Domain object validation failures.

    Subclasses ``ValueError`` so callers validating plain user edits can
    catch either.

    Examples
    --------
    >>> raise ValidationError(f"target_age ({target_age}) must be >= age ({age})")
    """
    pass


class GoalError(ValidationError):
    """
    Inconsistent goal collections.

    Raised for duplicated goal ids or an unknown allocation policy.

    Examples
    --------
    >>> raise GoalError("duplicate goal id '1'")
    """
    pass


class SerializationError(FusionWealthError):
    """
    Unreadable or malformed scenario files.

    Examples
    --------
    >>> raise SerializationError(
    ...     f"Unsupported schema_version {version!r}; expected {SCHEMA_VERSION!r}"
    ... )
    """
    pass
