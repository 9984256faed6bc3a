"""
Custom exceptions for CashPlan.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all CashPlan modules. All exceptions inherit from CashPlanError,
enabling catch-all handling when needed.

Exception Hierarchy
-------------------
CashPlanError (base)
├── ConfigurationError - Invalid configuration or parameters
├── ValidationError - Precondition violations (abort a projection)
│   └── TimeIndexError - Horizon/month indexing errors
└── RecordError - A single expense/loan record cannot be resolved

DataQualityWarning (UserWarning) - recovered per-record issues

Usage
-----
>>> from cashplan.exceptions import ValidationError
>>>
>>> # Raise specific exception
>>> raise ValidationError("income.amount must be a positive number (got 0)")
>>>
>>> # Catch all CashPlan exceptions
>>> try:
...     result = project(income, expenses, policy, 12)
... except CashPlanError as e:
...     print(f"CashPlan error: {e}")
"""

__all__ = [
    "CashPlanError",
    "ConfigurationError",
    "ValidationError",
    "TimeIndexError",
    "RecordError",
    "DataQualityWarning",
]


class CashPlanError(Exception):
    """
    Base exception for all CashPlan errors.

    Examples
    --------
    >>> try:
    ...     project(income, expenses, policy, 12)
    ... except CashPlanError as e:
    ...     logger.error(f"Projection failed: {e}")
    """
    pass


class ConfigurationError(CashPlanError):
    """
    Invalid configuration or parameters.

    Raised when a scenario file cannot be used, such as:
    - A file that is not valid JSON
    - A top-level value that is not an object
    - Records that do not match the scenario schema

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "invalid scenario in household.json: prediction_months must be <= 120"
    ... )
    """
    pass


class ValidationError(CashPlanError):
    """
    Precondition violations.

    Raised before any computation starts when the inputs of a projection
    are unusable, such as:
    - Non-numeric or non-positive income amount
    - An expense collection that is not a list
    - Missing investment policy

    Messages always name the field and the violated constraint.

    Examples
    --------
    >>> raise ValidationError(
    ...     "income.amount must be a positive number (got -5). "
    ...     "Enter the monthly (or yearly) base salary."
    ... )
    """
    pass


class TimeIndexError(ValidationError):
    """
    Horizon/month indexing errors.

    Raised when month specifications are invalid:
    - Prediction horizon outside [1, 120]
    - Month index outside the projected horizon

    Examples
    --------
    >>> raise TimeIndexError(
    ...     f"prediction_months must be an integer in [1, 120], got {months}."
    ... )
    """
    pass


class RecordError(CashPlanError):
    """
    A single expense or loan record cannot be resolved.

    Never escapes a projection: the driver turns it into a diagnostic and
    treats the record's contribution as zero.
    """
    pass


class DataQualityWarning(UserWarning):
    """
    Recovered per-record data-quality issue.

    Emitted through ``warnings.warn`` for unparseable anchor dates,
    loans with non-positive principal or periods, and records that had to
    be skipped. The projection continues.
    """
    pass
