"""General utilities for CashPlan

Contents
--------
- Validation helpers
- Rate conversions (annual percent → monthly)
- Calendar helpers (month index, month bounds, month arithmetic)
- Reporting helpers (ratio rounding, currency formatting)
"""

from __future__ import annotations

from datetime import date
from typing import Optional, Tuple

import numpy as np
import pandas as pd

from .constants import MONTHS_PER_YEAR

__all__ = [
    # Validation
    "check_non_negative",
    "check_positive",
    # Rates
    "annual_pct_to_monthly",
    # Calendar
    "month_index",
    "month_bounds",
    "add_months",
    "months_between",
    "clamped_date",
    # Reporting
    "round_ratio",
    "format_currency",
]

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_non_negative(name: str, value: float) -> None:
    """Raise if *value* is negative (strict)."""
    if value < 0:
        raise ValueError(f"{name} must be non-negative (got {value}).")


def check_positive(name: str, value: float) -> None:
    """Raise if *value* is zero or negative."""
    if value <= 0:
        raise ValueError(f"{name} must be positive (got {value}).")


# ---------------------------------------------------------------------------
# Rate conversions
# ---------------------------------------------------------------------------

def annual_pct_to_monthly(rate_pct: float) -> float:
    """Convert a nominal annual percentage rate to its monthly rate.

    Uses: r / 100 / 12 (nominal, not compounded), the convention of
    consumer-loan PMT tables and savings-account interest.
    """
    return float(rate_pct) / 100.0 / MONTHS_PER_YEAR


# ---------------------------------------------------------------------------
# Calendar helpers
# ---------------------------------------------------------------------------

def month_index(start: Optional[date], months: int) -> pd.DatetimeIndex:
    """Construct a first-of-month DatetimeIndex for *months* periods.

    If *start* is None, uses the current month as the first period.
    """
    if months <= 0:
        return pd.DatetimeIndex([], dtype="datetime64[ns]")
    if start is None:
        today = pd.Timestamp.today().normalize()
        first = pd.Timestamp(today.year, today.month, 1)
    else:
        first = pd.Timestamp(start.year, start.month, 1)
    return pd.date_range(start=first, periods=months, freq="MS")


def add_months(start: date, months: int) -> date:
    """First day of the month *months* after the month containing *start*."""
    ts = pd.Timestamp(start.year, start.month, 1) + pd.DateOffset(months=int(months))
    return ts.date()


def month_bounds(start: date, offset: int = 0) -> Tuple[date, date]:
    """Return (first day, last day) of the month *offset* months after *start*."""
    first = pd.Timestamp(add_months(start, offset))
    last = first + pd.offsets.MonthEnd(0)
    return first.date(), last.date()


def months_between(earlier: date, later: date) -> int:
    """Whole calendar months from *earlier*'s month to *later*'s month.

    Day-of-month is ignored; negative when *later* precedes *earlier*.
    """
    return (later.year - earlier.year) * MONTHS_PER_YEAR + (later.month - earlier.month)


def clamped_date(year: int, month: int, day: int) -> date:
    """Build a date, clamping *day* to the length of the target month."""
    last_day = (pd.Timestamp(year, month, 1) + pd.offsets.MonthEnd(0)).day
    return date(year, month, min(day, last_day))


# ---------------------------------------------------------------------------
# Reporting helpers
# ---------------------------------------------------------------------------

def round_ratio(value: float) -> float:
    """Round a percentage ratio to two decimals for reporting."""
    if not np.isfinite(value):
        return float(value)
    return float(np.round(value, 2))


def format_currency(value: float, symbol: str = "NT$", decimals: int = 0) -> str:
    """
    Format an amount for annotations and CLI tables.

    Parameters
    ----------
    value : float
        Monetary value in raw units.
    symbol : str, default 'NT$'
        Currency symbol prefix.
    decimals : int, default 0
        Number of decimal places.

    Examples
    --------
    >>> format_currency(2666)
    'NT$ 2,666'
    >>> format_currency(1234.5, decimals=2)
    'NT$ 1,234.50'
    """
    if value is None or not np.isfinite(value):
        value = 0.0
    return f"{symbol} {value:,.{decimals}f}"
