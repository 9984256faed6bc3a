"""
Date-cycle resolution for CashPlan.

Purpose
-------
Decides whether a calendar month contains a due payment for an expense,
given the expense's declared payment anchor date and cycle policy.

Key components
--------------
- Horizon:
    The projection window: month 0 is the calendar month containing the
    ``as_of`` date; month ``m`` spans ``bounds(m)``.
- Anchor:
    Parsed payment anchor (date + cycle policy). Malformed anchor text
    fails open: the anchor behaves as "no date" (due every month) and a
    DataQualityWarning is emitted.
- is_due_this_month:
    Core predicate for "statement" (same day each calendar month) and
    "fixed" (every ``cycle_days`` days from the anchor) cycles.
- is_anniversary_month:
    Predicate for charges that fall once a year on the anchor's month/day.

Calendar conventions
--------------------
- Statement cycles clamp the anchor's day to the target month's length
  (an anchor on the 31st is due on Feb 28/29).
- Fixed cycles only ever step forward from the anchor; a month before
  the anchor is never due.
"""

from __future__ import annotations

import logging
import math
import warnings
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Literal, Optional, Tuple, Union

import numpy as np
import pandas as pd

from .constants import DEFAULT_CYCLE_DAYS, MONTHS_PER_YEAR
from .exceptions import DataQualityWarning
from .utils import add_months, check_positive, clamped_date, month_bounds, month_index

logger = logging.getLogger(__name__)

__all__ = [
    "CycleType",
    "Horizon",
    "Anchor",
    "parse_anchor_date",
    "is_due_this_month",
    "is_anniversary_month",
]

CycleType = Literal["fixed", "statement"]
AnchorLike = Union[str, date, datetime, None]


# ---------------------------------------------------------------------------
# Horizon
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Horizon:
    """
    Projection window of ``months`` calendar months.

    Parameters
    ----------
    start : date
        Any date inside month 0; normalized to the first of that month.
    months : int
        Number of projected months (>= 1).

    Examples
    --------
    >>> h = Horizon(date(2025, 8, 19), 6)
    >>> h.bounds(0)
    (datetime.date(2025, 8, 1), datetime.date(2025, 8, 31))
    >>> h.calendar_month(5)
    1
    """
    start: date
    months: int

    def __post_init__(self) -> None:
        check_positive("months", self.months)
        object.__setattr__(self, "start", date(self.start.year, self.start.month, 1))

    @classmethod
    def from_as_of(cls, as_of: Optional[date], months: int) -> "Horizon":
        """Horizon starting at the month of *as_of* (today if None)."""
        if as_of is None:
            as_of = date.today()
        return cls(as_of, months)

    def __len__(self) -> int:
        return self.months

    def month_start(self, m: int) -> date:
        return add_months(self.start, m)

    def bounds(self, m: int) -> Tuple[date, date]:
        """First and last day of horizon month *m*."""
        return month_bounds(self.start, m)

    def calendar_month(self, m: int) -> int:
        """Calendar month number (1-12) of horizon month *m*."""
        return (self.start.month - 1 + m) % MONTHS_PER_YEAR + 1

    def index(self) -> pd.DatetimeIndex:
        """First-of-month DatetimeIndex covering the horizon."""
        return month_index(self.start, self.months)


# ---------------------------------------------------------------------------
# Anchor parsing
# ---------------------------------------------------------------------------

def parse_anchor_date(raw: AnchorLike) -> Optional[date]:
    """
    Parse a payment anchor into a date.

    Returns None for missing/blank anchors; raises ValueError when the
    value is present but not a date.
    """
    if raw is None:
        return None
    if isinstance(raw, datetime):
        return raw.date()
    if isinstance(raw, date):
        return raw
    if not isinstance(raw, str):
        raise ValueError(f"anchor date must be an ISO date string, got {type(raw).__name__}")
    text = raw.strip()
    if not text:
        return None
    ts = pd.Timestamp(text)
    if pd.isna(ts):
        raise ValueError(f"unparseable anchor date {raw!r}")
    return ts.date()


@dataclass(frozen=True)
class Anchor:
    """
    Payment anchor of an expense and its cycle policy.

    Parameters
    ----------
    when : date, optional
        Anchor date. None means "no date": due every month.
    cycle_type : {"statement", "fixed"}, default "statement"
        "statement": due on the anchor's day of every calendar month.
        "fixed": due every ``cycle_days`` days counted from the anchor.
    cycle_days : int, default 30
        Cycle length for fixed cycles.
    malformed : str, optional
        Original text of an anchor that failed to parse. Set by
        ``Anchor.parse``; the anchor then behaves as ``when=None``.
    """
    when: Optional[date] = None
    cycle_type: CycleType = "statement"
    cycle_days: int = DEFAULT_CYCLE_DAYS
    malformed: Optional[str] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if self.cycle_type not in ("fixed", "statement"):
            raise ValueError(f"cycle_type must be 'fixed' or 'statement' (got {self.cycle_type!r}).")
        check_positive("cycle_days", self.cycle_days)

    @classmethod
    def parse(
        cls,
        raw: AnchorLike,
        cycle_type: CycleType = "statement",
        cycle_days: Optional[int] = None,
        *,
        label: str = "expense",
    ) -> "Anchor":
        """
        Build an Anchor from raw record values, failing open on bad dates.

        A present-but-unparseable date is logged, reported as a
        DataQualityWarning and treated as "no anchor".
        """
        days = int(cycle_days) if cycle_days else DEFAULT_CYCLE_DAYS
        try:
            when = parse_anchor_date(raw)
        except (ValueError, TypeError, OverflowError) as e:
            message = f"{label}: {e}; treating the payment as due every month"
            logger.warning(message)
            warnings.warn(message, DataQualityWarning, stacklevel=2)
            return cls(None, cycle_type, days, malformed=str(raw))
        return cls(when, cycle_type, days)

    def is_due(self, month_start: date, month_end: date) -> bool:
        return is_due_this_month(self.when, self.cycle_type, self.cycle_days, month_start, month_end)

    def due_mask(self, horizon: Horizon) -> np.ndarray:
        """Boolean array: is horizon month m due under this anchor?"""
        return np.array([self.is_due(*horizon.bounds(m)) for m in range(len(horizon))], dtype=bool)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------

def is_due_this_month(
    anchor_date: AnchorLike,
    cycle_type: CycleType,
    cycle_days: Optional[int],
    month_start: date,
    month_end: date,
) -> bool:
    """
    Does the month [month_start, month_end] contain a due payment?

    Parameters
    ----------
    anchor_date : date or str, optional
        Declared payment anchor. None/blank means due every month; an
        unparseable string fails open (due) with a DataQualityWarning.
    cycle_type : {"statement", "fixed"}
    cycle_days : int, optional
        Fixed-cycle length in days (default 30).
    month_start, month_end : date
        Inclusive bounds of the target month.

    Examples
    --------
    >>> is_due_this_month(date(2025, 1, 31), "statement", None,
    ...                   date(2025, 2, 1), date(2025, 2, 28))
    True
    >>> is_due_this_month(date(2025, 1, 1), "fixed", 45,
    ...                   date(2025, 2, 1), date(2025, 2, 28))
    True
    """
    if not isinstance(anchor_date, date):
        try:
            anchor_date = parse_anchor_date(anchor_date)
        except (ValueError, TypeError, OverflowError) as e:
            message = f"{e}; treating the payment as due"
            logger.warning(message)
            warnings.warn(message, DataQualityWarning, stacklevel=2)
            return True
    elif isinstance(anchor_date, datetime):
        anchor_date = anchor_date.date()

    if anchor_date is None:
        return True

    if cycle_type == "fixed":
        step = int(cycle_days) if cycle_days else DEFAULT_CYCLE_DAYS
        if step <= 0:
            raise ValueError(f"cycle_days must be positive (got {cycle_days}).")
        occurrence = anchor_date
        if occurrence < month_start:
            # jump straight to the first occurrence on or after month_start
            steps = math.ceil((month_start - occurrence).days / step)
            occurrence = occurrence + timedelta(days=steps * step)
        return month_start <= occurrence <= month_end

    payment = clamped_date(month_start.year, month_start.month, anchor_date.day)
    return month_start <= payment <= month_end


def is_anniversary_month(anchor_date: Optional[date], month_start: date, month_end: date) -> bool:
    """True when the anchor's month/day falls inside [month_start, month_end]."""
    if anchor_date is None:
        return False
    if month_start.month != anchor_date.month:
        return False
    payment = clamped_date(month_start.year, anchor_date.month, anchor_date.day)
    return month_start <= payment <= month_end
