"""
Income modeling module for CashPlan.

Purpose
-------
Captures where the money comes from: a recurring base salary (monthly or
yearly) plus dated one-time bonuses, and how each bonus is split into
savings, investment, consumption and "special" buckets in the month it is
paid.

Key components
--------------
- BonusAllocation:
    Four independent 0-100 percentages. They are not renormalized; the
    unallocated remainder (100 - sum) stays as unspent cash.
- Bonus:
    One bonus paid every year in calendar month ``month`` (1-12).
- Income:
    Base amount, recurrence unit, bonuses and location tag.
- allocate_bonuses:
    Sums every bonus paid in a given calendar month and splits it into the
    four buckets.

Example
-------
>>> bonus = Bonus("Year-end", 90_000, month=1,
...               allocation=BonusAllocation(savings_pct=50, investment_pct=30))
>>> income = Income(amount=45_000, bonuses=(bonus,))
>>> b = allocate_bonuses(income.bonuses, calendar_month=1)
>>> b.total, b.savings, b.investment
(90000.0, 45000.0, 27000.0)
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Literal, Optional, Tuple

from .constants import DEFAULT_LOCATION, MONTHS_PER_YEAR
from .utils import check_non_negative

__all__ = [
    "BonusAllocation",
    "Bonus",
    "Income",
    "BonusDetail",
    "BonusBreakdown",
    "allocate_bonuses",
]


@dataclass(frozen=True)
class BonusAllocation:
    """Percentages of a bonus routed to each bucket (independent sliders)."""
    savings_pct: float = 0.0
    investment_pct: float = 0.0
    consumption_pct: float = 0.0
    special_pct: float = 0.0
    special_purpose: Optional[str] = None

    def __post_init__(self) -> None:
        for name in ("savings_pct", "investment_pct", "consumption_pct", "special_pct"):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be in [0, 100] (got {value}).")

    @property
    def allocated_pct(self) -> float:
        return self.savings_pct + self.investment_pct + self.consumption_pct + self.special_pct


@dataclass(frozen=True)
class Bonus:
    """
    Yearly one-time bonus.

    Parameters
    ----------
    name : str
    amount : float
        Bonus amount (>= 0).
    month : int
        Calendar month (1-12) the bonus is paid in, every year.
    allocation : BonusAllocation
    id : str, optional
    """
    name: str
    amount: float
    month: int
    allocation: BonusAllocation = field(default_factory=BonusAllocation)
    id: Optional[str] = None

    def __post_init__(self) -> None:
        check_non_negative("bonus amount", self.amount)
        if not 1 <= self.month <= MONTHS_PER_YEAR:
            raise ValueError(f"bonus month must be in 1..12 (got {self.month}).")


@dataclass(frozen=True)
class Income:
    """
    Household income: base salary plus bonuses.

    Parameters
    ----------
    amount : float
        Base income per ``recurrence_unit``.
    recurrence_unit : {"monthly", "yearly"}, default "monthly"
        Yearly amounts are spread evenly over 12 months.
    bonuses : tuple of Bonus
    location : str
        Location tag used for the minimum-living-cost lookup.
    """
    amount: float
    recurrence_unit: Literal["monthly", "yearly"] = "monthly"
    bonuses: Tuple[Bonus, ...] = ()
    location: str = DEFAULT_LOCATION

    def __post_init__(self) -> None:
        if self.recurrence_unit not in ("monthly", "yearly"):
            raise ValueError(
                f"recurrence_unit must be 'monthly' or 'yearly' (got {self.recurrence_unit!r})."
            )
        object.__setattr__(self, "bonuses", tuple(self.bonuses))

    @property
    def monthly_amount(self) -> float:
        """Base income normalized to one month."""
        if self.recurrence_unit == "yearly":
            return self.amount / MONTHS_PER_YEAR
        return float(self.amount)

    @property
    def annual_bonus_total(self) -> float:
        return float(sum(b.amount for b in self.bonuses))


# ---------------------------------------------------------------------------
# Bonus allocation
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class BonusDetail:
    """Split of one bonus paid this month."""
    name: str
    amount: float
    savings: float
    investment: float
    consumption: float
    special: float
    special_purpose: Optional[str] = None


@dataclass(frozen=True)
class BonusBreakdown:
    """All bonuses paid in one month, summed per bucket."""
    total: float = 0.0
    savings: float = 0.0
    investment: float = 0.0
    consumption: float = 0.0
    special: float = 0.0
    details: Tuple[BonusDetail, ...] = ()


def allocate_bonuses(bonuses: Iterable[Bonus], calendar_month: int) -> BonusBreakdown:
    """
    Split every bonus paid in *calendar_month* into its buckets.

    Each bucket receives ``amount * pct / 100``. Percentages are used as
    given; whatever is not allocated is left to the caller as cash.
    """
    details = []
    for bonus in bonuses:
        if bonus.month != calendar_month or bonus.amount <= 0:
            continue
        a = bonus.allocation
        details.append(
            BonusDetail(
                name=bonus.name,
                amount=float(bonus.amount),
                savings=bonus.amount * a.savings_pct / 100,
                investment=bonus.amount * a.investment_pct / 100,
                consumption=bonus.amount * a.consumption_pct / 100,
                special=bonus.amount * a.special_pct / 100,
                special_purpose=a.special_purpose,
            )
        )
    if not details:
        return BonusBreakdown()
    return BonusBreakdown(
        total=sum(d.amount for d in details),
        savings=sum(d.savings for d in details),
        investment=sum(d.investment for d in details),
        consumption=sum(d.consumption for d in details),
        special=sum(d.special for d in details),
        details=tuple(details),
    )
