"""
Savings and investment policy for CashPlan.

Purpose
-------
Decides how much of a month's cash goes to the savings and investment
balances and how those balances grow.

Key Mathematical Framework
--------------------------
- Contributions: S_t = S_base + S_bonus,  I_t = I_base + I_bonus
- Auto-allocation: if net_t > S_t + I_t and S_t + I_t > 0, the surplus
  net_t - S_t - I_t is split in the ratio S_t : I_t
- Balance evolution (compounding):  W_t = W_{t-1} (1 + r) + C_t
- Balance evolution (simple):       W_t = W_{t-1} + C_t

Savings and investment use independent monthly rates derived from the
annual percentages (r = pct / 100 / 12).

Example
-------
>>> allocate_surplus(50_000, 10_000, 10_000)
(25000.0, 25000.0)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

from .constants import DEFAULT_ANNUAL_RETURN_PCT, DEFAULT_SAVINGS_RATE_PCT
from .utils import annual_pct_to_monthly, check_non_negative

__all__ = [
    "InvestmentPolicy",
    "allocate_surplus",
    "grow_balance",
]


@dataclass(frozen=True)
class InvestmentPolicy:
    """
    Monthly savings/investment plan.

    Parameters
    ----------
    monthly_savings : float, default 0
        Base amount moved to savings every month.
    monthly_investment : float, default 0
        Base amount invested every month.
    annual_return_pct : float, default 7.0
        Expected annual return of the investment balance, in percent.
    savings_rate_pct : float, default 1.5
        Annual interest of the savings balance, in percent.
    compound_interest : bool, default True
        Grow balances by their monthly rate before adding contributions.
        Without it balances are plain sums of contributions.
    auto_allocate : bool, default False
        Route a month's surplus (net above the planned contributions) to
        savings and investment in proportion to the planned amounts.
    """
    monthly_savings: float = 0.0
    monthly_investment: float = 0.0
    annual_return_pct: float = DEFAULT_ANNUAL_RETURN_PCT
    savings_rate_pct: float = DEFAULT_SAVINGS_RATE_PCT
    compound_interest: bool = True
    auto_allocate: bool = False

    def __post_init__(self) -> None:
        check_non_negative("monthly_savings", self.monthly_savings)
        check_non_negative("monthly_investment", self.monthly_investment)

    @property
    def monthly_investment_rate(self) -> float:
        return annual_pct_to_monthly(self.annual_return_pct)

    @property
    def monthly_savings_rate(self) -> float:
        return annual_pct_to_monthly(self.savings_rate_pct)


def allocate_surplus(net: float, savings: float, investment: float) -> Tuple[float, float]:
    """
    Add the month's surplus to the planned contributions, pro rata.

    Nothing changes when there is no surplus or when both planned amounts
    are zero (there is no ratio to split by).
    """
    planned = savings + investment
    if net <= planned or planned <= 0:
        return float(savings), float(investment)
    surplus = net - planned
    return savings + surplus * savings / planned, investment + surplus * investment / planned


def grow_balance(balance: float, monthly_rate: float, contribution: float, compound: bool) -> float:
    """One month of balance evolution."""
    if compound:
        return balance * (1.0 + monthly_rate) + contribution
    return balance + contribution
