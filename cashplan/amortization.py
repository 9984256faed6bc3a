"""
Closed-form loan amortization for CashPlan.

Purpose
-------
Level-payment (PMT) amortization formulas shared by the monthly projection
and the debt analysis. Every payment figure in the package comes from the
functions below, so the month-by-month projection and the debt ratios can
never disagree about a loan's payment.

Mathematical Model
------------------
With monthly rate i = r / 1200 (r in percent) and n periods:

    PMT(P, r, n)        = P * i (1+i)^n / ((1+i)^n - 1)
    B(P, r, n, k)       = P * ((1+i)^n - (1+i)^k) / ((1+i)^n - 1)
    P(A, r, n)          = A * ((1+i)^n - 1) / (i (1+i)^n)     (PMT inverse)

For r = 0 the formulas degrade to straight-line amortization:
    PMT = P / n,  B = P (n - k) / n,  P = A n.

Example
-------
>>> monthly_payment(120_000, 0, 12)
10000.0
>>> remaining_balance(1_000_000, 2.5, 84, 84)
0.0
"""

from __future__ import annotations

from typing import Union

import numpy as np
import pandas as pd

from .utils import annual_pct_to_monthly

__all__ = [
    "monthly_payment",
    "remaining_balance",
    "principal_from_payment",
    "total_interest",
    "amortization_schedule",
]

Number = Union[int, float]


def monthly_payment(principal: Number, annual_rate_pct: Number, periods: Number) -> float:
    """
    Level monthly payment that amortizes *principal* over *periods* months.

    Parameters
    ----------
    principal : float
        Outstanding principal. Non-positive principal yields 0.
    annual_rate_pct : float
        Nominal annual rate in percent (2.5 means 2.5%).
    periods : int
        Number of monthly payments. Non-positive periods yield 0.

    Returns
    -------
    float
        Payment per period; ``principal / periods`` when the rate is 0.
    """
    if principal <= 0 or periods <= 0:
        return 0.0
    i = annual_pct_to_monthly(annual_rate_pct)
    if i == 0:
        return float(principal) / periods
    growth = (1.0 + i) ** periods
    return float(principal * i * growth / (growth - 1.0))


def remaining_balance(principal: Number, annual_rate_pct: Number, periods: Number, paid: Number) -> float:
    """
    Outstanding balance after *paid* of *periods* level payments.

    Returns 0 once ``paid >= periods``; equals *principal* when ``paid == 0``.
    """
    if paid >= periods:
        return 0.0
    if principal <= 0:
        return 0.0
    paid = max(0, paid)
    i = annual_pct_to_monthly(annual_rate_pct)
    if i == 0:
        return float(principal) * (periods - paid) / periods
    growth_n = (1.0 + i) ** periods
    growth_k = (1.0 + i) ** paid
    return float(principal * (growth_n - growth_k) / (growth_n - 1.0))


def principal_from_payment(payment: Number, annual_rate_pct: Number, periods: Number) -> float:
    """
    Largest principal a level *payment* can amortize over *periods* months.

    Inverse of ``monthly_payment``: ``monthly_payment(principal_from_payment(A, r, n), r, n) == A``.
    """
    if payment <= 0 or periods <= 0:
        return 0.0
    i = annual_pct_to_monthly(annual_rate_pct)
    if i == 0:
        return float(payment) * periods
    growth = (1.0 + i) ** periods
    return float(payment * (growth - 1.0) / (i * growth))


def total_interest(principal: Number, annual_rate_pct: Number, periods: Number) -> float:
    """Interest paid over the life of a level-payment loan."""
    return monthly_payment(principal, annual_rate_pct, periods) * max(periods, 0) - max(principal, 0)


def amortization_schedule(principal: Number, annual_rate_pct: Number, periods: int) -> pd.DataFrame:
    """
    Period-by-period amortization table.

    Returns
    -------
    pd.DataFrame
        Indexed by period (1..n) with columns ``payment``, ``interest``,
        ``principal`` and ``balance`` (balance after the payment).
        Empty when there is nothing to amortize.
    """
    columns = ["payment", "interest", "principal", "balance"]
    if principal <= 0 or periods <= 0:
        return pd.DataFrame(columns=columns, index=pd.RangeIndex(1, 1, name="period"), dtype=float)

    k = np.arange(1, periods + 1)
    i = annual_pct_to_monthly(annual_rate_pct)
    payment = monthly_payment(principal, annual_rate_pct, periods)
    if i == 0:
        balance = principal * (periods - k) / periods
    else:
        growth_n = (1.0 + i) ** periods
        balance = principal * (growth_n - (1.0 + i) ** k) / (growth_n - 1.0)
    balance = np.maximum(balance, 0.0)
    previous = np.concatenate(([float(principal)], balance[:-1]))
    interest = previous * i
    return pd.DataFrame(
        {
            "payment": np.full(periods, payment),
            "interest": interest,
            "principal": previous - balance,
            "balance": balance,
        },
        index=pd.Index(k, name="period"),
    )
