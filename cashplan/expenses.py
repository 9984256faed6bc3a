"""
Expense lifecycle module for CashPlan.

Purpose
-------
Resolves, for every projected month, what an expense charges and where it
is in its lifecycle. The record's flags (type, annual repetition, early
payoff, cycle type) describe mutually exclusive lifecycles, modeled here
as one frozen dataclass per lifecycle:

- MonthlyExpense: full amount every month, never terminates.
- YearlyExpense: full amount once a year, in the anchor month.
- FiniteInstallment: ``total_installments`` equal charges (credit-card
  installments). Counting starts at ``paid_installments`` (paid before the
  horizon) and the plan is terminal once the count reaches the total.
- RepeatingInstallment: an installment plan restarting every year at the
  anchor month (insurance paid in N installments). Each cycle year may be
  reconfigured through ``yearly_plans``; a completed cycle charges nothing
  until the next one starts.

Installment plans take an optional EarlyPayoff decorator: in month
``min(payoff month, remaining installments)`` the rest of the plan is
cleared with one lump charge, reported as an early payoff rather than an
ordinary expense, and nothing is charged afterwards.

Every resolved month carries a human-readable annotation ("installment
4/12", "paid off early", ...). Annotations are informative only.

Example
-------
>>> from datetime import date
>>> from cashplan.cycles import Horizon
>>> plan = FiniteInstallment("Phone 12/12", 1_000, total_installments=12,
...                          paid_installments=9)
>>> [c.amount for c in plan.resolve(Horizon(date(2025, 1, 1), 5))]
[1000.0, 1000.0, 1000.0, 0.0, 0.0]
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import date
from typing import ClassVar, Dict, List, Mapping, Optional, Tuple

import numpy as np
import pandas as pd

from .constants import MONTHS_PER_YEAR
from .cycles import Anchor, Horizon, is_anniversary_month
from .utils import check_non_negative, check_positive, format_currency, months_between

__all__ = [
    "EarlyPayoff",
    "YearlyPlan",
    "ExpenseCharge",
    "ExpenseStream",
    "MonthlyExpense",
    "YearlyExpense",
    "FiniteInstallment",
    "RepeatingInstallment",
    "ExpenseModel",
    "ResolvedExpense",
]


# ---------------------------------------------------------------------------
# Building blocks
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EarlyPayoff:
    """Clear an installment plan in 1-based horizon month ``month``."""
    month: int

    def __post_init__(self) -> None:
        if self.month < 1:
            raise ValueError(f"payoff month must be >= 1 (got {self.month}).")


@dataclass(frozen=True)
class YearlyPlan:
    """Reconfiguration of one cycle year of a repeating plan."""
    installments: int
    amount: float
    bank: Optional[str] = None

    def __post_init__(self) -> None:
        check_positive("installments", self.installments)
        check_non_negative("amount", self.amount)


@dataclass(frozen=True)
class ExpenseCharge:
    """
    One expense in one month.

    Attributes
    ----------
    amount : float
        Charge for the month (the lump sum when ``is_early_payoff``).
    annotation : str, optional
        Lifecycle note for reports; None when nothing happens this month.
    is_early_payoff : bool
        The amount settles the plan from accumulated assets and is not an
        ordinary expense.
    is_active : bool
        False once the plan is completed, paid off, or not started.
    """
    amount: float = 0.0
    annotation: Optional[str] = None
    is_early_payoff: bool = False
    is_active: bool = True


_IDLE = ExpenseCharge()
_INACTIVE = ExpenseCharge(is_active=False)


class ExpenseStream(ABC):
    """Common interface of the expense lifecycles."""

    kind: ClassVar[str]
    name: str
    amount: float

    @abstractmethod
    def resolve(self, horizon: Horizon) -> List[ExpenseCharge]:
        """One ExpenseCharge per horizon month, in month order."""

    @abstractmethod
    def steady_monthly_amount(self, horizon_months: int) -> float:
        """Monthly outflow once the horizon is over (0 for finished plans)."""

    @property
    def is_installment(self) -> bool:
        return False


# ---------------------------------------------------------------------------
# Recurring expenses
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MonthlyExpense(ExpenseStream):
    """Fixed charge every month (rent, utilities, subscriptions)."""
    name: str
    amount: float
    anchor: Anchor = field(default_factory=Anchor)
    bank: Optional[str] = None
    id: Optional[str] = None

    kind: ClassVar[str] = "monthly"

    def __post_init__(self) -> None:
        check_non_negative("amount", self.amount)

    def resolve(self, horizon: Horizon) -> List[ExpenseCharge]:
        charge = ExpenseCharge(float(self.amount), f"{self.name} (monthly): {format_currency(self.amount)}")
        return [charge] * len(horizon)

    def steady_monthly_amount(self, horizon_months: int) -> float:
        return float(self.amount)


@dataclass(frozen=True)
class YearlyExpense(ExpenseStream):
    """
    Full amount once a year, in the anchor's month.

    Without an anchor date the charge falls in the horizon's first month
    and every twelve months after it.
    """
    name: str
    amount: float
    anchor: Anchor = field(default_factory=Anchor)
    bank: Optional[str] = None
    id: Optional[str] = None

    kind: ClassVar[str] = "yearly"

    def __post_init__(self) -> None:
        check_non_negative("amount", self.amount)

    def resolve(self, horizon: Horizon) -> List[ExpenseCharge]:
        anniversary = self.anchor.when or horizon.start
        charges = []
        for m in range(len(horizon)):
            start, end = horizon.bounds(m)
            if is_anniversary_month(anniversary, start, end):
                charges.append(
                    ExpenseCharge(
                        float(self.amount),
                        f"{self.name} ({start.year} yearly payment): {format_currency(self.amount)}",
                    )
                )
            else:
                charges.append(_IDLE)
        return charges

    def steady_monthly_amount(self, horizon_months: int) -> float:
        return self.amount / MONTHS_PER_YEAR


# ---------------------------------------------------------------------------
# Installment plans
# ---------------------------------------------------------------------------

def _apply_early_payoff(
    name: str,
    payoff: EarlyPayoff,
    remaining_at_start: int,
    amount: float,
    charges: List[ExpenseCharge],
) -> List[ExpenseCharge]:
    """
    Overlay an early payoff on a resolved installment plan.

    The plan is cleared in month ``k = min(payoff.month, remaining_at_start)``
    with one lump of the ``remaining_at_start - (k - 1)`` installments still
    owed, whatever cycle boundaries fall before it. A plan with nothing
    left at horizon start never charges again.
    """
    if remaining_at_start <= 0:
        return [_INACTIVE] * len(charges)
    payoff_month = min(payoff.month, remaining_at_start)
    result = list(charges)
    for m in range(len(charges)):
        t = m + 1
        if t < payoff_month:
            continue
        if t == payoff_month:
            left = remaining_at_start - (payoff_month - 1)
            lump = amount * left
            result[m] = ExpenseCharge(
                float(lump),
                f"{name} paid off early ({left} installments left): {format_currency(lump)}",
                is_early_payoff=lump > 0,
                is_active=lump > 0,
            )
        else:
            result[m] = _INACTIVE
    return result


def _progress_note(name: str, n: int, total: int, amount: float, prefix: str = "") -> str:
    if n >= total:
        return f"{name}{prefix} installment {total}/{total} completed: {format_currency(amount)}"
    return f"{name}{prefix} installment {n}/{total}: {format_currency(amount)}"


@dataclass(frozen=True)
class FiniteInstallment(ExpenseStream):
    """
    Installment plan that ends for good after ``total_installments``.

    Parameters
    ----------
    name : str
    amount : float
        Amount of one installment.
    total_installments : int
        Number of installments in the plan (>= 1).
    paid_installments : int, default 0
        Installments already paid before the horizon starts.
    anchor : Anchor
        First due date and cycle policy. Months before the anchor's month
        never charge; afterwards each due month pays one installment.
    early_payoff : EarlyPayoff, optional
    bank : str, optional
        Display only.
    """
    name: str
    amount: float
    total_installments: int
    paid_installments: int = 0
    anchor: Anchor = field(default_factory=Anchor)
    early_payoff: Optional[EarlyPayoff] = None
    bank: Optional[str] = None
    id: Optional[str] = None

    kind: ClassVar[str] = "installment"

    def __post_init__(self) -> None:
        check_non_negative("amount", self.amount)
        check_positive("total_installments", self.total_installments)
        check_non_negative("paid_installments", self.paid_installments)

    @property
    def is_installment(self) -> bool:
        return True

    @property
    def remaining_installments(self) -> int:
        return max(0, self.total_installments - self.paid_installments)

    def due_mask(self, horizon: Horizon) -> np.ndarray:
        """Months that pay an installment if the plan is still running."""
        first_due = self.anchor.when
        mask = self.anchor.due_mask(horizon)
        if first_due is not None:
            started = np.array(
                [months_between(first_due, horizon.month_start(m)) >= 0 for m in range(len(horizon))],
                dtype=bool,
            )
            mask &= started
        return mask

    def resolve(self, horizon: Horizon) -> List[ExpenseCharge]:
        due = self.due_mask(horizon).astype(int)
        paid_before = self.paid_installments + np.cumsum(due) - due
        total = self.total_installments
        charges: List[ExpenseCharge] = []
        for m in range(len(horizon)):
            if paid_before[m] >= total:
                charges.append(_INACTIVE)
            elif due[m]:
                n = int(paid_before[m]) + 1
                charges.append(ExpenseCharge(float(self.amount), _progress_note(self.name, n, total, self.amount)))
            else:
                charges.append(_IDLE)
        if self.early_payoff is None:
            return charges
        return _apply_early_payoff(
            self.name, self.early_payoff, self.remaining_installments, float(self.amount), charges
        )

    def steady_monthly_amount(self, horizon_months: int) -> float:
        if self.early_payoff is not None and self.early_payoff.month <= horizon_months:
            return 0.0
        if self.remaining_installments > horizon_months:
            return float(self.amount)
        return 0.0


@dataclass(frozen=True)
class RepeatingInstallment(ExpenseStream):
    """
    Installment plan that restarts every year at the anchor month.

    Parameters
    ----------
    name : str
    amount : float
        Installment amount of the origin cycle year (and default for later
        years without a ``yearly_plans`` entry).
    total_installments : int
        Installments per cycle year.
    paid_installments : int, default 0
        Installments of the cycle running at horizon start already paid.
    anchor : Anchor
        Origin of the plan. Its month starts every cycle year; without a
        date the horizon's first month is the origin.
    yearly_plans : mapping of int to YearlyPlan
        Per cycle-year overrides (installments, amount, bank).
    early_payoff : EarlyPayoff, optional
        Clears the running cycle; the plan never restarts afterwards.

    Examples
    --------
    >>> from datetime import date
    >>> from cashplan.cycles import Horizon
    >>> ins = RepeatingInstallment("Insurance", 2_666, total_installments=12,
    ...                            paid_installments=3)
    >>> [c.annotation.split(":")[0] for c in ins.resolve(Horizon(date(2025, 8, 1), 2))]
    ['Insurance 2025 cycle installment 4/12', 'Insurance 2025 cycle installment 5/12']
    """
    name: str
    amount: float
    total_installments: int
    paid_installments: int = 0
    anchor: Anchor = field(default_factory=Anchor)
    yearly_plans: Mapping[int, YearlyPlan] = field(default_factory=dict)
    early_payoff: Optional[EarlyPayoff] = None
    bank: Optional[str] = None
    id: Optional[str] = None

    kind: ClassVar[str] = "installment"

    def __post_init__(self) -> None:
        check_non_negative("amount", self.amount)
        check_positive("total_installments", self.total_installments)
        check_non_negative("paid_installments", self.paid_installments)
        object.__setattr__(self, "yearly_plans", dict(self.yearly_plans))

    def __hash__(self) -> int:
        return hash((type(self), self.name, self.amount, self.total_installments, self.id))

    @property
    def is_installment(self) -> bool:
        return True

    @property
    def remaining_installments(self) -> int:
        return max(0, self.total_installments - self.paid_installments)

    def plan_for(self, cycle_year: int, origin_year: int) -> YearlyPlan:
        """Installments/amount/bank in effect for *cycle_year*."""
        default = YearlyPlan(self.total_installments, self.amount, self.bank)
        if cycle_year == origin_year:
            return default
        return self.yearly_plans.get(cycle_year, default)

    def cycle_year(self, month_start: date, origin: date) -> Optional[int]:
        """Cycle year containing *month_start*, None before the origin."""
        if months_between(origin, month_start) < 0:
            return None
        year = month_start.year if month_start.month >= origin.month else month_start.year - 1
        return max(year, origin.year)

    def resolve(self, horizon: Horizon) -> List[ExpenseCharge]:
        origin = self.anchor.when or horizon.start
        first_cycle = self.cycle_year(horizon.month_start(0), origin)

        charges: List[ExpenseCharge] = []
        current: Optional[int] = None
        count = 0
        for m in range(len(horizon)):
            start, end = horizon.bounds(m)
            cycle = self.cycle_year(start, origin)
            if cycle is None:
                charges.append(_INACTIVE)
                continue
            if cycle != current:
                current = cycle
                count = self.paid_installments if cycle == first_cycle else 0
            plan = self.plan_for(cycle, origin.year)

            if count >= plan.installments:
                # cycle done; nothing until the next anchor month
                charges.append(_INACTIVE)
                continue
            due = self.anchor.cycle_type != "fixed" or self.anchor.is_due(start, end)
            if not due:
                charges.append(_IDLE)
                continue
            count += 1
            bank = f" [{plan.bank}]" if plan.bank and plan.bank != self.bank else ""
            charges.append(
                ExpenseCharge(
                    float(plan.amount),
                    _progress_note(self.name, count, plan.installments, plan.amount, f"{bank} {cycle} cycle"),
                )
            )

        if self.early_payoff is None:
            return charges
        return _apply_early_payoff(
            self.name, self.early_payoff, self.remaining_installments, float(self.amount), charges
        )

    def steady_monthly_amount(self, horizon_months: int) -> float:
        if self.early_payoff is not None and self.early_payoff.month <= horizon_months:
            return 0.0
        return self.amount * min(self.total_installments, MONTHS_PER_YEAR) / MONTHS_PER_YEAR


# ---------------------------------------------------------------------------
# Facade
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ResolvedExpense:
    """Per-month charges of one stream, or the error that prevented them."""
    stream: ExpenseStream
    charges: Tuple[ExpenseCharge, ...] = ()
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class ExpenseModel:
    """
    Collection of expense streams resolved over a common horizon.

    A stream that fails to resolve does not affect the others: its
    ResolvedExpense carries the error and no charges.

    Examples
    --------
    >>> model = ExpenseModel((MonthlyExpense("Rent", 18_000),))
    >>> model.project(Horizon(date(2025, 1, 1), 3))["Rent"].tolist()
    [18000.0, 18000.0, 18000.0]
    """
    streams: Tuple[ExpenseStream, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "streams", tuple(self.streams))

    def resolve(self, horizon: Horizon) -> List[ResolvedExpense]:
        resolved = []
        for stream in self.streams:
            try:
                charges = stream.resolve(horizon)
            except (ValueError, TypeError, ArithmeticError, KeyError) as e:
                resolved.append(ResolvedExpense(stream, error=e))
                continue
            resolved.append(ResolvedExpense(stream, tuple(charges)))
        return resolved

    def project(self, horizon: Horizon, *, include_early_payoffs: bool = False) -> pd.DataFrame:
        """
        Charge matrix: one row per horizon month, one column per stream.

        Early-payoff lump sums are excluded unless *include_early_payoffs*.
        Streams that failed to resolve contribute zeros.
        """
        data: Dict[str, np.ndarray] = {}
        for r in self.resolve(horizon):
            values = np.zeros(len(horizon))
            for m, c in enumerate(r.charges):
                if include_early_payoffs or not c.is_early_payoff:
                    values[m] = c.amount
            column = r.stream.name
            while column in data:
                column = f"{column}*"
            data[column] = values
        return pd.DataFrame(data, index=horizon.index())

    def steady_monthly_total(self, horizon_months: int) -> float:
        return float(sum(s.steady_monthly_amount(horizon_months) for s in self.streams))
