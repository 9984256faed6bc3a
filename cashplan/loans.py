"""
Amortizing loans for CashPlan.

Purpose
-------
Turns a loan record (original amount, rate, periods already paid) into
the payment due in each projected month, including an optional one-time
prepayment that re-amortizes the loan.

Key components
--------------
- Loan:
    Frozen loan record. The balance "as of now" is derived analytically
    from ``paid_periods``; nothing is stored.
- PrepaymentPlan:
    The re-amortization computed once per loan: balance right before the
    prepayment, balance after it, and the new level payment.
- LoanCharge:
    What a loan costs in one projected month: the regular payment and,
    separately, the prepayment lump sum.
- prepayment_summary / total_payment_reduction:
    Before/after comparison of a prepayment (payment reduction, interest
    saved), feeding the debt analysis.

Prepayment rules
----------------
With k = min(prepayment_month, remaining periods), 1-based from the
horizon start:

- months < k pay the current level payment;
- month k pays the current level payment plus the prepayment, recorded as
  a separate lump outflow;
- months > k pay PMT(B(k-1) - prepayment, r, remaining - k), where B(k-1)
  is the balance after k-1 regular payments. A non-positive balance
  discharges the loan: no further payments.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .amortization import monthly_payment, remaining_balance
from .utils import check_non_negative

logger = logging.getLogger(__name__)

__all__ = [
    "Loan",
    "LoanCharge",
    "PrepaymentPlan",
    "PrepaymentSummary",
    "prepayment_summary",
    "total_payment_reduction",
]


@dataclass(frozen=True)
class PrepaymentPlan:
    """Re-amortization of a loan after its one-time prepayment."""
    month: int
    amount: float
    balance_before: float
    balance_after: float
    periods_after: int
    payment_after: float

    @property
    def discharges_loan(self) -> bool:
        return self.balance_after <= 0 or self.periods_after == 0


@dataclass(frozen=True)
class LoanCharge:
    """Cash a loan requires in one projected month."""
    name: str
    month: int
    payment: float = 0.0
    prepayment: float = 0.0
    is_last_month: bool = False
    completed: bool = False


@dataclass(frozen=True)
class Loan:
    """
    Amortizing loan with an optional lump-sum prepayment.

    Parameters
    ----------
    name : str
        Display name (also used by the debt classifier).
    original_amount : float
        Principal at origination.
    annual_rate : float
        Nominal annual rate in percent (2.5 means 2.5%).
    total_periods : int
        Term in months.
    paid_periods : int, default 0
        Payments already made before the horizon starts.
    enable_prepayment : bool, default False
    prepayment_amount : float, default 0.0
    prepayment_month : int, default 1
        1-based horizon month of the prepayment; clamped to the remaining
        period count.
    id : str, optional

    Examples
    --------
    >>> loan = Loan("Credit loan", 1_000_000, 2.5, total_periods=84)
    >>> loan.current_balance
    1000000.0
    >>> loan.charge(85).completed
    True
    """
    name: str
    original_amount: float
    annual_rate: float
    total_periods: int
    paid_periods: int = 0
    enable_prepayment: bool = False
    prepayment_amount: float = 0.0
    prepayment_month: int = 1
    id: Optional[str] = None

    def __post_init__(self) -> None:
        check_non_negative("original_amount", self.original_amount)
        check_non_negative("annual_rate", self.annual_rate)
        check_non_negative("total_periods", self.total_periods)
        check_non_negative("paid_periods", self.paid_periods)
        check_non_negative("prepayment_amount", self.prepayment_amount)
        if self.prepayment_month < 1:
            raise ValueError(f"prepayment_month must be >= 1 (got {self.prepayment_month}).")

    # -- current state --------------------------------------------------

    @property
    def is_serviceable(self) -> bool:
        """False for loans with non-positive principal or term."""
        return self.original_amount > 0 and self.total_periods > 0

    @property
    def remaining_periods(self) -> int:
        return max(0, self.total_periods - self.paid_periods)

    @property
    def original_payment(self) -> float:
        """Level payment at origination."""
        return monthly_payment(self.original_amount, self.annual_rate, self.total_periods)

    @property
    def current_balance(self) -> float:
        """Outstanding balance after ``paid_periods`` payments."""
        if not self.is_serviceable:
            return 0.0
        return remaining_balance(self.original_amount, self.annual_rate, self.total_periods, self.paid_periods)

    @property
    def current_payment(self) -> float:
        """Level payment over the remaining periods."""
        return monthly_payment(self.current_balance, self.annual_rate, self.remaining_periods)

    @property
    def has_prepayment(self) -> bool:
        return self.enable_prepayment and self.prepayment_amount > 0 and self.remaining_periods > 0

    # -- prepayment -----------------------------------------------------

    def prepayment_plan(self) -> Optional[PrepaymentPlan]:
        """
        Re-amortization after the prepayment, or None without one.

        The prepayment month is clamped to the remaining period count and
        the lump sum to the balance it pays down. When the prepayment falls
        in the last period no periods are left to re-amortize over: that
        month's regular payment settles ``balance_after`` and the plan
        discharges the loan.
        """
        if not (self.is_serviceable and self.has_prepayment):
            return None
        remaining = self.remaining_periods
        k = min(self.prepayment_month, remaining)
        balance_before = remaining_balance(self.current_balance, self.annual_rate, remaining, k - 1)
        amount = min(self.prepayment_amount, balance_before)
        balance_after = max(0.0, balance_before - amount)
        if balance_after <= 0 or k == remaining:
            plan = PrepaymentPlan(k, amount, balance_before, balance_after, 0, 0.0)
        else:
            periods_after = remaining - k
            plan = PrepaymentPlan(
                k,
                amount,
                balance_before,
                balance_after,
                periods_after,
                monthly_payment(balance_after, self.annual_rate, periods_after),
            )
        logger.debug(
            "loan %s prepayment at month %d: balance %.2f -> %.2f, payment %.2f -> %.2f",
            self.name, k, balance_before, balance_after, self.current_payment, plan.payment_after,
        )
        return plan

    # -- monthly charge -------------------------------------------------

    def charge(self, month: int, plan: Optional[PrepaymentPlan] = None) -> LoanCharge:
        """
        Payment due in 1-based horizon *month*.

        Parameters
        ----------
        month : int
            1-based horizon month.
        plan : PrepaymentPlan, optional
            Precomputed ``prepayment_plan()``; computed on demand when the
            loan has a prepayment and no plan is passed.
        """
        remaining = self.remaining_periods
        if not self.is_serviceable or month > remaining:
            return LoanCharge(self.name, month, completed=True)

        is_last = self.paid_periods + month == self.total_periods
        if plan is None and self.has_prepayment:
            plan = self.prepayment_plan()
        if plan is None or month < plan.month:
            return LoanCharge(self.name, month, payment=self.current_payment, is_last_month=is_last)

        if month == plan.month:
            return LoanCharge(
                self.name,
                month,
                payment=self.current_payment,
                prepayment=plan.amount,
                is_last_month=is_last or plan.discharges_loan,
                completed=plan.discharges_loan,
            )

        if plan.discharges_loan or month - plan.month > plan.periods_after:
            return LoanCharge(self.name, month, completed=True)
        return LoanCharge(
            self.name,
            month,
            payment=plan.payment_after,
            is_last_month=month - plan.month == plan.periods_after,
        )

    def total_cost(self, plan: Optional[PrepaymentPlan] = None) -> float:
        """Everything still to be paid from the horizon start, prepayment included."""
        return sum(
            c.payment + c.prepayment
            for c in (self.charge(m, plan) for m in range(1, self.remaining_periods + 1))
        )


# ---------------------------------------------------------------------------
# Prepayment comparison
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class PrepaymentSummary:
    """Before/after figures of a loan's prepayment plan."""
    name: str
    original_payment: float
    current_balance: float
    current_payment: float
    new_balance: float
    new_payment: float
    payment_reduction: float
    total_without_prepayment: float
    total_with_prepayment: float
    interest_saved: float
    fully_paid: bool


def prepayment_summary(loan: Loan) -> PrepaymentSummary:
    """
    Compare a loan with and without its prepayment.

    Without a prepayment plan, the "new" figures equal the current ones and
    the savings are zero.
    """
    current_payment = loan.current_payment
    without = current_payment * loan.remaining_periods
    plan = loan.prepayment_plan()
    if plan is None:
        return PrepaymentSummary(
            name=loan.name,
            original_payment=loan.original_payment,
            current_balance=loan.current_balance,
            current_payment=current_payment,
            new_balance=loan.current_balance,
            new_payment=current_payment,
            payment_reduction=0.0,
            total_without_prepayment=without,
            total_with_prepayment=without,
            interest_saved=0.0,
            fully_paid=False,
        )
    with_prepayment = loan.total_cost(plan)
    return PrepaymentSummary(
        name=loan.name,
        original_payment=loan.original_payment,
        current_balance=loan.current_balance,
        current_payment=current_payment,
        new_balance=plan.balance_after,
        new_payment=plan.payment_after,
        payment_reduction=current_payment - plan.payment_after,
        total_without_prepayment=without,
        total_with_prepayment=with_prepayment,
        interest_saved=without - with_prepayment,
        fully_paid=plan.discharges_loan,
    )


def total_payment_reduction(loans: Iterable[Loan]) -> float:
    """Sum of monthly payment reductions across all prepayment plans."""
    return sum(prepayment_summary(loan).payment_reduction for loan in loans if loan.is_serviceable)
