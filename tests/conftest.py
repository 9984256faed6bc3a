"""
Pytest configuration and fixtures for the CashPlan test suite.

Fixtures build small, hand-checkable households: a salary, a rent, an
insurance plan paid in twelve installments every year and a credit loan.
"""

from datetime import date

import pytest

from cashplan.cycles import Anchor, Horizon
from cashplan.expenses import FiniteInstallment, MonthlyExpense, RepeatingInstallment
from cashplan.income import Bonus, BonusAllocation, Income
from cashplan.investment import InvestmentPolicy
from cashplan.loans import Loan


# ---------------------------------------------------------------------------
# Date Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def as_of() -> date:
    """Date inside the first projected month (August 2025)."""
    return date(2025, 8, 15)


@pytest.fixture
def horizon(as_of) -> Horizon:
    """Twelve months starting August 2025."""
    return Horizon(as_of, 12)


# ---------------------------------------------------------------------------
# Income Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def salary() -> Income:
    """45,000 a month, no bonuses."""
    return Income(45_000)


@pytest.fixture
def salary_with_bonus() -> Income:
    """
    60,000 a month plus a 120,000 year-end bonus paid in January.

    Allocation: 50% savings, 30% investment, 20% consumption.
    """
    return Income(
        60_000,
        bonuses=(
            Bonus("Year-end bonus", 120_000, 1, BonusAllocation(50, 30, 20)),
        ),
    )


# ---------------------------------------------------------------------------
# Expense Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def rent() -> MonthlyExpense:
    return MonthlyExpense("Rent", 18_000)


@pytest.fixture
def insurance() -> RepeatingInstallment:
    """
    Insurance paid in 12 installments of 2,666 a year, 3 already paid.

    No anchor date: the cycle restarts every twelve months from the
    first projected month.
    """
    return RepeatingInstallment("Insurance", 2_666, total_installments=12, paid_installments=3)


@pytest.fixture
def phone_plan() -> FiniteInstallment:
    """24 installments of 1,500 starting in the first projected month."""
    return FiniteInstallment("Phone installment", 1_500, total_installments=24, anchor=Anchor(date(2025, 8, 5)))


# ---------------------------------------------------------------------------
# Loan / Policy Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def credit_loan() -> Loan:
    """1,000,000 at 2.5% over 84 months, nothing paid yet."""
    return Loan("Credit loan", 1_000_000, 2.5, total_periods=84)


@pytest.fixture
def policy() -> InvestmentPolicy:
    """10,000 saved and 10,000 invested every month, compounding."""
    return InvestmentPolicy(monthly_savings=10_000, monthly_investment=10_000)
