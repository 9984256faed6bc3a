"""
Unit tests for loans.py module.

Tests current loan state, per-month charges and prepayment plans.
"""

import pytest
from dataclasses import FrozenInstanceError

from cashplan.amortization import monthly_payment, remaining_balance
from cashplan.loans import Loan, prepayment_summary, total_payment_reduction


def _prepaid(**kwargs) -> Loan:
    params = dict(enable_prepayment=True, prepayment_amount=300_000, prepayment_month=6)
    params.update(kwargs)
    return Loan("Credit loan", 1_000_000, 2.5, total_periods=84, **params)


class TestLoanState:
    """Tests for the current state of a loan."""

    def test_new_loan(self, credit_loan):
        """Nothing paid: balance is the principal, payment is the level payment."""
        assert credit_loan.current_balance == pytest.approx(1_000_000)
        assert credit_loan.remaining_periods == 84
        assert 11_904.76 < credit_loan.current_payment < 13_500
        assert credit_loan.current_payment == pytest.approx(credit_loan.original_payment)

    def test_partially_paid(self):
        """After 12 payments the balance drops and the payment stays level."""
        loan = Loan("Credit loan", 1_000_000, 2.5, total_periods=84, paid_periods=12)
        assert loan.current_balance == pytest.approx(remaining_balance(1_000_000, 2.5, 84, 12))
        assert loan.remaining_periods == 72
        assert loan.current_payment == pytest.approx(loan.original_payment)

    def test_not_serviceable(self):
        """Zero principal or term contributes nothing."""
        assert not Loan("Empty", 0, 2.5, 84).is_serviceable
        assert not Loan("No term", 100_000, 2.5, 0).is_serviceable
        assert Loan("Empty", 0, 2.5, 84).current_balance == 0.0

    def test_negative_amount_rejected(self):
        with pytest.raises(ValueError):
            Loan("Bad", -1, 2.5, 84)

    def test_invalid_prepayment_month(self):
        with pytest.raises(ValueError):
            Loan("Bad", 100_000, 2.5, 84, prepayment_month=0)

    def test_frozen(self, credit_loan):
        with pytest.raises(FrozenInstanceError):
            credit_loan.annual_rate = 3.0


class TestLoanCharge:
    """Tests for Loan.charge without prepayment."""

    def test_level_payment(self, credit_loan):
        assert credit_loan.charge(1).payment == pytest.approx(credit_loan.current_payment)
        assert credit_loan.charge(84).payment == pytest.approx(credit_loan.current_payment)

    def test_last_month_flag(self, credit_loan):
        assert not credit_loan.charge(83).is_last_month
        assert credit_loan.charge(84).is_last_month

    def test_completed_after_term(self, credit_loan):
        charge = credit_loan.charge(85)
        assert charge.completed
        assert charge.payment == 0.0

    def test_already_paid_off(self):
        loan = Loan("Done", 100_000, 2.5, 24, paid_periods=24)
        assert loan.charge(1).completed

    def test_last_month_with_paid_periods(self):
        loan = Loan("Car", 300_000, 3.0, 36, paid_periods=30)
        assert loan.charge(6).is_last_month
        assert loan.charge(7).completed


class TestPrepayment:
    """Tests for prepayment plans and their effect on charges."""

    def test_no_plan_without_prepayment(self, credit_loan):
        assert credit_loan.prepayment_plan() is None
        assert not credit_loan.has_prepayment

    def test_disabled_prepayment_ignored(self):
        loan = _prepaid(enable_prepayment=False)
        assert loan.prepayment_plan() is None

    def test_plan_figures(self):
        """Balance before the prepayment month, minus the lump sum, over the rest of the term."""
        loan = _prepaid()
        plan = loan.prepayment_plan()
        before = remaining_balance(1_000_000, 2.5, 84, 5)
        assert plan.month == 6
        assert plan.amount == pytest.approx(300_000)
        assert plan.balance_before == pytest.approx(before)
        assert plan.balance_after == pytest.approx(before - 300_000)
        assert plan.periods_after == 78
        assert plan.payment_after == pytest.approx(monthly_payment(before - 300_000, 2.5, 78))
        assert not plan.discharges_loan

    def test_charges_around_prepayment(self):
        loan = _prepaid()
        plan = loan.prepayment_plan()
        assert loan.charge(5, plan).payment == pytest.approx(loan.current_payment)
        at = loan.charge(6, plan)
        assert at.payment == pytest.approx(loan.current_payment)
        assert at.prepayment == pytest.approx(300_000)
        assert loan.charge(7, plan).payment == pytest.approx(plan.payment_after)
        assert loan.charge(7, plan).payment < loan.current_payment
        assert loan.charge(84, plan).is_last_month
        assert loan.charge(85, plan).completed

    def test_plan_computed_on_demand(self):
        loan = _prepaid()
        assert loan.charge(6).prepayment == pytest.approx(300_000)

    def test_month_clamped_to_remaining(self):
        """A prepayment month past the term happens in the last month."""
        loan = Loan("Car", 300_000, 3.0, 36, paid_periods=30,
                    enable_prepayment=True, prepayment_amount=10_000, prepayment_month=12)
        assert loan.prepayment_plan().month == 6

    def test_last_period_prepayment_settles_loan(self):
        """Nothing is left to re-amortize: the plan discharges the loan in its last month."""
        loan = Loan("Car", 300_000, 3.0, 36, paid_periods=30,
                    enable_prepayment=True, prepayment_amount=10_000, prepayment_month=12)
        plan = loan.prepayment_plan()
        assert plan.periods_after == 0
        assert plan.balance_after == pytest.approx(plan.balance_before - 10_000)
        assert plan.discharges_loan
        at = loan.charge(6, plan)
        assert at.payment == pytest.approx(loan.current_payment)
        assert at.prepayment == pytest.approx(10_000)
        assert at.is_last_month
        assert at.completed
        assert loan.charge(7, plan).completed
        summary = prepayment_summary(loan)
        assert summary.fully_paid
        assert summary.new_payment == 0

    def test_full_payoff(self):
        """A lump sum above the balance discharges the loan."""
        loan = _prepaid(prepayment_amount=2_000_000)
        plan = loan.prepayment_plan()
        assert plan.discharges_loan
        assert plan.amount == pytest.approx(plan.balance_before)
        at = loan.charge(6, plan)
        assert at.is_last_month
        assert at.completed
        assert loan.charge(7, plan).completed
        assert loan.charge(7, plan).payment == 0.0


class TestPrepaymentSummary:
    """Tests for prepayment_summary and total_payment_reduction."""

    def test_without_prepayment(self, credit_loan):
        s = prepayment_summary(credit_loan)
        assert s.payment_reduction == 0.0
        assert s.interest_saved == 0.0
        assert s.new_payment == pytest.approx(s.current_payment)
        assert s.total_without_prepayment == pytest.approx(s.current_payment * 84)

    def test_with_prepayment(self):
        s = prepayment_summary(_prepaid())
        assert s.payment_reduction > 0
        assert s.new_payment == pytest.approx(s.current_payment - s.payment_reduction)
        assert s.total_with_prepayment < s.total_without_prepayment
        assert s.interest_saved == pytest.approx(s.total_without_prepayment - s.total_with_prepayment)
        assert not s.fully_paid

    def test_fully_paid(self):
        s = prepayment_summary(_prepaid(prepayment_amount=2_000_000))
        assert s.fully_paid
        assert s.new_payment == 0.0
        assert s.payment_reduction == pytest.approx(s.current_payment)

    def test_total_payment_reduction(self, credit_loan):
        prepaid = _prepaid()
        total = total_payment_reduction([prepaid, credit_loan, Loan("Empty", 0, 2.5, 84)])
        assert total == pytest.approx(prepayment_summary(prepaid).payment_reduction)
