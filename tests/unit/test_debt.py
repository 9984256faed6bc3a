"""
Unit tests for debt.py module.

Tests debt classification, the debt-to-income and bank income-to-expense
ratios, the early-payoff comparison and housing affordability.
"""

import pytest

from cashplan.amortization import monthly_payment, principal_from_payment
from cashplan.debt import (
    MortgageTerms,
    analyze_debt,
    analyze_debt_with_early_payoff,
    bank_risk_level,
    classify_debt,
    general_risk_level,
    housing_affordability,
    minimum_living_cost,
    monthly_debt_amount,
    resolve_location,
)
from cashplan.exceptions import DataQualityWarning
from cashplan.expenses import EarlyPayoff, FiniteInstallment, MonthlyExpense, YearlyExpense
from cashplan.loans import Loan


TAIPEI_LIVING_COST = 20_379


class TestLocations:
    """Tests for location lookup."""

    def test_romanised_name(self):
        assert resolve_location("Tainan City") == "Tainan City"
        assert minimum_living_cost("Tainan City") == 14_230

    def test_chinese_name(self):
        assert resolve_location("高雄市") == "Kaohsiung City"
        assert minimum_living_cost("臺北市") == TAIPEI_LIVING_COST

    def test_missing_defaults_to_taipei(self):
        assert resolve_location(None) == "Taipei City"
        assert resolve_location("") == "Taipei City"

    def test_unknown_is_other(self):
        assert resolve_location("Atlantis") == "Other"
        assert minimum_living_cost("Atlantis") == 14_230


class TestClassification:
    """Tests for classify_debt and monthly_debt_amount."""

    @pytest.mark.parametrize(
        "stream, category",
        [
            (MonthlyExpense("Mortgage", 20_000), "housing"),
            (MonthlyExpense("房貸", 20_000), "housing"),
            (MonthlyExpense("Personal loan", 8_000), "credit_loan"),
            (MonthlyExpense("信貸", 8_000), "credit_loan"),
            (MonthlyExpense("Credit card installment", 2_000), "card_installment"),
            (FiniteInstallment("Phone", 1_500, total_installments=24), "card_installment"),
            (MonthlyExpense("Student loan", 3_000), "other"),
            (YearlyExpense("Car tax", 12_000), "other"),
            (MonthlyExpense("Rent", 18_000), "none"),
        ],
    )
    def test_classify(self, stream, category):
        assert classify_debt(stream) == category

    def test_yearly_spread(self):
        assert monthly_debt_amount(YearlyExpense("Car tax", 12_000)) == pytest.approx(1_000)

    def test_early_payoff_spread(self):
        plan = FiniteInstallment("Phone", 1_200, total_installments=24, early_payoff=EarlyPayoff(3))
        assert monthly_debt_amount(plan) == pytest.approx(300)

    def test_completed_plan(self):
        plan = FiniteInstallment("Phone", 1_200, total_installments=24, paid_installments=24)
        assert monthly_debt_amount(plan) == 0.0


class TestRiskLevels:
    """Tests for the risk tiers."""

    @pytest.mark.parametrize(
        "ratio, level",
        [(0, "excellent"), (20, "excellent"), (20.01, "good"), (35, "acceptable"), (45, "caution"), (60, "high-risk")],
    )
    def test_general(self, ratio, level):
        assert general_risk_level(ratio) == level

    @pytest.mark.parametrize(
        "ratio, level",
        [(300, "excellent"), (260, "good"), (200, "qualified"), (199.9, "caution"), (100, "high-risk")],
    )
    def test_bank(self, ratio, level):
        assert bank_risk_level(ratio) == level


class TestAnalyzeDebt:
    """Tests for analyze_debt."""

    def test_mortgage_household(self):
        a = analyze_debt(100_000, [MonthlyExpense("Mortgage", 20_000), MonthlyExpense("Rent", 5_000)])
        assert a.debt.housing == 20_000
        assert a.debt.total == 20_000
        assert (a.general.ratio, a.general.risk_level) == (20.0, "excellent")
        assert a.bank.required_expenses == pytest.approx(20_000 + TAIPEI_LIVING_COST)
        assert a.bank.ratio == pytest.approx(round(100_000 / 40_379 * 100, 2))
        assert a.bank.is_qualified
        assert a.bank.risk_level == "qualified"
        assert a.overall.priority == "medium"

    def test_loans_count_as_credit(self, credit_loan):
        a = analyze_debt(100_000, [], loans=[credit_loan])
        assert a.debt.credit_loan == pytest.approx(credit_loan.current_payment)

    def test_other_debt_outside_bank_ratio(self):
        a = analyze_debt(60_000, [YearlyExpense("Car tax", 12_000)])
        assert a.debt.other == pytest.approx(1_000)
        assert a.bank.required_expenses == pytest.approx(TAIPEI_LIVING_COST)

    def test_payment_reduction_floored(self):
        a = analyze_debt(50_000, [MonthlyExpense("Mortgage", 10_000)], loan_payment_reduction=50_000)
        assert a.debt.total == 0.0
        assert a.general.ratio == 0.0

    def test_urgent(self):
        a = analyze_debt(40_000, [MonthlyExpense("Mortgage", 30_000)])
        assert a.general.risk_level == "high-risk"
        assert a.overall.priority == "urgent"
        assert len(a.overall.actions) == 5

    def test_low_priority(self):
        a = analyze_debt(200_000, [])
        assert a.general.ratio == 0.0
        assert a.bank.risk_level == "excellent"
        assert a.overall.priority == "low"

    def test_location(self):
        a = analyze_debt(50_000, [], "高雄市")
        assert a.location == "Kaohsiung City"
        assert a.minimum_living_cost == 15_472

    def test_blank_records_ignored(self):
        a = analyze_debt(50_000, [MonthlyExpense("", 10_000), MonthlyExpense("Mortgage", 0)])
        assert a.debt.total == 0.0

    def test_expense_and_loan_records(self):
        """Raw records are analyzed like the domain objects they describe."""
        a = analyze_debt(
            100_000,
            [{"name": "房貸", "amount": 20_000, "type": "monthly"}, {"name": "", "amount": 5_000}],
            "台北市",
            loans=[{"name": "Credit loan", "originalAmount": 1_000_000, "annualRate": 0, "totalPeriods": 100}],
        )
        assert a.debt.housing == 20_000
        assert a.debt.credit_loan == pytest.approx(10_000)
        assert a.debt.total == pytest.approx(30_000)
        assert a.general.ratio == 30.0

    def test_invalid_record_skipped_with_warning(self):
        with pytest.warns(DataQualityWarning, match="Bad"):
            a = analyze_debt(100_000, [{"name": "Bad", "amount": 100, "type": "weekly"},
                                       {"name": "房貸", "amount": 20_000}])
        assert a.debt.total == 20_000

    def test_unsupported_record_type_skipped(self):
        with pytest.warns(DataQualityWarning):
            a = analyze_debt(100_000, [MonthlyExpense("Mortgage", 20_000)], loans=[42])
        assert a.debt.credit_loan == 0.0


class TestEarlyPayoffComparison:
    """Tests for analyze_debt_with_early_payoff."""

    def test_no_strategy(self):
        c = analyze_debt_with_early_payoff(50_000, [MonthlyExpense("Mortgage", 10_000)])
        assert not c.has_strategy
        assert c.before == c.after
        assert c.total_savings == 0.0

    def test_installment_payoff(self):
        phone = FiniteInstallment("Phone", 1_500, total_installments=24, paid_installments=6,
                                  early_payoff=EarlyPayoff(3))
        c = analyze_debt_with_early_payoff(50_000, [phone], prediction_months=12)
        assert c.has_strategy
        entry = c.schedule[0]
        assert (entry.name, entry.payoff_month, entry.remaining_installments) == ("Phone", 3, 18)
        assert entry.total_savings == pytest.approx(1_500 * 15)
        assert c.before.monthly_debt == pytest.approx(1_500)
        assert c.after.monthly_debt == pytest.approx(375)
        assert c.before.debt_ratio == 3.0
        assert c.after.debt_ratio == 0.75
        assert c.debt_ratio_reduction == 2.25
        assert c.bank_ratio_improvement > 0
        assert c.monthly_debt_reduction == pytest.approx(1_125)

    def test_payoff_after_horizon_ignored(self):
        phone = FiniteInstallment("Phone", 1_500, total_installments=24, early_payoff=EarlyPayoff(18))
        c = analyze_debt_with_early_payoff(50_000, [phone], prediction_months=12)
        assert not c.has_strategy

    def test_loan_prepayment(self):
        loan = Loan("Credit loan", 1_000_000, 2.5, 84,
                    enable_prepayment=True, prepayment_amount=300_000, prepayment_month=6)
        plan = loan.prepayment_plan()
        c = analyze_debt_with_early_payoff(80_000, [], prediction_months=12, loans=[loan])
        entry = c.schedule[0]
        assert entry.new_monthly_payment == pytest.approx(plan.payment_after)
        assert entry.monthly_savings == pytest.approx(loan.current_payment - plan.payment_after)
        assert entry.total_savings == pytest.approx(entry.monthly_savings * plan.periods_after)
        assert c.after.monthly_debt == pytest.approx(plan.payment_after)

    def test_loan_prepayment_after_horizon(self):
        loan = Loan("Credit loan", 1_000_000, 2.5, 84,
                    enable_prepayment=True, prepayment_amount=300_000, prepayment_month=24)
        c = analyze_debt_with_early_payoff(80_000, [], prediction_months=12, loans=[loan])
        assert not c.has_strategy
        assert c.after.monthly_debt == pytest.approx(loan.current_payment)

    def test_no_debt_bank_ratio(self):
        c = analyze_debt_with_early_payoff(50_000, [MonthlyExpense("Rent", 18_000)])
        assert c.before.bank_ratio == 0.0
        assert c.before.expense_ratio == 36.0

    def test_installment_record(self):
        record = {"name": "Phone", "amount": 1_500, "type": "annual-recurring", "totalInstallments": 24,
                  "paidInstallments": 6, "earlyPayoff": True, "payoffMonth": 3}
        c = analyze_debt_with_early_payoff(50_000, [record], prediction_months=12)
        assert c.has_strategy
        assert c.schedule[0].remaining_installments == 18
        assert c.before.monthly_debt == pytest.approx(1_500)


class TestHousingAffordability:
    """Tests for housing_affordability."""

    def test_affordable(self):
        h = housing_affordability(100_000, 0, 20_000)
        assert h.is_affordable
        assert h.available_payment == pytest.approx(30_000)
        assert h.loan_amount == pytest.approx(principal_from_payment(30_000, 2.1, 360))
        assert h.house_price == pytest.approx(h.loan_amount / 0.8)
        assert h.down_payment == pytest.approx(h.house_price * 0.2)
        low, mid, high = h.price_range
        assert (low, mid, high) == pytest.approx((h.house_price * 0.8, h.house_price, h.house_price * 1.2))
        assert h.deficit == 0.0
        assert h.improvement_suggestions == ()

    def test_not_affordable(self):
        h = housing_affordability(40_000, 5_000, TAIPEI_LIVING_COST)
        assert not h.is_affordable
        assert h.deficit == pytest.approx(5_379)
        assert h.loan_amount == 0.0
        assert h.house_price == 0.0
        assert h.improvement_suggestions[0] == "Increase monthly income by NT$ 10,758"
        assert len(h.improvement_suggestions) == 3

    def test_required_income_round_trip(self):
        h = housing_affordability(100_000, 0, 20_000)
        assert h.required_income_for_price(h.house_price) == pytest.approx(100_000)

    def test_custom_terms(self):
        terms = MortgageTerms(loan_to_value_pct=70, annual_rate_pct=2.0, years=20)
        h = housing_affordability(100_000, 0, 20_000, terms)
        assert terms.periods == 240
        assert monthly_payment(h.loan_amount, 2.0, 240) == pytest.approx(30_000)
        assert h.house_price == pytest.approx(h.loan_amount / 0.7)

    def test_invalid_terms(self):
        with pytest.raises(ValueError):
            MortgageTerms(loan_to_value_pct=0)
        with pytest.raises(ValueError):
            MortgageTerms(years=0)
        with pytest.raises(ValueError):
            MortgageTerms(annual_rate_pct=-1)

    def test_outlook_qualified(self):
        outlook = housing_affordability(100_000, 0, 20_000).outlook
        assert len(outlook.months) == 6
        assert outlook.months[0].capacity == "good"
        assert outlook.months[0].bank_ratio == 500.0
        assert outlook.qualified_months == 6
        assert outlook.qualification_rate == 100
        assert outlook.priority == "high"

    def test_outlook_excellent_capacity(self):
        outlook = housing_affordability(200_000, 0, 20_000).outlook
        assert outlook.months[0].capacity == "excellent"

    def test_outlook_unqualified(self):
        outlook = housing_affordability(40_000, 5_000, TAIPEI_LIVING_COST).outlook
        assert outlook.qualified_months == 0
        assert outlook.months[0].capacity == "low"
        assert outlook.priority == "low"

    def test_outlook_without_obligations(self):
        h = housing_affordability(100_000, 0, 0)
        assert h.available_payment == pytest.approx(50_000)
        assert h.outlook.months[0].bank_ratio == 0.0
        assert h.outlook.months[0].debt_to_income_ratio == 0.0
        assert h.outlook.qualified_months == 0
