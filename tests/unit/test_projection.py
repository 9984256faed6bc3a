"""
Unit tests for projection.py module.

Tests the month-by-month driver: cash-flow arithmetic, bonus routing,
auto-allocation, early payoffs, loan prepayments, input validation and
the recovery of broken records.
"""

import numpy as np
import pytest
import pandas as pd
from datetime import date
from dataclasses import FrozenInstanceError

from cashplan.config import ExpenseConfig, IncomeConfig, ScenarioConfig
from cashplan.exceptions import CashPlanError, DataQualityWarning, TimeIndexError, ValidationError
from cashplan.expenses import EarlyPayoff, FiniteInstallment, MonthlyExpense
from cashplan.income import Income
from cashplan.investment import InvestmentPolicy
from cashplan.loans import Loan
from cashplan.projection import ProjectionResult, project, project_scenario


START = date(2025, 1, 15)


class TestCashFlow:
    """Tests for the per-month arithmetic."""

    def test_basic_month(self, salary, rent):
        """45,000 in, 18,000 rent out, 10,000 saved."""
        result = project(salary, [rent], InvestmentPolicy(monthly_savings=10_000), 3, as_of=START)
        assert isinstance(result, ProjectionResult)
        records = result.monthly_data
        assert len(records) == 3
        assert [r.net for r in records] == [27_000, 27_000, 27_000]
        assert [r.cumulative_cash for r in records] == pytest.approx([17_000, 34_000, 51_000])
        assert records[0].savings == 10_000
        assert records[0].investment == 0

    def test_months_follow_horizon(self, salary, rent):
        result = project(salary, [rent], InvestmentPolicy(), 3, as_of=START)
        assert [r.month for r in result.monthly_data] == [date(2025, 1, 1), date(2025, 2, 1), date(2025, 3, 1)]
        assert [r.month_index for r in result.monthly_data] == [0, 1, 2]

    def test_savings_compound_monthly(self, salary, rent):
        """Balance grows by 1.5%/12 before the next contribution."""
        result = project(salary, [rent], InvestmentPolicy(monthly_savings=10_000), 2, as_of=START)
        assert result.monthly_data[1].cumulative_savings == pytest.approx(10_000 * (1 + 0.015 / 12) + 10_000)

    def test_simple_balances_without_compounding(self, salary, rent):
        policy = InvestmentPolicy(monthly_savings=5_000, monthly_investment=5_000, compound_interest=False)
        result = project(salary, [rent], policy, 12, as_of=START)
        assert result.final_amounts.savings == pytest.approx(60_000)
        assert result.final_amounts.investment == pytest.approx(60_000)

    def test_total_assets(self, salary, rent, policy):
        result = project(salary, [rent], policy, 12, as_of=START)
        for r in result.monthly_data:
            assert r.total_assets == pytest.approx(r.cumulative_cash + r.cumulative_savings + r.cumulative_investment)
        final = result.final_amounts
        assert final.total == pytest.approx(final.cash + final.savings + final.investment)

    def test_compounding_monotonic(self, salary, rent, policy):
        """Positive contributions and returns keep the investment balance rising."""
        result = project(salary, [rent], policy, 24, as_of=START)
        balances = [r.cumulative_investment for r in result.monthly_data]
        assert all(b > a for a, b in zip(balances, balances[1:]))
        assert result.investment_stats.total_invested == pytest.approx(240_000)
        assert result.investment_stats.total_returns > 0

    def test_no_expenses(self, salary):
        result = project(salary, [], InvestmentPolicy(), 2, as_of=START)
        assert [r.expenses for r in result.monthly_data] == [0, 0]
        assert result.final_amounts.cash == pytest.approx(90_000)

    def test_records_frozen(self, salary):
        result = project(salary, [], InvestmentPolicy(), 1, as_of=START)
        with pytest.raises(FrozenInstanceError):
            result.monthly_data[0].net = 0


class TestInstallmentsInProjection:
    """Tests for installment annotations and early payoffs in the driver."""

    def test_insurance_progress(self, salary, rent, insurance, as_of):
        """August to January pay installments 4/12 through 9/12."""
        result = project(salary, [rent, insurance], InvestmentPolicy(), 6, as_of=as_of)
        notes = [
            d.annotation.split(":")[0]
            for r in result.monthly_data
            for d in r.expense_details
            if d.name == "Insurance"
        ]
        assert notes == [f"Insurance 2025 cycle installment {n}/12" for n in range(4, 10)]
        assert all(r.regular_expenses == pytest.approx(20_666) for r in result.monthly_data)

    def test_early_payoff_paid_from_assets(self, salary):
        """The lump sum leaves cash but is not an expense of the month."""
        phone = FiniteInstallment("Phone", 1_500, total_installments=24, paid_installments=6,
                                  early_payoff=EarlyPayoff(3))
        result = project(salary, [phone], InvestmentPolicy(), 4, as_of=date(2025, 8, 1))
        r = result.monthly_data
        assert r[2].early_payoffs == pytest.approx(24_000)
        assert r[2].expenses == 0
        assert r[2].net == 45_000
        assert r[2].cumulative_cash == pytest.approx(43_500 * 2 + 45_000 - 24_000)
        assert r[3].expenses == 0
        detail = r[2].early_payoff_details[0]
        assert detail.source == "expense"
        assert detail.amount == pytest.approx(24_000)
        assert "paid off early" in detail.annotation

    def test_finished_plan_leaves_expenses(self, salary):
        laptop = FiniteInstallment("Laptop", 3_000, total_installments=6, paid_installments=4)
        result = project(salary, [laptop], InvestmentPolicy(), 4, as_of=START)
        assert [r.expenses for r in result.monthly_data] == [3_000, 3_000, 0, 0]


class TestLoansInProjection:
    """Tests for loan payments and prepayments in the driver."""

    def test_loan_payment(self, salary, credit_loan):
        result = project(salary, [], InvestmentPolicy(), 3, loans=[credit_loan], as_of=START)
        r = result.monthly_data[0]
        assert r.loan_expenses == pytest.approx(credit_loan.current_payment)
        assert r.expenses == pytest.approx(r.regular_expenses + r.loan_expenses)
        assert r.net == pytest.approx(45_000 - credit_loan.current_payment)
        assert r.loan_details[0].name == "Credit loan"

    def test_prepayment(self):
        loan = Loan("Credit loan", 1_000_000, 2.5, 84,
                    enable_prepayment=True, prepayment_amount=300_000, prepayment_month=6)
        plan = loan.prepayment_plan()
        result = project(Income(80_000), [], InvestmentPolicy(), 8, loans=[loan], as_of=START)
        r = result.monthly_data
        assert r[5].early_payoffs == pytest.approx(300_000)
        assert r[5].loan_expenses == pytest.approx(loan.current_payment)
        assert r[6].loan_expenses == pytest.approx(plan.payment_after)
        assert r[5].early_payoff_details[0].source == "loan"

    def test_loan_ends_inside_horizon(self, salary):
        loan = Loan("Car", 300_000, 3.0, 36, paid_periods=34)
        result = project(salary, [], InvestmentPolicy(), 4, loans=[loan], as_of=START)
        r = result.monthly_data
        assert r[1].loan_details[0].is_last_month
        assert r[2].loan_expenses == 0
        assert r[2].loan_details == ()


class TestAutoAllocate:
    """Tests for surplus auto-allocation."""

    def test_surplus_split(self):
        """Net 50,000 on a 10,000 / 10,000 plan: 25,000 each, no cash left."""
        policy = InvestmentPolicy(monthly_savings=10_000, monthly_investment=10_000, auto_allocate=True)
        result = project(Income(70_000), [MonthlyExpense("Rent", 20_000)], policy, 2, as_of=START)
        r = result.monthly_data[0]
        assert r.savings == pytest.approx(25_000)
        assert r.investment == pytest.approx(25_000)
        assert r.base_savings == 10_000
        assert r.cumulative_cash == pytest.approx(0.0)

    def test_deficit_keeps_plan(self):
        policy = InvestmentPolicy(monthly_savings=10_000, monthly_investment=10_000, auto_allocate=True)
        result = project(Income(30_000), [MonthlyExpense("Rent", 25_000)], policy, 1, as_of=START)
        r = result.monthly_data[0]
        assert (r.savings, r.investment) == (10_000, 10_000)
        assert r.cumulative_cash == pytest.approx(-15_000)


class TestBonusesInProjection:
    """Tests for bonus routing."""

    def test_bonus_month(self, salary_with_bonus):
        policy = InvestmentPolicy(monthly_savings=10_000, monthly_investment=10_000)
        result = project(salary_with_bonus, [], policy, 2, as_of=date(2025, 12, 1))
        dec, jan = result.monthly_data
        assert dec.bonus_income == 0
        assert jan.income == pytest.approx(180_000)
        assert jan.bonus_income == pytest.approx(120_000)
        assert jan.bonus_savings == pytest.approx(60_000)
        assert jan.bonus_investment == pytest.approx(36_000)
        assert jan.savings == pytest.approx(70_000)
        assert jan.investment == pytest.approx(46_000)
        assert len(jan.bonus_details) == 1
        assert jan.cumulative_cash - dec.cumulative_cash == pytest.approx(64_000)

    def test_yearly_income_record(self):
        result = project({"amount": 600_000, "type": "yearly"}, [], InvestmentPolicy(), 1, as_of=START)
        assert result.monthly_data[0].base_income == pytest.approx(50_000)


class TestSummary:
    """Tests for the steady-state summary and result export."""

    def test_steady_expenses(self, salary, rent, phone_plan, credit_loan):
        result = project(salary, [rent, phone_plan], InvestmentPolicy(), 12, loans=[credit_loan], as_of=START)
        expected = 18_000 + 1_500 + credit_loan.current_payment
        assert result.summary.monthly_expenses == pytest.approx(expected)
        assert result.summary.monthly_net == pytest.approx(45_000 - expected)

    def test_finished_plans_excluded(self, salary, rent):
        laptop = FiniteInstallment("Laptop", 3_000, total_installments=6, paid_installments=4)
        result = project(salary, [rent, laptop], InvestmentPolicy(), 12, as_of=START)
        assert result.summary.monthly_expenses == pytest.approx(18_000)

    def test_outflow(self, salary, rent, policy):
        s = project(salary, [rent], policy, 12, as_of=START).summary
        assert s.total_monthly_outflow == pytest.approx(38_000)
        assert s.base_monthly_income == 45_000

    def test_to_frame(self, salary, rent, policy):
        result = project(salary, [rent], policy, 6, as_of=START)
        df = result.to_frame()
        assert isinstance(df, pd.DataFrame)
        assert len(df) == 6
        assert df.index.name == "month"
        assert df.index[0] == pd.Timestamp("2025-01-01")
        assert df["net"].tolist() == [27_000] * 6
        assert "total_assets" in df.columns

    def test_debt_figures_attached(self, salary, rent):
        result = project(salary, [rent], InvestmentPolicy(), 3, as_of=START)
        assert result.debt_analysis.location == "Taipei City"
        assert result.housing_affordability.monthly_income == 45_000
        assert not result.debt_analysis_with_strategy.has_strategy


class TestValidation:
    """Tests for fatal input validation."""

    @pytest.mark.parametrize("amount", [0, -5, float("nan")])
    def test_income_amount(self, amount, rent):
        with pytest.raises(ValidationError, match="income.amount"):
            project(Income(amount), [rent], InvestmentPolicy(), 12)

    def test_income_record_amount(self):
        with pytest.raises(ValidationError, match="income.amount"):
            project({"amount": "lots"}, [], InvestmentPolicy(), 12)

    @pytest.mark.parametrize("months", [0, 121, "12", 1.5, True])
    def test_horizon(self, months, salary):
        with pytest.raises(TimeIndexError):
            project(salary, [], InvestmentPolicy(), months)

    def test_expenses_not_a_list(self, salary):
        with pytest.raises(ValidationError, match="expenses"):
            project(salary, None, InvestmentPolicy(), 12)

    def test_missing_policy(self, salary):
        with pytest.raises(ValidationError, match="investment"):
            project(salary, [], None, 12)

    def test_negative_loan_reduction(self, salary):
        with pytest.raises(ValidationError):
            project(salary, [], InvestmentPolicy(), 12, loan_payment_reduction=-1)

    def test_errors_share_base(self, salary):
        with pytest.raises(CashPlanError):
            project(salary, [], InvestmentPolicy(), 0)

    def test_numpy_scalars_accepted(self, rent):
        """Horizon and income amount may come out of numpy arrays."""
        months = np.arange(1, 13)[2]
        result = project({"amount": np.int64(45_000)}, [rent], InvestmentPolicy(), months, as_of=START)
        assert len(result.monthly_data) == 3
        assert result.monthly_data[0].income == 45_000
        result = project(Income(np.float64(45_000)), [rent], InvestmentPolicy(), np.int32(2), as_of=START)
        assert result.monthly_data[-1].month_index == 1


class TestRecordRecovery:
    """Tests for recovered per-record issues."""

    def test_blank_records_skipped(self, salary):
        records = [{"name": "", "amount": 100}, {"name": "Zero", "amount": 0}, {"name": "Rent", "amount": 18_000}]
        result = project(salary, records, InvestmentPolicy(), 2, as_of=START)
        assert result.monthly_data[0].expenses == 18_000
        assert result.diagnostics == ()

    def test_invalid_record(self, salary, rent):
        with pytest.warns(DataQualityWarning):
            result = project(salary, [{"name": "Bad", "amount": "abc"}, rent], InvestmentPolicy(), 2, as_of=START)
        assert result.monthly_data[0].expenses == 18_000
        d = result.diagnostics[0]
        assert (d.record_kind, d.record_name, d.month_index) == ("expense", "Bad", None)

    def test_unsupported_record_type(self, salary):
        with pytest.warns(DataQualityWarning):
            result = project(salary, [42], InvestmentPolicy(), 1, as_of=START)
        assert result.diagnostics[0].record_name == "#1"

    def test_malformed_payment_date(self, salary):
        """A bad date makes the expense due every month."""
        record = {"name": "Gym", "amount": 900, "paymentDate": "not-a-date"}
        with pytest.warns(DataQualityWarning):
            result = project(salary, [record], InvestmentPolicy(), 3, as_of=START)
        assert [r.expenses for r in result.monthly_data] == [900, 900, 900]
        assert "malformed payment date" in result.diagnostics[0].message

    def test_loan_records(self, salary):
        """Missing fields are skipped silently; a zero principal is reported."""
        loans = [
            {"name": "Half", "originalAmount": None},
            {"name": "Zero", "originalAmount": 0, "totalPeriods": 12},
        ]
        with pytest.warns(DataQualityWarning, match="Zero"):
            result = project(salary, [], InvestmentPolicy(), 2, loans=loans, as_of=START)
        assert len(result.diagnostics) == 1
        assert result.diagnostics[0].record_kind == "loan"
        assert result.monthly_data[0].loan_expenses == 0


class TestProjectScenario:
    """Tests for project_scenario."""

    def test_scenario(self):
        scenario = ScenarioConfig(
            income=IncomeConfig(amount=45_000),
            expenses=[ExpenseConfig(name="Rent", amount=18_000)],
            prediction_months=6,
            as_of=date(2025, 1, 1),
        )
        result = project_scenario(scenario)
        assert len(result.monthly_data) == 6
        assert result.horizon.start == date(2025, 1, 1)

    def test_overrides(self):
        scenario = ScenarioConfig(income=IncomeConfig(amount=45_000), as_of=date(2025, 1, 1))
        result = project_scenario(scenario, prediction_months=3, as_of=date(2026, 5, 20))
        assert len(result.monthly_data) == 3
        assert result.horizon.start == date(2026, 5, 1)
