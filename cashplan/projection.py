"""
Monthly projection driver for CashPlan.

Purpose
-------
Projects a household's cash position month by month: for each month of
the horizon it resolves every expense's and loan's charge, adds salary
and bonuses, moves the planned amounts to savings and investment, and
accumulates the running balances.

Per month m (0-based):

1. income   = base monthly income + bonuses paid in m's calendar month
2. expenses = ordinary expense charges + loan payments
   early payoffs (expense lump sums, loan prepayments) are tracked apart
3. net      = income - expenses
4. savings / investment contributions = policy base + bonus shares,
   plus the pro-rata surplus when auto-allocation is on
5. balances grow (compounding or not) and receive the contributions
6. cash    += net - savings - investment - early payoffs
7. total assets = cash + savings + investment

Records are emitted once, in month order, and never revisited.

Failure policy
--------------
Top-level inputs (income, expense list, policy, horizon) are validated
before anything is computed and raise ValidationError. A broken
individual expense or loan record only loses its own contribution: the
driver records a Diagnostic, emits a DataQualityWarning and carries on.

Example
-------
>>> from datetime import date
>>> from cashplan.income import Income
>>> from cashplan.investment import InvestmentPolicy
>>> result = project(Income(45_000), [{"name": "Rent", "amount": 18_000}],
...                  InvestmentPolicy(monthly_savings=10_000), 3,
...                  as_of=date(2025, 1, 15))
>>> [r.net for r in result.monthly_data]
[27000.0, 27000.0, 27000.0]
"""

from __future__ import annotations

import logging
import math
import numbers
import warnings
from dataclasses import dataclass
from datetime import date
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

import pandas as pd

from .config import ExpenseConfig, IncomeConfig, InvestmentPolicyConfig, LoanConfig, ScenarioConfig
from .constants import DEFAULT_LOCATION, MAX_PREDICTION_MONTHS, MIN_PREDICTION_MONTHS
from .cycles import Horizon
from .debt import (
    DebtAnalysis,
    EarlyPayoffComparison,
    HousingAffordability,
    MortgageTerms,
    analyze_debt,
    analyze_debt_with_early_payoff,
    housing_affordability,
)
from .exceptions import DataQualityWarning, RecordError, TimeIndexError, ValidationError
from .expenses import ExpenseModel, ExpenseStream
from .income import BonusDetail, Income, allocate_bonuses
from .investment import InvestmentPolicy, allocate_surplus, grow_balance
from .loans import Loan, PrepaymentPlan
from .serialization import (
    income_from_config,
    mortgage_from_config,
    policy_from_config,
    to_expense_stream,
    to_loan,
)
from .utils import format_currency

logger = logging.getLogger(__name__)

__all__ = [
    "ExpenseDetail",
    "EarlyPayoffDetail",
    "LoanDetail",
    "Diagnostic",
    "MonthRecord",
    "ProjectionSummary",
    "FinalAmounts",
    "InvestmentStats",
    "ProjectionResult",
    "project",
    "project_scenario",
]

IncomeLike = Union[Income, IncomeConfig, Mapping[str, Any]]
PolicyLike = Union[InvestmentPolicy, InvestmentPolicyConfig, Mapping[str, Any]]
ExpenseLike = Union[ExpenseStream, ExpenseConfig, Mapping[str, Any]]
LoanLike = Union[Loan, LoanConfig, Mapping[str, Any]]

_RECORD_ERRORS = (RecordError, ValueError, TypeError, KeyError, ArithmeticError)


# ---------------------------------------------------------------------------
# Output records
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ExpenseDetail:
    name: str
    kind: str
    amount: float
    is_active: bool
    annotation: Optional[str] = None


@dataclass(frozen=True)
class EarlyPayoffDetail:
    """Lump sum paid from accumulated assets (expense payoff or loan prepayment)."""
    name: str
    amount: float
    source: str
    annotation: Optional[str] = None


@dataclass(frozen=True)
class LoanDetail:
    name: str
    payment: float
    is_last_month: bool = False


@dataclass(frozen=True)
class Diagnostic:
    """A recovered problem with one input record."""
    record_kind: str
    record_name: str
    month_index: Optional[int]
    message: str


@dataclass(frozen=True)
class MonthRecord:
    """
    One projected month.

    ``month_index`` is 0-based; ``month`` is the first day of the calendar
    month. ``expenses`` excludes early payoffs, which are reported in
    ``early_payoffs`` and only reduce cash.
    """
    month_index: int
    month: date
    income: float
    base_income: float
    bonus_income: float
    expenses: float
    regular_expenses: float
    loan_expenses: float
    early_payoffs: float
    net: float
    savings: float
    investment: float
    base_savings: float
    base_investment: float
    bonus_savings: float
    bonus_investment: float
    cumulative_cash: float
    cumulative_savings: float
    cumulative_investment: float
    total_assets: float
    bonus_details: Tuple[BonusDetail, ...] = ()
    expense_details: Tuple[ExpenseDetail, ...] = ()
    loan_details: Tuple[LoanDetail, ...] = ()
    early_payoff_details: Tuple[EarlyPayoffDetail, ...] = ()


@dataclass(frozen=True)
class ProjectionSummary:
    """Steady-state monthly figures (bonuses excluded)."""
    monthly_income: float
    base_monthly_income: float
    total_annual_bonus: float
    monthly_expenses: float
    monthly_net: float
    monthly_savings: float
    monthly_investment: float
    total_monthly_outflow: float


@dataclass(frozen=True)
class FinalAmounts:
    cash: float
    savings: float
    investment: float
    total: float


@dataclass(frozen=True)
class InvestmentStats:
    """Contributions actually made over the horizon and the growth on top of them."""
    total_invested: float
    total_returns: float
    total_saved: float
    savings_interest: float


_FRAME_COLUMNS = [
    "income",
    "base_income",
    "bonus_income",
    "expenses",
    "regular_expenses",
    "loan_expenses",
    "early_payoffs",
    "net",
    "savings",
    "investment",
    "cumulative_cash",
    "cumulative_savings",
    "cumulative_investment",
    "total_assets",
]


@dataclass(frozen=True)
class ProjectionResult:
    horizon: Horizon
    summary: ProjectionSummary
    monthly_data: Tuple[MonthRecord, ...]
    final_amounts: FinalAmounts
    investment_stats: InvestmentStats
    debt_analysis: DebtAnalysis
    debt_analysis_with_strategy: EarlyPayoffComparison
    housing_affordability: HousingAffordability
    diagnostics: Tuple[Diagnostic, ...] = ()

    def to_frame(self) -> pd.DataFrame:
        """Numeric month columns indexed by the first day of each month."""
        rows = [{c: getattr(r, c) for c in _FRAME_COLUMNS} for r in self.monthly_data]
        index = self.horizon.index().rename("month")
        return pd.DataFrame(rows, index=index, columns=_FRAME_COLUMNS)


# ---------------------------------------------------------------------------
# Input normalization
# ---------------------------------------------------------------------------

class _Diagnostics:
    """Collects recovered record issues; each one is logged and warned."""

    def __init__(self) -> None:
        self.items: List[Diagnostic] = []

    def add(
        self, kind: str, name: str, month_index: Optional[int], message: str, *, warn: bool = True
    ) -> None:
        if warn:
            where = "" if month_index is None else f" (month {month_index + 1})"
            text = f"{kind} {name!r}{where}: {message}"
            logger.warning(text)
            warnings.warn(text, DataQualityWarning, stacklevel=3)
        self.items.append(Diagnostic(kind, name, month_index, message))


def _record_name(record: Any, fallback: str) -> str:
    if isinstance(record, Mapping):
        return str(record.get("name") or fallback)
    return str(getattr(record, "name", None) or fallback)


def _is_number(value: Any) -> bool:
    return isinstance(value, numbers.Real) and not isinstance(value, bool) and math.isfinite(value)


def _validate_income(income: IncomeLike, default_location: str) -> Income:
    if isinstance(income, Mapping):
        amount = income.get("amount")
        if not _is_number(amount) or amount <= 0:
            raise ValidationError(f"income.amount must be a positive number (got {amount!r})")
        try:
            income = IncomeConfig.model_validate({**income, "amount": float(amount)})
        except ValueError as e:
            raise ValidationError(f"invalid income record: {e}") from e
    if isinstance(income, IncomeConfig):
        try:
            income = income_from_config(income, default_location)
        except ValueError as e:
            raise ValidationError(f"invalid income record: {e}") from e
    if not isinstance(income, Income):
        raise ValidationError(f"income must be an Income or an income record (got {type(income).__name__})")
    if not _is_number(income.amount) or income.amount <= 0:
        raise ValidationError(f"income.amount must be a positive number (got {income.amount!r})")
    return income


def _validate_policy(investment: PolicyLike) -> InvestmentPolicy:
    if isinstance(investment, Mapping):
        try:
            investment = InvestmentPolicyConfig.model_validate(investment)
        except ValueError as e:
            raise ValidationError(f"invalid investment policy: {e}") from e
    if isinstance(investment, InvestmentPolicyConfig):
        investment = policy_from_config(investment)
    if not isinstance(investment, InvestmentPolicy):
        raise ValidationError(
            f"investment must be an InvestmentPolicy or a policy record (got {type(investment).__name__})"
        )
    return investment


def _validate_months(prediction_months: Any) -> int:
    if not isinstance(prediction_months, numbers.Integral) or isinstance(prediction_months, bool):
        raise TimeIndexError(f"prediction_months must be an integer (got {prediction_months!r})")
    if not MIN_PREDICTION_MONTHS <= prediction_months <= MAX_PREDICTION_MONTHS:
        raise TimeIndexError(
            f"prediction_months must be in [{MIN_PREDICTION_MONTHS}, {MAX_PREDICTION_MONTHS}] "
            f"(got {prediction_months})"
        )
    return int(prediction_months)


def _as_list(value: Any, name: str) -> list:
    if value is None and name == "loans":
        return []
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, (list, tuple)):
        raise ValidationError(f"{name} must be a list (got {type(value).__name__})")
    return list(value)


def _build_streams(records: Sequence[ExpenseLike], diags: _Diagnostics) -> List[ExpenseStream]:
    streams = []
    for i, record in enumerate(records):
        name = _record_name(record, f"#{i + 1}")
        try:
            stream = to_expense_stream(record)
        except _RECORD_ERRORS as e:
            diags.add("expense", name, None, f"record ignored: {e}")
            continue
        if stream is None:
            continue
        anchor = getattr(stream, "anchor", None)
        if anchor is not None and anchor.malformed is not None:
            # already warned when the anchor was parsed
            diags.add(
                "expense", name, None, f"malformed payment date {anchor.malformed!r}; due every month", warn=False
            )
        streams.append(stream)
    return streams


def _build_loans(records: Sequence[LoanLike], diags: _Diagnostics) -> List[Loan]:
    loans = []
    for i, record in enumerate(records):
        name = _record_name(record, f"loan #{i + 1}")
        try:
            loan = to_loan(record)
        except _RECORD_ERRORS as e:
            diags.add("loan", name, None, f"record ignored: {e}")
            continue
        if loan is None:
            continue
        if not loan.is_serviceable:
            diags.add("loan", name, None, "non-positive principal or term; contributes nothing")
            continue
        loans.append(loan)
    return loans


# ---------------------------------------------------------------------------
# Driver
# ---------------------------------------------------------------------------

def _steady_monthly_expenses(model: ExpenseModel, loans: Iterable[Loan], months: int) -> float:
    total = model.steady_monthly_total(months)
    for loan in loans:
        if loan.remaining_periods > months and not loan.has_prepayment:
            total += loan.current_payment
    return max(0.0, total)


def project(
    income: IncomeLike,
    expenses: Sequence[ExpenseLike],
    investment: PolicyLike,
    prediction_months: int,
    loan_payment_reduction: float = 0.0,
    loans: Optional[Sequence[LoanLike]] = None,
    *,
    as_of: Optional[date] = None,
    mortgage: Optional[MortgageTerms] = None,
    default_location: str = DEFAULT_LOCATION,
) -> ProjectionResult:
    """
    Project cash, savings and investment balances month by month.

    Parameters
    ----------
    income : Income or income record
        ``amount`` must be a positive number.
    expenses : list of ExpenseStream or expense records
        May be empty. Records without a name or with a zero amount are
        skipped; broken records are reported in ``diagnostics``.
    investment : InvestmentPolicy or policy record
    prediction_months : int
        Horizon length, 1 to 120.
    loan_payment_reduction : float, default 0
        Monthly payment reduction from loan prepayments, applied to the
        debt-to-income ratio (see ``loans.total_payment_reduction``).
    loans : list of Loan or loan records, optional
        Records missing the principal or the term are skipped silently.
    as_of : date, optional
        Any date in the first projected month (default: today). All
        "already paid" counts are facts as of this month.
    mortgage : MortgageTerms, optional
        Terms of the hypothetical mortgage in the affordability figure.
    default_location : str
        Location used when the income carries none.

    Returns
    -------
    ProjectionResult

    Raises
    ------
    ValidationError
        Invalid income, expense list or investment policy.
    TimeIndexError
        ``prediction_months`` outside [1, 120].
    """
    income = _validate_income(income, default_location)
    expense_records = _as_list(expenses, "expenses")
    policy = _validate_policy(investment)
    months = _validate_months(prediction_months)
    loan_records = _as_list(loans, "loans")
    if not _is_number(loan_payment_reduction) or loan_payment_reduction < 0:
        raise ValidationError(
            f"loan_payment_reduction must be a non-negative number (got {loan_payment_reduction!r})"
        )

    diags = _Diagnostics()
    horizon = Horizon.from_as_of(as_of, months)
    model = ExpenseModel(tuple(_build_streams(expense_records, diags)))
    loan_objs = _build_loans(loan_records, diags)
    logger.debug(
        "projecting %d months from %s: %d expenses, %d loans",
        months, horizon.start, len(model.streams), len(loan_objs),
    )

    resolved = []
    for r in model.resolve(horizon):
        if r.ok:
            resolved.append(r)
        else:
            diags.add("expense", r.stream.name, None, f"cannot be resolved: {r.error}")

    plans: List[Tuple[Loan, Optional[PrepaymentPlan]]] = []
    for loan in loan_objs:
        try:
            plans.append((loan, loan.prepayment_plan()))
        except _RECORD_ERRORS as e:
            diags.add("loan", loan.name, None, f"prepayment plan failed: {e}")

    base_income = income.monthly_amount
    cash = savings_balance = investment_balance = 0.0
    records: List[MonthRecord] = []

    for m in range(months):
        bonus = allocate_bonuses(income.bonuses, horizon.calendar_month(m))
        month_income = base_income + bonus.total

        regular = payoffs = 0.0
        expense_details: List[ExpenseDetail] = []
        payoff_details: List[EarlyPayoffDetail] = []
        for r in resolved:
            c = r.charges[m]
            if c.is_early_payoff:
                payoffs += c.amount
                payoff_details.append(EarlyPayoffDetail(r.stream.name, c.amount, "expense", c.annotation))
                expense_details.append(ExpenseDetail(r.stream.name, r.stream.kind, 0.0, c.is_active, c.annotation))
                continue
            regular += c.amount
            if c.amount > 0 or c.annotation:
                expense_details.append(ExpenseDetail(r.stream.name, r.stream.kind, c.amount, c.is_active, c.annotation))

        loan_total = 0.0
        loan_details: List[LoanDetail] = []
        for loan, plan in plans:
            try:
                charge = loan.charge(m + 1, plan)
            except _RECORD_ERRORS as e:
                diags.add("loan", loan.name, m, f"payment treated as zero: {e}")
                continue
            loan_total += charge.payment
            if charge.payment > 0:
                loan_details.append(LoanDetail(loan.name, charge.payment, charge.is_last_month))
            if charge.prepayment > 0:
                payoffs += charge.prepayment
                payoff_details.append(
                    EarlyPayoffDetail(
                        loan.name,
                        charge.prepayment,
                        "loan",
                        f"{loan.name} prepayment: {format_currency(charge.prepayment)}",
                    )
                )

        month_expenses = regular + loan_total
        net = month_income - month_expenses

        month_savings = policy.monthly_savings + bonus.savings
        month_investment = policy.monthly_investment + bonus.investment
        if policy.auto_allocate:
            month_savings, month_investment = allocate_surplus(net, month_savings, month_investment)

        savings_balance = grow_balance(
            savings_balance, policy.monthly_savings_rate, month_savings, policy.compound_interest
        )
        investment_balance = grow_balance(
            investment_balance, policy.monthly_investment_rate, month_investment, policy.compound_interest
        )
        cash += net - month_savings - month_investment - payoffs

        records.append(
            MonthRecord(
                month_index=m,
                month=horizon.month_start(m),
                income=month_income,
                base_income=base_income,
                bonus_income=bonus.total,
                expenses=month_expenses,
                regular_expenses=regular,
                loan_expenses=loan_total,
                early_payoffs=payoffs,
                net=net,
                savings=month_savings,
                investment=month_investment,
                base_savings=policy.monthly_savings,
                base_investment=policy.monthly_investment,
                bonus_savings=bonus.savings,
                bonus_investment=bonus.investment,
                cumulative_cash=cash,
                cumulative_savings=savings_balance,
                cumulative_investment=investment_balance,
                total_assets=cash + savings_balance + investment_balance,
                bonus_details=bonus.details,
                expense_details=tuple(expense_details),
                loan_details=tuple(loan_details),
                early_payoff_details=tuple(payoff_details),
            )
        )

    steady = _steady_monthly_expenses(model, loan_objs, months)
    summary = ProjectionSummary(
        monthly_income=base_income,
        base_monthly_income=base_income,
        total_annual_bonus=income.annual_bonus_total,
        monthly_expenses=steady,
        monthly_net=base_income - steady,
        monthly_savings=policy.monthly_savings,
        monthly_investment=policy.monthly_investment,
        total_monthly_outflow=steady + policy.monthly_savings + policy.monthly_investment,
    )
    invested = sum(r.investment for r in records)
    saved = sum(r.savings for r in records)

    debt = analyze_debt(base_income, model.streams, income.location, loan_payment_reduction, loan_objs)
    strategy = analyze_debt_with_early_payoff(base_income, model.streams, income.location, months, loan_objs)
    affordability = housing_affordability(
        base_income, debt.debt.non_housing, debt.minimum_living_cost, mortgage
    )

    return ProjectionResult(
        horizon=horizon,
        summary=summary,
        monthly_data=tuple(records),
        final_amounts=FinalAmounts(cash, savings_balance, investment_balance, cash + savings_balance + investment_balance),
        investment_stats=InvestmentStats(
            total_invested=invested,
            total_returns=investment_balance - invested,
            total_saved=saved,
            savings_interest=savings_balance - saved,
        ),
        debt_analysis=debt,
        debt_analysis_with_strategy=strategy,
        housing_affordability=affordability,
        diagnostics=tuple(diags.items),
    )


def project_scenario(
    scenario: ScenarioConfig,
    *,
    prediction_months: Optional[int] = None,
    as_of: Optional[date] = None,
    default_location: str = DEFAULT_LOCATION,
) -> ProjectionResult:
    """Run ``project`` on a validated scenario, optionally overriding horizon and start."""
    return project(
        scenario.income,
        scenario.expenses,
        scenario.investment,
        scenario.prediction_months if prediction_months is None else prediction_months,
        scenario.loan_payment_reduction,
        scenario.loans,
        as_of=as_of or scenario.as_of,
        mortgage=mortgage_from_config(scenario.mortgage),
        default_location=default_location,
    )
