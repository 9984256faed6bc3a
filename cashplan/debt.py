"""
Debt and housing-affordability analysis for CashPlan.

Purpose
-------
Aggregates the expense and loan set into monthly debt-service figures,
independently of the month-by-month projection:

- analyze_debt:
    Classifies every obligation as housing, credit loan, card installments
    or other debt, and derives the general debt-to-income ratio (five risk
    tiers) and the bank income-to-expense ratio (income must cover at
    least twice housing + credit loan + card installments + the minimum
    living cost of the household's location).
- analyze_debt_with_early_payoff:
    Before/after comparison of the ratios when installment plans are paid
    off early or loans prepaid within the horizon.
- housing_affordability:
    Largest mortgage the residual income supports, by PMT inversion, plus
    a short affordability outlook.

All ratios are percentages rounded to two decimals.
"""

from __future__ import annotations

import logging
import warnings
from dataclasses import dataclass
from typing import Any, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .amortization import monthly_payment, principal_from_payment
from .constants import (
    AFFORDABILITY_PROJECTION_MONTHS,
    BANK_QUALIFYING_RATIO,
    BANK_RATIO_TIERS,
    DEFAULT_LOAN_TO_VALUE_PCT,
    DEFAULT_LOCATION,
    DEFAULT_MORTGAGE_RATE_PCT,
    DEFAULT_MORTGAGE_YEARS,
    DEFAULT_PREDICTION_MONTHS,
    GENERAL_DEBT_TIERS,
    HOUSING_CAPACITY_TIERS,
    LOCATION_ALIASES,
    MINIMUM_LIVING_COSTS,
    MONTHS_PER_YEAR,
    OTHER_LOCATION,
)
from .exceptions import DataQualityWarning, RecordError
from .expenses import (
    ExpenseStream,
    FiniteInstallment,
    MonthlyExpense,
    RepeatingInstallment,
    YearlyExpense,
)
from .loans import Loan
from .utils import format_currency, round_ratio

logger = logging.getLogger(__name__)

__all__ = [
    "DebtCategory",
    "DebtBreakdown",
    "RiskAssessment",
    "BankRatioAssessment",
    "OverallRecommendation",
    "DebtAnalysis",
    "DebtSnapshot",
    "PayoffScheduleEntry",
    "EarlyPayoffComparison",
    "MortgageTerms",
    "AffordabilityMonth",
    "AffordabilityOutlook",
    "HousingAffordability",
    "resolve_location",
    "minimum_living_cost",
    "classify_debt",
    "monthly_debt_amount",
    "general_risk_level",
    "bank_risk_level",
    "analyze_debt",
    "analyze_debt_with_early_payoff",
    "housing_affordability",
]

DebtCategory = str  # "housing" | "credit_loan" | "card_installment" | "other" | "none"
ExpenseLike = Union[ExpenseStream, Mapping[str, Any]]
LoanLike = Union[Loan, Mapping[str, Any]]

_HOUSING_KEYWORDS = ("房貸", "房屋貸款", "住宅貸款", "mortgage", "home loan", "housing loan")
_CREDIT_LOAN_KEYWORDS = ("信貸", "信用貸款", "個人信貸", "credit loan", "personal loan")
_CARD_KEYWORDS = ("分期", "信用卡", "installment", "credit card")
_OTHER_DEBT_KEYWORDS = ("貸款", "借款", "loan", "debt")
_DEBT_KEYWORDS = ("分期", "貸款", "信貸", "房貸", "installment", "loan", "mortgage")

_GENERAL_RECOMMENDATIONS = {
    "excellent": "Debt is well managed and finances are healthy; consider raising savings or investment.",
    "good": "Debt is under control; keep the current plan and review it periodically.",
    "acceptable": "Debt burden is acceptable, but avoid taking on new debt.",
    "caution": "Debt pressure is high; repay high-rate debt first and avoid new loans.",
    "high-risk": "Debt ratio is too high; set up a repayment plan now and seek professional advice if needed.",
}

_BANK_RECOMMENDATIONS = {
    "excellent": "Income-to-expense ratio is excellent; mortgage conditions are very favorable.",
    "good": "Income-to-expense ratio is good and meets mortgage requirements; keep income stable.",
    "qualified": "Meets the 200% bank standard; more income or less debt would improve approval odds.",
    "caution": "Below the bank standard; reduce existing debt or raise income before applying for a mortgage.",
    "high-risk": "Ratio is too low; consolidate debt first and postpone any mortgage application.",
}


# ---------------------------------------------------------------------------
# Locations
# ---------------------------------------------------------------------------

def resolve_location(location: Optional[str]) -> str:
    """Canonical location name; unknown locations map to "Other"."""
    if not location:
        return DEFAULT_LOCATION
    name = LOCATION_ALIASES.get(location.strip(), location.strip())
    return name if name in MINIMUM_LIVING_COSTS else OTHER_LOCATION


def minimum_living_cost(location: Optional[str]) -> float:
    """Monthly minimum living cost of *location*."""
    return float(MINIMUM_LIVING_COSTS[resolve_location(location)])


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

def _resolve_records(
    expenses: Iterable[ExpenseLike], loans: Iterable[LoanLike]
) -> Tuple[List[ExpenseStream], List[Loan]]:
    """
    Domain objects for the expense and loan inputs.

    Plain records (expense or loan dictionaries, validated configs) are
    converted; a record that cannot be converted is skipped with a
    DataQualityWarning.
    """
    from .serialization import to_expense_stream, to_loan

    streams: List[ExpenseStream] = []
    for record in expenses:
        try:
            stream = to_expense_stream(record)
        except (RecordError, ValueError, TypeError) as e:
            _skip("expense", record, e)
            continue
        if stream is not None:
            streams.append(stream)

    loan_objs: List[Loan] = []
    for record in loans:
        try:
            loan = to_loan(record)
        except (RecordError, ValueError, TypeError) as e:
            _skip("loan", record, e)
            continue
        if loan is not None:
            loan_objs.append(loan)
    return streams, loan_objs


def _skip(kind: str, record: Any, error: Exception) -> None:
    name = record.get("name") if isinstance(record, Mapping) else getattr(record, "name", "?")
    message = f"{kind} {name!r} ignored in debt analysis: {error}"
    logger.warning(message)
    warnings.warn(message, DataQualityWarning, stacklevel=3)


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------

def _contains(name: str, keywords: Sequence[str]) -> bool:
    lowered = name.lower()
    return any(k in lowered for k in keywords)


def classify_debt(stream: ExpenseStream) -> DebtCategory:
    """
    Debt category of an expense, by name keywords then lifecycle.

    Installment plans default to card installments; any non-monthly
    expense, or a monthly one named like a loan, counts as other debt.
    Remaining monthly expenses are living costs ("none").
    """
    name = stream.name
    if _contains(name, _HOUSING_KEYWORDS):
        return "housing"
    if _contains(name, _CREDIT_LOAN_KEYWORDS):
        return "credit_loan"
    if _contains(name, _CARD_KEYWORDS) or stream.is_installment:
        return "card_installment"
    if not isinstance(stream, MonthlyExpense) or _contains(name, _OTHER_DEBT_KEYWORDS):
        return "other"
    return "none"


def _is_debt_expense(stream: ExpenseStream) -> bool:
    return stream.is_installment or _contains(stream.name, _DEBT_KEYWORDS)


def monthly_debt_amount(stream: ExpenseStream) -> float:
    """
    Average monthly burden of an expense for ratio purposes.

    An installment plan with an early payoff is spread over the months it
    is still paid within a year; a completed plan contributes nothing.
    """
    if isinstance(stream, (FiniteInstallment, RepeatingInstallment)):
        if stream.early_payoff is not None:
            return stream.amount * min(stream.early_payoff.month, MONTHS_PER_YEAR) / MONTHS_PER_YEAR
        return float(stream.amount) if stream.remaining_installments > 0 else 0.0
    if isinstance(stream, YearlyExpense):
        return stream.amount / MONTHS_PER_YEAR
    return float(stream.amount)


def _regular_monthly_amount(stream: ExpenseStream) -> float:
    if isinstance(stream, (FiniteInstallment, RepeatingInstallment)):
        return float(stream.amount) if stream.remaining_installments > 0 else 0.0
    if isinstance(stream, YearlyExpense):
        return stream.amount / MONTHS_PER_YEAR
    return float(stream.amount)


# ---------------------------------------------------------------------------
# Risk tiers
# ---------------------------------------------------------------------------

def general_risk_level(ratio: float) -> str:
    """Tier of a debt-to-income ratio (lower is better)."""
    for bound, level in GENERAL_DEBT_TIERS:
        if ratio <= bound:
            return level
    return "high-risk"


def bank_risk_level(ratio: float) -> str:
    """Tier of a bank income-to-expense ratio (higher is better)."""
    for bound, level in BANK_RATIO_TIERS:
        if ratio >= bound:
            return level
    return "high-risk"


# ---------------------------------------------------------------------------
# Debt analysis
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DebtBreakdown:
    housing: float = 0.0
    credit_loan: float = 0.0
    card_installments: float = 0.0
    other: float = 0.0
    total: float = 0.0

    @property
    def non_housing(self) -> float:
        return self.credit_loan + self.card_installments + self.other


@dataclass(frozen=True)
class RiskAssessment:
    ratio: float
    risk_level: str
    recommendation: str


@dataclass(frozen=True)
class BankRatioAssessment:
    required_expenses: float
    ratio: float
    is_qualified: bool
    risk_level: str
    recommendation: str


@dataclass(frozen=True)
class OverallRecommendation:
    priority: str
    title: str
    actions: Tuple[str, ...]


@dataclass(frozen=True)
class DebtAnalysis:
    """Result of ``analyze_debt``."""
    monthly_income: float
    minimum_living_cost: float
    location: str
    debt: DebtBreakdown
    general: RiskAssessment
    bank: BankRatioAssessment
    overall: OverallRecommendation


def _overall_recommendation(general_ratio: float, bank_ratio: float) -> OverallRecommendation:
    if general_ratio > 50 or bank_ratio < 150:
        return OverallRecommendation(
            "urgent",
            "Finances need immediate attention",
            (
                "Stop taking on new debt",
                "Prioritize debt repayment",
                "Consider consolidating debt to lower interest",
                "Seek professional financial or debt counseling",
                "Increase income or cut non-essential spending",
            ),
        )
    if general_ratio > 40 or bank_ratio < 200:
        return OverallRecommendation(
            "high",
            "Adjust the financial strategy",
            (
                "Repay high-rate debt first",
                "Postpone large purchases and new loans",
                "Build an emergency fund",
                "Review and cut non-essential spending",
                "Look for additional income",
            ),
        )
    if general_ratio > 30 or bank_ratio < 250:
        return OverallRecommendation(
            "medium",
            "Optimize the financial allocation",
            (
                "Keep debt at the current level",
                "Build up the emergency fund",
                "Review the financial plan regularly",
                "A mortgage is possible, but a higher income ratio helps",
                "Aim for a bank ratio above 250%",
            ),
        )
    return OverallRecommendation(
        "low",
        "Finances are in good shape",
        (
            "Keep the current financial habits",
            "Eligible for an 80% first-home mortgage on good terms",
            "Consider increasing investments",
            "Set long-term financial goals",
            "Invest in quality of life or education",
        ),
    )


def analyze_debt(
    monthly_income: float,
    expenses: Iterable[ExpenseLike] = (),
    location: Optional[str] = DEFAULT_LOCATION,
    loan_payment_reduction: float = 0.0,
    loans: Iterable[LoanLike] = (),
) -> DebtAnalysis:
    """
    Debt ratios of a household, without running a projection.

    Parameters
    ----------
    monthly_income : float
        Base monthly income (bonuses excluded).
    expenses : iterable of ExpenseStream or expense records
        Plain records use the same shape as ``project`` accepts.
    location : str, optional
        Location tag for the minimum living cost (romanised or Chinese
        name; unknown tags use the "Other" row).
    loan_payment_reduction : float, default 0
        Monthly payment reduction obtained by loan prepayments, subtracted
        from the total debt (see ``total_payment_reduction``).
    loans : iterable of Loan or loan records
        Counted as credit loans at their current level payment.

    Returns
    -------
    DebtAnalysis

    Examples
    --------
    >>> a = analyze_debt(100_000, [MonthlyExpense("Mortgage", 20_000)])
    >>> a.general.ratio, a.general.risk_level
    (20.0, 'excellent')
    """
    place = resolve_location(location)
    living_cost = minimum_living_cost(place)
    expenses, loans = _resolve_records(expenses, loans)

    housing = credit = card = other = 0.0
    for stream in expenses:
        if not stream.name or stream.amount <= 0:
            continue
        category = classify_debt(stream)
        amount = monthly_debt_amount(stream)
        if category == "housing":
            housing += amount
        elif category == "credit_loan":
            credit += amount
        elif category == "card_installment":
            card += amount
        elif category == "other":
            other += amount

    for loan in loans:
        if loan.is_serviceable and loan.remaining_periods > 0:
            credit += loan.current_payment

    total = max(0.0, housing + credit + card + other - loan_payment_reduction)
    general_ratio = total / monthly_income * 100 if monthly_income > 0 else 0.0

    required = housing + living_cost + credit + card
    bank_ratio = monthly_income / required * 100 if required > 0 else 0.0
    qualified = bank_ratio >= BANK_QUALIFYING_RATIO

    general_level = general_risk_level(general_ratio)
    bank_level = bank_risk_level(bank_ratio)
    logger.debug(
        "debt analysis: total %.2f, general %.2f%% (%s), bank %.2f%% (%s)",
        total, general_ratio, general_level, bank_ratio, bank_level,
    )
    return DebtAnalysis(
        monthly_income=float(monthly_income),
        minimum_living_cost=living_cost,
        location=place,
        debt=DebtBreakdown(housing, credit, card, other, total),
        general=RiskAssessment(round_ratio(general_ratio), general_level, _GENERAL_RECOMMENDATIONS[general_level]),
        bank=BankRatioAssessment(
            required_expenses=required,
            ratio=round_ratio(bank_ratio),
            is_qualified=qualified,
            risk_level=bank_level,
            recommendation=_BANK_RECOMMENDATIONS[bank_level],
        ),
        overall=_overall_recommendation(general_ratio, bank_ratio),
    )


# ---------------------------------------------------------------------------
# Early payoff comparison
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DebtSnapshot:
    """Monthly burden and ratios on one side of the comparison."""
    monthly_debt: float
    monthly_expenses: float
    debt_ratio: float
    expense_ratio: float
    bank_ratio: float
    risk_level: str


@dataclass(frozen=True)
class PayoffScheduleEntry:
    name: str
    payoff_month: int
    monthly_savings: float
    total_savings: float
    remaining_installments: Optional[int] = None
    new_monthly_payment: Optional[float] = None


@dataclass(frozen=True)
class EarlyPayoffComparison:
    """Result of ``analyze_debt_with_early_payoff``."""
    has_strategy: bool
    schedule: Tuple[PayoffScheduleEntry, ...]
    before: DebtSnapshot
    after: DebtSnapshot
    debt_ratio_reduction: float
    expense_ratio_reduction: float
    bank_ratio_improvement: float
    total_savings: float
    monthly_debt_reduction: float
    monthly_expense_reduction: float


def _snapshot(income: float, debt: float, spending: float, living_cost: float) -> DebtSnapshot:
    debt_ratio = debt / income * 100 if income > 0 else 0.0
    expense_ratio = spending / income * 100 if income > 0 else 0.0
    bank_ratio = income / (debt + living_cost) * 100 if debt > 0 else 0.0
    return DebtSnapshot(
        monthly_debt=debt,
        monthly_expenses=spending,
        debt_ratio=round_ratio(debt_ratio),
        expense_ratio=round_ratio(expense_ratio),
        bank_ratio=round_ratio(bank_ratio),
        risk_level=general_risk_level(debt_ratio),
    )


def analyze_debt_with_early_payoff(
    monthly_income: float,
    expenses: Iterable[ExpenseLike] = (),
    location: Optional[str] = DEFAULT_LOCATION,
    prediction_months: int = DEFAULT_PREDICTION_MONTHS,
    loans: Iterable[LoanLike] = (),
) -> EarlyPayoffComparison:
    """
    Compare debt ratios with and without the planned early payoffs.

    An installment plan paid off within the horizon is counted after the
    payoff as its average burden over the horizon; a loan prepaid within
    the horizon is counted at its re-amortized payment. Savings are the
    installments (or payment reductions) no longer due.
    """
    expenses, loans = _resolve_records(expenses, loans)
    living_cost = minimum_living_cost(location)
    debt_before = debt_after = spend_before = spend_after = 0.0
    savings_total = 0.0
    schedule: List[PayoffScheduleEntry] = []

    for stream in expenses:
        if not stream.name or stream.amount <= 0:
            continue
        monthly = _regular_monthly_amount(stream)
        is_debt = _is_debt_expense(stream)
        spend_before += monthly
        if is_debt:
            debt_before += monthly

        payoff = getattr(stream, "early_payoff", None)
        after = monthly
        if payoff is not None and payoff.month <= prediction_months:
            after = monthly * payoff.month / prediction_months
            remaining = stream.remaining_installments
            saved = stream.amount * max(0, remaining - payoff.month)
            savings_total += saved
            schedule.append(
                PayoffScheduleEntry(
                    name=stream.name,
                    payoff_month=payoff.month,
                    monthly_savings=monthly,
                    total_savings=saved,
                    remaining_installments=remaining,
                )
            )
        spend_after += after
        if is_debt:
            debt_after += after

    for loan in loans:
        if not (loan.is_serviceable and loan.remaining_periods > 0):
            continue
        payment = loan.current_payment
        debt_before += payment
        spend_before += payment
        plan = loan.prepayment_plan()
        if plan is None or loan.prepayment_month > prediction_months:
            debt_after += payment
            spend_after += payment
            continue
        debt_after += plan.payment_after
        spend_after += plan.payment_after
        reduction = payment - plan.payment_after
        schedule.append(
            PayoffScheduleEntry(
                name=loan.name,
                payoff_month=plan.month,
                monthly_savings=reduction,
                total_savings=reduction * plan.periods_after,
                new_monthly_payment=plan.payment_after,
            )
        )

    before = _snapshot(monthly_income, debt_before, spend_before, living_cost)
    after = _snapshot(monthly_income, debt_after, spend_after, living_cost)
    return EarlyPayoffComparison(
        has_strategy=bool(schedule),
        schedule=tuple(schedule),
        before=before,
        after=after,
        debt_ratio_reduction=round_ratio(before.debt_ratio - after.debt_ratio),
        expense_ratio_reduction=round_ratio(before.expense_ratio - after.expense_ratio),
        bank_ratio_improvement=round_ratio(after.bank_ratio - before.bank_ratio),
        total_savings=savings_total,
        monthly_debt_reduction=debt_before - debt_after,
        monthly_expense_reduction=spend_before - spend_after,
    )


# ---------------------------------------------------------------------------
# Housing affordability
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MortgageTerms:
    """Hypothetical mortgage used by the affordability figure."""
    loan_to_value_pct: float = DEFAULT_LOAN_TO_VALUE_PCT
    annual_rate_pct: float = DEFAULT_MORTGAGE_RATE_PCT
    years: int = DEFAULT_MORTGAGE_YEARS

    def __post_init__(self) -> None:
        if not 0 < self.loan_to_value_pct <= 100:
            raise ValueError(f"loan_to_value_pct must be in (0, 100] (got {self.loan_to_value_pct}).")
        if self.annual_rate_pct < 0:
            raise ValueError(f"annual_rate_pct must be non-negative (got {self.annual_rate_pct}).")
        if self.years <= 0:
            raise ValueError(f"years must be positive (got {self.years}).")

    @property
    def periods(self) -> int:
        return self.years * MONTHS_PER_YEAR


@dataclass(frozen=True)
class AffordabilityMonth:
    month: int
    monthly_income: float
    current_monthly_debt: float
    available_for_housing: float
    debt_to_income_ratio: float
    bank_ratio: float
    capacity: str
    is_qualified: bool


@dataclass(frozen=True)
class AffordabilityOutlook:
    months: Tuple[AffordabilityMonth, ...]
    avg_available_for_housing: float
    avg_debt_ratio: float
    avg_bank_ratio: float
    qualified_months: int
    qualification_rate: float
    recommendation: str
    priority: str


def _housing_capacity(available: float) -> str:
    for bound, level in HOUSING_CAPACITY_TIERS:
        if available >= bound:
            return level
    return "low"


def _affordability_outlook(income: float, debt: float, living_cost: float) -> AffordabilityOutlook:
    rows = []
    for month in range(1, AFFORDABILITY_PROJECTION_MONTHS + 1):
        available = income / 2 - living_cost - debt
        obligations = debt + living_cost
        bank_ratio = income / obligations * 100 if income > 0 and obligations > 0 else 0.0
        rows.append(
            AffordabilityMonth(
                month=month,
                monthly_income=income,
                current_monthly_debt=debt,
                available_for_housing=max(0.0, available),
                debt_to_income_ratio=round_ratio(debt / income * 100) if income > 0 else 0.0,
                bank_ratio=round_ratio(bank_ratio),
                capacity=_housing_capacity(available),
                is_qualified=available > 0 and bank_ratio >= BANK_QUALIFYING_RATIO,
            )
        )
    n = len(rows)
    qualified = sum(r.is_qualified for r in rows)
    if qualified >= 5:
        text, priority = "Finances meet bank lending standards; a mortgage application is reasonable.", "high"
    elif qualified >= 3:
        text, priority = "Finances are fair; improve the debt structure before applying for a mortgage.", "medium"
    else:
        text, priority = "Reduce existing debt and raise income before considering a mortgage.", "low"
    return AffordabilityOutlook(
        months=tuple(rows),
        avg_available_for_housing=round(sum(r.available_for_housing for r in rows) / n),
        avg_debt_ratio=round_ratio(sum(r.debt_to_income_ratio for r in rows) / n),
        avg_bank_ratio=round_ratio(sum(r.bank_ratio for r in rows) / n),
        qualified_months=qualified,
        qualification_rate=round(qualified / n * 100),
        recommendation=text,
        priority=priority,
    )


@dataclass(frozen=True)
class HousingAffordability:
    """
    Mortgage a household can carry under the 200% bank standard.

    Half of the income must cover the mortgage payment, the minimum living
    cost and the existing (non-housing) debt; whatever is left is the
    affordable monthly payment.
    """
    monthly_income: float
    current_debts: float
    minimum_living_cost: float
    terms: MortgageTerms
    available_payment: float
    loan_amount: float
    house_price: float
    down_payment: float
    outlook: AffordabilityOutlook
    improvement_suggestions: Tuple[str, ...] = ()
    price_range: Tuple[float, float, float] = (0.0, 0.0, 0.0)

    @property
    def is_affordable(self) -> bool:
        return self.available_payment > 0

    @property
    def deficit(self) -> float:
        return 0.0 if self.is_affordable else -self.available_payment

    def required_income_for_price(self, house_price: float) -> float:
        """Monthly income needed to qualify for a house at *house_price*."""
        loan = house_price * self.terms.loan_to_value_pct / 100
        payment = monthly_payment(loan, self.terms.annual_rate_pct, self.terms.periods)
        return (payment + self.minimum_living_cost + self.current_debts) * 2


def housing_affordability(
    monthly_income: float,
    current_debts: float,
    living_cost: float,
    terms: Optional[MortgageTerms] = None,
) -> HousingAffordability:
    """
    Affordable mortgage from residual income, by PMT inversion.

    Parameters
    ----------
    monthly_income : float
        Base monthly income.
    current_debts : float
        Existing non-housing monthly debt service.
    living_cost : float
        Minimum monthly living cost of the household's location.
    terms : MortgageTerms, optional
        Loan-to-value, rate and term (80%, 2.1%, 30 years by default).

    Examples
    --------
    >>> h = housing_affordability(100_000, 0, 20_000)
    >>> h.available_payment
    30000.0
    >>> round(h.house_price / h.loan_amount, 2)
    1.25
    """
    terms = terms or MortgageTerms()
    available = monthly_income / 2 - living_cost - current_debts
    suggestions: Tuple[str, ...] = ()
    if available > 0:
        loan = principal_from_payment(available, terms.annual_rate_pct, terms.periods)
        price = loan / (terms.loan_to_value_pct / 100)
        price_range = (price * 0.8, price, price * 1.2)
    else:
        loan = price = 0.0
        price_range = (0.0, 0.0, 0.0)
        deficit = -available
        suggestions = (
            f"Increase monthly income by {format_currency(deficit * 2)}",
            f"or reduce monthly debt payments by {format_currency(deficit)}",
            "or consider moving to a location with lower living costs",
        )
    return HousingAffordability(
        monthly_income=float(monthly_income),
        current_debts=float(current_debts),
        minimum_living_cost=float(living_cost),
        terms=terms,
        available_payment=float(available),
        loan_amount=loan,
        house_price=price,
        down_payment=price - loan,
        outlook=_affordability_outlook(monthly_income, current_debts, living_cost),
        improvement_suggestions=suggestions,
        price_range=price_range,
    )
