"""
CashPlan - Household Cash-Flow Projection

Projects a household's cash, savings and investment balances month by
month from income, bonuses, recurring and installment expenses and
amortizing loans, and derives debt-burden and housing-affordability
figures.

Modules
-------
- cycles        : Horizon months, payment anchors and due-date policies
- amortization  : Closed-form loan formulas
- loans         : Per-loan monthly charges and prepayment plans
- expenses      : Expense lifecycle variants (monthly, yearly, installments)
- income        : Base income and bonus allocation
- investment    : Savings/investment policy and balance growth
- projection    : Month-by-month projection driver
- debt          : Debt ratios, early-payoff comparison, housing affordability
- config        : Pydantic record and scenario models, application settings
- serialization : Record conversion and JSON scenario/result files
"""

__version__ = "0.1.0"

from .cycles import Anchor, Horizon
from .income import Bonus, BonusAllocation, Income
from .expenses import (
    EarlyPayoff,
    ExpenseModel,
    FiniteInstallment,
    MonthlyExpense,
    RepeatingInstallment,
    YearlyExpense,
    YearlyPlan,
)
from .loans import Loan, prepayment_summary, total_payment_reduction
from .investment import InvestmentPolicy
from .projection import MonthRecord, ProjectionResult, project, project_scenario
from .debt import analyze_debt, analyze_debt_with_early_payoff, housing_affordability
from .config import ScenarioConfig
from .exceptions import CashPlanError, DataQualityWarning, ValidationError
from . import utils

__all__ = [
    "__version__",
    "Anchor",
    "Horizon",
    "Bonus",
    "BonusAllocation",
    "Income",
    "EarlyPayoff",
    "ExpenseModel",
    "FiniteInstallment",
    "MonthlyExpense",
    "RepeatingInstallment",
    "YearlyExpense",
    "YearlyPlan",
    "Loan",
    "prepayment_summary",
    "total_payment_reduction",
    "InvestmentPolicy",
    "MonthRecord",
    "ProjectionResult",
    "project",
    "project_scenario",
    "analyze_debt",
    "analyze_debt_with_early_payoff",
    "housing_affordability",
    "ScenarioConfig",
    "CashPlanError",
    "DataQualityWarning",
    "ValidationError",
    "utils",
]
