"""
Serialization module for CashPlan.

Purpose
-------
Converts the plain records exchanged with the outside world into domain
objects, and projection results back into JSON-ready dictionaries.

Supports:
- Income / bonus records
- Expense records (mapped onto the expense lifecycle variants)
- Loan records
- Investment policy records
- Whole scenarios as JSON files (with a schema version)
- ProjectionResult export

Expense record mapping
----------------------
======================  =====================  ==========================
type                    flags                  lifecycle
======================  =====================  ==========================
monthly                                        MonthlyExpense
yearly                                         YearlyExpense
annual-recurring        T > 1, repeating       RepeatingInstallment
annual-recurring        T > 1, not repeating   FiniteInstallment
annual-recurring        T <= 1, repeating      YearlyExpense
annual-recurring        T <= 1, not repeating  FiniteInstallment (T = 1)
======================  =====================  ==========================

Installment plans carry an EarlyPayoff when ``early_payoff`` is set and a
``payoff_month`` is given.

Example
-------
>>> stream = expense_from_record({"name": "Rent", "amount": 18000})
>>> type(stream).__name__
'MonthlyExpense'
>>> expense_from_record({"name": "", "amount": 100}) is None
True
"""

from __future__ import annotations

import dataclasses
import json
import warnings
from datetime import date
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional, Union

import numpy as np

from .config import (
    BonusConfig,
    ExpenseConfig,
    IncomeConfig,
    InvestmentPolicyConfig,
    LoanConfig,
    MortgageTermsConfig,
    ScenarioConfig,
)
from .constants import DEFAULT_LOCATION
from .cycles import Anchor
from .debt import MortgageTerms
from .exceptions import ConfigurationError, RecordError
from .expenses import (
    EarlyPayoff,
    ExpenseStream,
    FiniteInstallment,
    MonthlyExpense,
    RepeatingInstallment,
    YearlyExpense,
    YearlyPlan,
)
from .income import Bonus, BonusAllocation, Income
from .investment import InvestmentPolicy
from .loans import Loan

if TYPE_CHECKING:
    from .projection import ProjectionResult

__all__ = [
    "SCHEMA_VERSION",
    "bonus_from_config",
    "income_from_config",
    "income_from_record",
    "expense_from_config",
    "expense_from_record",
    "to_expense_stream",
    "loan_from_config",
    "loan_from_record",
    "to_loan",
    "policy_from_config",
    "policy_from_record",
    "mortgage_from_config",
    "save_scenario",
    "load_scenario",
    "result_to_dict",
    "save_result",
]


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "0.1.0"

Record = Mapping[str, Any]


# ---------------------------------------------------------------------------
# Income
# ---------------------------------------------------------------------------

def bonus_from_config(cfg: BonusConfig) -> Bonus:
    a = cfg.allocation
    return Bonus(
        name=cfg.name,
        amount=cfg.amount,
        month=cfg.month,
        allocation=BonusAllocation(
            savings_pct=a.savings,
            investment_pct=a.investment,
            consumption_pct=a.consumption,
            special_pct=a.special,
            special_purpose=a.special_purpose,
        ),
        id=None if cfg.id is None else str(cfg.id),
    )


def income_from_config(cfg: IncomeConfig, default_location: str = DEFAULT_LOCATION) -> Income:
    """Income domain object; bonuses with a zero amount are kept but never paid."""
    return Income(
        amount=cfg.amount,
        recurrence_unit=cfg.recurrence_unit,
        bonuses=tuple(bonus_from_config(b) for b in cfg.bonuses),
        location=cfg.location or default_location,
    )


def income_from_record(record: Record, default_location: str = DEFAULT_LOCATION) -> Income:
    return income_from_config(IncomeConfig.model_validate(record), default_location)


# ---------------------------------------------------------------------------
# Expenses
# ---------------------------------------------------------------------------

def expense_from_config(cfg: ExpenseConfig) -> Optional[ExpenseStream]:
    """
    Expense lifecycle variant for a validated record.

    Returns None for records without a name or with a zero amount; they
    take no part in the projection.
    """
    if not cfg.name.strip() or cfg.amount <= 0:
        return None
    label = f"expense {cfg.name!r}"
    anchor = Anchor.parse(cfg.payment_date, cfg.cycle_type, cfg.cycle_days, label=label)
    ident = None if cfg.id is None else str(cfg.id)

    if cfg.type == "monthly":
        return MonthlyExpense(cfg.name, cfg.amount, anchor, bank=cfg.bank, id=ident)
    if cfg.type == "yearly" or (cfg.is_annual_recurring and not cfg.is_installment_plan):
        return YearlyExpense(cfg.name, cfg.amount, anchor, bank=cfg.bank, id=ident)

    payoff = EarlyPayoff(cfg.payoff_month) if cfg.early_payoff and cfg.payoff_month else None
    if cfg.is_annual_recurring:
        plans = {
            year: YearlyPlan(p.installments, p.amount, p.bank)
            for year, p in cfg.yearly_configs.items()
        }
        return RepeatingInstallment(
            cfg.name,
            cfg.amount,
            total_installments=cfg.total_installments,
            paid_installments=cfg.paid_installments,
            anchor=anchor,
            yearly_plans=plans,
            early_payoff=payoff,
            bank=cfg.bank,
            id=ident,
        )
    return FiniteInstallment(
        cfg.name,
        cfg.amount,
        total_installments=cfg.total_installments,
        paid_installments=cfg.paid_installments,
        anchor=anchor,
        early_payoff=payoff,
        bank=cfg.bank,
        id=ident,
    )


def expense_from_record(record: Record) -> Optional[ExpenseStream]:
    """Validate a raw expense record and build its lifecycle variant."""
    return expense_from_config(ExpenseConfig.model_validate(record))


def to_expense_stream(record: Union[ExpenseStream, ExpenseConfig, Record]) -> Optional[ExpenseStream]:
    """
    Expense lifecycle for a domain object, validated config or raw record.

    Returns None for records without a name or with a zero amount.

    Raises
    ------
    RecordError
        Unsupported record type.
    ValueError
        The record fails validation.
    """
    if isinstance(record, ExpenseStream):
        return record if record.name and record.amount > 0 else None
    if isinstance(record, ExpenseConfig):
        return expense_from_config(record)
    if isinstance(record, Mapping):
        if not str(record.get("name") or "").strip() or not record.get("amount"):
            return None
        return expense_from_record(record)
    raise RecordError(f"unsupported expense record type {type(record).__name__}")


# ---------------------------------------------------------------------------
# Loans
# ---------------------------------------------------------------------------

def loan_from_config(cfg: LoanConfig) -> Optional[Loan]:
    """
    Loan domain object, or None when principal or term is missing.

    A present but non-positive principal/term still yields a Loan; it is
    not serviceable and contributes nothing.
    """
    if cfg.original_amount is None or cfg.total_periods is None:
        return None
    return Loan(
        name=cfg.name,
        original_amount=max(cfg.original_amount, 0.0),
        annual_rate=cfg.annual_rate,
        total_periods=max(cfg.total_periods, 0),
        paid_periods=cfg.paid_periods,
        enable_prepayment=cfg.enable_prepayment,
        prepayment_amount=cfg.prepayment_amount,
        prepayment_month=cfg.prepayment_month,
        id=None if cfg.id is None else str(cfg.id),
    )


def loan_from_record(record: Record) -> Optional[Loan]:
    return loan_from_config(LoanConfig.model_validate(record))


def to_loan(record: Union[Loan, LoanConfig, Record]) -> Optional[Loan]:
    """Loan for a domain object, validated config or raw record (None when incomplete)."""
    if isinstance(record, Loan):
        return record
    if isinstance(record, LoanConfig):
        return loan_from_config(record)
    if isinstance(record, Mapping):
        return loan_from_record(record)
    raise RecordError(f"unsupported loan record type {type(record).__name__}")


# ---------------------------------------------------------------------------
# Investment policy and mortgage terms
# ---------------------------------------------------------------------------

def policy_from_config(cfg: InvestmentPolicyConfig) -> InvestmentPolicy:
    return InvestmentPolicy(
        monthly_savings=cfg.monthly_savings,
        monthly_investment=cfg.monthly_investment,
        annual_return_pct=cfg.annual_return_pct,
        savings_rate_pct=cfg.savings_rate_pct,
        compound_interest=cfg.compound_interest,
        auto_allocate=cfg.auto_allocate,
    )


def policy_from_record(record: Record) -> InvestmentPolicy:
    return policy_from_config(InvestmentPolicyConfig.model_validate(record))


def mortgage_from_config(cfg: MortgageTermsConfig) -> MortgageTerms:
    return MortgageTerms(cfg.loan_to_value_pct, cfg.annual_rate_pct, cfg.years)


# ---------------------------------------------------------------------------
# Scenario files
# ---------------------------------------------------------------------------

def save_scenario(scenario: ScenarioConfig, path: Path) -> None:
    """
    Save a scenario to a JSON file.

    Examples
    --------
    >>> from pathlib import Path
    >>> save_scenario(scenario, Path("household.json"))
    """
    config = {
        "schema_version": SCHEMA_VERSION,
        "scenario": scenario.model_dump(mode="json"),
    }
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2, ensure_ascii=False)


def load_scenario(path: Path) -> ScenarioConfig:
    """
    Load a scenario from a JSON file.

    Files holding a bare scenario object (no ``schema_version`` wrapper)
    are accepted too.

    Raises
    ------
    ConfigurationError
        The file is not JSON or does not describe a valid scenario.
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            config = json.load(f)
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"{path} is not valid JSON: {e}") from e
    if not isinstance(config, dict):
        raise ConfigurationError(f"{path} must hold a JSON object (got {type(config).__name__})")

    if "scenario" not in config:
        return _validate_scenario(config, path)

    schema_version = config.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"Scenario schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )
    return _validate_scenario(config["scenario"], path)


def _validate_scenario(data: Any, path: Path) -> ScenarioConfig:
    try:
        return ScenarioConfig.model_validate(data)
    except ValueError as e:
        raise ConfigurationError(f"invalid scenario in {path}: {e}") from e


# ---------------------------------------------------------------------------
# ProjectionResult export
# ---------------------------------------------------------------------------

def _jsonable(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: _jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, Mapping):
        return {str(k): _jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_jsonable(v) for v in value]
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, np.generic):
        return value.item()
    return value


def result_to_dict(result: "ProjectionResult") -> Dict[str, Any]:
    """JSON-ready dictionary of a projection result."""
    data = _jsonable(result)
    data["schema_version"] = SCHEMA_VERSION
    return data


def save_result(result: "ProjectionResult", path: Union[str, Path]) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(result_to_dict(result), f, indent=2, ensure_ascii=False)
