"""
Configuration management module for CashPlan.

Purpose
-------
Pydantic models validating the plain records exchanged with the outside
world (UI state, JSON scenario files) before they become domain objects.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Record-compatible: camelCase keys of exported UI records
  (``paymentDate``, ``paidInstallments``, ``isAnnualRecurring``...) are
  accepted next to the snake_case field names
- Environment-aware: AppSettings reads ``CASHPLAN_*`` variables and .env

Record models (income, bonus, expense, loan, investment) ignore unknown
keys, since UI records carry display-only fields. Scenario-level models
forbid them.

Example
-------
>>> from cashplan.config import ExpenseConfig
>>> cfg = ExpenseConfig.model_validate({
...     "name": "Insurance", "amount": 2666, "type": "annual-recurring",
...     "paidInstallments": 3, "totalInstallments": 12, "isAnnualRecurring": True,
... })
>>> cfg.paid_installments, cfg.is_annual_recurring
(3, True)
"""

from __future__ import annotations

import datetime
from typing import Dict, List, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_ANNUAL_RETURN_PCT,
    DEFAULT_CYCLE_DAYS,
    DEFAULT_LOAN_TO_VALUE_PCT,
    DEFAULT_LOCATION,
    DEFAULT_MORTGAGE_RATE_PCT,
    DEFAULT_MORTGAGE_YEARS,
    DEFAULT_PREDICTION_MONTHS,
    DEFAULT_SAVINGS_RATE_PCT,
    MAX_PREDICTION_MONTHS,
    MIN_PREDICTION_MONTHS,
)

__all__ = [
    "BonusAllocationConfig",
    "BonusConfig",
    "IncomeConfig",
    "YearlyPlanConfig",
    "ExpenseConfig",
    "LoanConfig",
    "InvestmentPolicyConfig",
    "MortgageTermsConfig",
    "ScenarioConfig",
    "AppSettings",
]

RecordId = Union[int, str]

_RECORD_CONFIG = ConfigDict(
    frozen=True,
    extra="ignore",
    populate_by_name=True,
    alias_generator=to_camel,
)


# ---------------------------------------------------------------------------
# Income Configuration
# ---------------------------------------------------------------------------

class BonusAllocationConfig(BaseModel):
    """
    Percentages of a bonus routed to each bucket.

    The four sliders are independent 0-100 values; they do not have to
    sum to 100.
    """

    model_config = _RECORD_CONFIG

    savings: float = Field(default=0.0, ge=0, le=100, description="Percent to savings")
    investment: float = Field(default=0.0, ge=0, le=100, description="Percent to investment")
    consumption: float = Field(default=0.0, ge=0, le=100, description="Percent to consumption")
    special: float = Field(default=0.0, ge=0, le=100, description="Percent to a special purpose")
    special_purpose: Optional[str] = Field(default=None, description="Label of the special bucket")


class BonusConfig(BaseModel):
    """One-time bonus paid every year in calendar month ``month``."""

    model_config = _RECORD_CONFIG

    id: Optional[RecordId] = None
    name: str = Field(default="Bonus", description="Display name")
    amount: float = Field(ge=0, description="Bonus amount")
    month: int = Field(ge=1, le=12, description="Calendar month paid (1-12)")
    allocation: BonusAllocationConfig = Field(default_factory=BonusAllocationConfig)


class IncomeConfig(BaseModel):
    """
    Base income plus bonuses.

    Examples
    --------
    >>> IncomeConfig.model_validate({"type": "yearly", "amount": 600_000}).recurrence_unit
    'yearly'
    """

    model_config = _RECORD_CONFIG

    amount: float = Field(description="Base income per recurrence unit")
    recurrence_unit: Literal["monthly", "yearly"] = Field(
        default="monthly",
        validation_alias=AliasChoices("recurrence_unit", "recurrenceUnit", "type"),
        description="Unit of the base amount",
    )
    bonuses: List[BonusConfig] = Field(default_factory=list)
    location: Optional[str] = Field(default=None, description="Location tag for living costs")


# ---------------------------------------------------------------------------
# Expense Configuration
# ---------------------------------------------------------------------------

class YearlyPlanConfig(BaseModel):
    """Reconfiguration of one cycle year of a repeating installment plan."""

    model_config = _RECORD_CONFIG

    installments: int = Field(ge=1, description="Installments in the cycle year")
    amount: float = Field(ge=0, description="Installment amount in the cycle year")
    bank: Optional[str] = None


class ExpenseConfig(BaseModel):
    """
    Expense record.

    Attributes
    ----------
    type : {"monthly", "yearly", "annual-recurring"}
        ``annual-recurring`` with ``total_installments > 1`` is an
        installment plan; ``is_annual_recurring`` makes it restart every
        year at the payment date.
    payment_date : str, optional
        Payment anchor date (ISO). Kept as text: a malformed date is a
        data-quality issue handled when the expense is resolved.
    cycle_type, cycle_days
        Due-date policy of installment plans.
    paid_installments : int
        Installments already paid before the projection starts.
    early_payoff, payoff_month
        Clear the plan in horizon month ``payoff_month`` (1-based).
    """

    model_config = _RECORD_CONFIG

    id: Optional[RecordId] = None
    name: str = Field(default="", description="Display name; blank records are skipped")
    amount: float = Field(default=0.0, ge=0, description="Charge per occurrence")
    type: Literal["monthly", "yearly", "annual-recurring"] = Field(default="monthly")
    payment_date: Optional[str] = Field(default=None, description="Payment anchor date")
    cycle_type: Literal["fixed", "statement"] = Field(default="statement")
    cycle_days: Optional[int] = Field(default=DEFAULT_CYCLE_DAYS, ge=0, description="Fixed-cycle length")
    bank: Optional[str] = Field(default=None, description="Display only")
    paid_installments: int = Field(default=0, ge=0)
    total_installments: int = Field(default=1, ge=1)
    is_annual_recurring: bool = Field(default=False)
    yearly_configs: Dict[int, YearlyPlanConfig] = Field(default_factory=dict)
    early_payoff: bool = Field(default=False)
    payoff_month: Optional[int] = Field(default=None, ge=1)

    @field_validator("payment_date", mode="before")
    @classmethod
    def coerce_payment_date(cls, v):
        """Accept date objects; blank text means no anchor."""
        if isinstance(v, (datetime.date, datetime.datetime)):
            return v.isoformat()
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def is_installment_plan(self) -> bool:
        return self.type == "annual-recurring" and self.total_installments > 1


# ---------------------------------------------------------------------------
# Loan Configuration
# ---------------------------------------------------------------------------

class LoanConfig(BaseModel):
    """
    Amortizing loan record.

    ``original_amount`` and ``total_periods`` may be missing; such records
    are skipped when the projection runs.
    """

    model_config = _RECORD_CONFIG

    id: Optional[RecordId] = None
    name: str = Field(default="Loan")
    original_amount: Optional[float] = Field(default=None, description="Principal at origination")
    annual_rate: float = Field(default=0.0, ge=0, description="Annual rate in percent")
    paid_periods: int = Field(default=0, ge=0)
    total_periods: Optional[int] = Field(default=None, description="Term in months")
    enable_prepayment: bool = False
    prepayment_amount: float = Field(default=0.0, ge=0)
    prepayment_month: int = Field(default=1, ge=1, description="1-based horizon month")


# ---------------------------------------------------------------------------
# Investment Configuration
# ---------------------------------------------------------------------------

class InvestmentPolicyConfig(BaseModel):
    """Monthly savings/investment plan."""

    model_config = _RECORD_CONFIG

    monthly_savings: float = Field(default=0.0, ge=0)
    monthly_investment: float = Field(default=0.0, ge=0)
    annual_return_pct: float = Field(
        default=DEFAULT_ANNUAL_RETURN_PCT,
        ge=-100,
        le=100,
        validation_alias=AliasChoices("annual_return_pct", "annualReturnPct", "annualReturn"),
    )
    savings_rate_pct: float = Field(
        default=DEFAULT_SAVINGS_RATE_PCT,
        ge=-100,
        le=100,
        validation_alias=AliasChoices("savings_rate_pct", "savingsRatePct", "savingsRate"),
    )
    compound_interest: bool = True
    auto_allocate: bool = False


# ---------------------------------------------------------------------------
# Scenario Configuration
# ---------------------------------------------------------------------------

class MortgageTermsConfig(BaseModel):
    """Hypothetical mortgage used for the housing-affordability figure."""

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True, alias_generator=to_camel)

    loan_to_value_pct: float = Field(default=DEFAULT_LOAN_TO_VALUE_PCT, gt=0, le=100)
    annual_rate_pct: float = Field(default=DEFAULT_MORTGAGE_RATE_PCT, ge=0, le=30)
    years: int = Field(default=DEFAULT_MORTGAGE_YEARS, ge=1, le=50)


class ScenarioConfig(BaseModel):
    """
    A complete projection request.

    Examples
    --------
    >>> scenario = ScenarioConfig(
    ...     income=IncomeConfig(amount=45_000),
    ...     expenses=[ExpenseConfig(name="Rent", amount=18_000)],
    ...     prediction_months=6,
    ... )
    >>> scenario.investment.annual_return_pct
    7.0
    """

    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True, alias_generator=to_camel)

    name: str = Field(default="scenario", min_length=1, max_length=100)
    description: str = Field(default="", max_length=500)
    as_of: Optional[datetime.date] = Field(default=None, description="Date inside horizon month 0")
    prediction_months: int = Field(
        default=DEFAULT_PREDICTION_MONTHS,
        ge=MIN_PREDICTION_MONTHS,
        le=MAX_PREDICTION_MONTHS,
    )
    income: IncomeConfig
    expenses: List[ExpenseConfig] = Field(default_factory=list)
    loans: List[LoanConfig] = Field(default_factory=list)
    investment: InvestmentPolicyConfig = Field(default_factory=InvestmentPolicyConfig)
    loan_payment_reduction: float = Field(default=0.0, ge=0)
    mortgage: MortgageTermsConfig = Field(default_factory=MortgageTermsConfig)

    @field_validator("income")
    @classmethod
    def validate_income_positive(cls, v):
        if v.amount <= 0:
            raise ValueError(f"income.amount must be a positive number (got {v.amount})")
        return v


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Environment variables are prefixed with CASHPLAN_
    (e.g. ``CASHPLAN_LOG_LEVEL=DEBUG``); a .env file is read if present.

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.log_level
    'WARNING'
    """

    model_config = SettingsConfigDict(
        env_prefix="CASHPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level of the command-line interface",
    )
    default_location: str = Field(
        default=DEFAULT_LOCATION,
        description="Location used when a scenario has none",
    )
    default_prediction_months: int = Field(
        default=DEFAULT_PREDICTION_MONTHS,
        ge=MIN_PREDICTION_MONTHS,
        le=MAX_PREDICTION_MONTHS,
        description="Horizon of scenarios created from templates",
    )
    max_prediction_months: int = Field(
        default=MAX_PREDICTION_MONTHS,
        ge=MIN_PREDICTION_MONTHS,
        le=MAX_PREDICTION_MONTHS,
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def upper_log_level(cls, v):
        return v.upper() if isinstance(v, str) else v
