"""
Global constants for CashPlan.

Purpose
-------
Centralizes default values and magic numbers used throughout the CashPlan
codebase: horizon bounds, investment defaults, cycle defaults, debt-ratio
tiers and the minimum-living-cost lookup table.

Usage
-----
>>> from cashplan.constants import MAX_PREDICTION_MONTHS, MINIMUM_LIVING_COSTS
>>> MINIMUM_LIVING_COSTS["Taipei City"]
20379

Categories
----------
- Time: horizon bounds, months per year
- Investment: default return/savings rates
- Cycles: default fixed-cycle length
- Debt: risk-tier thresholds, bank ratio thresholds
- Housing: default mortgage terms, capacity tiers
- Locations: minimum living cost per location
"""

from typing import Dict, Tuple

__all__ = [
    # Time
    "MONTHS_PER_YEAR",
    "MIN_PREDICTION_MONTHS",
    "MAX_PREDICTION_MONTHS",
    "DEFAULT_PREDICTION_MONTHS",
    # Investment
    "DEFAULT_ANNUAL_RETURN_PCT",
    "DEFAULT_SAVINGS_RATE_PCT",
    # Cycles
    "DEFAULT_CYCLE_DAYS",
    # Debt
    "GENERAL_DEBT_TIERS",
    "BANK_RATIO_TIERS",
    "BANK_QUALIFYING_RATIO",
    # Housing
    "DEFAULT_LOAN_TO_VALUE_PCT",
    "DEFAULT_MORTGAGE_RATE_PCT",
    "DEFAULT_MORTGAGE_YEARS",
    "HOUSING_CAPACITY_TIERS",
    "AFFORDABILITY_PROJECTION_MONTHS",
    # Locations
    "DEFAULT_LOCATION",
    "OTHER_LOCATION",
    "MINIMUM_LIVING_COSTS",
    "LOCATION_ALIASES",
]


# =============================================================================
# Time
# =============================================================================

MONTHS_PER_YEAR: int = 12
"""Number of months in a year (used for rate and income normalization)."""

MIN_PREDICTION_MONTHS: int = 1
"""Shortest accepted projection horizon."""

MAX_PREDICTION_MONTHS: int = 120
"""Longest accepted projection horizon (10 years)."""

DEFAULT_PREDICTION_MONTHS: int = 12
"""Horizon used when a scenario does not specify one."""


# =============================================================================
# Investment Defaults
# =============================================================================

DEFAULT_ANNUAL_RETURN_PCT: float = 7.0
"""Default expected annual investment return, in percent."""

DEFAULT_SAVINGS_RATE_PCT: float = 1.5
"""Default annual savings-account rate, in percent."""


# =============================================================================
# Cycle Defaults
# =============================================================================

DEFAULT_CYCLE_DAYS: int = 30
"""Cycle length used by fixed cycles that do not declare one."""


# =============================================================================
# Debt Ratio Tiers
# =============================================================================

GENERAL_DEBT_TIERS: Tuple[Tuple[float, str], ...] = (
    (20.0, "excellent"),
    (30.0, "good"),
    (40.0, "acceptable"),
    (50.0, "caution"),
)
"""Upper bounds (inclusive, percent) of the debt-to-income risk tiers.

Ratios above the last bound are "high-risk".
"""

BANK_RATIO_TIERS: Tuple[Tuple[float, str], ...] = (
    (300.0, "excellent"),
    (250.0, "good"),
    (200.0, "qualified"),
    (150.0, "caution"),
)
"""Lower bounds (inclusive, percent) of the income-to-expense ratio tiers.

Ratios below the last bound are "high-risk".
"""

BANK_QUALIFYING_RATIO: float = 200.0
"""Income must cover at least twice the debt plus minimum living cost."""


# =============================================================================
# Housing Defaults
# =============================================================================

DEFAULT_LOAN_TO_VALUE_PCT: float = 80.0
"""Default mortgage loan-to-value ratio (first-home 80% mortgage)."""

DEFAULT_MORTGAGE_RATE_PCT: float = 2.1
"""Default annual mortgage rate, in percent."""

DEFAULT_MORTGAGE_YEARS: int = 30
"""Default mortgage term in years."""

HOUSING_CAPACITY_TIERS: Tuple[Tuple[float, str], ...] = (
    (40_000.0, "excellent"),
    (25_000.0, "good"),
    (15_000.0, "moderate"),
    (5_000.0, "limited"),
)
"""Lower bounds of the monthly amount available for a mortgage payment.

Amounts below the last bound are "low".
"""

AFFORDABILITY_PROJECTION_MONTHS: int = 6
"""Length of the short affordability outlook."""


# =============================================================================
# Locations
# =============================================================================

DEFAULT_LOCATION: str = "Taipei City"
"""Location assumed when the income record carries no location tag."""

OTHER_LOCATION: str = "Other"
"""Fallback row of the living-cost table."""

MINIMUM_LIVING_COSTS: Dict[str, int] = {
    "Taipei City": 20379,
    "New Taipei City": 16900,
    "Taoyuan City": 16768,
    "Taichung City": 16768,
    "Tainan City": 14230,
    "Kaohsiung City": 15472,
    "Keelung City": 15515,
    "Hsinchu City": 16768,
    "Chiayi City": 14230,
    "Other": 14230,
}
"""Monthly minimum living cost per location (2025 figures)."""

LOCATION_ALIASES: Dict[str, str] = {
    "台北市": "Taipei City",
    "臺北市": "Taipei City",
    "新北市": "New Taipei City",
    "桃園市": "Taoyuan City",
    "台中市": "Taichung City",
    "臺中市": "Taichung City",
    "台南市": "Tainan City",
    "臺南市": "Tainan City",
    "高雄市": "Kaohsiung City",
    "基隆市": "Keelung City",
    "新竹市": "Hsinchu City",
    "嘉義市": "Chiayi City",
    "其他縣市": "Other",
}
"""Original (Chinese) location names accepted as input."""
