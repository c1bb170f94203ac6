"""Billing frequencies and visit math shared by every calculator"""

import math
from enum import Enum
from typing import Optional

from ... import config
from .coercion import parse_number


class Frequency(str, Enum):
    ONE_TIME = "oneTime"
    DAILY = "daily"
    WEEKLY = "weekly"
    BIWEEKLY = "biweekly"
    TWICE_PER_MONTH = "twicePerMonth"
    MONTHLY = "monthly"
    BIMONTHLY = "bimonthly"
    QUARTERLY = "quarterly"
    BIANNUAL = "biannual"
    ANNUAL = "annual"


# Fallback metadata; a service config may override any entry under "frequencyMeta"
FREQUENCY_META: dict[str, dict] = {
    "oneTime": {"visitsPerYear": 1, "monthlyMultiplier": 0, "cycleMonths": 0, "firstMonthExtraMultiplier": 0},
    "daily": {"visitsPerYear": 360, "monthlyMultiplier": 30, "cycleMonths": 0, "firstMonthExtraMultiplier": 29},
    "weekly": {"visitsPerYear": 52, "monthlyMultiplier": 4.33, "cycleMonths": 0, "firstMonthExtraMultiplier": 3.33},
    "biweekly": {"visitsPerYear": 26, "monthlyMultiplier": 2.165, "cycleMonths": 0, "firstMonthExtraMultiplier": 1.165},
    "twicePerMonth": {"visitsPerYear": 24, "monthlyMultiplier": 2, "cycleMonths": 0, "firstMonthExtraMultiplier": 1},
    "monthly": {"visitsPerYear": 12, "monthlyMultiplier": 1, "cycleMonths": 1, "firstMonthExtraMultiplier": 0},
    "bimonthly": {"visitsPerYear": 6, "monthlyMultiplier": 0.5, "cycleMonths": 2, "firstMonthExtraMultiplier": 0},
    "quarterly": {"visitsPerYear": 4, "monthlyMultiplier": 0.33, "cycleMonths": 3, "firstMonthExtraMultiplier": 0},
    "biannual": {"visitsPerYear": 2, "monthlyMultiplier": 0.17, "cycleMonths": 6, "firstMonthExtraMultiplier": 0},
    "annual": {"visitsPerYear": 1, "monthlyMultiplier": 0.083, "cycleMonths": 12, "firstMonthExtraMultiplier": 0},
}

VISIT_BASED = frozenset({"bimonthly", "quarterly", "biannual", "annual"})


def _key(frequency) -> str:
    return frequency.value if isinstance(frequency, Frequency) else str(frequency)


def frequency_meta(frequency, pricing_config: Optional[dict] = None) -> dict:
    """Metadata for a frequency, with any service-level override applied"""
    key = _key(frequency)
    meta = dict(FREQUENCY_META.get(key, FREQUENCY_META["monthly"]))
    overrides = (pricing_config or {}).get("frequencyMeta")
    entry = overrides.get(key) if isinstance(overrides, dict) else None
    if isinstance(entry, dict):
        meta.update(entry)
    return meta


def monthly_multiplier(frequency, pricing_config: Optional[dict] = None) -> float:
    return parse_number(frequency_meta(frequency, pricing_config).get("monthlyMultiplier"))


def visits_per_year(frequency, pricing_config: Optional[dict] = None) -> float:
    return parse_number(frequency_meta(frequency, pricing_config).get("visitsPerYear"))


def cycle_months(frequency, pricing_config: Optional[dict] = None) -> float:
    return parse_number(frequency_meta(frequency, pricing_config).get("cycleMonths"))


def first_month_extra_multiplier(frequency, pricing_config: Optional[dict] = None) -> float:
    return parse_number(frequency_meta(frequency, pricing_config).get("firstMonthExtraMultiplier"))


def is_visit_based(frequency) -> bool:
    """Cadences longer than a month bill per visit, not per month"""
    return _key(frequency) in VISIT_BASED


def is_one_time(frequency) -> bool:
    return _key(frequency) == Frequency.ONE_TIME.value


def round_visits(value: float, policy: Optional[str] = None) -> int:
    """
    Round a fractional visit count.

    Args:
        value: Raw visit count (may be fractional for non-exact contract lengths)
        policy: "round" (half-up), "floor" or "ceil"; defaults to VISIT_ROUNDING

    Returns:
        Whole number of visits, never negative
    """
    policy = (policy or config.VISIT_ROUNDING).lower()
    if policy == "floor":
        visits = math.floor(value)
    elif policy == "ceil":
        visits = math.ceil(value - 1e-9)
    else:
        visits = math.floor(value + 0.5)
    return max(0, int(visits))


def visits_in_contract(frequency, contract_months: float, pricing_config: Optional[dict] = None) -> int:
    """
    Number of visits a contract of contract_months covers.

    Visit-based cadences divide the length by the cycle; everything else
    scales visits per year to the contract length.
    """
    if is_one_time(frequency):
        return 1
    cycle = cycle_months(frequency, pricing_config)
    if is_visit_based(frequency) and cycle > 0:
        return round_visits(contract_months / cycle)
    return round_visits(visits_per_year(frequency, pricing_config) * contract_months / 12)
