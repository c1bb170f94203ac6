"""Carpet cleaning: block pricing per 500 sq ft with an optional install visit"""

import math
from typing import Literal, Optional

from ..coercion import Amount
from ..common import (
    QuoteResult,
    ServiceForm,
    build_quote,
    effective_contract_months,
    first_period,
    rate_tier_multiplier,
    schedule_contract,
)
from ..frequency import is_one_time, visits_per_year
from ..overrides import OverrideResolver
from ..payload import calc_field, dollar_field, text_field

SERVICE_ID = "carpetCleaning"
DISPLAY_NAME = "Carpet Cleaning"


class CarpetForm(ServiceForm):
    frequency: Literal["oneTime", "monthly", "twicePerMonth", "bimonthly", "quarterly", "biannual", "annual"] = "monthly"
    areaSqFt: Amount = 0
    useExactSqft: Optional[bool] = None
    includeInstall: bool = False
    isDirtyInstall: bool = False

    def primary_quantity(self) -> float:
        return self.areaSqFt


def area_charge(area: float, cfg: dict, exact: bool) -> float:
    """
    Price an area in units of unitSqFt.

    Up to one unit costs firstUnitRate. Beyond that, block mode bills every
    started unit at additionalUnitRate; exact mode bills the extra area
    proportionally.
    """
    unit = cfg["unitSqFt"]
    first = cfg["firstUnitRate"]
    additional = cfg["additionalUnitRate"]
    if area <= 0:
        return 0.0
    if area <= unit:
        return first
    extra = area - unit
    if exact:
        return first + extra * (additional / unit)
    return first + math.ceil(extra / unit) * additional


def calculate(form: CarpetForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    if form.areaSqFt <= 0:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No carpet area entered", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)
    exact = cfg.get("useExactSqft", False) if form.useExactSqft is None else form.useExactSqft

    base = area_charge(form.areaSqFt, cfg, exact)
    minimum = cfg["perVisitMinimum"]
    per_visit = r.get("perVisit", max(base, minimum) * tier)

    install = 0.0
    if form.includeInstall:
        multipliers = cfg["installMultipliers"]
        install = per_visit * (multipliers["dirty"] if form.isDirtyInstall else multipliers["clean"])
    install = r.get("installFee", install)

    monthly_visits = 0.0 if is_one_time(form.frequency) else visits_per_year(form.frequency, cfg) / 12
    monthly = r.get("monthly", per_visit * monthly_visits)

    first_visit, first_month = first_period(form.frequency, per_visit, monthly, install, cfg)
    first_month = r.get("firstMonth", first_month)

    contract, visits = schedule_contract(form.frequency, per_visit, monthly, first_visit, first_month, months, cfg)

    pricing = "exact sq ft" if exact else f"blocks of {cfg['unitSqFt']} sq ft"
    breakdown = [
        f"Area: {form.areaSqFt:g} sq ft ({pricing})",
        f"Base ${base:.2f}, minimum ${minimum:.2f}",
    ]
    if install:
        breakdown.append(f"Install ({'dirty' if form.isDirtyInstall else 'clean'}): ${install:.2f}")

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method="exact" if exact else "block",
        frequency=form.frequency,
        per_visit_base=base * tier,
        per_visit=per_visit,
        first_visit=first_visit,
        first_month=first_month,
        monthly=monthly,
        contract=contract,
        contract_months=months,
        visits=visits,
        minimum_per_visit=minimum,
        install_fee=install,
        components={"areaCharge": base, "installFee": install, "tripCharge": 0.0},
        breakdown=breakdown,
        line_items={
            "service": calc_field("Carpet Area", form.areaSqFt, cfg["firstUnitRate"], per_visit, "sq ft"),
            "installation": dollar_field("Installation", install, r.is_custom("installFee")),
            "tripCharge": dollar_field("Trip Charge", 0.0),
            "installCondition": text_field("Install Condition", "Dirty" if form.isDirtyInstall else "Clean"),
        },
    )
