"""
SaniScrub deep restroom scrub.

Fixture rates are monthly figures. Monthly and 2x/month service floor the
monthly fixture charge; bimonthly and quarterly service floor each visit.
Non-bathroom area is priced per visit in 500 sq ft blocks.
"""

import math
from typing import Literal

from ..coercion import Amount, Count
from ..common import (
    QuoteResult,
    ServiceForm,
    build_quote,
    effective_contract_months,
    first_period,
    rate_tier_multiplier,
    schedule_contract,
)
from ..frequency import is_visit_based, visits_per_year
from ..overrides import OverrideResolver
from ..payload import calc_field, dollar_field, text_field

SERVICE_ID = "saniscrub"
DISPLAY_NAME = "SaniScrub"


class SaniscrubForm(ServiceForm):
    frequency: Literal["monthly", "twicePerMonth", "bimonthly", "quarterly"] = "monthly"
    fixtureCount: Count = 0
    nonBathroomSqFt: Amount = 0
    hasSaniClean: bool = False
    includeInstall: bool = False
    isDirtyInstall: bool = False

    def primary_quantity(self) -> float:
        return self.fixtureCount + self.nonBathroomSqFt


def non_bathroom_charge(sq_ft: float, cfg: dict) -> float:
    if sq_ft <= 0:
        return 0.0
    unit = cfg["nonBathroomUnitSqFt"]
    extra_units = math.ceil(max(0.0, sq_ft - unit) / unit)
    return cfg["nonBathroomFirstUnitRate"] + extra_units * cfg["nonBathroomAdditionalUnitRate"]


def calculate(form: SaniscrubForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    if form.primary_quantity() <= 0:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No SaniScrub fixtures or area entered", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)
    freq = form.frequency

    rate = cfg["fixtureRates"][freq]
    minimum = cfg["minimums"][freq] if form.fixtureCount > 0 else 0
    raw = form.fixtureCount * rate
    fixture_base = r.get("fixtureCharge", max(raw, minimum))
    breakdown = [f"Fixtures: {form.fixtureCount} x ${rate:.2f}, minimum ${minimum:.2f}"]

    if freq == "twicePerMonth":
        discount = cfg["twoTimesPerMonthDiscountFlat"] if form.hasSaniClean and fixture_base else 0
        fixture_per_visit = (2 * fixture_base - discount) / 2
        minimum_per_visit = minimum / 2
        if discount:
            breakdown.append(f"2x/month with SaniClean: -${discount:.2f}/month")
    else:
        # monthly: the monthly floor is the visit floor; bimonthly/quarterly floor each visit
        fixture_per_visit = fixture_base
        minimum_per_visit = minimum

    non_bathroom = r.get("nonBathroomCharge", non_bathroom_charge(form.nonBathroomSqFt, cfg))
    if non_bathroom:
        breakdown.append(f"Non-bathroom area: {form.nonBathroomSqFt:g} sq ft = ${non_bathroom:.2f}/visit")

    per_visit_base = (raw / (2 if freq == "twicePerMonth" else 1) + non_bathroom) * tier
    per_visit = r.get("perVisit", (fixture_per_visit + non_bathroom) * tier)
    monthly = r.get("monthly", per_visit * visits_per_year(freq, cfg) / 12)

    install = 0.0
    if form.includeInstall:
        multipliers = cfg["installMultipliers"]
        multiplier = multipliers["dirty"] if form.isDirtyInstall else multipliers["clean"]
        install = multiplier * (fixture_base + non_bathroom) * tier
        breakdown.append(f"Install {multiplier}x monthly base: ${install:.2f}")
    install = r.get("installFee", install)

    first_visit, first_month = first_period(freq, per_visit, monthly, install, cfg)
    first_month = r.get("firstMonth", first_month)
    contract, visits = schedule_contract(freq, per_visit, monthly, first_visit, first_month, months, cfg)
    if is_visit_based(freq):
        breakdown.append(f"{visits} visits in {months} months")

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method="per_visit_minimum" if is_visit_based(freq) else "monthly_minimum",
        frequency=freq,
        per_visit_base=per_visit_base,
        per_visit=per_visit,
        first_visit=first_visit,
        first_month=first_month,
        monthly=monthly,
        contract=contract,
        contract_months=months,
        visits=visits,
        minimum_per_visit=minimum_per_visit,
        install_fee=install,
        components={
            "fixtureCharge": fixture_base,
            "nonBathroomCharge": non_bathroom,
            "installFee": install,
            "tripCharge": 0.0,
            "parkingFee": 0.0,
        },
        breakdown=breakdown,
        line_items={
            "service": calc_field("Restroom Fixtures", form.fixtureCount, rate, fixture_base, "fixture"),
            "nonBathroomArea": calc_field("Non-Bathroom Area", form.nonBathroomSqFt, cfg["nonBathroomFirstUnitRate"], non_bathroom, "sq ft"),
            "installation": dollar_field("Installation", install, r.is_custom("installFee")),
            "tripCharge": dollar_field("Trip Charge", 0.0),
            "combinedWithSaniClean": text_field("Combined with SaniClean", "Yes" if form.hasSaniClean else "No"),
        },
    )
