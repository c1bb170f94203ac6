"""Electrostatic spray disinfection, priced by room or by 1000 sq ft"""

import math
from typing import Literal

from ..coercion import Amount, Count
from ..common import (
    QuoteResult,
    ServiceForm,
    build_quote,
    effective_contract_months,
    rate_tier_multiplier,
    schedule_contract,
)
from ..frequency import is_one_time, monthly_multiplier
from ..overrides import OverrideResolver
from ..payload import calc_field, dollar_field, text_field

SERVICE_ID = "electrostaticSpray"
DISPLAY_NAME = "Electrostatic Spray"


class ElectrostaticSprayForm(ServiceForm):
    frequency: Literal[
        "oneTime", "weekly", "biweekly", "twicePerMonth", "monthly", "bimonthly", "quarterly", "biannual", "annual"
    ] = "weekly"
    pricingMethod: Literal["byRoom", "bySqFt"] = "byRoom"
    roomCount: Count = 0
    squareFeet: Amount = 0
    useExactCalculation: bool = True
    location: Literal["insideBeltway", "outsideBeltway", "standard"] = "standard"
    isCombinedWithSaniClean: bool = False

    def primary_quantity(self) -> float:
        return self.roomCount if self.pricingMethod == "byRoom" else self.squareFeet


def service_charge(form: ElectrostaticSprayForm, cfg: dict) -> tuple[float, float, float]:
    """
    Returns:
        (charge, billed quantity, rate per billed unit)
    """
    if form.pricingMethod == "byRoom":
        return form.roomCount * cfg["ratePerRoom"], form.roomCount, cfg["ratePerRoom"]
    unit = cfg["sqFtUnit"]
    if form.useExactCalculation:
        units = form.squareFeet / unit
    else:
        units = max(1, math.ceil(form.squareFeet / unit))
    return units * cfg["ratePerThousandSqFt"], units, cfg["ratePerThousandSqFt"]


def calculate(form: ElectrostaticSprayForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    if form.primary_quantity() <= 0:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No rooms or area entered", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)

    charge, units, rate = service_charge(form, cfg)
    service = r.get("serviceCharge", charge * tier)
    trip_calc = 0.0 if form.isCombinedWithSaniClean else cfg["tripCharges"][form.location]
    trip = r.get("tripCharge", trip_calc)
    per_visit = r.get("perVisit", service + trip)

    multiplier = monthly_multiplier(form.frequency, cfg)
    monthly = r.get("monthly", per_visit * multiplier)
    first_month = r.get("firstMonth", per_visit if is_one_time(form.frequency) else monthly)
    contract, visits = schedule_contract(form.frequency, per_visit, monthly, per_visit, first_month, months, cfg)

    unit_label = "room" if form.pricingMethod == "byRoom" else f"{cfg['sqFtUnit']} sq ft"
    breakdown = [f"{units:g} x ${rate:.2f} per {unit_label}"]
    if trip:
        breakdown.append(f"Trip charge ({form.location}): ${trip:.2f}")
    elif form.isCombinedWithSaniClean:
        breakdown.append("Trip charge waived (combined with SaniClean)")

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method=form.pricingMethod,
        frequency=form.frequency,
        per_visit_base=charge * tier + trip,
        per_visit=per_visit,
        first_visit=per_visit,
        first_month=first_month,
        monthly=monthly,
        contract=contract,
        contract_months=months,
        visits=visits,
        trip_charge=trip,
        components={"serviceCharge": service, "tripCharge": trip},
        breakdown=breakdown,
        line_items={
            "service": calc_field("Electrostatic Spray", units, rate, service, unit_label),
            "tripCharge": dollar_field("Trip Charge", trip, r.is_custom("tripCharge")),
            "location": text_field("Location", form.location),
        },
    )
