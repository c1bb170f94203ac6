"""
Janitorial service, priced by the hour.

Labor (base hours plus vacuuming and dusting time) carries a frequency
premium or discount, then the trip charge is added and the visit is floored
at the per-visit minimum. Recurring contracts have their own minimum.
"""

from typing import Literal

from ..coercion import Amount
from ..common import (
    QuoteResult,
    ServiceForm,
    build_quote,
    effective_contract_months,
    rate_tier_multiplier,
)
from ..frequency import is_one_time, monthly_multiplier, visits_in_contract
from ..overrides import OverrideResolver
from ..payload import calc_field, dollar_field, text_field

SERVICE_ID = "janitorial"
DISPLAY_NAME = "Janitorial Services"


class JanitorialForm(ServiceForm):
    serviceType: Literal["recurringService", "oneTimeService"] = "recurringService"
    frequency: Literal["daily", "weekly", "biweekly", "monthly", "oneTime"] = "weekly"
    location: Literal["insideBeltway", "outsideBeltway", "paidParking"] = "insideBeltway"
    baseHours: Amount = 0
    vacuumingHours: Amount = 0
    dustingHours: Amount = 0
    needsParking: bool = False
    parkingCost: Amount = 0

    @property
    def is_one_time(self) -> bool:
        return self.serviceType == "oneTimeService" or is_one_time(self.frequency)

    def primary_quantity(self) -> float:
        return self.baseHours


def trip_charge(form: JanitorialForm, cfg: dict) -> float:
    trips = cfg["tripCharges"]
    trip = trips["insideBeltway"] if form.location == "insideBeltway" else trips["standard"]
    if form.needsParking or form.location == "paidParking":
        trip += form.parkingCost or trips["paidParking"]
    return trip


def calculate(form: JanitorialForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    if form.baseHours <= 0:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No janitorial hours entered", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)
    one_time = form.is_one_time
    frequency = "oneTime" if one_time else form.frequency

    rates = cfg["baseRates"]
    hourly = r.get("hourlyRate", rates["oneTimeService"] if one_time else rates["recurringService"])
    extras = cfg["additionalServices"]
    vacuum_rate = r.get("vacuumingRatePerHour", extras["vacuuming"]["ratePerHour"])
    dusting_rate = r.get("dustingRatePerHour", extras["dusting"]["ratePerHour"])

    base = form.baseHours * hourly
    vacuuming = form.vacuumingHours * vacuum_rate
    dusting = form.dustingHours * dusting_rate
    labor = base + vacuuming + dusting

    premium = cfg["frequencyMultipliers"].get(frequency, 1.0)
    trip = r.get("tripCharge", trip_charge(form, cfg))
    minimum = cfg["minimums"]["perVisit"]
    raw = labor * premium + trip
    per_visit = r.get("perVisit", max(raw, minimum) * tier)

    breakdown = [
        f"Base service: {form.baseHours:g} hrs @ ${hourly:.2f}/hr",
        f"Vacuuming: {form.vacuumingHours:g} hrs @ ${vacuum_rate:.2f}/hr",
        f"Dusting: {form.dustingHours:g} hrs @ ${dusting_rate:.2f}/hr",
        f"Frequency {frequency}: x{premium}",
    ]

    if one_time:
        monthly = 0.0
        first_month = per_visit
        contract = per_visit
        visits = 1
    else:
        monthly = r.get("monthly", per_visit * monthly_multiplier(frequency, cfg))
        first_month = r.get("firstMonth", monthly)
        contract_minimum = cfg["minimums"]["recurringContract"]
        contract = max(first_month + (months - 1) * monthly, contract_minimum)
        visits = visits_in_contract(frequency, months, cfg)
        if contract == contract_minimum:
            breakdown.append(f"Recurring contract minimum ${contract_minimum:.2f}")

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method=form.serviceType,
        frequency=frequency,
        per_visit_base=raw * tier,
        per_visit=per_visit,
        first_visit=per_visit,
        first_month=first_month,
        monthly=monthly,
        contract=contract,
        contract_months=months,
        visits=visits,
        minimum_per_visit=minimum,
        trip_charge=trip,
        components={"base": base, "vacuuming": vacuuming, "dusting": dusting, "tripCharge": trip},
        breakdown=breakdown,
        line_items={
            "service": calc_field("Base Service", form.baseHours, hourly, base, "hour"),
            "vacuuming": calc_field("Vacuuming", form.vacuumingHours, vacuum_rate, vacuuming, "hour"),
            "dusting": calc_field("Dusting", form.dustingHours, dusting_rate, dusting, "hour"),
            "tripCharge": dollar_field("Trip Charge", trip, r.is_custom("tripCharge")),
            "location": text_field("Location", form.location),
        },
    )
