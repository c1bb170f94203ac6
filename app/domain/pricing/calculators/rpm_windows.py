"""
RPM window cleaning.

Window rates are weekly bases; less frequent service costs more per visit
through the frequency multiplier. A first-time clean is billed as an install
at 3x the recurring visit.
"""

from typing import Literal

from pydantic import Field

from ..coercion import Amount, Count, parse_number
from ..common import (
    QuoteResult,
    ServiceForm,
    build_quote,
    effective_contract_months,
    rate_tier_multiplier,
    schedule_contract,
)
from ..frequency import is_visit_based
from ..overrides import OverrideResolver
from ..payload import calc_field, dollar_field, text_field

SERVICE_ID = "rpmWindows"
DISPLAY_NAME = "RPM Windows"


class RpmWindowsForm(ServiceForm):
    frequency: Literal["weekly", "biweekly", "monthly", "quarterly"] = "weekly"
    smallWindows: Count = 0
    mediumWindows: Count = 0
    largeWindows: Count = 0
    includeMirrors: bool = False
    mirrorCount: Count = 0
    extraCharges: list[Amount] = Field(default_factory=list)
    isFirstTime: bool = False

    def primary_quantity(self) -> float:
        return self.smallWindows + self.mediumWindows + self.largeWindows


def monthly_visits(frequency: str, cfg: dict) -> float:
    conversions = cfg.get("monthlyConversions") or {}
    if frequency in conversions:
        return parse_number(conversions[frequency])
    return cfg["annualFrequencies"][frequency] / 12


def calculate(form: RpmWindowsForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    if form.primary_quantity() <= 0:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No windows entered", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)

    small = form.smallWindows * r.get("smallWindowRate", cfg["smallWindowRate"])
    medium = form.mediumWindows * r.get("mediumWindowRate", cfg["mediumWindowRate"])
    large = form.largeWindows * r.get("largeWindowRate", cfg["largeWindowRate"])
    mirrors = form.mirrorCount * cfg["smallWindowRate"] if form.includeMirrors else 0.0
    windows = small + medium + large + mirrors
    trip = r.get("tripCharge", cfg["tripCharge"])
    extras = sum(form.extraCharges)

    freq_multiplier = cfg["frequencyMultipliers"][form.frequency]
    per_visit_raw = (windows + trip) * freq_multiplier * tier + extras
    per_visit = r.get("perVisit", per_visit_raw)

    install = 0.0
    if form.isFirstTime:
        install = per_visit * cfg["installMultiplierFirstTime"]
    install = r.get("installFee", install)

    visits_per_month = monthly_visits(form.frequency, cfg)
    monthly = r.get("monthly", per_visit * visits_per_month)

    first_visit = install if install > 0 else per_visit
    if install > 0:
        first_month = install + max(0.0, visits_per_month - 1) * per_visit
    elif is_visit_based(form.frequency):
        first_month = per_visit
    else:
        first_month = monthly
    first_month = r.get("firstMonth", first_month)

    contract, visits = schedule_contract(form.frequency, per_visit, monthly, first_visit, first_month, months, cfg)
    annual_visits = cfg["annualFrequencies"][form.frequency]
    annual = per_visit * annual_visits + (install - per_visit if install > 0 else 0.0)

    breakdown = [
        f"Windows: {form.smallWindows} small, {form.mediumWindows} medium, {form.largeWindows} large = ${windows:.2f}",
        f"Trip ${trip:.2f}, frequency multiplier {freq_multiplier}",
    ]
    if install:
        breakdown.append(f"First-time install: ${install:.2f}")

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method="first_time" if install else "recurring",
        frequency=form.frequency,
        per_visit_base=per_visit_raw,
        per_visit=per_visit,
        first_visit=first_visit,
        first_month=first_month,
        monthly=monthly,
        contract=contract,
        contract_months=months,
        visits=visits,
        install_fee=install,
        trip_charge=trip,
        annual=annual,
        components={
            "smallWindows": small,
            "mediumWindows": medium,
            "largeWindows": large,
            "mirrors": mirrors,
            "extraCharges": extras,
            "tripCharge": trip,
            "installFee": install,
        },
        breakdown=breakdown,
        line_items={
            "smallWindows": calc_field("Small Windows", form.smallWindows, cfg["smallWindowRate"], small, "window"),
            "mediumWindows": calc_field("Medium Windows", form.mediumWindows, cfg["mediumWindowRate"], medium, "window"),
            "largeWindows": calc_field("Large Windows", form.largeWindows, cfg["largeWindowRate"], large, "window"),
            "service": calc_field("Window Cleaning", form.primary_quantity(), freq_multiplier, per_visit, "visit"),
            "tripCharge": dollar_field("Trip Charge", trip, r.is_custom("tripCharge")),
            "installation": dollar_field("First-Time Install", install, r.is_custom("installFee")),
            "mirrors": text_field("Mirror Cleaning", "Yes" if form.includeMirrors else "No"),
        },
    )
