"""
Foaming drain treatment.

Standard drains are billed per drain or with the alternative base + per
drain formula, whichever is cheaper unless a pricing mode is forced. Large
accounts (minimumDrains or more standard drains) qualify for the install
program. Filthy facilities pay a one-time install of 3x the weekly cost of
the filthy drains.
"""

from typing import Literal

from ..coercion import Count
from ..common import (
    QuoteResult,
    ServiceForm,
    build_quote,
    effective_contract_months,
    rate_tier_multiplier,
    schedule_contract,
)
from ..frequency import monthly_multiplier
from ..overrides import OverrideResolver
from ..payload import calc_field, dollar_field, text_field

SERVICE_ID = "foamingDrain"
DISPLAY_NAME = "Foaming Drain"


class FoamingDrainForm(ServiceForm):
    frequency: Literal["weekly", "biweekly", "monthly", "bimonthly", "quarterly"] = "weekly"
    standardDrains: Count = 0
    installDrains: Count = 0
    filthyDrains: Count = 0
    plumbingDrains: Count = 0
    greaseTrapDrains: Count = 0
    greenDrains: Count = 0

    facilityCondition: Literal["normal", "filthy"] = "normal"
    installFrequency: Literal["weekly", "bimonthly"] = "weekly"
    location: Literal["standard", "beltway"] = "standard"
    useSmallAltPricingWeekly: bool = False
    useBigAccountTenWeekly: bool = False
    isAllInclusive: bool = False
    chargeGreaseTrapInstall: bool = True

    def primary_quantity(self) -> float:
        # install drains are a subset of the standard drains
        return self.standardDrains + self.greaseTrapDrains + self.greenDrains


def _alt_cost(drains: int, cfg: dict) -> float:
    return cfg["altBaseCharge"] + cfg["altExtraPerDrain"] * drains if drains > 0 else 0.0


def _standard_pricing(drains: int, form: FoamingDrainForm, cfg: dict) -> tuple[str, float]:
    """Pick the pricing method for the regular standard drains"""
    if drains <= 0:
        return "standard", 0.0
    if form.isAllInclusive:
        return "all_inclusive", 0.0
    if form.useBigAccountTenWeekly:
        return "big_account", drains * cfg["bigAccountTenWeekly"]["weeklyRatePerDrain"]
    standard = drains * cfg["standardDrainRate"]
    alternative = _alt_cost(drains, cfg)
    if form.useSmallAltPricingWeekly or alternative < standard:
        return "alternative", alternative
    return "standard", standard


def calculate(form: FoamingDrainForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    if form.primary_quantity() <= 0:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No drains entered", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)
    breakdown = []

    volume = cfg["volumePricing"]
    qualifies_for_install = (
        form.standardDrains >= volume["minimumDrains"] and not form.useBigAccountTenWeekly and not form.isAllInclusive
    )
    install_drains = min(form.installDrains, form.standardDrains) if qualifies_for_install else 0
    regular_drains = form.standardDrains - install_drains
    install_rate = volume[form.installFrequency]["ratePerDrain"]
    install_drains_cost = install_drains * install_rate
    if install_drains:
        breakdown.append(f"Install program: {install_drains} drains x ${install_rate:.2f}")

    method, standard_cost = _standard_pricing(regular_drains, form, cfg)
    breakdown.append(f"{regular_drains} standard drains ({method}): ${standard_cost:.2f}")

    plumbing = form.plumbingDrains * cfg["plumbingAddonRatePerDrain"]
    grease = form.greaseTrapDrains * cfg["greaseTrap"]["weeklyRatePerTrap"]
    green = form.greenDrains * cfg["greenDrain"]["weeklyRatePerDrain"]

    raw = standard_cost + install_drains_cost + plumbing + grease + green
    minimum = cfg["minimumChargePerVisit"] if raw > 0 else 0.0
    service = max(raw, minimum) * tier

    trip_calc = 0.0 if form.isAllInclusive or raw <= 0 else cfg["tripCharges"][form.location]
    trip = r.get("tripCharge", trip_calc)
    per_visit = r.get("perVisit", service + trip)

    # one-time installation
    filthy_install = 0.0
    filthy = form.facilityCondition == "filthy" and form.standardDrains > 0 and not form.useBigAccountTenWeekly
    if filthy:
        count = form.filthyDrains if 0 < form.filthyDrains <= form.standardDrains else form.standardDrains
        if method == "alternative":
            weekly_filthy = _alt_cost(count, cfg)
        else:
            weekly_filthy = cfg["standardDrainRate"] * count
        filthy_install = weekly_filthy * cfg["filthyMultiplier"]
        breakdown.append(f"Filthy install: {count} drains x {cfg['filthyMultiplier']} = ${filthy_install:.2f}")
    grease_install = (
        form.greaseTrapDrains * cfg["greaseTrap"]["installPerTrap"] if form.chargeGreaseTrapInstall else 0.0
    )
    green_install = form.greenDrains * cfg["greenDrain"]["installPerDrain"]
    install = r.get("installFee", filthy_install + grease_install + green_install)

    if install > 0:
        if filthy and filthy_install > 0:
            first_visit = install + (install_drains_cost + plumbing) * tier + trip
        else:
            first_visit = install + (standard_cost + install_drains_cost + plumbing) * tier + trip
    else:
        first_visit = per_visit

    multiplier = monthly_multiplier(form.frequency, cfg)
    monthly = r.get("monthly", per_visit * multiplier)
    if install > 0:
        first_month = first_visit + per_visit * max(0.0, multiplier - 1)
    else:
        first_month = monthly
    first_month = r.get("firstMonth", first_month)

    contract, visits = schedule_contract(form.frequency, per_visit, monthly, first_visit, first_month, months, cfg)

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method=method,
        frequency=form.frequency,
        per_visit_base=raw * tier + trip,
        per_visit=per_visit,
        first_visit=first_visit,
        first_month=first_month,
        monthly=monthly,
        contract=contract,
        contract_months=months,
        visits=visits,
        minimum_per_visit=minimum,
        install_fee=install,
        trip_charge=trip,
        components={
            "standardDrains": standard_cost,
            "installDrains": install_drains_cost,
            "plumbing": plumbing,
            "greaseTrap": grease,
            "greenDrain": green,
            "filthyInstall": filthy_install,
            "greaseTrapInstall": grease_install,
            "greenDrainInstall": green_install,
            "tripCharge": trip,
        },
        breakdown=breakdown,
        line_items={
            "service": calc_field("Standard Drains", regular_drains, cfg["standardDrainRate"], standard_cost, "drain"),
            "installDrains": calc_field("Install Program Drains", install_drains, install_rate, install_drains_cost, "drain"),
            "plumbing": calc_field("Plumbing Add-on", form.plumbingDrains, cfg["plumbingAddonRatePerDrain"], plumbing, "drain"),
            "greaseTraps": calc_field("Grease Traps", form.greaseTrapDrains, cfg["greaseTrap"]["weeklyRatePerTrap"], grease, "trap"),
            "greenDrains": calc_field("Green Drains", form.greenDrains, cfg["greenDrain"]["weeklyRatePerDrain"], green, "drain"),
            "installation": dollar_field("Installation", install, r.is_custom("installFee")),
            "tripCharge": dollar_field("Trip Charge", trip, r.is_custom("tripCharge")),
            "facilityCondition": text_field("Facility Condition", form.facilityCondition),
        },
    )
