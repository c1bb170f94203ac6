"""Grease trap pumping, per trap plus per gallon"""

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
from ..frequency import is_visit_based, monthly_multiplier
from ..overrides import OverrideResolver
from ..payload import calc_field

SERVICE_ID = "greaseTrap"
DISPLAY_NAME = "Grease Trap"


class GreaseTrapForm(ServiceForm):
    frequency: Literal["daily", "weekly", "biweekly", "monthly", "bimonthly", "quarterly"] = "weekly"
    numberOfTraps: Count = 0
    sizeOfTrapsGallons: Amount = 0

    def primary_quantity(self) -> float:
        return self.numberOfTraps


def calculate(form: GreaseTrapForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    if form.numberOfTraps <= 0:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No grease traps entered", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)

    per_trap = r.get("perTrapRate", cfg["perTrapRate"])
    per_gallon = r.get("perGallonRate", cfg["perGallonRate"])
    traps = form.numberOfTraps * per_trap
    gallons = form.sizeOfTrapsGallons * per_gallon
    per_visit = r.get("perVisit", (traps + gallons) * tier)

    monthly = r.get("monthly", per_visit * monthly_multiplier(form.frequency, cfg))
    first_month = per_visit if is_visit_based(form.frequency) else monthly
    contract, visits = schedule_contract(form.frequency, per_visit, monthly, per_visit, first_month, months, cfg)

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method="per_trap_and_gallon",
        frequency=form.frequency,
        per_visit_base=(traps + gallons) * tier,
        per_visit=per_visit,
        first_visit=per_visit,
        first_month=first_month,
        monthly=monthly,
        contract=contract,
        contract_months=months,
        visits=visits,
        components={"traps": traps, "gallons": gallons, "tripCharge": 0.0},
        breakdown=[
            f"{form.numberOfTraps} traps x ${per_trap:.2f}",
            f"{form.sizeOfTrapsGallons:g} gallons x ${per_gallon:.2f}",
        ],
        line_items={
            "service": calc_field("Grease Traps", form.numberOfTraps, per_trap, traps, "trap"),
            "gallons": calc_field("Trap Capacity", form.sizeOfTrapsGallons, per_gallon, gallons, "gallon"),
        },
    )
