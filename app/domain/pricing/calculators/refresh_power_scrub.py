"""
Refresh Power Scrub deep clean.

The job is split into areas (dumpster, patio, walkway, front of house, back
of house, other). Each enabled area is priced on its own, by the area's
preset price, by labor hours or by square footage, and the visit is their
sum. Hourly and square footage pricing include the trip and are floored at
the minimum visit.
"""

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..coercion import Amount, Count
from ..common import (
    QuoteResult,
    ServiceForm,
    build_quote,
    effective_contract_months,
    rate_tier_multiplier,
    schedule_contract,
)
from ..frequency import is_one_time, is_visit_based, monthly_multiplier
from ..overrides import OverrideResolver
from ..payload import dollar_field, text_field

SERVICE_ID = "refreshPowerScrub"
DISPLAY_NAME = "Refresh Power Scrub"

AREAS = ("dumpster", "patio", "walkway", "foh", "boh", "other")
AREA_LABELS = {
    "dumpster": "Dumpster",
    "patio": "Patio",
    "walkway": "Walkway",
    "foh": "Front of House",
    "boh": "Back of House",
    "other": "Other",
}


class RefreshArea(BaseModel):
    model_config = ConfigDict(extra="ignore")

    enabled: bool = False
    pricingMethod: Literal["area_specific", "hourly", "square_footage"] = "area_specific"
    workers: Count = 2
    hours: Amount = 0
    insideSqFt: Amount = 0
    outsideSqFt: Amount = 0
    kitchenSize: Literal["smallMedium", "large"] = "smallMedium"
    patioMode: Literal["standalone", "upsell"] = "standalone"


class RefreshPowerScrubForm(ServiceForm):
    frequency: Literal["oneTime", "monthly", "bimonthly", "quarterly", "biannual", "annual"] = "oneTime"
    dumpster: RefreshArea = Field(default_factory=RefreshArea)
    patio: RefreshArea = Field(default_factory=RefreshArea)
    walkway: RefreshArea = Field(default_factory=RefreshArea)
    foh: RefreshArea = Field(default_factory=RefreshArea)
    boh: RefreshArea = Field(default_factory=RefreshArea)
    other: RefreshArea = Field(default_factory=RefreshArea)

    def enabled_areas(self) -> list[str]:
        return [name for name in AREAS if getattr(self, name).enabled]

    def primary_quantity(self) -> float:
        return len(self.enabled_areas())


def square_footage_price(area: RefreshArea, cfg: dict) -> float:
    sq = cfg["squareFootage"]
    subtotal = sq["fixedFee"] + area.insideSqFt * sq["insideRate"] + area.outsideSqFt * sq["outsideRate"] + cfg["tripCharge"]
    return max(subtotal, cfg["minimumVisit"])


def hourly_price(area: RefreshArea, cfg: dict) -> float:
    labor = area.workers * area.hours * cfg["hourlyRate"]
    return max(cfg["tripCharge"] + labor, cfg["minimumVisit"])


def preset_price(name: str, area: RefreshArea, cfg: dict) -> float:
    if name == "patio":
        return cfg["patioRates"][area.patioMode]
    if name == "walkway":
        # walkways are outside power washing
        return square_footage_price(area.model_copy(update={"insideSqFt": 0}), cfg)
    if name == "foh":
        return cfg["frontOfHouseRate"]
    if name == "boh":
        return cfg["kitchenRates"][area.kitchenSize]
    return cfg["minimumVisit"]


def area_price(name: str, area: RefreshArea, cfg: dict) -> float:
    if area.pricingMethod == "hourly":
        return hourly_price(area, cfg)
    if area.pricingMethod == "square_footage":
        return square_footage_price(area, cfg)
    return preset_price(name, area, cfg)


def calculate(form: RefreshPowerScrubForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    enabled = form.enabled_areas()
    if not enabled:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No areas selected", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)

    totals = {}
    breakdown = []
    for name in enabled:
        area = getattr(form, name)
        totals[name] = r.get(f"{name}Total", area_price(name, area, cfg) * tier)
        breakdown.append(f"{AREA_LABELS[name]}: ${totals[name]:.2f} ({area.pricingMethod})")

    raw = sum(totals.values())
    per_visit = r.get("perVisit", raw)
    monthly = r.get("monthly", per_visit * monthly_multiplier(form.frequency, cfg))
    first_month = per_visit if is_one_time(form.frequency) or is_visit_based(form.frequency) else monthly
    first_month = r.get("firstMonth", first_month)
    contract, visits = schedule_contract(form.frequency, per_visit, monthly, per_visit, first_month, months, cfg)

    line_items = {
        f"{name}Area": dollar_field(AREA_LABELS[name], totals[name], r.is_custom(f"{name}Total")) for name in enabled
    }
    line_items["areas"] = text_field("Areas", ", ".join(AREA_LABELS[name] for name in enabled))

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method="per_area",
        frequency=form.frequency,
        per_visit_base=raw,
        per_visit=per_visit,
        first_visit=per_visit,
        first_month=first_month,
        monthly=monthly,
        contract=contract,
        contract_months=months,
        visits=visits,
        minimum_per_visit=cfg["minimumVisit"],
        components=totals,
        breakdown=breakdown,
        line_items=line_items,
    )
