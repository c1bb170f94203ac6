"""Floor strip and wax, per sq ft by service variant with a minimum per visit"""

from typing import Literal, Optional

from ..coercion import Amount
from ..common import (
    QuoteResult,
    ServiceForm,
    build_quote,
    effective_contract_months,
    rate_tier_multiplier,
    schedule_contract,
)
from ..frequency import is_one_time, is_visit_based, visits_per_year
from ..overrides import OverrideResolver
from ..payload import calc_field, text_field

SERVICE_ID = "stripWax"
DISPLAY_NAME = "Strip & Wax"


class StripWaxForm(ServiceForm):
    frequency: Literal["oneTime", "weekly", "biweekly", "monthly", "bimonthly", "quarterly", "biannual", "annual"] = "monthly"
    floorAreaSqFt: Amount = 0
    serviceVariant: Optional[Literal["standardFull", "noSealant", "wellMaintained"]] = None

    def primary_quantity(self) -> float:
        return self.floorAreaSqFt


def monthly_visits(frequency: str, cfg: dict) -> float:
    weeks = cfg.get("weeksPerMonth", 4.33)
    if frequency == "weekly":
        return weeks
    if frequency == "biweekly":
        return weeks / 2
    if is_one_time(frequency):
        return 0.0
    return visits_per_year(frequency, cfg) / 12


def _usable(variant) -> bool:
    if not isinstance(variant, dict) or not isinstance(variant.get("label"), str):
        return False
    return all(
        isinstance(variant.get(key), (int, float)) and not isinstance(variant.get(key), bool)
        for key in ("ratePerSqFt", "minCharge")
    )


def calculate(form: StripWaxForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    if form.floorAreaSqFt <= 0:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No floor area entered", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)
    variant_key = form.serviceVariant or cfg.get("defaultVariant", "standardFull")
    variants = cfg["variants"]
    if not _usable(variants.get(variant_key)):
        variant_key = "standardFull"
    variant = variants[variant_key]

    raw = form.floorAreaSqFt * variant["ratePerSqFt"]
    minimum = variant["minCharge"]
    per_visit = r.get("perVisit", max(raw, minimum) * tier)

    monthly = r.get("monthly", per_visit * monthly_visits(form.frequency, cfg))
    ongoing = r.get("ongoing", monthly)
    if is_one_time(form.frequency) or is_visit_based(form.frequency):
        first_month = per_visit
    else:
        first_month = monthly
    first_month = r.get("firstMonth", first_month)
    contract, visits = schedule_contract(form.frequency, per_visit, ongoing, per_visit, first_month, months, cfg)

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method=variant_key,
        frequency=form.frequency,
        per_visit_base=raw * tier,
        per_visit=per_visit,
        first_visit=per_visit,
        first_month=first_month,
        monthly=ongoing,
        contract=contract,
        contract_months=months,
        visits=visits,
        minimum_per_visit=minimum,
        components={"areaCharge": raw, "tripCharge": 0.0},
        breakdown=[
            f"{variant['label']}: {form.floorAreaSqFt:g} sq ft x ${variant['ratePerSqFt']:.2f}",
            f"Minimum ${minimum:.2f} per visit",
        ],
        line_items={
            "service": calc_field(variant["label"], form.floorAreaSqFt, variant["ratePerSqFt"], per_visit, "sq ft"),
            "serviceVariant": text_field("Service Variant", variant["label"]),
        },
    )
