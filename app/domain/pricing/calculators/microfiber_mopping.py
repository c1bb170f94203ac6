"""
Microfiber mopping.

Bundled with SaniClean it is cheap per bathroom (or per 300 sq ft for huge
bathrooms) plus optional extra non-bathroom area. Standalone service is
priced per 200 sq ft with a minimum. Under a SaniClean All Inclusive
package the mopping itself is included at no charge.
"""

import math
from typing import Literal

from ..coercion import Amount, Count
from ..common import (
    QuoteResult,
    ServiceForm,
    build_quote,
    effective_contract_months,
    rate_tier_multiplier,
)
from ..frequency import monthly_multiplier, visits_in_contract
from ..overrides import OverrideResolver
from ..payload import calc_field, dollar_field, text_field

SERVICE_ID = "microfiberMopping"
DISPLAY_NAME = "Microfiber Mopping"


class MicrofiberMoppingForm(ServiceForm):
    frequency: Literal["weekly", "biweekly", "monthly"] = "weekly"
    isCombinedWithSani: bool = True
    isAllInclusive: bool = False
    bathroomCount: Count = 0
    hugeBathroomSqFt: Amount = 0
    extraAreaSqFt: Amount = 0
    standaloneSqFt: Amount = 0
    chemicalGallonsPerMonth: Amount = 0

    def primary_quantity(self) -> float:
        if self.isCombinedWithSani:
            return self.bathroomCount + self.hugeBathroomSqFt + self.extraAreaSqFt
        return self.standaloneSqFt + self.hugeBathroomSqFt + self.extraAreaSqFt


def bathroom_charge(form: MicrofiberMoppingForm, cfg: dict) -> float:
    huge = cfg["hugeBathroomPricing"]
    if form.hugeBathroomSqFt > 0 and huge.get("enabled", True):
        return math.ceil(form.hugeBathroomSqFt / huge["sqFtUnit"]) * huge["ratePerSqFt"]
    return form.bathroomCount * cfg["includedBathroomRate"]


def extra_area_charge(sq_ft: float, cfg: dict) -> float:
    if sq_ft <= 0:
        return 0.0
    pricing = cfg["extraAreaPricing"]
    by_unit = math.ceil(sq_ft / pricing["extraAreaSqFtUnit"]) * pricing["extraAreaRatePerUnit"]
    if pricing.get("useHigherRate", True):
        return max(pricing["singleLargeAreaRate"], by_unit)
    return by_unit


def standalone_charge(sq_ft: float, cfg: dict) -> tuple[float, float]:
    """Returns (charge, minimum)"""
    if sq_ft <= 0:
        return 0.0, 0.0
    pricing = cfg["standalonePricing"]
    by_unit = math.ceil(sq_ft / pricing["standaloneSqFtUnit"]) * pricing["standaloneRatePerUnit"]
    return max(by_unit, pricing["standaloneMinimum"]), pricing["standaloneMinimum"]


def calculate(form: MicrofiberMoppingForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    if form.primary_quantity() <= 0:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No bathrooms or mopping area entered", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)
    minimum = 0.0

    if form.isCombinedWithSani:
        bathrooms = r.get("bathroomCharge", bathroom_charge(form, cfg))
        extra = r.get("extraAreaCharge", extra_area_charge(form.extraAreaSqFt, cfg))
        service = bathrooms + extra
        raw = service
        method = "included_with_sani"
        breakdown = [f"Bathrooms: ${bathrooms:.2f}", f"Extra area: ${extra:.2f}"]
    else:
        area = form.standaloneSqFt + form.hugeBathroomSqFt + form.extraAreaSqFt
        service, minimum = standalone_charge(area, cfg)
        unit_cfg = cfg["standalonePricing"]
        raw = math.ceil(area / unit_cfg["standaloneSqFtUnit"]) * unit_cfg["standaloneRatePerUnit"]
        bathrooms = extra = 0.0
        method = "standalone"
        breakdown = [f"Standalone: {area:g} sq ft, minimum ${minimum:.2f}"]

    if form.isAllInclusive:
        service = raw = 0.0
        minimum = 0.0
        method = "included"
        breakdown.append("Included in SaniClean All Inclusive")

    per_visit = r.get("perVisit", service * tier)
    chemical = form.chemicalGallonsPerMonth * cfg["chemicalProducts"]["dailyChemicalPerGallon"]
    monthly = r.get("monthly", per_visit * monthly_multiplier(form.frequency, cfg) + chemical)
    contract = monthly * months
    if chemical:
        breakdown.append(f"Daily chemical: ${chemical:.2f}/month")

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method=method,
        frequency=form.frequency,
        per_visit_base=raw * tier,
        per_visit=per_visit,
        first_visit=per_visit,
        first_month=monthly,
        monthly=monthly,
        contract=contract,
        contract_months=months,
        visits=visits_in_contract(form.frequency, months, cfg),
        minimum_per_visit=minimum,
        components={
            "bathroomCharge": bathrooms,
            "extraAreaCharge": extra,
            "chemical": chemical,
            "tripCharge": 0.0,
        },
        breakdown=breakdown,
        line_items={
            "service": calc_field("Microfiber Mopping", 1, per_visit, per_visit, "visit"),
            "bathrooms": calc_field("Bathrooms", form.bathroomCount, cfg["includedBathroomRate"], bathrooms, "bathroom"),
            "extraArea": calc_field("Extra Area", form.extraAreaSqFt, cfg["extraAreaPricing"]["extraAreaRatePerUnit"], extra, "sq ft"),
            "chemical": dollar_field("Daily Chemical (monthly)", chemical),
            "pricingType": text_field("Pricing Type", method),
        },
    )
