"""
SaniClean restroom hygiene pricing.

Two pricing models:
- All Inclusive: flat weekly rate per fixture; soap, warranty, microfiber
  mopping and trip are included. Luxury soap, excess soap and paper overage
  are still billed.
- Per Item Charge: geographic rate per fixture with a regional minimum (or
  the small-facility minimum), optional trip/parking and add-ons. Facility
  components are billed at their own frequency.
"""

import math
from typing import Literal, Optional

from pydantic import field_validator

from ..coercion import Amount, Count
from ..common import (
    QuoteResult,
    ServiceForm,
    build_quote,
    effective_contract_months,
    rate_tier_multiplier,
)
from ..frequency import is_visit_based, monthly_multiplier, visits_in_contract, visits_per_year
from ..overrides import OverrideResolver
from ..payload import calc_field, dollar_field, text_field

SERVICE_ID = "saniclean"
DISPLAY_NAME = "SaniClean"

MainFrequency = Literal["weekly", "biweekly", "twicePerMonth", "monthly", "bimonthly", "quarterly", "biannual", "annual"]


class SanicleanForm(ServiceForm):
    frequency: MainFrequency = "weekly"
    facilityComponentsFrequency: Literal["weekly", "biweekly", "monthly"] = "weekly"

    sinks: Count = 0
    urinals: Count = 0
    maleToilets: Count = 0
    femaleToilets: Count = 0

    pricingMode: Literal["auto", "all_inclusive", "per_item_charge"] = "auto"
    location: Literal["insideBeltway", "outsideBeltway"] = "insideBeltway"
    addTripCharge: bool = False
    needsParking: bool = False

    soapType: Literal["standard", "luxury"] = "standard"
    luxuryUpgradeQty: Optional[int] = None
    excessSoapGallons: Amount = 0
    paperSpendPerWeek: Amount = 0

    addMicrofiberMopping: bool = False
    microfiberBathrooms: Count = 0
    warrantyDispensers: Count = 0

    addUrinalComponents: bool = False
    urinalScreensQty: Count = 0
    urinalMatsQty: Count = 0
    addMaleToiletComponents: bool = False
    toiletClipsQty: Count = 0
    seatCoverDispensersQty: Count = 0
    addFemaleToiletComponents: bool = False
    sanipodsQty: Count = 0

    @field_validator("pricingMode", mode="before")
    @classmethod
    def alias_geographic(cls, v):
        # older documents saved the per-item model under this name
        return "per_item_charge" if v == "geographic_standard" else v

    @field_validator("luxuryUpgradeQty", mode="before")
    @classmethod
    def lenient_upgrade_qty(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        try:
            return max(0, int(float(v)))
        except (TypeError, ValueError):
            return None

    @property
    def fixture_count(self) -> int:
        return self.sinks + self.urinals + self.maleToilets + self.femaleToilets

    def primary_quantity(self) -> float:
        return self.fixture_count


def resolve_pricing_mode(form: SanicleanForm, cfg: dict) -> str:
    """auto picks All Inclusive at or above the fixture threshold"""
    if form.pricingMode != "auto":
        return form.pricingMode
    threshold = cfg.get("autoAllInclusiveMinFixtures", 8)
    return "all_inclusive" if form.fixture_count >= threshold else "per_item_charge"


def _luxury_upgrade(form: SanicleanForm, rate: float) -> float:
    if form.soapType != "luxury":
        return 0.0
    qty = form.luxuryUpgradeQty if form.luxuryUpgradeQty is not None else form.sinks
    return qty * rate


def _facility_components(form: SanicleanForm, rates: dict) -> float:
    total = 0.0
    if form.addUrinalComponents:
        total += form.urinalScreensQty * rates["urinalScreen"] + form.urinalMatsQty * rates["urinalMat"]
    if form.addMaleToiletComponents:
        total += form.toiletClipsQty * rates["toiletClips"] + form.seatCoverDispensersQty * rates["seatCoverDispenser"]
    if form.addFemaleToiletComponents:
        total += form.sanipodsQty * rates["sanipodService"]
    return total


def calculate(form: SanicleanForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    fixtures = form.fixture_count
    if fixtures == 0:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No restroom fixtures configured", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)
    mode = resolve_pricing_mode(form, cfg)
    breakdown = [f"Fixtures: {fixtures}"]

    if mode == "all_inclusive":
        ai = cfg["allInclusive"]
        rate = ai["weeklyRatePerFixture"]
        product = fixtures * rate
        base = r.get("baseService", product)
        soap_upgrade = r.get("soapUpgrade", _luxury_upgrade(form, ai["luxuryUpgradePerDispenser"]))
        excess_soap = r.get("excessSoap", form.excessSoapGallons * ai["excessSoapRatePerGallon"][form.soapType])
        credit = fixtures * ai["paperCreditPerFixture"]
        paper = r.get("paperOverage", max(0.0, form.paperSpendPerWeek - credit))
        trip = microfiber = warranty = facility = 0.0
        minimum = 0.0
        method = "All Inclusive"
        breakdown += [
            f"All Inclusive: {fixtures} x ${rate:.2f}",
            f"Paper credit: ${credit:.2f}/week",
            "Trip charge waived, warranty and microfiber mopping included",
        ]
    else:
        items = cfg["perItemCharge"]
        inside = form.location == "insideBeltway"
        region = items["insideBeltway" if inside else "outsideBeltway"]
        rate = region["ratePerFixture"]
        product = fixtures * rate
        small = items["smallFacility"]

        if fixtures <= small["fixtureThreshold"]:
            minimum = small["minimumWeekly"]
            base_calc = max(product, minimum)
            trip_calc = 0.0
            method = "small_facility_minimum"
            breakdown.append(f"Small facility minimum ${minimum:.2f} (includes trip)")
        else:
            minimum = region.get("minimum", 0)
            base_calc = max(product, minimum)
            trip_calc = 0.0
            if form.addTripCharge:
                trip_calc = region.get("tripCharge", 0)
                if inside and form.needsParking:
                    trip_calc += region.get("parkingFee", 0)
            method = "per_item_charge"
            breakdown.append(f"{fixtures} x ${rate:.2f} ({form.location}), minimum ${minimum:.2f}")

        base = r.get("baseService", base_calc)
        trip = r.get("tripCharge", trip_calc)
        soap_upgrade = r.get("soapUpgrade", _luxury_upgrade(form, items["luxuryUpgradePerDispenser"]))
        excess_soap = r.get("excessSoap", 0.0)
        paper = r.get("paperOverage", 0.0)
        microfiber = r.get(
            "microfiberMopping",
            form.microfiberBathrooms * items["microfiberMoppingPerBathroom"] if form.addMicrofiberMopping else 0.0,
        )
        warranty = r.get("warrantyFees", form.warrantyDispensers * items["warrantyFeePerDispenser"])
        facility = r.get("facilityComponents", _facility_components(form, items["facilityComponents"]))

    addons = soap_upgrade + excess_soap + paper + microfiber + warranty
    per_visit_base = (product + trip + addons) * tier
    per_visit = r.get("perVisit", (base + trip + addons) * tier)

    facility_monthly = facility * monthly_multiplier(form.facilityComponentsFrequency, cfg)

    if is_visit_based(form.frequency):
        visits = visits_in_contract(form.frequency, months, cfg)
        monthly = r.get("monthly", per_visit * visits_per_year(form.frequency, cfg) / 12 + facility_monthly)
        first_month = per_visit + facility_monthly
        contract = per_visit * visits + facility_monthly * months
        breakdown.append(f"{visits} visits in {months} months")
    else:
        visits = visits_in_contract(form.frequency, months, cfg)
        monthly = r.get("monthly", per_visit * monthly_multiplier(form.frequency, cfg) + facility_monthly)
        first_month = monthly
        contract = monthly * months

    soap_dispensers = form.sinks
    air_fresheners = math.ceil(form.sinks / 2)

    line_items = {
        "fixtureBreakdown": [
            calc_field("Sinks", form.sinks, rate, form.sinks * rate),
            calc_field("Urinals", form.urinals, rate, form.urinals * rate),
            calc_field("Male Toilets", form.maleToilets, rate, form.maleToilets * rate),
            calc_field("Female Toilets", form.femaleToilets, rate, form.femaleToilets * rate),
        ],
        "service": calc_field("Restroom Fixtures", fixtures, rate, base, "fixture"),
        "pricingMode": text_field("Pricing Mode", method),
        "location": text_field("Location", form.location),
        "soapType": text_field("Soap Type", form.soapType),
        "dispensers": text_field("Dispensers", f"{soap_dispensers} soap, {air_fresheners} air freshener"),
        "tripCharge": dollar_field("Trip Charge", trip, r.is_custom("tripCharge")),
        "facilityComponents": dollar_field("Facility Components", facility, r.is_custom("facilityComponents")),
    }

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method=method,
        frequency=form.frequency,
        per_visit_base=per_visit_base,
        per_visit=per_visit,
        first_visit=per_visit,
        first_month=first_month,
        monthly=monthly,
        contract=contract,
        contract_months=months,
        visits=visits,
        minimum_per_visit=minimum,
        trip_charge=trip,
        components={
            "baseService": base,
            "tripCharge": trip,
            "soapUpgrade": soap_upgrade,
            "excessSoap": excess_soap,
            "paperOverage": paper,
            "microfiberMopping": microfiber,
            "warrantyFees": warranty,
            "facilityComponents": facility,
            "facilityComponentsMonthly": facility_monthly,
            "soapDispensers": soap_dispensers,
            "airFresheners": air_fresheners,
        },
        breakdown=breakdown,
        line_items=line_items,
    )
