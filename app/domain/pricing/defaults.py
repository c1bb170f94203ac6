"""
Hardcoded fallback pricing configs.

The backend config for a service is merged over these key by key, so any
rate the backend does not send (or sends in a shape we cannot use) keeps the
value below.
"""

import copy
import logging
import math

from .coercion import parse_number

logger = logging.getLogger(__name__)

_DROP = object()

RATE_CATEGORIES = {
    "redRate": {"multiplier": 1.0, "commissionRate": "20%"},
    "greenRate": {"multiplier": 1.3, "commissionRate": "25%"},
}

CONTRACT_BOUNDS = {"minContractMonths": 2, "maxContractMonths": 36}


SANICLEAN = {
    "autoAllInclusiveMinFixtures": 8,
    "allInclusive": {
        "weeklyRatePerFixture": 20,
        "luxuryUpgradePerDispenser": 5,
        "excessSoapRatePerGallon": {"standard": 13, "luxury": 30},
        "paperCreditPerFixture": 5,
    },
    "perItemCharge": {
        "insideBeltway": {"ratePerFixture": 7, "minimum": 40, "tripCharge": 8, "parkingFee": 7},
        "outsideBeltway": {"ratePerFixture": 6, "minimum": 0, "tripCharge": 8},
        "smallFacility": {"fixtureThreshold": 5, "minimumWeekly": 50},
        "luxuryUpgradePerDispenser": 5,
        "microfiberMoppingPerBathroom": 10,
        "warrantyFeePerDispenser": 1,
        "facilityComponents": {
            "urinalScreen": 8,
            "urinalMat": 8,
            "toiletClips": 2,
            "seatCoverDispenser": 2,
            "sanipodService": 4,
        },
    },
}

SANISCRUB = {
    "fixtureRates": {"monthly": 25, "twicePerMonth": 25, "bimonthly": 35, "quarterly": 40},
    "minimums": {"monthly": 175, "twicePerMonth": 175, "bimonthly": 250, "quarterly": 250},
    "nonBathroomUnitSqFt": 500,
    "nonBathroomFirstUnitRate": 250,
    "nonBathroomAdditionalUnitRate": 125,
    "installMultipliers": {"dirty": 3, "clean": 1},
    "tripChargeBase": 0,
    "parkingFee": 0,
    "twoTimesPerMonthDiscountFlat": 15,
}

CARPET = {
    "unitSqFt": 500,
    "firstUnitRate": 250,
    "additionalUnitRate": 125,
    "perVisitMinimum": 250,
    "useExactSqft": False,
    "installMultipliers": {"dirty": 3, "clean": 1},
}

FOAMING_DRAIN = {
    "standardDrainRate": 10,
    "altBaseCharge": 20,
    "altExtraPerDrain": 4,
    "volumePricing": {
        "minimumDrains": 10,
        "weekly": {"ratePerDrain": 20},
        "bimonthly": {"ratePerDrain": 10},
    },
    "bigAccountTenWeekly": {"weeklyRatePerDrain": 10},
    "filthyMultiplier": 3,
    "plumbingAddonRatePerDrain": 10,
    "greaseTrap": {"weeklyRatePerTrap": 125, "installPerTrap": 300},
    "greenDrain": {"weeklyRatePerDrain": 5, "installPerDrain": 100},
    "minimumChargePerVisit": 50,
    "tripCharges": {"standard": 6, "beltway": 8},
}

ELECTROSTATIC_SPRAY = {
    "ratePerRoom": 20,
    "ratePerThousandSqFt": 50,
    "sqFtUnit": 1000,
    "tripCharges": {"insideBeltway": 10, "outsideBeltway": 0, "standard": 0},
}

SANIPOD = {
    "weeklyRatePerUnit": 3,
    "altWeeklyRatePerUnit": 8,
    "standaloneExtraWeeklyCharge": 40,
    "extraBagPrice": 2,
    "installChargePerUnit": 25,
    "tripCharge": 0,
}

STRIP_WAX = {
    "variants": {
        "standardFull": {"label": "Strip, Wax & Seal", "ratePerSqFt": 0.75, "minCharge": 550},
        "noSealant": {"label": "Strip & Wax (no sealant)", "ratePerSqFt": 0.70, "minCharge": 550},
        "wellMaintained": {"label": "Well Maintained Floor", "ratePerSqFt": 0.40, "minCharge": 400},
    },
    "defaultVariant": "standardFull",
    "weeksPerMonth": 4.33,
}

RPM_WINDOWS = {
    "smallWindowRate": 1.5,
    "mediumWindowRate": 3,
    "largeWindowRate": 7,
    "tripCharge": 8,
    "installMultiplierFirstTime": 3,
    "frequencyMultipliers": {"weekly": 1, "biweekly": 1.25, "monthly": 1.25, "quarterly": 2},
    "annualFrequencies": {"weekly": 50, "biweekly": 25, "monthly": 12, "quarterly": 4},
    "monthlyConversions": {"weekly": 4.2},
}

GREASE_TRAP = {
    "perTrapRate": 125,
    "perGallonRate": 0.35,
}

MICROFIBER_MOPPING = {
    "includedBathroomRate": 10,
    "hugeBathroomPricing": {"enabled": True, "ratePerSqFt": 10, "sqFtUnit": 300},
    "extraAreaPricing": {"singleLargeAreaRate": 100, "extraAreaSqFtUnit": 400, "extraAreaRatePerUnit": 10, "useHigherRate": True},
    "standalonePricing": {"standaloneSqFtUnit": 200, "standaloneRatePerUnit": 10, "standaloneMinimum": 40},
    "chemicalProducts": {"dailyChemicalPerGallon": 27.34},
}

JANITORIAL = {
    "baseRates": {"recurringService": 30, "oneTimeService": 35},
    "additionalServices": {
        "vacuuming": {"baseHours": 0.5, "ratePerHour": 25},
        "dusting": {"baseHours": 0.33, "ratePerHour": 20},
    },
    "frequencyMultipliers": {"daily": 0.85, "weekly": 1.0, "biweekly": 1.1, "monthly": 1.25, "oneTime": 1.4},
    "minimums": {"perVisit": 50, "recurringContract": 200},
    "tripCharges": {"standard": 6, "insideBeltway": 8, "paidParking": 7},
}

REFRESH_POWER_SCRUB = {
    "hourlyRate": 200,
    "tripCharge": 75,
    "minimumVisit": 475,
    "kitchenRates": {"smallMedium": 1500, "large": 2500},
    "frontOfHouseRate": 2500,
    "patioRates": {"standalone": 875, "upsell": 500},
    "squareFootage": {"fixedFee": 200, "insideRate": 0.6, "outsideRate": 0.4},
}


DEFAULT_CONFIGS: dict[str, dict] = {
    "saniclean": SANICLEAN,
    "saniscrub": SANISCRUB,
    "carpetCleaning": CARPET,
    "foamingDrain": FOAMING_DRAIN,
    "electrostaticSpray": ELECTROSTATIC_SPRAY,
    "sanipod": SANIPOD,
    "stripWax": STRIP_WAX,
    "rpmWindows": RPM_WINDOWS,
    "greaseTrap": GREASE_TRAP,
    "microfiberMopping": MICROFIBER_MOPPING,
    "janitorial": JANITORIAL,
    "refreshPowerScrub": REFRESH_POWER_SCRUB,
}


def default_config(service_id: str) -> dict:
    """Deep copy of the fallback config, with the shared tiers and bounds"""
    base = {"rateCategories": RATE_CATEGORIES, **CONTRACT_BOUNDS}
    base.update(DEFAULT_CONFIGS[service_id])
    return copy.deepcopy(base)


def _is_number(value) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _numeric_text(value) -> bool:
    text = value.strip().replace(",", "").replace("$", "")
    if not text:
        return False
    try:
        float(text)
    except ValueError:
        return False
    return True


def _sanitize(value):
    """Values for keys with no default: numeric strings become numbers"""
    if isinstance(value, dict):
        return {key: _sanitize(item) for key, item in value.items() if item is not None}
    if isinstance(value, str) and _numeric_text(value):
        return parse_number(value)
    return copy.deepcopy(value)


def _coerce_leaf(default, value):
    """
    Fit a backend value to the type of the default it replaces.

    Returns _DROP when the value cannot stand in for the default.
    """
    if _is_number(default):
        if _is_number(value):
            return value if math.isfinite(value) else _DROP
        if isinstance(value, str) and _numeric_text(value):
            return parse_number(value)
        return _DROP
    if isinstance(default, bool):
        return value if isinstance(value, bool) else _DROP
    if isinstance(default, str):
        return value if isinstance(value, str) else _DROP
    if isinstance(default, dict):
        return _DROP
    return copy.deepcopy(value)


def deep_merge(base: dict, incoming: dict) -> dict:
    """
    Merge incoming over base by key.

    Nested dicts merge recursively. A leaf replaces the base value only when
    it has the same type; numeric strings are accepted for numeric defaults.
    Anything else (and None) keeps the default. Keys the base does not know
    are taken as sent, with numeric strings converted.
    """
    merged = copy.deepcopy(base)
    for key, value in incoming.items():
        if value is None:
            continue
        if key not in merged:
            merged[key] = _sanitize(value)
            continue
        current = merged[key]
        if isinstance(current, dict):
            if isinstance(value, dict):
                merged[key] = deep_merge(current, value)
            else:
                logger.warning(f"⚠️ Ignoring config key {key!r}: expected an object")
            continue
        coerced = _coerce_leaf(current, value)
        if coerced is _DROP:
            logger.warning(f"⚠️ Ignoring config key {key!r}: {value!r} does not fit {type(current).__name__}")
            continue
        merged[key] = coerced
    return merged
