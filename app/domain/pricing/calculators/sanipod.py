"""
SaniPod feminine hygiene units.

Standalone accounts pay the cheaper of two weekly formulas:
option A = pods x altWeeklyRatePerUnit, option B = pods x weeklyRatePerUnit
+ standaloneExtraWeeklyCharge. Option A wins ties. Accounts bundled with
other services always pay pods x weeklyRatePerUnit.
"""

from typing import Literal

from ..coercion import Count
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

SERVICE_ID = "sanipod"
DISPLAY_NAME = "SaniPod"


class SanipodForm(ServiceForm):
    frequency: Literal["weekly"] = "weekly"
    podQuantity: Count = 0
    isStandalone: bool = True
    extraBagsPerWeek: Count = 0
    extraBagsRecurring: bool = True
    isNewInstall: bool = False
    installQuantity: Count = 0

    def primary_quantity(self) -> float:
        return self.podQuantity


def choose_option(pods: int, cfg: dict, standalone: bool) -> tuple[str, float, float, float]:
    """
    Returns:
        (chosen option, weekly service, option A, option B)
    """
    option_a = pods * cfg["altWeeklyRatePerUnit"]
    option_b = pods * cfg["weeklyRatePerUnit"] + cfg["standaloneExtraWeeklyCharge"]
    if not standalone:
        return "bundled", pods * cfg["weeklyRatePerUnit"], option_a, option_b
    if option_a <= option_b:
        return "optionA", option_a, option_a, option_b
    return "optionB", option_b, option_a, option_b


def calculate(form: SanipodForm, cfg: dict) -> QuoteResult:
    months = effective_contract_months(form, cfg)
    pods = form.podQuantity
    if pods <= 0:
        return QuoteResult.inactive(SERVICE_ID, DISPLAY_NAME, "No SaniPods entered", form.frequency, months)

    r = OverrideResolver(form.overrides)
    tier = rate_tier_multiplier(form.rateTier, cfg)

    option, weekly_service, option_a, option_b = choose_option(pods, cfg, form.isStandalone)
    service = r.get("weeklyService", weekly_service * tier)

    bags = form.extraBagsPerWeek * cfg["extraBagPrice"]
    recurring_bags = bags if form.extraBagsRecurring else 0.0
    one_time_bags = 0.0 if form.extraBagsRecurring else bags

    install_qty = form.installQuantity or pods
    install = r.get("installFee", install_qty * cfg["installChargePerUnit"] if form.isNewInstall else 0.0)

    per_visit = r.get("perVisit", service + recurring_bags)
    weeks = monthly_multiplier("weekly", cfg)
    monthly = r.get("monthly", per_visit * weeks)

    first_visit = install + one_time_bags
    if first_visit > 0:
        first_month = first_visit + (weeks - 1) * per_visit
    else:
        first_month = weeks * per_visit
    first_month = r.get("firstMonth", first_month)
    contract = first_month + (months - 1) * monthly

    breakdown = [
        f"Option A: {pods} x ${cfg['altWeeklyRatePerUnit']:.2f} = ${option_a:.2f}",
        f"Option B: {pods} x ${cfg['weeklyRatePerUnit']:.2f} + ${cfg['standaloneExtraWeeklyCharge']:.2f} = ${option_b:.2f}",
        f"Selected: {option}",
    ]
    if bags:
        breakdown.append(f"Extra bags: ${bags:.2f} ({'weekly' if form.extraBagsRecurring else 'one-time'})")

    return build_quote(
        service_id=SERVICE_ID,
        display_name=DISPLAY_NAME,
        form=form,
        resolver=r,
        pricing_config=cfg,
        method=option,
        frequency=form.frequency,
        per_visit_base=weekly_service * tier + recurring_bags,
        per_visit=per_visit,
        first_visit=first_visit if first_visit > 0 else per_visit,
        first_month=first_month,
        monthly=monthly,
        contract=contract,
        contract_months=months,
        visits=visits_in_contract(form.frequency, months, cfg),
        install_fee=install,
        components={
            "weeklyService": service,
            "optionA": option_a,
            "optionB": option_b,
            "extraBags": bags,
            "installFee": install,
            "tripCharge": 0.0,
        },
        breakdown=breakdown,
        line_items={
            "service": calc_field("SaniPods", pods, service / pods, service, "pod"),
            "extraBags": calc_field("Extra Bags", form.extraBagsPerWeek, cfg["extraBagPrice"], bags, "bag"),
            "installation": dollar_field("Installation", install, r.is_custom("installFee")),
            "tripCharge": dollar_field("Trip Charge", 0.0),
            "standalone": text_field("Standalone", "Yes" if form.isStandalone else "No"),
        },
    )
