"""Shared form base, quote result and finishing steps for all calculators"""

import logging
from abc import abstractmethod
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ... import config
from .coercion import Amount, parse_number, round_money
from .frequency import is_one_time, is_visit_based, visits_in_contract, visits_per_year
from .overrides import OverrideResolver

logger = logging.getLogger(__name__)

MIN_CONTRACT_MONTHS = 2
MAX_CONTRACT_MONTHS = 36


class CustomField(BaseModel):
    """Extra line item a salesperson adds to a service card"""

    model_config = ConfigDict(extra="ignore")

    label: str = ""
    type: Literal["text", "calc", "dollar"] = "dollar"
    value: Optional[str] = None
    qty: Amount = 0
    rate: Amount = 0
    total: Optional[float] = None
    amount: Amount = 0

    @field_validator("total", mode="before")
    @classmethod
    def coerce_total(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        return parse_number(v)

    def charge(self) -> float:
        """Dollar amount this field adds to the contract total"""
        if self.type == "calc":
            return self.total if self.total is not None else self.qty * self.rate
        if self.type == "dollar":
            return self.amount
        return 0.0


class ServiceForm(BaseModel):
    """Fields every service card has"""

    model_config = ConfigDict(extra="ignore")

    rateTier: Literal["redRate", "greenRate"] = "redRate"
    contractMonths: Optional[int] = None
    overrides: dict[str, Any] = Field(default_factory=dict)
    customFields: list[CustomField] = Field(default_factory=list)
    notes: str = ""

    @field_validator("rateTier", mode="before")
    @classmethod
    def normalize_rate_tier(cls, v):
        if v in (None, "", "red", "redRate"):
            return "redRate"
        if v in ("green", "greenRate"):
            return "greenRate"
        return v

    @field_validator("contractMonths", mode="before")
    @classmethod
    def lenient_months(cls, v):
        if v is None or (isinstance(v, str) and not v.strip()):
            return None
        months = int(parse_number(v))
        return months if months > 0 else None

    @field_validator("notes", mode="before")
    @classmethod
    def none_notes(cls, v):
        return v or ""

    @abstractmethod
    def primary_quantity(self) -> float:
        """Quantity that decides whether the service is active"""
        raise NotImplementedError


class QuoteResult(BaseModel):
    """Derived prices for one service card"""

    serviceId: str
    displayName: str
    isActive: bool = True
    method: str = ""
    frequency: str = ""
    perVisitBase: float = 0.0
    perVisit: float = 0.0
    minimumPerVisit: float = 0.0
    firstVisit: float = 0.0
    firstMonth: float = 0.0
    monthlyRecurring: float = 0.0
    contractTotal: float = 0.0
    contractMonths: int = 0
    visitsInContract: int = 0
    annualTotal: float = 0.0
    installFee: float = 0.0
    tripCharge: float = 0.0
    customFieldsTotal: float = 0.0
    components: dict[str, float] = Field(default_factory=dict)
    breakdown: list[str] = Field(default_factory=list)
    lineItems: dict[str, Any] = Field(default_factory=dict)
    overridden: list[str] = Field(default_factory=list)
    customFields: list[CustomField] = Field(default_factory=list)
    notes: str = ""

    @classmethod
    def inactive(cls, service_id: str, display_name: str, note: str, frequency: str = "", contract_months: int = 0):
        """All-zero quote for a service with nothing to price"""
        return cls(
            serviceId=service_id,
            displayName=display_name,
            isActive=False,
            method="inactive",
            frequency=frequency,
            contractMonths=contract_months,
            breakdown=[note],
        )


def rate_tier_multiplier(rate_tier: str, pricing_config: dict) -> float:
    """Commission tier multiplier: red is the floor, green is red x factor"""
    categories = pricing_config.get("rateCategories") or {}
    tier = categories.get(rate_tier) or {}
    default = 1.3 if rate_tier == "greenRate" else 1.0
    multiplier = parse_number(tier.get("multiplier", default))
    return multiplier if multiplier > 0 else default


def effective_contract_months(form: ServiceForm, pricing_config: dict) -> int:
    """Form months (or the default) clamped to the configured bounds"""
    low = int(parse_number(pricing_config.get("minContractMonths", MIN_CONTRACT_MONTHS))) or MIN_CONTRACT_MONTHS
    high = int(parse_number(pricing_config.get("maxContractMonths", MAX_CONTRACT_MONTHS))) or MAX_CONTRACT_MONTHS
    months = form.contractMonths or config.DEFAULT_CONTRACT_MONTHS
    return max(low, min(high, months))


def first_period(
    frequency: str,
    per_visit: float,
    monthly: float,
    install: float,
    pricing_config: Optional[dict] = None,
) -> tuple[float, float]:
    """
    First visit and first month when the first visit may be an install.

    The install visit replaces the first regular visit. In cadences with more
    than one visit a month, the rest of the first month is billed normally.

    Returns:
        (first visit, first month)
    """
    first_visit = install if install > 0 else per_visit
    if is_one_time(frequency):
        return first_visit, first_visit
    visits_per_month = visits_per_year(frequency, pricing_config) / 12
    if install > 0:
        if visits_per_month > 1:
            return first_visit, install + (visits_per_month - 1) * per_visit
        return first_visit, install
    if is_visit_based(frequency):
        return first_visit, per_visit
    return first_visit, monthly


def schedule_contract(
    frequency: str,
    per_visit: float,
    monthly: float,
    first_visit: float,
    first_month: float,
    contract_months: int,
    pricing_config: Optional[dict] = None,
) -> tuple[float, int]:
    """
    Contract total from the first period plus the recurring remainder.

    Monthly cadences: first month + (months - 1) x monthly.
    Visit-based cadences: first visit + (visits - 1) x per visit.
    One-time service: the first visit only.

    Returns:
        (contract total, visits in contract)
    """
    visits = visits_in_contract(frequency, contract_months, pricing_config)
    if is_one_time(frequency):
        return first_visit, 1
    if is_visit_based(frequency):
        if visits <= 0:
            return 0.0, 0
        return first_visit + (visits - 1) * per_visit, visits
    return first_month + (contract_months - 1) * monthly, visits


def custom_fields_total(fields: list[CustomField]) -> float:
    return sum(field.charge() for field in fields)


def build_quote(
    *,
    service_id: str,
    display_name: str,
    form: ServiceForm,
    resolver: OverrideResolver,
    pricing_config: dict,
    method: str,
    frequency: str,
    per_visit_base: float,
    per_visit: float,
    first_visit: float,
    first_month: float,
    monthly: float,
    contract: float,
    contract_months: int,
    visits: int = 0,
    minimum_per_visit: float = 0.0,
    install_fee: float = 0.0,
    trip_charge: float = 0.0,
    annual: Optional[float] = None,
    components: Optional[dict] = None,
    breakdown: Optional[list] = None,
    line_items: Optional[dict] = None,
) -> QuoteResult:
    """
    Finish a calculation: add custom fields, resolve the contract override
    and round every monetary value to cents.
    """
    extras = custom_fields_total(form.customFields)
    contract_total = resolver.get("contractTotal", contract + extras)

    if annual is None:
        annual = monthly * 12 if monthly else per_visit * visits_per_year(frequency, pricing_config)

    lines = list(breakdown or [])
    if extras:
        lines.append(f"Custom fields: ${extras:,.2f}")
    for key in resolver.applied:
        lines.append(f"Custom override: {key}")

    logger.debug(f"🧮 {service_id}: perVisit={per_visit:.2f} contract={contract_total:.2f} ({contract_months} mo)")

    return QuoteResult(
        serviceId=service_id,
        displayName=display_name,
        isActive=True,
        method=method,
        frequency=frequency,
        perVisitBase=round_money(per_visit_base),
        perVisit=round_money(per_visit),
        minimumPerVisit=round_money(minimum_per_visit),
        firstVisit=round_money(first_visit),
        firstMonth=round_money(first_month),
        monthlyRecurring=round_money(monthly),
        contractTotal=round_money(contract_total),
        contractMonths=contract_months,
        visitsInContract=visits,
        annualTotal=round_money(annual),
        installFee=round_money(install_fee),
        tripCharge=round_money(trip_charge),
        customFieldsTotal=round_money(extras),
        components={name: round_money(value) for name, value in (components or {}).items()},
        breakdown=lines,
        lineItems=line_items or {},
        overridden=list(resolver.applied),
        customFields=form.customFields,
        notes=form.notes,
    )
