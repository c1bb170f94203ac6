"""Form payload line items consumed by the agreement document generator"""

from typing import Any, Optional

from .common import QuoteResult


def text_field(label: str, value: Any) -> dict:
    return {"label": label, "type": "text", "value": "" if value is None else str(value)}


def calc_field(label: str, qty: float, rate: float, total: float, unit: Optional[str] = None) -> dict:
    field = {"label": label, "type": "calc", "qty": qty, "rate": rate, "total": total}
    if unit:
        field["unit"] = unit
    return field


def dollar_field(label: str, amount: float, is_custom: bool = False) -> dict:
    field = {"label": label, "type": "dollar", "amount": amount}
    if is_custom:
        field["isCustom"] = True
    return field


def build_payload(quote: QuoteResult) -> dict:
    """
    Serialize a quote into the document payload shape.

    Inactive services still produce a payload with isActive False so the
    document generator can skip them.
    """
    custom = set(quote.overridden)
    payload: dict = {
        "serviceId": quote.serviceId,
        "displayName": quote.displayName,
        "isActive": quote.isActive,
    }
    payload.update(quote.lineItems)

    if quote.frequency:
        payload.setdefault("frequency", text_field("Frequency", quote.frequency))
    if quote.method:
        payload.setdefault("pricingMethod", text_field("Pricing Method", quote.method))

    payload["totals"] = {
        "perVisit": dollar_field("Per Visit Total", quote.perVisit, "perVisit" in custom),
        "firstMonth": dollar_field("First Month Total", quote.firstMonth, "firstMonth" in custom),
        "monthlyRecurring": dollar_field("Monthly Recurring", quote.monthlyRecurring, "monthly" in custom),
        "contract": {
            **dollar_field("Contract Total", quote.contractTotal, "contractTotal" in custom),
            "months": quote.contractMonths,
        },
        "annual": dollar_field("Annual Total", quote.annualTotal),
    }
    payload["contractTotal"] = quote.contractTotal
    payload["perVisit"] = quote.perVisit
    payload["perVisitBase"] = quote.perVisitBase
    payload["minimumPerVisit"] = quote.minimumPerVisit
    payload["notes"] = quote.notes
    payload["customFields"] = [field.model_dump(exclude_none=True) for field in quote.customFields]
    return payload
