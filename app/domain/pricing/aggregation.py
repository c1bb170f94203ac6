"""
Cross-service aggregation.

The agreement is an explicit state keyed by service id. Every change goes
through a reducer that returns a new state, and totals are pure functions of
a state. Service payloads are read through one projection adapter so the
totals never depend on which key a calculator wrote its contract total to.
"""

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Mapping, Optional

from ... import config
from .common import MAX_CONTRACT_MONTHS, MIN_CONTRACT_MONTHS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ServiceTotals:
    """Normalized money view of one service payload"""

    contract_total: float = 0.0
    per_visit: float = 0.0
    original_per_visit: float = 0.0


@dataclass(frozen=True)
class ServiceEntry:
    payload: Optional[dict] = None
    quantity: float = 0.0
    contract_months: Optional[int] = None
    months_overridden: bool = False

    @property
    def is_active(self) -> bool:
        return self.quantity > 0 and self.payload is not None


@dataclass(frozen=True)
class AgreementState:
    services: Mapping[str, ServiceEntry] = field(default_factory=dict)
    global_contract_months: int = config.DEFAULT_CONTRACT_MONTHS
    trip_charge: float = 0.0
    trip_charge_frequency: float = 0.0
    parking_charge: float = 0.0
    parking_charge_frequency: float = 0.0


def clamp_months(months: int) -> int:
    return max(MIN_CONTRACT_MONTHS, min(MAX_CONTRACT_MONTHS, int(months)))


def _number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _path(payload: Mapping, *keys: str) -> Optional[float]:
    node: Any = payload
    for key in keys:
        if not isinstance(node, Mapping):
            return None
        node = node.get(key)
    return _number(node)


def _first(payload: Mapping, *paths: tuple[str, ...]) -> Optional[float]:
    for path in paths:
        value = _path(payload, *path)
        if value is not None:
            return value
    return None


def project(payload: Optional[Mapping]) -> ServiceTotals:
    """
    Extract contract and per-visit totals from a service payload.

    Contract total is read in priority order: contractTotal,
    totals.contract.amount, totals.annual.amount. Inactive or missing
    payloads project to zero.
    """
    if not payload or not payload.get("isActive"):
        return ServiceTotals()

    contract = _first(payload, ("contractTotal",), ("totals", "contract", "amount"), ("totals", "annual", "amount"))
    per_visit = _first(payload, ("perVisit",), ("totals", "perVisit", "amount"), ("perVisitPrice",))
    original = _first(payload, ("perVisitBase",), ("rawPrice",), ("totals", "perVisit", "base"))
    if original is None:
        original = per_visit

    return ServiceTotals(
        contract_total=contract or 0.0,
        per_visit=per_visit or 0.0,
        original_per_visit=original or 0.0,
    )


# ---------------------------------------------------------------------------
# Reducers
# ---------------------------------------------------------------------------


def update_service(state: AgreementState, service_id: str, payload: Optional[dict], quantity: float) -> AgreementState:
    """
    Record the latest payload for a service.

    The first time a service's quantity goes from zero to positive it adopts
    the global contract length, unless the user already pinned its own.
    """
    previous = state.services.get(service_id) or ServiceEntry()
    months = previous.contract_months
    if previous.quantity <= 0 < quantity and not previous.months_overridden:
        months = state.global_contract_months
        logger.debug(f"📅 {service_id} activated, syncing to global {months} months")

    entry = ServiceEntry(
        payload=payload if quantity > 0 else None,
        quantity=max(0.0, quantity),
        contract_months=months,
        months_overridden=previous.months_overridden,
    )
    return replace(state, services={**state.services, service_id: entry})


def remove_service(state: AgreementState, service_id: str) -> AgreementState:
    services = dict(state.services)
    services.pop(service_id, None)
    return replace(state, services=services)


def set_global_contract_months(state: AgreementState, months: int) -> AgreementState:
    """Change the global length; every synced, non-overridden service follows"""
    months = clamp_months(months)
    services = {
        service_id: (
            replace(entry, contract_months=months)
            if entry.contract_months is not None and not entry.months_overridden
            else entry
        )
        for service_id, entry in state.services.items()
    }
    return replace(state, services=services, global_contract_months=months)


def set_service_contract_months(state: AgreementState, service_id: str, months: Optional[int]) -> AgreementState:
    """
    Pin a service's contract length, which stops global syncing for it.
    Passing None clears the pin and re-syncs to the global length.
    """
    entry = state.services.get(service_id) or ServiceEntry()
    if months is None:
        synced = state.global_contract_months if entry.quantity > 0 else None
        entry = replace(entry, contract_months=synced, months_overridden=False)
    else:
        entry = replace(entry, contract_months=clamp_months(months), months_overridden=True)
    return replace(state, services={**state.services, service_id: entry})


def set_global_charges(
    state: AgreementState,
    trip_charge: Optional[float] = None,
    trip_charge_frequency: Optional[float] = None,
    parking_charge: Optional[float] = None,
    parking_charge_frequency: Optional[float] = None,
) -> AgreementState:
    changes = {
        "trip_charge": trip_charge,
        "trip_charge_frequency": trip_charge_frequency,
        "parking_charge": parking_charge,
        "parking_charge_frequency": parking_charge_frequency,
    }
    return replace(state, **{key: max(0.0, float(value)) for key, value in changes.items() if value is not None})


def effective_contract_months(state: AgreementState, service_id: str) -> int:
    entry = state.services.get(service_id)
    if entry and entry.contract_months is not None:
        return entry.contract_months
    return state.global_contract_months


# ---------------------------------------------------------------------------
# Cross-service flags
# ---------------------------------------------------------------------------

SANICLEAN_ID = "saniclean"

# service id -> form field -> which SaniClean fact it mirrors
SANICLEAN_DEPENDENTS: dict[str, dict[str, str]] = {
    "saniscrub": {"hasSaniClean": "active"},
    "electrostaticSpray": {"isCombinedWithSaniClean": "active"},
    "foamingDrain": {"isAllInclusive": "allInclusive"},
    "microfiberMopping": {"isAllInclusive": "allInclusive"},
}


def saniclean_flags(state: AgreementState, service_id: str) -> dict[str, bool]:
    """
    Form flags a service takes from the agreement's SaniClean quote.

    A service bundled with an active SaniClean waives what SaniClean already
    covers; under All Inclusive pricing the add-on is included outright.
    """
    fields = SANICLEAN_DEPENDENTS.get(service_id)
    if not fields:
        return {}
    entry = state.services.get(SANICLEAN_ID)
    active = bool(entry and entry.is_active)
    method = (entry.payload or {}).get("pricingMethod") if active else None
    facts = {
        "active": active,
        "allInclusive": active and isinstance(method, Mapping) and method.get("value") == "All Inclusive",
    }
    return {field_name: facts[fact] for field_name, fact in fields.items()}


# ---------------------------------------------------------------------------
# Totals
# ---------------------------------------------------------------------------


def scaled_charge(amount: float, monthly_frequency: float, months: int) -> float:
    """A frequency of 0 means a one-time charge"""
    if amount <= 0:
        return 0.0
    if not monthly_frequency:
        return amount
    return amount * monthly_frequency * months


def _active_totals(state: AgreementState) -> dict[str, ServiceTotals]:
    return {
        service_id: project(entry.payload)
        for service_id, entry in state.services.items()
        if entry.is_active
    }


def total_contract_amount(state: AgreementState) -> float:
    services = sum(totals.contract_total for totals in _active_totals(state).values())
    trip = scaled_charge(state.trip_charge, state.trip_charge_frequency, state.global_contract_months)
    parking = scaled_charge(state.parking_charge, state.parking_charge_frequency, state.global_contract_months)
    total = services + trip + parking
    logger.debug(f"📊 Total agreement amount: ${total:.2f}")
    return round(total, 2)


def total_original_per_visit(state: AgreementState) -> float:
    """Raw per-visit prices before minimums"""
    return round(sum(totals.original_per_visit for totals in _active_totals(state).values()), 2)


def total_minimum_per_visit(state: AgreementState) -> float:
    """Actual per-visit prices after minimums"""
    return round(sum(totals.per_visit for totals in _active_totals(state).values()), 2)


def summarize(state: AgreementState) -> dict:
    """Everything the agreement header needs in one dict"""
    per_service = _active_totals(state)
    return {
        "globalContractMonths": state.global_contract_months,
        "tripCharge": state.trip_charge,
        "tripChargeFrequency": state.trip_charge_frequency,
        "parkingCharge": state.parking_charge,
        "parkingChargeFrequency": state.parking_charge_frequency,
        "totalContractAmount": total_contract_amount(state),
        "totalOriginalPerVisit": total_original_per_visit(state),
        "totalMinimumPerVisit": total_minimum_per_visit(state),
        "services": {
            service_id: {
                "contractTotal": totals.contract_total,
                "perVisit": totals.per_visit,
                "originalPerVisit": totals.original_per_visit,
                "contractMonths": effective_contract_months(state, service_id),
                "monthsOverridden": state.services[service_id].months_overridden,
            }
            for service_id, totals in per_service.items()
        },
    }


def state_from_payloads(payloads: Mapping[str, Optional[dict]], global_contract_months: Optional[int] = None) -> AgreementState:
    """
    Build a state from already-computed payloads (e.g. a saved document).
    Activity comes from each payload's isActive flag.
    """
    state = AgreementState(global_contract_months=clamp_months(global_contract_months or config.DEFAULT_CONTRACT_MONTHS))
    for service_id, payload in payloads.items():
        if not isinstance(payload, Mapping):
            continue
        quantity = 1.0 if payload.get("isActive") else 0.0
        state = update_service(state, service_id, dict(payload), quantity)
    return state
