import pytest

from app.domain.pricing.aggregation import (
    AgreementState,
    effective_contract_months,
    project,
    remove_service,
    scaled_charge,
    set_global_charges,
    set_global_contract_months,
    set_service_contract_months,
    state_from_payloads,
    summarize,
    total_contract_amount,
    total_minimum_per_visit,
    total_original_per_visit,
    update_service,
)


def payload(contract=0.0, per_visit=0.0, base=None, active=True):
    data = {"isActive": active, "contractTotal": contract, "perVisit": per_visit}
    if base is not None:
        data["perVisitBase"] = base
    return data


def test_project_prefers_contract_total():
    totals = project({"isActive": True, "contractTotal": 100, "totals": {"contract": {"amount": 200}}})
    assert totals.contract_total == 100


def test_project_falls_back_to_nested_contract_then_annual():
    nested = project({"isActive": True, "totals": {"contract": {"amount": 200}, "annual": {"amount": 300}}})
    annual = project({"isActive": True, "totals": {"annual": {"amount": 300}}})
    assert nested.contract_total == 200
    assert annual.contract_total == 300


def test_project_per_visit_fallbacks():
    totals = project({"isActive": True, "totals": {"perVisit": {"amount": 45}}})
    assert totals.per_visit == 45
    assert totals.original_per_visit == 45


def test_project_inactive_is_zero():
    totals = project(payload(contract=500, per_visit=50, active=False))
    assert totals.contract_total == 0
    assert totals.per_visit == 0
    assert project(None).contract_total == 0


def test_totals_sum_active_services():
    state = AgreementState()
    state = update_service(state, "carpetCleaning", payload(6000, 500, 450), 1200)
    state = update_service(state, "sanipod", payload(2078.4, 40), 5)
    state = update_service(state, "greaseTrap", payload(999, 99), 0)
    assert total_contract_amount(state) == pytest.approx(8078.4)
    assert total_minimum_per_visit(state) == 540
    assert total_original_per_visit(state) == 490


def test_trip_and_parking_scale_with_global_months():
    state = set_global_contract_months(AgreementState(), 12)
    state = set_global_charges(state, trip_charge=10, trip_charge_frequency=4, parking_charge=5, parking_charge_frequency=0)
    assert total_contract_amount(state) == 10 * 4 * 12 + 5


def test_scaled_charge_one_time_when_frequency_zero():
    assert scaled_charge(25, 0, 24) == 25
    assert scaled_charge(0, 4, 24) == 0


def test_service_adopts_global_months_on_activation():
    state = set_global_contract_months(AgreementState(), 24)
    state = update_service(state, "carpetCleaning", None, 0)
    assert state.services["carpetCleaning"].contract_months is None
    state = update_service(state, "carpetCleaning", payload(100, 10), 500)
    assert effective_contract_months(state, "carpetCleaning") == 24


def test_synced_services_track_global_changes():
    state = update_service(AgreementState(), "carpetCleaning", payload(100, 10), 500)
    state = update_service(state, "sanipod", payload(100, 10), 3)
    state = set_service_contract_months(state, "sanipod", 6)
    state = set_global_contract_months(state, 18)
    assert effective_contract_months(state, "carpetCleaning") == 18
    assert effective_contract_months(state, "sanipod") == 6
    assert state.services["sanipod"].months_overridden is True


def test_clearing_override_resyncs_to_global():
    state = update_service(AgreementState(), "sanipod", payload(100, 10), 3)
    state = set_service_contract_months(state, "sanipod", 6)
    state = set_service_contract_months(state, "sanipod", None)
    state = set_global_contract_months(state, 30)
    assert effective_contract_months(state, "sanipod") == 30
    assert state.services["sanipod"].months_overridden is False


def test_global_months_are_clamped():
    assert set_global_contract_months(AgreementState(), 1).global_contract_months == 2
    assert set_global_contract_months(AgreementState(), 60).global_contract_months == 36


def test_reducers_do_not_mutate_previous_state():
    before = update_service(AgreementState(), "carpetCleaning", payload(100, 10), 500)
    after = remove_service(before, "carpetCleaning")
    assert "carpetCleaning" in before.services
    assert "carpetCleaning" not in after.services


def test_state_from_payloads_and_summary():
    state = state_from_payloads(
        {"carpetCleaning": payload(6000, 500), "sanipod": payload(0, 0, active=False), "junk": "not a payload"},
        global_contract_months=12,
    )
    summary = summarize(state)
    assert summary["totalContractAmount"] == 6000
    assert list(summary["services"]) == ["carpetCleaning"]
    assert summary["services"]["carpetCleaning"]["contractMonths"] == 12
