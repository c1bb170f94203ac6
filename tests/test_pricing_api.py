from fastapi.testclient import TestClient

from app.main import app

client = TestClient(app)


def create_agreement(**body):
    res = client.post("/pricing/agreements", json=body)
    assert res.status_code == 201, res.text
    return res.json()


def test_health():
    res = client.get("/health")
    assert res.status_code == 200
    data = res.json()
    assert data["status"] == "healthy"
    assert data["cache"] == {"available": False}


def test_list_services():
    res = client.get("/pricing/services")
    assert res.status_code == 200
    ids = {item["serviceId"] for item in res.json()}
    assert {"saniclean", "carpetCleaning", "sanipod", "microfiberMopping"} <= ids


def test_quote_service():
    res = client.post("/pricing/quotes/carpetCleaning", json={"areaSqFt": 1200, "contractMonths": 12})
    assert res.status_code == 200
    data = res.json()
    assert data["quote"]["perVisit"] == 500
    assert data["quote"]["contractTotal"] == 6000
    assert data["payload"]["totals"]["contract"]["amount"] == 6000


def test_quote_unknown_service_404():
    res = client.post("/pricing/quotes/windowWashing", json={})
    assert res.status_code == 404


def test_quote_bad_enum_422():
    res = client.post("/pricing/quotes/saniclean", json={"sinks": 3, "frequency": "hourly"})
    assert res.status_code == 422


def test_get_and_refresh_config():
    res = client.get("/pricing/configs/sanipod")
    assert res.status_code == 200
    assert res.json()["config"]["altWeeklyRatePerUnit"] == 8

    res = client.post("/pricing/configs/sanipod/refresh")
    assert res.status_code == 200
    assert client.get("/pricing/configs/nothing").status_code == 404


def test_stateless_totals():
    body = {
        "globalContractMonths": 12,
        "tripCharge": 10,
        "tripChargeFrequency": 1,
        "services": {
            "carpetCleaning": {"isActive": True, "contractTotal": 6000, "perVisit": 500},
            "sanipod": {"isActive": True, "totals": {"contract": {"amount": 2000}, "perVisit": {"amount": 40}}},
        },
    }
    res = client.post("/pricing/agreements/totals", json=body)
    assert res.status_code == 200
    totals = res.json()["totals"]
    assert totals["totalContractAmount"] == 6000 + 2000 + 10 * 12
    assert totals["totalMinimumPerVisit"] == 540


def test_agreement_session_flow():
    agreement = create_agreement(
        globalContractMonths=12,
        services={"carpetCleaning": {"areaSqFt": 1200}, "sanipod": {"podQuantity": 5}},
    )
    agreement_id = agreement["id"]
    assert agreement["totals"]["services"]["carpetCleaning"]["contractMonths"] == 12
    assert agreement["services"]["carpetCleaning"]["contractTotal"] == 6000

    res = client.put(f"/pricing/agreements/{agreement_id}/settings", json={"globalContractMonths": 24})
    assert res.status_code == 200
    data = res.json()
    assert data["totals"]["globalContractMonths"] == 24
    assert data["services"]["carpetCleaning"]["contractTotal"] == 12000

    res = client.put(
        f"/pricing/agreements/{agreement_id}/services/carpetCleaning/contract-months",
        json={"contractMonths": 6},
    )
    data = res.json()
    assert data["services"]["carpetCleaning"]["contractTotal"] == 3000
    assert data["totals"]["services"]["carpetCleaning"]["monthsOverridden"] is True

    res = client.put(f"/pricing/agreements/{agreement_id}/settings", json={"globalContractMonths": 12})
    data = res.json()
    assert data["services"]["carpetCleaning"]["contractTotal"] == 3000

    res = client.delete(f"/pricing/agreements/{agreement_id}/services/sanipod")
    data = res.json()
    assert "sanipod" not in data["services"]
    assert data["totals"]["totalContractAmount"] == 3000


def test_agreement_keeps_overrides_on_refresh():
    agreement = create_agreement(services={"carpetCleaning": {"areaSqFt": 1200, "overrides": {"perVisit": 650}}})
    res = client.post(f"/pricing/agreements/{agreement['id']}/refresh")
    assert res.status_code == 200
    assert res.json()["services"]["carpetCleaning"]["perVisit"] == 650


def test_update_service_form_requotes():
    agreement = create_agreement()
    res = client.put(f"/pricing/agreements/{agreement['id']}/services/greaseTrap", json={"numberOfTraps": 2})
    assert res.status_code == 200
    assert res.json()["services"]["greaseTrap"]["perVisit"] == 250
    assert res.json()["forms"]["greaseTrap"] == {"numberOfTraps": 2}


def test_unknown_agreement_404():
    assert client.get("/pricing/agreements/missing").status_code == 404


def test_unknown_service_in_agreement_404():
    agreement = create_agreement()
    res = client.put(f"/pricing/agreements/{agreement['id']}/services/windowWashing", json={})
    assert res.status_code == 404
