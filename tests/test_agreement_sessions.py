import asyncio

import httpx
from fastapi.testclient import TestClient

from app import config
from app.domain.pricing.aggregation import AgreementState, saniclean_flags, update_service
from app.domain.pricing.schemas import AgreementCreate
from app.domain.pricing.service import PricingService
from app.main import app

client = TestClient(app)

SANICLEAN_ALL_INCLUSIVE = {"sinks": 4, "urinals": 2, "maleToilets": 2, "femaleToilets": 2}
SANICLEAN_PER_ITEM = {**SANICLEAN_ALL_INCLUSIVE, "pricingMode": "per_item_charge"}


def create_agreement(**body):
    res = client.post("/pricing/agreements", json=body)
    assert res.status_code == 201, res.text
    return res.json()


def test_concurrent_form_updates_keep_every_service(monkeypatch):
    monkeypatch.setattr(config, "PRICING_API_BASE_URL", "http://pricing.test")

    async def handler(request):
        # carpet's config arrives after sanipod's
        if request.url.params["serviceId"] == "carpetCleaning":
            await asyncio.sleep(0.05)
        return httpx.Response(200, json={"config": {}})

    async def run():
        async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http:
            service = PricingService(client=http)
            agreement = await service.create_agreement(AgreementCreate())
            await asyncio.gather(
                service.update_service_form(agreement.id, "carpetCleaning", {"areaSqFt": 1200}),
                service.update_service_form(agreement.id, "sanipod", {"podQuantity": 5}),
            )
            return service.get_agreement(agreement.id)

    result = asyncio.run(run())
    assert set(result.forms) == {"carpetCleaning", "sanipod"}
    assert set(result.services) == {"carpetCleaning", "sanipod"}
    assert set(result.totals["services"]) == {"carpetCleaning", "sanipod"}
    assert result.totals["totalContractAmount"] == 6000 + result.services["sanipod"]["contractTotal"]


def test_saniclean_flags_from_state():
    assert saniclean_flags(AgreementState(), "microfiberMopping") == {"isAllInclusive": False}
    assert saniclean_flags(AgreementState(), "carpetCleaning") == {}

    payload = {"isActive": True, "pricingMethod": {"label": "Pricing Method", "type": "text", "value": "All Inclusive"}}
    state = update_service(AgreementState(), "saniclean", payload, 10)
    assert saniclean_flags(state, "electrostaticSpray") == {"isCombinedWithSaniClean": True}
    assert saniclean_flags(state, "foamingDrain") == {"isAllInclusive": True}
    assert saniclean_flags(state, "saniscrub") == {"hasSaniClean": True}


def test_electrostatic_trip_waived_while_saniclean_active():
    agreement = create_agreement(
        services={
            "saniclean": SANICLEAN_PER_ITEM,
            "electrostaticSpray": {"roomCount": 10, "location": "insideBeltway"},
        }
    )
    assert agreement["services"]["electrostaticSpray"]["perVisit"] == 200

    res = client.delete(f"/pricing/agreements/{agreement['id']}/services/saniclean")
    assert res.status_code == 200
    assert res.json()["services"]["electrostaticSpray"]["perVisit"] == 210


def test_microfiber_follows_saniclean_pricing_mode():
    agreement = create_agreement(
        services={"saniclean": SANICLEAN_ALL_INCLUSIVE, "microfiberMopping": {"bathroomCount": 3}}
    )
    assert agreement["services"]["saniclean"]["pricingMethod"]["value"] == "All Inclusive"
    assert agreement["services"]["microfiberMopping"]["perVisit"] == 0

    res = client.put(f"/pricing/agreements/{agreement['id']}/services/saniclean", json=SANICLEAN_PER_ITEM)
    assert res.status_code == 200
    assert res.json()["services"]["microfiberMopping"]["perVisit"] == 30
    assert res.json()["forms"]["microfiberMopping"] == {"bathroomCount": 3}


def test_explicit_form_flag_beats_derived_flag():
    agreement = create_agreement(
        services={
            "saniclean": SANICLEAN_ALL_INCLUSIVE,
            "microfiberMopping": {"bathroomCount": 3, "isAllInclusive": False},
        }
    )
    assert agreement["services"]["microfiberMopping"]["perVisit"] == 30


def test_saniscrub_gets_bundled_discount_in_session():
    agreement = create_agreement(
        services={
            "saniscrub": {"fixtureCount": 4, "frequency": "twicePerMonth"},
            "saniclean": SANICLEAN_PER_ITEM,
        }
    )
    assert agreement["services"]["saniscrub"]["perVisit"] == 167.5
