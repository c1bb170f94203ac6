import asyncio

import fakeredis
import httpx
import pytest

from app import cache, config
from app.domain.pricing import config_provider
from app.domain.pricing.defaults import deep_merge, default_config


def mock_client(handler):
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


@pytest.fixture
def backend(monkeypatch):
    monkeypatch.setattr(config, "PRICING_API_BASE_URL", "http://pricing.test")


def test_defaults_without_backend():
    cfg, from_backend = asyncio.run(config_provider.fetch_config("carpetCleaning"))
    assert from_backend is False
    assert cfg["firstUnitRate"] == 250
    assert cfg["rateCategories"]["greenRate"]["multiplier"] == 1.3


def test_unknown_service_raises():
    with pytest.raises(config_provider.UnknownServiceError):
        asyncio.run(config_provider.fetch_config("windowWashing"))


def test_backend_config_merged_over_defaults(backend):
    seen = {}

    def handler(request):
        seen["url"] = str(request.url)
        return httpx.Response(200, json={"config": {"firstUnitRate": 300, "installMultipliers": {"dirty": 4}}})

    async def run():
        async with mock_client(handler) as client:
            return await config_provider.fetch_config("carpetCleaning", client)

    cfg, from_backend = asyncio.run(run())
    assert from_backend is True
    assert seen["url"] == "http://pricing.test/api/service-configs/active?serviceId=carpetCleaning"
    assert cfg["firstUnitRate"] == 300
    assert cfg["installMultipliers"] == {"dirty": 4, "clean": 1}
    assert cfg["additionalUnitRate"] == 125


def test_backend_list_response(backend):
    def handler(request):
        return httpx.Response(200, json=[{"serviceId": "sanipod", "config": {"weeklyRatePerUnit": 4}}])

    async def run():
        async with mock_client(handler) as client:
            return await config_provider.fetch_config("sanipod", client)

    cfg, from_backend = asyncio.run(run())
    assert from_backend is True
    assert cfg["weeklyRatePerUnit"] == 4


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(404, json={"error": "none"}),
        httpx.Response(200, text="not json"),
        httpx.Response(200, json={"config": None}),
    ],
)
def test_backend_failures_fall_back_to_defaults(backend, response):
    async def run():
        async with mock_client(lambda request: response) as client:
            return await config_provider.fetch_config("carpetCleaning", client)

    cfg, from_backend = asyncio.run(run())
    assert from_backend is False
    assert cfg == default_config("carpetCleaning")


def test_network_error_falls_back(backend):
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    async def run():
        async with mock_client(handler) as client:
            return await config_provider.fetch_config("greaseTrap", client)

    cfg, from_backend = asyncio.run(run())
    assert from_backend is False
    assert cfg["perTrapRate"] == 125


def test_backend_configs_are_cached_and_refreshable(backend, monkeypatch):
    fake = fakeredis.FakeStrictRedis(decode_responses=True)
    monkeypatch.setattr(cache, "get_redis_client", lambda: fake)
    calls = {"n": 0}

    def handler(request):
        calls["n"] += 1
        return httpx.Response(200, json={"config": {"perTrapRate": 100 + calls["n"]}})

    async def run():
        async with mock_client(handler) as client:
            first = await config_provider.get_config("greaseTrap", client)
            second = await config_provider.get_config("greaseTrap", client)
            refreshed = await config_provider.refresh_config("greaseTrap", client)
            return first, second, refreshed

    first, second, refreshed = asyncio.run(run())
    assert first["perTrapRate"] == 101
    assert second["perTrapRate"] == 101
    assert refreshed["perTrapRate"] == 102
    assert calls["n"] == 2


def test_defaults_are_not_cached(monkeypatch):
    fake = fakeredis.FakeStrictRedis(decode_responses=True)
    monkeypatch.setattr(cache, "get_redis_client", lambda: fake)
    asyncio.run(config_provider.get_config("sanipod"))
    assert fake.get(cache.pricing_config_key("sanipod")) is None


def test_deep_merge_ignores_none():
    merged = deep_merge({"a": 1, "b": {"c": 2, "d": 3}}, {"a": None, "b": {"c": 5}})
    assert merged == {"a": 1, "b": {"c": 5, "d": 3}}


def test_malformed_backend_values_keep_defaults(backend):
    def handler(request):
        return httpx.Response(
            200,
            json={
                "config": {
                    "perVisitMinimum": "300",
                    "firstUnitRate": [1, 2],
                    "additionalUnitRate": "lots",
                    "installMultipliers": "3x",
                    "useExactSqft": "yes",
                }
            },
        )

    async def run():
        async with mock_client(handler) as client:
            return await config_provider.fetch_config("carpetCleaning", client)

    cfg, from_backend = asyncio.run(run())
    assert from_backend is True
    assert cfg["perVisitMinimum"] == 300
    assert cfg["firstUnitRate"] == 250
    assert cfg["additionalUnitRate"] == 125
    assert cfg["installMultipliers"] == {"dirty": 3, "clean": 1}
    assert cfg["useExactSqft"] is False


def test_quote_survives_malformed_backend_config(backend, monkeypatch):
    from app.domain.pricing.registry import get_engine

    def handler(request):
        return httpx.Response(200, json={"config": {"perVisitMinimum": "300", "unitSqFt": {"bad": True}}})

    async def run():
        async with mock_client(handler) as client:
            return await config_provider.get_config("carpetCleaning", client)

    cfg = asyncio.run(run())
    engine = get_engine("carpetCleaning")
    result = engine.quote(engine.parse_form({"areaSqFt": 100}), cfg)
    assert result.perVisit == 300


def test_deep_merge_converts_numeric_strings_for_unknown_keys():
    merged = deep_merge({"a": 1}, {"frequencyMeta": {"weekly": {"monthlyMultiplier": "4.0"}}})
    assert merged["frequencyMeta"] == {"weekly": {"monthlyMultiplier": 4.0}}
