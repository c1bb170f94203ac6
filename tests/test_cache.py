import fakeredis

from app import cache


def test_pricing_config_round_trip(monkeypatch):
    fake = fakeredis.FakeStrictRedis(decode_responses=True)
    monkeypatch.setattr(cache, "get_redis_client", lambda: fake)

    cache.set_pricing_config_cached("carpetCleaning", {"firstUnitRate": 300})
    assert cache.get_pricing_config_cached("carpetCleaning") == {"firstUnitRate": 300}
    assert 0 < fake.ttl("pricing_config:carpetCleaning") <= 300

    cache.invalidate_pricing_config_cache("carpetCleaning")
    assert cache.get_pricing_config_cached("carpetCleaning") is None


def test_cache_fails_open_without_redis():
    assert cache.get_pricing_config_cached("sanipod") is None
    assert cache.set_pricing_config_cached("sanipod", {"a": 1}) is False
    assert cache.get_cache_stats() == {"available": False}


def test_cache_fails_open_on_connection_error(monkeypatch):
    def broken():
        raise ConnectionError("redis down")

    monkeypatch.setattr(cache, "get_redis_client", broken)
    assert cache.get_pricing_config_cached("sanipod") is None
