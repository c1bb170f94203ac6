import pytest

from app import cache, config
from app.domain.pricing.repository import agreement_repository


@pytest.fixture(autouse=True)
def isolated_backends(monkeypatch):
    """Price from defaults, no Redis, no document backend, empty session store."""
    monkeypatch.setattr(config, "PRICING_API_BASE_URL", "")
    monkeypatch.setattr(config, "DOCUMENT_API_BASE_URL", "")
    monkeypatch.setattr(config, "REDIS_URL", None)
    monkeypatch.setattr(config, "VISIT_ROUNDING", "round")
    monkeypatch.setattr(cache, "_redis_client", None)
    monkeypatch.setattr(cache.cache, "redis_client", None)
    agreement_repository.clear()
    yield
    agreement_repository.clear()
