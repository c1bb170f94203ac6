"""
Rate configuration provider.

Fetches the active pricing config for a service from the pricing backend and
merges it over the built-in defaults. Pricing must always be computable, so
every failure falls back to the defaults and is only logged.
"""

import logging
from typing import Optional

import httpx

from ... import config
from ...cache import (
    get_pricing_config_cached,
    invalidate_pricing_config_cache,
    set_pricing_config_cached,
)
from .defaults import DEFAULT_CONFIGS, deep_merge, default_config

logger = logging.getLogger(__name__)


class UnknownServiceError(KeyError):
    """Raised for a service id with no calculator or defaults"""


def _ensure_known(service_id: str) -> None:
    if service_id not in DEFAULT_CONFIGS:
        raise UnknownServiceError(service_id)


def _extract_config(body) -> Optional[dict]:
    """Pull the config object out of {config: {...}} or a list of them"""
    if isinstance(body, list):
        body = body[0] if body else None
    if not isinstance(body, dict):
        return None
    data = body.get("config")
    if data is None and isinstance(body.get("data"), dict):
        data = body["data"].get("config")
    return data if isinstance(data, dict) else None


async def fetch_config(service_id: str, client: Optional[httpx.AsyncClient] = None) -> tuple[dict, bool]:
    """
    Fetch and merge the active config for a service.

    Args:
        service_id: Backend service id (e.g. "carpetCleaning")
        client: Optional shared httpx client (tests pass one with a mock transport)

    Returns:
        (merged config, True if the backend supplied it / False for defaults)

    Raises:
        UnknownServiceError: If the service id is not known
    """
    _ensure_known(service_id)
    defaults = default_config(service_id)

    if not config.PRICING_API_BASE_URL:
        logger.debug(f"Pricing backend not configured, using defaults for {service_id}")
        return defaults, False

    url = f"{config.PRICING_API_BASE_URL}/api/service-configs/active"
    params = {"serviceId": service_id}

    try:
        if client is None:
            async with httpx.AsyncClient(timeout=config.HTTP_TIMEOUT_SECONDS) as owned:
                resp = await owned.get(url, params=params)
        else:
            resp = await client.get(url, params=params)

        if resp.status_code >= 400:
            logger.warning(f"⚠️ Pricing config {service_id} returned {resp.status_code}, using defaults")
            return defaults, False

        backend = _extract_config(resp.json())
    except (httpx.HTTPError, ValueError) as e:
        logger.warning(f"⚠️ Pricing config fetch failed for {service_id}: {e}, using defaults")
        return defaults, False

    if backend is None:
        logger.warning(f"⚠️ No active pricing config for {service_id}, using defaults")
        return defaults, False

    logger.info(f"✅ Loaded backend pricing config for {service_id}")
    return deep_merge(defaults, backend), True


async def get_config(service_id: str, client: Optional[httpx.AsyncClient] = None) -> dict:
    """Cached config read; only backend-supplied configs are cached"""
    _ensure_known(service_id)
    cached = get_pricing_config_cached(service_id)
    if cached is not None:
        return cached

    merged, from_backend = await fetch_config(service_id, client)
    if from_backend:
        set_pricing_config_cached(service_id, merged)
    return merged


async def refresh_config(service_id: str, client: Optional[httpx.AsyncClient] = None) -> dict:
    """Force a re-fetch, bypassing the cache"""
    _ensure_known(service_id)
    invalidate_pricing_config_cache(service_id)
    logger.info(f"🔄 Refreshing pricing config for {service_id}")
    return await get_config(service_id, client)
