"""Google Geocoding client.

Turns Australian suburbs, postcodes or full addresses into coordinates plus
city/state/postcode. Worker registration and the admin distance search both go
through here so that stored and searched coordinates come from the same source.
Results are cached in Redis for a week.
"""

import logging
from typing import Optional

import httpx

from .cache import build_geocode_key, cache
from .config import GEOCODING_CACHE_SECONDS, GOOGLE_GEOCODING_API_KEY

logger = logging.getLogger(__name__)

GOOGLE_GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json"
REQUEST_TIMEOUT = 10.0


def _component(components: list[dict], kind: str, short: bool = False) -> Optional[str]:
    for component in components:
        if kind in component.get("types", []):
            return component.get("short_name" if short else "long_name")
    return None


def parse_geocode_response(data: dict) -> Optional[dict]:
    """Extract the first result of a Google Geocoding response"""
    if data.get("status") != "OK" or not data.get("results"):
        return None

    result = data["results"][0]
    location = result["geometry"]["location"]
    components = result.get("address_components", [])

    return {
        "latitude": float(location["lat"]),
        "longitude": float(location["lng"]),
        "formatted_address": result.get("formatted_address"),
        "city": _component(components, "locality"),
        "state": _component(components, "administrative_area_level_1", short=True),
        "postal_code": _component(components, "postal_code"),
    }


async def geocode_address(address: str) -> Optional[dict]:
    """
    Geocode an address, restricted to Australia.

    Returns None when the address is blank, the API key is missing or the
    lookup fails; callers treat that as "no coordinates".
    """
    address = (address or "").strip()
    if not address:
        return None

    cache_key = build_geocode_key(address)
    cached = cache.get(cache_key)
    if cached:
        return cached

    if not GOOGLE_GEOCODING_API_KEY:
        logger.warning("⚠️ GOOGLE_GEOCODING_API_KEY not configured - skipping geocoding")
        return None

    params = {"address": f"{address}, Australia", "key": GOOGLE_GEOCODING_API_KEY}
    try:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            response = await client.get(GOOGLE_GEOCODE_URL, params=params)
        if response.status_code != 200:
            logger.error(f"❌ Geocoding HTTP {response.status_code} for '{address}'")
            return None
        result = parse_geocode_response(response.json())
    except (httpx.HTTPError, ValueError, KeyError) as e:
        logger.error(f"❌ Geocoding failed for '{address}': {e}")
        return None

    if not result:
        logger.info(f"📍 No geocoding result for '{address}'")
        return None

    cache.set(cache_key, result, GEOCODING_CACHE_SECONDS)
    logger.info(f"📍 Geocoded '{address}' -> ({result['latitude']:.4f}, {result['longitude']:.4f})")
    return result
