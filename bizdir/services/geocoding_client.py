"""Reverse geocoding through a Nominatim-compatible HTTP service."""

import logging
import traceback
from dataclasses import dataclass
from typing import Optional

import httpx

from bizdir.core.config import settings
from bizdir.core.errors import UpstreamError
from bizdir.models.business import compose_display_address

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10.0
CITY_KEYS = ("city", "town", "village", "municipality", "hamlet")


@dataclass
class GeocodedAddress:
    unit: Optional[str]
    street: Optional[str]
    city: Optional[str]
    country: Optional[str]

    @property
    def display_address(self) -> str:
        return compose_display_address(self.unit, self.street, self.city, self.country)


async def _call_geocoder(url: str, params: dict) -> dict:
    """Call the geocoder with logging. Returns parsed JSON or raises UpstreamError."""
    logger.info(f"Geocoder calling: {httpx.URL(url, params=params)}")

    headers = {"User-Agent": settings.geocoder_user_agent, "Accept": "application/json"}
    try:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as client:
            response = await client.get(url, params=params, headers=headers)
    except httpx.TimeoutException as e:
        raise UpstreamError(f"Geocoder timed out: {e}")
    except httpx.RequestError as e:
        raise UpstreamError(f"Geocoder unreachable: {e}")

    truncated_body = response.text[:500] if response.text else "(empty)"
    logger.info(f"Geocoder response: status={response.status_code}, body_preview={truncated_body}")
    if response.status_code != 200:
        raise UpstreamError(f"Geocoder HTTP {response.status_code}")
    try:
        data = response.json()
    except ValueError:
        raise UpstreamError("Geocoder returned invalid JSON")
    if not isinstance(data, dict):
        raise UpstreamError(f"Geocoder returned {type(data).__name__}, expected an object")
    return data


def _parse_address(data: dict) -> Optional[GeocodedAddress]:
    address = data.get("address") or {}
    if not isinstance(address, dict) or not address:
        return None
    city = next((address[k] for k in CITY_KEYS if address.get(k)), None)
    result = GeocodedAddress(
        unit=address.get("house_number"),
        street=address.get("road") or address.get("pedestrian"),
        city=city,
        country=address.get("country"),
    )
    return result if result.display_address else None


async def reverse_geocode(lat: float, lng: float) -> Optional[GeocodedAddress]:
    """
    Resolve coordinates to structured address parts.

    Returns None when the service fails or knows nothing about the point;
    callers fall back to manual address entry instead of failing.
    """
    url = f"{settings.geocoder_url.rstrip('/')}/reverse"
    params = {"format": "jsonv2", "lat": lat, "lon": lng, "addressdetails": 1}
    try:
        data = await _call_geocoder(url, params)
    except UpstreamError as e:
        logger.warning(f"Reverse geocoding failed for ({lat}, {lng}): {e.detail}")
        return None
    except Exception as e:
        logger.error(f"Reverse geocoding failed for ({lat}, {lng}): {e}\n{traceback.format_exc()}")
        return None

    if data.get("error"):
        logger.info(f"Geocoder has no address for ({lat}, {lng}): {data.get('error')}")
        return None
    return _parse_address(data)
