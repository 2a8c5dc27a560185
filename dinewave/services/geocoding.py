"""Geocoding client: address text to coordinates via the Google Geocoding API.

Every failure is soft: the caller gets ``None`` and decides what to surface.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import httpx
from fastapi import Request

from dinewave.core.config import settings
from dinewave.services.geo import is_valid_coordinates

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeocodingResult:
    latitude: float
    longitude: float
    formatted_address: str | None = None
    place_id: str | None = None


@dataclass(frozen=True)
class ReverseGeocodingResult:
    formatted_address: str | None
    city: str | None
    state: str | None
    country: str | None
    zip_code: str | None


def build_address_string(
    address: str | None = None,
    city: str | None = None,
    state: str | None = None,
    zip_code: str | None = None,
    country: str | None = None,
) -> str:
    """Join non-empty address parts with ", "; country falls back to the configured default."""
    parts = [address, city, state, zip_code, country or settings.default_country]
    return ", ".join(part.strip() for part in parts if part and part.strip())


class Geocoder:
    """Single-provider geocoder. No retry, no cache, one HTTP call per lookup."""

    def __init__(
        self,
        api_key: str | None = None,
        *,
        base_url: str | None = None,
        timeout: float | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = (settings.google_maps_api_key if api_key is None else api_key).strip()
        self._base_url = (base_url or settings.geocoding_base_url).rstrip("/")
        self._timeout = timeout if timeout is not None else settings.geocoding_timeout_seconds
        self._client = client
        if not self._api_key:
            logger.warning("[GEOCODING] GOOGLE_MAPS_API_KEY not configured; geocoding will be skipped.")

    @property
    def is_configured(self) -> bool:
        return bool(self._api_key)

    def _get(self, params: dict[str, str]) -> dict[str, Any] | None:
        url = f"{self._base_url}/geocode/json"
        query = {**params, "key": self._api_key}
        try:
            if self._client is not None:
                response = self._client.get(url, params=query, timeout=self._timeout)
            else:
                with httpx.Client(timeout=self._timeout) as client:
                    response = client.get(url, params=query)
        except httpx.TimeoutException:
            logger.error("[GEOCODING] Provider request timed out after %ss", self._timeout)
            return None
        except httpx.HTTPError as exc:
            logger.error("[GEOCODING] Provider request failed: %s", exc)
            return None
        if not response.is_success:
            logger.error("[GEOCODING] Provider returned HTTP %s", response.status_code)
            return None
        try:
            payload = response.json()
        except ValueError:
            logger.error("[GEOCODING] Provider returned a non-JSON body")
            return None
        if not isinstance(payload, dict):
            logger.error("[GEOCODING] Provider returned an unexpected payload")
            return None
        return payload

    def geocode(self, address: str | None) -> GeocodingResult | None:
        """Resolve address to coordinates, or None when it cannot be resolved."""
        query = (address or "").strip()
        if not query:
            return None
        if not self.is_configured:
            return None

        data = self._get({"address": query})
        if data is None:
            return None

        status = data.get("status")
        results = data.get("results") or []
        if status == "OK" and results:
            first = results[0]
            try:
                location = first["geometry"]["location"]
                latitude = float(location["lat"])
                longitude = float(location["lng"])
            except (KeyError, TypeError, ValueError):
                logger.error("[GEOCODING] Result without usable geometry for address: %s", query)
                return None
            return GeocodingResult(
                latitude=latitude,
                longitude=longitude,
                formatted_address=first.get("formatted_address"),
                place_id=first.get("place_id"),
            )
        if status == "ZERO_RESULTS":
            logger.warning("[GEOCODING] No results found for address: %s", query)
            return None
        logger.error("[GEOCODING] Provider error status: %s", status)
        return None

    def reverse_geocode(self, latitude: float, longitude: float) -> ReverseGeocodingResult | None:
        """Resolve coordinates to address parts, or None."""
        if not is_valid_coordinates(latitude, longitude) or not self.is_configured:
            return None

        data = self._get({"latlng": f"{latitude},{longitude}"})
        if data is None:
            return None
        results = data.get("results") or []
        if data.get("status") != "OK" or not results:
            logger.warning("[GEOCODING] Reverse lookup failed with status: %s", data.get("status"))
            return None

        first = results[0]
        parts: dict[str, str] = {}
        for component in first.get("address_components") or []:
            for kind in component.get("types") or []:
                parts.setdefault(kind, component.get("long_name"))
        return ReverseGeocodingResult(
            formatted_address=first.get("formatted_address"),
            city=parts.get("locality") or parts.get("administrative_area_level_2"),
            state=parts.get("administrative_area_level_1"),
            country=parts.get("country"),
            zip_code=parts.get("postal_code"),
        )


def get_geocoder(request: Request) -> Geocoder:
    """Return the geocoder owned by the running application."""
    return request.app.state.geocoder
