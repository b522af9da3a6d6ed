"""
services/climate_service.py
===========================
Design outdoor temperature lookup by address.

``fetch_design_outdoor_temp`` performs one blocking HTTP request.
``DesignTempLookup`` wraps it for interactive use: requests are debounced and a
newer address cancels any lookup still pending for an older one, so only the
latest answer is delivered.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

import requests

import config
from domain.models import BuildingMetadata
from domain.units import parse_number

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DesignTemperature:
    temp_c: float
    method: Optional[str] = None
    provider: Optional[str] = None
    computed_at: Optional[str] = None
    geocode: Dict[str, Any] = field(default_factory=dict)

    def meta(self) -> Dict[str, Any]:
        """Shape stored as ``designOutdoorTempMeta`` on the building."""
        return {
            "method": self.method,
            "provider": self.provider,
            "geocode": dict(self.geocode),
            "computedAt": self.computed_at,
        }


def lookup_query(building: BuildingMetadata) -> str:
    """"address, postal code, location" with empty parts left out."""
    parts = [building.address, building.postal_code, building.location]
    return ", ".join(p.strip() for p in parts if p and p.strip())


def fetch_design_outdoor_temp(
    address: str,
    url: Optional[str] = None,
    timeout: Optional[float] = None,
) -> Optional[DesignTemperature]:
    """Query the climate service; None on any transport or payload problem."""
    if not address or not address.strip():
        return None
    try:
        response = requests.get(
            url or config.CLIMATE_SERVICE_URL,
            params={"address": address},
            timeout=timeout or config.CLIMATE_TIMEOUT_S,
        )
        response.raise_for_status()
        data = response.json()
    except (requests.RequestException, ValueError) as e:
        logger.warning("Design temperature lookup failed for %r: %s", address, e)
        return None

    temp = parse_number(data.get("designTempC")) if isinstance(data, dict) else None
    if temp is None:
        logger.warning("Climate service returned no usable designTempC for %r", address)
        return None
    return DesignTemperature(
        temp_c=temp,
        method=data.get("method"),
        provider=data.get("provider"),
        computed_at=data.get("computedAt"),
        geocode=data.get("geocode") or {},
    )


def with_design_temperature(building: BuildingMetadata, result: Optional[DesignTemperature]) -> BuildingMetadata:
    """Building with the looked-up temperature stored (manual override untouched)."""
    if result is None:
        return building
    return replace(building, design_outdoor_temp_c=result.temp_c, design_outdoor_temp_meta=result.meta())


class DesignTempLookup:
    """Debounced, cancel-on-supersede lookup.

    Usage inside a running event loop::

        lookup = DesignTempLookup()
        result = await lookup.request("Hauptstr. 1, 10115, Berlin")

    A call that is superseded by a newer ``request`` raises
    ``asyncio.CancelledError`` in its awaiting caller.
    """

    def __init__(self, debounce_s: Optional[float] = None, fetch=fetch_design_outdoor_temp):
        self.debounce_s = config.CLIMATE_DEBOUNCE_S if debounce_s is None else debounce_s
        self._fetch = fetch
        self._task: Optional[asyncio.Task] = None

    async def _run(self, address: str) -> Optional[DesignTemperature]:
        await asyncio.sleep(self.debounce_s)
        return await asyncio.to_thread(self._fetch, address)

    def cancel(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    async def request(self, address: str) -> Optional[DesignTemperature]:
        self.cancel()
        task = asyncio.ensure_future(self._run(address))
        self._task = task
        try:
            return await task
        finally:
            if self._task is task:
                self._task = None

    async def request_for(self, building: BuildingMetadata) -> Optional[DesignTemperature]:
        """Skip the lookup when the user set a manual design temperature."""
        if building.manual_design_outdoor_temp_c is not None:
            self.cancel()
            return None
        return await self.request(lookup_query(building))
