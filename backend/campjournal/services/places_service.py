"""
Google Places web service client.
Handles campground text search and place details lookups.
"""
import logging
from typing import List, Optional

import httpx
from fastapi import Request

from campjournal.core.cache import TTLCache
from campjournal.core.config import settings
from campjournal.core.exceptions import NotFoundError, RemoteServiceError
from campjournal.schemas.campground import PlaceResult, PlaceDetails

logger = logging.getLogger(__name__)

SEARCH_FIELDS = "place_id,name,formatted_address,geometry,rating"
DETAILS_FIELDS = ",".join([
    "place_id",
    "name",
    "formatted_address",
    "geometry",
    "rating",
    "formatted_phone_number",
    "website",
    "url",
    "address_component",
])


def _location(result: dict) -> tuple:
    location = (result.get("geometry") or {}).get("location") or {}
    return location.get("lat"), location.get("lng")


def _address_part(components: list, kind: str, short: bool = False) -> Optional[str]:
    for component in components or []:
        if kind in component.get("types", []):
            return component.get("short_name" if short else "long_name")
    return None


def parse_place_result(result: dict) -> PlaceResult:
    lat, lng = _location(result)
    return PlaceResult(
        place_id=result["place_id"],
        name=result.get("name", ""),
        formatted_address=result.get("formatted_address"),
        latitude=lat,
        longitude=lng,
        rating=result.get("rating"),
    )


def parse_place_details(result: dict) -> PlaceDetails:
    lat, lng = _location(result)
    components = result.get("address_components")
    return PlaceDetails(
        place_id=result["place_id"],
        name=result.get("name", ""),
        formatted_address=result.get("formatted_address"),
        latitude=lat,
        longitude=lng,
        rating=result.get("rating"),
        city=_address_part(components, "locality"),
        state=_address_part(components, "administrative_area_level_1", short=True),
        country=_address_part(components, "country"),
        phone=result.get("formatted_phone_number"),
        website=result.get("website"),
        url=result.get("url"),
    )


class PlacesClient:
    """
    Async client for the Places API.

    Created once at application startup and closed at shutdown. Lookups are
    served from a read-through TTL cache.
    """

    def __init__(
        self,
        api_key: str = None,
        base_url: str = None,
        timeout: float = None,
        cache: TTLCache = None,
        http_client: httpx.AsyncClient = None,
    ):
        self.api_key = api_key if api_key is not None else settings.GOOGLE_MAPS_API_KEY
        self.base_url = (base_url or settings.PLACES_API_URL).rstrip("/")
        self.cache = cache or TTLCache(
            ttl=settings.PLACES_CACHE_TTL_SECONDS,
            max_entries=settings.PLACES_CACHE_MAX_ENTRIES,
        )
        self.http = http_client or httpx.AsyncClient(timeout=timeout or settings.PLACES_TIMEOUT_SECONDS)

    async def aclose(self):
        await self.http.aclose()

    async def _get(self, endpoint: str, params: dict) -> dict:
        params = {**params, "key": self.api_key}
        try:
            response = await self.http.get(f"{self.base_url}/{endpoint}/json", params=params)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Places {endpoint} request failed: {e}")
            raise RemoteServiceError(f"Places {endpoint} request failed") from e
        return response.json()

    async def search_campgrounds(self, query: str) -> List[PlaceResult]:
        """Text search biased towards campgrounds and RV parks."""
        query = " ".join(query.split())
        if not query:
            return []

        async def load():
            data = await self._get("textsearch", {
                "query": f"{query} campground OR RV park",
                "fields": SEARCH_FIELDS,
            })
            status = data.get("status")
            if status == "ZERO_RESULTS":
                return []
            if status != "OK":
                raise RemoteServiceError(f"Places search failed with status: {status}")
            results = [parse_place_result(r) for r in data.get("results", []) if r.get("place_id")]
            logger.info(f"Places search '{query}' returned {len(results)} results")
            return results

        return await self.cache.get_or_load(("search", query.lower()), load)

    async def get_place_details(self, place_id: str) -> PlaceDetails:
        async def load():
            data = await self._get("details", {"place_id": place_id, "fields": DETAILS_FIELDS})
            status = data.get("status")
            if status in ("NOT_FOUND", "INVALID_REQUEST"):
                raise NotFoundError(f"Place {place_id} not found")
            if status != "OK":
                raise RemoteServiceError(f"Place details failed with status: {status}")
            return parse_place_details(data["result"])

        return await self.cache.get_or_load(("details", place_id), load)


def get_places_client(request: Request) -> PlacesClient:
    """FastAPI dependency returning the client created at startup."""
    return request.app.state.places
