"""
Travel-data client for the Amadeus self-service API.

Enrichment is best effort: every lookup returns None on any provider,
network or payload error instead of raising. Only `get_token` raises, and
the lookups catch that too.
"""
import asyncio
import logging
import time
from dataclasses import dataclass
from datetime import date
from typing import Any, Callable, Dict, List, Optional

import httpx

from smarttrip.core.config import Settings
from smarttrip.core.exceptions import TravelDataAuthError, TravelDataError
from smarttrip.utils.trip_utils import parse_price

logger = logging.getLogger("smarttrip.travel_data")

TOKEN_PATH = "/v1/security/oauth2/token"
LOCATIONS_PATH = "/v1/reference-data/locations"
FLIGHT_OFFERS_PATH = "/v2/shopping/flight-offers"
HOTELS_BY_CITY_PATH = "/v1/reference-data/locations/hotels/by-city"
HOTEL_OFFERS_PATH = "/v3/shopping/hotel-offers"

MAX_FLIGHT_OFFERS = 5
# properties priced per lookup, keeps us under the sandbox rate limit
MAX_PRICED_HOTELS = 5
# flight search rejects more than 9 adults per request
MAX_ADULTS = 9


@dataclass
class AccessToken:
    value: str
    expires_at: float

    def is_valid(self, now: float, margin: float) -> bool:
        return now < self.expires_at - margin


@dataclass
class FlightOffer:
    price_total: Optional[float] = None
    currency: Optional[str] = None
    cabin: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "FlightOffer":
        price = data.get("price") or {}
        cabin = None
        pricings = data.get("travelerPricings") or []
        if pricings:
            segments = pricings[0].get("fareDetailsBySegment") or []
            if segments:
                cabin = segments[0].get("cabin")
        return cls(
            price_total=parse_price(price.get("total")),
            currency=price.get("currency"),
            cabin=cabin,
        )


@dataclass
class LodgingOffer:
    hotel_id: Optional[str] = None
    hotel_name: Optional[str] = None
    price_total: Optional[float] = None
    currency: Optional[str] = None

    @classmethod
    def from_payload(cls, data: Dict[str, Any]) -> "LodgingOffer":
        hotel = data.get("hotel") or {}
        offers = data.get("offers") or []
        price = (offers[0].get("price") or {}) if offers else {}
        return cls(
            hotel_id=hotel.get("hotelId"),
            hotel_name=hotel.get("name"),
            price_total=parse_price(price.get("total")),
            currency=price.get("currency"),
        )


class TravelDataClient:
    """
    Amadeus client with a cached client-credentials token.

    The token is owned by the instance. Refreshes are serialised by a lock so
    concurrent callers in one process share a single credential exchange.
    """

    def __init__(
        self,
        api_key: Optional[str],
        api_secret: Optional[str],
        base_url: str = "https://test.api.amadeus.com",
        timeout: float = 15.0,
        expiry_margin: float = 60.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        clock: Callable[[], float] = time.monotonic,
    ):
        self._api_key = api_key
        self._api_secret = api_secret
        self._expiry_margin = expiry_margin
        self._clock = clock
        self._http = httpx.AsyncClient(base_url=base_url, timeout=timeout, transport=transport)
        self._token: Optional[AccessToken] = None
        self._token_lock = asyncio.Lock()

    async def aclose(self) -> None:
        await self._http.aclose()

    def _cached_token(self) -> Optional[str]:
        token = self._token
        if token is not None and token.is_valid(self._clock(), self._expiry_margin):
            return token.value
        return None

    async def get_token(self) -> str:
        """
        Return a bearer token, exchanging credentials only when the cached
        one is missing or inside the expiry margin.

        Raises:
            TravelDataAuthError: credentials missing or exchange failed
        """
        cached = self._cached_token()
        if cached:
            return cached

        async with self._token_lock:
            # another caller may have refreshed while we waited
            cached = self._cached_token()
            if cached:
                return cached
            self._token = await self._exchange_credentials()
            return self._token.value

    async def _exchange_credentials(self) -> AccessToken:
        if not self._api_key or not self._api_secret:
            raise TravelDataAuthError("Amadeus credentials are not configured")

        try:
            response = await self._http.post(
                TOKEN_PATH,
                data={
                    "grant_type": "client_credentials",
                    "client_id": self._api_key,
                    "client_secret": self._api_secret,
                },
            )
        except httpx.HTTPError as e:
            raise TravelDataAuthError(f"Amadeus auth request failed: {e}") from e

        if response.status_code != 200:
            raise TravelDataAuthError(f"Amadeus auth failed: {response.status_code}")

        try:
            data = response.json()
        except ValueError as e:
            raise TravelDataAuthError("Amadeus auth returned invalid JSON") from e

        value = data.get("access_token") if isinstance(data, dict) else None
        if not value:
            raise TravelDataAuthError("Failed to get Amadeus access token")

        try:
            expires_in = float(data.get("expires_in", 0))
        except (TypeError, ValueError) as e:
            raise TravelDataAuthError("Amadeus auth returned an invalid expires_in") from e
        logger.info("Fetched Amadeus access token", extra={"expires_in": expires_in})
        return AccessToken(value=value, expires_at=self._clock() + expires_in)

    async def _get_json(self, path: str, params: Dict[str, Any]) -> Dict[str, Any]:
        token = await self.get_token()
        response = await self._http.get(
            path,
            params=params,
            headers={"Authorization": f"Bearer {token}"},
        )
        if response.status_code != 200:
            raise TravelDataError(f"{path} failed: {response.status_code}")
        return response.json()

    async def resolve_location_code(self, name: str) -> Optional[str]:
        """City code for a place name, or None on no match or error."""
        try:
            data = await self._get_json(LOCATIONS_PATH, {"keyword": name, "subType": "CITY"})
            matches = data.get("data") or []
            code = matches[0].get("iataCode") if matches else None
        except Exception as e:
            logger.warning("Amadeus city search failed for %s: %s", name, e)
            return None

        if not code:
            logger.info("No Amadeus city code for %s", name)
        return code or None

    async def get_flight_offers(
        self,
        origin_code: str,
        destination_code: str,
        departure_date: date,
        travelers: int = 1,
    ) -> Optional[List[FlightOffer]]:
        try:
            data = await self._get_json(
                FLIGHT_OFFERS_PATH,
                {
                    "originLocationCode": origin_code,
                    "destinationLocationCode": destination_code,
                    "departureDate": departure_date.isoformat(),
                    "adults": max(1, min(travelers, MAX_ADULTS)),
                    "max": MAX_FLIGHT_OFFERS,
                },
            )
            offers = data.get("data") or []
            return [FlightOffer.from_payload(offer) for offer in offers[:MAX_FLIGHT_OFFERS]]
        except Exception as e:
            logger.warning("Amadeus flight search failed: %s", e)
            return None

    async def get_lodging_offers(
        self,
        location_code: str,
        check_in: date,
        check_out: date,
    ) -> Optional[List[LodgingOffer]]:
        try:
            hotels = await self._get_json(HOTELS_BY_CITY_PATH, {"cityCode": location_code})
            hotel_ids = [
                hotel["hotelId"]
                for hotel in (hotels.get("data") or [])[:MAX_PRICED_HOTELS]
                if hotel.get("hotelId")
            ]
            if not hotel_ids:
                return None

            data = await self._get_json(
                HOTEL_OFFERS_PATH,
                {
                    "hotelIds": ",".join(hotel_ids),
                    "checkInDate": check_in.isoformat(),
                    "checkOutDate": check_out.isoformat(),
                },
            )
            return [LodgingOffer.from_payload(item) for item in (data.get("data") or [])]
        except Exception as e:
            logger.warning("Amadeus hotel search failed: %s", e)
            return None


def create_travel_data_client(settings: Settings) -> TravelDataClient:
    return TravelDataClient(
        api_key=settings.AMADEUS_API_KEY,
        api_secret=settings.AMADEUS_API_SECRET,
        base_url=settings.AMADEUS_BASE_URL,
        timeout=settings.TRAVEL_DATA_TIMEOUT_SECONDS,
        expiry_margin=settings.TOKEN_EXPIRY_MARGIN_SECONDS,
    )
