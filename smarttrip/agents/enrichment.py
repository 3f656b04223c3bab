"""
Price context for the research and curation stages.

Enrichment is optional everywhere: a missing date range, an unknown city or a
failed lookup all yield None, and the stage prompt simply leaves the section out.
"""
import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from smarttrip.agents.state import TripSnapshot
from smarttrip.agents.travel_data import FlightOffer, LodgingOffer, TravelDataClient
from smarttrip.utils.trip_utils import format_price

logger = logging.getLogger("smarttrip.enrichment")

PREMIUM_CABINS = {"BUSINESS", "FIRST"}
PRICE_SIGNAL_COUNT = 3
LISTED_LODGINGS = 5


@dataclass
class ResearchEnrichment:
    flights: Optional[List[FlightOffer]] = None
    lodgings: Optional[List[LodgingOffer]] = None


async def fetch_research_enrichment(
    client: Optional[TravelDataClient],
    trip: TripSnapshot,
    origin_code: str,
) -> Optional[ResearchEnrichment]:
    if client is None or not trip.has_dates:
        return None

    location_code = await client.resolve_location_code(trip.destination)
    if not location_code:
        logger.info("Skipping flight and hotel lookups, no city code for %s", trip.destination)
        return None

    logger.info("Found city code: %s for %s", location_code, trip.destination)
    flights = await client.get_flight_offers(origin_code, location_code, trip.start_date, trip.group_size)
    lodgings = await client.get_lodging_offers(location_code, trip.start_date, trip.end_date)
    return ResearchEnrichment(flights=flights, lodgings=lodgings)


async def fetch_lodging_enrichment(
    client: Optional[TravelDataClient],
    trip: TripSnapshot,
) -> Optional[List[LodgingOffer]]:
    if client is None or not trip.has_dates:
        return None

    location_code = await client.resolve_location_code(trip.destination)
    if not location_code:
        return None
    return await client.get_lodging_offers(location_code, trip.start_date, trip.end_date)


def _has_price(offer) -> bool:
    return offer.price_total is not None and math.isfinite(offer.price_total)


def _by_price(offers, highest_first: bool):
    priced = [o for o in offers if _has_price(o)]
    unpriced = [o for o in offers if not _has_price(o)]
    return sorted(priced, key=lambda o: o.price_total, reverse=highest_first) + unpriced


def _price_labels(offers, limit: int = PRICE_SIGNAL_COUNT) -> List[str]:
    labels = [format_price(o.price_total, o.currency) for o in offers[:limit]]
    return [label for label in labels if label]


def premium_flights(flights: List[FlightOffer]) -> List[FlightOffer]:
    """Business/first fares when any are tagged, otherwise every fare, highest price first."""
    premium = [f for f in flights if (f.cabin or "").upper() in PREMIUM_CABINS]
    return _by_price(premium or flights, highest_first=True)


def value_flights(flights: List[FlightOffer]) -> List[FlightOffer]:
    return _by_price(flights, highest_first=False)


def luxury_research_context(enrichment: Optional[ResearchEnrichment], origin_code: str) -> str:
    if enrichment is None:
        return ""

    context = ""
    if enrichment.flights:
        prices = _price_labels(premium_flights(enrichment.flights))
        if prices:
            context += (
                "\n\nPREMIUM FLIGHT OPTIONS (Amadeus):"
                f"\n- Business/First class from {origin_code}: {', '.join(prices)}"
                f"\n- {len(enrichment.flights)} flight options available"
            )

    if enrichment.lodgings:
        prices = _price_labels(_by_price(enrichment.lodgings, highest_first=True))
        if prices:
            context += (
                "\n\nLUXURY HOTEL OPTIONS (Amadeus):"
                f"\n- Premium properties: {', '.join(prices)}/night"
                "\n- 5-star and boutique hotels prioritized"
            )
    return context


def standard_research_context(enrichment: Optional[ResearchEnrichment], origin_code: str) -> str:
    if enrichment is None:
        return ""

    context = ""
    if enrichment.flights:
        prices = _price_labels(value_flights(enrichment.flights))
        if prices:
            context += (
                "\n\nBEST VALUE FLIGHTS (Amadeus):"
                f"\n- Economy prices from {origin_code}: {', '.join(prices)}"
                f"\n- {len(enrichment.flights)} options available"
            )

    if enrichment.lodgings:
        prices = _price_labels(_by_price(enrichment.lodgings, highest_first=False))
        if prices:
            context += (
                "\n\nBEST VALUE HOTELS (Amadeus):"
                f"\n- Budget-friendly rates: {', '.join(prices)}/night"
                f"\n- {len(enrichment.lodgings)} properties with good reviews"
            )
    return context


def lodging_context(
    lodgings: Optional[List[LodgingOffer]],
    heading: str,
    note: str,
) -> str:
    if not lodgings:
        return ""

    lines = []
    for offer in lodgings[:LISTED_LODGINGS]:
        price = format_price(offer.price_total, offer.currency)
        if price:
            lines.append(f"{len(lines) + 1}. {offer.hotel_name or 'Hotel'} - {price}/night ({note})")
    if not lines:
        return ""
    return f"\n\n{heading} (Amadeus):\n" + "\n".join(lines)
