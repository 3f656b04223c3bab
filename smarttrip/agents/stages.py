"""
Stage functions for the itinerary pipeline.

Each stage pairs a fixed system instruction with a per-trip prompt built from
the trip attributes, earlier stage outputs and any enrichment data, then
hands both to the completion client.
"""
import logging
from typing import List, Optional

from smarttrip.agents.completion import CompletionClient
from smarttrip.agents.enrichment import (
    ResearchEnrichment,
    luxury_research_context,
    standard_research_context,
    lodging_context,
)
from smarttrip.agents.parser import ItineraryResult, parse_itinerary
from smarttrip.agents.state import TripSnapshot
from smarttrip.agents.travel_data import LodgingOffer
from smarttrip.schemas.schemas import BudgetTier, TravelStyle
from smarttrip.utils.trip_utils import trip_duration_days

logger = logging.getLogger("smarttrip.stages")


INTENT_SYSTEM = "You are an expert travel intent analyzer. Extract key insights from traveler preferences to guide trip planning."

LUXURY_RESEARCH_SYSTEM = "You are a luxury travel concierge with access to premium pricing data. Focus exclusively on high-end experiences, five-star properties, and VIP services."

STANDARD_RESEARCH_SYSTEM = "You are a savvy budget travel expert with access to real pricing data. Focus on value, free activities, and cost-saving strategies without compromising experience quality."

ACTIVE_CURATION_SYSTEM = "You are an adventure and cultural travel expert. Prioritize physically engaging and intellectually stimulating experiences. Include practical logistics and fitness requirements."

LEISURE_CURATION_SYSTEM = "You are a relaxation and nightlife travel expert. Prioritize comfort, low physical exertion, and evening entertainment. Include ambiance descriptions and booking tips."

SYNTHESIS_SYSTEM = "You are an expert itinerary generator. Create detailed, realistic, and well-paced travel itineraries. Always respond with valid JSON only, no additional text."

STYLE_GUIDANCE = {
    TravelStyle.ADVENTURE: "ADVENTURE FOCUS: Outdoor activities, hiking trails, water sports (kayaking, surfing, diving), rock climbing, zip-lining, bike tours, extreme sports, wildlife encounters.",
    TravelStyle.CULTURAL: "CULTURAL FOCUS: Museums, art galleries, historical sites, UNESCO heritage locations, local markets, cooking classes, cultural performances, architecture tours, artisan workshops.",
    TravelStyle.RELAXATION: "RELAXATION FOCUS: Spa treatments, beach clubs, scenic viewpoints, sunset cruises, yoga retreats, thermal baths, meditation spots, leisurely garden walks, wine tastings.",
    TravelStyle.NIGHTLIFE: "NIGHTLIFE FOCUS: Rooftop bars, nightclubs, live music venues, jazz clubs, cocktail bars, late-night restaurants, sunset lounges, pub crawls, entertainment districts.",
}


def _dates_line(trip: TripSnapshot) -> str:
    start = trip.start_date.isoformat() if trip.start_date else "Flexible"
    end = trip.end_date.isoformat() if trip.end_date else "Flexible"
    return f"{start} to {end}"


async def _ask(completion: CompletionClient, system_instruction: str, prompt: str) -> str:
    return await completion.complete(system_instruction, [{"role": "user", "content": prompt}])


async def analyze_intent(completion: CompletionClient, trip: TripSnapshot) -> str:
    """Summarise what the traveller is after. Output feeds every later stage."""
    logger.info("Intent Analyzer - starting analysis", extra={"trip_id": str(trip.id)})

    prompt = f"""Analyze this travel request and extract key intent:

Destination: {trip.destination}
Dates: {_dates_line(trip)}
Budget: {trip.budget_tier.value}
Travel Style: {trip.travel_style.value}
Group Size: {trip.group_size}

Provide a concise analysis of:
1. Primary travel motivations
2. Key priorities based on budget and style
3. Recommended trip duration (if dates not specified)
4. Special considerations for group size

Keep response under 200 words."""

    return await _ask(completion, INTENT_SYSTEM, prompt)


async def research_luxury(
    completion: CompletionClient,
    trip: TripSnapshot,
    intent_analysis: str,
    enrichment: Optional[ResearchEnrichment] = None,
    origin_code: str = "NYC",
) -> str:
    logger.info("Destination Researcher [LUXURY BRANCH]", extra={"trip_id": str(trip.id)})

    prompt = f"""Research {trip.destination} for a LUXURY travel experience:

{intent_analysis}

Budget: HIGH - Luxury tier
Travel Style: {trip.travel_style.value}
{luxury_research_context(enrichment, origin_code)}

Provide PREMIUM-focused information:
1. Top 5 exclusive/luxury locations in {trip.destination} (Michelin restaurants, 5-star hotels, VIP experiences)
2. Private transportation options (chauffeur services, helicopter transfers, yacht charters)
3. Exclusive access opportunities (private museum tours, celebrity chef experiences, member's clubs)
4. Concierge services and luxury amenities
5. High-end shopping and dining districts

Keep response focused on premium experiences (300 words max)."""

    return await _ask(completion, LUXURY_RESEARCH_SYSTEM, prompt)


async def research_standard(
    completion: CompletionClient,
    trip: TripSnapshot,
    intent_analysis: str,
    enrichment: Optional[ResearchEnrichment] = None,
    origin_code: str = "NYC",
) -> str:
    logger.info("Destination Researcher [STANDARD BRANCH]", extra={"trip_id": str(trip.id)})

    budget_label = "LOW" if trip.budget_tier == BudgetTier.LOW else "MEDIUM"
    prompt = f"""Research {trip.destination} for VALUE-FOCUSED travel:

{intent_analysis}

Budget: {budget_label} - Value-conscious
Travel Style: {trip.travel_style.value}
{standard_research_context(enrichment, origin_code)}

Provide BUDGET-SMART information:
1. Top 3-5 must-see attractions (including FREE options)
2. Public transportation tips and multi-day passes
3. Budget accommodation areas (safe neighborhoods with good transit access)
4. Local markets, affordable eateries, street food recommendations
5. Money-saving tips and discount cards

Keep response focused on maximizing value (300 words max)."""

    return await _ask(completion, STANDARD_RESEARCH_SYSTEM, prompt)


async def curate_active(
    completion: CompletionClient,
    trip: TripSnapshot,
    intent_analysis: str,
    destination_research: str,
    lodgings: Optional[List[LodgingOffer]] = None,
) -> str:
    logger.info("Activity Curator [ACTIVE BRANCH]", extra={"trip_id": str(trip.id)})

    hotels = lodging_context(lodgings, "ACTIVE-TRAVELER HOTELS", "close to activities")
    prompt = f"""Curate ACTIVE experiences for {trip.destination}:

{STYLE_GUIDANCE[trip.travel_style]}

Budget: {trip.budget_tier.value}
Group Size: {trip.group_size} people

Traveler Intent:
{intent_analysis}

Destination Research:
{destination_research}
{hotels}

Provide 10-15 ACTIVE activities:
1. Physical activities & outdoor adventures (hiking, biking, water sports)
2. Cultural immersion experiences (tours, classes, workshops)
3. Morning activities (sunrise hikes, early market visits)
4. Full-day excursions
5. Estimated costs, duration, fitness level required
6. Booking requirements and best seasons
7. Group discounts available

Focus on ACTIVE, ENGAGING experiences. Max 400 words."""

    return await _ask(completion, ACTIVE_CURATION_SYSTEM, prompt)


async def curate_leisure(
    completion: CompletionClient,
    trip: TripSnapshot,
    intent_analysis: str,
    destination_research: str,
    lodgings: Optional[List[LodgingOffer]] = None,
) -> str:
    logger.info("Activity Curator [LEISURE BRANCH]", extra={"trip_id": str(trip.id)})

    hotels = lodging_context(lodgings, "LEISURE-FOCUSED HOTELS", "spa/beach access")
    prompt = f"""Curate LEISURE experiences for {trip.destination}:

{STYLE_GUIDANCE[trip.travel_style]}

Budget: {trip.budget_tier.value}
Group Size: {trip.group_size} people

Traveler Intent:
{intent_analysis}

Destination Research:
{destination_research}
{hotels}

Provide 10-15 RELAXING/NIGHTLIFE activities:
1. Spa & wellness experiences (massage, hot springs, wellness centers)
2. Beach clubs & pool lounges
3. Sunset viewing spots & romantic locations
4. Evening entertainment (bars, clubs, live music)
5. Late-night dining recommendations
6. Low-intensity daytime activities
7. Estimated costs, duration, dress codes
8. Reservations needed and peak hours

Focus on COMFORT and ENTERTAINMENT. Max 400 words."""

    return await _ask(completion, LEISURE_CURATION_SYSTEM, prompt)


async def generate_itinerary(
    completion: CompletionClient,
    trip: TripSnapshot,
    intent_analysis: str,
    destination_research: str,
    curated_activities: str,
    default_duration: int = 5,
) -> ItineraryResult:
    """
    Ask for the final day-by-day plan and parse it. A response that is not
    valid JSON still yields a result, marked degraded.
    """
    trip_duration = trip_duration_days(trip.start_date, trip.end_date, default_duration)
    logger.info(
        "Itinerary Generator - creating final itinerary",
        extra={"trip_id": str(trip.id), "duration_days": trip_duration},
    )

    prompt = f"""Generate a detailed day-by-day itinerary for {trip.destination}:

Trip Duration: {trip_duration} days
Budget: {trip.budget_tier.value}
Travel Style: {trip.travel_style.value}
Group Size: {trip.group_size}

Intent Analysis:
{intent_analysis}

Destination Research:
{destination_research}

Curated Activities:
{curated_activities}

Create a structured itinerary with:
1. Daily schedule with morning/afternoon/evening activities
2. Specific timings and locations
3. Transportation between locations
4. Meal recommendations
5. Daily budget estimates
6. Pro tips for each day

Format as JSON with this structure, with exactly {trip_duration} entries in "days":
{{
  "summary": "Brief overview",
  "total_estimated_cost": "USD amount",
  "days": [
    {{
      "day": 1,
      "title": "Day title",
      "activities": [
        {{
          "time": "9:00 AM",
          "activity": "Activity name",
          "location": "Specific location",
          "duration": "2 hours",
          "cost": "$50",
          "notes": "Tips and details"
        }}
      ]
    }}
  ],
  "tips": ["Overall trip tips"]
}}"""

    response = await _ask(completion, SYNTHESIS_SYSTEM, prompt)
    return parse_itinerary(response)
