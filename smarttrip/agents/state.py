"""
State definition for the itinerary generation pipeline.
"""
from typing import TypedDict, Dict, Any, Optional
from dataclasses import dataclass
from datetime import date
from enum import Enum
import uuid

from smarttrip.schemas.schemas import BudgetTier, TravelStyle, TripStatus


class ResearchBranch(str, Enum):
    LUXURY = "luxury"
    STANDARD = "standard"


class CurationBranch(str, Enum):
    ACTIVE = "active"
    LEISURE = "leisure"


RESEARCH_BRANCHES: Dict[BudgetTier, ResearchBranch] = {
    BudgetTier.HIGH: ResearchBranch.LUXURY,
    BudgetTier.MEDIUM: ResearchBranch.STANDARD,
    BudgetTier.LOW: ResearchBranch.STANDARD,
}

CURATION_BRANCHES: Dict[TravelStyle, CurationBranch] = {
    TravelStyle.ADVENTURE: CurationBranch.ACTIVE,
    TravelStyle.CULTURAL: CurationBranch.ACTIVE,
    TravelStyle.RELAXATION: CurationBranch.LEISURE,
    TravelStyle.NIGHTLIFE: CurationBranch.LEISURE,
}


def select_research_branch(budget_tier: BudgetTier) -> ResearchBranch:
    return RESEARCH_BRANCHES[budget_tier]


def select_curation_branch(travel_style: TravelStyle) -> CurationBranch:
    return CURATION_BRANCHES[travel_style]


@dataclass(frozen=True)
class TripSnapshot:
    """Trip request attributes captured when a run starts."""
    id: uuid.UUID
    destination: str
    budget_tier: BudgetTier
    travel_style: TravelStyle
    group_size: int = 1
    start_date: Optional[date] = None
    end_date: Optional[date] = None

    @classmethod
    def from_record(cls, record) -> "TripSnapshot":
        return cls(
            id=record.id,
            destination=record.destination,
            budget_tier=BudgetTier(record.budget_tier),
            travel_style=TravelStyle(record.travel_style),
            group_size=record.group_size,
            start_date=record.start_date,
            end_date=record.end_date,
        )

    @property
    def has_dates(self) -> bool:
        return self.start_date is not None and self.end_date is not None


class PipelineState(TypedDict):
    """
    State carried through one pipeline run.

    Attributes:
        trip: Trip attributes captured at run start
        research_branch: Research variant, fixed at run start
        curation_branch: Curation variant, fixed at run start
        intent_analysis: Intent stage output
        destination_research: Research stage output
        curated_activities: Curation stage output
        itinerary: Parsed (or degraded) synthesis output
        degraded: Whether the itinerary is the degraded fallback
        status: Last status written to the record store
    """
    trip: TripSnapshot
    research_branch: ResearchBranch
    curation_branch: CurationBranch
    intent_analysis: Optional[str]
    destination_research: Optional[str]
    curated_activities: Optional[str]
    itinerary: Optional[Dict[str, Any]]
    degraded: bool
    status: TripStatus


def create_initial_state(trip: TripSnapshot) -> PipelineState:
    """
    Create initial state for a run. Branches are chosen here and never
    re-evaluated while the run is in flight.
    """
    return PipelineState(
        trip=trip,
        research_branch=select_research_branch(trip.budget_tier),
        curation_branch=select_curation_branch(trip.travel_style),
        intent_analysis=None,
        destination_research=None,
        curated_activities=None,
        itinerary=None,
        degraded=False,
        status=TripStatus.DRAFT,
    )
