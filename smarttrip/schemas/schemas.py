"""
Pydantic schemas for API requests and responses.
"""
from datetime import date, datetime
from enum import Enum
from pydantic import BaseModel, Field, field_validator, model_validator
from typing import Optional, Any, List


class BudgetTier(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class TravelStyle(str, Enum):
    ADVENTURE = "adventure"
    RELAXATION = "relaxation"
    CULTURAL = "cultural"
    NIGHTLIFE = "nightlife"


class TripStatus(str, Enum):
    """Pipeline progress, in the order the orchestrator writes it."""
    DRAFT = "draft"
    ANALYZING_INTENT = "analyzing_intent"
    RESEARCHING_DESTINATION = "researching_destination"
    CURATING_ACTIVITIES = "curating_activities"
    GENERATING_ITINERARY = "generating_itinerary"
    COMPLETED = "completed"


TRIP_STATUS_ORDER = list(TripStatus)


class TripCreate(BaseModel):
    """Trip request attributes submitted by the planner form."""
    destination: str = Field(min_length=2, max_length=255)
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    budget_tier: BudgetTier = BudgetTier.MEDIUM
    travel_style: TravelStyle = TravelStyle.CULTURAL
    group_size: int = Field(default=1, ge=1, le=50)

    @field_validator("destination")
    @classmethod
    def strip_destination(cls, value: str) -> str:
        value = value.strip()
        if len(value) < 2:
            raise ValueError("Destination must be at least 2 characters")
        return value

    @model_validator(mode="after")
    def check_dates(self):
        if (self.start_date is None) != (self.end_date is None):
            raise ValueError("start_date and end_date must be given together")
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class TripResponse(BaseModel):
    """Trip record as seen by a polling client."""
    id: str
    destination: str
    start_date: Optional[date]
    end_date: Optional[date]
    budget_tier: BudgetTier
    travel_style: TravelStyle
    group_size: int
    status: TripStatus
    itinerary: Optional[dict]
    created_at: datetime
    updated_at: datetime


class GenerateResponse(BaseModel):
    """Result of a completed pipeline run."""
    success: bool = True
    message: str = "Itinerary generated successfully"
    itinerary: dict


class ItineraryActivity(BaseModel):
    time: str
    activity: str
    location: Optional[str] = None
    duration: Optional[str] = None
    cost: Optional[Any] = None
    notes: Optional[str] = None


class ItineraryDay(BaseModel):
    day: int
    title: Optional[str] = None
    activities: List[ItineraryActivity] = Field(default_factory=list)


class Itinerary(BaseModel):
    """
    Structured itinerary requested from the synthesis stage. Stored
    itineraries are not validated against it; it documents the shape.
    """
    summary: str
    total_estimated_cost: str
    days: List[ItineraryDay]
    tips: List[str] = Field(default_factory=list)


class DegradedItinerary(BaseModel):
    """Stored instead of `Itinerary` when the model output could not be parsed."""
    summary: str
    raw_itinerary: str
    error: str
