"""Shared fixtures: in-memory trip store and a scripted completion client."""
import json
import os
import re
import uuid
from datetime import date

os.environ["DATABASE_URL"] = "sqlite://"

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from smarttrip.agents import stages
from smarttrip.core.database import Base, engine_options
from smarttrip.models import models  # noqa: F401
from smarttrip.models.repository import TripRepository
from smarttrip.schemas.schemas import BudgetTier, TravelStyle, TripCreate

OWNER_ID = uuid.UUID("6f1c2a9e-3b4d-4e5f-8a7b-9c0d1e2f3a4b")
OTHER_USER_ID = uuid.UUID("0b8e7d6c-5a4f-4321-9abc-def012345678")

STAGE_NAMES = {
    stages.INTENT_SYSTEM: "intent",
    stages.LUXURY_RESEARCH_SYSTEM: "luxury research",
    stages.STANDARD_RESEARCH_SYSTEM: "standard research",
    stages.ACTIVE_CURATION_SYSTEM: "active curation",
    stages.LEISURE_CURATION_SYSTEM: "leisure curation",
    stages.SYNTHESIS_SYSTEM: "synthesis",
}

_DURATION = re.compile(r"Trip Duration: (\d+) days")


class RecordingRepository(TripRepository):
    """Trip store that also remembers every status it was asked to write."""

    def __init__(self, session_factory):
        super().__init__(session_factory)
        self.writes = []

    def update_status(self, trip_id, status, itinerary=None, clear_itinerary=False):
        self.writes.append(status.value)
        super().update_status(trip_id, status, itinerary=itinerary, clear_itinerary=clear_itinerary)


class FakeCompletion:
    """
    Answers each stage by its system instruction. Synthesis returns a
    noise-wrapped JSON itinerary with as many days as the prompt asks for.
    """

    def __init__(self):
        self.calls = []
        self.replies = {}
        self.errors = {}

    @property
    def stages_called(self):
        return [STAGE_NAMES[system] for system, _ in self.calls]

    def prompt_for(self, stage_name):
        for system, prompt in self.calls:
            if STAGE_NAMES[system] == stage_name:
                return prompt
        return None

    async def complete(self, system_instruction, turns):
        prompt = turns[-1]["content"]
        self.calls.append((system_instruction, prompt))

        if system_instruction in self.errors:
            raise self.errors[system_instruction]
        if system_instruction in self.replies:
            return self.replies[system_instruction]

        if system_instruction == stages.SYNTHESIS_SYSTEM:
            duration = int(_DURATION.search(prompt).group(1))
            itinerary = {
                "summary": "A well-paced trip",
                "total_estimated_cost": "USD 2000",
                "days": [
                    {
                        "day": n,
                        "title": f"Day {n}",
                        "activities": [{"time": "9:00 AM", "activity": "Walk", "location": "Old town"}],
                    }
                    for n in range(1, duration + 1)
                ],
                "tips": ["Book early"],
            }
            return "Here is your itinerary:\n```json\n" + json.dumps(itinerary) + "\n```\nEnjoy!"

        return f"{STAGE_NAMES[system_instruction]} notes"


@pytest.fixture
def session_factory():
    engine = create_engine("sqlite://", **engine_options("sqlite://"))
    Base.metadata.create_all(bind=engine)
    yield sessionmaker(autocommit=False, autoflush=False, bind=engine)
    engine.dispose()


@pytest.fixture
def repository(session_factory):
    return RecordingRepository(session_factory)


@pytest.fixture
def completion():
    return FakeCompletion()


@pytest.fixture
def owner_id():
    return OWNER_ID


@pytest.fixture
def other_user_id():
    return OTHER_USER_ID


@pytest.fixture
def make_trip(repository):
    def _make_trip(
        destination="Paris",
        budget_tier=BudgetTier.HIGH,
        travel_style=TravelStyle.ADVENTURE,
        start_date=date(2026, 6, 1),
        end_date=date(2026, 6, 3),
        group_size=2,
        user_id=OWNER_ID,
    ):
        data = TripCreate(
            destination=destination,
            budget_tier=budget_tier,
            travel_style=travel_style,
            start_date=start_date,
            end_date=end_date,
            group_size=group_size,
        )
        return repository.create(user_id, data)

    return _make_trip
