"""
Trip record store access.

Each call opens its own short-lived session and commits before returning, so
a status write is visible to other readers as soon as the call completes.
"""
import logging
import uuid
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from sqlalchemy.orm import sessionmaker

from smarttrip.core.database import SessionLocal
from smarttrip.core.exceptions import TripNotFoundError
from smarttrip.models.models import Trip
from smarttrip.schemas.schemas import TripCreate, TripStatus

logger = logging.getLogger("smarttrip.store")


@dataclass
class TripRecord:
    """Detached copy of a trips row."""
    id: uuid.UUID
    user_id: uuid.UUID
    destination: str
    start_date: Optional[date]
    end_date: Optional[date]
    budget_tier: str
    travel_style: str
    group_size: int
    status: str
    itinerary: Optional[Dict[str, Any]]
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_row(cls, row: Trip) -> "TripRecord":
        return cls(
            id=row.id,
            user_id=row.user_id,
            destination=row.destination,
            start_date=row.start_date,
            end_date=row.end_date,
            budget_tier=row.budget_tier,
            travel_style=row.travel_style,
            group_size=row.group_size,
            status=row.status,
            itinerary=row.itinerary,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )


class TripRepository:
    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self._session_factory = session_factory

    def create(self, user_id: uuid.UUID, data: TripCreate) -> TripRecord:
        with self._session_factory() as db:
            trip = Trip(
                user_id=user_id,
                destination=data.destination,
                start_date=data.start_date,
                end_date=data.end_date,
                budget_tier=data.budget_tier.value,
                travel_style=data.travel_style.value,
                group_size=data.group_size,
                status=TripStatus.DRAFT.value,
            )
            db.add(trip)
            db.commit()
            db.refresh(trip)
            return TripRecord.from_row(trip)

    def get(self, trip_id: uuid.UUID) -> Optional[TripRecord]:
        with self._session_factory() as db:
            trip = db.get(Trip, trip_id)
            if trip is None:
                return None
            return TripRecord.from_row(trip)

    def list_for_user(self, user_id: uuid.UUID, limit: int = 50) -> List[TripRecord]:
        with self._session_factory() as db:
            rows = (
                db.query(Trip)
                .filter(Trip.user_id == user_id)
                .order_by(Trip.created_at.desc())
                .limit(limit)
                .all()
            )
            return [TripRecord.from_row(row) for row in rows]

    def update_status(
        self,
        trip_id: uuid.UUID,
        status: TripStatus,
        itinerary: Optional[Dict[str, Any]] = None,
        clear_itinerary: bool = False,
    ) -> None:
        """
        Write a status transition. When `itinerary` is given it is stored in
        the same commit as the status.
        """
        with self._session_factory() as db:
            trip = db.get(Trip, trip_id)
            if trip is None:
                raise TripNotFoundError(str(trip_id))

            trip.status = status.value
            if itinerary is not None:
                trip.itinerary = itinerary
            elif clear_itinerary:
                trip.itinerary = None
            db.commit()

        logger.info("Trip %s status updated to: %s", trip_id, status.value)
