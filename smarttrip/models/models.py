from sqlalchemy import CheckConstraint, Column, String, DateTime, JSON, Integer, Date, Uuid
import uuid
from datetime import datetime, timezone
from smarttrip.core.database import Base
from smarttrip.schemas.schemas import TripStatus


def _utcnow():
    return datetime.now(timezone.utc)


class Trip(Base):
    __tablename__ = "trips"
    __table_args__ = (
        CheckConstraint("budget_tier IN ('low', 'medium', 'high')", name="ck_trips_budget_tier"),
        CheckConstraint(
            "travel_style IN ('adventure', 'relaxation', 'cultural', 'nightlife')",
            name="ck_trips_travel_style"
        ),
        CheckConstraint("group_size BETWEEN 1 AND 50", name="ck_trips_group_size"),
        CheckConstraint("(start_date IS NULL) = (end_date IS NULL)", name="ck_trips_dates_together"),
    )

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(Uuid(as_uuid=True), nullable=False, index=True)

    destination = Column(String(255), nullable=False)
    start_date = Column(Date)
    end_date = Column(Date)
    budget_tier = Column(String(20), nullable=False)  # low, medium, high
    travel_style = Column(String(20), nullable=False)  # adventure, relaxation, cultural, nightlife
    group_size = Column(Integer, nullable=False, default=1)

    status = Column(String(40), nullable=False, default=TripStatus.DRAFT.value)
    itinerary = Column(JSON)

    created_at = Column(DateTime(timezone=True), default=_utcnow)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, onupdate=_utcnow)
