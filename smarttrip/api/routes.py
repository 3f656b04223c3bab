from fastapi import APIRouter, Depends, HTTPException
from sse_starlette.sse import EventSourceResponse
from starlette.concurrency import run_in_threadpool
from smarttrip.api.dependencies import get_current_user, get_pipeline, get_repository
from smarttrip.agents.orchestrator import ItineraryPipeline, is_owner, parse_trip_id
from smarttrip.core.config import get_settings
from smarttrip.core.exceptions import (
    AuthenticationError,
    CompletionTimeoutError,
    InvalidTripIdError,
    QuotaExhaustedError,
    RateLimitError,
    SmartTripError,
    StageFailedError,
    TripAccessDeniedError,
    TripNotFoundError,
)
from smarttrip.core.security import CallerIdentity
from smarttrip.models.repository import TripRecord, TripRepository
from smarttrip.schemas.schemas import GenerateResponse, TripCreate, TripResponse, TripStatus
from typing import List
import asyncio
import json
import logging
import uuid

logger = logging.getLogger("smarttrip.api")

router = APIRouter()

ERROR_STATUS_CODES = {
    InvalidTripIdError: 400,
    AuthenticationError: 401,
    TripAccessDeniedError: 403,
    TripNotFoundError: 404,
}

STAGE_ERROR_STATUS_CODES = {
    RateLimitError: 429,
    QuotaExhaustedError: 402,
    CompletionTimeoutError: 504,
}


def http_error(exc: SmartTripError) -> HTTPException:
    """Map a service error onto the HTTP status returned to the caller."""
    if isinstance(exc, StageFailedError):
        for error_cls, status_code in STAGE_ERROR_STATUS_CODES.items():
            if isinstance(exc.cause, error_cls):
                return HTTPException(status_code=status_code, detail=str(exc))
        return HTTPException(status_code=502, detail=str(exc))

    for error_cls, status_code in ERROR_STATUS_CODES.items():
        if isinstance(exc, error_cls):
            return HTTPException(status_code=status_code, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


def to_response(record: TripRecord) -> TripResponse:
    return TripResponse(
        id=str(record.id),
        destination=record.destination,
        start_date=record.start_date,
        end_date=record.end_date,
        budget_tier=record.budget_tier,
        travel_style=record.travel_style,
        group_size=record.group_size,
        status=record.status,
        itinerary=record.itinerary,
        created_at=record.created_at,
        updated_at=record.updated_at,
    )


async def load_owned_trip(trip_id: str, user: CallerIdentity, repository: TripRepository) -> TripRecord:
    try:
        trip_uuid = parse_trip_id(trip_id)
        record = await run_in_threadpool(repository.get, trip_uuid)
        if record is None:
            raise TripNotFoundError(trip_id)
        if not is_owner(record.user_id, user.user_id):
            raise TripAccessDeniedError(trip_id)
    except SmartTripError as e:
        raise http_error(e)
    return record


async def stream_trip_status(
    trip_id: uuid.UUID,
    repository: TripRepository,
    interval: float,
    timeout: float,
):
    """
    Poll the trip and emit one `status` event per observed change. Ends once
    the trip is completed or `timeout` seconds have passed; a failed run just
    stops producing changes.
    """
    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    last_status = None

    while True:
        record = await run_in_threadpool(repository.get, trip_id)
        if record is None:
            yield {
                "event": "error",
                "data": json.dumps({"detail": "Trip not found"})
            }
            return

        if record.status != last_status:
            last_status = record.status
            yield {
                "event": "status",
                "data": json.dumps({
                    "trip_id": str(record.id),
                    "status": record.status,
                    "has_itinerary": record.itinerary is not None
                })
            }

        if record.status == TripStatus.COMPLETED.value or loop.time() >= deadline:
            yield {
                "event": "end",
                "data": json.dumps({"status": record.status})
            }
            return

        await asyncio.sleep(interval)


@router.post("/trips", response_model=TripResponse, status_code=201)
async def create_trip(
    trip: TripCreate,
    user: CallerIdentity = Depends(get_current_user),
    repository: TripRepository = Depends(get_repository)
):
    """Create a draft trip owned by the caller."""
    try:
        owner_id = uuid.UUID(user.user_id)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid or expired token")

    record = await run_in_threadpool(repository.create, owner_id, trip)
    logger.info("Trip created", extra={"trip_id": str(record.id)})
    return to_response(record)


@router.get("/trips", response_model=List[TripResponse])
async def list_trips(
    user: CallerIdentity = Depends(get_current_user),
    repository: TripRepository = Depends(get_repository)
):
    """List the caller's trips, newest first."""
    try:
        owner_id = uuid.UUID(user.user_id)
    except ValueError:
        return []
    records = await run_in_threadpool(repository.list_for_user, owner_id)
    return [to_response(record) for record in records]


@router.get("/trips/{trip_id}", response_model=TripResponse)
async def get_trip(
    trip_id: str,
    user: CallerIdentity = Depends(get_current_user),
    repository: TripRepository = Depends(get_repository)
):
    """Get one trip; clients poll this to follow pipeline progress."""
    record = await load_owned_trip(trip_id, user, repository)
    return to_response(record)


@router.post("/trips/{trip_id}/generate", response_model=GenerateResponse)
async def generate_itinerary(
    trip_id: str,
    user: CallerIdentity = Depends(get_current_user),
    pipeline: ItineraryPipeline = Depends(get_pipeline)
):
    """Run the itinerary pipeline for a trip. Re-running starts from the first stage."""
    try:
        result = await pipeline.run(trip_id, user.user_id)
    except SmartTripError as e:
        logger.error("Error in generate-itinerary: %s", e, extra={"trip_id": trip_id})
        raise http_error(e)

    return GenerateResponse(itinerary=result.itinerary)


@router.get("/trips/{trip_id}/events")
async def trip_events(
    trip_id: str,
    user: CallerIdentity = Depends(get_current_user),
    repository: TripRepository = Depends(get_repository)
):
    """Stream status transitions for a trip as server-sent events."""
    record = await load_owned_trip(trip_id, user, repository)
    settings = get_settings()

    return EventSourceResponse(
        stream_trip_status(
            record.id,
            repository,
            interval=settings.STATUS_STREAM_INTERVAL_SECONDS,
            timeout=settings.STATUS_STREAM_TIMEOUT_SECONDS
        )
    )
