"""
Pipeline orchestrator: validates the trigger, checks ownership, and drives
one run of the itinerary graph for a trip.
"""
import logging
import re
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from starlette.concurrency import run_in_threadpool

from smarttrip.agents.graph import create_itinerary_graph, initialize_state
from smarttrip.agents.node_utilities import PipelineDeps
from smarttrip.agents.state import CurationBranch, ResearchBranch, TripSnapshot
from smarttrip.core.exceptions import (
    InvalidTripIdError,
    StageFailedError,
    TripAccessDeniedError,
    TripNotFoundError,
)

logger = logging.getLogger("smarttrip.pipeline")

TRIP_ID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$",
    re.IGNORECASE,
)


def parse_trip_id(trip_id: Optional[str]) -> uuid.UUID:
    """Accept only the canonical 8-4-4-4-12 hex form."""
    if not trip_id or not TRIP_ID_PATTERN.match(trip_id):
        raise InvalidTripIdError(trip_id or "")
    return uuid.UUID(trip_id)


def is_owner(owner_id: uuid.UUID, caller_id: str) -> bool:
    try:
        return uuid.UUID(str(caller_id)) == owner_id
    except ValueError:
        return False


@dataclass
class PipelineResult:
    trip_id: str
    itinerary: Dict[str, Any]
    degraded: bool
    research_branch: ResearchBranch
    curation_branch: CurationBranch


class ItineraryPipeline:
    """
    Runs the whole pipeline once per call. There is no resume: calling
    `run` again for a stuck trip starts over from intent analysis.
    """

    def __init__(self, deps: PipelineDeps):
        self._deps = deps
        self._graph = create_itinerary_graph(deps)

    async def run(self, trip_id: str, caller_id: str) -> PipelineResult:
        """
        Generate and store the itinerary for `trip_id`.

        Raises:
            InvalidTripIdError: malformed id, nothing read or written
            TripNotFoundError: no such trip
            TripAccessDeniedError: caller does not own the trip, nothing written
            StageFailedError: a stage raised; the trip keeps its last written status
        """
        trip_uuid = parse_trip_id(trip_id)

        record = await run_in_threadpool(self._deps.store.get, trip_uuid)
        if record is None:
            raise TripNotFoundError(trip_id)
        if not is_owner(record.user_id, caller_id):
            logger.warning("Caller does not own trip", extra={"trip_id": trip_id})
            raise TripAccessDeniedError(trip_id)

        trip = TripSnapshot.from_record(record)
        state = initialize_state(trip)
        logger.info(
            "Starting AI workflow for trip: %s", trip_id,
            extra={
                "research_branch": state["research_branch"].value,
                "curation_branch": state["curation_branch"].value,
            },
        )

        try:
            final_state = await self._graph.ainvoke(state)
        except StageFailedError:
            raise
        except Exception as e:
            logger.error("Pipeline aborted for trip %s: %s", trip_id, e, exc_info=True)
            raise StageFailedError(trip_id, None, e) from e

        logger.info(
            "Itinerary generated for trip %s", trip_id,
            extra={"degraded": final_state["degraded"]},
        )
        return PipelineResult(
            trip_id=trip_id,
            itinerary=final_state["itinerary"],
            degraded=final_state["degraded"],
            research_branch=final_state["research_branch"],
            curation_branch=final_state["curation_branch"],
        )
