"""
Node utilities for the itinerary graph.

Every stage node first persists the status for its stage, then runs the stage.
The write lands before the stage starts, so a failing stage leaves the trip
at that stage's status.
"""
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional

from starlette.concurrency import run_in_threadpool

from smarttrip.agents import stages
from smarttrip.agents.completion import CompletionClient
from smarttrip.agents.enrichment import fetch_lodging_enrichment, fetch_research_enrichment
from smarttrip.agents.state import CurationBranch, PipelineState, ResearchBranch, TripSnapshot
from smarttrip.agents.travel_data import TravelDataClient
from smarttrip.core.exceptions import StageFailedError
from smarttrip.models.repository import TripRepository
from smarttrip.schemas.schemas import TripStatus

logger = logging.getLogger("smarttrip.pipeline")


@dataclass
class PipelineDeps:
    """Collaborators shared by every node of one compiled graph."""
    completion: CompletionClient
    store: TripRepository
    travel_data: Optional[TravelDataClient] = None
    origin_code: str = "NYC"
    default_duration: int = 5


async def _write_status(deps: PipelineDeps, trip: TripSnapshot, status: TripStatus, **changes) -> None:
    await run_in_threadpool(deps.store.update_status, trip.id, status, **changes)


async def _run_stage(
    deps: PipelineDeps,
    trip: TripSnapshot,
    status: TripStatus,
    stage_call: Callable[[], Awaitable[Any]],
    **status_changes,
) -> Any:
    await _write_status(deps, trip, status, **status_changes)
    try:
        return await stage_call()
    except Exception as e:
        logger.error(
            "Stage failed, trip left at %s: %s", status.value, e,
            exc_info=True, extra={"trip_id": str(trip.id)},
        )
        raise StageFailedError(str(trip.id), status.value, e) from e


def create_analyze_intent(deps: PipelineDeps):
    """
    Creates the intent node. It opens a run, so its status write also clears
    any itinerary left by an earlier run.
    """
    async def analyze_intent(state: PipelineState) -> Dict[str, Any]:
        trip = state["trip"]
        intent = await _run_stage(
            deps, trip, TripStatus.ANALYZING_INTENT,
            lambda: stages.analyze_intent(deps.completion, trip),
            clear_itinerary=True,
        )
        logger.info("Intent analysis complete", extra={"trip_id": str(trip.id)})
        return {"intent_analysis": intent, "status": TripStatus.ANALYZING_INTENT}

    return analyze_intent


def create_research(deps: PipelineDeps, branch: ResearchBranch):
    """
    Creates a destination research node for one budget branch.
    """
    stage = stages.research_luxury if branch == ResearchBranch.LUXURY else stages.research_standard

    async def research(state: PipelineState) -> Dict[str, Any]:
        trip = state["trip"]

        async def run():
            enrichment = await fetch_research_enrichment(deps.travel_data, trip, deps.origin_code)
            return await stage(
                deps.completion, trip, state["intent_analysis"],
                enrichment=enrichment, origin_code=deps.origin_code,
            )

        research_text = await _run_stage(deps, trip, TripStatus.RESEARCHING_DESTINATION, run)
        logger.info("Destination research complete", extra={"trip_id": str(trip.id), "branch": branch.value})
        return {"destination_research": research_text, "status": TripStatus.RESEARCHING_DESTINATION}

    return research


def create_curation(deps: PipelineDeps, branch: CurationBranch):
    """
    Creates an activity curation node for one travel-style branch.
    """
    stage = stages.curate_active if branch == CurationBranch.ACTIVE else stages.curate_leisure

    async def curate(state: PipelineState) -> Dict[str, Any]:
        trip = state["trip"]

        async def run():
            lodgings = await fetch_lodging_enrichment(deps.travel_data, trip)
            return await stage(
                deps.completion, trip, state["intent_analysis"], state["destination_research"],
                lodgings=lodgings,
            )

        activities = await _run_stage(deps, trip, TripStatus.CURATING_ACTIVITIES, run)
        logger.info("Activity curation complete", extra={"trip_id": str(trip.id), "branch": branch.value})
        return {"curated_activities": activities, "status": TripStatus.CURATING_ACTIVITIES}

    return curate


def create_generate_itinerary(deps: PipelineDeps):
    """
    Creates the synthesis node.
    """
    async def generate_itinerary(state: PipelineState) -> Dict[str, Any]:
        trip = state["trip"]
        result = await _run_stage(
            deps, trip, TripStatus.GENERATING_ITINERARY,
            lambda: stages.generate_itinerary(
                deps.completion, trip,
                state["intent_analysis"], state["destination_research"], state["curated_activities"],
                default_duration=deps.default_duration,
            ),
        )
        if result.degraded:
            logger.warning("Itinerary could not be parsed, storing raw text", extra={"trip_id": str(trip.id)})
        else:
            logger.info("Itinerary generation complete", extra={"trip_id": str(trip.id)})
        return {
            "itinerary": result.payload,
            "degraded": result.degraded,
            "status": TripStatus.GENERATING_ITINERARY,
        }

    return generate_itinerary


def create_finalize(deps: PipelineDeps):
    """
    Creates the final node: status and itinerary go out in one write, so no
    reader sees `completed` without an itinerary.
    """
    async def finalize(state: PipelineState) -> Dict[str, Any]:
        trip = state["trip"]
        await _write_status(deps, trip, TripStatus.COMPLETED, itinerary=state["itinerary"])
        return {"status": TripStatus.COMPLETED}

    return finalize
