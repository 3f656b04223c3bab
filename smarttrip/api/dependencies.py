"""
FastAPI dependencies: record store, pipeline and caller identity.
"""
from functools import lru_cache
from typing import Optional

from fastapi import Depends, Header, HTTPException

from smarttrip.agents.completion import create_completion_client
from smarttrip.agents.node_utilities import PipelineDeps
from smarttrip.agents.orchestrator import ItineraryPipeline
from smarttrip.agents.travel_data import TravelDataClient, create_travel_data_client
from smarttrip.core.config import get_settings
from smarttrip.core.exceptions import AuthenticationError
from smarttrip.core.security import CallerIdentity, UserTokenVerifier, bearer_token
from smarttrip.models.repository import TripRepository


@lru_cache()
def get_repository() -> TripRepository:
    return TripRepository()


@lru_cache()
def get_travel_data_client() -> TravelDataClient:
    return create_travel_data_client(get_settings())


@lru_cache()
def get_pipeline() -> ItineraryPipeline:
    settings = get_settings()
    deps = PipelineDeps(
        completion=create_completion_client(settings),
        store=get_repository(),
        travel_data=get_travel_data_client(),
        origin_code=settings.TRAVEL_DATA_ORIGIN_CODE,
        default_duration=settings.DEFAULT_TRIP_DURATION_DAYS,
    )
    return ItineraryPipeline(deps)


@lru_cache()
def get_token_verifier() -> UserTokenVerifier:
    settings = get_settings()
    return UserTokenVerifier(settings.AUTH_USER_URL, api_key=settings.AUTH_API_KEY)


async def get_current_user(
    authorization: Optional[str] = Header(default=None),
    verifier: UserTokenVerifier = Depends(get_token_verifier),
) -> CallerIdentity:
    try:
        return await verifier.verify(bearer_token(authorization))
    except AuthenticationError as e:
        raise HTTPException(status_code=401, detail=str(e))
