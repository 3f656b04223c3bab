from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from smarttrip.core.config import get_settings
from smarttrip.core.logging import configure_logging
from smarttrip.api.dependencies import get_travel_data_client
from smarttrip.api.routes import router
from smarttrip.core.database import engine, Base
from smarttrip.models import models  # noqa: F401  registers the trips table
import json
from typing import List

settings = get_settings()
configure_logging(settings.LOG_LEVEL)

# Create database tables
Base.metadata.create_all(bind=engine)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    if get_travel_data_client.cache_info().currsize:
        await get_travel_data_client().aclose()


app = FastAPI(
    title="SmartTrip Itinerary API",
    description="AI itinerary generation pipeline with live trip status",
    version="1.0.0",
    lifespan=lifespan
)


def parse_cors_origins(value: str) -> List[str]:
    """Accept a JSON list, a comma-separated list or a single origin."""
    value = value.strip()
    if value.startswith("["):
        return [str(origin).strip() for origin in json.loads(value)]
    if "," in value:
        return [origin.strip().strip('"').strip("'") for origin in value.split(",") if origin.strip()]
    return [value]


# CORS
cors_origins = parse_cors_origins(settings.CORS_ORIGINS)

app.add_middleware(
    CORSMiddleware,
    allow_origins=cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["*"]
)

app.include_router(router, prefix="/api", tags=["trips"])


@app.get("/")
async def root():
    return {
        "message": "SmartTrip Itinerary API",
        "version": "1.0.0",
        "docs": "/docs"
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
