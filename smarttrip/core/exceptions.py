"""
Exceptions raised across the itinerary pipeline.
"""
from typing import Optional


class SmartTripError(Exception):
    """Base class for service errors."""


class InvalidTripIdError(SmartTripError):
    """Trip identifier is not a canonical UUID."""

    def __init__(self, trip_id: str):
        self.trip_id = trip_id
        super().__init__("Invalid trip ID format")


class TripNotFoundError(SmartTripError):
    def __init__(self, trip_id: str):
        self.trip_id = trip_id
        super().__init__("Trip not found")


class AuthenticationError(SmartTripError):
    """Caller credential is missing or could not be resolved to a user."""


class TripAccessDeniedError(SmartTripError):
    def __init__(self, trip_id: str):
        self.trip_id = trip_id
        super().__init__("Unauthorized: you don't own this trip")


class TravelDataError(SmartTripError):
    """Travel-data provider call failed."""


class TravelDataAuthError(TravelDataError):
    """Token exchange with the travel-data provider failed."""


class CompletionError(SmartTripError):
    """Generative completion call failed. The message is the provider's own."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        self.status_code = status_code
        super().__init__(message)


class RateLimitError(CompletionError):
    pass


class QuotaExhaustedError(CompletionError):
    pass


class CompletionTimeoutError(CompletionError):
    pass


class StageFailedError(SmartTripError):
    """
    A pipeline stage raised. The trip is left at `status`, the status that
    was written for the failed stage (None when the failure happened outside
    a stage, e.g. on a status write).
    """

    def __init__(self, trip_id: str, status: Optional[str], cause: Exception):
        self.trip_id = trip_id
        self.status = status
        self.cause = cause
        super().__init__(str(cause) or cause.__class__.__name__)
