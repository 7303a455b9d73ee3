"""
TravelMemory Backend — Trip Route Handlers
===========================================

What:  CRUD endpoints under /trip.
How:   Each handler receives a TripService bound to the connector's database
       and delegates to it. Errors raised by the service are turned into
       responses by the global exception handlers.

Route Inventory:
    POST   /trip         create a trip            → 201
    GET    /trip         list all trips           → 200
    GET    /trip/{id}    fetch one trip           → 200 / 404
    PATCH  /trip/{id}    partial update           → 200 / 404
    DELETE /trip/{id}    delete                   → 204 / 404
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Request, Response

from travel_memory.schemas.responses import ErrorResponse
from travel_memory.schemas.trip import TripCreate, TripResponse, TripUpdate
from travel_memory.services.trip_service import TRIPS_COLLECTION, TripService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/trip", tags=["Trips"])

_error_responses = {
    400: {"description": "Malformed id or body", "model": ErrorResponse},
    404: {"description": "Trip not found", "model": ErrorResponse},
    500: {"description": "Database error", "model": ErrorResponse},
}


def get_trip_service(request: Request) -> TripService:
    """
    FastAPI dependency: a TripService over the process-wide connector.

    The connector is created by the application factory and stored on
    `app.state`; tests replace this dependency with a fake service.
    """
    connector = request.app.state.connector
    return TripService(connector.database[TRIPS_COLLECTION])


@router.post(
    "",
    status_code=201,
    response_model=TripResponse,
    responses=_error_responses,
    summary="Create a trip",
)
async def create_trip(
    payload: TripCreate,
    service: TripService = Depends(get_trip_service),
) -> TripResponse:
    return await service.create_trip(payload)


@router.get(
    "",
    response_model=List[TripResponse],
    responses={500: _error_responses[500]},
    summary="List all trips",
)
async def list_trips(
    service: TripService = Depends(get_trip_service),
) -> List[TripResponse]:
    return await service.list_trips()


@router.get(
    "/{trip_id}",
    response_model=TripResponse,
    responses=_error_responses,
    summary="Get a single trip by id",
)
async def get_trip(
    trip_id: str,
    service: TripService = Depends(get_trip_service),
) -> TripResponse:
    return await service.get_trip(trip_id)


@router.patch(
    "/{trip_id}",
    response_model=TripResponse,
    responses=_error_responses,
    summary="Update some fields of a trip",
)
async def update_trip(
    trip_id: str,
    changes: TripUpdate,
    service: TripService = Depends(get_trip_service),
) -> TripResponse:
    return await service.update_trip(trip_id, changes)


@router.delete(
    "/{trip_id}",
    status_code=204,
    response_class=Response,
    responses=_error_responses,
    summary="Delete a trip",
)
async def delete_trip(
    trip_id: str,
    service: TripService = Depends(get_trip_service),
) -> Response:
    await service.delete_trip(trip_id)
    return Response(status_code=204)
