"""
TravelMemory Backend — Trip Service
====================================

What:  CRUD operations on the `trips` collection.
How:   Thin passthrough to pymongo's async collection API; translates driver
       results into TripResponse models and driver failures into application
       exceptions.
Who:   Called by the /trip route handlers, which receive an instance bound to
       the connector's database via FastAPI dependency injection.

Error Handling Strategy:
    Malformed id        → ValidationError (400)
    No such document    → NotFoundError (404)
    Any PyMongoError    → DatabaseError (500), driver error logged
    An unreachable server surfaces here, at the point of use, as a
    ServerSelectionTimeoutError once the driver gives up.
"""

import logging
from typing import Any, Dict, List

from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ASCENDING, ReturnDocument
from pymongo.asynchronous.collection import AsyncCollection
from pymongo.errors import PyMongoError

from travel_memory.exceptions import DatabaseError, NotFoundError, ValidationError
from travel_memory.schemas.trip import TripCreate, TripResponse, TripUpdate

logger = logging.getLogger(__name__)

TRIPS_COLLECTION = "trips"


def parse_trip_id(trip_id: str) -> ObjectId:
    """Convert a path parameter into an ObjectId, rejecting malformed values."""
    try:
        return ObjectId(trip_id)
    except (InvalidId, TypeError):
        raise ValidationError(
            message=f"'{trip_id}' is not a valid trip id",
            field="id",
        )


class TripService:
    """
    Data access for trips.

    Holds no state besides the collection handle, so a new instance per
    request is cheap.
    """

    def __init__(self, collection: AsyncCollection):
        self.collection = collection

    async def create_trip(self, payload: TripCreate) -> TripResponse:
        document: Dict[str, Any] = payload.model_dump(by_alias=True)
        try:
            result = await self.collection.insert_one(document)
        except PyMongoError as e:
            raise self._database_error("create", e)

        document["_id"] = result.inserted_id
        logger.info("Trip created: %s", result.inserted_id)
        return TripResponse.model_validate(document)

    async def list_trips(self) -> List[TripResponse]:
        """All trips in insertion order."""
        try:
            cursor = self.collection.find().sort("_id", ASCENDING)
            documents = await cursor.to_list(length=None)
        except PyMongoError as e:
            raise self._database_error("list", e)
        return [TripResponse.model_validate(doc) for doc in documents]

    async def get_trip(self, trip_id: str) -> TripResponse:
        oid = parse_trip_id(trip_id)
        try:
            document = await self.collection.find_one({"_id": oid})
        except PyMongoError as e:
            raise self._database_error("get", e, trip_id)

        if document is None:
            raise NotFoundError(resource="trip", resource_id=trip_id)
        return TripResponse.model_validate(document)

    async def update_trip(self, trip_id: str, changes: TripUpdate) -> TripResponse:
        """
        Apply a partial update and return the stored result.

        Raises:
            ValidationError: Malformed id, or a body with no fields set
            NotFoundError:   No trip with this id
            DatabaseError:   The driver failed
        """
        oid = parse_trip_id(trip_id)
        fields = changes.model_dump(by_alias=True, exclude_unset=True, exclude_none=True)
        if not fields:
            raise ValidationError(message="Update body must set at least one field")

        try:
            document = await self.collection.find_one_and_update(
                {"_id": oid},
                {"$set": fields},
                return_document=ReturnDocument.AFTER,
            )
        except PyMongoError as e:
            raise self._database_error("update", e, trip_id)

        if document is None:
            raise NotFoundError(resource="trip", resource_id=trip_id)
        logger.info("Trip updated: %s (%s)", trip_id, ", ".join(sorted(fields)))
        return TripResponse.model_validate(document)

    async def delete_trip(self, trip_id: str) -> None:
        oid = parse_trip_id(trip_id)
        try:
            result = await self.collection.delete_one({"_id": oid})
        except PyMongoError as e:
            raise self._database_error("delete", e, trip_id)

        if result.deleted_count == 0:
            raise NotFoundError(resource="trip", resource_id=trip_id)
        logger.info("Trip deleted: %s", trip_id)

    @staticmethod
    def _database_error(operation: str, error: PyMongoError, trip_id: str = "") -> DatabaseError:
        logger.error("Database error during trip %s %s: %s", operation, trip_id, error)
        context = {"operation": operation, "error_type": type(error).__name__}
        if trip_id:
            context["trip_id"] = trip_id
        return DatabaseError(
            message="Could not access trips. Please try again later.",
            context=context,
        )
