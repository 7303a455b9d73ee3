"""
TravelMemory Backend — Trip Request/Response Schemas
=====================================================

What:  Pydantic models defining the trip API contract.
How:   FastAPI parses JSON request bodies into these models and serializes
       responses through them. Wire names are camelCase (tripName,
       totalCost, ...) and the same names are stored in MongoDB, so documents
       written by earlier clients of the `trips` collection stay readable.
"""

from typing import Any, Literal, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

TripType = Literal["backpacking", "leisure", "business"]


class _TripModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
    )


class TripCreate(_TripModel):
    """Body of POST /trip. Every field except `featured` is required."""

    trip_name: str = Field(min_length=1, description="Name of the trip")
    start_date_of_journey: str = Field(description="Start date, as entered by the client")
    end_date_of_journey: str = Field(description="End date, as entered by the client")
    name_of_hotels: str = Field(description="Hotels stayed at")
    places_visited: str = Field(description="Places visited")
    total_cost: float = Field(ge=0, description="Total cost of the trip")
    trip_type: TripType = Field(description="backpacking, leisure or business")
    experience: str = Field(description="Free-form trip report")
    image: str = Field(description="Image URL")
    short_description: str = Field(description="One-line summary")
    featured: bool = Field(default=False, description="Show on the featured list")


class TripUpdate(_TripModel):
    """
    Body of PATCH /trip/{id}. Only the fields sent are changed.

    Fields may be omitted but not sent as null: a stored null would make the
    trip unreadable through TripResponse.
    """

    trip_name: Optional[str] = Field(default=None, min_length=1)
    start_date_of_journey: Optional[str] = None
    end_date_of_journey: Optional[str] = None
    name_of_hotels: Optional[str] = None
    places_visited: Optional[str] = None
    total_cost: Optional[float] = Field(default=None, ge=0)
    trip_type: Optional[TripType] = None
    experience: Optional[str] = None
    image: Optional[str] = None
    short_description: Optional[str] = None
    featured: Optional[bool] = None

    @model_validator(mode="before")
    @classmethod
    def reject_explicit_nulls(cls, data: Any) -> Any:
        if isinstance(data, dict):
            nulls = sorted(key for key, value in data.items() if value is None)
            if nulls:
                raise ValueError(f"Fields cannot be set to null: {', '.join(nulls)}")
        return data


class TripResponse(_TripModel):
    """
    A stored trip as returned by every /trip route.

    Optional fields tolerate documents written before a field existed.
    """

    id: str = Field(alias="_id", description="MongoDB ObjectId as a hex string")
    trip_name: str
    start_date_of_journey: Optional[str] = None
    end_date_of_journey: Optional[str] = None
    name_of_hotels: Optional[str] = None
    places_visited: Optional[str] = None
    total_cost: Optional[float] = None
    trip_type: Optional[str] = None
    experience: Optional[str] = None
    image: Optional[str] = None
    short_description: Optional[str] = None
    featured: bool = False

    @field_validator("id", mode="before")
    @classmethod
    def stringify_object_id(cls, v: Any) -> Any:
        if isinstance(v, ObjectId):
            return str(v)
        return v
