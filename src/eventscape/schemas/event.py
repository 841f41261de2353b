"""Pydantic schemas for event data."""

from datetime import date, datetime

from pydantic import BaseModel, ConfigDict

from eventscape.schemas.extraction import Coordinates


class CategoryResponse(BaseModel):
    """Category response schema."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class CategoriesResponse(BaseModel):
    success: bool = True
    categories: list[CategoryResponse]


class EventResponse(BaseModel):
    """Event response schema with coordinates shaped for map display."""

    id: int
    name: str
    source_url: str
    description: str | None = None
    date_text: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    time_text: str | None = None
    opening_hours: str | None = None
    location: str
    coordinates: Coordinates | None = None
    category_ids: list[int]
    store_type: str
    status: str
    images: list[str] = []
    updated_at: datetime | None = None

    # Computed when a reference location is provided
    distance_km: float | None = None

    @classmethod
    def from_event(cls, event, distance_km: float | None = None) -> "EventResponse":
        coordinates = None
        if event.latitude is not None and event.longitude is not None:
            coordinates = Coordinates(latitude=event.latitude, longitude=event.longitude)
        return cls(
            id=event.id,
            name=event.name,
            source_url=event.source_url,
            description=event.description,
            date_text=event.date_text,
            start_date=event.start_date,
            end_date=event.end_date,
            time_text=event.time_text,
            opening_hours=event.opening_hours,
            location=event.location,
            coordinates=coordinates,
            category_ids=list(event.category_ids or []),
            store_type=event.store_type,
            status=event.status,
            images=list(event.images or []),
            updated_at=event.updated_at,
            distance_km=distance_km,
        )


class EventsResponse(BaseModel):
    """Response for the events listing endpoint."""

    success: bool = True
    events: list[EventResponse]
    total: int
