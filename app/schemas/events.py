from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from app.models.events import EventMode


# ---------- Event ----------
class EventCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1)
    overview: str = Field(min_length=1)
    image: str = Field(min_length=1, max_length=500)
    venue: str = Field(min_length=1, max_length=200)
    location: str = Field(min_length=1, max_length=200)
    date: str = Field(min_length=1)
    time: str = Field(min_length=1)
    mode: EventMode
    audience: str = Field(min_length=1, max_length=200)
    agenda: list[str] = Field(min_length=1)
    organizer: str = Field(min_length=1, max_length=200)
    tags: list[str] = Field(min_length=1)

    @field_validator(
        "title", "description", "overview", "image", "venue", "location",
        "date", "time", "audience", "organizer",
        mode="before",
    )
    @classmethod
    def strip_text(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator("agenda", "tags")
    @classmethod
    def drop_blank_items(cls, v: list[str]) -> list[str]:
        items = [item.strip() for item in v if item and item.strip()]
        if not items:
            raise ValueError("must have at least one item")
        return items


class EventUpdate(EventCreate):
    """Same rules as EventCreate, but every field is optional. Explicit None is rejected."""

    title: str = Field(None, min_length=1, max_length=200)
    description: str = Field(None, min_length=1)
    overview: str = Field(None, min_length=1)
    image: str = Field(None, min_length=1, max_length=500)
    venue: str = Field(None, min_length=1, max_length=200)
    location: str = Field(None, min_length=1, max_length=200)
    date: str = Field(None, min_length=1)
    time: str = Field(None, min_length=1)
    mode: EventMode = None
    audience: str = Field(None, min_length=1, max_length=200)
    agenda: list[str] = Field(None, min_length=1)
    organizer: str = Field(None, min_length=1, max_length=200)
    tags: list[str] = Field(None, min_length=1)


class EventOut(BaseModel):
    id: int
    title: str
    slug: str
    description: str
    overview: str
    image: str
    venue: str
    location: str
    date: str
    time: str
    mode: str
    audience: str
    agenda: list[str]
    organizer: str
    tags: list[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class EventResponse(BaseModel):
    event: EventOut
    message: str


class EventListResponse(BaseModel):
    events: list[EventOut]
    message: str
