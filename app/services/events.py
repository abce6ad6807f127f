"""Event record store: validated, normalized writes and lookups over ``events``."""

import logging
from collections.abc import Mapping
from typing import Any
from urllib.parse import unquote

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateSlugError, ValidationError
from app.models.books import Booking  # noqa: F401
from app.models.events import Event
from app.schemas.events import EventCreate, EventUpdate
from app.services.normalize import generate_slug, normalize_date, normalize_time

logger = logging.getLogger(__name__)

# Fields a caller may change after creation; slug and timestamps are system-managed
UPDATABLE_FIELDS = frozenset(EventUpdate.model_fields)


def _validation_message(exc: PydanticValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(loc) for loc in err["loc"]) or "event"
        parts.append(f"{field}: {err['msg']}")
    return "; ".join(parts)


def _validate(data: Mapping[str, Any], schema: type[EventCreate] = EventCreate) -> EventCreate:
    try:
        return schema.model_validate(dict(data))
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid event: {_validation_message(e)}") from e


def _commit(db: Session, event: Event) -> Event:
    slug = event.slug
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Rejected duplicate slug %r", slug)
        raise DuplicateSlugError(f"Event with slug \"{slug}\" already exists") from e
    db.refresh(event)
    return event


def event_exists_by_slug(db: Session, slug: str) -> bool:
    return db.scalar(select(Event.id).where(Event.slug == slug)) is not None


def event_exists_by_title(db: Session, title: str) -> bool:
    """Check whether creating an event with this title would collide on slug."""
    return event_exists_by_slug(db, generate_slug(title))


def create_event(db: Session, fields: Mapping[str, Any]) -> Event:
    """
    Validate, normalize and persist a new event.

    The slug is derived from the title, date/time are canonicalized.
    Raises ValidationError, InvalidDateError, InvalidTimeError or DuplicateSlugError;
    nothing is written on failure.
    """
    payload = _validate(fields)

    slug = generate_slug(payload.title)
    if not slug:
        raise ValidationError("Invalid event: title must contain letters or digits")
    if event_exists_by_slug(db, slug):
        raise DuplicateSlugError(f"Event with slug \"{slug}\" already exists")

    event = Event(
        title=payload.title,
        slug=slug,
        description=payload.description,
        overview=payload.overview,
        image=payload.image,
        venue=payload.venue,
        location=payload.location,
        date=normalize_date(payload.date),
        time=normalize_time(payload.time),
        mode=payload.mode.value,
        audience=payload.audience,
        agenda=payload.agenda,
        organizer=payload.organizer,
        tags=payload.tags,
    )
    db.add(event)
    event = _commit(db, event)
    logger.info("Created event id=%s slug=%s", event.id, event.slug)
    return event


def update_event(db: Session, event: Event, changes: Mapping[str, Any]) -> Event:
    """
    Apply ``changes`` to an existing event.

    Only the keys present in ``changes`` are part of this write: the slug is
    re-derived only when ``title`` is among them, and ``date``/``time`` are
    re-normalized only when they are. Stored values of untouched fields are
    left exactly as they are.
    """
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Cannot update field(s): {', '.join(sorted(unknown))}")
    if not changes:
        return event

    # Only the changed fields are validated; stored values are taken as they are
    payload = _validate(changes, EventUpdate)

    values: dict[str, Any] = {}
    for name in changes:
        value = getattr(payload, name)
        values[name] = value.value if name == "mode" else value

    if "title" in changes:
        slug = generate_slug(payload.title)
        if not slug:
            raise ValidationError("Invalid event: title must contain letters or digits")
        if slug != event.slug and event_exists_by_slug(db, slug):
            raise DuplicateSlugError(f"Event with slug \"{slug}\" already exists")
        values["slug"] = slug
    if "date" in changes:
        values["date"] = normalize_date(payload.date)
    if "time" in changes:
        values["time"] = normalize_time(payload.time)

    for name, value in values.items():
        setattr(event, name, value)
    event = _commit(db, event)
    logger.info("Updated event id=%s fields=%s", event.id, sorted(changes))
    return event


def normalize_slug_param(slug: str) -> str:
    """Decode escape sequences, lowercase and trim a caller-supplied slug."""
    return unquote(slug).lower().strip()


def get_event_by_slug(db: Session, slug: str) -> Event | None:
    normalized = normalize_slug_param(slug)
    if not normalized:
        raise ValidationError("Invalid slug parameter")
    return db.scalar(select(Event).where(Event.slug == normalized))


def list_events(db: Session) -> list[Event]:
    """All events, newest first."""
    return list(db.scalars(select(Event).order_by(Event.created_at.desc(), Event.id.desc())))


def get_similar_events(db: Session, event: Event, limit: int = 3) -> list[Event]:
    """Other events sharing at least one tag with ``event``, at most ``limit`` of them."""
    if limit <= 0:
        return []
    wanted = set(event.tags or [])
    if not wanted:
        return []

    similar: list[Event] = []
    for other in db.scalars(select(Event).where(Event.id != event.id).order_by(Event.id)):
        if wanted.intersection(other.tags or []):
            similar.append(other)
            if len(similar) >= limit:
                break
    return similar


def get_similar_events_by_slug(db: Session, slug: str, limit: int = 3) -> list[Event] | None:
    event = get_event_by_slug(db, slug)
    if event is None:
        return None
    return get_similar_events(db, event, limit)
