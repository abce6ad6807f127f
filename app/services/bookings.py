import logging
import re

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import DuplicateBookingError, EventNotFoundError, ValidationError
from app.models.books import Booking
from app.models.events import Event

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
# largest id a signed 64-bit integer column can hold
MAX_EVENT_ID = 2**63 - 1


def parse_event_id(event_id) -> int:
    """Accept a positive int or a string of digits; anything else is not an event id."""
    if isinstance(event_id, bool):
        raise EventNotFoundError(f"Invalid event ID format: {event_id}")
    if isinstance(event_id, int):
        parsed = event_id
    elif isinstance(event_id, str) and event_id.strip().isascii() and event_id.strip().isdigit():
        parsed = int(event_id.strip())
    else:
        raise EventNotFoundError(f"Invalid event ID format: {event_id}")
    if parsed < 1 or parsed > MAX_EVENT_ID:
        raise EventNotFoundError(f"Invalid event ID format: {event_id}")
    return parsed


def normalize_email(email) -> str:
    if not isinstance(email, str) or not email.strip():
        raise ValidationError("Email is required")
    normalized = email.strip().lower()
    if not EMAIL_RE.match(normalized):
        raise ValidationError("Please provide a valid email address")
    return normalized


def create_booking(db: Session, *, event_id, email: str) -> Booking:
    """
    Book ``email`` onto an event.

    The event must exist at write time; bookings have no update path, so this
    check runs on every creation. The unique index on (event_id, email)
    settles concurrent duplicates.
    """
    parsed_id = parse_event_id(event_id)
    if db.get(Event, parsed_id) is None:
        raise EventNotFoundError(f"Event with ID {parsed_id} does not exist")

    normalized = normalize_email(email)

    existing = db.scalar(
        select(Booking.id).where(Booking.event_id == parsed_id, Booking.email == normalized)
    )
    if existing is not None:
        raise DuplicateBookingError(f"{normalized} has already booked this event")

    booking = Booking(event_id=parsed_id, email=normalized)
    db.add(booking)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        raise DuplicateBookingError(f"{normalized} has already booked this event") from e
    db.refresh(booking)
    logger.info("Created booking id=%s event_id=%s", booking.id, parsed_id)
    return booking


def list_bookings_for_event(db: Session, event_id) -> list[Booking]:
    parsed_id = parse_event_id(event_id)
    return list(
        db.scalars(
            select(Booking)
            .where(Booking.event_id == parsed_id)
            .order_by(Booking.created_at.asc(), Booking.id.asc())
        )
    )
