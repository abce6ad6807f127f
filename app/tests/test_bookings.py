"""
Test booking service functions.
"""
import pytest
from sqlalchemy.orm import Session

from app.core.errors import DuplicateBookingError, EventNotFoundError, ValidationError
from app.models.books import Booking
from app.services.bookings import create_booking, list_bookings_for_event
from app.services.events import create_event


@pytest.fixture
def event(db_session: Session, event_fields):
    return create_event(db_session, event_fields)


class TestBookingService:
    """Test booking creation rules."""

    def test_create_booking_success(self, db_session: Session, event):
        booking = create_booking(db_session, event_id=event.id, email="  Ada@Example.COM ")

        assert booking.id is not None
        assert booking.event_id == event.id
        assert booking.email == "ada@example.com"
        assert booking.created_at is not None

    def test_create_booking_accepts_string_id(self, db_session: Session, event):
        booking = create_booking(db_session, event_id=str(event.id), email="ada@example.com")
        assert booking.event_id == event.id

    def test_create_booking_unknown_event(self, db_session: Session):
        with pytest.raises(EventNotFoundError, match="does not exist"):
            create_booking(db_session, event_id=99999, email="ada@example.com")

    @pytest.mark.parametrize("bad_id", ["abc", "", "-1", 0, -3, True, None, "1.5"])
    def test_create_booking_malformed_event_id(self, db_session: Session, bad_id):
        with pytest.raises(EventNotFoundError, match="Invalid event ID format"):
            create_booking(db_session, event_id=bad_id, email="ada@example.com")

    @pytest.mark.parametrize("bad_email", ["", "ada", "ada@example", "ada @example.com", "@example.com"])
    def test_create_booking_invalid_email(self, db_session: Session, event, bad_email):
        with pytest.raises(ValidationError):
            create_booking(db_session, event_id=event.id, email=bad_email)
        assert db_session.query(Booking).count() == 0

    def test_duplicate_booking_rejected(self, db_session: Session, event):
        create_booking(db_session, event_id=event.id, email="ada@example.com")

        with pytest.raises(DuplicateBookingError):
            create_booking(db_session, event_id=event.id, email="ADA@example.com ")

        assert db_session.query(Booking).count() == 1

    def test_same_email_different_events(self, db_session: Session, event, event_fields):
        other = create_event(db_session, {**event_fields, "title": "Another Event"})

        create_booking(db_session, event_id=event.id, email="ada@example.com")
        create_booking(db_session, event_id=other.id, email="ada@example.com")

        assert db_session.query(Booking).count() == 2

    def test_duplicate_caught_by_unique_index(self, db_session: Session, event, monkeypatch):
        """A duplicate that slips past the pre-check is stopped by the (event, email) index."""
        db_session.add(Booking(event_id=event.id, email="ada@example.com"))
        db_session.commit()

        with monkeypatch.context() as mp:
            # the duplicate lookup is the only scalar() call in create_booking
            mp.setattr(db_session, "scalar", lambda *args, **kwargs: None)
            with pytest.raises(DuplicateBookingError):
                create_booking(db_session, event_id=event.id, email="ada@example.com")

        assert db_session.query(Booking).count() == 1

    def test_list_bookings_for_event(self, db_session: Session, event):
        for email in ["a@example.com", "b@example.com", "c@example.com"]:
            create_booking(db_session, event_id=event.id, email=email)

        bookings = list_bookings_for_event(db_session, event.id)

        assert [b.email for b in bookings] == ["a@example.com", "b@example.com", "c@example.com"]
        assert all(b.event.title == "PyCon Berlin 2025" for b in bookings)
