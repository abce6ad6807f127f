from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.schemas.books import BookingResponse, BookRequest
from app.services.bookings import create_booking

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
def book_event(payload: BookRequest, db: Session = Depends(get_db)):
    booking = create_booking(db, event_id=payload.event_id, email=payload.email)
    return {"booking": booking, "message": "Booking created successfully"}
