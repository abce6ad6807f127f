from datetime import datetime

from pydantic import BaseModel


class BookRequest(BaseModel):
    # kept loose so that malformed ids reach the store's own check
    event_id: int | str
    email: str


class BookingOut(BaseModel):
    id: int
    event_id: int
    email: str
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class BookingResponse(BaseModel):
    booking: BookingOut
    message: str
