import base64
import contextlib
import json
import logging

from fastapi import APIRouter, Depends, File, Form, HTTPException, Query, UploadFile, status
from sqlalchemy.orm import Session

from app.database.db import get_db
from app.schemas.events import EventListResponse, EventResponse
from app.services.events import (
    create_event,
    event_exists_by_title,
    get_event_by_slug,
    get_similar_events_by_slug,
    list_events,
)
from app.services.images import PLACEHOLDER_IMAGE_URL, image_host_configured, upload_image
from app.tasks import retry_event_image_upload_task

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


def _form_list(values: list[str]) -> list[str]:
    # Clients may send repeated fields or a single JSON array string
    if len(values) == 1 and values[0].strip().startswith("["):
        with contextlib.suppress(ValueError):
            decoded = json.loads(values[0])
            if isinstance(decoded, list):
                return [str(v) for v in decoded]
    return values


@router.get("", response_model=EventListResponse)
def get_events(db: Session = Depends(get_db)):
    events = list_events(db)
    return {"events": events, "message": f"{len(events)} events fetched successfully"}


@router.post("", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def post_event(
    title: str = Form(...),
    description: str = Form(...),
    overview: str = Form(...),
    venue: str = Form(...),
    location: str = Form(...),
    date: str = Form(...),
    time: str = Form(...),
    mode: str = Form(...),
    audience: str = Form(...),
    agenda: list[str] = Form(...),
    organizer: str = Form(...),
    tags: list[str] = Form(...),
    image: UploadFile = File(...),
    db: Session = Depends(get_db),
):
    if event_exists_by_title(db, title):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Event with title \"{title}\" already exists",
        )

    content = image.file.read()
    filename = image.filename or "image"
    image_url = upload_image(content, filename)

    event = create_event(
        db,
        {
            "title": title,
            "description": description,
            "overview": overview,
            "venue": venue,
            "location": location,
            "date": date,
            "time": time,
            "mode": mode,
            "audience": audience,
            "agenda": _form_list(agenda),
            "organizer": organizer,
            "tags": _form_list(tags),
            "image": image_url or PLACEHOLDER_IMAGE_URL,
        },
    )

    if image_url is None and content and image_host_configured():
        # best-effort: swap the placeholder once the image host recovers
        try:
            retry_event_image_upload_task.delay(
                event.id, base64.b64encode(content).decode("ascii"), filename
            )
        except Exception as e:
            logger.warning("Could not enqueue image retry for event %s: %s", event.id, e)

    return {"event": event, "message": "Event created successfully"}


@router.get("/{slug}", response_model=EventResponse)
def get_event(slug: str, db: Session = Depends(get_db)):
    event = get_event_by_slug(db, slug)
    if event is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return {"event": event, "message": "Event fetched successfully"}


@router.get("/{slug}/similar", response_model=EventListResponse)
def get_similar(slug: str, limit: int = Query(3, ge=1, le=50), db: Session = Depends(get_db)):
    events = get_similar_events_by_slug(db, slug, limit)
    if events is None:
        raise HTTPException(status_code=404, detail="Event not found")
    return {"events": events, "message": f"{len(events)} similar events fetched successfully"}
