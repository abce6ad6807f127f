import base64
import logging

from app.core.celery_config import celery_app
from app.core.config import get_database_url
from app.core.errors import AppError
from app.database.connection import ConnectionManager
from app.models.events import Event
from app.services.events import update_event
from app.services.images import PLACEHOLDER_IMAGE_URL, upload_image

logger = logging.getLogger(__name__)

# The worker process owns its own connection, opened on the first task
connections = ConnectionManager(get_database_url(), pool_pre_ping=True)


@celery_app.task(bind=True)
def retry_event_image_upload_task(self, event_id: int, image_b64: str, filename: str):
    """Re-upload the image of an event that was saved with the placeholder URL."""
    db = connections.connect().session_factory()
    try:
        event = db.get(Event, event_id)
        if event is None:
            logger.warning("Event %s vanished before its image could be replaced", event_id)
            return None
        if event.image != PLACEHOLDER_IMAGE_URL:
            return event.image

        url = upload_image(base64.b64decode(image_b64), filename)
        if url is None:
            logger.warning("Retry upload for event %s failed; keeping placeholder", event_id)
            return None

        try:
            update_event(db, event, {"image": url})
        except AppError as e:
            logger.error("Could not store image for event %s: %s", event_id, e)
            return None
        logger.info("Replaced placeholder image for event %s", event_id)
        return url
    finally:
        db.close()
