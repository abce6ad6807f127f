"""
Test Celery tasks.
"""
import base64
from unittest.mock import patch

from sqlalchemy.orm import Session

from app.models.events import Event
from app.services.events import create_event
from app.services.images import PLACEHOLDER_IMAGE_URL
from app.tasks import retry_event_image_upload_task

IMAGE_B64 = base64.b64encode(b"imagebytes").decode("ascii")
HOSTED_URL = "https://res.cloudinary.com/demo/a.png"


class TestCeleryTasks:
    """Test Celery task functionality."""

    def test_retry_upload_replaces_placeholder(self, db_session: Session, connections, event_fields):
        event = create_event(db_session, {**event_fields, "image": PLACEHOLDER_IMAGE_URL})
        slug, date, time = event.slug, event.date, event.time

        with patch("app.tasks.connections", connections), \
                patch("app.tasks.upload_image", return_value=HOSTED_URL) as upload:
            # Call the task function directly (not through Celery)
            result = retry_event_image_upload_task.run(event.id, IMAGE_B64, "a.png")

        assert result == HOSTED_URL
        upload.assert_called_once_with(b"imagebytes", "a.png")

        db_session.expire_all()
        stored = db_session.get(Event, event.id)
        assert stored.image == HOSTED_URL
        assert (stored.slug, stored.date, stored.time) == (slug, date, time)

    def test_retry_upload_failure_keeps_placeholder(self, db_session: Session, connections, event_fields):
        event = create_event(db_session, {**event_fields, "image": PLACEHOLDER_IMAGE_URL})

        with patch("app.tasks.connections", connections), \
                patch("app.tasks.upload_image", return_value=None):
            assert retry_event_image_upload_task.run(event.id, IMAGE_B64, "a.png") is None

        db_session.expire_all()
        assert db_session.get(Event, event.id).image == PLACEHOLDER_IMAGE_URL

    def test_retry_upload_for_missing_event(self, connections):
        with patch("app.tasks.connections", connections), \
                patch("app.tasks.upload_image", return_value=HOSTED_URL):
            # Should not raise an exception
            assert retry_event_image_upload_task.run(99999, IMAGE_B64, "a.png") is None

    def test_retry_upload_keeps_image_already_replaced(self, db_session: Session, connections, event_fields):
        event = create_event(db_session, event_fields)

        with patch("app.tasks.connections", connections), \
                patch("app.tasks.upload_image", return_value=HOSTED_URL) as upload:
            result = retry_event_image_upload_task.run(event.id, IMAGE_B64, "a.png")

        assert result == event_fields["image"]
        upload.assert_not_called()

    def test_celery_app_configuration(self):
        """Test that Celery app is properly configured."""
        from app.core.celery_config import celery_app

        assert celery_app.conf.task_serializer == "json"
        assert celery_app.conf.result_serializer == "json"
        assert "json" in celery_app.conf.accept_content
        assert celery_app.conf.task_track_started is True

    def test_retry_task_is_registered(self):
        """Test that the retry task is registered with Celery."""
        from app.core.celery_config import celery_app

        assert "app.tasks.retry_event_image_upload_task" in celery_app.tasks
