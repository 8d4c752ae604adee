"""
Notification queue.

Auth flows drop email jobs into the ``jobs`` table and move on; delivery
happens later in email_service. Enqueue failures never reach the caller.
"""
import logging

from extensions import db
from models import Job

logger = logging.getLogger(__name__)


class NotificationQueue:
    """Service for queuing outbound notifications."""

    @staticmethod
    def enqueue(kind, recipient, template_data=None):
        """
        Queue an email job.

        Args:
            kind (str): Template name, one of Job.TEMPLATES
            recipient (str): Destination email address
            template_data (dict, optional): Locals for the template

        Returns:
            int: The job id

        Raises:
            ValueError: For an unknown template
            SQLAlchemyError: If the job could not be stored
        """
        if kind not in Job.TEMPLATES:
            raise ValueError(f"Unknown notification template: {kind}")

        job = Job(
            name='email',
            template=kind,
            recipient=recipient,
            data=template_data or {},
        )
        db.session.add(job)
        db.session.commit()
        logger.debug(f"Queued {kind} email job {job.id} for {recipient}")
        return job.id

    @classmethod
    def enqueue_safely(cls, kind, recipient, template_data=None):
        """Fire-and-forget variant of enqueue: logs and returns None on failure."""
        try:
            return cls.enqueue(kind, recipient, template_data)
        except Exception as e:
            db.session.rollback()
            logger.error(f"Failed to queue {kind} email for {recipient}: {e}")
            return None
