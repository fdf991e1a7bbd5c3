import logging

from celery import shared_task
from django.db import DatabaseError

from apps.notifications.services.notification_service import NotificationService

logger = logging.getLogger("monitoring")


@shared_task(bind=True, max_retries=3, default_retry_delay=30)
def send_notification_task(self, recipient_id, notification_type, context):
    """
    Store a notification for a user outside the request cycle.

    Args:
        recipient_id: Primary key of the recipient.
        notification_type: Notification type, e.g. "OFFER_ACCEPTED".
        context: JSON-serializable payload for the message.
    """
    try:
        notification = NotificationService.send_notification(
            recipient_id, notification_type, context
        )
    except DatabaseError as exc:
        logger.warning(
            f"Storing {notification_type} notification for user {recipient_id} failed, retrying: {exc}"
        )
        raise self.retry(exc=exc)
    return notification.id
