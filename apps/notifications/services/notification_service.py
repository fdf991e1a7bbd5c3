import logging
from typing import Any, Dict, Optional

from apps.notifications.models import Notification, NotificationTemplate

logger = logging.getLogger("monitoring")


class _TemplateContext(dict):
    """Leaves unknown placeholders untouched instead of raising KeyError."""

    def __missing__(self, key):
        return "{" + key + "}"


class NotificationService:
    """
    A centralized service for handling all notification-related operations.
    """

    @staticmethod
    def render(notification_type: str, context: Dict[str, Any]) -> Dict[str, str]:
        """
        Resolve the title and message for a notification.

        A NotificationTemplate named after the notification type wins; otherwise
        the caller-supplied ``title``/``message`` context entries are used.
        """
        template = NotificationTemplate.objects.filter(name=notification_type).first()
        if template is not None:
            values = _TemplateContext(context)
            return {
                "title": template.subject.format_map(values),
                "message": template.body.format_map(values),
            }
        return {
            "title": context.get("title", ""),
            "message": context.get("message", notification_type),
        }

    @staticmethod
    def send_notification(
        recipient_id, notification_type: str, context: Dict[str, Any]
    ) -> Optional[Notification]:
        """
        Persist a notification for the recipient.

        Args:
            recipient_id: Primary key of the user who should receive it.
            notification_type: Type of notification (maps to a NotificationTemplate).
            context: JSON-serializable data for the message, stored on the row.
        """
        rendered = NotificationService.render(notification_type, context)
        notification = Notification.objects.create(
            recipient_id=recipient_id,
            title=rendered["title"],
            message=rendered["message"],
            notification_type=notification_type,
            data=context,
        )
        logger.info(
            f"Notification {notification.id} ({notification_type}) stored for user {recipient_id}"
        )
        return notification
