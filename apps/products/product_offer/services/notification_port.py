import logging
from typing import Any, Dict, Protocol

from django.conf import settings

from apps.notifications.tasks import send_notification_task

logger = logging.getLogger("offer_performance")


class OfferNotificationType:
    OFFER_RECEIVED = "OFFER_RECEIVED"
    OFFER_ACCEPTED = "OFFER_ACCEPTED"
    OFFER_REJECTED = "OFFER_REJECTED"
    OFFER_COUNTER = "OFFER_COUNTER"
    OFFER_CANCELLED = "OFFER_CANCELLED"
    OFFER_EXPIRED = "OFFER_EXPIRED"


# Fallback title/message used when no NotificationTemplate exists for the type
DEFAULT_MESSAGES = {
    OfferNotificationType.OFFER_RECEIVED: (
        "New offer received",
        "You received an offer of {amount}",
    ),
    OfferNotificationType.OFFER_ACCEPTED: (
        "Offer accepted",
        "Your offer of {amount} was accepted",
    ),
    OfferNotificationType.OFFER_REJECTED: (
        "Offer declined",
        "Your offer of {amount} was declined",
    ),
    OfferNotificationType.OFFER_COUNTER: (
        "Counter-offer received",
        "The seller proposed {amount}",
    ),
    OfferNotificationType.OFFER_CANCELLED: (
        "Offer withdrawn",
        "An offer of {amount} was withdrawn",
    ),
    OfferNotificationType.OFFER_EXPIRED: (
        "Offer expired",
        "The offer of {amount} has expired",
    ),
}

# OFFER_SETTINGS toggle consulted for each notification type
NOTIFY_TOGGLES = {
    OfferNotificationType.OFFER_RECEIVED: "NOTIFY_SELLER_NEW_OFFER",
    OfferNotificationType.OFFER_ACCEPTED: "NOTIFY_BUYER_RESPONSE",
    OfferNotificationType.OFFER_REJECTED: "NOTIFY_BUYER_RESPONSE",
    OfferNotificationType.OFFER_COUNTER: "NOTIFY_BUYER_RESPONSE",
    OfferNotificationType.OFFER_CANCELLED: "NOTIFY_SELLER_CANCELLATION",
    OfferNotificationType.OFFER_EXPIRED: "NOTIFY_EXPIRATION",
}


class NotificationPort(Protocol):
    """Transport-agnostic sink for offer notifications."""

    def dispatch(
        self, notification_type: str, recipient_id, payload: Dict[str, Any]
    ) -> None: ...


def build_offer_payload(offer, counterpart) -> Dict[str, Any]:
    """JSON-safe payload describing `offer` from the recipient's point of view."""
    return {
        "offer_id": str(offer.id),
        "product_id": offer.product_id,
        "product_title": offer.product.title,
        "amount": str(offer.amount),
        "status": offer.status,
        "buyer_id": offer.buyer_id,
        "buyer_name": offer.buyer.get_full_name(),
        "seller_id": offer.seller_id,
        "seller_name": offer.seller.get_full_name(),
        "counterpart_id": counterpart.pk,
        "counterpart_name": counterpart.get_full_name(),
    }


class CeleryNotificationDispatcher:
    """Queues a persisted notification through the notifications app."""

    def is_enabled(self, notification_type: str) -> bool:
        toggle = NOTIFY_TOGGLES.get(notification_type)
        if toggle is None:
            return True
        return getattr(settings, "OFFER_SETTINGS", {}).get(toggle, True)

    def dispatch(self, notification_type, recipient_id, payload):
        if not self.is_enabled(notification_type):
            logger.debug(f"{notification_type} notifications disabled; skipping")
            return

        title, message = DEFAULT_MESSAGES.get(
            notification_type, (notification_type, notification_type)
        )
        context = dict(payload)
        context.setdefault("title", title)
        context.setdefault("message", message.format(amount=payload.get("amount")))

        send_notification_task.delay(recipient_id, notification_type, context)
        logger.info(
            f"Queued {notification_type} notification for user {recipient_id} "
            f"(offer {payload.get('offer_id')})"
        )
