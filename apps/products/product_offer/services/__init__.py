from .offer_store import OfferStore, OfferWriteResult
from .negotiation_service import OfferNegotiationService
from .cache_service import OfferCacheInvalidator, OfferCacheService
from .notification_port import (
    CeleryNotificationDispatcher,
    NotificationPort,
    OfferNotificationType,
)

__all__ = [
    "OfferStore",
    "OfferWriteResult",
    "OfferNegotiationService",
    "OfferCacheInvalidator",
    "OfferCacheService",
    "CeleryNotificationDispatcher",
    "NotificationPort",
    "OfferNotificationType",
]
