import logging
from decimal import Decimal, InvalidOperation
from typing import Dict, Optional

from django.db.models import Count, Q
from django.utils import timezone

from apps.products.product_base.models import Product
from apps.products.product_base.services.product_catalog import ProductCatalogService
from apps.products.product_offer.models import ACTIVE_STATUSES, Offer, OfferStatus
from apps.products.product_offer.services.cache_service import (
    OfferCacheInvalidator,
    OfferCacheService,
)
from apps.products.product_offer.services.notification_port import (
    CeleryNotificationDispatcher,
    OfferNotificationType,
    build_offer_payload,
)
from apps.products.product_offer.services.offer_store import (
    OfferStore,
    OfferWriteResult,
)
from apps.products.product_offer.utils.exceptions import (
    InvalidOfferAction,
    OfferPermissionDenied,
)

logger = logging.getLogger("offer_performance")


def _acceptance_rate(counts) -> float:
    if not counts["total"]:
        return 0.0
    return round(counts["accepted"] / counts["total"] * 100, 1)


class OfferNegotiationService:
    """
    Drives an offer from creation through optional counter-offers to a
    terminal outcome.

    Each operation validates the actor, the offer state and timing, hands the
    write to `OfferStore` as one transaction, and only then runs cache
    invalidation and notifications. Those side effects are best effort: a
    failure is logged and never turns a committed operation into an error.
    """

    def __init__(self, store=None, cache_invalidator=None, notifier=None):
        self.store = store or OfferStore()
        self.cache_invalidator = cache_invalidator or OfferCacheInvalidator()
        self.notifier = notifier or CeleryNotificationDispatcher()

    # ------------------------------------------------------------------
    # Validation helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _validate_amount(amount) -> Decimal:
        try:
            value = Decimal(str(amount))
        except (InvalidOperation, TypeError, ValueError):
            raise InvalidOfferAction("Amount must be a number", code="invalid_amount")
        if not value.is_finite() or value <= 0:
            raise InvalidOfferAction(
                "Amount must be greater than zero", code="invalid_amount"
            )
        return value

    @staticmethod
    def _require_seller(offer: Offer, user):
        if offer.seller_id != user.pk:
            raise OfferPermissionDenied(
                "Only the seller of this offer can respond to it", code="not_seller"
            )

    @staticmethod
    def _require_buyer(offer: Offer, user):
        if offer.buyer_id != user.pk:
            raise OfferPermissionDenied(
                "Only the buyer who made this offer can cancel it", code="not_buyer"
            )

    @staticmethod
    def _require_pending(offer: Offer, action: str):
        if offer.status == OfferStatus.PENDING:
            return
        if offer.status == OfferStatus.COUNTER_OFFERED:
            child = (
                offer.counter_offers.order_by("-created_at")
                .values_list("id", flat=True)
                .first()
            )
            raise InvalidOfferAction(
                f"Offer {offer.id} was countered and cannot be {action}; "
                f"act on counter-offer {child} instead",
                code="offer_countered",
            )
        raise InvalidOfferAction(
            f"Offer {offer.id} is {offer.status} and cannot be {action}",
            code="invalid_status",
        )

    @staticmethod
    def _require_active_product(product: Product):
        if product.status != Product.ProductsStatus.ACTIVE:
            raise InvalidOfferAction(
                f"Product {product.pk} is {product.status}, not active",
                code="product_inactive",
            )

    # ------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------

    def _invalidate(self, offer: Offer, product_status_changed=False):
        try:
            self.cache_invalidator.on_offer_changed(
                product_id=offer.product_id,
                product_status_changed=product_status_changed,
            )
        except Exception as e:
            logger.error(f"Cache invalidation failed after offer {offer.id} - {e}")

    def _notify(self, notification_type: str, offer: Offer, recipient, counterpart):
        try:
            self.notifier.dispatch(
                notification_type,
                recipient.pk,
                build_offer_payload(offer, counterpart),
            )
        except Exception as e:
            logger.error(
                f"Failed to dispatch {notification_type} for offer {offer.id} "
                f"to user {recipient.pk} - {e}"
            )

    def _log_duration(self, action: str, offer: Offer, start_time):
        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Offer {offer.id} {action} in {duration:.2f}ms")

    # ------------------------------------------------------------------
    # Write operations
    # ------------------------------------------------------------------

    def create_offer(
        self, product_id, buyer, amount, message: Optional[str] = None
    ) -> Offer:
        """Place a PENDING offer from `buyer` on an active product."""
        start_time = timezone.now()

        product = ProductCatalogService.get_product(product_id)
        self._require_active_product(product)
        if product.seller_id == buyer.pk:
            raise InvalidOfferAction(
                "You cannot make an offer on your own product", code="self_offer"
            )
        value = self._validate_amount(amount)

        result = self.store.create(product.pk, buyer, value, message)
        offer = result.offer

        self._invalidate(offer)
        self._notify(OfferNotificationType.OFFER_RECEIVED, offer, offer.seller, buyer)
        self._log_duration("created", offer, start_time)
        return offer

    def accept_offer(self, offer_id, acting_user) -> Offer:
        """
        Accept a PENDING offer. The product becomes SOLD and every other
        active offer on it is rejected in the same commit.
        """
        start_time = timezone.now()

        offer = self.store.get(offer_id)
        self._require_seller(offer, acting_user)
        self._require_pending(offer, "accepted")
        self._require_active_product(offer.product)
        if timezone.now() > offer.expires_at:
            raise InvalidOfferAction(
                f"Offer {offer.id} expired at {offer.expires_at.isoformat()}",
                code="offer_expired",
            )

        result = self.store.accept(offer.pk)
        offer = result.offer

        self._invalidate(offer, product_status_changed=result.product_status_changed)
        self._notify(
            OfferNotificationType.OFFER_ACCEPTED, offer, offer.buyer, acting_user
        )
        # One notification per outbid buyer; the winner may own a swept ancestor
        notified_buyers = {offer.buyer_id}
        for swept in result.affected:
            if swept.buyer_id in notified_buyers:
                continue
            notified_buyers.add(swept.buyer_id)
            self._notify(
                OfferNotificationType.OFFER_REJECTED, swept, swept.buyer, swept.seller
            )
        self._log_duration("accepted", offer, start_time)
        return offer

    def reject_offer(
        self, offer_id, acting_user, reason: Optional[str] = None
    ) -> Offer:
        start_time = timezone.now()

        offer = self.store.get(offer_id)
        self._require_seller(offer, acting_user)
        self._require_pending(offer, "rejected")

        result = self.store.reject(offer.pk, reason)
        offer = result.offer

        self._invalidate(offer)
        self._notify(
            OfferNotificationType.OFFER_REJECTED, offer, offer.buyer, acting_user
        )
        self._log_duration("rejected", offer, start_time)
        return offer

    def counter_offer(
        self, offer_id, acting_user, amount, message: Optional[str] = None
    ) -> Offer:
        """Freeze the offer and return the new PENDING counter-offer."""
        start_time = timezone.now()

        offer = self.store.get(offer_id)
        self._require_seller(offer, acting_user)
        self._require_pending(offer, "countered")
        self._require_active_product(offer.product)
        value = self._validate_amount(amount)

        result: OfferWriteResult = self.store.counter(
            offer.pk, acting_user, value, message
        )
        child = result.child

        self._invalidate(child)
        self._notify(
            OfferNotificationType.OFFER_COUNTER, child, child.buyer, acting_user
        )
        self._log_duration("countered", result.offer, start_time)
        return child

    def cancel_offer(self, offer_id, acting_user) -> Offer:
        """Withdraw an active offer; expired offers may still be cancelled."""
        start_time = timezone.now()

        offer = self.store.get(offer_id)
        self._require_buyer(offer, acting_user)
        if offer.status not in ACTIVE_STATUSES:
            raise InvalidOfferAction(
                f"Offer {offer.id} is {offer.status} and cannot be cancelled",
                code="invalid_status",
            )

        result = self.store.cancel(offer.pk)
        offer = result.offer

        self._invalidate(offer)
        self._notify(
            OfferNotificationType.OFFER_CANCELLED, offer, offer.seller, acting_user
        )
        self._log_duration("cancelled", offer, start_time)
        return offer

    def expire_offer(self, offer_id) -> Optional[Offer]:
        """
        Materialize EXPIRED for a stale PENDING offer. Caches are left to the
        caller so a sweep can invalidate once per run.
        """
        result = self.store.expire(offer_id)
        if result is None:
            return None

        offer = result.offer
        for recipient, counterpart in (
            (offer.buyer, offer.seller),
            (offer.seller, offer.buyer),
        ):
            self._notify(
                OfferNotificationType.OFFER_EXPIRED, offer, recipient, counterpart
            )
        return offer

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_offer(self, offer_id, user) -> Offer:
        offer = self.store.get(offer_id)
        if user.pk not in (offer.buyer_id, offer.seller_id):
            raise OfferPermissionDenied(
                "You are not a participant in this offer", code="not_participant"
            )
        return offer

    @staticmethod
    def list_sent_offers(user, status: Optional[str] = None):
        queryset = Offer.objects.filter(buyer=user).select_related(
            "product", "product__seller", "buyer", "seller"
        )
        if status:
            queryset = queryset.filter(status=status)
        return queryset.order_by("-created_at", "-id")

    @staticmethod
    def list_received_offers(user, status: Optional[str] = None):
        queryset = Offer.objects.filter(seller=user).select_related(
            "product", "product__seller", "buyer", "seller"
        )
        if status:
            queryset = queryset.filter(status=status)
        return queryset.order_by("-created_at", "-id")

    @staticmethod
    def get_offer_stats(user) -> Dict[str, float]:
        """Sent/received totals for the user, cached for a few minutes."""
        cache_key = OfferCacheService.stats_key(user.pk)
        cached = OfferCacheService.get(cache_key)
        if cached is not None:
            return cached

        start_time = timezone.now()
        counters = {
            "total": Count("id"),
            "accepted": Count("id", filter=Q(status=OfferStatus.ACCEPTED)),
            "pending": Count("id", filter=Q(status__in=ACTIVE_STATUSES)),
        }
        sent = Offer.objects.filter(buyer=user).aggregate(**counters)
        received = Offer.objects.filter(seller=user).aggregate(**counters)

        stats = {
            "sent_total": sent["total"],
            "sent_accepted": sent["accepted"],
            "sent_pending": sent["pending"],
            "received_total": received["total"],
            "received_accepted": received["accepted"],
            "received_pending": received["pending"],
            "sent_acceptance_rate": _acceptance_rate(sent),
            "received_acceptance_rate": _acceptance_rate(received),
        }

        OfferCacheService.set(cache_key, stats, OfferCacheService.stats_timeout())

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Offer stats for user {user.pk} computed in {duration:.2f}ms")
        return stats
