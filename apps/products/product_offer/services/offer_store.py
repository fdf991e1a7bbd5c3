import logging
from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional

from django.core.exceptions import ValidationError as DjangoValidationError
from django.db import IntegrityError, transaction
from django.utils import timezone

from apps.products.product_base.models import Product
from apps.products.product_base.services.product_catalog import ProductCatalogService
from apps.products.product_offer.models import (
    ACTIVE_STATUSES,
    Offer,
    OfferStatus,
    offer_expiry_from,
)
from apps.products.product_offer.utils.exceptions import (
    InvalidOfferAction,
    OfferConflict,
    OfferNotFound,
)

logger = logging.getLogger("offer_performance")


@dataclass
class OfferWriteResult:
    """Outcome of one committed offer mutation"""

    offer: Offer
    # Other offers whose status changed in the same transaction
    affected: List[Offer] = field(default_factory=list)
    child: Optional[Offer] = None
    product_status_changed: bool = False


class OfferStore:
    """
    Transactional persistence for offers.

    Every mutating method runs in a single `transaction.atomic()` block, locks
    the product row before any offer row, and re-checks the state it depends
    on before writing. A re-check that fails means a concurrent request won
    the race and raises `OfferConflict`.
    """

    base_queryset = Offer.objects.select_related("product", "buyer", "seller")

    def get(self, offer_id) -> Offer:
        try:
            return self.base_queryset.get(pk=offer_id)
        except (Offer.DoesNotExist, DjangoValidationError, ValueError, TypeError):
            raise OfferNotFound()

    def _lock_offer(self, offer_id) -> Offer:
        try:
            return Offer.objects.select_for_update().get(pk=offer_id)
        except Offer.DoesNotExist:
            raise OfferNotFound()

    def _lock_product_of(self, offer_id) -> Product:
        """Lock the product row an offer belongs to. Writers take it first."""
        product_id = (
            Offer.objects.filter(pk=offer_id)
            .values_list("product_id", flat=True)
            .first()
        )
        if product_id is None:
            raise OfferNotFound()
        return ProductCatalogService.get_product(product_id, for_update=True)

    @staticmethod
    def _require_status(offer: Offer, allowed, action: str):
        if offer.status not in allowed:
            raise OfferConflict(
                f"Offer {offer.id} is now {offer.status} and can no longer be {action}",
                code="offer_conflict",
            )

    @staticmethod
    def _require_active_product(product: Product):
        if product.status != Product.ProductsStatus.ACTIVE:
            raise OfferConflict(
                f"Product {product.pk} is now {product.status}",
                code="product_inactive",
            )

    def _settle_chain(self, offer: Offer, statuses, new_status, now) -> List[Offer]:
        """
        Move the other members of `offer`'s negotiation chain that are in
        `statuses` to `new_status`. A chain always shares buyer and product.
        """
        members = list(
            Offer.objects.select_for_update()
            .filter(
                buyer_id=offer.buyer_id,
                product_id=offer.product_id,
                status__in=statuses,
            )
            .exclude(pk=offer.pk)
        )
        if members:
            Offer.objects.filter(pk__in=[m.pk for m in members]).update(
                status=new_status, responded_at=now, updated_at=now
            )
            for member in members:
                member.status = new_status
                member.responded_at = now
        return members

    def create(
        self, product_id, buyer, amount: Decimal, message: Optional[str] = None
    ) -> OfferWriteResult:
        start_time = timezone.now()
        try:
            with transaction.atomic():
                product = ProductCatalogService.get_product(product_id, for_update=True)
                if product.status != Product.ProductsStatus.ACTIVE:
                    raise InvalidOfferAction(
                        f"Product {product.pk} is not available for offers",
                        code="product_inactive",
                    )
                if (
                    Offer.objects.active()
                    .filter(buyer_id=buyer.pk, product_id=product.pk)
                    .exists()
                ):
                    raise OfferConflict(
                        "You already have an active offer on this product",
                        code="duplicate_offer",
                    )

                now = timezone.now()
                offer = Offer.objects.create(
                    product=product,
                    buyer=buyer,
                    seller_id=product.seller_id,
                    amount=amount,
                    message=message or None,
                    status=OfferStatus.PENDING,
                    expires_at=offer_expiry_from(now),
                )
        except IntegrityError as e:
            logger.warning(
                f"Offer insert for buyer {buyer.pk} on product {product_id} hit a constraint: {e}"
            )
            raise OfferConflict(
                "You already have an active offer on this product",
                code="duplicate_offer",
            )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Offer {offer.id} stored in {duration:.2f}ms")
        return OfferWriteResult(offer=self.get(offer.pk))

    def accept(self, offer_id) -> OfferWriteResult:
        """
        Accept a PENDING offer, mark the product SOLD and reject every other
        active offer on the product, all in one commit.
        """
        start_time = timezone.now()
        with transaction.atomic():
            product = self._lock_product_of(offer_id)
            offer = self._lock_offer(offer_id)
            self._require_status(offer, [OfferStatus.PENDING], "accepted")
            self._require_active_product(product)

            now = timezone.now()
            if now > offer.expires_at:
                raise InvalidOfferAction(
                    f"Offer {offer.id} expired at {offer.expires_at.isoformat()}",
                    code="offer_expired",
                )

            offer.status = OfferStatus.ACCEPTED
            offer.responded_at = now
            offer.save(update_fields=["status", "responded_at", "updated_at"])

            ProductCatalogService.set_product_status(
                product.pk, Product.ProductsStatus.SOLD
            )

            siblings = Offer.objects.filter(
                product_id=product.pk, status__in=ACTIVE_STATUSES
            ).exclude(pk=offer.pk)
            swept = list(siblings.select_for_update())
            if swept:
                siblings.update(
                    status=OfferStatus.REJECTED, responded_at=now, updated_at=now
                )
                for sibling in swept:
                    sibling.status = OfferStatus.REJECTED
                    sibling.responded_at = now

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Offer {offer.id} accepted, {len(swept)} sibling offers rejected in {duration:.2f}ms"
        )
        return OfferWriteResult(
            offer=self.get(offer.pk),
            affected=self._reload(swept),
            product_status_changed=True,
        )

    def reject(self, offer_id, reason: Optional[str] = None) -> OfferWriteResult:
        start_time = timezone.now()
        with transaction.atomic():
            self._lock_product_of(offer_id)
            offer = self._lock_offer(offer_id)
            self._require_status(offer, [OfferStatus.PENDING], "rejected")

            now = timezone.now()
            offer.status = OfferStatus.REJECTED
            offer.responded_at = now
            update_fields = ["status", "responded_at", "updated_at"]
            if reason:
                offer.message = reason
                update_fields.append("message")
            offer.save(update_fields=update_fields)

            ancestors = self._settle_chain(
                offer, [OfferStatus.COUNTER_OFFERED], OfferStatus.REJECTED, now
            )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(f"Offer {offer.id} rejected in {duration:.2f}ms")
        return OfferWriteResult(offer=self.get(offer.pk), affected=ancestors)

    def counter(
        self, offer_id, seller, amount: Decimal, message: Optional[str] = None
    ) -> OfferWriteResult:
        """
        Freeze a PENDING offer as COUNTER_OFFERED and insert its PENDING child.
        The parent is updated before the child is inserted so the one-pending
        constraint holds at every statement.
        """
        start_time = timezone.now()
        with transaction.atomic():
            product = self._lock_product_of(offer_id)
            parent = self._lock_offer(offer_id)
            self._require_status(parent, [OfferStatus.PENDING], "countered")
            self._require_active_product(product)

            now = timezone.now()
            parent.status = OfferStatus.COUNTER_OFFERED
            parent.responded_at = now
            parent.save(update_fields=["status", "responded_at", "updated_at"])

            child = Offer.objects.create(
                product_id=parent.product_id,
                buyer_id=parent.buyer_id,
                seller=seller,
                amount=amount,
                message=message or None,
                status=OfferStatus.PENDING,
                parent_offer=parent,
                expires_at=offer_expiry_from(now),
            )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Offer {parent.id} countered with {child.id} in {duration:.2f}ms"
        )
        return OfferWriteResult(offer=self.get(parent.pk), child=self.get(child.pk))

    def cancel(self, offer_id) -> OfferWriteResult:
        start_time = timezone.now()
        with transaction.atomic():
            self._lock_product_of(offer_id)
            offer = self._lock_offer(offer_id)
            self._require_status(offer, ACTIVE_STATUSES, "cancelled")

            now = timezone.now()
            offer.status = OfferStatus.CANCELLED
            offer.responded_at = now
            offer.save(update_fields=["status", "responded_at", "updated_at"])

            chain = self._settle_chain(
                offer, ACTIVE_STATUSES, OfferStatus.CANCELLED, now
            )

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"Offer {offer.id} cancelled with {len(chain)} chain members in {duration:.2f}ms"
        )
        return OfferWriteResult(offer=self.get(offer.pk), affected=chain)

    def expire(self, offer_id) -> Optional[OfferWriteResult]:
        """
        Move a PENDING offer past its expiry, and its frozen ancestors, to
        EXPIRED. Returns None when the offer is no longer eligible.
        """
        with transaction.atomic():
            try:
                self._lock_product_of(offer_id)
                offer = self._lock_offer(offer_id)
            except OfferNotFound:
                return None

            now = timezone.now()
            if offer.status != OfferStatus.PENDING or offer.expires_at >= now:
                return None

            offer.status = OfferStatus.EXPIRED
            offer.responded_at = now
            offer.save(update_fields=["status", "responded_at", "updated_at"])

            ancestors = self._settle_chain(
                offer, [OfferStatus.COUNTER_OFFERED], OfferStatus.EXPIRED, now
            )

        return OfferWriteResult(offer=self.get(offer.pk), affected=ancestors)

    def _reload(self, offers: List[Offer]) -> List[Offer]:
        if not offers:
            return []
        return list(self.base_queryset.filter(pk__in=[o.pk for o in offers]))
