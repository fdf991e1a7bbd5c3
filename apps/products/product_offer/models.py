import uuid
from datetime import timedelta

from django.conf import settings
from django.db import models
from django.utils import timezone

from apps.core.models import BaseModel


class OfferStatus(models.TextChoices):
    PENDING = "PENDING", "Pending"
    COUNTER_OFFERED = "COUNTER_OFFERED", "Counter Offered"
    ACCEPTED = "ACCEPTED", "Accepted"
    REJECTED = "REJECTED", "Rejected"
    CANCELLED = "CANCELLED", "Cancelled"
    EXPIRED = "EXPIRED", "Expired"


ACTIVE_STATUSES = (OfferStatus.PENDING, OfferStatus.COUNTER_OFFERED)


def offer_expiry_from(now):
    days = getattr(settings, "OFFER_SETTINGS", {}).get("EXPIRY_DAYS", 7)
    return now + timedelta(days=days)


def default_offer_expiry():
    return offer_expiry_from(timezone.now())


class OfferQuerySet(models.QuerySet):
    def active(self):
        return self.filter(status__in=ACTIVE_STATUSES)

    def for_participant(self, user):
        return self.filter(models.Q(buyer=user) | models.Q(seller=user))


class Offer(BaseModel):
    """A buyer's proposed price for a product, or a seller's counter to one."""

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    product = models.ForeignKey(
        "product_base.Product", on_delete=models.CASCADE, related_name="offers"
    )
    buyer = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="sent_offers"
    )
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="received_offers",
    )
    amount = models.DecimalField(max_digits=10, decimal_places=2)
    message = models.TextField(blank=True, null=True)
    status = models.CharField(
        max_length=20, choices=OfferStatus.choices, default=OfferStatus.PENDING
    )
    parent_offer = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="counter_offers",
    )
    expires_at = models.DateTimeField(default=default_offer_expiry)
    responded_at = models.DateTimeField(null=True, blank=True)

    objects = OfferQuerySet.as_manager()

    class Meta:
        db_table = "product_offer"
        ordering = ["-created_at"]
        verbose_name = "Offer"
        verbose_name_plural = "Offers"
        indexes = [
            models.Index(
                fields=["product", "status"], name="product_offer_prod_status_idx"
            ),
            models.Index(
                fields=["buyer", "status"], name="product_offer_buyer_status_idx"
            ),
            models.Index(
                fields=["seller", "status"], name="product_offer_sell_status_idx"
            ),
            models.Index(
                fields=["status", "expires_at"], name="product_offer_expiry_idx"
            ),
        ]
        constraints = [
            models.CheckConstraint(
                condition=models.Q(amount__gt=0), name="product_offer_amount_positive"
            ),
            models.CheckConstraint(
                condition=~models.Q(buyer=models.F("seller")),
                name="product_offer_buyer_not_seller",
            ),
            models.UniqueConstraint(
                fields=["buyer", "product"],
                condition=models.Q(status="PENDING"),
                name="product_offer_one_pending_per_buyer",
            ),
        ]

    def __str__(self):
        return f"Offer {self.id} - {self.amount} on {self.product_id} ({self.status})"

    @property
    def is_expired(self) -> bool:
        return timezone.now() > self.expires_at
