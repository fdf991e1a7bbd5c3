import logging

from celery import shared_task
from django.conf import settings
from django.utils import timezone

from apps.products.product_offer.models import Offer, OfferStatus
from apps.products.product_offer.services import (
    OfferCacheInvalidator,
    OfferNegotiationService,
)

logger = logging.getLogger("offer_performance")


@shared_task
def expire_stale_offers():
    """
    Move PENDING offers past their expiry (and their frozen ancestors) to
    EXPIRED. Accept still checks expiry itself, so a late run is harmless.
    """
    start_time = timezone.now()
    batch_size = getattr(settings, "OFFER_SETTINGS", {}).get(
        "EXPIRE_SWEEP_BATCH_SIZE", 500
    )

    service = OfferNegotiationService()
    expired_count = 0
    skipped = set()

    while True:
        stale_ids = list(
            Offer.objects.filter(
                status=OfferStatus.PENDING, expires_at__lt=timezone.now()
            )
            .exclude(pk__in=skipped)
            .order_by("expires_at")
            .values_list("id", flat=True)[:batch_size]
        )
        if not stale_ids:
            break

        for offer_id in stale_ids:
            try:
                offer = service.expire_offer(offer_id)
            except Exception as e:
                logger.error(f"Failed to expire offer {offer_id} - {e}")
                offer = None
            if offer is None:
                skipped.add(offer_id)
            else:
                expired_count += 1

    if expired_count:
        OfferCacheInvalidator().invalidate_offer_views()

    duration = (timezone.now() - start_time).total_seconds()
    logger.info(f"Expired {expired_count} offers in {duration:.2f} seconds")
    return expired_count
