from datetime import timedelta

import pytest
from django.test import override_settings
from django.utils import timezone

from apps.notifications.models import Notification
from apps.products.product_offer.models import OfferStatus
from apps.products.product_offer.tasks import expire_stale_offers

pytestmark = pytest.mark.django_db


def _past(**kwargs):
    return timezone.now() - timedelta(**kwargs)


class TestExpireStaleOffers:
    def test_expires_only_stale_pending_offers(
        self, make_offer, buyer, other_buyer, outsider
    ):
        stale = make_offer(buyer, expires_at=_past(hours=2))
        fresh = make_offer(other_buyer)
        finished = make_offer(
            outsider, status=OfferStatus.REJECTED, expires_at=_past(days=3)
        )

        assert expire_stale_offers() == 1

        for offer in (stale, fresh, finished):
            offer.refresh_from_db()
        assert stale.status == OfferStatus.EXPIRED
        assert stale.responded_at is not None
        assert fresh.status == OfferStatus.PENDING
        assert finished.status == OfferStatus.REJECTED

    def test_expires_frozen_ancestors(self, make_offer, buyer):
        parent = make_offer(buyer, status=OfferStatus.COUNTER_OFFERED)
        child = make_offer(
            buyer, "130.00", parent_offer=parent, expires_at=_past(minutes=5)
        )

        expire_stale_offers()

        parent.refresh_from_db()
        child.refresh_from_db()
        assert parent.status == OfferStatus.EXPIRED
        assert child.status == OfferStatus.EXPIRED

    def test_notifies_both_parties(self, make_offer, buyer, seller):
        make_offer(buyer, expires_at=_past(hours=1))

        expire_stale_offers()

        assert Notification.objects.filter(
            recipient=buyer, notification_type="OFFER_EXPIRED"
        ).exists()
        assert Notification.objects.filter(
            recipient=seller, notification_type="OFFER_EXPIRED"
        ).exists()

    @override_settings(OFFER_SETTINGS={"EXPIRE_SWEEP_BATCH_SIZE": 1})
    def test_processes_every_batch(self, make_offer, make_product, buyer):
        for i in range(3):
            make_offer(
                buyer,
                product=make_product(title=f"Lot {i}"),
                expires_at=_past(hours=1),
            )

        assert expire_stale_offers() == 3

    def test_nothing_to_do(self, make_offer, buyer):
        make_offer(buyer)

        assert expire_stale_offers() == 0
