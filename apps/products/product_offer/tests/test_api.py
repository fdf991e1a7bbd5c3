from datetime import timedelta
from unittest.mock import patch

import pytest
from django.urls import reverse
from django.utils import timezone
from rest_framework import status
from rest_framework.pagination import PageNumberPagination

from apps.notifications.models import Notification
from apps.products.product_base.models import Product
from apps.products.product_offer.models import Offer, OfferStatus
from apps.products.product_offer.utils.rate_limiting import (
    OfferCounterRateThrottle,
    OfferCreateRateThrottle,
)

pytestmark = pytest.mark.django_db


def offer_url(name, offer):
    return reverse(f"offer-{name}", kwargs={"pk": offer.pk})


class TestCreateOfferEndpoint:
    def test_create_offer(self, api_client, product, buyer, seller):
        api_client.force_authenticate(user=buyer)

        response = api_client.post(
            reverse("offer-list"),
            {"product_id": product.id, "amount": "100.00", "message": "Cash today"},
            format="json",
        )

        assert response.status_code == status.HTTP_201_CREATED
        assert response.data["status"] == "success"
        data = response.data["data"]
        assert data["status"] == OfferStatus.PENDING
        assert data["amount"] == "100.00"
        assert data["buyer"]["id"] == buyer.id
        assert data["seller"]["id"] == seller.id
        assert data["product"]["id"] == product.id
        assert Offer.objects.count() == 1

    def test_seller_receives_notification(self, api_client, product, buyer, seller):
        api_client.force_authenticate(user=buyer)

        api_client.post(
            reverse("offer-list"),
            {"product_id": product.id, "amount": "100.00"},
            format="json",
        )

        notification = Notification.objects.get(recipient=seller)
        assert notification.notification_type == "OFFER_RECEIVED"
        assert notification.data["amount"] == "100.00"
        assert "100.00" in notification.message

    def test_requires_authentication(self, api_client, product):
        response = api_client.post(
            reverse("offer-list"),
            {"product_id": product.id, "amount": "100.00"},
            format="json",
        )

        assert response.status_code in (
            status.HTTP_401_UNAUTHORIZED,
            status.HTTP_403_FORBIDDEN,
        )
        assert not Offer.objects.exists()

    def test_invalid_amount(self, api_client, product, buyer):
        api_client.force_authenticate(user=buyer)

        response = api_client.post(
            reverse("offer-list"),
            {"product_id": product.id, "amount": "-1.00"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["status"] == "error"
        assert "amount" in response.data["message"]

    def test_unknown_product(self, api_client, buyer):
        api_client.force_authenticate(user=buyer)

        response = api_client.post(
            reverse("offer-list"),
            {"product_id": 424242, "amount": "100.00"},
            format="json",
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["code"] == "product_not_found"

    def test_own_product(self, api_client, product, seller):
        api_client.force_authenticate(user=seller)

        response = api_client.post(
            reverse("offer-list"),
            {"product_id": product.id, "amount": "100.00"},
            format="json",
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "self_offer"

    def test_duplicate_offer_conflicts(self, api_client, product, buyer, make_offer):
        make_offer(buyer)
        api_client.force_authenticate(user=buyer)

        response = api_client.post(
            reverse("offer-list"),
            {"product_id": product.id, "amount": "120.00"},
            format="json",
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data == {
            "status": "error",
            "status_code": 409,
            "message": "You already have an active offer on this product",
            "code": "duplicate_offer",
        }


class TestOfferActionEndpoints:
    def test_accept(self, api_client, product, buyer, other_buyer, seller, make_offer):
        offer = make_offer(buyer)
        sibling = make_offer(other_buyer, "90.00")
        api_client.force_authenticate(user=seller)

        response = api_client.post(offer_url("accept", offer))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["status"] == OfferStatus.ACCEPTED
        sibling.refresh_from_db()
        product.refresh_from_db()
        assert sibling.status == OfferStatus.REJECTED
        assert product.status == Product.ProductsStatus.SOLD
        assert Notification.objects.filter(
            recipient=other_buyer, notification_type="OFFER_REJECTED"
        ).exists()

    def test_accept_expired(self, api_client, buyer, seller, make_offer):
        offer = make_offer(buyer, expires_at=timezone.now() - timedelta(hours=1))
        api_client.force_authenticate(user=seller)

        response = api_client.post(offer_url("accept", offer))

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "offer_expired"

    def test_buyer_cannot_accept(self, api_client, buyer, make_offer):
        offer = make_offer(buyer)
        api_client.force_authenticate(user=buyer)

        response = api_client.post(offer_url("accept", offer))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["code"] == "not_seller"

    def test_reject_with_reason(self, api_client, buyer, seller, make_offer):
        offer = make_offer(buyer)
        api_client.force_authenticate(user=seller)

        response = api_client.post(
            offer_url("reject", offer), {"reason": "Too low"}, format="json"
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["status"] == OfferStatus.REJECTED
        assert response.data["data"]["message"] == "Too low"

    def test_counter(self, api_client, buyer, seller, make_offer):
        offer = make_offer(buyer)
        api_client.force_authenticate(user=seller)

        response = api_client.post(
            offer_url("counter", offer), {"amount": "130.00"}, format="json"
        )

        assert response.status_code == status.HTTP_201_CREATED
        child = response.data["data"]
        assert child["status"] == OfferStatus.PENDING
        assert child["amount"] == "130.00"
        assert child["parent_offer"]["id"] == str(offer.id)
        assert child["parent_offer"]["status"] == OfferStatus.COUNTER_OFFERED

    def test_counter_requires_amount(self, api_client, buyer, seller, make_offer):
        offer = make_offer(buyer)
        api_client.force_authenticate(user=seller)

        response = api_client.post(offer_url("counter", offer), {}, format="json")

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        offer.refresh_from_db()
        assert offer.status == OfferStatus.PENDING

    def test_counter_on_frozen_parent(self, api_client, buyer, seller, make_offer):
        offer = make_offer(buyer)
        api_client.force_authenticate(user=seller)
        api_client.post(
            offer_url("counter", offer), {"amount": "130.00"}, format="json"
        )

        response = api_client.post(
            offer_url("counter", offer), {"amount": "125.00"}, format="json"
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data["code"] == "offer_countered"

    def test_cancel(self, api_client, buyer, seller, make_offer):
        offer = make_offer(buyer)
        api_client.force_authenticate(user=buyer)

        response = api_client.post(offer_url("cancel", offer))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["status"] == OfferStatus.CANCELLED
        assert Notification.objects.filter(
            recipient=seller, notification_type="OFFER_CANCELLED"
        ).exists()

    def test_seller_cannot_cancel(self, api_client, buyer, seller, make_offer):
        offer = make_offer(buyer)
        api_client.force_authenticate(user=seller)

        response = api_client.post(offer_url("cancel", offer))

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data["code"] == "not_buyer"

    def test_unknown_offer(self, api_client, seller):
        api_client.force_authenticate(user=seller)

        response = api_client.post(
            reverse(
                "offer-accept",
                kwargs={"pk": "00000000-0000-0000-0000-000000000000"},
            )
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data["code"] == "offer_not_found"


class TestOfferReadEndpoints:
    def test_retrieve(self, api_client, buyer, seller, make_offer):
        offer = make_offer(buyer)
        api_client.force_authenticate(user=seller)

        response = api_client.get(offer_url("detail", offer))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["id"] == str(offer.id)
        assert response.data["data"]["counter_offers"] == []
        assert response["X-Response-Time"].endswith("s")

    def test_retrieve_forbidden_for_outsider(
        self, api_client, buyer, outsider, make_offer
    ):
        offer = make_offer(buyer)
        api_client.force_authenticate(user=outsider)

        response = api_client.get(offer_url("detail", offer))

        assert response.status_code == status.HTTP_403_FORBIDDEN

    def test_sent_and_received(
        self, api_client, buyer, other_buyer, seller, make_offer
    ):
        mine = make_offer(buyer)
        make_offer(other_buyer)

        api_client.force_authenticate(user=buyer)
        sent = api_client.get(reverse("offer-sent"))
        assert sent.status_code == status.HTTP_200_OK
        assert sent.data["count"] == 1
        assert sent.data["results"][0]["id"] == str(mine.id)

        api_client.force_authenticate(user=seller)
        received = api_client.get(reverse("offer-received"))
        assert received.data["count"] == 2

    def test_status_filter(self, api_client, buyer, make_offer):
        make_offer(buyer, status=OfferStatus.REJECTED)
        pending = make_offer(buyer)
        api_client.force_authenticate(user=buyer)

        response = api_client.get(reverse("offer-sent"), {"status": "PENDING"})

        assert [o["id"] for o in response.data["results"]] == [str(pending.id)]

    def test_unknown_status_filter(self, api_client, buyer):
        api_client.force_authenticate(user=buyer)

        response = api_client.get(reverse("offer-sent"), {"status": "WON"})

        assert response.status_code == status.HTTP_400_BAD_REQUEST

    def test_list_is_refreshed_after_mutation(self, api_client, product, buyer, seller):
        api_client.force_authenticate(user=seller)
        assert api_client.get(reverse("offer-received")).data["count"] == 0

        api_client.force_authenticate(user=buyer)
        api_client.post(
            reverse("offer-list"),
            {"product_id": product.id, "amount": "100.00"},
            format="json",
        )

        api_client.force_authenticate(user=seller)
        assert api_client.get(reverse("offer-received")).data["count"] == 1

    def test_lists_are_paged_and_cached_per_page(
        self, api_client, make_product, buyer
    ):
        api_client.force_authenticate(user=buyer)
        for i in range(3):
            target = make_product(title=f"Lens {i}")
            api_client.post(
                reverse("offer-list"),
                {"product_id": target.id, "amount": "10.00"},
                format="json",
            )

        with patch.object(PageNumberPagination, "page_size", 2):
            first = api_client.get(reverse("offer-sent"))
            second = api_client.get(reverse("offer-sent"), {"page": 2})
            first_again = api_client.get(reverse("offer-sent"))

        assert first.data["count"] == 3
        assert len(first.data["results"]) == 2
        assert first.data["next"] is not None
        assert len(second.data["results"]) == 1
        first_ids = {o["id"] for o in first.data["results"]}
        assert second.data["results"][0]["id"] not in first_ids
        assert first_again.data == first.data

    def test_stats(self, api_client, buyer, make_offer):
        make_offer(buyer, status=OfferStatus.ACCEPTED)
        make_offer(buyer)
        api_client.force_authenticate(user=buyer)

        response = api_client.get(reverse("offer-stats"))

        assert response.status_code == status.HTTP_200_OK
        assert response.data["data"]["sent_total"] == 2
        assert response.data["data"]["sent_acceptance_rate"] == 50.0
        assert response.data["data"]["received_acceptance_rate"] == 0.0


class TestOfferThrottling:
    def test_create_is_rate_limited(self, api_client, make_product, buyer):
        api_client.force_authenticate(user=buyer)
        products = [make_product(title=f"Item {i}") for i in range(3)]

        with patch.object(
            OfferCreateRateThrottle, "THROTTLE_RATES", {"offer_create": "2/hour"}
        ):
            responses = [
                api_client.post(
                    reverse("offer-list"),
                    {"product_id": p.id, "amount": "10.00"},
                    format="json",
                )
                for p in products
            ]

        assert [r.status_code for r in responses] == [201, 201, 429]
        assert responses[-1].data["message"].startswith("Too many offers")
        assert Offer.objects.count() == 2

    def test_counter_is_rate_limited(
        self, api_client, buyer, other_buyer, seller, make_offer
    ):
        offers = [make_offer(buyer), make_offer(other_buyer)]
        api_client.force_authenticate(user=seller)

        with patch.object(
            OfferCounterRateThrottle, "THROTTLE_RATES", {"offer_counter": "1/hour"}
        ):
            first = api_client.post(
                offer_url("counter", offers[0]), {"amount": "130.00"}, format="json"
            )
            second = api_client.post(
                offer_url("counter", offers[1]), {"amount": "130.00"}, format="json"
            )

        assert first.status_code == status.HTTP_201_CREATED
        assert second.status_code == status.HTTP_429_TOO_MANY_REQUESTS
        assert second.data["message"].startswith("Too many counter-offers")
