from datetime import timedelta
from decimal import Decimal

import pytest
from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.utils import timezone
from rest_framework.test import APIClient

from apps.products.product_base.models import Product
from apps.products.product_offer.models import Offer, OfferStatus
from apps.products.product_offer.services import OfferNegotiationService

User = get_user_model()


class RecordingNotifier:
    """Notification port that keeps dispatched notifications in memory."""

    def __init__(self):
        self.sent = []

    def dispatch(self, notification_type, recipient_id, payload):
        self.sent.append((notification_type, recipient_id, payload))

    def types_for(self, user):
        return [t for t, recipient_id, _ in self.sent if recipient_id == user.pk]


@pytest.fixture(autouse=True)
def clear_cache():
    cache.clear()
    yield
    cache.clear()


@pytest.fixture
def api_client():
    return APIClient()


@pytest.fixture
def seller(db):
    return User.objects.create_user(
        email="seller@example.com",
        password="testpassword123",
        first_name="Sam",
        last_name="Seller",
    )


@pytest.fixture
def buyer(db):
    return User.objects.create_user(
        email="buyer@example.com",
        password="testpassword123",
        first_name="Bea",
        last_name="Buyer",
    )


@pytest.fixture
def other_buyer(db):
    return User.objects.create_user(
        email="other.buyer@example.com",
        password="testpassword123",
        first_name="Cal",
        last_name="Customer",
    )


@pytest.fixture
def outsider(db):
    return User.objects.create_user(
        email="outsider@example.com", password="testpassword123"
    )


@pytest.fixture
def make_product(seller):
    def _make_product(**kwargs):
        defaults = {
            "seller": seller,
            "title": "Vintage Camera",
            "price": Decimal("150.00"),
            "status": Product.ProductsStatus.ACTIVE,
        }
        defaults.update(kwargs)
        return Product.objects.create(**defaults)

    return _make_product


@pytest.fixture
def product(make_product):
    return make_product()


@pytest.fixture
def make_offer(product):
    """Insert an offer row directly, bypassing the negotiation rules."""

    def _make_offer(buyer, amount="100.00", **kwargs):
        target = kwargs.pop("product", product)
        defaults = {
            "product": target,
            "buyer": buyer,
            "seller": target.seller,
            "amount": Decimal(amount),
            "status": OfferStatus.PENDING,
            "expires_at": timezone.now() + timedelta(days=7),
        }
        defaults.update(kwargs)
        return Offer.objects.create(**defaults)

    return _make_offer


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def service(notifier):
    return OfferNegotiationService(notifier=notifier)
