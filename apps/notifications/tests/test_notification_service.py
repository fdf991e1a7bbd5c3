import pytest
from django.contrib.auth import get_user_model

from apps.notifications.models import Notification, NotificationTemplate
from apps.notifications.services.notification_service import NotificationService
from apps.notifications.tasks import send_notification_task

User = get_user_model()


@pytest.fixture
def recipient(db):
    return User.objects.create_user(
        email="recipient@example.com", password="testpassword123", first_name="Rae"
    )


@pytest.mark.django_db
class TestNotificationService:
    def test_offer_templates_are_installed(self):
        names = set(NotificationTemplate.objects.values_list("name", flat=True))

        assert {
            "OFFER_RECEIVED",
            "OFFER_ACCEPTED",
            "OFFER_REJECTED",
            "OFFER_COUNTER",
            "OFFER_CANCELLED",
            "OFFER_EXPIRED",
        } <= names

    def test_renders_template(self, recipient):
        notification = NotificationService.send_notification(
            recipient.id,
            "OFFER_ACCEPTED",
            {"amount": "130.00", "product_title": "Vintage Camera"},
        )

        assert notification.title == "Offer accepted"
        assert notification.message == 'Your offer of 130.00 for "Vintage Camera" was accepted'
        assert notification.data["amount"] == "130.00"
        assert notification.is_read is False

    def test_missing_placeholder_is_left_verbatim(self, recipient):
        notification = NotificationService.send_notification(
            recipient.id, "OFFER_EXPIRED", {"amount": "10.00"}
        )

        assert notification.message == 'The offer of 10.00 for "{product_title}" has expired'

    def test_falls_back_to_context_without_template(self, recipient):
        notification = NotificationService.send_notification(
            recipient.id,
            "SYSTEM_NOTICE",
            {"title": "Maintenance", "message": "Back soon"},
        )

        assert notification.title == "Maintenance"
        assert notification.message == "Back soon"

    def test_task_stores_notification(self, recipient):
        result = send_notification_task.delay(
            recipient.id, "OFFER_RECEIVED", {"amount": "5.00", "buyer_name": "Bea"}
        )

        notification = Notification.objects.get(pk=result.get())
        assert notification.recipient == recipient
        assert notification.notification_type == "OFFER_RECEIVED"
