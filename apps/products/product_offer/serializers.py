from decimal import Decimal

from django.utils import timezone
from rest_framework import serializers

from apps.core.serializers import (
    ProductSummarySerializer,
    TimestampedModelSerializer,
    UserShortSerializer,
)
from apps.products.product_offer.models import Offer, OfferStatus


class OfferSummarySerializer(serializers.ModelSerializer):
    """Compact offer used for chain links (parent and counter-offers)"""

    class Meta:
        model = Offer
        fields = ["id", "amount", "status", "created_at"]


class OfferSerializer(TimestampedModelSerializer):
    """Main serializer for offers"""

    product = ProductSummarySerializer(read_only=True)
    buyer = UserShortSerializer(read_only=True)
    seller = UserShortSerializer(read_only=True)
    parent_offer = OfferSummarySerializer(read_only=True)
    counter_offers = OfferSummarySerializer(many=True, read_only=True)

    formatted_amount = serializers.SerializerMethodField()
    status_display = serializers.CharField(source="get_status_display", read_only=True)
    is_expired = serializers.SerializerMethodField()
    time_remaining = serializers.SerializerMethodField()

    class Meta:
        model = Offer
        fields = [
            "id",
            "product",
            "buyer",
            "seller",
            "amount",
            "formatted_amount",
            "message",
            "status",
            "status_display",
            "parent_offer",
            "counter_offers",
            "expires_at",
            "is_expired",
            "time_remaining",
            "responded_at",
            "created_at",
            "updated_at",
        ]

    def get_formatted_amount(self, obj) -> str:
        return f"${obj.amount:,.2f}"

    def get_is_expired(self, obj) -> bool:
        return obj.status == OfferStatus.EXPIRED or (
            obj.status == OfferStatus.PENDING and obj.is_expired
        )

    def get_time_remaining(self, obj) -> str | None:
        """Human readable time left to accept a pending offer"""
        if obj.status != OfferStatus.PENDING:
            return None
        now = timezone.now()
        if now >= obj.expires_at:
            return "Expired"
        diff = obj.expires_at - now
        if diff.days > 0:
            return f"{diff.days} day{'s' if diff.days > 1 else ''} remaining"
        elif diff.seconds > 3600:
            hours = diff.seconds // 3600
            return f"{hours} hour{'s' if hours > 1 else ''} remaining"
        else:
            minutes = diff.seconds // 60
            return f"{minutes} minute{'s' if minutes != 1 else ''} remaining"


class CreateOfferSerializer(serializers.Serializer):
    """Serializer for placing an offer"""

    product_id = serializers.IntegerField(min_value=1)
    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        max_value=Decimal("99999999.99"),
    )
    message = serializers.CharField(
        max_length=1000, required=False, allow_blank=True, allow_null=True
    )

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError("Amount must be greater than zero")
        return value


class CounterOfferSerializer(serializers.Serializer):
    """Serializer for a seller's counter-offer"""

    amount = serializers.DecimalField(
        max_digits=10,
        decimal_places=2,
        max_value=Decimal("99999999.99"),
    )
    message = serializers.CharField(
        max_length=1000, required=False, allow_blank=True, allow_null=True
    )

    def validate_amount(self, value):
        if value <= 0:
            raise serializers.ValidationError(
                "Counter amount must be greater than zero"
            )
        return value


class RejectOfferSerializer(serializers.Serializer):
    reason = serializers.CharField(
        max_length=1000, required=False, allow_blank=True, allow_null=True
    )


class OfferStatsSerializer(serializers.Serializer):
    """Serializer for a user's offer statistics"""

    sent_total = serializers.IntegerField()
    sent_accepted = serializers.IntegerField()
    sent_pending = serializers.IntegerField()
    received_total = serializers.IntegerField()
    received_accepted = serializers.IntegerField()
    received_pending = serializers.IntegerField()
    sent_acceptance_rate = serializers.FloatField()
    received_acceptance_rate = serializers.FloatField()
