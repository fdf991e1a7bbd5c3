import logging

from django.utils import timezone
from rest_framework import status
from rest_framework.decorators import action
from rest_framework.exceptions import ValidationError
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response

from apps.core.views import BaseViewSet
from apps.products.product_offer.models import Offer
from apps.products.product_offer.schema import (
    ACCEPT_OFFER_SCHEMA,
    CANCEL_OFFER_SCHEMA,
    COUNTER_OFFER_SCHEMA,
    CREATE_OFFER_SCHEMA,
    OFFER_STATS_SCHEMA,
    REJECT_OFFER_SCHEMA,
    RECEIVED_OFFERS_SCHEMA,
    RETRIEVE_OFFER_SCHEMA,
    SENT_OFFERS_SCHEMA,
)
from apps.products.product_offer.serializers import (
    CounterOfferSerializer,
    CreateOfferSerializer,
    OfferSerializer,
    OfferStatsSerializer,
    RejectOfferSerializer,
)
from apps.products.product_offer.services import (
    OfferCacheService,
    OfferNegotiationService,
)
from apps.products.product_offer.utils.filters import OfferFilter
from apps.products.product_offer.utils.rate_limiting import (
    OfferCounterRateThrottle,
    OfferCreateRateThrottle,
    OfferRateThrottle,
)

logger = logging.getLogger("offer_performance")


class OfferViewSet(BaseViewSet):
    """Offer negotiation endpoints for buyers and sellers"""

    serializer_class = OfferSerializer
    permission_classes = [IsAuthenticated]
    throttle_classes = [OfferRateThrottle]

    def get_queryset(self):
        """Users can only see offers they're involved in"""
        if not self.request.user.is_authenticated:
            return Offer.objects.none()
        return (
            Offer.objects.for_participant(self.request.user)
            .select_related("product", "product__seller", "buyer", "seller")
            .prefetch_related("counter_offers")
        )

    def get_throttles(self):
        if self.action == "create":
            return [OfferCreateRateThrottle()]
        return super().get_throttles()

    def get_negotiation_service(self) -> OfferNegotiationService:
        return OfferNegotiationService()

    def _offer_response(self, offer, message, status_code=status.HTTP_200_OK):
        serializer = OfferSerializer(offer, context={"request": self.request})
        return self.success_response(
            data=serializer.data, message=message, status_code=status_code
        )

    def _status_filter(self, request):
        filterset = OfferFilter(request.query_params, queryset=Offer.objects.none())
        if not filterset.is_valid():
            raise ValidationError(filterset.errors)
        return filterset.form.cleaned_data.get("status") or None

    def _cached_list(self, request, role, fetch):
        start_time = timezone.now()
        status_filter = self._status_filter(request)
        paginator = self.paginator
        page_number = request.query_params.get(paginator.page_query_param, 1)
        page_size = paginator.get_page_size(request)

        cache_key = OfferCacheService.list_key(
            role, request.user.pk, page_number, page_size, status_filter
        )
        data = OfferCacheService.get(cache_key)
        if data is None:
            queryset = fetch(request.user, status_filter).prefetch_related(
                "counter_offers"
            )
            page = self.paginate_queryset(queryset)
            serializer = OfferSerializer(
                page, many=True, context={"request": request}
            )
            data = self.get_paginated_response(serializer.data).data
            OfferCacheService.set(cache_key, data, OfferCacheService.list_timeout())

        duration = (timezone.now() - start_time).total_seconds() * 1000
        logger.info(
            f"{role.title()} offers for user {request.user.pk} fetched in {duration:.2f}ms"
        )
        return Response(data)

    @CREATE_OFFER_SCHEMA
    def create(self, request):
        """Place an offer on a product."""
        serializer = CreateOfferSerializer(data=request.data)
        if not serializer.is_valid():
            return self.error_response(
                message=serializer.errors, status_code=status.HTTP_400_BAD_REQUEST
            )

        offer = self.get_negotiation_service().create_offer(
            product_id=serializer.validated_data["product_id"],
            buyer=request.user,
            amount=serializer.validated_data["amount"],
            message=serializer.validated_data.get("message"),
        )
        return self._offer_response(
            offer, "Offer sent successfully", status_code=status.HTTP_201_CREATED
        )

    @RETRIEVE_OFFER_SCHEMA
    def retrieve(self, request, pk=None):
        offer = self.get_negotiation_service().get_offer(pk, request.user)
        return self._offer_response(offer, "Offer retrieved successfully")

    @SENT_OFFERS_SCHEMA
    @action(detail=False, methods=["get"], url_path="sent")
    def sent(self, request):
        """Offers the current user has made as a buyer."""
        return self._cached_list(
            request, "buyer", OfferNegotiationService.list_sent_offers
        )

    @RECEIVED_OFFERS_SCHEMA
    @action(detail=False, methods=["get"], url_path="received")
    def received(self, request):
        """Offers made on the current user's products."""
        return self._cached_list(
            request, "seller", OfferNegotiationService.list_received_offers
        )

    @OFFER_STATS_SCHEMA
    @action(detail=False, methods=["get"], url_path="stats")
    def stats(self, request):
        stats = OfferNegotiationService.get_offer_stats(request.user)
        return self.success_response(
            data=OfferStatsSerializer(stats).data,
            message="Offer statistics retrieved successfully",
        )

    @ACCEPT_OFFER_SCHEMA
    @action(detail=True, methods=["post"], url_path="accept")
    def accept(self, request, pk=None):
        offer = self.get_negotiation_service().accept_offer(pk, request.user)
        return self._offer_response(offer, "Offer accepted; the product is now sold")

    @REJECT_OFFER_SCHEMA
    @action(detail=True, methods=["post"], url_path="reject")
    def reject(self, request, pk=None):
        serializer = RejectOfferSerializer(data=request.data)
        if not serializer.is_valid():
            return self.error_response(
                message=serializer.errors, status_code=status.HTTP_400_BAD_REQUEST
            )

        offer = self.get_negotiation_service().reject_offer(
            pk, request.user, reason=serializer.validated_data.get("reason")
        )
        return self._offer_response(offer, "Offer rejected")

    @COUNTER_OFFER_SCHEMA
    @action(
        detail=True,
        methods=["post"],
        url_path="counter",
        throttle_classes=[OfferCounterRateThrottle],
    )
    def counter(self, request, pk=None):
        """Respond to a pending offer with a different price."""
        serializer = CounterOfferSerializer(data=request.data)
        if not serializer.is_valid():
            return self.error_response(
                message=serializer.errors, status_code=status.HTTP_400_BAD_REQUEST
            )

        counter_offer = self.get_negotiation_service().counter_offer(
            pk,
            request.user,
            amount=serializer.validated_data["amount"],
            message=serializer.validated_data.get("message"),
        )
        return self._offer_response(
            counter_offer, "Counter-offer sent", status_code=status.HTTP_201_CREATED
        )

    @CANCEL_OFFER_SCHEMA
    @action(detail=True, methods=["post"], url_path="cancel")
    def cancel(self, request, pk=None):
        offer = self.get_negotiation_service().cancel_offer(pk, request.user)
        return self._offer_response(offer, "Offer cancelled")
