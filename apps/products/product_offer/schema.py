from drf_spectacular.utils import (
    OpenApiParameter,
    OpenApiResponse,
    OpenApiTypes,
    extend_schema,
)

from apps.products.product_offer.models import OfferStatus
from apps.products.product_offer.serializers import (
    CounterOfferSerializer,
    CreateOfferSerializer,
    OfferSerializer,
    OfferStatsSerializer,
    RejectOfferSerializer,
)

OFFER_ID_PARAMETER = OpenApiParameter(
    name="id",
    description="UUID of the Offer",
    required=True,
    type=OpenApiTypes.UUID,
    location=OpenApiParameter.PATH,
)

STATUS_PARAMETER = OpenApiParameter(
    name="status",
    description="Only return offers in this status",
    required=False,
    type=str,
    enum=OfferStatus.values,
)

COMMON_ERRORS = {
    400: OpenApiResponse(description="The offer cannot take this action"),
    403: OpenApiResponse(description="User is not the required party"),
    404: OpenApiResponse(description="Offer or product not found"),
    409: OpenApiResponse(description="The offer changed concurrently"),
}

CREATE_OFFER_SCHEMA = extend_schema(
    summary="Make an offer",
    description="Place a PENDING offer on an active product the user does not own",
    request=CreateOfferSerializer,
    responses={201: OfferSerializer, **COMMON_ERRORS},
    tags=["Offers"],
)

RETRIEVE_OFFER_SCHEMA = extend_schema(
    summary="Get an offer",
    parameters=[OFFER_ID_PARAMETER],
    responses={200: OfferSerializer, 403: COMMON_ERRORS[403], 404: COMMON_ERRORS[404]},
    tags=["Offers"],
)

SENT_OFFERS_SCHEMA = extend_schema(
    summary="List sent offers",
    description="Offers made by the current user as a buyer, newest first",
    parameters=[STATUS_PARAMETER],
    responses={200: OfferSerializer(many=True)},
    tags=["Offers"],
)

RECEIVED_OFFERS_SCHEMA = extend_schema(
    summary="List received offers",
    description="Offers made on the current user's products, newest first",
    parameters=[STATUS_PARAMETER],
    responses={200: OfferSerializer(many=True)},
    tags=["Offers"],
)

OFFER_STATS_SCHEMA = extend_schema(
    summary="Offer statistics",
    responses={200: OfferStatsSerializer},
    tags=["Offers"],
)

ACCEPT_OFFER_SCHEMA = extend_schema(
    summary="Accept an offer",
    description=(
        "Seller accepts a PENDING offer. The product is marked sold and every "
        "other active offer on it is rejected in the same transaction."
    ),
    parameters=[OFFER_ID_PARAMETER],
    request=None,
    responses={200: OfferSerializer, **COMMON_ERRORS},
    tags=["Offers"],
)

REJECT_OFFER_SCHEMA = extend_schema(
    summary="Reject an offer",
    parameters=[OFFER_ID_PARAMETER],
    request=RejectOfferSerializer,
    responses={200: OfferSerializer, **COMMON_ERRORS},
    tags=["Offers"],
)

COUNTER_OFFER_SCHEMA = extend_schema(
    summary="Counter an offer",
    description="Seller proposes a new amount; returns the new PENDING counter-offer",
    parameters=[OFFER_ID_PARAMETER],
    request=CounterOfferSerializer,
    responses={201: OfferSerializer, **COMMON_ERRORS},
    tags=["Offers"],
)

CANCEL_OFFER_SCHEMA = extend_schema(
    summary="Cancel an offer",
    description="Buyer withdraws an active offer together with its counter-offer chain",
    parameters=[OFFER_ID_PARAMETER],
    request=None,
    responses={200: OfferSerializer, **COMMON_ERRORS},
    tags=["Offers"],
)
