from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException, NotFound, PermissionDenied

from apps.products.product_base.utils.exceptions import ProductNotFound

__all__ = [
    "OfferNotFound",
    "ProductNotFound",
    "OfferPermissionDenied",
    "OfferConflict",
    "InvalidOfferAction",
]


class OfferNotFound(NotFound):
    default_detail = _("Offer not found")
    default_code = "offer_not_found"


class OfferPermissionDenied(PermissionDenied):
    default_detail = _("You are not allowed to act on this offer")
    default_code = "offer_forbidden"


class OfferConflict(APIException):
    status_code = status.HTTP_409_CONFLICT
    default_detail = _("The offer was changed by another request")
    default_code = "offer_conflict"


class InvalidOfferAction(APIException):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("This action is not allowed for the offer")
    default_code = "invalid_offer_action"
