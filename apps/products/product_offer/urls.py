from django.urls import include, path
from rest_framework.routers import DefaultRouter

from apps.products.product_offer.views import OfferViewSet

router = DefaultRouter()
router.register(r"offers", OfferViewSet, basename="offer")

urlpatterns = [
    path("", include(router.urls)),
]

"""
Endpoints:

POST /offers/                 place an offer      {"product_id": 1, "amount": "100.00", "message": "..."}
GET  /offers/sent/            offers made as buyer      ?status=PENDING
GET  /offers/received/        offers on own products    ?status=PENDING
GET  /offers/stats/           sent/received counters and acceptance rates
GET  /offers/{id}/            one offer (buyer or seller only)
POST /offers/{id}/accept/     seller accepts a PENDING offer; product becomes sold
POST /offers/{id}/reject/     seller rejects             {"reason": "..."}
POST /offers/{id}/counter/    seller counters            {"amount": "130.00", "message": "..."}
POST /offers/{id}/cancel/     buyer withdraws an active offer
"""
