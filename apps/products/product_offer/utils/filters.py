import django_filters

from apps.products.product_offer.models import Offer, OfferStatus


class OfferFilter(django_filters.FilterSet):
    """Query-string filter for the sent/received offer lists"""

    status = django_filters.ChoiceFilter(choices=OfferStatus.choices)

    class Meta:
        model = Offer
        fields = ["status"]
