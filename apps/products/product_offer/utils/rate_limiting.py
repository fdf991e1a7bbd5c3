from apps.core.throttle import BaseCacheThrottle


class OfferRateThrottle(BaseCacheThrottle):
    """General rate limit for offer reads and responses"""

    scope = "offer"


class OfferCreateRateThrottle(BaseCacheThrottle):
    """Rate limit for buyers placing new offers"""

    scope = "offer_create"


class OfferCounterRateThrottle(BaseCacheThrottle):
    """Rate limit for sellers issuing counter-offers"""

    scope = "offer_counter"
