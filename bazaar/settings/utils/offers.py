# Offer negotiation settings
OFFER_SETTINGS = {
    # Business Rules
    "EXPIRY_DAYS": 7,  # An offer (or counter-offer) can be accepted for 7 days
    # Caching
    "LIST_CACHE_TIMEOUT": 120,  # 2 minutes for sent/received lists
    "STATS_CACHE_TIMEOUT": 300,  # 5 minutes for per-user stats
    # Expiry sweep
    "EXPIRE_SWEEP_BATCH_SIZE": 500,
    # Notifications
    "NOTIFY_SELLER_NEW_OFFER": True,
    "NOTIFY_BUYER_RESPONSE": True,
    "NOTIFY_SELLER_CANCELLATION": True,
    "NOTIFY_EXPIRATION": True,
}
