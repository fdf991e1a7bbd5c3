# -----------------------------------------------------------------------------
# CENTRALIZED CACHE-KEY TEMPLATES
#
# For each "resource" you want to cache, list every "key name" you might use.
# Use Python-format placeholders for variable parts.
#
# Usage:
#    CacheKeyManager.make_key("offer", "stats", gen=3, user_id=42)
#    -> "offer:3:stats:42"
#
#    CacheKeyManager.make_pattern("offer", "namespace")
#    -> "offer:*"
#
# Keys are stored without Django's KEY_PREFIX; the backend applies it.
# The "generation" counter sits outside the namespace it versions.
# -----------------------------------------------------------------------------
CACHE_KEY_TEMPLATES = {
    "product_base": {
        "detail": "product_base:detail:{id}",
    },
    "offer": {
        "generation": "offer_generation",
        # Exact keys
        "sent_list": (
            "offer:{gen}:buyer:{user_id}:page:{page}:size:{page_size}"
            ":status:{status}"
        ),
        "received_list": (
            "offer:{gen}:seller:{user_id}:page:{page}:size:{page_size}"
            ":status:{status}"
        ),
        "stats": "offer:{gen}:stats:{user_id}",
        # Wildcard pattern for invalidation
        "namespace": "offer:*",
    },
}
