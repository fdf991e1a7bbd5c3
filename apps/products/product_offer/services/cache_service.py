import logging

from django.conf import settings
from django.core.cache import cache

from apps.core.utils.cache_manager import CacheKeyManager, CacheManager

logger = logging.getLogger("monitoring")


def _offer_setting(name, default):
    return getattr(settings, "OFFER_SETTINGS", {}).get(name, default)


def _generation_key() -> str:
    return CacheKeyManager.make_key("offer", "generation")


class OfferCacheInvalidator:
    """
    Keeps the cached offer views (sent/received list pages, per-user stats)
    and the product detail entry consistent with the database after a
    mutation.
    """

    def invalidate_offer_views(self) -> bool:
        pattern = CacheKeyManager.make_pattern("offer", "namespace")
        return CacheManager.invalidate_namespace(
            pattern, generation_key=_generation_key()
        )

    def invalidate_product(self, product_id) -> bool:
        return CacheManager.invalidate_key("product_base", "detail", id=product_id)

    def on_offer_changed(self, product_id=None, product_status_changed=False):
        """Invalidate everything a single offer mutation can make stale."""
        self.invalidate_offer_views()
        if product_status_changed and product_id is not None:
            self.invalidate_product(product_id)


class OfferCacheService:
    """Read-through helpers for the cached offer views."""

    @staticmethod
    def list_key(role: str, user_id, page, page_size, status=None) -> str:
        key_name = "sent_list" if role == "buyer" else "received_list"
        return CacheKeyManager.make_key(
            "offer",
            key_name,
            gen=CacheManager.get_generation(_generation_key()),
            user_id=user_id,
            page=page,
            page_size=page_size,
            status=status or "all",
        )

    @staticmethod
    def stats_key(user_id) -> str:
        return CacheKeyManager.make_key(
            "offer",
            "stats",
            gen=CacheManager.get_generation(_generation_key()),
            user_id=user_id,
        )

    @staticmethod
    def get(key):
        try:
            return cache.get(key)
        except Exception as e:
            logger.error(f"Cache read failed for {key} - {e}")
            return None

    @staticmethod
    def set(key, value, timeout):
        try:
            cache.set(key, value, timeout)
        except Exception as e:
            logger.error(f"Cache write failed for {key} - {e}")

    @staticmethod
    def list_timeout() -> int:
        return _offer_setting("LIST_CACHE_TIMEOUT", 120)

    @staticmethod
    def stats_timeout() -> int:
        return _offer_setting("STATS_CACHE_TIMEOUT", 300)
