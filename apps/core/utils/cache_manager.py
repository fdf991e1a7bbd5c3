import logging

from django.core.cache import cache

from .cache_key_manager import CacheKeyManager

logger = logging.getLogger("monitoring")


class CacheManager:
    """
    Centralized, best-effort invalidation of cache keys/namespaces,
    driven by settings.CACHE_KEY_TEMPLATES.

    A namespace carries a generation number that is embedded in every key of
    that namespace. Bumping the generation retires all of its keys at once on
    any backend; on django-redis the retired keys are also deleted eagerly.

    Every method swallows and logs cache errors: the cache is a read-side
    optimisation and must never fail the write that triggered invalidation.
    """

    @staticmethod
    def _delete_pattern(pattern: str) -> int:
        """
        Delete every key matching `pattern` where the backend supports it.

        django-redis exposes `delete_pattern` (SCAN + DEL, prefix aware). Other
        backends cannot enumerate keys; their retired entries simply expire.
        """
        delete_pattern = getattr(cache, "delete_pattern", None)
        if delete_pattern is None:
            logger.debug(f"Cache backend has no pattern deletes; skipped '{pattern}'")
            return 0
        return delete_pattern(pattern) or 0

    @staticmethod
    def get_generation(generation_key: str) -> int:
        """Current generation of a namespace, 0 until first bumped."""
        try:
            return cache.get(generation_key) or 0
        except Exception as e:
            logger.error(f"Failed to read cache generation {generation_key} - {e}")
            return 0

    @staticmethod
    def bump_generation(generation_key: str) -> int:
        try:
            return cache.incr(generation_key)
        except ValueError:
            # First bump: the counter does not exist yet
            if cache.add(generation_key, 1, timeout=None):
                return 1
            return cache.incr(generation_key)

    @staticmethod
    def invalidate_namespace(pattern: str, generation_key: str = None) -> bool:
        """
        Retire every key of a namespace, e.g. "offer:*".

        Returns False when the cache could not be reached.
        """
        try:
            if generation_key is not None:
                generation = CacheManager.bump_generation(generation_key)
                logger.debug(f"{generation_key} advanced to {generation}")
            deleted = CacheManager._delete_pattern(pattern)
            logger.debug(f"Invalidated {deleted} keys in namespace: {pattern}")
            return True
        except Exception as e:
            logger.error(f"Failed to invalidate namespace {pattern} - {e}")
            return False

    @staticmethod
    def invalidate_key(resource_name: str, key_name: str, **kwargs) -> bool:
        """
        Delete one configured cache key.

        Example:
            CacheManager.invalidate_key("product_base", "detail", id=42)
            # Deletes only the "product_base:detail:42" key
        """
        try:
            cache_key = CacheKeyManager.make_key(resource_name, key_name, **kwargs)
            cache.delete(cache_key)
            logger.debug(f"Invalidated cache key: {cache_key}")
            return True
        except Exception as e:
            logger.error(f"Failed to invalidate key {resource_name}:{key_name} - {e}")
            return False
