from unittest.mock import MagicMock, patch

import pytest
from django.core.cache import cache

from apps.core.utils.cache_key_manager import CacheKeyManager
from apps.core.utils.cache_manager import CacheManager
from apps.products.product_offer.services import (
    OfferCacheInvalidator,
    OfferCacheService,
)


class TestOfferCacheKeys:
    def test_list_keys(self):
        assert (
            OfferCacheService.list_key("buyer", 7, 1, 20)
            == "offer:0:buyer:7:page:1:size:20:status:all"
        )
        assert (
            OfferCacheService.list_key("seller", 7, 2, 5, "PENDING")
            == "offer:0:seller:7:page:2:size:5:status:PENDING"
        )

    def test_stats_key(self):
        assert OfferCacheService.stats_key(7) == "offer:0:stats:7"

    def test_keys_follow_generation(self):
        OfferCacheInvalidator().invalidate_offer_views()

        assert OfferCacheService.stats_key(7) == "offer:1:stats:7"

    def test_wildcard_template_is_not_a_key(self):
        with pytest.raises(ValueError):
            CacheKeyManager.make_key("offer", "namespace")

    def test_pattern(self):
        assert CacheKeyManager.make_pattern("offer", "namespace") == "offer:*"


class TestOfferCacheInvalidator:
    def test_uses_pattern_delete_when_available(self):
        fake_cache = MagicMock()
        fake_cache.delete_pattern.return_value = 2

        with patch("apps.core.utils.cache_manager.cache", fake_cache):
            OfferCacheInvalidator().on_offer_changed(
                product_id=12, product_status_changed=True
            )

        fake_cache.incr.assert_called_once_with("offer_generation")
        fake_cache.delete_pattern.assert_called_once_with("offer:*")
        fake_cache.delete.assert_called_once_with("product_base:detail:12")

    def test_product_entry_kept_when_status_unchanged(self):
        fake_cache = MagicMock()

        with patch("apps.core.utils.cache_manager.cache", fake_cache):
            OfferCacheInvalidator().on_offer_changed(product_id=12)

        fake_cache.delete.assert_not_called()

    def test_backend_without_patterns_retires_offer_views(self):
        stats_key = OfferCacheService.stats_key(1)
        cache.set(stats_key, {"sent_total": 1})

        assert OfferCacheInvalidator().invalidate_offer_views() is True
        assert OfferCacheService.get(OfferCacheService.stats_key(1)) is None

    def test_unrelated_entries_survive_invalidation(self):
        cache.set("throttle_offer_create_1", [1700000000.0])

        OfferCacheInvalidator().on_offer_changed(
            product_id=12, product_status_changed=True
        )

        assert cache.get("throttle_offer_create_1") == [1700000000.0]

    def test_generation_advances_on_every_invalidation(self):
        invalidator = OfferCacheInvalidator()

        invalidator.invalidate_offer_views()
        invalidator.invalidate_offer_views()

        assert CacheManager.get_generation("offer_generation") == 2

    def test_cache_errors_are_swallowed(self):
        fake_cache = MagicMock()
        fake_cache.incr.side_effect = ConnectionError("redis down")
        fake_cache.delete.side_effect = ConnectionError("redis down")

        with patch("apps.core.utils.cache_manager.cache", fake_cache):
            invalidator = OfferCacheInvalidator()
            assert invalidator.invalidate_offer_views() is False
            assert invalidator.invalidate_product(12) is False

    def test_unreadable_generation_falls_back_to_zero(self):
        fake_cache = MagicMock()
        fake_cache.get.side_effect = ConnectionError("redis down")

        with patch("apps.core.utils.cache_manager.cache", fake_cache):
            assert CacheManager.get_generation("offer_generation") == 0
