import logging

from django.utils import timezone

from apps.products.product_base.models import Product
from apps.products.product_base.utils.exceptions import ProductNotFound

logger = logging.getLogger(__name__)


class ProductCatalogService:
    """
    Narrow read/write access to the product catalog for other apps.

    Both methods run in whatever transaction the caller has open, so a status
    change commits or rolls back together with the caller's own writes.
    """

    @staticmethod
    def get_product(product_id, for_update: bool = False) -> Product:
        """
        Fetch a product by id.

        With `for_update=True` the row is locked until the surrounding
        transaction ends; must be called inside `transaction.atomic()`.
        """
        if for_update:
            queryset = Product.objects.select_for_update()
        else:
            queryset = Product.objects.select_related("seller")

        try:
            return queryset.get(pk=product_id)
        except (Product.DoesNotExist, ValueError, TypeError):
            raise ProductNotFound()

    @staticmethod
    def set_product_status(product_id, status: str) -> None:
        """Write a new status for the product."""
        if status not in Product.ProductsStatus.values:
            raise ValueError(f"Unknown product status: {status}")

        updated = Product.objects.filter(pk=product_id).update(
            status=status, updated_at=timezone.now()
        )
        if not updated:
            raise ProductNotFound()

        logger.info(f"Product {product_id} status set to {status}")
