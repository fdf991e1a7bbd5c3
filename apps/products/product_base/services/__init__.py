from apps.products.product_base.services.product_catalog import (
    ProductCatalogService,
)

__all__ = [
    "ProductCatalogService",
]
