from django.conf import settings
from django.db import models

from apps.core.models import BaseModel


class Product(BaseModel):
    class ProductsStatus(models.TextChoices):
        DRAFT = "draft", "Draft"
        ACTIVE = "active", "Active"
        INACTIVE = "inactive", "Inactive"
        SOLD = "sold", "Sold"

    # Basic product information
    seller = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="products"
    )
    title = models.CharField(max_length=255)
    description = models.TextField(blank=True)

    # Pricing
    price = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    currency = models.CharField(max_length=3, default="USD")

    status = models.CharField(
        max_length=12, choices=ProductsStatus.choices, default=ProductsStatus.DRAFT
    )

    class Meta:
        db_table = "product"
        ordering = ["-created_at"]
        verbose_name_plural = "Products"
        indexes = [
            models.Index(fields=["seller", "status"], name="product_seller_status_idx"),
        ]

    def __str__(self):
        return self.title
