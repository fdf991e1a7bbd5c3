from django.apps import AppConfig


class ProductOfferConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "apps.products.product_offer"
    verbose_name = "Product Offers"
