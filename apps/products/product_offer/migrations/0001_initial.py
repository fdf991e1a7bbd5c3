import uuid

import django.db.models.deletion
from django.conf import settings
from django.db import migrations, models

import apps.products.product_offer.models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("product_base", "0001_initial"),
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Offer",
            fields=[
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("message", models.TextField(blank=True, null=True)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("PENDING", "Pending"),
                            ("COUNTER_OFFERED", "Counter Offered"),
                            ("ACCEPTED", "Accepted"),
                            ("REJECTED", "Rejected"),
                            ("CANCELLED", "Cancelled"),
                            ("EXPIRED", "Expired"),
                        ],
                        default="PENDING",
                        max_length=20,
                    ),
                ),
                (
                    "expires_at",
                    models.DateTimeField(
                        default=apps.products.product_offer.models.default_offer_expiry
                    ),
                ),
                ("responded_at", models.DateTimeField(blank=True, null=True)),
                (
                    "buyer",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="sent_offers",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
                (
                    "parent_offer",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="counter_offers",
                        to="product_offer.offer",
                    ),
                ),
                (
                    "product",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="offers",
                        to="product_base.product",
                    ),
                ),
                (
                    "seller",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="received_offers",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Offer",
                "verbose_name_plural": "Offers",
                "db_table": "product_offer",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(
                        fields=["product", "status"],
                        name="product_offer_prod_status_idx",
                    ),
                    models.Index(
                        fields=["buyer", "status"],
                        name="product_offer_buyer_status_idx",
                    ),
                    models.Index(
                        fields=["seller", "status"],
                        name="product_offer_sell_status_idx",
                    ),
                    models.Index(
                        fields=["status", "expires_at"],
                        name="product_offer_expiry_idx",
                    ),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="product_offer_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(
                            ("buyer", models.F("seller")), _negated=True
                        ),
                        name="product_offer_buyer_not_seller",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("status", "PENDING")),
                        fields=("buyer", "product"),
                        name="product_offer_one_pending_per_buyer",
                    ),
                ],
            },
        ),
    ]
