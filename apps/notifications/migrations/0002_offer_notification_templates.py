from django.db import migrations

OFFER_TEMPLATES = [
    (
        "OFFER_RECEIVED",
        "New offer received",
        "{buyer_name} offered {amount} for \"{product_title}\"",
    ),
    (
        "OFFER_ACCEPTED",
        "Offer accepted",
        "Your offer of {amount} for \"{product_title}\" was accepted",
    ),
    (
        "OFFER_REJECTED",
        "Offer declined",
        "Your offer of {amount} for \"{product_title}\" was declined",
    ),
    (
        "OFFER_COUNTER",
        "Counter-offer received",
        "{seller_name} proposes {amount} for \"{product_title}\"",
    ),
    (
        "OFFER_CANCELLED",
        "Offer withdrawn",
        "{buyer_name} withdrew the offer of {amount} for \"{product_title}\"",
    ),
    (
        "OFFER_EXPIRED",
        "Offer expired",
        "The offer of {amount} for \"{product_title}\" has expired",
    ),
]


def create_offer_notification_templates(apps, schema_editor):
    NotificationTemplate = apps.get_model("notifications", "NotificationTemplate")
    for name, subject, body in OFFER_TEMPLATES:
        NotificationTemplate.objects.update_or_create(
            name=name, defaults={"subject": subject, "body": body}
        )


def remove_offer_notification_templates(apps, schema_editor):
    NotificationTemplate = apps.get_model("notifications", "NotificationTemplate")
    NotificationTemplate.objects.filter(
        name__in=[name for name, _, _ in OFFER_TEMPLATES]
    ).delete()


class Migration(migrations.Migration):

    dependencies = [
        ("notifications", "0001_initial"),
    ]

    operations = [
        migrations.RunPython(
            create_offer_notification_templates, remove_offer_notification_templates
        ),
    ]
