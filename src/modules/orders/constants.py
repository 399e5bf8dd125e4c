"""Order domain constants.

Defines status choices and the valid transitions of the order state
machine.  Removal is not a status: an expired or cancelled order is
deleted together with its artifacts.
"""

from django.db import models


class OrderStatus(models.TextChoices):
    CREATED = "CREATED", "Created"
    PAID = "PAID", "Paid"


class DeliveryType(models.TextChoices):
    HOME = "HOME", "Home delivery"
    RELAY = "RELAY", "Pickup point"


class BackSideType(models.TextChoices):
    TEMPLATE = "TEMPLATE", "Shared template"
    CUSTOM = "CUSTOM", "Custom artwork"


VALID_TRANSITIONS: dict[str, set[str]] = {
    OrderStatus.CREATED: {OrderStatus.PAID},
    OrderStatus.PAID: set(),
}

ARTIFACT_FOLDER = "orders"
