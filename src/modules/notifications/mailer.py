"""Order confirmation e-mail.

The message body is plain text assembled here; rendering HTML templates
is left to the mail provider.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

import structlog
from django.conf import settings
from django.core.mail import EmailMessage

if TYPE_CHECKING:
    from modules.orders.models import Order

logger = structlog.get_logger(__name__)


def build_confirmation_body(order: Order) -> str:
    lines = [
        f"Bonjour {order.customer_name},",
        "",
        f"Nous avons bien reçu le paiement de votre commande {order.id}.",
        "",
        f"Quantité totale : {order.total_quantity}",
        f"Prix unitaire : {order.price_per_unit} €",
        f"Sous-total : {order.total_price} €",
        f"Remise : {order.discount} €",
        f"Total payé : {order.total_price_with_discount} €",
        "",
        f"Suivi : {settings.FRONTEND_BASE_URL.rstrip('/')}/orders/{order.id}",
    ]
    return "\n".join(lines)


class EmailOrderNotifier:
    """Sends the confirmation synchronously through Django's mail backend."""

    def __init__(
        self,
        from_email: Optional[str] = None,
        bcc: Optional[List[str]] = None,
    ) -> None:
        self._from_email = from_email or settings.DEFAULT_FROM_EMAIL
        self._bcc = [address for address in (bcc or []) if address]

    def notify_order_paid(self, order: Order) -> None:
        message = EmailMessage(
            subject=f"Confirmation de commande {order.id}",
            body=build_confirmation_body(order),
            from_email=self._from_email,
            to=[order.email],
            bcc=self._bcc,
        )
        message.send(fail_silently=False)
        logger.info("notification.order_paid_sent", order_id=str(order.id))
