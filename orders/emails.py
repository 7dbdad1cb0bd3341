"""Email utilities for the orders app.

Uses Django's email backend, with links composed from FRONTEND_URL.
"""

from django.conf import settings
from django.core.mail import send_mail


def _order_url(order) -> str:
    frontend = getattr(settings, "FRONTEND_URL", "")
    if not frontend:
        return ""
    return f"{frontend.rstrip('/')}/orders/{order.id}"


def _send(order, subject: str, lines: list[str]) -> None:
    to_email = order.email or getattr(order.user, "email", None)
    if not to_email:
        return
    url = _order_url(order)
    if url:
        lines = [*lines, "", f"You can view your order here: {url}"]
    send_mail(
        subject,
        "\n".join(lines) + "\n",
        getattr(settings, "DEFAULT_FROM_EMAIL", None),
        [to_email],
        fail_silently=True,
    )


def send_order_confirmed_email(order) -> None:
    """Payment received and stock committed for the order."""

    _send(
        order,
        f"Your order {order.number} is confirmed",
        [
            "Thank you for your purchase!",
            "",
            f"Order: {order.number}",
            f"Total: {order.total} {order.currency.upper()}",
            f"Status: {order.status}",
        ],
    )


def send_order_cancelled_email(order) -> None:
    _send(
        order,
        f"Your order {order.number} was cancelled",
        [f"Order {order.number} has been cancelled.", f"Payment status: {order.payment_status}"],
    )


def send_order_shipped_email(order) -> None:
    lines = [f"Order {order.number} is on its way."]
    if order.tracking_number:
        lines.append(f"Tracking number: {order.tracking_number}")
    _send(order, f"Your order {order.number} has shipped", lines)
