"""
Order notification email.

Mail goes out through a Resend-compatible HTTP API (POST JSON with a bearer
key). Delivery is best effort: notify() reports success as a bool and never
raises, failures are logged and counted instead.
"""
import base64
import html
from decimal import Decimal
from typing import Any, Dict, Optional

import httpx
import structlog

from shared.config.settings import Settings
from shared.errors import NotificationError
from shared.observability import print_order_notifications_total
from services.model_service.uploads import UploadedModel
from services.order_service.models import DeliveryMethod, Order

logger = structlog.get_logger(__name__)

DEFAULT_MAIL_API_URL = "https://api.resend.com/emails"


def _money(value: Optional[Decimal]) -> str:
    return f"${value:.2f}" if value is not None else "Pending"


def _delivery_lines(order: Order) -> str:
    method = order.delivery_method
    if method is DeliveryMethod.DELIVERY:
        city_line = f"{order.city or ''}, {order.state or ''} {order.zip_code or ''}".strip()
        return f"Address: {order.street_address}\nCity: {city_line}"
    if method is DeliveryMethod.MEETUP:
        return "Meetup location - customer will be contacted"
    raise NotificationError(f"Unknown delivery method {method!r}")


def format_order_email(order: Order) -> str:
    weight = f"{order.model_weight}g" if order.model_weight is not None else "Pending"
    support = f"Yes (+{_money(order.support_cost)})" if order.support_removal else "No"
    order_date = order.created_at.strftime("%Y-%m-%d %H:%M:%S") if order.created_at else "Unknown"

    return "\n".join([
        "New 3D Printing Order Received",
        "",
        f"Order ID: {order.id}",
        f"Customer: {order.customer_name}",
        f"Phone: {order.customer_phone}",
        "",
        f"Delivery Method: {order.delivery_method.value}",
        _delivery_lines(order),
        "",
        "Model Details:",
        f"File: {order.model_file_name or 'Not provided'}",
        f"Weight: {weight}",
        f"Print Time: {order.print_time or 'Pending'}",
        "",
        "Pricing:",
        f"Base Cost: {_money(order.base_cost)}",
        f"Support Removal: {support}",
        f"Total Cost: {_money(order.total_cost)}",
        "",
        f"Order Date: {order_date}",
    ])


def build_email_payload(
    order: Order,
    upload: Optional[UploadedModel],
    sender: str,
    recipient: str,
) -> Dict[str, Any]:
    body = format_order_email(order)
    payload = {
        "from": sender,
        "to": [recipient],
        "subject": f"New 3D Printing Order - {order.customer_name}",
        "text": body,
        "html": f"<pre>{html.escape(body)}</pre>",
    }
    if upload:
        payload["attachments"] = [{
            "filename": upload.filename,
            "content": base64.b64encode(upload.content).decode("ascii"),
            "content_type": upload.content_type,
        }]
    return payload


class EmailNotifier:
    def __init__(
        self,
        api_key: Optional[str],
        sender: str,
        recipient: str,
        api_url: str = DEFAULT_MAIL_API_URL,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ):
        self.api_key = api_key
        self.sender = sender
        self.recipient = recipient
        self.api_url = api_url
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def send(self, order: Order, upload: Optional[UploadedModel] = None) -> str:
        """Deliver the email; returns the provider's message id. Raises NotificationError."""
        if not self.api_key:
            raise NotificationError("Mail API key is not configured")

        payload = build_email_payload(order, upload, self.sender, self.recipient)
        try:
            resp = await self._client.post(
                self.api_url,
                json=payload,
                headers={"Authorization": f"Bearer {self.api_key}"},
            )
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationError(
                f"Mail API rejected message ({e.response.status_code}): {e.response.text[:200]}"
            ) from e
        except httpx.HTTPError as e:
            raise NotificationError(f"Mail API unreachable: {e}") from e

        try:
            return resp.json().get("id", "")
        except ValueError:
            return ""

    async def notify(self, order: Order, upload: Optional[UploadedModel] = None) -> bool:
        if not self.api_key:
            logger.warning("order_notification_skipped", order_id=order.id, reason="mail api key not configured")
            print_order_notifications_total.labels(status="skipped").inc()
            return False
        try:
            message_id = await self.send(order, upload)
        except NotificationError as e:
            logger.error("order_notification_failed", order_id=order.id, error=str(e))
            print_order_notifications_total.labels(status="failed").inc()
            return False

        logger.info("order_notification_sent", order_id=order.id, message_id=message_id, recipient=self.recipient)
        print_order_notifications_total.labels(status="sent").inc()
        return True

    async def aclose(self):
        await self._client.aclose()


class NullNotifier:
    """Used when no mail transport is wanted; every order is logged as skipped."""

    async def notify(self, order: Order, upload: Optional[UploadedModel] = None) -> bool:
        logger.info("order_notification_skipped", order_id=order.id, reason="notifications disabled")
        print_order_notifications_total.labels(status="skipped").inc()
        return False

    async def aclose(self):
        pass


def build_notifier(settings: Settings):
    if not settings.mail_api_key:
        return NullNotifier()
    return EmailNotifier(
        api_key=settings.mail_api_key,
        sender=settings.email_from,
        recipient=settings.order_notify_email,
        api_url=settings.mail_api_url,
    )
