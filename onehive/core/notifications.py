"""
onehive/core/notifications.py

Lifecycle Notification Emails

Sends transactional emails for service-request events:
- Request accepted (to the customer)
- Worker on the way (to the customer)
- Request rejected / cancelled (to the other party)
- Request completed (to the customer)

Delivery is fire-and-forget: any failure is logged and swallowed so the
lifecycle operation that triggered it is never blocked or rolled back.
"""

import logging
from datetime import datetime
from typing import Any

from jinja2 import Environment, FileSystemLoader, select_autoescape
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import From, Mail, To
from starlette.concurrency import run_in_threadpool

from onehive.core.config import settings

# Logger configuration
logger = logging.getLogger(__name__)

# Jinja2 template environment setup
jinja_env = Environment(
    loader=FileSystemLoader(settings.mail_templates_path),
    autoescape=select_autoescape(["html", "xml"]),
)


class NotificationError(RuntimeError):
    """Raised internally when the provider rejects a message."""


def render_template(template_name: str, context: dict[str, Any]) -> str:
    """
    Renders an email template using Jinja2 with provided context.
    Args:
        template_name (str): Name of the template file.
        context (dict[str, Any]): Variables to pass to the template.
    Returns:
        str: Rendered HTML content.
    """
    template = jinja_env.get_template(template_name)
    full_context = {
        "year": datetime.now().year,
        "company_name": settings.MAIL_FROM_NAME or settings.APP_NAME,
        "app_name": settings.APP_NAME,
        "base_url": str(settings.BASE_URL).rstrip("/"),
        "support_email": str(settings.SUPPORT_EMAIL),
        **context,
    }
    return template.render(full_context)


def _deliver(to_email: str, subject: str, html_content: str) -> None:
    """Blocking SendGrid call; run from a worker thread."""
    message = Mail(
        from_email=From(email=str(settings.MAIL_FROM), name=settings.MAIL_FROM_NAME),
        to_emails=To(to_email),
        subject=subject,
        html_content=html_content,
    )
    response = SendGridAPIClient(settings.SENDGRID_API_KEY).send(message)
    if response.status_code >= 300:
        raise NotificationError(f"SendGrid status={response.status_code} body={response.body}")


class Notifier:
    """Fire-and-forget email side channel for lifecycle events."""

    def __init__(self, enabled: bool | None = None) -> None:
        self.enabled = settings.EMAILS_ENABLED if enabled is None else enabled

    async def send(
        self, to_email: str | None, subject: str, template_name: str, context: dict[str, Any]
    ) -> bool:
        """Returns True when the message was handed to the provider."""
        if not to_email:
            logger.debug(f"[NOTIFY] No recipient for '{subject}', skipping")
            return False
        if not self.enabled:
            logger.info(f"[NOTIFY] Email sending disabled. Skipping '{subject}' to {to_email}")
            return False
        if not settings.SENDGRID_API_KEY:
            logger.error("[NOTIFY] SENDGRID_API_KEY is not configured")
            return False

        try:
            html_content = render_template(template_name, context)
            await run_in_threadpool(_deliver, to_email, subject, html_content)
        except Exception:
            logger.exception(f"[NOTIFY] Failed to send '{subject}' to {to_email}")
            return False

        logger.info(f"[NOTIFY] Sent '{subject}' to {to_email}")
        return True

    async def request_accepted(self, to_email: str | None, title: str, request_id: Any) -> bool:
        return await self.send(
            to_email,
            f"Your request has been accepted - {settings.MAIL_FROM_NAME}",
            "request_accepted.html",
            {"title": title, "request_id": request_id},
        )

    async def worker_en_route(self, to_email: str | None, title: str, request_id: Any) -> bool:
        return await self.send(
            to_email,
            f"Your worker is on the way - {settings.MAIL_FROM_NAME}",
            "worker_en_route.html",
            {"title": title, "request_id": request_id},
        )

    async def request_closed(
        self, to_email: str | None, title: str, status: str, reason: str | None
    ) -> bool:
        return await self.send(
            to_email,
            f"Service request {status} - {settings.MAIL_FROM_NAME}",
            "request_closed.html",
            {"title": title, "status": status, "reason": reason},
        )

    async def request_completed(
        self, to_email: str | None, title: str, request_id: Any, cost: float
    ) -> bool:
        return await self.send(
            to_email,
            f"Service completed - {settings.MAIL_FROM_NAME}",
            "request_completed.html",
            {"title": title, "request_id": request_id, "cost": cost},
        )
