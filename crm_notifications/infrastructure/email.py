"""Transactional email delivery through SendGrid.

Two kinds of messages leave the CRM: copies of high/urgent in-app
notifications and reminders for upcoming bookings. Both are best-effort:
helpers return ``False`` instead of raising when delivery fails.
"""

from __future__ import annotations

import json
import logging
from html import escape
from typing import Any

from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail

from crm_notifications.config import get_settings
from crm_notifications.domain.entities import Booking, Notification, NotificationPriority

logger = logging.getLogger(__name__)


def _extract_sendgrid_error_details(body: Any) -> str | None:
    """Return a human readable description for a SendGrid error payload."""

    if body in (None, b"", ""):
        return None
    if isinstance(body, bytes):
        try:
            body = body.decode("utf-8")
        except UnicodeDecodeError:
            return None
    if isinstance(body, str):
        try:
            body = json.loads(body)
        except json.JSONDecodeError:
            return body.strip() or None

    if isinstance(body, dict) and isinstance(body.get("errors"), list):
        messages = [
            f"{item['message']} (help: {item['help']})" if item.get("help") else str(item["message"])
            for item in body["errors"]
            if isinstance(item, dict) and item.get("message")
        ]
        if messages:
            return "; ".join(messages)
    try:
        return json.dumps(body)
    except (TypeError, ValueError):
        return None


def _log_delivery_failure(status_code: Any, body: Any) -> None:
    details = _extract_sendgrid_error_details(body)
    if status_code and details:
        logger.error("SendGrid API request failed with status %s: %s", status_code, details)
    elif status_code:
        logger.error("SendGrid API request failed with status %s", status_code)
    elif details:
        logger.error("SendGrid API request failed: %s", details)
    else:
        logger.error("SendGrid API request failed without details")


def send_email(subject: str, html_content: str, recipient: str) -> bool:
    """Send an email using the configured SendGrid credentials."""

    settings = get_settings()
    if not (settings.sendgrid_api_key and settings.sendgrid_sender):
        logger.info("SendGrid configuration incomplete; skipping email delivery")
        return False

    message = Mail(
        from_email=settings.sendgrid_sender,
        to_emails=recipient,
        subject=subject,
        html_content=html_content,
    )

    try:
        client = SendGridAPIClient(settings.sendgrid_api_key)
        response = client.send(message)
    except Exception as exc:  # pragma: no cover - network failures depend on environment
        _log_delivery_failure(getattr(exc, "status_code", None), getattr(exc, "body", None))
        logger.debug("SendGrid exception", exc_info=exc)
        return False

    status_code = getattr(response, "status_code", None)
    if not isinstance(status_code, int) or not 200 <= status_code < 300:
        _log_delivery_failure(status_code, getattr(response, "body", None))
        return False

    return True


_PRIORITY_BANNERS = {
    NotificationPriority.URGENT: ("#dc3545", "#ffffff", "URGENT - "),
    NotificationPriority.HIGH: ("#ffc107", "#000000", ""),
}


def send_notification_email(notification: Notification, recipient: str) -> bool:
    """Email a high or urgent in-app notification to its owner."""

    background, foreground, prefix = _PRIORITY_BANNERS.get(
        notification.priority, ("#007bff", "#ffffff", "")
    )
    title = escape(notification.title)
    parts = [
        f'<div style="background:{background};color:{foreground};padding:15px;border-radius:6px">',
        f"<h2>{prefix}{title}</h2>",
        "</div>",
        f"<p>{escape(notification.message)}</p>",
    ]
    if notification.action_url:
        link = f"{get_settings().app_public_url.rstrip('/')}{notification.action_url}"
        label = escape(notification.action_label or "Voir les détails")
        parts.append(f'<p><a href="{escape(link, quote=True)}">{label}</a></p>')
    parts.append(
        '<p style="color:#666;font-size:12px">Cet email a été envoyé automatiquement par le CRM.</p>'
    )
    return send_email(f"{prefix}{notification.title}", "".join(parts), recipient)


def _format_booking_start(booking: Booking) -> str:
    return booking.start_time.strftime("%d/%m/%Y à %H:%M")


def _format_booking_duration(booking: Booking) -> str:
    minutes = booking.duration_minutes
    if minutes < 60:
        return f"{minutes} minutes"
    hours, remainder = divmod(minutes, 60)
    return f"{hours}h{remainder:02d}" if remainder else f"{hours}h"


def _booking_details_html(booking: Booking) -> str:
    lines = [
        f"<strong>Rendez-vous :</strong> {escape(booking.meeting_type)}",
        f"<strong>Date :</strong> {_format_booking_start(booking)}",
        f"<strong>Durée :</strong> {_format_booking_duration(booking)}",
    ]
    if booking.location:
        lines.append(f"<strong>Lieu :</strong> {escape(booking.location)}")
    if booking.meeting_link:
        link = escape(booking.meeting_link, quote=True)
        lines.append(f'<strong>Lien :</strong> <a href="{link}">{link}</a>')
    if booking.notes:
        lines.append(f"<strong>Notes :</strong> {escape(booking.notes)}")
    return "<p>" + "<br>".join(lines) + "</p>"


def send_booking_reminder_email(booking: Booking, *, recipient: str, recipient_name: str) -> bool:
    """Send the reminder for an upcoming booking to one participant."""

    subject = f"Rappel : {booking.meeting_type} le {_format_booking_start(booking)}"
    html_content = "".join(
        (
            f"<p>Bonjour {escape(recipient_name)},</p>",
            "<p>Nous vous rappelons votre rendez-vous à venir.</p>",
            _booking_details_html(booking),
        )
    )
    return send_email(subject, html_content, recipient)
