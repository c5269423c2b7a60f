# barbershop/notifications.py
# Booking and account emails, scheduled as background tasks after commit.
# A failed send is logged and dropped.

import html
import logging
import smtplib
import ssl
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from barbershop.config import settings

logger = logging.getLogger(__name__)

BOOKING_SUBJECTS = {
    "created": ("Booking request received", "New booking request"),
    "confirmed": ("Your booking is confirmed", "Booking confirmed"),
    "cancelled": ("Your booking was cancelled", "Booking cancelled"),
    "completed": ("Thanks for visiting", "Booking completed"),
    "status_updated": ("Your booking was updated", "Booking updated"),
}


def send_email(to: str, subject: str, html: str) -> bool:
    """Send one HTML email over SMTP. Returns False when SMTP is not configured."""
    if not settings.SMTP_HOST:
        logger.info("SMTP not configured, skipping email to %s: %s", to, subject)
        return False

    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = settings.EMAIL_FROM
    msg["To"] = to
    msg.attach(MIMEText(html, "html"))

    with smtplib.SMTP(settings.SMTP_HOST, settings.SMTP_PORT, timeout=30) as server:
        if settings.SMTP_USE_TLS:
            server.starttls(context=ssl.create_default_context())
        if settings.SMTP_USERNAME:
            server.login(settings.SMTP_USERNAME, settings.SMTP_PASSWORD or "")
        server.sendmail(settings.EMAIL_FROM, [to], msg.as_string())

    logger.info("Email sent to %s: %s", to, subject)
    return True


def _booking_html(heading: str, context: dict) -> str:
    services = ", ".join(context.get("services", []))
    rows = [
        ("Shop", context.get("shop_name")),
        ("Barber", context.get("barber_name")),
        ("Date", context.get("date")),
        ("Time", f"{context.get('start_time')} - {context.get('end_time')}"),
        ("Services", services),
        ("Total", f"{context.get('total_amount', 0):.2f}"),
        ("Status", context.get("status")),
    ]
    if context.get("cancel_reason"):
        rows.append(("Reason", context["cancel_reason"]))
    body = "".join(
        f"<tr><td><b>{label}</b></td><td>{html.escape(str(value if value is not None else ''))}</td></tr>"
        for label, value in rows
    )
    return f"<h2>{html.escape(heading)}</h2><table>{body}</table>"


def send_booking_email(event: str, context: dict) -> None:
    """Notify the customer and the barber about a booking lifecycle event."""
    customer_subject, barber_subject = BOOKING_SUBJECTS.get(event, BOOKING_SUBJECTS["status_updated"])
    recipients = [
        (context.get("customer_email"), customer_subject),
        (context.get("barber_email"), barber_subject),
    ]
    for to, subject in recipients:
        if not to:
            continue
        try:
            send_email(to, f"{subject} #{context.get('booking_id')}", _booking_html(subject, context))
        except Exception as e:
            logger.error("Booking email (%s) to %s failed: %s", event, to, e)


def send_verification_email(email: str, token: str, name: str) -> None:
    link = html.escape(f"{settings.CLIENT_URL}/verify-email/{token}")
    body = f"<p>Hi {html.escape(name)},</p><p>Please verify your email: <a href=\"{link}\">{link}</a></p>"
    try:
        send_email(email, "Verify your email", body)
    except Exception as e:
        logger.error("Verification email to %s failed: %s", email, e)


def send_password_reset_email(email: str, token: str, name: str) -> None:
    link = html.escape(f"{settings.CLIENT_URL}/reset-password/{token}")
    body = (
        f"<p>Hi {html.escape(name)},</p><p>Reset your password here: <a href=\"{link}\">{link}</a></p>"
        f"<p>This link expires in {settings.RESET_TOKEN_EXPIRE_MINUTES} minutes.</p>"
    )
    try:
        send_email(email, "Password reset", body)
    except Exception as e:
        logger.error("Password reset email to %s failed: %s", email, e)
