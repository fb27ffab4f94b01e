"""Notification service (Mailgun/SendGrid email)."""
import html
import logging

import httpx

from voter_onboarding.config import get_settings
from voter_onboarding.exceptions import NotificationFailure

logger = logging.getLogger("uvicorn.error")

MAILGUN_US_BASE = "https://api.mailgun.net"
MAILGUN_EU_BASE = "https://api.eu.mailgun.net"


def send_email(to_email: str, subject: str, html_content: str, text_content: str | None = None) -> bool:
    """Send email via Mailgun (preferred) or SendGrid. Returns True if the provider accepted it."""
    settings = get_settings()
    has_key = bool(settings.mailgun_api_key)
    has_domain = bool(settings.mailgun_domain)
    if has_key and has_domain:
        logger.info("[Email] Calling Mailgun API: to=%s subject=%s domain=%s", to_email, subject, settings.mailgun_domain)
        return _send_email_mailgun(to_email, subject, html_content, text_content=text_content, settings=settings)
    if settings.sendgrid_api_key:
        return _send_email_sendgrid(to_email, subject, html_content, text_content=text_content, settings=settings)
    logger.warning(
        "[Email] NOT SENT: to=%s subject=%s. MAILGUN_API_KEY=%s MAILGUN_DOMAIN=%s. Set both in .env and restart the server.",
        to_email,
        subject,
        "set" if has_key else "MISSING",
        "set" if has_domain else "MISSING",
    )
    return False


def _send_email_mailgun(to_email: str, subject: str, html_content: str, text_content: str | None = None, settings=None) -> bool:
    if settings is None:
        settings = get_settings()
    base = (settings.mailgun_base_url or MAILGUN_US_BASE).strip().rstrip("/")
    domain = (settings.mailgun_domain or "").strip().lower()
    from_addr = (settings.mailgun_from_email or "").strip()
    from_domain = from_addr.split("@")[-1].lower() if "@" in from_addr else ""
    if domain and from_domain != domain:
        from_addr = f"noreply@{domain}"
        logger.info("[Mailgun] Using from=%s (must match domain %s for delivery)", from_addr, domain)
    data = {
        "from": f"{settings.mailgun_from_name} <{from_addr}>",
        "to": to_email,
        "subject": subject,
        "text": text_content or "",
        "html": html_content or "",
    }
    try:
        with httpx.Client(timeout=10.0) as client:
            r = client.post(f"{base}/v3/{domain}/messages", auth=("api", settings.mailgun_api_key), data=data)
            if 200 <= r.status_code < 300:
                logger.info("[Mailgun] API success: to=%s status=%s", to_email, r.status_code)
                return True
            if r.status_code == 401 and base == MAILGUN_US_BASE:
                logger.info("[Mailgun] 401 with US endpoint. Retrying with EU endpoint...")
                r2 = client.post(f"{MAILGUN_EU_BASE}/v3/{domain}/messages", auth=("api", settings.mailgun_api_key), data=data)
                if 200 <= r2.status_code < 300:
                    logger.info("[Mailgun] API success (EU): to=%s", to_email)
                    return True
                logger.warning("[Mailgun] EU request failed: status=%s body=%s", r2.status_code, r2.text[:500])
                return False
            logger.warning("[Mailgun] API failed: status=%s to=%s body=%s", r.status_code, to_email, r.text[:500])
            return False
    except httpx.HTTPError as e:
        logger.warning("[Mailgun] Exception: to=%s error=%s: %s", to_email, type(e).__name__, e)
        return False


def _send_email_sendgrid(to_email: str, subject: str, html_content: str, text_content: str | None = None, settings=None) -> bool:
    if settings is None:
        settings = get_settings()
    from sendgrid import SendGridAPIClient
    from sendgrid.helpers.mail import Mail

    message = Mail(
        from_email=(settings.sendgrid_from_email, settings.sendgrid_from_name),
        to_emails=to_email,
        subject=subject,
        html_content=html_content,
        plain_text_content=text_content or "",
    )
    try:
        SendGridAPIClient(settings.sendgrid_api_key).send(message)
        return True
    except Exception as e:
        logger.warning("[SendGrid] Exception: to=%s error=%s: %s", to_email, type(e).__name__, e)
        return False


def _name(recipient) -> str:
    return html.escape(recipient.name or "")


def send_notification_email(recipient, subject: str, body_html: str) -> None:
    """Deliver an HTML notification to a user or pending record. Raises NotificationFailure if not sent."""
    content = f"""
    <p>{body_html}</p>
    <p>— Decentralized Voting</p>
    """
    if not send_email(recipient.email, subject, content):
        raise NotificationFailure(f"Could not send '{subject}' to {recipient.email}")


def send_otp_email(recipient, code: str, subject: str, expire_minutes: int) -> None:
    send_notification_email(
        recipient,
        subject,
        f"Dear {_name(recipient)}, your one-time code is "
        f'<strong style="font-size:1.2em;letter-spacing:0.2em;">{code}</strong>. '
        f"It expires in {expire_minutes} minutes. If you did not request this, you can ignore this email.",
    )


def send_approval_email(recipient, voter_id: str) -> None:
    send_notification_email(
        recipient,
        "Account Approval Notification",
        f"Dear {_name(recipient)}, Your profile has been approved and you can login now. "
        f"Your Voter ID is: <b>{voter_id}</b>",
    )


def send_rejection_email(recipient, reason: str) -> None:
    send_notification_email(
        recipient,
        "Account Rejection Notification",
        f"Dear {_name(recipient)}, Your profile has been rejected. Reason: {html.escape(reason)}. "
        "Please visit the office for further details.",
    )


def send_profile_update_email(recipient, old_name: str | None = None) -> None:
    """Name-change variant when old_name is given, generic profile update otherwise."""
    if old_name is not None:
        body = f"Dear {_name(recipient)}, Your name has been changed from {html.escape(old_name)} to {_name(recipient)}."
    else:
        body = f"Dear {_name(recipient)}, Your profile has been updated."
    send_notification_email(recipient, "Profile Update Notification", body)
