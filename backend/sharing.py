"""Shareable booking confirmation links and their delivery."""

import base64
import hashlib
import hmac
import logging
from html import escape
from urllib.parse import quote

from fastapi.concurrency import run_in_threadpool

import email_service
import whatsapp_service
from config import settings
from errors import InvalidShareToken, NotificationsDisabled, ShareDeliveryError

logger = logging.getLogger(__name__)

TOKEN_LENGTH = 16
SHARE_SUBJECT = "Car Wash Booking Confirmation"


def share_token(booking_id: str) -> str:
    digest = hmac.new(settings.SHARE_SECRET.encode(), booking_id.lower().encode(), hashlib.sha256).digest()
    return base64.urlsafe_b64encode(digest).decode().rstrip("=")[:TOKEN_LENGTH]


def verify_share_token(booking_id: str, token: str) -> None:
    if not token or not hmac.compare_digest(share_token(booking_id), token):
        raise InvalidShareToken()


def share_url(booking_id: str) -> str:
    domain = settings.DOMAIN.rstrip("/")
    return f"{domain}/booking/shared/{booking_id}?token={share_token(booking_id)}"


def share_text(booking: dict) -> str:
    return f"Check out my car wash booking confirmation for {booking['serviceType']}"


def social_share_urls(booking: dict) -> dict:
    url = share_url(booking["id"])
    text = share_text(booking)
    mail_body = text + "\n\n" + url
    return {
        "facebook": f"https://www.facebook.com/sharer/sharer.php?u={quote(url, safe='')}",
        "twitter": f"https://twitter.com/intent/tweet?url={quote(url, safe='')}&text={quote(text, safe='')}",
        "linkedin": f"https://www.linkedin.com/sharing/share-offsite/?url={quote(url, safe='')}",
        "whatsapp": f"https://wa.me/?text={quote(text + ' ' + url, safe='')}",
        "email": f"mailto:?subject={quote(SHARE_SUBJECT, safe='')}&body={quote(mail_body, safe='')}",
    }


def share_links(booking: dict) -> dict:
    return {
        "shareUrl": share_url(booking["id"]),
        "token": share_token(booking["id"]),
        "socialUrls": social_share_urls(booking),
    }


def render_confirmation_email(booking: dict) -> str:
    url = share_url(booking["id"])
    car = booking["carDetails"]
    add_ons = ", ".join(booking["addOns"]) or "None"
    return f"""
    <html>
    <body>
        <h2>Hello {escape(booking['customerName'])},</h2>
        <p>Your <b>{escape(booking['serviceType'])}</b> for your {escape(car['make'])} {escape(car['model'])}
        is booked for <b>{booking['date']}</b> at <b>{booking['timeSlot']}</b>.</p>
        <p>Add-ons: {escape(add_ons)}<br>Total: <b>${booking['price']:.2f}</b><br>Status: {escape(booking['status'])}</p>
        <a href="{escape(url)}" style="display:inline-block;padding:10px 15px;background-color:#2563eb;color:white;text-decoration:none;border-radius:5px;">View booking</a>
        <hr>
        <p>Thank you for choosing {escape(settings.BUSINESS_NAME)}!</p>
    </body>
    </html>
    """


def render_confirmation_text(booking: dict) -> str:
    return (
        f"{settings.BUSINESS_NAME}: {booking['serviceType']} for {booking['customerName']} "
        f"on {booking['date']} at {booking['timeSlot']} (${booking['price']:.2f}). "
        f"Details: {share_url(booking['id'])}"
    )


async def deliver(booking: dict, channel: str, recipient: str) -> None:
    """Send the confirmation link through email or WhatsApp."""
    if channel == "email":
        if not settings.mail_enabled:
            raise NotificationsDisabled("Email sharing is not configured")
        send = email_service.send_email(recipient, SHARE_SUBJECT, render_confirmation_email(booking))
    else:
        if not settings.whatsapp_enabled:
            raise NotificationsDisabled("WhatsApp sharing is not configured")
        send = run_in_threadpool(whatsapp_service.send_whatsapp, recipient, render_confirmation_text(booking))

    try:
        await send
    except Exception:
        logger.exception("Failed to share booking %s via %s", booking["id"], channel)
        raise ShareDeliveryError() from None
