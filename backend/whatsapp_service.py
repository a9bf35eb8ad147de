import logging

from twilio.rest import Client

from config import settings

logger = logging.getLogger(__name__)


def _whatsapp(number: str) -> str:
    number = number.strip()
    return number if number.startswith("whatsapp:") else f"whatsapp:{number}"


def send_whatsapp(to: str, message: str) -> None:
    client = Client(settings.TWILIO_SID, settings.TWILIO_AUTH_TOKEN)
    client.messages.create(
        body=message,
        from_=_whatsapp(settings.TWILIO_WHATSAPP_FROM),
        to=_whatsapp(to)
    )
    logger.info("WhatsApp message sent to %s", to)
