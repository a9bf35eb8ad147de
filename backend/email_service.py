import logging

from fastapi_mail import FastMail, MessageSchema, ConnectionConfig

from config import settings

logger = logging.getLogger(__name__)


def mail_config() -> ConnectionConfig:
    return ConnectionConfig(
        MAIL_USERNAME=settings.MAIL_USERNAME,
        MAIL_PASSWORD=settings.MAIL_PASSWORD,
        MAIL_FROM=settings.MAIL_FROM,
        MAIL_PORT=settings.MAIL_PORT,
        MAIL_SERVER=settings.MAIL_SERVER,
        MAIL_STARTTLS=True,       # STARTTLS on 587
        MAIL_SSL_TLS=False,
        USE_CREDENTIALS=True,
    )


async def send_email(to: str, subject: str, html_body: str) -> None:
    message = MessageSchema(
        subject=subject,
        recipients=[to],
        body=html_body,
        subtype="html"
    )
    fm = FastMail(mail_config())
    await fm.send_message(message)
    logger.info("Email sent to %s: %s", to, subject)
