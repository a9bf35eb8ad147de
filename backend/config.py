import logging

from pydantic_settings import BaseSettings, SettingsConfigDict


# ================== SETTINGS ==================
class Settings(BaseSettings):
    DATABASE_URL: str = "sqlite:///./bookings.db"
    DOMAIN: str = "http://localhost:5173"
    ENVIRONMENT: str = "development"
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: str = "*"
    SHARE_SECRET: str = "change-me"
    BUSINESS_NAME: str = "CarWash Pro"

    # email is disabled while MAIL_USERNAME is empty
    MAIL_USERNAME: str = ""
    MAIL_PASSWORD: str = ""
    MAIL_FROM: str = ""
    MAIL_SERVER: str = "smtp.gmail.com"
    MAIL_PORT: int = 587

    # whatsapp is disabled while TWILIO_SID is empty
    TWILIO_SID: str = ""
    TWILIO_AUTH_TOKEN: str = ""
    TWILIO_WHATSAPP_FROM: str = ""

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="allow"
    )

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.CORS_ORIGINS.split(",") if o.strip()]

    @property
    def mail_enabled(self) -> bool:
        return bool(self.MAIL_USERNAME and self.MAIL_PASSWORD and self.MAIL_FROM)

    @property
    def whatsapp_enabled(self) -> bool:
        return bool(self.TWILIO_SID and self.TWILIO_AUTH_TOKEN and self.TWILIO_WHATSAPP_FROM)


settings = Settings()


def configure_logging() -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
