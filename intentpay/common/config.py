"""Environment-driven settings for the payment intent backend.

The process loads this once at startup and hands the instance to the app
factory (see `.env.example`). Tests build their own `Settings` instead of
touching the process environment.
"""

from enum import Enum
from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

PACKAGE_DIR = Path(__file__).resolve().parent.parent / "services" / "payment_intent"
LIVE_KEY_PREFIX = "sk_live_"


class ProcessorMode(str, Enum):
    """Which processor environment the secret key points at."""

    LIVE = "live"
    TEST = "test"

    @classmethod
    def from_secret_key(cls, secret_key: str | None) -> "ProcessorMode":
        if secret_key and secret_key.startswith(LIVE_KEY_PREFIX):
            return cls.LIVE
        return cls.TEST


class Settings(BaseSettings):
    """Typed view of runtime configuration from environment variables."""

    service_name: str = "payment-intent"
    log_level: str = "INFO"
    environment: str = "production"
    host: str = "0.0.0.0"
    port: int = 3000
    stripe_secret_key: str = ""
    stripe_publishable_key: str = ""
    minimum_amount: int = 50
    default_currency: str = "gbp"
    public_dir: Path = PACKAGE_DIR / "public"
    templates_dir: Path = PACKAGE_DIR / "templates"
    otel_exporter_otlp_endpoint: str | None = None
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    @property
    def mode(self) -> ProcessorMode:
        return ProcessorMode.from_secret_key(self.stripe_secret_key)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"


settings = Settings()
