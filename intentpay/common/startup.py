"""Startup-time helpers for safe config logging."""

from intentpay.common.config import Settings
from intentpay.common.logging import logger

SECRET_FIELDS = frozenset({"stripe_secret_key"})
LOGGED_FIELDS = (
    "service_name",
    "environment",
    "host",
    "port",
    "stripe_secret_key",
    "stripe_publishable_key",
    "minimum_amount",
    "default_currency",
    "otel_exporter_otlp_endpoint",
)


def mask_key(value: str) -> str:
    """Keep a Stripe key's type prefix (`sk_live_`) and hide the rest."""

    if not value:
        return "<unset>"
    parts = value.split("_")
    if len(parts) < 3:
        return "***"
    return f"{parts[0]}_{parts[1]}_***"


def startup_config(cfg: Settings) -> dict[str, object]:
    """Loggable view of `cfg` with secret fields masked."""

    config: dict[str, object] = {"mode": cfg.mode.value}
    for name in LOGGED_FIELDS:
        value = getattr(cfg, name)
        config[name] = mask_key(value) if name in SECRET_FIELDS else value
    return config


def log_startup_config(cfg: Settings) -> None:
    """Log the resolved configuration for quick troubleshooting."""

    logger.info("startup_config=%s", startup_config(cfg))
