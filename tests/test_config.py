"""Processor mode detection and environment flags."""

import pytest

from intentpay.common.config import ProcessorMode
from tests.helpers.fakes import make_settings


@pytest.mark.parametrize(
    ("secret_key", "expected"),
    [
        ("sk_live_51abc", ProcessorMode.LIVE),
        ("sk_test_51abc", ProcessorMode.TEST),
        ("rk_live_51abc", ProcessorMode.TEST),
        ("", ProcessorMode.TEST),
        (None, ProcessorMode.TEST),
    ],
)
def test_mode_from_secret_key(secret_key, expected):
    """Only the `sk_live_` prefix selects live mode."""

    assert ProcessorMode.from_secret_key(secret_key) is expected


def test_settings_expose_mode():
    assert make_settings(stripe_secret_key="sk_live_x").mode is ProcessorMode.LIVE
    assert make_settings(stripe_secret_key="sk_test_x").mode is ProcessorMode.TEST


def test_development_flag_is_case_insensitive():
    assert make_settings(environment="Development").is_development
    assert not make_settings(environment="production").is_development


def test_defaults_match_checkout_requirements(monkeypatch):
    for name in ("PORT", "MINIMUM_AMOUNT", "DEFAULT_CURRENCY", "PUBLIC_DIR", "TEMPLATES_DIR"):
        monkeypatch.delenv(name, raising=False)
    cfg = make_settings()

    assert cfg.minimum_amount == 50
    assert cfg.default_currency == "gbp"
    assert cfg.port == 3000
    assert (cfg.public_dir / "index.html").is_file()
    assert (cfg.templates_dir / "pricing.html").is_file()


def test_environment_variables_override_defaults(monkeypatch):
    monkeypatch.setenv("STRIPE_SECRET_KEY", "sk_live_env")
    monkeypatch.setenv("PORT", "8080")

    from intentpay.common.config import Settings

    cfg = Settings(_env_file=None)
    assert cfg.mode is ProcessorMode.LIVE
    assert cfg.port == 8080
