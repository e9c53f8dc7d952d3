"""Payment intent creation.

Validates the browser's request, applies the live-mode test-card guard,
stamps server metadata and makes a single call to the payment processor.
"""

import math
from datetime import datetime, timezone
from typing import Any, Callable

from intentpay.common.config import ProcessorMode, Settings
from intentpay.common.logging import logger, mode_ctx
from intentpay.common.metrics import (
    payment_intent_outcomes_total,
    payment_intent_requests_total,
    processor_latency_seconds,
)
from intentpay.services.payment_intent.errors import (
    InvalidAmount,
    PaymentIntentError,
    TestCardInLiveMode,
)
from intentpay.services.payment_intent.processor import PaymentProcessor
from intentpay.services.payment_intent.schemas import PaymentIntentResult, PaymentRequest

TEST_CARD_PREFIX = "4242"
THREE_D_SECURE = {"card": {"request_three_d_secure": "automatic"}}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_amount(raw: Any) -> float | None:
    """Return the numeric value of `raw`, or None when it is not a number.

    Numeric strings are accepted since form posts and some clients send them.
    """

    if raw is None or isinstance(raw, bool):
        return None
    try:
        if isinstance(raw, (int, float)):
            value = float(raw)
        elif isinstance(raw, str):
            value = float(raw.strip())
        else:
            return None
    except (ValueError, OverflowError):
        return None
    if not math.isfinite(value):
        return None
    return value


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up (99.5 -> 100)."""

    return math.floor(value + 0.5)


def format_timestamp(moment: datetime) -> str:
    """ISO-8601 UTC with millisecond precision, e.g. `2024-01-01T10:00:00.000Z`."""

    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class PaymentIntentService:
    """Creates payment intents on behalf of the browser checkout."""

    def __init__(
        self,
        settings: Settings,
        processor: PaymentProcessor,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.settings = settings
        self.processor = processor
        self.clock = clock

    @property
    def mode(self) -> ProcessorMode:
        return self.settings.mode

    def _check_test_card(self, req: PaymentRequest) -> None:
        if self.mode is not ProcessorMode.LIVE:
            return
        number = req.card_number()
        if number is not None and number.startswith(TEST_CARD_PREFIX):
            raise TestCardInLiveMode("Test cards cannot be used in live mode. Please use a real card.")

    def _validate_amount(self, raw: Any) -> int:
        minimum = self.settings.minimum_amount
        value = parse_amount(raw)
        if not value or value < minimum:
            raise InvalidAmount(f"Invalid amount. Minimum payment is £{minimum / 100:.2f}.")
        return round_half_up(value)

    def build_metadata(self, caller_metadata: dict[str, Any]) -> dict[str, Any]:
        """Merge caller metadata with the server-set fields, server values winning."""

        return {
            **caller_metadata,
            "timestamp": format_timestamp(self.clock()),
            "mode": self.mode.value,
        }

    async def create_payment_intent(self, req: PaymentRequest) -> PaymentIntentResult:
        """Validate `req` and create a payment intent with the processor.

        Raises `TestCardInLiveMode` or `InvalidAmount` before any processor
        call, and `ProcessorError` when the processor fails. Nothing is retried.
        """

        service_name = self.settings.service_name
        mode = self.mode.value
        mode_token = mode_ctx.set(mode)
        try:
            return await self._create(req, service_name, mode)
        finally:
            mode_ctx.reset(mode_token)

    async def _create(self, req: PaymentRequest, service_name: str, mode: str) -> PaymentIntentResult:
        payment_intent_requests_total.labels(service=service_name, mode=mode).inc()

        try:
            self._check_test_card(req)
            amount = self._validate_amount(req.amount)
        except PaymentIntentError as exc:
            result = "test_card_in_live_mode" if isinstance(exc, TestCardInLiveMode) else "invalid_amount"
            payment_intent_outcomes_total.labels(service=service_name, mode=mode, result=result).inc()
            logger.warning("payment intent rejected result=%s reason=%s", result, exc.message)
            raise

        currency = (req.currency or self.settings.default_currency).lower()
        try:
            with processor_latency_seconds.labels(service=service_name, mode=mode).time():
                intent = await self.processor.create_payment_intent(
                    amount=amount,
                    currency=currency,
                    metadata=self.build_metadata(req.metadata),
                    automatic_payment_methods={"enabled": True},
                    payment_method_options=THREE_D_SECURE,
                )
        except PaymentIntentError:
            payment_intent_outcomes_total.labels(
                service=service_name, mode=mode, result="processor_error"
            ).inc()
            raise

        payment_intent_outcomes_total.labels(service=service_name, mode=mode, result="created").inc()
        logger.info(
            "payment intent created intent_id=%s amount=%s currency=%s",
            intent.id,
            amount,
            currency,
        )
        return PaymentIntentResult(clientSecret=intent.client_secret, metadata=req.metadata)
