"""Payment processor capability and its Stripe binding."""

from dataclasses import dataclass
from typing import Any, Protocol

import stripe
from starlette.concurrency import run_in_threadpool

from intentpay.common.logging import logger
from intentpay.services.payment_intent.errors import ProcessorError


@dataclass(frozen=True)
class ProcessorIntent:
    """Subset of the processor's payment intent the backend needs."""

    id: str
    client_secret: str


class PaymentProcessor(Protocol):
    """Creates payment intents with an external processor."""

    async def create_payment_intent(
        self,
        *,
        amount: int,
        currency: str,
        metadata: dict[str, Any],
        automatic_payment_methods: dict[str, Any],
        payment_method_options: dict[str, Any],
    ) -> ProcessorIntent: ...


class StripeProcessor:
    """Stripe-backed processor using the configured secret key.

    The SDK call is blocking, so it runs in the thread pool to keep the event
    loop free while Stripe responds.
    """

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    async def create_payment_intent(
        self,
        *,
        amount: int,
        currency: str,
        metadata: dict[str, Any],
        automatic_payment_methods: dict[str, Any],
        payment_method_options: dict[str, Any],
    ) -> ProcessorIntent:
        try:
            intent = await run_in_threadpool(
                stripe.PaymentIntent.create,
                api_key=self.api_key,
                amount=amount,
                currency=currency,
                metadata=metadata,
                automatic_payment_methods=automatic_payment_methods,
                payment_method_options=payment_method_options,
            )
        except stripe.StripeError as exc:
            message = exc.user_message or str(exc)
            logger.warning(
                "stripe rejected payment intent error_type=%s code=%s",
                type(exc).__name__,
                exc.code,
            )
            raise ProcessorError(message) from exc
        return ProcessorIntent(id=intent.id, client_secret=intent.client_secret)
