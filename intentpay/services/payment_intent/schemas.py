"""API request/response schemas for the payment intent endpoints."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class CardDetails(BaseModel):
    """Raw card fields; only `number` is ever inspected."""

    model_config = ConfigDict(extra="allow")

    number: str | int | None = None


class PaymentMethodData(BaseModel):
    model_config = ConfigDict(extra="allow")

    card: CardDetails | None = None


class PaymentRequest(BaseModel):
    """Payload accepted by `POST /create-payment-intent`.

    `amount` is left loosely typed so the service can report a missing or
    non-numeric value as an invalid amount rather than a schema error.
    """

    model_config = ConfigDict(extra="ignore")

    amount: Any = None
    currency: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    payment_method_data: PaymentMethodData | None = None

    @field_validator("metadata", mode="before")
    @classmethod
    def null_metadata_is_empty(cls, v: Any) -> Any:
        return {} if v is None else v

    def card_number(self) -> str | None:
        if self.payment_method_data is None or self.payment_method_data.card is None:
            return None
        number = self.payment_method_data.card.number
        if number is None:
            return None
        return str(number)


class PaymentIntentResult(BaseModel):
    """Response returned to the browser after the processor accepted the intent."""

    clientSecret: str
    metadata: dict[str, Any]


class PublishableKeyResponse(BaseModel):
    publishableKey: str
