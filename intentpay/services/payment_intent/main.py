"""HTTP surface for the browser checkout.

Creates payment intents, hands the publishable key to the browser and serves
the static checkout site with a single-page-app fallback.
"""

import json
from time import perf_counter
from typing import Any
from uuid import uuid4

import uvicorn
from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse, RedirectResponse
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from intentpay.common.config import Settings, settings
from intentpay.common.logging import configure_logging, logger, trace_id_ctx
from intentpay.common.metrics import (
    http_request_duration_seconds,
    http_requests_total,
    metrics_response,
)
from intentpay.common.startup import log_startup_config
from intentpay.common.tracing import instrument_app, setup_tracing
from intentpay.services.payment_intent.errors import PaymentIntentError
from intentpay.services.payment_intent.processor import PaymentProcessor, StripeProcessor
from intentpay.services.payment_intent.schemas import (
    PaymentIntentResult,
    PaymentRequest,
    PublishableKeyResponse,
)
from intentpay.services.payment_intent.service import PaymentIntentService
from intentpay.services.payment_intent.site import NOT_FOUND_PAGE, SUCCESS_PAGE, CheckoutFiles

FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def _validation_message(exc: ValidationError) -> str:
    """First validation problem as `field.path: message`."""

    first = exc.errors()[0]
    field = ".".join(str(part) for part in first["loc"])
    return f"{field}: {first['msg']}" if field else first["msg"]


def nest_form_fields(items) -> dict[str, Any]:
    """Expand bracketed form keys into nested mappings.

    `payment_method_data[card][number]=4242` becomes
    `{"payment_method_data": {"card": {"number": "4242"}}}`. File uploads are
    ignored.
    """

    data: dict[str, Any] = {}
    for key, value in items:
        if not isinstance(value, str):
            continue
        head, _, rest = key.partition("[")
        parts = [head] + ([part.rstrip("]") for part in rest.split("[")] if rest else [])
        node = data
        for part in parts[:-1]:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[parts[-1]] = value
    return data


async def read_payment_body(request: Request) -> Any:
    """Decode a JSON or form-encoded request body; an empty body reads as `{}`.

    Raises ValueError when a JSON body cannot be parsed.
    """

    content_type = request.headers.get("content-type", "").split(";")[0].strip().lower()
    if content_type in FORM_CONTENT_TYPES:
        form = await request.form()
        return nest_form_fields(form.multi_items())
    body = await request.body()
    return json.loads(body) if body.strip() else {}


def create_app(
    app_settings: Settings | None = None,
    processor: PaymentProcessor | None = None,
) -> FastAPI:
    """Build the FastAPI app around one settings object and one processor."""

    cfg = app_settings or settings
    configure_logging(cfg.service_name, cfg.log_level)
    setup_tracing(cfg.service_name, cfg.otel_exporter_otlp_endpoint)
    log_startup_config(cfg)

    service = PaymentIntentService(cfg, processor or StripeProcessor(cfg.stripe_secret_key))
    templates = Jinja2Templates(directory=str(cfg.templates_dir))

    application = FastAPI(title="Payment Intent Backend")
    application.state.settings = cfg
    application.state.service = service
    instrument_app(application)

    @application.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Tag the request with a trace id and record count and latency."""

        trace_id = request.headers.get("x-correlation-id") or str(uuid4())
        trace_token = trace_id_ctx.set(trace_id)
        start = perf_counter()
        route = request.url.path
        method = request.method
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            route_obj = request.scope.get("route")
            if route_obj is not None and getattr(route_obj, "path", None):
                route = route_obj.path
            response.headers["x-correlation-id"] = trace_id
            return response
        finally:
            elapsed = max(0.0, perf_counter() - start)
            http_request_duration_seconds.labels(
                service=cfg.service_name,
                route=route,
                method=method,
            ).observe(elapsed)
            http_requests_total.labels(
                service=cfg.service_name,
                route=route,
                method=method,
                status_code=str(status_code),
            ).inc()
            trace_id_ctx.reset(trace_token)

    @application.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        """Serve the 404 page for unmatched paths, JSON for everything else."""

        if exc.status_code != 404:
            return JSONResponse(
                status_code=exc.status_code,
                content={"error": exc.detail},
                headers=exc.headers,
            )
        page = cfg.public_dir / NOT_FOUND_PAGE
        if not page.is_file():
            return PlainTextResponse("Page not found", status_code=404)
        return FileResponse(page, status_code=404)

    @application.exception_handler(Exception)
    async def server_error(request: Request, exc: Exception):
        logger.error("unhandled server error path=%s", request.url.path, exc_info=exc)
        content = {"error": "Internal server error"}
        if cfg.is_development:
            content["message"] = str(exc)
        return JSONResponse(status_code=500, content=content)

    @application.post("/create-payment-intent", response_model=PaymentIntentResult)
    async def create_payment_intent(request: Request):
        """Create a payment intent and return its client secret."""

        try:
            raw = await read_payment_body(request)
        except ValueError:
            return _error(400, "Invalid JSON body")
        if not isinstance(raw, dict):
            return _error(400, "Expected JSON object")
        try:
            req = PaymentRequest.model_validate(raw)
        except ValidationError as exc:
            return _error(400, _validation_message(exc))

        try:
            return await service.create_payment_intent(req)
        except PaymentIntentError as exc:
            if exc.status_code >= 500:
                logger.error("error creating payment intent: %s", exc.message)
            return _error(exc.status_code, exc.message or "Failed to create payment intent")

    @application.get("/get-stripe-key", response_model=PublishableKeyResponse)
    def get_stripe_key():
        """Publishable key for initialising Stripe.js in the browser."""

        return PublishableKeyResponse(publishableKey=cfg.stripe_publishable_key)

    @application.get("/payment-success")
    def payment_success(request: Request):
        query = request.url.query
        if query:
            return RedirectResponse(f"/{SUCCESS_PAGE}?{query}", status_code=302)
        page = cfg.public_dir / SUCCESS_PAGE
        if not page.is_file():
            raise StarletteHTTPException(status_code=404)
        return FileResponse(page)

    @application.get("/pricing")
    def pricing(request: Request):
        return templates.TemplateResponse(
            request,
            "pricing.html",
            {"STRIPE_PUBLISHABLE_KEY": cfg.stripe_publishable_key},
        )

    @application.get("/health")
    def health():
        """Container health probe endpoint."""

        return {"ok": True}

    @application.get("/metrics")
    def metrics():
        """Prometheus scrape endpoint."""

        return metrics_response()

    # Mounted last so every route above takes precedence.
    application.mount("/", CheckoutFiles(cfg.public_dir), name="site")
    return application


app = create_app()


def run() -> None:
    """Console entrypoint: serve the app with uvicorn on the configured port."""

    uvicorn.run(app, host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
