"""
Stripe-backed payment intents.

Selected by the payment factory outside development mode and needs
STRIPE_SECRET_KEY. The app confirms intents client-side with the returned
client secret; this module never sees card data and never logs secrets.
Amounts cross the Stripe boundary in minor units (cents).
"""

import asyncio
import logging
from datetime import datetime
from typing import Any, Callable, Optional

import stripe
from stripe import (
    StripeError,
    InvalidRequestError,
    AuthenticationError,
    APIConnectionError,
)

from caffio.core.config import get_settings
from caffio.services.payment.base import BasePaymentService, PaymentResult

logger = logging.getLogger(__name__)

# Stripe exception -> (error_code, message shown to API callers, None = Stripe's own)
FAILURES = (
    (InvalidRequestError, "invalid_request", None),
    (AuthenticationError, "authentication_error", "Payment provider rejected our credentials"),
    (APIConnectionError, "connection_error", "Could not reach the payment provider"),
    (StripeError, "stripe_error", "Payment provider error"),
)


def to_minor_units(amount: float) -> int:
    return int(round(amount * 100))


def from_minor_units(amount: int) -> float:
    return amount / 100.0


class StripePaymentService(BasePaymentService):
    """
    PaymentIntent create / retrieve / cancel through the Stripe SDK.

    The SDK is blocking, so every call is pushed to a worker thread.
    """

    def __init__(self):
        settings = get_settings()
        if not settings.stripe_secret_key:
            raise ValueError(f"STRIPE_SECRET_KEY must be set when ENV_MODE={settings.env_mode.value}")

        stripe.api_key = settings.stripe_secret_key
        self._currency = settings.stripe_currency
        logger.info("StripePaymentService ready")

    @property
    def provider_name(self) -> str:
        return "stripe"

    async def _call(self, action: str, fn: Callable[..., Any], *args, **kwargs) -> PaymentResult:
        started = datetime.now()
        try:
            intent = await asyncio.to_thread(fn, *args, **kwargs)
        except StripeError as e:
            return self._failure(action, e, started)

        elapsed_ms = (datetime.now() - started).total_seconds() * 1000
        logger.info(f"Stripe: {action} {intent.id} → {intent.status} ({elapsed_ms:.0f}ms)")
        return PaymentResult(
            success=True,
            payment_intent_id=intent.id,
            client_secret=intent.client_secret,
            status=intent.status,
            amount=from_minor_units(intent.amount),
            currency=intent.currency,
            response_time_ms=elapsed_ms,
            metadata=dict(intent.metadata or {}),
        )

    def _failure(self, action: str, error: StripeError, started: datetime) -> PaymentResult:
        elapsed_ms = (datetime.now() - started).total_seconds() * 1000
        for error_type, code, message in FAILURES:
            if isinstance(error, error_type):
                break

        if code == "authentication_error":
            logger.critical(f"Stripe: {action} failed, bad API key - {error}")
        else:
            logger.error(f"Stripe: {action} failed [{code}] - {error}")

        return PaymentResult(
            success=False,
            error_message=message or str(error.user_message or error),
            error_code=code,
            response_time_ms=elapsed_ms,
        )

    async def create_payment_intent(
        self,
        amount: float,
        currency: str = "usd",
        metadata: Optional[dict[str, str]] = None,
    ) -> PaymentResult:
        if amount <= 0:
            return PaymentResult(
                success=False,
                error_message="Amount must be greater than 0",
                error_code="invalid_amount",
            )

        return await self._call(
            "create",
            stripe.PaymentIntent.create,
            amount=to_minor_units(amount),
            currency=(currency or self._currency).lower(),
            metadata=metadata or {},
            automatic_payment_methods={"enabled": True},
        )

    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentResult:
        return await self._call("retrieve", stripe.PaymentIntent.retrieve, payment_intent_id)

    async def cancel_payment_intent(self, payment_intent_id: str) -> PaymentResult:
        return await self._call("cancel", stripe.PaymentIntent.cancel, payment_intent_id)

    async def health_check(self) -> bool:
        try:
            await asyncio.to_thread(stripe.Account.retrieve)
        except StripeError as e:
            logger.error(f"Stripe: account lookup failed - {e}")
            return False
        return True
