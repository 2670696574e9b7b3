"""
In-memory payment intents for development mode.

Intents get ``pi_mock_`` ids and a client secret the real Stripe SDK will
reject. They live in a dict on the service instance, which the factory
caches, so create → retrieve → cancel works across requests until the
process restarts. MOCK_FAILURE_RATE and MOCK_LATENCY_SECONDS shape the
simulated provider.
"""

import asyncio
import random
import uuid
import logging
from typing import Optional

from caffio.services.payment.base import BasePaymentService, PaymentResult

logger = logging.getLogger(__name__)


class MockPaymentService(BasePaymentService):
    """
    Stripe stand-in with configurable outages and delay.

    Example:
        >>> service = MockPaymentService(failure_rate=0.0)
        >>> result = await service.create_payment_intent(17.40)
        >>> result.client_secret
        'pi_mock_..._secret_mock'
    """

    def __init__(
        self,
        failure_rate: float = 0.0,
        min_latency: float = 0.0,
        max_latency: float = 0.0,
    ):
        self.failure_rate = failure_rate
        self.min_latency = min_latency
        self.max_latency = max_latency
        self._intents: dict[str, PaymentResult] = {}

        logger.info(f"MockPaymentService ready ({failure_rate:.0%} failures, ≤{max_latency}s delay)")

    @property
    def provider_name(self) -> str:
        return "mock"

    async def _delay(self) -> float:
        """Sleep for a random simulated round trip; returns it in ms."""
        seconds = random.uniform(self.min_latency, self.max_latency)
        if seconds > 0:
            await asyncio.sleep(seconds)
        return seconds * 1000

    def _outage(self) -> bool:
        return random.random() < self.failure_rate

    def _simulated_outage(self, latency_ms: float) -> PaymentResult:
        logger.debug("Mock: simulated provider outage")
        return PaymentResult(
            success=False,
            error_message="Payment service temporarily unavailable",
            error_code="connection_error",
            response_time_ms=latency_ms,
        )

    def _not_found(self, payment_intent_id: str, latency_ms: float) -> PaymentResult:
        return PaymentResult(
            success=False,
            error_message=f"No such payment_intent: '{payment_intent_id}'",
            error_code="invalid_request",
            response_time_ms=latency_ms,
        )

    async def create_payment_intent(
        self,
        amount: float,
        currency: str = "usd",
        metadata: Optional[dict[str, str]] = None,
    ) -> PaymentResult:
        latency_ms = await self._delay()

        if amount <= 0:
            return PaymentResult(
                success=False,
                error_message="Amount must be greater than 0",
                error_code="invalid_amount",
                response_time_ms=latency_ms,
            )

        if self._outage():
            return self._simulated_outage(latency_ms)

        payment_intent_id = f"pi_mock_{uuid.uuid4().hex[:24]}"
        result = PaymentResult(
            success=True,
            payment_intent_id=payment_intent_id,
            client_secret=f"{payment_intent_id}_secret_mock",
            status="requires_payment_method",
            amount=round(amount, 2),
            currency=currency.lower(),
            response_time_ms=latency_ms,
            metadata=dict(metadata or {}),
        )
        self._intents[payment_intent_id] = result

        logger.info(f"Mock: Created payment intent {payment_intent_id} - ${amount:.2f}")
        return result

    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentResult:
        latency_ms = await self._delay()

        if self._outage():
            return self._simulated_outage(latency_ms)

        intent = self._intents.get(payment_intent_id)
        if intent is None:
            return self._not_found(payment_intent_id, latency_ms)
        return intent

    async def cancel_payment_intent(self, payment_intent_id: str) -> PaymentResult:
        latency_ms = await self._delay()

        intent = self._intents.get(payment_intent_id)
        if intent is None:
            return self._not_found(payment_intent_id, latency_ms)

        if intent.status == "succeeded":
            return PaymentResult(
                success=False,
                payment_intent_id=payment_intent_id,
                status=intent.status,
                error_message="You cannot cancel this PaymentIntent because it has a status of succeeded.",
                error_code="invalid_request",
                response_time_ms=latency_ms,
            )

        intent.status = "canceled"
        logger.info(f"Mock: Canceled payment intent {payment_intent_id}")
        return intent

    async def health_check(self) -> bool:
        logger.debug("Mock: healthy")
        return True
