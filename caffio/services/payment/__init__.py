"""
Payment provider selection.

    ENV_MODE=development  -> MockPaymentService, in-memory intents
    ENV_MODE=staging      -> StripePaymentService with test keys
    ENV_MODE=production   -> StripePaymentService with live keys

Endpoints depend on ``get_payment_service`` so tests can override it.
"""

import logging
from functools import lru_cache

from caffio.core.config import get_settings
from caffio.services.payment.base import BasePaymentService, PaymentResult
from caffio.services.payment.mock import MockPaymentService
from caffio.services.payment.stripe import StripePaymentService

logger = logging.getLogger(__name__)


@lru_cache()
def get_payment_service() -> BasePaymentService:
    """
    Get the configured payment service instance.

    The instance is cached so the mock keeps its in-memory intents
    between requests.

    Raises:
        ValueError: If staging/production mode but Stripe key not configured
    """
    settings = get_settings()

    if settings.is_development:
        logger.info("Payment Service: Using MockPaymentService (development mode)")
        return MockPaymentService(
            failure_rate=settings.mock_failure_rate,
            max_latency=settings.mock_latency_seconds,
        )

    logger.info(
        f"Payment Service: Using StripePaymentService "
        f"({settings.env_mode.value} mode)"
    )
    return StripePaymentService()


def reset_payment_service() -> None:
    """
    Clear the cached payment service instance.

    The next call to get_payment_service() will create a new instance.
    """
    get_payment_service.cache_clear()
    logger.debug("Payment service cache cleared")


__all__ = [
    "get_payment_service",
    "reset_payment_service",
    "BasePaymentService",
    "PaymentResult",
    "MockPaymentService",
    "StripePaymentService",
]
