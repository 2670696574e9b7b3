"""
Payment Service Abstract Base Class

Defines the interface contract for all payment service implementations.
Both MockPaymentService and StripePaymentService implement these methods,
so endpoints behave the same regardless of which service is active.

Payments are client-confirmed: the API only creates a payment intent and
hands its client secret to the app, which completes the payment with the
provider's SDK.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional


@dataclass
class PaymentResult:
    """
    Standardized result from a payment intent operation.

    Attributes:
        success: Whether the provider call succeeded
        payment_intent_id: Provider identifier (Stripe format: pi_xxx)
        client_secret: Secret the app uses to confirm the payment
        status: Provider status (requires_payment_method, succeeded, canceled, ...)
        amount: Amount in major currency units (dollars, not cents)
        currency: Currency code (e.g., "usd")
        error_message: Error description if the call failed
        error_code: Machine-readable error code
        response_time_ms: Time taken by the provider call
        metadata: Key-value data attached to the intent
    """
    success: bool
    payment_intent_id: Optional[str] = None
    client_secret: Optional[str] = None
    status: Optional[str] = None
    amount: Optional[float] = None
    currency: str = "usd"
    error_message: Optional[str] = None
    error_code: Optional[str] = None
    response_time_ms: float = 0.0
    metadata: Optional[dict] = None


class BasePaymentService(ABC):
    """
    Abstract base class for payment services.

    Example:
        >>> service = get_payment_service()  # Returns Mock or Stripe
        >>> result = await service.create_payment_intent(17.40, "aud")
        >>> if result.success:
        ...     print(result.client_secret)
    """

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Return the name of the payment provider ("mock", "stripe")."""
        pass

    @abstractmethod
    async def create_payment_intent(
        self,
        amount: float,
        currency: str = "usd",
        metadata: Optional[dict[str, str]] = None,
    ) -> PaymentResult:
        """
        Create a payment intent for client-side confirmation.

        Args:
            amount: Amount in dollars (implementations convert to cents)
            currency: Three-letter currency code
            metadata: Additional string data to attach (orderId, customerId)

        Returns:
            PaymentResult: Contains the client secret for the app
        """
        pass

    @abstractmethod
    async def retrieve_payment_intent(self, payment_intent_id: str) -> PaymentResult:
        """Fetch the current status of a payment intent."""
        pass

    @abstractmethod
    async def cancel_payment_intent(self, payment_intent_id: str) -> PaymentResult:
        """Cancel a payment intent that has not been completed."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """
        Verify connectivity to the payment service.

        Returns:
            bool: True if service is reachable and operational
        """
        pass
