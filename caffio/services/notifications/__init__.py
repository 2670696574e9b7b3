"""
Where order status notifications go: logged locally in development,
SMS otherwise.
"""

import logging
from functools import lru_cache

from caffio.core.config import get_settings
from caffio.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)
from caffio.services.notifications.mock import MockNotificationService, SentNotification
from caffio.services.notifications.sms import SmsNotificationService

logger = logging.getLogger(__name__)


@lru_cache()
def get_notification_service() -> BaseNotificationService:
    """Cached notifier for the current ENV_MODE."""
    settings = get_settings()

    if settings.is_development:
        logger.info("Notifications: local log (development mode)")
        return MockNotificationService(failure_rate=settings.mock_failure_rate)

    logger.info(f"Notifications: Twilio SMS ({settings.env_mode.value} mode)")
    return SmsNotificationService()


def reset_notification_service() -> None:
    """Clear the cached service instance."""
    get_notification_service.cache_clear()


__all__ = [
    "get_notification_service",
    "reset_notification_service",
    "BaseNotificationService",
    "NotificationResult",
    "MockNotificationService",
    "SentNotification",
    "SmsNotificationService",
]
