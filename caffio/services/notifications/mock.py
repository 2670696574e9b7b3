"""
Development notifier: logs each notification and keeps it in ``sent`` so
callers and tests can inspect what would have been delivered.
"""

import random
import uuid
import logging
from dataclasses import dataclass, field
from typing import Any, Optional

from caffio.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)

logger = logging.getLogger(__name__)


@dataclass
class SentNotification:
    title: str
    body: str
    data: dict[str, Any] = field(default_factory=dict)
    message_id: str = ""


class MockNotificationService(BaseNotificationService):
    """Records notifications instead of delivering them."""

    def __init__(self, failure_rate: float = 0.0):
        self.failure_rate = failure_rate
        self.sent: list[SentNotification] = []
        logger.info(f"MockNotificationService ready (failure_rate={failure_rate:.0%})")

    @property
    def provider_name(self) -> str:
        return "mock"

    def _outage(self) -> bool:
        return random.random() < self.failure_rate

    async def send_notification(
        self,
        title: str,
        body: str,
        data: Optional[dict[str, Any]] = None,
    ) -> NotificationResult:
        """Record and log the notification."""
        if self._outage():
            logger.warning(f"Mock notification failed (simulated): {title}")
            return NotificationResult(
                success=False,
                error_message="Simulated notification failure",
                provider="mock"
            )

        message_id = f"notif_mock_{uuid.uuid4().hex[:12]}"
        self.sent.append(
            SentNotification(title=title, body=body, data=dict(data or {}), message_id=message_id)
        )
        logger.info(f"🔔 {title}: {body} (ID: {message_id})")

        return NotificationResult(
            success=True,
            message_id=message_id,
            provider="mock"
        )

    async def health_check(self) -> bool:
        return True
