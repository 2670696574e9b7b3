"""
Order status notifications delivered as SMS through Twilio.

Used by the order watcher outside development mode. Without Twilio
credentials or a recipient number every send reports failure instead of
raising, so a misconfigured watcher keeps polling.
"""

import asyncio
import logging
from typing import Any, Optional

from twilio.rest import Client as TwilioClient
from twilio.base.exceptions import TwilioException

from caffio.core.config import get_settings
from caffio.services.notifications.base import (
    BaseNotificationService,
    NotificationResult,
)

logger = logging.getLogger(__name__)


class SmsNotificationService(BaseNotificationService):
    """Sends ``"<title>: <body>"`` to one phone number."""

    def __init__(self, to_phone: Optional[str] = None):
        settings = get_settings()

        self._client = None
        if settings.twilio_account_sid and settings.twilio_auth_token:
            self._client = TwilioClient(settings.twilio_account_sid, settings.twilio_auth_token)
        else:
            logger.warning("SMS disabled: TWILIO_ACCOUNT_SID/TWILIO_AUTH_TOKEN unset")

        self._from_phone = settings.twilio_phone_number
        self.to_phone = to_phone or settings.notification_phone_number

    @property
    def provider_name(self) -> str:
        return "twilio"

    def _failed(self, message: str) -> NotificationResult:
        return NotificationResult(success=False, error_message=message, provider=self.provider_name)

    async def send_notification(
        self,
        title: str,
        body: str,
        data: Optional[dict[str, Any]] = None,
    ) -> NotificationResult:
        if self._client is None:
            return self._failed("Twilio not configured")
        if not self.to_phone:
            return self._failed("No recipient phone number configured")

        try:
            message = await asyncio.to_thread(
                self._client.messages.create,
                body=f"{title}: {body}",
                from_=self._from_phone,
                to=self.to_phone,
            )
        except TwilioException as e:
            logger.error(f"SMS to {self.to_phone} failed: {e}")
            return self._failed(str(e))

        logger.info(f"SMS {message.sid} → {self.to_phone} ({title})")
        return NotificationResult(success=True, message_id=message.sid, provider=self.provider_name)

    async def health_check(self) -> bool:
        if self._client is None:
            return False

        try:
            await asyncio.to_thread(self._client.api.accounts(self._client.username).fetch)
        except TwilioException as e:
            logger.error(f"Twilio account fetch failed: {e}")
            return False
        return True
