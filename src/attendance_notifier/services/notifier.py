from __future__ import annotations

import logging
from typing import Any, Optional, Protocol

from twilio.rest import Client

from attendance_notifier.config.settings import TwilioConfig
from attendance_notifier.models import NotificationOutcome

logger = logging.getLogger(__name__)

WHATSAPP_PREFIX = "whatsapp:"


class NotificationGateway(Protocol):
    def send(self, address: str, text: str) -> NotificationOutcome:
        """Deliver ``text`` to ``address`` once and report the outcome."""


def whatsapp_address(number: str) -> str:
    number = number.strip()
    if number.startswith(WHATSAPP_PREFIX):
        return number
    return f"{WHATSAPP_PREFIX}{number}"


class TwilioWhatsAppGateway:
    """Send WhatsApp messages through Twilio; a single attempt per call."""

    def __init__(self, from_number: Optional[str], client: Any | None = None) -> None:
        self._from_number = whatsapp_address(from_number) if from_number else None
        self._client = client

    @classmethod
    def from_config(cls, config: TwilioConfig) -> "TwilioWhatsAppGateway":
        if not config.is_configured:
            logger.warning("Twilio credentials missing; WhatsApp delivery is disabled.")
            return cls(config.whatsapp_number, client=None)
        return cls(config.whatsapp_number, client=Client(config.account_sid, config.auth_token))

    @property
    def is_configured(self) -> bool:
        return self._client is not None

    def send(self, address: str, text: str) -> NotificationOutcome:
        if self._client is None:
            logger.error("Twilio client not initialized. Check environment variables.")
            return NotificationOutcome.failed("Twilio not configured.")

        try:
            message = self._client.messages.create(
                from_=self._from_number,
                body=text,
                to=whatsapp_address(address),
            )
        except Exception as exc:  # twilio raises TwilioRestException and transport errors alike
            logger.error("Failed to send WhatsApp message to %s: %s", address, exc)
            return NotificationOutcome.failed(str(exc) or exc.__class__.__name__)

        logger.info("WhatsApp message sent successfully to %s (sid=%s)", address, getattr(message, "sid", "?"))
        return NotificationOutcome.delivered()
