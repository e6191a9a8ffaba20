from __future__ import annotations

import logging
import uuid

from greasedesk.email.base import EmailMessage, EmailProvider, EmailSendResult, mask_email

logger = logging.getLogger(__name__)


class MockEmailProvider(EmailProvider):
    """Keeps messages in memory instead of delivering them.

    Used in development and tests. ``fail_for`` makes sends to the listed
    addresses report a failure.
    """

    name = "mock"

    def __init__(self, fail_for: set[str] | None = None) -> None:
        self.outbox: list[EmailMessage] = []
        self.fail_for = {address.lower() for address in (fail_for or set())}

    def send(self, message: EmailMessage) -> EmailSendResult:
        if message.to.lower() in self.fail_for:
            logger.info("mock email rejected to=%s", mask_email(message.to))
            return EmailSendResult(status="failed", error="mock delivery failure")

        self.outbox.append(message)
        logger.info("mock email sent to=%s subject=%s", mask_email(message.to), message.subject)
        return EmailSendResult(status="sent", provider_message_id=f"mock-{uuid.uuid4().hex[:10]}")

    def messages_to(self, address: str) -> list[EmailMessage]:
        return [message for message in self.outbox if message.to.lower() == address.lower()]
