from __future__ import annotations

import logging

import httpx

from greasedesk.core.config import EMAIL_FROM, EMAIL_TIMEOUT_SECONDS, RESEND_API_KEY, RESEND_API_URL
from greasedesk.email.base import EmailMessage, EmailProvider, EmailSendResult, mask_email

logger = logging.getLogger(__name__)


class ResendEmailProvider(EmailProvider):
    name = "resend"

    def __init__(
        self,
        api_key: str | None = None,
        *,
        api_url: str = RESEND_API_URL,
        sender: str = EMAIL_FROM,
        timeout: float = EMAIL_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.api_key = api_key if api_key is not None else RESEND_API_KEY
        self.api_url = api_url
        self.sender = sender
        self.timeout = timeout
        self._transport = transport

    def send(self, message: EmailMessage) -> EmailSendResult:
        if not self.api_key:
            logger.error("RESEND_API_KEY is not configured; email to=%s not sent", mask_email(message.to))
            return EmailSendResult(status="failed", error="missing_api_key")

        payload = {
            "from": self.sender,
            "to": [message.to],
            "subject": message.subject,
            "html": message.html,
        }
        if message.tags:
            payload["tags"] = [{"name": key, "value": value} for key, value in message.tags.items()]
        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            with httpx.Client(timeout=self.timeout, transport=self._transport) as client:
                response = client.post(self.api_url, headers=headers, json=payload)
        except httpx.HTTPError as exc:
            logger.warning("resend request failed to=%s error=%s", mask_email(message.to), exc.__class__.__name__)
            return EmailSendResult(status="failed", error=str(exc))

        try:
            data = response.json()
        except ValueError:
            data = {"raw": response.text}

        if 200 <= response.status_code < 300:
            provider_id = data.get("id") if isinstance(data, dict) else None
            logger.info("email sent to=%s provider_id=%s", mask_email(message.to), provider_id)
            return EmailSendResult(status="sent", provider_message_id=provider_id, response_payload=data)

        logger.warning(
            "resend rejected email to=%s status_code=%s",
            mask_email(message.to),
            response.status_code,
        )
        return EmailSendResult(
            status="failed",
            error=f"Resend error {response.status_code}",
            response_payload=data if isinstance(data, dict) else None,
        )
