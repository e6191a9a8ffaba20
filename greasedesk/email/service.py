from __future__ import annotations

import logging

from greasedesk.core.config import EMAIL_PROVIDER
from greasedesk.email.base import EmailMessage, EmailProvider, mask_email
from greasedesk.email.mock_provider import MockEmailProvider
from greasedesk.email.resend_provider import ResendEmailProvider
from greasedesk.email.templates import (
    VERIFICATION_SUBJECT,
    invitation_email_html,
    invitation_subject,
    verification_email_html,
)

logger = logging.getLogger(__name__)


def build_provider(name: str | None = None) -> EmailProvider:
    selected = (name or EMAIL_PROVIDER).strip().lower()
    if selected == "resend":
        return ResendEmailProvider()
    return MockEmailProvider()


class EmailService:
    """Best-effort transactional email. Sends never raise; they return ``True`` on acceptance."""

    def __init__(self, provider: EmailProvider | None = None) -> None:
        self.provider = provider or build_provider()

    def send_email(self, to: str, subject: str, html: str, *, tags: dict[str, str] | None = None) -> bool:
        message = EmailMessage(to=to, subject=subject, html=html, tags=tags or {})
        try:
            result = self.provider.send(message)
        except Exception:
            logger.exception("email provider crashed provider=%s to=%s", self.provider.name, mask_email(to))
            return False
        if not result.ok:
            logger.warning(
                "email not delivered provider=%s to=%s error=%s",
                self.provider.name,
                mask_email(to),
                result.error,
            )
        return result.ok

    def send_verification_email(self, to: str, user_name: str, verification_link: str) -> bool:
        return self.send_email(
            to,
            VERIFICATION_SUBJECT,
            verification_email_html(user_name, verification_link),
            tags={"category": "verification"},
        )

    def send_team_invitation_email(self, to: str, garage_name: str, invite_link: str) -> bool:
        return self.send_email(
            to,
            invitation_subject(garage_name),
            invitation_email_html(garage_name, invite_link),
            tags={"category": "invitation"},
        )


_default_service: EmailService | None = None


def get_default_email_service() -> EmailService:
    global _default_service
    if _default_service is None:
        _default_service = EmailService()
    return _default_service
