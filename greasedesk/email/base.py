from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


@dataclass
class EmailMessage:
    to: str
    subject: str
    html: str
    tags: dict[str, str] = field(default_factory=dict)


@dataclass
class EmailSendResult:
    status: str
    provider_message_id: str | None = None
    error: str | None = None
    response_payload: dict[str, Any] | None = None

    @property
    def ok(self) -> bool:
        return self.status == "sent"


class EmailProvider(Protocol):
    name: str

    def send(self, message: EmailMessage) -> EmailSendResult:
        ...


def mask_email(address: str | None) -> str:
    if not address or "@" not in address:
        return "****"
    local, _, domain = address.partition("@")
    return f"{local[:1]}***@{domain}"
