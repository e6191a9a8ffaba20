from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable
from urllib.parse import quote, urlencode

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from greasedesk.core.config import BASE_URL
from greasedesk.core.errors import Conflict, TenantContextMissing, ValidationError
from greasedesk.email.service import EmailService
from greasedesk.models.group import Group
from greasedesk.models.invite import Invite
from greasedesk.models.user import (
    ADMIN_ROLES,
    INVITE_PENDING_HASH,
    ROLE_ADMIN,
    ROLE_MECHANIC,
    ROLE_STAFF,
    User,
)
from greasedesk.services.authorization_service import AuthorizationService
from greasedesk.services.email_address import is_valid_email, normalize_email
from greasedesk.services.tenant_context import TenantContext
from greasedesk.services.upserts import upsert

logger = logging.getLogger(__name__)

INVITABLE_ROLES = (ROLE_ADMIN, ROLE_STAFF, ROLE_MECHANIC)
INVITE_STATUS_PENDING = "pending"


@dataclass(frozen=True)
class InviteRequest:
    email: str
    role: str


@dataclass
class InviteResult:
    count: int
    failed_emails: list[str] = field(default_factory=list)


def build_invite_link(group_id: str, email: str) -> str:
    query = urlencode({"email": email, "group": group_id}, quote_via=quote)
    return f"{BASE_URL}/onboarding/accept-invite?{query}"


def normalize_invites(invites: Iterable[InviteRequest] | None) -> list[InviteRequest]:
    """Validate the batch and collapse repeated emails, keeping the last entry."""
    items = list(invites or [])
    if not items:
        raise ValidationError("At least one invite is required.")

    collapsed: dict[str, InviteRequest] = {}
    for item in items:
        email = normalize_email(item.email)
        if not is_valid_email(email):
            raise ValidationError(f"Invalid email address: {item.email!r}.")
        role = (item.role or "").strip().upper()
        if role not in INVITABLE_ROLES:
            raise ValidationError(
                f"Invalid role for {email}: must be one of {', '.join(INVITABLE_ROLES)}."
            )
        collapsed.pop(email, None)
        collapsed[email] = InviteRequest(email=email, role=role)
    return list(collapsed.values())


def invite_team(
    db: Session,
    context: TenantContext,
    invites: Iterable[InviteRequest] | None,
    email_service: EmailService,
    *,
    endpoint: str | None = None,
) -> InviteResult:
    AuthorizationService.ensure_role(context=context, roles=ADMIN_ROLES, endpoint=endpoint)
    batch = normalize_invites(invites)
    inviter_email = normalize_email(context.email)
    if any(item.email == inviter_email for item in batch):
        raise ValidationError("You cannot invite yourself.")

    try:
        group = db.query(Group).filter(Group.id == context.group_id).first()
        if group is None:
            raise TenantContextMissing()
        garage_name = group.trading_name or group.group_name

        sent_links: list[tuple[str, str]] = []
        for item in batch:
            link = build_invite_link(group.id, item.email)
            existing = db.query(User.group_id).filter(User.email == item.email).first()
            if existing is not None and existing.group_id not in (None, group.id):
                logger.warning(
                    "invite reassigns user from group_id=%s to group_id=%s",
                    existing.group_id,
                    group.id,
                )

            upsert(
                db,
                User,
                keys={"email": item.email},
                values={
                    "role": item.role,
                    "group_id": group.id,
                    "site_id": context.site_id,
                },
                create_values={
                    "name": None,
                    "password_hash": INVITE_PENDING_HASH,
                    "is_active": False,
                    "email_verified_at": None,
                },
            )
            upsert(
                db,
                Invite,
                keys={"group_id": group.id, "email": item.email},
                values={"invite_link": link, "status": INVITE_STATUS_PENDING},
            )
            sent_links.append((item.email, link))
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.warning("invite batch conflicted group_id=%s", context.group_id)
        raise Conflict("One of the invited users conflicts with an existing account.")
    except Exception:
        db.rollback()
        raise

    failed: list[str] = []
    for email, link in sent_links:
        if not email_service.send_team_invitation_email(email, garage_name, link):
            failed.append(email)

    logger.info(
        "team invited group_id=%s count=%s failed=%s",
        context.group_id,
        len(sent_links),
        len(failed),
    )
    return InviteResult(count=len(sent_links), failed_emails=failed)
