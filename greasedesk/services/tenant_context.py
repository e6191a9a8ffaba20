"""Single resolver for the (user, group, site, role) tenant context.

Every authenticated endpoint goes through :func:`resolve_tenant_context`. Tenant
fields are never taken from the session: the users row is re-read on each
request so onboarding and invite changes made after login are visible at once.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy import func
from sqlalchemy.orm import Session

from greasedesk.core.errors import NotAuthenticated, TenantContextMissing, UserNotFound
from greasedesk.models.user import ADMIN_ROLES, User
from greasedesk.services.session_auth import Principal

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TenantContext:
    user_id: str
    group_id: str
    site_id: str | None
    role: str
    email: str

    @property
    def is_admin(self) -> bool:
        return (self.role or "").upper() in ADMIN_ROLES

    def require_site(self) -> str:
        if not self.site_id:
            raise TenantContextMissing(
                "Site context not found. Please complete the site setup step first."
            )
        return self.site_id


def load_principal_user(db: Session, principal: Principal | None) -> User:
    if principal is None or not (principal.user_id or principal.email):
        raise NotAuthenticated()

    if principal.user_id:
        user = db.query(User).filter(User.id == principal.user_id).first()
    else:
        normalized_email = principal.email.strip().lower()
        user = db.query(User).filter(func.lower(User.email) == normalized_email).first()

    if user is None:
        raise UserNotFound()
    return user


def resolve_tenant_context(db: Session, principal: Principal | None) -> TenantContext:
    user = load_principal_user(db, principal)

    if not user.group_id:
        logger.info("tenant context missing user_id=%s", user.id)
        raise TenantContextMissing()

    return TenantContext(
        user_id=user.id,
        group_id=user.group_id,
        site_id=user.site_id,
        role=(user.role or "").upper(),
        email=user.email,
    )
