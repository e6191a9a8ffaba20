from __future__ import annotations

import logging
from typing import Iterable

from sqlalchemy.orm import Session

from greasedesk.core.errors import AuthorizationError, Forbidden
from greasedesk.models.site import Site
from greasedesk.services.tenant_context import TenantContext

logger = logging.getLogger(__name__)


class AuthorizationService:
    """Centralize role and tenant-ownership checks for tenant endpoints."""

    @staticmethod
    def normalize_role(role: str | None) -> str:
        return (role or "").strip().upper()

    @staticmethod
    def log_access_denied(
        *,
        reason: str,
        context: TenantContext,
        endpoint: str | None = None,
        resource_id: str | None = None,
    ) -> None:
        logger.warning(
            "Access denied (%s): user_id=%s user_role=%s group_id=%s resource_id=%s endpoint=%s",
            reason,
            context.user_id,
            context.role,
            context.group_id,
            resource_id,
            endpoint,
        )

    @classmethod
    def ensure_role(
        cls,
        *,
        context: TenantContext,
        roles: Iterable[str],
        endpoint: str | None = None,
    ) -> None:
        allowed = {cls.normalize_role(role) for role in roles}
        if cls.normalize_role(context.role) not in allowed:
            cls.log_access_denied(reason="role_denied", context=context, endpoint=endpoint)
            raise Forbidden("Only the owner or an admin can perform this action.")

    @classmethod
    def ensure_site_ownership(
        cls,
        db: Session,
        *,
        context: TenantContext,
        site_id: str,
        lock: bool = False,
        endpoint: str | None = None,
    ) -> Site:
        query = db.query(Site).filter(Site.id == site_id)
        if lock:
            query = query.with_for_update()
        site = query.first()

        # A missing site and a foreign site look the same to the caller.
        if site is None or site.group_id != context.group_id:
            cls.log_access_denied(
                reason="site_not_in_group",
                context=context,
                endpoint=endpoint,
                resource_id=site_id,
            )
            raise AuthorizationError("Site does not belong to your organisation.")
        return site
