# greasedesk/deps.py
from __future__ import annotations

import logging
from typing import Iterable

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from greasedesk.core.database import get_db
from greasedesk.core.errors import NotAuthenticated
from greasedesk.core.request_context import set_request_context
from greasedesk.email.service import EmailService, get_default_email_service
from greasedesk.models.user import ADMIN_ROLES
from greasedesk.services.authorization_service import AuthorizationService
from greasedesk.services.session_auth import (
    Principal,
    decode_session_token,
    extract_session_token,
    principal_from_payload,
)
from greasedesk.services.tenant_context import TenantContext, resolve_tenant_context

logger = logging.getLogger(__name__)


def _endpoint(request: Request) -> str:
    return f"{request.method} {request.url.path}"


def get_email_service() -> EmailService:
    return get_default_email_service()


def get_current_principal(request: Request) -> Principal:
    """Read the signed session from the cookie or a bearer header.

    Only identity is taken from the token; tenant fields come from the database.
    """
    token = extract_session_token(request)
    if not token:
        raise NotAuthenticated()

    principal = principal_from_payload(decode_session_token(token))
    if principal is None or not (principal.user_id or principal.email):
        raise NotAuthenticated("Session expired. Please sign in again.")

    set_request_context(user_id=principal.user_id)
    return principal


def get_tenant_context(
    request: Request,
    principal: Principal = Depends(get_current_principal),
    db: Session = Depends(get_db),
) -> TenantContext:
    context = resolve_tenant_context(db, principal)
    request.state.tenant_context = context
    set_request_context(
        group_id=context.group_id,
        site_id=context.site_id,
        user_id=context.user_id,
    )
    return context


def require_site_context(context: TenantContext = Depends(get_tenant_context)) -> TenantContext:
    context.require_site()
    return context


def require_role(roles: Iterable[str]):
    allowed = {role.strip().upper() for role in roles}

    def _dependency(
        request: Request,
        context: TenantContext = Depends(get_tenant_context),
    ) -> TenantContext:
        AuthorizationService.ensure_role(context=context, roles=allowed, endpoint=_endpoint(request))
        return context

    return _dependency


require_admin_role = require_role(ADMIN_ROLES)
