from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Dict, Optional
from urllib.parse import urlsplit

from fastapi import Request, Response
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from greasedesk.core.config import (
    SESSION_COOKIE_DOMAIN,
    SESSION_COOKIE_SAMESITE,
    SESSION_COOKIE_SECURE,
    SESSION_MAX_AGE_SECONDS,
    SESSION_SECRET,
)

SESSION_COOKIE_NAME = "gd_session"
SESSION_SALT = "greasedesk-session"


@dataclass(frozen=True)
class Principal:
    """Authenticated identity from a session. Carries no tenant claims."""

    user_id: str | None = None
    email: str | None = None


def _serializer() -> URLSafeTimedSerializer:
    if not SESSION_SECRET:
        raise RuntimeError("SESSION_SECRET is not configured.")
    return URLSafeTimedSerializer(SESSION_SECRET, salt=SESSION_SALT)


def create_session_token(*, user_id: str, email: str) -> str:
    # Only identity goes into the token; group/site/role are always read from the database.
    payload = {
        "user_id": user_id,
        "email": email,
        "exp": int(time.time()) + SESSION_MAX_AGE_SECONDS,
    }
    return _serializer().dumps(payload)


def decode_session_token(token: str) -> Optional[Dict[str, Any]]:
    try:
        payload = _serializer().loads(token, max_age=SESSION_MAX_AGE_SECONDS)
    except (BadSignature, SignatureExpired, ValueError):
        return None
    if not isinstance(payload, dict):
        return None
    exp = payload.get("exp")
    if exp is not None:
        try:
            if int(exp) < int(time.time()):
                return None
        except (TypeError, ValueError):
            return None
    return payload


def principal_from_payload(payload: Optional[Dict[str, Any]]) -> Principal | None:
    if not payload:
        return None
    user_id = payload.get("user_id") or payload.get("sub")
    email = payload.get("email")
    return Principal(
        user_id=str(user_id).strip() if user_id else None,
        email=str(email).strip().lower() if email else None,
    )


def extract_session_token(request: Request) -> str | None:
    # An explicit bearer header wins over the browser cookie.
    auth_header = request.headers.get("authorization") or ""
    scheme, _, credentials = auth_header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(SESSION_COOKIE_NAME) or None


def build_session_cookie_options(request: Request | None = None) -> dict[str, Any]:
    secure = SESSION_COOKIE_SECURE
    samesite = SESSION_COOKIE_SAMESITE

    host = ""
    origin_host = ""
    if request is not None:
        host = (request.headers.get("x-forwarded-host") or request.headers.get("host") or "").lower()
        host = host.split(",")[0].strip().split(":")[0]

        origin = (request.headers.get("origin") or "").strip()
        if origin:
            origin_host = (urlsplit(origin).hostname or "").lower()

    is_local_request = host in {"", "localhost", "127.0.0.1", "testserver"}
    is_cross_site_request = bool(origin_host and host and origin_host != host)

    if not is_local_request:
        secure = True

    if is_cross_site_request and secure:
        samesite = "none"

    # Browsers reject SameSite=None without Secure.
    if samesite == "none" and not secure:
        samesite = "lax"

    return {
        "domain": SESSION_COOKIE_DOMAIN,
        "httponly": True,
        "samesite": samesite,
        "path": "/",
        "secure": secure,
    }


def set_session_cookie(response: Response, token: str, request: Request | None = None) -> None:
    response.set_cookie(
        key=SESSION_COOKIE_NAME,
        value=token,
        max_age=SESSION_MAX_AGE_SECONDS,
        **build_session_cookie_options(request),
    )


def clear_session_cookie(response: Response, request: Request | None = None) -> None:
    response.delete_cookie(
        key=SESSION_COOKIE_NAME,
        **build_session_cookie_options(request),
    )
