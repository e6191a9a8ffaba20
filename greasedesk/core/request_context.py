from __future__ import annotations

from contextvars import ContextVar


_REQUEST_ID_CTX: ContextVar[str | None] = ContextVar("request_id", default=None)
_GROUP_ID_CTX: ContextVar[str | None] = ContextVar("group_id", default=None)
_SITE_ID_CTX: ContextVar[str | None] = ContextVar("site_id", default=None)
_USER_ID_CTX: ContextVar[str | None] = ContextVar("user_id", default=None)


def set_request_context(
    *,
    request_id: str | None = None,
    group_id: str | None = None,
    site_id: str | None = None,
    user_id: str | None = None,
) -> None:
    if request_id is not None:
        _REQUEST_ID_CTX.set(request_id)
    if group_id is not None:
        _GROUP_ID_CTX.set(group_id)
    if site_id is not None:
        _SITE_ID_CTX.set(site_id)
    if user_id is not None:
        _USER_ID_CTX.set(user_id)


def get_request_id() -> str | None:
    return _REQUEST_ID_CTX.get()


def get_group_id() -> str | None:
    return _GROUP_ID_CTX.get()


def get_site_id() -> str | None:
    return _SITE_ID_CTX.get()


def get_user_id() -> str | None:
    return _USER_ID_CTX.get()


def clear_request_context() -> None:
    _REQUEST_ID_CTX.set(None)
    _GROUP_ID_CTX.set(None)
    _SITE_ID_CTX.set(None)
    _USER_ID_CTX.set(None)
