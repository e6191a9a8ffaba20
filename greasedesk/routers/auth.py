# greasedesk/routers/auth.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Query, Request, Response
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, EmailStr, Field
from sqlalchemy.orm import Session

from greasedesk.core.database import get_db
from greasedesk.core.errors import EmailNotVerified, NotAuthenticated, TokenExpired, TokenNotFound, ValidationError
from greasedesk.deps import get_email_service, get_tenant_context
from greasedesk.email.service import EmailService
from greasedesk.models.user import User
from greasedesk.services.email_address import normalize_email
from greasedesk.services.onboarding import next_onboarding_path
from greasedesk.services.passwords import verify_password
from greasedesk.services.registration import (
    build_verified_redirect,
    build_verify_status_redirect,
    register_garage,
    resend_verification,
    verify_email,
)
from greasedesk.services.session_auth import clear_session_cookie, create_session_token, set_session_cookie
from greasedesk.services.tenant_context import TenantContext

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password."


class RegisterPayload(BaseModel):
    name: str
    # Normalized and validated by the registration service.
    email: str
    password: str


class ResendPayload(BaseModel):
    email: str


class LoginPayload(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)


@router.post("/register", status_code=201)
def register(
    payload: RegisterPayload,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    result = register_garage(
        db,
        name=payload.name,
        email=payload.email,
        password=payload.password,
        email_service=email_service,
    )
    user = result.user
    if result.email_sent:
        message = "Registration successful. Please check your email to verify your account."
    else:
        message = "Registration successful, but we could not send the verification email. Please request a new one."
    return {
        "message": message,
        "user": {"id": user.id, "email": user.email, "name": user.name},
        "emailSent": result.email_sent,
    }


@router.get("/verify")
def verify(token: str | None = Query(default=None), db: Session = Depends(get_db)):
    try:
        user = verify_email(db, token)
    except TokenNotFound:
        return RedirectResponse(build_verify_status_redirect("not_found"), status_code=302)
    except TokenExpired:
        return RedirectResponse(build_verify_status_redirect("expired"), status_code=302)
    except ValidationError:
        return RedirectResponse(build_verify_status_redirect("invalid"), status_code=302)
    return RedirectResponse(build_verified_redirect(user.email), status_code=302)


@router.post("/resend-verification")
def resend(
    payload: ResendPayload,
    db: Session = Depends(get_db),
    email_service: EmailService = Depends(get_email_service),
):
    sent = resend_verification(db, email=payload.email, email_service=email_service)
    return {
        "message": "If an unverified account exists for this email, a new verification link has been sent.",
        "emailSent": sent,
    }


@router.post("/login")
def login(
    payload: LoginPayload,
    request: Request,
    response: Response,
    db: Session = Depends(get_db),
):
    email = normalize_email(payload.email)
    user = db.query(User).filter(User.email == email).first()
    if user is None or not verify_password(payload.password, user.password_hash):
        logger.info("login rejected reason=credentials")
        raise NotAuthenticated(INVALID_CREDENTIALS)
    if not user.is_active:
        logger.info("login rejected reason=inactive user_id=%s", user.id)
        raise NotAuthenticated(INVALID_CREDENTIALS)
    if user.email_verified_at is None:
        raise EmailNotVerified()

    token = create_session_token(user_id=user.id, email=user.email)
    set_session_cookie(response, token, request)
    logger.info("login succeeded user_id=%s", user.id)
    return {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "redirectUrl": next_onboarding_path(db, user),
    }


@router.post("/logout")
def logout(request: Request, response: Response):
    clear_session_cookie(response, request)
    return {"message": "Signed out."}


@router.get("/me")
def me(context: TenantContext = Depends(get_tenant_context)):
    return {
        "userId": context.user_id,
        "email": context.email,
        "groupId": context.group_id,
        "siteId": context.site_id,
        "role": context.role,
    }
