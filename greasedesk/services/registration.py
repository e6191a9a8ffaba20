"""Account creation and email verification.

Registration creates the tenant group and its owner in one transaction. The
verification email goes out after commit and is best-effort: a delivery
failure is reported back to the caller but never undoes the account.
"""
from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from datetime import timedelta
from urllib.parse import quote, urlencode

from sqlalchemy import delete
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from greasedesk.core.config import BASE_URL, MIN_PASSWORD_LENGTH, VERIFICATION_TOKEN_TTL_HOURS
from greasedesk.core.database import utcnow
from greasedesk.core.errors import EmailAlreadyExists, TokenExpired, TokenNotFound, ValidationError
from greasedesk.email.service import EmailService
from greasedesk.models.group import Group
from greasedesk.models.user import ROLE_OWNER, User
from greasedesk.models.verification_token import VerificationToken
from greasedesk.services.email_address import is_valid_email, normalize_email
from greasedesk.services.passwords import hash_password

logger = logging.getLogger(__name__)

ONBOARDING_AFTER_VERIFY_PATH = "/onboarding/billing"


@dataclass
class RegistrationResult:
    user: User
    email_sent: bool


def validate_registration(name: str | None, email: str | None, password: str | None) -> tuple[str, str]:
    clean_name = (name or "").strip()
    normalized = normalize_email(email)
    if not clean_name:
        raise ValidationError("Name is required.")
    if not is_valid_email(normalized):
        raise ValidationError("A valid email address is required.")
    if len(password or "") < MIN_PASSWORD_LENGTH:
        raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters long.")
    return clean_name, normalized


def build_verification_link(token: str) -> str:
    return f"{BASE_URL}/api/auth/verify?token={quote(token)}"


def build_verified_redirect(email: str) -> str:
    query = urlencode(
        {
            "email": email,
            "status": "verified",
            "callbackUrl": f"{BASE_URL}{ONBOARDING_AFTER_VERIFY_PATH}",
        },
        quote_via=quote,
    )
    return f"{BASE_URL}/admin/login?{query}"


def build_verify_status_redirect(status: str) -> str:
    return f"{BASE_URL}/onboarding/verify-status?status={quote(status)}"


def _new_verification_token(email: str) -> VerificationToken:
    return VerificationToken(
        token=secrets.token_hex(32),
        identifier=email,
        expires=utcnow() + timedelta(hours=VERIFICATION_TOKEN_TTL_HOURS),
    )


def register_garage(
    db: Session,
    *,
    name: str,
    email: str,
    password: str,
    email_service: EmailService,
) -> RegistrationResult:
    clean_name, normalized = validate_registration(name, email, password)

    if db.query(User.id).filter(User.email == normalized).first() is not None:
        raise EmailAlreadyExists()

    try:
        group = Group(group_name=f"{clean_name}'s Garage", billing_email=normalized)
        db.add(group)
        db.flush()

        user = User(
            email=normalized,
            name=clean_name,
            password_hash=hash_password(password),
            role=ROLE_OWNER,
            group_id=group.id,
            is_active=True,
            email_verified_at=None,
        )
        db.add(user)

        token = _new_verification_token(normalized)
        db.add(token)
        db.commit()
    except IntegrityError:
        db.rollback()
        logger.info("registration raced on existing email")
        raise EmailAlreadyExists()
    except Exception:
        db.rollback()
        raise

    db.refresh(user)
    logger.info("garage registered user_id=%s group_id=%s", user.id, group.id)

    email_sent = email_service.send_verification_email(
        normalized,
        clean_name,
        build_verification_link(token.token),
    )
    if not email_sent:
        logger.warning("verification email not sent user_id=%s", user.id)
    return RegistrationResult(user=user, email_sent=email_sent)


def verify_email(db: Session, token: str | None) -> User:
    if not token or not token.strip():
        raise ValidationError("Invalid verification token.")
    token = token.strip()

    record = db.query(VerificationToken).filter(VerificationToken.token == token).first()
    if record is None:
        raise TokenNotFound()
    if record.expires < utcnow():
        raise TokenExpired()

    user = db.query(User).filter(User.email == record.identifier).with_for_update().first()
    if user is None:
        raise TokenNotFound()

    try:
        if user.email_verified_at is None:
            user.email_verified_at = utcnow()
        db.flush()

        # Only the request that actually deletes the token gets to verify.
        result = db.execute(delete(VerificationToken).where(VerificationToken.token == token))
        if result.rowcount != 1:
            db.rollback()
            raise TokenNotFound()
        db.commit()
    except TokenNotFound:
        raise
    except Exception:
        db.rollback()
        raise

    logger.info("email verified user_id=%s", user.id)
    return user


def resend_verification(db: Session, *, email: str, email_service: EmailService) -> bool:
    """Issue a fresh verification token and email it.

    Unknown, already verified and invite-pending addresses are a silent no-op
    reported as success, so the response does not reveal which accounts exist.
    """
    normalized = normalize_email(email)
    if not is_valid_email(normalized):
        raise ValidationError("A valid email address is required.")

    user = db.query(User).filter(User.email == normalized).first()
    if user is None or user.email_verified_at is not None or user.is_invite_pending:
        return True

    try:
        db.execute(delete(VerificationToken).where(VerificationToken.identifier == normalized))
        token = _new_verification_token(normalized)
        db.add(token)
        db.commit()
    except Exception:
        db.rollback()
        raise

    sent = email_service.send_verification_email(
        normalized,
        user.name or "",
        build_verification_link(token.token),
    )
    if not sent:
        logger.warning("verification email resend failed user_id=%s", user.id)
    return sent
