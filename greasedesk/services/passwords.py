from __future__ import annotations

import hashlib
import hmac
import logging
import os
from typing import Optional

from passlib.context import CryptContext

from greasedesk.models.user import INVITE_PENDING_HASH

logger = logging.getLogger(__name__)

PBKDF2_PREFIX = "pbkdf2$"
PBKDF2_ITERATIONS = 120_000
PBKDF2_SALT_BYTES = 16

_pwd_context: Optional[CryptContext]

try:
    _pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
except (ImportError, ValueError):
    _pwd_context = None


def _pbkdf2_hash(password: str, salt: bytes, iterations: int = PBKDF2_ITERATIONS) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, iterations)


def _pbkdf2_encode(password: str) -> str:
    salt = os.urandom(PBKDF2_SALT_BYTES)
    digest = _pbkdf2_hash(password, salt)
    return f"{PBKDF2_PREFIX}{PBKDF2_ITERATIONS}${salt.hex()}${digest.hex()}"


def hash_password(password: str) -> str:
    if _pwd_context is not None:
        try:
            return _pwd_context.hash(password)
        except (ValueError, AttributeError) as exc:
            # newer bcrypt builds break passlib's backend probe
            logger.warning("bcrypt unavailable, falling back to pbkdf2: %s", exc.__class__.__name__)

    return _pbkdf2_encode(password)


def verify_password(password: str, password_hash: str | None) -> bool:
    if not password_hash or password_hash == INVITE_PENDING_HASH:
        return False

    if password_hash.startswith(PBKDF2_PREFIX):
        try:
            _, iter_str, salt_hex, digest_hex = password_hash.split("$", 3)
            iterations = int(iter_str)
            salt = bytes.fromhex(salt_hex)
            expected = bytes.fromhex(digest_hex)
        except ValueError:
            return False
        computed = _pbkdf2_hash(password, salt, iterations=iterations)
        return hmac.compare_digest(computed, expected)

    if _pwd_context is None:
        return False

    try:
        return _pwd_context.verify(password, password_hash)
    except (ValueError, TypeError, AttributeError):
        return False
