"""Password hashing (bcrypt) and bearer token signing/verification (HS256 JWT via python-jose)."""

import logging
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

import bcrypt
from jose import jwt
from jose.exceptions import ExpiredSignatureError, JWTClaimsError, JWTError

from bizdir.core.config import settings
from bizdir.core.errors import Unauthenticated

logger = logging.getLogger(__name__)

# Purpose claim separating login tokens from OAuth state tokens signed with the same secret
ACCESS_TOKEN_PURPOSE = "access"
OAUTH_STATE_PURPOSE = "oauth_state"
OAUTH_STATE_TTL = timedelta(minutes=10)


def hash_password(password: str) -> str:
    """Hash a password for storage."""
    hashed = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=12))
    return hashed.decode("utf-8")


def verify_password(password: str, password_hash: Optional[str]) -> bool:
    """Constant-time check of password against a stored bcrypt hash. False when there is no hash."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def _encode(claims: Dict[str, Any], expires_in: timedelta, now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    payload = dict(claims)
    payload["iat"] = int(now.timestamp())
    payload["exp"] = int((now + expires_in).timestamp())
    return jwt.encode(payload, settings.jwt_secret, algorithm=settings.jwt_algorithm)


def _decode(token: str, purpose: str) -> Dict[str, Any]:
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret,
            algorithms=[settings.jwt_algorithm],
            options={"verify_signature": True, "verify_exp": True},
        )
    except ExpiredSignatureError:
        logger.info("Token has expired")
        raise Unauthenticated("Token expired")
    except JWTClaimsError as e:
        logger.warning(f"Token claims validation failed: {e}")
        raise Unauthenticated("Invalid token")
    except JWTError as e:
        logger.warning(f"JWT verification error: {e}")
        raise Unauthenticated("Invalid token")

    if payload.get("purpose", ACCESS_TOKEN_PURPOSE) != purpose:
        raise Unauthenticated("Invalid token")
    return payload


def create_access_token(account_id: Any, now: Optional[datetime] = None) -> str:
    """Issue a bearer token for the account, expiring after settings.jwt_expires_days."""
    return _encode(
        {"sub": str(account_id), "purpose": ACCESS_TOKEN_PURPOSE},
        timedelta(days=settings.jwt_expires_days),
        now=now,
    )


def decode_access_token(token: str) -> str:
    """
    Verify signature and expiration of a bearer token.

    Returns:
        The account id (sub claim) as a string.

    Raises:
        Unauthenticated: token missing, malformed, tampered with or expired.
    """
    if not token:
        raise Unauthenticated("Missing token")
    payload = _decode(token, ACCESS_TOKEN_PURPOSE)
    sub = payload.get("sub")
    if not sub:
        logger.warning("Token missing subject (sub) claim")
        raise Unauthenticated("Invalid token")
    return sub


def create_oauth_state(next_path: str = "/") -> str:
    """Short-lived signed state for the Google consent round trip."""
    return _encode({"purpose": OAUTH_STATE_PURPOSE, "next": next_path}, OAUTH_STATE_TTL)


def verify_oauth_state(state: Optional[str]) -> Dict[str, Any]:
    if not state:
        raise Unauthenticated("Missing OAuth state")
    return _decode(state, OAUTH_STATE_PURPOSE)
