# ==============================================================================
# SECURITY MODULE - Passwords & Bearer Tokens
# ==============================================================================
# bcrypt password hashes and HS256 access tokens for storefront users
# ==============================================================================

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from storefront.core.exceptions import InvalidTokenError, TokenExpiredError
from storefront.core.settings import settings

ACCESS_TOKEN_TYPE = "access"

pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.BCRYPT_ROUNDS,
)


# ==============================================================================
# PASSWORDS
# ==============================================================================

def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Check a login attempt against the stored hash; a missing hash never matches."""
    if not hashed_password:
        return False
    return pwd_context.verify(plain_password, hashed_password)


# ==============================================================================
# ACCESS TOKENS
# ==============================================================================

def create_access_token(
    subject: Any,
    expires_delta: Optional[timedelta] = None,
    additional_claims: Optional[Dict[str, Any]] = None,
) -> str:
    """
    Issue a bearer token for a user.

    The subject is the user id. The token lives for
    ``ACCESS_TOKEN_EXPIRE_MINUTES`` unless ``expires_delta`` is given
    (tests pass a negative delta to mint an expired token).
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    claims: Dict[str, Any] = {
        **(additional_claims or {}),
        "sub": str(subject),
        "iat": issued_at,
        "exp": issued_at + lifetime,
        "type": ACCESS_TOKEN_TYPE,
    }
    return jwt.encode(claims, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def verify_access_token(token: str) -> Dict[str, Any]:
    """
    Decode a bearer token and return its claims.

    Raises:
        TokenExpiredError: If ``exp`` has passed
        InvalidTokenError: On a bad signature, a malformed token, a
            non-access token or a missing subject
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except jwt.ExpiredSignatureError:
        raise TokenExpiredError()
    except JWTError as e:
        raise InvalidTokenError(f"Invalid token: {e}")

    if payload.get("type") != ACCESS_TOKEN_TYPE:
        raise InvalidTokenError("Invalid token type: expected access token")
    if not payload.get("sub"):
        raise InvalidTokenError("Invalid token payload")
    return payload
