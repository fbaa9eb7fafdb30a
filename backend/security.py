"""Password hashing and bearer tokens for taxpayer accounts.

Access tokens carry the account's ``users.id`` as ``sub`` plus ``type: access``;
the email claim is informational only and never used for lookups.
"""

from __future__ import annotations

import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

SECRET_KEY = os.getenv("SECRET_KEY", "changeme-secret-key")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
# Intake sessions last a week so taxpayers can come back to a half-finished return.
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", str(7 * 24 * 60)))
TOKEN_TYPE = "access"

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        # Unrecognised hash format on the stored row.
        return False


def create_access_token(
    user_id: str,
    email: Optional[str] = None,
    expires_delta: Optional[timedelta] = None,
) -> str:
    issued_at = datetime.now(timezone.utc)
    claims: Dict[str, Any] = {
        "sub": user_id,
        "type": TOKEN_TYPE,
        "iat": issued_at,
        "exp": issued_at + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES)),
    }
    if email:
        claims["email"] = email
    return jwt.encode(claims, SECRET_KEY, algorithm=ALGORITHM)


def decode_token(token: str) -> Dict[str, Any]:
    """Verify a bearer token and return its claims.

    Raises ``ValueError`` for bad signatures, expired tokens, tokens of another
    type, and tokens without a subject.
    """
    try:
        claims = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Invalid token") from exc
    if claims.get("type") != TOKEN_TYPE:
        raise ValueError("Not an access token")
    if not claims.get("sub"):
        raise ValueError("Token has no subject")
    return claims


def token_user_id(token: str) -> str:
    return str(decode_token(token)["sub"])
