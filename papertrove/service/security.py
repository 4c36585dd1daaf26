# papertrove/service/security.py

"""
Password hashing (bcrypt) and bearer tokens (JWT, HS256 by default)
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import bcrypt
import jwt
from pydantic import ValidationError as PydanticValidationError

from papertrove.config import AuthConfig
from papertrove.errors import ForbiddenError
from papertrove.model.user import TokenClaims


# bcrypt only looks at the first 72 bytes and rejects longer input
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = 10) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(encoded, password_hash.encode("utf-8"))
    except ValueError:
        # stored value is not a bcrypt hash
        return False


def create_access_token(claims: TokenClaims, config: AuthConfig) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "user_id": claims.user_id,
        "email": claims.email,
        "name": claims.name,
        "role": claims.role,
        "iat": now,
        "exp": now + timedelta(hours=config.token_expire_hours),
    }
    return jwt.encode(payload, config.jwt_secret, algorithm=config.jwt_algorithm)


def decode_access_token(token: str, config: AuthConfig) -> TokenClaims:
    """
    Verify signature and expiry.

    Raises:
        ForbiddenError: invalid or expired token
    """
    try:
        payload = jwt.decode(token, config.jwt_secret, algorithms=[config.jwt_algorithm])
    except jwt.ExpiredSignatureError:
        raise ForbiddenError("Token expired")
    except jwt.PyJWTError:
        raise ForbiddenError("Invalid token")

    try:
        return TokenClaims.model_validate(payload)
    except PydanticValidationError:
        raise ForbiddenError("Invalid token")
