import uuid
from uuid import UUID
from datetime import datetime, timedelta, timezone

import jwt

from storefront.core.config import settings

ALGORITHM = "HS256"
ACCESS_TOKEN_TYPE = "access"


def create_access_token(
    user_id: str,
    role: str,
    expires_delta: timedelta | None = None,
) -> str:
    """Issue a short-lived access token for ``user_id``.

    The storefront only verifies tokens in production; issuing is here for
    operational scripts and tests.
    """
    issued_at = datetime.now(timezone.utc)
    lifetime = expires_delta or timedelta(minutes=settings.jwt_access_token_expire_minutes)
    claims = {
        "sub": user_id,
        "role": role,
        "type": ACCESS_TOKEN_TYPE,
        "iat": issued_at,
        "nbf": issued_at,
        "exp": issued_at + lifetime,
        "iss": settings.jwt_issuer,
        "aud": settings.jwt_issuer,
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(claims, settings.jwt_secret_key, algorithm=ALGORITHM)


def decode_token(token: str) -> dict:
    """Raises jwt.PyJWTError when the signature, issuer, audience or expiry is wrong."""
    return jwt.decode(
        token,
        settings.jwt_secret_key,
        algorithms=[ALGORITHM],
        issuer=settings.jwt_issuer,
        audience=settings.jwt_issuer,
    )


def verify_access_token(token: str) -> dict | None:
    try:
        claims = decode_token(token)
    except jwt.PyJWTError:
        return None
    return claims if claims.get("type") == ACCESS_TOKEN_TYPE else None


def access_token_subject(token: str) -> UUID | None:
    """User id carried by a valid access token, or None."""
    claims = verify_access_token(token)
    if claims is None:
        return None
    try:
        return UUID(claims["sub"])
    except (KeyError, TypeError, ValueError):
        return None
