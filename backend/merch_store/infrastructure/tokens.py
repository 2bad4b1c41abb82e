"""Access Tokens — HS256 JWTs naming the authenticated username.

Invariants:
    - `sub` carries the username; `exp` is always set
    - decode_token raises AuthenticationError for any invalid, expired or tampered token

Design Decisions:
    - PyJWT over a hand-rolled HMAC format: standard claims and expiry validation
"""

from datetime import datetime, timedelta, timezone

import jwt

from merch_store.core.errors import AuthenticationError


def issue_token(
    username: str, secret: str, ttl_minutes: int, algorithm: str = "HS256",
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        "sub": username,
        "iat": now,
        "exp": now + timedelta(minutes=ttl_minutes),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> str:
    """Return the username carried by a valid token."""
    try:
        payload = jwt.decode(
            token, secret, algorithms=[algorithm],
            options={"require": ["sub", "exp"]},
        )
    except jwt.ExpiredSignatureError:
        raise AuthenticationError("token expired")
    except jwt.InvalidTokenError:
        raise AuthenticationError("invalid token")
    username = payload.get("sub")
    if not isinstance(username, str) or not username:
        raise AuthenticationError("invalid token subject")
    return username
