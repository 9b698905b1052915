from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Request
from jose import JWTError, jwt

from projectflow.core.config import settings

AUTH_HEADER_NAME = "Authorization"
AUTH_SCHEME = "bearer"


def decode_session_token(token: str) -> Dict[str, Any]:
    """
    Verify an identity provider session token. The provider issues short-lived JWTs
    whose `sub` claim is the user id; we never mint them ourselves.
    """
    return jwt.decode(
        token,
        settings.CLERK_JWT_KEY,
        algorithms=[settings.CLERK_JWT_ALG],
        issuer=settings.CLERK_ISSUER or None,
        options={"verify_aud": False},
    )


def get_token_from_request(request: Request) -> Optional[str]:
    header = request.headers.get(AUTH_HEADER_NAME)
    if not header:
        return None

    scheme, _, token = header.partition(" ")
    if scheme.lower() != AUTH_SCHEME or not token.strip():
        return None
    return token.strip()


def get_user_id_from_request(request: Request) -> Optional[str]:
    token = get_token_from_request(request)
    if not token:
        return None

    try:
        payload = decode_session_token(token)
    except JWTError:
        return None

    user_id = payload.get("sub")
    return str(user_id) if user_id else None
