from __future__ import annotations

from fastapi import Header, HTTPException


def _auth_error(detail: str) -> HTTPException:
    return HTTPException(status_code=401, detail=detail, headers={"WWW-Authenticate": "Bearer"})


def get_bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    """Return the caller's bearer token so it can be forwarded to collaborators.

    Token verification belongs to the gateway; this only checks the header shape.
    """
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise _auth_error("invalid authorization header")
    return token.strip()
