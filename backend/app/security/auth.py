"""Actor context resolution (bearer token) and coarse role guards.

Design:
- Bearer JWT tokens (HS256) issued by the session subsystem.
- Role is embedded in token claims.
- No token, bad signature or missing claims: the actor is unresolved and the
  request is rejected (401). It is never evaluated as USER.
- A well-signed token with an unrecognised role degrades to least privilege.
"""

from __future__ import annotations

import base64
import hmac
import hashlib
import json
import time
from typing import Any, Callable, Optional

from fastapi import Depends, HTTPException, Request, status

from app.core.env import require_env
from fieldaccess.core.actor import ActorContext
from fieldaccess.core.roles import Role, has_at_least, is_role_allowed, parse_role


JWT_SECRET_ENV = "ASSETDESK_JWT_SECRET"


class AuthError(HTTPException):
    pass


def _unauthorized(detail: str) -> AuthError:
    return AuthError(status_code=status.HTTP_401_UNAUTHORIZED, detail=detail)


def _b64url_decode(data: str) -> bytes:
    padding = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode(data + padding)


def _b64url_encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _get_jwt_secret() -> bytes:
    return require_env(JWT_SECRET_ENV).encode("utf-8")


def decode_and_verify_jwt(token: str) -> dict[str, Any]:
    """Verify HS256 signature and the claims the resolver needs.

    Required claims: `sub`, `role`. Optional: `exp` (unix epoch seconds).
    """
    try:
        header_b64, payload_b64, sig_b64 = token.split(".")
    except ValueError as e:
        raise _unauthorized("Invalid token format.") from e

    signing_input = f"{header_b64}.{payload_b64}".encode("ascii")
    expected_sig = _b64url_encode(hmac.new(_get_jwt_secret(), signing_input, hashlib.sha256).digest())
    if not hmac.compare_digest(expected_sig, sig_b64):
        raise _unauthorized("Invalid token signature.")

    try:
        header = json.loads(_b64url_decode(header_b64))
        payload = json.loads(_b64url_decode(payload_b64))
    except (ValueError, UnicodeDecodeError) as e:
        raise _unauthorized("Invalid token encoding.") from e

    if not isinstance(header, dict) or not isinstance(payload, dict):
        raise _unauthorized("Invalid token encoding.")
    if header.get("alg") != "HS256" or header.get("typ") != "JWT":
        raise _unauthorized("Unsupported token header.")

    exp = payload.get("exp")
    if exp is not None:
        try:
            exp_i = int(exp)
        except (TypeError, ValueError) as e:
            raise _unauthorized("Invalid exp claim.") from e
        if int(time.time()) >= exp_i:
            raise _unauthorized("Token expired.")

    if "sub" not in payload or "role" not in payload:
        raise _unauthorized("Missing required claims.")

    return payload


def _bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization")
    if not auth or not auth.lower().startswith("bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    return token or None


def get_current_actor(request: Request) -> ActorContext:
    """Resolve the actor for this request or reject it."""
    token = _bearer_token(request)
    if token is None:
        raise _unauthorized("Missing bearer token.")

    claims = decode_and_verify_jwt(token)
    sub = str(claims["sub"])
    if not sub:
        raise _unauthorized("Invalid sub claim.")

    return ActorContext(sub=sub, role=parse_role(claims["role"]))


def require_roles(*allowed_roles: Role) -> Callable[[ActorContext], ActorContext]:
    """FastAPI dependency factory enforcing an explicit allow-list."""

    allowed = set(allowed_roles)

    def _dep(actor: ActorContext = Depends(get_current_actor)) -> ActorContext:
        if not is_role_allowed(actor.require_role(), allowed):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")
        return actor

    return _dep


def require_min_role(minimum: Role) -> Callable[[ActorContext], ActorContext]:
    """FastAPI dependency factory for "at least this role" gating."""

    def _dep(actor: ActorContext = Depends(get_current_actor)) -> ActorContext:
        if not has_at_least(actor.require_role(), minimum):
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied.")
        return actor

    return _dep
