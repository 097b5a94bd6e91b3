# -*- coding: utf-8 -*-
"""Auth — password hashing, signed bearer tokens and the FastAPI dependency.

Tokens are compact HS256 JWTs signed with ``settings.jwt_secret``. Callers
present them as ``Authorization: Bearer <token>``; anything else resolves to
:class:`AuthenticationRequired`.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import os
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from fastapi import Request

from ..config import settings
from ..errors import AuthenticationRequired
from .storage import get_user_by_id

_PBKDF2_ALG = "sha256"
_PBKDF2_ITERATIONS = 200_000
_JWT_HEADER = {"alg": "HS256", "typ": "JWT"}


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def _b64url_decode(data: str) -> bytes:
    pad = "=" * (-len(data) % 4)
    return base64.urlsafe_b64decode((data + pad).encode("ascii"))


def _json_segment(obj: Dict[str, Any]) -> str:
    return _b64url_encode(json.dumps(obj, separators=(",", ":"), ensure_ascii=False).encode("utf-8"))


def _sign(signing_input: str, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()


def hash_password(password: str) -> str:
    salt = os.urandom(16)
    dk = hashlib.pbkdf2_hmac(_PBKDF2_ALG, password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)
    return f"pbkdf2_{_PBKDF2_ALG}${_PBKDF2_ITERATIONS}${_b64url_encode(salt)}${_b64url_encode(dk)}"


def verify_password(password: str, password_hash: str) -> bool:
    try:
        scheme, iter_s, salt_b64, dk_b64 = password_hash.split("$", 3)
    except ValueError:
        return False
    if not scheme.startswith("pbkdf2_"):
        return False
    actual = hashlib.pbkdf2_hmac(
        scheme.split("_", 1)[1],
        password.encode("utf-8"),
        _b64url_decode(salt_b64),
        int(iter_s),
    )
    return hmac.compare_digest(actual, _b64url_decode(dk_b64))


def create_access_token(*, user_id: str, email: str, now: Optional[datetime] = None) -> str:
    issued = now or datetime.now(timezone.utc)
    expires = issued + timedelta(days=int(settings.token_ttl_days))
    payload = {
        "sub": user_id,
        "email": email,
        "iat": int(issued.timestamp()),
        "exp": int(expires.timestamp()),
    }
    signing_input = f"{_json_segment(_JWT_HEADER)}.{_json_segment(payload)}"
    return f"{signing_input}.{_b64url_encode(_sign(signing_input, settings.jwt_secret))}"


def decode_access_token(token: str) -> Dict[str, Any]:
    """Verify signature and expiry; raise AuthenticationRequired otherwise."""
    parts = token.split(".")
    if len(parts) != 3:
        raise AuthenticationRequired("Invalid token")
    header_b64, payload_b64, sig_b64 = parts
    try:
        expected = _sign(f"{header_b64}.{payload_b64}", settings.jwt_secret)
        if not hmac.compare_digest(expected, _b64url_decode(sig_b64)):
            raise AuthenticationRequired("Invalid token")
        payload = json.loads(_b64url_decode(payload_b64).decode("utf-8"))
    except (ValueError, UnicodeDecodeError) as exc:
        raise AuthenticationRequired("Invalid token") from exc
    if not isinstance(payload, dict):
        raise AuthenticationRequired("Invalid token")
    exp = int(payload.get("exp") or 0)
    if exp and exp < int(datetime.now(timezone.utc).timestamp()):
        raise AuthenticationRequired("Token expired")
    return payload


def get_bearer_token(request: Request) -> Optional[str]:
    auth = request.headers.get("authorization") or ""
    if not auth.lower().startswith("bearer "):
        return None
    token = auth.split(" ", 1)[1].strip()
    return token or None


def get_current_user(request: Request) -> Dict[str, Any]:
    user = getattr(request.state, "user", None)
    if user:
        return user

    token = get_bearer_token(request)
    if not token:
        raise AuthenticationRequired()

    payload = decode_access_token(token)
    user_id = str(payload.get("sub") or "")
    if not user_id:
        raise AuthenticationRequired("Invalid token")

    user = get_user_by_id(user_id)
    if not user:
        raise AuthenticationRequired("User not found")

    request.state.user = user
    return user
