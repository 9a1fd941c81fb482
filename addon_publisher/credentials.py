"""
Short-lived signed credentials for the add-on API.

Each request carries a JWT signed with HS256:
https://addons-server.readthedocs.io/en/latest/topics/api/auth.html#create-a-jwt-for-each-request
"""
from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
import secrets
import time
from typing import Any, Dict, Optional

from .errors import InputError

logger = logging.getLogger(__name__)

TOKEN_LIFETIME_SECONDS = 5 * 60
AUTH_SCHEME = "jwt"

_HEADER = {"alg": "HS256", "typ": "JWT"}


def _b64encode(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).decode("ascii").rstrip("=")


def _b64decode(text: str) -> bytes:
    pad = "=" * ((4 - len(text) % 4) % 4)
    return base64.urlsafe_b64decode((text + pad).encode("ascii"))


def _segment(data: Dict[str, Any]) -> str:
    return _b64encode(json.dumps(data, separators=(",", ":"), sort_keys=True).encode("utf-8"))


def _signature(signing_input: str, secret: str) -> str:
    digest = hmac.new(secret.encode("utf-8"), signing_input.encode("ascii"), hashlib.sha256).digest()
    return _b64encode(digest)


def issue_credential(issuer: str, secret: str, now: Optional[float] = None) -> str:
    """Build a signed token valid for five minutes from `now`."""
    if not str(issuer or "").strip():
        raise InputError("JWT issuer is required")
    if not str(secret or "").strip():
        raise InputError("JWT secret is required")

    logger.info("Start to generate JWT token.")
    issued_at = int(time.time() if now is None else now)  # drop sub-second precision
    payload = {
        "iss": issuer,
        "jti": secrets.token_urlsafe(16),
        "iat": issued_at,
        "exp": issued_at + TOKEN_LIFETIME_SECONDS,
    }
    signing_input = f"{_segment(_HEADER)}.{_segment(payload)}"
    token = f"{signing_input}.{_signature(signing_input, secret)}"
    logger.info("JWT token generated.")
    return token


def decode_credential(token: str, secret: str) -> Dict[str, Any]:
    """Verify a token issued by `issue_credential` and return its claims."""
    parts = str(token or "").split(".")
    if len(parts) != 3:
        raise InputError("Malformed credential")
    signing_input = f"{parts[0]}.{parts[1]}"
    if not hmac.compare_digest(parts[2], _signature(signing_input, secret)):
        raise InputError("Credential signature mismatch")
    try:
        header = json.loads(_b64decode(parts[0]))
        claims = json.loads(_b64decode(parts[1]))
    except ValueError as exc:
        raise InputError("Malformed credential", detail=str(exc)) from exc
    if not isinstance(header, dict) or header.get("alg") != "HS256" or not isinstance(claims, dict):
        raise InputError("Malformed credential")
    return claims


def authorization_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"{AUTH_SCHEME} {token}"}
