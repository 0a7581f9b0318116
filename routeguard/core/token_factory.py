"""HS256 JWT helpers for session tokens.

Tokens only carry the subject (the user id). Access level and special
rights are always read fresh from the database by ``core.auth``.
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

_ISSUER = "routeguard"


@dataclass(frozen=True)
class TokenPayload:
    sub: str
    exp: datetime


def create_token(subject: str, secret: str, algorithm: str = "HS256", expires_hours: int = 24) -> str:
    """Sign a token for ``subject`` valid for ``expires_hours``."""
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    issued = int(time.time())
    header = _b64encode(json.dumps({"alg": algorithm, "typ": "JWT"}).encode())
    body = _b64encode(json.dumps({
        "sub": subject,
        "iat": issued,
        "exp": issued + expires_hours * 3600,
        "iss": _ISSUER,
    }).encode())
    signing_input = header + b"." + body
    return (signing_input + b"." + _b64encode(_sign(secret, signing_input))).decode()


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[TokenPayload]:
    """Verify ``token``; None when the signature, expiry or shape is wrong."""
    if algorithm != "HS256":
        return None
    try:
        header, body, signature = token.encode().split(b".")
    except ValueError:
        return None

    try:
        if not hmac.compare_digest(_sign(secret, header + b"." + body), _b64decode(signature)):
            return None
        claims = json.loads(_b64decode(body))
        exp = int(claims["exp"])
        if time.time() > exp or not claims.get("sub"):
            return None
        return TokenPayload(sub=claims["sub"], exp=datetime.fromtimestamp(exp, tz=timezone.utc))
    except (ValueError, KeyError, TypeError):
        return None


def _sign(secret: str, data: bytes) -> bytes:
    return hmac.new(secret.encode(), data, hashlib.sha256).digest()


def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    return base64.urlsafe_b64decode(data + b"=" * (-len(data) % 4))
