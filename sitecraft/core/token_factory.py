"""Pure functions for encoding and verifying HS256 bearer tokens.

Sessions are issued by the external auth provider; this service shares its
signing secret and only needs to verify the token and read the subject
(the ``user_id``). ``create_token`` exists for tests and local tooling.
"""

import base64
import hashlib
import hmac
import json
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

ISSUER = "sitecraft"

# Seconds of clock skew tolerated between the issuer and this service.
EXPIRY_LEEWAY_SECONDS = 30


@dataclass(frozen=True)
class TokenPayload:
    """Verified claims. Immutable."""
    sub: str
    exp: datetime
    email: Optional[str] = None


def create_token(
    subject: str,
    secret: str,
    email: Optional[str] = None,
    algorithm: str = "HS256",
    expires_hours: int = 24,
) -> str:
    """Sign a token for *subject* (a user_id)."""
    if algorithm != "HS256":
        raise ValueError(f"Unsupported algorithm: {algorithm}")

    now = int(time.time())
    claims = {
        "sub": subject,
        "iat": now,
        "exp": now + expires_hours * 3600,
        "iss": ISSUER,
    }
    if email:
        claims["email"] = email

    header_b64 = _b64encode(json.dumps({"alg": "HS256", "typ": "JWT"}).encode())
    claims_b64 = _b64encode(json.dumps(claims).encode())
    signing_input = header_b64 + b"." + claims_b64
    signature = hmac.new(secret.encode(), signing_input, hashlib.sha256).digest()
    return (signing_input + b"." + _b64encode(signature)).decode()


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> Optional[TokenPayload]:
    """Verify signature, issuer and expiry. Returns ``None`` on any failure."""
    if algorithm != "HS256" or not token:
        return None

    try:
        header_b64, claims_b64, sig_b64 = token.encode().split(b".")
    except ValueError:
        return None

    try:
        header = json.loads(_b64decode(header_b64))
        if header.get("alg") != "HS256":
            return None

        expected = hmac.new(secret.encode(), header_b64 + b"." + claims_b64, hashlib.sha256).digest()
        if not hmac.compare_digest(expected, _b64decode(sig_b64)):
            return None

        claims = json.loads(_b64decode(claims_b64))
        if claims.get("iss") != ISSUER:
            return None
        exp = int(claims.get("exp", 0))
        if time.time() > exp + EXPIRY_LEEWAY_SECONDS:
            return None
        subject = claims.get("sub") or ""
        if not subject:
            return None
    except (json.JSONDecodeError, ValueError, TypeError, AttributeError):
        return None

    return TokenPayload(
        sub=subject,
        exp=datetime.fromtimestamp(exp, tz=timezone.utc),
        email=claims.get("email"),
    )


def _b64encode(data: bytes) -> bytes:
    return base64.urlsafe_b64encode(data).rstrip(b"=")


def _b64decode(data: bytes) -> bytes:
    return base64.urlsafe_b64decode(data + b"=" * (-len(data) % 4))
