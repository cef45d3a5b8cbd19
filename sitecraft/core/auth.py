"""Authentication boundary — FastAPI dependency resolving the calling user.

``require_auth`` returns an ``AuthContext`` or raises 401. Ownership checks
happen in the repositories, which treat someone else's project as missing.

When ``settings.auth_enabled`` is False every request acts as
``settings.dev_user_id`` so the local workflow needs no token issuer.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from .config import settings
from .token_factory import decode_token
from ..database import get_db
from ..exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_bearer_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class AuthContext:
    """Identity of the caller, available to every protected endpoint."""

    user_id: str
    email: Optional[str] = None


def require_auth(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_bearer_scheme),
    db: Session = Depends(get_db),
) -> AuthContext:
    """Require a valid bearer token naming an existing user."""
    if not settings.auth_enabled:
        return AuthContext(user_id=settings.dev_user_id)

    if credentials is None:
        raise AuthenticationError("Missing authentication token")

    payload = decode_token(
        credentials.credentials, settings.jwt_secret_key, settings.jwt_algorithm
    )
    if payload is None:
        raise AuthenticationError("Invalid or expired token")

    from ..models.user import User

    exists = db.query(User.user_id).filter(User.user_id == payload.sub).first()
    if exists is None:
        logger.info("Token for unknown user", extra={"user_id": payload.sub})
        raise AuthenticationError("User not found")

    return AuthContext(user_id=payload.sub, email=payload.email)
