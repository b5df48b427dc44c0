import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

from fastapi import Depends, HTTPException
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from jose import JWTError
from jose import jwt as jose_jwt
from sqlalchemy.orm import Session

from meetsync.config import get_settings
from meetsync.db.session import get_db
from meetsync.models.user import User
from meetsync.services.gateway import gateway

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)

_TOKEN_SALT = "meetsync-session"


@dataclass(frozen=True)
class RequestContext:
    """
    Identity of the caller for one request.

    Built once by `get_request_context` and handed to services explicitly;
    services read it and never modify it.
    """

    user: User

    @property
    def user_id(self) -> int:
        return self.user.id


def _serializer() -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(get_settings().SECRET_KEY)


def issue_session_token(user_id: int) -> str:
    """Sign a session token for `user_id`."""
    return _serializer().dumps({"uid": user_id}, salt=_TOKEN_SALT)


def user_id_from_token(token: str) -> Optional[int]:
    """
    Decode a session token.

    Returns the user id, or None if the token is expired or tampered with.
    """
    max_age = get_settings().SESSION_MAX_AGE_SECONDS
    try:
        data = _serializer().loads(token, salt=_TOKEN_SALT, max_age=max_age)
    except SignatureExpired:
        logger.warning("Session token expired")
        return None
    except BadSignature:
        logger.warning("Invalid session token signature")
        return None

    uid = data.get("uid") if isinstance(data, dict) else None
    return uid if isinstance(uid, int) else None


def verify_identity_token(token: str) -> Dict[str, Any]:
    """
    Verify an access token minted by the upstream identity provider.

    The token must be HS256-signed with IDENTITY_JWT_SECRET, unexpired, and
    addressed to IDENTITY_JWT_AUDIENCE. Returns the decoded claims; raises
    401 otherwise, or 500 when no provider secret is configured.
    """
    settings = get_settings()
    if not settings.IDENTITY_JWT_SECRET:
        logger.error("IDENTITY_JWT_SECRET not configured")
        raise HTTPException(status_code=500, detail="Identity provider not configured")

    try:
        claims = jose_jwt.decode(
            token,
            settings.IDENTITY_JWT_SECRET,
            algorithms=["HS256"],
            audience=settings.IDENTITY_JWT_AUDIENCE,
        )
    except JWTError as e:
        logger.warning("Identity token rejected: %s", e)
        raise HTTPException(status_code=401, detail="Invalid identity token") from e

    if not claims.get("sub") or not claims.get("email"):
        logger.warning("Identity token without sub or email claim")
        raise HTTPException(status_code=401, detail="Invalid identity token")
    return claims


def get_request_context(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
    db: Session = Depends(get_db),
) -> RequestContext:
    """
    FastAPI dependency resolving the bearer token into a RequestContext.
    Raises 401 when the token is missing, invalid, or names no user.
    """
    if credentials is None:
        raise HTTPException(status_code=401, detail="Not authenticated")

    user_id = user_id_from_token(credentials.credentials)
    if user_id is None:
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    with gateway(db, "load the session user"):
        user = db.query(User).filter_by(id=user_id).first()
    if user is None:
        logger.warning("Session token for unknown user %s", user_id)
        raise HTTPException(status_code=401, detail="Invalid or expired session")

    return RequestContext(user=user)
