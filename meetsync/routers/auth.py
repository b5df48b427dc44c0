from typing import Any, Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from meetsync.db.session import get_db
from meetsync.routers.serializers import user_to_dict
from meetsync.services.identity import issue_session_token, verify_identity_token
from meetsync.services.user_service import resolve_identity

router = APIRouter(prefix="/auth", tags=["auth"])


class SessionRequest(BaseModel):
    access_token: str


@router.post("/session")
def open_session(
    payload: SessionRequest,
    db: Session = Depends(get_db),
) -> Dict[str, Any]:
    """
    Exchange an identity-provider access token for a MeetSync session.

    The provider has already checked the user's credentials; we only trust
    its signature. The first exchange for a subject registers the user.
    """
    claims = verify_identity_token(payload.access_token)
    metadata = claims.get("user_metadata") or {}
    user = resolve_identity(
        db,
        subject=str(claims["sub"]),
        email=claims["email"],
        full_name=metadata.get("full_name") if isinstance(metadata, dict) else None,
    )
    return {
        "user": user_to_dict(user),
        "token": issue_session_token(user.id),
    }
