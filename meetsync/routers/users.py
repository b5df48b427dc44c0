from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel
from sqlalchemy.orm import Session

from meetsync.db.session import get_db
from meetsync.routers.serializers import user_to_dict
from meetsync.services.identity import RequestContext, get_request_context
from meetsync.services.user_service import update_profile

router = APIRouter(prefix="/users", tags=["users"])


class ProfileUpdate(BaseModel):
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    time_zone: Optional[str] = None


@router.get("/me")
def get_me(ctx: RequestContext = Depends(get_request_context)) -> Dict[str, Any]:
    return user_to_dict(ctx.user)


@router.patch("/me")
def update_me(
    payload: ProfileUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> Dict[str, Any]:
    user = update_profile(
        db,
        ctx.user,
        full_name=payload.full_name,
        avatar_url=payload.avatar_url,
        time_zone=payload.time_zone,
    )
    return user_to_dict(user)
