from typing import Any, Dict, List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from meetsync.db.session import get_db
from meetsync.models.meeting import MeetingStatus
from meetsync.routers.serializers import meeting_to_dict
from meetsync.services.booking_service import (
    delete_meeting,
    get_meeting_for_owner,
    list_meetings_for_user,
    transition_meeting,
)
from meetsync.services.identity import RequestContext, get_request_context

router = APIRouter(prefix="/meetings", tags=["meetings"])


@router.get("")
def list_my_meetings(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> List[Dict[str, Any]]:
    """All meetings booked on the caller's calendars, earliest first."""
    return [meeting_to_dict(m) for m in list_meetings_for_user(db, ctx)]


@router.get("/{meeting_id}")
def get_meeting(
    meeting_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> Dict[str, Any]:
    return meeting_to_dict(get_meeting_for_owner(db, ctx, meeting_id))


@router.post("/{meeting_id}/confirm")
def confirm_meeting(
    meeting_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> Dict[str, Any]:
    meeting = transition_meeting(db, ctx, meeting_id, MeetingStatus.CONFIRMED)
    return meeting_to_dict(meeting)


@router.post("/{meeting_id}/cancel")
def cancel_meeting(
    meeting_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> Dict[str, Any]:
    meeting = transition_meeting(db, ctx, meeting_id, MeetingStatus.CANCELLED)
    return meeting_to_dict(meeting)


@router.delete("/{meeting_id}", status_code=204, response_class=Response)
def remove_meeting(
    meeting_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    delete_meeting(db, ctx, meeting_id)
    return Response(status_code=204)
