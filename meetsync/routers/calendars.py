from typing import Annotated, Any, Dict, List, Optional

from fastapi import APIRouter, Body, Depends, Response
from pydantic import BaseModel
from sqlalchemy.orm import Session

from meetsync.db.session import get_db
from meetsync.routers.serializers import availability_to_dict, calendar_to_dict, meeting_to_dict
from meetsync.schemas.availability import AvailabilityIn, AvailabilityUpdate, RecurringAvailabilityIn
from meetsync.services import availability_service, calendar_service
from meetsync.services.booking_service import list_meetings_for_calendar
from meetsync.services.identity import RequestContext, get_request_context

router = APIRouter(prefix="/calendars", tags=["calendars"])


class CalendarCreate(BaseModel):
    title: str
    description: Optional[str] = None
    is_public: bool = True


class CalendarUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    is_public: Optional[bool] = None


@router.post("", status_code=201)
def create_calendar(
    payload: CalendarCreate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> Dict[str, Any]:
    calendar = calendar_service.create_calendar(
        db,
        ctx,
        title=payload.title,
        description=payload.description,
        is_public=payload.is_public,
    )
    return calendar_to_dict(calendar)


@router.get("")
def list_calendars(
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> List[Dict[str, Any]]:
    return [calendar_to_dict(c) for c in calendar_service.list_calendars(db, ctx)]


@router.get("/{calendar_id}")
def get_calendar(
    calendar_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> Dict[str, Any]:
    return calendar_to_dict(calendar_service.get_owned_calendar(db, ctx, calendar_id))


@router.patch("/{calendar_id}")
def update_calendar(
    calendar_id: int,
    payload: CalendarUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> Dict[str, Any]:
    """
    Only fields present in the body change; `"description": null` or `""`
    clears the description.
    """
    changes = payload.model_dump(exclude_unset=True)
    calendar = calendar_service.update_calendar(db, ctx, calendar_id, **changes)
    return calendar_to_dict(calendar)


@router.delete("/{calendar_id}", status_code=204, response_class=Response)
def delete_calendar(
    calendar_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    calendar_service.delete_calendar(db, ctx, calendar_id)
    return Response(status_code=204)


@router.get("/{calendar_id}/availabilities")
def list_availabilities(
    calendar_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> List[Dict[str, Any]]:
    rows = availability_service.list_availabilities(db, ctx, calendar_id)
    return [availability_to_dict(r) for r in rows]


@router.post("/{calendar_id}/availabilities", status_code=201)
def create_availability(
    calendar_id: int,
    payload: Annotated[AvailabilityIn, Body(discriminator="kind")],
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> Dict[str, Any]:
    """
    Add a weekly (`kind: "recurring"`, `day_of_week`) or one-off
    (`kind: "date"`, `date`) availability window.
    """
    if isinstance(payload, RecurringAvailabilityIn):
        row = availability_service.create_availability(
            db,
            ctx,
            calendar_id,
            day_of_week=payload.day_of_week,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
    else:
        row = availability_service.create_availability(
            db,
            ctx,
            calendar_id,
            on_date=payload.date,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
    return availability_to_dict(row)


@router.patch("/{calendar_id}/availabilities/{availability_id}")
def update_availability(
    calendar_id: int,
    availability_id: int,
    payload: AvailabilityUpdate,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> Dict[str, Any]:
    row = availability_service.update_availability(
        db,
        ctx,
        calendar_id,
        availability_id,
        day_of_week=payload.day_of_week,
        on_date=payload.date,
        start_time=payload.start_time,
        end_time=payload.end_time,
    )
    return availability_to_dict(row)


@router.delete(
    "/{calendar_id}/availabilities/{availability_id}",
    status_code=204,
    response_class=Response,
)
def delete_availability(
    calendar_id: int,
    availability_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
):
    availability_service.delete_availability(db, ctx, calendar_id, availability_id)
    return Response(status_code=204)


@router.get("/{calendar_id}/meetings")
def list_calendar_meetings(
    calendar_id: int,
    db: Session = Depends(get_db),
    ctx: RequestContext = Depends(get_request_context),
) -> List[Dict[str, Any]]:
    return [meeting_to_dict(m) for m in list_meetings_for_calendar(db, ctx, calendar_id)]
