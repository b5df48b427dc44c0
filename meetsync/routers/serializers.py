from typing import Any, Dict

from meetsync.models.availability import Availability
from meetsync.models.calendar import Calendar
from meetsync.models.meeting import Meeting
from meetsync.models.user import User


def user_to_dict(user: User) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "full_name": user.full_name,
        "avatar_url": user.avatar_url,
        "time_zone": user.time_zone,
        "created_at": user.created_at.isoformat(),
    }


def calendar_to_dict(calendar: Calendar) -> Dict[str, Any]:
    return {
        "id": calendar.id,
        "user_id": calendar.user_id,
        "title": calendar.title,
        "description": calendar.description,
        "is_public": calendar.is_public,
        "created_at": calendar.created_at.isoformat(),
        "updated_at": calendar.updated_at.isoformat(),
    }


def availability_to_dict(row: Availability) -> Dict[str, Any]:
    return {
        "id": row.id,
        "calendar_id": row.calendar_id,
        "recurring": row.recurring,
        "day_of_week": row.day_of_week,
        "date": row.date.isoformat() if row.date else None,
        "start_time": row.start_time,
        "end_time": row.end_time,
    }


def meeting_to_dict(meeting: Meeting) -> Dict[str, Any]:
    return {
        "id": meeting.id,
        "calendar_id": meeting.calendar_id,
        "booker_name": meeting.booker_name,
        "booker_email": meeting.booker_email,
        "start_time": meeting.start_time.isoformat(),
        "end_time": meeting.end_time.isoformat(),
        "title": meeting.title,
        "description": meeting.description,
        "status": meeting.status,
        "google_meet_link": meeting.google_meet_link,
        "created_at": meeting.created_at.isoformat(),
        "updated_at": meeting.updated_at.isoformat(),
    }
