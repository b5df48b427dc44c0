from datetime import date as date_type
from typing import Optional

from pydantic import BaseModel


class SlotIn(BaseModel):
    start_time: str
    end_time: str


class BookingRequest(BaseModel):
    """
    Visitor booking form.

    Field contents are checked by the booking service so that calendar
    visibility and slot availability are reported before form problems.
    """

    date: date_type
    slot: SlotIn
    booker_name: Optional[str] = None
    booker_email: str
    title: str
    description: Optional[str] = None
