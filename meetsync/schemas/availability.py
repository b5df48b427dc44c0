from datetime import date as date_type
from typing import Literal, Optional, Union

from pydantic import BaseModel, Field


class RecurringAvailabilityIn(BaseModel):
    kind: Literal["recurring"]
    day_of_week: int = Field(ge=0, le=6, description="0 = Sunday ... 6 = Saturday")
    start_time: str = Field(examples=["09:00"])
    end_time: str = Field(examples=["17:00"])


class DateAvailabilityIn(BaseModel):
    kind: Literal["date"]
    date: date_type
    start_time: str = Field(examples=["10:00"])
    end_time: str = Field(examples=["11:00"])


# Tagged by `kind`; routers pass `discriminator="kind"` to Body()
AvailabilityIn = Union[RecurringAvailabilityIn, DateAvailabilityIn]


class AvailabilityUpdate(BaseModel):
    day_of_week: Optional[int] = Field(default=None, ge=0, le=6)
    date: Optional[date_type] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
