from datetime import datetime
from enum import Enum

from sqlalchemy import Column, DateTime, ForeignKey, Index, Integer, String, Text, text
from sqlalchemy.orm import relationship

from meetsync.models.base import Base


class MeetingStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Meeting(Base):
    __tablename__ = "meetings"
    __table_args__ = (
        # At most one confirmed meeting per (calendar, time range)
        Index(
            "uq_meetings_confirmed_slot",
            "calendar_id",
            "start_time",
            "end_time",
            unique=True,
            sqlite_where=text("status = 'confirmed'"),
            postgresql_where=text("status = 'confirmed'"),
        ),
    )

    id = Column(Integer, primary_key=True, index=True)

    calendar_id = Column(
        Integer,
        ForeignKey("calendars.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    booker_name = Column(String(255), nullable=True)
    booker_email = Column(String(255), nullable=False)

    # Naive timestamps in the calendar's implicit local time
    start_time = Column(DateTime, nullable=False, index=True)
    end_time = Column(DateTime, nullable=False)

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)

    # Store status as a simple string; MeetingStatus is still used in Python
    status = Column(
        String(16),
        nullable=False,
        default=MeetingStatus.PENDING.value,
    )

    # Reserved for the video-conferencing integration
    google_meet_link = Column(String(1024), nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    calendar = relationship("Calendar", back_populates="meetings")
