from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.orm import relationship

from meetsync.models.base import Base


class Calendar(Base):
    """
    A user's public booking page.

    Availability rules and meetings hang off the calendar and are removed
    together with it.
    """

    __tablename__ = "calendars"

    id = Column(Integer, primary_key=True, index=True)

    user_id = Column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    is_public = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
        nullable=False,
    )

    owner = relationship("User", backref="calendars")
    availabilities = relationship(
        "Availability",
        back_populates="calendar",
        cascade="all, delete-orphan",
        order_by="Availability.id",
    )
    meetings = relationship(
        "Meeting",
        back_populates="calendar",
        cascade="all, delete-orphan",
    )
