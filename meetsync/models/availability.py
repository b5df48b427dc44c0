from sqlalchemy import Boolean, Column, Date, ForeignKey, Integer, String
from sqlalchemy.orm import relationship

from meetsync.models.base import Base


class Availability(Base):
    """
    Persisted availability rule.

    `recurring` discriminates the two shapes:
      - recurring=True  -> `day_of_week` is set (0 = Sunday ... 6 = Saturday)
      - recurring=False -> `date` is set

    `start_time` / `end_time` are "HH:MM" local clock strings.
    The in-memory tagged form lives in meetsync.services.rule_store.
    """

    __tablename__ = "availabilities"

    id = Column(Integer, primary_key=True, index=True)

    calendar_id = Column(
        Integer,
        ForeignKey("calendars.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    recurring = Column(Boolean, nullable=False, default=True)
    day_of_week = Column(Integer, nullable=True)
    date = Column(Date, nullable=True)

    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)

    calendar = relationship("Calendar", back_populates="availabilities")
