from meetsync.models.base import Base  # noqa: F401

from meetsync.models.user import User  # noqa: F401
from meetsync.models.calendar import Calendar  # noqa: F401
from meetsync.models.availability import Availability  # noqa: F401
from meetsync.models.meeting import Meeting  # noqa: F401
