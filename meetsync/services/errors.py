"""Error kinds raised by MeetSync services.

Each error carries the HTTP status the API layer answers with; message
wording for end users is left to the client.
"""

from typing import Any, Dict, Optional


class MeetSyncError(Exception):
    """Base exception for MeetSync service errors."""

    status_code = 500
    kind = "error"

    def __init__(self, message: str = ""):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"error": self.kind, "detail": self.message}


class NotFound(MeetSyncError):
    """Raised when a calendar, rule, meeting or user does not exist."""

    status_code = 404
    kind = "not_found"


class Forbidden(MeetSyncError):
    """Raised for private calendars and ownership mismatches."""

    status_code = 403
    kind = "forbidden"


class ValidationError(MeetSyncError):
    """Raised when an input field is missing or malformed."""

    status_code = 400
    kind = "validation_error"

    def __init__(self, field: str, message: str):
        super().__init__(message)
        self.field = field

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["field"] = self.field
        return data


class SlotNoLongerAvailable(MeetSyncError):
    """Raised when a requested slot is not offered (or already taken)."""

    status_code = 409
    kind = "slot_no_longer_available"


class MalformedRule(MeetSyncError):
    """Raised when a stored availability rule cannot be interpreted."""

    status_code = 422
    kind = "malformed_rule"

    def __init__(self, rule_id: Optional[int], message: str):
        super().__init__(f"Availability rule {rule_id}: {message}")
        self.rule_id = rule_id

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data["rule_id"] = self.rule_id
        return data


class TransportError(MeetSyncError):
    """Raised when the database cannot be reached or a statement fails."""

    status_code = 503
    kind = "transport_error"
