from datetime import datetime

from fastapi import HTTPException


class ValidationError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=400, detail=detail)


class AuthorizationError(HTTPException):
    def __init__(self, detail: str = "Unauthorized access"):
        super().__init__(status_code=403, detail=detail)


class NotFoundError(HTTPException):
    def __init__(self, detail: str):
        super().__init__(status_code=404, detail=detail)


class CooldownActiveError(HTTPException):
    """A reminder for this pair was sent too recently.

    Not a failure of the request itself: the timestamps are carried so the
    caller can show when the next reminder is allowed.
    """

    def __init__(self, last_sent_at: datetime, next_allowed_at: datetime):
        self.last_sent_at = last_sent_at
        self.next_allowed_at = next_allowed_at
        super().__init__(
            status_code=429,
            detail={
                "error": "cooldown_active",
                "message": "Reminder already sent recently",
                "last_sent_at": last_sent_at.isoformat(),
                "next_allowed_at": next_allowed_at.isoformat(),
            },
        )


class DispatchError(HTTPException):
    def __init__(self, detail: str = "Failed to send reminder"):
        super().__init__(status_code=502, detail=detail)
