from datetime import datetime

from pydantic import BaseModel, StrictInt


class ReminderCreate(BaseModel):
    to_user_id: str
    amount_cents: StrictInt


class ReminderResult(BaseModel):
    success: bool
    last_sent_at: datetime
    next_allowed_at: datetime


class ReminderOut(BaseModel):
    room_id: str
    from_user_id: str
    to_user_id: str
    reminder_type: str
    last_sent_at: datetime
    next_allowed_at: datetime
    can_send: bool
