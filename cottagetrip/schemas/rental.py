from datetime import datetime
from typing import List

from pydantic import BaseModel, StrictInt


class RentalAmountUpdate(BaseModel):
    amount_cents: StrictInt
    # defaults to the members already in the split
    member_ids: List[str] | None = None


class RentalPaymentToggle(BaseModel):
    paid: bool


class RentalPaymentOut(BaseModel):
    id: str
    room_id: str
    user_id: str
    amount_cents: int
    paid: bool
    paid_at: datetime | None = None

    class Config:
        from_attributes = True
