from datetime import datetime
from typing import List

from pydantic import BaseModel, StrictInt


class SplitInput(BaseModel):
    user_id: str
    amount_cents: StrictInt


class SplitOut(BaseModel):
    user_id: str
    amount_cents: int

    class Config:
        from_attributes = True


class ExpenseUpsert(BaseModel):
    # pre-generated by the client when a receipt is uploaded before saving
    expense_id: str | None = None
    room_id: str
    title: str
    amount_cents: StrictInt
    paid_by_user_id: str
    member_ids: List[str] = []
    # explicit shares instead of an equal split over member_ids
    splits: List[SplitInput] | None = None
    receipt_path: str | None = None
    is_cottage_rental: bool = False
    pinned: bool = False


class ExpenseOut(BaseModel):
    id: str
    room_id: str
    title: str
    amount_cents: int
    currency: str
    paid_by_user_id: str
    created_by_user_id: str
    receipt_path: str | None = None
    is_cottage_rental: bool
    pinned: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None
    splits: List[SplitOut]

    class Config:
        from_attributes = True
