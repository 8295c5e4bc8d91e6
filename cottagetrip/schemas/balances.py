from typing import Dict, List

from pydantic import BaseModel


class SettlementOut(BaseModel):
    from_user_id: str
    to_user_id: str
    amount_cents: int

    class Config:
        from_attributes = True


class RoomBalanceOut(BaseModel):
    net: Dict[str, int]
    settlements: List[SettlementOut]
    my_net_cents: int
    my_settlements: List[SettlementOut]
