from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from cottagetrip.core.dependencies import get_db, get_current_user_id
from cottagetrip.schemas.balances import RoomBalanceOut
from cottagetrip.schemas.expense import ExpenseOut
from cottagetrip.services.balance_services import get_room_balances
from cottagetrip.services.expense_services import list_room_expenses

router = APIRouter()


@router.get("/{room_id}/expenses", response_model=list[ExpenseOut], description="get all expenses of the room")
async def fetch_expenses(
    room_id: str,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    return await list_room_expenses(db, room_id, user_id)


@router.get("/{room_id}/balances", response_model=RoomBalanceOut, description="who owes whom")
async def room_balances(room_id: str, db: AsyncSession = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return await get_room_balances(db, room_id, user_id)
