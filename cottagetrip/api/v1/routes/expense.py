from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from cottagetrip.core.dependencies import get_db, get_current_user_id
from cottagetrip.schemas.expense import ExpenseUpsert, ExpenseOut
from cottagetrip.services.expense_services import upsert_expense_with_splits, get_expense, delete_expense

router = APIRouter()


@router.put("/", response_model=ExpenseOut, description="create or update an expense with its splits")
async def upsert_expense(data: ExpenseUpsert, db: AsyncSession = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return await upsert_expense_with_splits(db, data, user_id)


@router.get("/{expense_id}", response_model=ExpenseOut)
async def fetch(
    expense_id: str,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    return await get_expense(db, expense_id=expense_id, user_id=user_id)


@router.delete("/{expense_id}")
async def del_expense(expense_id: str, db: AsyncSession = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return await delete_expense(db, expense_id=expense_id, user_id=user_id)
