from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from cottagetrip.core.dependencies import get_db, get_current_user_id
from cottagetrip.schemas.expense import ExpenseOut
from cottagetrip.schemas.rental import RentalAmountUpdate, RentalPaymentOut, RentalPaymentToggle
from cottagetrip.services.rental_services import (
    ensure_pinned_rental, update_rental_amount, rebalance_rental, list_rental_payments, toggle_rental_payment
)

router = APIRouter()


@router.post("/{room_id}/rental", response_model=ExpenseOut, description="get or create the pinned cottage rental")
async def ensure_rental(room_id: str, db: AsyncSession = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return await ensure_pinned_rental(db, room_id, user_id)


@router.patch("/{room_id}/rental", response_model=ExpenseOut)
async def set_rental_amount(
    room_id: str,
    data: RentalAmountUpdate,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    return await update_rental_amount(db, room_id, user_id, data.amount_cents, data.member_ids)


@router.post("/{room_id}/rental/rebalance", response_model=ExpenseOut, description="split the rental across all current members")
async def rebalance(room_id: str, db: AsyncSession = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return await rebalance_rental(db, room_id, user_id)


@router.get("/{room_id}/rental/payments", response_model=list[RentalPaymentOut])
async def rental_payments(room_id: str, db: AsyncSession = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return await list_rental_payments(db, room_id, user_id)


@router.patch("/{room_id}/rental/payments/{member_id}", response_model=RentalPaymentOut)
async def mark_rental_payment(
    room_id: str,
    member_id: str,
    data: RentalPaymentToggle,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id)
):
    return await toggle_rental_payment(db, room_id, member_id, data.paid, user_id)
