import logging
from datetime import datetime, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from cottagetrip.core.errors import NotFoundError, ValidationError
from cottagetrip.core.utils import compute_equal_splits
from cottagetrip.models.expense import Expense
from cottagetrip.models.rental_payment import RentalPayment
from cottagetrip.services.expense_services import (
    load_expense, sync_rental_payments, write_expense_with_splits
)
from cottagetrip.services.room_services import check_room_admin, check_room_membership, list_member_ids

logger = logging.getLogger(__name__)

RENTAL_TITLE = "Cottage Rental"


async def find_pinned_rental(db: AsyncSession, room_id: str) -> Expense | None:
    q = (
        select(Expense)
        .options(selectinload(Expense.splits))
        .where(
            Expense.room_id == room_id,
            Expense.is_cottage_rental.is_(True),
            Expense.pinned.is_(True)
        )
        .execution_options(populate_existing=True)
    )
    res = await db.execute(q)
    return res.scalar_one_or_none()


async def get_pinned_rental(db: AsyncSession, room_id: str) -> Expense:
    expense = await find_pinned_rental(db, room_id)

    if not expense:
        raise NotFoundError("No pinned cottage rental expense found")

    return expense


async def ensure_pinned_rental(db: AsyncSession, room_id: str, user_id: str) -> Expense:
    """Return the room's pinned rental, creating the zero-priced one if missing.

    Two members opening the costs tab at once both try to insert; the unique
    index on pinned rentals lets exactly one win and the other re-reads it.
    """
    room = await check_room_membership(db, room_id, user_id)

    existing = await find_pinned_rental(db, room_id)
    if existing:
        return existing

    member_ids = await list_member_ids(db, room_id)

    try:
        expense = await write_expense_with_splits(
            db, room, user_id, compute_equal_splits(0, member_ids),
            title=RENTAL_TITLE,
            amount_cents=0,
            paid_by_user_id=room.owner_id,
            receipt_path=None,
            is_cottage_rental=True,
            pinned=True
        )
        await sync_rental_payments(db, room.id, expense.splits)
        await db.commit()
    except IntegrityError:
        await db.rollback()
        logger.info("pinned rental for room=%s created concurrently, reusing it", room_id)
        return await get_pinned_rental(db, room_id)

    logger.info("pinned rental created id=%s room=%s members=%d", expense.id, room_id, len(member_ids))
    return await load_expense(db, expense.id)


async def update_rental_amount(
    db: AsyncSession,
    room_id: str,
    user_id: str,
    amount_cents: int,
    member_ids: List[str] | None = None,
) -> Expense:
    room = await check_room_admin(db, room_id, user_id)
    expense = await get_pinned_rental(db, room_id)

    # the split member set is editable and may differ from the room membership
    if member_ids is None:
        member_ids = [s.user_id for s in expense.splits]
    else:
        members = set(await list_member_ids(db, room_id))
        if any(uid not in members for uid in member_ids):
            raise ValidationError("Some users in split are not room members")

    pairs = compute_equal_splits(amount_cents, member_ids)

    await write_expense_with_splits(
        db, room, user_id, pairs,
        expense=expense,
        title=expense.title,
        amount_cents=amount_cents,
        paid_by_user_id=expense.paid_by_user_id,
        receipt_path=expense.receipt_path
    )
    await sync_rental_payments(db, room.id, expense.splits)
    await db.commit()

    logger.info("rental amount set room=%s amount=%s members=%d", room_id, amount_cents, len(pairs))
    return await load_expense(db, expense.id)


async def rebalance_rental(db: AsyncSession, room_id: str, user_id: str, expense_id: str | None = None) -> Expense:
    """Split the rental equally across the current full room membership."""
    room = await check_room_admin(db, room_id, user_id)

    if expense_id:
        expense = await load_expense(db, expense_id)
        if not expense or expense.room_id != room_id:
            raise NotFoundError("Expense not found")
        if not expense.is_cottage_rental:
            raise ValidationError("Can only rebalance cottage rental expenses")
    else:
        expense = await get_pinned_rental(db, room_id)

    member_ids = await list_member_ids(db, room_id)
    pairs = compute_equal_splits(expense.amount_cents, member_ids)

    await write_expense_with_splits(
        db, room, user_id, pairs,
        expense=expense,
        title=expense.title,
        amount_cents=expense.amount_cents,
        paid_by_user_id=expense.paid_by_user_id,
        receipt_path=expense.receipt_path
    )

    if expense.is_pinned_rental:
        await sync_rental_payments(db, room.id, expense.splits)

    await db.commit()

    logger.info("rental rebalanced id=%s room=%s members=%d", expense.id, room_id, len(member_ids))
    return await load_expense(db, expense.id)


async def list_rental_payments(db: AsyncSession, room_id: str, user_id: str) -> List[RentalPayment]:
    await check_room_membership(db, room_id, user_id)

    q = (
        select(RentalPayment)
        .where(RentalPayment.room_id == room_id)
        .order_by(RentalPayment.created_at, RentalPayment.user_id)
    )
    res = await db.execute(q)
    return list(res.scalars().all())


async def toggle_rental_payment(
    db: AsyncSession,
    room_id: str,
    member_id: str,
    paid: bool,
    user_id: str,
) -> RentalPayment:
    await check_room_admin(db, room_id, user_id)
    expense = await get_pinned_rental(db, room_id)

    split = next((s for s in expense.splits if s.user_id == member_id), None)
    if split is None:
        raise NotFoundError("No expense split found for this user")

    res = await db.execute(
        select(RentalPayment).where(
            RentalPayment.room_id == room_id,
            RentalPayment.user_id == member_id
        )
    )
    payment = res.scalar_one_or_none()

    if not payment:
        raise NotFoundError("Rental payment not found")

    # the split stays the source of truth for the share
    payment.amount_cents = split.amount_cents
    payment.paid = paid
    payment.paid_at = datetime.now(timezone.utc) if paid else None

    await db.commit()
    await db.refresh(payment)

    logger.info("rental payment room=%s user=%s paid=%s", room_id, member_id, paid)
    return payment
