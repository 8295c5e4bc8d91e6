import logging
from typing import Hashable, List, Sequence, Tuple

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload
from cottagetrip.core.errors import AuthorizationError, NotFoundError, ValidationError
from cottagetrip.core.utils import compute_equal_splits, validate_splits
from cottagetrip.models.expense import Expense
from cottagetrip.models.expense_split import ExpenseSplit
from cottagetrip.models.rental_payment import RentalPayment
from cottagetrip.models.room import Room
from cottagetrip.schemas.expense import ExpenseUpsert
from cottagetrip.services.room_services import check_room_membership, list_member_ids

logger = logging.getLogger(__name__)


async def load_expense(db: AsyncSession, expense_id: str) -> Expense | None:
    q = (
        select(Expense)
        .options(selectinload(Expense.splits))
        .where(Expense.id == expense_id)
        .execution_options(populate_existing=True)
    )
    res = await db.execute(q)
    return res.scalar_one_or_none()


def check_expense_rules(title: str, amount_cents: int, receipt_path: str | None, pinned_rental: bool):
    if not title or not title.strip():
        raise ValidationError("Title is required")

    if amount_cents < 0:
        raise ValidationError("Amount cannot be negative")

    # the pinned cottage rental starts at zero and has no receipt
    if pinned_rental:
        return

    if amount_cents == 0:
        raise ValidationError("Amount must be greater than zero")

    if not receipt_path or not receipt_path.strip():
        raise ValidationError("Receipt is required except for the cottage rental")


async def write_expense_with_splits(
    db: AsyncSession,
    room: Room,
    user_id: str,
    split_pairs: Sequence[Tuple[Hashable, int]],
    *,
    expense: Expense | None = None,
    expense_id: str | None = None,
    title: str,
    amount_cents: int,
    paid_by_user_id: str,
    receipt_path: str | None,
    is_cottage_rental: bool = False,
    pinned: bool = False,
) -> Expense:
    """Write the expense row and replace its splits without committing.

    The caller owns the transaction, so the row and its splits land together
    or not at all.
    """
    validate_splits(amount_cents, split_pairs)

    if expense is None:
        expense = Expense(
            room_id=room.id,
            title=title,
            amount_cents=amount_cents,
            currency=room.currency,
            paid_by_user_id=paid_by_user_id,
            created_by_user_id=user_id,
            receipt_path=receipt_path,
            is_cottage_rental=is_cottage_rental,
            pinned=pinned
        )
        if expense_id:
            expense.id = expense_id
        db.add(expense)
    else:
        expense.title = title
        expense.amount_cents = amount_cents
        expense.paid_by_user_id = paid_by_user_id
        expense.receipt_path = receipt_path

        # old rows must be gone before the (expense_id, user_id) rows come back
        expense.splits.clear()
        await db.flush()

    for position, (uid, amount) in enumerate(split_pairs):
        expense.splits.append(
            ExpenseSplit(user_id=uid, amount_cents=amount, position=position)
        )

    await db.flush()
    return expense


async def sync_rental_payments(db: AsyncSession, room_id: str, splits: List[ExpenseSplit]):
    """Mirror the pinned rental splits into rental payment rows.

    Amounts always come from the split. Existing rows keep their paid status,
    new members start unpaid and members no longer in the split are dropped.
    """
    res = await db.execute(select(RentalPayment).where(RentalPayment.room_id == room_id))
    existing = {rp.user_id: rp for rp in res.scalars().all()}

    for split in splits:
        payment = existing.pop(split.user_id, None)

        if payment:
            payment.amount_cents = split.amount_cents
        else:
            db.add(RentalPayment(
                room_id=room_id,
                user_id=split.user_id,
                amount_cents=split.amount_cents,
                paid=False
            ))

    for stale in existing.values():
        await db.delete(stale)

    await db.flush()


async def resolve_split_pairs(db: AsyncSession, room_id: str, data: ExpenseUpsert) -> List[Tuple[str, int]]:
    if data.splits is not None:
        pairs = [(s.user_id, s.amount_cents) for s in data.splits]
        validate_splits(data.amount_cents, pairs)
    else:
        pairs = compute_equal_splits(data.amount_cents, data.member_ids)

    members = set(await list_member_ids(db, room_id))

    if data.paid_by_user_id not in members:
        raise ValidationError("Payer is not a member of the room")

    if any(uid not in members for uid, _ in pairs):
        raise ValidationError("Some users in split are not room members")

    return pairs


async def upsert_expense_with_splits(db: AsyncSession, data: ExpenseUpsert, user_id: str) -> Expense:
    room = await check_room_membership(db, data.room_id, user_id)

    expense = await load_expense(db, data.expense_id) if data.expense_id else None

    if expense:
        if expense.room_id != room.id:
            raise ValidationError("Expense belongs to another room")

        if expense.is_pinned_rental:
            if room.owner_id != user_id:
                raise AuthorizationError("Only the room admin can edit the cottage rental")
        elif expense.created_by_user_id != user_id and room.owner_id != user_id:
            raise AuthorizationError("You can't edit this expense")

        # rental flags are fixed at creation
        is_cottage_rental, pinned = expense.is_cottage_rental, expense.pinned
    else:
        is_cottage_rental, pinned = data.is_cottage_rental, data.pinned

        if is_cottage_rental and pinned and room.owner_id != user_id:
            raise AuthorizationError("Only the room admin can create the cottage rental")

    check_expense_rules(data.title, data.amount_cents, data.receipt_path, is_cottage_rental and pinned)
    room_id = room.id
    pairs = await resolve_split_pairs(db, room_id, data)

    try:
        expense = await write_expense_with_splits(
            db, room, user_id, pairs,
            expense=expense,
            expense_id=data.expense_id,
            title=data.title.strip(),
            amount_cents=data.amount_cents,
            paid_by_user_id=data.paid_by_user_id,
            receipt_path=data.receipt_path,
            is_cottage_rental=is_cottage_rental,
            pinned=pinned
        )

        if expense.is_pinned_rental:
            await sync_rental_payments(db, room_id, expense.splits)

        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        logger.warning("expense upsert rejected room=%s expense=%s: %s", room_id, data.expense_id, e.orig)
        raise ValidationError("Expense conflicts with an existing expense")

    logger.info("expense upserted id=%s room=%s amount=%s splits=%d", expense.id, room_id, expense.amount_cents, len(pairs))
    return await load_expense(db, expense.id)


async def get_expense(db: AsyncSession, expense_id: str, user_id: str) -> Expense:
    expense = await load_expense(db, expense_id)

    if not expense:
        raise NotFoundError("Expense not found")

    await check_room_membership(db, expense.room_id, user_id)
    return expense


async def list_room_expenses(db: AsyncSession, room_id: str, user_id: str) -> List[Expense]:
    await check_room_membership(db, room_id, user_id)

    q = (
        select(Expense)
        .options(selectinload(Expense.splits))
        .where(Expense.room_id == room_id)
        .order_by(Expense.pinned.desc(), Expense.created_at.desc(), Expense.id.desc())
    )

    res = await db.execute(q)
    return list(res.scalars().all())


async def delete_expense(db: AsyncSession, expense_id: str, user_id: str):
    expense = await load_expense(db, expense_id)

    if not expense:
        raise NotFoundError("Expense not found")

    room = await check_room_membership(db, expense.room_id, user_id)

    if expense.is_pinned_rental:
        if room.owner_id != user_id:
            raise AuthorizationError("Only the room admin can delete the cottage rental")
    elif expense.created_by_user_id != user_id and room.owner_id != user_id:
        raise AuthorizationError("You cannot delete this expense")

    if expense.is_pinned_rental:
        await db.execute(delete(RentalPayment).where(RentalPayment.room_id == room.id))

    # splits go with it through the delete-orphan cascade
    await db.delete(expense)
    await db.commit()

    logger.info("expense deleted id=%s room=%s by=%s", expense_id, room.id, user_id)
    return {"status": "deleted"}
