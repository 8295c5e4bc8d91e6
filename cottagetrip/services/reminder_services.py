import logging
from datetime import datetime, timedelta, timezone
from typing import List

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from cottagetrip.core.config import settings
from cottagetrip.core.cooldown import as_utc, can_send, next_allowed_at
from cottagetrip.core.errors import CooldownActiveError, ValidationError
from cottagetrip.models.payment_reminder import PaymentReminder
from cottagetrip.services.notifications import ReminderDispatcher, ReminderMessage
from cottagetrip.services.room_services import check_room_membership, get_member

logger = logging.getLogger(__name__)

SETTLEMENT_REMINDER = "settlement"


async def _find_reminder(db: AsyncSession, room_id: str, from_user_id: str, to_user_id: str, reminder_type: str, lock: bool = False):
    q = select(PaymentReminder).where(
        PaymentReminder.room_id == room_id,
        PaymentReminder.from_user_id == from_user_id,
        PaymentReminder.to_user_id == to_user_id,
        PaymentReminder.reminder_type == reminder_type
    )
    if lock:
        q = q.with_for_update()

    res = await db.execute(q)
    return res.scalar_one_or_none()


async def check_and_record_reminder(
    db: AsyncSession,
    room_id: str,
    from_user_id: str,
    to_user_id: str,
    reminder_type: str = SETTLEMENT_REMINDER,
    cooldown_days: int = settings.REMINDER_COOLDOWN_DAYS,
    now: datetime | None = None,
):
    """Apply the cooldown gate and stamp ``last_sent_at`` in one transaction.

    The reminder row is locked while it is checked, and a racing first insert
    loses on the unique key and is re-checked against the winner, so two
    concurrent senders cannot both pass.
    """
    cooldown = timedelta(days=cooldown_days)
    now = as_utc(now or datetime.now(timezone.utc))

    reminder = await _find_reminder(db, room_id, from_user_id, to_user_id, reminder_type, lock=True)

    if reminder is not None:
        if not can_send(reminder.last_sent_at, now, cooldown):
            blocked = CooldownActiveError(
                as_utc(reminder.last_sent_at),
                next_allowed_at(reminder.last_sent_at, cooldown)
            )
            # releases the row lock
            await db.rollback()
            logger.info("reminder blocked room=%s from=%s to=%s", room_id, from_user_id, to_user_id)
            raise blocked

        reminder.last_sent_at = now
        await db.commit()
    else:
        try:
            db.add(PaymentReminder(
                room_id=room_id,
                from_user_id=from_user_id,
                to_user_id=to_user_id,
                reminder_type=reminder_type,
                last_sent_at=now
            ))
            await db.commit()
        except IntegrityError:
            await db.rollback()
            winner = await _find_reminder(db, room_id, from_user_id, to_user_id, reminder_type)
            raise CooldownActiveError(
                as_utc(winner.last_sent_at),
                next_allowed_at(winner.last_sent_at, cooldown)
            )

    logger.info("reminder recorded room=%s from=%s to=%s", room_id, from_user_id, to_user_id)
    return {
        "success": True,
        "last_sent_at": now,
        "next_allowed_at": next_allowed_at(now, cooldown)
    }


async def send_payment_reminder(
    db: AsyncSession,
    dispatcher: ReminderDispatcher,
    room_id: str,
    from_user_id: str,
    to_user_id: str,
    amount_cents: int,
):
    if amount_cents <= 0:
        raise ValidationError("amount_cents must be greater than 0")

    if to_user_id == from_user_id:
        raise ValidationError("You cannot send a reminder to yourself")

    room = await check_room_membership(db, room_id, from_user_id)

    recipient = await get_member(db, room_id, to_user_id)
    if recipient is None:
        raise ValidationError("Recipient is not a member of this room")

    to_email, to_name = recipient.email, recipient.display_name

    result = await check_and_record_reminder(db, room.id, from_user_id, to_user_id)

    # the reminder stays recorded even if delivery fails
    await dispatcher.send(ReminderMessage(
        room_id=room.id,
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        amount_cents=amount_cents,
        link=f"{settings.APP_BASE_URL}/room/{room.id}?tab=costs",
        to_email=to_email,
        to_name=to_name
    ))

    return result


async def list_sent_reminders(db: AsyncSession, room_id: str, user_id: str, now: datetime | None = None) -> List[dict]:
    await check_room_membership(db, room_id, user_id)

    now = now or datetime.now(timezone.utc)
    cooldown = timedelta(days=settings.REMINDER_COOLDOWN_DAYS)

    q = (
        select(PaymentReminder)
        .where(
            PaymentReminder.room_id == room_id,
            PaymentReminder.from_user_id == user_id
        )
        .order_by(PaymentReminder.last_sent_at.desc())
    )
    res = await db.execute(q)

    return [
        {
            "room_id": r.room_id,
            "from_user_id": r.from_user_id,
            "to_user_id": r.to_user_id,
            "reminder_type": r.reminder_type,
            "last_sent_at": as_utc(r.last_sent_at),
            "next_allowed_at": next_allowed_at(r.last_sent_at, cooldown),
            "can_send": can_send(r.last_sent_at, now, cooldown)
        }
        for r in res.scalars().all()
    ]
