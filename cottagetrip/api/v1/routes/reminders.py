from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession
from cottagetrip.core.dependencies import get_db, get_current_user_id, get_dispatcher
from cottagetrip.schemas.reminder import ReminderCreate, ReminderOut, ReminderResult
from cottagetrip.services.notifications import ReminderDispatcher
from cottagetrip.services.reminder_services import send_payment_reminder, list_sent_reminders

router = APIRouter()


@router.post("/{room_id}/reminders", response_model=ReminderResult, description="remind a member to settle up")
async def remind(
    room_id: str,
    data: ReminderCreate,
    db: AsyncSession = Depends(get_db),
    dispatcher: ReminderDispatcher = Depends(get_dispatcher),
    user_id: str = Depends(get_current_user_id)
):
    return await send_payment_reminder(db, dispatcher, room_id, user_id, data.to_user_id, data.amount_cents)


@router.get("/{room_id}/reminders", response_model=list[ReminderOut])
async def sent_reminders(room_id: str, db: AsyncSession = Depends(get_db), user_id: str = Depends(get_current_user_id)):
    return await list_sent_reminders(db, room_id, user_id)
